"""Business logic for file operations."""

import io
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, BinaryIO

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from cloudvault.apps.analytics.logic.event_operations import record_event
from cloudvault.apps.analytics.models import EventType
from cloudvault.apps.files.exceptions import (
    DependencyUnavailableError,
    InvalidArgumentError,
    NotFoundError,
)
from cloudvault.apps.files.infrastructure.metadata import (
    build_storage_key,
    build_thumbnail_key,
    calculate_checksum,
    classify_mime_type,
    extract_image_details,
    sniff_mime_type,
    validate_storage_key,
)
from cloudvault.apps.files.infrastructure.storage import get_blob_storage
from cloudvault.apps.files.logic import quota_operations
from cloudvault.apps.files.logic.lookups import (
    clean_name,
    get_for_update,
    get_owned_file,
    get_owned_folder,
    normalize_tags,
    validate_classification,
)
from cloudvault.apps.files.models import Confidentiality, File, Folder, Importance

# User type for Django's dynamic user model
_User = Any

ProgressCallback = Callable[[int, int], None]

_FALLBACK_MIME_TYPE = 'application/octet-stream'

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UploadResult:
    """Stored file plus the advisory quota note, if any."""

    file: File
    quota_note: str | None = None


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """File record and its contents."""

    file: File
    content: bytes


class ProgressStream(io.BytesIO):
    """In-memory upload body that reports how far the reader got.

    The callback receives (bytes transferred, total bytes) after every
    read. It observes only: errors raised by it are logged and the
    transfer carries on.
    """

    def __init__(
        self,
        payload: bytes,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize the stream.

        Args:
            payload: Upload contents.
            callback: Progress observer.
        """
        super().__init__(payload)
        self._total = len(payload)
        self._callback = callback

    def read(self, size: int | None = -1) -> bytes:
        """Read and notify the observer of the new position."""
        chunk = super().read(size)
        if chunk and self._callback is not None:
            self._notify(self.tell())
        return chunk

    def _notify(self, transferred: int) -> None:
        try:
            self._callback(min(transferred, self._total), self._total)
        except Exception:
            logger.exception('Upload progress callback failed')


def _read_payload(file_obj: bytes | BinaryIO) -> bytes:
    if isinstance(file_obj, (bytes, bytearray)):
        return bytes(file_obj)
    if hasattr(file_obj, 'seek'):
        file_obj.seek(0)
    return file_obj.read()


def _check_folder_accepts(folder: Folder, mime_type: str) -> None:
    if folder.accepts_all_file_types():
        return
    file_class = classify_mime_type(mime_type)
    if file_class not in folder.allowed_file_types:
        raise InvalidArgumentError(
            f'Folder "{folder.name}" does not accept {file_class} '
            f'({mime_type})',
        )


def _store_thumbnail(file_id: str, payload: bytes) -> tuple[int | None, int | None, str]:
    """Extract dimensions and store a thumbnail, both best-effort.

    Returns:
        (width, height, thumbnail_key); empty values when unavailable.
    """
    details = extract_image_details(
        payload,
        settings.CLOUDVAULT_THUMBNAIL_SIZE,
        settings.CLOUDVAULT_THUMBNAIL_QUALITY,
    )
    if details is None:
        return None, None, ''

    try:
        thumbnail_key = get_blob_storage().put_bytes(
            build_thumbnail_key(file_id),
            details.thumbnail,
        )
    except Exception:
        logger.exception('Failed to store thumbnail for file %s', file_id)
        thumbnail_key = ''
    return details.width, details.height, thumbnail_key


def upload_file(  # noqa: WPS211, WPS213
    user: _User,
    file_obj: bytes | BinaryIO,
    file_name: str,
    declared_mime_type: str | None = None,
    folder_id: object | None = None,
    tags: list[str] | None = None,
    confidentiality: str = Confidentiality.INTERNAL,
    importance: str = Importance.MEDIUM,
    allow_sharing: bool = True,
    progress_callback: ProgressCallback | None = None,
) -> UploadResult:
    """Upload file to storage and create database record.

    Transaction safety: Upload to storage first, then create DB record.
    If the DB write fails, the uploaded object is deleted from storage
    (rollback). A failed or interrupted transfer leaves no record.

    Args:
        user: Owner of the file.
        file_obj: File contents or file-like object.
        file_name: Original filename.
        declared_mime_type: Type claimed by the client; used only when
            neither contents nor extension identify the file.
        folder_id: Target folder, or None for the root.
        tags: Free-form tags.
        confidentiality: Confidentiality level.
        importance: Importance level.
        allow_sharing: Whether share links may be created.
        progress_callback: Receives (bytes transferred, total).

    Returns:
        UploadResult with the created File and the quota note.

    Raises:
        InvalidArgumentError: If name, classification or file type is invalid.
        NotFoundError: If the folder does not exist for this user.
        QuotaExceededError: If quota enforcement is on and space is short.
        DependencyUnavailableError: If the blob store write fails.
    """
    # Validation happens before anything is written
    file_name = clean_name(file_name, 'File')
    validate_classification(confidentiality, importance)
    folder = get_owned_folder(user, folder_id) if folder_id else None

    payload = _read_payload(file_obj)
    size_bytes = len(payload)

    logger.info('Calculating metadata for file: %s', file_name)
    checksum = calculate_checksum(payload)
    mime_type = sniff_mime_type(payload, file_name)
    if mime_type == _FALLBACK_MIME_TYPE and declared_mime_type:
        mime_type = declared_mime_type
    if folder is not None:
        _check_folder_accepts(folder, mime_type)

    quota_note = quota_operations.check_quota(user, size_bytes)

    file_id = uuid.uuid4()
    storage_key = build_storage_key(user.id, file_name, str(file_id))
    validate_storage_key(user.id, storage_key)
    storage = get_blob_storage()

    # Step 1: Upload to storage first
    try:
        saved_key = storage.save(
            storage_key,
            ProgressStream(payload, progress_callback),
        )
    except Exception as error:
        raise DependencyUnavailableError(
            f'Failed to store file contents: {error}',
        ) from error

    # Step 2: Optional image enrichment
    width, height, thumbnail_key = None, None, ''
    if mime_type.startswith('image/'):
        width, height, thumbnail_key = _store_thumbnail(str(file_id), payload)

    # Step 3: Create database record (in transaction)
    try:
        with transaction.atomic():
            file_instance = File.objects.create(
                id=file_id,
                user=user,
                folder=folder,
                name=file_name,
                storage_key=saved_key,
                size_bytes=size_bytes,
                mime_type=mime_type,
                checksum_sha256=checksum,
                tags=normalize_tags(tags),
                confidentiality=confidentiality,
                importance=importance,
                allow_sharing=allow_sharing,
                width=width,
                height=height,
                thumbnail_key=thumbnail_key,
            )
            quota_operations.increment_usage(user, size_bytes)
    except Exception:
        # Rollback: Delete objects from storage since DB transaction failed
        logger.exception(
            'Database transaction failed, rolling back storage upload: %s',
            saved_key,
        )
        storage.rollback_upload(saved_key)
        if thumbnail_key:
            storage.rollback_upload(thumbnail_key)
        raise

    logger.info(
        'File record created in database: %s (ID: %s)',
        saved_key,
        file_instance.id,
    )

    account = quota_operations.get_or_create_account(user)
    record_event(
        user,
        EventType.FILE_UPLOAD,
        fileName=file_name,
        fileSize=size_bytes,
        fileType=mime_type,
        storageUsed=account.storage_used,
        storageLimit=account.storage_limit,
    )
    return UploadResult(file=file_instance, quota_note=quota_note)


def get_file(user: _User, file_id: object) -> File:
    """Get one of the user's files.

    Args:
        user: Owner of the file.
        file_id: File identifier.

    Returns:
        File instance.

    Raises:
        NotFoundError: If absent or owned by another user.
    """
    return get_owned_file(user, file_id)


def list_files(user: _User, folder_id: object | None = None) -> list[File]:
    """List a user's files, most recent first.

    Args:
        user: Owner of files.
        folder_id: Only files directly inside this folder; None lists
            every file of the user.

    Returns:
        List of File objects.
    """
    files = File.objects.filter(user=user)
    if folder_id is not None:
        files = files.filter(folder_id=get_owned_folder(user, folder_id).pk)
    logger.debug('Listing files for user %s (folder: %s)', user.pk, folder_id)
    return list(files.order_by('-created_at'))


def read_file_contents(file_instance: File) -> bytes:
    """Fetch contents and count the download.

    Shared by owner downloads and share-link downloads: the file's
    download_count covers both.

    Args:
        file_instance: File to read.

    Returns:
        File contents.

    Raises:
        DependencyUnavailableError: If the blob store read fails.
    """
    try:
        content = get_blob_storage().get_bytes(file_instance.storage_key)
    except Exception as error:
        raise DependencyUnavailableError(
            f'Failed to read file contents: {error}',
        ) from error

    now = timezone.now()
    File.objects.filter(pk=file_instance.pk).update(
        download_count=F('download_count') + 1,
        last_accessed=now,
    )
    file_instance.refresh_from_db(fields=['download_count', 'last_accessed'])
    return content


def download_file(user: _User, file_id: object) -> DownloadResult:
    """Download one of the user's files.

    Args:
        user: Owner of the file.
        file_id: File identifier.

    Returns:
        DownloadResult with the refreshed record and contents.

    Raises:
        NotFoundError: If absent or owned by another user.
        DependencyUnavailableError: If the blob store read fails.
    """
    file_instance = get_owned_file(user, file_id)
    content = read_file_contents(file_instance)
    logger.info('File downloaded: %s (ID: %s)', file_instance.name, file_id)
    record_event(user, EventType.FILE_DOWNLOAD, fileName=file_instance.name)
    return DownloadResult(file=file_instance, content=content)


def remove_stored_file(file_instance: File) -> bool:
    """Delete a file's blobs, then its record, then release its quota.

    The storage key only lives in the record, so the record is read
    before and deleted after the blob. If the blob delete fails the
    record stays, still pointing at the blob.

    Args:
        file_instance: File to delete.

    Returns:
        True if this call removed the record, False if it was already gone.

    Raises:
        DependencyUnavailableError: If the blob delete fails.
    """
    storage = get_blob_storage()
    try:
        storage.delete(file_instance.storage_key)
    except Exception as error:
        raise DependencyUnavailableError(
            f'Failed to delete file contents: {error}',
        ) from error

    if file_instance.thumbnail_key:
        try:
            storage.delete(file_instance.thumbnail_key)
        except Exception:
            logger.exception(
                'Failed to delete thumbnail (orphaned): %s',
                file_instance.thumbnail_key,
            )

    with transaction.atomic():
        deleted, _ = File.objects.filter(pk=file_instance.pk).delete()
        if deleted:
            quota_operations.decrement_usage(
                file_instance.user,
                file_instance.size_bytes,
            )

    if deleted:
        logger.info('File record deleted from database: ID=%s', file_instance.pk)
    return bool(deleted)


def delete_file(user: _User, file_id: object) -> None:
    """Delete file from storage and database.

    Args:
        user: Acting user, must own the file.
        file_id: ID of file to delete.

    Raises:
        NotFoundError: If file doesn't exist.
        ForbiddenError: If the file belongs to another user.
        DependencyUnavailableError: If the blob delete fails.
    """
    file_instance = get_for_update(user, File, file_id)
    logger.info(
        'Deleting file: ID=%s, key=%s',
        file_id,
        file_instance.storage_key,
    )

    if not remove_stored_file(file_instance):
        raise NotFoundError(f'File not found: {file_id}')
