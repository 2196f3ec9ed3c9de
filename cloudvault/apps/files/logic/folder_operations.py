"""Business logic for the folder hierarchy."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings

from cloudvault.apps.analytics.logic.event_operations import record_event
from cloudvault.apps.analytics.models import EventType
from cloudvault.apps.files.exceptions import (
    CorruptHierarchyError,
    NotFoundError,
    VaultError,
)
from cloudvault.apps.files.infrastructure.metadata import (
    build_placeholder_key,
    normalize_file_types,
)
from cloudvault.apps.files.infrastructure.storage import get_blob_storage
from cloudvault.apps.files.logic.file_operations import remove_stored_file
from cloudvault.apps.files.logic.lookups import (
    clean_name,
    get_for_update,
    get_owned_folder,
    validate_classification,
)
from cloudvault.apps.files.logic.results import BulkResult
from cloudvault.apps.files.models import Confidentiality, File, Folder, Importance

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FolderDeletion:
    """What a folder delete removed and what it could not."""

    folders: BulkResult = field(default_factory=BulkResult)
    files: BulkResult = field(default_factory=BulkResult)
    orphaned_folders: list[str] = field(default_factory=list)


def _write_placeholder(folder: Folder) -> str:
    """Store the folder's placeholder blob, best-effort.

    Returns:
        Placeholder key, or an empty string if the write failed.
    """
    key = build_placeholder_key(folder.user_id, folder.name, str(folder.id))
    body = json.dumps({
        'folderId': str(folder.id),
        'folderName': folder.name,
        'parentId': str(folder.parent_id) if folder.parent_id else None,
        'createdAt': folder.created_at.isoformat(),
    }).encode()
    try:
        return get_blob_storage().put_bytes(key, body)
    except Exception:
        logger.exception('Failed to write folder placeholder: %s', key)
        return ''


def create_folder(  # noqa: WPS211
    user: _User,
    name: str,
    parent_id: object | None = None,
    allowed_file_types: list[str] | None = None,
    confidentiality: str = Confidentiality.INTERNAL,
    importance: str = Importance.MEDIUM,
    allow_sharing: bool = True,
) -> Folder:
    """Create a folder under the root or under one of the user's folders.

    Args:
        user: Owner of the folder.
        name: Display name, trimmed.
        parent_id: Parent folder, or None for a root-level folder.
        allowed_file_types: File-type classes accepted on upload.
        confidentiality: Confidentiality level.
        importance: Importance level.
        allow_sharing: Whether files inside may be shared.

    Returns:
        Created Folder.

    Raises:
        InvalidArgumentError: If the name, file types or classification
            are invalid.
        NotFoundError: If the parent does not exist for this user.
    """
    name = clean_name(name, 'Folder')
    validate_classification(confidentiality, importance)
    file_types = normalize_file_types(allowed_file_types)
    parent = get_owned_folder(user, parent_id) if parent_id else None

    folder = Folder.objects.create(
        user=user,
        name=name,
        parent=parent,
        allowed_file_types=file_types,
        confidentiality=confidentiality,
        importance=importance,
        allow_sharing=allow_sharing,
    )

    placeholder_key = _write_placeholder(folder)
    if placeholder_key:
        Folder.objects.filter(pk=folder.pk).update(
            placeholder_key=placeholder_key,
        )
        folder.placeholder_key = placeholder_key

    logger.info(
        'Created folder %s (ID: %s) for user %s',
        name,
        folder.id,
        user.username,
    )
    record_event(user, EventType.FOLDER_CREATE, folderName=name)
    return folder


def list_folders(user: _User, parent_id: object | None = None) -> list[Folder]:
    """List one level of the folder tree, most recent first.

    Args:
        user: Owner of the folders.
        parent_id: Parent folder, or None for root-level folders.

    Returns:
        Direct children of the parent.

    Raises:
        NotFoundError: If the parent does not exist for this user.
    """
    if parent_id is not None:
        parent_id = get_owned_folder(user, parent_id).pk
    folders = Folder.objects.filter(user=user, parent_id=parent_id)
    return list(folders.order_by('-created_at'))


def list_all_folders(user: _User) -> list[Folder]:
    """List every folder of the user regardless of depth."""
    return list(Folder.objects.filter(user=user))


def get_folder(user: _User, folder_id: object) -> Folder:
    """Get one of the user's folders.

    Raises:
        NotFoundError: If absent or owned by another user.
    """
    return get_owned_folder(user, folder_id)


def get_folder_path(user: _User, folder_id: object) -> list[Folder]:
    """Resolve the chain of folders from the root down to folder_id.

    Args:
        user: Owner of the folders.
        folder_id: Folder to resolve.

    Returns:
        Folders ordered root first, ending with folder_id.

    Raises:
        NotFoundError: If the folder does not exist for this user.
        CorruptHierarchyError: If the chain is longer than
            CLOUDVAULT_MAX_FOLDER_DEPTH, loops, or points at a
            missing parent.
    """
    max_depth = settings.CLOUDVAULT_MAX_FOLDER_DEPTH
    folder = get_owned_folder(user, folder_id)
    path = [folder]
    seen = {folder.pk}

    while folder.parent_id is not None:
        if len(path) >= max_depth:
            raise CorruptHierarchyError(
                f'Folder {folder_id} is nested deeper than {max_depth} levels',
            )
        if folder.parent_id in seen:
            raise CorruptHierarchyError(
                f'Folder {folder_id} is part of a parent cycle',
            )
        try:
            folder = get_owned_folder(user, folder.parent_id)
        except NotFoundError as error:
            raise CorruptHierarchyError(
                f'Folder {folder.pk} points at missing parent {folder.parent_id}',
            ) from error
        seen.add(folder.pk)
        path.append(folder)

    path.reverse()
    return path


def _delete_placeholder(folder: Folder) -> None:
    if not folder.placeholder_key:
        return
    try:
        get_blob_storage().delete(folder.placeholder_key)
    except Exception:
        logger.exception(
            'Failed to delete folder placeholder (orphaned): %s',
            folder.placeholder_key,
        )


def _delete_folder_files(user: _User, folder_pk: object) -> BulkResult:
    """Delete every file directly inside a folder, one at a time.

    A file whose blob cannot be deleted keeps its record and is
    reported as failed; the loop moves on to the next file.
    """
    result = BulkResult()
    for file_instance in File.objects.filter(user=user, folder_id=folder_pk):
        try:
            remove_stored_file(file_instance)
        except VaultError as error:
            logger.warning(
                'Failed to delete file %s of folder %s: %s',
                file_instance.pk,
                folder_pk,
                error.message,
            )
            result.add_failure(file_instance.pk, error)
        else:
            result.add_success(file_instance.pk)
    return result


def _delete_single_folder(
    user: _User,
    folder: Folder,
    deletion: FolderDeletion,
) -> bool:
    """Remove placeholder, record and files of one folder.

    Returns:
        False if the record was already gone.
    """
    _delete_placeholder(folder)
    deleted, _ = Folder.objects.filter(pk=folder.pk).delete()
    if not deleted:
        return False
    deletion.folders.add_success(folder.pk)
    deletion.files.merge(_delete_folder_files(user, folder.pk))
    return True


def delete_folder(
    user: _User,
    folder_id: object,
    recursive: bool | None = None,
) -> FolderDeletion:
    """Delete a folder and the files inside it.

    Steps for each folder: delete the placeholder blob (best-effort),
    delete the folder record, then delete every file it contains. With
    recursive on, child folders are handled the same way, depth-first.
    With recursive off, child folders stay behind pointing at a removed
    parent and are listed in ``orphaned_folders``.

    Args:
        user: Acting user, must own the folder.
        folder_id: Folder to delete.
        recursive: Descend into child folders; defaults to
            CLOUDVAULT_RECURSIVE_FOLDER_DELETE.

    Returns:
        FolderDeletion with per-item outcomes.

    Raises:
        NotFoundError: If the folder does not exist or was deleted
            concurrently.
        ForbiddenError: If the folder belongs to another user.
    """
    if recursive is None:
        recursive = settings.CLOUDVAULT_RECURSIVE_FOLDER_DELETE

    folder = get_for_update(user, Folder, folder_id)
    logger.info(
        'Deleting folder %s (ID: %s, recursive: %s)',
        folder.name,
        folder.pk,
        recursive,
    )

    deletion = FolderDeletion()
    if not _delete_single_folder(user, folder, deletion):
        raise NotFoundError(f'Folder not found: {folder_id}')

    pending = [folder.pk]
    while pending:
        parent_pk = pending.pop()
        children = Folder.objects.filter(user=user, parent_id=parent_pk)
        if not recursive:
            deletion.orphaned_folders.extend(
                str(child_pk) for child_pk in children.values_list('pk', flat=True)
            )
            continue
        for child in children:
            if _delete_single_folder(user, child, deletion):
                pending.append(child.pk)

    if deletion.orphaned_folders:
        logger.warning(
            'Folder %s deleted with %d orphaned child folders',
            folder.pk,
            len(deletion.orphaned_folders),
        )
    if not deletion.files.complete:
        logger.warning(
            'Folder %s deleted, %d files could not be removed',
            folder.pk,
            len(deletion.files.failed),
        )
    return deletion
