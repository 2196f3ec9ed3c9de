"""Custom storage backend for the S3-compatible blob store."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, final, override

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlobEntry:
    """One object returned by a prefix listing."""

    key: str
    size: int
    last_modified: datetime


@final
class BlobStorage(S3Storage):
    """S3 storage backend for user files, placeholders and thumbnails.

    Extends django-storages S3Storage with:
    - bytes-level put/get helpers used by the business logic
    - prefix listing with sizes
    - rollback support for failed metadata writes
    - enhanced error logging
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to S3 with error handling and logging.

        Args:
            name: Storage key for the object.
            content: File content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual key used (may differ from name if conflicts).

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading object to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded object: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload object to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete object from S3 with error handling and logging.

        Args:
            name: Storage key of object to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting object from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted object: %s', name)
        except Exception:
            logger.exception('Failed to delete object from storage: %s', name)
            raise

    def put_bytes(self, key: str, payload: bytes) -> str:
        """Store a byte string under the given key.

        Args:
            key: Storage key.
            payload: Object contents.

        Returns:
            Key the object was stored under.
        """
        return self.save(key, ContentFile(payload))

    def get_bytes(self, key: str) -> bytes:
        """Read a whole object.

        Args:
            key: Storage key.

        Returns:
            Object contents.
        """
        with self.open(key, 'rb') as blob:
            return blob.read()

    def list_prefix(self, prefix: str) -> list[BlobEntry]:
        """List objects whose key starts with prefix.

        Args:
            prefix: Key prefix (e.g. 'user-files/42/').

        Returns:
            Entries with key, size and last modification time.
        """
        logger.debug('Listing storage prefix: %s', prefix)
        return [
            BlobEntry(
                key=summary.key,
                size=summary.size,
                last_modified=summary.last_modified,
            )
            for summary in self.bucket.objects.filter(Prefix=prefix)
        ]

    def copy(self, source_key: str, target_key: str) -> None:
        """Server-side copy of one object within the bucket.

        Args:
            source_key: Existing object key.
            target_key: Key of the copy; overwritten if present.
        """
        logger.debug('Copying object %s -> %s', source_key, target_key)
        self.bucket.Object(target_key).copy_from(
            CopySource={'Bucket': self.bucket.name, 'Key': source_key},
        )

    def rollback_upload(self, name: str) -> None:
        """Delete uploaded object for metadata rollback.

        This method is called when a database write fails after the
        object has been successfully uploaded to S3. It attempts to
        delete the object to maintain consistency.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, as the DB rollback has already occurred.

        Args:
            name: Storage key of object to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting object: %s', name)
            self.delete(name)
            logger.info('Successfully rolled back upload: %s', name)
        except Exception:
            # The object stays in storage without metadata
            logger.exception(
                'Failed to rollback upload, orphaned object: %s',
                name,
            )


def get_blob_storage() -> BlobStorage:
    """Get the configured default storage backend.

    Returns:
        BlobStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]
