"""Database models for files app."""

import uuid
from pathlib import Path
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length
_STORAGE_KEY_MAX_LENGTH: Final = 1024
_ENUM_MAX_LENGTH: Final = 16

# Wildcard entry of Folder.allowed_file_types
ALL_FILE_TYPES: Final = 'all'


class Confidentiality(models.TextChoices):
    """How widely a folder or file may be exposed."""

    PUBLIC = 'public', 'Public'
    INTERNAL = 'internal', 'Internal'
    CONFIDENTIAL = 'confidential', 'Confidential'
    RESTRICTED = 'restricted', 'Restricted'


class Importance(models.TextChoices):
    """User-assigned priority of a folder or file."""

    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


def default_storage_limit() -> int:
    """Storage limit for newly provisioned accounts.

    Returns:
        Limit in bytes from settings.
    """
    return settings.CLOUDVAULT_DEFAULT_STORAGE_LIMIT


def default_allowed_file_types() -> list[str]:
    """Folders accept every file type unless told otherwise.

    Returns:
        Fresh list holding the wildcard.
    """
    return [ALL_FILE_TYPES]


@final
class StorageAccount(models.Model):
    """Storage usage and limit of a user.

    Identity fields (email, first and last name) live on the auth user;
    this record holds the byte counters. ``storage_used`` is only ever
    changed through atomic update expressions in quota_operations.

    The limit is advisory unless CLOUDVAULT_ENFORCE_QUOTA is on.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='storage_account',
        primary_key=True,
    )

    storage_limit = models.BigIntegerField(
        default=default_storage_limit,
        help_text='Storage limit in bytes',
    )

    storage_used = models.BigIntegerField(
        default=0,
        help_text='Currently used storage in bytes',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Storage Account'  # type: ignore[mutable-override]
        verbose_name_plural = 'Storage Accounts'  # type: ignore[mutable-override]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=models.Q(storage_limit__gte=0),
                name='storage_limit_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(storage_used__gte=0),
                name='storage_used_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}: {self.storage_used}/{self.storage_limit}'

    def has_space_for(self, size_bytes: int) -> bool:
        """Check if there's enough space for the given size.

        Args:
            size_bytes: Size to check in bytes.

        Returns:
            True if there's enough space, False otherwise.
        """
        return self.storage_used + size_bytes <= self.storage_limit

    def available_bytes(self) -> int:
        """Get available storage space.

        Returns:
            Available bytes (never negative).
        """
        available = self.storage_limit - self.storage_used
        return max(0, available)


@final
class Folder(models.Model):
    """Node of a user's folder tree.

    ``parent`` is fixed at creation and never re-pointed, so the tree
    stays acyclic. The relation has no database constraint: a shallow
    folder delete leaves children pointing at a removed parent.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    parent = models.ForeignKey(
        'self',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='children',
        help_text='Null for root-level folders',
    )

    allowed_file_types = models.JSONField(
        default=default_allowed_file_types,
        help_text='File-type classes accepted on upload, or ["all"]',
    )

    confidentiality = models.CharField(
        max_length=_ENUM_MAX_LENGTH,
        choices=Confidentiality.choices,
        default=Confidentiality.INTERNAL,
    )

    importance = models.CharField(
        max_length=_ENUM_MAX_LENGTH,
        choices=Importance.choices,
        default=Importance.MEDIUM,
    )

    allow_sharing = models.BooleanField(default=True)

    placeholder_key = models.CharField(
        max_length=_STORAGE_KEY_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Zero-content marker making the folder visible in blob listings',
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            # Shallow listing: children of one parent
            models.Index(
                fields=['user', 'parent', '-created_at'],
                name='folders_user_parent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'

    def accepts_all_file_types(self) -> bool:
        """Check whether the folder takes uploads of any type.

        Returns:
            True if the wildcard is among the allowed types.
        """
        return not self.allowed_file_types or (
            ALL_FILE_TYPES in self.allowed_file_types
        )


@final
class File(models.Model):
    """File stored in S3-compatible storage.

    Each file belongs to a user and sits either in one of the user's
    folders or at the root (``folder`` is null). Contents live in the
    blob store under ``storage_key``; this record is the only place the
    key is kept.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='files',
        help_text='Null for files at the root',
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    storage_key = models.CharField(
        max_length=_STORAGE_KEY_MAX_LENGTH,
        unique=True,
        help_text='Blob key: user-files/{user_id}/{sanitized_name}_{id}',
    )

    # File metadata (cached for performance)
    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='MIME type detected from magic numbers or extension',
    )

    checksum_sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        help_text='SHA256 hash for integrity verification',
        db_index=True,
    )

    tags = models.JSONField(default=list, blank=True)

    confidentiality = models.CharField(
        max_length=_ENUM_MAX_LENGTH,
        choices=Confidentiality.choices,
        default=Confidentiality.INTERNAL,
    )

    importance = models.CharField(
        max_length=_ENUM_MAX_LENGTH,
        choices=Importance.choices,
        default=Importance.MEDIUM,
    )

    allow_sharing = models.BooleanField(default=True)

    download_count = models.PositiveIntegerField(
        default=0,
        help_text='Byte downloads by the owner and through share links',
    )

    last_accessed = models.DateTimeField(null=True, blank=True)

    # Image enrichment, left empty when extraction fails
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)
    thumbnail_key = models.CharField(
        max_length=_STORAGE_KEY_MAX_LENGTH,
        blank=True,
        default='',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize folder listing queries
            models.Index(
                fields=['user', 'folder', '-created_at'],
                name='files_user_folder_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'file.pdf' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.name).suffix
        return extension.lstrip('.').lower()

    def is_image(self) -> bool:
        """Check whether the file is an image.

        Returns:
            True for image/* MIME types.
        """
        return self.mime_type.startswith('image/')
