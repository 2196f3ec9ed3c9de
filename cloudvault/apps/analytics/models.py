"""Database models for analytics app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

_EVENT_TYPE_MAX_LENGTH: Final = 32


class EventType(models.TextChoices):
    """Kinds of usage events."""

    FILE_UPLOAD = 'file_upload', 'File upload'
    FILE_DOWNLOAD = 'file_download', 'File download'
    FILE_SHARE = 'file_share', 'File share'
    FOLDER_CREATE = 'folder_create', 'Folder create'
    STORAGE_USAGE = 'storage_usage', 'Storage usage'


@final
class AnalyticsEvent(models.Model):
    """Append-only record of one thing a user did.

    ``event_data`` is free-form; its keys depend on the event type
    (fileName, fileSize, fileType, folderName, shareRecipients,
    storageUsed, storageLimit, ipAddress, userAgent, timestamp).
    ``timestamp`` is always server time and drives ordering.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='analytics_events',
        db_index=True,
    )

    event_type = models.CharField(
        max_length=_EVENT_TYPE_MAX_LENGTH,
        choices=EventType.choices,
    )

    event_data = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Analytics Event'  # type: ignore[mutable-override]
        verbose_name_plural = 'Analytics Events'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-timestamp', '-id']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['user', '-timestamp'],
                name='analytics_user_recent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.event_type}@{self.timestamp:%Y-%m-%dT%H:%M:%S}'
