"""Database models for sharing app."""

import uuid
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

from cloudvault.apps.files.models import File

_TOKEN_MAX_LENGTH: Final = 128


@final
class ShareLink(models.Model):
    """Time- and usage-bounded access grant to a single file.

    The token is the only credential a recipient needs. A link is
    usable while it is active, not expired and below its download
    limit; ``download_count`` counts resolutions of this link only.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    file = models.ForeignKey(
        File,
        on_delete=models.CASCADE,
        related_name='share_links',
    )

    # Issuer, always the file's owner
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='share_links',
        db_index=True,
    )

    token = models.CharField(
        max_length=_TOKEN_MAX_LENGTH,
        unique=True,
        help_text='Random URL-safe token',
    )

    recipients = models.JSONField(
        default=list,
        blank=True,
        help_text='E-mail addresses the link was shared with',
    )

    expires_at = models.DateTimeField(null=True, blank=True)

    download_limit = models.PositiveIntegerField(null=True, blank=True)

    download_count = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Share Link'  # type: ignore[mutable-override]
        verbose_name_plural = 'Share Links'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.file.name} ({self.download_count} downloads)'

    def is_exhausted(self) -> bool:
        """Check whether the download limit has been reached."""
        return (
            self.download_limit is not None
            and self.download_count >= self.download_limit
        )
