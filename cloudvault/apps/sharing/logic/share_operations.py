"""Business logic for share links.

Validity of a link is decided and its counter consumed by one
conditional UPDATE, so two recipients racing for the last allowed
download cannot both get it.
"""

import logging
import secrets
from datetime import datetime
from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db.models import F, Q
from django.utils import timezone

from cloudvault.apps.analytics.logic.event_operations import record_event
from cloudvault.apps.analytics.models import EventType
from cloudvault.apps.files.exceptions import (
    DependencyUnavailableError,
    InvalidArgumentError,
    LinkInvalidError,
    SharingDisabledError,
)
from cloudvault.apps.files.logic.file_operations import (
    DownloadResult,
    read_file_contents,
)
from cloudvault.apps.files.logic.lookups import get_for_update, get_owned_file
from cloudvault.apps.files.models import File, Folder
from cloudvault.apps.sharing.models import ShareLink

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def _generate_token() -> str:
    return secrets.token_urlsafe(settings.CLOUDVAULT_SHARE_TOKEN_BYTES)


def _normalize_recipients(recipients: list[str] | None) -> list[str]:
    cleaned: dict[str, None] = {}
    for recipient in recipients or []:
        address = str(recipient).strip().lower()
        if not address:
            continue
        try:
            validate_email(address)
        except ValidationError as error:
            raise InvalidArgumentError(
                f'Invalid recipient address: {address}',
            ) from error
        cleaned.setdefault(address, None)
    return list(cleaned)


def _check_sharing_allowed(file_instance: File) -> None:
    if not file_instance.allow_sharing:
        raise SharingDisabledError(
            f'Sharing is disabled for file {file_instance.name}',
        )
    if file_instance.folder_id is None:
        return
    folder_blocks = Folder.objects.filter(
        pk=file_instance.folder_id,
        allow_sharing=False,
    ).exists()
    if folder_blocks:
        raise SharingDisabledError(
            f'Sharing is disabled for the folder of {file_instance.name}',
        )


def create_share_link(
    user: _User,
    file_id: object,
    expires_at: datetime | None = None,
    download_limit: int | None = None,
    recipients: list[str] | None = None,
) -> ShareLink:
    """Issue a share link for one of the user's files.

    Args:
        user: Owner of the file.
        file_id: File to share.
        expires_at: Moment the link stops working; None never expires.
        download_limit: Maximum number of resolutions; None is unlimited.
        recipients: E-mail addresses the link is meant for.

    Returns:
        Active ShareLink with a fresh token.

    Raises:
        NotFoundError: If the file does not exist for this user.
        SharingDisabledError: If the file or its folder forbids sharing.
        InvalidArgumentError: If limit, expiry or a recipient is invalid.
    """
    file_instance = get_owned_file(user, file_id)
    _check_sharing_allowed(file_instance)

    if download_limit is not None and download_limit <= 0:
        raise InvalidArgumentError('downloadLimit must be a positive integer')
    if expires_at is not None and expires_at <= timezone.now():
        raise InvalidArgumentError('expiresAt must be in the future')
    addresses = _normalize_recipients(recipients)

    link = ShareLink.objects.create(
        file=file_instance,
        user=user,
        token=_generate_token(),
        recipients=addresses,
        expires_at=expires_at,
        download_limit=download_limit,
    )
    logger.info(
        'Share link %s created for file %s (expires: %s, limit: %s)',
        link.pk,
        file_instance.pk,
        expires_at,
        download_limit,
    )
    record_event(
        user,
        EventType.FILE_SHARE,
        fileName=file_instance.name,
        shareRecipients=addresses,
    )
    return link


def resolve_share_link(token: str, now: datetime | None = None) -> ShareLink:
    """Validate a token and consume one download from its link.

    Args:
        token: Token presented by an anonymous recipient.
        now: Evaluation moment, defaults to the current time.

    Returns:
        ShareLink with its file loaded and counter refreshed.

    Raises:
        LinkInvalidError: If the link is unknown, revoked, expired or
            exhausted. The error does not say which.
    """
    if not token:
        raise LinkInvalidError()
    if now is None:
        now = timezone.now()

    updated = ShareLink.objects.filter(
        Q(expires_at__isnull=True) | Q(expires_at__gt=now),
        Q(download_limit__isnull=True) | Q(download_count__lt=F('download_limit')),
        token=token,
        is_active=True,
    ).update(download_count=F('download_count') + 1)

    if not updated:
        logger.info('Rejected share token resolution')
        raise LinkInvalidError()

    link = ShareLink.objects.select_related('file', 'user').get(token=token)
    logger.info(
        'Share link %s resolved (%d/%s)',
        link.pk,
        link.download_count,
        link.download_limit,
    )
    return link


def download_shared_file(token: str) -> DownloadResult:
    """Resolve a token and return the shared file's contents.

    Resolving consumes one download of the link; it is given back if
    the contents cannot be read.

    Raises:
        LinkInvalidError: If the link cannot be used.
        DependencyUnavailableError: If the blob store read fails.
    """
    link = resolve_share_link(token)
    try:
        content = read_file_contents(link.file)
    except DependencyUnavailableError:
        ShareLink.objects.filter(pk=link.pk, download_count__gt=0).update(
            download_count=F('download_count') - 1,
        )
        logger.warning(
            'Share link %s download refunded after read failure',
            link.pk,
        )
        raise
    record_event(
        link.user,
        EventType.FILE_DOWNLOAD,
        fileName=link.file.name,
        shareLinkId=str(link.pk),
    )
    return DownloadResult(file=link.file, content=content)


def revoke_share_link(user: _User, link_id: object) -> ShareLink:
    """Deactivate a link. Revoking an inactive link is not an error.

    Args:
        user: Acting user, must have issued the link.
        link_id: Link identifier.

    Returns:
        The deactivated ShareLink.

    Raises:
        NotFoundError: If the link does not exist.
        ForbiddenError: If another user issued it.
    """
    link = get_for_update(user, ShareLink, link_id)
    if link.is_active:
        ShareLink.objects.filter(pk=link.pk).update(
            is_active=False,
            updated_at=timezone.now(),
        )
        link.is_active = False
        logger.info('Share link %s revoked', link.pk)
    return link


def list_share_links(user: _User, file_id: object | None = None) -> list[ShareLink]:
    """List links the user issued, optionally for one file only."""
    links = ShareLink.objects.filter(user=user).select_related('file')
    if file_id is not None:
        links = links.filter(file_id=get_owned_file(user, file_id).pk)
    return list(links)
