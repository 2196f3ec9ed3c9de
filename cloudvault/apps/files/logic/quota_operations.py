"""Business logic for storage quota operations."""

import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import BigIntegerField, F, Sum, Value  # noqa: WPS347
from django.db.models.functions import Greatest

from cloudvault.apps.files.exceptions import (
    InvalidArgumentError,
    QuotaExceededError,
)
from cloudvault.apps.files.infrastructure.identity import IdentityUser
from cloudvault.apps.files.models import File, StorageAccount

# User type for Django's dynamic user model
_User = Any

# Field name constant to avoid string literal over-use
_STORAGE_USED_FIELD = 'storage_used'  # noqa: WPS226

logger = logging.getLogger(__name__)


def get_or_create_account(user: _User) -> StorageAccount:
    """Get or create storage account for user (on-demand creation).

    Args:
        user: User to get the account for.

    Returns:
        StorageAccount instance for the user.
    """
    account, created = StorageAccount.objects.get_or_create(user=user)
    if created:
        logger.info(
            'Created storage account for user %s: %d bytes',
            user.username,
            account.storage_limit,
        )
    return account


def provision_account(identity: IdentityUser) -> StorageAccount:
    """Create the user and storage account for a confirmed identity.

    Safe to call on every sign-in: existing records are reused and the
    profile fields are refreshed from the identity provider.

    Args:
        identity: Identity reported by the identity provider.

    Returns:
        The user's StorageAccount.

    Raises:
        InvalidArgumentError: If the identity's email is not verified.
    """
    if not identity.email_verified:
        raise InvalidArgumentError(
            f'Identity {identity.id} has not confirmed its email',
        )

    user_model = get_user_model()
    with transaction.atomic():
        user, created = user_model.objects.update_or_create(
            username=identity.id,
            defaults={
                'email': identity.email,
                'first_name': identity.first_name,
                'last_name': identity.last_name,
            },
        )
        account = get_or_create_account(user)

    if created:
        logger.info('Provisioned user %s (%s)', identity.id, identity.email)
    return account


def provision_on_sign_in(identity: IdentityUser | None) -> None:
    """Auth-state callback provisioning accounts on sign-in.

    Subscribe it to an AuthStateRegistry; sign-outs (None) are ignored.

    Args:
        identity: New auth state.
    """
    if identity is None or not identity.email_verified:
        return
    provision_account(identity)


def check_quota(user: _User, size_bytes: int) -> str | None:
    """Check an upload against the user's quota.

    Creates the account on-demand if it doesn't exist. With quota
    enforcement switched off the limit is advisory: instead of raising,
    a note describing the overrun is returned.

    Args:
        user: User to check quota for.
        size_bytes: Size of the upload in bytes.

    Returns:
        Quota note if the upload goes past the limit, None otherwise.

    Raises:
        QuotaExceededError: If enforcement is on and the upload
            would exceed quota.
    """
    account = get_or_create_account(user)

    if account.has_space_for(size_bytes):
        return None

    logger.warning(
        'Quota exceeded for user %s: need %d, have %d available',
        user.username,
        size_bytes,
        account.available_bytes(),
    )
    if settings.CLOUDVAULT_ENFORCE_QUOTA:
        raise QuotaExceededError(
            quota_bytes=account.storage_limit,
            used_bytes=account.storage_used,
            required_bytes=size_bytes,
        )
    return (
        f'Storage limit exceeded: {account.storage_used + size_bytes} of '
        f'{account.storage_limit} bytes used'
    )


def increment_usage(user: _User, size_bytes: int) -> None:
    """Atomically increment user's storage usage.

    The addition happens inside a single UPDATE, so concurrent uploads
    by the same user cannot lose each other's increments.

    Args:
        user: User to increment usage for.
        size_bytes: Bytes to add to usage.
    """
    with transaction.atomic():
        updated = StorageAccount.objects.filter(user=user).update(
            storage_used=F(_STORAGE_USED_FIELD) + size_bytes,
        )

        if updated == 0:
            # Account doesn't exist yet, create it and retry the delta
            get_or_create_account(user)
            StorageAccount.objects.filter(user=user).update(
                storage_used=F(_STORAGE_USED_FIELD) + size_bytes,
            )

    logger.debug(
        'Incremented usage for user %s by %d bytes',
        user.username,
        size_bytes,
    )


def decrement_usage(user: _User, size_bytes: int) -> None:
    """Atomically decrement user's storage usage.

    Prevents negative values by clamping to 0 in the same UPDATE.

    Args:
        user: User to decrement usage for.
        size_bytes: Bytes to subtract from usage.
    """
    updated = StorageAccount.objects.filter(user=user).update(
        storage_used=Greatest(
            F(_STORAGE_USED_FIELD) - size_bytes,
            Value(0),
            output_field=BigIntegerField(),
        ),
    )

    if updated == 0:
        # No account exists, nothing to decrement
        logger.debug(
            'No storage account for user %s, skipping decrement',
            user.username,
        )
        return

    logger.debug(
        'Decremented usage for user %s by %d bytes',
        user.username,
        size_bytes,
    )


def recalculate_usage(user: _User) -> int:
    """Recalculate user's storage usage from actual files.

    This is useful for fixing inconsistencies left by partially
    failed deletes or uploads.

    Args:
        user: User to recalculate usage for.

    Returns:
        New calculated usage in bytes.
    """
    total = File.objects.filter(user=user).aggregate(
        total=Sum('size_bytes'),
    )['total'] or 0

    with transaction.atomic():
        account = get_or_create_account(user)
        old_usage = account.storage_used
        account.storage_used = total
        account.save(update_fields=[_STORAGE_USED_FIELD, 'updated_at'])

    logger.info(
        'Recalculated usage for user %s: %d -> %d bytes',
        user.username,
        old_usage,
        total,
    )

    return total
