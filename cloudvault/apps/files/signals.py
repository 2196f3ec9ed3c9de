"""Signal handlers for files app."""

import logging

from django.conf import settings
from django.contrib.auth.signals import user_logged_in, user_logged_out
from django.db.models.signals import post_save
from django.dispatch import receiver

from cloudvault.apps.files.infrastructure.identity import (
    AuthStateRegistry,
    identity_from_user,
)
from cloudvault.apps.files.models import StorageAccount

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_storage_account(
    sender: type,
    instance: object,
    created: bool,
    **kwargs: object,
) -> None:
    """Provision a storage account when a user record is created.

    Accounts for users created before this handler existed are created
    on demand by quota_operations.get_or_create_account.

    Args:
        sender: The user model class.
        instance: The saved user instance.
        created: True if the row was inserted.
        **kwargs: Additional signal arguments.
    """
    if not created or kwargs.get('raw'):
        return

    account, _ = StorageAccount.objects.get_or_create(user=instance)
    logger.info(
        'Storage account provisioned for user %s: limit %d bytes',
        instance.pk,
        account.storage_limit,
    )


def connect_auth_state(registry: AuthStateRegistry) -> None:
    """Forward Django sign-in and sign-out to an auth-state registry.

    Args:
        registry: Registry notified with the identity on sign-in and
            with None on sign-out.
    """
    def _signed_in(
        sender: type,
        request: object,
        user: object,
        **kwargs: object,
    ) -> None:
        registry.notify(identity_from_user(user))

    def _signed_out(
        sender: type,
        request: object,
        user: object,
        **kwargs: object,
    ) -> None:
        registry.notify(None)

    user_logged_in.connect(
        _signed_in,
        weak=False,
        dispatch_uid='cloudvault_auth_state_signed_in',
    )
    user_logged_out.connect(
        _signed_out,
        weak=False,
        dispatch_uid='cloudvault_auth_state_signed_out',
    )
