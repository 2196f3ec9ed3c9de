"""Django app configuration for files app."""

from typing import override

from django.apps import AppConfig


class FilesConfig(AppConfig):
    """Configuration for files app.

    Owns the auth-state registry: sign-in and sign-out are forwarded to
    it, and storage accounts are provisioned from it on sign-in.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cloudvault.apps.files'
    verbose_name = 'Files'

    @override
    def ready(self) -> None:
        """Connect signal handlers and the auth-state registry."""
        from cloudvault.apps.files import signals  # noqa: WPS433
        from cloudvault.apps.files.infrastructure.identity import (  # noqa: WPS433
            AuthStateRegistry,
        )
        from cloudvault.apps.files.logic.quota_operations import (  # noqa: WPS433
            provision_on_sign_in,
        )

        self.auth_state = AuthStateRegistry()
        self.auth_state.subscribe(provision_on_sign_in)
        signals.connect_auth_state(self.auth_state)
