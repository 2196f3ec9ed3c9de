"""Django app configuration for sharing app."""

from django.apps import AppConfig


class SharingConfig(AppConfig):
    """Configuration for sharing app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cloudvault.apps.sharing'
    verbose_name = 'Sharing'
