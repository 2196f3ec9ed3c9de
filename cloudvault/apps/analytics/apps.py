"""Django app configuration for analytics app."""

from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    """Configuration for analytics app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cloudvault.apps.analytics'
    verbose_name = 'Analytics'
