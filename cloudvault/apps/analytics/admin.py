"""Django admin configuration for analytics app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from cloudvault.apps.analytics.models import AnalyticsEvent


@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    """Read-only admin interface for the append-only event log."""

    list_display = [
        'timestamp',
        'user',
        'event_type',
    ]

    list_filter = [
        'event_type',
        'timestamp',
    ]

    search_fields = [
        'user__username',
    ]

    readonly_fields = [
        'user',
        'event_type',
        'event_data',
        'timestamp',
    ]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Events are only appended by the application."""
        return False

    def has_change_permission(
        self,
        request: HttpRequest,
        obj: AnalyticsEvent | None = None,
    ) -> bool:
        """Events are immutable."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[AnalyticsEvent]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('user')
