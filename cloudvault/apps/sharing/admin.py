"""Django admin configuration for sharing app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from cloudvault.apps.sharing.models import ShareLink


@admin.register(ShareLink)
class ShareLinkAdmin(admin.ModelAdmin):
    """Admin interface for ShareLink model."""

    list_display = [
        'file',
        'user',
        'is_active',
        'download_count',
        'download_limit',
        'exhausted_display',
        'expires_at',
        'created_at',
    ]

    list_filter = [
        'is_active',
        'expires_at',
    ]

    search_fields = [
        'file__name',
        'user__username',
    ]

    # The token is a credential: shown, never edited
    readonly_fields = [
        'id',
        'file',
        'user',
        'token',
        'download_count',
        'created_at',
        'updated_at',
    ]

    def exhausted_display(self, obj: ShareLink) -> bool:
        """Whether the link has used up its download limit."""
        return obj.is_exhausted()
    exhausted_display.short_description = 'Exhausted'  # type: ignore[attr-defined]
    exhausted_display.boolean = True  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[ShareLink]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('file', 'user')
