"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from cloudvault.apps.analytics.logic.reports import usage_percentage
from cloudvault.apps.files.models import File, Folder, StorageAccount


def format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin):
    """Admin interface for Folder model."""

    list_display = [
        'name',
        'user',
        'parent',
        'confidentiality',
        'importance',
        'allow_sharing',
        'created_at',
    ]

    list_filter = [
        'confidentiality',
        'importance',
        'allow_sharing',
    ]

    search_fields = [
        'name',
        'user__username',
    ]

    readonly_fields = [
        'id',
        'parent',
        'placeholder_key',
        'created_at',
        'updated_at',
    ]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('user')


@admin.register(File)
class FileAdmin(admin.ModelAdmin):
    """Admin interface for File model."""

    list_display = [
        'name',
        'user',
        'folder',
        'size_display',
        'mime_type',
        'download_count',
        'created_at',
    ]

    list_filter = [
        'mime_type',
        'confidentiality',
        'importance',
        'created_at',
    ]

    search_fields = [
        'name',
        'storage_key',
        'checksum_sha256',
    ]

    readonly_fields = [
        'id',
        'storage_key',
        'size_bytes',
        'mime_type',
        'checksum_sha256',
        'download_count',
        'last_accessed',
        'width',
        'height',
        'thumbnail_key',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('id', 'name', 'user', 'folder', 'storage_key'),
        }),
        ('Metadata', {
            'fields': (
                'size_bytes',
                'mime_type',
                'checksum_sha256',
                'width',
                'height',
                'thumbnail_key',
            ),
        }),
        ('Classification', {
            'fields': ('tags', 'confidentiality', 'importance', 'allow_sharing'),
        }),
        ('Usage', {
            'fields': ('download_count', 'last_accessed'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user', 'folder')


@admin.register(StorageAccount)
class StorageAccountAdmin(admin.ModelAdmin):
    """Admin interface for StorageAccount model."""

    list_display = [
        'user',
        'limit_display',
        'used_display',
        'percentage_display',
        'status_display',
    ]

    search_fields = [
        'user__username',
        'user__email',
    ]

    readonly_fields = [
        'user',
        'storage_used',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('User', {
            'fields': ('user',),
        }),
        ('Storage Settings', {
            'fields': ('storage_limit',),
        }),
        ('Current Usage', {
            'fields': ('storage_used',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def limit_display(self, obj: StorageAccount) -> str:
        """Display storage limit in human-readable format."""
        return format_bytes(obj.storage_limit)
    limit_display.short_description = 'Limit'  # type: ignore[attr-defined]

    def used_display(self, obj: StorageAccount) -> str:
        """Display used storage in human-readable format."""
        return format_bytes(obj.storage_used)
    used_display.short_description = 'Used'  # type: ignore[attr-defined]

    def percentage_display(self, obj: StorageAccount) -> str:
        """Display percentage of the limit used."""
        return f'{usage_percentage(obj.storage_used, obj.storage_limit)}%'
    percentage_display.short_description = '%'  # type: ignore[attr-defined]

    def status_display(self, obj: StorageAccount) -> str:
        """Display status indicator based on usage.

        Args:
            obj: StorageAccount instance.

        Returns:
            HTML formatted status indicator.
        """
        percentage = usage_percentage(obj.storage_used, obj.storage_limit)

        if percentage >= 100:
            color = '#dc3545'  # Red - over limit
            status = 'Over Limit'
        elif percentage >= 90:
            color = '#ffc107'  # Yellow - warning
            status = 'Warning'
        else:
            color = '#28a745'  # Green - ok
            status = 'OK'

        return format_html(
            '<span style="color: {color}; font-weight: bold;">'
            '{status}</span>',
            color=color,
            status=status,
        )
    status_display.short_description = 'Status'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[StorageAccount]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('user')
