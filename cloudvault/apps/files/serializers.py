"""Serializers of the files app API.

Output serializers use camelCase keys and never expose storage keys.
Input serializers only check shape; ownership and naming rules stay in
the logic layer.
"""

from typing import Any

from rest_framework import serializers

from cloudvault.apps.files.logic.folder_operations import FolderDeletion
from cloudvault.apps.files.models import (
    Confidentiality,
    File,
    Folder,
    Importance,
    StorageAccount,
)


class FolderSerializer(serializers.ModelSerializer):
    """Folder as returned by the API."""

    parentId = serializers.UUIDField(source='parent_id', read_only=True)  # noqa: N815
    allowedFileTypes = serializers.ListField(  # noqa: N815
        source='allowed_file_types',
        read_only=True,
    )
    allowSharing = serializers.BooleanField(  # noqa: N815
        source='allow_sharing',
        read_only=True,
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)  # noqa: N815
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)  # noqa: N815

    class Meta:
        model = Folder
        fields = (
            'id',
            'name',
            'parentId',
            'allowedFileTypes',
            'confidentiality',
            'importance',
            'allowSharing',
            'createdAt',
            'updatedAt',
        )
        read_only_fields = fields


class FileSerializer(serializers.ModelSerializer):
    """File metadata as returned by the API."""

    folderId = serializers.UUIDField(source='folder_id', read_only=True)  # noqa: N815
    size = serializers.IntegerField(source='size_bytes', read_only=True)
    mimeType = serializers.CharField(source='mime_type', read_only=True)  # noqa: N815
    checksum = serializers.CharField(source='checksum_sha256', read_only=True)
    tags = serializers.ListField(read_only=True)
    allowSharing = serializers.BooleanField(  # noqa: N815
        source='allow_sharing',
        read_only=True,
    )
    downloadCount = serializers.IntegerField(  # noqa: N815
        source='download_count',
        read_only=True,
    )
    lastAccessed = serializers.DateTimeField(  # noqa: N815
        source='last_accessed',
        read_only=True,
    )
    hasThumbnail = serializers.SerializerMethodField()  # noqa: N815
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)  # noqa: N815
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)  # noqa: N815

    class Meta:
        model = File
        fields = (
            'id',
            'name',
            'folderId',
            'size',
            'mimeType',
            'checksum',
            'tags',
            'confidentiality',
            'importance',
            'allowSharing',
            'downloadCount',
            'lastAccessed',
            'width',
            'height',
            'hasThumbnail',
            'createdAt',
            'updatedAt',
        )
        read_only_fields = fields

    def get_hasThumbnail(self, file_instance: File) -> bool:  # noqa: N802
        return bool(file_instance.thumbnail_key)


class StorageAccountSerializer(serializers.ModelSerializer):
    """Storage usage of a user."""

    storageUsed = serializers.IntegerField(source='storage_used', read_only=True)  # noqa: N815
    storageLimit = serializers.IntegerField(source='storage_limit', read_only=True)  # noqa: N815
    available = serializers.IntegerField(source='available_bytes', read_only=True)

    class Meta:
        model = StorageAccount
        fields = ('storageUsed', 'storageLimit', 'available')


class FolderCreateSerializer(serializers.Serializer):
    """Body of a folder creation request."""

    name = serializers.CharField(trim_whitespace=False, allow_blank=True)
    parentId = serializers.UUIDField(required=False, allow_null=True, default=None)  # noqa: N815
    allowedFileTypes = serializers.ListField(  # noqa: N815
        child=serializers.CharField(),
        required=False,
        allow_null=True,
        default=None,
    )
    confidentiality = serializers.ChoiceField(
        choices=Confidentiality.choices,
        default=Confidentiality.INTERNAL,
    )
    importance = serializers.ChoiceField(
        choices=Importance.choices,
        default=Importance.MEDIUM,
    )
    allowSharing = serializers.BooleanField(default=True)  # noqa: N815


class FolderListParamsSerializer(serializers.Serializer):
    """Query parameters of the folder listing."""

    parentId = serializers.UUIDField(required=False, allow_null=True, default=None)  # noqa: N815
    all = serializers.BooleanField(default=False)


class FolderDeleteParamsSerializer(serializers.Serializer):
    """Query parameters of a folder deletion; recursive falls back to settings."""

    recursive = serializers.BooleanField(required=False, allow_null=True, default=None)


class FileUploadSerializer(serializers.Serializer):
    """Multipart form of a file upload."""

    file = serializers.FileField(
        allow_empty_file=True,
        error_messages={'required': 'No file provided'},
    )
    fileName = serializers.CharField(required=False, allow_blank=True, default='')  # noqa: N815
    folderId = serializers.UUIDField(required=False, allow_null=True, default=None)  # noqa: N815
    tags = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=list,
    )
    confidentiality = serializers.ChoiceField(
        choices=Confidentiality.choices,
        default=Confidentiality.INTERNAL,
    )
    importance = serializers.ChoiceField(
        choices=Importance.choices,
        default=Importance.MEDIUM,
    )
    allowSharing = serializers.BooleanField(default=True)  # noqa: N815


class FileListParamsSerializer(serializers.Serializer):
    """Query parameters of the file listing."""

    folderId = serializers.UUIDField(required=False, allow_null=True, default=None)  # noqa: N815


class FolderDeletionSerializer(serializers.Serializer):
    """Per-item outcome of a folder deletion."""

    folders = serializers.SerializerMethodField()
    files = serializers.SerializerMethodField()
    orphanedFolders = serializers.ListField(  # noqa: N815
        source='orphaned_folders',
        read_only=True,
    )

    def get_folders(self, deletion: FolderDeletion) -> dict[str, Any]:
        return deletion.folders.as_dict()

    def get_files(self, deletion: FolderDeletion) -> dict[str, Any]:
        return deletion.files.as_dict()
