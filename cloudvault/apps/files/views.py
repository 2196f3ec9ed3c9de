"""REST views for folders, files and storage usage.

Every view delegates to an ``entrypoint``-wrapped function, so the
response always carries the result envelope.
"""

from typing import Any

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from cloudvault.apps.files.http import (
    attachment_response,
    envelope,
    request_payload,
    validated,
)
from cloudvault.apps.files.logic import (
    file_operations,
    folder_operations,
    quota_operations,
)
from cloudvault.apps.files.logic.results import entrypoint
from cloudvault.apps.files.serializers import (
    FileListParamsSerializer,
    FileSerializer,
    FileUploadSerializer,
    FolderCreateSerializer,
    FolderDeleteParamsSerializer,
    FolderDeletionSerializer,
    FolderListParamsSerializer,
    FolderSerializer,
    StorageAccountSerializer,
)


@entrypoint('Folder created')
def _create_folder(request: Request) -> dict[str, Any]:
    body = validated(FolderCreateSerializer, request_payload(request))
    folder = folder_operations.create_folder(
        request.user,
        body['name'],
        parent_id=body['parentId'],
        allowed_file_types=body['allowedFileTypes'],
        confidentiality=body['confidentiality'],
        importance=body['importance'],
        allow_sharing=body['allowSharing'],
    )
    return FolderSerializer(folder).data


@entrypoint('Folders listed')
def _list_folders(request: Request) -> list[dict[str, Any]]:
    params = validated(FolderListParamsSerializer, request.query_params)
    if params['all']:
        folders = folder_operations.list_all_folders(request.user)
    else:
        folders = folder_operations.list_folders(request.user, params['parentId'])
    return FolderSerializer(folders, many=True).data


@api_view(['GET', 'POST'])
def folders(request: Request) -> Response:
    """List folders (GET) or create one (POST)."""
    if request.method == 'POST':
        return envelope(_create_folder(request), status.HTTP_201_CREATED)
    return envelope(_list_folders(request))


@entrypoint('Folder retrieved')
def _get_folder(request: Request, folder_id: str) -> dict[str, Any]:
    folder = folder_operations.get_folder(request.user, folder_id)
    return FolderSerializer(folder).data


@entrypoint('Folder deleted')
def _delete_folder(request: Request, folder_id: str) -> dict[str, Any]:
    params = validated(FolderDeleteParamsSerializer, request.query_params)
    deletion = folder_operations.delete_folder(
        request.user,
        folder_id,
        recursive=params['recursive'],
    )
    return FolderDeletionSerializer(deletion).data


@api_view(['GET', 'DELETE'])
def folder_detail(request: Request, folder_id: str) -> Response:
    """Get (GET) or delete (DELETE) one folder."""
    if request.method == 'DELETE':
        return envelope(_delete_folder(request, folder_id))
    return envelope(_get_folder(request, folder_id))


@entrypoint('Folder path resolved')
def _folder_path(request: Request, folder_id: str) -> list[dict[str, Any]]:
    path = folder_operations.get_folder_path(request.user, folder_id)
    return FolderSerializer(path, many=True).data


@api_view(['GET'])
def folder_path(request: Request, folder_id: str) -> Response:
    """Breadcrumb chain from the root to a folder."""
    return envelope(_folder_path(request, folder_id))


@entrypoint('File uploaded')
def _upload_file(request: Request) -> dict[str, Any]:
    form = validated(FileUploadSerializer, request_payload(request))
    uploaded = form['file']
    result = file_operations.upload_file(
        request.user,
        uploaded,
        form['fileName'] or uploaded.name,
        declared_mime_type=uploaded.content_type,
        folder_id=form['folderId'],
        tags=form['tags'],
        confidentiality=form['confidentiality'],
        importance=form['importance'],
        allow_sharing=form['allowSharing'],
    )
    return {
        'file': FileSerializer(result.file).data,
        'quotaNote': result.quota_note,
    }


@entrypoint('Files listed')
def _list_files(request: Request) -> list[dict[str, Any]]:
    params = validated(FileListParamsSerializer, request.query_params)
    files = file_operations.list_files(request.user, params['folderId'])
    return FileSerializer(files, many=True).data


@api_view(['GET', 'POST'])
def files(request: Request) -> Response:
    """List files (GET) or upload one as multipart form data (POST)."""
    if request.method == 'POST':
        return envelope(_upload_file(request), status.HTTP_201_CREATED)
    return envelope(_list_files(request))


@entrypoint('File retrieved')
def _get_file(request: Request, file_id: str) -> dict[str, Any]:
    return FileSerializer(file_operations.get_file(request.user, file_id)).data


@entrypoint('File deleted')
def _delete_file(request: Request, file_id: str) -> None:
    file_operations.delete_file(request.user, file_id)


@api_view(['GET', 'DELETE'])
def file_detail(request: Request, file_id: str) -> Response:
    """Get metadata (GET) or delete (DELETE) one file."""
    if request.method == 'DELETE':
        return envelope(_delete_file(request, file_id))
    return envelope(_get_file(request, file_id))


@entrypoint('File downloaded')
def _download_file(
    request: Request,
    file_id: str,
) -> file_operations.DownloadResult:
    return file_operations.download_file(request.user, file_id)


@api_view(['GET'])
def file_download(request: Request, file_id: str) -> HttpResponse:
    """Download the contents of one of the user's files."""
    result = _download_file(request, file_id)
    if not result.success:
        return envelope(result)
    return attachment_response(result.data)


@entrypoint('Storage usage retrieved')
def _storage_usage(request: Request) -> dict[str, Any]:
    account = quota_operations.get_or_create_account(request.user)
    return StorageAccountSerializer(account).data


@api_view(['GET'])
def storage_usage(request: Request) -> Response:
    """Storage used and limit of the signed-in user."""
    return envelope(_storage_usage(request))
