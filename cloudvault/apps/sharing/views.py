"""REST views for share links and anonymous shared downloads."""

from typing import Any

from django.http import HttpResponse
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.request import Request
from rest_framework.response import Response

from cloudvault.apps.files.http import (
    attachment_response,
    envelope,
    request_payload,
    validated,
)
from cloudvault.apps.files.logic.file_operations import DownloadResult
from cloudvault.apps.files.logic.results import entrypoint
from cloudvault.apps.sharing.logic import share_operations
from cloudvault.apps.sharing.serializers import (
    ShareLinkCreateSerializer,
    ShareLinkListParamsSerializer,
    ShareLinkSerializer,
)


@entrypoint('Share link created')
def _create_share_link(request: Request) -> dict[str, Any]:
    body = validated(ShareLinkCreateSerializer, request_payload(request))
    link = share_operations.create_share_link(
        request.user,
        body['fileId'],
        expires_at=body['expiresAt'],
        download_limit=body['downloadLimit'],
        recipients=body['recipients'],
    )
    return ShareLinkSerializer(link).data


@entrypoint('Share links listed')
def _list_share_links(request: Request) -> list[dict[str, Any]]:
    params = validated(ShareLinkListParamsSerializer, request.query_params)
    links = share_operations.list_share_links(request.user, params['fileId'])
    return ShareLinkSerializer(links, many=True).data


@api_view(['GET', 'POST'])
def share_links(request: Request) -> Response:
    """List issued links (GET) or issue a new one (POST)."""
    if request.method == 'POST':
        return envelope(_create_share_link(request), status.HTTP_201_CREATED)
    return envelope(_list_share_links(request))


@entrypoint('Share link revoked')
def _revoke_share_link(request: Request, link_id: str) -> dict[str, Any]:
    link = share_operations.revoke_share_link(request.user, link_id)
    return ShareLinkSerializer(link).data


@api_view(['DELETE'])
def share_link_detail(request: Request, link_id: str) -> Response:
    """Revoke one link."""
    return envelope(_revoke_share_link(request, link_id))


@entrypoint('Shared file downloaded')
def _download_shared_file(token: str) -> DownloadResult:
    return share_operations.download_shared_file(token)


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def shared_download(request: Request, token: str) -> HttpResponse:
    """Anonymous download through a share token."""
    result = _download_shared_file(token)
    if not result.success:
        return envelope(result)
    return attachment_response(result.data)
