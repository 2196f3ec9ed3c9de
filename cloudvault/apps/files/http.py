"""Helpers shared by the REST views of every app.

Views run their work through ``entrypoint`` and render the resulting
``OperationResult`` with ``envelope``. Errors raised by the framework
itself (authentication, unsupported methods) get the same envelope
through ``envelope_exception_handler``.
"""

from typing import Any, Final

from django.http import HttpRequest, HttpResponse
from django.utils.http import content_disposition_header
from rest_framework import exceptions, serializers, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler

from cloudvault.apps.files.exceptions import InvalidArgumentError
from cloudvault.apps.files.logic.file_operations import DownloadResult
from cloudvault.apps.files.logic.results import OperationResult

_STATUS_BY_CODE: Final = {
    'not_found': status.HTTP_404_NOT_FOUND,
    'forbidden': status.HTTP_403_FORBIDDEN,
    'invalid_argument': status.HTTP_400_BAD_REQUEST,
    'sharing_disabled': status.HTTP_403_FORBIDDEN,
    'link_invalid': status.HTTP_404_NOT_FOUND,
    'quota_exceeded': status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    'dependency_unavailable': status.HTTP_503_SERVICE_UNAVAILABLE,
    'corrupt_hierarchy': status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_UNLABELLED_KEYS: Final = frozenset((api_settings.NON_FIELD_ERRORS_KEY, 'detail'))


def envelope(
    result: OperationResult[Any],
    success_status: int = status.HTTP_200_OK,
) -> Response:
    """Render an OperationResult; failures get a status matching their code.

    Args:
        result: Operation outcome.
        success_status: Status used on success.

    Returns:
        Response with the result envelope.
    """
    if result.success:
        status_code = success_status
    else:
        status_code = _STATUS_BY_CODE.get(
            result.code or '',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response(result.as_dict(), status=status_code)


def error_message(detail: Any) -> str:
    """Flatten DRF error details into one line naming the first bad field.

    Args:
        detail: ``serializer.errors`` or an exception's ``detail``.

    Returns:
        Message such as ``'downloadLimit: A valid integer is required.'``.
    """
    if isinstance(detail, dict):
        if not detail:
            return 'Invalid input'
        field_name, nested = next(iter(detail.items()))
        message = error_message(nested)
        if field_name in _UNLABELLED_KEYS:
            return message
        return f'{field_name}: {message}'
    if isinstance(detail, list):
        return error_message(detail[0]) if detail else 'Invalid input'
    return str(detail)


def request_payload(request: Request) -> Any:
    """Parsed request body.

    Raises:
        InvalidArgumentError: If the body cannot be parsed.
    """
    try:
        return request.data
    except exceptions.ParseError as error:
        raise InvalidArgumentError('Request body is not valid JSON') from error


def validated(
    serializer_class: type[serializers.Serializer],
    data: Any,
) -> dict[str, Any]:
    """Validate input with a serializer.

    Args:
        serializer_class: Input serializer.
        data: Request body or query parameters.

    Returns:
        The serializer's validated data.

    Raises:
        InvalidArgumentError: With the first validation error.
    """
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise InvalidArgumentError(error_message(serializer.errors))
    return serializer.validated_data


def envelope_exception_handler(
    exc: Exception,
    context: dict[str, Any],
) -> Response | None:
    """DRF exception handler answering with the result envelope.

    Anonymous requests to protected views get 401 rather than the 403
    session authentication would produce.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    code = getattr(exc, 'default_code', 'error')
    if isinstance(exc, exceptions.NotAuthenticated):
        response.status_code = status.HTTP_401_UNAUTHORIZED
        code = 'unauthenticated'
    response.data = {
        'success': False,
        'message': error_message(response.data),
        'error': code,
    }
    return response


def attachment_response(download: DownloadResult) -> HttpResponse:
    """Raw file contents with a download disposition."""
    response = HttpResponse(
        download.content,
        content_type=download.file.mime_type,
    )
    response['Content-Disposition'] = content_disposition_header(
        as_attachment=True,
        filename=download.file.name,
    )
    return response


def client_context(request: HttpRequest) -> tuple[str | None, str | None]:
    """Client address and user agent of a request.

    Returns:
        (ip_address, user_agent), None where the request carries none.
    """
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    ip_address = forwarded.split(',')[0].strip() or request.META.get('REMOTE_ADDR')
    return ip_address or None, request.META.get('HTTP_USER_AGENT') or None
