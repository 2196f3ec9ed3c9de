"""REST views for analytics events and reports."""

from typing import Any

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from cloudvault.apps.analytics.logic import event_operations, reports
from cloudvault.apps.analytics.serializers import (
    AnalyticsEventSerializer,
    EventQueryParamsSerializer,
    ReportSerializer,
    TrackEventSerializer,
)
from cloudvault.apps.files.http import (
    client_context,
    envelope,
    request_payload,
    validated,
)
from cloudvault.apps.files.logic.results import entrypoint


@entrypoint('Event tracked')
def _track_event(request: Request) -> dict[str, str]:
    body = validated(TrackEventSerializer, request_payload(request))
    ip_address, user_agent = client_context(request)
    event_id = event_operations.track_event(
        request.user,
        body['eventType'],
        body['eventData'],
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return {'eventId': event_id}


@entrypoint('Events retrieved')
def _query_events(request: Request) -> list[dict[str, Any]]:
    params = validated(EventQueryParamsSerializer, request.query_params)
    events = event_operations.query_events(
        request.user,
        event_type=params['eventType'],
        start_date=params['startDate'],
        end_date=params['endDate'],
        limit=params['limit'],
    )
    return AnalyticsEventSerializer(events, many=True).data


@api_view(['GET', 'POST'])
def events(request: Request) -> Response:
    """Query events (GET) or track one (POST)."""
    if request.method == 'POST':
        return envelope(_track_event(request), status.HTTP_201_CREATED)
    return envelope(_query_events(request))


@entrypoint('Report generated')
def _generate_report(request: Request) -> dict[str, Any]:
    return ReportSerializer(reports.generate_report(request.user)).data


@api_view(['GET'])
def report(request: Request) -> Response:
    """Usage report of the signed-in user."""
    return envelope(_generate_report(request))
