"""Business logic for analytics event ingestion and queries."""

import logging
from datetime import datetime
from typing import Any, Final

from django.conf import settings
from django.utils import timezone

from cloudvault.apps.analytics.models import AnalyticsEvent, EventType
from cloudvault.apps.files.exceptions import InvalidArgumentError

# User type for Django's dynamic user model
_User = Any

_UNKNOWN: Final = 'unknown'

logger = logging.getLogger(__name__)


def track_event(  # noqa: WPS211
    user: _User,
    event_type: str,
    event_data: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> str:
    """Append one analytics event.

    The shape of event_data is not validated. A caller-supplied
    ``timestamp`` inside event_data is kept as is; the top-level
    timestamp used for ordering is always server time.

    Args:
        user: User the event belongs to.
        event_type: One of EventType values.
        event_data: Free-form attributes for the event type.
        ip_address: Client address, stored in event_data.
        user_agent: Client user agent, stored in event_data.

    Returns:
        Identifier of the stored event.

    Raises:
        InvalidArgumentError: If user or event_type is missing or unknown.
    """
    if user is None:
        raise InvalidArgumentError('Missing required parameter: user')
    if not event_type:
        raise InvalidArgumentError('Missing required parameter: eventType')
    if event_type not in EventType.values:
        raise InvalidArgumentError(f'Unknown event type: {event_type}')

    now = timezone.now()
    data = dict(event_data or {})
    data.setdefault('timestamp', now.isoformat())
    data['ipAddress'] = ip_address or _UNKNOWN
    data['userAgent'] = user_agent or _UNKNOWN

    event = AnalyticsEvent.objects.create(
        user=user,
        event_type=event_type,
        event_data=data,
        timestamp=now,
    )
    logger.debug(
        'Tracked %s event for user %s (ID: %d)',
        event_type,
        user.username,
        event.id,
    )
    return str(event.id)


def record_event(user: _User, event_type: str, **event_data: Any) -> None:
    """Emit an event on behalf of a mutating operation.

    Tracking is optional (CLOUDVAULT_TRACK_EVENTS) and never fails the
    operation that triggered it.

    Args:
        user: User the event belongs to.
        event_type: One of EventType values.
        **event_data: Event attributes.
    """
    if not settings.CLOUDVAULT_TRACK_EVENTS:
        return
    try:
        track_event(user, event_type, event_data)
    except Exception:
        logger.exception(
            'Failed to track %s event for user %s',
            event_type,
            user.username,
        )


def query_events(  # noqa: WPS211
    user: _User,
    event_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int | None = None,
) -> list[AnalyticsEvent]:
    """Fetch a user's events, most recent first.

    Args:
        user: Owner of the events.
        event_type: Only events of this type.
        start_date: Only events at or after this moment.
        end_date: Only events at or before this moment.
        limit: Maximum number of events (default from settings).

    Returns:
        List of AnalyticsEvent instances.

    Raises:
        InvalidArgumentError: If limit is not positive.
    """
    if limit is None:
        limit = settings.CLOUDVAULT_QUERY_DEFAULT_LIMIT
    if limit <= 0:
        raise InvalidArgumentError('limit must be a positive integer')

    events = AnalyticsEvent.objects.filter(user=user)
    if event_type:
        events = events.filter(event_type=event_type)
    if start_date is not None:
        events = events.filter(timestamp__gte=start_date)
    if end_date is not None:
        events = events.filter(timestamp__lte=end_date)

    return list(events.order_by('-timestamp', '-id')[:limit])
