"""Usage reports computed from raw analytics events.

Nothing is stored: every report folds over the most recent events
again. Accounts with more events than CLOUDVAULT_REPORT_EVENT_CAP get
an approximate report built from the newest ones only.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Final

from django.conf import settings

from cloudvault.apps.analytics.models import AnalyticsEvent, EventType

_TOP_FILES_COUNT: Final = 5
_RECENT_ACTIVITY_COUNT: Final = 10

# User type for Django's dynamic user model
_User = Any


@dataclass(frozen=True, slots=True)
class StorageUsage:
    """Storage figures reconstructed from events."""

    used: int
    limit: int
    percentage: int


@dataclass(frozen=True, slots=True)
class TopFile:
    """Download count of one filename."""

    file_name: str
    download_count: int


@dataclass(frozen=True, slots=True)
class ActivityEntry:
    """One line of the recent activity feed."""

    event_type: str
    timestamp: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Report:
    """Aggregated view of a user's activity."""

    total_events: int
    events_by_type: dict[str, int]
    storage_usage: StorageUsage
    top_files: list[TopFile] = field(default_factory=list)
    recent_activity: list[ActivityEntry] = field(default_factory=list)


def usage_percentage(used: int, limit: int) -> int:
    """Percentage of limit used, rounded half up.

    Args:
        used: Bytes used.
        limit: Byte limit.

    Returns:
        Rounded percentage, or 0 when there is no limit.
    """
    if limit <= 0:
        return 0
    return math.floor(used / limit * 100 + 0.5)


def _as_int(value: Any) -> int | None:
    """Whole number carried in free-form event data, if there is one.

    Event data is whatever clients tracked, so anything that is not a
    number or a string of digits yields None and is left out of the
    report.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def build_report(events: Iterable[AnalyticsEvent]) -> Report:
    """Fold events into a report.

    Expects events most recent first. The result depends only on the
    events and their order:

    - storage used sums ``fileSize`` of file_upload events;
    - malformed ``fileSize``, ``storageLimit`` or ``fileName`` values
      are skipped;
    - the storage limit is the last ``storageLimit`` seen while
      folding, i.e. the one carried by the oldest event that has it;
    - top files are ranked by download events per ``fileName``, ties
      keep the order in which the names were first seen;
    - recent activity is the first ten events.

    Args:
        events: Analytics events, most recent first.

    Returns:
        Report for the events.
    """
    total_events = 0
    events_by_type: dict[str, int] = {}
    storage_used = 0
    storage_limit = 0
    downloads: dict[str, int] = {}
    recent_activity: list[ActivityEntry] = []

    for event in events:
        total_events += 1
        data = event.event_data if isinstance(event.event_data, dict) else {}
        events_by_type[event.event_type] = (
            events_by_type.get(event.event_type, 0) + 1
        )

        file_size = _as_int(data.get('fileSize'))
        if event.event_type == EventType.FILE_UPLOAD and file_size:
            storage_used += file_size
        limit = _as_int(data.get('storageLimit'))
        if limit:
            storage_limit = limit

        file_name = data.get('fileName')
        if (
            event.event_type == EventType.FILE_DOWNLOAD
            and isinstance(file_name, str)
            and file_name
        ):
            downloads[file_name] = downloads.get(file_name, 0) + 1

        if len(recent_activity) < _RECENT_ACTIVITY_COUNT:
            timestamp = data.get('timestamp')
            if not isinstance(timestamp, str) or not timestamp:
                timestamp = event.timestamp.isoformat()
            recent_activity.append(ActivityEntry(
                event_type=event.event_type,
                timestamp=timestamp,
                data=data,
            ))

    # sorted() is stable: equal counts keep first-seen order
    ranked = sorted(downloads.items(), key=lambda item: item[1], reverse=True)

    return Report(
        total_events=total_events,
        events_by_type=events_by_type,
        storage_usage=StorageUsage(
            used=storage_used,
            limit=storage_limit,
            percentage=usage_percentage(storage_used, storage_limit),
        ),
        top_files=[
            TopFile(file_name=name, download_count=count)
            for name, count in ranked[:_TOP_FILES_COUNT]
        ],
        recent_activity=recent_activity,
    )


def generate_report(user: _User) -> Report:
    """Build the usage report of a user.

    Args:
        user: Owner of the events.

    Returns:
        Report over the newest CLOUDVAULT_REPORT_EVENT_CAP events.
    """
    events = AnalyticsEvent.objects.filter(user=user).order_by(
        '-timestamp',
        '-id',
    )[:settings.CLOUDVAULT_REPORT_EVENT_CAP]
    return build_report(events)
