"""Tests for usage reports."""

from datetime import timedelta

import pytest
from django.utils import timezone

from cloudvault.apps.analytics.logic.reports import (
    build_report,
    generate_report,
    usage_percentage,
)
from cloudvault.apps.analytics.models import AnalyticsEvent
from cloudvault.apps.analytics.serializers import ReportSerializer


def _events(*specs):
    """Unsaved events, most recent first."""
    now = timezone.now()
    return [
        AnalyticsEvent(
            event_type=event_type,
            event_data=data,
            timestamp=now - timedelta(seconds=index),
        )
        for index, (event_type, data) in enumerate(specs)
    ]


class TestBuildReport:
    """Tests for the report fold."""

    def test_empty(self):
        """Test a report over no events."""
        report = build_report([])

        assert report.total_events == 0
        assert report.events_by_type == {}
        assert report.storage_usage.used == 0
        assert report.storage_usage.limit == 0
        assert report.storage_usage.percentage == 0
        assert report.top_files == []
        assert report.recent_activity == []

    def test_counts_and_storage(self):
        """Test totals, per-type counts and reconstructed storage."""
        report = build_report(_events(
            ('file_upload', {'fileSize': 300, 'storageLimit': 2000}),
            ('file_download', {'fileName': 'a.txt'}),
            ('file_upload', {'fileSize': 200, 'storageLimit': 1000}),
            ('file_upload', {'fileSize': 0}),
        ))

        assert report.total_events == 4
        assert report.events_by_type == {'file_upload': 3, 'file_download': 1}
        assert report.storage_usage.used == 500
        # The oldest event carrying a limit wins
        assert report.storage_usage.limit == 1000
        assert report.storage_usage.percentage == 50

    def test_storage_ignores_other_types(self):
        """Test only uploads add to reconstructed storage."""
        report = build_report(_events(
            ('storage_usage', {'fileSize': 999, 'storageLimit': 100}),
        ))

        assert report.storage_usage.used == 0
        assert report.storage_usage.limit == 100

    def test_malformed_event_data(self):
        """Test values tracked with the wrong shape are skipped."""
        events = _events(
            ('file_upload', {'fileSize': 'abc', 'storageLimit': 'lots'}),
            ('file_upload', {'fileSize': '1.5', 'storageLimit': [1]}),
            ('file_upload', {'fileSize': True, 'storageLimit': {'x': 1}}),
            ('file_upload', {'fileSize': None, 'timestamp': ['yesterday']}),
            ('file_download', {'fileName': ['a', 'b']}),
            ('file_download', {'fileName': {'name': 'a.txt'}}),
            ('file_download', {'fileName': 7}),
            ('storage_usage', ['not', 'a', 'dict']),
            ('file_upload', {'fileSize': '40', 'storageLimit': 400.0}),
        )

        report = build_report(events)

        assert report.total_events == 9
        assert report.storage_usage.used == 40
        assert report.storage_usage.limit == 400
        assert report.storage_usage.percentage == 10
        assert report.top_files == []
        assert report.recent_activity[3].timestamp == events[3].timestamp.isoformat()
        assert report.recent_activity[7].data == {}

    def test_top_files(self):
        """Test ranking by downloads with first-seen order on ties."""
        report = build_report(_events(
            ('file_download', {'fileName': 'b.txt'}),
            ('file_download', {'fileName': 'a.txt'}),
            ('file_download', {'fileName': 'c.txt'}),
            ('file_download', {'fileName': 'c.txt'}),
            ('file_download', {}),
            ('file_upload', {'fileName': 'c.txt'}),
        ))

        assert [(top.file_name, top.download_count) for top in report.top_files] == [
            ('c.txt', 2),
            ('b.txt', 1),
            ('a.txt', 1),
        ]

    def test_top_files_capped(self):
        """Test at most five files are ranked."""
        report = build_report(_events(*[
            ('file_download', {'fileName': f'{index}.txt'})
            for index in range(8)
        ]))

        assert len(report.top_files) == 5

    def test_recent_activity(self):
        """Test the feed holds the ten newest events."""
        events = _events(*[
            ('folder_create', {'folderName': f'F{index}'})
            for index in range(12)
        ])

        report = build_report(events)

        assert len(report.recent_activity) == 10
        assert report.recent_activity[0].data['folderName'] == 'F0'
        assert report.recent_activity[0].timestamp == events[0].timestamp.isoformat()

    def test_serialized(self):
        """Test the report serializes with camelCase keys."""
        report = build_report(_events(
            ('file_download', {'fileName': 'a.txt'}),
            ('file_upload', {'fileSize': 1}),
        ))

        serialized = ReportSerializer(report).data

        assert serialized['totalEvents'] == 2
        assert serialized['topFiles'] == [
            {'fileName': 'a.txt', 'downloadCount': 1},
        ]
        assert serialized['recentActivity'][0]['eventType'] == 'file_download'
        assert serialized['storageUsage'] == {
            'used': 1,
            'limit': 0,
            'percentage': 0,
        }


@pytest.mark.parametrize(('used', 'limit', 'expected'), [
    (0, 100, 0),
    (1, 8, 13),
    (3, 8, 38),
    (1, 3, 33),
    (150, 100, 150),
    (10, 0, 0),
])
def test_usage_percentage(used, limit, expected):
    """Test rounding half up and the zero-limit case."""
    assert usage_percentage(used, limit) == expected


@pytest.mark.django_db
class TestGenerateReport:
    """Tests for generate_report."""

    def test_report_for_user(self, user, other_user):
        """Test only the user's events are folded."""
        AnalyticsEvent.objects.create(
            user=user,
            event_type='file_upload',
            event_data={'fileSize': 10, 'storageLimit': 100},
        )
        AnalyticsEvent.objects.create(
            user=other_user,
            event_type='file_upload',
            event_data={'fileSize': 99},
        )

        report = generate_report(user)

        assert report.total_events == 1
        assert report.storage_usage.percentage == 10

    def test_event_cap(self, user, settings):
        """Test the report covers only the newest events past the cap."""
        settings.CLOUDVAULT_REPORT_EVENT_CAP = 2
        now = timezone.now()
        for minutes in range(3):
            AnalyticsEvent.objects.create(
                user=user,
                event_type='file_upload',
                event_data={'fileSize': 10 ** minutes},
                timestamp=now - timedelta(minutes=minutes),
            )

        report = generate_report(user)

        assert report.total_events == 2
        assert report.storage_usage.used == 11
