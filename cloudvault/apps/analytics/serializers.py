"""Serializers of the analytics app API."""

from rest_framework import serializers

from cloudvault.apps.analytics.models import AnalyticsEvent, EventType


class AnalyticsEventSerializer(serializers.ModelSerializer):
    """Analytics event as returned by the API."""

    eventType = serializers.CharField(source='event_type', read_only=True)  # noqa: N815
    eventData = serializers.JSONField(source='event_data', read_only=True)  # noqa: N815

    class Meta:
        model = AnalyticsEvent
        fields = ('id', 'eventType', 'eventData', 'timestamp')
        read_only_fields = fields


class TrackEventSerializer(serializers.Serializer):
    """Body of a track request. eventData is free-form per event type."""

    eventType = serializers.ChoiceField(choices=EventType.choices)  # noqa: N815
    eventData = serializers.DictField(required=False, default=dict)  # noqa: N815


class EventQueryParamsSerializer(serializers.Serializer):
    """Filters of an event query."""

    eventType = serializers.ChoiceField(  # noqa: N815
        choices=EventType.choices,
        required=False,
        allow_null=True,
        default=None,
    )
    startDate = serializers.DateTimeField(  # noqa: N815
        required=False,
        allow_null=True,
        default=None,
    )
    endDate = serializers.DateTimeField(  # noqa: N815
        required=False,
        allow_null=True,
        default=None,
    )
    limit = serializers.IntegerField(
        required=False,
        allow_null=True,
        default=None,
    )


class StorageUsageSerializer(serializers.Serializer):
    used = serializers.IntegerField()
    limit = serializers.IntegerField()
    percentage = serializers.IntegerField()


class TopFileSerializer(serializers.Serializer):
    fileName = serializers.CharField(source='file_name')  # noqa: N815
    downloadCount = serializers.IntegerField(source='download_count')  # noqa: N815


class ActivityEntrySerializer(serializers.Serializer):
    eventType = serializers.CharField(source='event_type')  # noqa: N815
    timestamp = serializers.CharField()
    data = serializers.JSONField()


class ReportSerializer(serializers.Serializer):
    """Usage report folded from the user's events."""

    totalEvents = serializers.IntegerField(source='total_events')  # noqa: N815
    eventsByType = serializers.DictField(  # noqa: N815
        source='events_by_type',
        child=serializers.IntegerField(),
    )
    storageUsage = StorageUsageSerializer(source='storage_usage')  # noqa: N815
    topFiles = TopFileSerializer(source='top_files', many=True)  # noqa: N815
    recentActivity = ActivityEntrySerializer(  # noqa: N815
        source='recent_activity',
        many=True,
    )
