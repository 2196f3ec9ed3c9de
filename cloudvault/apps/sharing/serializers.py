"""Serializers of the sharing app API."""

from rest_framework import serializers

from cloudvault.apps.sharing.models import ShareLink


class ShareLinkSerializer(serializers.ModelSerializer):
    """Share link as shown to its issuer."""

    fileId = serializers.UUIDField(source='file_id', read_only=True)  # noqa: N815
    recipients = serializers.ListField(read_only=True)
    expiresAt = serializers.DateTimeField(source='expires_at', read_only=True)  # noqa: N815
    downloadLimit = serializers.IntegerField(  # noqa: N815
        source='download_limit',
        read_only=True,
    )
    downloadCount = serializers.IntegerField(  # noqa: N815
        source='download_count',
        read_only=True,
    )
    isActive = serializers.BooleanField(source='is_active', read_only=True)  # noqa: N815
    isExhausted = serializers.BooleanField(  # noqa: N815
        source='is_exhausted',
        read_only=True,
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)  # noqa: N815

    class Meta:
        model = ShareLink
        fields = (
            'id',
            'fileId',
            'token',
            'recipients',
            'expiresAt',
            'downloadLimit',
            'downloadCount',
            'isActive',
            'isExhausted',
            'createdAt',
        )
        read_only_fields = fields


class ShareLinkCreateSerializer(serializers.Serializer):
    """Body of a share link request; limits are checked by the logic layer."""

    fileId = serializers.UUIDField()  # noqa: N815
    expiresAt = serializers.DateTimeField(  # noqa: N815
        required=False,
        allow_null=True,
        default=None,
    )
    downloadLimit = serializers.IntegerField(  # noqa: N815
        required=False,
        allow_null=True,
        default=None,
    )
    recipients = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=list,
    )


class ShareLinkListParamsSerializer(serializers.Serializer):
    """Query parameters of the share link listing."""

    fileId = serializers.UUIDField(required=False, allow_null=True, default=None)  # noqa: N815
