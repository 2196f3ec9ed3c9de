"""Django storage configuration for the S3-compatible blob store.

The blob store holds file contents, folder placeholders and image
thumbnails. MinIO works for local development, any S3-compatible
service in production; both use the same S3Storage backend.
"""

from typing import Any, Final

from botocore.config import Config

from cloudvault.settings.components import config

# Metadata calls are short; large transfers get minutes, not seconds
_BLOB_CLIENT_CONFIG: Final = Config(
    connect_timeout=config('BLOB_CONNECT_TIMEOUT', cast=int, default=10),
    read_timeout=config('BLOB_READ_TIMEOUT', cast=int, default=300),
    retries={'max_attempts': 3, 'mode': 'standard'},
)

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'cloudvault.apps.files.infrastructure.storage.BlobStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='cloudvault',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='testing'),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default='testing'),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'client_config': _BLOB_CLIENT_CONFIG,
            'file_overwrite': False,  # Prevent accidental overwrites
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
