"""CloudVault application settings."""

from cloudvault.settings.components import config

# Per-user storage ceiling in bytes for newly provisioned accounts
CLOUDVAULT_DEFAULT_STORAGE_LIMIT = config(
    'CLOUDVAULT_DEFAULT_STORAGE_LIMIT',
    cast=int,
    default=15728640,
)

# False keeps the quota advisory: uploads past the limit still succeed
CLOUDVAULT_ENFORCE_QUOTA = config(
    'CLOUDVAULT_ENFORCE_QUOTA',
    cast=bool,
    default=False,
)

# Random bytes behind every share token (URL-safe base64 encoded)
CLOUDVAULT_SHARE_TOKEN_BYTES = config(
    'CLOUDVAULT_SHARE_TOKEN_BYTES',
    cast=int,
    default=32,
)

CLOUDVAULT_MAX_FOLDER_DEPTH = config(
    'CLOUDVAULT_MAX_FOLDER_DEPTH',
    cast=int,
    default=64,
)

CLOUDVAULT_RECURSIVE_FOLDER_DELETE = config(
    'CLOUDVAULT_RECURSIVE_FOLDER_DELETE',
    cast=bool,
    default=True,
)

# Analytics
CLOUDVAULT_TRACK_EVENTS = config(
    'CLOUDVAULT_TRACK_EVENTS',
    cast=bool,
    default=True,
)
CLOUDVAULT_REPORT_EVENT_CAP = config(
    'CLOUDVAULT_REPORT_EVENT_CAP',
    cast=int,
    default=1000,
)
CLOUDVAULT_QUERY_DEFAULT_LIMIT = config(
    'CLOUDVAULT_QUERY_DEFAULT_LIMIT',
    cast=int,
    default=100,
)

# Image thumbnails (fit-within box, JPEG quality)
CLOUDVAULT_THUMBNAIL_SIZE = (300, 300)
CLOUDVAULT_THUMBNAIL_QUALITY = 80

# Blob backups under backups/{backupId}/ older than this are purged
CLOUDVAULT_BACKUP_RETENTION_DAYS = config(
    'CLOUDVAULT_BACKUP_RETENTION_DAYS',
    cast=int,
    default=30,
)
