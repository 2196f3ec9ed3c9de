"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Blob store backend (S3/MinIO)
- Metadata extraction (MIME sniffing, checksum, image dimensions)
- Identity provider adapter and auth-state subscriptions

Keep infrastructure concerns separate from business logic.
"""
