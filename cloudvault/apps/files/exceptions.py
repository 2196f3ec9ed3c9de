"""Error kinds raised by the cloudvault business logic.

Every error carries a stable ``code`` that the entry points put into
their result envelope, and a human-readable message.
"""

from typing import ClassVar


class VaultError(Exception):
    """Base class for all expected cloudvault failures."""

    code: ClassVar[str] = 'error'

    def __init__(self, message: str) -> None:
        """Initialize VaultError.

        Args:
            message: Human-readable description of the failure.
        """
        self.message = message
        super().__init__(message)


class NotFoundError(VaultError):
    """Referenced entity is absent or not visible to the caller."""

    code = 'not_found'


class ForbiddenError(VaultError):
    """Entity exists but belongs to a different user."""

    code = 'forbidden'


class InvalidArgumentError(VaultError):
    """Missing or malformed required field."""

    code = 'invalid_argument'


class SharingDisabledError(VaultError):
    """Share requested on a file with sharing turned off."""

    code = 'sharing_disabled'


class LinkInvalidError(VaultError):
    """Share token is unknown, revoked, expired or exhausted.

    The message never says which of these applies.
    """

    code = 'link_invalid'

    def __init__(self) -> None:
        """Initialize LinkInvalidError with the generic message."""
        super().__init__('Share link is invalid or no longer available')


class DependencyUnavailableError(VaultError):
    """Blob store or metadata store call failed."""

    code = 'dependency_unavailable'


class CorruptHierarchyError(VaultError):
    """Folder path resolution exceeded the depth guard."""

    code = 'corrupt_hierarchy'


class QuotaExceededError(VaultError):
    """Raised when upload would exceed user's storage quota.

    Only raised while quota enforcement is switched on; otherwise the
    upload proceeds and its result carries a quota note instead.
    """

    code = 'quota_exceeded'

    def __init__(
        self,
        quota_bytes: int,
        used_bytes: int,
        required_bytes: int,
    ) -> None:
        """Initialize QuotaExceededError.

        Args:
            quota_bytes: Total quota limit in bytes.
            used_bytes: Currently used bytes.
            required_bytes: Bytes needed for the operation.
        """
        self.quota_bytes = quota_bytes
        self.used_bytes = used_bytes
        self.required_bytes = required_bytes

        available = quota_bytes - used_bytes
        super().__init__(
            f'Quota exceeded: need {required_bytes} bytes, '
            f'only {available} bytes available '
            f'(quota: {quota_bytes}, used: {used_bytes})',
        )
