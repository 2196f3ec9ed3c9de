"""Result types returned by cloudvault operations.

``OperationResult`` is what every entry point hands back to its caller:
success flag, human-readable message, error code and payload. The
``entrypoint`` decorator produces it, so no exception escapes the
topmost layer.

``BulkResult`` reports partial-failure operations item by item.
"""

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, ParamSpec, TypeVar

from cloudvault.apps.files.exceptions import (
    DependencyUnavailableError,
    VaultError,
)

logger = logging.getLogger(__name__)

_P = ParamSpec('_P')
_T = TypeVar('_T')


@dataclass(slots=True)
class OperationResult(Generic[_T]):
    """Outcome of one public operation."""

    success: bool
    message: str
    data: _T | None = None
    code: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses.

        Returns:
            Dictionary with success, message and either data or error code.
        """
        payload: dict[str, Any] = {
            'success': self.success,
            'message': self.message,
        }
        if self.success:
            payload['data'] = self.data
        else:
            payload['error'] = self.code
        return payload


@dataclass(slots=True)
class ItemFailure:
    """One item a bulk operation could not process."""

    item_id: str
    error: str


@dataclass(slots=True)
class BulkResult:
    """Per-item outcome of a partial-failure-tolerant operation."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[ItemFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when no item failed."""
        return not self.failed

    def add_success(self, item_id: object) -> None:
        """Record a processed item."""
        self.succeeded.append(str(item_id))

    def add_failure(self, item_id: object, error: BaseException) -> None:
        """Record an item that could not be processed."""
        self.failed.append(ItemFailure(item_id=str(item_id), error=str(error)))

    def merge(self, other: 'BulkResult') -> None:
        """Append another result's items to this one."""
        self.succeeded.extend(other.succeeded)
        self.failed.extend(other.failed)

    def as_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            'succeeded': list(self.succeeded),
            'failed': [
                {'id': failure.item_id, 'error': failure.error}
                for failure in self.failed
            ],
        }


def entrypoint(
    success_message: str,
) -> Callable[[Callable[_P, _T]], Callable[_P, OperationResult[_T]]]:
    """Wrap an operation so it always returns an OperationResult.

    VaultError subclasses become failures carrying their own code and
    message. Anything else is logged with its traceback and reported as
    'dependency_unavailable' with the underlying message preserved.

    Args:
        success_message: Message used when the operation succeeds.

    Returns:
        Decorator.
    """
    def decorator(
        operation: Callable[_P, _T],
    ) -> Callable[_P, OperationResult[_T]]:
        @functools.wraps(operation)
        def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> OperationResult[_T]:
            try:
                data = operation(*args, **kwargs)
            except VaultError as error:
                logger.info(
                    '%s failed: %s (%s)',
                    operation.__name__,
                    error.message,
                    error.code,
                )
                return OperationResult(
                    success=False,
                    message=error.message,
                    code=error.code,
                )
            except Exception as error:
                logger.exception('%s failed unexpectedly', operation.__name__)
                return OperationResult(
                    success=False,
                    message=str(error) or error.__class__.__name__,
                    code=DependencyUnavailableError.code,
                )
            return OperationResult(
                success=True,
                message=success_message,
                data=data,
            )
        return wrapper
    return decorator
