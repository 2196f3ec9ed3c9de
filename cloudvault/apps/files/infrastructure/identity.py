"""Identity provider adapter and auth-state subscriptions.

Authentication itself (sign-up, confirmation, sign-in, password reset)
belongs to the identity provider. This module only reads the current
identity and lets components react to sign-in/sign-out transitions
through an explicitly passed registry.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, final

if TYPE_CHECKING:
    from django.http import HttpRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IdentityUser:
    """Verified identity as reported by the identity provider."""

    id: str
    email: str
    first_name: str
    last_name: str
    email_verified: bool


AuthStateCallback = Callable[[IdentityUser | None], None]


def identity_from_user(user: Any) -> IdentityUser:
    """Identity of a Django user; the id is the username."""
    return IdentityUser(
        id=user.get_username(),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        email_verified=user.is_active,
    )


class IdentityProvider(Protocol):
    """Read-only view of the identity provider."""

    def get_current_user(self) -> IdentityUser | None:
        """Return the signed-in identity, or None."""


@final
class DjangoIdentityProvider:
    """Identity provider backed by Django's session authentication."""

    def __init__(self, request: 'HttpRequest') -> None:
        """Initialize the provider for one request.

        Args:
            request: Incoming HTTP request.
        """
        self._request = request

    def get_current_user(self) -> IdentityUser | None:
        """Return the identity of the request's user.

        Returns:
            IdentityUser, or None for anonymous requests.
        """
        user = self._request.user
        if not user.is_authenticated:
            return None
        return identity_from_user(user)


@final
class Subscription:
    """Handle returned by AuthStateRegistry.subscribe."""

    def __init__(
        self,
        registry: 'AuthStateRegistry',
        callback: AuthStateCallback,
    ) -> None:
        """Initialize the handle.

        Args:
            registry: Registry the callback is subscribed to.
            callback: Subscribed callback.
        """
        self._registry = registry
        self._callback = callback

    def unsubscribe(self) -> None:
        """Stop receiving notifications. Safe to call more than once."""
        self._registry.remove(self._callback)


@final
class AuthStateRegistry:
    """Callbacks invoked synchronously on auth state transitions.

    There is no module-level instance: whoever needs notifications
    receives the registry as a constructor or function argument.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._callbacks: list[AuthStateCallback] = []

    def subscribe(self, callback: AuthStateCallback) -> Subscription:
        """Register a callback.

        Args:
            callback: Called with the new identity, or None on sign-out.

        Returns:
            Subscription handle for unsubscribing.
        """
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def remove(self, callback: AuthStateCallback) -> None:
        """Drop a callback if it is registered.

        Args:
            callback: Previously subscribed callback.
        """
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def notify(self, identity: IdentityUser | None) -> None:
        """Invoke every callback with the new auth state.

        Callbacks run in subscription order. A failing callback is
        logged and does not prevent the others from running.

        Args:
            identity: Signed-in identity, or None after sign-out.
        """
        for callback in list(self._callbacks):
            try:
                callback(identity)
            except Exception:
                logger.exception('Auth state callback failed: %r', callback)

    def __len__(self) -> int:
        """Number of registered callbacks."""
        return len(self._callbacks)
