"""
Identity providers.

The engine only needs the current user's id; how the session was obtained
is the auth layer's business.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Identity:
    """Authenticated account reference."""
    id: str
    email: str | None = None


@runtime_checkable
class IdentityProvider(Protocol):
    async def get_current_identity(self) -> Identity | None:
        ...


class StaticIdentityProvider:
    """
    Identity known up front.

    Used by the HTTP router after the bearer token has been validated, and
    by the CLI with the configured dev user. `None` means signed out.
    """

    def __init__(self, user_id: str | None, email: str | None = None):
        self._identity = Identity(id=user_id, email=email) if user_id else None

    async def get_current_identity(self) -> Identity | None:
        return self._identity

