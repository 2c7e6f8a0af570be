"""
Session Store Abstract Base Class

Defines the interface contract for server-side session storage.
A session is an opaque random identifier (carried in a cookie) mapped to
a small JSON-serializable record. The authenticated user is stored by id
only and re-resolved on every request.

Design Pattern: Strategy Pattern
    - MemorySessionStore for development and tests
    - RedisSessionStore for staging and production

Version: 1.0.0
"""

import secrets
from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseSessionStore(ABC):
    """
    Abstract base class for session stores.

    Implementations must be safe to share between concurrent requests.
    """

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the backend (e.g. "memory", "redis")."""

    @staticmethod
    def new_session_id() -> str:
        """Generate an unguessable session identifier."""
        return secrets.token_urlsafe(32)

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> str:
        """
        Persist a new session record.

        Args:
            data: JSON-serializable session payload

        Returns:
            str: The new session identifier
        """

    @abstractmethod
    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        """Return the session record, or None when unknown or expired."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Destroy a session. Unknown identifiers are ignored."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the backend is reachable."""

    async def close(self) -> None:
        """Release backend resources at shutdown."""
