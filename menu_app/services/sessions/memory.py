"""
In-Memory Session Store

Keeps sessions in a process-local dict. Used in development and tests
(ENV_MODE=development/testing); sessions do not survive a restart and are
not shared between worker processes.
"""

import logging
import time
from typing import Any, Callable, Optional

from menu_app.services.sessions.base import BaseSessionStore

logger = logging.getLogger(__name__)


class MemorySessionStore(BaseSessionStore):
    """Dict-backed session store with lazy expiry."""

    def __init__(self, ttl_seconds: int = 86400, clock: Callable[[], float] = time.monotonic):
        super().__init__(ttl_seconds)
        self._clock = clock
        self._sessions: dict[str, tuple[float, dict[str, Any]]] = {}
        logger.info(f"MemorySessionStore initialized (ttl={ttl_seconds}s)")

    @property
    def provider_name(self) -> str:
        return "memory"

    async def create(self, data: dict[str, Any]) -> str:
        session_id = self.new_session_id()
        self._sessions[session_id] = (self._clock() + self.ttl_seconds, dict(data))
        return session_id

    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        expires_at, data = entry
        if expires_at <= self._clock():
            self._sessions.pop(session_id, None)
            return None
        return dict(data)

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def health_check(self) -> bool:
        return True
