"""
Redis Session Store

Production session store. Each session is a JSON string under
``<prefix><session_id>`` with a Redis TTL, so expiry needs no sweeper and
every app worker sees the same sessions.

Requirements:
    - REDIS_URL pointing at a reachable Redis server
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from menu_app.services.sessions.base import BaseSessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(BaseSessionStore):
    """
    Redis-backed session store.

    Example:
        >>> store = RedisSessionStore("redis://localhost:6379/0")
        >>> session_id = await store.create({"user_id": 1})
        >>> await store.get(session_id)
        {'user_id': 1}
    """

    def __init__(
        self,
        redis_url: str,
        ttl_seconds: int = 86400,
        key_prefix: str = "menu:session:",
        client: Optional[redis.Redis] = None,
    ):
        super().__init__(ttl_seconds)
        self._client = client or redis.from_url(redis_url, decode_responses=True)
        self._prefix = key_prefix
        logger.info(f"RedisSessionStore initialized (ttl={ttl_seconds}s)")

    @property
    def provider_name(self) -> str:
        return "redis"

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    async def create(self, data: dict[str, Any]) -> str:
        session_id = self.new_session_id()
        await self._client.set(self._key(session_id), json.dumps(data), ex=self.ttl_seconds)
        return session_id

    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        raw = await self._client.get(self._key(session_id))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session record")
            await self.delete(session_id)
            return None

    async def delete(self, session_id: str) -> None:
        await self._client.delete(self._key(session_id))

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
