"""
Session Store Factory

Returns MemorySessionStore or RedisSessionStore depending on configuration.

Usage:
    from menu_app.services.sessions import get_session_store

    store = get_session_store()
    session_id = await store.create({"user_id": user.id})

Environment Switching:
    - ENV_MODE=development/testing → MemorySessionStore
    - ENV_MODE=staging/production → RedisSessionStore
    - SESSION_BACKEND overrides the default
"""

import logging
from functools import lru_cache

from menu_app.core.config import SessionBackend, get_settings
from menu_app.services.sessions.base import BaseSessionStore
from menu_app.services.sessions.memory import MemorySessionStore
from menu_app.services.sessions.redis_store import RedisSessionStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_session_store() -> BaseSessionStore:
    """
    Get the configured session store instance.

    The instance is cached so every request shares the same store.
    """
    settings = get_settings()

    if settings.effective_session_backend == SessionBackend.REDIS:
        logger.info("Session Store: Using RedisSessionStore")
        return RedisSessionStore(settings.redis_url, ttl_seconds=settings.session_ttl_seconds)

    logger.info(f"Session Store: Using MemorySessionStore ({settings.env_mode.value} mode)")
    return MemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


def reset_session_store() -> None:
    """
    Clear the cached session store instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_session_store.cache_clear()
    logger.debug("Session store cache cleared")


__all__ = [
    "get_session_store",
    "reset_session_store",
    "BaseSessionStore",
    "MemorySessionStore",
    "RedisSessionStore",
]
