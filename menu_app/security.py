"""
Password Hashing

bcrypt with a configurable work factor. Hashing and verification are
CPU-bound, so the async helpers run them in a worker thread to keep the
event loop free for other requests.
"""

import logging
from typing import Optional

import anyio
import bcrypt

from menu_app.core.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a plaintext password with a random salt.

    Args:
        password: Plaintext password
        rounds: bcrypt log2 work factor (defaults to BCRYPT_ROUNDS setting)

    Returns:
        str: Encoded bcrypt hash (``$2b$...``)
    """
    rounds = rounds or get_settings().bcrypt_rounds
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a plaintext password against a stored hash in constant time."""
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash has an invalid format")
        return False


async def hash_password_async(password: str) -> str:
    return await anyio.to_thread.run_sync(hash_password, password)


async def verify_password_async(password: str, hashed: str) -> bool:
    return await anyio.to_thread.run_sync(verify_password, password, hashed)
