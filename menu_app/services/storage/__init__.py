"""
Image Storage Factory

Returns LocalImageStorage or SupabaseImageStorage depending on configuration.

Usage:
    from menu_app.services.storage import get_image_storage

    storage = get_image_storage()
    stored = await storage.upload(upload.filename, data, upload.content_type)

Environment Switching:
    - ENV_MODE=development/testing → LocalImageStorage
    - ENV_MODE=staging/production → SupabaseImageStorage
    - STORAGE_BACKEND overrides the default
"""

import logging
from functools import lru_cache

from menu_app.core.config import StorageBackend, get_settings
from menu_app.services.storage.base import (
    ALLOWED_EXTENSIONS,
    ALLOWED_MIME_TYPES,
    BaseImageStorage,
    StoredImage,
)
from menu_app.services.storage.local import LocalImageStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_image_storage() -> BaseImageStorage:
    """
    Get the configured image storage instance.

    Raises:
        ValueError: If Supabase is selected but not configured
    """
    settings = get_settings()

    if settings.effective_storage_backend == StorageBackend.SUPABASE:
        # Imported lazily so development installs need no Supabase credentials
        from menu_app.services.storage.supabase_store import SupabaseImageStorage

        logger.info("Image Storage: Using SupabaseImageStorage")
        return SupabaseImageStorage()

    logger.info(f"Image Storage: Using LocalImageStorage ({settings.env_mode.value} mode)")
    return LocalImageStorage(
        settings.upload_directory,
        url_prefix=settings.upload_url_prefix,
        max_bytes=settings.max_upload_bytes,
    )


def reset_image_storage() -> None:
    """Clear the cached storage instance."""
    get_image_storage.cache_clear()
    logger.debug("Image storage cache cleared")


__all__ = [
    "get_image_storage",
    "reset_image_storage",
    "BaseImageStorage",
    "LocalImageStorage",
    "StoredImage",
    "ALLOWED_EXTENSIONS",
    "ALLOWED_MIME_TYPES",
]
