"""
Supabase Storage Image Backend

Production implementation using the Supabase Python client.
Used when ENV_MODE=production or ENV_MODE=staging (or STORAGE_BACKEND=supabase).

Requirements:
    - SUPABASE_URL and SUPABASE_KEY must be set in environment
    - SUPABASE_BUCKET must exist and be public
"""

import logging
from typing import Optional

import anyio
from supabase import Client, create_client

from menu_app.core.config import get_settings
from menu_app.exceptions import ImageUploadError
from menu_app.services.storage.base import BaseImageStorage, StoredImage

logger = logging.getLogger(__name__)


class SupabaseImageStorage(BaseImageStorage):
    """
    Uploads images to a Supabase Storage bucket and returns the public URL.

    The Supabase client is synchronous; calls run in a worker thread.
    """

    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        """
        Initialize the Supabase client from settings.

        Raises:
            ValueError: If SUPABASE_URL or SUPABASE_KEY is not configured
        """
        settings = get_settings()
        super().__init__(settings.max_upload_bytes)

        if client is None:
            if not settings.supabase_url or not settings.supabase_key:
                raise ValueError(
                    "SUPABASE_URL and SUPABASE_KEY are required for Supabase storage. "
                    "Set them in your .env file or environment variables."
                )
            client = create_client(settings.supabase_url, settings.supabase_key)

        self._client = client
        self._bucket = bucket or settings.supabase_bucket
        logger.info(f"SupabaseImageStorage initialized (bucket={self._bucket})")

    @property
    def provider_name(self) -> str:
        return "supabase"

    def _upload_sync(self, object_name: str, content: bytes, content_type: str) -> str:
        storage = self._client.storage.from_(self._bucket)
        storage.upload(
            path=object_name,
            file=content,
            file_options={"content-type": content_type},
        )
        return storage.get_public_url(object_name)

    async def _store(self, object_name: str, content: bytes, content_type: str) -> StoredImage:
        try:
            public_url = await anyio.to_thread.run_sync(
                self._upload_sync, object_name, content, content_type
            )
        except Exception as e:
            logger.error(f"Supabase upload of {object_name} failed: {e}", exc_info=True)
            raise ImageUploadError("The image could not be uploaded. Please try again.") from e

        logger.info(f"Uploaded image {object_name} to bucket {self._bucket}")
        return StoredImage(
            url=public_url,
            path=object_name,
            size=len(content),
            content_type=content_type,
        )

    async def delete(self, stored: StoredImage) -> None:
        try:
            await anyio.to_thread.run_sync(
                self._client.storage.from_(self._bucket).remove, [stored.path]
            )
        except Exception as e:
            logger.warning(f"Could not remove {stored.path} from bucket {self._bucket}: {e}")
            return
        logger.info(f"Removed image {stored.path} from bucket {self._bucket}")

    async def health_check(self) -> bool:
        try:
            await anyio.to_thread.run_sync(self._client.storage.get_bucket, self._bucket)
            return True
        except Exception as e:
            logger.error(f"Supabase storage health check failed: {e}")
            return False
