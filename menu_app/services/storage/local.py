"""
Local Filesystem Image Storage

Writes uploaded images under UPLOAD_DIRECTORY; the application serves that
directory at UPLOAD_URL_PREFIX. Used in development and tests so the
catalog can be managed without object-storage credentials.
"""

import logging
from functools import partial
from pathlib import Path

import anyio

from menu_app.exceptions import ImageUploadError
from menu_app.services.storage.base import BaseImageStorage, StoredImage

logger = logging.getLogger(__name__)


class LocalImageStorage(BaseImageStorage):
    """Stores images as plain files."""

    def __init__(self, directory: str, url_prefix: str = "/uploads", max_bytes: int = 5 * 1024 * 1024):
        super().__init__(max_bytes)
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalImageStorage initialized (directory={self.directory})")

    @property
    def provider_name(self) -> str:
        return "local"

    async def _store(self, object_name: str, content: bytes, content_type: str) -> StoredImage:
        target = self.directory / object_name
        try:
            await anyio.to_thread.run_sync(target.write_bytes, content)
        except OSError as e:
            logger.error(f"Could not write image {target}: {e}")
            raise ImageUploadError("The image could not be saved. Please try again.") from e

        logger.info(f"Stored image {object_name} ({len(content)} bytes)")
        return StoredImage(
            url=f"{self.url_prefix}/{object_name}",
            path=str(target),
            size=len(content),
            content_type=content_type,
        )

    async def delete(self, stored: StoredImage) -> None:
        try:
            await anyio.to_thread.run_sync(partial(Path(stored.path).unlink, missing_ok=True))
        except OSError as e:
            logger.warning(f"Could not remove image {stored.path}: {e}")
            return
        logger.info(f"Removed image {stored.path}")

    async def health_check(self) -> bool:
        return self.directory.is_dir()
