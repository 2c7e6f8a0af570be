"""
Image Storage Abstract Base Class

Defines the interface contract for meal image storage. Implementations
receive the raw bytes of one uploaded image and return a stable URI that
is stored on the meal row.

Both LocalImageStorage and SupabaseImageStorage share the validation and
file naming helpers defined here, so an image accepted in development is
accepted in production too.

Version: 1.0.0
"""

import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from werkzeug.utils import secure_filename

from menu_app.exceptions import ImageUploadError

# Allowed image MIME types
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
}

# Allowed file extensions
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


@dataclass
class StoredImage:
    """
    Result of a successful upload.

    Attributes:
        url: URI to store on the meal and render in templates
        path: Backend-specific object key
        size: Stored size in bytes
        content_type: MIME type of the stored object
    """
    url: str
    path: str
    size: int
    content_type: str


def generate_unique_filename(original_filename: str) -> str:
    """Build a collision-free object name that keeps the original extension."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    random_str = uuid.uuid4().hex[:8]
    base_name, ext = os.path.splitext(original_filename)
    safe_name = secure_filename(base_name) or "image"
    return f"{timestamp}_{random_str}_{safe_name}{ext.lower()}"


class BaseImageStorage(ABC):
    """
    Abstract base class for image storage backends.

    Example:
        >>> storage = get_image_storage()
        >>> stored = await storage.upload("curry.png", data, "image/png")
        >>> meal.meal_image = stored.url
    """

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the storage backend."""

    def validate(self, filename: str, content: bytes, content_type: str) -> None:
        """
        Check type, extension and size before anything is written.

        Raises:
            ImageUploadError: If the file is not an acceptable image
        """
        if content_type not in ALLOWED_MIME_TYPES:
            raise ImageUploadError("Invalid file type. Please upload a JPEG, PNG, WebP or GIF image.")

        ext = os.path.splitext(filename)[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ImageUploadError("Invalid file extension. Please upload a JPEG, PNG, WebP or GIF image.")

        if not content:
            raise ImageUploadError("The uploaded image is empty.")

        if len(content) > self.max_bytes:
            max_mb = self.max_bytes / 1024 / 1024
            raise ImageUploadError(f"Image too large. Maximum size: {max_mb:g}MB")

    async def upload(self, filename: str, content: bytes, content_type: str) -> StoredImage:
        """
        Validate and store an image.

        Args:
            filename: Original client-side file name
            content: Raw file bytes
            content_type: MIME type reported by the client

        Returns:
            StoredImage: Where the image was stored

        Raises:
            ImageUploadError: If validation or the backend write fails
        """
        self.validate(filename, content, content_type)
        return await self._store(generate_unique_filename(filename), content, content_type)

    @abstractmethod
    async def _store(self, object_name: str, content: bytes, content_type: str) -> StoredImage:
        """Write already-validated bytes to the backend."""

    @abstractmethod
    async def delete(self, stored: StoredImage) -> None:
        """
        Remove a previously stored image.

        Used to clean up after an upload whose meal could not be saved;
        failures are logged, not raised.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the backend is usable."""
