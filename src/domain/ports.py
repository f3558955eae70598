"""Abstract contract for the media backend."""
from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.entities.image import Image, ImageVersion


class MediaBackend(ABC):
    """Persists version bytes and image records.

    Implementations could be Supabase, local disk, PostgreSQL, etc.
    Use cases depend on this interface, not the implementation.
    """

    @abstractmethod
    def load_bytes(self, version: ImageVersion) -> bytes:
        """Return the stored bytes of a version.

        Raises:
            StorageError: If the bytes cannot be read
        """

    @abstractmethod
    def save_bytes(self, version: ImageVersion, data: bytes) -> None:
        """Store the bytes of a version under version.path.

        Raises:
            StorageError: If the upload fails
        """

    @abstractmethod
    def save_image(self, image: Image) -> None:
        """Insert or replace the image record, including its version list.

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def get_image(self, image_id: str) -> Image | None:
        """Load an image record, or None if it does not exist.

        Raises:
            StorageError: If the read fails
        """
