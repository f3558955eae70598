from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities.image import Image, ImageVersion
from src.domain.ports import MediaBackend
from src.infrastructure.database.repositories.image_repository import ImageRepository
from src.infrastructure.storage.supabase_storage import SupabaseStorage


@dataclass
class SupabaseMediaBackend(MediaBackend):
    """Version bytes in Supabase Storage, image records in the images table.

    Both fall back to local fakes when SUPABASE_DISABLED=1.
    """

    storage: SupabaseStorage
    images: ImageRepository

    def load_bytes(self, version: ImageVersion) -> bytes:
        return self.storage.download_bytes(version.path)

    def save_bytes(self, version: ImageVersion, data: bytes) -> None:
        self.storage.upload_bytes(version.path, data, version.content_type)

    def save_image(self, image: Image) -> None:
        self.images.save(image)

    def get_image(self, image_id: str) -> Image | None:
        return self.images.get(image_id)
