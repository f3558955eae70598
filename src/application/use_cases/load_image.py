from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities.image import Image, ImageVersion
from src.domain.errors import ImageNotFoundError
from src.infrastructure.config import MediaConfig


@dataclass
class LoadImageUseCase:
    config: MediaConfig

    def execute(self, image_id: str) -> Image:
        image = self.config.backend.get_image(image_id)
        if image is None:
            raise ImageNotFoundError(f"Image not found: {image_id}")
        return image

    def version_bytes(self, version: ImageVersion) -> bytes:
        return self.config.backend.load_bytes(version)
