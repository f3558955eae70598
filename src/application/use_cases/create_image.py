from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath

from src.domain.entities.image import Image, ImageVersion, Rect, new_image_id
from src.infrastructure.config import MediaConfig

logger = logging.getLogger(__name__)

_EXTENSIONS = {"jpeg": "jpg"}


def storage_path(image_id: str, fmt: str) -> str:
    return f"{image_id}/{uuid.uuid4()}.{_EXTENSIONS.get(fmt, fmt)}"


@dataclass
class CreateImageUseCase:
    config: MediaConfig

    def execute(
        self,
        filename: str,
        data: bytes,
        *,
        description: str | None = None,
        link: str | None = None,
    ) -> Image:
        """
        Ingest a new original and persist it as version 0 of a new Image.

        GIF, TIFF, BMP and other non PNG/JPEG uploads are decoded, re-encoded as
        PNG and decoded again, so the stored bytes, the ".png" filename suffix
        and the reported width/height/content type always agree.

        Raises DecodeError for unreadable bytes and StorageError when saving fails.
        """
        codec = self.config.codec
        decoded = codec.decode(data)
        filename = PurePosixPath(filename.replace("\\", "/")).name or "image"
        if not decoded.native:
            logger.warning(f"Normalizing {decoded.format} upload {filename!r} to png")
            data = codec.encode(decoded.array, "png")
            filename += ".png"
            decoded = codec.decode(data)

        image_id = new_image_id()
        original = ImageVersion(
            path=storage_path(image_id, decoded.format),
            filename=filename,
            content_type=decoded.content_type,
            source_rect=Rect.from_size(decoded.width, decoded.height),
            width=decoded.width,
            height=decoded.height,
            grayscale=decoded.grayscale,
            file_size=len(data),
        )
        image = Image(versions=[original], id=image_id, description=description, link=link)

        backend = self.config.backend
        backend.save_bytes(image.original, data)
        backend.save_image(image)
        logger.info(
            f"Created image {image.id} from {filename!r} "
            f"({image.width}x{image.height}, {image.content_type}, grayscale={image.grayscale})"
        )
        return image
