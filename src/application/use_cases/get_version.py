from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from src.application.image_locks import ImageLocks, default_image_locks
from src.application.use_cases.create_image import storage_path
from src.domain.entities.image import (
    RGBA,
    TRANSPARENT,
    HorAlignment,
    Image,
    ImageVersion,
    Rect,
    VerAlignment,
    VersionKey,
)
from src.domain.errors import DecodeError, StorageError
from src.domain.services.geometry_service import GeometryService
from src.domain.services.rendering_service import RenderingService
from src.infrastructure.config import MediaConfig, OutsideFill

logger = logging.getLogger(__name__)


@dataclass
class GetVersionUseCase:
    config: MediaConfig
    locks: ImageLocks = field(default_factory=default_image_locks)
    geometry: GeometryService = field(default_factory=GeometryService)
    rendering: RenderingService = field(default_factory=RenderingService)

    def execute(
        self,
        image: Image,
        width: int,
        height: int,
        hor_align: HorAlignment | str = HorAlignment.CENTER,
        ver_align: VerAlignment | str = VerAlignment.CENTER,
        grayscale: bool = False,
    ) -> ImageVersion:
        """Version of width x height sampled from inside the original (no outside fill)."""
        rect = self.geometry.touch_from_inside(
            image.width, image.height, width, height, HorAlignment(hor_align), VerAlignment(ver_align)
        )
        return self.source_rect_version(image, rect, width, height, grayscale, TRANSPARENT)

    def covering_outside(
        self,
        image: Image,
        width: int,
        height: int,
        hor_align: HorAlignment | str = HorAlignment.CENTER,
        ver_align: VerAlignment | str = VerAlignment.CENTER,
        grayscale: bool = False,
        outside_color: RGBA | str = TRANSPARENT,
    ) -> ImageVersion:
        """Version of width x height whose source rect contains the whole original."""
        rect = self.geometry.touch_from_outside(
            image.width, image.height, width, height, HorAlignment(hor_align), VerAlignment(ver_align)
        )
        if isinstance(outside_color, str):
            outside_color = RGBA.from_hex(outside_color)
        return self.source_rect_version(image, rect, width, height, grayscale, outside_color)

    def centered(self, image: Image, width: int, height: int, grayscale: bool = False) -> ImageVersion:
        return self.execute(image, width, height, HorAlignment.CENTER, VerAlignment.CENTER, grayscale)

    def centered_covering_outside(
        self,
        image: Image,
        width: int,
        height: int,
        grayscale: bool = False,
        outside_color: RGBA | str = TRANSPARENT,
    ) -> ImageVersion:
        return self.covering_outside(
            image, width, height, HorAlignment.CENTER, VerAlignment.CENTER, grayscale, outside_color
        )

    def source_rect_version(
        self,
        image: Image,
        source_rect: Rect,
        width: int,
        height: int,
        grayscale: bool,
        outside_color: RGBA,
    ) -> ImageVersion:
        """
        Return the existing version matching the request exactly, or create and save one.

        The lookup and the creation run under the image's lock, so concurrent
        requests for the same key materialize it once. On a miss the saved record
        is reloaded first and its versions merged in, so copies of the same image
        loaded separately neither duplicate a version nor drop each other's on save.

        If saving fails after the new version was appended, the version stays in
        image.versions and a StorageError is raised: the in-memory image and the
        backend may then disagree.
        """
        self.geometry.validate_size(width, height)
        key = VersionKey(
            source_rect, int(width), int(height), image.normalize_grayscale(grayscale), RGBA(*outside_color)
        )
        with self.locks.hold(image.id):
            version = image.find_version(key)
            if version is None:
                self._refresh(image)
                version = image.find_version(key)
            if version is not None:
                logger.debug(f"Version hit for image {image.id}: {version.path}")
                return version
            return self._materialize(image, key)

    def _refresh(self, image: Image) -> None:
        stored = self.config.backend.get_image(image.id)
        if stored is None:
            return
        merged = image.merge_versions(stored.versions)
        if merged:
            logger.debug(f"Merged {len(merged)} saved versions into image {image.id}")

    def _materialize(self, image: Image, key: VersionKey) -> ImageVersion:
        backend = self.config.backend
        codec = self.config.codec

        data = backend.load_bytes(image.original)
        try:
            original = codec.decode(data).array
        except DecodeError as exc:
            raise StorageError(f"Stored original of image {image.id} is unreadable: {exc}") from exc

        pixels = self._render(image, original, key)
        fmt = image.content_type.split("/", 1)[-1]
        encoded = codec.encode(pixels, fmt)

        version = image.add_version(
            ImageVersion(
                path=storage_path(image.id, fmt),
                filename=image.filename,
                content_type=image.content_type,
                source_rect=key.source_rect,
                width=key.width,
                height=key.height,
                grayscale=key.grayscale,
                outside_color=key.outside_color,
                file_size=len(encoded),
            )
        )
        try:
            backend.save_bytes(version, encoded)
            backend.save_image(image)
        except StorageError:
            logger.error(
                f"Saving version {version.path} of image {image.id} failed, "
                "in-memory versions and backend may have diverged"
            )
            raise
        logger.info(
            f"Materialized {key.width}x{key.height} version of image {image.id} "
            f"from {key.source_rect.as_box()} (grayscale={key.grayscale})"
        )
        return version

    def _render(self, image: Image, original: np.ndarray, key: VersionKey) -> np.ndarray:
        if key.source_rect.is_inside(image.rectangle):
            pixels = self.config.codec.resample(original, key.source_rect, key.width, key.height)
            if key.grayscale:
                pixels = self.rendering.grayscale_luminosity(pixels)
            return pixels

        canvas = self.rendering.filled_canvas(key.width, key.height, key.outside_color, key.grayscale)
        if self.config.outside_fill is OutsideFill.FILL_ONLY:
            return canvas
        overlap = key.source_rect.intersect(image.rectangle)
        box = self.rendering.destination_box(key.source_rect, overlap, key.width, key.height)
        if overlap.empty or box.empty:
            return canvas
        patch = self.config.codec.resample(original, overlap, box.width, box.height)
        return self.rendering.paste(canvas, patch, box)
