from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from src.domain.ports import MediaBackend
from src.infrastructure.database.repositories.image_repository import ImageRepository
from src.infrastructure.database.supabase_client import get_supabase_client
from src.infrastructure.imaging.pillow_codec import PillowCodec
from src.infrastructure.storage.media_backend import SupabaseMediaBackend
from src.infrastructure.storage.supabase_storage import SupabaseStorage


class OutsideFill(str, Enum):
    """How versions whose source rect leaves the original are drawn."""

    # uniform canvas in the outside color, the original is not drawn
    FILL_ONLY = "fill_only"
    # outside color canvas with the overlapping part of the original scaled on top
    COMPOSITE = "composite"


@dataclass
class MediaConfig:
    backend: MediaBackend
    codec: PillowCodec = field(default_factory=PillowCodec)
    outside_fill: OutsideFill = OutsideFill.COMPOSITE

    @classmethod
    def from_env(cls, local_dir: str | Path | None = None) -> MediaConfig:
        """Build the default Supabase backed configuration from environment variables."""
        client = get_supabase_client()
        backend = SupabaseMediaBackend(
            storage=SupabaseStorage(client, local_dir=local_dir),
            images=ImageRepository(client),
        )
        mode = os.getenv("OUTSIDE_FILL_MODE", OutsideFill.COMPOSITE.value).lower()
        try:
            outside_fill = OutsideFill(mode)
        except ValueError as exc:
            raise ValueError(f"Unknown OUTSIDE_FILL_MODE {mode!r}") from exc
        return cls(
            backend=backend,
            codec=PillowCodec(os.getenv("RESAMPLE_FILTER", "lanczos")),
            outside_fill=outside_fill,
        )
