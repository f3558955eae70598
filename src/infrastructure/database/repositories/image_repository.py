from __future__ import annotations

import json
import logging
import os
from typing import Any

from supabase import Client

from src.application.dtos.image_dto import ImageRecord, image_to_record, record_to_image
from src.domain.entities.image import Image
from src.domain.errors import StorageError
from src.infrastructure.database.postgres_client import get_postgres_client

logger = logging.getLogger(__name__)

# module-level in-memory store for disabled mode, holds serialized records
_MEM_IMAGES: dict[str, dict[str, Any]] = {}


class ImageRepository:
    """Persists image aggregates, versions included, as one record per image."""

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None

    def _row_to_entity(self, row: dict) -> Image:
        """Convert database row to Image."""
        versions = row["versions"]
        # PostgreSQL returns parsed JSONB, Supabase may return a JSON string
        if isinstance(versions, str):
            versions = json.loads(versions)
        return record_to_image(ImageRecord.model_validate({**row, "versions": versions}))

    def save(self, image: Image) -> None:
        data = image_to_record(image).model_dump(mode="json")

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            try:
                query = """
                    INSERT INTO images (id, description, link, created_at, versions)
                    VALUES (%s, %s, %s, %s, %s::jsonb)
                    ON CONFLICT (id) DO UPDATE SET
                        description = EXCLUDED.description,
                        link = EXCLUDED.link,
                        versions = EXCLUDED.versions
                """
                self.pg_client.execute_update(
                    query,
                    (
                        data["id"], data["description"], data["link"],
                        image.created_at, json.dumps(data["versions"]),
                    ),
                )
                return
            except Exception as exc:
                raise StorageError(f"PostgreSQL save image failed: {exc}") from exc

        # In-memory mode
        if self.disabled or self.client is None:
            _MEM_IMAGES[image.id] = data
            return

        # Supabase mode
        try:  # pragma: no cover - network
            self.client.table("images").upsert(data).execute()
        except Exception as exc:
            raise StorageError(f"DB save image failed: {exc}") from exc

    def get(self, image_id: str) -> Image | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            try:
                row = self.pg_client.execute_one("SELECT * FROM images WHERE id = %s", (image_id,))
            except Exception as exc:
                raise StorageError(f"PostgreSQL get image failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            row = _MEM_IMAGES.get(image_id)
            return self._row_to_entity(row) if row else None

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("images").select("*").eq("id", image_id).limit(1).execute()
        except Exception as exc:
            raise StorageError(f"DB get image failed: {exc}") from exc
        rows = res.data or []
        return self._row_to_entity(rows[0]) if rows else None
