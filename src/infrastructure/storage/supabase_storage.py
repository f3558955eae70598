from __future__ import annotations

import logging
import os
from pathlib import Path

from supabase import Client

from src.domain.errors import StorageError

logger = logging.getLogger(__name__)


class SupabaseStorage:
    """Storage adapter for Supabase Storage with a local directory fallback."""

    def __init__(self, client: Client | None, local_dir: str | Path | None = None) -> None:
        self.client = client
        self.bucket = os.getenv("SUPABASE_STORAGE_BUCKET", "images")
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.local_dir = Path(
            local_dir or os.getenv("SUPABASE_STORAGE_LOCAL_DIR", ".local_storage")
        )
        if self.is_local:
            self.local_dir.mkdir(parents=True, exist_ok=True)

    @property
    def is_local(self) -> bool:
        return self.disabled or self.client is None

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> int:
        if self.is_local:
            full_path = self.local_dir / path
            try:
                full_path.parent.mkdir(parents=True, exist_ok=True)
                full_path.write_bytes(data)
            except OSError as exc:
                raise StorageError(f"Storage upload failed: {exc}") from exc
            logger.debug(f"Stored {len(data)} bytes at {full_path}")
            return len(data)
        try:  # pragma: no cover - network
            self.client.storage.from_(self.bucket).upload(  # type: ignore[union-attr]
                path=path,
                file=data,
                file_options={"content-type": content_type},
            )
            return len(data)
        except Exception as exc:  # pragma: no cover
            raise StorageError(f"Storage upload failed: {exc}") from exc

    def download_bytes(self, path: str) -> bytes:
        if self.is_local:
            full_path = self.local_dir / path
            try:
                return full_path.read_bytes()
            except OSError as exc:
                raise StorageError(f"Storage download failed: {exc}") from exc
        try:  # pragma: no cover - network
            return self.client.storage.from_(self.bucket).download(path)  # type: ignore[union-attr]
        except Exception as exc:  # pragma: no cover
            raise StorageError(f"Storage download failed: {exc}") from exc
