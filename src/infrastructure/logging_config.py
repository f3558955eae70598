from __future__ import annotations

import logging
import os


def configure_logging(level: str | None = None) -> None:
    """Configure root logging; level defaults to LOG_LEVEL (INFO)."""
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # third party HTTP clients used by supabase are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
