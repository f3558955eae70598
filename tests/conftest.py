import io
import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from PIL import Image

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("USE_LOCAL_DB", "0")
os.environ.setdefault("SUPABASE_STORAGE_LOCAL_DIR", ".local_storage")


def make_image_bytes(
    width: int = 80,
    height: int = 60,
    color=(0, 0, 255),
    mode: str = "RGB",
    fmt: str = "PNG",
) -> bytes:
    img = Image.new(mode, (width, height), color)
    if fmt == "GIF":
        img = img.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def image_bytes():
    return make_image_bytes


@pytest.fixture()
def media_config(tmp_path):
    # lazy import after env configured
    from src.infrastructure.config import MediaConfig

    return MediaConfig.from_env(local_dir=tmp_path / "storage")


@pytest.fixture()
def mock_backend():
    from src.domain.ports import MediaBackend

    backend = Mock(spec=MediaBackend)
    backend.get_image.return_value = None
    return backend
