from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.domain.entities.image import Rect
from src.domain.errors import DecodeError

# Formats stored as uploaded; everything else is re-encoded to PNG.
NATIVE_FORMATS = frozenset({"png", "jpeg"})

# Multi-picture JPEGs from cameras decode as "mpo".
_FORMAT_ALIASES = {"mpo": "jpeg"}

_GRAY_MODES = frozenset({"1", "L", "I", "I;16", "I;16L", "I;16B", "I;16N"})
_ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})

RESAMPLE_FILTERS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "box": Image.Resampling.BOX,
    "bilinear": Image.Resampling.BILINEAR,
    "hamming": Image.Resampling.HAMMING,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


@dataclass
class DecodedImage:
    array: np.ndarray  # float32 in [0, 1], (H, W), (H, W, 3) or (H, W, 4)
    format: str  # lower-case format tag, e.g. "png"
    grayscale: bool

    @property
    def width(self) -> int:
        return int(self.array.shape[1])

    @property
    def height(self) -> int:
        return int(self.array.shape[0])

    @property
    def content_type(self) -> str:
        return f"image/{self.format}"

    @property
    def native(self) -> bool:
        return self.format in NATIVE_FORMATS


class PillowCodec:
    """Decoder, re-encoder and resampling primitive backed by Pillow."""

    def __init__(self, resample_filter: str = "lanczos") -> None:
        name = resample_filter.lower()
        if name not in RESAMPLE_FILTERS:
            raise ValueError(
                f"Unknown resample filter {resample_filter!r}, expected one of {sorted(RESAMPLE_FILTERS)}"
            )
        self.resample_filter = name

    def decode(self, data: bytes) -> DecodedImage:
        try:
            img = Image.open(BytesIO(data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise DecodeError(f"Cannot decode image: {exc}") from exc
        fmt = (img.format or "").lower()
        fmt = _FORMAT_ALIASES.get(fmt, fmt)
        if not fmt:
            raise DecodeError("Cannot decode image: unknown format")
        return DecodedImage(
            array=self._to_array(img),
            format=fmt,
            grayscale=img.mode in _GRAY_MODES,
        )

    def encode(self, array: np.ndarray, fmt: str = "png") -> bytes:
        fmt = fmt.lower()
        img = self._to_pil(array)
        buf = BytesIO()
        if fmt == "jpeg":
            if img.mode == "RGBA":
                img = img.convert("RGB")
            img.save(buf, format="JPEG", quality=95)
        else:
            img.save(buf, format=fmt.upper())
        return buf.getvalue()

    # Scale the part of array inside rect to width x height.
    def resample(self, array: np.ndarray, rect: Rect, width: int, height: int) -> np.ndarray:
        img = self._to_pil(array)
        out = img.resize(
            (width, height),
            resample=RESAMPLE_FILTERS[self.resample_filter],
            box=rect.as_box(),
        )
        return np.asarray(out).astype(np.float32) / 255.0

    # --------- helpers ---------
    @staticmethod
    def _to_array(img: Image.Image) -> np.ndarray:
        if img.mode in _GRAY_MODES:
            if img.mode in ("1", "L"):
                return np.asarray(img.convert("L")).astype(np.float32) / 255.0
            arr = np.asarray(img).astype(np.float32) / 65535.0
            return np.clip(arr, 0.0, 1.0).astype(np.float32)
        has_alpha = img.mode in _ALPHA_MODES or (img.mode == "P" and "transparency" in img.info)
        img = img.convert("RGBA" if has_alpha else "RGB")
        return np.asarray(img).astype(np.float32) / 255.0

    @staticmethod
    def _to_pil(array: np.ndarray) -> Image.Image:
        arr = (np.clip(array.astype(np.float32), 0.0, 1.0) * 255.0).round().astype("uint8")
        if arr.ndim == 3 and arr.shape[2] not in (3, 4):
            arr = np.ascontiguousarray(arr[..., :3])
        # mode follows the shape: L, RGB or RGBA
        return Image.fromarray(arr)
