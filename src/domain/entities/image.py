from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import NamedTuple


class HorAlignment(str, Enum):
    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"


class VerAlignment(str, Enum):
    CENTER = "center"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class Rect:
    """Pixel rectangle spanning [x0, x1) x [y0, y1) in the original's coordinate space.

    Coordinates may be negative or exceed the original's bounds when the rect
    was resolved with the cover-from-outside policy.
    """

    x0: int
    y0: int
    x1: int
    y1: int

    @classmethod
    def from_size(cls, width: int, height: int) -> Rect:
        return cls(0, 0, width, height)

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def empty(self) -> bool:
        return self.x0 >= self.x1 or self.y0 >= self.y1

    def translate(self, dx: int, dy: int) -> Rect:
        return Rect(self.x0 + dx, self.y0 + dy, self.x1 + dx, self.y1 + dy)

    # An empty rect is inside every rect.
    def is_inside(self, other: Rect) -> bool:
        if self.empty:
            return True
        return (
            other.x0 <= self.x0
            and other.y0 <= self.y0
            and self.x1 <= other.x1
            and self.y1 <= other.y1
        )

    def contains(self, other: Rect) -> bool:
        return other.is_inside(self)

    def intersect(self, other: Rect) -> Rect:
        r = Rect(
            max(self.x0, other.x0),
            max(self.y0, other.y0),
            min(self.x1, other.x1),
            min(self.y1, other.y1),
        )
        return Rect(0, 0, 0, 0) if r.empty else r

    def as_box(self) -> tuple[int, int, int, int]:
        return (self.x0, self.y0, self.x1, self.y1)


class RGBA(NamedTuple):
    """8-bit, non-premultiplied color. Alpha defaults to opaque."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    @classmethod
    def from_hex(cls, hex_color: str) -> RGBA:
        """Parse "#RRGGBB" (opaque) or "#RRGGBBAA"."""
        h = hex_color.strip().lstrip("#")
        if len(h) not in (6, 8):
            raise ValueError(f"Invalid hex color: {hex_color!r}")
        try:
            parts = [int(h[i : i + 2], 16) for i in range(0, len(h), 2)]
        except ValueError as exc:
            raise ValueError(f"Invalid hex color: {hex_color!r}") from exc
        if len(parts) == 3:
            parts.append(255)
        return cls(*parts)

    def to_hex(self) -> str:
        return "#{:02X}{:02X}{:02X}{:02X}".format(*self)


TRANSPARENT = RGBA(0, 0, 0, 0)


class VersionKey(NamedTuple):
    source_rect: Rect
    width: int
    height: int
    grayscale: bool
    outside_color: RGBA


def new_image_id() -> str:
    return f"img_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class ImageVersion:
    path: str  # storage path {image_id}/{uuid}.{ext}
    filename: str
    content_type: str
    source_rect: Rect
    width: int
    height: int
    grayscale: bool
    outside_color: RGBA = TRANSPARENT
    file_size: int | None = None  # bytes
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    # Lookup key of the owning Image, set when the Image binds its versions
    image_id: str | None = None

    @property
    def key(self) -> VersionKey:
        return VersionKey(
            self.source_rect, self.width, self.height, self.grayscale, RGBA(*self.outside_color)
        )

    @property
    def aspect_ratio(self) -> float:
        return float(self.width) / float(self.height)


@dataclass
class Image:
    """Aggregate root: the original (versions[0]) plus every derived version.

    Canonical metadata is always read from the original. Versions are only ever
    appended; the keyed index mirrors the list for exact-match lookups.
    """

    versions: list[ImageVersion]
    id: str = field(default_factory=new_image_id)
    description: str | None = None
    link: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    _index: dict[VersionKey, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.versions:
            raise ValueError("Image needs at least its original version")
        original = self.versions[0]
        if original.source_rect != Rect.from_size(original.width, original.height):
            raise ValueError("Original version must span the full original bounds")
        self.versions = [replace(v, image_id=self.id) for v in self.versions]
        self._index = {}
        for i, v in enumerate(self.versions):
            # first match wins, later duplicates stay unreachable
            self._index.setdefault(v.key, i)

    @property
    def original(self) -> ImageVersion:
        return self.versions[0]

    @property
    def filename(self) -> str:
        return self.original.filename

    @property
    def content_type(self) -> str:
        return self.original.content_type

    @property
    def width(self) -> int:
        return self.original.width

    @property
    def height(self) -> int:
        return self.original.height

    @property
    def rectangle(self) -> Rect:
        return self.original.source_rect

    @property
    def grayscale(self) -> bool:
        return self.original.grayscale

    # Width / Height
    @property
    def aspect_ratio(self) -> float:
        return self.original.aspect_ratio

    # Grayscale originals cannot produce color versions.
    def normalize_grayscale(self, grayscale: bool) -> bool:
        return True if self.grayscale else bool(grayscale)

    def find_version(self, key: VersionKey) -> ImageVersion | None:
        i = self._index.get(key)
        return None if i is None else self.versions[i]

    def add_version(self, version: ImageVersion) -> ImageVersion:
        bound = replace(version, image_id=self.id)
        self.versions.append(bound)
        self._index.setdefault(bound.key, len(self.versions) - 1)
        return bound

    def merge_versions(self, versions: list[ImageVersion]) -> list[ImageVersion]:
        """Append the versions this copy does not hold yet, matched by path.

        Used to catch up with a record saved through another copy of the same image.
        """
        known = {v.path for v in self.versions}
        return [self.add_version(v) for v in versions if v.path not in known]
