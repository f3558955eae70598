from __future__ import annotations

from src.domain.entities.image import HorAlignment, Rect, VerAlignment
from src.domain.errors import GeometryError


class GeometryService:
    """Sampling rectangles for a requested output size, in the original's coordinates.

    Two fill policies:
    - touch from inside: the largest rect of the requested aspect ratio inside the original
    - touch from outside: the smallest rect of the requested aspect ratio containing it

    Dimensions use float aspect-ratio arithmetic truncated toward zero. Offsets are
    truncated toward zero as well, which matters for the negative leftovers of the
    outside policy.
    """

    @staticmethod
    def validate_size(width: int, height: int, what: str = "Output size") -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise GeometryError(f"{what} must be positive, got {width}x{height}")

    # Fit inside: one axis equals the original, the other is cut and aligned.
    @staticmethod
    def touch_from_inside(
        orig_width: int,
        orig_height: int,
        width: int,
        height: int,
        hor_align: HorAlignment = HorAlignment.CENTER,
        ver_align: VerAlignment = VerAlignment.CENTER,
    ) -> Rect:
        GeometryService.validate_size(width, height)
        GeometryService.validate_size(orig_width, orig_height, "Original size")
        aspect = float(width) / float(height)
        if aspect > float(orig_width) / float(orig_height):
            # Wider than original: as wide as the original
            rect_height = int(float(orig_width) / aspect)
            rect = Rect(0, 0, orig_width, rect_height)
            rect = rect.translate(0, _offset(orig_height - rect_height, ver_align))
        else:
            # Higher than original: as high as the original
            rect_width = int(float(orig_height) * aspect)
            rect = Rect(0, 0, rect_width, orig_height)
            rect = rect.translate(_offset(orig_width - rect_width, hor_align), 0)
        return GeometryService._checked(rect, width, height)

    # Cover from outside: mirror image of touch_from_inside, may exceed the bounds on one axis.
    @staticmethod
    def touch_from_outside(
        orig_width: int,
        orig_height: int,
        width: int,
        height: int,
        hor_align: HorAlignment = HorAlignment.CENTER,
        ver_align: VerAlignment = VerAlignment.CENTER,
    ) -> Rect:
        GeometryService.validate_size(width, height)
        GeometryService.validate_size(orig_width, orig_height, "Original size")
        aspect = float(width) / float(height)
        if aspect > float(orig_width) / float(orig_height):
            # Wider than original: as high as the original
            rect_width = int(float(orig_height) * aspect)
            rect = Rect(0, 0, rect_width, orig_height)
            rect = rect.translate(_offset(orig_width - rect_width, hor_align), 0)
        else:
            # Higher than original: as wide as the original
            rect_height = int(float(orig_width) / aspect)
            rect = Rect(0, 0, orig_width, rect_height)
            rect = rect.translate(0, _offset(orig_height - rect_height, ver_align))
        return GeometryService._checked(rect, width, height)

    @staticmethod
    def _checked(rect: Rect, width: int, height: int) -> Rect:
        if rect.empty:
            raise GeometryError(
                f"Output size {width}x{height} degenerates to an empty sampling rectangle"
            )
        return rect


def _offset(leftover: int, align: HorAlignment | VerAlignment) -> int:
    if align in (HorAlignment.CENTER, VerAlignment.CENTER):
        return int(leftover / 2)
    if align in (HorAlignment.RIGHT, VerAlignment.BOTTOM):
        return leftover
    return 0
