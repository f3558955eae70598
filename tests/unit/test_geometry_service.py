import pytest

from src.domain.entities.image import HorAlignment as H
from src.domain.entities.image import Rect
from src.domain.entities.image import VerAlignment as V
from src.domain.errors import GeometryError
from src.domain.services.geometry_service import GeometryService as GS

SIZES = [(1, 1), (3, 2), (2, 3), (400, 400), (1920, 1080), (100, 700), (640, 480), (7, 13)]


def test_inside_square_from_landscape_is_centered():
    assert GS.touch_from_inside(800, 600, 400, 400) == Rect(100, 0, 700, 600)


def test_inside_wide_request_vertical_alignment():
    # ar 4.0 > 1.333: full width, height 800 / 4 = 200
    assert GS.touch_from_inside(800, 600, 400, 100, ver_align=V.CENTER) == Rect(0, 200, 800, 400)
    assert GS.touch_from_inside(800, 600, 400, 100, ver_align=V.TOP) == Rect(0, 0, 800, 200)
    assert GS.touch_from_inside(800, 600, 400, 100, ver_align=V.BOTTOM) == Rect(0, 400, 800, 600)


def test_inside_ignores_alignment_of_full_axis():
    left = GS.touch_from_inside(800, 600, 400, 100, H.LEFT, V.CENTER)
    right = GS.touch_from_inside(800, 600, 400, 100, H.RIGHT, V.CENTER)
    assert left == right


def test_left_right_offsets_sum_to_leftover():
    left = GS.touch_from_inside(800, 600, 100, 100, hor_align=H.LEFT)
    right = GS.touch_from_inside(800, 600, 100, 100, hor_align=H.RIGHT)
    assert (left.width, left.height) == (right.width, right.height) == (600, 600)
    assert left.x0 + right.x0 == 800 - left.width


def test_inside_truncates_dimensions_and_offsets():
    # 100 / 1.5 = 66.66 -> 66, leftover 34 -> offset 17
    assert GS.touch_from_inside(100, 100, 3, 2) == Rect(0, 17, 100, 83)


def test_outside_square_from_landscape():
    # ar 1.0 <= 1.333: full width, height 800, centered offset -100
    assert GS.touch_from_outside(800, 600, 400, 400) == Rect(0, -100, 800, 700)
    assert GS.touch_from_outside(800, 600, 400, 400, ver_align=V.TOP) == Rect(0, 0, 800, 800)
    assert GS.touch_from_outside(800, 600, 400, 400, ver_align=V.BOTTOM) == Rect(0, -200, 800, 600)


def test_outside_center_offset_truncates_toward_zero():
    # leftover -3 -> -1 (not -2)
    assert GS.touch_from_outside(10, 10, 13, 10) == Rect(-1, 0, 12, 10)
    assert GS.touch_from_outside(10, 10, 13, 10, hor_align=H.RIGHT) == Rect(-3, 0, 10, 10)
    assert GS.touch_from_outside(10, 10, 13, 10, hor_align=H.LEFT) == Rect(0, 0, 13, 10)


def test_matching_aspect_ratio_returns_full_bounds():
    assert GS.touch_from_inside(800, 400, 400, 200) == Rect(0, 0, 800, 400)
    assert GS.touch_from_outside(800, 400, 400, 200) == Rect(0, 0, 800, 400)


@pytest.mark.parametrize("orig", [(800, 600), (600, 800), (1000, 1000), (37, 91)])
@pytest.mark.parametrize("size", SIZES)
def test_inside_rect_is_contained_in_original(orig, size):
    bounds = Rect.from_size(*orig)
    for h in H:
        for v in V:
            rect = GS.touch_from_inside(*orig, *size, h, v)
            assert not rect.empty
            assert rect.is_inside(bounds)


@pytest.mark.parametrize("orig", [(800, 600), (600, 800), (1000, 1000), (37, 91)])
@pytest.mark.parametrize("size", SIZES)
def test_outside_rect_covers_original_with_requested_aspect(orig, size):
    bounds = Rect.from_size(*orig)
    width, height = size
    for h in H:
        for v in V:
            rect = GS.touch_from_outside(*orig, width, height, h, v)
            assert rect.contains(bounds)
            # truncation leaves less than one output pixel of aspect error
            assert abs(rect.width * height - rect.height * width) <= max(width, height)


@pytest.mark.parametrize("size", [(0, 10), (10, 0), (-5, 10), (10, -1)])
def test_non_positive_sizes_fail_fast(size):
    with pytest.raises(GeometryError):
        GS.touch_from_inside(800, 600, *size)
    with pytest.raises(GeometryError):
        GS.touch_from_outside(800, 600, *size)


def test_degenerate_rect_is_rejected():
    # 10 / 1000 truncates to a zero height band
    with pytest.raises(GeometryError, match="empty sampling rectangle"):
        GS.touch_from_inside(10, 10, 1000, 1)
