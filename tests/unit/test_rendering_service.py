import numpy as np

from src.domain.entities.image import RGBA, TRANSPARENT, Rect
from src.domain.services.rendering_service import RenderingService as RS


def test_filled_canvas_color_is_rgba():
    out = RS.filled_canvas(4, 3, RGBA(255, 0, 0, 255), grayscale=False)
    assert out.shape == (3, 4, 4)
    assert out.dtype == np.float32
    assert np.allclose(out[..., 0], 1.0)
    assert np.allclose(out[..., 1:3], 0.0)
    assert np.allclose(out[..., 3], 1.0)


def test_filled_canvas_grayscale_is_premultiplied_luminosity():
    white = RS.filled_canvas(2, 2, RGBA(255, 255, 255, 255), grayscale=True)
    assert white.shape == (2, 2)
    assert np.allclose(white, 1.0)
    clear = RS.filled_canvas(2, 2, TRANSPARENT, grayscale=True)
    assert np.allclose(clear, 0.0)


def test_destination_box_scales_overlap():
    source = Rect(0, -100, 800, 700)
    overlap = source.intersect(Rect(0, 0, 800, 600))
    assert RS.destination_box(source, overlap, 400, 400) == Rect(0, 50, 400, 350)


def test_paste_opaque_rgb_patch_into_rgba_canvas():
    canvas = RS.filled_canvas(4, 4, RGBA(255, 0, 0, 255), grayscale=False)
    patch = np.zeros((2, 4, 3), dtype=np.float32)
    patch[..., 2] = 1.0
    out = RS.paste(canvas, patch, Rect(0, 1, 4, 3))
    assert np.allclose(out[0, 0], [1, 0, 0, 1])
    assert np.allclose(out[1, 0], [0, 0, 1, 1])
    assert np.allclose(out[3, 3], [1, 0, 0, 1])
    # canvas untouched
    assert np.allclose(canvas[1, 0], [1, 0, 0, 1])


def test_paste_composites_translucent_patch_over_transparent_canvas():
    canvas = RS.filled_canvas(2, 2, TRANSPARENT, grayscale=False)
    patch = np.zeros((2, 2, 4), dtype=np.float32)
    patch[..., 0] = 1.0
    patch[..., 3] = 0.5
    out = RS.paste(canvas, patch, Rect(0, 0, 2, 2))
    assert np.allclose(out[..., 0], 1.0)
    assert np.allclose(out[..., 3], 0.5)


def test_paste_into_grayscale_canvas_converts_patch():
    canvas = RS.filled_canvas(3, 3, TRANSPARENT, grayscale=True)
    patch = np.ones((1, 1, 3), dtype=np.float32)
    out = RS.paste(canvas, patch, Rect(1, 1, 2, 2))
    assert out.shape == (3, 3)
    assert np.isclose(out[1, 1], 1.0)
    assert np.isclose(out[0, 0], 0.0)


def test_paste_with_empty_box_is_noop():
    canvas = RS.filled_canvas(2, 2, TRANSPARENT, grayscale=False)
    out = RS.paste(canvas, np.ones((0, 0, 3), dtype=np.float32), Rect(0, 0, 0, 0))
    np.testing.assert_array_equal(out, canvas)


def test_match_channels():
    gray = np.full((2, 2), 0.5, dtype=np.float32)
    rgba = np.zeros((2, 2, 4), dtype=np.float32)
    rgb = np.zeros((2, 2, 3), dtype=np.float32)
    assert RS.match_channels(gray, rgba).shape == (2, 2, 4)
    assert RS.match_channels(rgba, rgb).shape == (2, 2, 3)
    assert RS.match_channels(rgb, gray).shape == (2, 2)
