import io

import numpy as np
import pytest
from PIL import Image

from src.domain.entities.image import Rect
from src.domain.errors import DecodeError
from src.infrastructure.imaging.pillow_codec import PillowCodec


def test_decode_rgb_png(image_bytes):
    decoded = PillowCodec().decode(image_bytes(8, 6, (255, 0, 0)))
    assert decoded.format == "png"
    assert decoded.content_type == "image/png"
    assert decoded.native
    assert not decoded.grayscale
    assert (decoded.width, decoded.height) == (8, 6)
    assert decoded.array.shape == (6, 8, 3)
    assert np.allclose(decoded.array[0, 0], [1.0, 0.0, 0.0])


def test_decode_grayscale_png(image_bytes):
    decoded = PillowCodec().decode(image_bytes(4, 4, 128, mode="L"))
    assert decoded.grayscale
    assert decoded.array.shape == (4, 4)
    assert np.isclose(decoded.array[0, 0], 128 / 255)


def test_decode_gif_is_not_native(image_bytes):
    decoded = PillowCodec().decode(image_bytes(5, 5, (0, 255, 0), fmt="GIF"))
    assert decoded.format == "gif"
    assert not decoded.native
    assert decoded.array.shape[:2] == (5, 5)


def test_decode_garbage_raises_decode_error():
    with pytest.raises(DecodeError):
        PillowCodec().decode(b"definitely not an image")


def test_encode_jpeg_drops_alpha():
    arr = np.ones((4, 4, 4), dtype=np.float32)
    data = PillowCodec().encode(arr, "jpeg")
    img = Image.open(io.BytesIO(data))
    assert img.format == "JPEG"
    assert img.mode == "RGB"


def test_encode_keeps_grayscale():
    data = PillowCodec().encode(np.zeros((3, 5), dtype=np.float32), "png")
    assert Image.open(io.BytesIO(data)).mode == "L"


def test_resample_box_to_output_size():
    arr = np.zeros((60, 80, 3), dtype=np.float32)
    arr[:, 40:, :] = 1.0
    out = PillowCodec("nearest").resample(arr, Rect(40, 0, 80, 60), 10, 15)
    assert out.shape == (15, 10, 3)
    assert np.allclose(out, 1.0)


def test_unknown_filter_is_rejected():
    with pytest.raises(ValueError, match="Unknown resample filter"):
        PillowCodec("sharpest")


def test_oversized_image_raises_decode_error(image_bytes, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(DecodeError):
        PillowCodec().decode(image_bytes(30, 30))


def test_multi_picture_jpeg_decodes_as_jpeg():
    buf = io.BytesIO()
    frames = [Image.new("RGB", (6, 4), (255, 0, 0)), Image.new("RGB", (6, 4), (0, 0, 255))]
    frames[0].save(buf, format="MPO", save_all=True, append_images=frames[1:])
    decoded = PillowCodec().decode(buf.getvalue())
    assert decoded.format == "jpeg"
    assert decoded.content_type == "image/jpeg"
    assert decoded.native
