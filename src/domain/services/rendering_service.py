from __future__ import annotations

import numpy as np

from src.domain.entities.image import RGBA, Rect


class RenderingService:
    """NumPy helpers for building version buffers. Arrays are float32 normalized to [0, 1].

    Channel convention:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)
    - RGBA: (H, W, 4), non-premultiplied
    """

    # Grayscale (Luminosity): 0.299*R + 0.587*G + 0.114*B
    @staticmethod
    def grayscale_luminosity(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            weights = np.array([0.299, 0.587, 0.114], dtype=np.float32)
            return np.dot(mat[..., :3], weights).astype(np.float32)
        return mat

    # Canvas of (height, width) filled with color. Grayscale canvases store the
    # color's luminosity premultiplied by its alpha, color canvases are RGBA.
    @staticmethod
    def filled_canvas(width: int, height: int, color: RGBA, grayscale: bool) -> np.ndarray:
        rgba = np.array(color, dtype=np.float32) / 255.0
        if grayscale:
            value = RenderingService.grayscale_luminosity(rgba[None, None, :])[0, 0] * rgba[3]
            return np.full((height, width), value, dtype=np.float32)
        return np.tile(rgba, (height, width, 1)).astype(np.float32)

    # Where the overlap of source_rect with the original lands in a width x height output.
    @staticmethod
    def destination_box(source_rect: Rect, overlap: Rect, width: int, height: int) -> Rect:
        sx = width / source_rect.width
        sy = height / source_rect.height
        x0 = int(round((overlap.x0 - source_rect.x0) * sx))
        y0 = int(round((overlap.y0 - source_rect.y0) * sy))
        x1 = int(round((overlap.x1 - source_rect.x0) * sx))
        y1 = int(round((overlap.y1 - source_rect.y0) * sy))
        return Rect(max(0, x0), max(0, y0), min(width, x1), min(height, y1))

    # Paste patch into canvas at box; RGBA patches are composited "over" the canvas.
    @staticmethod
    def paste(canvas: np.ndarray, patch: np.ndarray, box: Rect) -> np.ndarray:
        out = canvas.astype(np.float32).copy()
        if box.empty:
            return out
        src = RenderingService.match_channels(patch, out)
        region = out[box.y0 : box.y1, box.x0 : box.x1]
        if src.ndim == 3 and src.shape[2] == 4:
            a_src = src[..., 3:4]
            a_dst = region[..., 3:4]
            a_out = a_src + a_dst * (1.0 - a_src)
            rgb = src[..., :3] * a_src + region[..., :3] * a_dst * (1.0 - a_src)
            safe = np.where(a_out > 0.0, a_out, 1.0)
            region[..., :3] = np.where(a_out > 0.0, rgb / safe, 0.0)
            region[..., 3:4] = a_out
        else:
            region[...] = src
        return np.clip(out, 0.0, 1.0).astype(np.float32)

    # Convert matrix to the channel layout of like.
    @staticmethod
    def match_channels(matrix: np.ndarray, like: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if like.ndim == 2:
            return RenderingService.grayscale_luminosity(mat)
        channels = like.shape[2]
        if mat.ndim == 2:
            mat = np.repeat(mat[..., None], 3, axis=2)
        if channels == 4 and mat.shape[2] == 3:
            alpha = np.ones((*mat.shape[:2], 1), dtype=np.float32)
            mat = np.concatenate([mat, alpha], axis=2)
        elif channels == 3 and mat.shape[2] == 4:
            mat = mat[..., :3]
        return mat.astype(np.float32)
