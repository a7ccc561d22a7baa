"""
RenderSurface - numpy pixel target for the accumulators.

Pixels are stored as (H, W, 3) float32 in [0, 255] so that repeated
low-alpha marks accumulate smoothly. Sizes are physical pixels: a logical
width/height times the device pixel ratio.
"""

import numpy as np
from PIL import Image

from .colormaps import hex_to_rgb

# Largest surface we are willing to allocate (about 8K x 8K)
MAX_SURFACE_PIXELS = 64 * 1024 * 1024


class SurfaceError(RuntimeError):
    """Raised when a surface cannot be (re)allocated at the requested size."""


def physical_size(width, height, dpr=1.0):
    return int(round(width * dpr)), int(round(height * dpr))


class RenderSurface:
    """Drawable pixel buffer owned by the host, written by accumulators."""

    def __init__(self, width, height, dpr=1.0, background="#000000"):
        self.background = np.array(hex_to_rgb(background), dtype=np.float32)
        self.pixels = None
        self.width = 0
        self.height = 0
        self.dpr = dpr
        self.resize(width, height, dpr)

    @property
    def logical_size(self):
        return self.width / self.dpr, self.height / self.dpr

    def resize(self, width, height, dpr=None):
        """Reallocate at logical size width x height. Contents are lost."""
        if dpr is not None:
            self.dpr = dpr
        w, h = physical_size(width, height, self.dpr)
        if w <= 0 or h <= 0 or w * h > MAX_SURFACE_PIXELS:
            raise SurfaceError(f"Cannot allocate a {w}x{h} surface")
        try:
            pixels = np.empty((h, w, 3), dtype=np.float32)
        except MemoryError as e:
            raise SurfaceError(f"Cannot allocate a {w}x{h} surface") from e
        self.pixels = pixels
        self.width = w
        self.height = h
        self.clear()

    def clear(self, color=None):
        """Fill every pixel with color (default: background)."""
        fill = self.background if color is None else np.array(hex_to_rgb(color), dtype=np.float32)
        self.pixels[:] = fill

    def plot(self, px, py, color, alpha, size=1, blend="normal"):
        """Draw size x size marks anchored at physical coordinates (px, py).

        blend="normal" composites color over the pixel with the given
        alpha; k marks on one pixel give color + (dst - color)*(1-alpha)^k,
        exactly as k sequential draws would. blend="additive" adds
        color*alpha per mark, saturating at 255.

        Returns the number of marks whose anchor lies inside the surface.
        """
        if blend not in ("normal", "additive"):
            raise ValueError(f"Unknown blend mode: {blend!r}")
        x0 = np.floor(np.asarray(px, dtype=np.float64))
        y0 = np.floor(np.asarray(py, dtype=np.float64))
        anchored = int(np.count_nonzero(
            (x0 >= 0) & (x0 < self.width) & (y0 >= 0) & (y0 < self.height)))
        size = max(1, int(size))
        if size > 1:
            offs = np.arange(size)
            x0 = (x0[:, None, None] + offs[None, None, :]).reshape(-1)
            y0 = (y0[:, None, None] + offs[None, :, None]).reshape(-1)
        inside = (x0 >= 0) & (x0 < self.width) & (y0 >= 0) & (y0 < self.height)
        if not inside.any():
            return anchored
        idx = y0[inside].astype(np.int64) * self.width + x0[inside].astype(np.int64)

        touched, hits = np.unique(idx, return_counts=True)
        k = hits.astype(np.float32)[:, None]
        flat = self.pixels.reshape(-1, 3)
        c = np.array(hex_to_rgb(color), dtype=np.float32)
        if blend == "additive":
            flat[touched] = np.minimum(flat[touched] + c * (alpha * k), 255.0)
        else:
            keep = np.power(np.float32(1.0 - alpha), k)
            flat[touched] = c + (flat[touched] - c) * keep
        return anchored

    def replace(self, rgba):
        """Replace every pixel from an (H, W, 4) uint8 image.

        Transparent pixels (alpha 0) show the background.
        """
        rgba = np.asarray(rgba)
        if rgba.shape != (self.height, self.width, 4):
            raise ValueError(f"Image shape {rgba.shape} does not match "
                             f"surface {(self.height, self.width, 4)}")
        a = rgba[..., 3:4].astype(np.float32) / 255.0
        self.pixels[:] = rgba[..., :3].astype(np.float32) * a + self.background * (1.0 - a)

    def to_array(self):
        """(H, W, 3) uint8 copy of the surface."""
        return np.clip(self.pixels, 0, 255).astype(np.uint8)

    def snapshot(self):
        """Static PIL image of the current surface."""
        return Image.fromarray(self.to_array())
