"""
Map-space to screen-space projections.

Projections return float physical-pixel coordinates; accumulators floor
them and discard anything outside the surface.
"""

import numpy as np


class CenteredProjection:
    """screen = center +/- point * scale_factor, y axis pointing up.

    scale_factor is in logical pixels; the result is in physical pixels.
    """

    replicas = 1

    def __init__(self, width, height, dpr, scale_factor):
        self.width = width
        self.height = height
        self.dpr = dpr
        self.scale_factor = scale_factor
        self.cx = width / (2 * dpr)
        self.cy = height / (2 * dpr)

    def __call__(self, xs, ys):
        px = (self.cx + np.asarray(xs) * self.scale_factor) * self.dpr
        py = (self.cy - np.asarray(ys) * self.scale_factor) * self.dpr
        return px, py


class TiledProjection:
    """Replicate unit-square points over a period x period tiling.

    Each point (x, y) is drawn at (x + i, y + j) for 0 <= i, j < period,
    with the whole period x period square stretched over the surface.
    """

    def __init__(self, width, height, period):
        self.width = width
        self.height = height
        self.period = max(1, int(period))

    @property
    def replicas(self):
        return self.period * self.period

    def __call__(self, xs, ys):
        p = self.period
        offsets = np.arange(p, dtype=np.float64)
        # (n, p, p) grid: axis 1 is i (x offset), axis 2 is j (y offset)
        xs = np.asarray(xs, dtype=np.float64)[:, None, None] + offsets[None, :, None]
        ys = np.asarray(ys, dtype=np.float64)[:, None, None] + offsets[None, None, :]
        xs, ys = np.broadcast_arrays(xs, ys)
        px = xs.reshape(-1) / p * self.width
        py = self.height - self.height * ys.reshape(-1) / p
        return px, py
