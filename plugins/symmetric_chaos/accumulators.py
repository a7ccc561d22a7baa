"""
Accumulators - turn projected orbit points into pixels.

DirectPlot draws every point straight onto the surface (chalk, glow and
standard modes). Histogram only counts hits per physical pixel; render()
recolors the whole surface from the counts once per frame, which keeps
per-point cost at a single increment.
"""

from abc import ABC, abstractmethod
import numpy as np

from .colormaps import density_to_rgba, get_palette, DEFAULT_PALETTE

# mode -> (blend, alpha)
DIRECT_MODES = {
    "chalk": ("normal", 0.2),
    "glow": ("additive", 0.05),
    "standard": ("normal", 1.0),
}

RENDER_MODES = ["chalk", "glow", "standard", "histogram"]


class Accumulator(ABC):
    """Base class for render strategies."""

    mode = ""

    def __init__(self):
        self.points = 0

    @abstractmethod
    def accumulate(self, px, py, surface):
        """Record projected points. Returns how many landed on the surface."""

    def finish_frame(self, surface):
        """Called once per tick after the batch (no-op for direct plotting)."""

    def clear(self):
        self.points = 0

    def resize(self, width, height):
        self.clear()

    def release(self):
        """Drop any buffers; called on engine teardown."""


class DirectPlot(Accumulator):
    """Plot each point immediately with fixed-alpha marks."""

    def __init__(self, mode="chalk", color="#34d399", alpha=None, point_size=1):
        super().__init__()
        if mode not in DIRECT_MODES:
            raise ValueError(f"Unknown direct plot mode: {mode!r}")
        self.mode = mode
        self.blend, default_alpha = DIRECT_MODES[mode]
        self.alpha = default_alpha if alpha is None else alpha
        self.color = color
        self.point_size = point_size

    def accumulate(self, px, py, surface):
        size = max(1, int(round(self.point_size * surface.dpr)))
        landed = surface.plot(px, py, self.color, self.alpha, size=size, blend=self.blend)
        self.points += landed
        return landed


class Histogram(Accumulator):
    """Per-pixel hit counter with logarithmic false-color rendering."""

    mode = "histogram"

    def __init__(self, width, height, palette=DEFAULT_PALETTE):
        super().__init__()
        self.width = 0
        self.height = 0
        self.counts = None
        self.max_hits = 0
        self.set_palette(palette)
        self.resize(width, height)

    def set_palette(self, palette):
        """palette: a named palette or a (low, mid, high) color triple."""
        if isinstance(palette, str):
            palette = get_palette(palette)
        self.low, self.mid, self.high = palette

    def resize(self, width, height):
        self.counts = np.zeros(width * height, dtype=np.uint32)
        self.width = width
        self.height = height
        self.max_hits = 0
        self.points = 0

    def clear(self):
        if self.counts is not None:
            self.counts.fill(0)
        self.max_hits = 0
        self.points = 0

    def release(self):
        self.counts = None
        self.max_hits = 0

    def accumulate(self, px, py, surface=None):
        if self.counts is None:
            return 0
        x = np.floor(np.asarray(px, dtype=np.float64))
        y = np.floor(np.asarray(py, dtype=np.float64))
        inside = (x >= 0) & (x < self.width) & (y >= 0) & (y < self.height)
        if not inside.any():
            return 0
        idx = y[inside].astype(np.int64) * self.width + x[inside].astype(np.int64)
        touched, hits = np.unique(idx, return_counts=True)
        self.counts[touched] += hits.astype(np.uint32)
        peak = int(self.counts[touched].max())
        if peak > self.max_hits:
            self.max_hits = peak
        self.points += int(idx.size)
        return int(idx.size)

    def to_rgba(self):
        """(H, W, 4) uint8 image of the current buffer."""
        rgba = density_to_rgba(self.counts, self.max_hits, self.low, self.mid, self.high)
        return rgba.reshape(self.height, self.width, 4)

    def render(self, surface):
        """Recolor the whole surface. Skipped while nothing is accumulated."""
        if self.counts is None or self.max_hits == 0:
            return False
        if self.counts.size != surface.width * surface.height:
            raise ValueError("Histogram buffer does not match surface size")
        surface.replace(self.to_rgba())
        return True

    def finish_frame(self, surface):
        self.render(surface)


def make_accumulator(mode, surface, color="#ffffff", palette=DEFAULT_PALETTE,
                     alpha=None, point_size=1):
    """Build the accumulator for a render mode sized to surface."""
    if mode == "histogram":
        return Histogram(surface.width, surface.height, palette=palette)
    if mode in DIRECT_MODES:
        return DirectPlot(mode, color=color, alpha=alpha, point_size=point_size)
    raise ValueError(f"Unknown render mode: {mode!r}. Supported: {RENDER_MODES}")
