"""
Colors for Symmetric Chaos Rendering

Histogram mode maps log-normalized hit density through three user colors:

    0.00 - 0.33   background (black) -> low
    0.33 - 0.66   low -> mid
    0.66 - 1.00   mid -> high

Palettes are (low, mid, high) triples of "#rrggbb" strings.
"""

import re
import numpy as np

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

# Segment breakpoints of the density ramp
LOW_BREAK = 0.33
MID_BREAK = 0.66


def hex_to_rgb(color):
    """Parse '#rrggbb' (or an (r, g, b) sequence) into an int tuple."""
    if isinstance(color, str):
        m = _HEX_RE.match(color.strip())
        if not m:
            raise ValueError(f"Invalid color: {color!r} (expected '#rrggbb')")
        return tuple(int(g, 16) for g in m.groups())
    r, g, b = color
    return (int(r), int(g), int(b))


def rgb_to_hex(rgb):
    r, g, b = hex_to_rgb(rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def density(counts, max_hits):
    """Logarithmic density in [0, 1]: log(count+1) / log(max_hits+1)."""
    counts = np.asarray(counts, dtype=np.float64)
    return np.log(counts + 1.0) / np.log(max_hits + 1.0)


def density_to_rgba(counts, max_hits, low, mid, high):
    """
    Convert hit counts to RGBA pixels.

    Args:
        counts: 1D or 2D array of per-pixel hit counts
        max_hits: largest count in the buffer (must be > 0)
        low, mid, high: colors of the three-segment ramp

    Returns:
        counts.shape + (4,) uint8 array. Zero cells are fully transparent
        black; visited cells are opaque.
    """
    counts = np.asarray(counts)
    out = np.zeros(counts.shape + (4,), dtype=np.uint8)
    hit = counts > 0
    if max_hits <= 0 or not hit.any():
        return out

    val = density(counts[hit], max_hits)[:, None]
    c_low = np.array(hex_to_rgb(low), dtype=np.float64)
    c_mid = np.array(hex_to_rgb(mid), dtype=np.float64)
    c_high = np.array(hex_to_rgb(high), dtype=np.float64)
    black = np.zeros(3, dtype=np.float64)

    seg1 = val < LOW_BREAK
    seg2 = (val >= LOW_BREAK) & (val < MID_BREAK)

    t1 = val / LOW_BREAK
    t2 = (val - LOW_BREAK) / (MID_BREAK - LOW_BREAK)
    t3 = (val - MID_BREAK) / (1.0 - MID_BREAK)

    rgb = np.where(
        seg1, black * (1 - t1) + c_low * t1,
        np.where(seg2, c_low * (1 - t2) + c_mid * t2,
                 c_mid * (1 - t3) + c_high * t3))
    rgb = np.clip(np.floor(rgb), 0, 255)

    out[hit, :3] = rgb.astype(np.uint8)
    out[hit, 3] = 255
    return out


# --- Palette Definitions ---

HISTOGRAM_PALETTES = {
    "ember": ("#1e3a8a", "#ef4444", "#fef08a"),      # blue-900, red-500, yellow-200
    "glacier": ("#0c4a6e", "#38bdf8", "#f0f9ff"),
    "verdigris": ("#064e3b", "#34d399", "#ecfccb"),
    "orchid": ("#3b0764", "#c026d3", "#fce7f3"),
    "mono": ("#404040", "#a3a3a3", "#ffffff"),
}

PALETTE_ORDER = list(HISTOGRAM_PALETTES.keys())

DEFAULT_PALETTE = "ember"


def get_palette(name):
    """Return the (low, mid, high) hex triple for a named palette."""
    return HISTOGRAM_PALETTES[name]
