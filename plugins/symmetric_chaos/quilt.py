"""
Square Quilt Generator

Deterministic map on the unit torus built from first, second and third
harmonics of sin/cos(2*pi*x) and sin/cos(2*pi*y), a linear drift term m
and an additive shift. Every iterate is wrapped back into [0, 1) and the
wrapped point is tiled over an nperiod x nperiod grid, so the pattern has
the symmetry of the square lattice.

Presets of the form {"tables": [{"data": [...]}]} carry shifts as strings
such as "1/2"; see preset_files.parse_shift.
"""

import math
from .engine_base import ChaosMap
from .projection import TiledProjection

TWO_PI = 2 * math.pi


def wrap_unit(v):
    """Wrap v into [0, 1) by adding or removing whole units."""
    w = v - math.floor(v)
    # v slightly below an integer can round up to exactly 1.0
    if w >= 1.0:
        w = 0.0
    return w


class SquareQuilt(ChaosMap):

    map_name = "quilt"
    map_label = "Square Quilt"

    DEFAULTS = {
        "lambda": -0.59, "alpha": 0.2, "beta": 0.1, "gamma": -0.09,
        "omega": 0.0, "ma": 0.0, "shift": 0.0,
        "nperiod": 3,
    }
    STRUCTURAL_KEYS = ("nperiod",)
    SEED = (0.1, 0.334)

    default_alpha = 0.3

    def step(self, x, y, params, rng):
        lam = params["lambda"]
        alpha = params["alpha"]
        beta = params["beta"]
        gamma = params["gamma"]
        omega = params["omega"]
        ma = params["ma"]
        shift = params["shift"]

        sx = math.sin(TWO_PI * x)
        sy = math.sin(TWO_PI * y)
        cx = math.cos(TWO_PI * x)
        cy = math.cos(TWO_PI * y)

        xnew = ((lam + alpha * cy) * sx
                - omega * sy
                + beta * math.sin(2 * TWO_PI * x)
                + gamma * math.sin(3 * TWO_PI * x) * math.cos(2 * TWO_PI * y)
                + ma * x
                + shift)
        ynew = ((lam + alpha * cx) * sy
                + omega * sx
                + beta * math.sin(2 * TWO_PI * y)
                + gamma * math.sin(3 * TWO_PI * y) * math.cos(2 * TWO_PI * x)
                + ma * y
                + shift)

        if not (math.isfinite(xnew) and math.isfinite(ynew)):
            return xnew, ynew
        return wrap_unit(xnew), wrap_unit(ynew)

    def reseed(self, state, rng):
        """Restart inside the unit square, near the origin corner."""
        state.x = rng.random() * 0.01
        state.y = rng.random() * 0.01
        state.iterations = 0

    def projection(self, params, width, height, dpr=1.0):
        return TiledProjection(width, height, params["nperiod"])

    def default_color(self, params):
        return "#38bdf8"

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "lambda", "label": "Lambda", "section": "COEFFICIENTS",
             "min": -1.0, "max": 1.0, "default": -0.59, "fmt": ".3f"},
            {"key": "alpha", "label": "Alpha", "section": "COEFFICIENTS",
             "min": -1.0, "max": 1.0, "default": 0.2, "fmt": ".3f"},
            {"key": "beta", "label": "Beta", "section": "COEFFICIENTS",
             "min": -1.0, "max": 1.0, "default": 0.1, "fmt": ".3f"},
            {"key": "gamma", "label": "Gamma", "section": "COEFFICIENTS",
             "min": -1.0, "max": 1.0, "default": -0.09, "fmt": ".3f"},
            {"key": "omega", "label": "Omega", "section": "COEFFICIENTS",
             "min": -1.0, "max": 1.0, "default": 0.0, "fmt": ".3f"},
            {"key": "ma", "label": "m (drift)", "section": "COEFFICIENTS",
             "min": -3, "max": 3, "default": 0, "fmt": "d", "step": 1},
            {"key": "shift", "label": "Shift", "section": "COEFFICIENTS",
             "min": 0.0, "max": 0.5, "default": 0.0, "fmt": ".2f", "step": 0.5},
            {"key": "nperiod", "label": "Tiling period", "section": "TILING",
             "min": 1, "max": 8, "default": 3, "fmt": "d", "step": 1},
        ]
