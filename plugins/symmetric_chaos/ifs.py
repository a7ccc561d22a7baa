"""
Symmetric IFS Generator

One affine map combined with its n rotational images. Each iteration
applies the affine transform, rotates the result by a random fold of the
n-fold rotation group and, in conjugate mode, mirrors it across the x-axis
with probability 1/2. Zn symmetry for conj=0, Dn for conj=1.
"""

import math
from .engine_base import ChaosMap
from .projection import CenteredProjection


class TrigTable:
    """cos/sin of the rotation angle 2*pi*k/n for each fold k in [0, n)."""

    __slots__ = ("n", "c", "s")

    def __init__(self, n):
        self.n = n
        self.c = [math.cos(2 * math.pi * k / n) for k in range(n)]
        self.s = [math.sin(2 * math.pi * k / n) for k in range(n)]

    def __len__(self):
        return self.n


def fold_count(n):
    """Symmetry degree as used by the iterator (positive integer)."""
    return max(1, int(math.floor(n)))


class SymmetricIFS(ChaosMap):

    map_name = "ifs"
    map_label = "Symmetric IFS"

    DEFAULTS = {
        "a11": 0.4, "a12": 0.35, "a21": 0.2, "a22": 0.4,
        "b1": 0.0, "b2": 0.4,
        "n": 3, "conj": 1,
        "scale": 1.0,
    }
    STRUCTURAL_KEYS = ("n", "conj")
    SEED = (0.1, -0.01)

    def __init__(self):
        self._trig = None

    def trig_table(self, n):
        """Cached TrigTable, rebuilt whenever the fold count changes."""
        n = fold_count(n)
        if self._trig is None or self._trig.n != n:
            self._trig = TrigTable(n)
        return self._trig

    def step(self, x, y, params, rng):
        trig = self.trig_table(params["n"])

        xnew = params["a11"] * x + params["a12"] * y + params["b1"]
        ynew = params["a21"] * x + params["a22"] * y + params["b2"]

        m = int(rng.random() * trig.n)
        if m >= trig.n:
            m = trig.n - 1
        cm = trig.c[m]
        sm = trig.s[m]
        x1 = cm * xnew - sm * ynew
        y1 = sm * xnew + cm * ynew

        if params["conj"] == 1 and rng.random() < 0.5:
            y1 = -y1
        return x1, y1

    def projection(self, params, width, height, dpr=1.0):
        scale_factor = min(width / dpr, height / dpr) * 0.4 * params["scale"]
        return CenteredProjection(width, height, dpr, scale_factor)

    def default_color(self, params):
        # Fuchsia for Dn, cyan for Zn
        return "#e879f9" if params["conj"] == 1 else "#22d3ee"

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "a11", "label": "a11", "section": "AFFINE MATRIX",
             "min": -1.0, "max": 1.0, "default": 0.4, "fmt": ".3f"},
            {"key": "a12", "label": "a12", "section": "AFFINE MATRIX",
             "min": -1.0, "max": 1.0, "default": 0.35, "fmt": ".3f"},
            {"key": "a21", "label": "a21", "section": "AFFINE MATRIX",
             "min": -1.0, "max": 1.0, "default": 0.2, "fmt": ".3f"},
            {"key": "a22", "label": "a22", "section": "AFFINE MATRIX",
             "min": -1.0, "max": 1.0, "default": 0.4, "fmt": ".3f"},
            {"key": "b1", "label": "b1", "section": "TRANSLATION",
             "min": -1.0, "max": 1.0, "default": 0.0, "fmt": ".3f"},
            {"key": "b2", "label": "b2", "section": "TRANSLATION",
             "min": -1.0, "max": 1.0, "default": 0.4, "fmt": ".3f"},
            {"key": "n", "label": "Symmetry (n)", "section": "SYMMETRY",
             "min": 1, "max": 12, "default": 3, "fmt": "d", "step": 1},
            {"key": "conj", "label": "Conjugate (Dn)", "section": "SYMMETRY",
             "min": 0, "max": 1, "default": 1, "fmt": "d", "step": 1},
            {"key": "scale", "label": "Zoom", "section": "VIEW",
             "min": 0.1, "max": 5.0, "default": 1.0, "fmt": ".2f"},
        ]
