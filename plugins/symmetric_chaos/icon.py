"""
Symmetric Icon Generator

Polynomial map of the plane with n-fold dihedral symmetry. With z = x + iy:

    p  = lambda + alpha*|z|^2 + beta*Re(z^n)
    z' = p*z + gamma*conj(z^(n-1)) + i*omega*z

z^(n-1) is built by n-2 repeated complex multiplications rather than
through trig, which is both faster and matches the classic BASIC listing.
The first TRANSIENT iterations after any (re)seed are not plotted since
the orbit has not yet settled onto the attractor.
"""

from .engine_base import ChaosMap
from .projection import CenteredProjection

TRANSIENT = 100


class SymmetricIcon(ChaosMap):

    map_name = "icon"
    map_label = "Symmetric Icon"

    DEFAULTS = {
        "lambda": -1.8, "alpha": 2.0, "beta": 0.0, "gamma": 1.0,
        "omega": 0.0, "n": 4,
        "scale": 1.0,
    }
    STRUCTURAL_KEYS = ("n",)
    SEED = (0.01, 0.003)

    transient = TRANSIENT
    default_mode = "chalk"

    def step(self, x, y, params, rng):
        zzbar = x * x + y * y

        # z^(n-1)
        z_re = x
        z_im = y
        for _ in range(int(params["n"]) - 2):
            za = z_re * x - z_im * y
            zb = z_im * x + z_re * y
            z_re = za
            z_im = zb

        zn = x * z_re - y * z_im
        p = params["lambda"] + params["alpha"] * zzbar + params["beta"] * zn

        omega = params["omega"]
        gamma = params["gamma"]
        xnew = p * x + gamma * z_re - omega * y
        ynew = p * y - gamma * z_im + omega * x
        return xnew, ynew

    def projection(self, params, width, height, dpr=1.0):
        scale_factor = min(width / dpr, height / dpr) / (2.5 * params["scale"])
        return CenteredProjection(width, height, dpr, scale_factor)

    def default_color(self, params):
        return "#34d399"

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "lambda", "label": "Lambda", "section": "COEFFICIENTS",
             "min": -3.0, "max": 3.0, "default": -1.8, "fmt": ".4f"},
            {"key": "alpha", "label": "Alpha", "section": "COEFFICIENTS",
             "min": -20.0, "max": 20.0, "default": 2.0, "fmt": ".4f"},
            {"key": "beta", "label": "Beta", "section": "COEFFICIENTS",
             "min": -20.0, "max": 20.0, "default": 0.0, "fmt": ".4f"},
            {"key": "gamma", "label": "Gamma", "section": "COEFFICIENTS",
             "min": -2.0, "max": 2.0, "default": 1.0, "fmt": ".4f"},
            {"key": "omega", "label": "Omega", "section": "COEFFICIENTS",
             "min": -1.0, "max": 1.0, "default": 0.0, "fmt": ".4f"},
            {"key": "n", "label": "Symmetry (n)", "section": "SYMMETRY",
             "min": 2, "max": 12, "default": 4, "fmt": "d", "step": 1},
            {"key": "scale", "label": "Zoom", "section": "VIEW",
             "min": 0.1, "max": 5.0, "default": 1.0, "fmt": ".2f"},
        ]
