"""
Parameter Store

Holds the coefficients of the active map. Readers get a read-only
snapshot that is swapped wholesale on every change, so an iteration batch
never sees a half-applied preset. Structural changes (symmetry degree,
reflection flag, tiling period) are reported to subscribers so the frame
driver can re-seed the orbit and clear accumulated pixels.
"""

import math
import numbers
from types import MappingProxyType

from .maps import get_map_class


def _check_number(key, value):
    # bool is an int subclass but never a valid coefficient
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"Parameter {key!r} must be a real number, got {value!r}")
    if not isinstance(value, numbers.Integral) and not math.isfinite(value):
        raise ValueError(f"Parameter {key!r} must be finite, got {value!r}")


class ParameterStore:
    """Current coefficients for one map family."""

    def __init__(self, family, params=None):
        self.family = family
        self.map_class = get_map_class(family)
        self.defaults = dict(self.map_class.DEFAULTS)
        self._listeners = []
        values = dict(self.defaults)
        if params:
            values.update(self._filter(params))
        self._params = MappingProxyType(values)

    @property
    def snapshot(self):
        """Read-only view of the current parameters."""
        return self._params

    def __getitem__(self, key):
        return self._params[key]

    def as_dict(self):
        return dict(self._params)

    def subscribe(self, callback):
        """callback(store, structural) is invoked after every change."""
        self._listeners.append(callback)

    def unsubscribe(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _filter(self, params):
        out = {}
        for key, value in params.items():
            if key not in self.defaults:
                raise KeyError(f"Unknown {self.family} parameter: {key!r}. "
                               f"Expected one of: {list(self.defaults)}")
            _check_number(key, value)
            out[key] = value
        return out

    def _commit(self, values):
        old = self._params
        self._params = MappingProxyType(values)
        structural = any(old.get(k) != values.get(k)
                         for k in self.map_class.STRUCTURAL_KEYS)
        for callback in list(self._listeners):
            callback(self, structural)
        return structural

    def update(self, key, value):
        """Set a single field. Returns True if the change is structural."""
        values = dict(self._params)
        values.update(self._filter({key: value}))
        return self._commit(values)

    def update_many(self, **params):
        """Set several fields in one commit."""
        values = dict(self._params)
        values.update(self._filter(params))
        return self._commit(values)

    def replace(self, params):
        """Swap in a complete parameter set (preset load).

        Missing fields fall back to the family defaults; metadata keys such
        as name or figure are ignored.
        """
        values = dict(self.defaults)
        values.update(self._filter({k: v for k, v in params.items()
                                    if k in self.defaults}))
        return self._commit(values)

    def reset_defaults(self):
        return self._commit(dict(self.defaults))
