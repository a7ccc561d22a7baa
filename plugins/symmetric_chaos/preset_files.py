"""
JSON preset files.

Accepted shapes:

    {"a11": 0.4, ..., "name": "Fern"}                 single parameter object
    [{...}, {...}]                                    array of objects
    {"id": "...", "name": "...", "params": {...}}     saved-preset wrapper
    {"tables": [{"nperiod": 3, "data": [...]}]}        quilt tables

Every coefficient of the family must be present and numeric. Anything
else raises PresetError; nothing is partially applied.
"""

import json
import math
import numbers
from fractions import Fraction

from .maps import get_map_class

# Optional string metadata carried alongside the coefficients
META_FIELDS = ("name", "figure", "description")

# Alternate spellings found in quilt tables
TABLE_ALIASES = {"m": "ma", "lam": "lambda", "period": "nperiod"}


class PresetError(ValueError):
    """Malformed preset or parameter file."""


def _is_number(value):
    # json accepts NaN and Infinity literals; neither is a usable coefficient
    return (isinstance(value, numbers.Real) and not isinstance(value, bool)
            and (isinstance(value, numbers.Integral) or math.isfinite(value)))


def parse_shift(value):
    """Parse a shift: a number, a numeric string, or a fraction like "1/2"."""
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return float(Fraction(text))
        except (ValueError, ZeroDivisionError):
            pass
    raise PresetError(f"Invalid shift: {value!r}")


def infer_family(obj):
    """Guess the map family from a parameter object's keys."""
    if isinstance(obj, dict):
        if "map" in obj:
            if not isinstance(obj["map"], str):
                raise PresetError(f"Field 'map' must be a string, got {obj['map']!r}")
            return obj["map"]
        if "params" in obj and isinstance(obj["params"], dict):
            obj = obj["params"]
        if "a11" in obj:
            return "ifs"
        if "nperiod" in obj or "ma" in obj:
            return "quilt"
        if "lambda" in obj and "n" in obj:
            return "icon"
    raise PresetError("Cannot determine map family from preset fields")


def parse_params(obj, family):
    """Validate one parameter object and return it as a flat dict.

    The result holds every coefficient of the family plus any string
    metadata (name, figure, description).
    """
    if not isinstance(obj, dict):
        raise PresetError(f"Expected a parameter object, got {type(obj).__name__}")
    if not isinstance(family, str):
        raise PresetError(f"Map family must be a string, got {family!r}")
    try:
        map_class = get_map_class(family)
    except ValueError as e:
        raise PresetError(str(e)) from None
    if "map" in obj and obj["map"] != family:
        raise PresetError(f"Preset is for map {obj['map']!r}, not {family!r}")

    fields = obj
    if "params" in obj and isinstance(obj["params"], dict):
        fields = obj["params"]

    out = {}
    missing = []
    for key in map_class.DEFAULTS:
        if key not in fields:
            missing.append(key)
        elif not _is_number(fields[key]):
            raise PresetError(f"Field {key!r} must be numeric, got {fields[key]!r}")
        else:
            out[key] = fields[key]
    if missing:
        raise PresetError(f"Missing {family} fields: {', '.join(missing)}")

    for key in META_FIELDS:
        if key in obj and isinstance(obj[key], str):
            out[key] = obj[key]
    out["map"] = family
    return out


def normalize_table_entry(entry, table=None):
    """Flatten one quilt table row into the parameter shape."""
    if not isinstance(entry, dict):
        raise PresetError(f"Table entry must be an object, got {entry!r}")
    flat = {}
    if table:
        for key in ("nperiod", "period", "shift"):
            if key in table:
                flat[TABLE_ALIASES.get(key, key)] = table[key]
    for key, value in entry.items():
        flat[TABLE_ALIASES.get(key, key)] = value
    if "shift" in flat:
        flat["shift"] = parse_shift(flat["shift"])
    if "name" not in flat and table and isinstance(table.get("name"), str):
        flat["name"] = table["name"]
    return flat


def parse_presets(data, family=None):
    """Parse decoded JSON into a list of validated parameter dicts."""
    if isinstance(data, dict) and "tables" in data:
        tables = data["tables"]
        if not isinstance(tables, list):
            raise PresetError("'tables' must be an array")
        family = family or "quilt"
        if family != "quilt":
            raise PresetError("Table presets are only defined for the quilt map")
        presets = []
        for ti, table in enumerate(tables):
            rows = table.get("data") if isinstance(table, dict) else None
            if not isinstance(rows, list):
                raise PresetError(f"Table {ti} has no 'data' array")
            for ri, row in enumerate(rows):
                try:
                    presets.append(parse_params(normalize_table_entry(row, table), family))
                except PresetError as e:
                    raise PresetError(f"Table {ti}, entry {ri}: {e}") from None
        if not presets:
            raise PresetError("No presets found in tables")
        return presets

    if isinstance(data, list):
        if not data:
            raise PresetError("Preset array is empty")
        family = family or infer_family(data[0])
        presets = []
        for i, item in enumerate(data):
            try:
                presets.append(parse_params(item, family))
            except PresetError as e:
                raise PresetError(f"Entry {i}: {e}") from None
        return presets

    if isinstance(data, dict):
        family = family or infer_family(data)
        return [parse_params(data, family)]

    raise PresetError("File must contain a parameter object, an array, or tables")


def loads_presets(text, family=None):
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PresetError(f"Failed to parse JSON: {e}") from e
    return parse_presets(data, family)


def read_preset_file(path, family=None):
    """Load and validate a preset file. Raises PresetError on bad content."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise PresetError(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise PresetError(f"{path} is not UTF-8 text: {e}") from e
    return loads_presets(text, family)


def dumps_params(params, name=None, figure=None, family=None):
    """Serialize one parameter set. Floats round-trip exactly."""
    obj = {}
    if family is not None:
        obj["map"] = family
    if name is not None:
        obj["name"] = name
    if figure is not None:
        obj["figure"] = figure
    obj.update({k: v for k, v in params.items() if k not in obj})
    return json.dumps(obj, indent=2)


def dumps_presets(presets):
    return json.dumps(list(presets), indent=2)


def save_presets(path, presets):
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps_presets(presets))
        f.write("\n")

