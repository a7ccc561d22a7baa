"""
Symmetric Chaos Parameter Presets

Each preset names a map family and the coefficients known to produce an
interesting figure. The "map" field determines which iterator to use
(ifs, quilt, icon). Optional "mode" / "palette" / "color" keys set the
preferred rendering.
"""

PRESETS = {
    # =====================================================================
    # SYMMETRIC IFS
    # =====================================================================
    "ifs_default": {
        "map": "ifs",
        "name": "Dihedral Fern",
        "description": "Default IFS, D3 symmetry",
        "a11": 0.4, "a12": 0.35, "a21": 0.2, "a22": 0.4, "b1": 0.0, "b2": 0.4,
        "n": 3, "conj": 1, "scale": 1.0,
    },
    "ifs_pinwheel": {
        "map": "ifs",
        "name": "Pinwheel",
        "description": "Cyclic Z5 spiral arms",
        "a11": 0.45, "a12": -0.3, "a21": 0.3, "a22": 0.45, "b1": 0.25, "b2": 0.1,
        "n": 5, "conj": 0, "scale": 1.2,
    },
    "ifs_snowflake": {
        "map": "ifs",
        "name": "Snowflake",
        "description": "Six-fold dihedral lace",
        "a11": 0.3, "a12": 0.0, "a21": 0.0, "a22": 0.3, "b1": 0.7, "b2": 0.0,
        "n": 6, "conj": 1, "scale": 1.0,
        "mode": "histogram",
    },
    "ifs_crystal": {
        "map": "ifs",
        "name": "Crystal",
        "description": "Square D4 lattice of sheared copies",
        "a11": 0.5, "a12": 0.2, "a21": -0.1, "a22": 0.45, "b1": 0.3, "b2": 0.3,
        "n": 4, "conj": 1, "scale": 0.9,
    },

    # =====================================================================
    # SQUARE QUILTS
    # =====================================================================
    "emerald_mosaic": {
        "map": "quilt",
        "name": "Emerald Mosaic",
        "description": "Dense green tessellation",
        "lambda": -0.59, "alpha": 0.2, "beta": 0.1, "gamma": -0.33,
        "omega": 0.0, "ma": 2, "shift": 0.0, "nperiod": 3,
    },
    "sugar_and_spice": {
        "map": "quilt",
        "name": "Sugar and Spice",
        "description": "Half-shifted speckled quilt",
        "lambda": -0.59, "alpha": 0.2, "beta": 0.1, "gamma": -0.27,
        "omega": 0.0, "ma": 0, "shift": 0.5, "nperiod": 3,
    },
    "sicilian_tile": {
        "map": "quilt",
        "name": "Sicilian Tile",
        "description": "Open tile lattice",
        "lambda": -0.2, "alpha": -0.1, "beta": 0.1, "gamma": -0.25,
        "omega": 0.0, "ma": 0, "shift": 0.0, "nperiod": 3,
    },
    "roses": {
        "map": "quilt",
        "name": "Roses",
        "description": "Rounded rosette tiles",
        "lambda": 0.25, "alpha": -0.3, "beta": 0.2, "gamma": 0.3,
        "omega": 0.0, "ma": 1, "shift": 0.0, "nperiod": 3,
    },
    "wagonwheels": {
        "map": "quilt",
        "name": "Wagonwheels",
        "description": "Spoked wheels on a square grid",
        "lambda": -0.28, "alpha": 0.25, "beta": 0.05, "gamma": -0.24,
        "omega": 0.0, "ma": -1, "shift": 0.0, "nperiod": 3,
    },
    "victorian_tiles": {
        "map": "quilt",
        "name": "Victorian Tiles",
        "description": "Ornate shifted tiling",
        "lambda": -0.12, "alpha": -0.36, "beta": 0.18, "gamma": -0.14,
        "omega": 0.0, "ma": 1, "shift": 0.5, "nperiod": 3,
    },
    "mosque": {
        "map": "quilt",
        "name": "Mosque",
        "description": "Domed arches",
        "lambda": 0.1, "alpha": 0.2, "beta": 0.1, "gamma": 0.39,
        "omega": 0.0, "ma": -1, "shift": 0.0, "nperiod": 3,
    },
    "red_tiles": {
        "map": "quilt",
        "name": "Red Tiles",
        "description": "Fine shifted tiles",
        "lambda": -0.589, "alpha": 0.2, "beta": 0.04, "gamma": -0.2,
        "omega": 0.0, "ma": 0, "shift": 0.5, "nperiod": 3,
    },
    "cathedral_attractor": {
        "map": "quilt",
        "name": "Cathedral Attractor",
        "description": "Vaulted attractor cells",
        "lambda": -0.28, "alpha": 0.08, "beta": 0.45, "gamma": -0.05,
        "omega": 0.0, "ma": 2, "shift": 0.5, "nperiod": 3,
    },
    "gyroscopes": {
        "map": "quilt",
        "name": "Gyroscopes",
        "description": "Nested spinning rings",
        "lambda": -0.59, "alpha": 0.2, "beta": 0.2, "gamma": 0.3,
        "omega": 0.0, "ma": 2, "shift": 0.0, "nperiod": 3,
    },
    "cats_eyes": {
        "map": "quilt",
        "name": "Cats Eyes",
        "description": "Almond-shaped cells",
        "lambda": -0.28, "alpha": 0.25, "beta": 0.05, "gamma": -0.24,
        "omega": 0.0, "ma": -1, "shift": 0.5, "nperiod": 3,
    },
    "flowers_with_ribbons": {
        "map": "quilt",
        "name": "Flowers with Ribbons",
        "description": "Twisted ribbons between flowers (omega != 0)",
        "lambda": -0.11, "alpha": -0.26, "beta": 0.19, "gamma": -0.059,
        "omega": 0.07, "ma": 2, "shift": 0.5, "nperiod": 3,
    },

    # =====================================================================
    # SYMMETRIC ICONS
    # =====================================================================
    "icon_default": {
        "map": "icon",
        "name": "Four-Fold Icon",
        "description": "Default D4 icon",
        "lambda": -1.8, "alpha": 2.0, "beta": 0.0, "gamma": 1.0,
        "omega": 0.0, "n": 4, "scale": 1.0,
    },
    "icon_seven_petals": {
        "map": "icon",
        "name": "Seven Petals",
        "description": "Seven-fold flower",
        "lambda": -2.08, "alpha": 1.0, "beta": -0.1, "gamma": 0.167,
        "omega": 0.0, "n": 7, "scale": 1.0,
        "mode": "histogram",
    },
    "icon_hexagon": {
        "map": "icon",
        "name": "Hexagon",
        "description": "Six-fold interlaced shell",
        "lambda": -2.7, "alpha": 5.0, "beta": 1.5, "gamma": 1.0,
        "omega": 0.0, "n": 6, "scale": 1.0,
        "mode": "histogram", "palette": "glacier",
    },
    "icon_trefoil": {
        "map": "icon",
        "name": "Trefoil",
        "description": "Three-fold loops",
        "lambda": 2.5, "alpha": -2.5, "beta": 0.0, "gamma": 0.9,
        "omega": 0.0, "n": 3, "scale": 1.0,
    },
    "icon_swirl": {
        "map": "icon",
        "name": "Swirl",
        "description": "Cyclic (omega != 0) five-fold swirl",
        "lambda": -2.5, "alpha": 5.0, "beta": -1.9, "gamma": 1.0,
        "omega": 0.188, "n": 5, "scale": 1.0,
        "mode": "glow",
    },
    "icon_starfish": {
        "map": "icon",
        "name": "Starfish",
        "description": "Five-armed star",
        "lambda": -2.34, "alpha": 2.0, "beta": 0.2, "gamma": 0.1,
        "omega": 0.0, "n": 5, "scale": 1.0,
        "mode": "histogram", "palette": "orchid",
    },
    "icon_bracelet": {
        "map": "icon",
        "name": "Bracelet",
        "description": "Three-fold beaded ring",
        "lambda": -2.195, "alpha": 10.0, "beta": -12.0, "gamma": 1.0,
        "omega": 0.0, "n": 3, "scale": 1.0,
    },
}

# Metadata / rendering keys that are not map coefficients
META_KEYS = ("map", "name", "description", "figure", "mode", "palette", "color")

PRESET_ORDERS = {
    "ifs": ["ifs_default", "ifs_pinwheel", "ifs_snowflake", "ifs_crystal"],
    "quilt": [
        "emerald_mosaic", "sugar_and_spice", "sicilian_tile", "roses",
        "wagonwheels", "victorian_tiles", "mosque", "red_tiles",
        "cathedral_attractor", "gyroscopes", "cats_eyes",
        "flowers_with_ribbons",
    ],
    "icon": [
        "icon_default", "icon_seven_petals", "icon_hexagon", "icon_trefoil",
        "icon_swirl", "icon_starfish", "icon_bracelet",
    ],
}

# Flat list of all presets (number keys 1-9 in the viewer map here)
PRESET_ORDER = [k for keys in PRESET_ORDERS.values() for k in keys]

MAP_DEFAULT_PRESET = {
    "ifs": "ifs_default",
    "quilt": "emerald_mosaic",
    "icon": "icon_default",
}


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def get_presets_for_map(map_name):
    """Return ordered list of preset keys for a map family."""
    return PRESET_ORDERS.get(map_name, [])


def preset_params(preset):
    """Coefficients of a preset, without metadata keys."""
    return {k: v for k, v in preset.items() if k not in META_KEYS}


def list_presets(map_name=None):
    """Return list of (key, name, description) for presets.
    If map_name is specified, filter to that family only."""
    if map_name:
        keys = PRESET_ORDERS.get(map_name, [])
    else:
        keys = PRESET_ORDER
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in keys if k in PRESETS]
