"""Map family registry."""

from .ifs import SymmetricIFS
from .quilt import SquareQuilt
from .icon import SymmetricIcon

MAP_CLASSES = {
    "ifs": SymmetricIFS,
    "quilt": SquareQuilt,
    "icon": SymmetricIcon,
}

MAP_ORDER = ["ifs", "quilt", "icon"]


def get_map_class(name):
    try:
        return MAP_CLASSES[name]
    except KeyError:
        raise ValueError(f"Unknown map: {name!r}. "
                         f"Supported: {list(MAP_CLASSES.keys())}") from None
