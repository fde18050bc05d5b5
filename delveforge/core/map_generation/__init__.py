"""
Map generation: tiles, placement geometry and the three building modes.
"""
from .tiles import Tile, TileCategory, TileData, TileLibrary, index_tiles
from .geometry import Direction, Endpoint, Orientation, Rect
from .layout import TileLayout
from .models import Map, MapArea
from .warren import WarrenBuilder
from .filled_area import build_filled_area
from .freeform import build_freeform
from .builder import MapBuildOptions, MapBuildType, build_map

__all__ = [
    "Tile",
    "TileCategory",
    "TileData",
    "TileLibrary",
    "index_tiles",
    "Direction",
    "Endpoint",
    "Orientation",
    "Rect",
    "TileLayout",
    "Map",
    "MapArea",
    "WarrenBuilder",
    "build_filled_area",
    "build_freeform",
    "MapBuildOptions",
    "MapBuildType",
    "build_map",
]
