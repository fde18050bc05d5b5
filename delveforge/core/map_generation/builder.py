"""
Map builder entry point.

Dispatches to one of the three building modes over a fresh TileLayout and
returns the resulting Map. All randomness comes from the injected rng, so
a seeded generator reproduces a map exactly.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional
import logging
import random

from .filled_area import build_filled_area
from .freeform import build_freeform
from .layout import TileLayout
from .models import Map
from .tiles import TileLibrary, index_tiles
from .warren import WarrenBuilder

logger = logging.getLogger(__name__)


class MapBuildType(str, Enum):
    """How the map is grown."""
    WARREN = "warren"
    FILLED_AREA = "filled_area"
    FREEFORM = "freeform"


@dataclass
class MapBuildOptions:
    """Everything a map build needs besides the rng."""
    build_type: MapBuildType = MapBuildType.WARREN
    width: int = 20
    height: int = 15
    min_area_count: int = 4
    max_area_count: int = 10
    libraries: List[TileLibrary] = field(default_factory=list)
    failure_limit: int = 100

    def validate(self):
        """
        Raises:
            ValueError: Sizes or counts out of range
        """
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Map size must be positive, got {self.width}x{self.height}")
        if self.min_area_count < 0 or self.max_area_count < self.min_area_count:
            raise ValueError(
                f"Area counts must satisfy 0 <= min <= max, got {self.min_area_count}..{self.max_area_count}"
            )
        if self.failure_limit < 1:
            raise ValueError("failure_limit must be at least 1")


def build_map(
    options: MapBuildOptions,
    rng: Optional[random.Random] = None,
    progress: Optional[Callable[[], None]] = None,
    game_map: Optional[Map] = None,
) -> Map:
    """
    Build a map from the options' tile libraries.

    Any tiles and areas already on game_map are discarded. Libraries that
    lack the tiles a mode needs yield an empty map rather than an error.
    progress, if given, is called after each step that changes the map.

    Raises:
        ValueError: Invalid options
    """
    options.validate()
    rng = rng or random.Random()
    game_map = game_map or Map()

    game_map.areas.clear()
    tile_index = index_tiles(options.libraries)
    layout = TileLayout(tile_index, game_map.tiles)
    layout.clear()
    tiles = list(tile_index.values())

    if options.build_type == MapBuildType.WARREN:
        WarrenBuilder(
            layout=layout,
            areas=game_map.areas,
            tiles=tiles,
            rng=rng,
            max_area_count=options.max_area_count,
            failure_limit=options.failure_limit,
            progress=progress,
        ).run()
        if len(game_map.areas) < options.min_area_count:
            logger.info(
                f"Warren finished with {len(game_map.areas)} areas, "
                f"fewer than the requested minimum of {options.min_area_count}"
            )
    elif options.build_type == MapBuildType.FILLED_AREA:
        build_filled_area(
            layout, game_map.areas, tiles, options.width, options.height, rng,
            failure_limit=options.failure_limit, progress=progress,
        )
    else:
        build_freeform(
            layout, game_map.areas, tiles, options.width, options.height, rng,
            failure_limit=options.failure_limit, progress=progress,
        )

    logger.info(
        f"Built {options.build_type.value} map: {len(game_map.tiles)} tiles, {len(game_map.areas)} areas"
    )
    return game_map
