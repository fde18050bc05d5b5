"""
Filled-area mode: pack a fixed rectangle with tiles until no square is empty.

Tiles are dropped at random empty positions. Now and then a single-square
tile is pushed into a nook that is already enclosed on three or more
sides. When nothing fits for failure_limit tries in a row, a random
placed tile is lifted out to make room. The run ends once every square
of the rectangle is covered.
"""
from typing import Callable, List, Optional
import logging
import random

from .geometry import Point, Rect, footprint
from .layout import TileLayout
from .models import MapArea
from .tiles import Tile, TileCategory, TileData

logger = logging.getLogger(__name__)

ONE_BY_ONE_CHANCE = 20


def _nooks(layout: TileLayout, bounds: Rect) -> List[Point]:
    """Empty squares inside bounds with at least three occupied neighbours."""
    points = []
    for x, y in bounds.squares():
        if layout.is_occupied((x, y)):
            continue
        neighbours = ((x, y - 1), (x + 1, y), (x, y + 1), (x - 1, y))
        if sum(1 for n in neighbours if layout.is_occupied(n)) >= 3:
            points.append((x, y))
    return points


def _open_positions(layout: TileLayout, bounds: Rect, width: int, height: int, step: int) -> List[Point]:
    """Anchors on a step grid where a width x height tile fits inside bounds."""
    points = []
    for x in range(bounds.left, bounds.right + 1, step):
        for y in range(bounds.top, bounds.bottom + 1, step):
            rect = Rect(x, y, width, height)
            if rect.right > bounds.right or rect.bottom > bounds.bottom:
                continue
            if layout.is_rect_empty(rect):
                points.append((x, y))
    return points


def build_filled_area(
    layout: TileLayout,
    areas: List[MapArea],
    tiles: List[Tile],
    width: int,
    height: int,
    rng: random.Random,
    failure_limit: int = 100,
    progress: Optional[Callable[[], None]] = None,
):
    """
    Cover a width x height rectangle anchored at the origin.

    Uses plain and feature tiles; needs at least one single-square tile so
    every gap can eventually be closed. Does nothing otherwise.
    """
    pool = [t for t in tiles if t.category in (TileCategory.PLAIN, TileCategory.FEATURE)]
    one_tiles = [t for t in pool if t.area == 1]
    if not pool or not one_tiles:
        logger.info("Filled area needs plain or feature tiles including a 1x1; nothing to build")
        return

    bounds = Rect(0, 0, width, height)
    areas.append(MapArea(name="Area", region=bounds))

    filled = 0
    failures = 0
    while True:
        one_by_one = rng.randrange(ONE_BY_ONE_CHANCE) == 0
        tile = rng.choice(one_tiles if one_by_one else pool)
        rotations = rng.randrange(4)

        if one_by_one:
            points = _nooks(layout, bounds)
        else:
            tile_width, tile_height = footprint(tile, rotations)
            step = 1 if tile.area < 4 else 2
            points = _open_positions(layout, bounds, tile_width, tile_height, step)

        if points:
            layout.add(TileData(tile_id=tile.id, location=rng.choice(points), rotations=rotations))
            filled += tile.area
            failures = 0
        else:
            failures += 1
            if failures >= failure_limit:
                failures = 0
                if len(layout):
                    victim = rng.choice(layout.placements)
                    layout.remove(victim)
                    filled -= layout.tile_of(victim).area

        if progress is not None:
            progress()

        if filled == bounds.area:
            # The whole map is one space, so named areas add nothing
            areas.clear()
            break

    logger.debug(f"Filled {width}x{height} with {len(layout)} tiles")
