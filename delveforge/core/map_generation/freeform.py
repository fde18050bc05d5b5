"""
Freeform mode: grow an irregular blob by attaching tiles edge to edge.

Each new tile is set flush against a random side of a random placed tile,
at any offset along that side that keeps the two touching. Growth stops
once the placed area reaches width * height or after too many attempts in
a row find no room.
"""
from typing import Callable, List, Optional
import logging
import random

from .geometry import Rect
from .layout import TileLayout
from .models import MapArea
from .tiles import Tile, TileCategory, TileData

logger = logging.getLogger(__name__)


def _attachments(placed: Rect, width: int, height: int) -> List[Rect]:
    """Every width x height rectangle sharing an edge with placed."""
    rects = []
    for x in range(placed.left - (width - 1), placed.right):
        rects.append(Rect(x, placed.top - height, width, height))
        rects.append(Rect(x, placed.bottom, width, height))
    for y in range(placed.top - (height - 1), placed.bottom):
        rects.append(Rect(placed.left - width, y, width, height))
        rects.append(Rect(placed.right, y, width, height))
    return rects


def build_freeform(
    layout: TileLayout,
    areas: List[MapArea],
    tiles: List[Tile],
    width: int,
    height: int,
    rng: random.Random,
    failure_limit: int = 100,
    progress: Optional[Callable[[], None]] = None,
):
    """Attach plain and feature tiles until their total area reaches width * height."""
    pool = [t for t in tiles if t.category in (TileCategory.PLAIN, TileCategory.FEATURE)]
    if not pool:
        logger.info("Freeform needs plain or feature tiles; nothing to build")
        return

    budget = width * height
    failures = 0
    while budget > 0:
        if progress is not None:
            progress()

        if failures >= failure_limit:
            logger.debug(f"Freeform stopped with {budget} squares unplaced")
            break

        tile = rng.choice(pool)
        location = (0, 0)
        if len(layout):
            anchor = rng.choice(layout.placements)
            candidates = [
                rect for rect in _attachments(layout.rect_of(anchor), tile.width, tile.height)
                if layout.is_rect_empty(rect)
            ]
            if not candidates:
                failures += 1
                continue
            chosen = rng.choice(candidates)
            location = (chosen.x, chosen.y)

        layout.add(TileData(tile_id=tile.id, location=location, rotations=0))
        budget -= tile.area
        failures = 0

    left = top = right = bottom = 0
    for td in layout:
        rect = layout.rect_of(td)
        left = min(left, rect.left)
        top = min(top, rect.top)
        right = max(right, rect.right)
        bottom = max(bottom, rect.bottom)
    areas.append(MapArea(name="Area", region=Rect(left, top, right - left, bottom - top)))
