"""
Warren mode: rooms and corridors grown from a frontier of open edges.

Starting from a single corridor or stairway at the origin, the builder
repeatedly picks an open endpoint and tries to attach an area (a cluster
of room tiles), a corridor, a doorway or a stairway to it. Placements
never overlap earlier tiles; corridor, doorway and stairway placements
also keep one square clear on either side. Growth stops at the target
area count, when the frontier empties, or after too many consecutive
failed placements. Doorways that do not join two open spaces are then
removed.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
import logging
import random

from .geometry import (
    Direction,
    Endpoint,
    Rect,
    anchor_at,
    endpoint_for,
    footprint,
    starting_direction,
    tile_orientation,
    tile_rect,
)
from .layout import TileLayout
from .models import MapArea
from .tiles import Tile, TileCategory, TileData

logger = logging.getLogger(__name__)

FEATURE_FAILURE_LIMIT = 1000
EXIT_FAILURE_LIMIT = 1000


class WarrenAction(str, Enum):
    """What to attach to a frontier endpoint."""
    AREA = "area"
    CORRIDOR = "corridor"
    DOORWAY = "doorway"
    STAIRWAY = "stairway"


# Out of 10
ACTION_WEIGHTS: List[Tuple[WarrenAction, int]] = [
    (WarrenAction.AREA, 3),
    (WarrenAction.CORRIDOR, 5),
    (WarrenAction.DOORWAY, 1),
    (WarrenAction.STAIRWAY, 1),
]


@dataclass
class _Placement:
    tile: Tile
    td: TileData
    direction: Direction


@dataclass
class WarrenBuilder:
    """One warren build run; holds the frontier and categorised tiles."""
    layout: TileLayout
    areas: List[MapArea]
    tiles: List[Tile]
    rng: random.Random
    max_area_count: int = 10
    failure_limit: int = 100
    progress: Optional[Callable[[], None]] = None
    endpoints: List[Endpoint] = field(default_factory=list)

    def __post_init__(self):
        self.by_category: Dict[TileCategory, List[Tile]] = {cat: [] for cat in TileCategory}
        for tile in self.tiles:
            self.by_category[tile.category].append(tile)

        self.rooms = [t for t in self.by_category[TileCategory.PLAIN] if t.is_room]
        self.corridors = [t for t in self.by_category[TileCategory.PLAIN] if t.is_corridor]

    def _notify(self):
        if self.progress is not None:
            self.progress()

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    def run(self):
        self.endpoints = []
        self.begin_map()

        failures = 0
        while len(self.areas) < self.max_area_count:
            if not self.endpoints:
                break
            if failures == self.failure_limit:
                logger.debug(f"Warren stopped after {failures} consecutive failures")
                break

            ep = self.rng.choice(self.endpoints)
            action = self._pick_action()

            if action == WarrenAction.AREA:
                ok = self.add_area(ep)
            elif action == WarrenAction.CORRIDOR:
                ok = self.add_corridor(ep, follow=False)
            elif action == WarrenAction.DOORWAY:
                # A doorway straight off a doorway is skipped and the edge spent
                ok = ep.category == TileCategory.DOORWAY or self.add_doorway(ep)
            else:
                ok = self.add_stairway(ep)

            if ok:
                self.endpoints.remove(ep)
                failures = 0
                self._notify()
            else:
                failures += 1

        self.clean()

    def _pick_action(self) -> WarrenAction:
        total = sum(weight for _, weight in ACTION_WEIGHTS)
        roll = self.rng.randrange(total)

        cumulative = 0
        for action, weight in ACTION_WEIGHTS:
            cumulative += weight
            if roll < cumulative:
                return action
        return ACTION_WEIGHTS[-1][0]

    def begin_map(self):
        """Seed the map with a corridor or a stairway at the origin."""
        options = []
        if self.corridors:
            options.append(TileCategory.PLAIN)
        if self.by_category[TileCategory.STAIRWAY]:
            options.append(TileCategory.STAIRWAY)

        if not options:
            logger.info("Tile libraries have neither corridors nor stairways; nothing to build")
            return

        if self.rng.choice(options) == TileCategory.PLAIN:
            self.add_corridor(None, follow=False)
        else:
            self.add_stairway(None)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def add_first_tile(self, tile: Tile) -> TileData:
        td = TileData(tile_id=tile.id, location=(0, 0), rotations=self.rng.randrange(4))
        self.layout.add(td)
        return td

    def _seed_endpoint(self, tile: Tile, td: TileData):
        direction = starting_direction(tile_orientation(tile, td))
        self.endpoints.append(endpoint_for(tile, td, direction))

    def add_tile(self, tile: Tile, ep: Endpoint, follow: bool, not_alongside: bool) -> Optional[_Placement]:
        """
        Try to place a tile against an endpoint.

        When following, the tile continues in the endpoint's direction and
        is turned to run along it; otherwise it heads in any direction but
        back and is rotated at random. The returned direction is the way
        the new tile faces.
        """
        direction = ep.direction
        rotations = 0

        if follow:
            shortest = min(tile.width, tile.height)
            if direction.is_vertical:
                if shortest > 1:
                    rotations = 1 if tile.width > tile.height else 0
                else:
                    rotations = 1 if tile.width < tile.height else 0
            else:
                if shortest > 1:
                    rotations = 1 if tile.height > tile.width else 0
                else:
                    rotations = 1 if tile.height < tile.width else 0
        else:
            choices = [d for d in Direction if d != ep.direction.reverse]
            direction = self.rng.choice(choices)
            rotations = self.rng.randrange(4)

        width, height = footprint(tile, rotations)
        td = TileData(tile_id=tile.id, location=anchor_at(ep, width, height), rotations=rotations)

        rect = tile_rect(tile, td)
        if not_alongside:
            rect = rect.widened(direction)

        if not self.layout.is_rect_empty(rect):
            return None

        self.layout.add(td)
        return _Placement(tile, td, direction)

    def add_corridor(self, ep: Optional[Endpoint], follow: bool) -> bool:
        if not self.corridors:
            return False

        tile = self.rng.choice(self.corridors)
        if ep is None:
            self._seed_endpoint(tile, self.add_first_tile(tile))
            return True

        placed = self.add_tile(tile, ep, follow, not_alongside=True)
        if placed is None:
            return False

        self.endpoints.append(endpoint_for(tile, placed.td, placed.direction))
        return True

    def add_doorway(self, ep: Endpoint) -> bool:
        doors = self.by_category[TileCategory.DOORWAY]
        if not doors:
            return False

        tile = self.rng.choice(doors)
        placed = self.add_tile(tile, ep, follow=True, not_alongside=True)
        if placed is None:
            return False

        self.endpoints.append(endpoint_for(tile, placed.td, placed.direction))
        return True

    def add_stairway(self, ep: Optional[Endpoint]) -> bool:
        stairs = self.by_category[TileCategory.STAIRWAY]
        if not stairs:
            return False

        tile = self.rng.choice(stairs)
        if ep is None:
            self._seed_endpoint(tile, self.add_first_tile(tile))
            return True

        # Stairs lead off the map, so they open no new edge
        return self.add_tile(tile, ep, follow=True, not_alongside=True) is not None

    # -------------------------------------------------------------------------
    # Areas
    # -------------------------------------------------------------------------

    def add_area(self, ep: Endpoint) -> bool:
        """Place 1-5 room tiles as one area, decorate it and open exits."""
        if not self.rooms:
            return False

        chosen = [self.rng.choice(self.rooms) for _ in range(1 + self.rng.randrange(5))]

        local = [ep]
        placed: List[_Placement] = []
        for tile in chosen:
            if not local:
                break

            current = self.rng.choice(local)
            placement = self.add_tile(tile, current, follow=False, not_alongside=False)
            if placement is None:
                continue

            local.remove(current)
            placed.append(placement)
            for direction in Direction:
                if direction != placement.direction.reverse:
                    local.append(endpoint_for(tile, placement.td, direction))

        if not placed:
            return False

        self.add_map_area(placed)
        self.add_features(placed)
        self.add_exits(local)
        return True

    def add_map_area(self, placed: List[_Placement]):
        bounds = Rect.bounding(tile_rect(p.tile, p.td) for p in placed)
        name = f"Area {len(self.areas) + 1}"
        self.areas.append(MapArea(name=name, region=bounds.padded(1)))

    def add_features(self, placed: List[_Placement]):
        """Scatter non-overlapping feature tiles over the area's rooms."""
        features = self.by_category[TileCategory.FEATURE]
        if not features:
            return

        total_area = sum(p.tile.area for p in placed)
        wanted = self.rng.randrange(total_area // 10) if total_area >= 10 else 0

        added: List[Rect] = []
        failures = 0
        while len(added) != wanted:
            if failures == FEATURE_FAILURE_LIMIT:
                break

            tile = self.rng.choice(features)
            rotations = self.rng.randrange(4)
            width, height = footprint(tile, rotations)

            candidates = []
            for p in placed:
                room_width, room_height = footprint(p.tile, p.td.rotations)
                if room_width >= width and room_height >= height:
                    candidates.append((p, room_width - width, room_height - height))

            ok = False
            if candidates:
                target, dx, dy = self.rng.choice(candidates)
                x, y = target.td.location
                if dx != 0:
                    x += self.rng.randrange(dx)
                if dy != 0:
                    y += self.rng.randrange(dy)

                td = TileData(tile_id=tile.id, location=(x, y), rotations=rotations)
                rect = tile_rect(tile, td)
                if not any(rect.intersects(other) for other in added):
                    self.layout.add(td)
                    added.append(rect)
                    ok = True

            if ok:
                failures = 0
            else:
                failures += 1

    def add_exits(self, local: List[Endpoint]):
        """Open 1-3 doorways or corridors off the area's remaining edges."""
        wanted = 1 + self.rng.randrange(3)
        exits = 0
        failures = 0
        while exits != wanted:
            if not local or failures == EXIT_FAILURE_LIMIT:
                break

            point = self.rng.choice(local)
            if self.rng.randrange(2) == 0:
                ok = self.add_doorway(point)
            else:
                ok = self.add_corridor(point, follow=True)

            if ok:
                exits += 1
                local.remove(point)
                failures = 0
            else:
                failures += 1

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    def open_sides(self, td: TileData) -> int:
        """How many of a tile's four sides touch at least one empty square."""
        rect = self.layout.rect_of(td)
        sides = (
            [(x, rect.top - 1) for x in range(rect.left, rect.right)],
            [(x, rect.bottom) for x in range(rect.left, rect.right)],
            [(rect.left - 1, y) for y in range(rect.top, rect.bottom)],
            [(rect.right, y) for y in range(rect.top, rect.bottom)],
        )
        return sum(
            1 for side in sides
            if any(not self.layout.is_occupied(square) for square in side)
        )

    def clean(self):
        """Drop unknown tiles, then doorways that do not join two open spaces."""
        for td in list(self.layout):
            if self.layout.tile_of(td) is None:
                self.layout.remove(td)
                self._notify()

        # Removing one doorway can open a side of another, so repeat until stable
        while True:
            obsolete = [
                td for td in self.layout
                if self.layout.tile_of(td).category == TileCategory.DOORWAY
                and self.open_sides(td) != 2
            ]
            if not obsolete:
                break

            for td in obsolete:
                self.layout.remove(td)
                self._notify()
            logger.debug(f"Removed {len(obsolete)} dead-end doorway(s)")
