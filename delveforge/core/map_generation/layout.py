"""
Placement surface for a map under construction.

TileLayout owns the map's tile list for the length of a build and keeps a
square -> placements index so emptiness and point lookups do not scan
every tile. Feature tiles overlay room tiles, so a square may hold more
than one placement.
"""
from typing import Dict, Iterator, List, Optional

from .geometry import Point, Rect, tile_rect
from .tiles import Tile, TileData


class TileLayout:
    """Tiles on a map plus an occupancy index over their squares."""

    def __init__(self, tiles: Dict[str, Tile], placements: Optional[List[TileData]] = None):
        self.tiles = tiles
        self.placements: List[TileData] = placements if placements is not None else []
        self._cells: Dict[Point, List[TileData]] = {}
        for td in self.placements:
            self._index(td)

    def __len__(self) -> int:
        return len(self.placements)

    def __iter__(self) -> Iterator[TileData]:
        return iter(list(self.placements))

    def tile_of(self, td: TileData) -> Optional[Tile]:
        return self.tiles.get(td.tile_id)

    def rect_of(self, td: TileData) -> Optional[Rect]:
        tile = self.tile_of(td)
        if tile is None:
            return None
        return tile_rect(tile, td)

    def _index(self, td: TileData):
        rect = self.rect_of(td)
        if rect is None:
            return
        for square in rect.squares():
            self._cells.setdefault(square, []).append(td)

    def add(self, td: TileData):
        self.placements.append(td)
        self._index(td)

    def remove(self, td: TileData):
        self.placements.remove(td)
        rect = self.rect_of(td)
        if rect is None:
            return
        for square in rect.squares():
            occupants = self._cells.get(square)
            if occupants is None:
                continue
            occupants.remove(td)
            if not occupants:
                del self._cells[square]

    def clear(self):
        self.placements.clear()
        self._cells.clear()

    def is_occupied(self, point: Point) -> bool:
        return point in self._cells

    def tile_at(self, point: Point) -> Optional[TileData]:
        """First placement covering a square, if any."""
        occupants = self._cells.get(point)
        return occupants[0] if occupants else None

    def is_rect_empty(self, rect: Rect) -> bool:
        """True if no placed tile overlaps the rectangle."""
        return not any(square in self._cells for square in rect.squares())

    @property
    def filled_squares(self) -> int:
        return len(self._cells)
