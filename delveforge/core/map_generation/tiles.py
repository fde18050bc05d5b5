"""
Map tiles and tile libraries.

A Tile is a shared, immutable library asset; a TileData is one placement
of a tile on a map (anchor square plus quarter-turn rotations).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Iterable, List, Optional, Tuple
import uuid


class TileCategory(str, Enum):
    """What a tile depicts."""
    PLAIN = "plain"
    DOORWAY = "doorway"
    STAIRWAY = "stairway"
    FEATURE = "feature"
    SPECIAL = "special"
    MAP = "map"


@dataclass(frozen=True)
class Tile:
    """A rectangular tile asset, width x height squares when unrotated."""
    id: str
    category: TileCategory
    width: int
    height: int
    name: str = ""

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_corridor(self) -> bool:
        """Plain tiles two squares across."""
        return self.category == TileCategory.PLAIN and min(self.width, self.height) == 2

    @property
    def is_room(self) -> bool:
        """Plain tiles wider than a corridor."""
        return self.category == TileCategory.PLAIN and min(self.width, self.height) > 2

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "width": self.width,
            "height": self.height,
            "area": self.area,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tile":
        """
        Build from a library record.

        Raises:
            KeyError: A required field is missing
            ValueError: Unknown category or a non-positive size
        """
        tile = cls(
            id=str(data["id"]),
            category=TileCategory(data["category"]),
            width=int(data["width"]),
            height=int(data["height"]),
            name=data.get("name", ""),
        )
        if tile.width < 1 or tile.height < 1:
            raise ValueError(f"Tile {tile.id!r} has size {tile.width}x{tile.height}")
        return tile


@dataclass
class TileLibrary:
    """A named set of tiles."""
    name: str
    tiles: List[Tile] = field(default_factory=list)

    def by_category(self, category: TileCategory) -> List[Tile]:
        return [t for t in self.tiles if t.category == category]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "tiles": [t.to_dict() for t in self.tiles]}


def index_tiles(libraries: Iterable[TileLibrary]) -> Dict[str, Tile]:
    """Tile lookup by id across libraries; later libraries do not override earlier ones."""
    index: Dict[str, Tile] = {}
    for library in libraries:
        for tile in library.tiles:
            index.setdefault(tile.id, tile)
    return index


@dataclass
class TileData:
    """One tile placed on a map."""
    tile_id: str
    location: Tuple[int, int] = (0, 0)
    rotations: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self, tile: Optional[Tile] = None) -> Dict[str, Any]:
        """Serialize to dictionary, with the rotated footprint when the tile is known."""
        data = {
            "id": self.id,
            "tile_id": self.tile_id,
            "x": self.location[0],
            "y": self.location[1],
            "rotations": self.rotations,
        }
        if tile is not None:
            swapped = self.rotations % 2 == 1
            data["width"] = tile.height if swapped else tile.width
            data["height"] = tile.width if swapped else tile.height
            data["category"] = tile.category.value
        return data
