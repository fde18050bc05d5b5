"""Generated map objects."""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import uuid

from .geometry import Rect
from .tiles import Tile, TileData


@dataclass
class MapArea:
    """A named region of a map, usually one room."""
    name: str
    region: Rect
    details: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "details": self.details,
            "region": self.region.to_dict(),
        }


@dataclass
class Map:
    """Placed tiles plus the named areas over them."""
    name: str = ""
    tiles: List[TileData] = field(default_factory=list)
    areas: List[MapArea] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self, tile_index: Optional[Dict[str, Tile]] = None) -> Dict[str, Any]:
        """Serialize to dictionary; tile footprints are included when tile_index is given."""
        index = tile_index or {}
        return {
            "id": self.id,
            "name": self.name,
            "tile_count": len(self.tiles),
            "tiles": [td.to_dict(index.get(td.tile_id)) for td in self.tiles],
            "areas": [a.to_dict() for a in self.areas],
        }
