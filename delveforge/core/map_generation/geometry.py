"""
Placement geometry shared by every map building mode.

Rectangles are half-open on the right and bottom: a rectangle at (x, y)
of size w x h covers columns x..x+w-1 and rows y..y+h-1.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Iterator, Tuple

from .tiles import Tile, TileCategory, TileData

Point = Tuple[int, int]


class Direction(str, Enum):
    """Compass direction an endpoint faces."""
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def reverse(self) -> "Direction":
        return _REVERSE[self]

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.NORTH, Direction.SOUTH)


_REVERSE = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


class Orientation(str, Enum):
    """Which way a tile or endpoint runs."""
    ANY = "any"
    NORTH_SOUTH = "north_south"
    EAST_WEST = "east_west"


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle of map squares."""
    x: int
    y: int
    width: int
    height: int

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def intersects(self, other: "Rect") -> bool:
        """True if the rectangles share at least one square."""
        return (
            other.x < self.right and self.x < other.right
            and other.y < self.bottom and self.y < other.bottom
        )

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.x <= px < self.right and self.y <= py < self.bottom

    def squares(self) -> Iterator[Point]:
        for x in range(self.x, self.right):
            for y in range(self.y, self.bottom):
                yield (x, y)

    def widened(self, direction: Direction) -> "Rect":
        """Grown by one square on each side perpendicular to direction."""
        if direction.is_vertical:
            return Rect(self.x - 1, self.y, self.width + 2, self.height)
        return Rect(self.x, self.y - 1, self.width, self.height + 2)

    def padded(self, margin: int = 1) -> "Rect":
        return Rect(self.x - margin, self.y - margin, self.width + 2 * margin, self.height + 2 * margin)

    @classmethod
    def bounding(cls, rects) -> "Rect":
        rects = list(rects)
        left = min(r.left for r in rects)
        top = min(r.top for r in rects)
        right = max(r.right for r in rects)
        bottom = max(r.bottom for r in rects)
        return cls(left, top, right - left, bottom - top)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Endpoint:
    """
    An open edge on the map frontier.

    The strip of squares from top_left to bottom_right (inclusive) lies
    just outside a placed tile, on the side given by direction.
    """
    top_left: Point
    bottom_right: Point
    direction: Direction = Direction.NORTH
    category: TileCategory = TileCategory.PLAIN

    @property
    def size(self) -> int:
        dx = self.bottom_right[0] - self.top_left[0]
        dy = self.bottom_right[1] - self.top_left[1]
        return max(dx, dy)

    @property
    def orientation(self) -> Orientation:
        if self.top_left[0] == self.bottom_right[0]:
            return Orientation.NORTH_SOUTH
        return Orientation.EAST_WEST


def footprint(tile: Tile, rotations: int) -> Tuple[int, int]:
    """Width and height after rotation; odd rotation counts swap them."""
    if rotations % 2 == 0:
        return tile.width, tile.height
    return tile.height, tile.width


def tile_rect(tile: Tile, td: TileData) -> Rect:
    width, height = footprint(tile, td.rotations)
    return Rect(td.location[0], td.location[1], width, height)


def tile_orientation(tile: Tile, td: TileData) -> Orientation:
    """Which way a placed tile's long side runs."""
    wide = tile.width >= tile.height
    if td.rotations % 2 == 0:
        return Orientation.EAST_WEST if wide else Orientation.NORTH_SOUTH
    return Orientation.NORTH_SOUTH if wide else Orientation.EAST_WEST


def starting_direction(orientation: Orientation) -> Direction:
    if orientation == Orientation.NORTH_SOUTH:
        return Direction.SOUTH
    return Direction.EAST


def endpoint_for(tile: Tile, td: TileData, direction: Direction) -> Endpoint:
    """The open edge just beyond a placed tile's side."""
    x, y = td.location
    width, height = footprint(tile, td.rotations)

    if direction == Direction.NORTH:
        top_left, bottom_right = (x, y - 1), (x + width - 1, y - 1)
    elif direction == Direction.EAST:
        top_left, bottom_right = (x + width, y), (x + width, y + height - 1)
    elif direction == Direction.SOUTH:
        top_left, bottom_right = (x, y + height), (x + width - 1, y + height)
    else:
        top_left, bottom_right = (x - 1, y), (x - 1, y + height - 1)

    return Endpoint(top_left, bottom_right, direction, tile.category)


def anchor_at(endpoint: Endpoint, width: int, height: int) -> Point:
    """Where a width x height tile goes so it touches the endpoint strip."""
    x, y = endpoint.top_left
    if endpoint.direction == Direction.NORTH:
        return (x, y - (height - 1))
    if endpoint.direction == Direction.WEST:
        return (x - (width - 1), y)
    return (x, y)
