"""Tests for tiles, placement geometry and the tile layout."""
import pytest

from delveforge.core.map_generation import (
    Direction,
    Orientation,
    Rect,
    Tile,
    TileCategory,
    TileData,
    TileLayout,
    TileLibrary,
    index_tiles,
)
from delveforge.core.map_generation.geometry import (
    anchor_at,
    endpoint_for,
    footprint,
    starting_direction,
    tile_orientation,
    tile_rect,
)

CORRIDOR = Tile("corridor", TileCategory.PLAIN, 2, 4)


class TestRect:
    """Tests for rectangles."""

    def test_adjacent_rects_do_not_intersect(self):
        assert not Rect(0, 0, 2, 2).intersects(Rect(2, 0, 2, 2))
        assert Rect(0, 0, 2, 2).intersects(Rect(1, 1, 2, 2))

    def test_contains_is_half_open(self):
        rect = Rect(0, 0, 2, 3)
        assert rect.contains((1, 2))
        assert not rect.contains((2, 0))
        assert not rect.contains((0, 3))

    def test_widened_grows_across_direction(self):
        assert Rect(0, 0, 2, 4).widened(Direction.NORTH) == Rect(-1, 0, 4, 4)
        assert Rect(0, 0, 4, 2).widened(Direction.EAST) == Rect(0, -1, 4, 4)

    def test_padded_and_bounding(self):
        assert Rect(1, 1, 2, 2).padded() == Rect(0, 0, 4, 4)
        assert Rect.bounding([Rect(0, 0, 1, 1), Rect(3, -2, 2, 2)]) == Rect(0, -2, 5, 3)

    def test_squares(self):
        assert sorted(Rect(0, 0, 2, 1).squares()) == [(0, 0), (1, 0)]


class TestPlacementGeometry:
    """Tests for endpoints, anchors and rotation."""

    def test_footprint_swaps_on_odd_rotations(self):
        assert footprint(CORRIDOR, 0) == (2, 4)
        assert footprint(CORRIDOR, 1) == (4, 2)
        assert footprint(CORRIDOR, 2) == (2, 4)

    def test_north_endpoint(self):
        ep = endpoint_for(CORRIDOR, TileData("corridor", (0, 0)), Direction.NORTH)
        assert (ep.top_left, ep.bottom_right) == ((0, -1), (1, -1))
        assert ep.orientation == Orientation.EAST_WEST
        assert ep.size == 1

    def test_east_endpoint_of_rotated_tile(self):
        ep = endpoint_for(CORRIDOR, TileData("corridor", (0, 0), 1), Direction.EAST)
        assert (ep.top_left, ep.bottom_right) == ((4, 0), (4, 1))
        assert ep.orientation == Orientation.NORTH_SOUTH

    def test_anchors_touch_the_tile(self):
        td = TileData("corridor", (0, 0))
        placed = tile_rect(CORRIDOR, td)

        for direction, size in ((Direction.NORTH, (2, 2)), (Direction.WEST, (3, 3)),
                                (Direction.SOUTH, (2, 2)), (Direction.EAST, (3, 3))):
            ep = endpoint_for(CORRIDOR, td, direction)
            x, y = anchor_at(ep, *size)
            new = Rect(x, y, *size)
            assert not new.intersects(placed)
            assert new.contains(ep.top_left)

    def test_orientation_and_starting_direction(self):
        assert tile_orientation(CORRIDOR, TileData("corridor")) == Orientation.NORTH_SOUTH
        assert tile_orientation(CORRIDOR, TileData("corridor", rotations=3)) == Orientation.EAST_WEST
        assert starting_direction(Orientation.NORTH_SOUTH) == Direction.SOUTH
        assert starting_direction(Orientation.EAST_WEST) == Direction.EAST

    def test_direction_reverse(self):
        assert Direction.NORTH.reverse == Direction.SOUTH
        assert Direction.WEST.reverse == Direction.EAST
        assert not Direction.EAST.is_vertical


class TestTiles:
    """Tests for tile records."""

    def test_from_dict(self):
        tile = Tile.from_dict({"id": "t1", "category": "doorway", "width": 1, "height": 2})
        assert tile.category == TileCategory.DOORWAY
        assert tile.name == ""

    def test_from_dict_rejects_bad_records(self):
        with pytest.raises(ValueError):
            Tile.from_dict({"id": "t1", "category": "lava", "width": 1, "height": 1})
        with pytest.raises(ValueError):
            Tile.from_dict({"id": "t1", "category": "plain", "width": 0, "height": 1})
        with pytest.raises(KeyError):
            Tile.from_dict({"id": "t1", "category": "plain"})

    def test_corridor_and_room(self):
        assert CORRIDOR.is_corridor and not CORRIDOR.is_room
        assert Tile("r", TileCategory.PLAIN, 3, 4).is_room
        assert not Tile("f", TileCategory.FEATURE, 3, 3).is_room

    def test_placement_dict_has_rotated_footprint(self):
        data = TileData("corridor", (3, 4), 1).to_dict(CORRIDOR)
        assert (data["x"], data["y"], data["width"], data["height"]) == (3, 4, 4, 2)

    def test_index_keeps_first_tile_for_an_id(self):
        first = TileLibrary("A", [Tile("x", TileCategory.PLAIN, 1, 1)])
        second = TileLibrary("B", [Tile("x", TileCategory.PLAIN, 2, 2)])
        assert index_tiles([first, second])["x"].width == 1


class TestTileLayout:
    """Tests for the occupancy index."""

    def test_add_and_remove(self):
        layout = TileLayout({"corridor": CORRIDOR})
        td = TileData("corridor", (0, 0))
        layout.add(td)

        assert layout.filled_squares == 8
        assert layout.tile_at((1, 3)) is td
        assert not layout.is_rect_empty(Rect(1, 3, 2, 2))
        assert layout.is_rect_empty(Rect(2, 0, 2, 4))

        layout.remove(td)
        assert layout.filled_squares == 0
        assert len(layout) == 0

    def test_overlays_share_squares(self):
        rubble = Tile("rubble", TileCategory.FEATURE, 1, 1)
        layout = TileLayout({"corridor": CORRIDOR, "rubble": rubble})
        floor = TileData("corridor", (0, 0))
        feature = TileData("rubble", (0, 0))
        layout.add(floor)
        layout.add(feature)

        layout.remove(floor)
        assert layout.is_occupied((0, 0))
        assert not layout.is_occupied((1, 0))

    def test_unknown_tiles_are_listed_but_not_indexed(self):
        layout = TileLayout({}, [TileData("ghost", (0, 0))])
        assert len(layout) == 1
        assert not layout.is_occupied((0, 0))
        assert layout.rect_of(layout.placements[0]) is None
