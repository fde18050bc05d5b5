"""Tests for the reference library loader."""
import json

import pytest

from delveforge.core.creatures import Creature, RoleFlag
from delveforge.core.errors import ErrorCode, LibraryError, NotFoundError
from delveforge.core.map_generation import TileCategory
from delveforge.services import LibraryLoader, default_library_path, get_library


@pytest.fixture(autouse=True)
def fresh_loader():
    LibraryLoader.reset()
    yield
    LibraryLoader.reset()


def _write(tmp_path, data) -> str:
    path = tmp_path / "library.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return str(path)


class TestDefaultLibrary:
    """Tests for the bundled library."""

    def test_loads_everything(self):
        loader = LibraryLoader()

        assert loader.path == default_library_path()
        assert len(loader.creatures) > 50
        assert len(loader.traps) > 0
        assert len(loader.challenges) > 0
        assert {lib.name for lib in loader.tile_libraries} == {"Dungeon Tiles", "Cavern Tiles"}

    def test_every_level_has_creatures(self):
        loader = LibraryLoader()
        for level in range(1, 11):
            assert loader.creatures.find(level, level)

    def test_dungeon_tiles_can_build_warrens(self):
        dungeon = LibraryLoader().get_tile_libraries(["Dungeon Tiles"])[0]
        assert any(t.is_corridor for t in dungeon.tiles)
        assert any(t.is_room for t in dungeon.tiles)
        assert dungeon.by_category(TileCategory.DOORWAY)

    def test_categories_sorted_and_distinct(self):
        categories = LibraryLoader().get_categories()
        assert categories == sorted(set(categories))
        assert "goblin" in categories

    def test_singleton(self):
        first = get_library()
        assert get_library() is first

        LibraryLoader.reset()
        assert get_library() is not first


class TestLookups:
    """Tests for tile library lookup."""

    def test_all_libraries_when_no_names(self):
        loader = LibraryLoader()
        assert loader.get_tile_libraries() == loader.tile_libraries
        assert loader.get_tile_libraries([]) == loader.tile_libraries

    def test_unknown_library(self):
        with pytest.raises(NotFoundError) as exc_info:
            LibraryLoader().get_tile_libraries(["Dungeon Tiles", "Moon Tiles"])
        assert exc_info.value.details["id"] == "Moon Tiles"


class TestBadLibraries:
    """Tests for malformed library files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(LibraryError) as exc_info:
            LibraryLoader(tmp_path / "absent.json")
        assert exc_info.value.code == ErrorCode.LIBRARY_NOT_FOUND
        assert exc_info.value.recoverable is False

    def test_invalid_json(self, tmp_path):
        with pytest.raises(LibraryError) as exc_info:
            LibraryLoader(_write(tmp_path, "{not json"))
        assert exc_info.value.code == ErrorCode.LIBRARY_INVALID

    def test_root_must_be_object(self, tmp_path):
        with pytest.raises(LibraryError):
            LibraryLoader(_write(tmp_path, [1, 2, 3]))

    def test_creature_without_role(self, tmp_path):
        path = _write(tmp_path, {"creatures": [
            {"id": "c1", "name": "Goblin", "level": 1, "role": "skirmisher"},
            {"id": "c2", "name": "Blob", "level": 2},
        ]})
        with pytest.raises(LibraryError) as exc_info:
            LibraryLoader(path)
        assert exc_info.value.details["index"] == 1
        assert exc_info.value.details["kind"] == "creature"

    def test_minion_must_be_standard(self, tmp_path):
        path = _write(tmp_path, {"creatures": [
            {"id": "m1", "name": "Kobold Minion", "level": 1, "role": "skirmisher", "is_minion": True, "flag": "elite"},
        ]})
        with pytest.raises(LibraryError) as exc_info:
            LibraryLoader(path)
        assert exc_info.value.details["index"] == 0

        with pytest.raises(ValueError):
            Creature.from_dict({"id": "m2", "name": "Grunt", "level": 2, "is_minion": True, "flag": "solo"})
        assert Creature.from_dict({"id": "m3", "name": "Grunt", "level": 2, "is_minion": True}).flag == RoleFlag.STANDARD

    def test_bad_tile(self, tmp_path):
        path = _write(tmp_path, {"tile_libraries": [
            {"name": "Broken", "tiles": [{"id": "t1", "category": "plain", "width": 0, "height": 2}]},
        ]})
        with pytest.raises(LibraryError):
            LibraryLoader(path)

    def test_tile_library_needs_a_name(self, tmp_path):
        path = _write(tmp_path, {"tile_libraries": [{"tiles": []}]})
        with pytest.raises(LibraryError):
            LibraryLoader(path)

    def test_empty_object_is_an_empty_library(self, tmp_path):
        loader = LibraryLoader(_write(tmp_path, {}))
        assert len(loader.creatures) == 0
        assert loader.tile_libraries == []
        assert loader.get_categories() == []
