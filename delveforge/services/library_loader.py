"""
Reference Library Loader.

Singleton service that loads creatures, traps, skill challenges and tile
libraries from a JSON file and keeps them in memory for the generators.
"""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from delveforge.config import get_settings
from delveforge.core.creatures import Creature
from delveforge.core.encounters import (
    CreatureRepository,
    SkillChallenge,
    SkillChallengeRepository,
    Trap,
    TrapRepository,
)
from delveforge.core.errors import ErrorCode, LibraryError, NotFoundError
from delveforge.core.map_generation import Tile, TileLibrary

logger = logging.getLogger(__name__)

T = TypeVar("T")


def default_library_path() -> Path:
    """The library bundled with the package."""
    return Path(__file__).parent.parent / "data" / "default_library.json"


class LibraryLoader:
    """Loads and caches the reference library."""

    _instance: Optional["LibraryLoader"] = None

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_library_path()
        self.creatures = CreatureRepository()
        self.traps = TrapRepository()
        self.challenges = SkillChallengeRepository()
        self.tile_libraries: List[TileLibrary] = []
        self._load()

    @classmethod
    def get_instance(cls) -> "LibraryLoader":
        """Get the singleton instance, loading LIBRARY_PATH (or the bundled library) on first use."""
        if cls._instance is None:
            settings = get_settings()
            cls._instance = cls(Path(settings.LIBRARY_PATH) if settings.LIBRARY_PATH else None)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset the singleton (useful for testing)."""
        cls._instance = None

    # =========================================================================
    # LOADING
    # =========================================================================

    def _load_json_file(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise LibraryError(
                f"Library file not found: {self.path}",
                code=ErrorCode.LIBRARY_NOT_FOUND,
                recovery_hint="Set LIBRARY_PATH to an existing JSON library",
            ) from e
        except json.JSONDecodeError as e:
            raise LibraryError(
                f"Library file is not valid JSON: {e}",
                details={"path": str(self.path), "line": e.lineno},
            ) from e

        if not isinstance(data, dict):
            raise LibraryError("Library root must be a JSON object", details={"path": str(self.path)})
        return data

    def _parse_records(self, kind: str, records: List[Dict[str, Any]], parse: Callable[[Dict], T]) -> List[T]:
        items = []
        for index, record in enumerate(records):
            try:
                items.append(parse(record))
            except (KeyError, TypeError, ValueError) as e:
                raise LibraryError(
                    f"Invalid {kind} record at index {index}: {e}",
                    details={"path": str(self.path), "kind": kind, "index": index},
                ) from e
        return items

    def _load(self):
        data = self._load_json_file()

        creatures = self._parse_records("creature", data.get("creatures", []), Creature.from_dict)
        traps = self._parse_records("trap", data.get("traps", []), Trap.from_dict)
        challenges = self._parse_records(
            "skill challenge", data.get("skill_challenges", []), SkillChallenge.from_dict
        )

        libraries = []
        for lib in data.get("tile_libraries", []):
            name = lib.get("name", "") if isinstance(lib, dict) else ""
            if not name:
                raise LibraryError("Tile library without a name", details={"path": str(self.path)})
            tiles = self._parse_records(f"tile ({name})", lib.get("tiles", []), Tile.from_dict)
            libraries.append(TileLibrary(name=name, tiles=tiles))

        self.creatures = CreatureRepository(creatures)
        self.traps = TrapRepository(traps)
        self.challenges = SkillChallengeRepository(challenges)
        self.tile_libraries = libraries

        logger.info(
            f"Loaded library {self.path.name}: {len(creatures)} creatures, {len(traps)} traps, "
            f"{len(challenges)} skill challenges, {len(libraries)} tile libraries"
        )

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_tile_libraries(self, names: Optional[List[str]] = None) -> List[TileLibrary]:
        """
        Tile libraries by name; all of them when names is empty.

        Raises:
            NotFoundError: A requested library does not exist
        """
        if not names:
            return list(self.tile_libraries)

        by_name = {lib.name: lib for lib in self.tile_libraries}
        selected = []
        for name in names:
            if name not in by_name:
                raise NotFoundError("Tile library", name)
            selected.append(by_name[name])
        return selected

    def get_categories(self) -> List[str]:
        """Distinct creature categories, sorted."""
        return sorted({c.category for c in self.creatures if c.category})


def get_library() -> LibraryLoader:
    """Get the library loader instance."""
    return LibraryLoader.get_instance()
