"""
Delves: a generated map with an encounter in every area.

Each area of the map gets its own composed encounter, and every combatant
is set down on tiled floor inside that area. A creature occupies a square
block of one to four squares depending on its size, and no two creatures
share a square.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Set
import logging
import random

from .encounters import Encounter, EncounterComposer, EncounterRequest
from .encounters.builder import BuildOutcome
from .map_generation import Map, MapArea, Rect, Tile, TileLayout
from .map_generation.geometry import Point

logger = logging.getLogger(__name__)

# Squares per side of a creature's space
SIZE_SPANS = {
    "tiny": 1,
    "small": 1,
    "medium": 1,
    "large": 2,
    "huge": 3,
    "gargantuan": 4,
}

ILLUMINATION_NOTES = [
    ("The area is in bright light.", 3),
    ("The area is in dim light.", 2),
    ("None.", 1),
]


def creature_span(size: str) -> int:
    """Side length of a creature's space; unknown sizes take one square."""
    return SIZE_SPANS.get(size.lower(), 1)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class DelveRoom:
    """One map area and what was built for it."""
    area: MapArea
    outcome: BuildOutcome
    encounter: Optional[Encounter] = None
    unplaced: int = 0

    def to_dict(self, party_level: int, party_size: int) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "area": self.area.to_dict(),
            "outcome": self.outcome.value,
            "unplaced": self.unplaced,
            "encounter": (
                self.encounter.to_dict(party_level, party_size)
                if self.encounter else None
            ),
        }


@dataclass
class Delve:
    """A map plus an encounter room per area."""
    map: Map
    rooms: List[DelveRoom] = field(default_factory=list)

    @property
    def encounter_count(self) -> int:
        return sum(1 for room in self.rooms if room.encounter is not None)

    def to_dict(
        self,
        party_level: int,
        party_size: int,
        tile_index: Optional[Dict[str, Tile]] = None
    ) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "map": self.map.to_dict(tile_index),
            "rooms": [room.to_dict(party_level, party_size) for room in self.rooms],
            "encounter_count": self.encounter_count,
        }


# =============================================================================
# PLACEMENT
# =============================================================================

def place_creatures(
    encounter: Encounter,
    region: Rect,
    layout: TileLayout,
    rng: random.Random
) -> int:
    """
    Give every combat instance a location inside region.

    A location is the top-left square of the creature's space; the whole
    space must lie on placed tiles and clear of creatures already placed.
    Instances with nowhere to stand keep no location.

    Returns:
        Number of instances left unplaced
    """
    free: Set[Point] = {p for p in region.squares() if layout.is_occupied(p)}

    unplaced = 0
    for slot in encounter.slots:
        span = creature_span(slot.card.creature.size)
        for instance in slot.instances:
            candidates = [
                (x, y) for x, y in region.squares()
                if all(sq in free for sq in Rect(x, y, span, span).squares())
            ]
            if not candidates:
                unplaced += 1
                continue

            x, y = rng.choice(candidates)
            instance.location = (x, y)
            free.difference_update(Rect(x, y, span, span).squares())

    if unplaced:
        logger.debug(f"{unplaced} creature(s) did not fit in {region}")
    return unplaced


def _set_illumination(encounter: Encounter, rng: random.Random):
    note = encounter.find_note("Illumination")
    if note is None:
        return
    texts = [text for text, _ in ILLUMINATION_NOTES]
    weights = [weight for _, weight in ILLUMINATION_NOTES]
    note.contents = rng.choices(texts, weights=weights)[0]


# =============================================================================
# BUILD
# =============================================================================

def build_delve(
    game_map: Map,
    tile_index: Dict[str, Tile],
    composer: EncounterComposer,
    request: EncounterRequest,
    rng: random.Random,
) -> Delve:
    """
    Compose an encounter for every area of game_map and place its creatures.

    Areas whose build fails keep their failed outcome and no encounter;
    the rest of the delve is still built.
    """
    layout = TileLayout(tile_index, list(game_map.tiles))
    delve = Delve(map=game_map)

    for area in game_map.areas:
        result = composer.build(request, rng)
        if not result:
            logger.info(f"No encounter for {area.name}: {result.outcome.value}")
            delve.rooms.append(DelveRoom(area=area, outcome=result.outcome))
            continue

        encounter = result.encounter
        unplaced = place_creatures(encounter, area.region, layout, rng)
        _set_illumination(encounter, rng)
        delve.rooms.append(DelveRoom(
            area=area,
            outcome=result.outcome,
            encounter=encounter,
            unplaced=unplaced,
        ))

    logger.info(
        f"Built delve over {len(game_map.areas)} areas with {delve.encounter_count} encounter(s)"
    )
    return delve
