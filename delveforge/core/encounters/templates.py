"""
Encounter templates.

A template is a shape for an encounter: which roles, how many of each and
at what level relative to the party. Templates are grouped into named
families ("Wolf Pack", "Dragon's Den"...). The catalogue is static
reference data; every call builds fresh, immutable objects.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

from ..creatures import RoleFlag, RoleType
from ..level_scaling import Difficulty
from .models import CreatureCard, EncounterSlot

ENTIRE_PARTY = "Entire Party"
INDIVIDUAL_PC = "Individual PC"


@dataclass(frozen=True)
class TemplateSlot:
    """Requirement for count creatures at party level + level_adjustment."""
    count: int
    level_adjustment: int
    roles: Tuple[RoleType, ...] = ()
    flag: RoleFlag = RoleFlag.STANDARD
    minions: bool = False

    def __post_init__(self):
        if self.count <= 0:
            raise ValueError(f"Template slot count must be positive, got {self.count}")

    def creature_level(self, party_level: int) -> int:
        return max(party_level + self.level_adjustment, 1)

    def match(self, card: CreatureCard, party_level: int) -> bool:
        """True if the card can fill this slot for a party of the given level."""
        if card.level != self.creature_level(party_level):
            return False
        if card.is_minion != self.minions:
            return False
        if self.roles and not any(role in self.roles for role in card.roles):
            return False
        return card.flag == self.flag

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "count": self.count,
            "level_adjustment": self.level_adjustment,
            "roles": [r.value for r in self.roles],
            "flag": self.flag.value,
            "minions": self.minions,
        }


@dataclass(frozen=True)
class EncounterTemplate:
    """An ordered set of slots tagged with the difficulty it aims for."""
    difficulty: Difficulty
    slots: Tuple[TemplateSlot, ...] = ()

    def is_feasible(self, party_level: int) -> bool:
        """Every slot targets a level of at least 1."""
        return all(party_level + s.level_adjustment >= 1 for s in self.slots)

    def find_slot(self, slot: EncounterSlot, party_level: int) -> Optional[TemplateSlot]:
        """First template slot big enough for and matching an encounter slot."""
        for template_slot in self.slots:
            if template_slot.count < slot.count:
                continue
            if template_slot.match(slot.card, party_level):
                return template_slot
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "difficulty": self.difficulty.value,
            "slots": [s.to_dict() for s in self.slots],
        }


@dataclass(frozen=True)
class TemplateGroup:
    """A named family of templates."""
    name: str
    category: str
    templates: Tuple[EncounterTemplate, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "category": self.category,
            "templates": [t.to_dict() for t in self.templates],
        }


# =============================================================================
# CATALOGUE
# =============================================================================

def _slot(count: int, adjustment: int, *roles: RoleType) -> TemplateSlot:
    return TemplateSlot(count, adjustment, tuple(roles))


def _solo(count: int, adjustment: int) -> TemplateSlot:
    return TemplateSlot(count, adjustment, flag=RoleFlag.SOLO)


def _elite(count: int, adjustment: int) -> TemplateSlot:
    return TemplateSlot(count, adjustment, flag=RoleFlag.ELITE)


def _minions(count: int, adjustment: int) -> TemplateSlot:
    return TemplateSlot(count, adjustment, minions=True)


def _template(difficulty: Difficulty, *slots: TemplateSlot) -> EncounterTemplate:
    return EncounterTemplate(difficulty, tuple(slots))


E, M, H = Difficulty.EASY, Difficulty.MODERATE, Difficulty.HARD
ART, BRU, CTL = RoleType.ARTILLERY, RoleType.BRUTE, RoleType.CONTROLLER
LRK, SKR, SOL = RoleType.LURKER, RoleType.SKIRMISHER, RoleType.SOLDIER


def _party_groups() -> List[TemplateGroup]:
    leaders = (CTL, SOL, LRK, SKR)
    return [
        TemplateGroup("Battlefield Control", ENTIRE_PARTY, (
            _template(E, _slot(1, -2, CTL), _slot(6, -4, SKR)),
            _template(M, _slot(1, 1, CTL), _slot(6, -2, SKR)),
            _template(H, _slot(1, 5, CTL), _slot(5, 1, SKR)),
        )),
        TemplateGroup("Commander and Troops", ENTIRE_PARTY, (
            _template(E, _slot(1, 0, *leaders), _slot(4, -3, BRU, SOL)),
            _template(M, _slot(1, 3, *leaders), _slot(5, -2, BRU, SOL)),
            _template(H, _slot(1, 5, *leaders), _slot(3, 1, BRU, SOL), _slot(2, 1, ART)),
        )),
        TemplateGroup("Double Line", ENTIRE_PARTY, (
            _template(E, _slot(3, -4, BRU, SOL), _slot(2, -2, ART, CTL)),
            _template(M, _slot(3, 0, BRU, SOL), _slot(2, 0, ART, CTL)),
            _template(M, _slot(3, -2, BRU, SOL), _slot(2, 3, ART, CTL)),
            _template(H, _slot(3, 2, BRU, SOL), _slot(1, 4, CTL), _slot(1, 4, ART, LRK)),
            _template(H, _slot(3, 0, BRU, SOL), _slot(2, 1, ART), _slot(1, 2, CTL), _slot(1, 2, LRK)),
        )),
        TemplateGroup("Dragon's Den", ENTIRE_PARTY, (
            _template(E, _solo(1, -2)),
            _template(M, _solo(1, 0)),
            _template(M, _solo(1, 1)),
            _template(H, _solo(1, 3)),
            _template(H, _solo(1, 1), _elite(1, 0)),
        )),
        TemplateGroup("Grand Melee", ENTIRE_PARTY, (
            _template(E, _slot(4, -2, BRU), _minions(11, -4)),
            _template(M, _slot(2, -1, SOL), _slot(4, -2, BRU), _minions(12, -4)),
            _template(H, _slot(2, 0, SOL), _slot(4, -1, BRU), _minions(17, -2)),
        )),
        TemplateGroup("Wolf Pack", ENTIRE_PARTY, (
            _template(E, _slot(7, -4, SKR)),
            _template(M, _slot(7, -2, SKR)),
            _template(M, _slot(5, 0, SKR)),
            _template(H, _slot(3, 5, SKR)),
            _template(H, _slot(4, 5, SKR)),
            _template(H, _slot(6, 2, SKR)),
        )),
    ]


def _duel(name: str, primary: RoleType, easy_pair, hard_pair) -> TemplateGroup:
    return TemplateGroup(name, INDIVIDUAL_PC, (
        _template(E, _slot(1, 0, primary)),
        _template(E, _slot(1, -1, *easy_pair)),
        _template(M, _slot(1, 2, primary)),
        _template(M, _slot(1, 1, *easy_pair)),
        _template(H, _slot(1, 4, primary)),
        _template(H, _slot(1, 3, *hard_pair)),
    ))


def _duel_groups() -> List[TemplateGroup]:
    return [
        _duel("Duel vs Controller", ART, (CTL, SKR), (CTL, SKR)),
        _duel("Duel vs Defender", SKR, (BRU, SOL), (CTL, SKR)),
        _duel("Duel vs Leader", SKR, (CTL, SOL), (CTL, SOL)),
        _duel("Duel vs Striker", SKR, (BRU, SOL), (BRU, SOL)),
    ]


def build_template_groups(
    group_name: str = "",
    difficulty: Optional[Difficulty] = None,
    party_level: Optional[int] = None,
    include_individual: bool = False
) -> List[TemplateGroup]:
    """
    The template catalogue, filtered.

    Args:
        group_name: Keep only the group with this exact name ("" for all)
        difficulty: Keep only templates tagged with this difficulty
        party_level: Keep only templates whose every slot lands on level 1+
        include_individual: Include the single-character duel groups

    Groups left with no templates are dropped.
    """
    groups = _party_groups()
    if include_individual:
        groups.extend(_duel_groups())

    if group_name:
        groups = [g for g in groups if g.name == group_name]

    filtered = []
    for group in groups:
        templates = group.templates
        if difficulty is not None:
            templates = tuple(t for t in templates if t.difficulty == difficulty)
        if party_level is not None:
            templates = tuple(t for t in templates if t.is_feasible(party_level))
        if templates:
            filtered.append(TemplateGroup(group.name, group.category, templates))

    return filtered


def find_template_names() -> List[str]:
    """Sorted names of every template group."""
    return sorted(g.name for g in build_template_groups(include_individual=True))
