"""
Encounter domain objects.

Cards reference creatures; slots hold a card plus one combat instance per
creature fielded. An Encounter's XP and difficulty are always computed
from its current contents, never stored.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple
import uuid

from ..creatures import Creature, RoleFlag, RoleType
from ..level_scaling import (
    Difficulty,
    creature_xp,
    skill_dc,
    skill_difficulty,
    threat_difficulty,
    worst_difficulty,
)


# =============================================================================
# ENUMS
# =============================================================================

class CardCategory(str, Enum):
    """Deck category of a creature card."""
    SOLDIER_BRUTE = "soldier_brute"
    SKIRMISHER = "skirmisher"
    MINION = "minion"
    ARTILLERY = "artillery"
    CONTROLLER = "controller"
    LURKER = "lurker"
    SOLO = "solo"


class EncounterSlotType(str, Enum):
    """Which side a slot's creatures fight on."""
    OPPONENT = "opponent"
    ALLY = "ally"
    NEUTRAL = "neutral"


STANDARD_NOTE_TITLES = (
    "Illumination",
    "Features of the Area",
    "Setup",
    "Tactics",
    "Victory Conditions",
)


def _flagged_xp(level: int, flag: RoleFlag, is_minion: bool) -> int:
    xp = creature_xp(level)
    if is_minion:
        # A quarter, rounded half away from zero
        return (xp + 2) // 4
    if flag == RoleFlag.ELITE:
        return xp * 2
    if flag == RoleFlag.SOLO:
        return xp * 5
    return xp


# =============================================================================
# CARDS
# =============================================================================

@dataclass
class CreatureCard:
    """A creature as fielded in an encounter, optionally shifted in level."""
    creature: Creature
    level_adjustment: int = 0

    @property
    def creature_id(self) -> str:
        return self.creature.id

    @property
    def title(self) -> str:
        return self.creature.name

    @property
    def level(self) -> int:
        return self.creature.level + self.level_adjustment

    @property
    def flag(self) -> RoleFlag:
        return self.creature.flag

    @property
    def is_minion(self) -> bool:
        return self.creature.is_minion

    @property
    def roles(self) -> List[RoleType]:
        return [self.creature.role] if self.creature.role else []

    @property
    def category(self) -> CardCategory:
        """Deck category; minion beats solo beats role."""
        if self.is_minion:
            return CardCategory.MINION
        if self.flag == RoleFlag.SOLO:
            return CardCategory.SOLO

        roles = self.roles
        if RoleType.SOLDIER in roles or RoleType.BRUTE in roles:
            return CardCategory.SOLDIER_BRUTE
        if RoleType.SKIRMISHER in roles:
            return CardCategory.SKIRMISHER
        if RoleType.ARTILLERY in roles:
            return CardCategory.ARTILLERY
        if RoleType.CONTROLLER in roles:
            return CardCategory.CONTROLLER
        if RoleType.LURKER in roles:
            return CardCategory.LURKER

        raise ValueError(f"Creature {self.title!r} has no role")

    @property
    def xp(self) -> int:
        return _flagged_xp(self.level, self.flag, self.is_minion)

    @property
    def info(self) -> str:
        """e.g. "Level 5 Elite Brute"."""
        return f"Level {self.level} {self.creature.role_text}"

    def difficulty(self, party_level: int) -> Difficulty:
        """How threatening this single card is to a party."""
        delta = self.level - party_level

        if delta < -1:
            return Difficulty.TRIVIAL
        if delta <= 1:
            return Difficulty.EASY
        if delta <= 3:
            return Difficulty.MODERATE
        if delta <= 5:
            return Difficulty.HARD
        return Difficulty.EXTREME

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "creature_id": self.creature_id,
            "title": self.title,
            "info": self.info,
            "level": self.level,
            "level_adjustment": self.level_adjustment,
            "category": self.category.value,
            "xp": self.xp,
        }


# =============================================================================
# TRAPS AND SKILL CHALLENGES
# =============================================================================

@dataclass
class Trap:
    """A trap or hazard; scored like a creature of its level and flag."""
    id: str
    name: str
    level: int
    role: Optional[RoleType] = None
    flag: RoleFlag = RoleFlag.STANDARD
    is_minion: bool = False
    kind: str = "trap"
    description: str = ""

    @property
    def xp(self) -> int:
        return _flagged_xp(self.level, self.flag, self.is_minion)

    def difficulty(self, party_level: int) -> Difficulty:
        return threat_difficulty(self.level, party_level)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "role": self.role.value if self.role else None,
            "flag": self.flag.value,
            "kind": self.kind,
            "description": self.description,
            "xp": self.xp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trap":
        """Build from a library record."""
        role = data.get("role")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            level=int(data["level"]),
            role=RoleType(role) if role else None,
            flag=RoleFlag(data.get("flag", RoleFlag.STANDARD.value)),
            is_minion=bool(data.get("is_minion", False)),
            kind=data.get("kind", "trap"),
            description=data.get("description", ""),
        )


@dataclass
class SkillChallengeSkill:
    """One skill usable in a challenge, at a tagged difficulty."""
    name: str
    difficulty: Difficulty = Difficulty.MODERATE
    dc_modifier: int = 0

    def dc(self, level: int) -> int:
        return skill_dc(self.difficulty, min(max(level, 1), 30)) + self.dc_modifier


@dataclass
class SkillChallenge:
    """A non-combat challenge worth complexity x creature XP."""
    id: str
    name: str
    level: int
    complexity: int = 1
    skills: List[SkillChallengeSkill] = field(default_factory=list)

    @property
    def xp(self) -> int:
        return creature_xp(self.level) * self.complexity

    def difficulty(self, party_level: int) -> Difficulty:
        """Worst of the challenge's threat and its skill DCs, judged at the party's level."""
        if not self.skills:
            return Difficulty.TRIVIAL

        diffs = [threat_difficulty(self.level, party_level)]
        diffs.extend(skill_difficulty(s.dc(self.level), party_level) for s in self.skills)
        return worst_difficulty(diffs)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "complexity": self.complexity,
            "skills": [
                {
                    "name": s.name,
                    "difficulty": s.difficulty.value,
                    "dc": s.dc(self.level),
                }
                for s in self.skills
            ],
            "xp": self.xp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SkillChallenge":
        """Build from a library record."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            level=int(data["level"]),
            complexity=int(data.get("complexity", 1)),
            skills=[
                SkillChallengeSkill(
                    name=s["name"],
                    difficulty=Difficulty(s.get("difficulty", Difficulty.MODERATE.value)),
                    dc_modifier=int(s.get("dc_modifier", 0)),
                )
                for s in data.get("skills", [])
            ],
        )


# =============================================================================
# ENCOUNTER
# =============================================================================

@dataclass
class CombatInstance:
    """One individual creature fielded from a slot."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    display_name: str = ""
    location: Optional[Tuple[int, int]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "location": list(self.location) if self.location else None,
        }


@dataclass
class EncounterSlot:
    """A filled template slot: one card, one combat instance per creature."""
    card: CreatureCard
    instances: List[CombatInstance] = field(default_factory=list)
    slot_type: EncounterSlotType = EncounterSlotType.OPPONENT
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def create(cls, card: CreatureCard, count: int) -> "EncounterSlot":
        return cls(card=card, instances=[CombatInstance() for _ in range(count)])

    @property
    def count(self) -> int:
        return len(self.instances)

    @property
    def xp(self) -> int:
        mod = {
            EncounterSlotType.OPPONENT: 1,
            EncounterSlotType.ALLY: -1,
            EncounterSlotType.NEUTRAL: 0,
        }[self.slot_type]
        return self.card.xp * self.count * mod

    def set_default_display_names(self):
        """Name instances after the card, numbering them when there are several."""
        if not self.instances:
            self.instances.append(CombatInstance())

        title = self.card.title
        if len(self.instances) == 1:
            self.instances[0].display_name = title
        else:
            for n, instance in enumerate(self.instances, start=1):
                instance.display_name = f"{title} {n}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "type": self.slot_type.value,
            "card": self.card.to_dict(),
            "count": self.count,
            "xp": self.xp,
            "instances": [i.to_dict() for i in self.instances],
        }


@dataclass
class EncounterNote:
    """A titled block of free text attached to an encounter."""
    title: str
    contents: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "contents": self.contents}


@dataclass
class Encounter:
    """
    A combat encounter: creature slots plus optional traps and challenges.

    XP, level and difficulty are recomputed on every call.
    """
    slots: List[EncounterSlot] = field(default_factory=list)
    traps: List[Trap] = field(default_factory=list)
    skill_challenges: List[SkillChallenge] = field(default_factory=list)
    notes: List[EncounterNote] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of individual creatures."""
        return sum(slot.count for slot in self.slots)

    @property
    def xp(self) -> int:
        total = sum(slot.xp for slot in self.slots)
        total += sum(trap.xp for trap in self.traps)
        total += sum(sc.xp for sc in self.skill_challenges)
        return max(0, total)

    def level(self, party_size: int) -> int:
        """Creature level whose XP is nearest to this encounter's XP per character."""
        if party_size <= 0:
            return -1

        xp = self.xp // party_size

        result = 0
        min_diff = None
        for cl in range(0, 41):
            diff = abs(xp - creature_xp(cl))
            if min_diff is None or diff < min_diff:
                result = cl
                min_diff = diff
        return result

    def xp_difficulty(self, party_level: int, party_size: int) -> Difficulty:
        """Difficulty from total XP alone."""
        if self.xp <= 0:
            return Difficulty.TRIVIAL

        level_diff = self.level(party_size) - party_level

        if level_diff < -2:
            return Difficulty.TRIVIAL
        if level_diff <= -1:
            return Difficulty.EASY
        if level_diff <= 1:
            return Difficulty.MODERATE
        if level_diff <= 4:
            return Difficulty.HARD
        return Difficulty.EXTREME

    def difficulty(self, party_level: int, party_size: int) -> Difficulty:
        """Worst of every opponent, trap and challenge threat and the XP difficulty."""
        diffs = [
            threat_difficulty(slot.card.level, party_level)
            for slot in self.slots
            if slot.slot_type == EncounterSlotType.OPPONENT
        ]
        diffs.extend(trap.difficulty(party_level) for trap in self.traps)
        diffs.extend(sc.difficulty(party_level) for sc in self.skill_challenges)
        diffs.append(self.xp_difficulty(party_level, party_size))
        return worst_difficulty(diffs)

    def find_slot(self, slot_id: str) -> Optional[EncounterSlot]:
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def find_note(self, title: str) -> Optional[EncounterNote]:
        for note in self.notes:
            if note.title == title:
                return note
        return None

    def set_standard_notes(self):
        """Append the blank standard notes."""
        self.notes.extend(EncounterNote(title) for title in STANDARD_NOTE_TITLES)

    def set_default_display_names(self):
        for slot in self.slots:
            slot.set_default_display_names()

    def to_dict(
        self,
        party_level: Optional[int] = None,
        party_size: Optional[int] = None
    ) -> Dict[str, Any]:
        """Serialize to dictionary, with level and difficulty when a party is given."""
        data = {
            "slots": [s.to_dict() for s in self.slots],
            "traps": [t.to_dict() for t in self.traps],
            "skill_challenges": [sc.to_dict() for sc in self.skill_challenges],
            "notes": [n.to_dict() for n in self.notes],
            "count": self.count,
            "xp": self.xp,
        }
        if party_level is not None and party_size is not None:
            data["level"] = self.level(party_size)
            data["difficulty"] = self.difficulty(party_level, party_size).value
        return data
