"""
Creature reference data.

A creature is a full stat block as shipped in a library: identity, level,
combat role, defences, skills and powers. Creatures are read-only during
generation; level changes produce new copies.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


# =============================================================================
# ENUMS
# =============================================================================

class RoleType(str, Enum):
    """Combat function of a creature."""
    ARTILLERY = "artillery"
    BRUTE = "brute"
    CONTROLLER = "controller"
    LURKER = "lurker"
    SKIRMISHER = "skirmisher"
    SOLDIER = "soldier"


class RoleFlag(str, Enum):
    """Power tier of a creature."""
    STANDARD = "standard"
    ELITE = "elite"
    SOLO = "solo"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class CreaturePower:
    """An attack or utility power from a stat block."""
    name: str
    details: str = ""
    attack_bonus: Optional[int] = None
    action: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "details": self.details,
            "attack_bonus": self.attack_bonus,
            "action": self.action,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreaturePower":
        """Build from a library record."""
        attack = data.get("attack_bonus")
        return cls(
            name=data["name"],
            details=data.get("details", ""),
            attack_bonus=int(attack) if attack is not None else None,
            action=data.get("action", ""),
        )


@dataclass
class Creature:
    """
    A creature definition.

    Minions may carry a role but never a flag other than standard;
    every other creature must have a role.
    """
    id: str
    name: str
    level: int
    role: Optional[RoleType] = None
    flag: RoleFlag = RoleFlag.STANDARD
    is_minion: bool = False
    category: str = ""
    size: str = "medium"
    origin: str = "natural"
    creature_type: str = "humanoid"
    keywords: str = ""
    hp: int = 1
    initiative: int = 0
    ac: int = 10
    fortitude: int = 10
    reflex: int = 10
    will: int = 10
    skills: str = ""
    powers: List[CreaturePower] = field(default_factory=list)

    @property
    def phenotype(self) -> str:
        """Size, origin, type and keywords as one searchable line."""
        text = f"{self.size} {self.origin} {self.creature_type}".title()
        if self.keywords:
            text += f" ({self.keywords})"
        return text

    @property
    def role_text(self) -> str:
        """Human readable role, e.g. "Elite Brute" or "Minion Skirmisher"."""
        if self.is_minion:
            return "Minion" + (f" {self.role.value.title()}" if self.role else "")
        prefix = "" if self.flag == RoleFlag.STANDARD else f"{self.flag.value.title()} "
        return prefix + (self.role.value.title() if self.role else "")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "role": self.role.value if self.role else None,
            "flag": self.flag.value,
            "is_minion": self.is_minion,
            "category": self.category,
            "size": self.size,
            "origin": self.origin,
            "creature_type": self.creature_type,
            "keywords": self.keywords,
            "hp": self.hp,
            "initiative": self.initiative,
            "ac": self.ac,
            "fortitude": self.fortitude,
            "reflex": self.reflex,
            "will": self.will,
            "skills": self.skills,
            "powers": [p.to_dict() for p in self.powers],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Creature":
        """
        Build from a library record.

        Raises:
            KeyError: A required field is missing
            ValueError: An enum value is unknown, a non-minion has no role or a
                minion is flagged elite or solo
        """
        role = data.get("role")
        creature = cls(
            id=str(data["id"]),
            name=data["name"],
            level=int(data["level"]),
            role=RoleType(role) if role else None,
            flag=RoleFlag(data.get("flag", RoleFlag.STANDARD.value)),
            is_minion=bool(data.get("is_minion", False)),
            category=data.get("category", ""),
            size=data.get("size", "medium"),
            origin=data.get("origin", "natural"),
            creature_type=data.get("creature_type", "humanoid"),
            keywords=data.get("keywords", ""),
            hp=int(data.get("hp", 1)),
            initiative=int(data.get("initiative", 0)),
            ac=int(data.get("ac", 10)),
            fortitude=int(data.get("fortitude", 10)),
            reflex=int(data.get("reflex", 10)),
            will=int(data.get("will", 10)),
            skills=data.get("skills", ""),
            powers=[CreaturePower.from_dict(p) for p in data.get("powers", [])],
        )
        if creature.role is None and not creature.is_minion:
            raise ValueError(f"Creature {creature.name!r} has no role")
        if creature.is_minion and creature.flag != RoleFlag.STANDARD:
            raise ValueError(f"Minion {creature.name!r} must be flagged standard, not {creature.flag.value}")
        return creature
