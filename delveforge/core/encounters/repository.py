"""
In-memory reference repositories.

Creatures, traps and skill challenges are loaded once and only read
during generation; queries return fresh lists so callers may keep them
as call-local scratch state.
"""
from typing import Iterable, List, Optional, Sequence

from ..creatures import Creature
from .models import CreatureCard, SkillChallenge, Trap


def _in_window(level: int, min_level: Optional[int], max_level: Optional[int]) -> bool:
    if min_level is not None and level < min_level:
        return False
    if max_level is not None and level > max_level:
        return False
    return True


class CreatureRepository:
    """Creatures queryable by level window, category and phenotype keyword."""

    def __init__(self, creatures: Iterable[Creature] = ()):
        self._creatures: List[Creature] = list(creatures)

    def __len__(self) -> int:
        return len(self._creatures)

    def __iter__(self):
        return iter(self._creatures)

    def get(self, creature_id: str) -> Optional[Creature]:
        for creature in self._creatures:
            if creature.id == creature_id:
                return creature
        return None

    def find(
        self,
        min_level: Optional[int] = None,
        max_level: Optional[int] = None,
        categories: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None
    ) -> List[Creature]:
        """
        Creatures in [min_level, max_level] (either end open when None).

        A creature passes the category filter if its category is listed,
        and the keyword filter if any keyword appears in its phenotype
        (case-insensitive). Empty filters pass everything.
        """
        lowered = [k.lower() for k in keywords] if keywords else []

        results = []
        for creature in self._creatures:
            if not _in_window(creature.level, min_level, max_level):
                continue
            if categories and creature.category not in categories:
                continue
            if lowered:
                phenotype = creature.phenotype.lower()
                if not any(k in phenotype for k in lowered):
                    continue
            results.append(creature)
        return results

    def cards(self, *args, **kwargs) -> List[CreatureCard]:
        """Same filters as find(), wrapped as unadjusted cards."""
        return [CreatureCard(c) for c in self.find(*args, **kwargs)]


class TrapRepository:
    """Traps and hazards queryable by level window."""

    def __init__(self, traps: Iterable[Trap] = ()):
        self._traps: List[Trap] = list(traps)

    def __len__(self) -> int:
        return len(self._traps)

    def __iter__(self):
        return iter(self._traps)

    def find(self, min_level: Optional[int] = None, max_level: Optional[int] = None) -> List[Trap]:
        return [t for t in self._traps if _in_window(t.level, min_level, max_level)]


class SkillChallengeRepository:
    """Skill challenges queryable by level window."""

    def __init__(self, challenges: Iterable[SkillChallenge] = ()):
        self._challenges: List[SkillChallenge] = list(challenges)

    def __len__(self) -> int:
        return len(self._challenges)

    def __iter__(self):
        return iter(self._challenges)

    def find(self, min_level: Optional[int] = None, max_level: Optional[int] = None) -> List[SkillChallenge]:
        return [c for c in self._challenges if _in_window(c.level, min_level, max_level)]
