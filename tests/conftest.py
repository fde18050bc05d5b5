"""
Delveforge - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import random
from typing import Callable, List

import pytest

from delveforge.core.creatures import Creature, CreaturePower, RoleFlag, RoleType
from delveforge.core.encounters import (
    CreatureRepository,
    SkillChallenge,
    SkillChallengeRepository,
    SkillChallengeSkill,
    Trap,
    TrapRepository,
)
from delveforge.core.level_scaling import Difficulty
from delveforge.core.map_generation import Tile, TileCategory, TileLibrary


# ==================== Randomness ====================

@pytest.fixture
def rng() -> random.Random:
    """Seeded generator so every generation test is repeatable."""
    return random.Random(1234)


# ==================== Creature Fixtures ====================

@pytest.fixture
def make_creature() -> Callable[..., Creature]:
    """Factory for creatures with sensible defaults."""
    counter = {"n": 0}

    def _make(
        name: str = "",
        level: int = 1,
        role: RoleType = RoleType.SOLDIER,
        flag: RoleFlag = RoleFlag.STANDARD,
        is_minion: bool = False,
        **kwargs
    ) -> Creature:
        counter["n"] += 1
        return Creature(
            id=kwargs.pop("id", f"creature-{counter['n']}"),
            name=name or f"{role.value.title()} {counter['n']}",
            level=level,
            role=role,
            flag=flag,
            is_minion=is_minion,
            **kwargs
        )

    return _make


@pytest.fixture
def orc_warband(make_creature) -> List[Creature]:
    """Brutes at 3/4, soldiers at 4/5 and minions at 1/3: enough for every Grand Melee template at level 5."""
    return [
        make_creature("Orc Berserker", 3, RoleType.BRUTE, category="orc", keywords="orc"),
        make_creature("Orc Reaver", 4, RoleType.BRUTE, category="orc", keywords="orc"),
        make_creature("Orc Shieldbearer", 4, RoleType.SOLDIER, category="orc", keywords="orc"),
        make_creature("Orc Warchief Guard", 5, RoleType.SOLDIER, category="orc", keywords="orc"),
        make_creature("Orc Drudge", 1, RoleType.BRUTE, is_minion=True, hp=1, category="orc", keywords="orc"),
        make_creature("Orc Raider", 3, RoleType.SKIRMISHER, is_minion=True, hp=1, category="orc", keywords="orc"),
    ]


@pytest.fixture
def creature_repo(orc_warband) -> CreatureRepository:
    return CreatureRepository(orc_warband)


@pytest.fixture
def mixed_repo(make_creature) -> CreatureRepository:
    """Every role at levels 3-10, plus minions, elites and a solo."""
    creatures = []
    for level in range(3, 11):
        for role in RoleType:
            creatures.append(make_creature(level=level, role=role, category="mixed", size="medium"))
        creatures.append(make_creature(level=level, role=RoleType.SKIRMISHER, is_minion=True, category="mixed"))
    creatures.append(make_creature("Swamp Hag", 6, RoleType.CONTROLLER, RoleFlag.ELITE, category="fey", origin="fey"))
    creatures.append(make_creature("Black Dragon", 7, RoleType.LURKER, RoleFlag.SOLO, category="dragon",
                                   size="large", creature_type="magical beast", keywords="dragon"))
    return CreatureRepository(creatures)


@pytest.fixture
def sample_power() -> CreaturePower:
    return CreaturePower(
        name="Greataxe",
        details="+8 vs. AC; Hit: 2d6+7 damage, and the target is pushed 1 square.",
        attack_bonus=8,
        action="standard",
    )


# ==================== Trap / Challenge Fixtures ====================

@pytest.fixture
def trap_repo() -> TrapRepository:
    return TrapRepository([
        Trap(id="pit", name="Pit", level=4, role=RoleType.LURKER),
        Trap(id="blades", name="Whirling Blades", level=6, role=RoleType.SOLDIER),
    ])


@pytest.fixture
def challenge_repo() -> SkillChallengeRepository:
    return SkillChallengeRepository([
        SkillChallenge(
            id="door", name="Sealed Door", level=5, complexity=1,
            skills=[
                SkillChallengeSkill("Thievery", Difficulty.MODERATE),
                SkillChallengeSkill("Athletics", Difficulty.EASY),
            ],
        ),
    ])


# ==================== Tile Fixtures ====================

@pytest.fixture
def dungeon_tiles() -> TileLibrary:
    """Corridors, rooms, a doorway, stairs and features."""
    return TileLibrary("Dungeon", [
        Tile("corridor-2x2", TileCategory.PLAIN, 2, 2),
        Tile("corridor-2x4", TileCategory.PLAIN, 2, 4),
        Tile("corridor-2x6", TileCategory.PLAIN, 2, 6),
        Tile("room-3x3", TileCategory.PLAIN, 3, 3),
        Tile("room-4x4", TileCategory.PLAIN, 4, 4),
        Tile("room-4x6", TileCategory.PLAIN, 4, 6),
        Tile("room-5x5", TileCategory.PLAIN, 5, 5),
        Tile("door-1x2", TileCategory.DOORWAY, 1, 2),
        Tile("stairs-2x2", TileCategory.STAIRWAY, 2, 2),
        Tile("rubble-1x1", TileCategory.FEATURE, 1, 1),
        Tile("table-1x2", TileCategory.FEATURE, 1, 2),
    ])


@pytest.fixture
def single_square_tiles() -> TileLibrary:
    return TileLibrary("Squares", [Tile("square", TileCategory.PLAIN, 1, 1)])


@pytest.fixture
def cave_tiles() -> TileLibrary:
    """Plain tiles of assorted sizes, including a 1x1."""
    return TileLibrary("Caves", [
        Tile("cave-1x1", TileCategory.PLAIN, 1, 1),
        Tile("cave-1x2", TileCategory.PLAIN, 1, 2),
        Tile("cave-2x2", TileCategory.PLAIN, 2, 2),
        Tile("cave-2x3", TileCategory.PLAIN, 2, 3),
        Tile("pool-2x2", TileCategory.FEATURE, 2, 2),
    ])
