"""
Level scaling for creatures, powers and checks.

Maps character levels to reference numbers (skill DCs, XP awards,
canonical damage) and re-derives statistics when a creature's level
shifts. Everything here is pure and deterministic.
"""
import logging
import re
from dataclasses import replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .creatures import Creature, CreaturePower, RoleFlag, RoleType
from .dice import DiceExpression

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 30
MAX_CREATURE_LEVEL = 40


# =============================================================================
# DIFFICULTY
# =============================================================================

class Difficulty(str, Enum):
    """Five-point threat classification, ordered from Trivial to Extreme."""
    TRIVIAL = "trivial"
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    EXTREME = "extreme"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)


_DIFFICULTY_ORDER = list(Difficulty)


def worst_difficulty(difficulties: Iterable[Difficulty]) -> Difficulty:
    """The hardest of the given difficulties (Trivial when empty)."""
    worst = Difficulty.TRIVIAL
    for diff in difficulties:
        if diff.rank > worst.rank:
            worst = diff
    return worst


def threat_difficulty(threat_level: int, party_level: int) -> Difficulty:
    """Coarse classifier for a single opponent against a party."""
    level_diff = threat_level - party_level

    if level_diff > 5:
        return Difficulty.EXTREME
    if level_diff < -3:
        return Difficulty.TRIVIAL
    return Difficulty.EASY


# =============================================================================
# SKILL DIFFICULTY CLASSES
# =============================================================================

# Indexed by level - 1
SKILL_DC_TABLE: Dict[Difficulty, Tuple[int, ...]] = {
    Difficulty.EASY: (
        8, 9, 9, 10, 10, 11, 11, 12, 12, 13,
        13, 14, 14, 15, 15, 16, 16, 17, 17, 18,
        19, 20, 20, 21, 21, 22, 22, 23, 23, 24,
    ),
    Difficulty.MODERATE: (
        12, 13, 13, 14, 15, 15, 16, 16, 17, 18,
        19, 20, 20, 21, 22, 22, 23, 23, 24, 25,
        26, 27, 27, 28, 29, 29, 30, 30, 31, 32,
    ),
    Difficulty.HARD: (
        19, 20, 21, 21, 22, 23, 23, 24, 25, 26,
        27, 28, 29, 29, 30, 31, 31, 32, 33, 34,
        35, 36, 37, 37, 38, 39, 39, 40, 41, 42,
    ),
}


def skill_dc(difficulty: Difficulty, level: int) -> int:
    """
    Target number for a skill check of the given tier at a level.

    Trivial answers the largest DC that still classifies as Trivial;
    Extreme is Hard plus half the Easy-to-Hard spread.

    Raises:
        ValueError: If level is outside 1-30
    """
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Skill DC level must be {MIN_LEVEL}-{MAX_LEVEL}, got {level}")

    easy = SKILL_DC_TABLE[Difficulty.EASY][level - 1]
    hard = SKILL_DC_TABLE[Difficulty.HARD][level - 1]

    if difficulty == Difficulty.TRIVIAL:
        return easy - 1
    if difficulty == Difficulty.EXTREME:
        return hard + (hard - easy) // 2
    return SKILL_DC_TABLE[difficulty][level - 1]


def skill_difficulty(dc: int, party_level: int) -> Difficulty:
    """Classify a DC against the reference table for a party level."""
    level = min(max(party_level, MIN_LEVEL), MAX_LEVEL)

    if dc < skill_dc(Difficulty.EASY, level):
        return Difficulty.TRIVIAL
    if dc < skill_dc(Difficulty.MODERATE, level):
        return Difficulty.EASY
    if dc < skill_dc(Difficulty.HARD, level):
        return Difficulty.MODERATE
    if dc < skill_dc(Difficulty.EXTREME, level):
        return Difficulty.HARD
    return Difficulty.EXTREME


# =============================================================================
# EXPERIENCE
# =============================================================================

# Indexed by level; level 0 awards nothing
CREATURE_XP: Tuple[int, ...] = (
    0,
    100, 125, 150, 175, 200, 250, 300, 350, 400, 500,
    600, 700, 800, 1000, 1200, 1400, 1600, 2000, 2400, 2800,
    3200, 4150, 5100, 6050, 7000, 9000, 11000, 13000, 15000, 19000,
    23000, 27000, 31000, 39000, 47000, 55000, 63000, 79000, 95000, 111000,
)


def creature_xp(level: int) -> int:
    """XP award for defeating a standard creature of the given level."""
    if level <= 0:
        return 0
    return CREATURE_XP[min(level, MAX_CREATURE_LEVEL)]


# =============================================================================
# DAMAGE EXPRESSIONS
# =============================================================================

class DamageExpressionType(str, Enum):
    """Kind of damage a power deals, each with its own scaling curve."""
    NORMAL = "normal"
    MULTIPLE = "multiple"
    MINION = "minion"


# (throws, sides, constant) indexed by level - 1
_NORMAL_DAMAGE = (
    (1, 8, 5), (1, 8, 6), (1, 10, 6), (1, 10, 7), (2, 6, 7),
    (2, 6, 8), (2, 8, 7), (2, 8, 8), (2, 8, 9), (2, 10, 8),
    (2, 10, 9), (2, 10, 10), (3, 8, 9), (3, 8, 10), (3, 8, 11),
    (3, 10, 10), (3, 10, 11), (3, 10, 12), (4, 8, 11), (4, 8, 12),
    (4, 10, 11), (4, 10, 12), (4, 10, 13), (4, 12, 12), (4, 12, 13),
    (4, 12, 14), (4, 12, 15), (5, 10, 14), (5, 10, 15), (5, 10, 16),
)

_MULTIPLE_DAMAGE = (
    (1, 6, 3), (1, 6, 4), (1, 8, 4), (1, 8, 5), (1, 10, 5),
    (1, 10, 6), (2, 6, 6), (2, 6, 7), (2, 8, 6), (2, 8, 7),
    (2, 8, 8), (2, 10, 7), (2, 10, 8), (2, 10, 9), (3, 8, 8),
    (3, 8, 9), (3, 8, 10), (3, 10, 9), (3, 10, 10), (3, 10, 11),
    (3, 12, 10), (3, 12, 11), (4, 8, 12), (4, 8, 13), (4, 10, 12),
    (4, 10, 13), (4, 10, 14), (4, 12, 13), (4, 12, 14), (4, 12, 15),
)


def damage_expression(level: int, kind: DamageExpressionType) -> DiceExpression:
    """
    Canonical damage for a power of the given kind at a level.

    Raises:
        ValueError: If level is outside 1-30
    """
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Damage level must be {MIN_LEVEL}-{MAX_LEVEL}, got {level}")

    if kind == DamageExpressionType.MINION:
        return DiceExpression(constant=4 + level // 2)

    table = _NORMAL_DAMAGE if kind == DamageExpressionType.NORMAL else _MULTIPLE_DAMAGE
    throws, sides, constant = table[level - 1]
    return DiceExpression(throws=throws, sides=sides, constant=constant)


def snap_die_size(sides: int) -> int:
    """Nearest supported die: 4, 6, 8, 10, 12 or 20."""
    if sides <= 4:
        return 4
    if sides <= 6:
        return 6
    if sides <= 8:
        return 8
    if sides <= 10:
        return 10
    if sides <= 16:
        return 12
    return 20


def _closest_reference(expr: DiceExpression) -> Tuple[int, DamageExpressionType, DiceExpression]:
    best: Optional[Tuple[int, DamageExpressionType, DiceExpression]] = None
    min_difference = None

    for level in range(MIN_LEVEL, MAX_LEVEL + 1):
        for kind in DamageExpressionType:
            ref = damage_expression(level, kind)

            difference = (
                abs(expr.throws - ref.throws) * 10
                + (abs(expr.sides - ref.sides) // 2) * 100
                + abs(expr.constant - ref.constant)
            )
            if min_difference is None or difference < min_difference:
                min_difference = difference
                best = (level, kind, ref)

    return best


def adjust_dice_expression(expr: DiceExpression, level_delta: int) -> DiceExpression:
    """
    Re-derive a damage expression for a creature shifted by level_delta.

    The expression is matched against every canonical level/kind pair
    (weighted distance: throws x10, half die size x100, constant x1), its
    offsets from the closest match are carried over to the canonical
    expression at the shifted level (clamped to 1-30) and the die size is snapped.

    Flat expressions stay flat; otherwise at least one die is thrown.
    Applying d1 then d2 need not equal applying d1 + d2: each call
    re-anchors on the nearest reference.
    """
    level, kind, ref = _closest_reference(expr)

    adjusted = damage_expression(min(max(level + level_delta, MIN_LEVEL), MAX_LEVEL), kind)

    throws = adjusted.throws + (expr.throws - ref.throws)
    sides = adjusted.sides + (expr.sides - ref.sides)
    constant = adjusted.constant + (expr.constant - ref.constant)

    if expr.throws == 0:
        throws = 0
    else:
        throws = max(throws, 1)

    return DiceExpression(throws=throws, sides=snap_die_size(sides), constant=constant)


# =============================================================================
# CREATURE RESCALING
# =============================================================================

_DAMAGE_SEPARATORS = re.compile(r"[,;.:\n]")
_SKILL_SEPARATORS = re.compile(r"[,;]")


def extract_damage(text: str) -> str:
    """
    Pick the damage clause out of a power description.

    Returns the first clause mentioning damage, else the first clause
    that parses as a dice expression, else an empty string. Clauses are
    returned trimmed, in their original case.
    """
    if not text:
        return ""

    sections = [s for s in _DAMAGE_SEPARATORS.split(text) if s]

    for section in sections:
        lowered = section.strip().lower()
        if "damage" in lowered or "dmg" in lowered:
            return section.strip()

    for section in sections:
        if DiceExpression.parse(section) is not None:
            return section.strip()

    return ""


def parse_skills(text: str) -> Dict[str, int]:
    """
    Read a skill list such as "Stealth +8, Athletics +5".

    Entries without a space are ignored; unreadable bonuses count as 0.
    """
    skills: Dict[str, int] = {}
    if not text:
        return skills

    for entry in _SKILL_SEPARATORS.split(text):
        entry = entry.strip()
        index = entry.find(" ")
        if index == -1:
            continue

        name = entry[:index]
        try:
            bonus = int(entry[index + 1:].strip())
        except ValueError:
            bonus = 0
        skills[name] = bonus

    return skills


def format_skills(skills: Dict[str, int]) -> str:
    """Inverse of parse_skills, sorted by skill name."""
    parts = []
    for name in sorted(skills):
        bonus = skills[name]
        parts.append(f"{name} +{bonus}" if bonus >= 0 else f"{name} {bonus}")
    return ", ".join(parts)


def _half(value: int) -> int:
    # Truncates toward zero, matching published half-level bonuses below level 0
    return int(value / 2)


def _rebase(bonus: int, level: int, delta: int) -> int:
    return bonus - _half(level) + _half(level + delta)


def adjust_power_level(power: CreaturePower, delta: int) -> CreaturePower:
    """Shift a power's attack bonus and rewrite its damage for a level change."""
    attack_bonus = power.attack_bonus
    if attack_bonus is not None:
        attack_bonus += delta

    details = power.details
    damage_text = extract_damage(details)
    if damage_text:
        expr = DiceExpression.parse(damage_text)
        if expr is not None:
            adjusted = adjust_dice_expression(expr, delta)
            if str(adjusted) != str(expr):
                details = details.replace(damage_text, f"{adjusted} damage")

    return replace(power, attack_bonus=attack_bonus, details=details)


def hit_points_per_level(creature: Creature) -> int:
    """HP gained per level for a creature's role and flag."""
    if creature.role in (RoleType.ARTILLERY, RoleType.LURKER):
        hp = 6
    elif creature.role == RoleType.BRUTE:
        hp = 10
    else:
        hp = 8

    if creature.flag == RoleFlag.ELITE:
        hp *= 2
    elif creature.flag == RoleFlag.SOLO:
        hp *= 5
    return hp


def adjust_creature_level(creature: Creature, delta: int) -> Creature:
    """
    Return a copy of a creature rescaled by delta levels.

    Minion HP is fixed; everything else tracks the level: HP, initiative
    and skills (re-based on half level), defences, power attacks and
    damage.
    """
    hp = creature.hp
    if not creature.is_minion:
        hp = max(hp + hit_points_per_level(creature) * delta, 1)

    skills = creature.skills
    if skills:
        parsed = parse_skills(skills)
        skills = format_skills({
            name: _rebase(bonus, creature.level, delta)
            for name, bonus in parsed.items()
        })

    powers: List[CreaturePower] = [adjust_power_level(p, delta) for p in creature.powers]

    logger.debug(f"Adjusted {creature.name} from level {creature.level} by {delta:+d}")

    return replace(
        creature,
        level=creature.level + delta,
        hp=hp,
        initiative=_rebase(creature.initiative, creature.level, delta),
        ac=creature.ac + delta,
        fortitude=creature.fortitude + delta,
        reflex=creature.reflex + delta,
        will=creature.will + delta,
        skills=skills,
        powers=powers,
    )
