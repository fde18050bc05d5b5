"""Tests for level scaling: DCs, XP, damage and creature rescaling."""
import pytest

from delveforge.core.creatures import RoleFlag, RoleType
from delveforge.core.dice import DiceExpression
from delveforge.core.level_scaling import (
    DamageExpressionType,
    Difficulty,
    adjust_creature_level,
    adjust_dice_expression,
    adjust_power_level,
    creature_xp,
    damage_expression,
    extract_damage,
    format_skills,
    parse_skills,
    skill_dc,
    skill_difficulty,
    snap_die_size,
    threat_difficulty,
    worst_difficulty,
)


def _adjust(text: str, delta: int) -> str:
    return str(adjust_dice_expression(DiceExpression.parse(text), delta))


class TestSkillDC:
    """Tests for the skill DC table."""

    def test_monotonic_in_level(self):
        """DCs never fall as level rises."""
        for difficulty in Difficulty:
            dcs = [skill_dc(difficulty, level) for level in range(1, 31)]
            assert dcs == sorted(dcs)

    def test_tiers_ordered_at_every_level(self):
        for level in range(1, 31):
            easy = skill_dc(Difficulty.EASY, level)
            moderate = skill_dc(Difficulty.MODERATE, level)
            hard = skill_dc(Difficulty.HARD, level)
            assert easy < moderate < hard
            assert skill_dc(Difficulty.TRIVIAL, level) < easy
            assert skill_dc(Difficulty.EXTREME, level) > hard

    def test_known_values(self):
        assert skill_dc(Difficulty.EASY, 1) == 8
        assert skill_dc(Difficulty.MODERATE, 1) == 12
        assert skill_dc(Difficulty.HARD, 30) == 42

    def test_level_out_of_range(self):
        with pytest.raises(ValueError):
            skill_dc(Difficulty.EASY, 0)
        with pytest.raises(ValueError):
            skill_dc(Difficulty.HARD, 31)

    def test_classify_dc(self):
        """A DC classifies into the tier whose threshold it reaches."""
        assert skill_difficulty(9, 5) == Difficulty.TRIVIAL
        assert skill_difficulty(10, 5) == Difficulty.EASY
        assert skill_difficulty(15, 5) == Difficulty.MODERATE
        assert skill_difficulty(27, 5) == Difficulty.HARD
        assert skill_difficulty(28, 5) == Difficulty.EXTREME

    def test_tier_dc_classifies_as_its_tier(self):
        for level in (1, 10, 30):
            for difficulty in Difficulty:
                assert skill_difficulty(skill_dc(difficulty, level), level) == difficulty


class TestDifficulty:
    """Tests for combining difficulties."""

    def test_worst_difficulty(self):
        assert worst_difficulty([Difficulty.EASY, Difficulty.HARD, Difficulty.MODERATE]) == Difficulty.HARD

    def test_worst_of_nothing_is_trivial(self):
        assert worst_difficulty([]) == Difficulty.TRIVIAL

    def test_threat_difficulty_bands(self):
        assert threat_difficulty(11, 5) == Difficulty.EXTREME
        assert threat_difficulty(10, 5) == Difficulty.EASY
        assert threat_difficulty(2, 5) == Difficulty.EASY
        assert threat_difficulty(1, 5) == Difficulty.TRIVIAL


class TestExperience:
    """Tests for the XP table."""

    def test_reference_points(self):
        assert creature_xp(0) == 0
        assert creature_xp(1) == 100
        assert creature_xp(5) == 200
        assert creature_xp(30) == 19000

    def test_strictly_increasing(self):
        values = [creature_xp(level) for level in range(0, 41)]
        assert all(a < b for a, b in zip(values, values[1:]))


class TestDamageExpressions:
    """Tests for canonical damage and its rescaling."""

    def test_minion_damage_is_flat(self):
        expr = damage_expression(6, DamageExpressionType.MINION)
        assert expr.throws == 0
        assert expr.constant == 7

    def test_damage_level_out_of_range(self):
        with pytest.raises(ValueError):
            damage_expression(31, DamageExpressionType.NORMAL)

    def test_snap_die_size(self):
        assert snap_die_size(3) == 4
        assert snap_die_size(7) == 8
        assert snap_die_size(14) == 12
        assert snap_die_size(17) == 20

    def test_adjust_up_one_level(self):
        assert _adjust("2d6+7", 1) == "2d6+8"

    def test_adjust_flat_expression(self):
        """Flat damage stays flat."""
        assert _adjust("5", 2) == "6"

    def test_adjust_clamps_at_level_one(self):
        assert _adjust("1d8+5", -3) == "1d8+5"

    def test_adjust_by_zero_is_identity(self):
        for text in ("2d6+7", "1d10+6", "3d8+9", "5", "2d8+3"):
            assert _adjust(text, 0) == text

    def test_adjust_past_level_thirty(self):
        """Shifts beyond the table clamp to its last row."""
        assert _adjust("5d10+16", 5) == "5d10+16"

    def test_adjusted_dice_use_supported_sizes(self):
        for text in ("1d6+3", "2d8+8", "4d12+13", "1d4+2"):
            for delta in (-4, -1, 1, 4):
                expr = adjust_dice_expression(DiceExpression.parse(text), delta)
                assert expr.sides in (4, 6, 8, 10, 12, 20)
                assert expr.throws >= 1


class TestExtractDamage:
    """Tests for finding the damage clause in power text."""

    def test_clause_with_damage_word(self):
        text = "Close burst 1; +6 vs. Reflex; Hit: 2d8+4 fire damage."
        assert extract_damage(text) == "2d8+4 fire damage"

    def test_falls_back_to_dice_clause(self):
        assert extract_damage("Hit: 1d6+2") == "1d6+2"

    def test_nothing_found(self):
        assert extract_damage("The target is dazed") == ""
        assert extract_damage("") == ""


class TestSkills:
    """Tests for skill list parsing."""

    def test_round_trip(self):
        skills = parse_skills("Stealth +8, Athletics +5")
        assert skills == {"Stealth": 8, "Athletics": 5}
        assert format_skills(skills) == "Athletics +5, Stealth +8"

    def test_unreadable_bonus_counts_as_zero(self):
        assert parse_skills("Stealth high; Insight") == {"Stealth": 0}


class TestAdjustCreature:
    """Tests for rescaling whole creatures."""

    def test_brute_up_two_levels(self, make_creature, sample_power):
        brute = make_creature(
            "Orc Reaver", 5, RoleType.BRUTE,
            hp=80, initiative=4, ac=17, fortitude=19, reflex=16, will=15,
            skills="Athletics +10", powers=[sample_power],
        )
        adjusted = adjust_creature_level(brute, 2)

        assert adjusted.level == 7
        assert adjusted.hp == 100
        assert adjusted.initiative == 5
        assert (adjusted.ac, adjusted.fortitude, adjusted.reflex, adjusted.will) == (19, 21, 18, 17)
        assert adjusted.skills == "Athletics +11"
        assert adjusted.powers[0].attack_bonus == 10
        assert "2d8+7 damage" in adjusted.powers[0].details
        assert "pushed 1 square" in adjusted.powers[0].details

    def test_original_untouched(self, make_creature, sample_power):
        brute = make_creature(level=5, role=RoleType.BRUTE, hp=80, powers=[sample_power])
        adjust_creature_level(brute, 3)
        assert brute.level == 5
        assert brute.hp == 80
        assert brute.powers[0].details == sample_power.details

    def test_zero_delta_changes_nothing(self, make_creature, sample_power):
        soldier = make_creature(level=6, hp=70, initiative=6, skills="Athletics +11", powers=[sample_power])
        assert adjust_creature_level(soldier, 0) == soldier

    def test_minion_hp_fixed(self, make_creature):
        minion = make_creature(level=4, role=RoleType.SKIRMISHER, is_minion=True, hp=1)
        assert adjust_creature_level(minion, 5).hp == 1

    def test_hp_per_level_by_role_and_flag(self, make_creature):
        lurker = make_creature(level=5, role=RoleType.LURKER, hp=50)
        elite = make_creature(level=5, role=RoleType.SOLDIER, flag=RoleFlag.ELITE, hp=130)
        solo = make_creature(level=5, role=RoleType.BRUTE, flag=RoleFlag.SOLO, hp=400)

        assert adjust_creature_level(lurker, 1).hp == 56
        assert adjust_creature_level(elite, 1).hp == 146
        assert adjust_creature_level(solo, -1).hp == 350

    def test_hp_floor(self, make_creature):
        weakling = make_creature(level=3, role=RoleType.ARTILLERY, hp=10)
        assert adjust_creature_level(weakling, -2).hp == 1

    def test_power_without_damage(self):
        from delveforge.core.creatures import CreaturePower

        power = CreaturePower(name="Glare", details="The target is dazed until the end of its next turn.", attack_bonus=5)
        adjusted = adjust_power_level(power, 2)
        assert adjusted.attack_bonus == 7
        assert adjusted.details == power.details
