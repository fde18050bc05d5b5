"""
Encounter composer.

Builds a balanced encounter for a party by picking a template, filling its
slots from a filtered creature pool (retrying on failure), applying one
random secondary modification (traps, skill challenges, lurkers) and then
trimming creatures until the encounter is no longer Extreme.

Every build works on call-local state and an injected random generator,
so repositories can be shared across builds and seeded builds repeat.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence, Tuple
import logging
import random

from ..creatures import RoleFlag, RoleType
from ..level_scaling import Difficulty
from .models import CreatureCard, Encounter, EncounterSlot, SkillChallenge, Trap
from .repository import CreatureRepository, SkillChallengeRepository, TrapRepository
from .templates import EncounterTemplate, TemplateGroup, TemplateSlot, build_template_groups

logger = logging.getLogger(__name__)

DEFAULT_TRIES = 100
DEFAULT_LEVELS_BELOW = 4
DEFAULT_LEVELS_ABOVE = 5

# Traps and skill challenges come from [level - 3, level + 5]
EXTRA_LEVELS_BELOW = 3
EXTRA_LEVELS_ABOVE = 5


# =============================================================================
# ENUMS
# =============================================================================

class BuildOutcome(str, Enum):
    """How a build ended."""
    SUCCESS = "success"
    EXHAUSTED_RETRIES = "exhausted_retries"
    INFEASIBLE_INPUT = "infeasible_input"


class Modification(str, Enum):
    """Secondary change applied to a freshly filled encounter."""
    NONE = "none"
    SWAP_FOR_TRAP = "swap_for_trap"
    SWAP_FOR_CHALLENGE = "swap_for_challenge"
    SWAP_FOR_LURKER = "swap_for_lurker"
    ADD_TRAP = "add_trap"
    ADD_CHALLENGE = "add_challenge"
    ADD_LURKER = "add_lurker"


# Out of 12
MODIFICATION_WEIGHTS: List[Tuple[Modification, int]] = [
    (Modification.NONE, 4),
    (Modification.SWAP_FOR_TRAP, 2),
    (Modification.SWAP_FOR_CHALLENGE, 1),
    (Modification.SWAP_FOR_LURKER, 1),
    (Modification.ADD_TRAP, 2),
    (Modification.ADD_CHALLENGE, 1),
    (Modification.ADD_LURKER, 1),
]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class EncounterRequest:
    """What the caller wants built."""
    level: int
    size: int
    group_name: str = ""
    difficulty: Optional[Difficulty] = None
    categories: Sequence[str] = ()
    keywords: Sequence[str] = ()
    include_individual: bool = False


@dataclass
class EncounterBuildResult:
    """Tagged result of a build; truthy only on success."""
    outcome: BuildOutcome
    attempts: int = 0
    encounter: Optional[Encounter] = None
    group_name: Optional[str] = None
    template: Optional[EncounterTemplate] = None
    modification: Optional[Modification] = None

    def __bool__(self) -> bool:
        return self.outcome == BuildOutcome.SUCCESS

    def to_dict(self, party_level: int, party_size: int) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "outcome": self.outcome.value,
            "attempts": self.attempts,
            "group_name": self.group_name,
            "template": self.template.to_dict() if self.template else None,
            "modification": self.modification.value if self.modification else None,
            "encounter": (
                self.encounter.to_dict(party_level, party_size)
                if self.encounter else None
            ),
        }


@dataclass
class _BuildContext:
    """Scratch state owned by a single build call."""
    request: EncounterRequest
    rng: random.Random
    creatures: List[CreatureCard] = field(default_factory=list)
    traps: List[Trap] = field(default_factory=list)
    challenges: List[SkillChallenge] = field(default_factory=list)


# =============================================================================
# COMPOSER
# =============================================================================

class EncounterComposer:
    """
    Composes encounters from creature, trap and skill challenge repositories.

    Repositories are only read, so one composer can serve any number of
    sequential or concurrent builds as long as each passes its own rng.
    """

    def __init__(
        self,
        creatures: CreatureRepository,
        traps: Optional[TrapRepository] = None,
        challenges: Optional[SkillChallengeRepository] = None,
        tries: int = DEFAULT_TRIES,
        levels_below: int = DEFAULT_LEVELS_BELOW,
        levels_above: int = DEFAULT_LEVELS_ABOVE,
    ):
        self.creatures = creatures
        self.traps = traps or TrapRepository()
        self.challenges = challenges or SkillChallengeRepository()
        self.tries = tries
        self.levels_below = levels_below
        self.levels_above = levels_above

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def build(self, request: EncounterRequest, rng: random.Random) -> EncounterBuildResult:
        """
        Compose an encounter for the request.

        Returns INFEASIBLE_INPUT without spending any attempts when no
        creature or no template survives filtering, EXHAUSTED_RETRIES
        after exactly `tries` failed attempts, otherwise SUCCESS with a
        fresh Encounter holding at least one creature.
        """
        ctx = _BuildContext(request=request, rng=rng)
        ctx.creatures = self.creatures.cards(
            min_level=max(request.level - self.levels_below, 1),
            max_level=request.level + self.levels_above,
            categories=request.categories,
            keywords=request.keywords,
        )
        if not ctx.creatures:
            logger.info(f"No creatures for level {request.level} with the given filters")
            return EncounterBuildResult(outcome=BuildOutcome.INFEASIBLE_INPUT)

        groups = build_template_groups(
            group_name=request.group_name,
            difficulty=request.difficulty,
            party_level=request.level,
            include_individual=request.include_individual,
        )
        if not groups:
            logger.info(f"No templates for level {request.level} ({request.group_name or 'any group'})")
            return EncounterBuildResult(outcome=BuildOutcome.INFEASIBLE_INPUT)

        ctx.traps = self.traps.find(
            request.level - EXTRA_LEVELS_BELOW, request.level + EXTRA_LEVELS_ABOVE
        )
        ctx.challenges = self.challenges.find(
            request.level - EXTRA_LEVELS_BELOW, request.level + EXTRA_LEVELS_ABOVE
        )

        for attempt in range(1, self.tries + 1):
            group = rng.choice(groups)
            template = rng.choice(group.templates)

            slots = self._fill_template(ctx, template)
            if slots is None:
                logger.debug(f"Attempt {attempt}: could not fill {group.name} ({template.difficulty.value})")
                continue

            encounter = Encounter(slots=slots)
            modification = self._apply_modification(ctx, encounter)
            self._balance(ctx, encounter)
            encounter.set_default_display_names()
            encounter.set_standard_notes()

            logger.info(
                f"Built {group.name} encounter for level {request.level} x{request.size} "
                f"in {attempt} attempt(s): {encounter.count} creatures, {encounter.xp} XP, "
                f"{encounter.difficulty(request.level, request.size).value}"
            )
            return EncounterBuildResult(
                outcome=BuildOutcome.SUCCESS,
                attempts=attempt,
                encounter=encounter,
                group_name=group.name,
                template=template,
                modification=modification,
            )

        logger.info(f"Gave up on level {request.level} encounter after {self.tries} attempts")
        return EncounterBuildResult(outcome=BuildOutcome.EXHAUSTED_RETRIES, attempts=self.tries)

    def _fill_template(
        self,
        ctx: _BuildContext,
        template: EncounterTemplate
    ) -> Optional[List[EncounterSlot]]:
        slots = []
        for template_slot in template.slots:
            candidates = [c for c in ctx.creatures if template_slot.match(c, ctx.request.level)]
            if not candidates:
                return None

            card = ctx.rng.choice(candidates)
            slots.append(EncounterSlot.create(card, template_slot.count))
        return slots

    # -------------------------------------------------------------------------
    # Modifications
    # -------------------------------------------------------------------------

    def _weighted_select(self, rng: random.Random) -> Modification:
        """Select a modification using its weight."""
        total_weight = sum(weight for _, weight in MODIFICATION_WEIGHTS)
        roll = rng.randint(1, total_weight)

        cumulative = 0
        for modification, weight in MODIFICATION_WEIGHTS:
            cumulative += weight
            if roll <= cumulative:
                return modification

        return MODIFICATION_WEIGHTS[-1][0]

    def _apply_modification(self, ctx: _BuildContext, encounter: Encounter) -> Modification:
        modification = self._weighted_select(ctx.rng)

        if modification == Modification.SWAP_FOR_TRAP:
            if self._add_trap(ctx, encounter):
                self._remove_creature(ctx, encounter)
        elif modification == Modification.SWAP_FOR_CHALLENGE:
            if self._add_challenge(ctx, encounter):
                self._remove_creature(ctx, encounter)
        elif modification == Modification.SWAP_FOR_LURKER:
            if self._add_lurker(ctx, encounter):
                self._remove_creature(ctx, encounter)
        elif modification == Modification.ADD_TRAP:
            self._add_trap(ctx, encounter)
            if self._too_hard(ctx, encounter):
                self._remove_creature(ctx, encounter)
        elif modification == Modification.ADD_CHALLENGE:
            # Difficulty is judged before the challenge goes in
            if self._too_hard(ctx, encounter):
                self._remove_creature(ctx, encounter)
            self._add_challenge(ctx, encounter)
        elif modification == Modification.ADD_LURKER:
            self._add_lurker(ctx, encounter)
            if self._too_hard(ctx, encounter):
                self._remove_creature(ctx, encounter)

        logger.debug(f"Applied modification {modification.value}")
        return modification

    def _too_hard(self, ctx: _BuildContext, encounter: Encounter) -> bool:
        diff = encounter.difficulty(ctx.request.level, ctx.request.size)
        return diff in (Difficulty.HARD, Difficulty.EXTREME)

    def _balance(self, ctx: _BuildContext, encounter: Encounter):
        while (
            encounter.difficulty(ctx.request.level, ctx.request.size) == Difficulty.EXTREME
            and encounter.count > 1
        ):
            self._remove_creature(ctx, encounter)

    def _remove_creature(self, ctx: _BuildContext, encounter: Encounter):
        """Drop one creature from a random slot; the last creature always stays."""
        if encounter.count <= 1:
            return

        slot = ctx.rng.choice(encounter.slots)
        if slot.count == 1:
            encounter.slots.remove(slot)
        else:
            slot.instances.pop()

    def _add_trap(self, ctx: _BuildContext, encounter: Encounter) -> bool:
        if not ctx.traps:
            return False
        encounter.traps.append(replace(ctx.rng.choice(ctx.traps)))
        return True

    def _add_challenge(self, ctx: _BuildContext, encounter: Encounter) -> bool:
        if not ctx.challenges:
            return False
        challenge = ctx.rng.choice(ctx.challenges)
        encounter.skill_challenges.append(replace(challenge, skills=list(challenge.skills)))
        return True

    def _add_lurker(self, ctx: _BuildContext, encounter: Encounter) -> bool:
        lurkers = [
            card for card in ctx.creatures
            if card.flag == RoleFlag.STANDARD and RoleType.LURKER in card.roles
        ]
        if not lurkers:
            return False
        encounter.slots.append(EncounterSlot.create(ctx.rng.choice(lurkers), 1))
        return True

    # -------------------------------------------------------------------------
    # Manual building helpers
    # -------------------------------------------------------------------------

    def find_templates(
        self,
        encounter: Encounter,
        party_level: int,
        include_individual: bool = False
    ) -> List[Tuple[TemplateGroup, EncounterTemplate]]:
        """
        Templates an encounter in progress could still grow into.

        Each returned template has its slot counts reduced by the creatures
        already placed (slots that are fully used are dropped), and every
        remaining slot has at least one creature that could fill it.
        """
        results = []
        for group in build_template_groups(party_level=party_level, include_individual=include_individual):
            for template in group.templates:
                remaining = self._remaining_slots(template, encounter, party_level)
                if remaining is None:
                    continue

                if all(self._has_candidate(s, party_level) for s in remaining):
                    results.append((group, EncounterTemplate(template.difficulty, tuple(remaining))))
        return results

    def _remaining_slots(
        self,
        template: EncounterTemplate,
        encounter: Encounter,
        party_level: int
    ) -> Optional[List[TemplateSlot]]:
        slots = list(template.slots)
        for enc_slot in encounter.slots:
            match = EncounterTemplate(template.difficulty, tuple(slots)).find_slot(enc_slot, party_level)
            if match is None:
                return None

            index = slots.index(match)
            left = match.count - enc_slot.count
            if left <= 0:
                del slots[index]
            else:
                slots[index] = replace(match, count=left)
        return slots

    def _has_candidate(self, slot: TemplateSlot, party_level: int) -> bool:
        level = slot.creature_level(party_level)
        return any(slot.match(card, party_level) for card in self.creatures.cards(level, level))

    def find_creatures(self, slot: TemplateSlot, party_level: int, query: str = "") -> List[CreatureCard]:
        """
        Creatures that fit a template slot.

        Every whitespace-separated query token must appear in the card's
        title or category (case-insensitive).
        """
        level = slot.creature_level(party_level)
        tokens = query.lower().split()

        results = []
        for card in self.creatures.cards(level, level):
            if not slot.match(card, party_level):
                continue
            haystacks = (card.title.lower(), card.category.value.replace("_", ""))
            if all(any(token in h for h in haystacks) for token in tokens):
                results.append(card)
        return results
