"""
Encounter composition.

Template-driven encounter building, encounter decks and the card, slot
and encounter types they produce.
"""

from .models import (
    CardCategory,
    CombatInstance,
    CreatureCard,
    Encounter,
    EncounterNote,
    EncounterSlot,
    EncounterSlotType,
    SkillChallenge,
    SkillChallengeSkill,
    Trap,
)
from .templates import (
    EncounterTemplate,
    TemplateGroup,
    TemplateSlot,
    build_template_groups,
    find_template_names,
)
from .repository import CreatureRepository, SkillChallengeRepository, TrapRepository
from .builder import (
    BuildOutcome,
    EncounterBuildResult,
    EncounterComposer,
    EncounterRequest,
    Modification,
)
from .deck import DeckCard, EncounterDeck, build_deck, draw_encounter, fill_deck

__all__ = [
    "CardCategory",
    "CombatInstance",
    "CreatureCard",
    "Encounter",
    "EncounterNote",
    "EncounterSlot",
    "EncounterSlotType",
    "SkillChallenge",
    "SkillChallengeSkill",
    "Trap",
    "EncounterTemplate",
    "TemplateGroup",
    "TemplateSlot",
    "build_template_groups",
    "find_template_names",
    "CreatureRepository",
    "SkillChallengeRepository",
    "TrapRepository",
    "BuildOutcome",
    "EncounterBuildResult",
    "EncounterComposer",
    "EncounterRequest",
    "Modification",
    "DeckCard",
    "EncounterDeck",
    "build_deck",
    "draw_encounter",
    "fill_deck",
]
