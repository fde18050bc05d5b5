"""
Encounter API routes.

Endpoints for:
- Building template-driven encounters
- Building encounter decks and drawing hands from them
- Browsing the template catalogue
"""
from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import List, Optional

from delveforge.config import get_settings, make_rng
from delveforge.core.encounters import (
    BuildOutcome,
    EncounterComposer,
    EncounterRequest,
    build_deck,
    build_template_groups,
    draw_encounter,
    find_template_names,
)
from delveforge.core.errors import (
    ExhaustedGenerationError,
    InfeasibleGenerationError,
    NotFoundError,
    ValidationError,
)
from delveforge.core.level_scaling import Difficulty
from delveforge.services import get_library

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class BuildEncounterRequest(BaseModel):
    """Request to build an encounter from the template catalogue."""
    party_level: int = Field(..., ge=1, le=30, description="Average party level")
    party_size: int = Field(5, ge=1, le=10, description="Number of party members")
    group_name: str = Field("", description="Template group name; empty for any")
    difficulty: Optional[str] = Field(None, description="trivial, easy, moderate, hard or extreme")
    categories: List[str] = Field(default_factory=list, description="Creature categories to draw from")
    keywords: List[str] = Field(default_factory=list, description="Phenotype keywords, any of which must match")
    include_individual: bool = Field(False, description="Include single-character duel templates")
    seed: Optional[int] = Field(None, description="Seed for reproducible output")


class BuildDeckRequest(BaseModel):
    """Request to build an encounter deck and optionally draw from it."""
    party_level: int = Field(..., ge=1, le=30)
    party_size: int = Field(5, ge=1, le=10)
    categories: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    size: Optional[int] = Field(None, ge=1, le=200, description="Deck size; defaults to DECK_SIZE")
    draws: int = Field(0, ge=0, le=20, description="Encounters to draw after building")
    seed: Optional[int] = None


def _parse_difficulty(value: Optional[str]) -> Optional[Difficulty]:
    if value is None:
        return None
    try:
        return Difficulty(value.lower())
    except ValueError:
        raise ValidationError(
            f"Invalid difficulty: {value}. Valid: {[d.value for d in Difficulty]}",
            field="difficulty",
        )


# =============================================================================
# Encounter Endpoints
# =============================================================================

@router.post("/build")
async def build_encounter(request: BuildEncounterRequest):
    """
    Build one encounter for the party.

    Fails with 422 when no creature or template fits the request, or when
    every attempt was spent without filling a template.
    """
    difficulty = _parse_difficulty(request.difficulty)
    if request.group_name and request.group_name not in find_template_names():
        raise NotFoundError("Template group", request.group_name)

    settings = get_settings()
    library = get_library()
    composer = EncounterComposer(
        library.creatures,
        library.traps,
        library.challenges,
        tries=settings.ENCOUNTER_TRIES,
        levels_below=settings.ENCOUNTER_LEVELS_BELOW,
        levels_above=settings.ENCOUNTER_LEVELS_ABOVE,
    )

    result = composer.build(
        EncounterRequest(
            level=request.party_level,
            size=request.party_size,
            group_name=request.group_name,
            difficulty=difficulty,
            categories=request.categories,
            keywords=request.keywords,
            include_individual=request.include_individual,
        ),
        make_rng(request.seed),
    )

    if result.outcome == BuildOutcome.INFEASIBLE_INPUT:
        raise InfeasibleGenerationError()
    if result.outcome == BuildOutcome.EXHAUSTED_RETRIES:
        raise ExhaustedGenerationError(result.attempts)

    return result.to_dict(request.party_level, request.party_size)


@router.post("/deck")
async def build_encounter_deck(request: BuildDeckRequest):
    """Build a deck for the party level and draw `draws` encounters from it."""
    settings = get_settings()
    library = get_library()
    rng = make_rng(request.seed)

    deck = build_deck(
        library.creatures,
        request.party_level,
        rng,
        categories=request.categories,
        keywords=request.keywords,
        size=request.size or settings.DECK_SIZE,
    )
    if deck is None:
        raise InfeasibleGenerationError("No creatures match the deck filters")

    encounters = []
    for _ in range(request.draws):
        encounter = draw_encounter(deck, request.party_size, rng)
        if encounter is None:
            break
        encounters.append(encounter.to_dict(request.party_level, request.party_size))

    return {
        "deck": deck.to_dict(),
        "encounters": encounters,
    }


# =============================================================================
# Reference Data Endpoints
# =============================================================================

@router.get("/templates")
async def list_templates(party_level: Optional[int] = None, include_individual: bool = True):
    """Template groups, optionally restricted to those usable at party_level."""
    groups = build_template_groups(party_level=party_level, include_individual=include_individual)
    return {
        "names": find_template_names(),
        "groups": [g.to_dict() for g in groups],
    }


@router.get("/categories")
async def list_categories():
    """Creature categories present in the loaded library."""
    return {"categories": get_library().get_categories()}
