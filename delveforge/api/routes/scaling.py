"""
Level scaling API routes.

Endpoints for skill DC lookups, damage expression rescaling and
creature level adjustment.
"""
from fastapi import APIRouter, Query
from pydantic import BaseModel, Field
from typing import Optional

from delveforge.core.dice import DiceExpression
from delveforge.core.errors import NotFoundError, ValidationError
from delveforge.core.level_scaling import (
    Difficulty,
    adjust_creature_level,
    adjust_dice_expression,
    skill_dc,
)
from delveforge.config import make_rng
from delveforge.services import get_library

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class DiceRequest(BaseModel):
    """Request to parse, rescale and optionally roll a damage expression."""
    expression: str = Field(..., description="e.g. '2d6+4' or '1d8 + 3 fire damage'")
    level_delta: int = Field(0, ge=-29, le=29)
    roll: bool = False
    seed: Optional[int] = None


class AdjustCreatureRequest(BaseModel):
    """Request to rescale a library creature."""
    creature_id: str
    level_delta: int = Field(..., ge=-29, le=29)


# =============================================================================
# Scaling Endpoints
# =============================================================================

@router.get("/skill-dc")
async def get_skill_dc(
    level: int = Query(..., ge=1, le=30),
    difficulty: Optional[str] = None,
):
    """DC for one difficulty at a level, or every difficulty when none is given."""
    if difficulty is None:
        return {
            "level": level,
            "dcs": {d.value: skill_dc(d, level) for d in Difficulty},
        }

    try:
        diff = Difficulty(difficulty.lower())
    except ValueError:
        raise ValidationError(
            f"Invalid difficulty: {difficulty}. Valid: {[d.value for d in Difficulty]}",
            field="difficulty",
        )

    return {"level": level, "difficulty": diff.value, "dc": skill_dc(diff, level)}


@router.post("/dice")
async def scale_dice(request: DiceRequest):
    """Parse a damage expression and re-derive it for a level shift."""
    expr = DiceExpression.parse(request.expression)
    if expr is None:
        raise ValidationError(f"Not a dice expression: {request.expression!r}", field="expression")
    if expr.throws > 0 and expr.sides < 1:
        raise ValidationError(f"Dice need at least one side: {request.expression!r}", field="expression")

    adjusted = adjust_dice_expression(expr, request.level_delta) if request.level_delta else expr

    response = {
        "original": expr.to_dict(),
        "adjusted": adjusted.to_dict(),
    }
    if request.roll:
        response["roll"] = adjusted.evaluate(make_rng(request.seed))
    return response


@router.post("/creature")
async def scale_creature(request: AdjustCreatureRequest):
    """Return a library creature rescaled by level_delta."""
    creature = get_library().creatures.get(request.creature_id)
    if creature is None:
        raise NotFoundError("Creature", request.creature_id)

    if creature.level + request.level_delta < 1:
        raise ValidationError(
            f"{creature.name} cannot drop below level 1",
            field="level_delta",
        )

    return {"creature": adjust_creature_level(creature, request.level_delta).to_dict()}
