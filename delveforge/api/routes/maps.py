"""
Map generation API routes.

Endpoints for building tile maps, stocking them with encounters and
listing the loaded tile libraries.
"""
from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import List, Optional
import random

from delveforge.config import get_settings, make_rng
from delveforge.core.delve import build_delve
from delveforge.core.encounters import EncounterComposer, EncounterRequest
from delveforge.core.errors import ValidationError
from delveforge.core.map_generation import (
    MapBuildOptions,
    MapBuildType,
    build_map,
    index_tiles,
)
from delveforge.services import get_library

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class BuildMapRequest(BaseModel):
    """Request to build a map."""
    build_type: str = Field("warren", description="warren, filled_area or freeform")
    width: int = Field(20, ge=1, le=100, description="Width in squares (filled area and freeform)")
    height: int = Field(15, ge=1, le=100, description="Height in squares (filled area and freeform)")
    min_area_count: int = Field(4, ge=0, le=50)
    max_area_count: int = Field(10, ge=0, le=50, description="Warren stops after this many areas")
    libraries: List[str] = Field(default_factory=list, description="Tile library names; empty for all")
    seed: Optional[int] = None


class BuildDelveRequest(BuildMapRequest):
    """Request to build a map and stock every area with an encounter."""
    party_level: int = Field(..., ge=1, le=30, description="Average party level")
    party_size: int = Field(5, ge=1, le=10, description="Number of party members")
    categories: List[str] = Field(default_factory=list, description="Creature categories to draw from")
    keywords: List[str] = Field(default_factory=list, description="Phenotype keywords, any of which must match")


# =============================================================================
# Map Endpoints
# =============================================================================

def _build(request: BuildMapRequest, rng: random.Random):
    """Build the requested map; returns it with the libraries it drew on."""
    try:
        build_type = MapBuildType(request.build_type.lower())
    except ValueError:
        raise ValidationError(
            f"Invalid build type: {request.build_type}. Valid: {[t.value for t in MapBuildType]}",
            field="build_type",
        )

    libraries = get_library().get_tile_libraries(request.libraries)
    options = MapBuildOptions(
        build_type=build_type,
        width=request.width,
        height=request.height,
        min_area_count=request.min_area_count,
        max_area_count=request.max_area_count,
        libraries=libraries,
        failure_limit=get_settings().MAP_FAILURE_LIMIT,
    )

    try:
        game_map = build_map(options, rng)
    except ValueError as e:
        raise ValidationError(str(e))

    return game_map, libraries


@router.post("/build")
async def build_tile_map(request: BuildMapRequest):
    """Build a map from the chosen tile libraries."""
    game_map, libraries = _build(request, make_rng(request.seed))
    return {"map": game_map.to_dict(index_tiles(libraries))}


@router.post("/delve")
async def build_tile_delve(request: BuildDelveRequest):
    """
    Build a map, then an encounter for each of its areas.

    Areas whose encounter cannot be built are reported with their outcome
    and no encounter. Filled-area maps have no areas, so they yield no rooms.
    """
    rng = make_rng(request.seed)
    game_map, libraries = _build(request, rng)
    tile_index = index_tiles(libraries)

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
    encounter_request = EncounterRequest(
        level=request.party_level,
        size=request.party_size,
        categories=request.categories,
        keywords=request.keywords,
    )

    delve = build_delve(game_map, tile_index, composer, encounter_request, rng)
    return delve.to_dict(request.party_level, request.party_size, tile_index)


@router.get("/libraries")
async def list_tile_libraries():
    """Loaded tile libraries and their tiles."""
    return {"libraries": [lib.to_dict() for lib in get_library().tile_libraries]}
