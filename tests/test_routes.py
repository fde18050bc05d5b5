"""Tests for the HTTP routes and error handlers, calling the handlers directly."""
import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI

from delveforge.api.routes.encounters import (
    BuildDeckRequest,
    BuildEncounterRequest,
    build_encounter,
    build_encounter_deck,
    list_categories,
    list_templates,
)
from delveforge.api.routes.maps import (
    BuildDelveRequest,
    BuildMapRequest,
    build_tile_delve,
    build_tile_map,
    list_tile_libraries,
)
from delveforge.api.routes.scaling import (
    AdjustCreatureRequest,
    DiceRequest,
    get_skill_dc,
    scale_creature,
    scale_dice,
)
from delveforge.core.errors import (
    GameError,
    InfeasibleGenerationError,
    NotFoundError,
    ValidationError,
)
from delveforge.middleware import setup_error_handlers
from delveforge.services import get_library


class TestEncounterRoutes:
    """Tests for /api/encounters."""

    @pytest.mark.asyncio
    async def test_build_grand_melee(self):
        request = BuildEncounterRequest(party_level=5, group_name="Grand Melee", seed=3)
        data = await build_encounter(request)

        assert data["outcome"] == "success"
        assert data["group_name"] == "Grand Melee"
        assert data["encounter"]["count"] >= 1

    @pytest.mark.asyncio
    async def test_seeded_builds_repeat(self):
        request = BuildEncounterRequest(party_level=4, seed=21)
        first = await build_encounter(request)
        second = await build_encounter(request)

        def titles(data):
            return [(s["card"]["title"], s["count"]) for s in data["encounter"]["slots"]]

        assert titles(first) == titles(second)

    @pytest.mark.asyncio
    async def test_unknown_group(self):
        with pytest.raises(NotFoundError):
            await build_encounter(BuildEncounterRequest(party_level=5, group_name="Tea Party"))

    @pytest.mark.asyncio
    async def test_invalid_difficulty(self):
        with pytest.raises(ValidationError):
            await build_encounter(BuildEncounterRequest(party_level=5, difficulty="brutal"))

    @pytest.mark.asyncio
    async def test_no_matching_creatures(self):
        request = BuildEncounterRequest(party_level=5, categories=["no-such-category"], seed=1)
        with pytest.raises(InfeasibleGenerationError) as exc_info:
            await build_encounter(request)
        assert exc_info.value.http_status == 422

    @pytest.mark.asyncio
    async def test_deck_with_draws(self):
        data = await build_encounter_deck(BuildDeckRequest(party_level=5, draws=2, seed=7))

        assert data["deck"]["size"] == 50
        assert 1 <= len(data["encounters"]) <= 2
        assert data["deck"]["remaining"] < 50

    @pytest.mark.asyncio
    async def test_deck_without_creatures(self):
        with pytest.raises(InfeasibleGenerationError):
            await build_encounter_deck(BuildDeckRequest(party_level=5, categories=["no-such-category"]))

    @pytest.mark.asyncio
    async def test_templates_and_categories(self):
        templates = await list_templates(party_level=3)
        assert "Grand Melee" in templates["names"]
        assert templates["groups"]

        categories = await list_categories()
        assert categories["categories"] == get_library().get_categories()


class TestMapRoutes:
    """Tests for /api/maps."""

    @pytest.mark.asyncio
    async def test_build_warren(self):
        request = BuildMapRequest(build_type="warren", libraries=["Dungeon Tiles"], seed=1)
        data = await build_tile_map(request)
        assert data["map"]["tile_count"] > 0
        assert all("width" in t for t in data["map"]["tiles"])

    @pytest.mark.asyncio
    async def test_build_filled_area(self):
        request = BuildMapRequest(build_type="filled_area", width=5, height=4, libraries=["Cavern Tiles"], seed=2)
        data = await build_tile_map(request)
        assert sum(t["width"] * t["height"] for t in data["map"]["tiles"]) == 20
        assert data["map"]["areas"] == []

    @pytest.mark.asyncio
    async def test_invalid_build_type(self):
        with pytest.raises(ValidationError):
            await build_tile_map(BuildMapRequest(build_type="labyrinth"))

    @pytest.mark.asyncio
    async def test_unknown_library(self):
        with pytest.raises(NotFoundError):
            await build_tile_map(BuildMapRequest(libraries=["Moon Tiles"]))

    @pytest.mark.asyncio
    async def test_area_counts_out_of_order(self):
        with pytest.raises(ValidationError):
            await build_tile_map(BuildMapRequest(min_area_count=6, max_area_count=2))

    @pytest.mark.asyncio
    async def test_build_delve(self):
        request = BuildDelveRequest(party_level=4, libraries=["Dungeon Tiles"], seed=5)
        data = await build_tile_delve(request)

        assert len(data["rooms"]) == len(data["map"]["areas"])
        for room in data["rooms"]:
            region = room["area"]["region"]
            if room["encounter"] is None:
                continue
            for slot in room["encounter"]["slots"]:
                for instance in slot["instances"]:
                    if instance["location"] is None:
                        continue
                    x, y = instance["location"]
                    assert region["x"] <= x < region["x"] + region["width"]
                    assert region["y"] <= y < region["y"] + region["height"]

    @pytest.mark.asyncio
    async def test_delve_over_filled_area_has_no_rooms(self):
        request = BuildDelveRequest(
            party_level=4, build_type="filled_area", width=4, height=4, libraries=["Cavern Tiles"], seed=2,
        )
        data = await build_tile_delve(request)
        assert data["rooms"] == []
        assert data["encounter_count"] == 0

    @pytest.mark.asyncio
    async def test_list_libraries(self):
        data = await list_tile_libraries()
        assert {lib["name"] for lib in data["libraries"]} == {"Dungeon Tiles", "Cavern Tiles"}


class TestScalingRoutes:
    """Tests for /api/scaling."""

    @pytest.mark.asyncio
    async def test_all_dcs(self):
        data = await get_skill_dc(level=1)
        assert data["dcs"]["easy"] == 8
        assert data["dcs"]["moderate"] == 12
        assert len(data["dcs"]) == 5

    @pytest.mark.asyncio
    async def test_one_dc(self):
        data = await get_skill_dc(level=1, difficulty="Moderate")
        assert data == {"level": 1, "difficulty": "moderate", "dc": 12}

    @pytest.mark.asyncio
    async def test_bad_dc_difficulty(self):
        with pytest.raises(ValidationError):
            await get_skill_dc(level=1, difficulty="impossible")

    @pytest.mark.asyncio
    async def test_scale_dice(self):
        data = await scale_dice(DiceRequest(expression="2d6+7 damage", level_delta=1, roll=True, seed=4))
        assert data["original"]["expression"] == "2d6+7"
        assert data["adjusted"]["expression"] == "2d6+8"
        assert 10 <= data["roll"] <= 20

    @pytest.mark.asyncio
    async def test_unparseable_dice(self):
        with pytest.raises(ValidationError):
            await scale_dice(DiceRequest(expression="lots"))

    @pytest.mark.asyncio
    async def test_zero_sided_dice_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            await scale_dice(DiceRequest(expression="2d0", roll=True, seed=1))
        assert exc_info.value.http_status == 400
        assert exc_info.value.details["field"] == "expression"

    @pytest.mark.asyncio
    async def test_flat_damage_rolls_its_constant(self):
        data = await scale_dice(DiceRequest(expression="5 damage", roll=True, seed=1))
        assert data["roll"] == 5

    @pytest.mark.asyncio
    async def test_scale_creature(self):
        creature = next(iter(get_library().creatures))
        data = await scale_creature(AdjustCreatureRequest(creature_id=creature.id, level_delta=1))
        assert data["creature"]["level"] == creature.level + 1

    @pytest.mark.asyncio
    async def test_creature_below_level_one(self):
        creature = next(iter(get_library().creatures))
        with pytest.raises(ValidationError):
            await scale_creature(AdjustCreatureRequest(creature_id=creature.id, level_delta=-creature.level))

    @pytest.mark.asyncio
    async def test_unknown_creature(self):
        with pytest.raises(NotFoundError):
            await scale_creature(AdjustCreatureRequest(creature_id="nobody", level_delta=1))


class TestHealth:
    """Tests for the service endpoints."""

    @pytest.mark.asyncio
    async def test_health_reports_library(self):
        from delveforge.main import health_check

        data = await health_check()
        assert data["status"] == "healthy"
        assert data["creatures"] == len(get_library().creatures)
        assert data["tile_libraries"] == 2


class TestErrorHandlers:
    """Tests for the structured error responses."""

    @pytest.fixture
    def request_mock(self):
        request = MagicMock()
        request.url.path = "/api/test"
        request.method = "POST"
        return request

    @pytest.mark.asyncio
    async def test_game_error_envelope(self, request_mock):
        app = FastAPI()
        setup_error_handlers(app)

        handler = app.exception_handlers[GameError]
        response = await handler(request_mock, NotFoundError("Tile library", "Moon Tiles"))
        body = json.loads(response.body)

        assert response.status_code == 404
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["error"]["details"]["id"] == "Moon Tiles"
        assert len(body["error"]["error_id"]) == 8
        assert "timestamp" in body["error"]

    @pytest.mark.asyncio
    async def test_unhandled_error_hides_details_unless_debug(self, request_mock):
        quiet = FastAPI()
        setup_error_handlers(quiet)
        loud = FastAPI()
        setup_error_handlers(loud, debug=True)

        quiet_body = json.loads((await quiet.exception_handlers[Exception](request_mock, RuntimeError("boom"))).body)
        loud_response = await loud.exception_handlers[Exception](request_mock, RuntimeError("boom"))
        loud_body = json.loads(loud_response.body)

        assert loud_response.status_code == 500
        assert "debug" not in quiet_body["error"]
        assert loud_body["error"]["debug"]["exception_message"] == "boom"
        assert loud_body["error"]["recoverable"] is False
