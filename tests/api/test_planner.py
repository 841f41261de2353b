"""Tests for the planner endpoint."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from conftest import db_override, make_event, make_mock_db, scalars_result
from eventscape.api.deps import get_itinerary_planner
from eventscape.database import get_db
from eventscape.services.planner import PlanResult

PLAN_REQUEST = {"date": "2025-08-23", "start_time": "10:00", "duration_hours": 4, "pax": 2}


async def post_plan(app: FastAPI, db, planner, payload: dict):
    app.dependency_overrides[get_db] = db_override(db)
    app.dependency_overrides[get_itinerary_planner] = lambda: planner
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.post("/api/planner", json=payload)
    finally:
        app.dependency_overrides.clear()


def make_planner(result: PlanResult) -> MagicMock:
    planner = MagicMock()
    planner.plan = AsyncMock(return_value=result)
    return planner


async def test_plan_from_open_events(test_app: FastAPI) -> None:
    open_event = make_event(id=1, opening_hours="9:00am - 6:00pm")
    closed_event = make_event(id=2, opening_hours="6:00pm - 11:00pm")
    finished = make_event(id=3, start_date=date(2025, 7, 1), end_date=date(2025, 7, 31))
    db = make_mock_db(execute_results=[scalars_result([open_event, closed_event, finished])])
    plan = {"itinerary": [{"type": "event", "event_id": 1}], "itinerary_summary": "Museum morning."}
    planner = make_planner(PlanResult(success=True, plan=plan))

    response = await post_plan(test_app, db, planner, PLAN_REQUEST)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["candidates"] == 1
    assert data["end_time"] == "14:00"
    assert data["plan"] == plan
    candidates = planner.plan.await_args.args[1]
    assert [event.id for event in candidates] == [1]


async def test_fallback_plan_is_returned(test_app: FastAPI) -> None:
    db = make_mock_db(execute_results=[scalars_result([make_event()])])
    fallback = {"itinerary": [], "itinerary_summary": "Fallback"}
    planner = make_planner(
        PlanResult(success=False, fallback_plan=fallback, error="No response from LLM")
    )

    response = await post_plan(test_app, db, planner, PLAN_REQUEST)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["plan"] is None
    assert data["fallback_plan"] == fallback
    assert data["error"] == "No response from LLM"


async def test_no_open_events(test_app: FastAPI) -> None:
    db = make_mock_db(execute_results=[scalars_result([make_event(opening_hours="Closed")])])
    planner = make_planner(PlanResult(success=True))

    response = await post_plan(test_app, db, planner, PLAN_REQUEST)

    assert response.status_code == 404
    planner.plan.assert_not_awaited()


async def test_invalid_start_time(test_app: FastAPI) -> None:
    planner = make_planner(PlanResult(success=True))

    response = await post_plan(
        test_app, make_mock_db(), planner, {**PLAN_REQUEST, "start_time": "10am"}
    )

    assert response.status_code == 422


@pytest.mark.parametrize("start_time", ["25:00", "9:75", "24:00"])
async def test_out_of_range_start_time(test_app: FastAPI, start_time: str) -> None:
    db = make_mock_db(execute_results=[scalars_result([make_event()])])
    planner = make_planner(PlanResult(success=True))

    response = await post_plan(test_app, db, planner, {**PLAN_REQUEST, "start_time": start_time})

    assert response.status_code == 422
    planner.plan.assert_not_awaited()
