"""
Integration tests for the scheduling API.
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from app.api import scheduling as scheduling_api
from app.core.config import Settings
from main import app


def iso(hour: int, minute: int = 0, day: int = 10) -> str:
    return datetime(2026, 3, day, hour, minute, tzinfo=timezone.utc).isoformat()


def parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def commitment(commitment_id: str, start: str, end: str, completed: bool = False) -> dict:
    return {"id": commitment_id, "title": commitment_id, "start": start, "end": end, "completed": completed}


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_classify_overlap(client):
    response = await client.post(
        "/api/scheduling/classify",
        json={
            "proposed": {"start": iso(9, 30), "end": iso(10, 15)},
            "commitments": [
                commitment("nine", iso(9), iso(10)),
                commitment("ten", iso(10), iso(11)),
            ],
            "now": iso(8),
        },
    )
    assert response.status_code == 200, response.text
    assert response.json() == {"kind": "overlap", "commitment_id": "nine"}


@pytest.mark.asyncio
async def test_classify_grace_defaults_to_settings(client, monkeypatch):
    body = {"proposed": {"start": iso(11), "end": iso(12)}, "now": "2026-03-10T12:00:30+00:00"}

    response = await client.post("/api/scheduling/classify", json=body)
    assert response.json()["kind"] == "none"

    monkeypatch.setattr(scheduling_api, "get_settings", lambda: Settings(OVERDUE_GRACE_SECONDS=0))
    response = await client.post("/api/scheduling/classify", json=body)
    assert response.json()["kind"] == "overdue"

    response = await client.post("/api/scheduling/classify", json={**body, "grace_seconds": 60})
    assert response.json()["kind"] == "none"


@pytest.mark.asyncio
async def test_classify_invalid_interval_is_bad_request(client):
    response = await client.post(
        "/api/scheduling/classify",
        json={"proposed": {"start": iso(10), "end": iso(9)}, "now": iso(8)},
    )
    assert response.status_code == 400
    assert "must be before" in response.json()["detail"]


@pytest.mark.asyncio
async def test_slots_for_explicit_day(client):
    response = await client.post(
        "/api/scheduling/slots",
        json={
            "duration_minutes": 30,
            "day_start": iso(8),
            "day_end": iso(18),
            "now_floor": iso(8),
            "commitments": [
                commitment("a", iso(9), iso(10)),
                commitment("b", iso(11), iso(12)),
            ],
        },
    )
    assert response.status_code == 200, response.text
    starts = [parse(slot["start"]) for slot in response.json()]
    assert starts == [parse(iso(8)), parse(iso(10)), parse(iso(12))]


@pytest.mark.asyncio
async def test_slots_reject_non_positive_duration(client):
    response = await client.post(
        "/api/scheduling/slots",
        json={"duration_minutes": 0, "day_start": iso(8), "day_end": iso(18), "now_floor": iso(8)},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_respects_max_results(client):
    response = await client.post(
        "/api/scheduling/search",
        json={
            "duration_minutes": 60,
            "start_date": "2026-03-10",
            "timezone": "UTC",
            "max_results": 2,
            "now": iso(12),
        },
    )
    assert response.status_code == 200, response.text
    slots = response.json()
    assert len(slots) == 2
    assert parse(slots[0]["start"]) == parse(iso(12))
    assert parse(slots[1]["start"]) == parse(iso(0, day=11))


@pytest.mark.asyncio
async def test_search_rejects_unknown_timezone(client):
    response = await client.post(
        "/api/scheduling/search",
        json={"duration_minutes": 60, "timezone": "Mars/Olympus_Mons", "now": iso(12)},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_review_returns_conflict_and_suggestions(client):
    response = await client.post(
        "/api/scheduling/review",
        json={
            "start": iso(9, 30),
            "end": iso(10, 15),
            "timezone": "UTC",
            "now": iso(9),
            "commitments": [
                commitment("nine", iso(9), iso(10)),
                commitment("ten", iso(10), iso(11)),
            ],
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["result"]["kind"] == "overlap"
    assert data["conflicting"]["id"] == "nine"
    assert parse(data["suggestions"][0]["start"]) == parse(iso(11))
    assert len(data["suggestions"]) == 3


@pytest.mark.asyncio
async def test_shift_cascades_downstream(client):
    response = await client.post(
        "/api/scheduling/shift",
        json={
            "anchor": commitment("anchor", iso(9), iso(10)),
            "new_end": iso(10, 30),
            "downstream": [
                commitment("early", iso(7), iso(8)),
                commitment("next", iso(10), iso(11)),
            ],
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert parse(data["anchor"]["end"]) == parse(iso(10, 30))
    by_id = {item["id"]: item for item in data["downstream"]}
    assert parse(by_id["early"]["start"]) == parse(iso(7))
    assert parse(by_id["next"]["start"]) == parse(iso(10, 30))


@pytest.mark.asyncio
async def test_shift_rejects_compression(client):
    response = await client.post(
        "/api/scheduling/shift",
        json={"anchor": commitment("anchor", iso(9), iso(10)), "new_end": iso(9, 45)},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_extend_resumes_overdue_task(client):
    response = await client.post(
        "/api/scheduling/extend",
        json={
            "anchor": commitment("anchor", iso(9), iso(10)),
            "minutes": 15,
            "now": iso(10, 30),
            "commitments": [
                commitment("anchor", iso(9), iso(10)),
                commitment("later", iso(11), iso(12)),
            ],
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert parse(data["anchor"]["start"]) == parse(iso(10, 30))
    assert parse(data["anchor"]["end"]) == parse(iso(10, 45))
    assert parse(data["downstream"][0]["start"]) == parse(iso(11, 45))


@pytest.mark.asyncio
async def test_extend_rejects_zero_minutes(client):
    response = await client.post(
        "/api/scheduling/extend",
        json={"anchor": commitment("anchor", iso(9), iso(10)), "minutes": 0, "now": iso(10)},
    )
    assert response.status_code == 400
