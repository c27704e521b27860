"""
Tests for the briefing delivery endpoint.
"""
import pytest
from conftest import build_candidate
from httpx import AsyncClient

URL = "/api/v1/briefings/v2"


@pytest.mark.asyncio
async def test_deliver_with_valid_candidate(client: AsyncClient, valid_candidate):
    """Test a valid candidate is delivered as an llm brief."""
    response = await client.post(URL, json={"llm_candidate": valid_candidate})

    assert response.status_code == 200
    body = response.json()
    assert body["ttl"] == 300000

    data = body["data"]
    assert data["schedule"] == {
        "enabled": True,
        "timezone": "UTC",
        "hour": 8,
        "minute": 0,
        "time_local": "08:00",
    }
    assert data["precomputed"]["telemetry"]["reasoning_mode"] == "llm"
    assert data["precomputed"]["telemetry"]["attempt"] == 1
    assert data["precomputed"]["issues"] == []
    assert data["precomputed"]["brief"]["mission"]["title"] == "Ship the release"
    assert [section["id"] for section in data["view"]["sections"]] == [
        "mission",
        "priorities",
        "evidence",
        "quick_reaction",
    ]
    assert data["writeback"] is None


@pytest.mark.asyncio
async def test_deliver_with_repair(client: AsyncClient, invalid_candidate, valid_candidate):
    """Test an invalid candidate is replaced by the repair candidate."""
    response = await client.post(URL, json={
        "llm_candidate": invalid_candidate,
        "repair_candidate": valid_candidate,
    })

    assert response.status_code == 200
    telemetry = response.json()["data"]["precomputed"]["telemetry"]
    assert telemetry["reasoning_mode"] == "llm"
    assert telemetry["attempt"] == 2
    assert telemetry["repair_used"] is True
    assert telemetry["validation_fail"] is True


@pytest.mark.asyncio
async def test_deliver_falls_back(client: AsyncClient, invalid_candidate):
    """Test two invalid candidates produce the fallback brief."""
    response = await client.post(URL, json={
        "mission_hint": "Fix checkout",
        "evidence": [{"id": "deploys", "source": "vercel", "value_text": "3 failed"}],
        "llm_candidate": invalid_candidate,
        "repair_candidate": invalid_candidate,
    })

    assert response.status_code == 200
    precomputed = response.json()["data"]["precomputed"]
    assert precomputed["telemetry"]["reasoning_mode"] == "fallback"
    assert precomputed["telemetry"]["fallback_reason"] == "validation_failed"
    assert len(precomputed["issues"]) == 4
    assert precomputed["brief"]["mission"]["title"] == "Fix checkout"
    assert precomputed["brief"]["priorities"][0]["evidence_refs"] == ["deploys"]


@pytest.mark.asyncio
async def test_schedule_is_clamped(client: AsyncClient, valid_candidate):
    response = await client.post(URL, json={
        "schedule": {"enabled": False, "timezone": "  ", "hour": 30.7, "minute": -5},
        "llm_candidate": valid_candidate,
    })

    assert response.status_code == 200
    assert response.json()["data"]["schedule"] == {
        "enabled": False,
        "timezone": "UTC",
        "hour": 23,
        "minute": 0,
        "time_local": "23:00",
    }


@pytest.mark.asyncio
async def test_schedule_truncates_fractions(client: AsyncClient, valid_candidate):
    response = await client.post(URL, json={
        "schedule": {"timezone": "Europe/Berlin", "hour": 6.9, "minute": 5.5},
        "llm_candidate": valid_candidate,
    })

    schedule = response.json()["data"]["schedule"]
    assert schedule["timezone"] == "Europe/Berlin"
    assert schedule["time_local"] == "06:05"


@pytest.mark.asyncio
async def test_reaction_writeback(client: AsyncClient, valid_candidate):
    """Test a known reaction is written back against the delivered brief."""
    response = await client.post(URL, json={
        "reaction": {"kind": "accept", "note": "  on it "},
        "llm_candidate": valid_candidate,
    })

    writeback = response.json()["data"]["writeback"]
    assert writeback["status"] == "recorded"
    assert writeback["reaction"] == {"kind": "accept", "note": "on it"}
    assert writeback["applied_to_brief_generated_at"] == "2026-02-11T08:00:00.000Z"
    assert writeback["recorded_at"].endswith("Z")


@pytest.mark.asyncio
async def test_unknown_reaction_is_dropped(client: AsyncClient, valid_candidate):
    response = await client.post(URL, json={
        "reaction": {"kind": "wave"},
        "llm_candidate": valid_candidate,
    })

    assert response.status_code == 200
    assert response.json()["data"]["writeback"] is None


@pytest.mark.asyncio
async def test_low_confidence_view(client: AsyncClient):
    response = await client.post(URL, json={
        "llm_candidate": build_candidate(confidence="low", verification_prompt="Confirm blockers in GitHub"),
    })

    sections = {section["id"]: section["body"] for section in response.json()["data"]["view"]["sections"]}
    assert sections["quick_reaction"].endswith("Verify first: Confirm blockers in GitHub")


@pytest.mark.asyncio
async def test_invalid_request_body(client: AsyncClient):
    response = await client.post(URL, json={"schedule": {"hour": "eight"}})

    assert response.status_code == 422
