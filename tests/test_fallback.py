"""
Tests for the deterministic fallback brief.
"""
from morning_brief.schemas.brief import ReasonerInput
from morning_brief.services.fallback import (
    DEFAULT_MISSION_TITLE,
    FALLBACK_PROMPT,
    FALLBACK_RATIONALE,
    build_fallback_brief,
)

GENERATED_AT = "2026-02-11T09:00:00.000Z"


def test_fallback_without_evidence():
    """Test that an empty input gets a placeholder evidence record."""
    brief = build_fallback_brief(ReasonerInput(), GENERATED_AT)

    assert brief.schema_version == "v0.2"
    assert brief.generated_at == GENERATED_AT
    assert brief.mission.title == DEFAULT_MISSION_TITLE
    assert brief.mission.rationale == FALLBACK_RATIONALE
    assert brief.mission.horizon == "today"
    assert brief.quick_reaction_prompt == FALLBACK_PROMPT
    assert brief.assumptions == []

    (evidence,) = brief.evidence
    assert evidence.id == "seed-e1"
    assert evidence.source == "custom"
    assert evidence.value_text == "No upstream evidence was provided"
    assert evidence.observed_at == GENERATED_AT

    (priority,) = brief.priorities
    assert priority.id == "fallback-p1"
    assert priority.rank == 1
    assert priority.confidence == "medium"
    assert priority.headline == DEFAULT_MISSION_TITLE
    assert priority.evidence_refs == ["seed-e1"]


def test_fallback_uses_mission_hint():
    brief = build_fallback_brief(ReasonerInput(mission_hint="  Fix checkout  "), GENERATED_AT)

    assert brief.mission.title == "Fix checkout"
    assert brief.priorities[0].headline == "Fix checkout"


def test_fallback_blank_hint_uses_default_title():
    brief = build_fallback_brief(ReasonerInput(mission_hint="   "), GENERATED_AT)

    assert brief.mission.title == DEFAULT_MISSION_TITLE


def test_fallback_seeds_partial_evidence():
    """Test partial evidence records are filled in and referenced."""
    input = ReasonerInput(evidence=[
        {"id": " deploys ", "source": "vercel", "value_text": "3 failed", "freshness_minutes": 12, "link": "https://example.com"},
        {"source": "jira", "freshness_minutes": -3, "observed_at": ""},
    ])

    brief = build_fallback_brief(input, GENERATED_AT)
    first, second = brief.evidence

    assert first.id == "deploys"
    assert first.source == "vercel"
    assert first.value_text == "3 failed"
    assert first.freshness_minutes == 12
    assert first.link == "https://example.com"
    assert second.id == "seed-e2"
    assert second.source == "custom"
    assert second.entity == "workspace"
    assert second.metric == "signal"
    assert second.value_text == "No numeric value provided"
    assert second.observed_at == GENERATED_AT
    assert second.freshness_minutes == 0
    assert brief.priorities[0].evidence_refs == ["deploys"]


def test_fallback_is_deterministic():
    input = ReasonerInput(mission_hint="Ship", evidence=[{"id": "a"}])

    assert build_fallback_brief(input, GENERATED_AT) == build_fallback_brief(input, GENERATED_AT)
