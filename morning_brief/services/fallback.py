"""
Deterministic fallback brief.

Built purely from the supplied evidence, without any model call, so the
pipeline always has a valid brief to deliver.
"""
from collections.abc import Mapping
from typing import Any

from morning_brief.schemas.brief import (
    BRIEF_SCHEMA_VERSION,
    EVIDENCE_SOURCES,
    FALLBACK_SOURCE,
    Brief,
    Evidence,
    Mission,
    Priority,
    ReasonerInput,
)

DEFAULT_MISSION_TITLE = "Stabilize today's highest-risk thread"
FALLBACK_RATIONALE = (
    "Fallback brief generated because model output failed validation. "
    "Verify evidence before acting."
)
FALLBACK_SUMMARY = "Start with the highest-confidence signal, then request a refreshed brief."
FALLBACK_PROMPT = "Quick reaction: accept, reframe, or snooze this fallback mission."


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _freshness(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value if value >= 0 else 0


def _seed_evidence(item: Any, index: int, generated_at: str) -> Evidence:
    raw = item if isinstance(item, Mapping) else {}
    source = raw.get("source")
    observed_at = raw.get("observed_at")
    link = raw.get("link")
    return Evidence(
        id=_trimmed(raw.get("id")) or f"seed-e{index + 1}",
        source=source if source in EVIDENCE_SOURCES else FALLBACK_SOURCE,
        entity=_trimmed(raw.get("entity")) or "workspace",
        metric=_trimmed(raw.get("metric")) or "signal",
        value_text=_trimmed(raw.get("value_text")) or "No numeric value provided",
        observed_at=observed_at if isinstance(observed_at, str) and observed_at else generated_at,
        freshness_minutes=_freshness(raw.get("freshness_minutes")),
        link=link if isinstance(link, str) else None,
    )


def build_fallback_brief(input: ReasonerInput, generated_at: str) -> Brief:
    """
    Build the minimal valid brief for the given input.

    Args:
        input: Mission hint and partial evidence records
        generated_at: ISO-8601 timestamp stamped onto the brief

    Returns:
        A brief with exactly one medium-confidence priority that
        references the first evidence record
    """
    evidence = [
        _seed_evidence(item, index, generated_at)
        for index, item in enumerate(input.evidence or [])
    ]
    if not evidence:
        evidence = [
            Evidence(
                id="seed-e1",
                source=FALLBACK_SOURCE,
                entity="workspace",
                metric="signal",
                value_text="No upstream evidence was provided",
                observed_at=generated_at,
                freshness_minutes=0,
            )
        ]

    mission_title = _trimmed(input.mission_hint) or DEFAULT_MISSION_TITLE

    return Brief(
        schema_version=BRIEF_SCHEMA_VERSION,
        generated_at=generated_at,
        mission=Mission(
            title=mission_title,
            rationale=FALLBACK_RATIONALE,
            horizon="today",
        ),
        priorities=[
            Priority(
                id="fallback-p1",
                rank=1,
                headline=mission_title,
                summary=FALLBACK_SUMMARY,
                confidence="medium",
                evidence_refs=[evidence[0].id],
            )
        ],
        evidence=evidence,
        assumptions=[],
        quick_reaction_prompt=FALLBACK_PROMPT,
    )
