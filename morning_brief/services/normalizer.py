"""
Candidate normalization.

Model output is untrusted: any field may be missing, mistyped or hostile.
Every field is coerced independently, with defaults drawn from a single
fallback brief computed once per call.
"""
from collections.abc import Mapping
from typing import Any

from morning_brief.schemas.brief import (
    ASSUMPTION_REASONS,
    BRIEF_SCHEMA_VERSION,
    CONFIDENCE_LEVELS,
    EVIDENCE_SOURCES,
    FALLBACK_SOURCE,
    HORIZONS,
    Assumption,
    Brief,
    Evidence,
    Mission,
    Priority,
    ReasonerInput,
)
from morning_brief.services.fallback import build_fallback_brief


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _as_mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _string(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _optional_string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _normalize_mission(raw: Any, fallback: Mission) -> Mission:
    mission = raw if isinstance(raw, Mapping) else fallback.model_dump()
    horizon = mission.get("horizon")
    return Mission(
        title=_string(mission.get("title"), fallback.title),
        rationale=_string(mission.get("rationale"), fallback.rationale),
        horizon=horizon if horizon in HORIZONS else fallback.horizon,
    )


def _normalize_priority(item: Any, index: int) -> Priority:
    raw = _as_mapping(item)
    rank = raw.get("rank")
    confidence = raw.get("confidence")
    return Priority(
        id=f"priority-{index + 1}" if _is_blank(raw.get("id")) else raw["id"],
        rank=rank if _is_number(rank) else index + 1,
        headline=_string(raw.get("headline"), "Untitled priority"),
        summary=_string(raw.get("summary"), ""),
        confidence=confidence if confidence in CONFIDENCE_LEVELS else "medium",
        evidence_refs=[ref for ref in _as_list(raw.get("evidence_refs")) if isinstance(ref, str)],
        verification_prompt=_optional_string(raw.get("verification_prompt")),
    )


def _normalize_evidence(item: Any, index: int, generated_at: str) -> Evidence:
    raw = _as_mapping(item)
    source = raw.get("source")
    freshness = raw.get("freshness_minutes")
    return Evidence(
        id=f"e{index + 1}" if _is_blank(raw.get("id")) else raw["id"],
        source=source if source in EVIDENCE_SOURCES else FALLBACK_SOURCE,
        entity=_string(raw.get("entity"), "workspace"),
        metric=_string(raw.get("metric"), "signal"),
        value_text=_string(raw.get("value_text"), "No value provided"),
        observed_at=_string(raw.get("observed_at"), generated_at),
        freshness_minutes=freshness if _is_number(freshness) and freshness >= 0 else 0,
        link=_optional_string(raw.get("link")),
    )


def _normalize_assumption(item: Any, index: int) -> Assumption:
    raw = _as_mapping(item)
    reason = raw.get("reason")
    scope = raw.get("source_scope")
    return Assumption(
        id=f"assumption-{index + 1}" if _is_blank(raw.get("id")) else raw["id"],
        text=_string(raw.get("text"), "No assumption text"),
        reason=reason if reason in ASSUMPTION_REASONS else "missing_data",
        source_scope=(
            [value for value in scope if value in EVIDENCE_SOURCES]
            if isinstance(scope, list)
            else [FALLBACK_SOURCE]
        ),
    )


def normalize_candidate(candidate: Any, input: ReasonerInput, generated_at: str) -> Brief:
    """
    Coerce an arbitrary JSON-like value into a well-typed brief.

    Never raises. Non-object candidates yield the fallback brief outright.
    The schema tag is always forced to the current version.
    """
    fallback = build_fallback_brief(input, generated_at)
    if not isinstance(candidate, Mapping):
        return fallback

    raw_generated_at = candidate.get("generated_at")

    return Brief(
        schema_version=BRIEF_SCHEMA_VERSION,
        generated_at=generated_at if _is_blank(raw_generated_at) else raw_generated_at,
        mission=_normalize_mission(candidate.get("mission"), fallback.mission),
        priorities=[
            _normalize_priority(item, index)
            for index, item in enumerate(_as_list(candidate.get("priorities")))
        ],
        evidence=[
            _normalize_evidence(item, index, generated_at)
            for index, item in enumerate(_as_list(candidate.get("evidence")))
        ],
        assumptions=[
            _normalize_assumption(item, index)
            for index, item in enumerate(_as_list(candidate.get("assumptions")))
        ],
        quick_reaction_prompt=_string(
            candidate.get("quick_reaction_prompt"),
            fallback.quick_reaction_prompt,
        ),
    )
