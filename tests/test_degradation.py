"""
Tests for confidence degradation tracking.
"""
from conftest import build_candidate

from morning_brief.schemas.brief import Brief, Mission, ReasonerInput
from morning_brief.schemas.scheduling import RuntimeState
from morning_brief.services.degradation import ConfidenceDegradationTracker, brief_confidence
from morning_brief.services.normalizer import normalize_candidate

GENERATED_AT = "2026-02-11T09:00:00.000Z"


def _brief(confidence: str) -> Brief:
    return normalize_candidate(
        build_candidate(confidence=confidence, verification_prompt="Check"),
        ReasonerInput(),
        GENERATED_AT,
    )


def test_brief_confidence_uses_top_ranked_priority():
    candidate = build_candidate()
    candidate["priorities"] = [
        {"rank": 2, "confidence": "high", "evidence_refs": ["e1"]},
        {"rank": 1, "confidence": "low", "evidence_refs": ["e1"], "verification_prompt": "Check"},
    ]
    brief = normalize_candidate(candidate, ReasonerInput(), GENERATED_AT)

    assert brief_confidence(brief) == "low"


def test_brief_without_priorities_is_low():
    brief = Brief(generated_at=GENERATED_AT, mission=Mission(title="t", rationale="r"), quick_reaction_prompt="q")

    assert brief_confidence(brief) == "low"


def test_two_low_briefs_switch_to_suggest_only():
    """Test the runtime degrades after the threshold is reached."""
    tracker = ConfidenceDegradationTracker(threshold=2, reset_on_success=False)
    runtime = RuntimeState()

    assert tracker.observe(runtime, _brief("low")) == "low"
    assert runtime.mode == "normal"
    assert runtime.low_confidence_streak == 1

    tracker.observe(runtime, _brief("low"))
    assert runtime.mode == "suggest_only"
    assert runtime.low_confidence_streak == 2

    tracker.observe(runtime, _brief("low"))
    assert runtime.mode == "suggest_only"
    assert runtime.low_confidence_streak == 3


def test_non_low_brief_keeps_streak_by_default():
    tracker = ConfidenceDegradationTracker(threshold=2, reset_on_success=False)
    runtime = RuntimeState()

    tracker.observe(runtime, _brief("low"))
    assert tracker.observe(runtime, _brief("high")) == "high"
    tracker.observe(runtime, _brief("low"))

    assert runtime.low_confidence_streak == 2
    assert runtime.mode == "suggest_only"


def test_reset_on_success_clears_streak():
    tracker = ConfidenceDegradationTracker(threshold=2, reset_on_success=True)
    runtime = RuntimeState()

    tracker.observe(runtime, _brief("low"))
    tracker.observe(runtime, _brief("medium"))
    tracker.observe(runtime, _brief("low"))

    assert runtime.low_confidence_streak == 1
    assert runtime.mode == "normal"


def test_suggest_only_persists_until_reset():
    """Test that a good brief does not leave suggest-only mode."""
    tracker = ConfidenceDegradationTracker(threshold=2, reset_on_success=True)
    runtime = RuntimeState(mode="suggest_only", low_confidence_streak=2)

    tracker.observe(runtime, _brief("high"))
    assert runtime.mode == "suggest_only"

    tracker.reset(runtime)
    assert runtime.mode == "normal"
    assert runtime.low_confidence_streak == 0


def test_threshold_defaults_from_settings():
    tracker = ConfidenceDegradationTracker()

    assert tracker.threshold == 2
    assert tracker.reset_on_success is False
