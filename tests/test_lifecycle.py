"""
Tests for the override lifecycle.
"""
from datetime import datetime, timedelta, timezone

import pytest
from conftest import T0

from morning_brief.errors import InvalidOverrideError, LifecycleMisuseError
from morning_brief.schemas.brief import ReasonerInput
from morning_brief.schemas.override import OverrideCreate
from morning_brief.schemas.reasoning import ReasonerResult, ReasonerTelemetry
from morning_brief.schemas.scheduling import RuntimeState
from morning_brief.services.fallback import build_fallback_brief
from morning_brief.services.lifecycle import (
    DEFAULT_SNOOZE_MINUTES,
    apply_override,
    deliver,
    snooze_minutes,
)
from morning_brief.services.projector import project_brief


def _result(mission_hint: str = "Ship", generated_at: str = "2026-02-11T09:00:00.000Z") -> ReasonerResult:
    brief = build_fallback_brief(ReasonerInput(mission_hint=mission_hint), generated_at)
    return ReasonerResult(
        brief=brief,
        view=project_brief(brief),
        telemetry=ReasonerTelemetry(
            reasoning_mode="fallback",
            attempt=1,
            validation_fail=False,
            repair_used=False,
            fallback_reason="llm_error",
            duration_ms=0,
        ),
    )


def test_first_delivery_is_presented():
    record = deliver(None, _result(), "medium")

    assert record.state == "presented"
    assert record.history == []
    assert record.user_overrides == []
    assert record.current.confidence == "medium"
    assert record.current.brief.mission.title == "Ship"


def test_redelivery_moves_current_into_history():
    """Test a new brief resets the state and keeps the override log."""
    record = deliver(None, _result("First"), "low")
    apply_override(record, RuntimeState(), OverrideCreate(type="accept"), now=T0)

    record = deliver(record, _result("Second", "2026-02-11T10:00:00.000Z"), "high")

    assert record.state == "presented"
    assert record.current.brief.mission.title == "Second"
    (entry,) = record.history
    assert entry.generated_at == "2026-02-11T09:00:00.000Z"
    assert entry.mission.title == "First"
    assert entry.confidence == "low"
    assert entry.state == "accepted"
    assert [override.type for override in record.user_overrides] == ["accept"]


@pytest.mark.parametrize(
    "override_type, state",
    [
        ("accept", "accepted"),
        ("reframe", "reframed"),
        ("deprioritize", "deprioritized"),
        ("not_my_responsibility", "not_my_responsibility"),
        ("snooze", "snoozed"),
    ],
)
def test_override_transitions(override_type, state):
    record = deliver(None, _result(), "medium")

    override = apply_override(record, RuntimeState(), OverrideCreate(type=override_type), now=T0)

    assert record.state == state
    assert record.user_overrides == [override]
    assert override.id.startswith("mbo_")
    assert override.recorded_at == T0


def test_replace_objective():
    record = deliver(None, _result(), "medium")

    apply_override(
        record,
        RuntimeState(),
        OverrideCreate(type="replace_objective", payload={"objective": "Cut cloud spend"}),
        now=T0,
    )

    assert record.state == "objective_replaced"
    assert record.user_overrides[0].payload == {"objective": "Cut cloud spend"}


@pytest.mark.parametrize("payload", [None, {}, {"objective": "  "}, {"objective": 3}])
def test_replace_objective_requires_objective(payload):
    record = deliver(None, _result(), "medium")

    with pytest.raises(InvalidOverrideError):
        apply_override(record, RuntimeState(), OverrideCreate(type="replace_objective", payload=payload), now=T0)

    assert record.state == "presented"
    assert record.user_overrides == []


def test_override_on_settled_brief_is_misuse():
    """Test only a presented brief accepts overrides."""
    record = deliver(None, _result(), "medium")
    apply_override(record, RuntimeState(), OverrideCreate(type="reframe"), now=T0)

    with pytest.raises(LifecycleMisuseError) as exc_info:
        apply_override(record, RuntimeState(), OverrideCreate(type="accept"), now=T0)

    assert exc_info.value.code == "override_not_presented"
    assert record.state == "reframed"
    assert len(record.user_overrides) == 1


def test_snooze_sets_runtime_window():
    record = deliver(None, _result(), "medium")
    runtime = RuntimeState()

    apply_override(record, runtime, OverrideCreate(type="snooze"), now=T0)

    assert runtime.snoozed_until == T0 + timedelta(minutes=DEFAULT_SNOOZE_MINUTES)


def test_snooze_duration_from_payload_and_recorded_at():
    record = deliver(None, _result(), "medium")
    runtime = RuntimeState()
    recorded_at = datetime(2026, 2, 11, 7, 30)

    apply_override(
        record,
        runtime,
        OverrideCreate(type="snooze", payload={"durationMinutes": 15}, recorded_at=recorded_at),
        now=T0,
    )

    assert record.user_overrides[0].recorded_at == recorded_at.replace(tzinfo=timezone.utc)
    assert runtime.snoozed_until == datetime(2026, 2, 11, 7, 45, tzinfo=timezone.utc)


@pytest.mark.parametrize("payload", [None, {}, {"durationMinutes": 0}, {"durationMinutes": -5}, {"durationMinutes": True}, {"durationMinutes": "15"}])
def test_snooze_minutes_default(payload):
    assert snooze_minutes(payload) == DEFAULT_SNOOZE_MINUTES


def test_note_is_trimmed():
    record = deliver(None, _result(), "medium")

    apply_override(record, RuntimeState(), OverrideCreate(type="accept", note="  on it  "), now=T0)
    assert record.user_overrides[0].note == "on it"

    record = deliver(record, _result(), "medium")
    apply_override(record, RuntimeState(), OverrideCreate(type="accept", note="   "), now=T0)
    assert record.user_overrides[1].note is None


@pytest.mark.parametrize("duration", [float("inf"), float("nan")])
def test_snooze_non_finite_duration_uses_default(duration):
    assert snooze_minutes({"durationMinutes": duration}) == DEFAULT_SNOOZE_MINUTES


def test_snooze_beyond_date_range_is_rejected():
    """Test an unrepresentable snooze window leaves the record untouched."""
    record = deliver(None, _result(), "medium")
    runtime = RuntimeState()

    with pytest.raises(InvalidOverrideError):
        apply_override(
            record,
            runtime,
            OverrideCreate(type="snooze", payload={"durationMinutes": 1e13}),
            now=T0,
        )

    assert record.state == "presented"
    assert record.user_overrides == []
    assert runtime.snoozed_until is None
