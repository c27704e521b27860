"""
Override lifecycle for delivered briefs.
"""
import logging
import math
from datetime import datetime, timedelta

from morning_brief.errors import InvalidOverrideError, LifecycleMisuseError
from morning_brief.schemas.brief import Confidence
from morning_brief.schemas.override import (
    BriefHistoryEntry,
    DeliveredBrief,
    LifecycleState,
    Override,
    OverrideCreate,
    OverrideType,
    PresentationRecord,
)
from morning_brief.schemas.reasoning import ReasonerResult
from morning_brief.schemas.scheduling import RuntimeState
from morning_brief.utils.clock import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_SNOOZE_MINUTES = 60

OVERRIDE_TRANSITIONS: dict[OverrideType, LifecycleState] = {
    "accept": "accepted",
    "reframe": "reframed",
    "deprioritize": "deprioritized",
    "not_my_responsibility": "not_my_responsibility",
    "replace_objective": "objective_replaced",
    "snooze": "snoozed",
}


def deliver(
    record: PresentationRecord | None,
    result: ReasonerResult,
    confidence: Confidence,
) -> PresentationRecord:
    """Present a new brief, moving the previous delivery into history."""
    current = DeliveredBrief(**result.model_dump(), confidence=confidence)
    if record is None:
        return PresentationRecord(current=current)

    history = [
        *record.history,
        BriefHistoryEntry(
            generated_at=record.current.brief.generated_at,
            mission=record.current.brief.mission,
            confidence=record.current.confidence,
            state=record.state,
        ),
    ]
    return PresentationRecord(
        current=current,
        history=history,
        state="presented",
        user_overrides=record.user_overrides,
    )


def snooze_minutes(payload: dict | None) -> float:
    value = (payload or {}).get("durationMinutes")
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value <= 0
    ):
        return DEFAULT_SNOOZE_MINUTES
    return value


def apply_override(
    record: PresentationRecord,
    runtime: RuntimeState,
    request: OverrideCreate,
    now: datetime,
) -> Override:
    """
    Record a user reaction against the presented brief.

    Args:
        record: Presentation record; mutated in place
        runtime: Workspace runtime; a snooze sets `snoozed_until`
        request: The reaction to record
        now: Recording time used when the request carries none

    Returns:
        The appended override

    Raises:
        LifecycleMisuseError: The brief is no longer in the presented state
        InvalidOverrideError: A replace_objective override has no objective,
            or a snooze window ends outside the representable date range
    """
    if record.state != "presented":
        raise LifecycleMisuseError(
            f"Cannot apply '{request.type}' to a brief in state '{record.state}'",
        )

    if request.type == "replace_objective":
        objective = (request.payload or {}).get("objective")
        if not isinstance(objective, str) or not objective.strip():
            raise InvalidOverrideError("replace_objective requires payload.objective")

    override = Override(
        type=request.type,
        note=request.note.strip() if request.note and request.note.strip() else None,
        payload=request.payload,
        recorded_at=ensure_utc(request.recorded_at or now),
    )

    snoozed_until = None
    if override.type == "snooze":
        minutes = snooze_minutes(override.payload)
        try:
            snoozed_until = override.recorded_at + timedelta(minutes=minutes)
        except OverflowError as e:
            raise InvalidOverrideError(
                f"Snooze of {minutes} minutes ends outside the supported date range"
            ) from e

    record.user_overrides.append(override)
    record.state = OVERRIDE_TRANSITIONS[override.type]

    if snoozed_until is not None:
        runtime.snoozed_until = snoozed_until
        logger.info("Brief snoozed until %s", snoozed_until.isoformat())

    return override
