"""
Trigger scheduler.

Decides whether a refresh may run and, when it fires, runs the pipeline
and feeds the degradation tracker. All mutation of trigger bookkeeping and
runtime state goes through one scheduler instance.
"""
import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from morning_brief.schemas.reasoning import ReasonerResult
from morning_brief.schemas.scheduling import (
    USER_REFRESH,
    DecisionReason,
    RuntimeState,
    TriggerDecision,
    TriggerRunResult,
    TriggerSignal,
    TriggerState,
)
from morning_brief.services.degradation import ConfidenceDegradationTracker
from morning_brief.services.telemetry import TelemetrySink
from morning_brief.utils.clock import Clock, ensure_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TRIGGERS: list[dict] = [
    {
        "id": "trigger_morning_schedule",
        "name": "Morning Schedule",
        "description": "Fire once per local day at the configured morning hour.",
        "type": "schedule.morning",
        "min_interval_minutes": 720,
        "cooldown_minutes": 720,
        "criteria": {"localHour": 8, "oncePerDay": True},
    },
    {
        "id": "trigger_risk_spike",
        "name": "Risk Spike",
        "description": "Fire when composite risk increases quickly.",
        "type": "event.risk_spike",
        "min_interval_minutes": 30,
        "cooldown_minutes": 60,
        "criteria": {"thresholdPoints": 20, "windowMinutes": 120},
    },
    {
        "id": "trigger_blocker",
        "name": "Blocker Threshold",
        "description": "Fire when blocker count crosses threshold.",
        "type": "event.blocker",
        "min_interval_minutes": 30,
        "cooldown_minutes": 45,
        "criteria": {"thresholdCount": 3},
    },
    {
        "id": "trigger_behavior_drop",
        "name": "Behavior Drop",
        "description": "Fire when primary metric drops day-over-day.",
        "type": "event.behavior_drop",
        "min_interval_minutes": 60,
        "cooldown_minutes": 120,
        "criteria": {"thresholdPercent": 10},
    },
    {
        "id": "trigger_staleness",
        "name": "Evidence Staleness",
        "description": "Fire when evidence age exceeds freshness threshold.",
        "type": "staleness",
        "min_interval_minutes": 60,
        "cooldown_minutes": 120,
        "criteria": {"thresholdMinutes": 180},
    },
    {
        "id": "trigger_user_refresh",
        "name": "User Refresh",
        "description": "Immediate user-requested refresh.",
        "type": "user.request_refresh",
        "min_interval_minutes": 0,
        "cooldown_minutes": 0,
        "criteria": {},
    },
]


def default_triggers() -> list[TriggerState]:
    """Fresh copies of the built-in trigger set."""
    return [TriggerState.model_validate(trigger) for trigger in DEFAULT_TRIGGERS]


def _threshold(criteria: dict, key: str, default: float) -> float:
    value = criteria.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return default
    return value


def _local(now: datetime, criteria: dict) -> datetime:
    try:
        zone = ZoneInfo(str(criteria.get("timezone") or "UTC"))
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    return now.astimezone(zone)


def matches_criteria(trigger: TriggerState, signal: TriggerSignal, now: datetime) -> bool:
    """Check a caller-observed signal against the trigger's thresholds."""
    criteria = trigger.criteria or {}

    if trigger.type == "schedule.morning":
        local_now = _local(now, criteria)
        if local_now.hour != int(_threshold(criteria, "localHour", 8)):
            return False
        once_per_day = criteria.get("oncePerDay", True)
        if once_per_day is False or trigger.last_fired_at is None:
            return True
        return _local(ensure_utc(trigger.last_fired_at), criteria).date() != local_now.date()

    if trigger.type == "event.risk_spike":
        return (
            signal.risk_delta_points is not None
            and signal.risk_delta_points >= _threshold(criteria, "thresholdPoints", 20)
        )

    if trigger.type == "event.blocker":
        return (
            signal.blocker_count is not None
            and signal.blocker_count >= _threshold(criteria, "thresholdCount", 3)
        )

    if trigger.type == "event.behavior_drop":
        return (
            signal.behavior_drop_percent is not None
            and signal.behavior_drop_percent >= _threshold(criteria, "thresholdPercent", 10)
        )

    if trigger.type == "staleness":
        return (
            signal.evidence_age_minutes is not None
            and signal.evidence_age_minutes > _threshold(criteria, "thresholdMinutes", 180)
        )

    return trigger.type == USER_REFRESH


def _elapsed_minutes(last_fired_at: datetime | None, now: datetime) -> float | None:
    if last_fired_at is None:
        return None
    return max(0.0, (now - ensure_utc(last_fired_at)).total_seconds() / 60)


class TriggerScheduler:
    """Single writer for a workspace's trigger bookkeeping and runtime state."""

    def __init__(
        self,
        runtime: RuntimeState,
        triggers: list[TriggerState],
        tracker: ConfidenceDegradationTracker | None = None,
        clock: Clock | None = None,
        telemetry: TelemetrySink | None = None,
    ):
        self.runtime = runtime
        self.triggers = {trigger.type: trigger for trigger in triggers}
        self.tracker = tracker or ConfidenceDegradationTracker()
        self.clock = clock or utc_now
        self.telemetry = telemetry or TelemetrySink()
        self._lock = asyncio.Lock()

    def is_snoozed(self, now: datetime) -> bool:
        snoozed_until = self.runtime.snoozed_until
        return snoozed_until is not None and now < ensure_utc(snoozed_until)

    def _decide(
        self,
        trigger_type: str,
        now: datetime,
        signal: TriggerSignal | None,
    ) -> DecisionReason:
        trigger = self.triggers.get(trigger_type)
        if trigger is None:
            return "missing_trigger"

        privileged = trigger_type == USER_REFRESH

        if not privileged and self.is_snoozed(now):
            return "snoozed"

        if not privileged and self.runtime.mode == "suggest_only":
            return "suggest_only"

        if not trigger.enabled:
            return "disabled"

        if signal is not None and not matches_criteria(trigger, signal, now):
            return "criteria"

        if privileged:
            return "fired"

        elapsed = _elapsed_minutes(trigger.last_fired_at, now)
        if elapsed is not None and elapsed < trigger.min_interval_minutes:
            return "min_interval"

        if elapsed is not None and elapsed < trigger.cooldown_minutes:
            return "cooldown"

        return "fired"

    def evaluate(
        self,
        trigger_type: str,
        now: datetime | None = None,
        signal: TriggerSignal | None = None,
    ) -> TriggerDecision:
        """
        Decide whether a trigger fires at `now`.

        A fired decision stamps the trigger's `last_fired_at`. A missing
        signal means the caller already detected the event, so criteria
        thresholds are not checked.
        """
        now = ensure_utc(now or self.clock())
        reason = self._decide(trigger_type, now, signal)
        fired = reason == "fired"
        if fired:
            self.triggers[trigger_type].last_fired_at = now

        self.telemetry.emit(
            "scheduler",
            "decision",
            {
                "trigger_type": trigger_type,
                "fired": fired,
                "reason": reason,
                "mode": self.runtime.mode,
                "at": now.isoformat(),
            },
        )
        return TriggerDecision(fired=fired, reason=reason)

    async def run(
        self,
        trigger_type: str,
        pipeline: Callable[[], Awaitable[ReasonerResult]],
        now: datetime | None = None,
        signal: TriggerSignal | None = None,
    ) -> TriggerRunResult:
        """Evaluate a trigger and, when it fires, run the pipeline under the scheduler lock."""
        async with self._lock:
            decision = self.evaluate(trigger_type, now=now, signal=signal)
            if not decision.fired:
                logger.info("Trigger %s suppressed: %s", trigger_type, decision.reason)
                return TriggerRunResult(fired=False, reason=decision.reason)

            result = await pipeline()
            confidence = self.tracker.observe(self.runtime, result.brief)
            return TriggerRunResult(
                fired=True,
                reason="fired",
                result=result,
                confidence=confidence,
            )
