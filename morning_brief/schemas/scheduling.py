"""
Trigger and runtime schemas.
"""
from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

from morning_brief.schemas.brief import Confidence
from morning_brief.schemas.reasoning import ReasonerResult

TriggerType = Literal[
    "schedule.morning",
    "event.risk_spike",
    "event.blocker",
    "event.behavior_drop",
    "staleness",
    "user.request_refresh",
]
TRIGGER_TYPES: tuple[str, ...] = get_args(TriggerType)
USER_REFRESH: TriggerType = "user.request_refresh"

RuntimeMode = Literal["normal", "suggest_only"]
DecisionReason = Literal[
    "fired",
    "disabled",
    "criteria",
    "min_interval",
    "cooldown",
    "snoozed",
    "suggest_only",
    "missing_trigger",
]


class TriggerState(BaseModel):
    """Bookkeeping for a named trigger."""
    id: str
    type: TriggerType
    name: str = ""
    description: str = ""
    enabled: bool = True
    min_interval_minutes: float = Field(default=0, ge=0)
    cooldown_minutes: float = Field(default=0, ge=0)
    last_fired_at: datetime | None = None
    criteria: dict[str, Any] = {}

    model_config = ConfigDict(from_attributes=True)


class TriggerUpdate(BaseModel):
    """Schema for updating a trigger's configuration."""
    enabled: bool | None = None
    min_interval_minutes: float | None = Field(default=None, ge=0)
    cooldown_minutes: float | None = Field(default=None, ge=0)
    criteria: dict[str, Any] | None = None


class RuntimeState(BaseModel):
    """Workspace-scoped delivery mode and degradation bookkeeping."""
    mode: RuntimeMode = "normal"
    low_confidence_streak: int = Field(default=0, ge=0)
    snoozed_until: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TriggerSignal(BaseModel):
    """Measurements the caller observed when raising a trigger."""
    risk_delta_points: float | None = None
    blocker_count: int | None = None
    behavior_drop_percent: float | None = None
    evidence_age_minutes: float | None = None


class TriggerDecision(BaseModel):
    """Whether a trigger evaluation fired, and why."""
    fired: bool
    reason: DecisionReason


class TriggerRunResult(TriggerDecision):
    """Decision plus the pipeline outcome when the trigger fired."""
    result: ReasonerResult | None = None
    confidence: Confidence | None = None


class TriggerRunRequest(BaseModel):
    """Request to evaluate a trigger and refresh the brief if it fires."""
    now: datetime | None = None
    signal: TriggerSignal | None = None
    mission_hint: str | None = None
    evidence: list[dict[str, Any]] = []
    llm_candidate: Any = None
    repair_candidate: Any = None
