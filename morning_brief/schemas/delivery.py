"""
Delivery API request and response schemas.
"""
from typing import Any, Literal

from pydantic import BaseModel

from morning_brief.schemas.brief import Brief
from morning_brief.schemas.reasoning import ReasonerTelemetry, ValidationIssue
from morning_brief.schemas.view import BriefView


class ScheduleInput(BaseModel):
    """Schedule configuration as supplied by the client; clamped server-side."""
    enabled: bool | None = None
    timezone: str | None = None
    hour: float | None = None
    minute: float | None = None


class ScheduleConfig(BaseModel):
    """Resolved delivery schedule."""
    enabled: bool
    timezone: str
    hour: int
    minute: int
    time_local: str


class ReactionInput(BaseModel):
    """Quick reaction attached to a delivery request."""
    kind: str
    note: str | None = None


class Reaction(BaseModel):
    kind: Literal[
        "accept",
        "reframe",
        "deprioritize",
        "not_my_responsibility",
        "replace_objective",
        "snooze",
    ]
    note: str | None = None


class Writeback(BaseModel):
    """Record of a reaction written back against the delivered brief."""
    recorded_at: str
    reaction: Reaction
    applied_to_brief_generated_at: str
    status: Literal["recorded"] = "recorded"


class DeliveryRequest(BaseModel):
    """Request body for the delivery endpoint."""
    schedule: ScheduleInput | None = None
    mission_hint: str | None = None
    evidence: list[dict[str, Any]] | None = None
    reaction: ReactionInput | None = None
    llm_candidate: Any = None
    repair_candidate: Any = None


class Precomputed(BaseModel):
    brief: Brief
    telemetry: ReasonerTelemetry
    issues: list[ValidationIssue]


class DeliveryPayload(BaseModel):
    schedule: ScheduleConfig
    precomputed: Precomputed
    view: BriefView
    writeback: Writeback | None = None


class DeliveryResponse(BaseModel):
    """Envelope returned by the delivery endpoint."""
    data: DeliveryPayload
    ttl: int
