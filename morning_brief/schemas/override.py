"""
Override and presentation record schemas.
"""
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from morning_brief.schemas.brief import Confidence, Mission
from morning_brief.schemas.reasoning import ReasonerResult

OverrideType = Literal[
    "accept",
    "reframe",
    "deprioritize",
    "not_my_responsibility",
    "replace_objective",
    "snooze",
]
LifecycleState = Literal[
    "presented",
    "accepted",
    "reframed",
    "deprioritized",
    "not_my_responsibility",
    "objective_replaced",
    "snoozed",
]


class OverrideCreate(BaseModel):
    """Request to record a user reaction to the delivered brief."""
    type: OverrideType
    note: str | None = None
    payload: dict[str, Any] | None = None
    recorded_at: datetime | None = None


class Override(BaseModel):
    """A recorded user reaction."""
    id: str = Field(default_factory=lambda: f"mbo_{uuid.uuid4().hex[:10]}")
    type: OverrideType
    note: str | None = None
    payload: dict[str, Any] | None = None
    recorded_at: datetime


class BriefHistoryEntry(BaseModel):
    """Summary of a previously delivered brief."""
    generated_at: str
    mission: Mission
    confidence: Confidence
    state: LifecycleState


class DeliveredBrief(ReasonerResult):
    """The currently delivered brief and its overall confidence."""
    confidence: Confidence


class PresentationRecord(BaseModel):
    """Presentation state of the delivered brief for a workspace."""
    current: DeliveredBrief
    history: list[BriefHistoryEntry] = []
    state: LifecycleState = "presented"
    user_overrides: list[Override] = []
