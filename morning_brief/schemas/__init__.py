"""
Pydantic schemas package.
"""
from morning_brief.schemas.brief import (
    Assumption,
    Brief,
    Evidence,
    Mission,
    Priority,
    ReasonerInput,
)
from morning_brief.schemas.view import BriefView, ViewSection
from morning_brief.schemas.reasoning import (
    ReasonerResult,
    ReasonerTelemetry,
    SynthesisRequest,
    ValidationIssue,
    ValidationResult,
)
from morning_brief.schemas.scheduling import (
    RuntimeState,
    TriggerDecision,
    TriggerRunResult,
    TriggerSignal,
    TriggerState,
    TriggerRunRequest,
    TriggerUpdate,
)
from morning_brief.schemas.override import (
    Override,
    OverrideCreate,
    PresentationRecord,
)
from morning_brief.schemas.delivery import DeliveryRequest, DeliveryResponse

__all__ = [
    "Assumption",
    "Brief",
    "Evidence",
    "Mission",
    "Priority",
    "ReasonerInput",
    "BriefView",
    "ViewSection",
    "ReasonerResult",
    "ReasonerTelemetry",
    "SynthesisRequest",
    "ValidationIssue",
    "ValidationResult",
    "RuntimeState",
    "TriggerDecision",
    "TriggerRunResult",
    "TriggerSignal",
    "TriggerState",
    "TriggerRunRequest",
    "TriggerUpdate",
    "Override",
    "OverrideCreate",
    "PresentationRecord",
    "DeliveryRequest",
    "DeliveryResponse",
]
