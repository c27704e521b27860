"""
Validation and reasoning result schemas.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from morning_brief.schemas.brief import BRIEF_SCHEMA_VERSION, Brief, ReasonerInput
from morning_brief.schemas.view import BriefView

IssueCode = Literal[
    "too_many_priorities",
    "duplicate_rank",
    "rank_out_of_bounds",
    "missing_evidence_ref",
    "unknown_evidence_ref",
    "verification_prompt_required",
]
ReasoningMode = Literal["llm", "fallback"]
FallbackReason = Literal["llm_error", "validation_failed"]


class ValidationIssue(BaseModel):
    """A single rule violation found in a brief."""
    code: IssueCode
    path: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating a brief."""
    ok: bool
    issues: list[ValidationIssue] = []


class SynthesisRequest(BaseModel):
    """Arguments passed to a synthesizer capability."""
    input: ReasonerInput
    attempt: Literal[1, 2]
    previous_candidate: Any = None
    issues: list[ValidationIssue] | None = None


class ReasonerTelemetry(BaseModel):
    """One record per pipeline run."""
    reasoning_mode: ReasoningMode
    schema_version: Literal["v0.2"] = BRIEF_SCHEMA_VERSION
    attempt: Literal[1, 2]
    validation_fail: bool
    repair_used: bool
    fallback_reason: FallbackReason | None = None
    duration_ms: int

    model_config = ConfigDict(frozen=True)


class ReasonerResult(BaseModel):
    """Settled brief with its view, issues and telemetry."""
    brief: Brief
    view: BriefView
    issues: list[ValidationIssue] = []
    telemetry: ReasonerTelemetry
