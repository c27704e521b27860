"""
Brief-related Pydantic schemas.
"""
from typing import Any, Literal, get_args

from pydantic import BaseModel, Field

BRIEF_SCHEMA_VERSION = "v0.2"

EvidenceSource = Literal["github", "slack", "vercel", "posthog", "custom"]
Confidence = Literal["low", "medium", "high"]
AssumptionReason = Literal["missing_data", "stale_data", "conflict", "insufficient_sample"]
Horizon = Literal["today", "this_week"]

EVIDENCE_SOURCES: tuple[str, ...] = get_args(EvidenceSource)
CONFIDENCE_LEVELS: tuple[str, ...] = get_args(Confidence)
ASSUMPTION_REASONS: tuple[str, ...] = get_args(AssumptionReason)
HORIZONS: tuple[str, ...] = get_args(Horizon)

FALLBACK_SOURCE = "custom"


class Mission(BaseModel):
    """What the day should be organized around."""
    title: str
    rationale: str
    horizon: Horizon = "today"


class Priority(BaseModel):
    """A ranked priority backed by evidence."""
    id: str
    rank: int | float
    headline: str
    summary: str = ""
    confidence: Confidence = "medium"
    evidence_refs: list[str] = []
    verification_prompt: str | None = None


class Evidence(BaseModel):
    """A single observed signal from an upstream source."""
    id: str
    source: EvidenceSource = FALLBACK_SOURCE
    entity: str
    metric: str
    value_text: str
    observed_at: str
    freshness_minutes: int | float = Field(default=0, ge=0)
    link: str | None = None


class Assumption(BaseModel):
    """An assumption made in place of missing or unreliable data."""
    id: str
    text: str
    reason: AssumptionReason = "missing_data"
    source_scope: list[EvidenceSource] = []


class Brief(BaseModel):
    """Structured morning brief."""
    schema_version: Literal["v0.2"] = BRIEF_SCHEMA_VERSION
    generated_at: str
    mission: Mission
    priorities: list[Priority] = []
    evidence: list[Evidence] = []
    assumptions: list[Assumption] = []
    quick_reaction_prompt: str


class ReasonerInput(BaseModel):
    """Input to the brief pipeline: a mission hint and partial evidence records."""
    mission_hint: str | None = None
    evidence: list[dict[str, Any]] = []
