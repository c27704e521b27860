"""
Briefing delivery service.
"""
import logging
import math

from morning_brief.config import get_settings
from morning_brief.schemas.brief import ReasonerInput
from morning_brief.schemas.delivery import (
    DeliveryPayload,
    DeliveryRequest,
    DeliveryResponse,
    Precomputed,
    Reaction,
    ReactionInput,
    ScheduleConfig,
    ScheduleInput,
    Writeback,
)
from morning_brief.services.lifecycle import OVERRIDE_TRANSITIONS
from morning_brief.services.reasoner import reason_morning_brief
from morning_brief.services.synthesizer import BaseSynthesizer, StaticSynthesizer
from morning_brief.services.telemetry import TelemetrySink
from morning_brief.utils.clock import Clock, to_iso, utc_now

logger = logging.getLogger(__name__)

settings = get_settings()

DEFAULT_HOUR = 8
DEFAULT_MINUTE = 0


def _clamp(value: float | None, low: int, high: int, default: int) -> int:
    if value is None or not math.isfinite(value):
        return default
    return max(low, min(high, math.trunc(value)))


class BriefingService:
    """Service for producing a precomputed brief on request."""

    def __init__(
        self,
        synthesizer: BaseSynthesizer | None = None,
        clock: Clock | None = None,
        telemetry: TelemetrySink | None = None,
    ):
        self.synthesizer = synthesizer
        self.clock = clock or utc_now
        self.telemetry = telemetry or TelemetrySink()

    def resolve_schedule(self, schedule: ScheduleInput | None) -> ScheduleConfig:
        """Clamp the requested delivery schedule to valid ranges."""
        schedule = schedule or ScheduleInput()
        timezone = (schedule.timezone or "").strip() or settings.default_timezone
        hour = _clamp(schedule.hour, 0, 23, DEFAULT_HOUR)
        minute = _clamp(schedule.minute, 0, 59, DEFAULT_MINUTE)
        return ScheduleConfig(
            enabled=schedule.enabled is not False,
            timezone=timezone,
            hour=hour,
            minute=minute,
            time_local=f"{hour:02d}:{minute:02d}",
        )

    def normalize_reaction(self, reaction: ReactionInput | None) -> Reaction | None:
        """Drop reactions of unknown kinds."""
        if reaction is None or reaction.kind not in OVERRIDE_TRANSITIONS:
            return None
        note = reaction.note.strip() if reaction.note else ""
        return Reaction(kind=reaction.kind, note=note or None)

    async def deliver(self, request: DeliveryRequest) -> DeliveryResponse:
        """Run the brief pipeline for a delivery request."""
        schedule = self.resolve_schedule(request.schedule)
        recorded_at = to_iso(self.clock())
        provided = request.model_fields_set

        self.telemetry.emit(
            "api.briefing.v2",
            "request",
            {
                "schedule": schedule.model_dump(),
                "has_reaction": request.reaction is not None,
                "has_mock_candidate": "llm_candidate" in provided,
                "has_mock_repair_candidate": "repair_candidate" in provided,
            },
        )

        synthesizer = (
            StaticSynthesizer(request.llm_candidate)
            if "llm_candidate" in provided
            else self.synthesizer
        )
        repairer = (
            StaticSynthesizer(request.repair_candidate)
            if "repair_candidate" in provided
            else None
        )

        result = await reason_morning_brief(
            ReasonerInput(
                mission_hint=request.mission_hint,
                evidence=request.evidence or [],
            ),
            synthesizer=synthesizer,
            repairer=repairer,
            clock=self.clock,
            telemetry=self.telemetry,
        )

        reaction = self.normalize_reaction(request.reaction)
        writeback = (
            Writeback(
                recorded_at=recorded_at,
                reaction=reaction,
                applied_to_brief_generated_at=result.brief.generated_at,
            )
            if reaction is not None
            else None
        )

        self.telemetry.emit(
            "api.briefing.v2",
            "response",
            {
                "reasoning_mode": result.telemetry.reasoning_mode,
                "repair_used": result.telemetry.repair_used,
                "fallback_reason": result.telemetry.fallback_reason,
                "duration_ms": result.telemetry.duration_ms,
            },
        )

        return DeliveryResponse(
            data=DeliveryPayload(
                schedule=schedule,
                precomputed=Precomputed(
                    brief=result.brief,
                    telemetry=result.telemetry,
                    issues=result.issues,
                ),
                view=result.view,
                writeback=writeback,
            ),
            ttl=settings.view_ttl_ms,
        )
