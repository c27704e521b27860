"""
Repair-loop controller for morning brief synthesis.

One synthesis attempt, one repair attempt seeded with the validation
issues, then the deterministic fallback. At most two external calls are
made per run and the controller never raises to its caller.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from morning_brief.config import get_settings
from morning_brief.schemas.brief import Brief, ReasonerInput
from morning_brief.schemas.reasoning import (
    FallbackReason,
    ReasonerResult,
    ReasonerTelemetry,
    SynthesisRequest,
    ValidationIssue,
)
from morning_brief.services.fallback import build_fallback_brief
from morning_brief.services.normalizer import normalize_candidate
from morning_brief.services.projector import project_brief
from morning_brief.services.synthesizer import AnthropicSynthesizer, BaseSynthesizer
from morning_brief.services.telemetry import TelemetrySink
from morning_brief.services.validator import validate_brief
from morning_brief.utils.clock import Clock, elapsed_ms, to_iso, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    """A synthesizer call that returned a raw candidate."""
    candidate: Any


@dataclass(frozen=True)
class Err:
    """A synthesizer call that failed or timed out."""
    reason: FallbackReason
    detail: str = ""


SynthesisOutcome = Ok | Err


async def _call(
    capability: BaseSynthesizer,
    request: SynthesisRequest,
    timeout: float | None,
) -> SynthesisOutcome:
    try:
        candidate = await asyncio.wait_for(capability.invoke(request), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Synthesis attempt %s timed out after %ss", request.attempt, timeout)
        return Err("llm_error", "timeout")
    except Exception as e:
        logger.warning("Synthesis attempt %s failed: %s", request.attempt, e)
        return Err("llm_error", str(e))
    return Ok(candidate)


class RepairLoop:
    """Runs the synthesis, validation, repair and fallback sequence once."""

    def __init__(
        self,
        synthesizer: BaseSynthesizer | None = None,
        repairer: BaseSynthesizer | None = None,
        clock: Clock | None = None,
        timeout: float | None = None,
        telemetry: TelemetrySink | None = None,
    ):
        settings = get_settings()
        self.synthesizer = synthesizer or AnthropicSynthesizer()
        self.repairer = repairer or self.synthesizer
        self.clock = clock or utc_now
        self.timeout = timeout if timeout is not None else settings.synthesis_timeout_seconds
        self.telemetry = telemetry or TelemetrySink()

    async def run(self, input: ReasonerInput) -> ReasonerResult:
        started_at = self.clock()
        generated_at = to_iso(started_at)

        # Attempt1
        first = await _call(
            self.synthesizer,
            SynthesisRequest(input=input, attempt=1),
            self.timeout,
        )
        if isinstance(first, Err):
            return self._fallback(
                input, generated_at, started_at,
                issues=[], attempt=1, validation_fail=False, repair_used=False,
                reason=first.reason,
            )

        # Validate1
        first_brief = normalize_candidate(first.candidate, input, generated_at)
        first_check = validate_brief(first_brief)
        if first_check.ok:
            return self._done(
                first_brief, started_at, [],
                reasoning_mode="llm", attempt=1, validation_fail=False, repair_used=False,
            )

        # Attempt2Repair
        logger.info("Brief candidate failed validation with %d issue(s); repairing", len(first_check.issues))
        second = await _call(
            self.repairer,
            SynthesisRequest(
                input=input,
                attempt=2,
                previous_candidate=first.candidate,
                issues=first_check.issues,
            ),
            self.timeout,
        )
        if isinstance(second, Err):
            return self._fallback(
                input, generated_at, started_at,
                issues=list(first_check.issues), attempt=2, validation_fail=True, repair_used=True,
                reason=second.reason,
            )

        # Validate2
        second_brief = normalize_candidate(second.candidate, input, generated_at)
        second_check = validate_brief(second_brief)
        if second_check.ok:
            return self._done(
                second_brief, started_at, [],
                reasoning_mode="llm", attempt=2, validation_fail=True, repair_used=True,
            )

        return self._fallback(
            input, generated_at, started_at,
            issues=[*first_check.issues, *second_check.issues],
            attempt=2, validation_fail=True, repair_used=True,
            reason="validation_failed",
        )

    def _fallback(
        self,
        input: ReasonerInput,
        generated_at: str,
        started_at: datetime,
        issues: list[ValidationIssue],
        attempt: Literal[1, 2],
        validation_fail: bool,
        repair_used: bool,
        reason: FallbackReason,
    ) -> ReasonerResult:
        logger.warning("Delivering fallback brief (reason=%s, attempt=%s)", reason, attempt)
        return self._done(
            build_fallback_brief(input, generated_at), started_at, issues,
            reasoning_mode="fallback", attempt=attempt,
            validation_fail=validation_fail, repair_used=repair_used,
            fallback_reason=reason,
        )

    def _done(
        self,
        brief: Brief,
        started_at: datetime,
        issues: list[ValidationIssue],
        **telemetry: Any,
    ) -> ReasonerResult:
        result = ReasonerResult(
            brief=brief,
            view=project_brief(brief),
            issues=issues,
            telemetry=ReasonerTelemetry(
                duration_ms=elapsed_ms(started_at, self.clock()),
                **telemetry,
            ),
        )
        self.telemetry.emit(
            "reasoner",
            "run",
            result.telemetry.model_dump(exclude_none=True) | {"issue_count": len(issues)},
        )
        return result


async def reason_morning_brief(
    input: ReasonerInput,
    synthesizer: BaseSynthesizer | None = None,
    repairer: BaseSynthesizer | None = None,
    clock: Clock | None = None,
    timeout: float | None = None,
    telemetry: TelemetrySink | None = None,
) -> ReasonerResult:
    """Produce a brief for the input, repairing once and falling back if needed."""
    loop = RepairLoop(
        synthesizer=synthesizer,
        repairer=repairer,
        clock=clock,
        timeout=timeout,
        telemetry=telemetry,
    )
    return await loop.run(input)
