"""
Confidence degradation tracking.
"""
import logging

from morning_brief.config import get_settings
from morning_brief.schemas.brief import Brief, Confidence
from morning_brief.schemas.scheduling import RuntimeState

logger = logging.getLogger(__name__)


def brief_confidence(brief: Brief) -> Confidence:
    """Overall confidence of a brief: that of its top-ranked priority."""
    if not brief.priorities:
        return "low"
    top = min(brief.priorities, key=lambda priority: priority.rank)
    return top.confidence


class ConfidenceDegradationTracker:
    """Switches a runtime to suggest-only after a streak of low-confidence briefs.

    Suggest-only persists until `reset` is called. By default a non-low
    brief leaves the streak untouched.
    """

    def __init__(self, threshold: int | None = None, reset_on_success: bool | None = None):
        settings = get_settings()
        self.threshold = threshold if threshold is not None else settings.low_confidence_threshold
        self.reset_on_success = (
            reset_on_success if reset_on_success is not None else settings.reset_streak_on_success
        )

    def observe(self, runtime: RuntimeState, brief: Brief) -> Confidence:
        """Record the outcome of a fired refresh and update the runtime."""
        confidence = brief_confidence(brief)

        if confidence == "low":
            runtime.low_confidence_streak += 1
            if runtime.low_confidence_streak >= self.threshold and runtime.mode != "suggest_only":
                runtime.mode = "suggest_only"
                logger.warning(
                    "Switching to suggest-only after %d low-confidence briefs",
                    runtime.low_confidence_streak,
                )
        elif self.reset_on_success:
            runtime.low_confidence_streak = 0

        return confidence

    def reset(self, runtime: RuntimeState) -> None:
        """Administrative reset back to normal delivery."""
        runtime.mode = "normal"
        runtime.low_confidence_streak = 0
