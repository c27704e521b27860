"""
Synthesizer capabilities.

The reasoner only depends on `BaseSynthesizer.invoke`; production wiring
binds it to the Anthropic Messages API, tests and request-supplied
candidates bind it to a static value.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import anthropic

from morning_brief.config import get_settings
from morning_brief.errors import SynthesisError
from morning_brief.schemas.brief import EVIDENCE_SOURCES
from morning_brief.schemas.reasoning import SynthesisRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You generate morning brief JSON for a busy product team. Return a JSON object with keys:
- schema_version: "v0.2"
- generated_at: ISO-8601 string
- mission: {{ title, rationale, horizon }} where horizon is "today" or "this_week"
- priorities: up to 3 entries {{ id, rank, headline, summary, confidence, evidence_refs, verification_prompt }} (rank 1..3 and unique, evidence_refs required, confidence is "low", "medium" or "high", verification_prompt required when confidence is "low")
- evidence: entries {{ id, source, entity, metric, value_text, observed_at, freshness_minutes, link }} where source is one of {sources}
- assumptions: entries {{ id, text, reason, source_scope }}
- quick_reaction_prompt: string

Every evidence_refs entry must match an evidence id. Output raw JSON only."""

BRIEF_PROMPT = """Build today's brief from this input.

Input:
{input}"""

REPAIR_PROMPT = """Repair the previous candidate so it passes validation.

Issues:
{issues}

Candidate:
{candidate}"""


class BaseSynthesizer(ABC):
    """Abstract capability producing a raw brief candidate."""

    name: str = ""

    @abstractmethod
    async def invoke(self, request: SynthesisRequest) -> Any:
        """
        Produce a raw, unvalidated brief candidate.

        Args:
            request: Pipeline input, attempt number and, for a repair
                attempt, the previous candidate and its issues

        Returns:
            Any JSON-like value; the caller normalizes it
        """
        pass


class StaticSynthesizer(BaseSynthesizer):
    """Returns a fixed candidate regardless of the request."""

    name = "static"

    def __init__(self, candidate: Any):
        self.candidate = candidate

    async def invoke(self, request: SynthesisRequest) -> Any:
        return self.candidate


def parse_json_candidate(text: str) -> Any:
    """Extract a JSON value from model output text."""
    trimmed = text.strip()
    if not trimmed:
        raise SynthesisError("Model returned empty text")

    try:
        return json.loads(trimmed)
    except json.JSONDecodeError:
        start = trimmed.find("{")
        end = trimmed.rfind("}")
        if start >= 0 and end > start:
            try:
                return json.loads(trimmed[start:end + 1])
            except json.JSONDecodeError as exc:
                raise SynthesisError(f"Model did not return valid JSON: {exc}") from exc
        raise SynthesisError("Model did not return valid JSON")


class AnthropicSynthesizer(BaseSynthesizer):
    """Synthesizer backed by the Anthropic Messages API."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.claude_model
        self.max_tokens = max_tokens or settings.synthesis_max_tokens
        self.client = client
        if self.client is None and self.api_key:
            self.client = anthropic.AsyncAnthropic(api_key=self.api_key)

    def build_prompt(self, request: SynthesisRequest) -> str:
        """Format the user prompt for an attempt."""
        if request.attempt == 1:
            return BRIEF_PROMPT.format(
                input=json.dumps(request.input.model_dump(), indent=2, default=str),
            )
        return REPAIR_PROMPT.format(
            issues=json.dumps(
                [issue.model_dump() for issue in request.issues or []],
                indent=2,
            ),
            candidate=json.dumps(request.previous_candidate, indent=2, default=str),
        )

    async def invoke(self, request: SynthesisRequest) -> Any:
        if self.client is None:
            raise SynthesisError("ANTHROPIC_API_KEY is required for brief synthesis")

        message = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=SYSTEM_PROMPT.format(sources=", ".join(EVIDENCE_SOURCES)),
            messages=[
                {"role": "user", "content": self.build_prompt(request)}
            ],
        )

        if not message.content:
            raise SynthesisError("Model returned no content")

        logger.debug("Synthesis attempt %s used model %s", request.attempt, self.model)
        return parse_json_candidate(message.content[0].text)
