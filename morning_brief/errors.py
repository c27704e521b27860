"""
Domain exceptions.

Synthesis and validation failures never appear here: the reasoner absorbs
them and falls back. Only caller errors are raised to the HTTP layer.
"""


class MorningBriefError(Exception):
    """Base class for errors surfaced to callers."""

    code: str = "morning_brief_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class LifecycleMisuseError(MorningBriefError):
    """An override was applied to a brief that is not in the presented state."""

    code = "override_not_presented"


class InvalidOverrideError(MorningBriefError):
    """An override payload is missing data its type requires."""

    code = "invalid_override"


class NotFoundError(MorningBriefError):
    """A workspace record required by the operation does not exist."""

    code = "not_found"


class SynthesisError(Exception):
    """Raised by synthesizer capabilities; always recovered by the reasoner."""
    pass
