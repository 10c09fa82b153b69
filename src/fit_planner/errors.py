"""Exceptions for unexpected and transient failures.

Validation findings are values (see ``domain.validation``); exceptions are kept
for conditions the pipeline cannot turn into a plan decision, such as an
unreachable or slow provider. They are surfaced to the caller and never retried
here.
"""


class GenerationError(Exception):
    """Base class for provider failures."""

    code = "AI_GENERATION_FAILED"
    retryable = True

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class GenerationTimeoutError(GenerationError):
    """The provider did not answer within the configured deadline."""

    code = "AI_TIMEOUT"


class GenerationFailedError(GenerationError):
    """The provider call raised or returned an unusable response."""
