"""Exception taxonomy for the extraction pipeline."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for failures that abort extraction of a transcript."""


class ExternalServiceError(ExtractionError):
    """The completion service was unreachable, errored, or returned no text."""


class MalformedResponseError(ExtractionError):
    """The completion service answered but no JSON could be recovered."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ValidationError(ExtractionError):
    """Reserved for strict callers; the normalizer coerces instead of raising."""
