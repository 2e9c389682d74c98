from __future__ import annotations

from typing import Literal

ProviderErrorKind = Literal["transient", "schema", "quota"]


class ProviderError(RuntimeError):
    """A single provider call failed. Never fatal for the pipeline as a whole."""

    kind: ProviderErrorKind = "schema"

    def __init__(self, message: str, *, provider_id: str | None = None):
        super().__init__(message)
        self.provider_id = provider_id


class TransientProviderError(ProviderError):
    """Timeout, connection failure, rate limit or 5xx. Retried, then the next provider."""

    kind: ProviderErrorKind = "transient"


class SchemaError(ProviderError):
    """Malformed or rejected response. Skips straight to the next provider."""

    kind: ProviderErrorKind = "schema"


class QuotaExceededError(ProviderError):
    kind: ProviderErrorKind = "quota"


class InputTooShortError(ValueError):
    def __init__(self, message: str, *, min_chars: int, actual_chars: int):
        super().__init__(message)
        self.min_chars = min_chars
        self.actual_chars = actual_chars


class AllParsersFailed(RuntimeError):
    def __init__(
        self,
        message: str = (
            "All parsing methods failed. Please ensure the text is text-based "
            "(not scanned or image-based) and try again."
        ),
        *,
        attempts_made: int = 0,
    ):
        super().__init__(message)
        self.attempts_made = attempts_made


class AuxiliaryAnalysisUnavailable(RuntimeError):
    pass
