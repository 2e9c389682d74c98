"""Provider adapter: one extraction call against one backend.

The adapter owns the fixed extraction prompt, the minimum-length short circuit,
the hard timeout and the transient-only retry policy. It never validates the
extracted content; that is the validator's job.
"""
from __future__ import annotations

import logging
import time

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.ai.config import CostEstimate, ProviderSpec, calculate_cost, min_source_chars
from app.ai.errors import InputTooShortError, TransientProviderError
from app.ai.output import parse_json_object
from app.ai.prompts import build_extraction_messages
from app.ai.types import AIClient, Completion, EntityKind
from app.schemas.parsing import ParseAttempt, TokenUsage

logger = logging.getLogger(__name__)

_DEFAULT_MAX_INPUT_CHARS = {"resume": 14000, "job": 8000}
_ENTITY_LABELS = {"resume": "Resume", "job": "Job description"}


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "provider_transient_error attempt=%s wait_s=%.1f: %s",
        retry_state.attempt_number,
        wait,
        exc,
    )


def ensure_min_length(source_text: str, kind: EntityKind, minimum: int | None = None) -> None:
    minimum = min_source_chars(kind) if minimum is None else minimum
    length = len((source_text or "").strip())
    if length < minimum:
        raise InputTooShortError(
            f"{_ENTITY_LABELS[kind]} text too short (minimum {minimum} characters required)",
            min_chars=minimum,
            actual_chars=length,
        )


class ExtractionAdapter:
    def __init__(
        self,
        client: AIClient,
        spec: ProviderSpec,
        *,
        max_input_chars: dict[str, int] | None = None,
        min_chars: dict[str, int] | None = None,
    ):
        self._client = client
        self._spec = spec
        self._max_input_chars = {**_DEFAULT_MAX_INPUT_CHARS, **(max_input_chars or {})}
        self._min_chars = dict(min_chars or {})

    @property
    def provider_id(self) -> str:
        return self._spec.provider_id

    @property
    def spec(self) -> ProviderSpec:
        return self._spec

    def extract(
        self,
        source_text: str,
        kind: EntityKind,
        *,
        file_name: str | None = None,
        timeout_s: float | None = None,
    ) -> ParseAttempt:
        ensure_min_length(source_text, kind, self._min_chars.get(kind))

        timeout = self._spec.timeout_s if timeout_s is None else max(0.1, min(timeout_s, self._spec.timeout_s))
        messages = build_extraction_messages(
            source_text,
            kind,
            max_input_chars=self._max_input_chars[kind],
            file_name=file_name,
        )

        started = time.perf_counter()
        retrying = Retrying(
            retry=retry_if_exception_type(TransientProviderError),
            stop=stop_after_attempt(self._spec.max_retries + 1),
            wait=wait_exponential(multiplier=self._spec.retry_backoff_s, max=8),
            before_sleep=_log_retry,
            reraise=True,
        )
        completion: Completion = retrying(
            self._client.complete,
            messages,
            temperature=self._spec.temperature,
            max_tokens=self._spec.max_tokens,
            timeout_s=timeout,
            json_mode=True,
        )
        latency_ms = int((time.perf_counter() - started) * 1000)

        raw_output = parse_json_object(completion.text, provider_id=self.provider_id)
        cost: CostEstimate = calculate_cost(self._spec, completion.usage)
        logger.info(
            "provider_extraction_completed provider=%s kind=%s tokens=%s cost=%.4f latency_ms=%s",
            self.provider_id,
            kind,
            cost.total_tokens,
            cost.estimated_cost,
            latency_ms,
        )
        return ParseAttempt(
            provider_id=self.provider_id,
            model=completion.model or self._spec.model,
            raw_output=raw_output,
            raw_text=completion.text,
            token_usage=TokenUsage(
                input_tokens=cost.input_tokens,
                output_tokens=cost.output_tokens,
                total_tokens=cost.total_tokens,
            ),
            cost_estimate=cost.estimated_cost,
            latency_ms=latency_ms,
        )
