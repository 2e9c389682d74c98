"""Sequential provider fallback with output validation.

Idle -> TryingProvider(i) -> Validating -> Accepted | TryNext | AllExhausted

Providers are tried strictly one after another: total latency is the sum of
the attempted calls, which bounds spend per request. The best attempt seen so
far is threaded through the loop and returned for review when nothing meets
the acceptance threshold.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Sequence

from app.ai.adapter import ensure_min_length
from app.ai.errors import AllParsersFailed, InputTooShortError, ProviderError, SchemaError
from app.ai.types import EntityKind
from app.parsing.records import build_record
from app.schemas.candidate import CandidateRecord
from app.schemas.job import JobProfile
from app.schemas.parsing import ParseAttempt, ParseOutcome, ValidationResult
from app.validation.validator import (
    ValidationRules,
    ValidationThresholds,
    create_validation_summary,
    validate,
)

logger = logging.getLogger(__name__)

NEEDS_REVIEW_WARNING = "Parse quality below optimal threshold - manual review recommended"


class OrchestratorState(str, Enum):
    IDLE = "idle"
    TRYING_PROVIDER = "trying_provider"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    TRY_NEXT = "try_next"
    ALL_EXHAUSTED = "all_exhausted"


class Extractor(Protocol):
    @property
    def provider_id(self) -> str: ...

    def extract(
        self,
        source_text: str,
        kind: EntityKind,
        *,
        file_name: str | None = None,
        timeout_s: float | None = None,
    ) -> ParseAttempt: ...


@dataclass(frozen=True)
class _ScoredAttempt:
    attempt: ParseAttempt
    validation: ValidationResult
    record: CandidateRecord | JobProfile


class FallbackOrchestrator:
    def __init__(
        self,
        adapters: Sequence[Extractor],
        kind: EntityKind,
        *,
        thresholds: ValidationThresholds | None = None,
        rules: ValidationRules | None = None,
        min_source_chars: int | None = None,
        max_cost_per_parse: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._adapters = tuple(adapters)
        self._kind = kind
        self._thresholds = thresholds or ValidationThresholds()
        self._rules = rules
        self._min_source_chars = min_source_chars
        self._max_cost = max_cost_per_parse
        self._clock = clock

    @property
    def kind(self) -> EntityKind:
        return self._kind

    @property
    def provider_ids(self) -> list[str]:
        return [adapter.provider_id for adapter in self._adapters]

    @property
    def threshold(self) -> int:
        return self._thresholds.for_kind(self._kind)

    def _transition(self, state: OrchestratorState, provider_id: str | None = None) -> None:
        logger.debug("parse_state kind=%s state=%s provider=%s", self._kind, state.value, provider_id)

    def run(
        self,
        source_text: str,
        *,
        file_name: str | None = None,
        deadline_s: float | None = None,
    ) -> ParseOutcome:
        self._transition(OrchestratorState.IDLE)
        try:
            ensure_min_length(source_text, self._kind, self._min_source_chars)
        except InputTooShortError as exc:
            logger.info("parse_rejected_short_input kind=%s chars=%s", self._kind, exc.actual_chars)
            return ParseOutcome(status="failed", error=str(exc), attempts_made=0)

        deadline_at = self._clock() + deadline_s if deadline_s is not None else None
        best: _ScoredAttempt | None = None
        attempts_made = 0
        spent = 0.0

        for adapter in self._adapters:
            provider_id = adapter.provider_id
            remaining: float | None = None
            if deadline_at is not None:
                remaining = deadline_at - self._clock()
                if remaining <= 0:
                    logger.warning("parse_deadline_exhausted kind=%s skipped_from=%s", self._kind, provider_id)
                    break
            if self._max_cost is not None and spent >= self._max_cost:
                logger.warning(
                    "parse_cost_budget_exhausted kind=%s spent=%.4f budget=%.4f skipped_from=%s",
                    self._kind,
                    spent,
                    self._max_cost,
                    provider_id,
                )
                break

            self._transition(OrchestratorState.TRYING_PROVIDER, provider_id)
            attempts_made += 1
            try:
                attempt = adapter.extract(source_text, self._kind, file_name=file_name, timeout_s=remaining)
            except SchemaError as exc:
                logger.warning("parse_provider_schema_error provider=%s kind=%s: %s", provider_id, self._kind, exc)
                self._transition(OrchestratorState.TRY_NEXT, provider_id)
                continue
            except ProviderError as exc:
                logger.warning(
                    "parse_provider_failed provider=%s kind=%s error_kind=%s: %s",
                    provider_id,
                    self._kind,
                    exc.kind,
                    exc,
                )
                self._transition(OrchestratorState.TRY_NEXT, provider_id)
                continue
            except Exception:  # noqa: BLE001 - one crashing provider must not abort the chain
                logger.exception("parse_provider_crashed provider=%s kind=%s", provider_id, self._kind)
                self._transition(OrchestratorState.TRY_NEXT, provider_id)
                continue

            spent += attempt.cost_estimate
            self._transition(OrchestratorState.VALIDATING, provider_id)
            try:
                record = build_record(
                    self._kind,
                    attempt.raw_output,
                    parse_method=f"{attempt.provider_id}:{attempt.model}",
                    file_name=file_name,
                )
            except SchemaError as exc:
                logger.warning("parse_provider_schema_error provider=%s kind=%s: %s", provider_id, self._kind, exc)
                self._transition(OrchestratorState.TRY_NEXT, provider_id)
                continue

            validation = validate(
                self._kind,
                source_text,
                attempt.raw_output,
                thresholds=self._thresholds,
                rules=self._rules,
            )
            scored = _ScoredAttempt(attempt=attempt, validation=validation, record=record)
            if best is None or validation.confidence > best.validation.confidence:
                best = scored

            if validation.valid and validation.confidence >= self.threshold:
                self._transition(OrchestratorState.ACCEPTED, provider_id)
                logger.info(
                    "parse_accepted provider=%s kind=%s confidence=%s", provider_id, self._kind, validation.confidence
                )
                return self._outcome(scored, status="accepted", attempts_made=attempts_made)

            self._transition(OrchestratorState.TRY_NEXT, provider_id)

        self._transition(OrchestratorState.ALL_EXHAUSTED)
        if best is not None:
            logger.warning(
                "parse_needs_review kind=%s provider=%s confidence=%s threshold=%s",
                self._kind,
                best.attempt.provider_id,
                best.validation.confidence,
                self.threshold,
            )
            return self._outcome(best, status="needs_review", attempts_made=attempts_made, warning=NEEDS_REVIEW_WARNING)

        failure = AllParsersFailed(attempts_made=attempts_made)
        logger.error("parse_all_providers_failed kind=%s attempts=%s", self._kind, attempts_made)
        return ParseOutcome(status="failed", error=str(failure), attempts_made=attempts_made)

    def _outcome(
        self,
        scored: _ScoredAttempt,
        *,
        status: str,
        attempts_made: int,
        warning: str | None = None,
    ) -> ParseOutcome:
        record = scored.record.model_copy(
            update={
                "parse_confidence": scored.validation.confidence,
                "parse_status": "completed" if status == "accepted" else "needs_review",
            }
        )
        return ParseOutcome(
            status=status,
            record=record,
            confidence=scored.validation.confidence,
            validation_summary=create_validation_summary(scored.validation, self._kind),
            provider_id=scored.attempt.provider_id,
            attempts_made=attempts_made,
            warning=warning,
            token_usage=scored.attempt.token_usage,
            cost_estimate=scored.attempt.cost_estimate,
            latency_ms=scored.attempt.latency_ms,
        )
