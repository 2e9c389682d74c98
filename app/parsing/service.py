from __future__ import annotations

import logging
from functools import lru_cache
from typing import Sequence

from app.ai.adapter import ExtractionAdapter
from app.ai.config import load_parsing_strategy, load_provider_spec
from app.ai.factory import try_get_ai_client
from app.ai.types import EntityKind
from app.core.config import settings
from app.parsing.batch import parse_batch
from app.parsing.orchestrator import FallbackOrchestrator
from app.schemas.parsing import BatchItem, BatchReport, ParseOutcome
from app.validation.validator import ValidationThresholds, load_validation_rules, load_validation_thresholds

logger = logging.getLogger(__name__)


def build_adapters(kind: EntityKind) -> list[ExtractionAdapter]:
    strategy = load_parsing_strategy(kind)
    adapters: list[ExtractionAdapter] = []
    for provider_id in strategy.provider_ids:
        spec = load_provider_spec(provider_id)
        client = try_get_ai_client(spec)
        if client is None:
            continue
        adapters.append(
            ExtractionAdapter(
                client,
                spec,
                max_input_chars={kind: strategy.max_input_chars},
                min_chars={kind: strategy.min_source_chars},
            )
        )
    if not adapters:
        logger.warning("parse_chain_empty kind=%s configured=%s", kind, ",".join(strategy.provider_ids))
    return adapters


def build_orchestrator(kind: EntityKind) -> FallbackOrchestrator:
    strategy = load_parsing_strategy(kind)
    base = load_validation_thresholds()
    if kind == "resume":
        thresholds = ValidationThresholds(resume=strategy.min_confidence, job=base.job)
    else:
        thresholds = ValidationThresholds(resume=base.resume, job=strategy.min_confidence)
    return FallbackOrchestrator(
        build_adapters(kind),
        kind,
        thresholds=thresholds,
        rules=load_validation_rules(),
        min_source_chars=strategy.min_source_chars,
        max_cost_per_parse=strategy.max_cost_per_parse,
    )


@lru_cache(maxsize=2)
def get_orchestrator(kind: EntityKind) -> FallbackOrchestrator:
    return build_orchestrator(kind)


def parse_resume(
    text: str,
    file_name: str | None = None,
    *,
    orchestrator: FallbackOrchestrator | None = None,
) -> ParseOutcome:
    orchestrator = orchestrator or get_orchestrator("resume")
    return orchestrator.run(text, file_name=file_name)


def analyze_job(text: str, *, orchestrator: FallbackOrchestrator | None = None) -> ParseOutcome:
    orchestrator = orchestrator or get_orchestrator("job")
    return orchestrator.run(text)


def parse_resume_batch(
    items: Sequence[BatchItem],
    *,
    orchestrator: FallbackOrchestrator | None = None,
) -> BatchReport:
    orchestrator = orchestrator or get_orchestrator("resume")
    return parse_batch(
        items,
        lambda text, file_name: orchestrator.run(text, file_name=file_name),
        max_workers=settings.batch_concurrency,
        max_items=settings.batch_max_items,
    )
