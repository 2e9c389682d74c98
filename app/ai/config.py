from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.ai.types import EntityKind, Usage
from app.core.config import settings
from app.core.config.scoring import get_scoring_value

MAX_PROVIDER_TIMEOUT_S = 30.0
MAX_PROVIDER_RETRIES = 2


@dataclass(frozen=True)
class ProviderSpec:
    provider_id: str
    vendor: str
    model: str
    input_cost_per_1k: float = 0.0
    output_cost_per_1k: float = 0.0
    temperature: float = 0.1
    max_tokens: int = 4096
    timeout_s: float = MAX_PROVIDER_TIMEOUT_S
    max_retries: int = MAX_PROVIDER_RETRIES
    retry_backoff_s: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "timeout_s", max(0.1, min(float(self.timeout_s), MAX_PROVIDER_TIMEOUT_S)))
        object.__setattr__(self, "max_retries", max(0, min(int(self.max_retries), MAX_PROVIDER_RETRIES)))


@dataclass(frozen=True)
class ParsingStrategy:
    kind: EntityKind
    provider_ids: tuple[str, ...]
    min_confidence: int
    min_source_chars: int
    max_input_chars: int
    max_cost_per_parse: float | None


@dataclass(frozen=True)
class CostEstimate:
    input_tokens: int
    output_tokens: int
    total_tokens: int
    estimated_cost: float


_DEFAULT_STRATEGIES: dict[str, dict[str, Any]] = {
    "resume": {"min_confidence": 70, "min_source_chars": 50, "max_input_chars": 14000},
    "job": {"min_confidence": 75, "min_source_chars": 100, "max_input_chars": 8000},
}


def calculate_cost(spec: ProviderSpec, usage: Usage) -> CostEstimate:
    cost = (usage.input_tokens / 1000) * spec.input_cost_per_1k
    cost += (usage.output_tokens / 1000) * spec.output_cost_per_1k
    return CostEstimate(
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        total_tokens=usage.total_tokens,
        estimated_cost=round(cost, 4),
    )


def load_provider_spec(provider_id: str) -> ProviderSpec:
    catalogue = get_scoring_value("providers", {}) or {}
    raw = catalogue.get(provider_id)
    if not isinstance(raw, dict):
        raise ValueError(f"Unknown provider '{provider_id}' (not listed under 'providers' in scoring config)")

    timeout_s = settings.provider_timeout_s or get_scoring_value("parsing.provider_timeout_s", MAX_PROVIDER_TIMEOUT_S)
    max_retries = settings.provider_max_retries
    if max_retries is None:
        max_retries = get_scoring_value("parsing.provider_max_retries", MAX_PROVIDER_RETRIES)

    return ProviderSpec(
        provider_id=provider_id,
        vendor=str(raw.get("vendor", "")).strip().lower(),
        model=str(raw.get("model", "")).strip(),
        input_cost_per_1k=float(raw.get("input_cost_per_1k", 0.0)),
        output_cost_per_1k=float(raw.get("output_cost_per_1k", 0.0)),
        temperature=float(raw.get("temperature", 0.1)),
        max_tokens=int(raw.get("max_tokens", 4096)),
        timeout_s=float(raw.get("timeout_s", timeout_s)),
        max_retries=int(raw.get("max_retries", max_retries)),
    )


def load_parsing_strategy(kind: EntityKind) -> ParsingStrategy:
    defaults = _DEFAULT_STRATEGIES[kind]
    section = get_scoring_value(f"parsing.{kind}", {}) or {}

    env_chain = settings.resume_providers if kind == "resume" else settings.job_providers
    provider_ids = tuple(env_chain) if env_chain else tuple(section.get("providers") or ())

    max_cost = settings.max_cost_per_parse
    if max_cost is None:
        max_cost = get_scoring_value("parsing.max_cost_per_parse")

    return ParsingStrategy(
        kind=kind,
        provider_ids=provider_ids,
        min_confidence=int(section.get("min_confidence", defaults["min_confidence"])),
        min_source_chars=int(section.get("min_source_chars", defaults["min_source_chars"])),
        max_input_chars=int(section.get("max_input_chars", defaults["max_input_chars"])),
        max_cost_per_parse=float(max_cost) if max_cost is not None else None,
    )


def min_source_chars(kind: EntityKind) -> int:
    return int(
        get_scoring_value(f"parsing.{kind}.min_source_chars", _DEFAULT_STRATEGIES[kind]["min_source_chars"])
    )
