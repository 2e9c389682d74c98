from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_optional_int(name: str) -> int | None:
    raw = _get_env(name, None)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _get_env_float(name: str, default: float | None) -> float | None:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    bulk_rate_limit: str
    rate_limit_enabled: bool
    cors_allowed_origins: tuple[str, ...]
    openai_api_key: str | None
    openai_base_url: str | None
    anthropic_api_key: str | None
    gemini_api_key: str | None
    provider_timeout_s: float | None
    provider_max_retries: int | None
    resume_providers: tuple[str, ...]
    job_providers: tuple[str, ...]
    authenticity_provider: str | None
    batch_concurrency: int
    batch_max_items: int
    max_cost_per_parse: float | None
    scoring_config_path: str | None


def load_settings() -> Settings:
    return Settings(
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
        bulk_rate_limit=_get_env("BULK_RATE_LIMIT", "10/minute") or "10/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            ["http://localhost:3000", "http://127.0.0.1:3000"],
        ),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        anthropic_api_key=_get_env("ANTHROPIC_API_KEY"),
        gemini_api_key=_get_env("GEMINI_API_KEY"),
        provider_timeout_s=_get_env_float("PROVIDER_TIMEOUT_S", None),
        provider_max_retries=_get_env_optional_int("PROVIDER_MAX_RETRIES"),
        resume_providers=_get_env_list("RESUME_PROVIDERS", []),
        job_providers=_get_env_list("JOB_PROVIDERS", []),
        authenticity_provider=_get_env("AUTHENTICITY_PROVIDER"),
        batch_concurrency=max(1, _get_env_int("BATCH_CONCURRENCY", 5)),
        batch_max_items=max(1, _get_env_int("BATCH_MAX_ITEMS", 50)),
        max_cost_per_parse=_get_env_float("MAX_COST_PER_PARSE", None),
        scoring_config_path=_get_env("SCORING_CONFIG_PATH"),
    )


settings = load_settings()

__all__ = ["Settings", "load_settings", "settings"]
