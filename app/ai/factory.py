from __future__ import annotations

import logging

from app.ai.config import ProviderSpec
from app.ai.providers.claude_provider import ClaudeProvider
from app.ai.providers.gemini_provider import GeminiProvider
from app.ai.providers.openai_provider import OpenAIProvider
from app.ai.types import AIClient
from app.core.config import settings

logger = logging.getLogger(__name__)


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def _credential_for(vendor: str) -> str | None:
    if vendor == "openai":
        return settings.openai_api_key
    if vendor == "anthropic":
        return settings.anthropic_api_key
    if vendor == "gemini":
        return settings.gemini_api_key
    raise ValueError(f"Unsupported provider vendor '{vendor}'")


def get_ai_client(spec: ProviderSpec) -> AIClient:
    api_key = _credential_for(spec.vendor)

    if spec.vendor == "openai":
        return OpenAIProvider(
            model=spec.model,
            api_key=api_key,
            base_url=settings.openai_base_url,
            provider_id=spec.provider_id,
        )

    if spec.vendor == "anthropic":
        return ClaudeProvider(model=spec.model, api_key=api_key, provider_id=spec.provider_id)

    if spec.vendor == "gemini":
        return GeminiProvider(model=spec.model, api_key=api_key, provider_id=spec.provider_id)

    raise ValueError(f"Unsupported provider vendor '{spec.vendor}'")


def try_get_ai_client(spec: ProviderSpec) -> AIClient | None:
    """Build a client for the spec, or None when the vendor has no usable credentials."""
    try:
        api_key = (_credential_for(spec.vendor) or "").strip()
    except ValueError as exc:
        logger.warning("provider_unsupported provider=%s: %s", spec.provider_id, exc)
        return None
    if not api_key or _looks_like_placeholder(api_key):
        logger.warning("provider_skipped_missing_credentials provider=%s vendor=%s", spec.provider_id, spec.vendor)
        return None
    return get_ai_client(spec)
