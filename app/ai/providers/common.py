from __future__ import annotations

from typing import Any

import httpx

from app.ai.errors import ProviderError, QuotaExceededError, SchemaError, TransientProviderError

_QUOTA_MARKERS = ("quota", "credit balance", "billing", "insufficient")


def parse_json_or_raw(response: httpx.Response) -> dict[str, Any]:
    try:
        parsed = response.json()
    except ValueError:
        return {"raw": response.text}
    if isinstance(parsed, dict):
        return parsed
    return {"value": parsed}


def error_for_status(response: httpx.Response, *, provider_id: str) -> ProviderError | None:
    status = response.status_code
    if status < 400:
        return None
    body = response.text[:500]
    message = f"{provider_id} returned HTTP {status}: {body}"
    lowered = body.lower()
    if status in {402, 403} and any(marker in lowered for marker in _QUOTA_MARKERS):
        return QuotaExceededError(message, provider_id=provider_id)
    if status in {408, 409, 429} or status >= 500:
        return TransientProviderError(message, provider_id=provider_id)
    if any(marker in lowered for marker in ("insufficient_quota", "credit balance")):
        return QuotaExceededError(message, provider_id=provider_id)
    return SchemaError(message, provider_id=provider_id)


def post_json(
    client: httpx.Client,
    url: str,
    *,
    provider_id: str,
    timeout_s: float,
    **kwargs: Any,
) -> dict[str, Any]:
    try:
        response = client.post(url, timeout=timeout_s, **kwargs)
    except httpx.TimeoutException as exc:
        raise TransientProviderError(f"{provider_id} timed out after {timeout_s:.1f}s", provider_id=provider_id) from exc
    except httpx.TransportError as exc:
        raise TransientProviderError(f"{provider_id} connection failed: {exc}", provider_id=provider_id) from exc

    error = error_for_status(response, provider_id=provider_id)
    if error is not None:
        raise error
    return parse_json_or_raw(response)
