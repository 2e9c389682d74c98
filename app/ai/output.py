from __future__ import annotations

import json
import re
from typing import Any

from app.ai.errors import SchemaError

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_block(text: str) -> dict[str, Any] | None:
    text = (text or "").strip()
    if not text:
        return None
    try:
        loaded = json.loads(text)
        if isinstance(loaded, dict):
            return loaded
    except ValueError:
        pass
    for pattern in (_FENCED_JSON_RE, _OBJECT_RE):
        match = pattern.search(text)
        if not match:
            continue
        candidate = match.group(1) if pattern is _FENCED_JSON_RE else match.group(0)
        try:
            loaded = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(loaded, dict):
            return loaded
    return None


def parse_json_object(text: str, *, provider_id: str | None = None) -> dict[str, Any]:
    parsed = extract_json_block(text)
    if parsed is None:
        raise SchemaError("Provider response did not contain a JSON object", provider_id=provider_id)
    return parsed
