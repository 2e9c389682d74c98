from __future__ import annotations

import os
from typing import Optional, Sequence

import httpx

from app.ai.errors import SchemaError
from app.ai.providers.common import post_json
from app.ai.types import ChatMessage, Completion, Usage

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        provider_id: str = "anthropic",
        http_client: Optional[httpx.Client] = None,
    ):
        self._model = model
        self._provider_id = provider_id
        self._api_key = (api_key or os.getenv("ANTHROPIC_API_KEY") or "").strip()
        if not self._api_key:
            raise RuntimeError("ANTHROPIC_API_KEY is missing")
        self._http = http_client or httpx.Client()

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
        timeout_s: float,
        json_mode: bool = True,
    ) -> Completion:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        payload: dict = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": m.role, "content": m.content} for m in messages if m.role != "system"],
        }
        if system:
            payload["system"] = system
        if json_mode:
            payload["messages"].append({"role": "assistant", "content": "{"})

        body = post_json(
            self._http,
            ANTHROPIC_MESSAGES_URL,
            provider_id=self._provider_id,
            timeout_s=timeout_s,
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
            json=payload,
        )

        content = ""
        for block in body.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
                content += block["text"]
        if not content:
            raise SchemaError("No text content in Anthropic response", provider_id=self._provider_id)
        if json_mode and not content.lstrip().startswith("{"):
            content = "{" + content

        usage = body.get("usage") or {}
        return Completion(
            text=content,
            model=self._model,
            usage=Usage(
                input_tokens=int(usage.get("input_tokens") or 0),
                output_tokens=int(usage.get("output_tokens") or 0),
            ),
        )
