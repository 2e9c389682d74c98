from __future__ import annotations

import os
from typing import Optional, Sequence

import httpx

from app.ai.errors import SchemaError
from app.ai.providers.common import post_json
from app.ai.types import ChatMessage, Completion, Usage

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        provider_id: str = "gemini",
        http_client: Optional[httpx.Client] = None,
    ):
        self._model = model
        self._provider_id = provider_id
        self._api_key = (api_key or os.getenv("GEMINI_API_KEY") or "").strip()
        if not self._api_key:
            raise RuntimeError("GEMINI_API_KEY is missing")
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
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages
            if m.role != "system"
        ]
        generation_config: dict = {"temperature": temperature, "maxOutputTokens": max_tokens}
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        payload: dict = {"contents": contents, "generationConfig": generation_config}
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        body = post_json(
            self._http,
            f"{GEMINI_BASE_URL}/{self._model}:generateContent",
            provider_id=self._provider_id,
            timeout_s=timeout_s,
            params={"key": self._api_key},
            json=payload,
        )

        text = ""
        for candidate in body.get("candidates") or []:
            parts = (candidate.get("content") or {}).get("parts") or []
            for part in parts:
                if isinstance(part.get("text"), str):
                    text += part["text"]
        if not text:
            raise SchemaError("No text content in Gemini response", provider_id=self._provider_id)

        usage = body.get("usageMetadata") or {}
        return Completion(
            text=text,
            model=self._model,
            usage=Usage(
                input_tokens=int(usage.get("promptTokenCount") or 0),
                output_tokens=int(usage.get("candidatesTokenCount") or 0),
            ),
        )
