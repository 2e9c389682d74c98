from __future__ import annotations

import os
from typing import Optional, Sequence

import openai
from openai import OpenAI

from app.ai.errors import QuotaExceededError, SchemaError, TransientProviderError
from app.ai.types import ChatMessage, Completion, Usage

_TRANSIENT_ERRORS = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        provider_id: str = "openai",
    ):
        self._model = model
        self._provider_id = provider_id
        key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        # Retries are owned by the extraction adapter, transient errors only.
        self._client = OpenAI(
            api_key=key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            max_retries=0,
        )

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
        timeout_s: float,
        json_mode: bool = True,
    ) -> Completion:
        create_kwargs = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": timeout_s,
        }
        if json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**create_kwargs)
        except openai.RateLimitError as exc:
            if getattr(exc, "code", None) == "insufficient_quota":
                raise QuotaExceededError(str(exc), provider_id=self._provider_id) from exc
            raise TransientProviderError(str(exc), provider_id=self._provider_id) from exc
        except _TRANSIENT_ERRORS as exc:
            raise TransientProviderError(str(exc), provider_id=self._provider_id) from exc
        except openai.APIStatusError as exc:
            raise SchemaError(
                f"OpenAI rejected the request ({exc.status_code}): {exc}", provider_id=self._provider_id
            ) from exc

        content = response.choices[0].message.content if response.choices else ""
        if not content:
            raise SchemaError("No response content from OpenAI", provider_id=self._provider_id)

        usage = response.usage
        return Completion(
            text=content,
            model=self._model,
            usage=Usage(
                input_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
                output_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
            ),
        )
