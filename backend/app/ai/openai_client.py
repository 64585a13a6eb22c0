from __future__ import annotations

import logging

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a concise, empathetic emotional well-being advisor."


class OpenAIClient:
    """Thin wrapper above the OpenAI async SDK."""

    def __init__(self, api_key: str | None, *, timeout: float | None = None) -> None:
        self._api_key = api_key
        # retries are driven by retry_async
        self._client = (
            AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0) if api_key else None
        )

    @property
    def available(self) -> bool:
        return self._client is not None

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        max_tokens: int,
    ) -> tuple[str, int, int]:
        """Return text, prompt tokens, completion tokens."""

        if self._client is None:
            raise RuntimeError("OpenAI client is not configured")

        completion = await self._client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
        )
        message = completion.choices[0].message.content or ""
        usage = completion.usage
        tokens_in = int(getattr(usage, "prompt_tokens", 0) or 0)
        tokens_out = int(getattr(usage, "completion_tokens", 0) or 0)
        logger.debug(
            "advice completion received",
            extra={"extra_fields": {"model": model, "tokens_in": tokens_in, "tokens_out": tokens_out}},
        )
        return message.strip(), tokens_in, tokens_out
