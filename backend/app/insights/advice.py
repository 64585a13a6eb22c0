from __future__ import annotations

import html
import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..ai import OpenAIClient, generate_local_advice
from ..core.config import Settings
from ..db.models import EmotionLog
from ..metrics import ADVICE_REQUESTS
from ..utils.timeouts import retry_async

logger = logging.getLogger(__name__)

NO_RECENT_LOGS = "No recent emotion logs found. Log your emotions to get personalized advice."
ADVICE_FAILED = "Failed to generate advice. Please try again later."


def build_advice_prompt(logs: Sequence[EmotionLog]) -> str:
    """Render recent logs into the advisor prompt, escaping user-written text."""

    blocks: list[str] = []
    for log in logs:
        lines = [
            f"- Primary Emotion: {html.escape(log.primary_emotion)}",
            f"- Intensity: {log.emotion_intensity}/7",
            f"- Day Rating: {log.overall_day_rating}/10",
        ]
        if log.reflection:
            lines.append(f"- Reflection: {html.escape(log.reflection)}")
        if log.gratitude:
            lines.append(f"- Gratitude: {html.escape(log.gratitude)}")
        blocks.append("\n".join(lines))

    patterns = "\n\n".join(blocks)
    return (
        "As an emotional well-being advisor, analyze the following emotional data "
        "and provide personalized advice (max 3 sentences):\n\n"
        f"Recent emotional patterns:\n{patterns}\n\n"
        "Please provide concise, empathetic advice that:\n"
        "1. Acknowledges their emotional state\n"
        "2. Offers a specific, actionable suggestion\n"
        "3. Ends with an encouraging note"
    )


@dataclass(slots=True)
class AdviceResult:
    text: str
    source: str


class AdviceService:
    """Produce a short advice blurb from a user's most recent logs."""

    def __init__(self, settings: Settings, client: OpenAIClient) -> None:
        self._settings = settings
        self._client = client

    def window(self, now: datetime) -> tuple[datetime, datetime]:
        return now - timedelta(days=self._settings.advice_lookback_days), now

    async def generate(self, logs: Sequence[EmotionLog]) -> AdviceResult:
        if not self._client.available:
            dominant = None
            average = None
            if logs:
                dominant = Counter(log.primary_emotion for log in logs).most_common(1)[0][0]
                average = sum(log.overall_day_rating for log in logs) / len(logs)
            ADVICE_REQUESTS.labels(result="local").inc()
            return AdviceResult(text=generate_local_advice(dominant, average), source="local")

        prompt = build_advice_prompt(logs)

        async def _call() -> tuple[str, int, int]:
            return await self._client.complete(
                model=self._settings.openai_model,
                prompt=prompt,
                max_tokens=self._settings.advice_max_tokens,
            )

        try:
            text, tokens_in, tokens_out = await retry_async(
                _call,
                attempts=self._settings.retry_attempts,
                delay=0.5,
                timeout=self._settings.request_timeout_seconds,
            )
        except Exception:
            ADVICE_REQUESTS.labels(result="error").inc()
            raise
        ADVICE_REQUESTS.labels(result="openai").inc()
        logger.info(
            "advice generated",
            extra={"extra_fields": {"logs": len(logs), "tokens_in": tokens_in, "tokens_out": tokens_out}},
        )
        return AdviceResult(text=text, source="openai")


__all__ = [
    "ADVICE_FAILED",
    "NO_RECENT_LOGS",
    "AdviceResult",
    "AdviceService",
    "build_advice_prompt",
]
