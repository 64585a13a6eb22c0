from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any

from ..schemas.emotion import DAILY_ACTIVITIES, EMOTIONS, LOCATIONS, PHYSICAL_SENSATIONS

SAMPLE_TRIGGERS = (
    "Work Deadline",
    "Family Event",
    "Traffic",
    "Exercise",
    "Social Media",
    "Weather",
    "Sleep Quality",
)
SAMPLE_PEOPLE = ("Family", "Friends", "Coworkers")


def _pick_some(rng: random.Random, options: tuple[str, ...], max_count: int = 3) -> list[str]:
    count = rng.randint(1, max_count)
    return rng.sample(options, count)


def generate_sample_log(rng: random.Random, created_at: datetime) -> dict[str, Any]:
    return {
        "primary_emotion": rng.choice(EMOTIONS),
        "secondary_emotion": rng.choice(EMOTIONS),
        "emotion_intensity": rng.randint(1, 7),
        "emotion_duration": rng.randint(1, 24),
        "triggers": _pick_some(rng, SAMPLE_TRIGGERS),
        "physical_sensations": _pick_some(rng, PHYSICAL_SENSATIONS),
        "daily_activities": _pick_some(rng, DAILY_ACTIVITIES),
        "location": rng.choice(LOCATIONS),
        "people_involved": list(SAMPLE_PEOPLE[: rng.randint(1, len(SAMPLE_PEOPLE))]),
        "overall_day_rating": rng.randint(1, 10),
        "reflection": "Sample reflection",
        "gratitude": "Sample gratitude",
        "created_at": created_at,
    }


def generate_sample_logs(
    now: datetime,
    rng: random.Random | None = None,
    *,
    days: int = 90,
) -> list[dict[str, Any]]:
    """Synthesize one to three logs per day for the ``days`` days up to ``now``.

    Timestamps never exceed ``now`` and are returned in chronological order.
    """

    rng = rng or random.Random()
    logs: list[dict[str, Any]] = []
    for offset in range(days, -1, -1):
        day = (now - timedelta(days=offset)).replace(hour=0, minute=0, second=0, microsecond=0)
        for _ in range(rng.randint(1, 3)):
            moment = min(day + timedelta(hours=rng.randrange(24), minutes=rng.randrange(60)), now)
            logs.append(generate_sample_log(rng, moment))
    logs.sort(key=lambda entry: entry["created_at"])
    return logs


__all__ = ["SAMPLE_PEOPLE", "SAMPLE_TRIGGERS", "generate_sample_log", "generate_sample_logs"]
