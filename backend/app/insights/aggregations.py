"""Pure reductions over a user's emotion logs.

Every function accepts an already-fetched sequence of records (ORM rows or
any object exposing the same attribute names) and returns plain dicts ready
to be serialised as a JSON response body. Nothing here touches the database
or mutates its input, and an empty sequence always produces empty mappings.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, tzinfo
from typing import Any, Protocol

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class EmotionRecord(Protocol):  # pragma: no cover - structural typing helper
    primary_emotion: str
    emotion_intensity: int
    triggers: Sequence[str]
    physical_sensations: Sequence[str]
    daily_activities: Sequence[str]
    location: str
    overall_day_rating: int
    created_at: datetime


def _tally(values: Iterable[str]) -> dict[str, int]:
    return dict(Counter(values))


def _cross_tally(pairs: Iterable[tuple[str, str]]) -> dict[str, dict[str, int]]:
    matrix: dict[str, dict[str, int]] = {}
    for outer, inner in pairs:
        row = matrix.setdefault(outer, {})
        row[inner] = row.get(inner, 0) + 1
    return matrix


def _mean_by_key(pairs: Iterable[tuple[str, int]]) -> dict[str, float]:
    totals: dict[str, list[int]] = {}
    for key, value in pairs:
        bucket = totals.setdefault(key, [0, 0])
        bucket[0] += value
        bucket[1] += 1
    return {key: total / count for key, (total, count) in totals.items()}


def weekday_name(moment: datetime, tz: tzinfo | None = None) -> str:
    """Full English weekday of ``moment`` in ``tz`` (server local time when None).

    Naive timestamps are stored in UTC and are converted before bucketing.
    """

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return WEEKDAY_NAMES[moment.astimezone(tz).weekday()]


def compute_distribution(records: Sequence[EmotionRecord]) -> dict[str, Any]:
    distribution = _tally(record.primary_emotion for record in records)
    timeline = [
        {
            "date": record.created_at,
            "intensity": record.emotion_intensity,
            "emotion": record.primary_emotion,
        }
        for record in records
    ]
    return {"distribution": distribution, "timeline": timeline}


def compute_trigger_analysis(records: Sequence[EmotionRecord]) -> dict[str, Any]:
    common = _tally(trigger for record in records for trigger in record.triggers)
    correlation = _cross_tally(
        (trigger, record.primary_emotion)
        for record in records
        for trigger in record.triggers
    )
    return {"commonTriggers": common, "triggerEmotionCorrelation": correlation}


def compute_daily_patterns(
    records: Sequence[EmotionRecord],
    *,
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    daily = _mean_by_key(
        (weekday_name(record.created_at, tz), record.overall_day_rating)
        for record in records
    )
    activity = _mean_by_key(
        (activity, record.overall_day_rating)
        for record in records
        for activity in record.daily_activities
    )
    return {"dailyPatterns": daily, "activityImpact": activity}


def compute_wellness_insights(records: Sequence[EmotionRecord]) -> dict[str, Any]:
    frequency = _tally(
        sensation for record in records for sensation in record.physical_sensations
    )
    correlation = _cross_tally(
        (sensation, record.primary_emotion)
        for record in records
        for sensation in record.physical_sensations
    )
    locations = _cross_tally((record.location, record.primary_emotion) for record in records)
    return {
        "physicalSensations": {
            "frequency": frequency,
            "emotionCorrelation": correlation,
        },
        "locationImpact": locations,
    }


def compute_activity_analysis(records: Sequence[EmotionRecord]) -> dict[str, dict[str, Any]]:
    accumulated: dict[str, dict[str, Any]] = {}
    for record in records:
        # one contribution per list occurrence, duplicates included
        for activity in record.daily_activities:
            bucket = accumulated.setdefault(
                activity,
                {"mood_total": 0, "intensity_total": 0, "count": 0, "emotions": {}},
            )
            bucket["mood_total"] += record.overall_day_rating
            bucket["intensity_total"] += record.emotion_intensity
            bucket["count"] += 1
            emotions = bucket["emotions"]
            emotions[record.primary_emotion] = emotions.get(record.primary_emotion, 0) + 1

    return {
        activity: {
            "averageMoodRating": bucket["mood_total"] / bucket["count"],
            "averageIntensity": bucket["intensity_total"] / bucket["count"],
            "totalOccurrences": bucket["count"],
            "emotionDistribution": bucket["emotions"],
        }
        for activity, bucket in accumulated.items()
    }


__all__ = [
    "WEEKDAY_NAMES",
    "compute_activity_analysis",
    "compute_daily_patterns",
    "compute_distribution",
    "compute_trigger_analysis",
    "compute_wellness_insights",
    "weekday_name",
]
