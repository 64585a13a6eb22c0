from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Literal

from pydantic import BaseModel

from .base import CamelModel, UtcDateTime

TimeRange = Literal["week", "month"]


def range_start(time_range: TimeRange, now: datetime) -> datetime:
    """Start of the distribution window ending at ``now``.

    ``month`` steps back one calendar month, clamping to the last day of a
    shorter month.
    """

    if time_range == "week":
        return now - timedelta(days=7)
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


class TimelinePoint(BaseModel):
    date: UtcDateTime
    intensity: int
    emotion: str


class DistributionResponse(BaseModel):
    distribution: dict[str, int]
    timeline: list[TimelinePoint]


class TriggerAnalysisResponse(CamelModel):
    common_triggers: dict[str, int]
    trigger_emotion_correlation: dict[str, dict[str, int]]


class DailyPatternsResponse(CamelModel):
    daily_patterns: dict[str, float]
    activity_impact: dict[str, float]


class SensationInsights(CamelModel):
    frequency: dict[str, int]
    emotion_correlation: dict[str, dict[str, int]]


class WellnessResponse(CamelModel):
    physical_sensations: SensationInsights
    location_impact: dict[str, dict[str, int]]


class ActivityStats(CamelModel):
    average_mood_rating: float
    average_intensity: float
    total_occurrences: int
    emotion_distribution: dict[str, int]


class SampleDataResponse(BaseModel):
    message: str
    generated: int
