from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from pydantic import Field, field_validator, model_validator

from .base import CamelModel, UtcDateTime


@dataclass(frozen=True)
class FieldRule:
    """A value is valid when it is a predefined option or fully matches ``pattern``."""

    label: str
    pattern: re.Pattern[str]
    choices: frozenset[str] = frozenset()

    def accepts(self, value: str) -> bool:
        return value in self.choices or self.pattern.fullmatch(value) is not None

    def check(self, value: str) -> str:
        if not isinstance(value, str) or not self.accepts(value):
            raise ValueError(f"{value} is not a valid {self.label}.")
        return value


EMOTIONS = (
    "Happy",
    "Sad",
    "Angry",
    "Anxious",
    "Excited",
    "Fearful",
    "Disgusted",
    "Surprised",
    "Neutral",
    "Frustrated",
    "Lonely",
    "Content",
    "Confused",
)

PHYSICAL_SENSATIONS = (
    "Headache",
    "Tight Chest",
    "Fatigue",
    "Sweating",
    "Racing Heart",
    "Muscle Tension",
    "Dizziness",
    "Nausea",
    "Shortness of Breath",
    "Trembling",
    "Hot or Cold Flashes",
    "Stomach Pain",
    "Sleep Issues",
    "Loss of Appetite",
    "None",
    "Other",
)

DAILY_ACTIVITIES = (
    "Work",
    "Study",
    "Exercise",
    "Socializing",
    "Leisure",
    "Hobbies",
    "Household Chores",
    "Sleep",
    "Self Care",
    "Meditation",
    "Eating",
    "Commuting",
    "Caregiving",
    "Shopping",
    "Healthcare",
    "Other",
)

LOCATIONS = (
    "Home",
    "Work",
    "School",
    "University",
    "Friend's Place",
    "Outside",
    "Gym",
    "Restaurant or Cafe",
    "Shopping Center",
    "Medical Facility",
    "Transit",
    "Nature",
    "Other",
)

_LETTERS = re.compile(r"[a-zA-Z\s]+")

EMOTION_RULE = FieldRule("emotion", _LETTERS, frozenset(EMOTIONS))
SENSATION_RULE = FieldRule("physical sensation", _LETTERS, frozenset(PHYSICAL_SENSATIONS))
ACTIVITY_RULE = FieldRule("activity", _LETTERS, frozenset(DAILY_ACTIVITIES))
LOCATION_RULE = FieldRule("location", re.compile(r"[a-zA-Z0-9\s,.'-]+"), frozenset(LOCATIONS))
PERSON_RULE = FieldRule("name", re.compile(r"[a-zA-Z\s,.'-]+"))
TRIGGER_RULE = FieldRule("trigger", re.compile(r"[\w\s,.'&/!?()-]+"))

# Fields that may not be cleared by an update.
REQUIRED_FIELDS = frozenset(
    {
        "primary_emotion",
        "emotion_intensity",
        "emotion_duration",
        "triggers",
        "physical_sensations",
        "daily_activities",
        "location",
        "people_involved",
        "overall_day_rating",
    }
)


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class _EmotionLogRules(CamelModel):
    @field_validator("primary_emotion", check_fields=False)
    @classmethod
    def _validate_primary(cls, value: str | None) -> str | None:
        return value if value is None else EMOTION_RULE.check(value)

    @field_validator("secondary_emotion", check_fields=False, mode="before")
    @classmethod
    def _validate_secondary(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return EMOTION_RULE.check(value)

    @field_validator("triggers", check_fields=False)
    @classmethod
    def _validate_triggers(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [TRIGGER_RULE.check(item.strip()) for item in value]

    @field_validator("physical_sensations", check_fields=False)
    @classmethod
    def _validate_sensations(cls, value: list[str] | None) -> list[str] | None:
        return value if value is None else [SENSATION_RULE.check(item) for item in value]

    @field_validator("daily_activities", check_fields=False)
    @classmethod
    def _validate_activities(cls, value: list[str] | None) -> list[str] | None:
        return value if value is None else [ACTIVITY_RULE.check(item) for item in value]

    @field_validator("location", check_fields=False)
    @classmethod
    def _validate_location(cls, value: str | None) -> str | None:
        return value if value is None else LOCATION_RULE.check(value)

    @field_validator("people_involved", check_fields=False)
    @classmethod
    def _validate_people(cls, value: list[str] | None) -> list[str] | None:
        return value if value is None else [PERSON_RULE.check(item) for item in value]

    @field_validator("reflection", "gratitude", check_fields=False)
    @classmethod
    def _trim_text(cls, value: str | None) -> str | None:
        return _strip_optional(value)


class EmotionLogCreate(_EmotionLogRules):
    primary_emotion: str = Field(..., min_length=1, max_length=50)
    secondary_emotion: str | None = Field(default=None, max_length=50)
    emotion_intensity: int = Field(..., ge=1, le=7)
    emotion_duration: int = Field(..., ge=1, le=24)
    triggers: list[str] = Field(..., min_length=1)
    physical_sensations: list[str] = Field(default_factory=list)
    daily_activities: list[str] = Field(default_factory=list)
    location: str = Field(..., min_length=1, max_length=100)
    people_involved: list[str] = Field(default_factory=list)
    overall_day_rating: int = Field(..., ge=1, le=10)
    reflection: str | None = Field(default=None, max_length=4000)
    gratitude: str | None = Field(default=None, max_length=4000)


class EmotionLogUpdate(_EmotionLogRules):
    primary_emotion: str | None = Field(default=None, min_length=1, max_length=50)
    secondary_emotion: str | None = Field(default=None, max_length=50)
    emotion_intensity: int | None = Field(default=None, ge=1, le=7)
    emotion_duration: int | None = Field(default=None, ge=1, le=24)
    triggers: list[str] | None = Field(default=None, min_length=1)
    physical_sensations: list[str] | None = None
    daily_activities: list[str] | None = None
    location: str | None = Field(default=None, min_length=1, max_length=100)
    people_involved: list[str] | None = None
    overall_day_rating: int | None = Field(default=None, ge=1, le=10)
    reflection: str | None = Field(default=None, max_length=4000)
    gratitude: str | None = Field(default=None, max_length=4000)

    @model_validator(mode="after")
    def _reject_cleared_required(self) -> EmotionLogUpdate:
        for name in self.model_fields_set & REQUIRED_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be empty")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(include=self.model_fields_set)


class LogOwner(CamelModel):
    id: int
    username: str
    name: str


class EmotionLogModel(CamelModel):
    id: int
    user: LogOwner
    primary_emotion: str
    secondary_emotion: str | None
    emotion_intensity: int
    emotion_duration: int
    triggers: list[str]
    physical_sensations: list[str]
    daily_activities: list[str]
    location: str
    people_involved: list[str]
    overall_day_rating: int
    reflection: str | None
    gratitude: str | None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_logs: int
    has_more: bool
    limit: int


class EmotionLogListResponse(CamelModel):
    logs: list[EmotionLogModel]
    pagination: Pagination


__all__ = [
    "ACTIVITY_RULE",
    "DAILY_ACTIVITIES",
    "EMOTIONS",
    "EMOTION_RULE",
    "LOCATIONS",
    "LOCATION_RULE",
    "PERSON_RULE",
    "PHYSICAL_SENSATIONS",
    "SENSATION_RULE",
    "TRIGGER_RULE",
    "EmotionLogCreate",
    "EmotionLogListResponse",
    "EmotionLogModel",
    "EmotionLogUpdate",
    "FieldRule",
    "LogOwner",
    "Pagination",
]
