"""Database utilities for Dreamscape."""

from .models import (
    DEFAULT_PROFILE_PICTURE,
    Base,
    EmotionLog,
    SettingEntry,
    User,
)

__all__ = [
    "DEFAULT_PROFILE_PICTURE",
    "Base",
    "EmotionLog",
    "SettingEntry",
    "User",
]
