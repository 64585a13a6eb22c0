from __future__ import annotations

import re

from pydantic import Field, field_validator

from .base import CamelModel, UtcDateTime

USERNAME_RE = re.compile(r"[a-zA-Z0-9]+")
NAME_RE = re.compile(r"[a-zA-Z\s'-]+")
URL_RE = re.compile(r"(https?|ftp)://[^\s/$.?#].[^\s]*")
STRONG_PASSWORD_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[\W_]).{8,}")

WEAK_PASSWORD_MESSAGE = (
    "Password is not strong enough. It must be at least 8 characters long and include "
    "one uppercase letter, one lowercase letter, one number, and one special character."
)


def _check_username(value: str) -> str:
    value = value.strip()
    if not 3 <= len(value) <= 20:
        raise ValueError("Username must be between 3 and 20 characters long")
    if not USERNAME_RE.fullmatch(value):
        raise ValueError(
            f"{value} contains invalid characters. Only letters and numbers are allowed."
        )
    return value


def _check_name(value: str) -> str:
    value = value.strip()
    if not 3 <= len(value) <= 20:
        raise ValueError("Name must be between 3 and 20 characters long")
    if not NAME_RE.fullmatch(value):
        raise ValueError(
            f"{value} contains invalid characters. Name must contain only letters, "
            "spaces, hyphens, and apostrophes"
        )
    return value


def _check_picture(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not URL_RE.fullmatch(value):
        raise ValueError(f"{value} is not a valid URL for a profile picture.")
    return value


def _check_password(value: str | None) -> str | None:
    if value is None:
        return None
    if not STRONG_PASSWORD_RE.match(value):
        raise ValueError(WEAK_PASSWORD_MESSAGE)
    return value


class UserCreate(CamelModel):
    username: str
    name: str
    password: str
    profile_picture: str | None = None
    bio: str | None = Field(default=None, max_length=200)

    check_username = field_validator("username")(_check_username)
    check_name = field_validator("name")(_check_name)
    check_picture = field_validator("profile_picture")(_check_picture)
    check_password = field_validator("password")(_check_password)


class UserUpdate(CamelModel):
    username: str | None = None
    name: str | None = None
    password: str | None = None
    profile_picture: str | None = None
    bio: str | None = Field(default=None, max_length=200)

    @field_validator("username")
    @classmethod
    def _validate_username(cls, value: str | None) -> str | None:
        return value if value is None else _check_username(value)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str | None) -> str | None:
        return value if value is None else _check_name(value)

    check_picture = field_validator("profile_picture")(_check_picture)
    check_password = field_validator("password")(_check_password)


class UserModel(CamelModel):
    id: int
    username: str
    name: str
    profile_picture: str
    bio: str | None = None
    created_at: UtcDateTime
    updated_at: UtcDateTime
