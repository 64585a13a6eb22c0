from __future__ import annotations

import pytest
from pydantic import ValidationError

from backend.app.schemas.user import WEAK_PASSWORD_MESSAGE, UserCreate, UserUpdate


def test_user_create_trims_and_accepts_valid_input() -> None:
    user = UserCreate.model_validate(
        {
            "username": "  dreamer42 ",
            "name": " Anne-Marie O'Neil ",
            "password": "Str0ng!pass",
            "profilePicture": "https://example.com/me.png",
        }
    )

    assert user.username == "dreamer42"
    assert user.name == "Anne-Marie O'Neil"
    assert user.profile_picture == "https://example.com/me.png"


@pytest.mark.parametrize("password", ["Sh0rt!a", "alllowercase1!", "NoDigits!!", "NoSpecial123"])
def test_user_create_rejects_weak_passwords(password: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        UserCreate(username="valid", name="Valid Name", password=password)
    assert WEAK_PASSWORD_MESSAGE in str(excinfo.value)


@pytest.mark.parametrize(
    "field,value",
    [
        ("username", "ab"),
        ("username", "has space"),
        ("name", "R2D2"),
        ("profile_picture", "not-a-url"),
        ("bio", "x" * 201),
    ],
)
def test_user_create_rejects_invalid_fields(field: str, value: str) -> None:
    payload = {"username": "valid", "name": "Valid Name", "password": "Str0ng!pass"}
    payload[field] = value
    with pytest.raises(ValidationError):
        UserCreate(**payload)


def test_user_update_fields_are_optional() -> None:
    update = UserUpdate.model_validate({"bio": "Hello there"})

    assert update.model_dump(exclude_unset=True) == {"bio": "Hello there"}


def test_user_update_still_checks_password_strength() -> None:
    with pytest.raises(ValidationError):
        UserUpdate(password="weak")
