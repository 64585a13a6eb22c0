from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from backend.app.services.storage import StorageService

BASE_TIME = datetime(2024, 5, 1, 9, 0)


def _fields(**overrides):
    fields = {
        "primary_emotion": "Happy",
        "secondary_emotion": None,
        "emotion_intensity": 4,
        "emotion_duration": 2,
        "triggers": ["Sunshine"],
        "physical_sensations": ["None"],
        "daily_activities": ["Exercise"],
        "location": "Outside",
        "people_involved": [],
        "overall_day_rating": 8,
        "reflection": None,
        "gratitude": None,
    }
    fields.update(overrides)
    return fields


async def _user(storage: StorageService, username: str = "alice"):
    return await storage.create_user(username=username, name="Alice", password_hash="hash")


@pytest.mark.anyio
async def test_user_crud(temp_session_factory) -> None:
    storage = StorageService(temp_session_factory)
    user = await _user(storage)

    assert (await storage.get_user_by_username("alice")).id == user.id
    assert await storage.get_user_by_id(user.id + 100) is None

    updated = await storage.update_user(user.id, {"bio": "hi", "password_hash": "new", "id": 99})
    assert updated.bio == "hi"
    assert updated.password_hash == "new"
    assert updated.id == user.id
    assert await storage.update_user(user.id + 100, {"bio": "x"}) is None

    assert await storage.delete_user(user.id) is True
    assert await storage.delete_user(user.id) is False
    assert await storage.get_user_by_id(user.id) is None


@pytest.mark.anyio
async def test_duplicate_username_raises(temp_session_factory) -> None:
    storage = StorageService(temp_session_factory)
    await _user(storage)

    with pytest.raises(IntegrityError):
        await _user(storage)


@pytest.mark.anyio
async def test_emotion_log_crud_is_scoped_to_owner(temp_session_factory) -> None:
    storage = StorageService(temp_session_factory)
    owner = await _user(storage, "owner")
    other = await _user(storage, "other")

    entry = await storage.add_emotion_log(user_id=owner.id, fields=_fields())
    assert entry.user.username == "owner"
    assert entry.triggers == ["Sunshine"]

    assert await storage.get_emotion_log(user_id=other.id, log_id=entry.id) is None
    assert await storage.update_emotion_log(user_id=other.id, log_id=entry.id, changes={}) is None
    assert await storage.delete_emotion_log(user_id=other.id, log_id=entry.id) is False

    updated = await storage.update_emotion_log(
        user_id=owner.id,
        log_id=entry.id,
        changes={"overall_day_rating": 3, "triggers": ["Rain"]},
    )
    assert updated.overall_day_rating == 3
    assert updated.triggers == ["Rain"]
    assert updated.updated_at >= entry.updated_at

    assert await storage.delete_emotion_log(user_id=owner.id, log_id=entry.id) is True
    assert await storage.get_emotion_log(user_id=owner.id, log_id=entry.id) is None


@pytest.mark.anyio
async def test_list_and_fetch_respect_order_pages_and_ranges(temp_session_factory) -> None:
    storage = StorageService(temp_session_factory)
    user = await _user(storage)
    entries = [
        {**_fields(overall_day_rating=day + 1), "created_at": BASE_TIME + timedelta(days=day)}
        for day in range(5)
    ]
    assert await storage.replace_emotion_logs(user.id, entries) == 5

    page_one, total = await storage.list_emotion_logs(user_id=user.id, limit=2, page=1)
    page_three, _ = await storage.list_emotion_logs(user_id=user.id, limit=2, page=3)
    assert total == 5
    assert [log.overall_day_rating for log in page_one] == [5, 4]
    assert [log.overall_day_rating for log in page_three] == [1]

    ranged, ranged_total = await storage.list_emotion_logs(
        user_id=user.id,
        start=BASE_TIME + timedelta(days=1),
        end=BASE_TIME + timedelta(days=3),
    )
    assert ranged_total == 3
    assert [log.overall_day_rating for log in ranged] == [4, 3, 2]

    ascending = await storage.fetch_logs(user.id, start=BASE_TIME + timedelta(days=3))
    assert [log.overall_day_rating for log in ascending] == [4, 5]
    newest = await storage.fetch_logs(user.id, newest_first=True)
    assert newest[0].created_at == BASE_TIME + timedelta(days=4)


@pytest.mark.anyio
async def test_replace_emotion_logs_drops_previous_entries(temp_session_factory) -> None:
    storage = StorageService(temp_session_factory)
    user = await _user(storage)
    await storage.add_emotion_log(user_id=user.id, fields=_fields(primary_emotion="Sad"))

    await storage.replace_emotion_logs(user.id, [{**_fields(), "created_at": BASE_TIME}])

    logs = await storage.fetch_logs(user.id)
    assert [log.primary_emotion for log in logs] == ["Happy"]
    assert logs[0].created_at == BASE_TIME


@pytest.mark.anyio
async def test_delete_user_removes_logs(temp_session_factory) -> None:
    storage = StorageService(temp_session_factory)
    user = await _user(storage)
    await storage.add_emotion_log(user_id=user.id, fields=_fields())

    await storage.delete_user(user.id)

    assert await storage.fetch_logs(user.id) == []


@pytest.mark.anyio
async def test_healthcheck(temp_session_factory) -> None:
    await StorageService(temp_session_factory).healthcheck()
