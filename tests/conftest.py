from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from backend.app.core.config import get_settings
from backend.db import create_engine, create_session_factory, init_db

STRONG_PASSWORD = "Sup3r$ecret"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def test_client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[TestClient, None, None]:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("VERSION", "0.1.0-test")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("SECRET", "test-secret")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "test.log"))

    db_path = tmp_path / f"test_{uuid4().hex}.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    get_settings.cache_clear()

    from backend.app.main import app

    try:
        with TestClient(app) as client:
            yield client
    finally:
        get_settings.cache_clear()


@pytest.fixture()
def temp_session_factory(tmp_path: Path):
    db_path = tmp_path / f"unit_{uuid4().hex}.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_engine(database_url)
    session_factory = create_session_factory(engine)
    asyncio.run(init_db(engine, session_factory, "test", database_url))
    try:
        yield session_factory
    finally:
        asyncio.run(engine.dispose())


@pytest.fixture()
def register_user(test_client: TestClient) -> Callable[..., dict[str, Any]]:
    """Create a user and log in, returning the login payload plus auth headers."""

    def _register(username: str = "alice", name: str = "Alice Doe") -> dict[str, Any]:
        response = test_client.post(
            "/api/users",
            json={"username": username, "name": name, "password": STRONG_PASSWORD},
        )
        assert response.status_code == 201, response.text
        login = test_client.post(
            "/api/login",
            json={"username": username, "password": STRONG_PASSWORD},
        )
        assert login.status_code == 200, login.text
        payload = login.json()
        payload["headers"] = {"Authorization": f"Bearer {payload['token']}"}
        return payload

    return _register


@pytest.fixture()
def log_payload() -> Callable[..., dict[str, Any]]:
    """Build a valid camelCase emotion log body with optional overrides."""

    def _build(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "primaryEmotion": "Happy",
            "secondaryEmotion": "Content",
            "emotionIntensity": 5,
            "emotionDuration": 3,
            "triggers": ["Sunny morning"],
            "physicalSensations": ["None"],
            "dailyActivities": ["Exercise", "Work"],
            "location": "Home",
            "peopleInvolved": ["Friends"],
            "overallDayRating": 8,
            "reflection": "  Good run before work.  ",
            "gratitude": "Coffee",
        }
        payload.update(overrides)
        return payload

    return _build
