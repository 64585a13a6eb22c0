from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError

from backend.app.core.errors import register_exception_handlers


class _Body(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _no_digits(cls, value: str) -> str:
        if any(char.isdigit() for char in value):
            raise ValueError("name must not contain digits")
        return value


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/items/{item_id}")
    async def read_item(item_id: int) -> dict[str, int]:
        if item_id == 0:
            raise HTTPException(status_code=404, detail="Item not found")
        return {"id": item_id}

    @app.post("/items")
    async def create_item(body: _Body) -> dict[str, str]:
        if body.name == "taken":
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        return {"name": body.name}

    @app.get("/crash")
    async def crash() -> None:
        raise RuntimeError("unexpected")

    return app


def test_malformed_path_id_maps_to_400() -> None:
    with TestClient(_app()) as client:
        response = client.get("/items/not-a-number")

    assert response.status_code == 400
    assert response.json() == {"error": "malformatted id"}


def test_validation_message_is_unwrapped() -> None:
    with TestClient(_app()) as client:
        response = client.post("/items", json={"name": "abc1"})

    assert response.status_code == 400
    assert response.json() == {"error": "name must not contain digits"}


def test_missing_body_field_names_the_field() -> None:
    with TestClient(_app()) as client:
        response = client.post("/items", json={})

    assert response.status_code == 400
    assert response.json()["error"].startswith("name: ")


def test_http_exception_detail_is_wrapped() -> None:
    with TestClient(_app()) as client:
        response = client.get("/items/0")

    assert response.status_code == 404
    assert response.json() == {"error": "Item not found"}


def test_integrity_error_maps_to_409() -> None:
    with TestClient(_app()) as client:
        response = client.post("/items", json={"name": "taken"})

    assert response.status_code == 409
    assert response.json() == {"error": "Duplicate key error - this resource already exists"}


def test_unexpected_error_maps_to_500() -> None:
    with TestClient(_app(), raise_server_exceptions=False) as client:
        response = client.get("/crash")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
