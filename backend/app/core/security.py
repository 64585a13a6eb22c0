from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Header, HTTPException, Request, status
from jose import ExpiredSignatureError, JWTError, jwt

from ..db.models import User
from ..services.storage import StorageService
from .config import Settings

ALGORITHM = "HS256"


def _hash_identifier(value: int) -> str:
    return hashlib.sha256(str(value).encode("utf-8")).hexdigest()[:12]


def hash_password(password: str, rounds: int) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: User, settings: Settings, *, now: datetime | None = None) -> str:
    """Sign a bearer token carrying the username and id of ``user``."""

    issued = now or datetime.now(timezone.utc)
    payload = {
        "username": user.username,
        "id": str(user.id),
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(hours=settings.token_ttl_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="token expired",
        ) from exc
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
        ) from exc


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        return token or None
    return None


async def resolve_authenticated_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> User:
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing or invalid",
        )

    payload = decode_access_token(token, request.app.state.settings)
    try:
        user_id = int(payload.get("id"))
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
        ) from exc

    storage: StorageService = request.app.state.storage_service
    user = await storage.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="user not found",
        )

    request.state.current_user_id = user.id
    request.state.telemetry_user = _hash_identifier(user.id)
    return user


__all__ = [
    "ALGORITHM",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "resolve_authenticated_user",
    "verify_password",
]
