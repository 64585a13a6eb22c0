from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ..db.models import EmotionLog, User

_USER_FIELDS = frozenset({"username", "name", "password_hash", "profile_picture", "bio"})
_LOG_FIELDS = frozenset(
    {
        "primary_emotion",
        "secondary_emotion",
        "emotion_intensity",
        "emotion_duration",
        "triggers",
        "physical_sensations",
        "daily_activities",
        "location",
        "people_involved",
        "overall_day_rating",
        "reflection",
        "gratitude",
    }
)


class StorageService:
    """Persist users and their emotion logs."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def healthcheck(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    # -- user management -------------------------------------------------
    async def create_user(
        self,
        *,
        username: str,
        name: str,
        password_hash: str,
        profile_picture: str | None = None,
        bio: str | None = None,
    ) -> User:
        async with self._session_factory() as session:
            user = User(
                username=username,
                name=name,
                password_hash=password_hash,
                bio=bio,
            )
            if profile_picture:
                user.profile_picture = profile_picture
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    async def get_user_by_id(self, user_id: int) -> User | None:
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        async with self._session_factory() as session:
            return await session.scalar(select(User).where(User.username == username))

    async def update_user(self, user_id: int, changes: dict[str, Any]) -> User | None:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            for key, value in changes.items():
                if key in _USER_FIELDS:
                    setattr(user, key, value)
            user.updated_at = datetime.utcnow()
            await session.commit()
            await session.refresh(user)
            return user

    async def delete_user(self, user_id: int) -> bool:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                return False
            await session.execute(delete(EmotionLog).where(EmotionLog.user_id == user_id))
            await session.delete(user)
            await session.commit()
            return True

    # -- emotion log operations ------------------------------------------
    @staticmethod
    async def _load_log(
        session: AsyncSession,
        user_id: int,
        log_id: int,
    ) -> EmotionLog | None:
        return await session.scalar(
            select(EmotionLog)
            .options(selectinload(EmotionLog.user))
            .where(EmotionLog.id == log_id, EmotionLog.user_id == user_id)
            .execution_options(populate_existing=True)
        )

    async def add_emotion_log(self, *, user_id: int, fields: dict[str, Any]) -> EmotionLog:
        async with self._session_factory() as session:
            entry = EmotionLog(
                user_id=user_id,
                **{key: value for key, value in fields.items() if key in _LOG_FIELDS},
            )
            session.add(entry)
            await session.commit()
            await session.refresh(entry, attribute_names=["user"])
            return entry

    async def get_emotion_log(self, *, user_id: int, log_id: int) -> EmotionLog | None:
        async with self._session_factory() as session:
            return await self._load_log(session, user_id, log_id)

    async def update_emotion_log(
        self,
        *,
        user_id: int,
        log_id: int,
        changes: dict[str, Any],
    ) -> EmotionLog | None:
        async with self._session_factory() as session:
            entry = await self._load_log(session, user_id, log_id)
            if entry is None:
                return None
            for key, value in changes.items():
                if key in _LOG_FIELDS:
                    setattr(entry, key, value)
            entry.updated_at = datetime.utcnow()
            await session.commit()
            return await self._load_log(session, user_id, log_id)

    async def delete_emotion_log(self, *, user_id: int, log_id: int) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(EmotionLog).where(
                    EmotionLog.id == log_id,
                    EmotionLog.user_id == user_id,
                )
            )
            await session.commit()
            return result.rowcount > 0

    async def list_emotion_logs(
        self,
        *,
        user_id: int,
        limit: int = 10,
        page: int = 1,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[list[EmotionLog], int]:
        """Return one page of logs (newest first) and the total matching count."""

        filters = [EmotionLog.user_id == user_id]
        if start is not None:
            filters.append(EmotionLog.created_at >= start)
        if end is not None:
            filters.append(EmotionLog.created_at <= end)

        async with self._session_factory() as session:
            total = await session.scalar(select(func.count(EmotionLog.id)).where(*filters))
            result = await session.execute(
                select(EmotionLog)
                .options(selectinload(EmotionLog.user))
                .where(*filters)
                .order_by(EmotionLog.created_at.desc(), EmotionLog.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            return list(result.scalars().all()), int(total or 0)

    async def fetch_logs(
        self,
        user_id: int,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        newest_first: bool = False,
    ) -> Sequence[EmotionLog]:
        """Materialise a user's logs, optionally bounded by creation time."""

        query = select(EmotionLog).where(EmotionLog.user_id == user_id)
        if start is not None:
            query = query.where(EmotionLog.created_at >= start)
        if end is not None:
            query = query.where(EmotionLog.created_at <= end)
        if newest_first:
            query = query.order_by(EmotionLog.created_at.desc(), EmotionLog.id.desc())
        else:
            query = query.order_by(EmotionLog.created_at.asc(), EmotionLog.id.asc())
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def replace_emotion_logs(
        self,
        user_id: int,
        entries: Sequence[dict[str, Any]],
    ) -> int:
        """Drop every log of ``user_id`` and insert ``entries`` in one transaction."""

        async with self._session_factory() as session:
            await session.execute(delete(EmotionLog).where(EmotionLog.user_id == user_id))
            session.add_all(
                EmotionLog(
                    user_id=user_id,
                    created_at=entry.get("created_at", datetime.utcnow()),
                    updated_at=entry.get("created_at", datetime.utcnow()),
                    **{key: value for key, value in entry.items() if key in _LOG_FIELDS},
                )
                for entry in entries
            )
            await session.commit()
        return len(entries)


__all__ = ["StorageService"]
