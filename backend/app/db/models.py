from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_PROFILE_PICTURE = "https://api.dicebear.com/9.x/thumbs/svg?seed=l4nb4jhj"


class Base(DeclarativeBase):
    """Base declarative model."""


class User(Base):
    """Registered account authenticated by username and password."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(20), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_picture: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        default=DEFAULT_PROFILE_PICTURE,
    )
    bio: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    emotion_logs: Mapped[list[EmotionLog]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class EmotionLog(Base):
    """A single mood-tracking entry owned by exactly one user."""

    __tablename__ = "emotion_logs"
    __table_args__ = (
        Index("ix_emotion_logs_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    primary_emotion: Mapped[str] = mapped_column(String(50), nullable=False)
    secondary_emotion: Mapped[str | None] = mapped_column(String(50), nullable=True)
    emotion_intensity: Mapped[int] = mapped_column(Integer, nullable=False)
    emotion_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    triggers: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    physical_sensations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    daily_activities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    people_involved: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    overall_day_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    reflection: Mapped[str | None] = mapped_column(Text, nullable=True)
    gratitude: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    user: Mapped[User] = relationship(back_populates="emotion_logs")


class SettingEntry(Base):
    """Key-value configuration stored in DB."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


__all__ = [
    "DEFAULT_PROFILE_PICTURE",
    "Base",
    "EmotionLog",
    "SettingEntry",
    "User",
]
