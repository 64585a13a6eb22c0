from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import event, select
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from backend.app.db.models import Base, SettingEntry

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/dreamscape.db"
BACKEND_DIR = Path(__file__).resolve().parent
ALEMBIC_INI = BACKEND_DIR.parent / "alembic.ini"
ALEMBIC_DIR = BACKEND_DIR / "alembic"

_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def _is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def resolve_database_url(raw_url: str | None) -> URL:
    """Parse ``raw_url`` and swap sync drivers for their asyncio counterparts."""

    url = make_url(raw_url or DEFAULT_DATABASE_URL)
    async_driver = _ASYNC_DRIVERS.get(url.drivername)
    if async_driver is not None:
        url = url.set(drivername=async_driver)
    if url.get_backend_name() == "sqlite" and not _is_memory_sqlite(url):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return url


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # pragma: no cover - event hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine(database_url: str | None) -> AsyncEngine:
    url = resolve_database_url(database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(url, echo=False)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_async_engine(url, echo=False, pool_pre_ping=True)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


def _alembic_config(url: URL) -> Config:
    cfg = Config(str(ALEMBIC_INI)) if ALEMBIC_INI.exists() else Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    # configparser interpolation treats "%" specially
    cfg.set_main_option(
        "sqlalchemy.url",
        url.render_as_string(hide_password=False).replace("%", "%%"),
    )
    return cfg


def _upgrade_to_head(url: URL) -> None:
    command.upgrade(_alembic_config(url), "head")


async def _apply_migrations(url: URL | None) -> None:
    if url is None or _is_memory_sqlite(url):
        return
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _upgrade_to_head, url)


async def _store_setting(session_factory: async_sessionmaker[AsyncSession], key: str, value: str) -> None:
    async with session_factory() as session:
        setting = await session.scalar(select(SettingEntry).where(SettingEntry.key == key))
        if setting is None:
            session.add(SettingEntry(key=key, value=value))
        else:
            setting.value = value
        await session.commit()


async def init_db(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    version: str,
    database_url: str | None = None,
) -> None:
    """Bring the schema to head and record the running application version.

    In-memory SQLite databases skip Alembic and rely on ``create_all`` alone.
    """

    await _apply_migrations(resolve_database_url(database_url) if database_url else None)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await _store_setting(session_factory, "schema_version", version)
    logger.info("Database ready", extra={"extra_fields": {"schema_version": version}})


__all__ = [
    "create_engine",
    "create_session_factory",
    "init_db",
    "resolve_database_url",
]
