"""Async SQLAlchemy engine and session factory."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from monogram_service.db.models import Base
from monogram_service.settings import settings

log = structlog.get_logger(__name__)

_engine = None
_session_factory = None


async def init_db(database_url: str | None = None) -> None:
    global _engine, _session_factory
    url = database_url or settings.database_url
    kwargs: dict[str, Any] = {"echo": False}
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = 10
    _engine = create_async_engine(url, **kwargs)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    if settings.create_tables or url.startswith("sqlite"):
        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("db_tables_created", dialect=_engine.dialect.name)


async def close_db() -> None:
    global _engine
    if _engine:
        await _engine.dispose()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
