"""SQLAlchemy async session factory for the settings table."""
from __future__ import annotations

from functools import lru_cache

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from aliasvault.core.config import Settings


@lru_cache
def _session_maker_for(database_url: str, echo: bool) -> async_sessionmaker:
    engine = create_async_engine(database_url, echo=echo, future=True)
    return async_sessionmaker(engine, expire_on_commit=False)


def get_session_maker(settings: Settings) -> async_sessionmaker:
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not configured")
    return _session_maker_for(settings.database_url, settings.database_echo)
