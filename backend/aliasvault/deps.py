"""FastAPI dependency helpers."""
from __future__ import annotations

from functools import lru_cache
from typing import AsyncIterator, Union

from fastapi import Depends, Request

from aliasvault.core.config import Settings, get_settings
from aliasvault.db.session import get_session_maker
from aliasvault.exceptions import NotInitializedError
from aliasvault.services.addy import AddyClient
from aliasvault.services.rate_limit import LoginRateLimiter
from aliasvault.services.settings_store import (
    AdminSettings,
    FileSettingsStore,
    SQLSettingsStore,
    SettingsStore,
)


@lru_cache
def _create_file_store(path: str) -> FileSettingsStore:
    return FileSettingsStore(path)


def get_settings_store(
    settings: Settings = Depends(get_settings),
) -> Union[FileSettingsStore, SQLSettingsStore]:
    """Return the settings store selected by configuration.

    - If DATABASE_URL is set, returns the SQL-backed store
    - Otherwise returns a shared JSON file store
    """
    if settings.database_url:
        return SQLSettingsStore(get_session_maker(settings))
    return _create_file_store(settings.settings_store_path)


async def require_initialized(
    store: SettingsStore = Depends(get_settings_store),
) -> AdminSettings:
    """Return persisted admin settings, or fail with 503 before setup."""

    admin = await store.get()
    if admin is None or not admin.initialized:
        raise NotInitializedError()
    return admin


def get_login_limiter(request: Request) -> LoginRateLimiter:
    """Return the limiter owned by the running application."""

    return request.app.state.login_limiter


def get_client_id(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Identify the caller by the edge-provided client IP header."""

    return request.headers.get(settings.client_ip_header) or "unknown"


async def get_addy_client(
    admin: AdminSettings = Depends(require_initialized),
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[AddyClient]:
    """Provide an upstream client per request and close it afterwards."""

    async with AddyClient(
        admin.addy_api_key,
        base_url=settings.addy_base_url,
        timeout=settings.addy_request_timeout,
    ) as client:
        yield client
