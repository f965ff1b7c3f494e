"""Persistence for the admin settings blob.

The whole configuration (admin password, addy API key, signing secret and the
initialized flag) is stored as one JSON document under the key ``config``.
Two backends share the same async interface: a JSON file for single-node
deployments and a SQL table when ``DATABASE_URL`` is configured.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from aliasvault.db import models

logger = logging.getLogger(__name__)

SETTINGS_KEY = "config"


@dataclass(slots=True)
class AdminSettings:
    admin_password: str
    addy_api_key: str
    jwt_secret: str
    initialized: bool = False


class SettingsStore(Protocol):
    async def get(self) -> AdminSettings | None: ...

    async def put(self, settings: AdminSettings) -> None: ...


def _settings_from_json(raw: str | None) -> AdminSettings | None:
    if not raw:
        return None
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored settings are not valid JSON; treating as absent")
        return None
    if not isinstance(payload, dict):
        return None
    return AdminSettings(
        admin_password=str(payload.get("admin_password") or ""),
        addy_api_key=str(payload.get("addy_api_key") or ""),
        jwt_secret=str(payload.get("jwt_secret") or ""),
        initialized=bool(payload.get("initialized", False)),
    )


def _settings_to_json(settings: AdminSettings) -> str:
    return json.dumps(asdict(settings), ensure_ascii=False)


class FileSettingsStore:
    """Keep the settings document in a JSON file keyed by ``config``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    async def get(self) -> AdminSettings | None:
        async with self._lock:
            documents = await asyncio.to_thread(self._read_all)
        return _settings_from_json(documents.get(SETTINGS_KEY))

    async def put(self, settings: AdminSettings) -> None:
        async with self._lock:
            documents = await asyncio.to_thread(self._read_all)
            documents[SETTINGS_KEY] = _settings_to_json(settings)
            await asyncio.to_thread(self._write_all, documents)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError):
            logger.warning("Settings file %s is unreadable; treating as empty", self._path)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write_all(self, documents: dict[str, str]) -> None:
        tmp = self._path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(documents, fh, ensure_ascii=False)
        tmp.replace(self._path)


class SQLSettingsStore:
    """Keep the settings document in the ``settings_entries`` table."""

    def __init__(self, session_maker: async_sessionmaker) -> None:
        self._session_maker = session_maker

    async def get(self) -> AdminSettings | None:
        async with self._session_maker() as session:
            row = (
                await session.execute(
                    select(models.SettingsEntry).where(models.SettingsEntry.key == SETTINGS_KEY)
                )
            ).scalar_one_or_none()
        return _settings_from_json(row.value if row else None)

    async def put(self, settings: AdminSettings) -> None:
        value = _settings_to_json(settings)
        async with self._session_maker() as session:
            row = await session.get(models.SettingsEntry, SETTINGS_KEY)
            if row is None:
                session.add(models.SettingsEntry(key=SETTINGS_KEY, value=value))
            else:
                row.value = value
            await session.commit()


__all__ = [
    "AdminSettings",
    "SettingsStore",
    "FileSettingsStore",
    "SQLSettingsStore",
    "SETTINGS_KEY",
]
