"""First-run initialization and settings management."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from aliasvault.core.config import Settings, get_settings
from aliasvault.deps import get_settings_store, require_initialized
from aliasvault.exceptions import AlreadyInitializedError, InternalError, MissingFieldsError
from aliasvault.schemas.auth import (
    InitializationStatus,
    InitializeData,
    InitializeRequest,
    SettingsUpdateRequest,
)
from aliasvault.schemas.envelope import ApiResponse, MessageData
from aliasvault.security import generate_secret, issue_token, require_token
from aliasvault.services.settings_store import AdminSettings, SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["setup"])


@router.get(
    "/initialize/check",
    response_model=ApiResponse[InitializationStatus],
    response_model_exclude_none=True,
    summary="Report whether setup has completed",
)
async def check_initialization(
    store: SettingsStore = Depends(get_settings_store),
) -> ApiResponse[InitializationStatus]:
    current = await store.get()
    initialized = bool(current and current.initialized)
    return ApiResponse(success=True, data=InitializationStatus(initialized=initialized))


@router.post(
    "/initialize",
    response_model=ApiResponse[InitializeData],
    response_model_exclude_none=True,
    summary="Persist credentials and return the first session token",
)
async def initialize(
    payload: InitializeRequest,
    store: SettingsStore = Depends(get_settings_store),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[InitializeData]:
    existing = await store.get()
    if existing and existing.initialized:
        raise AlreadyInitializedError()

    if not payload.admin_password or not payload.addy_api_key:
        raise MissingFieldsError()

    secret = payload.jwt_secret or generate_secret()
    try:
        await store.put(
            AdminSettings(
                admin_password=payload.admin_password,
                addy_api_key=payload.addy_api_key,
                jwt_secret=secret,
                initialized=True,
            )
        )
    except Exception as exc:
        logger.exception("Persisting initial settings failed")
        raise InternalError("Failed to initialize system") from exc
    logger.info("System initialized", extra={"secret_generated": not payload.jwt_secret})

    token = issue_token(secret, ttl_seconds=settings.token_ttl_seconds)
    return ApiResponse(
        success=True,
        data=InitializeData(message="System initialized successfully", token=token),
    )


@router.patch(
    "/settings",
    response_model=ApiResponse[MessageData],
    response_model_exclude_none=True,
    dependencies=[Depends(require_token)],
    summary="Update stored credentials",
)
async def update_settings(
    payload: SettingsUpdateRequest,
    current: AdminSettings = Depends(require_initialized),
    store: SettingsStore = Depends(get_settings_store),
) -> ApiResponse[MessageData]:
    # Empty values keep the stored ones
    updated = AdminSettings(
        admin_password=payload.admin_password or current.admin_password,
        addy_api_key=payload.addy_api_key or current.addy_api_key,
        jwt_secret=payload.jwt_secret or current.jwt_secret,
        initialized=current.initialized,
    )
    try:
        await store.put(updated)
    except Exception as exc:
        logger.exception("Persisting settings update failed")
        raise InternalError("Failed to update settings") from exc
    logger.info(
        "Settings updated",
        extra={
            "fields": sorted(
                name
                for name in ("admin_password", "addy_api_key", "jwt_secret")
                if getattr(payload, name)
            )
        },
    )
    return ApiResponse(success=True, data=MessageData(message="Settings updated successfully"))
