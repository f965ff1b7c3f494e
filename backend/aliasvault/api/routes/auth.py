"""Password login issuing a session token."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from aliasvault.core.config import Settings, get_settings
from aliasvault.deps import get_client_id, get_login_limiter, require_initialized
from aliasvault.exceptions import (
    ApiError,
    InternalError,
    InvalidCredentialsError,
    RateLimitedError,
)
from aliasvault.schemas.auth import AuthRequest, AuthResponse
from aliasvault.security import issue_token, validate_password
from aliasvault.services.rate_limit import LoginRateLimiter
from aliasvault.services.settings_store import AdminSettings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/auth",
    response_model=AuthResponse,
    summary="Exchange the admin password for a token",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": AuthRequest.model_json_schema()}}
        }
    },
)
async def login(
    request: Request,
    admin: AdminSettings = Depends(require_initialized),
    limiter: LoginRateLimiter = Depends(get_login_limiter),
    client_id: str = Depends(get_client_id),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    try:
        # check_allowed must run before record_failure so the entry exists
        if not limiter.check_allowed(client_id):
            logger.warning("Login rate limited", extra={"client_id": client_id})
            raise RateLimitedError()

        # Body is read after the limit check; a missing password counts as a wrong one
        body = await request.json()
        payload = AuthRequest.model_validate(body if isinstance(body, dict) else {})

        if not validate_password(payload.password, admin.admin_password):
            limiter.record_failure(client_id)
            logger.warning("Login failed", extra={"client_id": client_id})
            raise InvalidCredentialsError()

        token = issue_token(admin.jwt_secret, ttl_seconds=settings.token_ttl_seconds)
    except ApiError:
        raise
    except Exception as exc:
        logger.exception("Login errored", extra={"client_id": client_id})
        raise InternalError("Authentication failed") from exc

    logger.info("Login succeeded", extra={"client_id": client_id})
    return AuthResponse(success=True, token=token)
