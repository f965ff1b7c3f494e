"""FastAPI application entrypoint for the alias proxy."""
import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from aliasvault.api.routes import api_router
from aliasvault.core.config import Settings, get_settings
from aliasvault.core.logging import setup_logging
from aliasvault.deps import require_initialized
from aliasvault.exceptions import (
    ApiError,
    InternalError,
    NotFoundError,
    RequestRejectedError,
    ValidationFailedError,
)
from aliasvault.services.rate_limit import LoginRateLimiter, RateConfig

logger = logging.getLogger("aliasvault")

_startup_settings = get_settings()
setup_logging(_startup_settings.log_level)

app = FastAPI(title="AliasVault Proxy API", version="0.1.0")

# One limiter per application instance; state is not shared across workers
app.state.login_limiter = LoginRateLimiter(
    RateConfig(
        window_seconds=_startup_settings.auth_rate_window_seconds,
        max_attempts=_startup_settings.auth_rate_max_attempts,
    )
)

app.include_router(api_router)

CORS_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
CORS_HEADERS = "Content-Type, Authorization"


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    initialized: bool = True


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(_: object = Depends(require_initialized)) -> HealthResponse:
    """Return service health information for monitoring and load-balancers."""
    return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())


# ---------------------
# Error envelope
# ---------------------


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    err = ValidationFailedError(details=f"{location}: {first.get('msg')}" if location else None)
    return JSONResponse(err.to_payload(), status_code=err.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in (404, 405):
        err: ApiError = NotFoundError()
    elif 400 <= exc.status_code < 500:
        err = RequestRejectedError(str(exc.detail), status_code=exc.status_code)
    else:
        err = InternalError(str(exc.detail), status_code=exc.status_code)
    return JSONResponse(err.to_payload(), status_code=err.status_code)


# ---------------------
# Middleware
# ---------------------


def _resolve_settings(request: Request) -> Settings:
    # Honour dependency overrides so tests can swap configuration
    settings_override = request.app.dependency_overrides.get(get_settings)
    return settings_override() if callable(settings_override) else get_settings()


def origin_allowed(origin: str, allowed_origin: str) -> bool:
    return origin == allowed_origin or origin.endswith(".github.io") or "localhost" in origin


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Max-Age": "86400",
    }


@app.middleware("http")
async def unexpected_error_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception(
            "Unhandled error", extra={"method": request.method, "path": request.url.path}
        )
        err = InternalError()
        return JSONResponse(err.to_payload(), status_code=err.status_code)


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    settings = _resolve_settings(request)
    origin = request.headers.get("origin")
    allowed = bool(origin) and origin_allowed(origin, settings.allowed_origin)

    if settings.enforce_origin:
        if not origin:
            return PlainTextResponse("CORS: No origin header", status_code=403)
        if not allowed:
            logger.info("Origin rejected", extra={"origin": origin})
            return PlainTextResponse("CORS: Origin not allowed", status_code=403)

    if allowed and request.method == "OPTIONS":
        return Response(status_code=204, headers=cors_headers(origin))

    response = await call_next(request)
    if allowed:
        response.headers.update(cors_headers(origin))
    return response


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    actor = getattr(request.state, "actor", None) or {"type": "anonymous", "id": "-"}
    logger.info(
        "%s %s -> %s",
        request.method,
        request.url.path,
        response.status_code,
        extra={
            "request_id": request_id,
            "actor_type": actor.get("type"),
            "status_code": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
        },
    )
    response.headers["X-Request-Id"] = request_id
    return response
