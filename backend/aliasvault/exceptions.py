"""Error types rendered into the `{success: false, error: {...}}` envelope."""
from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that map to a JSON error envelope.

    Subclasses set a default status code, machine-readable code and message;
    callers may override the message or attach upstream details.
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        error: dict[str, str] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"success": False, "error": error}


class InternalError(ApiError):
    """Catch-all for unexpected failures."""


class RateLimitedError(ApiError):
    status_code = 429
    code = "RATE_LIMITED"
    message = "Too many failed attempts. Please try again later."


class InvalidCredentialsError(ApiError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid password"


class InvalidTokenError(ApiError):
    """Missing, malformed, expired or badly signed token; deliberately merged."""

    status_code = 401
    code = "INVALID_TOKEN"
    message = "Token is invalid or expired"


class NotInitializedError(ApiError):
    status_code = 503
    code = "NOT_INITIALIZED"
    message = "System not initialized. Please complete setup first."


class AlreadyInitializedError(ApiError):
    status_code = 400
    code = "ALREADY_INITIALIZED"
    message = "System already initialized"


class MissingFieldsError(ApiError):
    status_code = 400
    code = "MISSING_FIELDS"
    message = "admin_password and addy_api_key are required"


class ValidationFailedError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Request body is invalid"


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Endpoint not found"


class RequestRejectedError(ApiError):
    """Framework-level 4xx other than routing failures (e.g. 413, 415)."""

    status_code = 400
    code = "BAD_REQUEST"
    message = "Request rejected"


class UpstreamError(ApiError):
    """Raised when the alias provider answers with a non-2xx status."""

    status_code = 502
    code = "ADDY_API_ERROR"
    message = "Alias provider request failed"


__all__ = [
    "ApiError",
    "InternalError",
    "RateLimitedError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "MissingFieldsError",
    "ValidationFailedError",
    "NotFoundError",
    "RequestRejectedError",
    "UpstreamError",
]
