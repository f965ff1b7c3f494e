"""Session tokens, password checks and the bearer-token gate.

Tokens are compact HS256 JWTs built with the standard library only:

    b64url(header) "." b64url(payload) "." b64url(HMAC-SHA256(secret, first two))

Verification always uses HMAC-SHA256; the ``alg`` header field is written for
compatibility with JWT tooling but never read.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import secrets
import string
import time
from dataclasses import asdict, dataclass
from typing import Any, Optional

from fastapi import Depends, Request

from aliasvault.deps import require_initialized
from aliasvault.exceptions import InvalidTokenError
from aliasvault.services.settings_store import AdminSettings

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "aliasvault"
TOKEN_TTL_SECONDS = 3600
_HEADER = {"alg": "HS256", "typ": "JWT"}
_SECRET_ALPHABET = string.ascii_letters + string.digits


@dataclass(slots=True)
class TokenClaims:
    iss: str
    iat: int
    exp: int


# ---------------------
# Encoding helpers
# ---------------------


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _encode_json(obj: dict[str, Any]) -> str:
    return _b64encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256
    ).digest()
    return _b64encode(digest)


# ---------------------
# Token authority
# ---------------------


def issue_token(
    secret: str,
    *,
    now: Optional[float] = None,
    ttl_seconds: int = TOKEN_TTL_SECONDS,
    issuer: str = TOKEN_ISSUER,
) -> str:
    """Mint a signed session token valid for `ttl_seconds` from `now`."""
    issued_at = int(time.time() if now is None else now)
    claims = TokenClaims(iss=issuer, iat=issued_at, exp=issued_at + ttl_seconds)
    signing_input = f"{_encode_json(_HEADER)}.{_encode_json(asdict(claims))}"
    return f"{signing_input}.{_sign(signing_input, secret)}"


def decode_claims(token: str) -> TokenClaims | None:
    """Parse the payload segment without checking the signature."""
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return None
        payload = json.loads(_b64decode(parts[1]))
        if not isinstance(payload, dict):
            return None
        exp = payload.get("exp")
        iat = payload.get("iat", 0)
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None
        if isinstance(iat, bool) or not isinstance(iat, (int, float)):
            return None
        return TokenClaims(iss=str(payload.get("iss", "")), iat=int(iat), exp=int(exp))
    except (ValueError, OverflowError, RecursionError, UnicodeError, binascii.Error):
        return None


def verify_token(token: str, secret: str, *, now: Optional[float] = None) -> bool:
    """Return True iff `token` is well formed, unexpired and signed with `secret`.

    Never raises: malformed input of any kind is a failed verification.
    """
    try:
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            return False

        claims = decode_claims(token)
        if claims is None:
            return False
        current = int(time.time() if now is None else now)
        if claims.exp <= current:
            return False

        # Compare canonical encodings so that non-significant trailing bits
        # in the presented signature cannot alias the real one.
        expected = _sign(f"{parts[0]}.{parts[1]}", secret)
        return hmac.compare_digest(expected.encode("ascii"), parts[2].encode("utf-8"))
    except Exception:  # noqa: BLE001 - verification fails closed
        return False


# ---------------------
# Password and secret helpers
# ---------------------


def validate_password(supplied: object, expected: str) -> bool:
    if not isinstance(supplied, str) or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def generate_secret(length: int = 32) -> str:
    """Return a random alphanumeric signing secret."""
    return "".join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))


# ---------------------
# Bearer gate (FastAPI dependency)
# ---------------------


async def require_token(
    request: Request,
    admin: AdminSettings = Depends(require_initialized),
) -> None:
    """Reject the request unless it carries a valid ``Bearer`` token.

    The caller is never told whether the token was missing, malformed, expired
    or badly signed beyond the two messages below.
    """
    header = request.headers.get("Authorization")
    if not header or not header.startswith("Bearer "):
        raise InvalidTokenError("Missing or invalid authorization header")

    if not verify_token(header[len("Bearer "):], admin.jwt_secret):
        logger.info("Rejected bearer token", extra={"path": request.url.path})
        raise InvalidTokenError()

    # Single administrator identity; marked for request logging only
    request.state.actor = {"type": "admin", "id": "admin"}


__all__ = [
    "TokenClaims",
    "issue_token",
    "verify_token",
    "decode_claims",
    "validate_password",
    "generate_secret",
    "require_token",
    "TOKEN_ISSUER",
    "TOKEN_TTL_SECONDS",
]
