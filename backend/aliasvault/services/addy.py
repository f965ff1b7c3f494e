"""Async client for the addy.io alias API.

Each call returns the upstream ``data`` member on success and raises
:class:`UpstreamError` carrying the upstream ``message`` otherwise.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from aliasvault.core.config import DEFAULT_ADDY_BASE_URL
from aliasvault.exceptions import InternalError, UpstreamError

logger = logging.getLogger(__name__)


class AddyClient:
    """Thin wrapper over :class:`httpx.AsyncClient` bound to one API key."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_ADDY_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> "AddyClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        action: str,
        error_status: int | None = None,
        json: Any = None,
        expect_body: bool = True,
    ) -> Any:
        """Send one upstream request and unwrap its ``data`` member.

        `action` is the human message used for errors ("Failed to ...").
        `error_status` fixes the status reported for upstream failures;
        when None the upstream status is passed through.
        """
        try:
            response = await self._client.request(method, endpoint, json=json)
        except httpx.HTTPError as exc:
            logger.warning(
                "Alias provider unreachable",
                extra={"endpoint": endpoint, "method": method, "error": str(exc)},
            )
            raise InternalError(action) from exc

        if response.is_error:
            details = _error_details(response)
            logger.warning(
                "Alias provider returned an error",
                extra={"endpoint": endpoint, "method": method, "status": response.status_code},
            )
            raise UpstreamError(
                action,
                status_code=error_status or response.status_code,
                details=details,
            )

        if not expect_body:
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            raise InternalError(action) from exc
        if isinstance(payload, dict):
            return payload.get("data")
        return None

    # ---------------------
    # Aliases
    # ---------------------

    async def list_aliases(self) -> Any:
        return await self._request(
            "GET", "/aliases", action="Failed to fetch aliases", error_status=502
        )

    async def create_alias(
        self,
        *,
        local_part: str | None = None,
        domain: str | None = None,
        description: str | None = None,
        recipient_ids: list[str] | None = None,
    ) -> Any:
        body: dict[str, Any] = {}
        if local_part and local_part.strip():
            body["local_part"] = local_part
        if domain:
            body["domain"] = domain
        if description:
            body["description"] = description
        if recipient_ids:
            body["recipient_ids"] = list(recipient_ids)
        return await self._request(
            "POST", "/aliases", action="Failed to create alias", json=body
        )

    async def update_alias(self, alias_id: str, changes: dict[str, Any]) -> Any:
        return await self._request(
            "PATCH", f"/aliases/{alias_id}", action="Failed to update alias", json=changes
        )

    async def delete_alias(self, alias_id: str) -> None:
        await self._request(
            "DELETE",
            f"/aliases/{alias_id}",
            action="Failed to delete alias",
            expect_body=False,
        )

    async def set_alias_active(self, alias_id: str, active: bool) -> Any:
        if active:
            return await self._request(
                "POST",
                "/active-aliases",
                action="Failed to enable alias",
                json={"id": alias_id},
            )
        return await self._request(
            "DELETE",
            f"/active-aliases/{alias_id}",
            action="Failed to disable alias",
            expect_body=False,
        )

    # ---------------------
    # Recipients and domains
    # ---------------------

    async def list_recipients(self) -> Any:
        return await self._request(
            "GET", "/recipients", action="Failed to fetch recipients", error_status=502
        )

    async def list_domains(self) -> Any:
        return await self._request(
            "GET", "/domains", action="Failed to fetch domains", error_status=502
        )


def _error_details(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return "Unknown error"


__all__ = ["AddyClient"]
