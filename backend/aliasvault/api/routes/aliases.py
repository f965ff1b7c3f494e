"""Alias endpoints forwarded to the upstream provider."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from aliasvault.deps import get_addy_client
from aliasvault.schemas.aliases import CreateAliasRequest
from aliasvault.schemas.envelope import ok
from aliasvault.security import require_token
from aliasvault.services.addy import AddyClient

router = APIRouter(prefix="/aliases", tags=["aliases"], dependencies=[Depends(require_token)])


@router.get("", summary="List aliases")
async def list_aliases(client: AddyClient = Depends(get_addy_client)) -> JSONResponse:
    return JSONResponse(ok(await client.list_aliases()))


@router.post("", summary="Create an alias")
async def create_alias(
    payload: CreateAliasRequest,
    client: AddyClient = Depends(get_addy_client),
) -> JSONResponse:
    data = await client.create_alias(
        local_part=payload.local_part,
        domain=payload.domain,
        description=payload.description,
        recipient_ids=payload.recipient_ids,
    )
    return JSONResponse(ok(data), status_code=status.HTTP_201_CREATED)


@router.patch("/{alias_id}", summary="Update an alias")
async def update_alias(
    alias_id: str,
    changes: Dict[str, Any] = Body(...),
    client: AddyClient = Depends(get_addy_client),
) -> JSONResponse:
    return JSONResponse(ok(await client.update_alias(alias_id, changes)))


@router.delete("/{alias_id}", summary="Delete an alias")
async def delete_alias(
    alias_id: str,
    client: AddyClient = Depends(get_addy_client),
) -> JSONResponse:
    await client.delete_alias(alias_id)
    return JSONResponse(ok())


@router.post("/{alias_id}/enable", summary="Activate an alias")
async def enable_alias(
    alias_id: str,
    client: AddyClient = Depends(get_addy_client),
) -> JSONResponse:
    return JSONResponse(ok(await client.set_alias_active(alias_id, True)))


@router.post("/{alias_id}/disable", summary="Deactivate an alias")
async def disable_alias(
    alias_id: str,
    client: AddyClient = Depends(get_addy_client),
) -> JSONResponse:
    return JSONResponse(ok(await client.set_alias_active(alias_id, False)))
