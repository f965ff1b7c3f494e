"""Read-only recipient and domain listings from the upstream provider."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from aliasvault.deps import get_addy_client
from aliasvault.schemas.envelope import ok
from aliasvault.security import require_token
from aliasvault.services.addy import AddyClient

router = APIRouter(tags=["directory"], dependencies=[Depends(require_token)])


@router.get("/recipients", summary="List recipients")
async def list_recipients(client: AddyClient = Depends(get_addy_client)) -> JSONResponse:
    return JSONResponse(ok(await client.list_recipients()))


@router.get("/domains", summary="List domains")
async def list_domains(client: AddyClient = Depends(get_addy_client)) -> JSONResponse:
    return JSONResponse(ok(await client.list_domains()))
