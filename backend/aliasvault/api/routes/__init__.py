"""API route registrations."""
from fastapi import APIRouter

from aliasvault.api.routes import aliases, auth, directory, initialize


api_router = APIRouter()
api_router.include_router(initialize.router)
api_router.include_router(auth.router)
api_router.include_router(aliases.router)
api_router.include_router(directory.router)

__all__ = ["api_router"]
