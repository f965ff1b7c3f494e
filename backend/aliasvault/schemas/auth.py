"""Schemas for login, setup and settings endpoints."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class AuthRequest(BaseModel):
    password: Optional[Any] = Field(default=None, description="Shared administrator password")


class AuthResponse(BaseModel):
    success: bool
    token: Optional[str] = Field(default=None, description="Signed session token")


class InitializeRequest(BaseModel):
    admin_password: Optional[str] = None
    addy_api_key: Optional[str] = None
    jwt_secret: Optional[str] = Field(
        default=None, description="Signing secret; generated when omitted"
    )


class InitializeData(BaseModel):
    message: str
    token: str


class InitializationStatus(BaseModel):
    initialized: bool


class SettingsUpdateRequest(BaseModel):
    admin_password: Optional[str] = None
    addy_api_key: Optional[str] = None
    jwt_secret: Optional[str] = None
