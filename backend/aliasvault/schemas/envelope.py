"""Uniform response envelope shared by every endpoint."""
from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human readable message")
    details: Optional[str] = Field(default=None, description="Upstream error detail")


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorBody] = None


class MessageData(BaseModel):
    message: str


def ok(data: Any = None) -> dict:
    """Build a success envelope, omitting ``data`` when there is none."""

    if data is None:
        return {"success": True}
    return {"success": True, "data": data}
