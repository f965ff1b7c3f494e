"""Schemas for alias forwarding endpoints."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class CreateAliasRequest(BaseModel):
    local_part: Optional[str] = Field(default=None, description="Custom local part")
    domain: Optional[str] = None
    description: Optional[str] = None
    recipient_ids: Optional[List[str]] = None
