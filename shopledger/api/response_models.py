"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    loaded: bool
    loaded_at: Optional[str] = None
    sources: dict[str, int]
    errors: dict[str, str]
    backups: int


class LeadersResponse(BaseModel):
    leaders: list[str]


class WalletsResponse(BaseModel):
    wallets: list[str]


class TypesResponse(BaseModel):
    types: list[str]


class ReloadResponse(BaseModel):
    status: str
    ticket: int
    message: str
