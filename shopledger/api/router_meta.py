"""
Meta endpoints: health, leaders, wallets, types, reload.
"""
from __future__ import annotations

import threading

from fastapi import APIRouter, Depends

from shopledger.data.store import DataStore
from shopledger.api.dependencies import get_store, get_store_or_empty
from shopledger.api.response_models import (
    HealthResponse, LeadersResponse, ReloadResponse, TypesResponse, WalletsResponse,
)

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: DataStore = Depends(get_store_or_empty)):
    return HealthResponse(status="ok", **store.health())


@router.get("/leaders", response_model=LeadersResponse)
def list_leaders(store: DataStore = Depends(get_store)):
    return LeadersResponse(leaders=store.leaders())


@router.get("/wallets", response_model=WalletsResponse)
def list_wallets(store: DataStore = Depends(get_store)):
    return WalletsResponse(wallets=store.wallets())


@router.get("/types", response_model=TypesResponse)
def list_types(store: DataStore = Depends(get_store)):
    return TypesResponse(types=store.types())


@router.post("/reload", response_model=ReloadResponse)
def reload_data(store: DataStore = Depends(get_store_or_empty)):
    """Re-fetch every sheet.

    Returns immediately, reload happens in background. If another reload
    is requested before this one finishes, only the newest is kept.
    """
    ticket = store.request_load()
    threading.Thread(target=store.load, args=(ticket,), daemon=True).start()
    return ReloadResponse(
        status="reloading",
        ticket=ticket,
        message="Data reload started in background. Check /api/health for updated row counts.",
    )
