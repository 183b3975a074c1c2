"""
FastAPI dependencies: DataStore singleton, filter parsing.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Query

from shopledger.config import ROWS_PER_PAGE
from shopledger.data.store import DataStore
from shopledger.data.schemas import FilterState

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: DataStore | None = None


def set_store(store: DataStore | None) -> None:
    global _store
    _store = store


def get_store() -> DataStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Data not loaded yet")
    return _store


def get_store_or_empty() -> DataStore:
    """Return the store even if no load has finished (health/reload)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


# ---------------------------------------------------------------------------
# Filters from query params
# ---------------------------------------------------------------------------

def parse_filters(
    shop: Optional[str] = Query(None, alias="shopName"),
    leader: Optional[str] = Query(None, alias="teamLeader"),
    wallet: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    date: Optional[str] = Query(None, description="YYYY-MM-DD or any accepted sheet date"),
    search: Optional[str] = Query(None, description="Substring of the shop name"),
    page: int = Query(1, ge=1),
    per_page: int = Query(ROWS_PER_PAGE, ge=1, le=500),
) -> FilterState:
    """Parse filter query parameters into a FilterState."""
    return FilterState(
        shop=shop,
        wallet=wallet,
        type=type,
        leader=leader,
        date=date,
        search=search,
        page=page,
        per_page=per_page,
    )


def require_shop(shop: Optional[str] = Query(None, alias="shopName")) -> str:
    if not shop or not shop.strip():
        raise HTTPException(400, "shopName is required")
    return shop
