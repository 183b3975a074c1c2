"""
Shop Ledger: FastAPI app factory with startup data loading.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopledger.data.store import DataStore
from shopledger.api.dependencies import set_store
from shopledger.api.router_meta import router as meta_router
from shopledger.api.router_dashboard import router as dashboard_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Fetch every sheet at startup."""
    from shopledger.config import BALANCE_SHEET_ID, EXPORTS_FOLDER, OPENSHEET_BASE, TRANSACTION_SHEET_ID
    EXPORTS_FOLDER.mkdir(parents=True, exist_ok=True)

    print(f"  OPENSHEET_BASE = {OPENSHEET_BASE}")
    print(f"  BALANCE_SHEET_ID = {BALANCE_SHEET_ID}")
    print(f"  TRANSACTION_SHEET_ID = {TRANSACTION_SHEET_ID}")
    print(f"  EXPORTS_FOLDER = {EXPORTS_FOLDER}")

    store = DataStore()
    store.load()
    set_store(store)

    health = store.health()
    if health["errors"]:
        print(f"\nShop Ledger ready with errors: {', '.join(health['errors'])}\n")
    else:
        print(f"\nShop Ledger ready: {len(store.shops()):,} shops, "
              f"{len(store.snapshot.transactions):,} transactions\n")
    yield
    store.client.close()
    set_store(None)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Shop Ledger API",
        description="Shop balances, daily ledgers, and wallet transactions from published sheets",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
