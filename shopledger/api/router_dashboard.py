"""
Dashboard endpoints: Shops Balance, Shop Ledger, Transactions; JSON, CSV + Excel.
"""
from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, JSONResponse, Response

from shopledger.config import EXPORTS_FOLDER
from shopledger.data.loader import SheetFetchError
from shopledger.data.store import DataStore
from shopledger.data.schemas import FilterState
from shopledger.data.normalize import normalize_shop_name
from shopledger.api.dependencies import get_store, parse_filters, require_shop
from shopledger.analytics.filters import is_active
from shopledger.reports import balance_report, ledger_report, transaction_report
from shopledger.reports.csv_export import export_filename

router = APIRouter(prefix="/api", tags=["dashboard"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _run(fn, *args):
    """Call a report generator; a failed required sheet becomes a 502."""
    try:
        return fn(*args)
    except SheetFetchError as e:
        raise HTTPException(502, f"Failed to fetch {e.source}: {e.reason}")


def _content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII names go in RFC 5987 ``filename*``."""
    quoted = quote(filename)
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=utf-8''{quoted}"


def _csv_response(result: tuple[str, str]) -> Response:
    filename, text = result
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": _content_disposition(filename)},
    )


def _xlsx_response(path) -> FileResponse:
    return FileResponse(path=str(path), filename=path.name, media_type=XLSX_MEDIA_TYPE)


# ---------------------------------------------------------------------------
# Shops Balance
# ---------------------------------------------------------------------------

@router.get("/summary")
def summary(
    store: DataStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
):
    """One page of the per-shop balance summary plus totals of every match."""
    return JSONResponse(content=_run(balance_report.generate_json, store, filters))


@router.get("/summary/csv")
def summary_csv(
    store: DataStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
):
    return _csv_response(_run(balance_report.generate_csv, store, filters))


@router.get("/summary/excel")
def summary_excel(
    store: DataStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
):
    label = filters.leader.strip().upper() if is_active(filters.leader) else None
    out_path = EXPORTS_FOLDER / export_filename("shops_balance", label, "xlsx")
    return _xlsx_response(_run(balance_report.generate_excel, store, out_path, filters))


# ---------------------------------------------------------------------------
# Shop Ledger
# ---------------------------------------------------------------------------

@router.get("/ledger")
def ledger(
    shop: str = Depends(require_shop),
    store: DataStore = Depends(get_store),
):
    """Daily running-balance ledger for one shop."""
    return JSONResponse(content=_run(ledger_report.generate_json, store, shop))


@router.get("/ledger/csv")
def ledger_csv(
    shop: str = Depends(require_shop),
    store: DataStore = Depends(get_store),
):
    return _csv_response(_run(ledger_report.generate_csv, store, shop))


@router.get("/ledger/excel")
def ledger_excel(
    shop: str = Depends(require_shop),
    store: DataStore = Depends(get_store),
):
    out_path = EXPORTS_FOLDER / export_filename("Ledger", normalize_shop_name(shop), "xlsx")
    return _xlsx_response(_run(ledger_report.generate_excel, store, shop, out_path))


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

@router.get("/transactions")
def transactions(
    store: DataStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
):
    """Merged WD/DP/B2B transactions; a dated query reads the backup snapshot when one exists."""
    return JSONResponse(content=transaction_report.generate_json(store, filters))


@router.get("/transactions/csv")
def transactions_csv(
    store: DataStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
):
    return _csv_response(transaction_report.generate_csv(store, filters))
