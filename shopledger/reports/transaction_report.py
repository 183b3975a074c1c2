"""
Transaction report: merged WD/DP/B2B records with per-wallet totals.
"""
from __future__ import annotations

from shopledger.config import TRANSACTION_EXPORT_COLUMNS
from shopledger.data.store import DataStore
from shopledger.data.schemas import FilterState
from shopledger.data.normalize import normalize_shop_name
from shopledger.analytics.balances import totals_by
from shopledger.analytics.common import sanitize_for_json, sum_column
from shopledger.analytics.filters import is_active, paginate
from shopledger.reports.csv_export import export_filename, to_csv


def generate_json(store: DataStore, filters: FilterState | None = None) -> dict:
    filters = filters or FilterState()
    view = store.transactions(filters)
    page, meta = paginate(view.frame, filters.page, filters.per_page)

    return sanitize_for_json({
        "filters": {
            "shopName": filters.shop,
            "wallet": filters.wallet,
            "type": filters.type,
            "date": filters.date,
        },
        "backup_used": view.backup_used,
        "notice": view.notice,
        "warnings": view.warnings,
        "pagination": meta,
        "total_amount": sum_column(view.frame, "amount"),
        "by_wallet": totals_by(view.frame, "wallet"),
        "rows": page,
    })


def generate_csv(store: DataStore, filters: FilterState | None = None) -> tuple[str, str]:
    """Return (filename, CSV text) for every matching transaction."""
    filters = filters or FilterState()
    view = store.transactions(filters)
    label = normalize_shop_name(filters.shop) if is_active(filters.shop) else "All"
    return export_filename("Transactions", label), to_csv(view.frame, TRANSACTION_EXPORT_COLUMNS)
