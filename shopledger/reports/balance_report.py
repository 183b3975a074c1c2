"""
Shops Balance report: filtered per-shop summary with totals cards.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from shopledger.config import SUMMARY_EXPORT_COLUMNS
from shopledger.data.store import DataStore
from shopledger.data.schemas import FilterState
from shopledger.analytics.balances import summary_totals
from shopledger.analytics.common import sanitize_for_json
from shopledger.analytics.filters import is_active
from shopledger.excel.writer import ExcelWriter
from shopledger.reports.csv_export import export_filename, to_csv


SUMMARY_COLS = [
    (key, "text" if key in ("shop_name", "team_leader") else "amount", label)
    for key, label in SUMMARY_EXPORT_COLUMNS
]


def generate_json(store: DataStore, filters: FilterState | None = None) -> dict:
    view = store.summary_view(filters)
    filtered = view.filtered
    page, meta = view.page()

    return sanitize_for_json({
        "filters": {
            "teamLeader": view.filters.leader,
            "search": view.filters.search,
        },
        "hide_leader_selector": is_active(view.filters.leader),
        "leaders": store.leaders(),
        "pagination": meta,
        "totals": summary_totals(filtered),
        "rows": page,
    })


def generate_csv(store: DataStore, filters: FilterState | None = None) -> tuple[str, str]:
    """Return (filename, CSV text) for every row of the filtered summary."""
    view = store.summary_view(filters)
    label = view.filters.leader.strip().upper() if is_active(view.filters.leader) else None
    return export_filename("shops_balance", label), to_csv(view.filtered, SUMMARY_EXPORT_COLUMNS)


def generate_excel(
    store: DataStore,
    output_path: str | Path,
    filters: FilterState | None = None,
) -> Path:
    view = store.summary_view(filters)
    filtered = view.filtered
    t = summary_totals(filtered)
    ew = ExcelWriter()

    ws = ew.add_sheet("Overview")
    ew.write_title(ws, "SHOPS BALANCE",
                   f"{view.filters.label}  |  {len(filtered):,} shops  |  "
                   f"Generated {pd.Timestamp.now():%B %d, %Y}")

    row = ew.write_section(ws, 5, "BALANCES")
    row = ew.write_kpi_row(ws, row, [
        (t["bring_forward_balance"], "BRING FORWARD", "amount"),
        (t["total_deposit"], "TOTAL DEPOSIT", "amount"),
        (t["total_withdrawal"], "TOTAL WITHDRAWAL", "amount"),
        (t["running_balance"], "RUNNING BALANCE", "amount"),
    ])

    row = ew.write_section(ws, row, "TRANSFERS & SETTLEMENTS")
    row = ew.write_kpi_row(ws, row, [
        (t["transfer_in"], "TRANSFER IN", "amount"),
        (t["transfer_out"], "TRANSFER OUT", "amount"),
        (t["settlement"], "SETTLEMENT", "amount"),
        (t["special_payment"], "SPECIAL PAYMENT", "amount"),
    ])

    row = ew.write_section(ws, row, "COMMISSIONS")
    ew.write_kpi_row(ws, row, [
        (t["dp_comm"], "DP COMM", "amount"),
        (t["wd_comm"], "WD COMM", "amount"),
        (t["add_comm"], "ADD COMM", "amount"),
    ])

    ws_d = ew.add_sheet("Shops Balance")
    ew.write_table(ws_d, 1, SUMMARY_COLS, filtered, totals=t)

    return ew.save(output_path)
