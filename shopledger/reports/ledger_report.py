"""
Shop Ledger report: daily running balance for one shop.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from shopledger.config import LEDGER_EXPORT_COLUMNS, TOTAL_ROW_LABEL
from shopledger.data.store import DataStore
from shopledger.data.schemas import ShopLedger
from shopledger.analytics.common import sanitize_for_json
from shopledger.excel.writer import ExcelWriter
from shopledger.reports.csv_export import export_filename, to_csv


LEDGER_COLS = [
    (key, "text" if key == "date" else "amount", label)
    for key, label in LEDGER_EXPORT_COLUMNS
]


def _payload(ledger: ShopLedger) -> dict:
    p, r = ledger.profile, ledger.rates
    return {
        "shop": {
            "shop_name": p.shop_name,
            "team_leader": p.team_leader,
            "bring_forward_balance": p.bring_forward_balance,
            "security_deposit": p.security_deposit,
            "found": p.found,
        },
        "rates": {"dp_rate": r.dp_rate, "wd_rate": r.wd_rate, "add_rate": r.add_rate},
        "rows": ledger.rows,
        "totals": ledger.totals,
        "final_balance": ledger.final_balance,
    }


def generate_json(store: DataStore, shop: str) -> dict:
    return sanitize_for_json(_payload(store.ledger(shop)))


def generate_csv(store: DataStore, shop: str) -> tuple[str, str]:
    """Return (filename, CSV text): ledger rows followed by a TOTAL row."""
    ledger = store.ledger(shop)
    total = {"date": TOTAL_ROW_LABEL, **ledger.totals}
    rows = pd.concat([ledger.rows, pd.DataFrame([total])], ignore_index=True)
    label = ledger.profile.shop_name or shop
    return export_filename("Ledger", label), to_csv(rows, LEDGER_EXPORT_COLUMNS)


def generate_excel(store: DataStore, shop: str, output_path: str | Path) -> Path:
    ledger = store.ledger(shop)
    p, r = ledger.profile, ledger.rates
    ew = ExcelWriter()

    ws = ew.add_sheet("Ledger")
    ew.write_title(ws, p.shop_name or shop,
                   f"Shop Ledger  |  {len(ledger.dates):,} days  |  "
                   f"Generated {pd.Timestamp.now():%B %d, %Y}",
                   merge_cols=len(LEDGER_COLS))

    row = ew.write_info(ws, 4, [
        ("Team Leader", p.team_leader, "text"),
        ("Bring Forward Balance", p.bring_forward_balance, "amount"),
        ("Security Deposit", p.security_deposit, "amount"),
        ("DP Rate", r.dp_rate, "percent"),
        ("WD Rate", r.wd_rate, "percent"),
        ("ADD Rate", r.add_rate, "percent"),
    ])

    row = ew.write_kpi_row(ws, row, [
        (ledger.totals.get("deposit", 0.0), "DEPOSITS", "amount"),
        (ledger.totals.get("withdrawal", 0.0), "WITHDRAWALS", "amount"),
        (ledger.final_balance, "RUNNING BALANCE", "amount"),
    ])

    ew.write_table(
        ws, row, LEDGER_COLS, ledger.rows,
        highlight_fn=lambda _idx, rec: "opening" if rec.get("is_opening") else None,
        totals=ledger.totals,
        total_label=TOTAL_ROW_LABEL,
    )

    return ew.save(output_path)
