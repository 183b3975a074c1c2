"""
Shop balance aggregation: per-shop summary, totals, and grouped sums.

The running balance sign convention lives in RUNNING_BALANCE_SIGNS and is
shared by the summary and the daily ledger.
"""
from __future__ import annotations

from typing import Mapping

import pandas as pd

from shopledger.config import BALANCE_NUMERIC_COLS, LEADER_PLACEHOLDERS
from shopledger.analytics.common import column_totals


# +1 adds to the balance, -1 deducts from it
RUNNING_BALANCE_SIGNS = {
    "bring_forward_balance": 1,
    "total_deposit": 1,
    "total_withdrawal": -1,
    "transfer_in": 1,
    "transfer_out": -1,
    "settlement": -1,
    "special_payment": -1,
    "adjustment": 1,
    "dp_comm": -1,
    "wd_comm": -1,
    "add_comm": -1,
}

SUMMARY_COLUMNS = ["shop_name", "team_leader", *BALANCE_NUMERIC_COLS, "running_balance"]


def running_balance(values: Mapping | pd.DataFrame):
    """Apply the sign convention to one row (mapping) or a whole frame (Series)."""
    return sum(sign * values[col] for col, sign in RUNNING_BALANCE_SIGNS.items())


def build_shop_summary(balances: pd.DataFrame) -> pd.DataFrame:
    """One row per shop: summed accumulators plus the derived running balance.

    Shops keep first-appearance order and the team leader of their first
    row. Rows without a shop name are dropped. The running balance is
    derived from the accumulated fields, never summed across rows.
    """
    if balances.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    rows = balances[balances["shop_name"] != ""]
    if rows.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    summary = rows.groupby("shop_name", sort=False).agg(
        team_leader=("team_leader", "first"),
        **{col: (col, "sum") for col in BALANCE_NUMERIC_COLS},
    ).reset_index()
    summary["running_balance"] = running_balance(summary)
    return summary[SUMMARY_COLUMNS]


def summary_totals(summary: pd.DataFrame) -> dict[str, float]:
    """Totals cards: every numeric column of a (filtered) summary."""
    return column_totals(summary, [*BALANCE_NUMERIC_COLS, "running_balance"])


def totals_by(transactions: pd.DataFrame, key: str = "wallet") -> pd.DataFrame:
    """Sum transaction amounts per wallet, date, or shop (first-seen order)."""
    if transactions.empty or key not in transactions.columns:
        return pd.DataFrame(columns=[key, "amount", "count"])
    return transactions.groupby(key, sort=False).agg(
        amount=("amount", "sum"),
        count=("amount", "size"),
    ).reset_index()


def team_leaders(df: pd.DataFrame) -> list[str]:
    """Distinct uppercased leaders, sorted, without blanks or #N/A markers."""
    col = "team_leader" if "team_leader" in df.columns else "leader"
    if df.empty or col not in df.columns:
        return []
    leaders = df[col].astype(str).str.strip().str.upper().unique().tolist()
    return sorted(name for name in leaders if name not in LEADER_PLACEHOLDERS)


def distinct_values(df: pd.DataFrame, column: str) -> list[str]:
    """Sorted distinct values of one column (drop-down options)."""
    if df.empty or column not in df.columns:
        return []
    return sorted(df[column].dropna().astype(str).unique().tolist())
