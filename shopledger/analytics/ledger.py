"""
Per-shop daily ledger with a running balance.

Deposits, withdrawals, and settlement/top-up records for one shop are summed
per date, commissions are charged on the day's deposit and withdrawal totals,
and the balance is carried forward date by date from the bring-forward
balance.
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable

import pandas as pd

from shopledger.config import (
    LEDGER_FLOW_COLS,
    OPENING_ROW_LABEL,
    SETTLEMENT_MODES,
)
from shopledger.data.normalize import normalize_shop_name
from shopledger.data.schemas import CommissionRates, ShopLedger, ShopProfile
from shopledger.analytics.common import column_totals, safe_float


# Same convention as the shop summary, with per-date flows
LEDGER_SIGNS = {
    "deposit": 1,
    "withdrawal": -1,
    "transfer_in": 1,
    "transfer_out": -1,
    "settlement": -1,
    "special_payment": -1,
    "adjustment": 1,
    "security_deposit": -1,
    "dp_comm": -1,
    "wd_comm": -1,
    "add_comm": -1,
}

LEDGER_COLUMNS = ["date", *LEDGER_FLOW_COLS, "running_balance", "is_opening"]


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def _for_shop(df: pd.DataFrame, shop_key: str) -> pd.DataFrame:
    if not shop_key or df.empty or "shop_name" not in df.columns:
        return df.iloc[0:0]
    return df[df["shop_name"] == shop_key]


def lookup_shop_profile(balances: pd.DataFrame, shop: str) -> ShopProfile:
    """Bring-forward balance, security deposit, and leader of a shop's first balance row."""
    key = normalize_shop_name(shop)
    match = _for_shop(balances, key)
    if match.empty:
        return ShopProfile(shop_name=key)
    row = match.iloc[0]
    return ShopProfile(
        shop_name=key,
        team_leader=row["team_leader"] or "-",
        bring_forward_balance=safe_float(row["bring_forward_balance"]),
        security_deposit=safe_float(row["security_deposit"]),
        found=True,
    )


def lookup_commission_rates(commissions: pd.DataFrame, shop: str) -> CommissionRates:
    """Commission percentages for a shop; a shop missing from the sheet pays none."""
    match = _for_shop(commissions, normalize_shop_name(shop))
    if match.empty:
        return CommissionRates()
    row = match.iloc[0]
    return CommissionRates(
        dp_rate=safe_float(row["dp_rate"]),
        wd_rate=safe_float(row["wd_rate"]),
        add_rate=safe_float(row["add_rate"]),
    )


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------

def ledger_from_deltas(opening: float, deltas: Iterable[tuple[str, float]]) -> list[tuple[str, float]]:
    """Carry a balance through ordered (date, signed delta) pairs.

    Returns (date, balance after that date). Order matters for the
    intermediate balances; the last balance is opening + sum of deltas.
    """
    balance = opening
    out = []
    for date, delta in deltas:
        balance += delta
        out.append((date, balance))
    return out


def _daily_sums(df: pd.DataFrame, dates: list[str]) -> pd.Series:
    if df.empty:
        return pd.Series(0.0, index=dates)
    return df.groupby("date")["amount"].sum().reindex(dates, fill_value=0.0).astype(float)


def _settlement_buckets(df: pd.DataFrame, dates: list[str]) -> pd.DataFrame:
    """Per-date settlement sums, one column per mode bucket (IN, OUT, ...)."""
    buckets = list(SETTLEMENT_MODES.values())
    if df.empty:
        return pd.DataFrame(0.0, index=dates, columns=buckets)
    tagged = df.assign(bucket=df["mode"].map(SETTLEMENT_MODES)).dropna(subset=["bucket"])
    if tagged.empty:
        return pd.DataFrame(0.0, index=dates, columns=buckets)
    pivot = tagged.pivot_table(
        index="date", columns="bucket", values="amount", aggfunc="sum", fill_value=0.0
    )
    return pivot.reindex(index=dates, columns=buckets, fill_value=0.0).astype(float)


def _calendar_order(dates: Iterable[str]) -> list[str]:
    return sorted({d for d in dates if d}, key=dt.date.fromisoformat)


def build_shop_ledger(
    shop: str,
    deposits: pd.DataFrame,
    withdrawals: pd.DataFrame,
    settlements: pd.DataFrame,
    balances: pd.DataFrame,
    commissions: pd.DataFrame,
) -> ShopLedger:
    """Daily ledger for one shop, ordered by calendar date.

    Records with an unparseable (empty) date cannot be placed on the
    calendar and are left out.
    """
    key = normalize_shop_name(shop)
    profile = lookup_shop_profile(balances, key)
    rates = lookup_commission_rates(commissions, key)

    dep = _for_shop(deposits, key)
    wd = _for_shop(withdrawals, key)
    stlm = _for_shop(settlements, key)

    dates = _calendar_order([*dep["date"], *wd["date"], *stlm["date"]]) if key else []

    daily = pd.DataFrame(index=dates)
    daily["deposit"] = _daily_sums(dep, dates)
    daily["withdrawal"] = _daily_sums(wd, dates)
    daily = daily.join(_settlement_buckets(stlm, dates))
    daily["dp_comm"] = daily["deposit"] * rates.dp_rate / 100
    daily["wd_comm"] = daily["withdrawal"] * rates.wd_rate / 100
    daily["add_comm"] = daily["deposit"] * rates.add_rate / 100

    deltas = sum(sign * daily[col] for col, sign in LEDGER_SIGNS.items()) if dates else []
    carried = ledger_from_deltas(profile.bring_forward_balance, zip(dates, deltas))

    rows = []
    if profile.bring_forward_balance:
        opening = {col: 0.0 for col in LEDGER_FLOW_COLS}
        opening["security_deposit"] = profile.security_deposit
        rows.append({
            "date": OPENING_ROW_LABEL,
            **opening,
            "running_balance": profile.bring_forward_balance,
            "is_opening": True,
        })
    for date, balance in carried:
        flows = daily.loc[date, LEDGER_FLOW_COLS]
        rows.append({
            "date": date,
            **{col: float(flows[col]) for col in LEDGER_FLOW_COLS},
            "running_balance": balance,
            "is_opening": False,
        })

    totals = column_totals(daily, LEDGER_FLOW_COLS)
    totals["running_balance"] = carried[-1][1] if carried else profile.bring_forward_balance

    return ShopLedger(
        profile=profile,
        rates=rates,
        rows=pd.DataFrame(rows, columns=LEDGER_COLUMNS),
        totals=totals,
    )
