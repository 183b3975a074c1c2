"""
Cell parsing, header normalization, and typed frames for each sheet kind.
"""
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, Iterable, Mapping

import pandas as pd

from shopledger.config import (
    BALANCE_COLUMN_MAP,
    BALANCE_NUMERIC_COLS,
    COMMISSION_COLUMN_MAP,
    DATE_FORMATS,
    FLOW_COLUMN_MAP,
    MISSING_TEXT,
    TRANSACTION_COLUMN_MAP,
    TRANSACTION_TEXT_COLS,
)


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_PARENS_RE = re.compile(r"^\((.*)\)$")
_STRIP_RE = re.compile(r"[,\s]")


def parse_number(raw: Any) -> float:
    """Parse a spreadsheet number: thousands commas, ``(X)`` as negative.

    Total: anything empty, non-numeric or non-finite becomes 0.0.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0

    s = _STRIP_RE.sub("", str(raw))
    m = _PARENS_RE.match(s)
    if m:
        s = "-" + m.group(1)
    if not _NUMBER_RE.match(s):
        return 0.0
    value = float(s)
    return value if math.isfinite(value) else 0.0


def parse_rate(raw: Any) -> float:
    """Commission percentage; tolerates a trailing ``%``."""
    if isinstance(raw, str):
        raw = raw.strip().rstrip("%")
    return parse_number(raw)


_ISO_DATE_RE = r"^\d{4}-\d{2}-\d{2}"


def parse_dates(values: pd.Series) -> pd.Series:
    """Column of raw date cells → ``YYYY-MM-DD`` strings, ``""`` when invalid.

    ISO 8601 is tried first, then DATE_FORMATS in order; the first format
    that parses a cell wins. Aware datetimes are converted to UTC before
    the date part is taken; naive ones are read as-is.
    """
    text = values.fillna("").astype(str).str.replace(r"\s+", " ", regex=True).str.strip()
    iso = text.where(text.str.match(_ISO_DATE_RE))
    parsed = pd.to_datetime(iso, format="ISO8601", errors="coerce", utc=True)
    for fmt in DATE_FORMATS:
        parsed = parsed.combine_first(pd.to_datetime(text, format=fmt, errors="coerce", utc=True))
    return parsed.dt.strftime("%Y-%m-%d").fillna("").astype(object)


def normalize_date(raw: Any) -> str:
    """Return ``YYYY-MM-DD`` for a valid calendar date, else ``""``."""
    if raw is None:
        return ""
    if isinstance(raw, dt.datetime):
        if raw.tzinfo is not None:
            raw = raw.astimezone(dt.timezone.utc)
        return raw.date().isoformat()
    if isinstance(raw, dt.date):
        return raw.isoformat()
    return parse_dates(pd.Series([raw], dtype=object)).iloc[0]


def _canonical(text: Any) -> str:
    if text is None:
        return ""
    return " ".join(str(text).split()).upper()


def normalize_shop_name(raw: Any) -> str:
    """Trim, collapse whitespace runs, uppercase. The shop join key."""
    return _canonical(raw)


def normalize_key(raw_column_name: Any) -> str:
    """Canonical sheet header: collapsed whitespace, uppercase."""
    return _canonical(raw_column_name)


def normalize_row(raw_row: Mapping[str, Any]) -> dict[str, str]:
    """Normalize headers and trim values; the raw row is left untouched."""
    out: dict[str, str] = {}
    for key, value in raw_row.items():
        out[normalize_key(key)] = "" if value is None else str(value).strip()
    return out


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------

def _coalesce(row: Mapping[str, str], column_map: Mapping[str, str]) -> dict[str, str]:
    """Map aliased headers onto internal columns; first non-empty alias wins."""
    out: dict[str, str] = {}
    for header, col in column_map.items():
        if not out.get(col):
            out[col] = row.get(header, "")
    return out


def normalize_frame(rows: Iterable[Mapping[str, Any]], column_map: Mapping[str, str]) -> pd.DataFrame:
    """Build a string DataFrame with one column per internal name in column_map."""
    columns = list(dict.fromkeys(column_map.values()))
    records = [_coalesce(normalize_row(r), column_map) for r in rows]
    return pd.DataFrame(records, columns=columns, dtype=object)


def normalize_balances(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """SHOPS BALANCE sheet → one typed row per sheet row."""
    df = normalize_frame(rows, BALANCE_COLUMN_MAP)
    df["shop_name"] = df["shop_name"].map(normalize_shop_name)
    df["team_leader"] = df["team_leader"].map(_canonical)
    for col in BALANCE_NUMERIC_COLS:
        df[col] = df[col].map(parse_number).astype(float)
    return df


def normalize_flows(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Deposit, withdrawal, or settlement sheet → shop/date/amount/mode."""
    df = normalize_frame(rows, FLOW_COLUMN_MAP)
    df["shop_name"] = df["shop_name"].map(normalize_shop_name)
    df["date"] = parse_dates(df["date"])
    df["amount"] = df["amount"].map(parse_number).astype(float)
    df["mode"] = df["mode"].map(_canonical)
    return df


def normalize_commissions(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    df = normalize_frame(rows, COMMISSION_COLUMN_MAP)
    df["shop_name"] = df["shop_name"].map(normalize_shop_name)
    for col in ("dp_rate", "wd_rate", "add_rate"):
        df[col] = df[col].map(parse_rate).astype(float)
    return df


def normalize_transactions(rows: Iterable[Mapping[str, Any]], source: str = "") -> pd.DataFrame:
    """Wallet transaction sheet (WD/DP/B2B or a backup) → Transaction frame."""
    df = normalize_frame(rows, TRANSACTION_COLUMN_MAP)
    for col in TRANSACTION_TEXT_COLS:
        df[col] = df[col].where(df[col] != "", MISSING_TEXT)
    df["amount"] = df["amount"].map(parse_number).astype(float)
    df["date"] = parse_dates(df["date"])
    df["shop_name"] = df["shop_name"].map(normalize_shop_name)
    df["source"] = source
    return df
