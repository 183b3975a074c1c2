"""
Filter engine: conjunction of equality/substring predicates, plus paging.
"""
from __future__ import annotations

import math
from typing import Optional

import pandas as pd

from shopledger.config import ALL_SENTINEL, ROWS_PER_PAGE
from shopledger.data.normalize import normalize_date, normalize_shop_name
from shopledger.data.schemas import FilterState


def is_active(value: Optional[str]) -> bool:
    """``None``, blank, and ``ALL`` (any case) switch a filter off."""
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text.upper() != ALL_SENTINEL


def _column(df: pd.DataFrame, *candidates: str) -> Optional[str]:
    return next((c for c in candidates if c in df.columns), None)


def apply_filters(df: pd.DataFrame, filters: FilterState | None) -> pd.DataFrame:
    """Rows matching every active filter.

    A filter on a column the frame does not have matches nothing.
    Returns a new frame; the input is not modified.
    """
    if filters is None or df.empty:
        return df.copy()

    mask = pd.Series(True, index=df.index)

    def _no_match() -> pd.Series:
        return pd.Series(False, index=df.index)

    if is_active(filters.shop):
        col = _column(df, "shop_name")
        mask &= df[col].astype(str) == normalize_shop_name(filters.shop) if col else _no_match()

    for attr, col in (("wallet", "wallet"), ("type", "type")):
        value = getattr(filters, attr)
        if is_active(value):
            mask &= df[col].astype(str) == value if col in df.columns else _no_match()

    if is_active(filters.leader):
        col = _column(df, "team_leader", "leader")
        target = filters.leader.strip().upper()
        mask &= df[col].astype(str).str.strip().str.upper() == target if col else _no_match()

    if is_active(filters.date):
        target = normalize_date(filters.date)
        mask &= df["date"].astype(str) == target if "date" in df.columns and target else _no_match()

    if is_active(filters.search):
        col = _column(df, "shop_name")
        needle = filters.search.strip().upper()
        mask &= df[col].astype(str).str.upper().str.contains(needle, regex=False) if col else _no_match()

    return df[mask].copy()


def paginate(df: pd.DataFrame, page: int = 1, per_page: int = ROWS_PER_PAGE) -> tuple[pd.DataFrame, dict]:
    """Slice one page; the page is clamped into [1, total_pages]."""
    per_page = max(1, int(per_page))
    total_pages = max(1, math.ceil(len(df) / per_page))
    page = min(max(1, int(page)), total_pages)
    start = (page - 1) * per_page
    meta = {
        "page": page,
        "per_page": per_page,
        "total_pages": total_pages,
        "total_rows": len(df),
        "has_prev": page > 1,
        "has_next": page < total_pages,
    }
    return df.iloc[start:start + per_page], meta
