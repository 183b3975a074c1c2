"""
Filter state and typed results passed between the data and analytics layers.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

import pandas as pd

from shopledger.config import ROWS_PER_PAGE


@dataclass(frozen=True)
class FilterState:
    """Active dashboard filters. ``None``, ``""`` and ``"ALL"`` mean inactive."""
    shop: Optional[str] = None       # exact, canonical shop name
    wallet: Optional[str] = None     # exact
    type: Optional[str] = None       # exact
    leader: Optional[str] = None     # exact, case-insensitive
    date: Optional[str] = None       # exact, normalized YYYY-MM-DD
    search: Optional[str] = None     # substring of shop name, case-insensitive
    page: int = 1
    per_page: int = ROWS_PER_PAGE

    def with_page(self, page: int) -> "FilterState":
        return replace(self, page=page)

    @property
    def label(self) -> str:
        """Short label for export file names."""
        for value in (self.shop, self.leader, self.wallet, self.type, self.date):
            if value and value.strip().upper() != "ALL":
                return value.strip()
        return "All"


@dataclass(frozen=True)
class CommissionRates:
    """Commission percentages for one shop (2.0 means 2%)."""
    dp_rate: float = 0.0
    wd_rate: float = 0.0
    add_rate: float = 0.0


@dataclass(frozen=True)
class ShopProfile:
    """Opening figures for one shop from the balance sheet."""
    shop_name: str
    team_leader: str = "-"
    bring_forward_balance: float = 0.0
    security_deposit: float = 0.0
    found: bool = False


@dataclass
class ShopLedger:
    """Daily running-balance ledger for one shop."""
    profile: ShopProfile
    rates: CommissionRates
    rows: pd.DataFrame                      # opening row (optional) + one row per date
    totals: dict[str, float] = field(default_factory=dict)

    @property
    def final_balance(self) -> float:
        return float(self.totals.get("running_balance", self.profile.bring_forward_balance))

    @property
    def dates(self) -> list[str]:
        if self.rows.empty:
            return []
        return self.rows.loc[~self.rows["is_opening"], "date"].tolist()
