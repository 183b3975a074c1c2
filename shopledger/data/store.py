"""
DataStore: snapshot of every sheet source, rebuilt on each load.

Loads follow a last-requested-wins policy: every load takes a ticket and a
finished load only replaces the snapshot when no newer load was requested
in the meantime. Derived views (summary, ledger, transactions) are computed
fresh from the snapshot on every call and never cached.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

import pandas as pd

from shopledger.config import (
    BACKUP_INDEX_URL,
    BALANCE_SOURCES,
    COMMISSION_SHEET,
    DEPOSIT_SHEET,
    SETTLEMENT_SHEET,
    SHOP_BALANCE_SHEET,
    WITHDRAWAL_SHEET,
)
from shopledger.data.loader import (
    SheetClient,
    SheetFetchError,
    balance_source_urls,
    load_backup_index,
    load_backup_transactions,
    load_sources,
    transaction_source_urls,
    transactions_frame,
)
from shopledger.data.normalize import (
    normalize_balances,
    normalize_commissions,
    normalize_flows,
    normalize_transactions,
)
from shopledger.data.schemas import FilterState, ShopLedger
from shopledger.analytics.balances import build_shop_summary, distinct_values, team_leaders
from shopledger.analytics.filters import apply_filters, is_active, paginate
from shopledger.analytics.ledger import build_shop_ledger


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Snapshot:
    """Normalized frames from one load cycle."""
    balances: pd.DataFrame
    deposits: pd.DataFrame
    withdrawals: pd.DataFrame
    settlements: pd.DataFrame
    commissions: pd.DataFrame
    transactions: pd.DataFrame
    backups: dict[str, str] = field(default_factory=dict)
    balance_errors: dict[str, str] = field(default_factory=dict)
    transaction_errors: dict[str, str] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)
    loaded_at: datetime = field(default_factory=datetime.now)

    def require(self, *names: str) -> None:
        """Raise SheetFetchError if any of the named balance sources failed."""
        failed = [n for n in names if n in self.balance_errors]
        if failed:
            reasons = "; ".join(f"{n}: {self.balance_errors[n]}" for n in failed)
            raise SheetFetchError(", ".join(failed), reasons)

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls(
            balances=normalize_balances([]),
            deposits=normalize_flows([]),
            withdrawals=normalize_flows([]),
            settlements=normalize_flows([]),
            commissions=normalize_commissions([]),
            transactions=normalize_transactions([]),
        )


def fetch_snapshot(client: SheetClient, backup_index_url: str = BACKUP_INDEX_URL) -> Snapshot:
    """Fetch and normalize every configured source."""
    print("Loading shop balance workbook...")
    balance = load_sources(client, balance_source_urls(client))
    print("Loading transaction workbook...")
    tx = load_sources(client, transaction_source_urls(client))
    backups = load_backup_index(client, backup_index_url)
    if backups:
        print(f"  Backup index: {len(backups):,} dated snapshots")

    return Snapshot(
        balances=normalize_balances(balance.get(SHOP_BALANCE_SHEET)),
        deposits=normalize_flows(balance.get(DEPOSIT_SHEET)),
        withdrawals=normalize_flows(balance.get(WITHDRAWAL_SHEET)),
        settlements=normalize_flows(balance.get(SETTLEMENT_SHEET)),
        commissions=normalize_commissions(balance.get(COMMISSION_SHEET)),
        transactions=transactions_frame(tx),
        backups=backups,
        balance_errors=balance.errors,
        transaction_errors=tx.errors,
        counts={**balance.counts(), **tx.counts()},
    )


# ---------------------------------------------------------------------------
# View state
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ViewState:
    """A record set paired with its filters; every change returns a new state."""
    records: pd.DataFrame
    filters: FilterState = field(default_factory=FilterState)

    def with_filters(self, filters: FilterState) -> "ViewState":
        return ViewState(self.records, filters)

    def with_page(self, page: int) -> "ViewState":
        return ViewState(self.records, self.filters.with_page(page))

    @property
    def filtered(self) -> pd.DataFrame:
        return apply_filters(self.records, self.filters)

    def page(self) -> tuple[pd.DataFrame, dict]:
        return paginate(self.filtered, self.filters.page, self.filters.per_page)


@dataclass(eq=False)
class TransactionView:
    frame: pd.DataFrame
    backup_used: bool = False
    warnings: dict[str, str] = field(default_factory=dict)
    notice: Optional[str] = None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class DataStore:
    """Latest committed snapshot plus derived, per-call views."""

    def __init__(self, client: SheetClient | None = None, backup_index_url: str = BACKUP_INDEX_URL) -> None:
        self.client = client or SheetClient()
        self.backup_index_url = backup_index_url
        self.snapshot: Snapshot = Snapshot.empty()
        self._lock = threading.Lock()
        self._requested = 0
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def request_load(self) -> int:
        """Take a ticket for a new load; newer tickets supersede older ones."""
        with self._lock:
            self._requested += 1
            return self._requested

    def commit(self, ticket: int, snapshot: Snapshot) -> bool:
        """Install a finished load unless a newer one was requested since."""
        with self._lock:
            if ticket != self._requested:
                print(f"  Discarding stale load #{ticket} (latest request is #{self._requested})")
                return False
            self.snapshot = snapshot
            self._loaded = True
            return True

    def load(self, ticket: Optional[int] = None) -> "DataStore":
        """Fetch every source and install the result (unless superseded)."""
        if ticket is None:
            ticket = self.request_load()
        snapshot = fetch_snapshot(self.client, self.backup_index_url)
        if self.commit(ticket, snapshot):
            print(f"  Snapshot #{ticket}: {len(snapshot.balances):,} balance rows, "
                  f"{len(snapshot.transactions):,} transactions")
        return self

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def shop_summary(self) -> pd.DataFrame:
        """Per-shop balance summary; needs the SHOPS BALANCE sheet."""
        snap = self.snapshot
        snap.require(SHOP_BALANCE_SHEET)
        return build_shop_summary(snap.balances)

    def summary_view(self, filters: FilterState | None = None) -> ViewState:
        return ViewState(self.shop_summary(), filters or FilterState())

    def ledger(self, shop: str) -> ShopLedger:
        """Daily ledger for one shop; needs every balance-workbook sheet."""
        snap = self.snapshot
        snap.require(*BALANCE_SOURCES)
        return build_shop_ledger(
            shop,
            deposits=snap.deposits,
            withdrawals=snap.withdrawals,
            settlements=snap.settlements,
            balances=snap.balances,
            commissions=snap.commissions,
        )

    def transactions(self, filters: FilterState | None = None) -> TransactionView:
        """Filtered transactions; a date with a backup snapshot reads that snapshot."""
        filters = filters or FilterState()
        snap = self.snapshot
        warnings = dict(snap.transaction_errors)

        if is_active(filters.date):
            try:
                backup = load_backup_transactions(self.client, snap.backups, filters.date)
            except SheetFetchError as exc:
                backup = None
                warnings["BACKUP"] = exc.reason
            if backup is not None:
                frame = apply_filters(backup, replace(filters, date=None))
                return TransactionView(frame=frame, backup_used=True)

        notice = None
        if is_active(filters.date):
            notice = "No backup available for this date. Showing main data."
        return TransactionView(
            frame=apply_filters(snap.transactions, filters),
            warnings=warnings,
            notice=notice,
        )

    # ------------------------------------------------------------------
    # Metadata queries
    # ------------------------------------------------------------------

    def leaders(self) -> list[str]:
        return team_leaders(self.snapshot.balances)

    def wallets(self) -> list[str]:
        return distinct_values(self.snapshot.transactions, "wallet")

    def types(self) -> list[str]:
        return distinct_values(self.snapshot.transactions, "type")

    def shops(self) -> list[str]:
        names = self.snapshot.balances["shop_name"] if not self.snapshot.balances.empty else []
        return sorted({n for n in names if n})

    def health(self) -> dict:
        snap = self.snapshot
        return {
            "loaded": self._loaded,
            "loaded_at": snap.loaded_at.isoformat() if self._loaded else None,
            "sources": snap.counts,
            "errors": {**snap.balance_errors, **snap.transaction_errors},
            "backups": len(snap.backups),
        }
