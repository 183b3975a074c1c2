"""Shared fixtures: canned sheet rows and an offline HTTP session.

Nothing here touches the network. ``FakeSession`` answers ``GET`` requests by
the last path segment of the URL (the sheet name, URL-decoded), so one route
table serves both workbooks and the backup snapshots.
"""

from __future__ import annotations

import copy
from urllib.parse import unquote

import pytest
import requests

from shopledger.data.loader import SheetClient
from shopledger.data.store import DataStore

BASE_URL = "https://sheets.test"
BACKUP_INDEX_URL = "https://backup.test/index"


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str | None = None) -> None:
        self.payload = payload
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self.text is not None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Route table: sheet name → rows, a FakeResponse, or an exception to raise."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.calls: list[str] = []
        self.closed = False

    def get(self, url: str, timeout=None):
        self.calls.append(url)
        name = unquote(url.rstrip("/").rsplit("/", 1)[-1])
        target = self.routes.get(name)
        if target is None:
            return FakeResponse(status_code=404)
        if isinstance(target, Exception):
            raise target
        if isinstance(target, FakeResponse):
            return target
        return FakeResponse(copy.deepcopy(target))

    def close(self) -> None:
        self.closed = True


def _balance_row(shop, leader, **values):
    row = {
        "SHOP NAME": shop,
        "TEAM LEADER": leader,
        "SECURITY DEPOSIT": "0",
        "BRING FORWARD BALANCE": "0",
        "TOTAL DEPOSIT": "0",
        "TOTAL WITHDAWAL": "0",
        "INTERNAL TRANSFER IN": "0",
        "INTERNAL TRANSAFER OUT": "0",
        "SETTLEMENT": "0",
        "SPECIAL PAYMENT": "0",
        "ADJUSTMENT": "0",
        "DP COMM": "0",
        "WD COMM": "0",
        "ADD COMM": "0",
    }
    row.update(values)
    return row


@pytest.fixture
def balance_rows():
    return [
        _balance_row(" acme  store ", "john", **{
            "SECURITY DEPOSIT": "200",
            "BRING FORWARD BALANCE": "1,000",
            "TOTAL DEPOSIT": "500",
            "TOTAL WITHDAWAL": "100",
            "DP COMM": "10",
        }),
        _balance_row("BETA SHOP", "MARY", **{
            "BRING FORWARD BALANCE": "(50)",
            "TOTAL DEPOSIT": "300",
            "INTERNAL TRANSFER IN": "25",
        }),
        _balance_row("Gamma Mart", "#N/A", **{"TOTAL DEPOSIT": "40"}),
    ]


@pytest.fixture
def sheet_routes(balance_rows):
    """Every source the store loads, all healthy."""
    return {
        "SHOPS BALANCE": balance_rows,
        "TOTAL DEPOSIT": [
            {"SHOP NAME": "ACME STORE", "DATE": "03/05/2024", "AMOUNT": "500"},
        ],
        "TOTAL WITHDRAWAL": [
            {"SHOP NAME": "acme store", "DATE": "2024-03-06", "AMOUNT": "100"},
        ],
        "STLM/TOPUP": [
            {"SHOP NAME": "ACME STORE", "DATE": "2024-03-06", "AMOUNT": "50", "MODE": "settlement"},
        ],
        "COMM": [
            {"SHOP NAME": "ACME STORE", "DP COMM": "2%", "WD COMM": "1", "ADD COMM": "0"},
        ],
        "WD": [
            {"SHOP NAME": "ACME STORE", "WALLET": "GCash", "TYPE": "WD", "AMOUNT": "100",
             "DATE": "2024-03-05", "LEADER": "JOHN", "REFERENCE": "R1"},
        ],
        "DP": [
            {"SHOP NAME": "ACME STORE", "WALLET": "Maya", "TYPE": "DP", "AMOUNT": "250",
             "DATE": "2024-03-05", "REFERENCE": "R2"},
            {"SHOP NAME": "BETA SHOP", "WALLET": "GCash", "TYPE": "DP", "AMOUNT": "75",
             "DATE": "2024-03-06", "REFERENCE": "R3"},
        ],
        "B2B": [],
        "index": [
            {"DATE": "03/05/2024", "URL": "https://backup.test/backup-0305"},
        ],
        "backup-0305": [
            {"SHOP NAME": "ACME STORE", "WALLET": "GCash", "TYPE": "WD", "AMOUNT": "999",
             "DATE": "2024-03-04", "REFERENCE": "OLD"},
        ],
    }


@pytest.fixture
def make_store():
    """Build a DataStore over a FakeSession; ``load=False`` leaves it empty."""

    def _make(routes: dict, load: bool = True) -> DataStore:
        client = SheetClient(base_url=BASE_URL, timeout=5, session=FakeSession(routes))
        store = DataStore(client, backup_index_url=BACKUP_INDEX_URL)
        return store.load() if load else store

    return _make


@pytest.fixture
def store(make_store, sheet_routes) -> DataStore:
    return make_store(sheet_routes)


@pytest.fixture
def network_error():
    return requests.exceptions.ConnectionError("connection refused")
