"""
Sheet fetching (opensheet-style JSON endpoints), per-source loading, backups.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import quote

import pandas as pd
import requests

from shopledger.config import (
    BACKUP_INDEX_COLUMN_MAP,
    BALANCE_SHEET_ID,
    BALANCE_SOURCES,
    OPENSHEET_BASE,
    REQUEST_TIMEOUT,
    TRANSACTION_SHEET_ID,
    TRANSACTION_SOURCES,
)
from shopledger.data.normalize import normalize_date, normalize_frame, normalize_transactions, parse_dates


class SheetFetchError(Exception):
    """A sheet could not be fetched or did not contain a JSON array of rows."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

class SheetClient:
    """Fetches one sheet per request; a single attempt, no retries.

    Without an explicit session each fetch is a standalone ``requests.get``;
    no connection state is shared across threads.
    """

    def __init__(
        self,
        base_url: str = OPENSHEET_BASE,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def url_for(self, sheet_id: str, sheet_name: str) -> str:
        return f"{self.base_url}/{sheet_id}/{quote(sheet_name, safe='')}"

    def fetch(self, url: str) -> list[dict]:
        """GET a sheet and return its rows (mappings of header → cell)."""
        get = self.session.get if self.session is not None else requests.get
        try:
            resp = get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise SheetFetchError(url, f"timed out after {self.timeout:g}s") from exc
        except requests.exceptions.RequestException as exc:
            raise SheetFetchError(url, f"network error: {exc}") from exc

        if not resp.ok:
            raise SheetFetchError(url, f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise SheetFetchError(url, "response is not JSON") from exc
        if not isinstance(data, list):
            raise SheetFetchError(url, "expected a JSON array of rows")
        return [row for row in data if isinstance(row, dict)]

    def close(self) -> None:
        if self.session is not None:
            self.session.close()


def balance_source_urls(client: SheetClient) -> dict[str, str]:
    return {name: client.url_for(BALANCE_SHEET_ID, name) for name in BALANCE_SOURCES}


def transaction_source_urls(client: SheetClient) -> dict[str, str]:
    return {name: client.url_for(TRANSACTION_SHEET_ID, name) for name in TRANSACTION_SOURCES}


# ---------------------------------------------------------------------------
# Multi-source loading
# ---------------------------------------------------------------------------

@dataclass
class LoadResult:
    """Raw rows per source; failed sources hold [] and an error message."""
    rows: dict[str, list[dict]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> list[dict]:
        return self.rows.get(name, [])

    def counts(self) -> dict[str, int]:
        return {name: len(rows) for name, rows in self.rows.items()}


def load_sources(client: SheetClient, sources: Mapping[str, str], max_workers: int = 5) -> LoadResult:
    """Fetch independent sources in parallel; one failure never blocks the others."""
    result = LoadResult()
    if not sources:
        return result

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(sources)))) as pool:
        futures = {name: pool.submit(client.fetch, url) for name, url in sources.items()}

    for name, future in futures.items():
        try:
            result.rows[name] = future.result()
        except SheetFetchError as exc:
            result.rows[name] = []
            result.errors[name] = exc.reason
            print(f"  Warning: skipping {name}: {exc.reason}")
        else:
            print(f"  {name}: {len(result.rows[name]):,} rows")
    return result


# ---------------------------------------------------------------------------
# Transactions & backups
# ---------------------------------------------------------------------------

def transactions_frame(result: LoadResult) -> pd.DataFrame:
    """Concatenate the WD, DP, and B2B sheets into one Transaction frame."""
    frames = [normalize_transactions(result.get(name), name) for name in TRANSACTION_SOURCES]
    frames = [f for f in frames if not f.empty]
    if not frames:
        return normalize_transactions([])
    return pd.concat(frames, ignore_index=True)


def load_backup_index(client: SheetClient, url: str) -> dict[str, str]:
    """Backup_Index sheet → {YYYY-MM-DD: snapshot URL}. Unavailable index → {}."""
    if not url:
        return {}
    try:
        rows = client.fetch(url)
    except SheetFetchError as exc:
        print(f"  Warning: backup index unavailable: {exc.reason}")
        return {}

    df = normalize_frame(rows, BACKUP_INDEX_COLUMN_MAP)
    index: dict[str, str] = {}
    for key, snapshot_url in zip(parse_dates(df["date"]), df["url"]):
        if key and snapshot_url:
            index.setdefault(key, snapshot_url)
    return index


def load_backup_transactions(
    client: SheetClient,
    backups: Mapping[str, str],
    date: str,
) -> Optional[pd.DataFrame]:
    """Transactions from the backup snapshot for a date, or None if there is none.

    Raises SheetFetchError when the snapshot exists but cannot be fetched.
    """
    url = backups.get(normalize_date(date))
    if not url:
        return None
    return normalize_transactions(client.fetch(url), "BACKUP")

