import pytest

from shopledger.config import SHOP_BALANCE_SHEET
from shopledger.data.loader import SheetFetchError
from shopledger.data.schemas import FilterState
from shopledger.data.store import DataStore, Snapshot, ViewState
from tests.conftest import FakeResponse


def test_load_builds_every_frame(store):
    snap = store.snapshot
    assert store.is_loaded
    assert len(snap.balances) == 3
    assert len(snap.transactions) == 3
    assert snap.backups == {"2024-03-05": "https://backup.test/backup-0305"}
    assert snap.balance_errors == {} and snap.transaction_errors == {}


def test_unloaded_store_is_empty(make_store, sheet_routes):
    store = make_store(sheet_routes, load=False)
    assert not store.is_loaded
    assert store.health()["loaded_at"] is None
    assert store.leaders() == []


def test_stale_load_is_discarded(make_store, sheet_routes):
    store = make_store(sheet_routes, load=False)
    older = store.request_load()
    newer = store.request_load()

    fresh = Snapshot.empty()
    assert store.commit(newer, fresh)
    assert not store.commit(older, Snapshot.empty())
    assert store.snapshot is fresh


def test_last_requested_load_wins_even_if_it_finishes_first(make_store, sheet_routes):
    store = make_store(sheet_routes, load=False)
    first = store.request_load()
    store.load()  # takes a newer ticket and commits
    kept = store.snapshot
    assert not store.commit(first, Snapshot.empty())
    assert store.snapshot is kept


def test_summary_view_filters_and_pages(store):
    view = store.summary_view(FilterState(leader="john"))
    assert isinstance(view, ViewState)
    assert view.filtered["shop_name"].tolist() == ["ACME STORE"]

    paged = store.summary_view(FilterState(per_page=2)).with_page(2)
    rows, meta = paged.page()
    assert rows["shop_name"].tolist() == ["GAMMA MART"]
    assert meta["page"] == 2 and meta["total_rows"] == 3


def test_view_state_changes_return_new_states(store):
    view = store.summary_view()
    narrowed = view.with_filters(FilterState(search="beta"))
    assert narrowed is not view
    assert len(view.filtered) == 3
    assert narrowed.filtered["shop_name"].tolist() == ["BETA SHOP"]


def test_summary_requires_the_balance_sheet(make_store, sheet_routes):
    store = make_store(dict(sheet_routes, **{SHOP_BALANCE_SHEET: FakeResponse(status_code=500)}))
    with pytest.raises(SheetFetchError) as exc:
        store.shop_summary()
    assert SHOP_BALANCE_SHEET in exc.value.source


def test_ledger_requires_every_balance_source(make_store, sheet_routes, network_error):
    store = make_store(dict(sheet_routes, COMM=network_error))
    # summary only needs SHOPS BALANCE
    assert len(store.shop_summary()) == 3
    with pytest.raises(SheetFetchError, match="COMM"):
        store.ledger("ACME STORE")


def test_transaction_sources_degrade_to_warnings(make_store, sheet_routes):
    store = make_store(dict(sheet_routes, WD=FakeResponse(status_code=502)))
    view = store.transactions(FilterState())
    assert view.warnings == {"WD": "HTTP 502"}
    assert len(view.frame) == 2


def test_dated_query_reads_backup_when_available(store):
    view = store.transactions(FilterState(date="2024-03-05", wallet="GCash"))
    assert view.backup_used
    assert view.notice is None
    # the backup snapshot is not re-filtered by date
    assert view.frame["reference"].tolist() == ["OLD"]


def test_dated_query_without_backup_filters_main_data(store):
    view = store.transactions(FilterState(date="03/06/2024"))
    assert not view.backup_used
    assert view.notice == "No backup available for this date. Showing main data."
    assert view.frame["reference"].tolist() == ["R3"]


def test_unreachable_backup_falls_back_with_warning(make_store, sheet_routes):
    routes = dict(sheet_routes)
    del routes["backup-0305"]
    view = make_store(routes).transactions(FilterState(date="2024-03-05"))
    assert not view.backup_used
    assert "BACKUP" in view.warnings
    assert sorted(view.frame["reference"]) == ["R1", "R2"]


def test_metadata_queries(store):
    assert store.leaders() == ["JOHN", "MARY"]
    assert store.wallets() == ["GCash", "Maya"]
    assert store.types() == ["DP", "WD"]
    assert store.shops() == ["ACME STORE", "BETA SHOP", "GAMMA MART"]

    health = store.health()
    assert health["loaded"] and health["backups"] == 1
    assert health["sources"]["SHOPS BALANCE"] == 3


def test_default_store_has_no_snapshot():
    store = DataStore(client=None)
    assert not store.is_loaded
    assert store.snapshot.balances.empty
