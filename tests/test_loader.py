import pytest
import requests

from shopledger.data.loader import (
    SheetClient,
    SheetFetchError,
    balance_source_urls,
    load_backup_index,
    load_backup_transactions,
    load_sources,
    transactions_frame,
)
from tests.conftest import BACKUP_INDEX_URL, BASE_URL, FakeResponse, FakeSession


def _client(routes):
    return SheetClient(base_url=BASE_URL, timeout=3, session=FakeSession(routes))


def test_url_for_quotes_sheet_names():
    client = _client({})
    assert client.url_for("abc", "STLM/TOPUP") == f"{BASE_URL}/abc/STLM%2FTOPUP"
    assert client.url_for("abc", "SHOPS BALANCE") == f"{BASE_URL}/abc/SHOPS%20BALANCE"


def test_fetch_returns_dict_rows_only():
    client = _client({"S": [{"A": 1}, "junk", None, {"B": 2}]})
    assert client.fetch(f"{BASE_URL}/id/S") == [{"A": 1}, {"B": 2}]


@pytest.mark.parametrize(
    "target, reason",
    [
        (FakeResponse(status_code=500), "HTTP 500"),
        (FakeResponse(text="<html>"), "response is not JSON"),
        (FakeResponse({"error": "nope"}), "expected a JSON array of rows"),
        (requests.exceptions.ConnectionError("refused"), "network error"),
        (requests.exceptions.ReadTimeout("slow"), "timed out"),
    ],
)
def test_fetch_failures_raise_sheet_fetch_error(target, reason):
    client = _client({"S": target})
    with pytest.raises(SheetFetchError) as exc:
        client.fetch(f"{BASE_URL}/id/S")
    assert reason in exc.value.reason


def test_missing_sheet_is_an_http_error():
    with pytest.raises(SheetFetchError, match="HTTP 404"):
        _client({}).fetch(f"{BASE_URL}/id/NOPE")


def test_default_client_uses_a_plain_get_per_fetch(monkeypatch):
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        return FakeResponse([{"A": 1}])

    monkeypatch.setattr(requests, "get", fake_get)
    client = SheetClient(base_url=BASE_URL, timeout=3)
    assert client.session is None
    assert client.fetch(f"{BASE_URL}/id/S") == [{"A": 1}]
    assert client.fetch(f"{BASE_URL}/id/T") == [{"A": 1}]
    assert calls == [(f"{BASE_URL}/id/S", 3), (f"{BASE_URL}/id/T", 3)]
    client.close()


def test_one_failing_source_does_not_block_the_others(sheet_routes, network_error):
    routes = dict(sheet_routes, **{"COMM": network_error, "STLM/TOPUP": FakeResponse(status_code=403)})
    client = _client(routes)
    result = load_sources(client, balance_source_urls(client))

    assert set(result.errors) == {"COMM", "STLM/TOPUP"}
    assert result.get("COMM") == []
    assert len(result.get("SHOPS BALANCE")) == 3
    assert result.counts()["TOTAL DEPOSIT"] == 1


def test_load_sources_with_nothing_to_load():
    result = load_sources(_client({}), {})
    assert result.rows == {} and result.errors == {}


def test_transactions_frame_merges_sources(sheet_routes):
    client = _client(sheet_routes)
    urls = {name: client.url_for("tx", name) for name in ("WD", "DP", "B2B")}
    df = transactions_frame(load_sources(client, urls))
    assert len(df) == 3
    assert sorted(df["source"].unique()) == ["DP", "WD"]


def test_backup_index_and_snapshot(sheet_routes):
    client = _client(sheet_routes)
    backups = load_backup_index(client, BACKUP_INDEX_URL)
    assert backups == {"2024-03-05": "https://backup.test/backup-0305"}

    df = load_backup_transactions(client, backups, "03/05/2024")
    assert df["reference"].tolist() == ["OLD"]
    assert load_backup_transactions(client, backups, "2024-03-06") is None


def test_unavailable_backup_index_is_empty(network_error):
    assert load_backup_index(_client({"index": network_error}), BACKUP_INDEX_URL) == {}
    assert load_backup_index(_client({}), "") == {}


def test_unfetchable_backup_snapshot_raises():
    client = _client({})
    with pytest.raises(SheetFetchError):
        load_backup_transactions(client, {"2024-03-05": "https://backup.test/gone"}, "2024-03-05")
