import types

import pytest
from openpyxl import load_workbook

from shopledger import cli


@pytest.fixture
def use_store(monkeypatch):
    """Point the CLI at a preloaded store instead of the live sheets."""

    def _use(store):
        monkeypatch.setattr(cli, "DataStore", lambda: types.SimpleNamespace(load=lambda: store))

    return _use


def test_summary_prints_shops_and_writes_csv(store, use_store, tmp_path, capsys):
    use_store(store)
    out_csv = tmp_path / "out" / "summary.csv"
    assert cli.main(["summary", "--leader", "MARY", "--csv", str(out_csv)]) == 0

    printed = capsys.readouterr().out
    assert "BETA SHOP" in printed
    assert "ACME STORE" not in printed
    assert out_csv.read_text(encoding="utf-8").startswith('"SHOP NAME","TEAM LEADER"')


def test_ledger_prints_final_balance_and_writes_excel(store, use_store, tmp_path, capsys):
    use_store(store)
    out_xlsx = tmp_path / "acme.xlsx"
    assert cli.main(["ledger", "acme store", "--excel", str(out_xlsx)]) == 0

    printed = capsys.readouterr().out
    assert "B/F Balance" in printed
    assert "1,339.00" in printed
    ws = load_workbook(out_xlsx)["Ledger"]
    assert ws["A1"].value == "ACME STORE"


def test_ledger_with_failed_source_exits_nonzero(make_store, sheet_routes, network_error, use_store, capsys):
    use_store(make_store(dict(sheet_routes, **{"TOTAL DEPOSIT": network_error})))
    assert cli.main(["ledger", "ACME STORE"]) == 1
    assert "failed to fetch TOTAL DEPOSIT" in capsys.readouterr().out


def test_transactions_prints_wallet_totals(store, use_store, capsys):
    use_store(store)
    assert cli.main(["transactions", "--wallet", "GCash"]) == 0
    printed = capsys.readouterr().out
    assert "TRANSACTIONS (2)" in printed
    assert "Total amount: 175.00" in printed


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()
