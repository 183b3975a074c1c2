import pandas as pd
import pytest

from shopledger.analytics.filters import apply_filters, is_active, paginate
from shopledger.data.normalize import normalize_transactions
from shopledger.data.schemas import FilterState


@pytest.fixture
def tx():
    return normalize_transactions([
        {"SHOP NAME": "A", "WALLET": "GCash", "TYPE": "DP", "AMOUNT": "10", "DATE": "2024-03-05", "LEADER": "john"},
        {"SHOP NAME": "B", "WALLET": "Maya", "TYPE": "WD", "AMOUNT": "20", "DATE": "03/06/2024", "LEADER": "MARY"},
        {"SHOP NAME": "a", "WALLET": "Maya", "TYPE": "DP", "AMOUNT": "30", "DATE": "2024-03-06"},
    ])


@pytest.mark.parametrize("value, active", [
    (None, False), ("", False), ("  ", False), ("ALL", False), ("all", False), ("All", False),
    ("GCash", True), ("0", True),
])
def test_is_active(value, active):
    assert is_active(value) is active


def test_shop_filter_matches_canonical_name(tx):
    out = apply_filters(tx, FilterState(shop=" a "))
    assert out["amount"].tolist() == [10.0, 30.0]


def test_shop_and_wallet_are_conjunctive(tx):
    out = apply_filters(tx, FilterState(shop="A", wallet="GCash"))
    assert out["amount"].tolist() == [10.0]
    assert apply_filters(tx, FilterState(shop="A", wallet="Nope")).empty


def test_wallet_match_is_exact(tx):
    assert apply_filters(tx, FilterState(wallet="gcash")).empty


def test_all_sentinel_disables_a_filter(tx):
    out = apply_filters(tx, FilterState(shop="ALL", wallet="Maya", type="all"))
    assert out["amount"].tolist() == [20.0, 30.0]


def test_no_filters_return_everything(tx):
    out = apply_filters(tx, FilterState())
    assert len(out) == len(tx)
    assert out is not tx


def test_date_filter_compares_normalized_dates(tx):
    out = apply_filters(tx, FilterState(date="03/06/2024"))
    assert out["amount"].tolist() == [20.0, 30.0]
    assert apply_filters(tx, FilterState(date="not a date")).empty


def test_leader_filter_is_case_insensitive(tx):
    out = apply_filters(tx, FilterState(leader="JOHN"))
    assert out["amount"].tolist() == [10.0]


def test_search_is_case_insensitive_substring():
    df = pd.DataFrame({"shop_name": ["ACME STORE", "BETA SHOP", "ACME (NORTH)"]})
    out = apply_filters(df, FilterState(search="acme"))
    assert out["shop_name"].tolist() == ["ACME STORE", "ACME (NORTH)"]
    # regex metacharacters are literal
    assert apply_filters(df, FilterState(search="(north")).shape[0] == 1


def test_filter_on_missing_column_matches_nothing():
    df = pd.DataFrame({"shop_name": ["A"]})
    assert apply_filters(df, FilterState(wallet="GCash")).empty
    assert apply_filters(df, FilterState(date="2024-03-05")).empty


def test_input_is_not_modified(tx):
    before = tx.copy()
    apply_filters(tx, FilterState(shop="A", wallet="GCash"))
    pd.testing.assert_frame_equal(tx, before)


def test_paginate_clamps_page():
    df = pd.DataFrame({"n": range(45)})
    page, meta = paginate(df, page=1, per_page=20)
    assert page["n"].tolist() == list(range(20))
    assert meta == {"page": 1, "per_page": 20, "total_pages": 3, "total_rows": 45,
                    "has_prev": False, "has_next": True}

    page, meta = paginate(df, page=99, per_page=20)
    assert meta["page"] == 3
    assert page["n"].tolist() == list(range(40, 45))

    _, meta = paginate(df, page=0, per_page=20)
    assert meta["page"] == 1


def test_paginate_empty_frame_has_one_page():
    page, meta = paginate(pd.DataFrame({"n": []}), page=5)
    assert page.empty
    assert meta["total_pages"] == 1 and meta["page"] == 1


def test_all_wallet_with_type_filter():
    df = pd.DataFrame([
        {"wallet": "GCash", "type": "CASH"},
        {"wallet": "Maya", "type": "BANK"},
    ])
    out = apply_filters(df, FilterState(wallet="ALL", type="CASH"))
    assert out.to_dict("records") == [{"wallet": "GCash", "type": "CASH"}]
