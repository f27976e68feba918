"""Tests for analytics/fund_store.py"""
from __future__ import annotations

from datetime import date

from analytics.fund_store import FundDataStore, InMemoryFundStore, PriceHistorySource

FUNDS = [{"fundId": "A", "name": "Fund A"}, {"fundId": "B", "name": "Fund B"}]
PRICES = {
    "A": [
        {"date": "2026-01-03", "nav": 11.0},
        {"date": "2026-01-01", "nav": 10.0},
        {"date": "2025-06-01", "nav": 8.0},
    ]
}


def test_store_protocol_exposes_expected_methods():
    assert {"fetch_funds_by_ids"} <= set(FundDataStore.__dict__)
    assert {"fetch_price_history"} <= set(PriceHistorySource.__dict__)


def test_fetch_funds_by_ids_omits_unknown():
    store = InMemoryFundStore(FUNDS)
    assert [f.fund_id for f in store.fetch_funds_by_ids(["B", "X", "A"])] == ["B", "A"]


def test_fetch_price_history_windowed_and_sorted():
    store = InMemoryFundStore(FUNDS, prices=PRICES, source="cache")
    points = store.fetch_price_history("A", date(2026, 1, 1), date(2026, 12, 31))
    assert [p.nav for p in points] == [10.0, 11.0]
    assert store.fetch_price_history("B", date.min, date(2026, 12, 31)) == []
    assert store.price_source_label == "cache"
