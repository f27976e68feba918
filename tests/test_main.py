"""Tests for main.py"""
from __future__ import annotations

import pytest

from analytics.errors import ComparisonInputError
from analytics.nav_fetcher import MfapiNavClient
from config import Config
from main import build_store, run_comparison

FUNDS = [
    {"fundId": "A", "name": "Fund A", "holdings": [{"ticker": "AAA", "percentage": 5}]},
    {"fundId": "B", "name": "Fund B", "holdings": [{"ticker": "AAA", "percentage": 3}]},
]


def test_run_comparison_returns_result():
    store = build_store(Config(), FUNDS, use_mfapi_prices=False)
    result = run_comparison(Config(), store, ("A", "B"), include_correlation=False)
    assert result["holdings_overlap"]["jaccard"] == 1.0
    assert result["sector_overlap"] is None


def test_run_comparison_reraises_input_errors():
    store = build_store(Config(), FUNDS, use_mfapi_prices=False)
    with pytest.raises(ComparisonInputError):
        run_comparison(Config(), store, ["A"])


def test_build_store_uses_mfapi_for_prices():
    store = build_store(Config(), FUNDS)
    assert isinstance(store._price_source, MfapiNavClient)
    assert store.price_source_label == "external"
