"""Tests for analytics/recommendations.py"""
from __future__ import annotations

import pytest

from analytics.recommendations import (
    diversification_score,
    generate_recommendations,
    get_overlap_level,
)


@pytest.mark.parametrize(
    "overlap, level",
    [(50, "MODERATE"), (50.01, "HIGH"), (30, "LOW"), (30.01, "MODERATE"), (0, "LOW"), (100, "HIGH")],
)
def test_overlap_level_boundaries(overlap, level):
    assert get_overlap_level(overlap) == level


def test_diversification_score_clamped():
    assert diversification_score(25.5) == 74.5
    assert diversification_score(-10) == 100.0
    assert diversification_score(140) == 0.0


def _holdings(average_overlap: float, common: int = 0) -> dict:
    return {
        "average_overlap": average_overlap,
        "common_holdings": [{"identifier": f"s{i}"} for i in range(common)],
    }


def test_high_overlap_advice():
    result = generate_recommendations(_holdings(62.0), None)
    assert result["overlap_level"] == "HIGH"
    assert result["diversification_score"] == 38.0
    assert len(result["advice"]) == 1
    assert result["advice"][0].startswith("High overlap")


def test_concentration_advice_above_ten_common_holdings():
    assert len(generate_recommendations(_holdings(10.0, common=10), None)["advice"]) == 1
    advice = generate_recommendations(_holdings(10.0, common=11), None)["advice"]
    assert len(advice) == 2
    assert advice[1].startswith("11 holdings")


def test_common_top_sector_advice():
    sector_overlap = {"common_top_sector": "financials"}
    advice = generate_recommendations(_holdings(35.0), sector_overlap)["advice"]
    assert advice[0].startswith("Moderate overlap")
    assert "financials" in advice[-1]


def test_no_holdings_result():
    result = generate_recommendations(None, None)
    assert result["overlap_level"] is None
    assert result["diversification_score"] is None
    assert len(result["advice"]) == 1
