"""Tests for analytics/returns_correlation.py"""
from __future__ import annotations

import logging
import math
from datetime import date, timedelta

import pytest

from analytics.models import CorrelationPeriod, PricePoint
from analytics.returns_correlation import (
    INSUFFICIENT_DATA,
    INVALID_NAV,
    ZERO_VARIANCE,
    build_nav_series,
    correlate_returns,
    period_window,
)

logger = logging.getLogger(__name__)

TODAY = date(2026, 3, 2)
START = date(2025, 12, 1)


def _series(navs: list[float], start: date = START) -> list[PricePoint]:
    return [PricePoint(date=start + timedelta(days=i), nav=nav) for i, nav in enumerate(navs)]


def _wave(n: int, phase: float = 0.0) -> list[float]:
    return [100.0 + 5 * math.sin(i / 3 + phase) + 0.2 * i for i in range(n)]


def test_scalar_multiple_series_correlate_perfectly():
    navs = _wave(60)
    result = correlate_returns(_series(navs), _series([2 * n for n in navs]), "1Y", logger, today=TODAY)

    assert result["correlation"] == 1.0
    assert result["data_points"] == 60
    assert result["return_pairs"] == 59
    assert "reason" not in result


def test_correlation_is_symmetric():
    a, b = _series(_wave(60)), _series(_wave(60, phase=1.3))
    forward = correlate_returns(a, b, "1Y", logger, today=TODAY)
    backward = correlate_returns(b, a, "1Y", logger, today=TODAY)
    assert forward["correlation"] == backward["correlation"]
    assert -1.0 <= forward["correlation"] <= 1.0


def test_twenty_nine_common_dates_is_insufficient():
    a = _series(_wave(40))
    b = _series(_wave(29, phase=0.5))
    result = correlate_returns(a, b, "1Y", logger, today=TODAY)

    assert result["correlation"] is None
    assert result["data_points"] == 29
    assert result["return_pairs"] == 28
    assert result["reason"] == INSUFFICIENT_DATA
    assert "30" in result["message"]


def test_window_filters_points_before_start():
    # 2026-02-02 .. 2026-03-02 is 29 calendar days
    navs = _wave(120)
    start = TODAY - timedelta(days=119)
    result = correlate_returns(
        _series(navs, start), _series(navs, start), CorrelationPeriod.ONE_MONTH, logger, today=TODAY
    )
    assert result["start_date"] == "2026-02-02"
    assert result["data_points"] == 29
    assert result["correlation"] is None


def test_series_aligned_on_common_dates_only():
    a = _series(_wave(90))
    # b only has every other day
    b = [p for i, p in enumerate(_series(_wave(90, phase=0.7))) if i % 2 == 0]
    result = correlate_returns(a, b, "1Y", logger, today=TODAY)
    assert result["data_points"] == 45
    assert result["correlation"] is not None


def test_constant_series_reports_zero_variance():
    a = _series([10.0] * 40)
    b = _series(_wave(40))
    result = correlate_returns(a, b, "1Y", logger, today=TODAY)
    assert result["correlation"] is None
    assert result["reason"] == ZERO_VARIANCE
    assert result["data_points"] == 40


@pytest.mark.parametrize("bad_nav", [0.0, -3.0, math.nan])
def test_invalid_nav_fails_closed(bad_nav):
    navs = _wave(40)
    navs[10] = bad_nav
    result = correlate_returns(_series(navs), _series(_wave(40)), "1Y", logger, today=TODAY)
    assert result["correlation"] is None
    assert result["reason"] == INVALID_NAV
    assert result["data_points"] == 40


def test_empty_histories():
    result = correlate_returns([], [], "3M", logger, today=TODAY)
    assert result["correlation"] is None
    assert result["data_points"] == 0
    assert result["return_pairs"] == 0
    assert result["period"] == "3M"


def test_duplicate_dates_last_point_wins():
    series = build_nav_series(
        [PricePoint(date(2026, 1, 1), 10.0), PricePoint(date(2026, 1, 1), 12.0)],
        date(2025, 1, 1),
        date(2026, 12, 31),
    )
    assert len(series) == 1
    assert series.loc[date(2026, 1, 1)] == 12.0


def test_unsorted_input_is_ordered():
    points = list(reversed(_series(_wave(5))))
    series = build_nav_series(points, date.min, TODAY)
    assert list(series.index) == sorted(series.index)


def test_period_window():
    assert period_window("1y", TODAY) == (date(2025, 3, 2), TODAY)
    assert period_window("6M", TODAY) == (date(2025, 9, 2), TODAY)
    assert period_window("5Y", TODAY) == (date(2021, 3, 2), TODAY)
    assert period_window(CorrelationPeriod.MAX, TODAY) == (date.min, TODAY)


def test_max_period_reports_open_start():
    result = correlate_returns(_series(_wave(40)), _series(_wave(40)), "MAX", logger, today=TODAY)
    assert result["start_date"] is None
    assert result["end_date"] == "2026-03-02"
    assert result["correlation"] == 1.0


def test_constant_growth_rate_reports_zero_variance():
    # every daily return is 1% up to floating-point rounding
    geometric = _series([100 * 1.01**i for i in range(60)])
    result = correlate_returns(geometric, _series(_wave(60)), "1Y", logger, today=TODAY)
    assert result["correlation"] is None
    assert result["reason"] == ZERO_VARIANCE

    backward = correlate_returns(_series(_wave(60)), geometric, "1Y", logger, today=TODAY)
    assert backward["correlation"] is None
