"""
returns_correlation.py — Pearson correlation of daily NAV returns for two funds.

Both series are windowed to the lookback period, aligned on the calendar
days present in both, turned into simple daily returns and correlated.
Short history, bad NAVs and flat series are reported in the result with
``correlation: None`` and a reason; nothing here raises on bad data.
"""
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Sequence

import numpy as np
import pandas as pd

from analytics.models import CorrelationPeriod, PricePoint
from analytics.similarity import pearson_correlation, round_or_none

MIN_COMMON_DATES = 30

INSUFFICIENT_DATA = "insufficient_data"
INVALID_NAV = "invalid_nav"
ZERO_VARIANCE = "zero_variance"


def period_window(period: CorrelationPeriod | str, today: date | None = None) -> tuple[date, date]:
    """Return the (start, end) dates covered by a lookback period ending today."""
    end = today or date.today()
    return CorrelationPeriod.parse(period).start_date(end), end


def build_nav_series(prices: Sequence[PricePoint], start: date, end: date) -> pd.Series:
    """
    Date-indexed NAV series restricted to [start, end].

    Points are keyed by calendar day; if a day repeats, the last point wins.
    """
    navs: dict[date, float] = {}
    for point in prices:
        if start <= point.date <= end:
            navs[point.date] = point.nav
    return pd.Series(navs, dtype=float).sort_index()


def compute_daily_returns(aligned: pd.DataFrame) -> pd.DataFrame | None:
    """
    Simple daily returns (nav[i] - nav[i-1]) / nav[i-1] for each column.

    Returns None when any NAV is non-finite or any previous NAV is <= 0.
    """
    if not np.isfinite(aligned.to_numpy()).all():
        return None
    previous = aligned.shift(1).iloc[1:]
    if (previous <= 0).to_numpy().any():
        return None
    return aligned.diff().iloc[1:] / previous


def _result(
    period: CorrelationPeriod,
    start: date,
    end: date,
    data_points: int,
    correlation: float | None = None,
    reason: str | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "period": period.value,
        "start_date": None if start == date.min else start.isoformat(),
        "end_date": end.isoformat(),
        "correlation": round_or_none(correlation, 4),
        "data_points": data_points,
        "return_pairs": max(0, data_points - 1),
    }
    if reason is not None:
        result["reason"] = reason
        result["message"] = message
    return result


def correlate_returns(
    prices_a: Sequence[PricePoint],
    prices_b: Sequence[PricePoint],
    period: CorrelationPeriod | str,
    logger: logging.Logger,
    today: date | None = None,
    min_points: int = MIN_COMMON_DATES,
) -> dict[str, Any]:
    """
    Correlate two funds' daily returns over a lookback period.

    Args:
        prices_a:   NAV history of the first fund (any order).
        prices_b:   NAV history of the second fund (any order).
        period:     Lookback period (1M/3M/6M/1Y/3Y/5Y/MAX).
        logger:     Bound logger.
        today:      End of the window; defaults to the current date.
        min_points: Minimum number of common dates required.

    Returns:
        dict with keys: period, start_date, end_date, correlation, data_points,
        return_pairs, and reason/message when correlation is None.
    """
    period = CorrelationPeriod.parse(period)
    start, end = period_window(period, today)

    series_a = build_nav_series(prices_a, start, end)
    series_b = build_nav_series(prices_b, start, end)
    aligned = pd.concat({"a": series_a, "b": series_b}, axis=1, join="inner").sort_index()
    data_points = len(aligned)

    if data_points < min_points:
        logger.info(
            "Only %d common NAV dates (minimum %d); correlation not computed.",
            data_points,
            min_points,
        )
        return _result(
            period,
            start,
            end,
            data_points,
            reason=INSUFFICIENT_DATA,
            message=f"Insufficient overlapping price history (minimum {min_points} days required).",
        )

    returns = compute_daily_returns(aligned)
    if returns is None:
        logger.warning("Invalid NAV values in aligned history; correlation not computed.")
        return _result(
            period,
            start,
            end,
            data_points,
            reason=INVALID_NAV,
            message="Price history contains zero, negative or missing NAV values.",
        )

    correlation = pearson_correlation(returns["a"].to_numpy(), returns["b"].to_numpy())
    if correlation is None or not math.isfinite(correlation):
        logger.info("Zero-variance return series; correlation undefined.")
        return _result(
            period,
            start,
            end,
            data_points,
            reason=ZERO_VARIANCE,
            message="One of the return series has zero variance.",
        )

    return _result(period, start, end, data_points, correlation=correlation)
