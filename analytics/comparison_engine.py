"""
comparison_engine.py — Public entry point: compares 2–5 funds.

Resolves funds through the fund data store, runs the holdings, sector and
returns-correlation analyzers for every pair, and assembles a
JSON-serialisable result with recommendations and a provenance trace.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from itertools import combinations
from typing import Any, Sequence

from analytics.errors import ComparisonInputError, DataUnavailableError, FundNotFoundError
from analytics.fund_store import FundDataStore
from analytics.holdings_overlap import analyze_holdings
from analytics.models import ComparisonOptions, CorrelationPeriod, FundProjection, PricePoint
from analytics.provenance import Trace
from analytics.recommendations import generate_recommendations
from analytics.returns_correlation import correlate_returns, period_window
from analytics.sector_overlap import analyze_sectors
from config import Config, load_config

MIN_FUNDS = 2
MAX_FUNDS = 5


class ComparisonEngine:
    """
    Compares mutual funds by holdings, sector allocation and return correlation.

    Args:
        store:  Fund data store (see ``analytics.fund_store.FundDataStore``).
        config: Config instance; loaded from the environment when omitted.
        logger: Bound logger; defaults to this module's logger.
    """

    def __init__(
        self,
        store: FundDataStore,
        config: Config | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.config = config or load_config()
        self.logger = logger or logging.getLogger(__name__)

    def compare(
        self,
        fund_ids: Sequence[str],
        top_n_holdings: int | None = None,
        correlation_period: CorrelationPeriod | str | None = None,
        include_correlation: bool | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        """
        Compare the given funds.

        Two funds produce a single comparison; three to five produce every
        pairwise comparison plus an aggregate over all funds.

        Raises:
            ComparisonInputError: bad fund count, duplicate ids or bad options.
            FundNotFoundError:    an id the store does not know.
            DataUnavailableError: the store (or price source) failed.
        """
        start = time.perf_counter()
        try:
            ids = self._validate_ids(fund_ids)
            options = ComparisonOptions.build(
                top_n_holdings=(
                    self.config.default_top_n_holdings if top_n_holdings is None else top_n_holdings
                ),
                correlation_period=correlation_period or self.config.default_correlation_period,
                include_correlation=True if include_correlation is None else include_correlation,
            )
        except ComparisonInputError as exc:
            self.logger.warning("Rejected comparison request: %s", exc)
            raise

        today = today or date.today()
        trace = Trace()
        try:
            funds = self._resolve_funds(ids, trace)
            prices = (
                self._fetch_price_histories(funds, options.correlation_period, today, trace)
                if options.include_correlation
                else {}
            )
        except FundNotFoundError as exc:
            self.logger.warning("Rejected comparison request: %s", exc)
            raise
        except DataUnavailableError:
            self.logger.exception("Fund data unavailable for comparison of %s.", ", ".join(ids))
            raise

        if len(funds) == 2:
            result = self._compare_pair(funds[0], funds[1], options, prices, today)
            result["summary"] = _summary(funds, result["holdings_overlap"], result["recommendations"])
        else:
            result = self._compare_many(funds, options, prices, today)

        result["provenance"] = trace.to_dict()
        self.logger.info(
            "Compared %d funds (%d pairs) in %.3fs.",
            len(funds),
            len(list(combinations(funds, 2))),
            time.perf_counter() - start,
        )
        return result

    # ------------------------------------------------------------------
    # Input validation and data retrieval
    # ------------------------------------------------------------------

    def _validate_ids(self, fund_ids: Sequence[str]) -> list[str]:
        if not isinstance(fund_ids, (list, tuple)):
            raise ComparisonInputError("fund_ids must be a list of fund identifiers.")

        ids: list[str] = []
        for fund_id in fund_ids:
            if not isinstance(fund_id, str) or not fund_id.strip():
                raise ComparisonInputError(f"Invalid fund identifier: {fund_id!r}.")
            ids.append(fund_id.strip())

        if len(ids) < MIN_FUNDS:
            raise ComparisonInputError(
                f"At least {MIN_FUNDS} fund IDs are required for comparison, got {len(ids)}."
            )
        if len(ids) > MAX_FUNDS:
            raise ComparisonInputError(
                f"At most {MAX_FUNDS} funds can be compared at once, got {len(ids)}."
            )

        duplicates = sorted({fund_id for fund_id in ids if ids.count(fund_id) > 1})
        if duplicates:
            raise ComparisonInputError(f"Duplicate fund IDs: {', '.join(duplicates)}.")
        return ids

    def _resolve_funds(self, ids: list[str], trace: Trace) -> list[FundProjection]:
        source = getattr(self.store, "source", "store")
        with trace.record("fetch_funds_by_ids", source) as entry:
            try:
                found = self.store.fetch_funds_by_ids(ids)
            except DataUnavailableError:
                raise
            except Exception as exc:
                raise DataUnavailableError(f"Fund data store unavailable: {exc}") from exc
            entry["records"] = len(found)

        by_id = {fund.fund_id: fund for fund in found}
        missing = [fund_id for fund_id in ids if fund_id not in by_id]
        if missing:
            raise FundNotFoundError(missing)
        return [by_id[fund_id] for fund_id in ids]

    def _fetch_price_histories(
        self,
        funds: list[FundProjection],
        period: CorrelationPeriod,
        today: date,
        trace: Trace,
    ) -> dict[str, list[PricePoint]]:
        """Fetch each fund's NAV history once, concurrently."""
        start, end = period_window(period, today)
        source = getattr(self.store, "price_source_label", getattr(self.store, "source", "store"))

        def fetch(fund_id: str) -> list[PricePoint]:
            with trace.record("fetch_price_history", source, fund_id=fund_id) as entry:
                try:
                    points = self.store.fetch_price_history(fund_id, start, end)
                except DataUnavailableError:
                    raise
                except Exception as exc:
                    raise DataUnavailableError(
                        f"Price history for {fund_id} unavailable: {exc}"
                    ) from exc
                entry["records"] = len(points)
            return list(points)

        workers = max(1, min(self.config.price_fetch_workers, len(funds)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {fund.fund_id: pool.submit(fetch, fund.fund_id) for fund in funds}
            return {fund_id: future.result() for fund_id, future in futures.items()}

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _compare_pair(
        self,
        fund_a: FundProjection,
        fund_b: FundProjection,
        options: ComparisonOptions,
        prices: dict[str, list[PricePoint]],
        today: date,
    ) -> dict[str, Any]:
        pair = [fund_a, fund_b]
        holdings_overlap = analyze_holdings(pair, self.logger, top_n=options.top_n_holdings)
        sector_overlap = analyze_sectors(pair, self.logger)

        returns_correlation = None
        if options.include_correlation:
            returns_correlation = correlate_returns(
                prices.get(fund_a.fund_id, []),
                prices.get(fund_b.fund_id, []),
                options.correlation_period,
                self.logger,
                today=today,
                min_points=self.config.min_correlation_points,
            )

        return {
            "funds": [fund.summary() for fund in pair],
            "holdings_overlap": holdings_overlap,
            "sector_overlap": sector_overlap,
            "returns_correlation": returns_correlation,
            "recommendations": generate_recommendations(holdings_overlap, sector_overlap),
            "unavailable": _unavailable_reasons(
                pair, holdings_overlap, sector_overlap, returns_correlation, options
            ),
        }

    def _compare_many(
        self,
        funds: list[FundProjection],
        options: ComparisonOptions,
        prices: dict[str, list[PricePoint]],
        today: date,
    ) -> dict[str, Any]:
        pairwise_comparisons = []
        for fund_a, fund_b in combinations(funds, 2):
            comparison = self._compare_pair(fund_a, fund_b, options, prices, today)
            pairwise_comparisons.append({"fund_pair": [fund_a.fund_id, fund_b.fund_id], **comparison})

        holdings_overlap = analyze_holdings(funds, self.logger, top_n=options.top_n_holdings)
        sector_overlap = analyze_sectors(funds, self.logger)
        recommendations = generate_recommendations(holdings_overlap, sector_overlap)

        return {
            "funds": [fund.summary() for fund in funds],
            "pairwise_comparisons": pairwise_comparisons,
            "total_comparisons": len(pairwise_comparisons),
            "holdings_overlap": holdings_overlap,
            "sector_overlap": sector_overlap,
            "recommendations": recommendations,
            "summary": _summary(funds, holdings_overlap, recommendations),
            "unavailable": _unavailable_reasons(funds, holdings_overlap, sector_overlap, None, options),
        }


def _summary(
    funds: list[FundProjection],
    holdings_overlap: dict[str, Any] | None,
    recommendations: dict[str, Any],
) -> dict[str, Any]:
    return {
        "total_funds": len(funds),
        "average_overlap": None if holdings_overlap is None else holdings_overlap["average_overlap"],
        "overlap_level": recommendations["overlap_level"],
        "diversification_score": recommendations["diversification_score"],
    }


def _unavailable_reasons(
    funds: list[FundProjection],
    holdings_overlap: dict[str, Any] | None,
    sector_overlap: dict[str, Any] | None,
    returns_correlation: dict[str, Any] | None,
    options: ComparisonOptions,
) -> dict[str, str]:
    """Explain every sub-result that is None (or carries no correlation)."""
    reasons: dict[str, str] = {}
    if holdings_overlap is None:
        lacking = [f.fund_id for f in funds if not any(h.identifier for h in f.holdings)]
        reasons["holdings_overlap"] = f"No holdings data for: {', '.join(lacking)}."
    if sector_overlap is None:
        lacking = [f.fund_id for f in funds if not any(s.label for s in f.sector_allocation)]
        reasons["sector_overlap"] = f"No sector allocation data for: {', '.join(lacking)}."
    if not options.include_correlation:
        reasons["returns_correlation"] = "Correlation not requested."
    elif returns_correlation is not None and returns_correlation["correlation"] is None:
        reasons["returns_correlation"] = returns_correlation["message"]
    return reasons
