"""
fund_store.py — The fund data store the comparison engine reads from.

The engine only needs two reads; any backend (document store, cache, HTTP
API) that implements ``FundDataStore`` can be passed in.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Protocol, Sequence

from analytics.models import FundProjection, PricePoint


class PriceHistorySource(Protocol):
    def fetch_price_history(self, fund_id: str, start_date: date, end_date: date) -> list[PricePoint]:
        ...


class FundDataStore(PriceHistorySource, Protocol):
    #: provenance label: "store", "cache" or "external"
    source: str

    def fetch_funds_by_ids(self, ids: Sequence[str]) -> list[FundProjection]:
        """Return the funds that exist; unknown ids are simply absent."""
        ...


class InMemoryFundStore:
    """
    Fund store backed by plain dicts in the shape of the funds collection.

    Args:
        funds:        Fund documents (``fundId``, ``holdings``, ``sectorAllocation``, ...).
        prices:       ``{fund_id: [{"date": ..., "nav": ...}, ...]}``.
        price_source: Optional external source used for price history instead
                      of ``prices`` (e.g. ``MfapiNavClient``).
        source:       Provenance label reported for fund lookups.
    """

    def __init__(
        self,
        funds: Iterable[dict[str, Any]] = (),
        prices: dict[str, Iterable[dict[str, Any]]] | None = None,
        price_source: PriceHistorySource | None = None,
        source: str = "store",
    ) -> None:
        self.source = source
        self._funds = {str(doc["fundId"]): FundProjection.from_document(doc) for doc in funds}
        self._prices = {
            str(fund_id): [PricePoint.from_document(p) for p in points]
            for fund_id, points in (prices or {}).items()
        }
        self._price_source = price_source

    @property
    def price_source_label(self) -> str:
        if self._price_source is not None:
            return getattr(self._price_source, "source", "external")
        return self.source

    def fetch_funds_by_ids(self, ids: Sequence[str]) -> list[FundProjection]:
        return [self._funds[fund_id] for fund_id in ids if fund_id in self._funds]

    def fetch_price_history(self, fund_id: str, start_date: date, end_date: date) -> list[PricePoint]:
        if self._price_source is not None:
            return self._price_source.fetch_price_history(fund_id, start_date, end_date)
        points = [p for p in self._prices.get(fund_id, []) if start_date <= p.date <= end_date]
        return sorted(points, key=lambda p: p.date)
