"""
models.py — Fund reference data as seen by the comparison engine.

Store documents come in loose shapes (some holdings carry a ticker, some only
a name, weights may be missing or garbage). The raw values are kept as given;
the canonical forms used in computations are exposed as properties.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

import pandas as pd

from analytics.errors import ComparisonInputError

_NON_ALNUM_RE = re.compile(r"[^0-9a-z]")


def normalise_identifier(value: Any) -> str:
    """Case-fold and strip every non-alphanumeric character ('HDFC Bank Ltd.' -> 'hdfcbankltd')."""
    if value is None:
        return ""
    return _NON_ALNUM_RE.sub("", str(value).casefold())


def normalise_sector(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def coerce_weight(value: Any) -> float:
    """Weight used for aggregation: missing, negative or non-numeric values count as 0."""
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(weight) or weight < 0:
        return 0.0
    return weight


def coerce_date(value: Any) -> date:
    """Truncate a datetime / ISO string / pandas Timestamp to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


@dataclass(frozen=True)
class Holding:
    ticker: str | None = None
    name: str | None = None
    weight: Any = None

    @property
    def identifier(self) -> str | None:
        """Ticker if it normalises to something, else name; None when neither does."""
        return normalise_identifier(self.ticker) or normalise_identifier(self.name) or None

    @property
    def display_name(self) -> str:
        return str(self.name or self.ticker or "")

    @property
    def effective_weight(self) -> float:
        return coerce_weight(self.weight)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Holding:
        return cls(
            ticker=doc.get("ticker"),
            name=doc.get("name"),
            weight=doc.get("percentage", doc.get("weight")),
        )


@dataclass(frozen=True)
class SectorAllocation:
    sector: str | None = None
    weight: Any = None

    @property
    def label(self) -> str | None:
        return normalise_sector(self.sector) or None

    @property
    def effective_weight(self) -> float:
        return coerce_weight(self.weight)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> SectorAllocation:
        return cls(sector=doc.get("sector"), weight=doc.get("percentage", doc.get("weight")))


@dataclass(frozen=True)
class PricePoint:
    date: date
    nav: float

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> PricePoint:
        try:
            nav = float(doc.get("nav"))
        except (TypeError, ValueError):
            nav = math.nan
        return cls(date=coerce_date(doc["date"]), nav=nav)


@dataclass
class FundProjection:
    """A fund as returned by the data store, with its holdings and sector allocation."""

    fund_id: str
    name: str = ""
    category: str | None = None
    sub_category: str | None = None
    fund_house: str | None = None
    current_nav: float | None = None
    aum: float | None = None
    expense_ratio: float | None = None
    returns: dict[str, Any] | None = None
    risk_metrics: dict[str, Any] | None = None
    holdings: list[Holding] = field(default_factory=list)
    sector_allocation: list[SectorAllocation] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FundProjection:
        return cls(
            fund_id=str(doc["fundId"]),
            name=doc.get("name") or "",
            category=doc.get("category"),
            sub_category=doc.get("subCategory"),
            fund_house=doc.get("fundHouse"),
            current_nav=doc.get("currentNav"),
            aum=doc.get("aum"),
            expense_ratio=doc.get("expenseRatio"),
            returns=doc.get("returns"),
            risk_metrics=doc.get("riskMetrics"),
            holdings=[Holding.from_document(h) for h in doc.get("holdings") or []],
            sector_allocation=[
                SectorAllocation.from_document(s) for s in doc.get("sectorAllocation") or []
            ],
        )

    def summary(self) -> dict[str, Any]:
        """FundRef summary echoed in comparison results."""
        return {
            "fund_id": self.fund_id,
            "name": self.name,
            "category": self.category,
            "sub_category": self.sub_category,
            "fund_house": self.fund_house,
            "current_nav": self.current_nav,
            "aum": self.aum,
            "expense_ratio": self.expense_ratio,
            "returns": self.returns,
            "risk_metrics": self.risk_metrics,
            "holdings_count": len(self.holdings),
            "sector_count": len(self.sector_allocation),
        }


class CorrelationPeriod(Enum):
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"
    MAX = "MAX"

    @classmethod
    def parse(cls, value: CorrelationPeriod | str) -> CorrelationPeriod:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ComparisonInputError(
                f"Invalid correlation period '{value}'. Expected one of: {allowed}."
            ) from None

    def start_date(self, today: date) -> date:
        if self is CorrelationPeriod.MAX:
            return date.min
        offset = _PERIOD_OFFSETS[self]
        return (pd.Timestamp(today) - offset).date()


_PERIOD_OFFSETS: dict[CorrelationPeriod, pd.DateOffset] = {
    CorrelationPeriod.ONE_MONTH: pd.DateOffset(months=1),
    CorrelationPeriod.THREE_MONTHS: pd.DateOffset(months=3),
    CorrelationPeriod.SIX_MONTHS: pd.DateOffset(months=6),
    CorrelationPeriod.ONE_YEAR: pd.DateOffset(years=1),
    CorrelationPeriod.THREE_YEARS: pd.DateOffset(years=3),
    CorrelationPeriod.FIVE_YEARS: pd.DateOffset(years=5),
}


@dataclass(frozen=True)
class ComparisonOptions:
    top_n_holdings: int = 50
    correlation_period: CorrelationPeriod = CorrelationPeriod.ONE_YEAR
    include_correlation: bool = True

    @classmethod
    def build(
        cls,
        top_n_holdings: Any = 50,
        correlation_period: CorrelationPeriod | str = CorrelationPeriod.ONE_YEAR,
        include_correlation: Any = True,
    ) -> ComparisonOptions:
        """Validate caller-supplied options; raises ComparisonInputError on bad values."""
        if isinstance(top_n_holdings, bool) or not isinstance(top_n_holdings, int):
            raise ComparisonInputError(
                f"top_n_holdings must be an integer, got {top_n_holdings!r}."
            )
        if top_n_holdings < 1:
            raise ComparisonInputError("top_n_holdings must be at least 1.")
        if not isinstance(include_correlation, bool):
            raise ComparisonInputError(
                f"include_correlation must be a boolean, got {include_correlation!r}."
            )
        return cls(
            top_n_holdings=top_n_holdings,
            correlation_period=CorrelationPeriod.parse(correlation_period),
            include_correlation=include_correlation,
        )
