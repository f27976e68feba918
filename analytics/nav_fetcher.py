"""
nav_fetcher.py — Fetches NAV history for a scheme from the public mfapi.in API.

Response format: {"meta": {...}, "data": [{"date": "27-02-2026", "nav": "52.34560"}, ...]}
with the newest point first.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import requests

from analytics.errors import DataUnavailableError
from analytics.models import PricePoint

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mfapi.in/mf"
_MFAPI_DATE_FORMAT = "%d-%m-%Y"


class MfapiNavClient:
    """Price-history source for ``InMemoryFundStore`` keyed by AMFI scheme code."""

    source = "external"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._session = session or requests.Session()

    def fetch_price_history(self, fund_id: str, start_date: date, end_date: date) -> list[PricePoint]:
        url = f"{self.base_url}/{fund_id}"
        logger.info("Fetching NAV history for %s from %s", fund_id, url)
        try:
            response = self._session.get(url, timeout=self.timeout_s)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DataUnavailableError(f"NAV history for {fund_id} unavailable: {exc}") from exc

        points = [p for p in _parse_mfapi_nav(payload) if start_date <= p.date <= end_date]
        logger.info("Parsed %d NAV points for %s.", len(points), fund_id)
        return points


def _parse_mfapi_nav(payload: dict[str, Any]) -> list[PricePoint]:
    """Parse the mfapi.in ``data`` array into ascending price points, skipping malformed rows."""
    points: list[PricePoint] = []
    for row in payload.get("data") or []:
        try:
            nav_date = datetime.strptime(str(row["date"]).strip(), _MFAPI_DATE_FORMAT).date()
            nav = float(str(row["nav"]).strip())
        except (KeyError, TypeError, ValueError):
            continue
        points.append(PricePoint(date=nav_date, nav=nav))
    points.sort(key=lambda p: p.date)
    return points
