"""
main.py — Application entry point for fund comparisons.

The request layer calls ``run_comparison`` with its own fund data store; this
module wires configuration and logging around the comparison engine.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Sequence

from analytics.comparison_engine import ComparisonEngine
from analytics.fund_store import FundDataStore, InMemoryFundStore
from analytics.nav_fetcher import MfapiNavClient
from config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=config.log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def build_store(
    config: Config,
    fund_documents: Sequence[dict[str, Any]],
    use_mfapi_prices: bool = True,
) -> InMemoryFundStore:
    """In-memory store over fund documents, with NAV history from mfapi.in when enabled."""
    price_source = (
        MfapiNavClient(base_url=config.mfapi_base_url, timeout_s=config.mfapi_timeout_s)
        if use_mfapi_prices
        else None
    )
    return InMemoryFundStore(fund_documents, price_source=price_source)


def run_comparison(
    config: Config,
    store: FundDataStore,
    fund_ids: Sequence[str],
    **options: Any,
) -> dict[str, Any]:
    """Compare funds and return the result tree; errors are logged and re-raised."""
    logger.info("=== Fund comparison starting: %s ===", ", ".join(map(str, fund_ids)))
    start = time.perf_counter()
    engine = ComparisonEngine(store, config=config, logger=logging.getLogger("comparison_engine"))
    try:
        result = engine.compare(list(fund_ids), **options)
    except Exception:
        logger.exception("Fund comparison failed.")
        raise
    logger.info("=== Fund comparison complete in %.3fs ===", time.perf_counter() - start)
    return result
