"""
config.py — loads comparison engine settings from environment variables (.env supported).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class Config:
    # Defaults for options the caller leaves out
    default_top_n_holdings: int = field(default_factory=lambda: _int("DEFAULT_TOP_N_HOLDINGS", 50))
    default_correlation_period: str = field(
        default_factory=lambda: os.getenv("DEFAULT_CORRELATION_PERIOD", "1Y")
    )
    min_correlation_points: int = field(default_factory=lambda: _int("MIN_CORRELATION_POINTS", 30))

    # Concurrent price-history fetches per request
    price_fetch_workers: int = field(default_factory=lambda: _int("PRICE_FETCH_WORKERS", 4))

    # mfapi.in
    mfapi_base_url: str = field(
        default_factory=lambda: os.getenv("MFAPI_BASE_URL", "https://api.mfapi.in/mf")
    )
    mfapi_timeout_s: int = field(default_factory=lambda: _int("MFAPI_TIMEOUT_S", 10))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


def _int(var: str, default: int) -> int:
    value = os.getenv(var)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise EnvironmentError(f"Environment variable '{var}' must be an integer, got '{value}'.") from None


def load_config() -> Config:
    config = Config()
    logger.debug("Loaded config: %s", config)
    return config
