"""
provenance.py — Records which data source served each fetch and how long it took.

The trace is attached to every comparison result under ``provenance``.
"""
from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class Trace:
    """Request-scoped list of fetch records."""

    def __init__(self) -> None:
        self._entries: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._start = time.perf_counter()

    @contextmanager
    def record(self, operation: str, source: str, fund_id: str | None = None) -> Iterator[dict[str, Any]]:
        """
        Time a collaborator call. The caller may set ``entry["records"]``.

        The entry is stored even when the call raises, with status "error".
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "operation": operation,
            "source": source,
            "status": "success",
            "records": 0,
        }
        if fund_id is not None:
            entry["fund_id"] = fund_id
        start = time.perf_counter()
        try:
            yield entry
        except Exception:
            entry["status"] = "error"
            raise
        finally:
            entry["duration_s"] = round(time.perf_counter() - start, 3)
            with self._lock:
                self._entries.append(entry)
            logger.debug(
                "%s from %s (%s) — status=%s, records=%s, duration=%.3fs",
                operation,
                source,
                fund_id or "-",
                entry["status"],
                entry["records"],
                entry["duration_s"],
            )

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            entries = list(self._entries)
        return {
            "entries": entries,
            "duration_s": round(time.perf_counter() - self._start, 3),
        }
