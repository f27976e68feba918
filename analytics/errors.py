"""
errors.py — Exceptions raised by the comparison engine.

Data insufficiency (empty holdings, short price history) is never raised;
it is reported inside the result.
"""
from __future__ import annotations


class ComparisonError(Exception):
    """Base class for comparison engine errors."""


class ComparisonInputError(ComparisonError, ValueError):
    """The caller supplied an invalid request (fund count, options, unknown ids)."""


class FundNotFoundError(ComparisonInputError):
    def __init__(self, missing_ids: list[str]) -> None:
        self.missing_ids = list(missing_ids)
        super().__init__(f"Fund(s) not found: {', '.join(self.missing_ids)}")


class DataUnavailableError(ComparisonError, RuntimeError):
    """The fund data store (or an external price source) could not be reached."""
