"""
similarity.py — Pure similarity and correlation primitives used by the analyzers.

Every division is guarded: a zero denominator yields a defined fallback,
never NaN or infinity.
"""
from __future__ import annotations

import math
from typing import Hashable, Iterable, Mapping, Sequence

import numpy as np

# a series whose spread is below this fraction of its magnitude is treated as constant
ZERO_VARIANCE_TOLERANCE = 1e-10


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return numerator / denominator, or ``default`` when undefined."""
    if denominator == 0:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return float(result)


def round_or_none(value: float | None, ndigits: int) -> float | None:
    if value is None:
        return None
    return round(float(value), ndigits)


def jaccard_index(a: Iterable[Hashable], b: Iterable[Hashable]) -> float:
    """Size of the intersection over size of the union; 0.0 for two empty sets."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    return safe_divide(len(set_a & set_b), len(union))


def weighted_overlap(
    weights_a: Mapping[Hashable, float], weights_b: Mapping[Hashable, float]
) -> float:
    """Sum of min(weight_a, weight_b) over keys present in both mappings."""
    common = weights_a.keys() & weights_b.keys()
    # sorted so that the float sum is independent of argument order
    return float(
        sum(min(weights_a[key], weights_b[key]) for key in sorted(common, key=str))
    )


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine of the angle between two equal-length weight vectors.

    Returns 0.0 when either vector has zero magnitude. Inputs are expected to
    be non-negative, so the result is clamped to [0, 1].
    """
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.shape != b.shape:
        raise ValueError("cosine_similarity requires vectors of equal length.")
    if a.size == 0:
        return 0.0

    norm_sq_a = float(np.dot(a, a))
    norm_sq_b = float(np.dot(b, b))
    if norm_sq_a == 0 or norm_sq_b == 0:
        return 0.0

    similarity = safe_divide(float(np.dot(a, b)), math.sqrt(norm_sq_a * norm_sq_b))
    return min(1.0, max(0.0, similarity))


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float | None:
    """
    Pearson correlation coefficient of two aligned series.

    Returns None for empty or mismatched inputs, non-finite values, or when
    either series has zero variance.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size == 0 or xs.shape != ys.shape:
        return None
    if not (np.isfinite(xs).all() and np.isfinite(ys).all()):
        return None

    dx = xs - xs.mean()
    dy = ys - ys.mean()
    if _is_flat(xs, dx) or _is_flat(ys, dy):
        return None

    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0 or not math.isfinite(denominator):
        return None

    coefficient = float(np.sum(dx * dy)) / denominator
    return min(1.0, max(-1.0, coefficient))


def _is_flat(values: np.ndarray, deviations: np.ndarray) -> bool:
    """True when the spread is rounding noise relative to the values' magnitude."""
    spread = math.sqrt(float(np.mean(deviations * deviations)))
    scale = max(1.0, float(np.max(np.abs(values))))
    return spread <= ZERO_VARIANCE_TOLERANCE * scale
