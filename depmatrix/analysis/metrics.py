"""Low-level arithmetic for the normalization page.

These are pure functions — no I/O, no Pydantic models.  Higher-level code
(totals, normalizers, stats) calls these.  Every division is guarded so no
caller ever sees NaN or infinity.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

K = TypeVar("K")

# Value every category gets when all category weights are tied.
TIED_CATEGORY_VALUE = 1.0


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def rescale(value: float, low: float, high: float, new_min: float, new_max: float) -> float:
    """Linear min-max rescale of *value* from [low, high] into [new_min, new_max].

    Callers handle ``low == high`` themselves (the tie policy differs between
    categories and sub-attributes); here it falls back to *new_min*.
    """
    if high == low:
        return new_min
    return (value - low) * (new_max - new_min) / (high - low) + new_min


def min_max_normalize(
    weights: Mapping[K, float],
    new_min: float,
    new_max: float,
    *,
    tied_value: float,
) -> dict[K, float]:
    """Rescale every weight into [new_min, new_max].

    When all weights are equal there is no spread to rescale, and every entry
    gets *tied_value* instead.
    """
    if not weights:
        return {}
    low = min(weights.values())
    high = max(weights.values())
    if high == low:
        return {key: tied_value for key in weights}
    return {key: rescale(w, low, high, new_min, new_max) for key, w in weights.items()}


def comparison_ratio(value: float, reference: float) -> float:
    """value / reference rounded to two decimals; 0 when reference is 0."""
    if reference == 0:
        return 0.0
    return round(value / reference, 2)


def pairwise_comparisons(normalized: Mapping[K, float]) -> dict[K, dict[K, float]]:
    """Full N×N ratio matrix ``result[a][b] = normalized[a] / normalized[b]``.

    The diagonal is 0 (a sentinel, not the ratio 1), and so is any cell whose
    denominator is not positive.  Reciprocity is not enforced:
    ``result[a][b] * result[b][a]`` drifts from 1 after rounding.
    """
    result: dict[K, dict[K, float]] = {}
    for a, value_a in normalized.items():
        result[a] = {}
        for b, value_b in normalized.items():
            if a == b or value_b <= 0:
                result[a][b] = 0.0
            else:
                result[a][b] = comparison_ratio(value_a, value_b)
    return result


def percentage(part: float, whole: float) -> float:
    """part / whole * 100, clamped to [0, 100]; 0 when whole is 0."""
    if whole <= 0:
        return 0.0
    return max(0.0, min(100.0, part / whole * 100))
