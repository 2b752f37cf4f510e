"""Data structures for normalization results.

These are plain dataclasses (not Pydantic) — they're ephemeral, computed
fresh from a matrix and its submissions on every call, and never persisted.
``NormalizationReport.to_dict()`` produces the JSON-compatible shape served by
the API and written by ``depmatrix normalize --json``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

DEFAULT_ORIGINAL_MIN = 1.0
DEFAULT_ORIGINAL_MAX = 9.0
DEFAULT_CATEGORY_RANGE = (1.0, 9.0)
DEFAULT_SUB_ATTRIBUTE_RANGE = (1.0, 10.0)


@dataclass(frozen=True)
class NormalizationParams:
    """Linear rescaling configuration.

    Only ``new_min``/``new_max`` enter the min-max formula.  ``original_min``
    and ``original_max`` are carried through for display.
    """

    new_min: float = DEFAULT_CATEGORY_RANGE[0]
    new_max: float = DEFAULT_CATEGORY_RANGE[1]
    original_min: float = DEFAULT_ORIGINAL_MIN
    original_max: float = DEFAULT_ORIGINAL_MAX

    def __post_init__(self) -> None:
        if self.new_max < self.new_min:
            raise ValueError(
                f"new_max ({self.new_max}) must not be below new_min ({self.new_min})"
            )

    @classmethod
    def for_categories(cls) -> NormalizationParams:
        return cls(*DEFAULT_CATEGORY_RANGE)

    @classmethod
    def for_sub_attributes(cls) -> NormalizationParams:
        return cls(*DEFAULT_SUB_ATTRIBUTE_RANGE)


@dataclass
class AggregatedVotes:
    """Per-cell vote counts across all submissions."""

    votes: dict[str, int] = field(default_factory=dict)  # "row_col" -> count
    submission_count: int = 0  # valid submissions (1 in fallback mode)
    invalid_count: int = 0
    fallback: bool = False  # True when built from the live matrix


@dataclass
class MatrixTotals:
    """Row, column and category totals derived from vote counts."""

    row_totals: dict[int, int] = field(default_factory=dict)
    column_totals: dict[int, int] = field(default_factory=dict)
    category_totals: dict[str, int] = field(default_factory=dict)
    category_subtotals: dict[str, int] = field(default_factory=dict)
    combined_totals: dict[str, int] = field(default_factory=dict)
    lower_triangle_counts: dict[int, int] = field(default_factory=dict)


@dataclass
class CategoryNormalization:
    """Weights, normalized values and comparison ratios per category."""

    params: NormalizationParams
    row_counts: dict[str, int] = field(default_factory=dict)
    totals: dict[str, int] = field(default_factory=dict)
    subtotals: dict[str, int] = field(default_factory=dict)
    combined_totals: dict[str, int] = field(default_factory=dict)
    weights: dict[str, float] = field(default_factory=dict)
    normalized: dict[str, float] = field(default_factory=dict)
    comparison: dict[str, float] = field(default_factory=dict)  # vs the top category
    comparison_matrix: dict[str, dict[str, float]] = field(default_factory=dict)


@dataclass
class SubAttributeNormalization:
    """Weights, normalized values and the pairwise matrix within one category."""

    category: str
    params: NormalizationParams
    names: dict[int, str] = field(default_factory=dict)
    weights: dict[int, int] = field(default_factory=dict)
    normalized: dict[int, float] = field(default_factory=dict)
    comparisons: dict[int, dict[int, float]] = field(default_factory=dict)


@dataclass
class MatrixStats:
    """Coverage figures for the aggregated matrix."""

    total_relationships: int = 0
    filled_relationships: int = 0
    max_possible_relationships: int = 0
    percentage_filled: float = 0.0
    submission_count: int = 0
    submission_progress: float = 0.0


@dataclass
class ColumnAverage:
    id: int
    name: str
    average: float


@dataclass
class ColumnSeries:
    id: int
    name: str
    counts: list[int] = field(default_factory=list)


@dataclass
class ColumnTimeline:
    """Per-column dependency counts for each submission, oldest first."""

    labels: list[str] = field(default_factory=list)
    series: list[ColumnSeries] = field(default_factory=list)


@dataclass
class NormalizationReport:
    """Complete normalization output for one matrix, passed to the renderer."""

    aggregation: AggregatedVotes
    totals: MatrixTotals
    categories: CategoryNormalization
    sub_attributes: dict[str, SubAttributeNormalization]
    stats: MatrixStats
    selected_category: str | None = None
    sub_attribute_params: NormalizationParams = field(
        default_factory=NormalizationParams.for_sub_attributes
    )

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation (integer ids become string keys)."""
        return _stringify_keys(asdict(self))


def _stringify_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _stringify_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify_keys(v) for v in value]
    return value
