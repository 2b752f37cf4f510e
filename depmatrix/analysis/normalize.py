"""Min-max normalization of category and sub-attribute weights.

This is a simplified stand-in for AHP priority weights: raw vote sums are
rescaled linearly into a target range and compared by ratio.  There is no
eigenvector or consistency-ratio computation.

The two normalizers handle ties differently and on purpose:

- categories: every category becomes ``TIED_CATEGORY_VALUE`` (1)
- sub-attributes: every row becomes ``params.new_min``
"""

from __future__ import annotations

from collections.abc import Mapping

from depmatrix.analysis.keys import cell_key, rows_by_category
from depmatrix.analysis.metrics import (
    TIED_CATEGORY_VALUE,
    comparison_ratio,
    min_max_normalize,
    pairwise_comparisons,
    safe_ratio,
)
from depmatrix.analysis.models import (
    CategoryNormalization,
    NormalizationParams,
    SubAttributeNormalization,
)
from depmatrix.analysis.totals import (
    category_subtotals,
    category_totals,
    column_totals,
    row_totals,
)
from depmatrix.models import Matrix


def normalize_categories(
    matrix: Matrix,
    votes: Mapping[str, int],
    params: NormalizationParams | None = None,
) -> CategoryNormalization:
    """Weight, normalize and compare every category of the matrix.

    ``weight = (category total + category subtotal) / rows in category``,
    i.e. the mean combined outgoing and incoming activity per sub-attribute.
    """
    if params is None:
        params = NormalizationParams.for_categories()

    groups = rows_by_category(matrix)
    totals = category_totals(matrix, row_totals(matrix, votes))
    subtotals = category_subtotals(matrix, column_totals(matrix, votes))

    row_counts = {category: len(members) for category, members in groups.items()}
    combined = {category: totals[category] + subtotals.get(category, 0) for category in groups}
    weights = {
        category: safe_ratio(combined[category], row_counts[category]) for category in groups
    }
    normalized = min_max_normalize(
        weights, params.new_min, params.new_max, tied_value=TIED_CATEGORY_VALUE
    )

    top = max(normalized.values(), default=0.0)
    comparison = {category: comparison_ratio(value, top) for category, value in normalized.items()}

    return CategoryNormalization(
        params=params,
        row_counts=row_counts,
        totals=totals,
        subtotals=subtotals,
        combined_totals=combined,
        weights=weights,
        normalized=normalized,
        comparison=comparison,
        comparison_matrix=pairwise_comparisons(normalized),
    )


def normalize_sub_attributes(
    matrix: Matrix,
    votes: Mapping[str, int],
    category: str,
    params: NormalizationParams | None = None,
) -> SubAttributeNormalization:
    """Weight, normalize and pairwise-compare the rows of one category.

    A row's weight is the raw sum of its votes across all matrix columns.
    An unknown category yields an empty result.
    """
    if params is None:
        params = NormalizationParams.for_sub_attributes()

    members = rows_by_category(matrix).get(category, [])
    weights = {
        row.id: sum(max(votes.get(cell_key(row.id, col.id), 0), 0) for col in matrix.columns)
        for row in members
    }
    normalized = min_max_normalize(
        weights, params.new_min, params.new_max, tied_value=params.new_min
    )

    return SubAttributeNormalization(
        category=category,
        params=params,
        names={row.id: row.name for row in members},
        weights=weights,
        normalized=normalized,
        comparisons=pairwise_comparisons(normalized),
    )


def normalize_all_sub_attributes(
    matrix: Matrix,
    votes: Mapping[str, int],
    params: NormalizationParams | None = None,
) -> dict[str, SubAttributeNormalization]:
    """Run ``normalize_sub_attributes`` for every category, in row order."""
    return {
        category: normalize_sub_attributes(matrix, votes, category, params)
        for category in rows_by_category(matrix)
    }
