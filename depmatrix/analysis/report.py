"""Run the full normalization pipeline for one matrix."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from depmatrix.analysis.aggregate import aggregate
from depmatrix.analysis.keys import categories
from depmatrix.analysis.models import NormalizationParams, NormalizationReport
from depmatrix.analysis.normalize import normalize_all_sub_attributes, normalize_categories
from depmatrix.analysis.stats import DEFAULT_MIN_SUBMISSIONS, compute_stats
from depmatrix.analysis.totals import build_totals
from depmatrix.models import Matrix, Submission

logger = logging.getLogger(__name__)


class UnknownCategoryError(ValueError):
    """Raised when the requested category has no rows in the matrix."""


def build_report(
    matrix: Matrix,
    submissions: Sequence[Submission] = (),
    *,
    category: str | None = None,
    category_params: NormalizationParams | None = None,
    sub_attribute_params: NormalizationParams | None = None,
    min_required: int = DEFAULT_MIN_SUBMISSIONS,
) -> NormalizationReport:
    """Aggregate, total, normalize and summarise in one pass.

    Sub-attributes are normalized for every category; *category* only marks
    which one the caller is looking at, defaulting to the first category in
    row order.  An empty matrix produces an empty, zeroed report.
    """
    known = categories(matrix)
    if category is not None and category not in known:
        raise UnknownCategoryError(f"Unknown category: {category!r}")
    selected = category if category is not None else (known[0] if known else None)

    if sub_attribute_params is None:
        sub_attribute_params = NormalizationParams.for_sub_attributes()

    aggregation = aggregate(matrix, submissions)
    votes = aggregation.votes
    report = NormalizationReport(
        aggregation=aggregation,
        totals=build_totals(matrix, votes),
        categories=normalize_categories(matrix, votes, category_params),
        sub_attributes=normalize_all_sub_attributes(matrix, votes, sub_attribute_params),
        stats=compute_stats(matrix, votes, aggregation.submission_count, min_required),
        selected_category=selected,
        sub_attribute_params=sub_attribute_params,
    )
    logger.debug(
        "Report built: %d categories, %d submission(s), %.1f%% filled",
        len(known),
        aggregation.submission_count,
        report.stats.percentage_filled,
    )
    return report
