"""Coverage statistics for an aggregated matrix."""

from __future__ import annotations

from collections.abc import Mapping

from depmatrix.analysis.metrics import percentage
from depmatrix.analysis.models import MatrixStats
from depmatrix.models import Matrix

DEFAULT_MIN_SUBMISSIONS = 3


def compute_stats(
    matrix: Matrix,
    votes: Mapping[str, int],
    submission_count: int,
    min_required: int = DEFAULT_MIN_SUBMISSIONS,
) -> MatrixStats:
    """Summarise how much of the matrix the submissions cover.

    The denominator is the full rows × columns grid, diagonal and disabled
    upper triangle included.
    """
    max_possible = len(matrix.rows) * len(matrix.columns)
    filled = sum(1 for count in votes.values() if count > 0)
    total = sum(votes.values())

    if min_required <= 0:
        progress = 100.0
    else:
        progress = min(100.0, submission_count / min_required * 100)

    return MatrixStats(
        total_relationships=total,
        filled_relationships=filled,
        max_possible_relationships=max_possible,
        percentage_filled=percentage(filled, max_possible),
        submission_count=submission_count,
        submission_progress=progress,
    )
