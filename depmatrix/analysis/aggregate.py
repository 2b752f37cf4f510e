"""Combine independent dependency snapshots into per-cell vote counts."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from depmatrix.analysis.keys import cell_key
from depmatrix.analysis.models import AggregatedVotes
from depmatrix.models import Matrix, Submission

logger = logging.getLogger(__name__)


def aggregate(matrix: Matrix, submissions: Sequence[Submission]) -> AggregatedVotes:
    """Count, for every cell, how many submissions marked it as a dependency.

    Every ``(row, column)`` pair of the matrix starts at 0 so that coverage
    denominators see the full grid.  Keys a submission sets outside that grid
    are still counted.

    With no submissions at all the live matrix's own dependencies stand in as
    a single snapshot, so there is always something to normalize.
    """
    if not submissions:
        logger.debug("No submissions — aggregating the live matrix as one snapshot")
        votes = _empty_votes(matrix)
        _add_snapshot(votes, matrix.dependencies)
        return AggregatedVotes(votes=votes, submission_count=1, fallback=True)

    votes = _empty_votes(matrix)
    valid = 0
    invalid = 0
    for submission in submissions:
        if submission.data is None:
            invalid += 1
            logger.warning(
                "Skipping submission %s from %r: no usable dependency snapshot",
                submission.id,
                submission.username or submission.user_id,
            )
            continue
        valid += 1
        _add_snapshot(votes, submission.data.dependencies)

    logger.info(
        "Aggregated %d submission(s) for %d×%d matrix (%d skipped)",
        valid,
        len(matrix.rows),
        len(matrix.columns),
        invalid,
    )
    return AggregatedVotes(votes=votes, submission_count=valid, invalid_count=invalid)


def synthetic_submission(matrix: Matrix) -> Submission:
    """Wrap the live matrix as a submission (what the fallback path counts)."""
    return Submission(id="live", data=matrix)


def _empty_votes(matrix: Matrix) -> dict[str, int]:
    """Create a vote map with every cell of the grid zeroed."""
    return {cell_key(row.id, col.id): 0 for row in matrix.rows for col in matrix.columns}


def _add_snapshot(votes: dict[str, int], dependencies: dict[str, object]) -> None:
    """Add one vote for every truthy cell of a snapshot."""
    for key, value in dependencies.items():
        if value:
            votes[key] = votes.get(key, 0) + 1
