"""Per-column submission analytics: averages and a per-submission timeline."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from depmatrix.analysis.keys import parse_cell_key
from depmatrix.analysis.models import ColumnAverage, ColumnSeries, ColumnTimeline
from depmatrix.models import Matrix, Submission
from depmatrix.snapshots import timestamp_sort_key


def column_counts(snapshot: Matrix) -> Counter[int]:
    """Truthy cells per column id in one snapshot."""
    counts: Counter[int] = Counter()
    for key, value in snapshot.dependencies.items():
        if not value:
            continue
        parsed = parse_cell_key(key)
        if parsed is not None:
            counts[parsed[1]] += 1
    return counts


def column_averages(matrix: Matrix, snapshots: Sequence[Matrix | None]) -> list[ColumnAverage]:
    """Average dependencies per column across snapshots.

    The denominator is every snapshot passed in, unusable ones (``None``)
    included, so a broken record pulls the averages down rather than
    disappearing.
    """
    if not snapshots:
        return []
    totals: Counter[int] = Counter()
    for snapshot in snapshots:
        if snapshot is not None:
            totals.update(column_counts(snapshot))
    return [
        ColumnAverage(id=col.id, name=col.name, average=totals[col.id] / len(snapshots))
        for col in matrix.columns
    ]


def column_timeline(matrix: Matrix, submissions: Sequence[Submission]) -> ColumnTimeline:
    """Dependencies per column for each submission, oldest submission first."""
    ordered = sorted(submissions, key=lambda s: timestamp_sort_key(s.created_at))
    per_submission = [
        column_counts(s.data) if s.data is not None else Counter() for s in ordered
    ]
    labels = [s.created_at.date().isoformat() if s.created_at else "" for s in ordered]
    series = [
        ColumnSeries(id=col.id, name=col.name, counts=[c[col.id] for c in per_submission])
        for col in matrix.columns
    ]
    return ColumnTimeline(labels=labels, series=series)
