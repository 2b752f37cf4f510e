"""Tests for depmatrix.analysis.timeline — per-column submission analytics."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from depmatrix.analysis.timeline import column_averages, column_counts, column_timeline
from depmatrix.models import Matrix, Submission


class TestColumnCounts:
    def test_counts_truthy_per_column(self, build_matrix) -> None:  # type: ignore[no-untyped-def]
        snapshot = build_matrix([(1, "A")], dependencies={"2_1": True, "3_1": 1, "3_2": False})
        assert column_counts(snapshot) == {1: 2}

    def test_skips_bad_keys(self, build_matrix) -> None:  # type: ignore[no-untyped-def]
        snapshot = build_matrix([(1, "A")], dependencies={"bad": True, "1_4": True})
        assert dict(column_counts(snapshot)) == {4: 1}


class TestColumnAverages:
    def test_averages(
        self, two_category_matrix: Matrix, two_submissions: list[Submission]
    ) -> None:
        snapshots = [s.data for s in two_submissions]
        result = column_averages(two_category_matrix, snapshots)
        assert [a.id for a in result] == [1, 2, 3]
        assert result[0].average == pytest.approx(1.5)
        assert result[1].average == 0.0
        assert result[0].name == "Col 1"

    def test_unusable_snapshots_in_denominator(
        self, two_category_matrix: Matrix, two_submissions: list[Submission]
    ) -> None:
        snapshots = [s.data for s in two_submissions] + [None]
        result = column_averages(two_category_matrix, snapshots)
        assert result[0].average == pytest.approx(1.0)

    def test_empty(self, two_category_matrix: Matrix) -> None:
        assert column_averages(two_category_matrix, []) == []


class TestColumnTimeline:
    def test_oldest_first(
        self, two_category_matrix: Matrix, two_submissions: list[Submission]
    ) -> None:
        timeline = column_timeline(two_category_matrix, list(reversed(two_submissions)))
        assert timeline.labels == ["2026-03-01", "2026-03-02"]
        series = {s.id: s.counts for s in timeline.series}
        assert series == {1: [1, 2], 2: [0, 0], 3: [0, 0]}

    def test_unusable_submission_counts_zero(self, two_category_matrix: Matrix) -> None:
        broken = Submission(
            id="x", data=None, created_at=datetime(2026, 3, 9, tzinfo=timezone.utc)
        )
        timeline = column_timeline(two_category_matrix, [broken])
        assert timeline.labels == ["2026-03-09"]
        assert all(s.counts == [0] for s in timeline.series)

    def test_missing_timestamp_label(self, two_category_matrix: Matrix) -> None:
        timeline = column_timeline(two_category_matrix, [Submission(id="x", data=None)])
        assert timeline.labels == [""]
