"""Tests for depmatrix.analysis.stats — coverage statistics."""

from __future__ import annotations

import pytest

from depmatrix.analysis.aggregate import aggregate
from depmatrix.analysis.stats import DEFAULT_MIN_SUBMISSIONS, compute_stats
from depmatrix.models import Matrix


class TestComputeStats:
    def test_four_of_nine_filled(self, build_matrix, build_submission) -> None:  # type: ignore[no-untyped-def]
        matrix = build_matrix([(1, "A"), (2, "A"), (3, "B")])
        subs = [
            build_submission(matrix, {"2_1": True, "3_1": True}),
            build_submission(matrix, {"2_1": True, "3_2": True, "1_3": True}),
        ]
        agg = aggregate(matrix, subs)
        stats = compute_stats(matrix, agg.votes, agg.submission_count)
        assert stats.max_possible_relationships == 9
        assert stats.filled_relationships == 4
        assert stats.total_relationships == 5
        assert stats.percentage_filled == pytest.approx(44.44, abs=0.01)

    def test_filled_never_exceeds_total(self, two_category_matrix: Matrix, two_submissions) -> None:  # type: ignore[no-untyped-def]
        agg = aggregate(two_category_matrix, two_submissions)
        stats = compute_stats(two_category_matrix, agg.votes, agg.submission_count)
        assert stats.filled_relationships <= stats.total_relationships

    def test_empty_matrix(self) -> None:
        stats = compute_stats(Matrix(), {}, 0)
        assert stats.max_possible_relationships == 0
        assert stats.percentage_filled == 0.0

    def test_outside_grid_clamped(self, build_matrix) -> None:  # type: ignore[no-untyped-def]
        matrix = build_matrix([(1, "A")])
        stats = compute_stats(matrix, {"1_1": 1, "5_6": 1}, 1)
        assert stats.percentage_filled == 100.0


class TestSubmissionProgress:
    def test_partial(self) -> None:
        stats = compute_stats(Matrix(), {}, 1, min_required=4)
        assert stats.submission_progress == pytest.approx(25.0)

    def test_capped(self) -> None:
        stats = compute_stats(Matrix(), {}, 10)
        assert stats.submission_progress == 100.0

    def test_default_minimum(self) -> None:
        stats = compute_stats(Matrix(), {}, 1)
        assert stats.submission_progress == pytest.approx(100 / DEFAULT_MIN_SUBMISSIONS)

    def test_zero_required(self) -> None:
        stats = compute_stats(Matrix(), {}, 0, min_required=0)
        assert stats.submission_progress == 100.0
