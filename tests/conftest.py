"""Shared test fixtures for depmatrix tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from depmatrix.models import Column, HistoryEntry, HistoryUser, Matrix, Row, Submission


def make_matrix(
    rows: list[tuple[int, str]],
    column_ids: list[int] | None = None,
    dependencies: dict[str, object] | None = None,
) -> Matrix:
    """Build a matrix from ``(id, category)`` pairs; columns mirror row ids by default."""
    if column_ids is None:
        column_ids = [row_id for row_id, _ in rows]
    return Matrix(
        rows=[Row(id=row_id, name=f"Row {row_id}", category=cat) for row_id, cat in rows],
        columns=[Column(id=col_id, name=f"Col {col_id}") for col_id in column_ids],
        dependencies=dependencies or {},
    )


def make_submission(
    matrix: Matrix,
    dependencies: dict[str, object],
    *,
    username: str = "alice",
    created_at: datetime | None = None,
) -> Submission:
    return Submission(
        id=f"{username}-{len(dependencies)}",
        username=username,
        data=matrix.model_copy(update={"dependencies": dependencies}),
        created_at=created_at,
    )


@pytest.fixture
def build_matrix():  # type: ignore[no-untyped-def]
    """Factory fixture wrapping ``make_matrix``."""
    return make_matrix


@pytest.fixture
def build_submission():  # type: ignore[no-untyped-def]
    """Factory fixture wrapping ``make_submission``."""
    return make_submission


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def two_category_matrix() -> Matrix:
    """Rows 1 and 2 in category A, row 3 in category B; columns 1-3."""
    return make_matrix([(1, "A"), (2, "A"), (3, "B")])


@pytest.fixture
def two_submissions(two_category_matrix: Matrix) -> list[Submission]:
    """Two users: one marks 2->1, the other marks 2->1 and 3->1."""
    return [
        make_submission(
            two_category_matrix,
            {"2_1": True},
            username="alice",
            created_at=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
        ),
        make_submission(
            two_category_matrix,
            {"2_1": True, "3_1": True},
            username="bob",
            created_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        ),
    ]


def snapshot_json(matrix: Matrix, dependencies: dict[str, object], *, nested: bool) -> str:
    body = {
        "rows": [r.model_dump() for r in matrix.rows],
        "columns": [c.model_dump() for c in matrix.columns],
        "dependencies": dependencies,
    }
    if nested:
        return json.dumps({"title": "Snapshot", "data": body})
    return json.dumps(body)


@pytest.fixture
def history(two_category_matrix: Matrix) -> list[HistoryEntry]:
    """Mixed history: two submits, an admin submit, an edit and a broken record."""
    m = two_category_matrix
    return [
        HistoryEntry(
            id=2,
            user=HistoryUser(id=2, username="bob"),
            action="submit_matrix",
            matrix_id=7,
            matrix_snapshot=snapshot_json(m, {"2_1": True, "3_1": True}, nested=False),
            timestamp=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        ),
        HistoryEntry(
            id=1,
            user=HistoryUser(id=1, username="alice"),
            action="submit_matrix",
            matrix_id=7,
            matrix_snapshot=snapshot_json(m, {"2_1": True}, nested=True),
            timestamp=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
        ),
        HistoryEntry(
            id=3,
            user=HistoryUser(id=99, username="admin"),
            action="submit_matrix",
            matrix_id=7,
            matrix_snapshot=snapshot_json(m, {"1_3": True}, nested=False),
            timestamp=datetime(2026, 3, 3, 9, 0, tzinfo=timezone.utc),
        ),
        HistoryEntry(
            id=4,
            user=HistoryUser(id=1, username="alice"),
            action="update_matrix",
            matrix_id=7,
            matrix_snapshot=snapshot_json(m, {"3_2": True}, nested=False),
            timestamp=datetime(2026, 3, 4, 9, 0, tzinfo=timezone.utc),
        ),
        HistoryEntry(
            id=5,
            user=HistoryUser(id=3, username="carol"),
            action="submit_matrix",
            matrix_id=7,
            matrix_snapshot="{not json",
            timestamp=datetime(2026, 3, 5, 9, 0, tzinfo=timezone.utc),
        ),
    ]
