"""Turn stored history entries into canonical submissions.

Snapshots have been stored in two shapes over time::

    {"data": {"rows": [...], "columns": [...], "dependencies": {...}}, ...}
    {"rows": [...], "columns": [...], "dependencies": {...}}

Both normalize to a ``Matrix``.  Anything else — bad JSON, missing keys,
wrong types — is logged and treated as unusable rather than raised, so one
broken record never blocks a report.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from depmatrix.models import HistoryEntry, Matrix, Submission

logger = logging.getLogger(__name__)

SUBMIT_ACTION = "submit_matrix"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_snapshot(raw: str | Mapping[str, Any] | None) -> Matrix | None:
    """Parse one snapshot into a Matrix, or return None if it is unusable."""
    if raw is None:
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Unparseable matrix snapshot: %s", e)
            return None
    if not isinstance(raw, Mapping):
        logger.warning("Matrix snapshot is %s, expected an object", type(raw).__name__)
        return None

    nested = raw.get("data")
    body = nested if isinstance(nested, Mapping) else raw
    if not _has_matrix_shape(body):
        logger.warning("Matrix snapshot missing rows/columns/dependencies: keys=%s", sorted(body))
        return None

    try:
        return Matrix.model_validate(
            {
                "rows": body["rows"],
                "columns": body["columns"],
                "dependencies": body["dependencies"],
            }
        )
    except ValidationError as e:
        logger.warning("Invalid matrix snapshot: %d error(s)", e.error_count())
        return None


def _has_matrix_shape(body: Mapping[str, Any]) -> bool:
    return (
        isinstance(body.get("rows"), list)
        and isinstance(body.get("columns"), list)
        and isinstance(body.get("dependencies"), Mapping)
    )


def submission_from_entry(entry: HistoryEntry) -> Submission:
    """Build a Submission; ``data`` stays None when the snapshot is unusable."""
    return Submission(
        id=entry.id,
        user_id=entry.user_id,
        username=entry.username,
        matrix_id=entry.matrix_id,
        data=parse_snapshot(entry.matrix_snapshot),
        created_at=entry.submitted_at,
    )


def select_submission_entries(
    entries: Iterable[HistoryEntry],
    *,
    action: str = SUBMIT_ACTION,
    exclude_usernames: Iterable[str] = (),
    matrix_id: str | int | None = None,
) -> list[HistoryEntry]:
    """Keep submit entries, oldest first, minus excluded users.

    Entries without a timestamp sort first.
    """
    excluded = set(exclude_usernames)
    selected = [
        e
        for e in entries
        if e.action == action
        and e.username not in excluded
        and (matrix_id is None or str(e.matrix_id) == str(matrix_id))
    ]
    selected.sort(key=lambda e: timestamp_sort_key(e.submitted_at))
    return selected


def submissions_from_history(
    entries: Iterable[HistoryEntry],
    *,
    action: str = SUBMIT_ACTION,
    exclude_usernames: Iterable[str] = (),
    matrix_id: str | int | None = None,
) -> list[Submission]:
    """Filter history down to submissions and parse every snapshot."""
    selected = select_submission_entries(
        entries,
        action=action,
        exclude_usernames=exclude_usernames,
        matrix_id=matrix_id,
    )
    submissions = [submission_from_entry(e) for e in selected]
    unusable = sum(1 for s in submissions if s.data is None)
    if unusable:
        logger.warning("%d of %d submission snapshot(s) unusable", unusable, len(submissions))
    return submissions


def timestamp_sort_key(moment: datetime | None) -> datetime:
    if moment is None:
        return _EPOCH
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
