"""Input models: matrix definitions, submission snapshots and history entries.

These are Pydantic models because they arrive from outside (JSON files, HTTP
bodies, persisted history rows).  Field aliases accept the camelCase names the
web frontend and history table use (``userId``, ``matrixSnapshot``, ...).
Computed results live in ``depmatrix.analysis.models`` as plain dataclasses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNCATEGORIZED = "Uncategorized"


class Row(BaseModel):
    """A sub-attribute: one row of the dependency matrix."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    category: str | None = ""

    @property
    def category_label(self) -> str:
        """Category used for grouping; blank categories share one bucket."""
        return self.category or UNCATEGORIZED


class Column(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""


class Matrix(BaseModel):
    """Rows, columns and the sparse ``"{rowId}_{columnId}"`` dependency map.

    Values in ``dependencies`` are tested for truthiness only; a missing key
    means "no dependency".
    """

    model_config = ConfigDict(frozen=True)

    rows: list[Row] = Field(default_factory=list)
    columns: list[Column] = Field(default_factory=list)
    dependencies: dict[str, Any] = Field(default_factory=dict)


class Submission(BaseModel):
    """One user's dependency snapshot at submission time.

    ``data`` is ``None`` when the snapshot is missing, not JSON, or lacks any of
    ``rows``/``columns``/``dependencies``; the aggregator counts such
    submissions as invalid instead of failing.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | int | None = None
    user_id: str | int | None = Field(default=None, alias="userId")
    username: str = ""
    matrix_id: str | int | None = Field(default=None, alias="matrixId")
    data: Matrix | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @field_validator("data", mode="before")
    @classmethod
    def _usable_snapshot(cls, value: Any) -> Any:
        """Run raw snapshots through the shared parser; unusable ones become None."""
        if value is None or isinstance(value, Matrix):
            return value
        from depmatrix.snapshots import parse_snapshot

        return parse_snapshot(value)


class HistoryUser(BaseModel):
    id: str | int | None = None
    username: str = ""


class HistoryEntry(BaseModel):
    """A raw history record as stored by the persistence layer.

    ``matrix_snapshot`` is usually a JSON string; already-decoded mappings are
    accepted too.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | int | None = None
    user_id: str | int | None = Field(default=None, alias="userId")
    user: HistoryUser | None = None
    action: str = ""
    matrix_id: str | int | None = Field(default=None, alias="matrixId")
    matrix_snapshot: str | dict[str, Any] | None = Field(default=None, alias="matrixSnapshot")
    timestamp: datetime | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @property
    def username(self) -> str:
        return self.user.username if self.user is not None else ""

    @property
    def submitted_at(self) -> datetime | None:
        return self.timestamp or self.created_at
