"""Cell keys, the triangle convention, and category grouping.

A cell is addressed by the composite key ``"{rowId}_{columnId}"``.  In the
matrix editor only cells with ``column_id < row_id`` (the lower triangle) are
editable; the diagonal and the upper triangle are disabled.  Normalization
totals deliberately do *not* apply that filter (see ``totals.py``), so the
helpers here keep both views available.
"""

from __future__ import annotations

from depmatrix.models import Matrix, Row


def cell_key(row_id: int, column_id: int) -> str:
    return f"{row_id}_{column_id}"


def parse_cell_key(key: str) -> tuple[int, int] | None:
    """Split ``"3_1"`` into ``(3, 1)``.  Returns None for malformed keys."""
    row_part, sep, col_part = key.partition("_")
    if not sep:
        return None
    try:
        return int(row_part), int(col_part)
    except ValueError:
        return None


def is_lower_triangle(row_id: int, column_id: int) -> bool:
    """True for cells the editor allows users to fill in."""
    return column_id < row_id


def rows_by_category(matrix: Matrix) -> dict[str, list[Row]]:
    """Group rows by category label, in order of first appearance."""
    groups: dict[str, list[Row]] = {}
    for row in matrix.rows:
        groups.setdefault(row.category_label, []).append(row)
    return groups


def categories(matrix: Matrix) -> list[str]:
    return list(rows_by_category(matrix))


def column_categories(matrix: Matrix) -> dict[int, str]:
    """Map each column id to the raw category of the row sharing its id.

    Rows with a blank category are left out, so their columns belong to no
    category.
    """
    return {row.id: row.category for row in matrix.rows if row.category}
