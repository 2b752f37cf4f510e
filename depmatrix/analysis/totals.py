"""Row, column and category totals over aggregated vote counts.

Totals follow the full-matrix convention: every cell of a row counts, whether
or not the editor lets users fill it in.  ``lower_triangle_counts`` is the one
exception and exists so reports can show the editor's view next to it.
"""

from __future__ import annotations

from collections.abc import Mapping

from depmatrix.analysis.keys import (
    cell_key,
    column_categories,
    is_lower_triangle,
    parse_cell_key,
    rows_by_category,
)
from depmatrix.analysis.models import MatrixTotals
from depmatrix.models import Matrix


def row_totals(matrix: Matrix, votes: Mapping[str, int]) -> dict[int, int]:
    """Sum the votes of every key whose row part is a matrix row.

    Keys are parsed rather than built from the column list, so votes in
    columns the matrix no longer has still count toward their row.
    """
    totals = {row.id: 0 for row in matrix.rows}
    for key, count in votes.items():
        if count <= 0:
            continue
        parsed = parse_cell_key(key)
        if parsed is None or parsed[0] not in totals:
            continue
        totals[parsed[0]] += count
    return totals


def category_totals(matrix: Matrix, rows: Mapping[int, int]) -> dict[str, int]:
    return {
        category: sum(rows.get(row.id, 0) for row in members)
        for category, members in rows_by_category(matrix).items()
    }


def column_totals(matrix: Matrix, votes: Mapping[str, int]) -> dict[int, int]:
    return {
        col.id: sum(votes.get(cell_key(row.id, col.id), 0) for row in matrix.rows)
        for col in matrix.columns
    }


def category_subtotals(matrix: Matrix, columns: Mapping[int, int]) -> dict[str, int]:
    """Sum column totals per category of the row that shares each column's id.

    This is the incoming side of a category: how often other sub-attributes
    depend on its members.  Columns without a categorised row add nothing.
    """
    subtotals = {category: 0 for category in rows_by_category(matrix)}
    owners = column_categories(matrix)
    for col in matrix.columns:
        category = owners.get(col.id)
        if category is None or category not in subtotals:
            continue
        subtotals[category] += columns.get(col.id, 0)
    return subtotals


def combined_totals(
    categories: Mapping[str, int], subtotals: Mapping[str, int]
) -> dict[str, int]:
    """Outgoing (row) plus incoming (column) activity per category."""
    return {category: total + subtotals.get(category, 0) for category, total in categories.items()}


def lower_triangle_counts(matrix: Matrix, votes: Mapping[str, int]) -> dict[int, int]:
    """Per-row votes restricted to the editable cells (column id < row id)."""
    return {
        row.id: sum(
            votes.get(cell_key(row.id, col.id), 0)
            for col in matrix.columns
            if is_lower_triangle(row.id, col.id)
        )
        for row in matrix.rows
    }


def build_totals(matrix: Matrix, votes: Mapping[str, int]) -> MatrixTotals:
    rows = row_totals(matrix, votes)
    columns = column_totals(matrix, votes)
    categories = category_totals(matrix, rows)
    subtotals = category_subtotals(matrix, columns)
    return MatrixTotals(
        row_totals=rows,
        column_totals=columns,
        category_totals=categories,
        category_subtotals=subtotals,
        combined_totals=combined_totals(categories, subtotals),
        lower_triangle_counts=lower_triangle_counts(matrix, votes),
    )
