"""Normalization API endpoints — aggregate submissions and compute weights.

Two endpoints:

- ``POST /normalization`` — full report: totals, category weights and
  comparisons, per-category sub-attribute weights and pairwise matrices,
  coverage statistics
- ``POST /normalization/stats`` — coverage statistics only

The server keeps no state.  Callers send the matrix plus either canonical
``submissions`` or raw ``history`` entries (whose ``matrixSnapshot`` strings
are parsed here); with neither, the live matrix is normalized on its own.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from depmatrix.analysis.aggregate import aggregate
from depmatrix.analysis.models import (
    CategoryNormalization,
    MatrixStats,
    NormalizationParams,
    NormalizationReport,
    SubAttributeNormalization,
)
from depmatrix.analysis.report import UnknownCategoryError, build_report
from depmatrix.analysis.stats import compute_stats
from depmatrix.config import DepMatrixSettings
from depmatrix.models import HistoryEntry, Matrix, Submission
from depmatrix.snapshots import submissions_from_history

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RangeIn(BaseModel):
    """Target range for min-max rescaling."""

    new_min: float
    new_max: float
    original_min: float = 1.0
    original_max: float = 9.0


class NormalizationRequest(BaseModel):
    matrix: Matrix
    submissions: list[Submission] | None = None
    history: list[HistoryEntry] | None = None
    category: str | None = None
    category_range: RangeIn | None = None
    sub_attribute_range: RangeIn | None = None
    min_submissions_required: int | None = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class CategoryOut(BaseModel):
    """One row of the category results table."""

    name: str
    sub_attributes: int
    total: int
    subtotal: int
    combined_total: int
    weight: float
    normalized: float
    comparison: float


class SubAttributeOut(BaseModel):
    id: int
    name: str
    weight: int
    normalized: float


class SubAttributeGroupOut(BaseModel):
    """Sub-attribute weights and the pairwise matrix for one category."""

    category: str
    rows: list[SubAttributeOut]
    comparisons: dict[str, dict[str, float]]


class StatsOut(BaseModel):
    total_relationships: int
    filled_relationships: int
    max_possible_relationships: int
    percentage_filled: float
    submission_count: int
    submission_progress: float


class AggregationOut(BaseModel):
    votes: dict[str, int]
    submission_count: int
    invalid_count: int
    fallback: bool


class TotalsOut(BaseModel):
    row_totals: dict[str, int]
    column_totals: dict[str, int]
    lower_triangle_counts: dict[str, int]


class RangeOut(BaseModel):
    new_min: float
    new_max: float
    original_min: float
    original_max: float


class NormalizationResponse(BaseModel):
    """Full normalization result for one matrix."""

    selected_category: str | None
    category_range: RangeOut
    sub_attribute_range: RangeOut
    categories: list[CategoryOut]
    category_comparison_matrix: dict[str, dict[str, float]]
    sub_attributes: list[SubAttributeGroupOut]
    totals: TotalsOut
    aggregation: AggregationOut
    stats: StatsOut


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> DepMatrixSettings:
    return request.app.state.settings


def _params(
    requested: RangeIn | None, fallback: NormalizationParams
) -> NormalizationParams:
    if requested is None:
        return fallback
    try:
        return NormalizationParams(
            new_min=requested.new_min,
            new_max=requested.new_max,
            original_min=requested.original_min,
            original_max=requested.original_max,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _resolve_submissions(
    body: NormalizationRequest, settings: DepMatrixSettings
) -> list[Submission]:
    """Canonical submissions win; otherwise parse raw history entries."""
    if body.submissions is not None:
        return list(body.submissions)
    if body.history is not None:
        return submissions_from_history(
            body.history,
            action=settings.submission_action,
            exclude_usernames=settings.excluded_usernames,
        )
    return []


def _range_out(params: NormalizationParams) -> RangeOut:
    return RangeOut(
        new_min=params.new_min,
        new_max=params.new_max,
        original_min=params.original_min,
        original_max=params.original_max,
    )


def _serialize_categories(result: CategoryNormalization) -> list[CategoryOut]:
    return [
        CategoryOut(
            name=name,
            sub_attributes=result.row_counts[name],
            total=result.totals.get(name, 0),
            subtotal=result.subtotals.get(name, 0),
            combined_total=result.combined_totals.get(name, 0),
            weight=result.weights[name],
            normalized=result.normalized[name],
            comparison=result.comparison[name],
        )
        for name in result.row_counts
    ]


def _serialize_sub_attributes(result: SubAttributeNormalization) -> SubAttributeGroupOut:
    return SubAttributeGroupOut(
        category=result.category,
        rows=[
            SubAttributeOut(
                id=row_id,
                name=result.names.get(row_id, ""),
                weight=weight,
                normalized=result.normalized[row_id],
            )
            for row_id, weight in result.weights.items()
        ],
        comparisons={
            str(a): {str(b): value for b, value in row.items()}
            for a, row in result.comparisons.items()
        },
    )


def _serialize_stats(stats: MatrixStats) -> StatsOut:
    return StatsOut(
        total_relationships=stats.total_relationships,
        filled_relationships=stats.filled_relationships,
        max_possible_relationships=stats.max_possible_relationships,
        percentage_filled=round(stats.percentage_filled, 2),
        submission_count=stats.submission_count,
        submission_progress=round(stats.submission_progress, 2),
    )


def _stringify(mapping: dict[int, int]) -> dict[str, int]:
    return {str(k): v for k, v in mapping.items()}


def serialize_report(report: NormalizationReport) -> NormalizationResponse:
    """Convert a NormalizationReport dataclass to the response model."""
    agg = report.aggregation
    return NormalizationResponse(
        selected_category=report.selected_category,
        category_range=_range_out(report.categories.params),
        sub_attribute_range=_range_out(report.sub_attribute_params),
        categories=_serialize_categories(report.categories),
        category_comparison_matrix=report.categories.comparison_matrix,
        sub_attributes=[_serialize_sub_attributes(s) for s in report.sub_attributes.values()],
        totals=TotalsOut(
            row_totals=_stringify(report.totals.row_totals),
            column_totals=_stringify(report.totals.column_totals),
            lower_triangle_counts=_stringify(report.totals.lower_triangle_counts),
        ),
        aggregation=AggregationOut(
            votes=dict(agg.votes),
            submission_count=agg.submission_count,
            invalid_count=agg.invalid_count,
            fallback=agg.fallback,
        ),
        stats=_serialize_stats(report.stats),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/normalization", response_model=NormalizationResponse)
def normalize(body: NormalizationRequest, request: Request) -> NormalizationResponse:
    """Aggregate submissions and return the full normalization report."""
    settings = _get_settings(request)
    try:
        report = build_report(
            body.matrix,
            _resolve_submissions(body, settings),
            category=body.category,
            category_params=_params(body.category_range, settings.category_params()),
            sub_attribute_params=_params(
                body.sub_attribute_range, settings.sub_attribute_params()
            ),
            min_required=(
                body.min_submissions_required
                if body.min_submissions_required is not None
                else settings.min_submissions_required
            ),
        )
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return serialize_report(report)


@router.post("/normalization/stats", response_model=StatsOut)
def normalization_stats(body: NormalizationRequest, request: Request) -> StatsOut:
    """Coverage statistics only — no normalization."""
    settings = _get_settings(request)
    aggregation = aggregate(body.matrix, _resolve_submissions(body, settings))
    min_required = (
        body.min_submissions_required
        if body.min_submissions_required is not None
        else settings.min_submissions_required
    )
    stats = compute_stats(
        body.matrix, aggregation.votes, aggregation.submission_count, min_required
    )
    return _serialize_stats(stats)
