"""Normalization page computation — aggregation, totals, weights and coverage."""

from depmatrix.analysis.aggregate import aggregate
from depmatrix.analysis.models import NormalizationParams, NormalizationReport
from depmatrix.analysis.normalize import normalize_categories, normalize_sub_attributes
from depmatrix.analysis.report import UnknownCategoryError, build_report
from depmatrix.analysis.stats import compute_stats

__all__ = [
    "NormalizationParams",
    "NormalizationReport",
    "UnknownCategoryError",
    "aggregate",
    "build_report",
    "compute_stats",
    "normalize_categories",
    "normalize_sub_attributes",
]
