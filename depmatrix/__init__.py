"""Dependency-matrix aggregation and normalization engine."""

__version__ = "0.4.1"
