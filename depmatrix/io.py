"""Read matrices, submissions and history exports from JSON or YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from depmatrix.models import HistoryEntry, Matrix, Submission

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class MatrixInputError(Exception):
    """An input file is missing, unreadable, or not the expected shape."""


def read_document(path: Path) -> Any:
    """Load a JSON or YAML document (chosen by file suffix)."""
    if not path.is_file():
        raise MatrixInputError(f"file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MatrixInputError(f"invalid yaml in {path}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MatrixInputError(f"invalid json in {path}: {e}") from e


def load_matrix(path: Path) -> Matrix:
    """Load a matrix record.

    Accepts the stored record (``{"title": ..., "data": {rows, columns,
    dependencies}}``) or the bare ``{rows, columns, dependencies}`` shape.
    """
    doc = read_document(path)
    if not isinstance(doc, dict):
        raise MatrixInputError(f"{path}: expected an object, got {type(doc).__name__}")
    body = doc["data"] if isinstance(doc.get("data"), dict) else doc
    try:
        return Matrix.model_validate(
            {
                "rows": body.get("rows", []),
                "columns": body.get("columns", []),
                "dependencies": body.get("dependencies") or {},
            }
        )
    except ValidationError as e:
        raise MatrixInputError(f"{path}: invalid matrix: {e}") from e


def load_submissions(path: Path) -> list[Submission]:
    """Load a list of already-unwrapped submissions.

    A submission whose ``data`` is not a usable matrix is kept with
    ``data=None`` so aggregation can count it as invalid.
    """
    items = _read_list(path)
    submissions: list[Submission] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise MatrixInputError(f"{path}: item {index} is not an object")
        try:
            submissions.append(Submission.model_validate(item))
        except ValidationError as e:
            raise MatrixInputError(f"{path}: invalid submission at item {index}: {e}") from e
    return submissions


def load_history(path: Path) -> list[HistoryEntry]:
    """Load raw history entries (with ``matrixSnapshot`` strings)."""
    items = _read_list(path)
    try:
        return [HistoryEntry.model_validate(item) for item in items]
    except ValidationError as e:
        raise MatrixInputError(f"{path}: invalid history entry: {e}") from e


def _read_list(path: Path) -> list[Any]:
    doc = read_document(path)
    if doc is None:
        return []
    if not isinstance(doc, list):
        raise MatrixInputError(f"{path}: expected a list, got {type(doc).__name__}")
    logger.debug("Read %d item(s) from %s", len(doc), path)
    return doc
