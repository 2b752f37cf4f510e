"""Tests for depmatrix.io — reading matrix, submission and history files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from depmatrix.io import (
    MatrixInputError,
    load_history,
    load_matrix,
    load_submissions,
    read_document,
)

_MATRIX = {
    "rows": [
        {"id": 1, "name": "Latency", "category": "Performance"},
        {"id": 2, "name": "Throughput", "category": "Performance"},
    ],
    "columns": [{"id": 1, "name": "Latency"}, {"id": 2, "name": "Throughput"}],
    "dependencies": {"2_1": True},
}


def _write(path: Path, payload: object) -> Path:
    if path.suffix in (".yaml", ".yml"):
        path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    else:
        path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestReadDocument:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MatrixInputError, match="not found"):
            read_document(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path: Path) -> None:
        path = tmp_path / "m.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(MatrixInputError, match="invalid json"):
            read_document(path)

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "m.yaml"
        path.write_text("rows: [unclosed", encoding="utf-8")
        with pytest.raises(MatrixInputError, match="invalid yaml"):
            read_document(path)


class TestLoadMatrix:
    def test_json(self, tmp_path: Path) -> None:
        matrix = load_matrix(_write(tmp_path / "m.json", _MATRIX))
        assert [r.name for r in matrix.rows] == ["Latency", "Throughput"]
        assert matrix.dependencies == {"2_1": True}

    def test_yaml(self, tmp_path: Path) -> None:
        matrix = load_matrix(_write(tmp_path / "m.yml", _MATRIX))
        assert len(matrix.columns) == 2

    def test_stored_record_shape(self, tmp_path: Path) -> None:
        matrix = load_matrix(_write(tmp_path / "m.json", {"title": "T", "data": _MATRIX}))
        assert len(matrix.rows) == 2

    def test_null_dependencies(self, tmp_path: Path) -> None:
        matrix = load_matrix(_write(tmp_path / "m.json", {**_MATRIX, "dependencies": None}))
        assert matrix.dependencies == {}

    def test_not_an_object(self, tmp_path: Path) -> None:
        with pytest.raises(MatrixInputError, match="expected an object"):
            load_matrix(_write(tmp_path / "m.json", [1, 2]))

    def test_invalid_rows(self, tmp_path: Path) -> None:
        with pytest.raises(MatrixInputError, match="invalid matrix"):
            load_matrix(_write(tmp_path / "m.json", {**_MATRIX, "rows": [{"name": "no id"}]}))


class TestLoadSubmissions:
    def test_loads_with_aliases(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "s.json",
            [
                {
                    "id": 1,
                    "userId": 3,
                    "username": "alice",
                    "data": _MATRIX,
                    "createdAt": "2026-03-01T09:00:00Z",
                }
            ],
        )
        subs = load_submissions(path)
        assert subs[0].user_id == 3
        assert subs[0].data is not None
        assert subs[0].created_at is not None

    def test_unusable_data_kept_as_none(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "s.json", [{"id": 1, "data": {"rows": "nope"}}])
        assert load_submissions(path)[0].data is None

    def test_string_snapshot_parsed(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "s.json", [{"id": 1, "data": json.dumps(_MATRIX)}])
        assert load_submissions(path)[0].data is not None

    def test_not_a_list(self, tmp_path: Path) -> None:
        with pytest.raises(MatrixInputError, match="expected a list"):
            load_submissions(_write(tmp_path / "s.json", {"id": 1}))

    def test_item_not_object(self, tmp_path: Path) -> None:
        with pytest.raises(MatrixInputError, match="item 0"):
            load_submissions(_write(tmp_path / "s.json", ["x"]))

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "s.yaml"
        path.write_text("", encoding="utf-8")
        assert load_submissions(path) == []


class TestLoadHistory:
    def test_loads_entries(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "h.json",
            [
                {
                    "id": 1,
                    "user": {"id": 1, "username": "alice"},
                    "action": "submit_matrix",
                    "matrixSnapshot": json.dumps(_MATRIX),
                    "timestamp": "2026-03-01T09:00:00Z",
                }
            ],
        )
        entries = load_history(path)
        assert entries[0].username == "alice"
        assert isinstance(entries[0].matrix_snapshot, str)

    def test_invalid_entry(self, tmp_path: Path) -> None:
        with pytest.raises(MatrixInputError, match="invalid history entry"):
            load_history(_write(tmp_path / "h.json", [{"user": "not-an-object"}]))
