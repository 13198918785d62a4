from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.io.catalog import (
    ScholarshipCatalog,
    StudentDirectory,
    load_catalog,
    load_students,
    write_json_atomic,
)
from src.rank.stage1_eligibility import INDEX_COLUMNS, IndexQuery


def _payload(scholarship_id: str, **eligibility) -> dict[str, object]:
    rules: dict[str, object] = {"citizenship": ["US Citizen"], "enrollment_status": ["undergraduate"]}
    rules.update(eligibility)
    return {"id": scholarship_id, "name": scholarship_id.title(), "amount": 1000, "eligibility": rules}


def test_catalog_index_frame_holds_indexed_columns() -> None:
    catalog = ScholarshipCatalog.from_payloads([_payload("alpha", gpa_minimum=3.0), _payload("beta")])

    frame = catalog.index_df

    assert list(frame.columns) == ["scholarship_id", *INDEX_COLUMNS]
    assert frame["min_gpa"].tolist() == [3.0, 0.0]
    assert frame["citizenship"].tolist() == [["US Citizen"], ["US Citizen"]]
    assert len(catalog) == 2
    assert catalog.get("beta") is not None
    assert catalog.get("missing") is None


def test_empty_catalog_returns_no_candidates() -> None:
    query = IndexQuery(gpa=4.0, citizenship="US Citizen", enrollment_terms=("undergraduate",), exclude_need_based=False)

    assert ScholarshipCatalog([]).find_candidates(query) == []


def test_load_catalog_accepts_wrapped_and_bare_lists(tmp_path: Path) -> None:
    wrapped = tmp_path / "wrapped.json"
    bare = tmp_path / "bare.json"
    wrapped.write_text(json.dumps({"scholarships": [_payload("alpha")]}), encoding="utf-8")
    bare.write_text(json.dumps([_payload("alpha"), _payload("beta")]), encoding="utf-8")

    assert len(load_catalog(wrapped)) == 1
    assert len(load_catalog(bare)) == 2


def test_load_catalog_rejects_non_list_payload(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"scholarships": {"id": "x"}}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_catalog(path)


def test_bundled_data_loads() -> None:
    catalog = load_catalog()
    students = load_students()

    assert len(catalog) == 13
    assert students.count() == 5
    assert students.get("stu_001") is not None
    assert students.get("stu_001").name == "Maria Garcia"


def test_student_directory_assigns_sequential_ids() -> None:
    directory = StudentDirectory()
    base = {
        "name": "New Student",
        "gpa": 3.0,
        "major": "History",
        "enrollment_status": "undergraduate",
        "citizenship_status": "US Citizen",
        "household_income": 30000,
    }

    first = directory.add(base)
    second = directory.add(base)

    assert first.student_id == "stu_001"
    assert second.student_id == "stu_002"
    assert directory.next_student_id() == "stu_003"


def test_write_json_atomic_leaves_no_temp_files(tmp_path: Path) -> None:
    output_path = tmp_path / "nested" / "report.json"

    write_json_atomic({"b": 1, "a": 2}, output_path)

    assert json.loads(output_path.read_text(encoding="utf-8")) == {"a": 2, "b": 1}
    assert [path.name for path in output_path.parent.iterdir()] == ["report.json"]
