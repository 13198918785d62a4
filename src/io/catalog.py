from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable
from uuid import uuid4

import numpy as np
import pandas as pd

from src.normalize.records import scholarship_from_payload, student_from_payload
from src.normalize.schema import ScholarshipRecord, StudentRecord
from src.rank.stage1_eligibility import INDEX_COLUMNS, IndexQuery, index_mask

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_DIR = ROOT_DIR / "data"
DEFAULT_SCHOLARSHIPS_PATH = DEFAULT_DATA_DIR / "scholarships.json"
DEFAULT_STUDENTS_PATH = DEFAULT_DATA_DIR / "students.json"

logger = logging.getLogger(__name__)


class ScholarshipStore(ABC):
    @abstractmethod
    def find_candidates(self, query: IndexQuery) -> list[ScholarshipRecord]:
        """Return every scholarship passing the indexed predicates, in catalog order."""


class ScholarshipCatalog(ScholarshipStore):
    """In-memory scholarship catalog with a frame of the indexed columns."""

    def __init__(self, scholarships: Iterable[ScholarshipRecord]) -> None:
        self._records = list(scholarships)
        self._index_df = pd.DataFrame(
            {
                "scholarship_id": [record.scholarship_id for record in self._records],
                "min_gpa": pd.Series([record.min_gpa for record in self._records], dtype=float),
                "requires_financial_need": pd.Series(
                    [record.requires_financial_need for record in self._records], dtype=bool
                ),
                "citizenship": [list(record.citizenship) for record in self._records],
                "enrollment_status": [list(record.enrollment_status) for record in self._records],
            },
            columns=["scholarship_id", *INDEX_COLUMNS],
        )

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[ScholarshipRecord]:
        return list(self._records)

    @property
    def index_df(self) -> pd.DataFrame:
        return self._index_df.copy()

    def get(self, scholarship_id: str) -> ScholarshipRecord | None:
        for record in self._records:
            if record.scholarship_id == scholarship_id:
                return record
        return None

    def find_candidates(self, query: IndexQuery) -> list[ScholarshipRecord]:
        if not self._records:
            return []
        positions = np.flatnonzero(index_mask(self._index_df, query).to_numpy(dtype=bool))
        return [self._records[position] for position in positions]

    @classmethod
    def from_payloads(cls, payloads: Iterable[dict[str, Any]]) -> ScholarshipCatalog:
        return cls(scholarship_from_payload(payload) for payload in payloads)


class StudentDirectory:
    def __init__(self, students: Iterable[StudentRecord] = ()) -> None:
        self._students: dict[str, StudentRecord] = {}
        for student in students:
            self._students[student.student_id] = student

    def get(self, student_id: str) -> StudentRecord | None:
        return self._students.get(student_id)

    def count(self) -> int:
        return len(self._students)

    def next_student_id(self) -> str:
        return f"stu_{self.count() + 1:03d}"

    def add(self, payload: dict[str, Any]) -> StudentRecord:
        student = student_from_payload(payload, student_id=self.next_student_id())
        self._students[student.student_id] = student
        return student

    @classmethod
    def from_payloads(cls, payloads: Iterable[dict[str, Any]]) -> StudentDirectory:
        directory = cls()
        for payload in payloads:
            if payload.get("id"):
                student = student_from_payload(payload)
                directory._students[student.student_id] = student
            else:
                directory.add(payload)
        return directory


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _unwrap(payload: Any, key: str) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get(key, [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of {key} records.")
    return payload


def load_catalog(path: Path | None = None) -> ScholarshipCatalog:
    resolved = path or DEFAULT_SCHOLARSHIPS_PATH
    catalog = ScholarshipCatalog.from_payloads(_unwrap(_read_json(resolved), "scholarships"))
    logger.info("Loaded %d scholarships from %s", len(catalog), resolved)
    return catalog


def load_students(path: Path | None = None) -> StudentDirectory:
    resolved = path or DEFAULT_STUDENTS_PATH
    directory = StudentDirectory.from_payloads(_unwrap(_read_json(resolved), "students"))
    logger.info("Loaded %d students from %s", directory.count(), resolved)
    return directory


def write_json_atomic(payload: dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
