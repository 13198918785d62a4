from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

import pandas as pd

from src.normalize.records import NEED_INCOME_THRESHOLD
from src.normalize.schema import HIGH_SCHOOL_SENIOR, UNDERGRADUATE, ScholarshipRecord, StudentRecord

if TYPE_CHECKING:
    from src.io.catalog import ScholarshipStore

logger = logging.getLogger(__name__)

INDEX_COLUMNS = ("min_gpa", "requires_financial_need", "citizenship", "enrollment_status")


@dataclass(frozen=True, slots=True)
class IndexQuery:
    gpa: float
    citizenship: str
    enrollment_terms: tuple[str, ...]
    exclude_need_based: bool


def has_financial_need(student: StudentRecord) -> bool:
    return student.household_income < NEED_INCOME_THRESHOLD or student.financial_need


def enrollment_search_terms(enrollment_status: str) -> tuple[str, ...]:
    # Seniors are also eligible for awards aimed at incoming undergraduates.
    if enrollment_status == HIGH_SCHOOL_SENIOR:
        return (HIGH_SCHOOL_SENIOR, UNDERGRADUATE)
    return (enrollment_status,)


def build_index_query(student: StudentRecord) -> IndexQuery:
    return IndexQuery(
        gpa=float(student.gpa),
        citizenship=student.citizenship_status,
        enrollment_terms=enrollment_search_terms(student.enrollment_status),
        exclude_need_based=not has_financial_need(student),
    )


def _contains_any(series: pd.Series, values: Iterable[str]) -> pd.Series:
    if series.empty:
        return pd.Series(False, index=series.index, dtype=bool)
    hits = series.explode().isin(list(values))
    return hits.groupby(level=0).any().reindex(series.index, fill_value=False).astype(bool)


def index_mask(frame: pd.DataFrame, query: IndexQuery) -> pd.Series:
    """Evaluate the four indexed predicates over a whole catalog frame at once."""

    min_gpa = pd.to_numeric(frame["min_gpa"], errors="coerce").fillna(0.0)
    mask = min_gpa <= query.gpa
    mask &= _contains_any(frame["citizenship"], (query.citizenship,))
    mask &= _contains_any(frame["enrollment_status"], query.enrollment_terms)
    if query.exclude_need_based:
        mask &= ~frame["requires_financial_need"].fillna(False).astype(bool)
    return mask.astype(bool)


def filter_candidates(store: ScholarshipStore, student: StudentRecord) -> list[ScholarshipRecord]:
    query = build_index_query(student)
    candidates = store.find_candidates(query)
    logger.debug(
        "Index filter student=%s candidates=%d terms=%s exclude_need_based=%s",
        student.student_id,
        len(candidates),
        ",".join(query.enrollment_terms),
        query.exclude_need_based,
    )
    return candidates
