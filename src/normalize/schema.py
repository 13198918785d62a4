from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

HIGH_SCHOOL_SENIOR = "high_school_senior"
UNDERGRADUATE = "undergraduate"
GRADUATE = "graduate"
ENROLLMENT_STATUSES = (HIGH_SCHOOL_SENIOR, UNDERGRADUATE, GRADUATE)


@dataclass(frozen=True, slots=True)
class StudentRecord:
    """Validated student profile, immutable for the duration of a match request."""

    student_id: str
    name: str
    gpa: float
    major: str
    enrollment_status: str
    citizenship_status: str
    household_income: float
    financial_need: bool
    first_generation: bool
    gender: Optional[str] = None
    ethnicity: tuple[str, ...] = ()
    residency: Optional[str] = None
    military_affiliation: Optional[str] = None
    community_service_hours: int = 0
    email: Optional[str] = None
    state: Optional[str] = None
    graduation_year: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Eligibility:
    """Typed eligibility rules for a scholarship.

    The first four fields are promoted to indexed columns by the catalog.
    Keys the ingestion step does not recognize are kept in `extensions`.
    """

    gpa_minimum: Optional[float] = None
    financial_need: bool = False
    citizenship: tuple[str, ...] = ()
    enrollment_status: tuple[str, ...] = ()
    gender: Optional[str] = None
    ethnicity: tuple[str, ...] = ()
    residency: Optional[str] = None
    military_affiliation: tuple[str, ...] = ()
    first_generation: bool = False
    community_service_hours: Optional[int] = None
    extensions: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScholarshipRecord:
    scholarship_id: str
    name: str
    provider: str
    amount: float
    amount_type: str
    deadline: Optional[date]
    description: Optional[str]
    fields_of_study: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    eligibility: Eligibility = field(default_factory=Eligibility)
    url: Optional[str] = None
    renewable: Optional[bool] = None
    renewable_conditions: Optional[str] = None
    application_requirements: tuple[str, ...] = ()

    # Indexed projection of `eligibility`.

    @property
    def min_gpa(self) -> float:
        if self.eligibility.gpa_minimum is None:
            return 0.0
        return float(self.eligibility.gpa_minimum)

    @property
    def requires_financial_need(self) -> bool:
        return bool(self.eligibility.financial_need)

    @property
    def citizenship(self) -> tuple[str, ...]:
        return self.eligibility.citizenship

    @property
    def enrollment_status(self) -> tuple[str, ...]:
        return self.eligibility.enrollment_status


@dataclass(slots=True)
class MatchResult:
    scholarship: ScholarshipRecord
    reasons: list[str]
    explanation: Optional[str] = None


@dataclass(slots=True)
class MatchReport:
    student_id: str
    student_name: str
    matches: list[MatchResult]
    total_potential_aid: float

    @property
    def total_matches(self) -> int:
        return len(self.matches)
