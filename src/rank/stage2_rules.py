from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from src.normalize.schema import ScholarshipRecord, StudentRecord

logger = logging.getLogger(__name__)

NURSING_MAJOR = "Nursing"
STEM_TAG = "STEM"

# A rule returns None when it does not apply, else (passed, reason).
RuleOutcome = Optional[tuple[bool, str]]
Rule = Callable[[StudentRecord, ScholarshipRecord], RuleOutcome]


@dataclass(slots=True)
class RuleDecision:
    accepted: bool
    reasons: list[str] = field(default_factory=list)


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def major_matches(major: str, scholarship: ScholarshipRecord) -> bool:
    if major in scholarship.fields_of_study:
        return True
    # Nursing is the only major accepted through the STEM tag.
    return major == NURSING_MAJOR and STEM_TAG in scholarship.tags


def check_major(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    if not scholarship.fields_of_study:
        return None
    return major_matches(student.major, scholarship), f"Major requirement met ({student.major})"


def check_gender(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    required = scholarship.eligibility.gender
    if not required:
        return None
    return _casefold(student.gender) == required.lower(), "Gender requirement met"


def check_ethnicity(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    required = scholarship.eligibility.ethnicity
    if not required:
        return None
    return bool(set(student.ethnicity).intersection(required)), "Ethnicity requirement met"


def check_community_service(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    minimum = scholarship.eligibility.community_service_hours
    if not minimum:
        return None
    return student.community_service_hours >= minimum, "Community service hours met"


def check_military_affiliation(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    accepted = scholarship.eligibility.military_affiliation
    if not accepted:
        return None
    passed = student.military_affiliation is not None and student.military_affiliation in accepted
    return passed, "Military affiliation requirement met"


def check_residency(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    required = scholarship.eligibility.residency
    if not required:
        return None
    return _casefold(student.residency) == required.lower(), "Residency requirement met"


def check_first_generation(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleOutcome:
    if scholarship.eligibility.first_generation is not True:
        return None
    return bool(student.first_generation), "First-generation student status"


RULES: tuple[Rule, ...] = (
    check_major,
    check_gender,
    check_ethnicity,
    check_community_service,
    check_military_affiliation,
    check_residency,
    check_first_generation,
)


def _index_reasons(student: StudentRecord, scholarship: ScholarshipRecord) -> list[str]:
    reasons = [
        f"GPA requirement met ({student.gpa} >= {scholarship.min_gpa})",
        "Citizenship status met",
        "Enrollment status met",
    ]
    if scholarship.requires_financial_need:
        reasons.append("Financial need demonstrated")
    return reasons


def evaluate(student: StudentRecord, scholarship: ScholarshipRecord) -> RuleDecision:
    """Check a coarse-stage candidate against the secondary eligibility rules.

    Rules run in a fixed order and stop at the first failure. An accepted
    decision also restates the indexed criteria so the reason list is complete
    on its own.
    """

    reasons: list[str] = []
    for rule in RULES:
        outcome = rule(student, scholarship)
        if outcome is None:
            continue
        passed, reason = outcome
        if not passed:
            logger.debug(
                "Rejected scholarship=%s student=%s rule=%s",
                scholarship.scholarship_id,
                student.student_id,
                rule.__name__,
            )
            return RuleDecision(accepted=False)
        reasons.append(reason)

    reasons.extend(_index_reasons(student, scholarship))
    return RuleDecision(accepted=True, reasons=reasons)
