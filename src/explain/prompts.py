from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from src.normalize.schema import ScholarshipRecord, StudentRecord
from src.rank.stage2_rules import STEM_TAG

SYSTEM_PROMPT = """You are an expert scholarship advisor.
Task: Write a 2-3 sentence personalized explanation for why the student matches the scholarship.

CRITICAL INSTRUCTIONS:
- Base your explanation ONLY on the provided matching factors.
- Do NOT mention attributes that are not listed.
- Mention the award amount.
- Be encouraging and specific.
- Do NOT output your internal chain of thought, just the final explanation."""


@dataclass(frozen=True, slots=True)
class PromptMessages:
    system: str
    user: str

    def as_chat(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def format_amount(amount: Any) -> str:
    """Dollar display for an award or income; cents only when the value has them."""

    try:
        value = float(amount)
    except (TypeError, ValueError):
        return "Unknown"
    if not math.isfinite(value):
        return "Unknown"
    return "$" + f"{value:,.2f}".rstrip("0").rstrip(".")


def _join(values: tuple[str, ...] | list[str]) -> str:
    return ", ".join(values)


def build_relevant_factors(student: StudentRecord, scholarship: ScholarshipRecord) -> list[str]:
    """List the matched attributes the generator is allowed to talk about.

    Only criteria the scholarship actually states are included, so the model
    is never handed student attributes that played no part in the match.
    """

    rules = scholarship.eligibility
    factors = [f"Student GPA: {student.gpa} (Minimum Required: {scholarship.min_gpa})"]

    if scholarship.citizenship:
        factors.append(
            f"Citizenship: {student.citizenship_status} "
            f"(Matches eligible list: {_join(scholarship.citizenship)})"
        )
    if scholarship.enrollment_status:
        factors.append(
            f"Enrollment Status: {student.enrollment_status} "
            f"(Matches eligible list: {_join(scholarship.enrollment_status)})"
        )
    if scholarship.fields_of_study or STEM_TAG in scholarship.tags:
        factors.append(f"Student Major: {student.major}")
        if scholarship.fields_of_study:
            factors.append(f"Eligible Majors: {_join(scholarship.fields_of_study)}")
    if scholarship.requires_financial_need:
        factors.append(
            f"Financial Need: Demonstrated (Household Income {format_amount(student.household_income)})"
        )
    if rules.first_generation:
        factors.append("First Generation Status: Yes")
    if rules.gender:
        factors.append(f"Gender: {student.gender} (Matches requirement: {rules.gender})")
    if rules.ethnicity:
        factors.append(
            f"Ethnicity: {_join(student.ethnicity)} (Matches requirement: {_join(rules.ethnicity)})"
        )
    if rules.residency:
        factors.append(f"Residency: {student.residency} (Matches requirement: {rules.residency})")
    if rules.military_affiliation:
        factors.append(f"Military Affiliation: {student.military_affiliation} (Matches requirement)")
    if rules.community_service_hours:
        factors.append(
            f"Community Service: {student.community_service_hours} hours "
            f"(Minimum: {rules.community_service_hours})"
        )
    return factors


def build_prompt_messages(student: StudentRecord, scholarship: ScholarshipRecord) -> PromptMessages:
    factor_lines = "\n".join(f"- {factor}" for factor in build_relevant_factors(student, scholarship))
    user = (
        f"Student Name: {student.name}\n"
        f"Scholarship Name: {scholarship.name}\n"
        f"Award Amount: {format_amount(scholarship.amount)}\n"
        "\n"
        "MATCHING FACTORS:\n"
        f"{factor_lines}\n"
        "\n"
        "Write ONLY the explanation."
    )
    return PromptMessages(system=SYSTEM_PROMPT, user=user)


def build_fallback_explanation(student: StudentRecord, scholarship: ScholarshipRecord) -> str:
    return (
        f"The {scholarship.name} is a great match for you based on your {student.gpa} GPA "
        f"and {student.major} major. This {format_amount(scholarship.amount)} award could "
        "support your educational goals."
    )
