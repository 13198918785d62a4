from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

from src.normalize.schema import (
    ENROLLMENT_STATUSES,
    Eligibility,
    ScholarshipRecord,
    StudentRecord,
)

NEED_INCOME_THRESHOLD = 50000
KNOWN_ELIGIBILITY_KEYS = frozenset(
    {
        "gpa_minimum",
        "financial_need",
        "citizenship",
        "enrollment_status",
        "gender",
        "ethnicity",
        "residency",
        "military_affiliation",
        "first_generation",
        "community_service_hours",
    }
)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _coerce_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        cleaned = value.strip()
        return (cleaned,) if cleaned else ()
    if isinstance(value, (list, tuple, set)):
        return tuple(str(item).strip() for item in value if str(item).strip())
    return ()


def _coerce_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_optional_int(value: Any) -> Optional[int]:
    numeric = _coerce_optional_float(value)
    return int(numeric) if numeric is not None else None


def _coerce_deadline(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    cleaned = str(value).strip()
    if not cleaned:
        return None
    candidate = cleaned.replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(cleaned)
    except ValueError:
        return None


def _require(payload: Mapping[str, Any], key: str) -> Any:
    value = payload.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Record is missing required field '{key}'.")
    return value


def eligibility_from_payload(payload: Mapping[str, Any] | None) -> Eligibility:
    values = dict(payload or {})
    return Eligibility(
        gpa_minimum=_coerce_optional_float(values.get("gpa_minimum")),
        financial_need=bool(values.get("financial_need") or False),
        citizenship=_coerce_tuple(values.get("citizenship")),
        enrollment_status=_coerce_tuple(values.get("enrollment_status")),
        gender=_clean_text(values.get("gender")),
        ethnicity=_coerce_tuple(values.get("ethnicity")),
        residency=_clean_text(values.get("residency")),
        military_affiliation=_coerce_tuple(values.get("military_affiliation")),
        first_generation=values.get("first_generation") is True,
        community_service_hours=_coerce_optional_int(values.get("community_service_hours")),
        extensions={
            key: value for key, value in values.items() if key not in KNOWN_ELIGIBILITY_KEYS
        },
    )


def scholarship_from_payload(payload: Mapping[str, Any]) -> ScholarshipRecord:
    """Build a catalog record from a raw scholarship payload.

    The nested `eligibility` object becomes the typed rule set; the indexed
    fields the coarse filter queries are read back from it, never stored twice.
    """

    amount = _coerce_optional_float(payload.get("amount"))
    return ScholarshipRecord(
        scholarship_id=str(_require(payload, "id")).strip(),
        name=str(_require(payload, "name")).strip(),
        provider=_clean_text(payload.get("provider")) or "",
        amount=amount if amount is not None else 0.0,
        amount_type=_clean_text(payload.get("amount_type")) or "fixed",
        deadline=_coerce_deadline(payload.get("deadline")),
        description=_clean_text(payload.get("description")),
        fields_of_study=_coerce_tuple(payload.get("fields_of_study")),
        tags=_coerce_tuple(payload.get("tags")),
        eligibility=eligibility_from_payload(payload.get("eligibility")),
        url=_clean_text(payload.get("url")),
        renewable=payload.get("renewable") if isinstance(payload.get("renewable"), bool) else None,
        renewable_conditions=_clean_text(payload.get("renewable_conditions")),
        application_requirements=_coerce_tuple(payload.get("application_requirements")),
    )


def student_from_payload(payload: Mapping[str, Any], *, student_id: str | None = None) -> StudentRecord:
    resolved_id = student_id or _clean_text(payload.get("id"))
    if not resolved_id:
        raise ValueError("Student record requires an id.")

    gpa = float(_require(payload, "gpa"))
    if gpa < 0.0 or gpa > 4.0:
        raise ValueError(f"Student GPA must be between 0.0 and 4.0 (received {gpa}).")

    enrollment_status = str(_require(payload, "enrollment_status")).strip()
    if enrollment_status not in ENROLLMENT_STATUSES:
        raise ValueError(
            "Student enrollment_status must be one of "
            + ", ".join(ENROLLMENT_STATUSES)
            + f" (received '{enrollment_status}')."
        )

    household_income = _coerce_optional_float(payload.get("household_income")) or 0.0
    if household_income < 0:
        raise ValueError("Student household_income must be non-negative.")

    financial_need = payload.get("financial_need")
    if financial_need is None:
        financial_need = household_income < NEED_INCOME_THRESHOLD

    return StudentRecord(
        student_id=resolved_id,
        name=_clean_text(payload.get("name")) or "",
        gpa=gpa,
        major=str(_require(payload, "major")).strip(),
        enrollment_status=enrollment_status,
        citizenship_status=str(_require(payload, "citizenship_status")).strip(),
        household_income=household_income,
        financial_need=bool(financial_need),
        first_generation=bool(payload.get("first_generation") or False),
        gender=_clean_text(payload.get("gender")),
        ethnicity=_coerce_tuple(payload.get("ethnicity")),
        residency=_clean_text(payload.get("residency")),
        military_affiliation=_clean_text(payload.get("military_affiliation")),
        community_service_hours=_coerce_optional_int(payload.get("community_service_hours")) or 0,
        email=_clean_text(payload.get("email")),
        state=_clean_text(payload.get("state")),
        graduation_year=_coerce_optional_int(payload.get("graduation_year")),
    )
