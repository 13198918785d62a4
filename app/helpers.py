from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Sequence

from src.explain.prompts import format_amount
from src.normalize.schema import MatchReport, MatchResult, ScholarshipRecord


def format_deadline(deadline: date | None) -> str | None:
    if deadline is None:
        return None
    return deadline.isoformat()


def reasons_to_text(reasons: Sequence[str]) -> str:
    return "; ".join(reason.strip() for reason in reasons if reason and reason.strip())


def scholarship_summary(scholarship: ScholarshipRecord) -> dict[str, Any]:
    return {
        "id": scholarship.scholarship_id,
        "name": scholarship.name,
        "amount": scholarship.amount,
        "amount_display": format_amount(scholarship.amount),
        "provider": scholarship.provider,
        "deadline": format_deadline(scholarship.deadline),
        "url": scholarship.url,
    }


def match_to_payload(match: MatchResult) -> dict[str, Any]:
    return {
        "scholarship": scholarship_summary(match.scholarship),
        "match_reasons": list(match.reasons),
        "match_reasons_text": reasons_to_text(match.reasons),
        "explanation": match.explanation,
    }


def build_match_payload(report: MatchReport) -> dict[str, Any]:
    return {
        "student_id": report.student_id,
        "student_name": report.student_name,
        "total_matches": report.total_matches,
        "total_potential_aid": report.total_potential_aid,
        "total_potential_aid_display": format_amount(report.total_potential_aid),
        "matches": [match_to_payload(match) for match in report.matches],
    }


def build_catalog_payload(scholarships: Iterable[ScholarshipRecord]) -> dict[str, Any]:
    items = [
        {
            "id": scholarship.scholarship_id,
            "name": scholarship.name,
            "amount": scholarship.amount,
            "amount_display": format_amount(scholarship.amount),
            "deadline": format_deadline(scholarship.deadline),
            "provider": scholarship.provider,
        }
        for scholarship in scholarships
    ]
    return {"scholarships": items, "total": len(items)}
