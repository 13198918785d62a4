from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.normalize.schema import MatchReport, MatchResult, StudentRecord
from src.rank.stage1_eligibility import filter_candidates
from src.rank.stage2_rules import evaluate
from src.rank.stage3_aggregate import aggregate_matches

if TYPE_CHECKING:
    from src.explain.service import ExplanationService
    from src.io.catalog import ScholarshipStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchingService:
    store: ScholarshipStore
    explainer: ExplanationService | None = None

    def find_matches(self, student: StudentRecord) -> list[MatchResult]:
        ranked, _ = self._ranked_matches(student)
        return ranked

    def match_student(self, student: StudentRecord, *, explain: bool = True) -> MatchReport:
        """Build the full match report.

        Only the top-ranked match is sent for explanation; the rest keep
        `explanation=None`.
        """

        ranked, total_aid = self._ranked_matches(student)
        if explain and ranked and self.explainer is not None:
            top = ranked[0]
            top.explanation = self.explainer.explain(student, top.scholarship)
        return MatchReport(
            student_id=student.student_id,
            student_name=student.name,
            matches=ranked,
            total_potential_aid=total_aid,
        )

    def _ranked_matches(self, student: StudentRecord) -> tuple[list[MatchResult], float]:
        candidates = filter_candidates(self.store, student)
        accepted: list[MatchResult] = []
        for scholarship in candidates:
            decision = evaluate(student, scholarship)
            if decision.accepted:
                accepted.append(MatchResult(scholarship=scholarship, reasons=decision.reasons))
        ranked, total_aid = aggregate_matches(accepted)
        logger.info(
            "Matched student=%s candidates=%d accepted=%d total_aid=%.2f",
            student.student_id,
            len(candidates),
            len(ranked),
            total_aid,
        )
        return ranked, total_aid
