from __future__ import annotations

from typing import Iterable

from src.normalize.schema import MatchResult


def total_potential_aid(matches: Iterable[MatchResult]) -> float:
    # Plain sum of award amounts; overlapping or mutually exclusive awards are not netted out.
    return float(sum(match.scholarship.amount for match in matches))


def aggregate_matches(matches: Iterable[MatchResult]) -> tuple[list[MatchResult], float]:
    """Order accepted matches by award amount, largest first.

    `sorted` is stable, so equal amounts keep their catalog order.
    """

    ranked = sorted(matches, key=lambda match: match.scholarship.amount, reverse=True)
    return ranked, total_potential_aid(ranked)
