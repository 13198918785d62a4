"""Offline evaluation helpers for golden student profiles."""

from src.eval.golden_students import GoldenStudent, get_golden_students

__all__ = [
    "GoldenStudent",
    "get_golden_students",
]
