from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.eval.golden_students import GoldenStudent, get_golden_students
from src.io.catalog import ScholarshipCatalog, load_catalog, write_json_atomic
from src.rank.matcher import MatchingService
from src.rank.stage3_aggregate import total_potential_aid

logger = logging.getLogger("evaluate_golden_students")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check golden student profiles against the scholarship catalog.")
    parser.add_argument(
        "--scholarships",
        type=Path,
        default=ROOT_DIR / "data" / "scholarships.json",
        help="Scholarship catalog JSON file.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=ROOT_DIR / "reports",
        help="Output directory for markdown and JSON artifacts.",
    )
    return parser.parse_args()


def _resolve_path(path: Path) -> Path:
    return path if path.is_absolute() else ROOT_DIR / path


def evaluate_students(
    catalog: ScholarshipCatalog,
    students: list[GoldenStudent],
) -> list[dict[str, Any]]:
    service = MatchingService(store=catalog)
    results: list[dict[str, Any]] = []
    for student in students:
        first_run = service.find_matches(student.profile)
        second_run = service.find_matches(student.profile)
        actual_ids = [match.scholarship.scholarship_id for match in first_run]
        results.append(
            {
                "student_id": student.student_id,
                "description": student.description,
                "expected_ids": list(student.expected_scholarship_ids),
                "actual_ids": actual_ids,
                "expected_count": student.expected_match_count,
                "actual_count": len(actual_ids),
                "passed": actual_ids == list(student.expected_scholarship_ids),
                "is_stable": actual_ids == [match.scholarship.scholarship_id for match in second_run],
                "total_potential_aid": total_potential_aid(first_run),
            }
        )
    return results


def _markdown_report(
    *,
    catalog_path: Path,
    catalog_count: int,
    generated_at: str,
    results: list[dict[str, Any]],
) -> str:
    passed = sum(1 for result in results if result["passed"])
    lines: list[str] = []
    lines.append("# Golden Student Match Evaluation")
    lines.append("")
    lines.append(f"- Generated at (UTC): {generated_at}")
    lines.append(f"- Catalog: `{catalog_path}`")
    lines.append(f"- Catalog records: {catalog_count}")
    lines.append(f"- Golden profiles: {len(results)}")
    lines.append(f"- Passed: {passed}/{len(results)}")
    lines.append("")
    lines.append("| student_id | expected | actual | stable | total_aid | result |")
    lines.append("|---|---:|---:|---|---:|---|")
    for result in results:
        lines.append(
            f"| {result['student_id']} | {result['expected_count']} | {result['actual_count']} | "
            f"{result['is_stable']} | {result['total_potential_aid']:.2f} | "
            f"{'PASS' if result['passed'] else 'FAIL'} |"
        )
    lines.append("")

    failures = [result for result in results if not result["passed"]]
    if failures:
        lines.append("## Mismatches")
        lines.append("")
        for result in failures:
            lines.append(f"### {result['student_id']}")
            lines.append("")
            lines.append(f"- Description: {result['description']}")
            lines.append(f"- Expected: {', '.join(result['expected_ids']) or 'none'}")
            lines.append(f"- Actual: {', '.join(result['actual_ids']) or 'none'}")
            lines.append("")
    return "\n".join(lines)


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    catalog_path = _resolve_path(args.scholarships)
    catalog = load_catalog(catalog_path)
    results = evaluate_students(catalog, get_golden_students())

    timestamp = datetime.now(tz=UTC).strftime("%Y%m%d_%H%M%S")
    generated_at = datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    reports_dir = _resolve_path(args.reports_dir)
    markdown_path = reports_dir / f"golden_match_eval_{timestamp}.md"
    json_path = reports_dir / "artifacts" / f"golden_match_eval_{timestamp}.json"

    markdown_path.parent.mkdir(parents=True, exist_ok=True)
    markdown_path.write_text(
        _markdown_report(
            catalog_path=catalog_path,
            catalog_count=len(catalog),
            generated_at=generated_at,
            results=results,
        ),
        encoding="utf-8",
    )
    write_json_atomic(
        {
            "generated_at": generated_at,
            "catalog_path": str(catalog_path),
            "catalog_count": len(catalog),
            "golden_profiles_count": len(results),
            "per_profile": results,
        },
        json_path,
    )

    print(f"Wrote markdown report: {markdown_path}")
    print(f"Wrote JSON artifact: {json_path}")
    failed = [result["student_id"] for result in results if not result["passed"]]
    if failed:
        logger.warning("Golden profiles with unexpected matches: %s", ", ".join(failed))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
