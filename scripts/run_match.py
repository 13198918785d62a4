from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import build_match_payload
from src.explain.client import ChatBackend, ChatCompletionClient
from src.explain.service import ExplanationService
from src.explain.settings import GenerationSettings
from src.io.catalog import load_catalog, load_students, write_json_atomic
from src.rank.matcher import MatchingService

logger = logging.getLogger("run_match")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Match a student against the scholarship catalog.")
    parser.add_argument("student_id", help="Student id to match, e.g. stu_001.")
    parser.add_argument("--scholarships", type=Path, default=ROOT_DIR / "data" / "scholarships.json")
    parser.add_argument("--students", type=Path, default=ROOT_DIR / "data" / "students.json")
    parser.add_argument(
        "--no-explain",
        action="store_true",
        help="Skip explanation generation for the top match.",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional JSON output path.")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return ROOT_DIR / path


def run_match(
    student_id: str,
    *,
    scholarships_path: Path | None = None,
    students_path: Path | None = None,
    explain: bool = True,
    backend: ChatBackend | None = None,
    settings: GenerationSettings | None = None,
) -> dict[str, Any] | None:
    catalog = load_catalog(_resolve_repo_path(scholarships_path) if scholarships_path else None)
    students = load_students(_resolve_repo_path(students_path) if students_path else None)
    student = students.get(student_id)
    if student is None:
        logger.warning("Student %s not found", student_id)
        return None

    explainer: ExplanationService | None = None
    owned_client: ChatCompletionClient | None = None
    if explain:
        active_settings = settings or GenerationSettings.from_env()
        if backend is None:
            owned_client = ChatCompletionClient.from_settings(active_settings)
            backend = owned_client
        explainer = ExplanationService(backend=backend, settings=active_settings)

    try:
        report = MatchingService(store=catalog, explainer=explainer).match_student(student, explain=explain)
    finally:
        if owned_client is not None:
            owned_client.close()
    return build_match_payload(report)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    payload = run_match(
        args.student_id,
        scholarships_path=args.scholarships,
        students_path=args.students,
        explain=not args.no_explain,
    )
    if payload is None:
        print(f"Student not found: {args.student_id}")
        return 1

    if args.output is not None:
        write_json_atomic(payload, _resolve_repo_path(args.output))
        print(f"Wrote match report: {args.output}")
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
