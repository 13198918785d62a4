from __future__ import annotations

import logging

import pytest

from src.explain.cache import ExplanationCache, explanation_cache_key
from src.explain.client import BackendUnavailableError, ChatBackend, GenerationError
from src.explain.prompts import build_prompt_messages
from src.explain.service import ExplanationService, clean_generated_text
from src.explain.settings import GenerationSettings
from src.normalize.schema import Eligibility, ScholarshipRecord, StudentRecord


class _ScriptedBackend(ChatBackend):
    def __init__(self, outcomes: list[object]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, object]] = []

    def complete(self, messages, *, max_tokens, temperature):
        self.calls.append({"messages": list(messages), "max_tokens": max_tokens, "temperature": temperature})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _student() -> StudentRecord:
    return StudentRecord(
        student_id="stu_001",
        name="Maria Garcia",
        gpa=3.6,
        major="Computer Science",
        enrollment_status="high_school_senior",
        citizenship_status="US Citizen",
        household_income=42000.0,
        financial_need=True,
        first_generation=True,
    )


def _scholarship() -> ScholarshipRecord:
    return ScholarshipRecord(
        scholarship_id="sch_001",
        name="Future Tech Leaders Scholarship",
        provider="Tech Forward Foundation",
        amount=10000.0,
        amount_type="fixed",
        deadline=None,
        description=None,
        fields_of_study=("Computer Science",),
        eligibility=Eligibility(
            gpa_minimum=3.5,
            citizenship=("US Citizen",),
            enrollment_status=("high_school_senior", "undergraduate"),
        ),
    )


def _service(backend: ChatBackend, sleeps: list[float], cache: ExplanationCache | None = None) -> ExplanationService:
    return ExplanationService(
        backend=backend,
        settings=GenerationSettings.baseline(),
        cache=cache if cache is not None else ExplanationCache(),
        sleep=sleeps.append,
    )


def test_explain_returns_cleaned_text_and_caches_it() -> None:
    backend = _ScriptedBackend(['<think>plan the answer</think>\n"You are a strong fit for this award."'])
    cache = ExplanationCache()
    sleeps: list[float] = []

    text = _service(backend, sleeps, cache).explain(_student(), _scholarship())

    assert text == "You are a strong fit for this award."
    assert cache.get(explanation_cache_key("stu_001", "sch_001")) == text
    assert backend.calls[0]["max_tokens"] == 500
    assert backend.calls[0]["temperature"] == 0.6
    assert [message["role"] for message in backend.calls[0]["messages"]] == ["system", "user"]
    assert sleeps == []


def test_explain_serves_cache_hits_without_backend_call() -> None:
    backend = _ScriptedBackend([])
    cache = ExplanationCache()
    cache.set("stu_001-sch_001", "Cached explanation.")

    text = _service(backend, [], cache).explain(_student(), _scholarship())

    assert text == "Cached explanation."
    assert backend.calls == []


def test_explain_retries_with_doubling_backoff() -> None:
    backend = _ScriptedBackend(
        [
            BackendUnavailableError("loading", status_code=503),
            GenerationError("HTTP 500"),
            BackendUnavailableError("rate limited", status_code=429),
            "Fourth time lucky.",
        ]
    )
    sleeps: list[float] = []

    text = _service(backend, sleeps).explain(_student(), _scholarship())

    assert text == "Fourth time lucky."
    assert len(backend.calls) == 4
    assert sleeps == [1.0, 2.0, 4.0]


def test_explain_falls_back_after_exhausting_retries_and_does_not_cache(caplog) -> None:
    backend = _ScriptedBackend([BackendUnavailableError("loading", status_code=503)] * 4)
    cache = ExplanationCache()
    sleeps: list[float] = []

    with caplog.at_level(logging.WARNING, logger="src.explain.service"):
        text = _service(backend, sleeps, cache).explain(_student(), _scholarship())

    assert text == (
        "The Future Tech Leaders Scholarship is a great match for you based on your 3.6 GPA "
        "and Computer Science major. This $10,000 award could support your educational goals."
    )
    assert len(backend.calls) == 4
    assert sleeps == [1.0, 2.0, 4.0]
    assert len(cache) == 0
    assert any("using fallback" in record.getMessage() for record in caplog.records)


def test_fallback_is_deterministic_and_next_call_retries() -> None:
    backend = _ScriptedBackend([GenerationError("boom")] * 4 + ["Recovered explanation."])
    sleeps: list[float] = []
    service = _service(backend, sleeps)

    first = service.explain(_student(), _scholarship())
    second = service.explain(_student(), _scholarship())

    assert first.startswith("The Future Tech Leaders Scholarship is a great match")
    assert second == "Recovered explanation."
    assert len(backend.calls) == 5


def test_empty_text_after_cleanup_counts_as_failure() -> None:
    backend = _ScriptedBackend(["<think>only reasoning</think>", '""', "Usable text."])
    sleeps: list[float] = []

    text = _service(backend, sleeps).explain(_student(), _scholarship())

    assert text == "Usable text."
    assert sleeps == [1.0, 2.0]


def test_unexpected_backend_exceptions_are_retried() -> None:
    backend = _ScriptedBackend([RuntimeError("socket closed"), "Works now."])
    sleeps: list[float] = []

    assert _service(backend, sleeps).explain(_student(), _scholarship()) == "Works now."
    assert sleeps == [1.0]


def test_generate_with_retry_raises_when_exhausted() -> None:
    backend = _ScriptedBackend([GenerationError("nope")])
    service = ExplanationService(
        backend=backend,
        settings=GenerationSettings(max_retries=0),
        cache=ExplanationCache(),
        sleep=lambda seconds: None,
    )

    with pytest.raises(GenerationError):
        service.generate_with_retry(build_prompt_messages(_student(), _scholarship()))


def test_clean_generated_text_strips_think_blocks_and_one_quote_pair() -> None:
    assert clean_generated_text('<think>a\nb</think>  "Hello there."  ') == "Hello there."
    assert clean_generated_text('<think>x</think>A<think>y</think>B') == "AB"
    assert clean_generated_text('""Quoted twice""') == '"Quoted twice"'
    assert clean_generated_text("No quotes at all") == "No quotes at all"
