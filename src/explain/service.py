from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Callable

from src.explain.cache import ExplanationCache, explanation_cache_key, get_default_cache
from src.explain.client import BackendUnavailableError, ChatBackend, GenerationError
from src.explain.prompts import PromptMessages, build_fallback_explanation, build_prompt_messages
from src.explain.settings import GenerationSettings
from src.normalize.schema import ScholarshipRecord, StudentRecord

logger = logging.getLogger(__name__)

_THINK_BLOCK_PATTERN = re.compile(r"<think>.*?</think>", re.DOTALL)


def clean_generated_text(raw_text: str) -> str:
    """Drop reasoning blocks and one pair of surrounding quotes."""

    cleaned = _THINK_BLOCK_PATTERN.sub("", raw_text).strip()
    if cleaned.startswith('"'):
        cleaned = cleaned[1:]
    if cleaned.endswith('"'):
        cleaned = cleaned[:-1]
    return cleaned


@dataclass(slots=True)
class ExplanationService:
    backend: ChatBackend
    settings: GenerationSettings = field(default_factory=GenerationSettings.baseline)
    cache: ExplanationCache = field(default_factory=get_default_cache)
    sleep: Callable[[float], None] = time.sleep

    def explain(self, student: StudentRecord, scholarship: ScholarshipRecord) -> str:
        """Return an explanation for a match; falls back to a template instead of raising."""

        cache_key = explanation_cache_key(student.student_id, scholarship.scholarship_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Serving explanation from cache for %s", cache_key)
            return cached

        messages = build_prompt_messages(student, scholarship)
        try:
            explanation = self.generate_with_retry(messages)
        except GenerationError:
            logger.exception(
                "Explanation generation failed for %s; using fallback.", cache_key
            )
            return build_fallback_explanation(student, scholarship)

        self.cache.set(cache_key, explanation)
        return explanation

    def generate_with_retry(self, messages: PromptMessages) -> str:
        delay = self.settings.initial_backoff_seconds
        attempts = self.settings.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self._generate_once(messages)
            except GenerationError as exc:
                if attempt == attempts:
                    raise
                if isinstance(exc, BackendUnavailableError):
                    logger.warning(
                        "Model unavailable (attempt %d/%d), waiting %.1fs",
                        attempt,
                        attempts,
                        delay,
                    )
                else:
                    logger.warning(
                        "Generation failed (attempt %d/%d: %s), retrying in %.1fs",
                        attempt,
                        attempts,
                        exc,
                        delay,
                    )
                self.sleep(delay)
                delay *= self.settings.backoff_multiplier
        raise GenerationError("Generation attempts exhausted")

    def _generate_once(self, messages: PromptMessages) -> str:
        try:
            raw_text = self.backend.complete(
                messages.as_chat(),
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
            )
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(f"Backend call raised {type(exc).__name__}: {exc}") from exc

        cleaned = clean_generated_text(raw_text or "")
        if not cleaned:
            raise GenerationError("Empty response after cleanup")
        return cleaned
