from __future__ import annotations

from .cache import ExplanationCache, explanation_cache_key, get_default_cache
from .client import BackendUnavailableError, ChatBackend, ChatCompletionClient, GenerationError
from .prompts import build_fallback_explanation, build_prompt_messages, build_relevant_factors
from .service import ExplanationService, clean_generated_text
from .settings import GenerationSettings

__all__ = [
    "BackendUnavailableError",
    "ChatBackend",
    "ChatCompletionClient",
    "ExplanationCache",
    "ExplanationService",
    "GenerationError",
    "GenerationSettings",
    "build_fallback_explanation",
    "build_prompt_messages",
    "build_relevant_factors",
    "clean_generated_text",
    "explanation_cache_key",
    "get_default_cache",
]
