from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEFAULT_BASE_URL = "https://router.huggingface.co/v1"
DEFAULT_MODEL = "deepseek-ai/DeepSeek-R1"
TOKEN_ENV_VARS = ("HF_TOKEN", "HUGGINGFACE_TOKEN")


@dataclass(frozen=True, slots=True)
class GenerationSettings:
    """Backend and retry settings for explanation generation.

    `max_retries` counts retries after the first attempt, so the default makes
    four attempts with waits of 1s, 2s and 4s between them.
    """

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_token: Optional[str] = None
    max_tokens: int = 500
    temperature: float = 0.6
    max_retries: int = 3
    initial_backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0
    timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        if not str(self.base_url or "").strip():
            raise ValueError("Generation base_url must not be empty.")
        if not str(self.model or "").strip():
            raise ValueError("Generation model must not be empty.")
        if int(self.max_tokens) <= 0:
            raise ValueError("Generation max_tokens must be positive.")
        if int(self.max_retries) < 0:
            raise ValueError("Generation max_retries must be zero or more.")
        for field_name in ("temperature", "initial_backoff_seconds", "backoff_multiplier", "timeout_seconds"):
            value = float(getattr(self, field_name))
            if not math.isfinite(value):
                raise ValueError(f"Generation setting '{field_name}' must be finite.")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("Generation temperature must be between 0.0 and 2.0.")
        if self.initial_backoff_seconds < 0.0:
            raise ValueError("Generation initial_backoff_seconds must be non-negative.")
        if self.backoff_multiplier < 1.0:
            raise ValueError("Generation backoff_multiplier must be at least 1.0.")
        if self.timeout_seconds <= 0.0:
            raise ValueError("Generation timeout_seconds must be positive.")

    @classmethod
    def baseline(cls) -> GenerationSettings:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> GenerationSettings:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            base_url=str(values.get("base_url", baseline.base_url)),
            model=str(values.get("model", baseline.model)),
            api_token=values.get("api_token", baseline.api_token),
            max_tokens=int(values.get("max_tokens", baseline.max_tokens)),
            temperature=float(values.get("temperature", baseline.temperature)),
            max_retries=int(values.get("max_retries", baseline.max_retries)),
            initial_backoff_seconds=float(
                values.get("initial_backoff_seconds", baseline.initial_backoff_seconds)
            ),
            backoff_multiplier=float(values.get("backoff_multiplier", baseline.backoff_multiplier)),
            timeout_seconds=float(values.get("timeout_seconds", baseline.timeout_seconds)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GenerationSettings:
        env = os.environ if environ is None else environ
        payload: dict[str, Any] = {}
        token = next((env[name] for name in TOKEN_ENV_VARS if env.get(name)), None)
        if token:
            payload["api_token"] = token
        if env.get("EXPLAIN_BASE_URL"):
            payload["base_url"] = env["EXPLAIN_BASE_URL"]
        if env.get("EXPLAIN_MODEL"):
            payload["model"] = env["EXPLAIN_MODEL"]
        return cls.from_mapping(payload)

    def backoff_schedule(self) -> list[float]:
        return [
            self.initial_backoff_seconds * (self.backoff_multiplier**retry)
            for retry in range(self.max_retries)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "max_retries": self.max_retries,
            "initial_backoff_seconds": self.initial_backoff_seconds,
            "backoff_multiplier": self.backoff_multiplier,
            "timeout_seconds": self.timeout_seconds,
        }
