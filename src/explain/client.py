from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

import requests

from src.explain.settings import GenerationSettings

DEFAULT_USER_AGENT = "ScholarshipMatcher/0.1"
UNAVAILABLE_STATUS_CODES = frozenset({429, 503})
logger = logging.getLogger(__name__)
_SLOW_REQUEST_SECONDS = 10.0


class GenerationError(Exception):
    """The backend call failed or returned nothing usable."""


class BackendUnavailableError(GenerationError):
    """The backend is temporarily unavailable (model loading or rate limited)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatBackend(ABC):
    @abstractmethod
    def complete(
        self,
        messages: Sequence[dict[str, str]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Return generated text for an ordered list of role/content messages."""


@dataclass(slots=True)
class ChatCompletionClient(ChatBackend):
    """Chat-completions client for an OpenAI-compatible HTTP endpoint."""

    base_url: str
    model: str
    api_token: str | None = None
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = requests.Session()
        self._session.headers.update(
            {"User-Agent": self.user_agent, "Content-Type": "application/json"}
        )
        if self.api_token:
            self._session.headers["Authorization"] = f"Bearer {self.api_token}"

    @classmethod
    def from_settings(cls, settings: GenerationSettings) -> ChatCompletionClient:
        return cls(
            base_url=settings.base_url,
            model=settings.model,
            api_token=settings.api_token,
            timeout_seconds=settings.timeout_seconds,
        )

    def close(self) -> None:
        self._session.close()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    @property
    def timeout_tuple(self) -> tuple[float, float]:
        connect_timeout = max(1.0, min(self.timeout_seconds, 5.0))
        read_timeout = max(connect_timeout, self.timeout_seconds)
        return connect_timeout, read_timeout

    def complete(
        self,
        messages: Sequence[dict[str, str]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        payload = {
            "model": self.model,
            "messages": list(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        started_at = time.monotonic()
        try:
            response = self._session.post(self.endpoint, json=payload, timeout=self.timeout_tuple)
        except requests.RequestException as exc:
            raise GenerationError(f"Request to {self.endpoint} failed: {exc}") from exc
        elapsed = time.monotonic() - started_at
        if elapsed > _SLOW_REQUEST_SECONDS:
            logger.warning("Slow generation request %.3fs model=%s", elapsed, self.model)

        if response.status_code in UNAVAILABLE_STATUS_CODES:
            raise BackendUnavailableError(
                f"Backend unavailable (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise GenerationError(f"Backend returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise GenerationError("Backend returned a non-JSON body") from exc
        return _extract_content(body)


def _extract_content(body: Any) -> str:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise GenerationError("Backend response has no message content") from exc
    if not isinstance(content, str) or not content.strip():
        raise GenerationError("Empty response from backend")
    return content
