from __future__ import annotations

import threading
from collections import OrderedDict


def explanation_cache_key(student_id: str, scholarship_id: str) -> str:
    return f"{student_id}-{scholarship_id}"


class ExplanationCache:
    """Thread-safe map of generated explanations keyed by student/scholarship.

    Unbounded by default, entries live for the life of the process. With
    `max_entries` set, the least recently used entry is dropped on overflow.
    Two concurrent misses on the same key may both generate; the later write wins.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive when set.")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> str | None:
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_DEFAULT_CACHE = ExplanationCache()


def get_default_cache() -> ExplanationCache:
    return _DEFAULT_CACHE
