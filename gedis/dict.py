"""Thread-safe string-keyed dictionary."""

from __future__ import annotations

import random
import threading
from typing import Any, Callable, Optional

Consumer = Callable[[str, Any], None]


class SyncDict:
    """A dictionary guarded by a lock, safe to share between threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key``, or ``None``."""
        with self._lock:
            return self._data.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def put(self, key: str, value: Any) -> int:
        """Store a value; return 1 if the key is new, else 0."""
        with self._lock:
            existed = key in self._data
            self._data[key] = value
            return 0 if existed else 1

    def put_if_absent(self, key: str, value: Any) -> int:
        """Store a value only if the key is missing; return 1 if stored."""
        with self._lock:
            if key in self._data:
                return 0
            self._data[key] = value
            return 1

    def put_if_exists(self, key: str, value: Any) -> int:
        """Replace a value only if the key is present; return 1 if stored."""
        with self._lock:
            if key not in self._data:
                return 0
            self._data[key] = value
            return 1

    def remove(self, key: str) -> int:
        """Delete a key; return 1 if it was present, else 0."""
        with self._lock:
            return 0 if self._data.pop(key, _MISSING) is _MISSING else 1

    def for_each(self, consumer: Consumer) -> None:
        """Call ``consumer(key, value)`` for every entry."""
        with self._lock:
            items = list(self._data.items())
        for key, value in items:
            consumer(key, value)

    def keys(self) -> list[str]:
        """Return all keys."""
        with self._lock:
            return list(self._data)

    def random_keys(self, limit: int) -> list[str]:
        """Return ``limit`` keys picked at random, possibly repeated."""
        keys = self.keys()
        if not keys or limit <= 0:
            return []
        return random.choices(keys, k=limit)

    def random_distinct_keys(self, limit: int) -> list[str]:
        """Return up to ``limit`` distinct keys picked at random."""
        keys = self.keys()
        if limit <= 0:
            return []
        return random.sample(keys, min(limit, len(keys)))

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._data = {}


_MISSING = object()