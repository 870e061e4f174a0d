from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from hostinfo.log_setup import TRACE

logger = logging.getLogger(__name__)


class DetectionContext:
    """Memoization table for detection results, keyed by query name.

    Entries are created on first read and live as long as the context.
    First access to each key is serialized by a per-key lock, so a value
    is computed at most once even when several threads ask concurrently.
    Different keys may be computed from inside one another's factories.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    def get_or_compute(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing it on first access."""
        try:
            return self._values[key]
        except KeyError:
            pass
        with self._lock_for(key):
            if key not in self._values:
                value = factory()
                logger.log(TRACE, "Cached %s=%r", key, value)
                self._values[key] = value
            return self._values[key]

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def clear(self) -> None:
        """Drop every cached value. Only meant for tests."""
        with self._guard:
            self._values.clear()
            self._locks.clear()
