"""In-memory login rate limiter keyed by client identifier.

Failures are counted in a fixed window per client. The window only resets
once it has elapsed; a successful login does not clear the count.

The table is process-local: each worker process keeps its own budget.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class RateConfig:
    window_seconds: int = 15 * 60
    max_attempts: int = 5


@dataclass
class RateLimitEntry:
    client_id: str
    failure_count: int
    window_reset_at: float


class LoginRateLimiter:
    def __init__(
        self, config: RateConfig, *, clock: Callable[[], float] = time.time
    ) -> None:
        self._config = config
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, RateLimitEntry] = {}

    def check_allowed(self, client_id: str) -> bool:
        """Return whether `client_id` may attempt a login now.

        Creates or resets the entry when none exists or its window elapsed.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None or now > entry.window_reset_at:
                self._entries[client_id] = RateLimitEntry(
                    client_id=client_id,
                    failure_count=0,
                    window_reset_at=now + max(1, self._config.window_seconds),
                )
                return True
            return entry.failure_count < self._config.max_attempts

    def record_failure(self, client_id: str) -> None:
        """Count a failed attempt; no-op unless `check_allowed` created an entry."""
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is not None:
                entry.failure_count += 1

    def get_entry(self, client_id: str) -> RateLimitEntry | None:
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None:
                return None
            return RateLimitEntry(entry.client_id, entry.failure_count, entry.window_reset_at)
