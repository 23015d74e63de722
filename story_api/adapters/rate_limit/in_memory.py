"""In-memory fixed-window rate limiter.

Per-process only: counters live in this process and vanish on restart, and
running several workers multiplies the effective limit. Shared state is
guarded by a lock since FastAPI runs sync dependencies on a thread pool.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from story_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _Window:
    start: int
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Count requests per key inside fixed, clock-aligned windows.

    A window covers ``[start, start + window_seconds)`` where ``start`` is a
    multiple of ``window_seconds``. Counts reset when a new window begins,
    so a client can send up to ``limit`` requests per window.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Window length in seconds.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._windows: dict[str, _Window] = {}
        self._last_prune: int | None = None

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _window_start(self, now: float) -> int:
        return int(now // self._window_seconds) * self._window_seconds

    def _prune_locked(self, window_start: int) -> None:
        """Drop counters of past windows once per window.

        Without this, every address ever seen would stay in memory.
        """
        if self._last_prune == window_start:
            return
        stale = [key for key, w in self._windows.items() if w.start != window_start]
        for key in stale:
            del self._windows[key]
        self._last_prune = window_start

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Check the current window for ``key`` and count the request if allowed.

        Blocked requests are not counted.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        window_start = self._window_start(now)
        reset_at = window_start + self._window_seconds

        with self._lock:
            self._prune_locked(window_start)
            window = self._windows.get(key)
            if window is None:
                window = self._windows[key] = _Window(start=window_start, count=0)

            if window.count + cost <= self._limit:
                window.count += cost
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - window.count,
                    reset_at=reset_at,
                )

            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=max(0, self._limit - window.count),
                reset_at=reset_at,
                retry_after_seconds=max(1, int(math.ceil(reset_at - now))),
            )

    def tracked_keys(self) -> int:
        """Number of keys with a counter in memory."""
        with self._lock:
            return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._last_prune = None
