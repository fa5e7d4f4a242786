"""In-memory fixed-window rate limiter keyed by action and client."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window counter. A burst straddling two windows may admit up to
    2 * max_attempts requests; that is accepted.

    Sync endpoints run on a thread pool, so check-and-increment holds a lock.
    The store is bounded by max_keys: once exceeded, expired windows are
    dropped, then the windows closest to expiry.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_keys: int = 10_000,
    ) -> None:
        self._clock = clock
        self._max_keys = max_keys
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def allow(self, key: str, max_attempts: int, window_seconds: float) -> bool:
        """Record an attempt for key; False once max_attempts is reached in the window."""
        with self._lock:
            now = self._clock()
            entry = self._windows.get(key)
            if entry is None or now > entry.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + window_seconds)
                if len(self._windows) > self._max_keys:
                    self._evict(now)
                return True
            if entry.count >= max_attempts:
                return False
            entry.count += 1
            return True

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)

    def _evict(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now > w.reset_at]
        for k in expired:
            del self._windows[k]
        overflow = len(self._windows) - self._max_keys
        if overflow > 0:
            oldest = sorted(self._windows.items(), key=lambda kv: kv[1].reset_at)[:overflow]
            for k, _ in oldest:
                del self._windows[k]
        logger.debug(
            "Rate limiter evicted windows: expired=%s overflow=%s",
            len(expired),
            max(overflow, 0),
        )


def client_key(request: Request) -> str:
    """
    Client identity for rate limiting: forwarded-for, then real-ip headers.

    Requests without either header share the 'unknown' bucket.
    """
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or UNKNOWN_CLIENT
    )
