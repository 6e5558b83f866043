"""
Rate Limiting Module

Thread-safe in-memory rate limiter implementation.
For production with multiple workers, replace with Redis-based implementation.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request

from app.core.security.constants import (
    DEFAULT_RATE_LIMIT,
    DEFAULT_RATE_WINDOW,
    DEFAULT_TRUSTED_PROXY_HOPS,
)
from app.core.security.utils import get_client_ip


@dataclass
class RateLimitEntry:
    """Tracks rate limit state for a single key."""
    count: int = 0
    window_start: float = 0.0


class RateLimiter:
    """
    Thread-safe in-memory rate limiter.

    Each key gets `limit` requests per `window` seconds; the count resets
    once the window that started with the key's first request has elapsed.
    """

    def __init__(
        self,
        limit: int = DEFAULT_RATE_LIMIT,
        window: int = DEFAULT_RATE_WINDOW,
        clock: Optional[Callable[[], float]] = None,
        trusted_proxy_hops: int = DEFAULT_TRUSTED_PROXY_HOPS,
    ):
        self._limit = limit
        self._trusted_proxy_hops = trusted_proxy_hops
        self._window = window
        self._clock = clock or time.monotonic
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = Lock()
        self._cleanup_counter = 0
        self._cleanup_threshold = 1000  # Cleanup every N checks

    @property
    def limit(self) -> int:
        return self._limit

    def _cleanup_expired(self, now: float) -> None:
        """Remove expired entries to prevent memory growth."""
        expired_keys = [
            key for key, entry in self._entries.items()
            if now - entry.window_start > self._window * 2
        ]
        for key in expired_keys:
            del self._entries[key]

    def is_allowed(self, key: str) -> Tuple[bool, int, int]:
        """
        Check if request is allowed under rate limit.

        Returns:
            Tuple of (allowed, remaining, reset_time)
        """
        now = self._clock()

        with self._lock:
            # Periodic cleanup
            self._cleanup_counter += 1
            if self._cleanup_counter >= self._cleanup_threshold:
                self._cleanup_expired(now)
                self._cleanup_counter = 0

            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = RateLimitEntry(window_start=now)

            # Reset window if expired
            if now - entry.window_start >= self._window:
                entry.count = 0
                entry.window_start = now

            reset_time = max(int(entry.window_start + self._window - now), 1)

            # Check limit
            if entry.count >= self._limit:
                return False, 0, reset_time

            # Increment and allow
            entry.count += 1
            return True, self._limit - entry.count, reset_time

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_key_for_request(self, request: Request) -> str:
        """Generate rate limit key from request."""
        return f"ip:{get_client_ip(request, self._trusted_proxy_hops)}"
