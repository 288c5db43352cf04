"""
Per-IP Rate Limiting

WHY: Cap request volume per client address to blunt brute-force logins,
mass sign-ups and general API abuse.

- Fixed windows: a counter per client starts at the first request and resets
  once the window has elapsed
- Counters live in process memory behind a lock (single-instance deployment;
  nothing is shared across worker processes)
- Limiters are built per app from config, see build_limiters()

Default limits:
- api       100 requests / 15 minutes (every /api request)
- auth        5 requests / 15 minutes (login)
- register    3 requests / hour       (registration)
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable


API_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
AUTH_LIMIT_MESSAGE = "Too many login attempts, please try again after 15 minutes."
REGISTER_LIMIT_MESSAGE = "Too many accounts created from this IP, please try again later."


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_in: int  # seconds until the current window closes


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    """Counts hits per key over fixed windows; thread-safe."""

    def __init__(
        self,
        name: str,
        limit: int,
        window_seconds: int,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitResult:
        """Record one request for key and report whether it is within the limit."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = _Window(started_at=now, count=0)
                self._windows[key] = window
                self._purge_expired(now)

            window.count += 1
            reset_in = max(0, int(window.started_at + self.window_seconds - now))
            return RateLimitResult(
                allowed=window.count <= self.limit,
                limit=self.limit,
                remaining=max(0, self.limit - window.count),
                reset_in=reset_in,
            )

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

    def _purge_expired(self, now: float) -> None:
        # Caller holds the lock
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_seconds]
        for k in expired:
            del self._windows[k]


def build_limiters(config) -> dict[str, FixedWindowRateLimiter]:
    api_limit, api_window = config.get("RATELIMIT_API", (100, 15 * 60))
    auth_limit, auth_window = config.get("RATELIMIT_AUTH", (5, 15 * 60))
    register_limit, register_window = config.get("RATELIMIT_REGISTER", (3, 60 * 60))

    return {
        "api": FixedWindowRateLimiter("api", api_limit, api_window, API_LIMIT_MESSAGE),
        "auth": FixedWindowRateLimiter("auth", auth_limit, auth_window, AUTH_LIMIT_MESSAGE),
        "register": FixedWindowRateLimiter("register", register_limit, register_window, REGISTER_LIMIT_MESSAGE),
    }
