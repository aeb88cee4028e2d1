"""
Per-route request rate policies.

Fixed-window counters kept in process memory, keyed by client address.
Routes opt in with ``Depends(RateLimitPolicy("queries"))``.
"""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from contactbook.config import Settings, get_settings
from contactbook.shared.exceptions import RateLimitExceededError
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)

QUERIES = "queries"
COMMANDS = "commands"


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    """Counts hits per key inside fixed windows of ``window_seconds``."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str) -> int | None:
        """Record one request for ``key``.

        Returns:
            None when the request is allowed, otherwise the number of
            seconds until the current window closes.
        """
        async with self._lock:
            now = self._clock()
            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                self._windows[key] = _Window(started_at=now, count=1)
                self._evict(now)
                return None

            if window.count >= self.limit:
                remaining = self.window_seconds - (now - window.started_at)
                return max(1, math.ceil(remaining))

            window.count += 1
            return None

    def _evict(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


_limiters: dict[str, FixedWindowRateLimiter] = {}


def _policy_limit(settings: Settings, policy: str) -> int:
    if policy == COMMANDS:
        return settings.rate_limit_commands_per_window
    return settings.rate_limit_queries_per_window


def get_rate_limiter(policy: str, settings: Settings) -> FixedWindowRateLimiter:
    """Get (or create) the process-wide limiter for a policy."""
    limit = _policy_limit(settings, policy)
    limiter = _limiters.get(policy)
    if (
        limiter is None
        or limiter.limit != limit
        or limiter.window_seconds != settings.rate_limit_window_seconds
    ):
        limiter = FixedWindowRateLimiter(limit, settings.rate_limit_window_seconds)
        _limiters[policy] = limiter
    return limiter


def reset_rate_limiters() -> None:
    """Forget every counter (used by tests and on shutdown)."""
    _limiters.clear()


class RateLimitPolicy:
    """Dependency class applying a named rate policy to a route."""

    def __init__(self, policy: str) -> None:
        self.policy = policy

    async def __call__(
        self,
        request: Request,
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> None:
        if not settings.rate_limit_enabled:
            return

        client_ip = request.client.host if request.client else "unknown"
        retry_after = await get_rate_limiter(self.policy, settings).hit(client_ip)
        if retry_after is not None:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "policy": self.policy,
                    "client_ip": client_ip,
                    "endpoint": str(request.url.path),
                    "method": request.method,
                },
            )
            raise RateLimitExceededError(self.policy, retry_after)


rate_limit_queries = RateLimitPolicy(QUERIES)
rate_limit_commands = RateLimitPolicy(COMMANDS)
