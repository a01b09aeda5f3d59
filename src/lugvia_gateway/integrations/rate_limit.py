"""
lugvia_gateway.integrations.rate_limit

Process-wide call counter for the upstream integration.

Responsibilities:
- Track successful calls inside a fixed window (60s by default).
- Answer "may another call go out now?" without blocking.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class RateLimitWindow:
    """
    Coarse global limiter shared by every caller of the integration client.

    `allow()` and `record()` are separate read and write steps with no lock, so
    concurrent callers can overshoot the limit by a few calls at the boundary.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self.count = 0
        self.window_started_at: float | None = None

    def _reset_if_expired(self, now: float) -> None:
        if self.window_started_at is not None and now - self.window_started_at > self.window_seconds:
            self.count = 0
            self.window_started_at = None

    def allow(self) -> bool:
        self._reset_if_expired(self._clock())
        return self.count < self.limit

    def record(self) -> None:
        now = self._clock()
        self._reset_if_expired(now)
        if self.window_started_at is None:
            self.window_started_at = now
        self.count += 1

    def remaining(self) -> int:
        self._reset_if_expired(self._clock())
        return max(self.limit - self.count, 0)


# --- Module Notes -----------------------------------------------------------
# A distributed limiter (e.g. Redis) can replace this class as long as it keeps
# the allow/record surface the client uses.
