"""Fixed-interval pacing for calls to a rate-limited provider."""

from __future__ import annotations

import time
from collections.abc import Callable


class RateLimiter:
    """Enforce a minimum gap between consecutive calls.

    The first call passes immediately; each later call sleeps for whatever is
    left of ``min_interval`` since the previous one. ``clock`` and ``sleep``
    are injectable so pacing can be tested without real delays.

    Usage::

        limiter = RateLimiter(0.2)
        for day in days:
            limiter.wait()
            provider.get_daily_broker_flow(ticker, day)
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def wait(self) -> float:
        """Block until the next call is allowed. Returns seconds slept."""
        slept = 0.0
        if self._last is not None and self.min_interval > 0:
            remaining = self.min_interval - (self._clock() - self._last)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last = self._clock()
        return slept

    def reset(self) -> None:
        self._last = None
