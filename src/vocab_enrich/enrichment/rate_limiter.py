"""Fixed-window request limiter for the single-word entry point."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from vocab_enrich.constants.defaults import (
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_SWEEP_INTERVAL_SECONDS,
    RATE_LIMIT_WINDOW_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass
class RateLimitWindow:
    """Request count of one identifier inside its current window."""

    count: int
    reset_time: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one check() call."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets (at least 0)."""
        return max(0, math.ceil(self.reset_time - now))


class RateLimiter:
    """Per-identifier fixed-window limiter.

    The first request of an identifier opens a window of window_seconds;
    up to max_requests are allowed inside it; the first request after the
    window expires opens a fresh one. Expired windows are swept lazily at
    most once per sweep_interval.

    Args:
        max_requests: Requests allowed per window.
        window_seconds: Window length.
        clock: Time source returning seconds (wall clock by default).
        sweep_interval: Minimum seconds between sweeps of expired windows.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = RATE_LIMIT_SWEEP_INTERVAL_SECONDS,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._windows: dict[str, RateLimitWindow] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def check(self, identifier: str) -> RateLimitDecision:
        """Count one request for identifier and decide whether it is allowed."""
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep_locked(now)

            window = self._windows.get(identifier)
            if window is None or now > window.reset_time:
                window = RateLimitWindow(count=1, reset_time=now + self.window_seconds)
                self._windows[identifier] = window
                return RateLimitDecision(
                    allowed=True,
                    limit=self.max_requests,
                    remaining=self.max_requests - 1,
                    reset_time=window.reset_time,
                )

            if window.count >= self.max_requests:
                logger.info(f"Rate limit exceeded for {identifier}")
                return RateLimitDecision(
                    allowed=False,
                    limit=self.max_requests,
                    remaining=0,
                    reset_time=window.reset_time,
                )

            window.count += 1
            return RateLimitDecision(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - window.count,
                reset_time=window.reset_time,
            )

    def reset(self, identifier: str | None = None) -> None:
        """Forget one identifier's window, or all windows."""
        with self._lock:
            if identifier is None:
                self._windows.clear()
            else:
                self._windows.pop(identifier, None)

    def sweep(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self.clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, window in self._windows.items() if now > window.reset_time]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Swept {len(expired)} expired rate-limit windows")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
