"""In-memory fixed-window rate limiter shared by all outbound calls.

Notes:
- Per-process only: each client instance owns its own budget.
- Thread-safe: window start and count are only touched under one lock and
  always reset together.
- Windows are first-use aligned: the first grant opens the first window.
- Bursts of up to twice the limit are possible across a window boundary.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from registry_client.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from registry_client.core.errors import ConfigurationError, RequestCancelledError

logger = logging.getLogger(__name__)


class WindowedRateLimiter(AbstractRateLimiter):
    """Grant at most ``limit`` permits per fixed interval.

    ``acquire`` blocks the caller until the current window has room. Waiting
    happens outside the lock, so any thread that wins the lock after a
    rollover may take the freed slot; there is no FIFO ordering among waiters.
    """

    def __init__(
        self,
        *,
        limit: int,
        interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of permits per window.
            interval_seconds: Window length in seconds.
            clock: Monotonic time source returning seconds.
            sleep: Function used to suspend the caller when no cancel event
                is supplied.

        Raises:
            ConfigurationError: If limit or interval_seconds are not positive.
        """
        if limit <= 0:
            raise ConfigurationError(
                code="rate_limit_invalid_limit",
                message="Request limit must be positive",
                details={"limit": limit},
            )
        if interval_seconds <= 0:
            raise ConfigurationError(
                code="rate_limit_invalid_interval",
                message="Rate limit interval must be positive",
                details={"interval_seconds": interval_seconds},
            )

        self._limit = limit
        self._interval = float(interval_seconds)
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._window_start: float | None = None
        self._count = 0
        self._granted_total = 0
        self._waits_total = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def _roll_window_locked(self, now: float) -> None:
        if self._window_start is None or now - self._window_start >= self._interval:
            self._window_start = now
            self._count = 0

    def _grant_locked(self) -> None:
        self._count += 1
        self._granted_total += 1

    def acquire(self, cancel: threading.Event | None = None) -> None:
        """Block until a permit is available in the current window, then take it.

        Args:
            cancel: Optional event; when set during a wait the call gives up.

        Raises:
            RequestCancelledError: If ``cancel`` is set while waiting. Counters
                are left as they were.
        """
        while True:
            with self._lock:
                now = self._clock()
                self._roll_window_locked(now)
                if self._count < self._limit:
                    self._grant_locked()
                    return
                wait = self._window_start + self._interval - now
                self._waits_total += 1

            logger.debug(
                "rate_limit.waiting",
                extra={"limit": self._limit, "wait_s": round(wait, 4)},
            )
            if cancel is None:
                self._sleep(wait)
            elif cancel.wait(wait):
                logger.info("rate_limit.wait_cancelled", extra={"limit": self._limit})
                raise RequestCancelledError(
                    code="rate_limit_wait_cancelled",
                    message="Waiting for a rate limit permit was cancelled",
                    details={"limit": self._limit, "interval_seconds": self._interval},
                )

    def try_acquire(self) -> RateLimitResult:
        """Take a permit if the current window has room, without waiting.

        Returns:
            RateLimitResult describing the decision; a permit is consumed only
            when ``allowed`` is True.
        """
        with self._lock:
            now = self._clock()
            self._roll_window_locked(now)
            reset_at = self._window_start + self._interval

            if self._count < self._limit:
                self._grant_locked()
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - self._count,
                    reset_at=reset_at,
                    retry_after_seconds=None,
                )

            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=0,
                reset_at=reset_at,
                retry_after_seconds=max(0.0, reset_at - now),
            )

    def stats(self) -> dict[str, int | float]:
        """Return a snapshot of the limiter counters."""

        with self._lock:
            return {
                "limit": self._limit,
                "interval_seconds": self._interval,
                "count": self._count,
                "granted_total": self._granted_total,
                "waits_total": self._waits_total,
            }
