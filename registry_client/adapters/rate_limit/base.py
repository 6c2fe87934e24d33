"""Rate limiter interfaces.

Services depend on this abstraction rather than the concrete limiter so the
windowing strategy can change without touching the orchestration code.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a non-blocking permit request.

    Attributes:
        allowed: Whether a permit was granted.
        limit: Max permits per window.
        remaining: Permits left in the current window (0 when blocked).
        reset_at: Clock reading at which the current window ends.
        retry_after_seconds: Time until a slot frees up when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: float | None


class AbstractRateLimiter(ABC):
    """Interface for limiters gating outbound calls."""

    @abstractmethod
    def acquire(self, cancel: threading.Event | None = None) -> None:
        """Block until a permit can be granted, then take it.

        Args:
            cancel: Optional event; setting it aborts a pending wait.

        Raises:
            RequestCancelledError: If ``cancel`` is set while waiting.
        """
        raise NotImplementedError

    @abstractmethod
    def try_acquire(self) -> RateLimitResult:
        """Take a permit only if one is available right now."""
        raise NotImplementedError
