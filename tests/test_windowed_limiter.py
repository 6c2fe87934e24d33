"""Unit tests for the fixed-window rate limiter."""

import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from registry_client.adapters.rate_limit.windowed import WindowedRateLimiter
from registry_client.core.errors import ConfigurationError, RequestCancelledError


def _limiter(fake_clock, *, limit: int, interval: float) -> WindowedRateLimiter:
    return WindowedRateLimiter(
        limit=limit,
        interval_seconds=interval,
        clock=fake_clock.time,
        sleep=fake_clock.sleep,
    )


def test_grants_up_to_limit_without_waiting(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=3, interval=60)

    for _ in range(3):
        limiter.acquire()

    assert fake_clock.sleeps == []
    assert limiter.stats()["count"] == 3


def test_waits_until_window_end_when_exhausted(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=1, interval=10)

    limiter.acquire()
    fake_clock.advance(3)
    limiter.acquire()

    assert fake_clock.sleeps == [pytest.approx(7.0)]
    stats = limiter.stats()
    assert stats["count"] == 1
    assert stats["granted_total"] == 2
    assert stats["waits_total"] == 1


def test_window_rolls_over_after_interval(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=2, interval=5)

    limiter.acquire()
    limiter.acquire()
    fake_clock.advance(5)
    limiter.acquire()

    assert fake_clock.sleeps == []
    assert limiter.stats()["count"] == 1


def test_first_window_opens_on_first_acquire(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=1, interval=10)

    fake_clock.advance(100)
    limiter.acquire()
    result = limiter.try_acquire()

    assert result.allowed is False
    assert result.reset_at == pytest.approx(1_110.0)


def test_boundary_burst_is_allowed(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=2, interval=10)

    limiter.acquire()
    fake_clock.advance(9)
    limiter.acquire()
    fake_clock.advance(1)
    limiter.acquire()
    limiter.acquire()

    # four grants within one second across the boundary, no waiting
    assert fake_clock.sleeps == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "interval_seconds": 1},
        {"limit": -3, "interval_seconds": 1},
        {"limit": 1, "interval_seconds": 0},
        {"limit": 1, "interval_seconds": -1.5},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError):
        WindowedRateLimiter(**kwargs)


def test_invalid_limit_error_code() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        WindowedRateLimiter(limit=0, interval_seconds=1)

    assert exc_info.value.code == "rate_limit_invalid_limit"


def test_try_acquire_reports_remaining(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=2, interval=60)

    first = limiter.try_acquire()
    second = limiter.try_acquire()

    assert first.allowed is True
    assert first.remaining == 1
    assert first.retry_after_seconds is None
    assert second.allowed is True
    assert second.remaining == 0


def test_try_acquire_blocked_does_not_consume(fake_clock) -> None:
    limiter = _limiter(fake_clock, limit=1, interval=60)

    assert limiter.try_acquire().allowed is True
    fake_clock.advance(20)
    blocked = limiter.try_acquire()

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == pytest.approx(40.0)
    assert limiter.stats()["granted_total"] == 1


def test_sleep_is_not_used_when_cancel_event_given(fake_clock) -> None:
    sleep = Mock()
    limiter = WindowedRateLimiter(limit=1, interval_seconds=60, clock=fake_clock.time, sleep=sleep)
    cancel = threading.Event()
    cancel.set()

    limiter.acquire()
    with pytest.raises(RequestCancelledError):
        limiter.acquire(cancel)

    sleep.assert_not_called()


def test_cancelled_wait_leaves_counters_unchanged() -> None:
    limiter = WindowedRateLimiter(limit=1, interval_seconds=60)
    limiter.acquire()
    cancel = threading.Event()

    timer = threading.Timer(0.05, cancel.set)
    timer.start()
    started = time.monotonic()
    with pytest.raises(RequestCancelledError) as exc_info:
        limiter.acquire(cancel)
    elapsed = time.monotonic() - started
    timer.join()

    assert exc_info.value.code == "rate_limit_wait_cancelled"
    assert elapsed < 5
    stats = limiter.stats()
    assert stats["count"] == 1
    assert stats["granted_total"] == 1


def test_limit_plus_one_sequential_acquires_take_an_interval() -> None:
    limiter = WindowedRateLimiter(limit=2, interval_seconds=0.3)

    started = time.monotonic()
    for _ in range(3):
        limiter.acquire()
    elapsed = time.monotonic() - started

    assert elapsed >= 0.3


def test_concurrent_acquires_never_over_grant() -> None:
    clock = Mock(return_value=500.0)
    limiter = WindowedRateLimiter(limit=5, interval_seconds=60, clock=clock)
    barrier = threading.Barrier(20)

    def _attempt() -> bool:
        barrier.wait()
        return limiter.try_acquire().allowed

    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(lambda _: _attempt(), range(20)))

    assert results.count(True) == 5
    assert limiter.stats()["count"] == 5


def test_concurrent_blocking_acquires_span_windows() -> None:
    limiter = WindowedRateLimiter(limit=3, interval_seconds=0.2)

    started = time.monotonic()
    threads = [threading.Thread(target=limiter.acquire) for _ in range(9)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    elapsed = time.monotonic() - started

    # nine grants at three per window need at least three windows
    assert elapsed >= 0.4
    assert limiter.stats()["granted_total"] == 9


class _WindowRecordingLimiter(WindowedRateLimiter):
    """Remember which window each grant was counted against."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.grant_windows: list[float] = []

    def _grant_locked(self) -> None:
        super()._grant_locked()
        self.grant_windows.append(self._window_start)


def test_concurrent_blocking_acquires_never_over_grant(fake_clock) -> None:
    limiter = _WindowRecordingLimiter(
        limit=4,
        interval_seconds=10,
        clock=fake_clock.time,
        sleep=fake_clock.sleep,
    )
    barrier = threading.Barrier(12)

    def _worker() -> None:
        barrier.wait()
        for _ in range(3):
            limiter.acquire()

    threads = [threading.Thread(target=_worker) for _ in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    per_window = Counter(limiter.grant_windows)
    assert sum(per_window.values()) == 36
    assert max(per_window.values()) <= 4
    starts = sorted(per_window)
    assert len(starts) >= 9
    assert all(later - earlier >= 10 for earlier, later in zip(starts, starts[1:]))
