"""
Tests for the sliding window rate limiter.
"""

import pytest

from crypto_expert.api.rate_limit import RateLimitExceeded, SlidingWindowRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_rejects():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    limiter.check("1.2.3.4")
    limiter.check("1.2.3.4")
    with pytest.raises(RateLimitExceeded) as exc_info:
        limiter.check("1.2.3.4")

    assert exc_info.value.status_code == 429
    assert exc_info.value.retry_after == pytest.approx(60)


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    limiter.check("a")
    clock.now = 30
    limiter.check("a")
    clock.now = 60  # first request expired
    limiter.check("a")
    with pytest.raises(RateLimitExceeded):
        limiter.check("a")


def test_clients_counted_separately():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    limiter.check("a")
    limiter.check("b")
    with pytest.raises(RateLimitExceeded):
        limiter.check("a")


def test_reset():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.check("a")
    limiter.reset()
    limiter.check("a")


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(**kwargs)


def test_idle_clients_are_forgotten():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    for i in range(1000):
        limiter.check(f"10.0.{i // 256}.{i % 256}")
    assert len(limiter) == 1000

    clock.now = 61
    limiter.check("10.9.9.9")

    assert len(limiter) == 1


def test_active_client_survives_sweep():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

    limiter.check("idle")
    clock.now = 30
    limiter.check("active")
    clock.now = 61
    limiter.check("other")

    assert len(limiter) == 2
    limiter.check("active")
    with pytest.raises(RateLimitExceeded):
        limiter.check("active")
