"""Tests for the fixed-window admin rate limiter."""

from src.services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks():
    """The request after max_requests is refused."""
    limiter = RateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())

    decisions = [limiter.check("a") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]


def test_window_resets():
    """A new window starts once the old one has passed."""
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.check("a")
    assert limiter.check("a").allowed is False

    clock.now += 61

    assert limiter.check("a").allowed is True


def test_identifiers_are_independent():
    """Each shop has its own window."""
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    assert limiter.check("a").allowed is True
    assert limiter.check("b").allowed is True
    assert limiter.check("a").allowed is False


def test_retry_after_rounds_up():
    """Retry-After is whole seconds until the reset."""
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.check("a")
    blocked = limiter.check("a")

    clock.now += 30.5

    assert limiter.retry_after(blocked) == 30


def test_reset_clears_state():
    """reset() forgets every window."""
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.check("a")

    limiter.reset()

    assert limiter.check("a").allowed is True


def test_instances_do_not_share_state():
    """Two limiters never see each other's counts."""
    first = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    second = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    first.check("a")

    assert second.check("a").allowed is True
