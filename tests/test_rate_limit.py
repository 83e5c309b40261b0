"""Tests for the fixed-window limiter."""

from services.rate_limit import FixedWindowLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_ceiling_then_blocks():
    limiter = FixedWindowLimiter(max_requests=2, window_seconds=60, clock=FakeClock())

    assert limiter.hit("a")[0]
    assert limiter.hit("a")[0]
    allowed, retry_after = limiter.hit("a")
    assert not allowed
    assert retry_after == 60


def test_clients_are_counted_separately():
    limiter = FixedWindowLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    assert limiter.hit("a")[0]
    assert limiter.hit("b")[0]
    assert not limiter.hit("a")[0]


def test_window_resets():
    clock = FakeClock()
    limiter = FixedWindowLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.hit("a")
    assert not limiter.hit("a")[0]

    clock.now += 60
    assert limiter.hit("a")[0]


def test_expired_windows_of_other_clients_are_evicted():
    clock = FakeClock()
    limiter = FixedWindowLimiter(max_requests=5, window_seconds=60, clock=clock)
    for i in range(10_000):
        limiter.hit(f"10.0.{i // 256}.{i % 256}")
    assert len(limiter) == 10_000

    clock.now += 3600
    limiter.hit("192.168.1.1")

    assert len(limiter) == 1


def test_live_windows_survive_a_sweep():
    clock = FakeClock()
    limiter = FixedWindowLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.hit("old")
    clock.now += 30
    limiter.hit("recent")

    clock.now += 30
    limiter.hit("other")

    assert len(limiter) == 2
    assert not limiter.hit("recent")[0]
