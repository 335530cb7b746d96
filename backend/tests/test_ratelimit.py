import pytest

from strmanager.errors import RateLimitExceeded
from strmanager.utils.ratelimit import FixedWindowRateLimiter, InMemoryCounterStore


class Clock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_raises():
    clock = Clock()
    limiter = FixedWindowRateLimiter(InMemoryCounterStore(clock), limit=2, window_seconds=60, namespace="t")

    assert limiter.hit("u1") == 1
    assert limiter.hit("u1") == 0
    with pytest.raises(RateLimitExceeded) as exc:
        limiter.hit("u1")
    assert exc.value.key == "t:u1"
    assert exc.value.retry_after == 60


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(InMemoryCounterStore(Clock()), limit=1, window_seconds=60)
    limiter.hit("a")
    limiter.hit("b")
    with pytest.raises(RateLimitExceeded):
        limiter.hit("a")


def test_window_resets():
    clock = Clock()
    limiter = FixedWindowRateLimiter(InMemoryCounterStore(clock), limit=1, window_seconds=60)
    limiter.hit("u")

    clock.now += 30
    with pytest.raises(RateLimitExceeded) as exc:
        limiter.hit("u")
    assert exc.value.retry_after == 30

    clock.now += 30
    assert limiter.hit("u") == 0


def test_namespaces_share_a_store_without_colliding():
    store = InMemoryCounterStore(Clock())
    restock = FixedWindowRateLimiter(store, limit=1, namespace="restock")
    warranty = FixedWindowRateLimiter(store, limit=1, namespace="warranty")
    restock.hit("u")
    warranty.hit("u")
    with pytest.raises(RateLimitExceeded):
        restock.hit("u")
