import threading
import time

from ..errors import RateLimitExceeded


class InMemoryCounterStore:
    """
    Fixed-window counters held in this process only.

    Nothing is persisted or shared, so running several workers multiplies the
    effective quota. Swap in a shared TTL key-value store for a hard limit.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._windows = {}

    def incr(self, key, window_seconds):
        """Bump the counter for key; returns (count, seconds_until_reset)."""
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
        return count, max(1, int(started + window_seconds - now))

    def reset(self):
        with self._lock:
            self._windows.clear()


class FixedWindowRateLimiter:
    def __init__(self, store, limit, window_seconds=3600, namespace="default"):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds
        self.namespace = namespace

    def hit(self, identity):
        key = f"{self.namespace}:{identity}"
        count, retry_after = self.store.incr(key, self.window_seconds)
        if count > self.limit:
            raise RateLimitExceeded(key, self.limit, retry_after)
        return self.limit - count
