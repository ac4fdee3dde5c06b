"""
Explicit memoization for the pure calculators.

A ComputationCache is an object the caller owns: it is constructed with a
TTL, passed to whatever needs it, and invalidated explicitly. Keys are the
hashable input tuple of the computation (frozen DTOs, numbers, strings).
"""

import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from bar_costing.utils.config import get_config


class ComputationCache:
    """Thread-safe TTL cache keyed on computation inputs.

    Args:
        ttl_seconds: Entry lifetime; None uses the configured cache_ttl_seconds,
            0 or less disables expiry
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds is None:
            ttl_seconds = get_config().cache_ttl_seconds
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _expired(self, stored_at: float) -> bool:
        if self.ttl_seconds <= 0:
            return False
        return self._clock() - stored_at > self.ttl_seconds

    def _prune_expired(self) -> None:
        """Drop every expired entry. Caller holds the lock."""
        if self.ttl_seconds <= 0:
            return
        expired = [key for key, (stored_at, _) in self._entries.items() if self._expired(stored_at)]
        for key in expired:
            del self._entries[key]

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        An expired entry is dropped when it is looked up, and storing a new
        value drops every other expired entry, so the cache holds at most the
        keys used within the last ttl_seconds.

        The computation runs outside the lock; two threads missing the same
        key may both compute, and the last one stored wins.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if not self._expired(entry[0]):
                    self.hits += 1
                    return entry[1]
                del self._entries[key]
            self.misses += 1

        value = compute()

        with self._lock:
            self._prune_expired()
            self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, key: Hashable) -> bool:
        """Drop one entry. Returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry (e.g. after an inventory cost change)."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
