"""
Per-client token bucket rate limiter

Each client key gets a bucket holding up to `burst` tokens that refills at
`rate_per_minute`. A request spends one token; an empty bucket rejects it.

State is in-process only: every Lambda container (or process) keeps its own
buckets, so the limit is approximate across instances.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class _Bucket:
    tokens: float
    updated_at: float


class RateLimiter:
    """
    Args:
        rate_per_minute: Tokens added per minute
        burst: Bucket capacity
        clock: Monotonic time source in seconds (injected for tests)
    """

    def __init__(
        self,
        rate_per_minute: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate_per_minute <= 0 or burst < 1:
            raise ValueError("rate_per_minute must be positive and burst at least 1")
        self._refill_per_second = rate_per_minute / 60.0
        self._burst = burst
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """Spend one token for `key`; False when the bucket is empty."""
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket(tokens=float(self._burst), updated_at=now)
                self._buckets[key] = bucket
            else:
                elapsed = max(0.0, now - bucket.updated_at)
                bucket.tokens = min(float(self._burst), bucket.tokens + elapsed * self._refill_per_second)
                bucket.updated_at = now

            if bucket.tokens < 1:
                logger.warning(f"Rate limit exceeded for client {key}")
                return False

            bucket.tokens -= 1
            return True

    def retry_after(self, key: str) -> int:
        """Whole seconds until `key` has a token again (0 if it has one now)."""
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                return 0
            elapsed = max(0.0, self._clock() - bucket.updated_at)
            tokens = bucket.tokens + elapsed * self._refill_per_second
            if tokens >= 1:
                return 0
            missing = 1 - tokens
            return max(1, math.ceil(missing / self._refill_per_second))
