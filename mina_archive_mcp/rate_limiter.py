"""Best-effort in-memory rate limiting, one token bucket per tool."""

from __future__ import annotations

import asyncio
import time
from typing import Dict, Optional


class TokenBucket:
    def __init__(self, rate: float, capacity: float) -> None:
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self.timestamp = time.monotonic()
        self._lock = asyncio.Lock()

    async def consume(self, amount: float = 1.0) -> bool:
        async with self._lock:
            now = time.monotonic()
            self.tokens = min(self.capacity, self.tokens + (now - self.timestamp) * self.rate)
            self.timestamp = now
            if self.tokens < amount:
                return False
            self.tokens -= amount
            return True


class PerKeyRateLimiter:
    """Token buckets keyed by tool name; ``per_tool`` overrides the shared rate."""

    def __init__(
        self,
        rate_per_sec: float,
        burst: Optional[float] = None,
        *,
        per_tool: Optional[Dict[str, float]] = None,
    ) -> None:
        self.rate = rate_per_sec
        self.burst = burst
        self.per_tool = dict(per_tool or {})
        self._buckets: Dict[str, TokenBucket] = {}

    def _bucket_for(self, key: str) -> TokenBucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            rate = self.per_tool.get(key, self.rate)
            # Capacity is at least one token.
            capacity = self.burst if self.burst is not None else max(rate, 1.0)
            bucket = TokenBucket(rate, capacity)
            self._buckets[key] = bucket
        return bucket

    async def allow(self, key: str) -> bool:
        return await self._bucket_for(key).consume()
