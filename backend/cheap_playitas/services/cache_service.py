"""In-process price cache with single-flight computation per key."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

TTL_PRICES = 20 * 60 * 60  # 20 hours


@dataclass
class CacheEntry:
    value: Sequence[Any]
    expires_at: float


def prices_key(persons: int) -> str:
    return f"prices:{persons}"


class PriceCache:
    """Process-wide cache of aggregated price lists.

    Concurrent callers for the same key share one computation. Empty results
    are never kept, so the next request retries instead of serving a cached
    miss for the whole TTL.
    """

    def __init__(self, ttl: float = TTL_PRICES, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._pending: dict[str, asyncio.Future] = {}

    def peek(self, key: str) -> Sequence[Any] | None:
        """Live cached value for key, without computing."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Sequence[Any]]],
        ttl: float | None = None,
    ) -> Sequence[Any]:
        cached = self.peek(key)
        if cached is not None:
            logger.info(f"Cache hit: {key} ({len(cached)} entries)")
            return cached

        pending = self._pending.get(key)
        if pending is None:
            logger.info(f"Cache miss: {key}, computing")
            pending = asyncio.ensure_future(self._compute(key, compute, ttl))
            self._pending[key] = pending
        else:
            logger.info(f"Cache miss: {key}, joining in-flight computation")

        # A cancelled waiter must not cancel the computation others share
        return await asyncio.shield(pending)

    async def _compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Sequence[Any]]],
        ttl: float | None,
    ) -> Sequence[Any]:
        try:
            value = await compute()
            if value:
                expires_in = self.ttl if ttl is None else ttl
                self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + expires_in)
            else:
                self._entries.pop(key, None)
                logger.warning(f"Empty result for {key}, not cached")
            return value
        finally:
            self._pending.pop(key, None)

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
