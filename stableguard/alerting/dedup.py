"""
Alert Deduplication — one alert per report identity.

Key = "<timestamp>:<symbol>". Redelivered ledger events map to the same key,
so the dispatcher claims the key once and drops every later observation.

The store outlives single invocations, so it is owned by the host process
and passed into each invocation explicitly.
"""

from collections import OrderedDict
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class DedupStore(Protocol):
    """Capability: atomic first-claim of a report identity."""

    async def claim(self, key: str) -> bool:
        """True exactly once per key, False for every later claim."""
        ...


class InMemoryDedupStore:
    """
    Bounded in-memory claim set.

    Oldest keys are evicted past ``max_entries``; a report old enough to be
    evicted is far outside any redelivery window.
    """

    def __init__(self, max_entries: int = 10_000):
        self.max_entries = max_entries
        self._claimed: OrderedDict[str, None] = OrderedDict()

    async def claim(self, key: str) -> bool:
        if key in self._claimed:
            logger.debug("dedup_key_already_claimed", key=key)
            return False
        self._claimed[key] = None
        while len(self._claimed) > self.max_entries:
            self._claimed.popitem(last=False)
        return True

    def __contains__(self, key: str) -> bool:
        return key in self._claimed

    def __len__(self) -> int:
        return len(self._claimed)

    def reset(self) -> None:
        """Reset all state (for testing)."""
        self._claimed.clear()
