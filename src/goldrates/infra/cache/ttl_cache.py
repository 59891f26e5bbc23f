"""In-memory TTL cache keyed by city, with stale reads.

One instance per process. Entries never expire out of the cache: ``get`` always
returns the last stored payload and freshness is reported separately by
``is_valid``, so callers can serve stale data when the upstream is down.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 10 * 60
DEFAULT_MAX_KEYS = 256


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float


class TTLCache(Generic[T]):
    """Per-key store of the last successful payload plus when it was stored.

    Keys beyond ``max_keys`` evict the least recently used entry.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_keys: int = DEFAULT_MAX_KEYS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_keys < 1:
            raise ValueError("max_keys must be at least 1")
        self._ttl = ttl_seconds
        self._max_keys = max_keys
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> T | None:
        """Stored payload regardless of expiry; None only if ``key`` was never set."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.data

    def is_valid(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        return self._clock() - entry.timestamp < self._ttl

    def set(self, key: str, data: T) -> None:
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_keys:
            evicted, _ = self._entries.popitem(last=False)
            logger.info("Cache full (%d keys), evicted %s", self._max_keys, evicted)

    def age(self, key: str) -> float | None:
        """Seconds since the last ``set`` for ``key``, or None if absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._clock() - entry.timestamp

    def clear(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
