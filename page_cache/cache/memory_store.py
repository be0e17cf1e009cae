"""In-memory cache store for single-process deployments and tests."""

import asyncio
import copy
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel
import structlog

from page_cache.cache.store import DEFAULT, CacheStore, check_delta
from page_cache.exceptions import CacheMiss, NotStored, NotSupport

logger = structlog.get_logger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: Optional[float]  # monotonic deadline, None = never

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryStore(CacheStore):
    """Dictionary-backed CacheStore guarded by an asyncio lock.

    Values are deep-copied on the way in and on the way out so callers can
    never mutate a stored entry. Expired entries are dropped lazily when
    touched and in bulk by cleanup().
    """

    def __init__(self, default_ttl: int = 300, clock: Callable[[], float] = time.monotonic):
        """Initialize the store.

        Args:
            default_ttl: Seconds used when an operation passes DEFAULT.
                Zero or negative means entries stored with DEFAULT never expire.
            clock: Monotonic time source in seconds.
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    def _deadline(self, expire: int) -> Optional[float]:
        ttl = self.default_ttl if expire == DEFAULT else expire
        if ttl <= 0:
            return None
        return self._clock() + ttl

    def _live_entry(self, key: str) -> Optional[_Entry]:
        """Return the entry for key, evicting it first if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str, model: Optional[Type[BaseModel]] = None) -> Any:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                raise CacheMiss(key)
            value = copy.deepcopy(entry.value)

        if model is not None and not isinstance(value, model):
            return model.model_validate(value)
        return value

    async def set(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        async with self._lock:
            self._entries[key] = _Entry(copy.deepcopy(value), self._deadline(expire))

    async def add(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        async with self._lock:
            if self._live_entry(key) is not None:
                raise NotStored(key)
            self._entries[key] = _Entry(copy.deepcopy(value), self._deadline(expire))

    async def replace(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        async with self._lock:
            if self._live_entry(key) is None:
                raise NotStored(key)
            self._entries[key] = _Entry(copy.deepcopy(value), self._deadline(expire))

    async def delete(self, key: str) -> None:
        async with self._lock:
            if self._live_entry(key) is None:
                raise CacheMiss(key)
            del self._entries[key]

    async def increment(self, key: str, delta: int) -> int:
        check_delta(delta)
        return await self._add_to_counter(key, delta, "increment")

    async def decrement(self, key: str, delta: int) -> int:
        check_delta(delta)
        return await self._add_to_counter(key, -delta, "decrement")

    async def _add_to_counter(self, key: str, delta: int, operation: str) -> int:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                raise CacheMiss(key)
            current = entry.value
            if isinstance(current, bool) or not isinstance(current, int):
                raise NotSupport(key, operation)
            # 카운터는 0 아래로 내려가지 않음
            entry.value = max(current + delta, 0)
            return entry.value

    async def flush(self) -> None:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("메모리 캐시 비움", removed=count)

    async def cleanup(self) -> int:
        """Drop every expired entry and return how many were removed."""
        async with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def size(self) -> int:
        """Number of entries currently held, including not yet evicted expired ones."""
        return len(self._entries)
