"""Unit tests for the in-memory cache store."""

import asyncio

import pytest

from page_cache.cache import DEFAULT, FOREVER, InMemoryStore, ResponseSnapshot
from page_cache.exceptions import CacheMiss, NotStored, NotSupport


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(1000.0)


class TestInMemoryStore:
    """Test the CacheStore contract on the in-memory store."""

    @pytest.mark.asyncio
    async def test_get_missing_key_raises_cache_miss(self, memory_store):
        """Test that an absent key is a cache miss."""
        with pytest.raises(CacheMiss) as exc_info:
            await memory_store.get("missing")

        assert exc_info.value.data == {"key": "missing"}

    @pytest.mark.asyncio
    async def test_set_then_get(self, memory_store):
        """Test storing and reading a value."""
        await memory_store.set("k", {"a": [1, 2]})
        assert await memory_store.get("k") == {"a": [1, 2]}

    @pytest.mark.asyncio
    async def test_set_overwrites(self, memory_store):
        """Test that set replaces an existing value."""
        await memory_store.set("k", 1)
        await memory_store.set("k", 2)
        assert await memory_store.get("k") == 2

    @pytest.mark.asyncio
    async def test_values_are_isolated_from_callers(self, memory_store):
        """Test that stored values cannot be mutated through references."""
        value = {"items": [1]}
        await memory_store.set("k", value)
        value["items"].append(2)

        stored = await memory_store.get("k")
        stored["items"].append(3)

        assert await memory_store.get("k") == {"items": [1]}

    @pytest.mark.asyncio
    async def test_get_validates_into_model(self, memory_store):
        """Test reading a value into a caller-supplied shape."""
        await memory_store.set("k", {"status": 200, "headers": {}, "body": b"hi"})

        snapshot = await memory_store.get("k", ResponseSnapshot)

        assert isinstance(snapshot, ResponseSnapshot)
        assert snapshot.body == b"hi"

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, clock):
        """Test that an entry past its TTL is no longer returned."""
        store = InMemoryStore(default_ttl=300, clock=clock)
        await store.set("k", "v", expire=10)

        clock.now = 1009.0
        assert await store.get("k") == "v"

        clock.now = 1010.0
        with pytest.raises(CacheMiss):
            await store.get("k")

    @pytest.mark.asyncio
    async def test_default_expire_uses_store_ttl(self, clock):
        """Test that DEFAULT falls back to the store's TTL."""
        store = InMemoryStore(default_ttl=60, clock=clock)
        await store.set("k", "v", expire=DEFAULT)

        clock.now += 61
        with pytest.raises(CacheMiss):
            await store.get("k")

    @pytest.mark.asyncio
    async def test_forever_never_expires(self, clock):
        """Test that FOREVER entries survive any amount of time."""
        store = InMemoryStore(default_ttl=1, clock=clock)
        await store.set("k", "v", expire=FOREVER)

        clock.now = 1e9
        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_add_only_when_absent(self, memory_store):
        """Test add precondition."""
        await memory_store.add("k", 1)
        with pytest.raises(NotStored):
            await memory_store.add("k", 2)
        assert await memory_store.get("k") == 1

    @pytest.mark.asyncio
    async def test_add_succeeds_over_expired_entry(self, clock):
        """Test that an expired entry counts as absent for add."""
        store = InMemoryStore(clock=clock)
        await store.set("k", 1, expire=5)

        clock.now += 10
        await store.add("k", 2)
        assert await store.get("k") == 2

    @pytest.mark.asyncio
    async def test_concurrent_add_exactly_one_wins(self, memory_store):
        """Test mutual exclusion of concurrent add calls on the same key."""

        async def try_add(value):
            try:
                await memory_store.add("lock", value)
                return True
            except NotStored:
                return False

        results = await asyncio.gather(*(try_add(i) for i in range(50)))

        assert results.count(True) == 1
        assert results.count(False) == 49
        winner = results.index(True)
        assert await memory_store.get("lock") == winner

    @pytest.mark.asyncio
    async def test_replace_only_when_present(self, memory_store):
        """Test replace precondition."""
        with pytest.raises(NotStored):
            await memory_store.replace("k", 1)

        await memory_store.set("k", 1)
        await memory_store.replace("k", 2)
        assert await memory_store.get("k") == 2

    @pytest.mark.asyncio
    async def test_delete(self, memory_store):
        """Test deleting present and absent keys."""
        await memory_store.set("k", 1)
        await memory_store.delete("k")

        with pytest.raises(CacheMiss):
            await memory_store.get("k")
        with pytest.raises(CacheMiss):
            await memory_store.delete("k")

    @pytest.mark.asyncio
    async def test_increment_and_decrement(self, memory_store):
        """Test counter mutation."""
        await memory_store.set("n", 5)

        assert await memory_store.increment("n", 3) == 8
        assert await memory_store.decrement("n", 2) == 6
        assert await memory_store.get("n") == 6

    @pytest.mark.asyncio
    async def test_decrement_clamps_at_zero(self, memory_store):
        """Test that decrement never goes below zero."""
        await memory_store.set("n", 3)
        assert await memory_store.decrement("n", 10) == 0
        assert await memory_store.get("n") == 0

    @pytest.mark.asyncio
    async def test_counter_on_missing_key(self, memory_store):
        """Test counters on absent keys."""
        with pytest.raises(CacheMiss):
            await memory_store.increment("n", 1)
        with pytest.raises(CacheMiss):
            await memory_store.decrement("n", 1)

    @pytest.mark.asyncio
    async def test_counter_on_non_numeric_value(self, memory_store):
        """Test that counters reject non-integer values."""
        await memory_store.set("s", "abc")
        with pytest.raises(NotSupport) as exc_info:
            await memory_store.increment("s", 1)
        assert exc_info.value.data["operation"] == "increment"

        await memory_store.set("b", True)
        with pytest.raises(NotSupport):
            await memory_store.decrement("b", 1)

    @pytest.mark.asyncio
    async def test_negative_delta_rejected(self, memory_store):
        """Test delta validation."""
        await memory_store.set("n", 1)
        with pytest.raises(ValueError):
            await memory_store.increment("n", -1)

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_atomic(self, memory_store):
        """Test that concurrent increments do not lose updates."""
        await memory_store.set("n", 0)
        await asyncio.gather(*(memory_store.increment("n", 1) for _ in range(100)))
        assert await memory_store.get("n") == 100

    @pytest.mark.asyncio
    async def test_increment_keeps_expiry(self, clock):
        """Test that counter mutation keeps the remaining TTL."""
        store = InMemoryStore(clock=clock)
        await store.set("n", 1, expire=10)

        clock.now += 5
        assert await store.increment("n", 1) == 2

        clock.now += 6
        with pytest.raises(CacheMiss):
            await store.get("n")

    @pytest.mark.asyncio
    async def test_flush(self, memory_store):
        """Test removing every entry."""
        await memory_store.set("a", 1)
        await memory_store.set("b", 2)

        await memory_store.flush()

        assert memory_store.size() == 0
        with pytest.raises(CacheMiss):
            await memory_store.get("a")

    @pytest.mark.asyncio
    async def test_cleanup_removes_only_expired(self, clock):
        """Test the expired entry sweep."""
        store = InMemoryStore(clock=clock)
        await store.set("short", 1, expire=1)
        await store.set("long", 2, expire=100)

        clock.now += 50
        removed = await store.cleanup()

        assert removed == 1
        assert store.size() == 1
        assert await store.get("long") == 2
