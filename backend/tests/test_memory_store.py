"""
Memory store tests

Run:
    pytest backend/tests/test_memory_store.py -v
"""

from cache import MemoryStore


class TestMemoryStore:
    """TTL key/value store"""

    def test_get_missing_key_returns_none(self, memory_store):
        assert memory_store.get("nope") is None

    def test_set_then_get(self, memory_store):
        memory_store.set("k", {"id": "1"})
        assert memory_store.get("k") == {"id": "1"}

    def test_entry_visible_until_expiry(self, memory_store, fake_clock):
        memory_store.set("k", "v")
        fake_clock.advance(59.9)
        assert memory_store.get("k") == "v"

        fake_clock.advance(0.1)
        assert memory_store.get("k") is None

    def test_per_call_ttl_overrides_default(self, memory_store, fake_clock):
        memory_store.set("short", True, ttl=5)
        memory_store.set("long", True)
        fake_clock.advance(5)

        assert memory_store.get("short") is None
        assert memory_store.get("long") is True

    def test_set_overwrites_and_refreshes_expiry(self, memory_store, fake_clock):
        memory_store.set("k", "old")
        fake_clock.advance(50)
        memory_store.set("k", "new")
        fake_clock.advance(50)

        assert memory_store.get("k") == "new"

    def test_delete(self, memory_store):
        memory_store.set("k", "v")

        assert memory_store.delete("k") is True
        assert memory_store.get("k") is None
        assert memory_store.delete("k") is False

    def test_falsy_values_are_cached(self, memory_store):
        memory_store.set("empty", {})
        assert memory_store.get("empty") == {}

    def test_clear_and_stats(self, memory_store, fake_clock):
        memory_store.set("a", 1)
        memory_store.set("b", 2, ttl=1)
        fake_clock.advance(2)

        assert memory_store.stats() == {"total_entries": 1, "default_ttl_seconds": 60}
        assert memory_store.clear() == 1

    def test_broken_clock_degrades_to_miss(self):
        def broken_clock():
            raise RuntimeError("clock unavailable")

        store = MemoryStore(clock=broken_clock)
        store.set("k", "v")

        assert store.get("k") is None
        assert store.delete("k") is False
