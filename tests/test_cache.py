"""Tests for the in-memory search cache."""

from meal_planner.services.cache import InMemoryCache


def test_get_returns_stored_value() -> None:
    cache = InMemoryCache()
    cache.set("usda:rice:10", ["rice"], ttl_seconds=60)

    assert cache.get("usda:rice:10") == ["rice"]
    assert cache.get("usda:oats:10") is None


def test_expired_entry_is_dropped() -> None:
    cache = InMemoryCache()
    cache.set("key", "value", ttl_seconds=0)

    assert cache.get("key") is None
    assert len(cache) == 0


def test_least_recently_used_entry_is_evicted() -> None:
    cache = InMemoryCache(max_entries=2)
    cache.set("a", 1, ttl_seconds=60)
    cache.set("b", 2, ttl_seconds=60)
    cache.get("a")
    cache.set("c", 3, ttl_seconds=60)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert len(cache) == 2
