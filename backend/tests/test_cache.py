import pytest

from services.cache import TTLCache


def test_get_missing_key_returns_none(cache):
    assert cache.get("requests") is None


@pytest.mark.parametrize("elapsed, fresh", [(0, True), (29.9, True), (30, False), (120, False)])
def test_freshness_follows_ttl(cache, clock, elapsed, fresh):
    cache.set("requests", ["a"])
    clock.advance(elapsed)

    entry = cache.get("requests")

    assert entry.data == ["a"]
    assert entry.age_seconds == pytest.approx(elapsed)
    assert entry.is_fresh is fresh


def test_stale_entries_are_not_evicted_on_read(cache, clock):
    cache.set("requests", ["a"])
    clock.advance(300)

    assert cache.get("requests") is not None
    assert "requests" in cache


def test_set_overwrites_and_restamps(cache, clock):
    cache.set("requests", ["old"])
    clock.advance(45)
    cache.set("requests", ["new"])

    entry = cache.get("requests")
    assert entry.data == ["new"]
    assert entry.age_seconds == 0
    assert entry.is_fresh


def test_invalidate_selected_keys(cache):
    cache.set("requests", [1])
    cache.set("notifications", [2])

    cache.invalidate(["requests", "unknown"])

    assert cache.get("requests") is None
    assert cache.get("notifications").data == [2]


def test_invalidate_without_keys_clears_everything(cache):
    cache.set("requests", [1])
    cache.set("notifications", [2])

    cache.invalidate()

    assert len(cache) == 0


def test_info_reports_age_and_freshness(cache, clock):
    cache.set("requests", [1])
    clock.advance(40)
    cache.set("notifications", [2])
    clock.advance(5)

    assert cache.info() == {
        "requests": {"age": 45, "fresh": False},
        "notifications": {"age": 5, "fresh": True},
    }


def test_default_clock_is_usable():
    cache = TTLCache()
    cache.set("k", "v")
    assert cache.get("k").is_fresh
