"""Tests for the anonymous session cache."""

from oracle.session_cache import AnonymousSessionCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _cache(ttl=1800):
    clock = FakeClock()
    return AnonymousSessionCache(ttl_seconds=ttl, clock=clock), clock


class TestAppendAndDrain:
    def test_messages_kept_in_order(self):
        cache, _ = _cache()
        cache.append("c1", {"role": "user", "content": "q"})
        cache.append("c1", {"role": "assistant", "content": "a"})
        assert [m["role"] for m in cache.drain("c1")] == ["user", "assistant"]

    def test_drain_is_at_most_once(self):
        cache, _ = _cache()
        cache.append("c1", {"role": "user", "content": "q"})
        assert cache.drain("c1")
        assert cache.drain("c1") is None

    def test_unknown_conversation(self):
        cache, _ = _cache()
        assert cache.drain("nope") is None


class TestExpiry:
    def test_expired_entry_is_unreachable(self):
        cache, clock = _cache(ttl=60)
        cache.append("c1", {"role": "user", "content": "q"})
        clock.advance(61)
        assert "c1" not in cache
        assert cache.drain("c1") is None

    def test_absent_exactly_at_ttl(self):
        cache, clock = _cache()
        cache.append("c1", {"role": "user", "content": "q"})
        clock.advance(1800)
        assert "c1" not in cache
        assert cache.drain("c1") is None

    def test_present_just_before_ttl(self):
        cache, clock = _cache()
        cache.append("c1", {"role": "user", "content": "q"})
        clock.advance(1800 - 0.001)
        assert "c1" in cache
        assert cache.drain("c1") == [{"role": "user", "content": "q"}]

    def test_touch_extends_life(self):
        cache, clock = _cache(ttl=60)
        cache.append("c1", {"role": "user", "content": "q"})
        clock.advance(50)
        cache.append("c1", {"role": "assistant", "content": "a"})
        clock.advance(50)
        assert len(cache.drain("c1")) == 2

    def test_append_sweeps_other_entries(self):
        cache, clock = _cache(ttl=60)
        cache.append("old", {"role": "user", "content": "q"})
        clock.advance(120)
        cache.append("new", {"role": "user", "content": "q"})
        assert len(cache) == 1
        assert "new" in cache

    def test_sweep_counts_dropped(self):
        cache, clock = _cache(ttl=10)
        cache.append("a", {})
        cache.append("b", {})
        clock.advance(11)
        assert cache.sweep() == 2
        assert len(cache) == 0


class TestTransferResolution:
    def test_cache_wins_over_supplied(self):
        cache, _ = _cache()
        cache.append("c1", {"role": "assistant", "content": "full"})
        messages, source = cache.resolve_transfer_messages("c1", [{"role": "assistant", "content": "filtered"}])
        assert source == "cache"
        assert messages[0]["content"] == "full"
        assert "c1" not in cache

    def test_supplied_used_when_cache_empty(self):
        cache, _ = _cache()
        messages, source = cache.resolve_transfer_messages("c1", [{"role": "user", "content": "q"}])
        assert source == "client"
        assert messages == [{"role": "user", "content": "q"}]

    def test_neither(self):
        cache, _ = _cache()
        assert cache.resolve_transfer_messages("c1", None) == (None, "none")
