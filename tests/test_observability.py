"""Tests for the in-process metrics collector."""

from observability import Metrics


def test_counters():
    m = Metrics()
    m.counter("decision_is_follow_up")
    m.counter("decision_is_follow_up", 2)
    assert m.get("decision_is_follow_up") == 3
    assert m.get("missing") == 0


def test_timer_and_observe():
    m = Metrics()
    with m.timer("interpretation"):
        pass
    m.observe("interpretation", 2.0)
    summary = m.summary()["timers"]["interpretation"]
    assert summary["count"] == 2
    assert summary["max"] == 2.0


def test_reset():
    m = Metrics()
    m.counter("streams_completed")
    m.observe("time_to_first_section", 0.1)
    m.reset()
    assert m.summary() == {"counters": {}, "timers": {}}
