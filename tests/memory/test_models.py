"""Tests for memory data models."""

from memory.models import EMOTIONAL_TTL_DAYS, MemoryCategory, MemoryEntry, MemoryLayer, default_ttl


def test_confidence_clamped():
    high = MemoryEntry(MemoryCategory.PREFERENCE, "k", "v", confidence=3)
    low = MemoryEntry(MemoryCategory.PREFERENCE, "k", "v", confidence=-1)
    assert high.confidence == 1.0
    assert low.confidence == 0.0


def test_default_ttl_by_layer():
    assert default_ttl(MemoryLayer.EMOTIONAL) == EMOTIONAL_TTL_DAYS
    assert default_ttl(MemoryLayer.IDENTITY) is None


def test_entry_defaults():
    entry = MemoryEntry(MemoryCategory.LIFE_EVENT, "boda", "Se casa en mayo")
    assert entry.layer is MemoryLayer.EMOTIONAL
    assert entry.ttl_days == 30


def test_identity_entry_never_expires():
    entry = MemoryEntry(MemoryCategory.IDENTITY, "ciudad", "Vive en Lima", layer=MemoryLayer.IDENTITY)
    assert entry.ttl_days is None


def test_identity_ignores_explicit_ttl():
    entry = MemoryEntry(
        MemoryCategory.IDENTITY, "ciudad", "Vive en Lima", layer=MemoryLayer.IDENTITY, ttl_days=7
    )
    assert entry.ttl_days is None


def test_emotional_keeps_explicit_ttl():
    entry = MemoryEntry(MemoryCategory.RECURRING_THEME, "tema", "Dudas laborales", ttl_days=90)
    assert entry.ttl_days == 90
