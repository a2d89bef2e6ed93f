"""Data models for durable memory about the consultant."""

from dataclasses import dataclass
from enum import Enum

EMOTIONAL_TTL_DAYS = 30


class MemoryCategory(str, Enum):
    RECURRING_THEME = "recurring_theme"
    LIFE_EVENT = "life_event"
    RELATIONSHIP = "relationship"
    PREFERENCE = "preference"
    IDENTITY = "identity"


class MemoryLayer(str, Enum):
    IDENTITY = "identity"  # permanent
    EMOTIONAL = "emotional"  # evolves, expires


@dataclass
class MemoryEntry:
    category: MemoryCategory
    key: str
    value: str
    confidence: float = 1.0
    layer: MemoryLayer = MemoryLayer.EMOTIONAL
    ttl_days: int | None = None

    def __post_init__(self):
        self.confidence = max(0.0, min(1.0, float(self.confidence)))
        # identity never expires; emotional always does
        if self.layer is MemoryLayer.IDENTITY or self.ttl_days is None:
            self.ttl_days = default_ttl(self.layer)


def default_ttl(layer: MemoryLayer) -> int | None:
    return EMOTIONAL_TTL_DAYS if layer is MemoryLayer.EMOTIONAL else None
