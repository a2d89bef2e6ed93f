"""Durable memory: facts the consultant stated, extracted after each reading."""

from .extractor import MemoryExtractor
from .models import MemoryCategory, MemoryEntry, MemoryLayer
from .store import ReadingStore, SQLiteReadingStore

__all__ = [
    "MemoryCategory",
    "MemoryEntry",
    "MemoryLayer",
    "MemoryExtractor",
    "ReadingStore",
    "SQLiteReadingStore",
]
