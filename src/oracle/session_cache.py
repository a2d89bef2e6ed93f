"""In-process cache of unfiltered readings for anonymous conversations.

Anonymous users only receive the paywall-filtered reading. The full content is
kept here for a short while so that, if the user signs up, the identity
transfer can persist what they were actually given by the interpreter.
Eviction is lazy: every append sweeps expired entries, there is no timer.
"""

import time
from dataclasses import dataclass, field
from typing import Callable

import structlog

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass
class CacheEntry:
    messages: list[dict] = field(default_factory=list)
    last_touched: float = 0.0


class AnonymousSessionCache:
    """Per-conversation message buffer with a sliding TTL."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, conversation_id: str) -> bool:
        entry = self._entries.get(conversation_id)
        return entry is not None and not self._expired(entry, self._clock())

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.last_touched >= self.ttl_seconds

    def append(self, conversation_id: str, message: dict) -> None:
        """Push a message onto the conversation's buffer, then sweep."""
        now = self._clock()
        entry = self._entries.get(conversation_id)
        if entry is None or self._expired(entry, now):
            entry = CacheEntry(last_touched=now)
            self._entries[conversation_id] = entry
        entry.messages.append(message)
        entry.last_touched = now
        self.sweep()

    def sweep(self) -> int:
        """Drop every entry idle for longer than the TTL. Returns how many were dropped."""
        now = self._clock()
        expired = [cid for cid, entry in self._entries.items() if self._expired(entry, now)]
        for cid in expired:
            del self._entries[cid]
        if expired:
            logger.debug("session_cache.swept", expired=len(expired), remaining=len(self._entries))
        return len(expired)

    def drain(self, conversation_id: str) -> list[dict] | None:
        """Remove and return the buffered messages, or None if absent or expired."""
        entry = self._entries.pop(conversation_id, None)
        if entry is None or self._expired(entry, self._clock()):
            return None
        return entry.messages

    def resolve_transfer_messages(
        self, conversation_id: str, supplied: list[dict] | None
    ) -> tuple[list[dict] | None, str]:
        """Pick the messages to persist on identity transfer.

        Cached (unfiltered) messages win over caller-supplied (filtered) ones.
        Returns the messages and their source: "cache", "client" or "none".
        """
        cached = self.drain(conversation_id)
        if cached:
            return cached, "cache"
        if supplied:
            return supplied, "client"
        return None, "none"
