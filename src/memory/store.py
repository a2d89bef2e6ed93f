"""Durable per-user store: reading permissions and extracted memory entries."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path

import structlog

from db import transaction

from .models import MemoryCategory, MemoryEntry, MemoryLayer

logger = structlog.get_logger()

DEFAULT_PERMISSIONS = {
    "is_premium": False,
    "can_read_today": True,
    "can_see_future": False,
    "readings_today": 0,
    "free_futures_remaining": 0,
    "history_limit": 3,
    "plan_name": "Gratuito",
}

ANONYMOUS_PERMISSIONS = {
    "is_premium": False,
    "can_read_today": True,
    "can_see_future": False,
    "readings_today": 0,
    "days_since_registration": 0,
    "free_futures_remaining": 0,
    "free_futures_used": 0,
    "total_readings": 0,
    "history_limit": 0,
    "plan_name": "Anónimo",
    "is_anonymous": True,
}

_LAYER_TITLES = {
    MemoryLayer.IDENTITY.value: "Datos permanentes",
    MemoryLayer.EMOTIONAL.value: "Situación actual",
}


class ReadingStore(ABC):
    """What the oracle needs from durable storage."""

    @abstractmethod
    def get_reading_permissions(self, user_id: str) -> dict | None:
        """Stored permission record, or None for an unknown user."""

    @abstractmethod
    def get_memory_context(self, user_id: str) -> str | None:
        """Live memory rendered as prompt text, or None when there is nothing."""

    @abstractmethod
    def save_memory_entry(
        self, user_id: str, entry: MemoryEntry, conversation_id: str | None = None
    ) -> None:
        """Upsert keyed by (user, category, key)."""


class SQLiteReadingStore(ReadingStore):
    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self._init_db()

    def _init_db(self):
        with transaction(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reading_permissions (
                    user_id TEXT PRIMARY KEY,
                    is_premium INTEGER NOT NULL DEFAULT 0,
                    can_see_future INTEGER NOT NULL DEFAULT 0,
                    can_read_today INTEGER NOT NULL DEFAULT 1,
                    readings_today INTEGER NOT NULL DEFAULT 0,
                    free_futures_remaining INTEGER NOT NULL DEFAULT 0,
                    history_limit INTEGER NOT NULL DEFAULT 3,
                    plan_name TEXT NOT NULL DEFAULT 'Gratuito',
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS memory_entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    category TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    confidence REAL NOT NULL DEFAULT 1.0,
                    layer TEXT NOT NULL DEFAULT 'emotional',
                    ttl_days INTEGER,
                    source_conversation_id TEXT,
                    expires_at TIMESTAMP,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL,
                    UNIQUE(user_id, category, key)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_memory_user
                ON memory_entries(user_id, layer)
            """)

    # --- Permissions ---

    def set_reading_permissions(
        self,
        user_id: str,
        *,
        is_premium: bool = False,
        can_see_future: bool = False,
        plan_name: str = "Gratuito",
    ) -> None:
        with transaction(self.db_path) as conn:
            conn.execute(
                """INSERT INTO reading_permissions (user_id, is_premium, can_see_future, plan_name)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                       is_premium = excluded.is_premium,
                       can_see_future = excluded.can_see_future,
                       plan_name = excluded.plan_name,
                       updated_at = CURRENT_TIMESTAMP""",
                (user_id, int(is_premium), int(can_see_future), plan_name),
            )

    def get_reading_permissions(self, user_id: str) -> dict | None:
        with transaction(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM reading_permissions WHERE user_id = ?", (user_id,)
            ).fetchone()
        if not row:
            return None
        return {
            "is_premium": bool(row["is_premium"]),
            "can_see_future": bool(row["can_see_future"]),
            "can_read_today": bool(row["can_read_today"]),
            "readings_today": row["readings_today"],
            "free_futures_remaining": row["free_futures_remaining"],
            "history_limit": row["history_limit"],
            "plan_name": row["plan_name"],
        }

    # --- Memory ---

    def save_memory_entry(
        self, user_id: str, entry: MemoryEntry, conversation_id: str | None = None
    ) -> None:
        now = datetime.now()
        expires_at = (
            (now + timedelta(days=entry.ttl_days)).isoformat() if entry.ttl_days else None
        )
        with transaction(self.db_path) as conn:
            conn.execute(
                """INSERT INTO memory_entries
                   (user_id, category, key, value, confidence, layer, ttl_days,
                    source_conversation_id, expires_at, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_id, category, key) DO UPDATE SET
                       value = excluded.value,
                       confidence = excluded.confidence,
                       layer = excluded.layer,
                       ttl_days = excluded.ttl_days,
                       source_conversation_id = excluded.source_conversation_id,
                       expires_at = excluded.expires_at,
                       updated_at = excluded.updated_at""",
                (
                    user_id,
                    MemoryCategory(entry.category).value,
                    entry.key,
                    entry.value,
                    entry.confidence,
                    MemoryLayer(entry.layer).value,
                    entry.ttl_days,
                    conversation_id,
                    expires_at,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )

    def list_memory_entries(self, user_id: str, now: datetime | None = None) -> list[MemoryEntry]:
        """Entries that have not expired, identity layer first."""
        now = now or datetime.now()
        with transaction(self.db_path) as conn:
            rows = conn.execute(
                """SELECT * FROM memory_entries
                   WHERE user_id = ? AND (expires_at IS NULL OR expires_at > ?)
                   ORDER BY layer = 'emotional', confidence DESC, updated_at DESC""",
                (user_id, now.isoformat()),
            ).fetchall()
        return [
            MemoryEntry(
                category=MemoryCategory(row["category"]),
                key=row["key"],
                value=row["value"],
                confidence=row["confidence"],
                layer=MemoryLayer(row["layer"]),
                ttl_days=row["ttl_days"],
            )
            for row in rows
        ]

    def get_memory_context(self, user_id: str) -> str | None:
        entries = self.list_memory_entries(user_id)
        if not entries:
            return None

        lines = []
        for layer in (MemoryLayer.IDENTITY, MemoryLayer.EMOTIONAL):
            layer_entries = [e for e in entries if e.layer is layer]
            if not layer_entries:
                continue
            lines.append(f"{_LAYER_TITLES[layer.value]}:")
            lines.extend(f"- {e.value}" for e in layer_entries)
        return "\n".join(lines)
