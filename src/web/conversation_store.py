"""Conversation persistence: per-user reading history in SQLite."""

import json
import uuid
from datetime import datetime, timezone

import structlog

from web.user_store import _get_conn

logger = structlog.get_logger()

TRANSFERRED_TITLE = "Chat transferido"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _insert_message(conn, conv_id: str, role: str, content: str, cards, now: str) -> str:
    msg_id = uuid.uuid4().hex
    seq = conn.execute(
        "SELECT COALESCE(MAX(seq), 0) + 1 FROM conversation_messages WHERE conversation_id = ?",
        (conv_id,),
    ).fetchone()[0]
    conn.execute(
        """INSERT INTO conversation_messages (id, conversation_id, role, content, cards, seq, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (msg_id, conv_id, role, content, json.dumps(cards) if cards else None, seq, now),
    )
    return msg_id


def _row_to_message(row) -> dict:
    msg = dict(row)
    msg["cards"] = json.loads(msg["cards"]) if msg.get("cards") else None
    return msg


def get_message(conv_id: str, message_id: str, db_path=None) -> dict | None:
    """Single message joined with its conversation's owner."""
    conn = _get_conn(db_path)
    try:
        row = conn.execute(
            """SELECT m.id, m.role, m.content, m.cards, m.created_at, c.user_id
               FROM conversation_messages m
               JOIN conversations c ON c.id = m.conversation_id
               WHERE m.id = ? AND m.conversation_id = ?""",
            (message_id, conv_id),
        ).fetchone()
        return _row_to_message(row) if row else None
    finally:
        conn.close()


def record_reading(
    conv_id: str,
    user_id: str,
    question: str,
    content: str,
    cards: list,
    title: str | None = None,
    db_path=None,
) -> None:
    """Persist one reading exchange, creating the conversation on first use."""
    now = _now()
    conn = _get_conn(db_path)
    try:
        exists = conn.execute("SELECT 1 FROM conversations WHERE id = ?", (conv_id,)).fetchone()
        if not exists:
            conn.execute(
                "INSERT INTO conversations (id, user_id, title, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (conv_id, user_id, (title or question)[:80].strip() or "Lectura de Tarot", now, now),
            )
        _insert_message(conn, conv_id, "user", question, None, now)
        _insert_message(
            conn,
            conv_id,
            "assistant",
            content,
            [c.to_dict() if hasattr(c, "to_dict") else c for c in cards],
            now,
        )
        conn.execute("UPDATE conversations SET updated_at = ? WHERE id = ?", (now, conv_id))
        conn.commit()
    finally:
        conn.close()


def transfer_conversation(
    conv_id: str, new_user_id: str, messages: list[dict] | None, db_path=None
) -> dict | None:
    """Hand an anonymous conversation to a user.

    An existing conversation is re-owned as is. Otherwise it is created from
    ``messages``. Returns None when there is neither.
    """
    now = _now()
    conn = _get_conn(db_path)
    try:
        exists = conn.execute("SELECT 1 FROM conversations WHERE id = ?", (conv_id,)).fetchone()
        if exists:
            conn.execute(
                "UPDATE conversations SET user_id = ?, updated_at = ? WHERE id = ?",
                (new_user_id, now, conv_id),
            )
            conn.commit()
            logger.info("transfer.reowned", conversation_id=conv_id)
            return {"conversation_id": conv_id, "created": False, "saved": 0}

        if not messages:
            return None

        first_user = next((m for m in messages if m.get("role") == "user"), None)
        title = ((first_user or {}).get("content") or "")[:50].strip() or TRANSFERRED_TITLE
        conn.execute(
            "INSERT INTO conversations (id, user_id, title, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            (conv_id, new_user_id, title, now, now),
        )
        saved = 0
        for msg in messages:
            if msg.get("role") not in ("user", "assistant") or msg.get("content") is None:
                logger.warning("transfer.message_skipped", conversation_id=conv_id)
                continue
            _insert_message(conn, conv_id, msg["role"], msg["content"], msg.get("cards"), now)
            saved += 1
        conn.commit()
        logger.info("transfer.created", conversation_id=conv_id, saved=saved, total=len(messages))
        return {"conversation_id": conv_id, "created": True, "saved": saved}
    finally:
        conn.close()

