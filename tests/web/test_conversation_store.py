"""Tests for conversation_store: readings, ownership and identity transfer."""

import json

from web.conversation_store import (
    TRANSFERRED_TITLE,
    get_message,
    record_reading,
    transfer_conversation,
)

CARDS = [{"name": "El Loco", "orientation": "Upright", "position": "Past"}]


def test_record_reading_creates_conversation(oracle_db, stored_conversation):
    stored = json.dumps({"_version": 2, "sections": {"saludo": "Hola"}, "rawText": "## Saludo\nHola"})
    record_reading("c1", "u1", "¿Mi semana?", stored, CARDS, title="Tu semana", db_path=oracle_db)
    record_reading("c1", "u1", "¿Y el amor?", "Texto", CARDS, db_path=oracle_db)

    conv = stored_conversation(oracle_db, "c1")
    assert conv["user_id"] == "u1"
    assert conv["title"] == "Tu semana"
    assert [m["role"] for m in conv["messages"]] == ["user", "assistant", "user", "assistant"]
    assert [m["content"] for m in conv["messages"]][2:] == ["¿Y el amor?", "Texto"]
    assert conv["messages"][0]["cards"] is None
    assert conv["messages"][1]["content"] == stored
    assert conv["messages"][1]["cards"] == CARDS


def test_record_reading_title_falls_back_to_question(oracle_db, stored_conversation):
    record_reading("c1", "u1", "¿Mi semana?", "Texto", [], db_path=oracle_db)
    assert stored_conversation(oracle_db, "c1")["title"] == "¿Mi semana?"


def test_record_reading_title_truncated(oracle_db, stored_conversation):
    record_reading("c1", "u1", "x" * 200, "Texto", [], db_path=oracle_db)
    assert len(stored_conversation(oracle_db, "c1")["title"]) <= 80


def test_get_message_includes_owner(oracle_db, stored_conversation):
    record_reading("c1", "u1", "¿Mi semana?", "Lectura", CARDS, db_path=oracle_db)
    mid = stored_conversation(oracle_db, "c1")["messages"][1]["id"]

    msg = get_message("c1", mid, db_path=oracle_db)
    assert msg["user_id"] == "u1"
    assert msg["content"] == "Lectura"
    assert msg["cards"] == CARDS
    assert get_message("other", mid, db_path=oracle_db) is None


class TestTransfer:
    def test_creates_from_messages(self, oracle_db, stored_conversation):
        messages = [
            {"role": "user", "content": "¿Qué me depara el trabajo este mes?"},
            {"role": "assistant", "content": "Lectura completa", "cards": CARDS},
        ]
        result = transfer_conversation("c1", "u9", messages, db_path=oracle_db)
        assert result == {"conversation_id": "c1", "created": True, "saved": 2}

        conv = stored_conversation(oracle_db, "c1")
        assert conv["user_id"] == "u9"
        assert conv["title"] == "¿Qué me depara el trabajo este mes?"
        assert conv["messages"][1]["cards"] == CARDS

    def test_skips_invalid_messages(self, oracle_db, stored_conversation):
        messages = [
            {"role": "system", "content": "x"},
            {"role": "assistant", "content": "Hola"},
            {"role": "user"},
        ]
        result = transfer_conversation("c1", "u9", messages, db_path=oracle_db)
        assert result["saved"] == 1
        assert stored_conversation(oracle_db, "c1")["title"] == TRANSFERRED_TITLE

    def test_reowns_existing(self, oracle_db, stored_conversation):
        record_reading("c1", "anon", "¿Mi semana?", "Lectura", CARDS, db_path=oracle_db)
        result = transfer_conversation("c1", "u9", None, db_path=oracle_db)
        assert result == {"conversation_id": "c1", "created": False, "saved": 0}

        conv = stored_conversation(oracle_db, "c1")
        assert conv["user_id"] == "u9"
        assert len(conv["messages"]) == 2

    def test_nothing_to_transfer(self, oracle_db):
        assert transfer_conversation("c1", "u9", None, db_path=oracle_db) is None
        assert transfer_conversation("c1", "u9", [], db_path=oracle_db) is None
