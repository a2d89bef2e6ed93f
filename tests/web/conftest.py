"""Shared fixtures for web API tests."""

import json

import pytest
from fastapi.testclient import TestClient

from cli.config_models import OracleConfig
from db import wal_connect
from memory import SQLiteReadingStore
from oracle import AnonymousSessionCache, NoDelay
from web.rate_limit import reset_rate_limits
from web.user_store import init_db


def parse_sse(body: str) -> list[tuple[str, dict]]:
    """Split a text/event-stream body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        event, data = None, None
        for line in block.splitlines():
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        if event:
            events.append((event, data))
    return events


@pytest.fixture
def sse():
    return parse_sse


def read_conversation(db_path, conv_id: str) -> dict | None:
    """Stored conversation row with its messages in order, or None."""
    conn = wal_connect(db_path, row_factory=True)
    try:
        row = conn.execute("SELECT * FROM conversations WHERE id = ?", (conv_id,)).fetchone()
        if row is None:
            return None
        msgs = conn.execute(
            "SELECT * FROM conversation_messages WHERE conversation_id = ? ORDER BY seq",
            (conv_id,),
        ).fetchall()
    finally:
        conn.close()
    conv = dict(row)
    conv["messages"] = [
        dict(m, cards=json.loads(m["cards"]) if m["cards"] else None) for m in msgs
    ]
    return conv


@pytest.fixture
def stored_conversation():
    return read_conversation


@pytest.fixture
def oracle_db(tmp_path):
    """Fresh oracle.db for each test."""
    db_path = tmp_path / "oracle.db"
    init_db(db_path)
    return db_path


@pytest.fixture
def web_config(tmp_path, oracle_db):
    return OracleConfig.from_dict(
        {
            "paths": {"db_path": str(oracle_db), "log_file": str(tmp_path / "oracle.log")},
            "rate_limits": {"enabled": True, "max_requests": 100, "window_seconds": 60},
        }
    )


@pytest.fixture
def reading_store(oracle_db):
    return SQLiteReadingStore(oracle_db)


@pytest.fixture
def session_cache():
    return AnonymousSessionCache()


@pytest.fixture
def client(monkeypatch, tmp_path, provider, web_config, reading_store, session_cache, oracle_db):
    """Test client wired to a mocked provider and a per-test database."""
    monkeypatch.setenv("ORACLE_HOME", str(tmp_path))

    from web import deps
    from web.app import app

    orchestrator = deps.build_orchestrator(
        web_config,
        provider,
        provider,
        reading_store,
        session_cache,
        db_path=oracle_db,
        pacer=NoDelay(),
    )
    app.dependency_overrides = {
        deps.get_config: lambda: web_config,
        deps.get_db_path: lambda: oracle_db,
        deps.get_reading_store: lambda: reading_store,
        deps.get_session_cache: lambda: session_cache,
        deps.get_orchestrator: lambda: orchestrator,
    }
    reset_rate_limits()
    yield TestClient(app)
    app.dependency_overrides = {}
    reset_rate_limits()
