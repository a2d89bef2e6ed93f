"""Tests for health, version, metrics and reading-permission routes."""

from memory.store import ANONYMOUS_PERMISSIONS, DEFAULT_PERMISSIONS


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_version(client):
    data = client.get("/api/version").json()
    assert data["version"] == "3.1.0"
    assert "sse-streaming" in data["features"]


def test_metrics(client):
    data = client.get("/api/metrics").json()
    assert "counters" in data


class TestReadingPermissions:
    def test_anonymous(self, client):
        res = client.get("/api/user/reading-permissions/anonymous")
        assert res.json() == ANONYMOUS_PERMISSIONS

    def test_unknown_user_gets_defaults(self, client):
        res = client.get("/api/user/reading-permissions/u404")
        assert res.json() == DEFAULT_PERMISSIONS

    def test_stored_permissions(self, client, reading_store):
        reading_store.set_reading_permissions("u1", can_see_future=True, plan_name="Luna")
        data = client.get("/api/user/reading-permissions/u1").json()
        assert data["can_see_future"] is True
        assert data["plan_name"] == "Luna"
