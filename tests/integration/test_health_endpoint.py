"""Integration tests for the health endpoint."""

from __future__ import annotations

from sqlalchemy.exc import OperationalError

from freezer.db import repository


def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["service"] == "freezer-inventory"
    assert body["env"] == "dev"
    assert body["db"]["ok"] is True
    assert body["db"]["url"].startswith("sqlite:///")
    assert body["db"]["error"] is None
    assert isinstance(body["latency_ms"], int)


def test_health_reports_database_failure(client, monkeypatch):
    def _broken() -> None:
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(repository, "ping", _broken)

    body = client.get("/health").json()

    assert body["ok"] is False
    assert body["db"]["ok"] is False
    assert "database is locked" in body["db"]["error"]
