from __future__ import annotations

import logging

from fastapi.testclient import TestClient

from chessrules.config import Settings
from chessrules.protocol.http.app import create_app


def test_healthz_ok() -> None:
    client = TestClient(create_app(Settings()))
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("x-request-id")


def test_incoming_request_id_is_echoed() -> None:
    client = TestClient(create_app(Settings()))
    r = client.get("/healthz", headers={"x-request-id": "trace-123"})
    assert r.headers["x-request-id"] == "trace-123"


def test_session_requests_are_logged_with_position_id(caplog) -> None:
    client = TestClient(create_app(Settings()))
    pid = client.post("/api/positions").json()["position_id"]
    with caplog.at_level(logging.INFO, logger="chessrules.protocol.http.app"):
        r = client.post(
            f"/api/positions/{pid}/move",
            json={"move": "e2-e4"},
            headers={"x-request-id": "trace-456"},
        )
    assert r.status_code == 200
    records = [rec for rec in caplog.records if getattr(rec, "request_id", None) == "trace-456"]
    assert [rec.getMessage() for rec in records] == ["request", "response"]
    assert all(rec.position_id == pid for rec in records)
    assert records[1].status_code == 200
