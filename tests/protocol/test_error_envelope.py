from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from chessrules.config import Settings
from chessrules.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app(Settings()))


def _create(client: TestClient, fen: str) -> str:
    return client.post("/api/positions", json={"fen": fen}).json()["position_id"]


def test_error_envelope_for_http_exception() -> None:
    app: FastAPI = create_app(Settings())

    @app.get("/boom")
    def boom():  # type: ignore[no-redef]
        raise HTTPException(status_code=400, detail="oops")

    client = TestClient(app)
    r = client.get("/boom", headers={"x-request-id": "req-1"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "oops"
    assert err["type"] == "client_error"
    assert err["request_id"] == "req-1"


def test_unhandled_exception_is_internal_error() -> None:
    app: FastAPI = create_app(Settings())

    @app.get("/crash")
    def crash():  # type: ignore[no-redef]
        raise RuntimeError("kaboom")

    client = TestClient(app, raise_server_exceptions=False)
    r = client.get("/crash")
    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "internal_error"
    assert err["type"] == "server_error"
    assert "kaboom" not in err["message"]


@pytest.mark.parametrize(
    ("fen", "code"),
    [
        ("not a fen", "invalid_fen"),
        ("8/8/8/8/8/8/8/8/8 w - - 0 1", "invalid_fen"),
        ("8/8/8/8/8/8/8/4K3 w - - 0 1", "missing_king"),
        ("4k3/8/8/8/8/8/8/3KK3 w - - 0 1", "invalid_position"),
    ],
)
def test_bad_positions_map_to_codes(fen: str, code: str) -> None:
    client = _client()
    r = client.post("/api/positions", json={"fen": fen})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == code
    assert err["type"] == "client_error"
    assert err["message"]
    assert err["request_id"]


@pytest.mark.parametrize(
    ("move", "code"),
    [
        ("e2e4", "invalid_notation"),
        ("e2-e9", "invalid_notation"),
        ("e2-e5", "illegal_move"),
        ("e3-e4", "illegal_move"),
        ("Qd1-h5", "illegal_move"),
    ],
)
def test_bad_moves_map_to_codes(move: str, code: str) -> None:
    client = _client()
    pid = client.post("/api/positions").json()["position_id"]
    r = client.post(f"/api/positions/{pid}/move", json={"move": move})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == code
    state = client.get(f"/api/positions/{pid}/state").json()
    assert state["move_history"] == []


def test_undo_on_fresh_position() -> None:
    client = _client()
    pid = client.post("/api/positions").json()["position_id"]
    r = client.post(f"/api/positions/{pid}/undo")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "empty_history"


def test_bad_square_in_attack_query() -> None:
    client = _client()
    pid = client.post("/api/positions").json()["position_id"]
    r = client.get(f"/api/positions/{pid}/attacks/z9")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "invalid_notation"


def test_validation_errors_use_envelope() -> None:
    client = _client()
    pid = client.post("/api/positions").json()["position_id"]
    r = client.post(f"/api/positions/{pid}/move", json={})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert any(fe["field"].endswith("move") for fe in err["field_errors"])

    r = client.get(f"/api/positions/{pid}/attacks/e4", params={"color": "green"})
    assert r.status_code == 422
