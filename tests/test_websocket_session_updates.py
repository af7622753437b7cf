from __future__ import annotations

import pytest
from fastapi import WebSocketDisconnect, status


def test_ws_sends_snapshot_then_updates(client_and_redis) -> None:
    client, _ = client_and_redis
    session = client.post("/sessions", json={"player_id": "kid-ws"}).json()
    sid = session["session_id"]

    with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
        first = ws.receive_json()
        assert first["type"] == "snapshot"
        assert first["session_id"] == sid
        assert first["snapshot"]["queue"] == []

        res = client.post(f"/sessions/{sid}/commands", json={"command": "right"})
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg["type"] == "queue_changed"
        assert msg["session_id"] == sid
        assert msg["event"] == {"length": 1}
        assert msg["snapshot"]["queue"] == ["right"]


def test_ws_streams_a_run(client_and_redis) -> None:
    client, _ = client_and_redis
    sid = client.post("/sessions", json={"player_id": "kid-ws"}).json()["session_id"]
    for _ in range(3):
        client.post(f"/sessions/{sid}/commands", json={"command": "right"})

    with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
        assert ws.receive_json()["type"] == "snapshot"
        client.post(f"/sessions/{sid}/run")

        types: list[str] = []
        while not types or types[-1] not in ("run_won", "run_failed"):
            types.append(ws.receive_json()["type"])

    assert types[0] == "run_started"
    assert types.count("run_stepped") == 3
    assert types[-1] == "run_won"


def test_ws_for_unknown_session_is_closed(client_and_redis) -> None:
    client, _ = client_and_redis

    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws/sessions/does-not-exist") as ws:
            ws.receive_json()

    assert exc.value.code == status.WS_1008_POLICY_VIOLATION
