"""Tests for the Flask JSON API."""

import pytest

from rpsls_arena.web import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def create_session(client, **body):
    resp = client.post("/api/session", json=body)
    assert resp.status_code == 201
    return resp.get_json()["id"]


def test_catalogue(client):
    assert set(client.get("/api/difficulties").get_json()) == {"easy", "normal", "hard", "expert"}
    assert client.get("/api/predictors").get_json() == ["sequence", "frequency"]


def test_create_session_defaults(client):
    resp = client.post("/api/session", json={"seed": 1})
    data = resp.get_json()
    assert data["state"]["phase"] == "awaiting_move"
    assert data["state"]["player_score"] == 0
    assert data["config"]["order"] == 2
    assert data["history"] == []


def test_play_until_exhausted_then_reset(client):
    sid = create_session(client, maxTries=2, seed=3)
    for move in ("rock", "paper"):
        resp = client.post(f"/api/session/{sid}/move", json={"move": move})
        assert resp.status_code == 200
    data = resp.get_json()
    assert data["tries_remaining"] == 0
    assert data["phase"] == "exhausted"

    resp = client.post(f"/api/session/{sid}/move", json={"move": "rock"})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "no_tries_remaining"

    resp = client.post(f"/api/session/{sid}/reset", json={})
    data = resp.get_json()
    assert data["state"]["player_score"] == 0
    assert data["state"]["opponent_score"] == 0
    assert data["state"]["tries_remaining"] == 2
    assert client.post(f"/api/session/{sid}/move", json={"move": "spock"}).status_code == 200


def test_invalid_move(client):
    sid = create_session(client)
    resp = client.post(f"/api/session/{sid}/move", json={"move": "dynamite"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_move"
    assert client.get(f"/api/session/{sid}/history").get_json() == {"history": []}


def test_bad_config(client):
    resp = client.post("/api/session", json={"order": 9})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "configuration"


def test_unknown_session(client):
    resp = client.post("/api/session/nope/move", json={"move": "rock"})
    assert resp.status_code == 404
    assert client.get("/api/session/nope").status_code == 404


def test_history_and_hint(client):
    sid = create_session(client, order=1, weight=1.0, seed=0)
    for _ in range(3):
        resp = client.post(f"/api/session/{sid}/move", json={"move": "rock"})
    data = resp.get_json()
    assert data["predicted"]["predicted_move"] == "rock"
    assert data["hint"] == 'AI predicts you might choose "rock" (confidence 100%).'
    assert data["opponent_move"] in ("paper", "spock")
    history = client.get(f"/api/session/{sid}/history").get_json()["history"]
    assert history == ["rock", "rock", "rock"]


def test_reset_with_difficulty(client):
    sid = create_session(client)
    data = client.post(f"/api/session/{sid}/reset", json={"difficulty": "easy"}).get_json()
    assert data["config"]["enabled"] is False
    assert data["config"]["difficulty"] == "easy"


def test_export(client):
    sid = create_session(client, seed=2)
    for move in ("rock", "paper", "scissors"):
        client.post(f"/api/session/{sid}/move", json={"move": move})
    data = client.get(f"/api/session/{sid}/export?limit=2").get_json()
    assert [r["player_move"] for r in data["rounds"]] == ["scissors", "paper"]
    assert data["summary"]["rounds"] == 3


def test_delete_session(client):
    sid = create_session(client)
    assert client.delete(f"/api/session/{sid}").status_code == 204
    assert client.get(f"/api/session/{sid}").status_code == 404


def test_export_rejects_negative_limit(client):
    sid = create_session(client, seed=2)
    for move in ("rock", "paper", "scissors"):
        client.post(f"/api/session/{sid}/move", json={"move": move})
    resp = client.get(f"/api/session/{sid}/export?limit=-1")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "configuration"
    assert len(client.get(f"/api/session/{sid}/export?limit=0").get_json()["rounds"]) == 0


# ── Malformed bodies ───────────────────────────────────────


def test_create_session_rejects_non_object_body(client):
    resp = client.post("/api/session", json=[1, 2])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "configuration"


@pytest.mark.parametrize("seed", [[1, 2], "abc", 1.5, True])
def test_create_session_rejects_bad_seed(client, seed):
    resp = client.post("/api/session", json={"seed": seed})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "configuration"


def test_non_object_move_body_keeps_session_usable(client):
    sid = create_session(client, seed=5)
    resp = client.post(f"/api/session/{sid}/move", json=["rock"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_move"
    assert client.post(f"/api/session/{sid}/move", json={"move": "rock"}).status_code == 200
    assert client.get(f"/api/session/{sid}/history").get_json() == {"history": ["rock"]}


def test_reset_rejects_bad_body_and_seed(client):
    sid = create_session(client, maxTries=3)
    client.post(f"/api/session/{sid}/move", json={"move": "lizard"})
    assert client.post(f"/api/session/{sid}/reset", json=["easy"]).status_code == 400
    assert client.post(f"/api/session/{sid}/reset", json={"seed": {"a": 1}}).status_code == 400
    state = client.get(f"/api/session/{sid}").get_json()["state"]
    assert state["tries_remaining"] == 2
    assert state["rounds_played"] == 1


# ── Session store ──────────────────────────────────────────


def test_least_recently_used_session_is_evicted(client, monkeypatch):
    monkeypatch.setitem(app.config, "MAX_SESSIONS", 2)
    first = create_session(client)
    second = create_session(client)
    assert client.get(f"/api/session/{first}").status_code == 200
    third = create_session(client)
    assert client.get(f"/api/session/{second}").status_code == 404
    assert client.get(f"/api/session/{first}").status_code == 200
    assert client.get(f"/api/session/{third}").status_code == 200
