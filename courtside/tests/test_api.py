"""
HTTP tests for the live scoring API, against an isolated SQLite file per test.
"""
from __future__ import annotations

import json
import sqlite3
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside import api
from courtside.persistence import MatchRepository, get_connection, init_db
from courtside.readiness import BackendReadiness, readiness


ROSTER = {
    "players": [
        {"name": "Ana Ruiz", "rating": 1510, "country": "ESP"},
        {"name": "Ben Cole", "rating": 1650, "country": "USA"},
    ]
}


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    roster = tmp_path / "roster.json"
    roster.write_text(json.dumps(ROSTER))
    path = tmp_path / "api.db"
    monkeypatch.setattr("courtside.persistence.db._db_path", path)
    init_db(path, roster)
    readiness.reset()
    return path


@pytest.fixture
def client(db_path):
    with TestClient(api.app) as c:
        yield c
    api._shutdown_sessions()


def _start(client, match_id=None):
    body = {"player1_id": "ana_ruiz", "player2_id": "ben_cole"}
    if match_id:
        body["match_id"] = match_id
    r = client.post("/matches", json=body)
    assert r.status_code == 200, r.text
    return r.json()


def _point(client, match_id, slot, kind="normal"):
    return client.post(f"/matches/{match_id}/points", json={"slot": slot, "point_kind": kind})


def _win_set(client, match_id, slot):
    for _ in range(24):
        assert _point(client, match_id, slot).status_code == 200


# ---- Health and players ----
def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ready": True, "live_matches": 0}


def test_health_reports_unready_backend(client, monkeypatch):
    def broken(conn):
        raise sqlite3.OperationalError("no such table: players")

    monkeypatch.setattr(api, "readiness", BackendReadiness(check=broken))
    r = client.get("/health")
    assert r.status_code == 503
    assert "no such table" in r.json()["detail"]


def test_players(client):
    r = client.get("/players")
    assert [p["id"] for p in r.json()["players"]] == ["ben_cole", "ana_ruiz"]
    r = client.get("/players/ana_ruiz")
    assert r.json()["display_name"] == "Ana Ruiz"
    assert client.get("/players/nobody").status_code == 404


# ---- Starting ----
def test_start_match(client, db_path):
    data = _start(client)
    mid = data["match_id"]
    assert data["players"]["a"] == {"id": "ana_ruiz", "display_name": "Ana Ruiz", "rating": 1510}
    assert data["players"]["b"]["display_name"] == "Ben Cole"
    assert data["can_undo"] is False
    assert data["scoreboard"]["sides"]["a"]["points"] == "0"
    assert data["state"]["serving"] == "a"

    conn = get_connection(db_path)
    assert MatchRepository().get(conn, mid).status == "in_progress"
    conn.close()
    assert client.get("/health").json()["live_matches"] == 1
    assert [m["id"] for m in client.get("/matches?status=in_progress").json()["matches"]] == [mid]


def test_start_scheduled_match(client, db_path):
    conn = get_connection(db_path)
    MatchRepository().create(conn, "ana_ruiz", "ben_cole", id="final")
    conn.close()
    assert _start(client, "final")["match_id"] == "final"


def test_start_rejects_same_player(client):
    r = client.post("/matches", json={"player1_id": "ana_ruiz", "player2_id": "ana_ruiz"})
    assert r.status_code == 400


def test_start_rejects_duplicate_live_session(client):
    _start(client, "m1")
    r = client.post("/matches", json={"player1_id": "ana_ruiz", "player2_id": "ben_cole", "match_id": "m1"})
    assert r.status_code == 409


def test_start_rejects_player_mismatch(client, db_path):
    conn = get_connection(db_path)
    MatchRepository().create(conn, "ben_cole", "ana_ruiz", id="m1")
    conn.close()
    r = client.post("/matches", json={"player1_id": "ana_ruiz", "player2_id": "ben_cole", "match_id": "m1"})
    assert r.status_code == 400


# ---- Scoring ----
def test_award_point(client):
    mid = _start(client)["match_id"]
    r = _point(client, mid, "a", "ace")
    assert r.status_code == 200
    data = r.json()
    assert data["events"] == ["point"]
    assert data["scoreboard"]["sides"]["a"]["points"] == "15"
    assert data["can_undo"] is True


def test_game_events(client):
    mid = _start(client)["match_id"]
    for _ in range(3):
        _point(client, mid, "b")
    data = _point(client, mid, "b").json()
    assert data["events"] == ["game-won", "point"]
    assert data["state"]["games_b"] == 1
    assert data["state"]["serving"] == "b"


@pytest.mark.parametrize("body", [
    {"slot": "c"},
    {"slot": "a", "point_kind": "let"},
])
def test_award_point_rejects_bad_input(client, body):
    mid = _start(client)["match_id"]
    r = client.post(f"/matches/{mid}/points", json=body)
    assert r.status_code == 400
    assert client.get(f"/matches/{mid}").json()["state"]["points_a"] == 0


def test_unknown_match(client):
    assert _point(client, "missing", "a").status_code == 404
    assert client.post("/matches/missing/undo").status_code == 404
    assert client.get("/matches/missing").status_code == 404
    assert client.get("/matches/missing/events").status_code == 404


def test_undo(client):
    mid = _start(client)["match_id"]
    _point(client, mid, "a")
    data = client.post(f"/matches/{mid}/undo").json()
    assert data["undone"] is True
    assert data["state"]["points_a"] == 0
    data = client.post(f"/matches/{mid}/undo").json()
    assert data["undone"] is False


# ---- Finishing ----
def test_finalize_without_sets(client):
    mid = _start(client)["match_id"]
    r = client.post(f"/matches/{mid}/finalize")
    assert r.status_code == 400
    assert client.get(f"/matches/{mid}").json()["match_id"] == mid


def test_finalize(client):
    mid = _start(client)["match_id"]
    _win_set(client, mid, "a")
    r = client.post(f"/matches/{mid}/finalize")
    assert r.status_code == 200
    data = r.json()
    assert data["winner_slot"] == "a"
    assert data["winner_id"] == "ana_ruiz"
    assert data["score"] == "6 vs 0"
    assert data["sets_won"] == [1, 0]

    stored = client.get(f"/matches/{mid}").json()
    assert stored["live"] is False
    assert stored["match"]["status"] == "completed"
    assert stored["match"]["winner_id"] == "ana_ruiz"
    assert stored["match"]["score"] == "6 vs 0"

    assert _point(client, mid, "a").status_code == 404
    r = client.post("/matches", json={"player1_id": "ana_ruiz", "player2_id": "ben_cole", "match_id": mid})
    assert r.status_code == 409


def test_event_timeline(client):
    mid = _start(client)["match_id"]
    for _ in range(4):
        _point(client, mid, "a")
    events = client.get(f"/matches/{mid}/events").json()["events"]
    kinds = [e["kind"] for e in events]
    assert kinds == ["match-start", "point", "point", "point", "game-won", "point"]
    assert events[0]["description"] == "Match has begun"
    assert events[4]["snapshot"]["games_a"] == 1
    assert all(e["player_id"] == "ana_ruiz" for e in events)

    _win_set(client, mid, "a")
    client.post(f"/matches/{mid}/finalize")
    events = client.get(f"/matches/{mid}/events").json()["events"]
    assert events[-1]["kind"] == "match-end"
    assert events[-1]["metadata"]["winner_slot"] == "a"


def test_close_session(client):
    mid = _start(client)["match_id"]
    r = client.delete(f"/matches/{mid}")
    assert r.json() == {"match_id": mid, "closed": True}
    assert _point(client, mid, "a").status_code == 404
    assert client.get(f"/matches/{mid}").json()["live"] is False


def test_close_returns_match_to_scheduled(client, db_path):
    mid = _start(client, "m1")["match_id"]
    _point(client, mid, "a")
    client.delete(f"/matches/{mid}")
    stored = client.get(f"/matches/{mid}").json()["match"]
    assert stored["status"] == "scheduled"
    assert stored["started_at"] is None
    assert [m["id"] for m in client.get("/matches?status=in_progress").json()["matches"]] == []

    data = _start(client, "m1")
    assert data["state"]["points_a"] == 0
    kinds = [e["kind"] for e in client.get(f"/matches/{mid}/events").json()["events"]]
    assert kinds == ["match-start", "point", "match-start"]
