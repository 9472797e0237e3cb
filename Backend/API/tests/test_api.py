import hashlib

import pytest

from services.paytable import build_table, bucket_probabilities


def play(client, **body):
    commit = client.post("/api/rounds/commit").json()
    payload = {"client_seed": "api-player", "rows": 12, "risk": "medium", "drop_column": 6, "bet_amount": "2"}
    payload.update(body)
    started = client.post(f"/api/rounds/{commit['round_id']}/start", json=payload)
    return commit, started


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_commit(client):
    r = client.post("/api/rounds/commit", json={"nonce": 5})
    assert r.status_code == 200
    data = r.json()
    assert data["nonce"] == 5
    assert data["state"] == "committed"
    assert len(data["server_seed_hash"]) == 64
    assert "server_seed" not in data


def test_commit_reveal_verify(client):
    commit, started = play(client)
    assert started.status_code == 200
    out = started.json()
    assert len(out["path"]) == 12
    assert out["bucket"] == out["path"].count("R")
    assert out["multiplier"] == build_table(12, "medium")[out["bucket"]]
    assert out["algorithm"] == "hmac-sha256-v1"

    revealed = client.post(f"/api/rounds/{commit['round_id']}/reveal").json()
    assert hashlib.sha256(bytes.fromhex(revealed["server_seed"])).hexdigest() == commit["server_seed_hash"]

    v = client.get("/api/verify", params={
        "server_seed": revealed["server_seed"],
        "client_seed": "api-player",
        "nonce": commit["nonce"],
        "rows": 12,
        "risk": "medium",
        "drop_column": 6,
        "bet_amount": "2",
        "server_seed_hash": commit["server_seed_hash"],
    }).json()
    assert v["hash_matches"] is True
    assert v["path"] == out["path"]
    assert v["bucket"] == out["bucket"]
    assert v["multiplier"] == out["multiplier"]
    assert v["payout"] == out["payout"]
    assert len(v["rng_values"]) == 12


def test_round_status_hides_seed_until_revealed(client):
    commit, _ = play(client)
    rid = commit["round_id"]
    status = client.get(f"/api/rounds/{rid}").json()
    assert status["state"] == "started"
    assert "server_seed" not in status
    client.post(f"/api/rounds/{rid}/reveal")
    status = client.get(f"/api/rounds/{rid}").json()
    assert status["state"] == "revealed"
    assert len(status["server_seed"]) == 64


def test_retried_start_returns_same_outcome(client):
    commit, first = play(client)
    again = client.post(f"/api/rounds/{commit['round_id']}/start", json={
        "client_seed": "api-player", "rows": 12, "risk": "medium", "drop_column": 6, "bet_amount": "2",
    })
    assert again.status_code == 200
    assert again.json() == first.json()


def test_reveal_before_start(client):
    commit = client.post("/api/rounds/commit").json()
    r = client.post(f"/api/rounds/{commit['round_id']}/reveal")
    assert r.status_code == 409
    assert r.json()["kind"] == "InvalidRoundState"


def test_unknown_round(client):
    r = client.post("/api/rounds/missing/reveal")
    assert r.status_code == 404
    assert r.json()["kind"] == "NotFound"


@pytest.mark.parametrize("body", [
    {"rows": 40},
    {"risk": "mega"},
    {"drop_column": 99},
    {"bet_amount": "-1"},
    {"client_seed": ""},
])
def test_start_rejects_bad_parameters(client, body):
    commit, r = play(client, **body)
    assert r.status_code == 400
    assert r.json()["kind"] == "InvalidParameter"
    status = client.get(f"/api/rounds/{commit['round_id']}").json()
    assert status["state"] == "committed"


def test_verify_empty_bet_amount(client):
    r = client.get("/api/verify", params={
        "server_seed": "ab" * 32, "client_seed": "demo-client", "nonce": 0,
        "rows": 16, "risk": "medium", "bet_amount": "",
    })
    assert r.status_code == 200
    assert r.json()["payout"] is None
    assert r.json()["hash_matches"] is None


def test_verify_rejects_bad_seed(client):
    r = client.get("/api/verify", params={"server_seed": "not-hex", "client_seed": "c"})
    assert r.status_code == 400
    assert r.json()["kind"] == "InvalidParameter"


def test_multiplier_table_matches_engine(client):
    data = client.get("/api/multipliers", params={"rows": 14, "risk": "high"}).json()
    assert data["multipliers"] == list(build_table(14, "high"))
    assert data["probabilities"] == list(bucket_probabilities(14))
    assert data["risk"] == "high"


def test_multiplier_table_bad_rows(client):
    r = client.get("/api/multipliers", params={"rows": 2})
    assert r.status_code == 400


def test_playback_streams_stored_path(client):
    commit, started = play(client)
    path = started.json()["path"]
    with client.websocket_connect(f"/ws/rounds/{commit['round_id']}?reduced_motion=true") as ws:
        frames = [ws.receive_json() for _ in path]
        final = ws.receive_json()
    assert [f["direction"] for f in frames] == path
    assert frames[-1]["position"] == started.json()["bucket"]
    assert final == {"done": True, "bucket": started.json()["bucket"], "multiplier": started.json()["multiplier"]}


def test_playback_needs_outcome(client):
    commit = client.post("/api/rounds/commit").json()
    with client.websocket_connect(f"/ws/rounds/{commit['round_id']}") as ws:
        msg = ws.receive_json()
    assert msg["kind"] == "InvalidRoundState"


def test_start_accepts_largest_schema_bet(client):
    bet = "9" * 30 + ".12345678"
    commit, started = play(client, bet_amount=bet)
    assert started.status_code == 200
    status = client.get(f"/api/rounds/{commit['round_id']}").json()
    assert status["state"] == "started"
    assert status["bet_amount"] == bet
    assert status["payout"] == started.json()["payout"]
