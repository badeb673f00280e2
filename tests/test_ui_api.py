from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.ui_api import app as app_module

BOB_HAND = [
    {"color": "red", "number": 1},
    {"color": "red", "number": 5},
    {"color": "blue", "number": 2},
    {"color": "green", "number": 3},
    {"color": "white", "number": 4},
]


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setenv("TRACKER_DATA_DIR", str(tmp_path / "tracker"))
    app_module._sessions.clear()
    return TestClient(app_module.app)


def create_game(client: TestClient, **overrides) -> dict:
    body = {"player_names": ["Alice", "Bob"], "my_player_index": 0, **overrides}
    resp = client.post("/games", json=body)
    assert resp.status_code == 200
    return resp.json()


def started_game(client: TestClient) -> str:
    game_id = create_game(client)["game_id"]
    resp = client.post(f"/games/{game_id}/hands", json={"hands": {"player-1": BOB_HAND}})
    assert resp.status_code == 200
    return game_id


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_create_game(client: TestClient) -> None:
    data = create_game(client)

    assert data["phase"] == "setup"
    assert data["score"] == 0
    assert not data["can_undo"]
    assert data["state"]["deck_count"] == 40
    assert len(data["state"]["players"][0]["hand"]["cards"]) == 5


def test_create_game_rejects_bad_setup(client: TestClient) -> None:
    resp = client.post("/games", json={"player_names": ["Alice", "Bob"], "my_player_index": 4})
    assert resp.status_code == 400
    resp = client.post("/games", json={"player_names": ["Alice"]})
    assert resp.status_code == 422


def test_unknown_game_is_404(client: TestClient) -> None:
    assert client.get("/games/game-nope").status_code == 404
    resp = client.post("/games/game-nope/clue", json={
        "receiver_id": "player-0", "positions": [0], "clue_type": "color", "clue_value": "red",
    })
    assert resp.status_code == 404


def test_incomplete_hands_rejected(client: TestClient) -> None:
    game_id = create_game(client)["game_id"]
    resp = client.post(f"/games/{game_id}/hands", json={"hands": {"player-1": BOB_HAND[:2]}})
    assert resp.status_code == 400


def test_clue_spends_tokens_until_exhausted(client: TestClient) -> None:
    game_id = started_game(client)
    clue = {"receiver_id": "player-1", "positions": [0, 1], "clue_type": "color", "clue_value": "red"}

    for expected in range(7, -1, -1):
        resp = client.post(f"/games/{game_id}/clue", json=clue)
        assert resp.status_code == 200
        assert resp.json()["state"]["hint_tokens"] == expected

    resp = client.post(f"/games/{game_id}/clue", json=clue)
    assert resp.status_code == 409
    assert client.get(f"/games/{game_id}").json()["state"]["hint_tokens"] == 0


def test_play_and_undo(client: TestClient) -> None:
    game_id = started_game(client)

    resp = client.post(f"/games/{game_id}/play", json={"player_id": "player-1", "position": 0})
    data = resp.json()
    assert data["score"] == 1
    assert data["can_undo"]
    assert data["state"]["pending_card_input"] == {"player_id": "player-1", "position": 4}

    resp = client.post(f"/games/{game_id}/draw", json={"color": "yellow", "number": 3})
    assert resp.json()["state"]["pending_card_input"] is None

    # draw, play, then card input
    for _ in range(3):
        resp = client.post(f"/games/{game_id}/undo")
    data = resp.json()
    assert data["score"] == 0
    assert not data["can_undo"]

    assert client.post(f"/games/{game_id}/undo").status_code == 409


def test_own_play_requires_reveal(client: TestClient) -> None:
    game_id = started_game(client)

    resp = client.post(f"/games/{game_id}/play", json={"player_id": "player-0", "position": 0})
    assert resp.status_code == 400

    resp = client.post(f"/games/{game_id}/play", json={
        "player_id": "player-0", "position": 0, "revealed_color": "red", "revealed_number": 1,
    })
    assert resp.status_code == 200
    assert resp.json()["state"]["fireworks"]["red"] == 1


def test_settings_change_is_not_undoable(client: TestClient) -> None:
    game_id = started_game(client)
    client.post(f"/games/{game_id}/undo")

    resp = client.patch(f"/games/{game_id}/settings", json={"show_safe_to_play": True})
    data = resp.json()
    assert data["state"]["settings"]["show_safe_to_play"]
    assert not data["can_undo"]


def test_deductions_endpoints(client: TestClient) -> None:
    game_id = started_game(client)
    client.post(f"/games/{game_id}/clue", json={
        "receiver_id": "player-0", "positions": [2], "clue_type": "number", "clue_value": 5,
    })

    resp = client.post(f"/games/{game_id}/deductions/auto")
    card = resp.json()["state"]["players"][0]["hand"]["cards"][2]
    assert card["manual_exclusions"]["colors"] == ["red"]

    resp = client.post(f"/games/{game_id}/deductions/toggle", json={
        "position": 2, "exclusion_type": "color", "value": "blue",
    })
    card = resp.json()["state"]["players"][0]["hand"]["cards"][2]
    assert card["manual_exclusions"]["colors"] == ["red", "blue"]

    resp = client.delete(f"/games/{game_id}/deductions")
    card = resp.json()["state"]["players"][0]["hand"]["cards"][2]
    assert card["manual_exclusions"]["colors"] == []


def test_player_view(client: TestClient) -> None:
    game_id = started_game(client)

    view = client.get(f"/games/{game_id}/players/player-1/view").json()
    assert view["visible_hands"] == {}
    assert len(view["hand_knowledge"]) == 5

    assert client.get(f"/games/{game_id}/players/player-7/view").status_code == 404


def test_game_reloads_from_storage(client: TestClient) -> None:
    game_id = started_game(client)
    app_module._sessions.clear()

    data = client.get(f"/games/{game_id}").json()
    assert data["phase"] == "active"

    saved = client.get("/saved").json()
    assert [g["game_id"] for g in saved] == [game_id]


def test_failed_save_leaves_session_unchanged(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    game_id = started_game(client)
    session = app_module._sessions[game_id]
    before = session.state

    def broken_save(state):
        raise OSError("disk full")

    monkeypatch.setattr(app_module, "save_game", broken_save)
    failing = TestClient(app_module.app, raise_server_exceptions=False)
    resp = failing.post(f"/games/{game_id}/clue", json={
        "receiver_id": "player-1", "positions": [0], "clue_type": "number", "clue_value": 1,
    })

    assert resp.status_code == 500
    assert session.state is before
    assert len(session.history) == 1

    resp = failing.post(f"/games/{game_id}/undo")
    assert resp.status_code == 500
    assert session.state is before
    assert len(session.history) == 1


def test_actions_wait_for_drawn_card(client: TestClient) -> None:
    game_id = started_game(client)
    client.post(f"/games/{game_id}/play", json={"player_id": "player-1", "position": 0})

    resp = client.post(f"/games/{game_id}/discard", json={"player_id": "player-1", "position": 0})
    assert resp.status_code == 400
    assert client.get(f"/games/{game_id}").json()["state"]["hint_tokens"] == 8
