"""Tests for the game API."""

import pytest
from fastapi.testclient import TestClient

from web.api import app
from web.api.session_manager import PlayerConfig, PlayerType, session_manager
from strategies.driver import Difficulty


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def game(client):
    response = client.post(
        "/api/games",
        json={
            "players": [{"player_type": "human"}, {"player_type": "bot", "difficulty": "random"}],
            "seed": 17,
        },
    )
    assert response.status_code == 200
    return response.json()


def first_placement(moves):
    return next(m for m in moves if m["name"] == "placeWorker" and m["args"] == ["mine"])


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestCreateGame:
    def test_create(self, game):
        state = game["state"]
        assert state["round"] == 1
        assert state["phase"] == "WORK"
        assert len(state["players"]) == 2
        # Seat 0 sees its own hand only
        assert state["players"][0]["hand"][0]["def_id"] != "HIDDEN"
        assert all(c["def_id"] == "HIDDEN" for c in state["players"][1]["hand"])
        assert game["waiting_for"] == [0]
        assert game["legal_moves"]

    def test_bot_acts_first(self, client):
        # The seed decides the start player; find one where the bot starts
        for seed in range(40):
            response = client.post(
                "/api/games",
                json={"players": [{"player_type": "human"}, {"player_type": "bot"}], "seed": seed},
            )
            data = response.json()
            if data["state"]["start_player"] == 1:
                assert data["state"]["version"] > 0
                assert data["waiting_for"] == [0]
                return
        pytest.fail("no seed with the bot starting")

    def test_all_bots_play_to_the_end(self, client):
        response = client.post(
            "/api/games",
            json={"players": [{"player_type": "bot", "difficulty": "random"}] * 3, "seed": 2},
        )
        data = response.json()
        assert data["state"]["phase"] == "GAME_END"
        assert len(data["state"]["final_scores"]) == 3
        assert data["legal_moves"] == []

    def test_glory(self, client):
        response = client.post(
            "/api/games", json={"players": [{}, {}], "edition": "glory", "seed": 1}
        )
        assert response.json()["state"]["edition"] == "GLORY"

    def test_bad_edition(self, client):
        response = client.post("/api/games", json={"players": [{}, {}], "edition": "deluxe"})
        assert response.status_code == 400

    def test_bad_difficulty(self, client):
        response = client.post(
            "/api/games", json={"players": [{}, {"player_type": "bot", "difficulty": "expert"}]}
        )
        assert response.status_code == 400

    def test_seat_count(self, client):
        assert client.post("/api/games", json={"players": [{}]}).status_code == 422
        assert client.post("/api/games", json={"players": [{}] * 5}).status_code == 422


class TestGetGame:
    def test_get(self, client, game):
        data = client.get(f"/api/games/{game['game_id']}", params={"viewer": 0}).json()
        assert data["game_id"] == game["game_id"]
        assert data["state"]["version"] == game["state"]["version"]
        assert "move_history" in data

    def test_spectator(self, client, game):
        data = client.get(f"/api/games/{game['game_id']}").json()
        assert all(c["def_id"] == "HIDDEN" for p in data["state"]["players"] for c in p["hand"])
        assert data["legal_moves"] == []

    def test_unknown_game(self, client):
        assert client.get("/api/games/nope").status_code == 404

    def test_bad_viewer(self, client, game):
        assert client.get(f"/api/games/{game['game_id']}", params={"viewer": 5}).status_code == 400

    def test_listed(self, client, game):
        ids = [s["id"] for s in client.get("/api/games").json()]
        assert game["game_id"] in ids


class TestMoves:
    def test_legal_moves(self, client, game):
        data = client.get(f"/api/games/{game['game_id']}/moves", params={"player": 0}).json()
        assert data["moves"] == game["legal_moves"]
        assert data["moves"][0]["index"] == 0

    def test_not_acting_has_no_moves(self, client, game):
        data = client.get(f"/api/games/{game['game_id']}/moves", params={"player": 1}).json()
        assert data["moves"] == []

    def test_make_move_and_bot_answers(self, client, game):
        move = first_placement(game["legal_moves"])
        response = client.post(
            f"/api/games/{game['game_id']}/move",
            json={"player": 0, "name": move["name"], "args": move["args"]},
        )
        data = response.json()
        assert data["accepted"] is True
        # The bot placed right after
        assert data["state"]["version"] >= game["state"]["version"] + 2
        history = client.get(f"/api/games/{game['game_id']}").json()["move_history"]
        ours = next(i for i, h in enumerate(history) if h["version"] == game["state"]["version"] + 1)
        assert history[ours]["player"] == 0
        assert history[ours]["move"] == {"name": "placeWorker", "args": ["mine"], "description": move["description"]}
        assert history[ours + 1]["player"] == 1

    def test_illegal_move_rejected(self, client, game):
        response = client.post(
            f"/api/games/{game['game_id']}/move",
            json={"player": 0, "name": "confirmPaydaySell"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is False
        assert data["state"]["version"] == game["state"]["version"]

    def test_out_of_turn_rejected(self, client):
        created = client.post("/api/games", json={"players": [{}, {}], "seed": 4}).json()
        waiting = created["waiting_for"][0]
        response = client.post(
            f"/api/games/{created['game_id']}/move",
            json={"player": 1 - waiting, "name": "placeWorker", "args": ["mine"]},
        )
        assert response.json()["accepted"] is False

    def test_bot_seat_cannot_be_driven(self, client, game):
        response = client.post(
            f"/api/games/{game['game_id']}/move",
            json={"player": 1, "name": "placeWorker", "args": ["mine"]},
        )
        assert response.status_code == 400
        state = client.get(f"/api/games/{game['game_id']}").json()["state"]
        assert state["version"] == game["state"]["version"]

    def test_unknown_move_name(self, client, game):
        response = client.post(
            f"/api/games/{game['game_id']}/move", json={"player": 0, "name": "drawCard"}
        )
        assert response.status_code == 400

    def test_bad_arguments(self, client, game):
        response = client.post(
            f"/api/games/{game['game_id']}/move",
            json={"player": 0, "name": "placeWorker", "args": ["mine", 2]},
        )
        assert response.status_code == 400

    def test_unknown_game(self, client):
        response = client.post("/api/games/nope/move", json={"player": 0, "name": "cancelAction"})
        assert response.status_code == 404


class TestDeleteGame:
    def test_delete(self, client, game):
        assert client.delete(f"/api/games/{game['game_id']}").json() == {"deleted": True}
        assert client.get(f"/api/games/{game['game_id']}").status_code == 404
        assert client.delete(f"/api/games/{game['game_id']}").status_code == 404


class TestSessionManager:
    def test_bot_loop_stops_at_humans(self):
        session = session_manager.create_session(
            [PlayerConfig(PlayerType.BOT, Difficulty.GREEDY), PlayerConfig(PlayerType.HUMAN)], seed=3
        )
        try:
            session.run_bots()
            assert session.state.is_game_over or 1 in session.waiting_for
            assert session.run_bots() == 0
        finally:
            session_manager.delete_session(session.id)

    def test_too_many_seats(self):
        with pytest.raises(ValueError):
            session_manager.create_session([PlayerConfig(PlayerType.HUMAN)] * 5)
