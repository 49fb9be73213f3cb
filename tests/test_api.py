"""
Testing API via TestClient
- The `today` fixture pins the date the routes see (2024-03-09), so the secret is known:
  milkfat 28, April, day 8, year 1924.
"""

from datetime import date

from fastapi.testclient import TestClient

import curdle.main as app_main
from curdle.main import app
from curdle.store import GameStore

SECRET = {"milkfat": 28, "month": "April", "day": 8, "year": 1924}
WRONG = {"milkfat": 99, "month": "October", "day": 27, "year": 2003}


def start(client, player_id="player-1"):
    response = client.post("/games", json={"player_id": player_id})
    assert response.status_code == 200
    return response.json()


def test_daily_never_reveals_the_answer(client):
    response = client.get("/daily")
    assert response.status_code == 200
    body = response.json()
    assert body["play_date"] == "2024-03-09"
    assert body["max_guesses"] == 6
    assert body["months"][0] == "January"
    assert body["year_range"] == [1886, 2024]
    assert "secret" not in body


def test_start_and_win(client):
    """
    Flow:
    1) Start today's game.
    2) Wrong guess -> feedback, still in progress, no secret.
    3) Winning guess -> 'won', secret and share grid revealed.
    """
    game = start(client)
    assert game["status"] == "in_progress"
    assert game["guesses_left"] == 6
    game_id = game["game_id"]

    response = client.post(f"/games/{game_id}/guess", json={"milkfat": 82, "month": "March", "day": 8, "year": 1942})
    assert response.status_code == 200
    body = response.json()
    # 082 vs 028: 0 exact, 8 and 2 swapped
    assert body["feedback"]["milkfat"] == ["green", "yellow", "yellow"]
    assert body["feedback"]["month"] == "yellow"
    assert body["feedback"]["day"] == ["green", "green"]
    assert body["feedback"]["year"] == ["green", "green", "yellow", "yellow"]
    assert body["status"] == "in_progress"
    assert body["secret"] is None

    response = client.post(f"/games/{game_id}/guess", json=SECRET)
    assert response.status_code == 200
    final = response.json()
    assert final["status"] == "won"
    assert final["game_over"] is True
    assert final["secret"] == SECRET
    assert final["share"].startswith("Curdle 2024-03-09 2/6")


def test_cannot_guess_after_game_finished(client):
    game_id = start(client)["game_id"]

    first = client.post(f"/games/{game_id}/guess", json=SECRET).json()
    assert first["status"] == "won"

    second = client.post(f"/games/{game_id}/guess", json=WRONG)
    assert second.status_code == 200
    body = second.json()
    assert body["status"] == "won"
    assert body["guesses_left"] == first["guesses_left"]
    assert body["feedback"] is None
    assert "No more guesses" in body["note"]


def test_lost_after_six_guesses(client):
    game_id = start(client)["game_id"]

    for i in range(6):
        response = client.post(f"/games/{game_id}/guess", json=WRONG)
        assert response.status_code == 200
        body = response.json()
        if i < 5:
            assert body["status"] == "in_progress"

    assert body["status"] == "lost"
    assert body["guesses_left"] == 0
    assert body["secret"] == SECRET
    assert body["share"].startswith("Curdle 2024-03-09 X/6")

    state = client.get(f"/games/{game_id}").json()
    assert len(state["history"]) == 6
    assert state["game_over"] is True


def test_reload_resumes_todays_game(client):
    game_id = start(client)["game_id"]
    client.post(f"/games/{game_id}/guess", json=WRONG)

    again = start(client)
    assert again["game_id"] == game_id
    assert len(again["history"]) == 1
    assert again["history"][0]["guess"] == WRONG


def test_start_without_player_id_gets_a_fresh_one(client):
    response = client.post("/games")
    assert response.status_code == 200
    assert response.json()["player_id"]


def test_invalid_guesses_are_rejected(client):
    game_id = start(client)["game_id"]

    bad = [
        {"milkfat": 101, "month": "April", "day": 8, "year": 1924},
        {"milkfat": 28, "month": "Smarch", "day": 8, "year": 1924},
        {"milkfat": 28, "month": "April", "day": 0, "year": 1924},
        {"milkfat": 28, "month": "April", "day": 8, "year": 1885},
        {"milkfat": 28, "month": "April", "day": 8, "year": 3000},
        {"milkfat": 28, "day": 8, "year": 1924},
    ]
    for payload in bad:
        response = client.post(f"/games/{game_id}/guess", json=payload)
        assert response.status_code == 422, payload

    # Nothing was recorded
    assert client.get(f"/games/{game_id}").json()["guesses_left"] == 6


def test_unknown_game_is_404(client):
    assert client.get("/games/missing").status_code == 404
    assert client.post("/games/missing/guess", json=WRONG).status_code == 404


def test_yesterdays_game_is_409(client, today):
    game_id = start(client)["game_id"]

    today.day = date(2024, 3, 10)
    response = client.post(f"/games/{game_id}/guess", json=WRONG)
    assert response.status_code == 409

    # The new day starts a new game for the same player
    assert start(client)["game_id"] != game_id


def test_stats_after_a_win_and_reset(client):
    assert client.post("/stats/reset", params={"player_id": "player-1"}).status_code == 200

    game_id = start(client)["game_id"]
    client.post(f"/games/{game_id}/guess", json=SECRET)

    stats = client.get("/stats", params={"player_id": "player-1"}).json()
    assert stats["player_id"] == "player-1"
    assert stats["games_started"] == 1
    assert stats["games_won"] == 1
    assert stats["fastest_win_guesses"] == 1
    assert stats["win_distribution"]["1"] == 1

    client.post("/stats/reset", params={"player_id": "player-1"})
    assert client.get("/stats", params={"player_id": "player-1"}).json()["games_won"] == 0


def test_year_bound_follows_the_game_day(client):
    # The pinned day is in 2024, so 2025 is in the future even if the wall clock says otherwise
    daily = client.get("/daily").json()
    assert daily["year_range"] == [1886, 2024]

    game_id = start(client)["game_id"]
    response = client.post(f"/games/{game_id}/guess", json={**SECRET, "year": 2025})
    assert response.status_code == 422

    ok = client.post(f"/games/{game_id}/guess", json={**WRONG, "year": 2024})
    assert ok.status_code == 200
    assert client.get(f"/games/{game_id}").json()["guesses_left"] == 5


def test_stats_are_per_player(client):
    game_a = start(client, "player-a")["game_id"]
    client.post(f"/games/{game_a}/guess", json=SECRET)

    game_b = start(client, "player-b")["game_id"]
    for _ in range(6):
        client.post(f"/games/{game_b}/guess", json=WRONG)

    stats_a = client.get("/stats", params={"player_id": "player-a"}).json()
    assert stats_a["current_streak"] == 1
    assert stats_a["games_won"] == 1
    assert stats_a["games_lost"] == 0

    stats_b = client.get("/stats", params={"player_id": "player-b"}).json()
    assert stats_b["current_streak"] == 0
    assert stats_b["games_lost"] == 1

    assert client.get("/stats").status_code == 422


def test_memory_store_flow(today):
    """Same flow as the DB-backed routes, with the in-memory store behind them."""
    memory_store = GameStore(max_guesses=6)
    app.dependency_overrides[app_main.get_store] = lambda: memory_store
    client = TestClient(app)

    game_id = start(client)["game_id"]
    body = client.post(f"/games/{game_id}/guess", json=WRONG).json()
    assert body["status"] == "in_progress"
    assert body["feedback"]["month"] == "black"

    final = client.post(f"/games/{game_id}/guess", json=SECRET).json()
    assert final["status"] == "won"
    assert final["secret"] == SECRET
    assert final["share"].startswith("Curdle 2024-03-09 2/6")

    # The guesses live in the memory store
    assert len(memory_store.results(game_id)) == 2
    stats = client.get("/stats", params={"player_id": "player-1"}).json()
    assert stats["games_won"] == 1
    assert stats["fastest_win_guesses"] == 2
