"""
Web API tests.

Drives the FastAPI app through TestClient with a seeded game and a manual
scheduler, so the AI reply only happens when a test runs it.
"""

import logging
import random
import threading

import pytest
from fastapi.testclient import TestClient

from variant.game import Game
from web.app import create_app

from .conftest import ManualScheduler


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def app(scheduler):
    seeds = iter(range(100))
    return create_app(lambda: Game(rng=random.Random(next(seeds)), scheduler=scheduler))


@pytest.fixture
def client(app):
    return TestClient(app)


def test_board_view(client):
    response = client.get("/api/board")
    assert response.status_code == 200
    view = response.json()
    assert view["turn"] == "white"
    assert view["stage"] == 0
    assert view["history_length"] == 0
    assert view["pending_reply"] is False
    assert len(view["cells"]) == 64
    assert sum(cell["active"] for cell in view["cells"]) == 16
    assert sum(cell["piece"] is not None for cell in view["cells"]) == 16


def test_valid_move_then_reply(client, scheduler):
    view = client.post(
        "/api/move", json={"from_row": 4, "from_col": 2, "to_row": 3, "to_col": 2}
    ).json()
    assert view["history_length"] == 1
    assert view["turn"] == "black"
    assert view["pending_reply"] is True
    assert view["cells"][3 * 8 + 2]["piece"] == "P"

    scheduler.run_pending()
    view = client.get("/api/board").json()
    assert view["history_length"] == 2
    assert view["turn"] == "white"
    assert view["pending_reply"] is False


def test_invalid_move_returns_unchanged_board(client):
    before = client.get("/api/board").json()
    after = client.post(
        "/api/move", json={"from_row": 5, "from_col": 2, "to_row": 6, "to_col": 2}
    ).json()
    assert after == before


def test_off_board_move_is_not_a_client_error(client):
    response = client.post(
        "/api/move", json={"from_row": 9, "from_col": 9, "to_row": -1, "to_col": 0}
    )
    assert response.status_code == 200
    assert response.json()["history_length"] == 0


def test_malformed_move_body_is_rejected(client):
    response = client.post("/api/move", json={"from_row": "a", "from_col": 2})
    assert response.status_code == 422


def test_undo_round_trip(client, scheduler):
    before = client.get("/api/board").json()
    client.post("/api/move", json={"from_row": 4, "from_col": 2, "to_row": 3, "to_col": 2})
    scheduler.run_pending()

    view = client.post("/api/undo").json()

    assert view["history_length"] == 0
    assert view["turn"] == "black"
    assert view["pending_reply"] is True
    pieces = [cell["piece"] for cell in view["cells"]]
    assert pieces == [cell["piece"] for cell in before["cells"]]
    assert sum(cell["active"] for cell in view["cells"]) == 18


def test_undo_with_short_history(client):
    before = client.get("/api/board").json()
    assert client.post("/api/undo").json() == before


def test_new_game_replaces_state(app, client):
    client.post("/api/move", json={"from_row": 4, "from_col": 2, "to_row": 3, "to_col": 2})
    old_game = app.state.game

    view = client.post("/api/new").json()

    assert app.state.game is not old_game
    assert view["history_length"] == 0
    assert view["turn"] == "white"


def test_root_serves_frontend(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "chess-board" in response.text


def test_reply_landing_during_rejected_move_is_not_logged(app, client, scheduler, caplog):
    client.post("/api/move", json={"from_row": 4, "from_col": 2, "to_row": 3, "to_col": 2})
    game = app.state.game
    apply_player_move = game.process_player_move
    workers = []

    def reject_while_reply_fires(*coords):
        apply_player_move(*coords)
        worker = threading.Thread(target=scheduler.run_pending)
        worker.start()
        worker.join(timeout=0.2)
        workers.append(worker)

    game.process_player_move = reject_while_reply_fires
    with caplog.at_level(logging.INFO, logger="web.app"):
        client.post("/api/move", json={"from_row": 5, "from_col": 2, "to_row": 8, "to_col": 2})
    workers[0].join(timeout=5.0)

    assert game.ply_count == 2
    assert not [r for r in caplog.records if r.getMessage().startswith("Move")]


def test_accepted_move_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="web.app"):
        client.post("/api/move", json={"from_row": 4, "from_col": 2, "to_row": 3, "to_col": 2})
    assert [r for r in caplog.records if r.getMessage() == "Move (4,2)->(3,2) stage=0"]
