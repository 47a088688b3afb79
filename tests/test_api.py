"""Tests for the FastAPI front-end."""

from __future__ import annotations

import threading
import time

from fastapi import BackgroundTasks
from fastapi.testclient import TestClient

from tactic import ui
from tactic.config import Computer, Human, MatchConfig
from tactic.match import Match, MatchStatus
from tactic.ui import MatchSession, app


client = TestClient(app)
ui.AI_THINK_DELAY = (0.0, 0.0)

HUMANS = {"playerX": {"kind": "human"}, "playerO": {"kind": "human"}}


def create(payload):
    response = client.post("/api/match", json=payload)
    assert response.status_code == 200
    return response.json()


def move(match_id, **body):
    return client.post(f"/api/match/{match_id}/move", json=body)


def test_create_match_and_first_move():
    payload = create(
        {
            "playerO": {"kind": "computer", "difficulty": 100},
            "ending": {"kind": "best_of_rounds", "limit": 1},
        }
    )
    assert payload["currentPlayer"] == "X"
    assert payload["status"] == "round_in_progress"
    assert payload["board"] == [""] * 9
    assert payload["moveLog"] == []
    assert payload["aiPending"] is False

    match_id = payload["id"]
    move_response = move(match_id, cellIndex=4)
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["board"][4] == "X"
    assert state["moveLog"][0] == {"player": "X", "cellIndex": 4}
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True

    time.sleep(0.01)
    follow_up = client.get(f"/api/match/{match_id}")
    assert follow_up.status_code == 200
    final_state = follow_up.json()
    assert final_state["currentPlayer"] == "X"
    assert final_state["moveLog"][-1]["player"] == "O"
    assert final_state["aiPending"] is False


def test_invalid_moves_rejected():
    match_id = create(HUMANS)["id"]

    assert move(match_id, cellIndex=0).status_code == 200

    duplicate = move(match_id, cellIndex=0)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"]

    outside = move(match_id, cellIndex=9)
    assert outside.status_code == 400

    state = client.get(f"/api/match/{match_id}").json()
    assert state["currentPlayer"] == "O"
    assert len(state["moveLog"]) == 1


def test_move_by_coordinates():
    match_id = create(HUMANS)["id"]
    response = move(match_id, row=1, column=2)
    assert response.status_code == 200
    assert response.json()["board"][5] == "X"


def test_move_payload_must_pick_one_target():
    match_id = create(HUMANS)["id"]
    assert move(match_id, cellIndex=1, row=0, column=1).status_code == 422
    assert move(match_id, row=1).status_code == 422
    assert move(match_id).status_code == 422


def test_rejects_unsupported_config():
    bad_difficulty = client.post(
        "/api/match", json={"playerO": {"kind": "computer", "difficulty": 7}}
    )
    assert bad_difficulty.status_code == 422

    bad_limit = client.post(
        "/api/match", json={"ending": {"kind": "first_to_score", "limit": 0}}
    )
    assert bad_limit.status_code == 422


def test_computer_match_plays_itself():
    payload = create(
        {
            "playerX": {"kind": "computer", "difficulty": 100},
            "playerO": {"kind": "computer", "difficulty": 100},
            "ending": {"kind": "best_of_rounds", "limit": 1},
            "seed": 11,
        }
    )
    assert payload["aiPending"] is True

    state = client.get(f"/api/match/{payload['id']}").json()
    assert state["status"] == "complete"
    assert state["outcome"]["draw"] is True
    assert state["score"]["draws"] == 1
    assert len(state["moveLog"]) == 9


def test_rounds_alternate_and_quit():
    match_id = create(HUMANS)["id"]
    for index in (0, 3, 1, 4, 2):
        assert move(match_id, cellIndex=index).status_code == 200

    state = client.get(f"/api/match/{match_id}").json()
    assert state["status"] == "awaiting_round_start"
    assert state["outcome"] == {"winner": "X", "draw": False, "line": [0, 1, 2]}
    assert state["score"]["X"] == 1
    assert move(match_id, cellIndex=5).status_code == 400

    next_round = client.post(f"/api/match/{match_id}/round")
    assert next_round.status_code == 200
    assert next_round.json()["currentPlayer"] == "O"
    assert client.post(f"/api/match/{match_id}/round").status_code == 400
    assert client.post(f"/api/match/{match_id}/quit").status_code == 400

    for index in (0, 3, 1, 4, 2):
        move(match_id, cellIndex=index)
    quit_response = client.post(f"/api/match/{match_id}/quit")
    assert quit_response.status_code == 200
    final = quit_response.json()
    assert final["status"] == "complete"
    assert final["score"] == {"X": 1, "O": 1, "draws": 0, "roundsPlayed": 2}


def test_reverse_mode_scores_opponent():
    payload = create({**HUMANS, "mode": "reverse"})
    for index in (0, 3, 1, 4, 2):
        move(payload["id"], cellIndex=index)

    state = client.get(f"/api/match/{payload['id']}").json()
    assert state["outcome"]["winner"] == "O"
    assert state["score"]["O"] == 1


def test_missing_match_returns_404():
    assert client.get("/api/match/INVALID").status_code == 404


def test_index_page_served():
    response = client.get("/")
    assert response.status_code == 200
    assert "<title>Tactic</title>" in response.text


class ReleaseHookLock:
    """Lock that runs a one-shot callback right after it is released."""

    def __init__(self):
        self._lock = threading.Lock()
        self.on_release = None

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()
        hook, self.on_release = self.on_release, None
        if hook is not None:
            hook()


def test_round_started_as_ai_task_exits_gets_computer_turn():
    match = Match(config=MatchConfig(player_x=Human(), player_o=Computer(difficulty=100)))
    match.start_round()
    for index in [0, 3, 1, 4, 2]:
        match.play(index)
    assert match.status == MatchStatus.AWAITING_ROUND_START

    lock = ReleaseHookLock()
    session = MatchSession(match=match, ai_pending=True, lock=lock)
    ui.SESSIONS["release-race"] = session
    tasks = BackgroundTasks()
    # The next round (O starts) is requested the moment the worker lets go of the lock
    lock.on_release = lambda: ui.next_round("release-race", tasks)
    try:
        ui._run_ai_turns("release-race")
    finally:
        del ui.SESSIONS["release-race"]

    assert match.game.current_player == "O"
    assert len(tasks.tasks) == 1
    assert session.ai_pending is True
