"""FastAPI-powered browser front-end for playing a tic-tac-toe match."""

from __future__ import annotations

import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .board import InvalidMove
from .config import Computer, MatchConfig
from .match import Match, MatchStatus


@dataclass
class MatchSession:
    """Container for an active match and its pending computer turns."""

    match: Match
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, MatchSession] = {}
app = FastAPI(title="Tactic", description="Tic-tac-toe matches played in the browser")


AI_THINK_DELAY: Tuple[float, float] = (0.4, 0.9)


class MoveRequest(BaseModel):
    """Request payload for a human move, by index or by coordinates."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: Optional[int] = Field(default=None, alias="cellIndex")
    row: Optional[int] = None
    column: Optional[int] = None

    @model_validator(mode="after")
    def ensure_single_target(self) -> "MoveRequest":
        has_index = self.cell_index is not None
        has_coords = self.row is not None or self.column is not None
        if has_index == has_coords:
            raise ValueError("Provide either cellIndex or both row and column")
        if has_coords and (self.row is None or self.column is None):
            raise ValueError("Both row and column are required")
        return self


def _create_session(config: MatchConfig) -> Tuple[str, MatchSession]:
    """Create a new match, start its first round and register it."""

    match = Match(config=config)
    match.start_round()
    session = MatchSession(match=match)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    return session_id, session


def _get_session(match_id: str) -> MatchSession:
    try:
        return SESSIONS[match_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Match not found") from exc


def _computer_to_move(match: Match) -> bool:
    game = match.game
    return (
        match.status == MatchStatus.ROUND_IN_PROGRESS
        and game is not None
        and not game.finished
        and isinstance(game.player_config(game.current_player), Computer)
    )


def _schedule_ai(
    match_id: str, session: MatchSession, background_tasks: BackgroundTasks
) -> None:
    # Caller holds session.lock
    if _computer_to_move(session.match) and not session.ai_pending:
        session.ai_pending = True
        background_tasks.add_task(_run_ai_turns, match_id)


def _run_ai_turns(match_id: str) -> None:
    """Play computer moves until a human is to act or the round ends."""
    session = SESSIONS.get(match_id)
    if not session:
        return

    while True:
        time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))
        with session.lock:
            done = True
            try:
                if _computer_to_move(session.match):
                    session.match.play_computer_turn()
                    done = not _computer_to_move(session.match)
            finally:
                # Cleared under the lock so a round started next can schedule its own turn
                if done:
                    session.ai_pending = False
            if done:
                return


def _serialize_session(match_id: str, session: MatchSession) -> Dict[str, object]:
    with session.lock:
        match = session.match
        game = match.game
        state = match.state

        players: Dict[str, object] = {}
        for mark in ("X", "O"):
            players[mark] = match.config.player(mark).model_dump()

        payload: Dict[str, object] = {
            "id": match_id,
            "status": match.status.value,
            "mode": match.config.mode.value,
            "ending": match.config.ending.model_dump(),
            "players": players,
            "score": {
                "X": state.wins["X"],
                "O": state.wins["O"],
                "draws": state.draws,
                "roundsPlayed": state.rounds_played,
            },
            "aiPending": session.ai_pending,
        }

        if game is None:
            return payload

        outcome: Optional[Dict[str, object]] = None
        if game.outcome is not None:
            outcome = {
                "winner": game.outcome.winner,
                "draw": game.outcome.is_draw,
                "line": list(game.outcome.line) if game.outcome.line else None,
            }
        move_log: List[Dict[str, object]] = [
            {"player": player, "cellIndex": index} for player, index in game.move_log
        ]
        payload.update(
            {
                "board": [c if c in ("X", "O") else "" for c in game.board.cells],
                "currentPlayer": game.awaiting,
                "availableMoves": [] if game.finished else game.board.available_moves(),
                "outcome": outcome,
                "moveLog": move_log,
            }
        )
        if move_log:
            payload["lastMove"] = move_log[-1]
        return payload


def _apply_player_move(
    match_id: str,
    session: MatchSession,
    request: MoveRequest,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    with session.lock:
        match = session.match
        game = match.game
        if match.status != MatchStatus.ROUND_IN_PROGRESS or game is None:
            raise HTTPException(status_code=400, detail="No round in progress")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if not game.awaiting_human():
            raise HTTPException(
                status_code=400, detail="It is not a human player's turn"
            )

        try:
            if request.cell_index is not None:
                match.play(request.cell_index)
            else:
                match.play_at(request.row, request.column)
        except InvalidMove as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        if background_tasks is not None:
            _schedule_ai(match_id, session, background_tasks)


@app.post("/api/match")
def create_match(
    config: MatchConfig, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    match_id, session = _create_session(config)
    with session.lock:
        _schedule_ai(match_id, session, background_tasks)
    return _serialize_session(match_id, session)


@app.get("/api/match/{match_id}")
def get_match(match_id: str) -> Dict[str, object]:
    session = _get_session(match_id)
    return _serialize_session(match_id, session)


@app.post("/api/match/{match_id}/move")
def make_move(
    match_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(match_id)
    _apply_player_move(match_id, session, request, background_tasks)
    return _serialize_session(match_id, session)


@app.post("/api/match/{match_id}/round")
def next_round(match_id: str, background_tasks: BackgroundTasks) -> Dict[str, object]:
    session = _get_session(match_id)
    with session.lock:
        try:
            session.match.start_round()
        except RuntimeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        _schedule_ai(match_id, session, background_tasks)
    return _serialize_session(match_id, session)


@app.post("/api/match/{match_id}/quit")
def quit_match(match_id: str) -> Dict[str, object]:
    session = _get_session(match_id)
    with session.lock:
        try:
            session.match.quit()
        except RuntimeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _serialize_session(match_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tactic</title>
    <style>
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem;
        font-family: system-ui, -apple-system, \"Segoe UI\", sans-serif;
        background: #eef1f8;
        color: #13203a;
      }
      main {
        background: #fff;
        border-radius: 16px;
        padding: 1.5rem 2rem;
        box-shadow: 0 12px 32px rgba(19, 32, 58, 0.12);
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 84px);
        gap: 6px;
        margin: 1rem 0;
      }
      #board button {
        height: 84px;
        font-size: 2rem;
        border: none;
        border-radius: 10px;
        background: #dbe0ff;
        cursor: pointer;
      }
      #board button.line {
        background: #ffd78a;
      }
      label {
        display: block;
        margin: 0.25rem 0;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tactic</h1>
      <form id=\"setup\">
        <label>X <select name=\"x\"><option>human</option><option>computer</option></select></label>
        <label>O <select name=\"o\"><option>computer</option><option>human</option></select></label>
        <label>Difficulty <input name=\"difficulty\" type=\"number\" min=\"0\" max=\"100\" step=\"5\" value=\"85\" /></label>
        <label>Mode <select name=\"mode\"><option>normal</option><option>reverse</option></select></label>
        <button type=\"submit\">New match</button>
      </form>
      <div id=\"board\"></div>
      <p id=\"status\">Configure a match to begin.</p>
      <p id=\"score\"></p>
      <button id=\"next\" hidden>Next round</button>
      <button id=\"quit\" hidden>Quit</button>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const scoreEl = document.getElementById('score');
      const nextButton = document.getElementById('next');
      const quitButton = document.getElementById('quit');
      let state = null;

      function player(kind, difficulty) {
        return kind === 'computer' ? { kind, difficulty: Number(difficulty) } : { kind };
      }

      async function call(path, body) {
        const response = await fetch(path, {
          method: body === undefined ? 'GET' : 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: body === undefined ? undefined : JSON.stringify(body),
        });
        const payload = await response.json();
        if (!response.ok) {
          statusEl.textContent = payload.detail || 'Request failed';
          return;
        }
        state = payload;
        render();
        if (state.aiPending) {
          setTimeout(() => call(`/api/match/${state.id}`), 400);
        }
      }

      function render() {
        boardEl.innerHTML = '';
        const line = state.outcome && state.outcome.line ? state.outcome.line : [];
        state.board.forEach((cell, index) => {
          const button = document.createElement('button');
          button.textContent = cell;
          if (line.includes(index)) button.classList.add('line');
          button.addEventListener('click', () =>
            call(`/api/match/${state.id}/move`, { cellIndex: index })
          );
          boardEl.appendChild(button);
        });
        if (state.status === 'complete') {
          statusEl.textContent = 'Match over.';
        } else if (state.outcome) {
          statusEl.textContent = state.outcome.draw ? 'Draw!' : `Player ${state.outcome.winner} wins!`;
        } else {
          statusEl.textContent = `${state.currentPlayer}'s turn`;
        }
        const s = state.score;
        scoreEl.textContent = `X ${s.X} / O ${s.O} / draws ${s.draws} / games ${s.roundsPlayed}`;
        nextButton.hidden = state.status !== 'awaiting_round_start';
        quitButton.hidden = state.status !== 'awaiting_round_start';
      }

      document.getElementById('setup').addEventListener('submit', (event) => {
        event.preventDefault();
        const form = new FormData(event.target);
        call('/api/match', {
          playerX: player(form.get('x'), form.get('difficulty')),
          playerO: player(form.get('o'), form.get('difficulty')),
          mode: form.get('mode'),
        });
      });
      nextButton.addEventListener('click', () => call(`/api/match/${state.id}/round`, {}));
      quitButton.addEventListener('click', () => call(`/api/match/${state.id}/quit`, {}));
    </script>
  </body>
</html>
"""
