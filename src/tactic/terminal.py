"""Line-oriented terminal front-end for playing a match."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
import logging

from .board import Board, InvalidMove, OccupiedCell, OutOfRange
from .game import Game, RoundOutcome
from .match import Match, MatchState, MatchSummary

logger = logging.getLogger(__name__)

INDEX_MAP = " 1 | 2 | 3\n-----------\n 4 | 5 | 6\n-----------\n 7 | 8 | 9"
QUIT_WORDS = ("q", "quit", "exit")


class QuitRequested(Exception):
    """The user asked to leave the current round."""


def parse_move(text: str) -> int:
    """Turn user input into a cell index.

    Accepts a single number 1-9 or a 1-based ``row column`` pair. Numbers
    outside the board raise OutOfRange; anything unparsable raises ValueError.
    """
    parts = text.replace(",", " ").split()
    if len(parts) == 1:
        return int(parts[0]) - 1
    if len(parts) == 2:
        row, column = (int(p) for p in parts)
        return Board.index_of(row - 1, column - 1)
    raise ValueError(f"Could not read a move from {text!r}")


def describe_outcome(outcome: Optional[RoundOutcome]) -> str:
    if outcome is None:
        return "Game finished early!"
    if outcome.is_draw:
        return "Draw!"
    return f"Player {outcome.winner} wins!"


def render_scoreboard(state: MatchState) -> str:
    x, o = state.wins["X"], state.wins["O"]
    return "\n".join(
        [
            f"X score:     {x}\t({state.percentage(x):.2f}%)",
            f"O score:     {o}\t({state.percentage(o):.2f}%)",
            f"Draws:       {state.draws}\t({state.percentage(state.draws):.2f}%)",
            f"Total games: {state.rounds_played}",
        ]
    )


@dataclass
class TerminalUI:
    match: Match
    read: Callable[[str], str] = input
    write: Callable[[str], None] = print

    def run(self) -> MatchSummary:
        self.write("Cells are numbered:\n" + INDEX_MAP + "\n")
        while True:
            game = self.match.start_round()
            try:
                self._play_round(game)
            except QuitRequested:
                self.write(game.board.render())
                self.write(describe_outcome(None))
                self.write(render_scoreboard(self.match.state))
                logger.info("Round abandoned by user")
                return self.match.summary()

            self.write(game.board.render())
            self.write(describe_outcome(game.outcome))
            self.write(render_scoreboard(self.match.state))

            if self.match.complete:
                self.write("Match over.")
                return self.match.summary()
            if not self._ask_play_again():
                return self.match.quit()

    def prompt_move(self, game: Game) -> int:
        while True:
            text = self.read(f"{game.current_player}'s turn [1-9 or row col, q to quit]: ")
            text = text.strip().lower()
            if text in QUIT_WORDS:
                raise QuitRequested()
            try:
                return parse_move(text)
            except InvalidMove:
                raise
            except ValueError:
                self.write("Please type a number 1-9 or a row and column.")

    # ---- helpers ----

    def _play_round(self, game: Game) -> None:
        while not game.finished:
            if game.awaiting_human():
                self.write(game.board.render())
            try:
                index = self.match.play_turn(self.prompt_move)
            except OccupiedCell as exc:
                self.write(f"Cell {exc.index + 1} is taken. Try again.")
                continue
            except OutOfRange:
                self.write("That cell is not on the board. Try again.")
                continue
            player, _ = game.move_log[-1]
            self.write(f"{player} plays {index + 1}")

    def _ask_play_again(self) -> bool:
        while True:
            answer = self.read("Play again? [Y/n] ").strip().lower()
            if answer in ("", "y", "yes"):
                return True
            if answer in ("n", "no", *QUIT_WORDS):
                return False
