"""Match sessions: a sequence of rounds governed by an ending policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional
import logging
import random

from .board import Player, opponent
from .config import MatchConfig
from .game import Game, HumanMoveSource, RoundOutcome

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    AWAITING_ROUND_START = "awaiting_round_start"
    ROUND_IN_PROGRESS = "round_in_progress"
    COMPLETE = "complete"


@dataclass
class MatchState:
    """Running score of a session. Only Match mutates it."""

    wins: Dict[Player, int] = field(default_factory=lambda: {"X": 0, "O": 0})
    draws: int = 0
    rounds_played: int = 0

    @property
    def decisive_rounds(self) -> int:
        return self.wins["X"] + self.wins["O"]

    def percentage(self, count: int) -> float:
        if not self.rounds_played:
            return 0.0
        return count / self.rounds_played * 100.0

    def record(self, outcome: RoundOutcome) -> None:
        if outcome.winner is None:
            self.draws += 1
        else:
            self.wins[outcome.winner] += 1
        self.rounds_played += 1


@dataclass(frozen=True)
class MatchSummary:
    x_wins: int
    o_wins: int
    draws: int
    rounds_played: int
    complete: bool


@dataclass
class Match:
    """Drives rounds until the configured ending policy is satisfied.

    The starting player alternates every round, beginning with
    ``config.first_player``.
    """

    config: MatchConfig
    state: MatchState = field(default_factory=MatchState)
    game: Optional[Game] = None
    status: MatchStatus = MatchStatus.AWAITING_ROUND_START
    rng: random.Random = field(init=False, repr=False)
    next_starter: Player = field(init=False)

    def __post_init__(self) -> None:
        self.rng = random.Random(self.config.seed)
        self.next_starter = self.config.first_player

    # ---- lifecycle ----

    @property
    def complete(self) -> bool:
        return self.status == MatchStatus.COMPLETE

    def start_round(self) -> Game:
        if self.status != MatchStatus.AWAITING_ROUND_START:
            raise RuntimeError(f"Cannot start a round while {self.status.value}")

        self.game = Game(
            player_x=self.config.player_x,
            player_o=self.config.player_o,
            mode=self.config.mode,
            current_player=self.next_starter,
            rng=self.rng,
        )
        self.next_starter = opponent(self.next_starter)
        self.status = MatchStatus.ROUND_IN_PROGRESS
        logger.debug(
            "Round %d started, %s moves first",
            self.state.rounds_played + 1,
            self.game.current_player,
        )
        return self.game

    def quit(self) -> MatchSummary:
        """End the session between rounds."""
        if self.status == MatchStatus.ROUND_IN_PROGRESS:
            raise RuntimeError("Cannot quit in the middle of a round")
        if self.status != MatchStatus.COMPLETE:
            self.status = MatchStatus.COMPLETE
            logger.info("Match stopped after %d rounds", self.state.rounds_played)
        return self.summary()

    def summary(self) -> MatchSummary:
        return MatchSummary(
            x_wins=self.state.wins["X"],
            o_wins=self.state.wins["O"],
            draws=self.state.draws,
            rounds_played=self.state.rounds_played,
            complete=self.complete,
        )

    # ---- moves ----

    def play(self, index: int) -> None:
        self._active_game().play(index)
        self._settle()

    def play_at(self, row: int, column: int) -> None:
        self._active_game().play_at(row, column)
        self._settle()

    def play_computer_turn(self) -> int:
        index = self._active_game().play_computer_turn()
        self._settle()
        return index

    def play_turn(self, request_human_move: HumanMoveSource) -> int:
        index = self._active_game().play_turn(request_human_move)
        self._settle()
        return index

    # ---- helpers ----

    def _active_game(self) -> Game:
        if self.status != MatchStatus.ROUND_IN_PROGRESS or self.game is None:
            raise RuntimeError("No round in progress")
        return self.game

    def _settle(self) -> None:
        game = self.game
        if game is None or game.outcome is None:
            return
        self.state.record(game.outcome)
        logger.debug(
            "Score after round %d: X=%d O=%d draws=%d",
            self.state.rounds_played,
            self.state.wins["X"],
            self.state.wins["O"],
            self.state.draws,
        )
        if self.config.ending.is_complete(self.state):
            self.status = MatchStatus.COMPLETE
            logger.info(
                "Match complete: X=%d O=%d draws=%d",
                self.state.wins["X"],
                self.state.wins["O"],
                self.state.draws,
            )
        else:
            self.status = MatchStatus.AWAITING_ROUND_START
