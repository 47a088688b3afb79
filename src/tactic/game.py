"""Single-round state machine: two players alternate on one board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union
import logging
import random

from .ai import ComputerPlayer
from .board import Board, Player, RuleMode, opponent
from .config import Computer, Human

logger = logging.getLogger(__name__)

PlayerConfig = Union[Human, Computer]
HumanMoveSource = Callable[["Game"], int]


@dataclass(frozen=True)
class RoundOutcome:
    """How a round ended; ``winner`` is None for a draw."""

    winner: Optional[Player] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def is_draw(self) -> bool:
        return self.winner is None


@dataclass
class Game:
    player_x: PlayerConfig
    player_o: PlayerConfig
    mode: RuleMode = RuleMode.NORMAL
    current_player: Player = "X"
    rng: random.Random = field(default_factory=random.Random, repr=False)
    board: Board = field(default_factory=Board)
    outcome: Optional[RoundOutcome] = None
    move_log: List[Tuple[Player, int]] = field(default_factory=list)

    # ---- API used by Match & front-ends ----

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    @property
    def awaiting(self) -> Optional[Player]:
        """Player expected to move, or None once the round is over."""
        return None if self.finished else self.current_player

    def player_config(self, mark: Player) -> PlayerConfig:
        return self.player_x if mark == "X" else self.player_o

    def awaiting_human(self) -> bool:
        return not self.finished and isinstance(
            self.player_config(self.current_player), Human
        )

    def play(self, index: int) -> None:
        """Apply a move for the player whose turn it is.

        Raises OccupiedCell/OutOfRange without touching any state when the
        board refuses the move.
        """
        if self.finished:
            raise RuntimeError("Game already finished")

        player = self.current_player
        self.board.place(index, player)
        self.move_log.append((player, index))
        logger.debug("%s played %d", player, index)

        status = self.board.status(self.mode)
        if status.finished:
            self.outcome = RoundOutcome(winner=status.winner, line=status.line)
            logger.debug(
                "Round finished: %s",
                "draw" if self.outcome.is_draw else f"{status.winner} wins",
            )
        else:
            self.current_player = opponent(player)

    def play_at(self, row: int, column: int) -> None:
        self.play(Board.index_of(row, column))

    def play_computer_turn(self) -> int:
        if self.finished:
            raise RuntimeError("Game already finished")
        config = self.player_config(self.current_player)
        if not isinstance(config, Computer):
            raise RuntimeError(f"Player {self.current_player} is not a computer")

        ai = ComputerPlayer(
            player=self.current_player,
            difficulty=config.difficulty,
            mode=self.mode,
            rng=self.rng,
        )
        index = ai.choose(self.board)
        self.play(index)
        return index

    def play_turn(self, request_human_move: HumanMoveSource) -> int:
        """Acquire one move from the right source and apply it.

        Human moves are requested from ``request_human_move``; its errors and
        rejected moves propagate so the caller can ask again.
        """
        if self.finished:
            raise RuntimeError("Game already finished")
        if isinstance(self.player_config(self.current_player), Computer):
            return self.play_computer_turn()
        index = request_human_move(self)
        self.play(index)
        return index
