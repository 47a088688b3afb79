"""Minimax move selection with a difficulty-controlled random mix."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Tuple
import logging
import random

from .board import EMPTY, Board, Player, RuleMode, evaluate, legal_moves, opponent

logger = logging.getLogger(__name__)

MAX_DIFFICULTY = 100


def _apply(cells: Tuple[str, ...], index: int, player: Player) -> Tuple[str, ...]:
    lst = list(cells)
    lst[index] = player
    return tuple(lst)


@lru_cache(maxsize=None)
def negamax(cells: Tuple[str, ...], to_act: Player, mode: RuleMode) -> int:
    """Exact value of ``cells`` for the side about to act.

    Terminal positions are worth ``empty cells + 1``, positive when the side to
    act has won and negative when it has lost, so a quicker win outranks a
    slower one and a later loss outranks an earlier one. Draws are 0.
    """
    status = evaluate(cells, mode)
    if status.state == "won":
        weight = cells.count(EMPTY) + 1
        return weight if status.winner == to_act else -weight
    if status.finished:
        return 0

    nxt = opponent(to_act)
    return max(
        -negamax(_apply(cells, index, to_act), nxt, mode)
        for index in legal_moves(cells)
    )


def move_scores(
    cells: Tuple[str, ...], player: Player, mode: RuleMode = RuleMode.NORMAL
) -> Dict[int, int]:
    """Minimax score of every legal move for ``player``."""
    nxt = opponent(player)
    return {
        index: -negamax(_apply(cells, index, player), nxt, mode)
        for index in legal_moves(cells)
    }


@dataclass
class ComputerPlayer:
    """Computer opponent.

    ``difficulty`` is the percentage chance (0-100) of playing a minimax-optimal
    move; otherwise a legal move is picked uniformly at random. Every random
    draw, including tie-breaks between equally good moves, comes from ``rng``.
    """

    player: Player
    difficulty: int = 85
    mode: RuleMode = RuleMode.NORMAL
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        if not 0 <= self.difficulty <= MAX_DIFFICULTY:
            raise ValueError(
                f"Difficulty must be between 0 and {MAX_DIFFICULTY}, "
                f"got {self.difficulty}"
            )

    # ---- public API ----

    def choose(self, board: Board) -> int:
        cells = board.snapshot()
        if evaluate(cells, self.mode).finished:
            raise RuntimeError("No valid moves available on a decided board")
        moves = legal_moves(cells)

        if self.rng.random() * MAX_DIFFICULTY < self.difficulty:
            move = self.best_move(cells)
            logger.debug("%s plays optimal move %d", self.player, move)
        else:
            move = self.rng.choice(moves)
            logger.debug("%s plays random move %d", self.player, move)
        return move

    def best_move(self, cells: Tuple[str, ...]) -> int:
        scores = move_scores(cells, self.player, self.mode)
        top = max(scores.values())
        candidates: List[int] = [m for m, s in scores.items() if s == top]
        return self.rng.choice(candidates)
