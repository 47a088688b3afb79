"""Board representation, win/draw detection and legal move generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

Player = str  # "X" or "O"
EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")

# Rows, columns, then diagonals; earlier lines win ties on boards with several.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (6, 4, 2),
)


def opponent(player: Player) -> Player:
    return "O" if player == "X" else "X"


class RuleMode(str, Enum):
    """Polarity of a completed line."""

    NORMAL = "normal"
    REVERSE = "reverse"


class InvalidMove(ValueError):
    """A move request the board refuses; the caller may ask again."""


class OccupiedCell(InvalidMove):
    def __init__(self, index: int) -> None:
        super().__init__(f"Cell {index} is already occupied")
        self.index = index


class OutOfRange(InvalidMove):
    """Index outside 0-8 or coordinates outside 0-2."""


# ---------- Status ----------


@dataclass(frozen=True)
class BoardStatus:
    """Result of evaluating a board.

    ``winner`` is set only for won boards and already accounts for the rule
    mode, so under reverse it is the opponent of whoever owns ``line``.
    """

    state: str  # "in_progress", "won" or "drawn"
    winner: Optional[Player] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def finished(self) -> bool:
        return self.state != "in_progress"


IN_PROGRESS = BoardStatus("in_progress")
DRAWN = BoardStatus("drawn")


def completed_line(
    cells: Tuple[str, ...],
) -> Optional[Tuple[Player, Tuple[int, int, int]]]:
    for a, b, c in WINNING_LINES:
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return v, (a, b, c)
    return None


def evaluate(cells: Tuple[str, ...], mode: RuleMode = RuleMode.NORMAL) -> BoardStatus:
    """Status of ``cells`` under ``mode``; shared by Board and the AI search."""
    found = completed_line(cells)
    if found is not None:
        owner, line = found
        winner = owner if mode == RuleMode.NORMAL else opponent(owner)
        return BoardStatus("won", winner=winner, line=line)
    if EMPTY not in cells:
        return DRAWN
    return IN_PROGRESS


def legal_moves(cells: Tuple[str, ...]) -> List[int]:
    """Empty cell indices in row-major order."""
    return [i for i, c in enumerate(cells) if c == EMPTY]


# ---------- Board ----------


@dataclass
class Board:
    # 'X', 'O', or ' ' (space) for empty
    cells: List[str] = field(default_factory=lambda: [EMPTY] * 9)

    @staticmethod
    def index_of(row: int, column: int) -> int:
        if not (0 <= row <= 2 and 0 <= column <= 2):
            raise OutOfRange(
                f"Invalid coordinates ({row}, {column}); maximum is (2, 2)"
            )
        return row * 3 + column

    def cell(self, index: int) -> str:
        self._check_index(index)
        return self.cells[index]

    def place(self, index: int, player: Player) -> None:
        if player not in PLAYERS:
            raise ValueError(f"Unknown player {player!r}")
        self._check_index(index)
        if self.cells[index] != EMPTY:
            raise OccupiedCell(index)
        self.cells[index] = player

    def status(self, mode: RuleMode = RuleMode.NORMAL) -> BoardStatus:
        return evaluate(self.snapshot(), mode)

    def snapshot(self) -> Tuple[str, ...]:
        return tuple(self.cells)

    def available_moves(self) -> List[int]:
        return legal_moves(self.snapshot())

    def render(self) -> str:
        rows = [" " + " | ".join(self.cells[r * 3 : r * 3 + 3]) for r in range(3)]
        return "\n-----------\n".join(rows)

    def _check_index(self, index: int) -> None:
        # bool is an int subclass; reject it explicitly
        if isinstance(index, bool) or not isinstance(index, int):
            raise OutOfRange(f"Cell index must be an integer, got {index!r}")
        if not 0 <= index <= 8:
            raise OutOfRange(f"Cell index {index} is outside 0-8")
