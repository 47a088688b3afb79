"""Tactic package exposing the board, AI, match engine and the web application."""

from .ai import ComputerPlayer
from .board import Board, OccupiedCell, OutOfRange, RuleMode
from .config import MatchConfig
from .game import Game, RoundOutcome
from .match import Match, MatchState, MatchStatus
from .ui import app

__all__ = [
    "Board",
    "ComputerPlayer",
    "Game",
    "Match",
    "MatchConfig",
    "MatchState",
    "MatchStatus",
    "OccupiedCell",
    "OutOfRange",
    "RoundOutcome",
    "RuleMode",
    "app",
]
