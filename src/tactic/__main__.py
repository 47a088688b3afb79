"""Entry point for running Tactic via ``python -m tactic`` or ``tactic``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

import uvicorn
from pydantic import ValidationError

from .board import RuleMode
from .config import (
    DEFAULT_DIFFICULTY,
    ENDING_KINDS,
    Computer,
    Human,
    MatchConfig,
    ending_from_options,
)
from .match import Match
from .terminal import TerminalUI

logger = logging.getLogger("tactic")

EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tactic", description="Tic-tac-toe for the terminal")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    # Accepted after the subcommand too; SUPPRESS keeps a root -v from being reset
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable verbose logging",
    )
    sub = p.add_subparsers(dest="cmd")

    p_play = sub.add_parser(
        "play", parents=[common], help="Play a match in the terminal (default)"
    )
    for mark, default in (("x", "human"), ("o", "computer")):
        p_play.add_argument(
            f"--{mark}",
            choices=["human", "computer"],
            default=default,
            help=f"Player {mark.upper()} type (default: {default})",
        )
        p_play.add_argument(
            f"--{mark}-difficulty",
            type=int,
            default=DEFAULT_DIFFICULTY,
            help="Chance in percent of an optimal computer move, 0-100 in steps of 5",
        )
    p_play.add_argument(
        "--mode",
        choices=[m.value for m in RuleMode],
        default=RuleMode.NORMAL.value,
        help="normal: get three in a row; reverse: avoid three in a row",
    )
    p_play.add_argument(
        "--ending",
        choices=sorted(ENDING_KINDS),
        default="unlimited",
        help="When the match ends (default: unlimited, until you quit)",
    )
    p_play.add_argument(
        "--limit", type=int, default=None, help="Target for the ending policy (default: 1)"
    )
    p_play.add_argument(
        "--first", choices=["X", "O"], default="X", help="Player who starts round one"
    )
    p_play.add_argument("--seed", type=int, default=None, help="Seed for reproducible play")

    sub.add_parser(
        "serve", parents=[common], help="Serve the browser front-end with uvicorn"
    )
    return p


def config_from_args(ns: argparse.Namespace) -> MatchConfig:
    def player(kind: str, difficulty: int):
        return Computer(difficulty=difficulty) if kind == "computer" else Human()

    return MatchConfig(
        player_x=player(ns.x, ns.x_difficulty),
        player_o=player(ns.o, ns.o_difficulty),
        mode=RuleMode(ns.mode),
        ending=ending_from_options(ns.ending, ns.limit),
        first_player=ns.first,
        seed=ns.seed,
    )


def serve() -> None:
    """Start the FastAPI-powered front-end."""

    host = os.environ.get("TACTIC_HOST", "127.0.0.1")
    port = int(os.environ.get("TACTIC_PORT", "8000"))
    uvicorn.run("tactic.ui:app", host=host, port=port, reload=False)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = list(sys.argv[1:] if argv is None else argv)
    if not any(a in ("play", "serve", "-h", "--help") for a in args):
        args = ["play"] + args
    ns = parser.parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if ns.cmd == "serve":
        serve()
        return 0

    try:
        config = config_from_args(ns)
    except (ValidationError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    logger.debug("Starting match with %s", config)
    try:
        summary = TerminalUI(Match(config=config)).run()
    except (KeyboardInterrupt, EOFError):
        print()
        return 0
    logger.info(
        "Final score X=%d O=%d draws=%d rounds=%d",
        summary.x_wins,
        summary.o_wins,
        summary.draws,
        summary.rounds_played,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
