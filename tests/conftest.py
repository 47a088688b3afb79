"""Shared move scripts for round-level tests."""

import pytest

# Indices in play order; the player who starts completes the top row.
STARTER_WINS = [0, 3, 1, 4, 2]
# The player who moves second completes the middle row.
SECOND_WINS = [0, 3, 1, 4, 8, 5]
# Fills the board without completing any line.
DRAW = [0, 1, 2, 4, 3, 5, 7, 6, 8]


@pytest.fixture
def scripts():
    return {"starter": STARTER_WINS, "second": SECOND_WINS, "draw": DRAW}
