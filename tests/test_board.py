"""Unit tests for the board, its status rules and move generation."""

import pytest

from tactic.board import (
    WINNING_LINES,
    Board,
    OccupiedCell,
    OutOfRange,
    RuleMode,
    legal_moves,
)


def test_new_board_is_empty_and_in_progress():
    board = Board()
    assert board.snapshot() == (" ",) * 9
    assert board.status().state == "in_progress"
    assert board.available_moves() == list(range(9))


@pytest.mark.parametrize("line", WINNING_LINES)
def test_line_polarity_inverts_under_reverse(line):
    board = Board()
    for index in line:
        board.place(index, "X")

    normal = board.status(RuleMode.NORMAL)
    reverse = board.status(RuleMode.REVERSE)

    assert normal.state == reverse.state == "won"
    assert normal.winner == "X"
    assert reverse.winner == "O"
    assert normal.line == reverse.line == line


def test_full_board_without_line_is_drawn():
    board = Board(cells=list("XOXXOOOXX"))
    assert board.status(RuleMode.NORMAL).state == "drawn"
    assert board.status(RuleMode.REVERSE).state == "drawn"
    assert board.status().winner is None


def test_full_board_with_line_is_won_not_drawn():
    board = Board(cells=list("XXXOOXOXO"))
    status = board.status()
    assert status.state == "won"
    assert status.winner == "X"


def test_place_then_read_reflects_mark():
    board = Board()
    board.place(4, "O")
    assert board.cell(4) == "O"
    assert board.available_moves() == [0, 1, 2, 3, 5, 6, 7, 8]


def test_place_on_occupied_cell_leaves_board_unchanged():
    board = Board()
    board.place(0, "X")
    before = board.snapshot()

    with pytest.raises(OccupiedCell):
        board.place(0, "O")

    assert board.snapshot() == before


@pytest.mark.parametrize("index", [-1, 9, 42])
def test_place_out_of_range(index):
    board = Board()
    with pytest.raises(OutOfRange):
        board.place(index, "X")
    assert board.snapshot() == (" ",) * 9


def test_coordinates_map_row_major():
    assert Board.index_of(0, 0) == 0
    assert Board.index_of(1, 2) == 5
    assert Board.index_of(2, 2) == 8
    with pytest.raises(OutOfRange):
        Board.index_of(3, 0)
    with pytest.raises(OutOfRange):
        Board.index_of(0, -1)


def test_legal_moves_are_ascending_empty_cells():
    cells = tuple("X O  X O ")
    moves = legal_moves(cells)
    assert moves == [1, 3, 4, 6, 8]
    assert moves == sorted(set(moves))
    assert all(cells[i] == " " for i in moves)


def test_render_draws_grid():
    board = Board(cells=list("XO  X   O"))
    assert board.render() == (
        " X | O |  \n-----------\n   | X |  \n-----------\n   |   | O"
    )
