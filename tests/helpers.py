from __future__ import annotations

import numpy as np

from blockfall.game.board import BOARD_COLS, BOARD_ROWS
from blockfall.game.engine import GameState
from blockfall.game.pieces import EMPTY, PIECES_BY_NAME, Piece, colorize
from blockfall.game.rules import speed_curve


def make_board(filled: dict[int, list[int]] | None = None, token: int = 1) -> np.ndarray:
    """Build a board with `token` in the given {row: [cols]} cells."""
    board = np.full((BOARD_ROWS, BOARD_COLS), EMPTY, dtype=np.int8)
    for row, cols in (filled or {}).items():
        for col in cols:
            board[row, col] = token
    board.setflags(write=False)
    return board


def make_piece(name: str, row: int, col: int) -> Piece:
    return Piece(colorize(PIECES_BY_NAME[name]), row, col)


def make_state(
    name: str = "O",
    row: int = 5,
    col: int = 4,
    board: np.ndarray | None = None,
    next_name: str = "T",
    level: int = 1,
    **kwargs,
) -> GameState:
    return GameState(
        score=kwargs.pop("score", 0),
        level=level,
        board=make_board() if board is None else board,
        piece=make_piece(name, row, col),
        next_piece=make_piece(next_name, 0, 1),
        gravity=speed_curve(level),
        **kwargs,
    )
