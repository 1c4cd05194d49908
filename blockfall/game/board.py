"""
Board logic for a 20x10 grid.

The board is a 2D numpy array (rows x cols) of int8 color tokens:
  - 0 = empty cell
  - 1-7 = piece type ID (used for coloring)

Every function here is pure: boards passed in are never written to, and
boards returned are fresh read-only arrays.
"""

from __future__ import annotations

import numpy as np

from blockfall.game.pieces import COLORS, EMPTY, Piece

BOARD_ROWS = 20
BOARD_COLS = 10


def empty_board() -> np.ndarray:
    """Return a new read-only board with every cell empty."""
    board = np.full((BOARD_ROWS, BOARD_COLS), EMPTY, dtype=np.int8)
    board.setflags(write=False)
    return board


def validate_board(board: np.ndarray) -> np.ndarray:
    """Check a board's shape and cell values.

    Returns:
        A read-only int8 view of the board.

    Raises:
        ValueError: If the board is not 20x10 or holds unknown color tokens.
    """
    board = np.asarray(board, dtype=np.int8)
    if board.shape != (BOARD_ROWS, BOARD_COLS):
        raise ValueError(
            f"Board must be {BOARD_ROWS}x{BOARD_COLS}, got shape {board.shape}"
        )
    unknown = set(np.unique(board).tolist()) - {EMPTY} - set(COLORS)
    if unknown:
        raise ValueError(f"Board holds unknown color tokens: {sorted(unknown)}")
    if board.flags.writeable:
        board = board.copy()
        board.setflags(write=False)
    return board


def is_valid_move(board: np.ndarray, matrix: np.ndarray, target_row: int, target_col: int) -> bool:
    """Check whether a piece matrix anchored at (target_row, target_col) fits.

    A position is valid if every filled cell of the matrix:
      - Is within the side walls (0 <= col < BOARD_COLS) and above the floor
        (row < BOARD_ROWS). Rows above the top are allowed so a piece can
        spawn partially hidden.
      - Does not overlap a filled board cell, for rows that are on the board.

    Args:
        board: Board grid.
        matrix: Piece matrix of color tokens.
        target_row: Board row of the matrix's top-left corner.
        target_col: Board column of the matrix's top-left corner.

    Returns:
        True if the position is valid, False otherwise.
    """
    rows, cols = matrix.shape
    for r in range(rows):
        for c in range(cols):
            if matrix[r, c] == EMPTY:
                continue
            board_row = target_row + r
            board_col = target_col + c
            # Check boundaries
            if board_col < 0 or board_col >= BOARD_COLS:
                return False
            if board_row >= BOARD_ROWS:
                return False
            # Check collision with existing blocks
            if board_row >= 0 and board[board_row, board_col] != EMPTY:
                return False
    return True


def lock_piece(board: np.ndarray, piece: Piece) -> np.ndarray:
    """Write a piece's filled cells into a copy of the board.

    Cells above the top row are dropped. Does NOT check validity first;
    the caller must ensure the position is valid.

    Returns:
        The new board.
    """
    locked = board.copy()
    rows, cols = piece.matrix.shape
    for r in range(rows):
        for c in range(cols):
            token = piece.matrix[r, c]
            if token == EMPTY:
                continue
            board_row = piece.row + r
            if board_row < 0:
                continue
            locked[board_row, piece.col + c] = token
    locked.setflags(write=False)
    return locked


def find_full_rows(board: np.ndarray) -> list[int]:
    """Return the indices of rows where every cell is filled, top to bottom."""
    return [r for r in range(board.shape[0]) if np.all(board[r] != EMPTY)]


def clear_rows(board: np.ndarray) -> tuple[np.ndarray, int]:
    """Remove all full rows and shift everything above them down.

    Returns:
        A tuple of (new board, number of rows cleared).
    """
    full_rows = find_full_rows(board)
    if not full_rows:
        return board, 0

    cleared = len(full_rows)
    # Remove full rows and prepend empty rows at the top
    mask = np.ones(board.shape[0], dtype=bool)
    mask[full_rows] = False
    remaining = board[mask]
    empty_rows = np.full((cleared, board.shape[1]), EMPTY, dtype=np.int8)
    compacted = np.vstack([empty_rows, remaining])
    compacted.setflags(write=False)
    return compacted, cleared
