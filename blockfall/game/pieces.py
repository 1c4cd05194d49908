"""
Tetromino catalog, color tokens, and the injectable piece source.

Each of the 7 shapes is a square binary template in its spawn orientation
plus a fixed color. On the board and inside a piece footprint, cells hold
color tokens:
  - 0 = EMPTY (no color)
  - 1-7 = piece type ID (used for coloring)

Coordinate convention:
  - Row 0 is the top of a matrix and row increases downward.
  - Column 0 is the left edge and column increases rightward.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np

EMPTY = 0

# =============================================================================
# Piece Colors — standard Tetris guideline colors (RGB)
# =============================================================================

COLOR_CYAN   = (0, 255, 255)    # I
COLOR_BLUE   = (0, 0, 255)      # J
COLOR_ORANGE = (255, 165, 0)    # L
COLOR_YELLOW = (255, 255, 0)    # O
COLOR_GREEN  = (0, 255, 0)      # S
COLOR_RED    = (255, 0, 0)      # Z
COLOR_PURPLE = (128, 0, 128)    # T

# =============================================================================
# Tetromino Definitions
# =============================================================================
# Templates are spawn orientation only; other orientations come from
# rotate_matrix(). 1 marks a filled cell.

I_PIECE: dict = {
    "id": 1,
    "name": "I",
    "color": COLOR_CYAN,
    "shape": np.array([
        [0, 0, 0, 0],
        [1, 1, 1, 1],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ], dtype=np.int8),
}

J_PIECE: dict = {
    "id": 2,
    "name": "J",
    "color": COLOR_BLUE,
    "shape": np.array([
        [1, 0, 0],
        [1, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
}

L_PIECE: dict = {
    "id": 3,
    "name": "L",
    "color": COLOR_ORANGE,
    "shape": np.array([
        [0, 0, 1],
        [1, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
}

O_PIECE: dict = {
    "id": 4,
    "name": "O",
    "color": COLOR_YELLOW,
    "shape": np.array([
        [1, 1],
        [1, 1],
    ], dtype=np.int8),
}

S_PIECE: dict = {
    "id": 5,
    "name": "S",
    "color": COLOR_GREEN,
    "shape": np.array([
        [0, 1, 1],
        [1, 1, 0],
        [0, 0, 0],
    ], dtype=np.int8),
}

Z_PIECE: dict = {
    "id": 6,
    "name": "Z",
    "color": COLOR_RED,
    "shape": np.array([
        [1, 1, 0],
        [0, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
}

T_PIECE: dict = {
    "id": 7,
    "name": "T",
    "color": COLOR_PURPLE,
    "shape": np.array([
        [0, 1, 0],
        [1, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
}

# =============================================================================
# Ordered list of all piece types
# =============================================================================

PIECE_TYPES: list[dict] = [I_PIECE, J_PIECE, L_PIECE, O_PIECE, S_PIECE, Z_PIECE, T_PIECE]

PIECES_BY_NAME: dict[str, dict] = {p["name"]: p for p in PIECE_TYPES}

# Color token -> RGB, for renderers.
COLORS: dict[int, tuple[int, int, int]] = {p["id"]: p["color"] for p in PIECE_TYPES}

for _piece in PIECE_TYPES:
    _piece["shape"].setflags(write=False)


def color_of(token: int) -> tuple[int, int, int] | None:
    """Return the RGB triple for a color token, or None for EMPTY.

    Raises:
        ValueError: If the token is not EMPTY and not a catalog color.
    """
    token = int(token)
    if token == EMPTY:
        return None
    try:
        return COLORS[token]
    except KeyError:
        raise ValueError(f"Unknown color token: {token}") from None


def as_matrix(rows: Sequence[Sequence[int]] | np.ndarray) -> np.ndarray:
    """Build a read-only int8 matrix from nested rows.

    Args:
        rows: Nested sequences (or an array) of color tokens.

    Returns:
        A 2D numpy array of dtype int8 with writes disabled.

    Raises:
        ValueError: If the rows are ragged, empty, or not two-dimensional.
    """
    if not isinstance(rows, np.ndarray):
        rows = list(rows)
        if not rows:
            raise ValueError("Matrix must have at least one row")
        widths = {len(r) for r in rows}
        if len(widths) != 1:
            raise ValueError(f"Matrix rows have inconsistent lengths: {sorted(widths)}")
    matrix = np.array(rows, dtype=np.int8)
    if matrix.ndim != 2 or matrix.size == 0:
        raise ValueError(f"Matrix must be a non-empty 2D grid, got shape {matrix.shape}")
    matrix.setflags(write=False)
    return matrix


def rotate_matrix(matrix: np.ndarray) -> np.ndarray:
    """Rotate a square matrix 90 degrees clockwise.

    new[i][j] = old[N - j][i] where N = side - 1.
    """
    n = matrix.shape[0] - 1
    rotated = np.empty_like(matrix)
    for i in range(matrix.shape[0]):
        for j in range(matrix.shape[1]):
            rotated[i, j] = matrix[n - j, i]
    rotated.setflags(write=False)
    return rotated


@dataclass(frozen=True, eq=False)
class Piece:
    """A piece footprint anchored on the board.

    Attributes:
        matrix: Square matrix of color tokens.
        row: Board row of the matrix's top-left corner (may be negative).
        col: Board column of the matrix's top-left corner.
    """

    matrix: np.ndarray
    row: int
    col: int

    def __post_init__(self) -> None:
        matrix = as_matrix(self.matrix)
        rows, cols = matrix.shape
        if rows != cols:
            raise ValueError(f"Piece matrix must be square, got {rows}x{cols}")
        unknown = set(np.unique(matrix).tolist()) - {EMPTY} - set(COLORS)
        if unknown:
            raise ValueError(f"Piece matrix holds unknown color tokens: {sorted(unknown)}")
        object.__setattr__(self, "matrix", matrix)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.row == other.row
            and self.col == other.col
            and np.array_equal(self.matrix, other.matrix)
        )

    def moved(self, row: int, col: int) -> Piece:
        """Return the same footprint re-anchored at (row, col)."""
        return Piece(self.matrix, row, col)

    @property
    def color(self) -> int:
        """The piece's color token (its only non-empty value)."""
        return int(self.matrix.max())


class PieceSource(Protocol):
    """Capability that picks the shape of the next piece."""

    def next_piece(self) -> dict:
        ...


class RandomPieceSource:
    """Uniform random selection over the 7 piece types.

    Args:
        seed: Optional seed for reproducible sequences.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def next_piece(self) -> dict:
        return self._rng.choice(PIECE_TYPES)


class ScriptedPieceSource:
    """Yields piece types by name in a fixed, repeating order.

    Used by hosts that replay a known sequence, and by tests.
    """

    def __init__(self, names: Sequence[str]) -> None:
        if not names:
            raise ValueError("ScriptedPieceSource needs at least one piece name")
        unknown = [n for n in names if n not in PIECES_BY_NAME]
        if unknown:
            raise ValueError(f"Unknown piece names: {unknown}")
        self._names = list(names)
        self._index = 0

    def next_piece(self) -> dict:
        name = self._names[self._index % len(self._names)]
        self._index += 1
        return PIECES_BY_NAME[name]


def colorize(piece_type: dict) -> np.ndarray:
    """Convert a piece type's binary template into a color matrix."""
    shape = piece_type["shape"]
    return as_matrix(np.where(shape != 0, piece_type["id"], EMPTY))


def spawn_piece(source: PieceSource | None = None, row: int = 0, col: int = 0) -> Piece:
    """Create a new piece of a randomly selected type.

    Args:
        source: Piece source to draw from. A fresh RandomPieceSource when None.
        row: Anchor row for the new piece.
        col: Anchor column for the new piece.

    Returns:
        A Piece whose filled cells carry the chosen type's color token.
    """
    if source is None:
        source = RandomPieceSource()
    return Piece(colorize(source.next_piece()), row, col)
