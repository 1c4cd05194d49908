"""
Game reducer — movement, rotation, gravity, and the turn resolver.

The engine is a pure function of (GameState, Command): every operation
returns a new GameState and never mutates its input. Randomness is confined
to the PieceSource handed to the functions that spawn pieces, so everything
else is deterministic.

Invalid moves are rejected silently: the input state is returned unchanged.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass, field

import numpy as np

from blockfall.config import EngineConfig
from blockfall.game.board import (
    clear_rows,
    empty_board,
    is_valid_move,
    lock_piece,
    validate_board,
)
from blockfall.game.pieces import Piece, PieceSource, RandomPieceSource, rotate_matrix, spawn_piece
from blockfall.game.rules import calculate_score, level_for_lines, speed_curve

logger = logging.getLogger(__name__)


class Command(enum.IntEnum):
    """Inputs accepted by the reducer."""
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    MOVE_DOWN = 2
    ROTATE = 3
    TICK = 4


@dataclass(frozen=True, eq=False)
class GameState:
    """Immutable snapshot of a game.

    Attributes:
        score: Current score.
        level: Current level (starts at 1).
        board: 20x10 read-only grid of color tokens.
        piece: Active piece.
        next_piece: Piece that becomes active on the next spawn.
        gravity: Ticks per automatic drop; always speed_curve(level).
        lines: Total rows cleared since the game started.
        drop_counter: Ticks elapsed since the last automatic drop.
        game_over: Set when a spawned piece has no room. The state is then frozen.
        source: Piece source the game draws from. Carried from state to state
            so every spawn continues the same stream; not part of equality.
    """

    score: int
    level: int
    board: np.ndarray
    piece: Piece
    next_piece: Piece
    gravity: float
    lines: int = 0
    drop_counter: int = 0
    game_over: bool = False
    source: PieceSource | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.level < 1:
            raise ValueError(f"Level must be >= 1, got {self.level}")
        if self.score < 0 or self.lines < 0 or self.drop_counter < 0:
            raise ValueError("score, lines and drop_counter must be non-negative")
        object.__setattr__(self, "board", validate_board(self.board))
        if not self.game_over and not is_valid_move(
            self.board, self.piece.matrix, self.piece.row, self.piece.col
        ):
            raise ValueError(
                f"Active piece at ({self.piece.row}, {self.piece.col}) overlaps the board"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            self.score == other.score
            and self.level == other.level
            and self.lines == other.lines
            and self.gravity == other.gravity
            and self.drop_counter == other.drop_counter
            and self.game_over == other.game_over
            and self.piece == other.piece
            and self.next_piece == other.next_piece
            and np.array_equal(self.board, other.board)
        )


def new_game(
    source: PieceSource | None = None,
    config: EngineConfig | None = None,
) -> GameState:
    """Create the starting state: empty board, level 1, score 0.

    Args:
        source: Piece source for the first two pieces. Defaults to a
            RandomPieceSource seeded from config.seed.
        config: Engine configuration. Defaults to EngineConfig().

    Returns:
        A fresh GameState.
    """
    config = config or EngineConfig()
    if source is None:
        source = RandomPieceSource(config.seed)
    piece = spawn_piece(source, config.spawn_row, config.spawn_col)
    next_piece = spawn_piece(source, config.preview_row, config.preview_col)
    return GameState(
        score=0,
        level=1,
        board=empty_board(),
        piece=piece,
        next_piece=next_piece,
        gravity=speed_curve(1, config.fps),
        source=source,
    )


def _try_place(state: GameState, matrix: np.ndarray, row: int, col: int) -> GameState:
    """Commit the piece at (row, col) with `matrix` if it fits, else no-op."""
    if state.game_over:
        return state
    if not is_valid_move(state.board, matrix, row, col):
        return state
    return dataclasses.replace(state, piece=Piece(matrix, row, col))


def move_down(state: GameState) -> GameState:
    """Move the active piece down one row if possible."""
    piece = state.piece
    return _try_place(state, piece.matrix, piece.row + 1, piece.col)


def move_left(state: GameState) -> GameState:
    """Move the active piece left one column if possible."""
    piece = state.piece
    return _try_place(state, piece.matrix, piece.row, piece.col - 1)


def move_right(state: GameState) -> GameState:
    """Move the active piece right one column if possible."""
    piece = state.piece
    return _try_place(state, piece.matrix, piece.row, piece.col + 1)


def rotate(state: GameState) -> GameState:
    """Rotate the active piece clockwise in place.

    There are no wall kicks: a rotation that does not fit at the current
    anchor is rejected whole.
    """
    piece = state.piece
    return _try_place(state, rotate_matrix(piece.matrix), piece.row, piece.col)


def resolve_turn(
    state: GameState,
    source: PieceSource | None = None,
    config: EngineConfig | None = None,
) -> GameState:
    """Lock the active piece, clear full rows, and spawn the next piece.

    Scoring uses the level in effect when the rows are cleared. If the
    freshly spawned piece does not fit, the returned state is game over.

    Args:
        state: State whose active piece is resting.
        source: Piece source for the new preview piece. Defaults to the
            state's own source, or a RandomPieceSource seeded from
            config.seed that the returned state then carries.
        config: Engine configuration.

    Returns:
        The state at the start of the next turn.
    """
    if state.game_over:
        return state
    config = config or EngineConfig()
    if source is None:
        source = state.source
    if source is None:
        source = RandomPieceSource(config.seed)

    board = lock_piece(state.board, state.piece)
    board, cleared = clear_rows(board)

    score = state.score + calculate_score(cleared, state.level, config.score_table)
    lines = state.lines + cleared
    level = level_for_lines(lines, config.lines_per_level)
    gravity = state.gravity
    if cleared:
        logger.debug("Cleared %d row(s), score %d", cleared, score)
    if level != state.level:
        gravity = speed_curve(level, config.fps)
        logger.debug("Level %d -> %d, gravity %.2f ticks", state.level, level, gravity)

    piece = state.next_piece.moved(config.spawn_row, config.spawn_col)
    next_piece = spawn_piece(source, config.preview_row, config.preview_col)
    game_over = not is_valid_move(board, piece.matrix, piece.row, piece.col)
    if game_over:
        logger.info("Game over: no room to spawn at (%d, %d), final score %d",
                    piece.row, piece.col, score)

    return GameState(
        score=score,
        level=level,
        board=board,
        piece=piece,
        next_piece=next_piece,
        gravity=gravity,
        lines=lines,
        drop_counter=0,
        game_over=game_over,
        source=source,
    )


def tick(
    state: GameState,
    source: PieceSource | None = None,
    config: EngineConfig | None = None,
) -> GameState:
    """Advance the gravity countdown by one tick.

    When `gravity` ticks have elapsed the piece drops one row; if it is
    already resting, the turn resolves instead.
    """
    if state.game_over:
        return state
    counter = state.drop_counter + 1
    if counter < state.gravity:
        return dataclasses.replace(state, drop_counter=counter)

    dropped = move_down(state)
    if dropped.piece.row == state.piece.row:
        return resolve_turn(state, source, config)
    return dataclasses.replace(dropped, drop_counter=0)


def apply(
    state: GameState,
    command: Command | int,
    source: PieceSource | None = None,
    config: EngineConfig | None = None,
) -> GameState:
    """Apply one command to a state.

    Args:
        state: Current state.
        command: A Command value.
        source: Piece source used if the command spawns a piece. Defaults
            to the state's own source.
        config: Engine configuration.

    Returns:
        The next state; the input itself when the command has no effect.

    Raises:
        ValueError: If `command` is not a Command value.
    """
    command = Command(command)
    if state.game_over:
        return state

    if command == Command.MOVE_LEFT:
        return move_left(state)
    elif command == Command.MOVE_RIGHT:
        return move_right(state)
    elif command == Command.MOVE_DOWN:
        return move_down(state)
    elif command == Command.ROTATE:
        return rotate(state)
    return tick(state, source, config)


class GameEngine:
    """Binds a configuration and piece source to the reducer functions.

    Attributes:
        config: Engine configuration.
        source: Piece source used for every spawn.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        source: PieceSource | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.source = source if source is not None else RandomPieceSource(self.config.seed)

    def new_game(self) -> GameState:
        """Create a starting state that draws from this engine's source."""
        return new_game(self.source, self.config)

    def apply(self, state: GameState, command: Command | int) -> GameState:
        """Apply one command with this engine's configuration and source."""
        return apply(state, command, self.source, self.config)

    def resolve_turn(self, state: GameState) -> GameState:
        """Lock the active piece and spawn the next one."""
        return resolve_turn(state, self.source, self.config)
