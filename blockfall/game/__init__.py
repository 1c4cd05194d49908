"""Game logic: piece catalog, board, rules, and the reducer."""

from blockfall.game.pieces import (
    COLORS,
    EMPTY,
    PIECE_TYPES,
    Piece,
    PieceSource,
    RandomPieceSource,
    ScriptedPieceSource,
    spawn_piece,
)
from blockfall.game.board import BOARD_COLS, BOARD_ROWS, is_valid_move
from blockfall.game.rules import speed_curve
from blockfall.game.engine import Command, GameEngine, GameState, apply, new_game

__all__ = [
    "COLORS",
    "EMPTY",
    "PIECE_TYPES",
    "Piece",
    "PieceSource",
    "RandomPieceSource",
    "ScriptedPieceSource",
    "spawn_piece",
    "BOARD_COLS",
    "BOARD_ROWS",
    "is_valid_move",
    "speed_curve",
    "Command",
    "GameEngine",
    "GameState",
    "apply",
    "new_game",
]
