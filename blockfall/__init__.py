"""Deterministic game-state core for a falling-block puzzle."""

from blockfall.game import Command, GameEngine, GameState, apply, new_game
from blockfall.config import EngineConfig, load_config
from blockfall.session import GameSession

__all__ = [
    "Command",
    "GameEngine",
    "GameState",
    "apply",
    "new_game",
    "EngineConfig",
    "load_config",
    "GameSession",
]
