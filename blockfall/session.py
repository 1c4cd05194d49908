"""
Host-side session driver.

A GameSession owns the single authoritative GameState for one game and is
the only place commands reach the reducer, so ticks and user commands are
applied strictly one after another. Real time is converted into Tick
commands at the configured tick rate using an injected monotonic clock.
"""

from __future__ import annotations

import logging
import math
import pathlib
import time
from typing import Callable

from blockfall.config import EngineConfig, load_config
from blockfall.game.engine import Command, GameEngine, GameState
from blockfall.game.pieces import PieceSource

logger = logging.getLogger(__name__)


class GameSession:
    """One game driven by a host's input and frame loop.

    Attributes:
        engine: Engine holding the configuration and piece source.
        state: Current game state.
        ticks: Tick commands delivered since the session started.
    """

    def __init__(
        self,
        engine: GameEngine | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.engine = engine or GameEngine()
        self._clock = clock
        self.state: GameState = self.engine.new_game()
        self.ticks = 0
        self._started_at = self._clock()
        logger.info("Session started (tick rate %d Hz)", self.engine.config.tick_rate)

    @classmethod
    def from_config_file(
        cls,
        config_path: str | pathlib.Path,
        source: PieceSource | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> GameSession:
        """Create a session from a YAML config file."""
        config: EngineConfig = load_config(config_path)
        return cls(GameEngine(config, source), clock)

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    def send(self, command: Command | int) -> GameState:
        """Apply a user command immediately and return the new state."""
        self.state = self.engine.apply(self.state, command)
        return self.state

    def advance(self, now: float | None = None) -> int:
        """Deliver every Tick that is due at time `now`.

        Args:
            now: Clock reading in seconds. Read from the clock when None.

        Returns:
            Number of ticks applied by this call.
        """
        if now is None:
            now = self._clock()
        due = math.floor((now - self._started_at) * self.engine.config.tick_rate)
        applied = 0
        while self.ticks < due and not self.state.game_over:
            self.state = self.engine.apply(self.state, Command.TICK)
            self.ticks += 1
            applied += 1
            if self.state.game_over:
                logger.info("Session over after %d ticks, score %d", self.ticks, self.state.score)
        return applied

    def restart(self) -> GameState:
        """Start a new game on the same engine, resetting the clock."""
        self.state = self.engine.new_game()
        self.ticks = 0
        self._started_at = self._clock()
        return self.state
