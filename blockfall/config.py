"""
Engine configuration and YAML loading.

Every field has a default matching classic behavior, so a config file only
needs to list the values it changes:

    fps: 60
    lines_per_level: 10
    score_table: {1: 40, 2: 100, 3: 300, 4: 1200}
"""

from __future__ import annotations

import dataclasses
import pathlib
from dataclasses import dataclass, field
from typing import Any

import yaml

from blockfall.game.rules import FPS, LINES_PER_LEVEL, SCORE_TABLE


def _is_int(value: Any) -> bool:
    # YAML booleans load as bool, which subclasses int
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable engine parameters.

    Attributes:
        fps: Tick rate the gravity curve is expressed in (ticks per second).
        tick_rate: Rate in Hz at which a session delivers Tick commands.
        lines_per_level: Cleared rows needed per level.
        score_table: Base points per number of rows cleared in one lock.
        spawn_row: Anchor row for a newly active piece.
        spawn_col: Anchor column for a newly active piece.
        preview_row: Anchor row for the next-piece preview.
        preview_col: Anchor column for the next-piece preview.
        seed: Seed for the default random piece source (None = unseeded).
    """

    fps: int = FPS
    tick_rate: int = FPS
    lines_per_level: int = LINES_PER_LEVEL
    score_table: dict[int, int] = field(default_factory=lambda: dict(SCORE_TABLE))
    spawn_row: int = -1
    spawn_col: int = 3
    preview_row: int = 0
    preview_col: int = 1
    seed: int | None = None

    def __post_init__(self) -> None:
        for name in ("fps", "tick_rate", "lines_per_level"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        for name in ("spawn_row", "spawn_col", "preview_row", "preview_col"):
            value = getattr(self, name)
            if not _is_int(value):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ValueError(f"seed must be an integer or null, got {self.seed!r}")
        if not isinstance(self.score_table, dict):
            raise ValueError(f"score_table must be a mapping, got {self.score_table!r}")
        if not all(_is_int(k) and _is_int(v) for k, v in self.score_table.items()):
            raise ValueError(f"score_table keys and values must be integers: {self.score_table!r}")
        table = dict(self.score_table)
        if any(k <= 0 or v < 0 for k, v in table.items()):
            raise ValueError(f"Invalid score_table: {self.score_table!r}")
        object.__setattr__(self, "score_table", table)

    @classmethod
    def from_dict(cls, values: dict[str, Any] | None) -> EngineConfig:
        """Build a config from a plain dict, rejecting unknown keys."""
        values = dict(values or {})
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        return cls(**values)


def load_config(config_path: str | pathlib.Path) -> EngineConfig:
    """Load engine configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        The parsed EngineConfig. An empty file yields the defaults.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the file holds unknown keys or invalid values.
    """
    config_path = pathlib.Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Config file must hold a mapping: {config_path}")
    return EngineConfig.from_dict(raw)
