"""Gravity curve, line-clear scoring, and level progression."""

from __future__ import annotations

FPS = 60

# NES-style scoring table: index = lines cleared (1-4)
SCORE_TABLE: dict[int, int] = {
    1: 40,
    2: 100,
    3: 300,
    4: 1200,
}

LINES_PER_LEVEL = 10


def speed_curve(level: int, fps: int = FPS) -> float:
    """Return the number of ticks between gravity drops at a level.

    (0.8 - (level - 1) * 0.007) ** (level - 1) * fps, so level 1 drops once
    every `fps` ticks and higher levels drop faster.

    Raises:
        ValueError: If level is below 1.
    """
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")
    return (0.8 - (level - 1) * 0.007) ** (level - 1) * fps


def calculate_score(
    lines_cleared: int,
    level: int,
    score_table: dict[int, int] | None = None,
) -> int:
    """Calculate the points for clearing lines at a level.

    Args:
        lines_cleared: Number of rows removed by one lock (0-4).
        level: Level at the time of the clear (1-based).
        score_table: Base points per line count. Defaults to SCORE_TABLE.

    Returns:
        Base points multiplied by level, or 0 when nothing was cleared.
    """
    if lines_cleared <= 0:
        return 0
    table = SCORE_TABLE if score_table is None else score_table
    return table.get(lines_cleared, 0) * level


def level_for_lines(total_lines: int, lines_per_level: int = LINES_PER_LEVEL) -> int:
    """Level reached after clearing `total_lines` rows. Starts at 1."""
    return 1 + total_lines // lines_per_level
