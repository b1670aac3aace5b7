"""
codequest.engine.levels — Level thresholds and progression
===========================================================

Levels are defined by a sparse threshold table (level → total points
required).  The table is validated as a whole: level 1 starts at zero and
thresholds strictly increase with the level number.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

__all__ = [
    "DEFAULT_LEVEL_THRESHOLDS",
    "LevelProgress",
    "level_progress",
]

DEFAULT_LEVEL_THRESHOLDS: dict[int, float] = {
    1: 0,
    2: 500,
    3: 1000,
    4: 2000,
    5: 3500,
    10: 10000,
    15: 25000,
}


@dataclass(frozen=True, slots=True)
class LevelProgress:
    """Where a team member stands relative to the level thresholds."""

    current_level: int
    total_points: int
    previous_level_threshold: float
    next_level_threshold: float
    points_to_next_level: float
    progress_percentage: float


def level_progress(
    total_points: int,
    thresholds: Mapping[int, float] | None = None,
) -> LevelProgress:
    """Compute the level and progress for *total_points*.

    Past the last defined threshold the next threshold is twice the last
    one and the percentage caps at 100.

    Raises
    ------
    ValueError
        If *total_points* is negative or *thresholds* is empty.
    """
    if total_points < 0:
        raise ValueError("Total points cannot be negative")

    table = thresholds if thresholds is not None else DEFAULT_LEVEL_THRESHOLDS
    ordered = sorted(table.items())
    if not ordered:
        raise ValueError("Level thresholds cannot be empty")

    current_level, previous = ordered[0]
    next_threshold = ordered[1][1] if len(ordered) > 1 else previous * 2
    for index, (level, required) in enumerate(ordered):
        if total_points < required:
            break
        current_level = level
        previous = required
        if index + 1 < len(ordered):
            next_threshold = ordered[index + 1][1]
        else:
            next_threshold = previous * 2

    span = next_threshold - previous
    if span > 0:
        percentage = max(0.0, min(100.0, (total_points - previous) / span * 100))
    else:
        percentage = 100.0

    return LevelProgress(
        current_level=current_level,
        total_points=total_points,
        previous_level_threshold=previous,
        next_level_threshold=next_threshold,
        points_to_next_level=max(next_threshold - total_points, 0),
        progress_percentage=round(percentage, 2),
    )
