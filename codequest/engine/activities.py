"""
codequest.engine.activities — ActivityKind registry and ActivityRecord
======================================================================

Single source of truth for the recognized Azure DevOps activity kinds and
their system-wide default base points.  Every activity is normalized into
an :class:`ActivityRecord` before the points pipeline processes it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = [
    "ActivityKind",
    "ActivityRecord",
    "DEFAULT_BASE_POINTS",
    "default_base_points",
    "is_valid_kind",
    "parse_kind",
]


class ActivityKind(enum.StrEnum):
    """All activity kinds that earn points."""
    CODE_CHECKIN = "CodeCheckin"
    PULL_REQUEST = "PullRequest"
    CODE_REVIEW = "CodeReview"
    BUG_FIX = "BugFix"
    STORY_CLOSURE = "StoryClosure"


# ---------------------------------------------------------------------------
# Default base points per activity kind
# ---------------------------------------------------------------------------
DEFAULT_BASE_POINTS: dict[ActivityKind, float] = {
    ActivityKind.CODE_CHECKIN: 10,
    ActivityKind.PULL_REQUEST: 25,
    ActivityKind.CODE_REVIEW: 15,
    ActivityKind.BUG_FIX: 20,
    ActivityKind.STORY_CLOSURE: 30,
}

_KIND_VALUES: frozenset[str] = frozenset(k.value for k in ActivityKind)


def default_base_points() -> dict[ActivityKind, float]:
    """Return a fresh copy of the canonical default base-points table."""
    return dict(DEFAULT_BASE_POINTS)


def is_valid_kind(value: object) -> bool:
    """Membership test used by validators and deserializers."""
    return isinstance(value, str) and value in _KIND_VALUES


def parse_kind(value: object) -> ActivityKind:
    """Convert a raw value into an :class:`ActivityKind`.

    Raises
    ------
    ValueError
        If *value* is not a recognized kind.
    """
    if not is_valid_kind(value):
        raise ValueError(
            f"Unknown activity kind: {value!r}. "
            f"Expected one of {sorted(_KIND_VALUES)}"
        )
    return ActivityKind(value)


# ---------------------------------------------------------------------------
# ActivityRecord — input to a points calculation
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ActivityRecord:
    """One tracked activity, as delivered by the activity-tracking side.

    The points engine only reads it.
    """

    kind: ActivityKind
    is_ai_generated: bool
    organization_id: str
    company_id: str
