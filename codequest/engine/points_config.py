"""
codequest.engine.points_config — PointsConfig value object
===========================================================

The per-company points configuration: base points per activity kind, the
AI-generated code modifier, per-organization base-point overrides and the
level thresholds.  Updates replace the whole structure atomically and are
stamped with an integer ``version`` for optimistic concurrency.

JSON form (camelCase, as exchanged with the dashboard)::

    {
        "basePoints": {"CodeCheckin": 10, "PullRequest": 25, ...},
        "aiModifier": 0.75,
        "orgOverrides": {"<org uuid>": {"BugFix": 15}},
        "levelThresholds": {"1": 0, "2": 500, ...},
        "version": 3
    }

:meth:`PointsConfig.from_dict` never validates; run the result through
:func:`codequest.engine.validator.validate` before trusting it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from codequest.constants import DEFAULT_AI_MODIFIER
from codequest.engine.activities import ActivityKind, default_base_points, is_valid_kind
from codequest.engine.levels import DEFAULT_LEVEL_THRESHOLDS

__all__ = [
    "PointsConfig",
    "ValidatedPointsConfig",
    "default_points_config",
]


@dataclass(frozen=True)
class PointsConfig:
    """A candidate or stored points configuration.

    Values are deliberately typed loosely: an instance built from request
    data may hold anything until the validator has looked at it.
    """

    base_points: Mapping[Any, Any]
    ai_modifier: Any = DEFAULT_AI_MODIFIER
    org_overrides: Mapping[Any, Any] = field(default_factory=dict)
    level_thresholds: Mapping[Any, Any] = field(
        default_factory=lambda: dict(DEFAULT_LEVEL_THRESHOLDS)
    )
    version: Any = 1

    # -------------------------------------------------------------------
    # JSON conversion
    # -------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PointsConfig:
        """Build a config from parsed JSON.  Lenient: never raises on bad values."""
        thresholds = data.get("levelThresholds")
        return cls(
            base_points=_coerce_kind_keys(data.get("basePoints", {})),
            ai_modifier=data.get("aiModifier", DEFAULT_AI_MODIFIER),
            org_overrides=_coerce_overrides(data.get("orgOverrides", {})),
            level_thresholds=(
                dict(DEFAULT_LEVEL_THRESHOLDS)
                if thresholds is None
                else _coerce_level_keys(thresholds)
            ),
            version=data.get("version", 1),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "basePoints": {str(k): v for k, v in self.base_points.items()},
            "aiModifier": self.ai_modifier,
            "orgOverrides": {
                str(org): {str(k): v for k, v in table.items()}
                for org, table in self.org_overrides.items()
            },
            "levelThresholds": {
                str(level): points for level, points in self.level_thresholds.items()
            },
            "version": self.version,
        }


@dataclass(frozen=True)
class ValidatedPointsConfig(PointsConfig):
    """A :class:`PointsConfig` that passed every validation rule.

    Only :func:`codequest.engine.validator.validate` creates these; holders
    may resolve and calculate against it without re-validating.
    """


def default_points_config() -> PointsConfig:
    """The configuration a freshly provisioned company starts with."""
    return PointsConfig(
        base_points=default_base_points(),
        ai_modifier=DEFAULT_AI_MODIFIER,
        org_overrides={},
        level_thresholds=dict(DEFAULT_LEVEL_THRESHOLDS),
        version=1,
    )


# ---------------------------------------------------------------------------
# Key coercion helpers
# ---------------------------------------------------------------------------
def _coerce_kind_keys(table: Any) -> Any:
    """Turn recognized kind strings into :class:`ActivityKind` keys."""
    if not isinstance(table, Mapping):
        return table
    return {
        (ActivityKind(k) if is_valid_kind(k) else k): v
        for k, v in table.items()
    }


def _coerce_overrides(overrides: Any) -> Any:
    if not isinstance(overrides, Mapping):
        return overrides
    return {org: _coerce_kind_keys(table) for org, table in overrides.items()}


def _coerce_level_keys(thresholds: Any) -> Any:
    """JSON object keys are strings; map ``"2"`` back to ``2``."""
    if not isinstance(thresholds, Mapping):
        return thresholds
    coerced: dict[Any, Any] = {}
    for level, points in thresholds.items():
        if isinstance(level, str) and level.strip().isdigit():
            level = int(level)
        coerced[level] = points
    return coerced
