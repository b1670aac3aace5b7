"""
codequest.engine.validator — PointsConfig validation
=====================================================

Gate-keeps every write of a :class:`PointsConfig`.  Validation never fails
fast: each rule reports every violation it finds, and :func:`validate`
returns the complete batch so a settings screen can show every problem in
one round trip.

Rules (one error per independent violation):

- ``basePoints`` covers every :class:`ActivityKind`, with no unknown keys
- each base value is a finite number in [5, 100]
- no base value drops below 50% of the system default for its kind
- ``aiModifier`` is a finite number in [0.5, 1.0]
- ``orgOverrides`` keys are UUID-v4 organization ids, and each override
  table holds known kinds with finite values in [5, 100]
- ``levelThresholds`` start at 0 for level 1 and strictly increase
- ``version`` is a positive integer
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from codequest.constants import (
    DEFAULT_FLOOR_RATIO,
    MAX_AI_MODIFIER,
    MAX_LEVEL,
    MAX_POINTS_PER_ACTIVITY,
    MIN_AI_MODIFIER,
    MIN_LEVEL,
    MIN_POINTS_PER_ACTIVITY,
    is_finite_number,
    is_uuid_v4,
)
from codequest.engine.activities import (
    DEFAULT_BASE_POINTS,
    ActivityKind,
    is_valid_kind,
)
from codequest.engine.points_config import PointsConfig, ValidatedPointsConfig

logger = logging.getLogger(__name__)

__all__ = [
    "RULES",
    "ValidationError",
    "ValidationResult",
    "validate",
]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One violated rule.  ``field`` is a dotted path into the JSON form."""

    field: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Either a :class:`ValidatedPointsConfig` or the full list of errors."""

    config: ValidatedPointsConfig | None
    errors: tuple[ValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.config is not None and not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.ok,
            "errors": [e.to_dict() for e in self.errors],
        }


Rule = Callable[[PointsConfig], Iterator[ValidationError]]


# ---------------------------------------------------------------------------
# Base points
# ---------------------------------------------------------------------------
def check_base_points_keys(config: PointsConfig) -> Iterator[ValidationError]:
    table = config.base_points
    if not isinstance(table, Mapping):
        yield ValidationError(
            "basePoints", "invalid_table", "Base points must be an object keyed by activity kind"
        )
        return
    for kind in ActivityKind:
        if kind not in table:
            yield ValidationError(
                f"basePoints.{kind.value}", "missing_kind",
                f"Base points for {kind.value} must be defined",
            )
    for key in table:
        if not is_valid_kind(key):
            yield ValidationError(
                f"basePoints.{key}", "unknown_kind", f"Unknown activity kind: {key}"
            )


def check_base_points_range(config: PointsConfig) -> Iterator[ValidationError]:
    table = config.base_points
    if not isinstance(table, Mapping):
        return
    for kind in ActivityKind:
        if kind not in table:
            continue
        yield from _check_points_value(f"basePoints.{kind.value}", table[kind])


def check_default_floor(config: PointsConfig) -> Iterator[ValidationError]:
    table = config.base_points
    if not isinstance(table, Mapping):
        return
    for kind in ActivityKind:
        value = table.get(kind)
        if not is_finite_number(value):
            continue
        floor = DEFAULT_BASE_POINTS[kind] * DEFAULT_FLOOR_RATIO
        if value < floor:
            yield ValidationError(
                f"basePoints.{kind.value}", "below_default_floor",
                f"Base points for {kind.value} cannot be less than 50% of the "
                f"default ({floor:g})",
            )


# ---------------------------------------------------------------------------
# AI modifier
# ---------------------------------------------------------------------------
def check_ai_modifier(config: PointsConfig) -> Iterator[ValidationError]:
    value = config.ai_modifier
    if not is_finite_number(value) or not MIN_AI_MODIFIER <= value <= MAX_AI_MODIFIER:
        yield ValidationError(
            "aiModifier", "invalid_ai_modifier",
            f"AI modifier must be a number between {MIN_AI_MODIFIER} and {MAX_AI_MODIFIER}",
        )


# ---------------------------------------------------------------------------
# Organization overrides
# ---------------------------------------------------------------------------
def check_org_overrides(config: PointsConfig) -> Iterator[ValidationError]:
    overrides = config.org_overrides
    if not isinstance(overrides, Mapping):
        yield ValidationError(
            "orgOverrides", "invalid_overrides",
            "Organization overrides must be an object keyed by organization id",
        )
        return
    for org_id, table in overrides.items():
        path = f"orgOverrides.{org_id}"
        if not is_uuid_v4(org_id):
            yield ValidationError(
                path, "invalid_organization_id", f"Invalid organization id: {org_id}"
            )
        if not isinstance(table, Mapping):
            yield ValidationError(
                path, "invalid_override_table",
                "Override must be an object keyed by activity kind",
            )
            continue
        for key, value in table.items():
            if not is_valid_kind(key):
                yield ValidationError(
                    f"{path}.{key}", "unknown_kind", f"Unknown activity kind: {key}"
                )
                continue
            yield from _check_points_value(f"{path}.{key}", value)


# ---------------------------------------------------------------------------
# Level thresholds
# ---------------------------------------------------------------------------
def check_level_thresholds(config: PointsConfig) -> Iterator[ValidationError]:
    thresholds = config.level_thresholds
    if not isinstance(thresholds, Mapping):
        yield ValidationError(
            "levelThresholds", "invalid_level_thresholds",
            "Level thresholds must be an object keyed by level",
        )
        return

    usable: dict[int, float] = {}
    for level, points in thresholds.items():
        path = f"levelThresholds.{level}"
        if isinstance(level, bool) or not isinstance(level, int) or not MIN_LEVEL <= level <= MAX_LEVEL:
            yield ValidationError(
                path, "invalid_level", f"Levels must be integers between {MIN_LEVEL} and {MAX_LEVEL}"
            )
            continue
        if not is_finite_number(points) or points < 0:
            yield ValidationError(
                path, "invalid_threshold", "Level threshold must be a non-negative number"
            )
            continue
        usable[level] = points

    level_one_reported = MIN_LEVEL in thresholds and MIN_LEVEL not in usable
    if usable.get(MIN_LEVEL) != 0 and not level_one_reported:
        yield ValidationError(
            f"levelThresholds.{MIN_LEVEL}", "level_one_threshold",
            "Level 1 must be defined with a threshold of 0",
        )

    ordered = sorted(usable.items())
    for (prev_level, prev_points), (level, points) in zip(ordered, ordered[1:]):
        if points <= prev_points:
            yield ValidationError(
                f"levelThresholds.{level}", "non_increasing_thresholds",
                f"Level {level} threshold ({points:g}) must exceed level "
                f"{prev_level} ({prev_points:g}); thresholds must be strictly increasing",
            )


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------
def check_version(config: PointsConfig) -> Iterator[ValidationError]:
    version = config.version
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        yield ValidationError("version", "invalid_version", "Version must be a positive integer")


# ---------------------------------------------------------------------------
# Shared value check
# ---------------------------------------------------------------------------
def _check_points_value(path: str, value: Any) -> Iterator[ValidationError]:
    if not is_finite_number(value):
        yield ValidationError(path, "not_a_number", "Point value must be a finite number")
    elif not MIN_POINTS_PER_ACTIVITY <= value <= MAX_POINTS_PER_ACTIVITY:
        yield ValidationError(
            path, "out_of_range",
            f"Point value must be between {MIN_POINTS_PER_ACTIVITY} and "
            f"{MAX_POINTS_PER_ACTIVITY}",
        )


RULES: tuple[Rule, ...] = (
    check_base_points_keys,
    check_base_points_range,
    check_default_floor,
    check_ai_modifier,
    check_org_overrides,
    check_level_thresholds,
    check_version,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def validate(candidate: PointsConfig | Mapping[str, Any]) -> ValidationResult:
    """Run every rule over *candidate* and collect all violations.

    *candidate* may be a :class:`PointsConfig` or its parsed JSON form.
    Never raises for rule violations.
    """
    config = candidate if isinstance(candidate, PointsConfig) else PointsConfig.from_dict(candidate)

    errors = tuple(error for rule in RULES for error in rule(config))
    if errors:
        logger.debug("Points config rejected with %d error(s)", len(errors))
        return ValidationResult(config=None, errors=errors)

    return ValidationResult(config=_freeze(config))


def _freeze(config: PointsConfig) -> ValidatedPointsConfig:
    """Copy a passing candidate into a :class:`ValidatedPointsConfig`."""
    return ValidatedPointsConfig(
        base_points={kind: config.base_points[kind] for kind in ActivityKind},
        ai_modifier=config.ai_modifier,
        org_overrides={
            org_id: {ActivityKind(k): v for k, v in table.items()}
            for org_id, table in config.org_overrides.items()
        },
        level_thresholds=dict(sorted(config.level_thresholds.items())),
        version=config.version,
    )
