"""
codequest.engine.points — Points calculation pipeline
======================================================

Pure calculation: no DB or network I/O inside the engine.

Pipeline stages:
  ActivityKind → Base lookup → AI modifier → Round half-up → Bounds → PointsCalculationResult

Every stage appends a human-readable step to the result so audit and debug
consumers can see how the final number was derived.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from codequest.constants import (
    MAX_AI_MODIFIER,
    MIN_AI_MODIFIER,
    format_number,
    is_finite_number,
)
from codequest.engine.activities import ActivityKind

logger = logging.getLogger(__name__)

__all__ = [
    "InvalidActivityKind",
    "PointsCalculationResult",
    "calculate",
    "round_half_up",
]


class InvalidActivityKind(LookupError):
    """The effective base-points table has no entry for the requested kind.

    Resolution is total, so reaching this means an upstream contract was
    broken.  Never catch it to substitute a default.
    """


# ---------------------------------------------------------------------------
# PointsCalculationResult — output of the pipeline
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PointsCalculationResult:
    """Final calculation output with its audit trace."""

    kind: ActivityKind
    is_ai_generated: bool
    base_points: float
    applied_modifier: float
    final_points: int
    steps: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "kind": str(self.kind),
            "isAiGenerated": self.is_ai_generated,
            "basePoints": self.base_points,
            "appliedModifier": self.applied_modifier,
            "finalPoints": self.final_points,
            "steps": list(self.steps),
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (18.5 → 19).

    Goes through :class:`~decimal.Decimal` on the shortest repr of *value*
    so that e.g. ``2.675`` is treated as written, not as its binary
    approximation.
    """
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Full calculation pipeline
# ---------------------------------------------------------------------------
def calculate(
    kind: ActivityKind,
    is_ai_generated: bool,
    effective_base_points: Mapping[ActivityKind, float],
    ai_modifier: float,
) -> PointsCalculationResult:
    """Compute the points for one activity occurrence.

    Parameters
    ----------
    kind : the activity kind
    is_ai_generated : whether the activity was flagged as AI-generated code
    effective_base_points : complete table from the resolver
    ai_modifier : multiplier in [0.5, 1.0], applied only to AI-generated work

    Raises
    ------
    InvalidActivityKind
        If *kind* has no entry in *effective_base_points*.
    ValueError
        If the base value is negative or not finite, or the
        activity is AI-generated and *ai_modifier* is outside [0.5, 1.0].
    """
    # 1. Base lookup
    if kind not in effective_base_points:
        raise InvalidActivityKind(
            f"No base points for activity kind {kind!r} in the effective table"
        )
    base = effective_base_points[kind]
    if not is_finite_number(base) or base < 0:
        raise ValueError(f"Base points for {kind!r} must be a non-negative number, got {base!r}")
    steps = [f"base={format_number(base)}"]

    # 2. AI modifier
    if is_ai_generated:
        if not is_finite_number(ai_modifier) or not MIN_AI_MODIFIER <= ai_modifier <= MAX_AI_MODIFIER:
            raise ValueError(
                f"AI modifier must be a number in [{MIN_AI_MODIFIER}, {MAX_AI_MODIFIER}], "
                f"got {ai_modifier!r}"
            )
        applied = ai_modifier
        raw = _multiply(base, applied)
        steps.append(f"ai_modifier={format_number(applied)}")
    else:
        applied = 1.0
        raw = base

    # 3. Round half-up
    final = round_half_up(raw)
    steps.append(f"final=round({format_number(raw)})={final}")

    # 4. Bounds: a reduced award never rounds above a fractional base
    if is_ai_generated and applied <= 1.0 and final > base:
        final = math.floor(base)
        steps.append(f"final=cap(base)={final}")

    logger.debug(
        "Points calculated: kind=%s ai=%s base=%s modifier=%s final=%d",
        kind, is_ai_generated, base, applied, final,
    )

    return PointsCalculationResult(
        kind=kind,
        is_ai_generated=is_ai_generated,
        base_points=base,
        applied_modifier=applied,
        final_points=final,
        steps=tuple(steps),
    )


def _multiply(base: float, modifier: float) -> float:
    """``base * modifier`` computed on the decimal values as written."""
    return float(Decimal(repr(base)) * Decimal(repr(modifier)))
