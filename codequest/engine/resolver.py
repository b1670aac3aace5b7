"""
codequest.engine.resolver — Effective configuration resolution
===============================================================

Resolution order for the base points of one activity kind:
  1. org_overrides[organization_id][kind]   — organization override
  2. base_points[kind]                      — company configuration
  3. DEFAULT_BASE_POINTS[kind]              — system default

The AI modifier always comes from the company configuration; organization
overrides only carry base points.

Pure: no DB or network I/O, no shared state.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from codequest.constants import is_finite_number
from codequest.engine.activities import DEFAULT_BASE_POINTS, ActivityKind
from codequest.engine.points_config import PointsConfig

logger = logging.getLogger(__name__)

__all__ = ["EffectiveConfig", "resolve_effective_config"]


@dataclass(frozen=True, slots=True)
class EffectiveConfig:
    """Fully resolved base points + modifier for one organization."""

    effective_base_points: dict[ActivityKind, float]
    ai_modifier: float

    def to_dict(self) -> dict:
        return {
            "effectiveBasePoints": {
                k.value: v for k, v in self.effective_base_points.items()
            },
            "aiModifier": self.ai_modifier,
        }


def resolve_effective_config(
    config: PointsConfig, organization_id: str
) -> EffectiveConfig:
    """Merge company configuration and organization overrides.

    Total: every :class:`ActivityKind` resolves to a number.  An unknown
    organization simply falls through to the company table.
    """
    override = _override_table(config, organization_id)
    company = config.base_points if isinstance(config.base_points, Mapping) else {}

    effective: dict[ActivityKind, float] = {}
    for kind in ActivityKind:
        # 1. Organization override
        value = override.get(kind)
        if is_finite_number(value):
            effective[kind] = value
            continue

        # 2. Company configuration
        value = company.get(kind)
        if is_finite_number(value):
            effective[kind] = value
            continue

        # 3. System default
        logger.warning(
            "No usable base points for %s in company config — using default %s",
            kind.value, DEFAULT_BASE_POINTS[kind],
        )
        effective[kind] = DEFAULT_BASE_POINTS[kind]

    return EffectiveConfig(
        effective_base_points=effective,
        ai_modifier=config.ai_modifier,
    )


def _override_table(config: PointsConfig, organization_id: str) -> Mapping:
    overrides = config.org_overrides
    if not isinstance(overrides, Mapping):
        return {}
    table = overrides.get(organization_id)
    if not isinstance(table, Mapping):
        return {}
    return table
