"""
codequest.services.config_service — Versioned Points Config Reads & Writes
===========================================================================

The only write path for ``points_configs``.  Every update follows the
pattern:
  1. Validate the whole candidate (all errors collected)
  2. Read "before" snapshot
  3. Compare-and-swap on ``version`` (UPDATE … WHERE version = expected)
  4. Write admin_log with before/after JSON
  5. Commit, then invalidate the resolved-config cache for the company

A stale ``expected_version`` is rejected; the stored row is untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from sqlalchemy import Engine, update
from sqlalchemy.orm import Session

from codequest.database.models import AdminActionType, AdminLog, PointsConfigRecord
from codequest.database.seed import seed_default_config
from codequest.engine.cache import ResolvedConfigCache
from codequest.engine.points_config import PointsConfig, ValidatedPointsConfig
from codequest.engine.validator import ValidationError, validate

logger = logging.getLogger(__name__)


class ConfigValidationFailed(ValueError):
    """A candidate config broke one or more rules; ``errors`` has them all."""

    def __init__(self, errors: tuple[ValidationError, ...]) -> None:
        self.errors = errors
        super().__init__(f"Points config failed validation with {len(errors)} error(s)")


class StaleConfigError(ValueError):
    """The stored config moved on since the caller read it."""

    def __init__(self, company_id: str, expected: int, actual: int) -> None:
        self.company_id = company_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Points config for company {company_id} is at version {actual}, "
            f"not {expected}; reload and retry"
        )


# ---------------------------------------------------------------------------
# Row ↔ value conversion
# ---------------------------------------------------------------------------
def _record_to_dict(row: PointsConfigRecord) -> dict[str, Any]:
    return {
        "basePoints": dict(row.base_points),
        "aiModifier": row.ai_modifier,
        "orgOverrides": dict(row.org_overrides or {}),
        "levelThresholds": dict(row.level_thresholds),
        "version": row.version,
    }


def _record_to_config(row: PointsConfigRecord) -> ValidatedPointsConfig:
    """Re-validate a stored row.  A failure means the table was edited by hand."""
    result = validate(_record_to_dict(row))
    if not result.ok:
        logger.error(
            "Stored points config for company %s is invalid: %s",
            row.company_id, [e.to_dict() for e in result.errors],
        )
        raise RuntimeError(f"Stored points config for company {row.company_id} is invalid")
    return result.config


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_points_config(engine: Engine, company_id: str) -> ValidatedPointsConfig | None:
    """Fetch the company's config, or None if it was never provisioned."""
    with Session(engine) as session:
        row = session.get(PointsConfigRecord, company_id)
        if row is None:
            return None
        return _record_to_config(row)


def provision_company(engine: Engine, company_id: str) -> ValidatedPointsConfig:
    """Give *company_id* the default config (idempotent) and return its config."""
    seed_default_config(engine, company_id)
    config = get_points_config(engine, company_id)
    if config is None:
        raise RuntimeError(f"Provisioning company {company_id} left no points config")
    return config


def get_or_provision(engine: Engine, company_id: str) -> ValidatedPointsConfig:
    config = get_points_config(engine, company_id)
    if config is None:
        config = provision_company(engine, company_id)
    return config


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def update_points_config(
    engine: Engine,
    company_id: str,
    candidate: PointsConfig | Mapping[str, Any],
    *,
    expected_version: int,
    actor_id: str | None = None,
    reason: str | None = None,
    cache: ResolvedConfigCache | None = None,
) -> ValidatedPointsConfig:
    """Replace the company's config with *candidate*.

    The candidate's own ``version`` is ignored; the stored version must
    equal *expected_version* and is bumped by one.

    Raises
    ------
    ConfigValidationFailed
        If *candidate* breaks any rule (all errors attached).
    LookupError
        If the company has no config yet (provision it first).
    StaleConfigError
        If the stored version differs from *expected_version*.
    """
    if isinstance(candidate, Mapping):
        candidate = PointsConfig.from_dict(candidate)
    result = validate(replace(candidate, version=expected_version))
    if not result.ok:
        raise ConfigValidationFailed(result.errors)

    new_version = expected_version + 1
    after = replace(result.config, version=new_version)
    data = after.to_dict()

    with Session(engine) as session:
        row = session.get(PointsConfigRecord, company_id)
        if row is None:
            raise LookupError(f"No points config for company {company_id}")
        before = _record_to_dict(row)

        swapped = session.execute(
            update(PointsConfigRecord)
            .where(
                PointsConfigRecord.company_id == company_id,
                PointsConfigRecord.version == expected_version,
            )
            .values(
                base_points=data["basePoints"],
                ai_modifier=data["aiModifier"],
                org_overrides=data["orgOverrides"],
                level_thresholds=data["levelThresholds"],
                version=new_version,
            )
            .execution_options(synchronize_session=False)
        )
        if swapped.rowcount != 1:
            session.rollback()
            raise StaleConfigError(company_id, expected_version, before["version"])

        session.add(AdminLog(
            actor_id=actor_id,
            action_type=AdminActionType.UPDATE,
            target_table="points_configs",
            target_id=company_id,
            before_snapshot=before,
            after_snapshot=data,
            reason=reason,
        ))
        session.commit()

    if cache is not None:
        cache.invalidate(company_id)

    logger.info(
        "Points config for company %s updated to version %d by %s",
        company_id, new_version, actor_id or "system",
    )
    return after
