"""
codequest.services.points_service — Award Points & Progress
============================================================

Glue between the pure engine and the database:

  ActivityRecord → company config → resolve (cached) → calculate → points_history

``award_points`` is idempotent per ``(company_id, activity_id)``: delivering
the same activity twice stores one ledger row and returns the stored result.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from codequest.database.models import PointsHistory
from codequest.engine.activities import ActivityKind, ActivityRecord
from codequest.engine.cache import ResolvedConfigCache
from codequest.engine.levels import LevelProgress, level_progress
from codequest.engine.points import PointsCalculationResult, calculate
from codequest.engine.points_config import PointsConfig
from codequest.engine.resolver import EffectiveConfig, resolve_effective_config
from codequest.services import config_service

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------
def resolve_for(
    config: PointsConfig,
    record: ActivityRecord,
    cache: ResolvedConfigCache | None = None,
) -> EffectiveConfig:
    """Effective config for the record's organization, through *cache* if given."""
    if cache is None:
        return resolve_effective_config(config, record.organization_id)
    return cache.get_or_resolve(
        record.company_id,
        config.version,
        record.organization_id,
        lambda: resolve_effective_config(config, record.organization_id),
    )


def calculate_for_activity(
    config: PointsConfig,
    record: ActivityRecord,
    cache: ResolvedConfigCache | None = None,
) -> PointsCalculationResult:
    """Resolve the tenant's effective config and calculate one activity."""
    effective = resolve_for(config, record, cache)
    result = calculate(
        record.kind,
        record.is_ai_generated,
        effective.effective_base_points,
        effective.ai_modifier,
    )
    logger.debug(
        "Activity %s for company=%s org=%s → %d points",
        record.kind, record.company_id, record.organization_id, result.final_points,
    )
    return result


# ---------------------------------------------------------------------------
# Awarding
# ---------------------------------------------------------------------------
def _history_to_result(row: PointsHistory) -> PointsCalculationResult:
    return PointsCalculationResult(
        kind=ActivityKind(row.activity_kind),
        is_ai_generated=row.is_ai_generated,
        base_points=row.base_points,
        applied_modifier=row.applied_modifier,
        final_points=row.final_points,
        steps=tuple(row.steps),
    )


def _find_existing(session: Session, company_id: str, activity_id: str) -> PointsHistory | None:
    return session.scalars(
        select(PointsHistory).where(
            PointsHistory.company_id == company_id,
            PointsHistory.activity_id == activity_id,
        )
    ).first()


def award_points(
    engine: Engine,
    record: ActivityRecord,
    *,
    team_member_id: str,
    activity_id: str,
    cache: ResolvedConfigCache | None = None,
) -> tuple[PointsCalculationResult, bool]:
    """Calculate and record points for one activity.

    Companies without a stored config are provisioned with the defaults.

    Returns
    -------
    (result, was_duplicate)
        ``was_duplicate`` is True when *activity_id* was already awarded
        for this company; ``result`` is then the stored calculation.
    """
    with Session(engine) as session:
        existing = _find_existing(session, record.company_id, activity_id)
        if existing is not None:
            logger.debug("Duplicate activity %s for company %s", activity_id, record.company_id)
            return _history_to_result(existing), True

    config = config_service.get_or_provision(engine, record.company_id)
    result = calculate_for_activity(config, record, cache)

    with Session(engine) as session:
        session.add(PointsHistory(
            company_id=record.company_id,
            organization_id=record.organization_id,
            team_member_id=team_member_id,
            activity_id=activity_id,
            activity_kind=record.kind.value,
            is_ai_generated=record.is_ai_generated,
            base_points=result.base_points,
            applied_modifier=result.applied_modifier,
            final_points=result.final_points,
            steps=list(result.steps),
            config_version=config.version,
        ))
        try:
            session.commit()
        except IntegrityError:
            # Lost a race with a concurrent delivery of the same activity
            session.rollback()
            existing = _find_existing(session, record.company_id, activity_id)
            if existing is None:
                raise
            return _history_to_result(existing), True

    logger.info(
        "Awarded %d points to member %s (company=%s, activity=%s, kind=%s)",
        result.final_points, team_member_id, record.company_id, activity_id, record.kind,
    )
    return result, False


# ---------------------------------------------------------------------------
# Totals & progress
# ---------------------------------------------------------------------------
def get_total_points(engine: Engine, company_id: str, team_member_id: str) -> int:
    with Session(engine) as session:
        total = session.scalar(
            select(func.coalesce(func.sum(PointsHistory.final_points), 0)).where(
                PointsHistory.company_id == company_id,
                PointsHistory.team_member_id == team_member_id,
            )
        )
    return int(total or 0)


def get_member_progress(
    engine: Engine, company_id: str, team_member_id: str
) -> LevelProgress:
    """Level progress using the company's own thresholds (defaults if unprovisioned)."""
    config = config_service.get_points_config(engine, company_id)
    thresholds = config.level_thresholds if config is not None else None
    total = get_total_points(engine, company_id, team_member_id)
    return level_progress(total, thresholds)
