"""
codequest.database.seed — Default Points Config Seeder
=======================================================

Every company starts with the system default points configuration at
version 1 (tenant provisioning).

Idempotent — only inserts a row when the company has none.  Configs
written later by admins are never overwritten.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError

from codequest.database.engine import get_session
from codequest.database.models import PointsConfigRecord
from codequest.engine.points_config import default_points_config

logger = logging.getLogger(__name__)


def build_default_record(company_id: str) -> PointsConfigRecord:
    """A ``points_configs`` row holding the system defaults."""
    data = default_points_config().to_dict()
    return PointsConfigRecord(
        company_id=company_id,
        base_points=data["basePoints"],
        ai_modifier=data["aiModifier"],
        org_overrides=data["orgOverrides"],
        level_thresholds=data["levelThresholds"],
        version=1,
    )


def seed_default_config(engine: Engine, company_id: str) -> bool:
    """Insert the default config for *company_id* if it has none.

    Returns True when a row was written.  Losing a race with a concurrent
    provisioning of the same company returns False.
    """
    try:
        with get_session(engine) as session:
            if session.get(PointsConfigRecord, company_id) is not None:
                return False
            session.add(build_default_record(company_id))
    except IntegrityError:
        if not _has_config(engine, company_id):
            raise
        logger.debug("Company %s was provisioned concurrently.", company_id)
        return False

    logger.info("Seeded default points config for company %s.", company_id)
    return True


def _has_config(engine: Engine, company_id: str) -> bool:
    with get_session(engine) as session:
        found = session.scalar(
            select(PointsConfigRecord.company_id).where(
                PointsConfigRecord.company_id == company_id
            )
        )
    return found is not None


def seed_companies(engine: Engine, company_ids: Iterable[str]) -> int:
    """Seed defaults for several companies; returns how many were new."""
    return sum(1 for cid in company_ids if seed_default_config(engine, cid))
