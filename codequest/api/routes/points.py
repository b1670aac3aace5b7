"""
codequest.api.routes.points — Points calculation & configuration endpoints
===========================================================================

Points:
    GET  /points/defaults        — System default configuration
    POST /points/validate        — Validate a candidate config (full error batch)
    POST /points/calculate       — Calculate points for one activity (no writes)
    POST /points/award           — Calculate and record points (idempotent)

Company configuration:
    GET  /companies/{company_id}/points-config            — Stored config
    POST /companies/{company_id}/points-config/provision  — Seed defaults
    PUT  /companies/{company_id}/points-config            — Replace (versioned)
    GET  /companies/{company_id}/organizations/{org_id}/effective-config
    GET  /companies/{company_id}/members/{member_id}/progress — Level progress

Tenant and caller identity are resolved upstream; these routes trust the
ids they are given.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Engine

from codequest.api.deps import get_engine, get_resolved_cache
from codequest.database.engine import run_db
from codequest.engine.activities import ActivityKind, ActivityRecord
from codequest.engine.cache import ResolvedConfigCache
from codequest.engine.points_config import default_points_config
from codequest.engine.resolver import resolve_effective_config
from codequest.engine.validator import validate
from codequest.services import config_service, points_service

router = APIRouter(tags=["points"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ActivityBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: ActivityKind
    is_ai_generated: bool = Field(default=False, alias="isAiGenerated")
    organization_id: str = Field(alias="organizationId", min_length=1)
    company_id: str = Field(alias="companyId", min_length=1)

    def to_record(self) -> ActivityRecord:
        return ActivityRecord(
            kind=self.kind,
            is_ai_generated=self.is_ai_generated,
            organization_id=self.organization_id,
            company_id=self.company_id,
        )


class AwardBody(ActivityBody):
    team_member_id: str = Field(alias="teamMemberId", min_length=1)
    activity_id: str = Field(alias="activityId", min_length=1)


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------
@router.get("/points/defaults")
def get_defaults():
    return default_points_config().to_dict()


@router.post("/points/validate")
def validate_config(body: dict):
    """Validate a candidate config without storing it."""
    return validate(body).to_dict()


@router.post("/points/calculate")
def calculate_points(
    body: ActivityBody,
    engine: Engine = Depends(get_engine),
    cache: ResolvedConfigCache = Depends(get_resolved_cache),
):
    """Calculate one activity against the company's config (defaults if none)."""
    config = config_service.get_points_config(engine, body.company_id)
    if config is None:
        config = validate(default_points_config()).config
    result = points_service.calculate_for_activity(config, body.to_record(), cache)
    return result.to_dict()


@router.post("/points/award")
async def award_points(
    body: AwardBody,
    engine: Engine = Depends(get_engine),
    cache: ResolvedConfigCache = Depends(get_resolved_cache),
):
    result, duplicate = await run_db(
        points_service.award_points,
        engine,
        body.to_record(),
        team_member_id=body.team_member_id,
        activity_id=body.activity_id,
        cache=cache,
    )
    return {"result": result.to_dict(), "duplicate": duplicate}


# ---------------------------------------------------------------------------
# Company configuration
# ---------------------------------------------------------------------------
@router.get("/companies/{company_id}/points-config")
def get_points_config(company_id: str, engine: Engine = Depends(get_engine)):
    config = config_service.get_points_config(engine, company_id)
    if config is None:
        raise HTTPException(404, f"No points config for company {company_id}")
    return config.to_dict()


@router.post("/companies/{company_id}/points-config/provision")
def provision_points_config(company_id: str, engine: Engine = Depends(get_engine)):
    return config_service.provision_company(engine, company_id).to_dict()


@router.put("/companies/{company_id}/points-config")
def replace_points_config(
    company_id: str,
    body: dict,
    engine: Engine = Depends(get_engine),
    cache: ResolvedConfigCache = Depends(get_resolved_cache),
):
    """Replace the whole config.  ``version`` in the body is the version the
    caller last read; a mismatch returns 409.
    """
    expected = body.get("version")
    if isinstance(expected, bool) or not isinstance(expected, int):
        raise HTTPException(422, detail={
            "message": "version (the version last read) is required",
            "errors": [{
                "field": "version",
                "code": "invalid_version",
                "message": "Version must be a positive integer",
            }],
        })

    try:
        config = config_service.update_points_config(
            engine,
            company_id,
            body,
            expected_version=expected,
            actor_id=body.get("actorId"),
            reason=body.get("reason"),
            cache=cache,
        )
    except config_service.ConfigValidationFailed as exc:
        raise HTTPException(422, detail={
            "message": str(exc),
            "errors": [e.to_dict() for e in exc.errors],
        })
    except config_service.StaleConfigError as exc:
        raise HTTPException(409, detail={
            "message": str(exc),
            "currentVersion": exc.actual,
        })
    except LookupError:
        raise HTTPException(404, f"No points config for company {company_id}")
    return config.to_dict()


@router.get("/companies/{company_id}/organizations/{organization_id}/effective-config")
def get_effective_config(
    company_id: str,
    organization_id: str,
    engine: Engine = Depends(get_engine),
    cache: ResolvedConfigCache = Depends(get_resolved_cache),
):
    """Base points and modifier as they apply to one organization."""
    config = config_service.get_points_config(engine, company_id)
    if config is None:
        raise HTTPException(404, f"No points config for company {company_id}")
    effective = cache.get_or_resolve(
        company_id,
        config.version,
        organization_id,
        lambda: resolve_effective_config(config, organization_id),
    )
    return effective.to_dict()


@router.get("/companies/{company_id}/members/{team_member_id}/progress")
def get_member_progress(
    company_id: str, team_member_id: str, engine: Engine = Depends(get_engine)
):
    progress = points_service.get_member_progress(engine, company_id, team_member_id)
    return {
        "teamMemberId": team_member_id,
        "currentLevel": progress.current_level,
        "totalPoints": progress.total_points,
        "previousLevelThreshold": progress.previous_level_threshold,
        "nextLevelThreshold": progress.next_level_threshold,
        "pointsToNextLevel": progress.points_to_next_level,
        "progressPercentage": progress.progress_percentage,
    }
