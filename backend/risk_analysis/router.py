"""Compliance risk analysis API endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError

from backend.core.config import get_settings

from . import service
from .jurisdiction import classify_jurisdiction, jurisdiction_risk_label
from .policy import RiskScoringConfig, get_scoring_config
from .registration import snapshot_from_registration
from .schemas import (
    BatchAssessmentRequest,
    EntityComplianceSnapshot,
    JurisdictionClassification,
    RiskAssessment,
)

router = APIRouter(prefix="/risk-analysis", tags=["risk-analysis"])


def get_active_config() -> RiskScoringConfig:
    """Scoring policy configured for this deployment."""
    return get_scoring_config(get_settings().risk_policy_file)


def get_clock() -> service.Clock:
    """Clock that timestamps assessments and ages penetration tests."""
    return service.utc_now


@router.post("/assess", response_model=RiskAssessment)
async def assess_entity(
    entity: EntityComplianceSnapshot,
    config: RiskScoringConfig = Depends(get_active_config),
    clock: service.Clock = Depends(get_clock),
) -> RiskAssessment:
    """
    Assess the compliance risk of a crypto entity.

    Scores KYC/AML controls, security measures, custody arrangements,
    trading controls and regulatory compliance, and returns the weighted
    overall score, risk level and remediation recommendations.
    """
    return service.calculate_risk_score(entity, config=config, clock=clock)


@router.post("/assess/batch", response_model=list[RiskAssessment])
async def assess_batch(
    request: BatchAssessmentRequest,
    config: RiskScoringConfig = Depends(get_active_config),
    clock: service.Clock = Depends(get_clock),
) -> list[RiskAssessment]:
    """Assess several entities; results keep the request order."""
    return service.assess_entities(request.entities, config=config, clock=clock)


@router.post("/registrations/assess", response_model=RiskAssessment)
async def assess_registration(
    record: dict[str, Any] = Body(...),
    config: RiskScoringConfig = Depends(get_active_config),
    clock: service.Clock = Depends(get_clock),
) -> RiskAssessment:
    """
    Assess an exchange registration record as stored by the portal.

    The record uses the portal's camelCase registration format.
    """
    try:
        snapshot = snapshot_from_registration(record)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False, include_input=False),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return service.calculate_risk_score(snapshot, config=config, clock=clock)


@router.get("/policy")
async def get_policy(config: RiskScoringConfig = Depends(get_active_config)) -> dict:
    """Active scoring policy: weights, level thresholds and jurisdiction table."""
    return config.model_dump(mode="json")


@router.get("/jurisdictions/classify", response_model=JurisdictionClassification)
async def classify_location(
    location: str = Query(..., max_length=200),
    config: RiskScoringConfig = Depends(get_active_config),
) -> JurisdictionClassification:
    """Classify a headquarters location into a jurisdiction risk tier."""
    tier = classify_jurisdiction(location, config.jurisdiction_tiers)
    score = config.tier_scores[tier]
    return JurisdictionClassification(
        location=location,
        tier=tier,
        score=score,
        label=jurisdiction_risk_label(score, config.tier_scores),
    )
