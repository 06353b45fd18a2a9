"""Risk assessment, trend, alert and dashboard endpoints."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from rehab_risk.api.dependencies import get_app_settings, get_store
from rehab_risk.config import Settings
from rehab_risk.exceptions import AlertNotFound, AssessmentNotFound, InvalidAlertTransition
from rehab_risk.models.alert import AlertStatus, RiskAlert
from rehab_risk.models.risk import (
    ProviderRiskDashboard,
    RiskAssessment,
    RiskTrendPoint,
    RiskWeights,
)
from rehab_risk.risk.aggregator import run_assessment
from rehab_risk.risk.alerts import AlertService
from rehab_risk.risk.dashboard import get_risk_trend, load_provider_dashboard
from rehab_risk.risk.store import RiskDataStore

router = APIRouter(prefix="/risk", tags=["risk"])


class AlertAction(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    RESOLVE = "resolve"
    DISMISS = "dismiss"


_ACTION_TARGETS = {
    AlertAction.ACKNOWLEDGE: AlertStatus.ACKNOWLEDGED,
    AlertAction.RESOLVE: AlertStatus.RESOLVED,
    AlertAction.DISMISS: AlertStatus.DISMISSED,
}


class AssessmentRequest(BaseModel):
    weights: Optional[RiskWeights] = Field(None, description="Override the configured domain weights")
    provider_id: Optional[str] = None


class AssessmentResponse(BaseModel):
    assessment: RiskAssessment
    alerts: list[RiskAlert] = Field(default_factory=list)


class AlertActionRequest(BaseModel):
    actor_id: str
    notes: Optional[str] = None


class ReviewRequest(BaseModel):
    reviewer_id: str
    notes: Optional[str] = None


@router.post("/assessments/{patient_id}", response_model=AssessmentResponse)
async def create_assessment(
    patient_id: str,
    request: Optional[AssessmentRequest] = None,
    store: RiskDataStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> AssessmentResponse:
    """Compute, store and alert on a new risk assessment."""
    request = request or AssessmentRequest()
    assessment, alerts = await run_assessment(
        store,
        patient_id,
        weights=request.weights,
        provider_id=request.provider_id,
        settings=settings,
    )
    return AssessmentResponse(assessment=assessment, alerts=alerts)


@router.get("/assessments/{patient_id}/latest", response_model=RiskAssessment)
async def latest_assessment(
    patient_id: str, store: RiskDataStore = Depends(get_store)
) -> RiskAssessment:
    assessment = await store.get_latest_risk_assessment(patient_id)
    if assessment is None:
        raise HTTPException(status_code=404, detail="No assessment for patient")
    return assessment


@router.post("/assessments/{assessment_id}/review", response_model=RiskAssessment)
async def review_assessment(
    assessment_id: uuid.UUID,
    request: ReviewRequest,
    store: RiskDataStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> RiskAssessment:
    """Stamp an assessment as reviewed by a provider."""
    try:
        return await AlertService(store, settings).review_assessment(
            assessment_id, request.reviewer_id, request.notes
        )
    except AssessmentNotFound:
        raise HTTPException(status_code=404, detail="Assessment not found")


@router.get("/trend/{patient_id}", response_model=list[RiskTrendPoint])
async def risk_trend(
    patient_id: str,
    days: int = Query(30, ge=1, le=365),
    store: RiskDataStore = Depends(get_store),
) -> list[RiskTrendPoint]:
    return await get_risk_trend(store, patient_id, days=days)


@router.get("/alerts/{patient_id}", response_model=list[RiskAlert])
async def active_alerts(
    patient_id: str, store: RiskDataStore = Depends(get_store)
) -> list[RiskAlert]:
    """Open alerts for a patient, newest first."""
    return list(await store.get_active_alerts(patient_id))


@router.post("/alerts/{alert_id}/{action}", response_model=RiskAlert)
async def alert_action(
    alert_id: uuid.UUID,
    action: AlertAction,
    request: AlertActionRequest,
    store: RiskDataStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> RiskAlert:
    """Acknowledge, resolve or dismiss an alert."""
    try:
        return await AlertService(store, settings).transition(
            alert_id, _ACTION_TARGETS[action], request.actor_id, request.notes
        )
    except AlertNotFound:
        raise HTTPException(status_code=404, detail="Alert not found")
    except InvalidAlertTransition as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/dashboard/{provider_id}", response_model=ProviderRiskDashboard)
async def provider_dashboard(
    provider_id: str,
    recent_limit: int = Query(10, ge=1, le=100),
    store: RiskDataStore = Depends(get_store),
) -> ProviderRiskDashboard:
    return await load_provider_dashboard(store, provider_id, recent_limit=recent_limit)
