"""Structured DVT and CRPS screening endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from rehab_risk.clinical import (
    assess_postop_dvt_risk,
    generate_crps_screening_questions,
    generate_dvt_screening_questions,
    screen_for_crps,
    screen_for_dvt,
)
from rehab_risk.models.screening import (
    CRPSContext,
    CRPSScreeningResult,
    CRPSSymptoms,
    DVTRiskFactors,
    DVTScreeningResult,
    DVTSymptoms,
    PostOpDVTRisk,
    ScreeningQuestion,
)

router = APIRouter(prefix="/screening", tags=["screening"])


class DVTScreeningRequest(BaseModel):
    symptoms: DVTSymptoms = Field(default_factory=DVTSymptoms)
    risk_factors: DVTRiskFactors = Field(default_factory=DVTRiskFactors)


class CRPSScreeningRequest(BaseModel):
    symptoms: CRPSSymptoms = Field(default_factory=CRPSSymptoms)
    context: CRPSContext = Field(default_factory=CRPSContext)


class PostOpDVTRequest(BaseModel):
    surgery_type: str
    days_since_surgery: int = Field(..., ge=0)
    additional_risk_factors: list[str] = Field(default_factory=list)


@router.post("/dvt", response_model=DVTScreeningResult)
async def dvt_screening(request: DVTScreeningRequest) -> DVTScreeningResult:
    """Wells-score DVT screen."""
    return screen_for_dvt(request.symptoms, request.risk_factors)


@router.post("/crps", response_model=CRPSScreeningResult)
async def crps_screening(request: CRPSScreeningRequest) -> CRPSScreeningResult:
    """Budapest-criteria CRPS screen."""
    return screen_for_crps(request.symptoms, request.context)


@router.post("/postop-dvt", response_model=PostOpDVTRisk)
async def postop_dvt_risk(request: PostOpDVTRequest) -> PostOpDVTRisk:
    """Surgery-specific postoperative DVT risk."""
    try:
        return assess_postop_dvt_risk(
            request.surgery_type,
            request.days_since_surgery,
            request.additional_risk_factors,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/dvt/questions", response_model=list[ScreeningQuestion])
async def dvt_questions() -> list[ScreeningQuestion]:
    return generate_dvt_screening_questions()


@router.get("/crps/questions", response_model=list[ScreeningQuestion])
async def crps_questions() -> list[ScreeningQuestion]:
    return generate_crps_screening_questions()
