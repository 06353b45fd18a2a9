"""Symptom red-flag endpoints.

Scans exposed over HTTP always fail closed: if classification errors, the
caller gets an ``evaluation_failed`` report and is told to stop.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from rehab_risk.models.red_flag import ExerciseGateDecision, RedFlagDisplay, RedFlagReport
from rehab_risk.observability import get_observability_logger
from rehab_risk.safety import (
    SurgeryProtocol,
    exercise_gate,
    format_red_flags_for_display,
    generate_symptom_questions,
    get_red_flag_clinical_criteria,
    get_red_flag_risk_factors,
    get_surgery_protocol,
    safe_check_red_flags,
)
from rehab_risk.safety.taxonomy import get_entry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/red-flags", tags=["red-flags"])


class SymptomCheckRequest(BaseModel):
    """Free-text symptoms reported by the patient."""

    symptoms: list[str] = Field(default_factory=list, description="Symptom descriptions")
    surgery_type: Optional[str] = Field(None, description="Surgery the patient is recovering from")


class SymptomCheckResponse(BaseModel):
    report: RedFlagReport
    display: RedFlagDisplay


class ProtocolResponse(BaseModel):
    protocol: SurgeryProtocol
    questions: list[str]


class ConditionInfo(BaseModel):
    condition: str
    label: str
    clinical_criteria: Optional[str] = None
    risk_factors: list[str] = Field(default_factory=list)


@router.post("/check", response_model=SymptomCheckResponse)
async def check_symptoms(
    request: SymptomCheckRequest, http_request: Request
) -> SymptomCheckResponse:
    """Classify reported symptoms into critical and warning flags."""
    start = time.time()
    report = safe_check_red_flags(request.symptoms, request.surgery_type)

    get_observability_logger().log_red_flag_scan(
        request.symptoms,
        report,
        surgery_type=request.surgery_type,
        duration_ms=(time.time() - start) * 1000,
        request_id=getattr(http_request.state, "request_id", None),
    )

    return SymptomCheckResponse(report=report, display=format_red_flags_for_display(report))


@router.post("/should-stop", response_model=ExerciseGateDecision)
async def should_stop(
    request: SymptomCheckRequest, http_request: Request
) -> ExerciseGateDecision:
    """Decide whether an ongoing exercise session must stop."""
    start = time.time()
    report = safe_check_red_flags(request.symptoms, request.surgery_type)
    decision = exercise_gate(report)

    if decision.should_stop:
        logger.info("Exercise stop advised: %s", decision.reason)

    get_observability_logger().log_red_flag_scan(
        request.symptoms,
        report,
        surgery_type=request.surgery_type,
        should_stop=decision.should_stop,
        duration_ms=(time.time() - start) * 1000,
        request_id=getattr(http_request.state, "request_id", None),
    )
    return decision


@router.get("/protocols/{surgery_type}", response_model=ProtocolResponse)
async def get_protocol(surgery_type: str) -> ProtocolResponse:
    """Protocol-specific red flags and check-in questions for a surgery."""
    protocol = get_surgery_protocol(surgery_type)
    if protocol is None:
        raise HTTPException(status_code=404, detail=f"No protocol for '{surgery_type}'")
    return ProtocolResponse(
        protocol=protocol,
        questions=generate_symptom_questions(surgery_type),
    )


@router.get("/questions", response_model=list[str])
async def get_questions(surgery_type: Optional[str] = Query(None)) -> list[str]:
    """Symptom check-in questions, with protocol-specific extras if known."""
    return generate_symptom_questions(surgery_type)


@router.get("/conditions/{condition}", response_model=ConditionInfo)
async def get_condition(condition: str) -> ConditionInfo:
    """Clinical criteria and risk factors for a red-flag condition."""
    entry = get_entry(condition)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Unknown condition '{condition}'")
    return ConditionInfo(
        condition=entry.condition.value,
        label=entry.label,
        clinical_criteria=get_red_flag_clinical_criteria(entry.condition),
        risk_factors=get_red_flag_risk_factors(entry.condition),
    )
