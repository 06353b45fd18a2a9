"""Inputs and results for structured clinical screens (DVT, CRPS, postoperative risk)."""

from enum import Enum

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# DVT (Wells)
# ---------------------------------------------------------------------------

class DVTSymptoms(BaseModel):
    calf_swelling: bool = False
    calf_pain: bool = False
    warm_calf: bool = False
    pitting_edema: bool = False
    dilated_veins: bool = False
    unilateral: bool = False
    recent_immobilization: bool = False


class DVTRiskFactors(BaseModel):
    recent_surgery: bool = Field(False, description="Surgery within the last 4 weeks")
    cancer: bool = Field(False, description="Active malignancy")
    previous_dvt: bool = False
    bedridden_over_3_days: bool = False
    paralysis: bool = Field(False, description="Paresis or plegia of the leg")


class DVTRiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class DVTScreeningResult(BaseModel):
    wells_score: int
    risk_level: DVTRiskLevel
    probability: str
    recommendation: str
    requires_urgent_assessment: bool
    stop_training: bool = False
    symptoms: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# CRPS (Budapest)
# ---------------------------------------------------------------------------

class CRPSSymptoms(BaseModel):
    # Sensory
    allodynia: bool = False
    hyperalgesia: bool = False
    disproportionate_pain: bool = False
    # Vasomotor
    temperature_asymmetry: bool = False
    skin_color_change: bool = False
    asymmetric_skin_color: bool = False
    # Sudomotor / edema
    edema: bool = False
    sweating_changes: bool = False
    asymmetric_sweating: bool = False
    # Motor / trophic
    decreased_rom: bool = False
    weakness: bool = False
    tremor: bool = False
    dystonia: bool = False
    trophic_changes: bool = False


class CRPSContext(BaseModel):
    days_since_injury: int = Field(0, ge=0)
    pain_getting_worse: bool = False
    pain_spreading: bool = False
    normal_healing_expected: bool = True


class CRPSCategory(str, Enum):
    SENSORY = "sensory"
    VASOMOTOR = "vasomotor"
    SUDOMOTOR = "sudomotor"
    MOTOR_TROPHIC = "motor_trophic"


class CRPSRiskLevel(str, Enum):
    UNLIKELY = "unlikely"
    POSSIBLE = "possible"
    PROBABLE = "probable"


class CRPSUrgency(str, Enum):
    ROUTINE = "routine"
    SOON = "soon"
    URGENT = "urgent"


class CRPSScreeningResult(BaseModel):
    meets_screening_criteria: bool
    categories_affected: dict[CRPSCategory, bool]
    category_count: int
    symptom_count: int
    risk_level: CRPSRiskLevel
    recommendation: str
    urgency: CRPSUrgency
    detailed_symptoms: dict[CRPSCategory, list[str]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Postoperative DVT risk
# ---------------------------------------------------------------------------

class PostOpRiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class PostOpDVTRisk(BaseModel):
    risk_level: PostOpRiskLevel
    daily_risk_percent: float
    peak_risk_period: str
    prophylaxis_likely: bool
    surgery_known: bool = True
    warning_signs_to_watch: list[str] = Field(default_factory=list)
    exercise_guidelines: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Questionnaires
# ---------------------------------------------------------------------------

class ScreeningQuestion(BaseModel):
    id: str
    question: str
    category: str
