"""Patient records read by the domain scorers.

These are the shapes the record store hands back, independent of how the
rows are stored.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PatientRecord(BaseModel):
    patient_id: str
    name: Optional[str] = None
    provider_id: Optional[str] = None
    diagnosis: Optional[str] = None


class PainPrediction(BaseModel):
    """Forecast produced by the pain prediction pipeline."""

    patient_id: str
    predicted_at: datetime
    horizon_24h: float = Field(..., ge=0, le=10, description="Predicted NRS pain in 24h")
    risk_level_24h: Optional[str] = Field(
        None, description="low | moderate | high | critical"
    )


class PainLog(BaseModel):
    patient_id: str
    logged_at: datetime
    pain_level: float = Field(0, ge=0, le=10)


class ExerciseLog(BaseModel):
    patient_id: str
    completed_at: datetime
    exercise_id: Optional[str] = None


class ActiveProgram(BaseModel):
    patient_id: str
    created_at: datetime
    frequency_per_week: Optional[float] = Field(
        None, gt=0, description="Prescribed sessions per week"
    )
    current_phase: int = 1
    phase_started_at: Optional[datetime] = None
    phase_duration_weeks: Optional[float] = Field(
        None, gt=0, description="Expected weeks in the current phase"
    )


class FormIssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FormIssue(BaseModel):
    description: str = ""
    severity: FormIssueSeverity = FormIssueSeverity.LOW


class MovementSession(BaseModel):
    patient_id: str
    session_date: datetime
    average_score: Optional[float] = Field(None, ge=0, le=100)
    rom_achieved: Optional[float] = Field(None, ge=0, description="Percent of target ROM")
    form_issues: list[FormIssue] = Field(default_factory=list)

    @property
    def has_high_severity_issue(self) -> bool:
        return any(i.severity == FormIssueSeverity.HIGH for i in self.form_issues)


class Promis29Assessment(BaseModel):
    """PROMIS-29 domain T-scores (higher = worse for these domains)."""

    patient_id: str
    assessed_at: datetime
    anxiety_tscore: Optional[float] = None
    depression_tscore: Optional[float] = None
    sleep_disturbance_tscore: Optional[float] = None


class Tsk11Assessment(BaseModel):
    """Tampa Scale of Kinesiophobia, 11-item version (11-44)."""

    patient_id: str
    assessed_at: datetime
    score: float


class PsfsAssessment(BaseModel):
    """Patient-Specific Functional Scale (0-10, higher = better)."""

    patient_id: str
    assessed_at: datetime
    average_score: float = Field(..., ge=0, le=10)


class HealthMetric(str, Enum):
    SLEEP_ANALYSIS = "sleep_analysis"
    HEART_RATE_VARIABILITY = "heart_rate_variability"
    STEPS = "steps"


class HealthSample(BaseModel):
    """One wearable sample. Sleep in hours, HRV in ms, steps per day."""

    patient_id: str
    start_date: datetime
    data_type: HealthMetric
    value: Optional[float] = None
