"""Risk stratification models."""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from rehab_risk.models.alert import RiskAlert


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RiskLevel(str, Enum):
    """Discrete band of the overall risk score."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


RISK_LEVEL_ORDER: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MODERATE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class ScoreTrend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class RiskCategory(str, Enum):
    """Scoring domain a factor belongs to."""

    PAIN = "pain"
    ADHERENCE = "adherence"
    PSYCHOLOGICAL = "psychological"
    MOVEMENT = "movement"
    HEALTH = "health"
    PROGRESSION = "progression"


class ActionPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ContributingFactor(BaseModel):
    """A rule that fired while scoring one domain."""

    factor: str = Field(..., description="Stable machine key, e.g. poor_sleep")
    impact: float = Field(..., ge=0.0, le=1.0)
    description: str
    category: RiskCategory


class RecommendedAction(BaseModel):
    priority: ActionPriority
    action: str
    reason: str
    category: str


class RiskWeights(BaseModel):
    """Per-domain weights for the overall score.

    Weights must be non-negative. The defaults sum to 1.0, which keeps the
    overall score on the same 0-100 scale as the domain scores.
    """

    pain: float = 0.25
    adherence: float = 0.20
    psychological: float = 0.20
    movement: float = 0.15
    health: float = 0.10
    progression: float = 0.10

    @field_validator("*")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("risk weights must be non-negative")
        return v

    def for_category(self, category: RiskCategory) -> float:
        return getattr(self, category.value)

    @property
    def total(self) -> float:
        return sum(self.for_category(c) for c in RiskCategory)


class DomainScore(BaseModel):
    """Score for one domain, clamped to 0-100."""

    score: float = 0.0
    factors: list[ContributingFactor] = Field(default_factory=list)
    degraded: bool = Field(
        False, description="Scorer failed and contributed zero"
    )
    data_counts: dict[str, int] = Field(
        default_factory=dict, description="Records read, by kind"
    )

    @field_validator("score")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return max(0.0, min(100.0, v))


class DataSources(BaseModel):
    """What data actually fed an assessment."""

    pain_logs: int = 0
    movement_sessions: int = 0
    promis_assessment: bool = False
    health_data: bool = False
    psfs_assessment: bool = False


class RiskAssessment(BaseModel):
    """Point-in-time composite risk for one patient.

    Assessments are append-only. The review stamp is the only field set after
    creation.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    patient_id: str
    provider_id: Optional[str] = None

    overall_score: float = Field(..., ge=0.0, le=100.0)
    risk_level: RiskLevel

    pain_risk_score: float = 0.0
    adherence_risk_score: float = 0.0
    psychological_risk_score: float = 0.0
    movement_quality_score: float = 0.0
    health_data_score: float = 0.0
    progression_score: float = 0.0

    contributing_factors: list[ContributingFactor] = Field(default_factory=list)
    recommended_actions: list[RecommendedAction] = Field(default_factory=list)

    previous_score: Optional[float] = None
    score_trend: Optional[ScoreTrend] = None
    score_change: Optional[float] = None

    data_sources: DataSources = Field(default_factory=DataSources)
    created_at: datetime = Field(default_factory=_utcnow)

    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None

    # Run metadata, not stored as columns
    degraded_domains: list[RiskCategory] = Field(default_factory=list)
    persisted: bool = False
    processing_notes: list[str] = Field(default_factory=list)

    @property
    def is_reviewed(self) -> bool:
        return self.reviewed_at is not None


class RiskTrendPoint(BaseModel):
    date: date
    score: float
    level: RiskLevel


class PatientRiskSummary(BaseModel):
    patient_id: str
    patient_name: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    overall_score: Optional[float] = None
    score_trend: Optional[ScoreTrend] = None
    top_factors: list[str] = Field(default_factory=list)
    last_assessment: Optional[datetime] = None
    active_alerts: int = 0


class ProviderRiskDashboard(BaseModel):
    total_patients: int = 0
    critical_count: int = 0
    high_risk_count: int = 0
    moderate_risk_count: int = 0
    low_risk_count: int = 0
    unassessed_count: int = 0
    average_risk_score: float = 0.0
    patients: list[PatientRiskSummary] = Field(default_factory=list)
    recent_alerts: list[RiskAlert] = Field(default_factory=list)

