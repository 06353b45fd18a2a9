"""Pydantic models for red-flag triage, screening and risk stratification."""

from rehab_risk.models.alert import AlertSeverity, AlertStatus, AlertType, RiskAlert
from rehab_risk.models.red_flag import (
    DisplayVariant,
    ExerciseGateDecision,
    RedFlagAlertItem,
    RedFlagCheck,
    RedFlagDisplay,
    RedFlagReport,
    RedFlagSeverity,
    Urgency,
)
from rehab_risk.models.risk import (
    ActionPriority,
    ContributingFactor,
    DataSources,
    DomainScore,
    PatientRiskSummary,
    ProviderRiskDashboard,
    RecommendedAction,
    RiskAssessment,
    RiskCategory,
    RiskLevel,
    RiskTrendPoint,
    RiskWeights,
    ScoreTrend,
)
from rehab_risk.models.screening import (
    CRPSContext,
    CRPSScreeningResult,
    CRPSSymptoms,
    DVTRiskFactors,
    DVTScreeningResult,
    DVTSymptoms,
    PostOpDVTRisk,
    PostOpRiskLevel,
    ScreeningQuestion,
)

__all__ = [
    "ActionPriority",
    "AlertSeverity",
    "AlertStatus",
    "AlertType",
    "CRPSContext",
    "CRPSScreeningResult",
    "CRPSSymptoms",
    "ContributingFactor",
    "DVTRiskFactors",
    "DVTScreeningResult",
    "DVTSymptoms",
    "DataSources",
    "DisplayVariant",
    "DomainScore",
    "ExerciseGateDecision",
    "PatientRiskSummary",
    "PostOpDVTRisk",
    "PostOpRiskLevel",
    "ProviderRiskDashboard",
    "RecommendedAction",
    "RedFlagAlertItem",
    "RedFlagCheck",
    "RedFlagDisplay",
    "RedFlagReport",
    "RedFlagSeverity",
    "RiskAlert",
    "RiskAssessment",
    "RiskCategory",
    "RiskLevel",
    "RiskTrendPoint",
    "RiskWeights",
    "ScoreTrend",
    "ScreeningQuestion",
    "Urgency",
]
