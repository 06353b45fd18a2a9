"""Provider dashboard aggregates and per-patient risk trend."""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Optional

from rehab_risk.models.alert import RiskAlert
from rehab_risk.models.records import PatientRecord
from rehab_risk.models.risk import (
    PatientRiskSummary,
    ProviderRiskDashboard,
    RiskAssessment,
    RiskLevel,
    RiskTrendPoint,
)
from rehab_risk.risk.scorers import as_utc
from rehab_risk.risk.store import RiskDataStore

TOP_FACTORS_PER_PATIENT = 3


def build_provider_dashboard(
    patients: Sequence[PatientRecord],
    latest_assessments: Mapping[str, RiskAssessment],
    active_alerts: Iterable[RiskAlert],
    recent_limit: int = 10,
) -> ProviderRiskDashboard:
    """Summarize a provider's caseload.

    Patients are listed by overall score, highest first, with unassessed
    patients last. Only open alerts are counted or listed.
    """
    open_alerts = [a for a in active_alerts if a.is_open]
    alerts_per_patient = Counter(a.patient_id for a in open_alerts)

    summaries: list[PatientRiskSummary] = []
    levels: Counter = Counter()
    scores: list[float] = []

    for patient in patients:
        assessment = latest_assessments.get(patient.patient_id)
        summary = PatientRiskSummary(
            patient_id=patient.patient_id,
            patient_name=patient.name,
            active_alerts=alerts_per_patient.get(patient.patient_id, 0),
        )
        if assessment is not None:
            levels[assessment.risk_level] += 1
            scores.append(assessment.overall_score)
            summary.risk_level = assessment.risk_level
            summary.overall_score = assessment.overall_score
            summary.score_trend = assessment.score_trend
            summary.last_assessment = assessment.created_at
            summary.top_factors = [
                f.description for f in assessment.contributing_factors[:TOP_FACTORS_PER_PATIENT]
            ]
        summaries.append(summary)

    summaries.sort(
        key=lambda s: (s.overall_score is None, -(s.overall_score or 0.0))
    )

    recent = sorted(open_alerts, key=lambda a: as_utc(a.created_at), reverse=True)

    return ProviderRiskDashboard(
        total_patients=len(patients),
        critical_count=levels[RiskLevel.CRITICAL],
        high_risk_count=levels[RiskLevel.HIGH],
        moderate_risk_count=levels[RiskLevel.MODERATE],
        low_risk_count=levels[RiskLevel.LOW],
        unassessed_count=len(patients) - len(scores),
        average_risk_score=round(sum(scores) / len(scores), 1) if scores else 0.0,
        patients=summaries,
        recent_alerts=recent[:recent_limit],
    )


async def get_risk_trend(
    store: RiskDataStore,
    patient_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
) -> list[RiskTrendPoint]:
    """Assessment history over the last ``days`` days, oldest first."""
    end = as_utc(now or datetime.now(timezone.utc))
    start = end - timedelta(days=days)
    assessments = await store.get_risk_assessments(patient_id, start, end)
    ordered = sorted(assessments, key=lambda a: as_utc(a.created_at))
    return [
        RiskTrendPoint(
            date=as_utc(a.created_at).date(),
            score=a.overall_score,
            level=a.risk_level,
        )
        for a in ordered
    ]


async def load_provider_dashboard(
    store: RiskDataStore, provider_id: str, recent_limit: int = 10
) -> ProviderRiskDashboard:
    """Fetch a provider's patients, their latest assessments and open alerts."""
    patients = await store.list_patients(provider_id)
    latest: dict[str, RiskAssessment] = {}
    alerts: list[RiskAlert] = []
    for patient in patients:
        assessment = await store.get_latest_risk_assessment(patient.patient_id)
        if assessment is not None:
            latest[patient.patient_id] = assessment
        alerts.extend(await store.get_active_alerts(patient.patient_id))
    return build_provider_dashboard(patients, latest, alerts, recent_limit)
