"""Risk alert creation and lifecycle.

Alerts are raised from a freshly computed assessment and then walked through
their lifecycle by providers::

    active -> acknowledged -> resolved
    active -> dismissed

``resolved`` and ``dismissed`` are terminal.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Optional

from rehab_risk.config import Settings, get_settings
from rehab_risk.exceptions import AlertNotFound, AssessmentNotFound, InvalidAlertTransition
from rehab_risk.models.alert import AlertSeverity, AlertStatus, AlertType, RiskAlert
from rehab_risk.models.risk import RISK_LEVEL_ORDER, RiskAssessment, RiskLevel
from rehab_risk.risk.aggregator import risk_level_for_score
from rehab_risk.risk.scorers import as_utc
from rehab_risk.risk.store import RiskDataStore

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[AlertStatus, frozenset[AlertStatus]] = {
    AlertStatus.ACTIVE: frozenset({AlertStatus.ACKNOWLEDGED, AlertStatus.DISMISSED}),
    AlertStatus.ACKNOWLEDGED: frozenset({AlertStatus.RESOLVED}),
    AlertStatus.RESOLVED: frozenset(),
    AlertStatus.DISMISSED: frozenset(),
}

# factor key -> (alert type, severity, title, message)
FACTOR_ALERTS: dict[str, tuple[AlertType, AlertSeverity, str, str]] = {
    "extended_inactivity": (
        AlertType.NO_ACTIVITY,
        AlertSeverity.WARNING,
        "Ingen träningsaktivitet",
        "Patienten har inte loggat någon träning på länge. Överväg att ta kontakt.",
    ),
    "pain_trend_worsening": (
        AlertType.PAIN_SPIKE,
        AlertSeverity.WARNING,
        "Ökande smärta",
        "Patientens smärtnivåer har ökat den senaste veckan.",
    ),
    "very_low_adherence": (
        AlertType.ADHERENCE_DROP,
        AlertSeverity.INFO,
        "Låg följsamhet",
        "Patienten genomför under 30% av de ordinerade övningarna.",
    ),
}


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def transition_alert(
    alert: RiskAlert,
    target: AlertStatus,
    actor_id: str,
    notes: Optional[str] = None,
    at: Optional[datetime] = None,
) -> RiskAlert:
    """Return a copy of ``alert`` moved to ``target`` and stamped by ``actor_id``.

    Raises InvalidAlertTransition when the move is not allowed from the
    current status.
    """
    if target not in ALLOWED_TRANSITIONS[alert.status]:
        raise InvalidAlertTransition(alert.status.value, target.value)

    at = at or datetime.now(timezone.utc)
    update: dict = {"status": target}
    if target == AlertStatus.ACKNOWLEDGED:
        update.update(acknowledged_at=at, acknowledged_by=actor_id)
    elif target == AlertStatus.RESOLVED:
        update.update(resolved_at=at, resolved_by=actor_id, resolution_notes=notes)
    elif target == AlertStatus.DISMISSED:
        update.update(dismissed_at=at, dismissed_by=actor_id, resolution_notes=notes)

    return alert.model_copy(update=update)


def acknowledge_alert(alert: RiskAlert, actor_id: str, at: Optional[datetime] = None) -> RiskAlert:
    return transition_alert(alert, AlertStatus.ACKNOWLEDGED, actor_id, at=at)


def resolve_alert(
    alert: RiskAlert, actor_id: str, notes: Optional[str] = None, at: Optional[datetime] = None
) -> RiskAlert:
    return transition_alert(alert, AlertStatus.RESOLVED, actor_id, notes=notes, at=at)


def dismiss_alert(
    alert: RiskAlert, actor_id: str, notes: Optional[str] = None, at: Optional[datetime] = None
) -> RiskAlert:
    return transition_alert(alert, AlertStatus.DISMISSED, actor_id, notes=notes, at=at)


def mark_assessment_reviewed(
    assessment: RiskAssessment,
    reviewer_id: str,
    notes: Optional[str] = None,
    at: Optional[datetime] = None,
) -> RiskAssessment:
    """Return a copy of the assessment carrying the review stamp."""
    return assessment.model_copy(
        update={
            "reviewed_at": at or datetime.now(timezone.utc),
            "reviewed_by": reviewer_id,
            "review_notes": notes,
        }
    )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

def _alert(assessment: RiskAssessment, alert_type, severity, title, message, trigger_data):
    return RiskAlert(
        patient_id=assessment.patient_id,
        provider_id=assessment.provider_id,
        assessment_id=assessment.id,
        alert_type=alert_type,
        severity=severity,
        title=title,
        message=message,
        trigger_data=trigger_data,
        created_at=assessment.created_at,
    )


def _crossed_into_high(assessment: RiskAssessment, settings: Settings) -> bool:
    if assessment.risk_level != RiskLevel.HIGH:
        return False
    if assessment.previous_score is None:
        return True
    previous_level = risk_level_for_score(assessment.previous_score, settings)
    return RISK_LEVEL_ORDER[previous_level] < RISK_LEVEL_ORDER[RiskLevel.HIGH]


def evaluate_alerts(
    assessment: RiskAssessment,
    active_alerts: Iterable[RiskAlert] = (),
    settings: Optional[Settings] = None,
) -> list[RiskAlert]:
    """Alerts a new assessment warrants, minus those still in cooldown.

    An open alert of the same type for the patient created within
    ``alert_cooldown_hours`` of the assessment suppresses a new one.
    """
    settings = settings or get_settings()
    if not settings.enable_alerts:
        return []

    score = assessment.overall_score
    candidates: list[RiskAlert] = []

    if settings.alert_on_critical and assessment.risk_level == RiskLevel.CRITICAL:
        candidates.append(
            _alert(
                assessment,
                AlertType.CRITICAL_LEVEL,
                AlertSeverity.CRITICAL,
                "Kritisk risknivå upptäckt",
                f"Patienten har uppnått kritisk risknivå ({round(score)}/100). "
                "Omedelbar uppföljning rekommenderas.",
                {
                    "risk_score": score,
                    "risk_level": assessment.risk_level.value,
                    "pain_score": assessment.pain_risk_score,
                    "adherence_score": assessment.adherence_risk_score,
                },
            )
        )

    if _crossed_into_high(assessment, settings):
        candidates.append(
            _alert(
                assessment,
                AlertType.HIGH_LEVEL,
                AlertSeverity.WARNING,
                "Hög risknivå",
                f"Patienten har nått hög risknivå ({round(score)}/100). "
                "Uppföljning inom kort rekommenderas.",
                {
                    "risk_score": score,
                    "previous_score": assessment.previous_score,
                },
            )
        )

    change = assessment.score_change
    if (
        settings.alert_on_increase
        and assessment.previous_score is not None
        and change is not None
        and change >= settings.risk_increase_alert_threshold
    ):
        severe = assessment.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)
        candidates.append(
            _alert(
                assessment,
                AlertType.RISK_INCREASE,
                AlertSeverity.CRITICAL if severe else AlertSeverity.WARNING,
                "Betydande ökning av risknivå",
                f"Patientens risknivå har ökat med {round(change)} poäng till "
                f"{assessment.risk_level.value} nivå.",
                {
                    "previous_score": assessment.previous_score,
                    "current_score": score,
                    "change": change,
                },
            )
        )

    fired = {f.factor for f in assessment.contributing_factors}
    for factor, (alert_type, severity, title, message) in FACTOR_ALERTS.items():
        if factor in fired:
            candidates.append(
                _alert(assessment, alert_type, severity, title, message, {"factor": factor})
            )

    cutoff = as_utc(assessment.created_at) - timedelta(hours=settings.alert_cooldown_hours)
    cooling = {
        a.alert_type
        for a in active_alerts
        if a.patient_id == assessment.patient_id
        and a.is_open
        and as_utc(a.created_at) >= cutoff
    }

    alerts = [a for a in candidates if a.alert_type not in cooling]
    for skipped in (a for a in candidates if a.alert_type in cooling):
        logger.debug(
            "Suppressed %s alert for %s (cooldown)", skipped.alert_type.value, assessment.patient_id
        )
    return alerts


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AlertService:
    """Applies alert creation and transitions through a record store."""

    def __init__(self, store: RiskDataStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    async def raise_alerts_for(self, assessment: RiskAssessment) -> list[RiskAlert]:
        """Evaluate and save alerts for an assessment.

        Nothing is raised for an assessment that was not persisted, since the
        alert would reference a missing row.
        """
        if not assessment.persisted:
            logger.warning(
                "Skipping alerts for unsaved assessment %s (%s)",
                assessment.id,
                assessment.patient_id,
            )
            return []

        active = await self.store.get_active_alerts(assessment.patient_id)
        alerts = evaluate_alerts(assessment, active, self.settings)
        for alert in alerts:
            await self.store.save_alert(alert)
            logger.info(
                "Raised %s alert (%s) for patient %s",
                alert.alert_type.value,
                alert.severity.value,
                alert.patient_id,
            )
        return alerts

    async def _load(self, alert_id: uuid.UUID) -> RiskAlert:
        alert = await self.store.get_alert(alert_id)
        if alert is None:
            raise AlertNotFound(f"Alert {alert_id} not found")
        return alert

    async def transition(
        self,
        alert_id: uuid.UUID,
        target: AlertStatus,
        actor_id: str,
        notes: Optional[str] = None,
    ) -> RiskAlert:
        alert = await self._load(alert_id)
        updated = transition_alert(alert, target, actor_id, notes=notes)
        await self.store.update_alert(updated)
        logger.info(
            "Alert %s: %s -> %s by %s", alert_id, alert.status.value, target.value, actor_id
        )
        return updated

    async def acknowledge(self, alert_id: uuid.UUID, actor_id: str) -> RiskAlert:
        return await self.transition(alert_id, AlertStatus.ACKNOWLEDGED, actor_id)

    async def resolve(
        self, alert_id: uuid.UUID, actor_id: str, notes: Optional[str] = None
    ) -> RiskAlert:
        return await self.transition(alert_id, AlertStatus.RESOLVED, actor_id, notes)

    async def dismiss(
        self, alert_id: uuid.UUID, actor_id: str, notes: Optional[str] = None
    ) -> RiskAlert:
        return await self.transition(alert_id, AlertStatus.DISMISSED, actor_id, notes)

    async def review_assessment(
        self, assessment_id: uuid.UUID, reviewer_id: str, notes: Optional[str] = None
    ) -> RiskAssessment:
        assessment = await self.store.get_risk_assessment(assessment_id)
        if assessment is None:
            raise AssessmentNotFound(f"Assessment {assessment_id} not found")
        reviewed = mark_assessment_reviewed(assessment, reviewer_id, notes)
        await self.store.update_risk_assessment_review(reviewed)
        logger.info("Assessment %s reviewed by %s", assessment_id, reviewer_id)
        return reviewed
