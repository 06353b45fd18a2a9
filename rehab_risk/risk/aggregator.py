"""Composite risk assessment.

Runs the six domain scorers concurrently, combines them into a weighted
0-100 score, derives the risk level, recommendations and trend against the
previous assessment, and persists the result.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from rehab_risk.config import Settings, get_settings
from rehab_risk.models.alert import RiskAlert
from rehab_risk.models.risk import (
    ActionPriority,
    ContributingFactor,
    DataSources,
    DomainScore,
    RecommendedAction,
    RiskAssessment,
    RiskCategory,
    RiskLevel,
    RiskWeights,
    ScoreTrend,
)
from rehab_risk.observability import get_observability_logger
from rehab_risk.risk.scorers import DOMAIN_SCORERS
from rehab_risk.risk.store import RiskDataStore

logger = logging.getLogger(__name__)


# factor key -> (priority, action, category)
FACTOR_RECOMMENDATIONS: dict[str, tuple[ActionPriority, str, str]] = {
    "high_predicted_pain": (ActionPriority.HIGH, "Granska smärthanteringsstrategier", "pain"),
    "critical_pain_risk": (ActionPriority.HIGH, "Granska smärthanteringsstrategier", "pain"),
    "very_low_adherence": (ActionPriority.HIGH, "Diskutera barriärer för träning", "adherence"),
    "extended_inactivity": (ActionPriority.HIGH, "Diskutera barriärer för träning", "adherence"),
    "severe_anxiety": (ActionPriority.HIGH, "Överväg remiss till psykolog/kurator", "psychological"),
    "severe_depression": (ActionPriority.HIGH, "Överväg remiss till psykolog/kurator", "psychological"),
    "high_kinesiophobia": (ActionPriority.MEDIUM, "Implementera graded exposure-protokoll", "psychological"),
    "poor_form_quality": (ActionPriority.MEDIUM, "Schemalägg videogenomgång av övningar", "movement"),
    "frequent_compensation": (ActionPriority.MEDIUM, "Schemalägg videogenomgång av övningar", "movement"),
    "poor_sleep": (ActionPriority.MEDIUM, "Ge sömnhygienråd", "health"),
    "stuck_in_phase": (ActionPriority.HIGH, "Revidera behandlingsplanen", "progression"),
    "declining_function": (ActionPriority.HIGH, "Revidera behandlingsplanen", "progression"),
}

TOP_FACTORS_FOR_RECOMMENDATIONS = 5

_SCORE_FIELDS: dict[RiskCategory, str] = {
    RiskCategory.PAIN: "pain_risk_score",
    RiskCategory.ADHERENCE: "adherence_risk_score",
    RiskCategory.PSYCHOLOGICAL: "psychological_risk_score",
    RiskCategory.MOVEMENT: "movement_quality_score",
    RiskCategory.HEALTH: "health_data_score",
    RiskCategory.PROGRESSION: "progression_score",
}


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def weighted_total(scores: dict[RiskCategory, float], weights: RiskWeights) -> float:
    """Weighted sum of domain scores, clamped to 0-100."""
    total = sum(scores.get(c, 0.0) * weights.for_category(c) for c in RiskCategory)
    return max(0.0, min(100.0, total))


def weighted_score(scores: dict[RiskCategory, float], weights: RiskWeights) -> float:
    """Weighted total rounded to 0.1 for display and storage."""
    return round(weighted_total(scores, weights), 1)


def risk_level_for_score(score: float, settings: Optional[Settings] = None) -> RiskLevel:
    settings = settings or get_settings()
    if score >= settings.critical_threshold:
        return RiskLevel.CRITICAL
    if score >= settings.high_threshold:
        return RiskLevel.HIGH
    if score >= settings.moderate_threshold:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def compute_trend(
    current: float, previous: Optional[float], threshold: float = 5.0
) -> tuple[Optional[float], Optional[ScoreTrend]]:
    """Return (score_change, trend) against the previous score."""
    if previous is None:
        return None, None
    change = round(current - previous, 1)
    if change > threshold:
        return change, ScoreTrend.WORSENING
    if change < -threshold:
        return change, ScoreTrend.IMPROVING
    return change, ScoreTrend.STABLE


def generate_recommendations(
    factors: list[ContributingFactor], risk_level: RiskLevel
) -> list[RecommendedAction]:
    """Provider actions for the top factors; ``factors`` must be sorted by impact."""
    actions: list[RecommendedAction] = []

    if risk_level == RiskLevel.CRITICAL:
        actions.append(
            RecommendedAction(
                priority=ActionPriority.URGENT,
                action="Kontakta patienten omedelbart",
                reason="Kritisk risknivå kräver omedelbar uppföljning",
                category="general",
            )
        )

    for factor in factors[:TOP_FACTORS_FOR_RECOMMENDATIONS]:
        mapped = FACTOR_RECOMMENDATIONS.get(factor.factor)
        if mapped is None:
            continue
        priority, action, category = mapped
        actions.append(
            RecommendedAction(
                priority=priority,
                action=action,
                reason=factor.description,
                category=category,
            )
        )

    return actions


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class RiskAggregator:
    """Builds and stores composite risk assessments for patients."""

    def __init__(self, store: RiskDataStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    async def _score_domains(
        self, patient_id: str, now: datetime
    ) -> dict[RiskCategory, DomainScore]:
        categories = list(DOMAIN_SCORERS)
        results = await asyncio.gather(
            *(DOMAIN_SCORERS[c](self.store, patient_id, now, self.settings) for c in categories),
            return_exceptions=True,
        )

        domains: dict[RiskCategory, DomainScore] = {}
        for category, result in zip(categories, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(
                    "%s scorer raised for patient %s: %s", category.value, patient_id, result
                )
                result = DomainScore(score=0.0, degraded=True)
            domains[category] = result
        return domains

    async def _previous_score(
        self, patient_id: str, notes: list[str]
    ) -> Optional[float]:
        try:
            previous = await self.store.get_latest_risk_assessment(patient_id)
        except Exception as e:
            logger.warning("Could not load previous assessment for %s: %s", patient_id, e)
            notes.append("Föregående bedömning kunde inte hämtas; trend saknas")
            return None
        return previous.overall_score if previous else None

    async def calculate_risk_assessment(
        self,
        patient_id: str,
        weights: Optional[RiskWeights] = None,
        provider_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RiskAssessment:
        """Score all domains, combine them and persist a new assessment.

        A failing scorer degrades its domain to zero. A failing save is logged
        and reported through ``persisted``/``processing_notes``; the computed
        assessment is returned either way.
        """
        weights = weights or self.settings.default_weights()
        now = now or datetime.now(timezone.utc)
        notes: list[str] = []

        obs = get_observability_logger()
        with obs.assessment_run(patient_id=patient_id) as event:
            domains = await self._score_domains(patient_id, now)

            degraded = [c for c, d in domains.items() if d.degraded]
            for category in degraded:
                notes.append(f"Domänen '{category.value}' kunde inte beräknas och räknas som 0")

            total = weighted_total({c: d.score for c, d in domains.items()}, weights)
            overall = round(total, 1)
            # Classify before rounding so 74.96 stays below the critical line
            level = risk_level_for_score(total, self.settings)

            factors = sorted(
                (f for d in domains.values() for f in d.factors),
                key=lambda f: f.impact,
                reverse=True,
            )

            previous = await self._previous_score(patient_id, notes)
            change, trend = compute_trend(overall, previous, self.settings.trend_threshold)

            assessment = RiskAssessment(
                patient_id=patient_id,
                provider_id=provider_id,
                overall_score=overall,
                risk_level=level,
                contributing_factors=factors,
                recommended_actions=generate_recommendations(factors, level),
                previous_score=previous,
                score_trend=trend,
                score_change=change,
                data_sources=_data_sources(domains),
                created_at=now,
                degraded_domains=degraded,
                processing_notes=notes,
                **{_SCORE_FIELDS[c]: round(d.score, 1) for c, d in domains.items()},
            )

            try:
                await self.store.save_risk_assessment(assessment)
                assessment.persisted = True
            except Exception as e:
                logger.warning("Failed to persist risk assessment for %s: %s", patient_id, e)
                assessment.processing_notes.append("Bedömningen kunde inte sparas")

            event.overall_score = assessment.overall_score
            event.risk_level = assessment.risk_level.value
            event.degraded_domains = [c.value for c in degraded]
            event.persisted = assessment.persisted

        logger.info(
            "Risk assessment for %s: %.1f (%s)%s",
            patient_id,
            assessment.overall_score,
            assessment.risk_level.value,
            f" degraded={[c.value for c in degraded]}" if degraded else "",
        )
        return assessment


def _data_sources(domains: dict[RiskCategory, DomainScore]) -> DataSources:
    def count(category: RiskCategory, key: str) -> int:
        domain = domains.get(category)
        return domain.data_counts.get(key, 0) if domain else 0

    return DataSources(
        pain_logs=count(RiskCategory.PAIN, "pain_logs"),
        movement_sessions=count(RiskCategory.MOVEMENT, "movement_sessions"),
        promis_assessment=count(RiskCategory.PSYCHOLOGICAL, "promis29") > 0,
        health_data=count(RiskCategory.HEALTH, "health_samples") > 0,
        psfs_assessment=count(RiskCategory.PROGRESSION, "psfs_assessments") > 0,
    )


async def run_assessment(
    store: RiskDataStore,
    patient_id: str,
    weights: Optional[RiskWeights] = None,
    provider_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> tuple[RiskAssessment, list[RiskAlert]]:
    """Assess a patient and raise any alerts the result warrants."""
    from rehab_risk.risk.alerts import AlertService

    settings = settings or get_settings()
    assessment = await RiskAggregator(store, settings).calculate_risk_assessment(
        patient_id, weights=weights, provider_id=provider_id
    )
    alerts = await AlertService(store, settings).raise_alerts_for(assessment)
    return assessment, alerts
