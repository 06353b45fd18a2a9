"""Domain risk scorers.

Each scorer reads a bounded window of patient records from the store and adds
points for every rule that fires, recording a :class:`ContributingFactor` per
rule. Scores are clamped to 0-100 (higher = more risk).

A scorer never raises: if the store fails, the error is logged and the domain
contributes zero with ``degraded=True``.
"""
from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta, timezone
from statistics import fmean
from typing import Optional

from rehab_risk.config import Settings, get_settings
from rehab_risk.models.records import HealthMetric
from rehab_risk.models.risk import ContributingFactor, DomainScore, RiskCategory
from rehab_risk.risk.store import RiskDataStore

logger = logging.getLogger(__name__)

Scorer = Callable[[RiskDataStore, str, datetime, Optional[Settings]], Awaitable[DomainScore]]

DEFAULT_PROGRAM_FREQUENCY = 3.0
DEFAULT_PHASE_WEEKS = 4.0


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _ScoreBuilder:
    """Accumulates points and factors for one domain."""

    def __init__(self, category: RiskCategory):
        self.category = category
        self.score = 0.0
        self.factors: list[ContributingFactor] = []
        self.data_counts: dict[str, int] = {}

    def add(self, points: float, factor: str, impact: float, description: str) -> None:
        self.score += points
        self.factors.append(
            ContributingFactor(
                factor=factor,
                impact=impact,
                description=description,
                category=self.category,
            )
        )

    def build(self) -> DomainScore:
        return DomainScore(
            score=min(self.score, 100.0),
            factors=self.factors,
            data_counts=self.data_counts,
        )


def fail_open(category: RiskCategory):
    """Turn any scorer exception into a degraded zero score."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(store, patient_id, now=None, settings=None) -> DomainScore:
            now = as_utc(now or datetime.now(timezone.utc))
            try:
                return await func(store, patient_id, now, settings or get_settings())
            except Exception:
                logger.exception(
                    "%s scorer failed for patient %s; contributing 0",
                    category.value,
                    patient_id,
                )
                return DomainScore(score=0.0, factors=[], degraded=True)

        wrapper.category = category
        return wrapper

    return decorator


def _newest_first(records: Sequence, attr: str) -> list:
    return sorted(records, key=lambda r: as_utc(getattr(r, attr)), reverse=True)


# ---------------------------------------------------------------------------
# Pain
# ---------------------------------------------------------------------------

@fail_open(RiskCategory.PAIN)
async def score_pain(
    store: RiskDataStore, patient_id: str, now: datetime, settings: Settings
) -> DomainScore:
    """Predicted pain, predicted risk tier, and a worsening 7-day trend."""
    result = _ScoreBuilder(RiskCategory.PAIN)

    prediction = await store.get_latest_pain_prediction(patient_id)
    if prediction is not None:
        horizon = prediction.horizon_24h
        if horizon >= 7:
            result.add(40, "high_predicted_pain", 0.8, f"Förväntad smärta om 24h: {horizon:g}/10")
        elif horizon >= 5:
            result.add(20, "moderate_predicted_pain", 0.4, f"Förväntad smärta om 24h: {horizon:g}/10")

        if prediction.risk_level_24h == "critical":
            result.add(30, "critical_pain_risk", 0.9, "Kritisk risk för smärta enligt prediktion")
        elif prediction.risk_level_24h == "high":
            result.add(15, "high_pain_risk", 0.5, "Hög risk för smärta enligt prediktion")

    start = now - timedelta(days=settings.pain_window_days)
    logs = _newest_first(await store.get_pain_logs(patient_id, start, now), "logged_at")
    result.data_counts["pain_logs"] = len(logs)

    if len(logs) >= 3:
        recent = fmean(log.pain_level for log in logs[:3])
        older = fmean(log.pain_level for log in logs[-3:])
        if recent > older + 1.5:
            result.add(
                25,
                "pain_trend_worsening",
                0.7,
                f"Smärta ökande senaste {settings.pain_window_days} dagarna "
                f"(+{recent - older:.1f} poäng)",
            )

    return result.build()


# ---------------------------------------------------------------------------
# Adherence
# ---------------------------------------------------------------------------

@fail_open(RiskCategory.ADHERENCE)
async def score_adherence(
    store: RiskDataStore, patient_id: str, now: datetime, settings: Settings
) -> DomainScore:
    """Completed sessions against the prescribed frequency, and days idle."""
    result = _ScoreBuilder(RiskCategory.ADHERENCE)
    window = settings.adherence_window_days

    program = await store.get_active_program(patient_id)
    if program is not None:
        logs = await store.get_exercise_logs(patient_id, now - timedelta(days=window), now)
        result.data_counts["exercise_logs"] = len(logs)

        frequency = program.frequency_per_week or DEFAULT_PROGRAM_FREQUENCY
        expected = window * frequency / 7
        rate = min(len(logs) / expected, 1.0)
        pct = round(rate * 100)

        if rate < 0.5:
            result.add(50, "very_low_adherence", 0.9, f"Endast {pct}% av träningarna genomförda")
        elif rate < 0.7:
            result.add(30, "low_adherence", 0.6, f"{pct}% av träningarna genomförda")
        elif rate < 0.85:
            result.add(15, "moderate_adherence", 0.3, f"{pct}% av träningarna genomförda")

    last = await store.get_last_exercise_log(patient_id)
    if last is not None:
        idle_days = (now - as_utc(last.completed_at)).days
        if idle_days >= 7:
            result.add(40, "extended_inactivity", 0.85, f"Ingen aktivitet på {idle_days} dagar")
        elif idle_days >= 4:
            result.add(25, "recent_inactivity", 0.5, f"Ingen aktivitet på {idle_days} dagar")

    return result.build()


# ---------------------------------------------------------------------------
# Psychological
# ---------------------------------------------------------------------------

@fail_open(RiskCategory.PSYCHOLOGICAL)
async def score_psychological(
    store: RiskDataStore, patient_id: str, now: datetime, settings: Settings
) -> DomainScore:
    """PROMIS-29 anxiety, depression and sleep T-scores plus TSK-11 kinesiophobia."""
    result = _ScoreBuilder(RiskCategory.PSYCHOLOGICAL)

    promis = await store.get_latest_promis29(patient_id)
    if promis is not None:
        result.data_counts["promis29"] = 1

        anxiety = promis.anxiety_tscore
        if anxiety is not None:
            if anxiety >= 65:
                result.add(30, "severe_anxiety", 0.85, f"Allvarlig ångestnivå (T-score: {anxiety:g})")
            elif anxiety >= 60:
                result.add(15, "moderate_anxiety", 0.5, f"Måttlig ångestnivå (T-score: {anxiety:g})")

        depression = promis.depression_tscore
        if depression is not None:
            if depression >= 65:
                result.add(30, "severe_depression", 0.85, f"Allvarlig depressionsnivå (T-score: {depression:g})")
            elif depression >= 60:
                result.add(15, "moderate_depression", 0.5, f"Måttlig depressionsnivå (T-score: {depression:g})")

        sleep = promis.sleep_disturbance_tscore
        if sleep is not None and sleep >= 60:
            result.add(15, "sleep_issues", 0.4, f"Sömnproblem (T-score: {sleep:g})")

    tsk = await store.get_latest_tsk11(patient_id)
    if tsk is not None:
        if tsk.score >= 40:
            result.add(25, "high_kinesiophobia", 0.8, f"Hög rörelserädsla (TSK-11: {tsk.score:g})")
        elif tsk.score >= 30:
            result.add(10, "moderate_kinesiophobia", 0.4, f"Måttlig rörelserädsla (TSK-11: {tsk.score:g})")

    return result.build()


# ---------------------------------------------------------------------------
# Movement quality
# ---------------------------------------------------------------------------

@fail_open(RiskCategory.MOVEMENT)
async def score_movement(
    store: RiskDataStore, patient_id: str, now: datetime, settings: Settings
) -> DomainScore:
    """Form scores, their trend, compensation patterns and ROM achieved."""
    result = _ScoreBuilder(RiskCategory.MOVEMENT)

    start = now - timedelta(days=settings.movement_window_days)
    sessions = _newest_first(
        await store.get_movement_sessions(patient_id, start, now), "session_date"
    )
    result.data_counts["movement_sessions"] = len(sessions)
    if not sessions:
        return result.build()

    form_scores = [s.average_score or 0.0 for s in sessions]
    avg_form = fmean(form_scores)
    if avg_form < 60:
        result.add(40, "poor_form_quality", 0.8, f"Låg genomsnittlig formkvalitet ({round(avg_form)}/100)")
    elif avg_form < 75:
        result.add(20, "moderate_form_quality", 0.4, f"Måttlig formkvalitet ({round(avg_form)}/100)")

    if len(sessions) >= 4:
        recent = fmean(form_scores[:2])
        older = fmean(form_scores[-2:])
        if recent < older - 10:
            result.add(
                25,
                "declining_movement_quality",
                0.6,
                f"Försämrad rörelsekvalitet (-{round(older - recent)} poäng)",
            )

    with_issues = sum(1 for s in sessions if s.has_high_severity_issue)
    if with_issues > len(sessions) * 0.5:
        result.add(20, "frequent_compensation", 0.5, "Frekventa kompensationsmönster upptäckta")

    # Missing ROM counts as on target
    avg_rom = fmean(s.rom_achieved if s.rom_achieved is not None else 100.0 for s in sessions)
    if avg_rom < 70:
        result.add(15, "limited_rom", 0.4, f"Begränsat rörelseomfång ({round(avg_rom)}% av mål)")

    return result.build()


# ---------------------------------------------------------------------------
# Wearable health data
# ---------------------------------------------------------------------------

@fail_open(RiskCategory.HEALTH)
async def score_health(
    store: RiskDataStore, patient_id: str, now: datetime, settings: Settings
) -> DomainScore:
    """Sleep duration, HRV and daily steps from wearable samples."""
    result = _ScoreBuilder(RiskCategory.HEALTH)

    start = now - timedelta(days=settings.health_window_days)
    samples = await store.get_health_samples(patient_id, start, now)
    result.data_counts["health_samples"] = len(samples)

    def _mean(metric: HealthMetric) -> Optional[float]:
        values = [s.value or 0.0 for s in samples if s.data_type == metric]
        return fmean(values) if values else None

    sleep = _mean(HealthMetric.SLEEP_ANALYSIS)
    if sleep is not None:
        if sleep < 6:
            result.add(30, "poor_sleep", 0.7, f"Otillräcklig sömn ({sleep:.1f} timmar i genomsnitt)")
        elif sleep < 7:
            result.add(15, "moderate_sleep", 0.4, f"Något kort sömn ({sleep:.1f} timmar i genomsnitt)")

    hrv = _mean(HealthMetric.HEART_RATE_VARIABILITY)
    if hrv is not None and hrv < 30:
        result.add(25, "low_hrv", 0.6, f"Låg HRV indikerar stress/trötthet ({round(hrv)} ms)")

    steps = _mean(HealthMetric.STEPS)
    if steps is not None:
        if steps < 3000:
            result.add(20, "low_activity", 0.5, f"Låg daglig aktivitet ({round(steps)} steg/dag)")
        elif steps > 15000:
            result.add(15, "overactivity", 0.4, f"Möjlig överansträngning ({round(steps)} steg/dag)")

    return result.build()


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------

@fail_open(RiskCategory.PROGRESSION)
async def score_progression(
    store: RiskDataStore, patient_id: str, now: datetime, settings: Settings
) -> DomainScore:
    """Time in the current program phase and PSFS functional change."""
    result = _ScoreBuilder(RiskCategory.PROGRESSION)

    program = await store.get_active_program(patient_id)
    if program is not None:
        phase_start = as_utc(program.phase_started_at or program.created_at)
        weeks_in_phase = (now - phase_start).days // 7
        expected = program.phase_duration_weeks or DEFAULT_PHASE_WEEKS
        phase = program.current_phase

        if weeks_in_phase > expected * 1.5:
            result.add(
                35,
                "stuck_in_phase",
                0.7,
                f"Fas {phase} överskrider förväntad tid ({weeks_in_phase}/{expected:g} veckor)",
            )
        elif weeks_in_phase > expected:
            result.add(15, "slow_progression", 0.4, f"Fas {phase} tar längre än förväntat")

    psfs = sorted(
        await store.get_psfs_assessments(patient_id, limit=2),
        key=lambda a: as_utc(a.assessed_at),
    )
    result.data_counts["psfs_assessments"] = len(psfs)
    if len(psfs) == 2:
        improvement = psfs[1].average_score - psfs[0].average_score
        if improvement < 0:
            result.add(30, "declining_function", 0.7, f"Funktionell försämring (PSFS: {improvement:.1f} poäng)")
        elif improvement < 2:
            result.add(15, "minimal_improvement", 0.4, f"Minimal funktionell förbättring (PSFS: +{improvement:.1f})")

    return result.build()


DOMAIN_SCORERS: dict[RiskCategory, Scorer] = {
    RiskCategory.PAIN: score_pain,
    RiskCategory.ADHERENCE: score_adherence,
    RiskCategory.PSYCHOLOGICAL: score_psychological,
    RiskCategory.MOVEMENT: score_movement,
    RiskCategory.HEALTH: score_health,
    RiskCategory.PROGRESSION: score_progression,
}
