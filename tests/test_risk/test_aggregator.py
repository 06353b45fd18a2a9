"""Tests for composite risk assessment."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from rehab_risk.models.records import (
    ActiveProgram,
    ExerciseLog,
    Promis29Assessment,
    Tsk11Assessment,
)
from rehab_risk.models.risk import (
    ActionPriority,
    ContributingFactor,
    DomainScore,
    RiskAssessment,
    RiskCategory,
    RiskLevel,
    RiskWeights,
    ScoreTrend,
)
from rehab_risk.risk.aggregator import (
    RiskAggregator,
    compute_trend,
    generate_recommendations,
    risk_level_for_score,
    run_assessment,
    weighted_score,
    weighted_total,
)


NOW = datetime(2026, 3, 16, 12, 0, tzinfo=timezone.utc)
PATIENT = "patient-1"


def _factor(key, impact=0.5, category=RiskCategory.PAIN):
    return ContributingFactor(factor=key, impact=impact, description=f"{key} beskrivning", category=category)


def _constant_scorers(score):
    async def scorer(store, patient_id, now=None, settings=None):
        return DomainScore(score=score)

    return {c: scorer for c in RiskCategory}


@pytest.fixture
def at_risk_store(store):
    """Patient with no recent training and an elevated PROMIS/TSK profile."""
    store.programs.append(ActiveProgram(patient_id=PATIENT, created_at=NOW - timedelta(days=7)))
    store.exercise_logs.append(ExerciseLog(patient_id=PATIENT, completed_at=NOW - timedelta(days=20)))
    store.promis29.append(
        Promis29Assessment(
            patient_id=PATIENT,
            assessed_at=NOW - timedelta(days=2),
            anxiety_tscore=66,
            depression_tscore=61,
            sleep_disturbance_tscore=60,
        )
    )
    store.tsk11.append(Tsk11Assessment(patient_id=PATIENT, assessed_at=NOW - timedelta(days=2), score=42))
    return store


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestWeightedScore:
    def test_single_domain(self):
        """Test a single domain is scaled by its weight."""
        assert weighted_score({RiskCategory.PAIN: 100}, RiskWeights()) == 25.0

    def test_missing_domains_count_as_zero(self):
        """Test domains without a score count as zero."""
        assert weighted_score({}, RiskWeights()) == 0.0

    def test_clamped_to_100(self):
        """Test weights summing above one still cap at 100."""
        weights = RiskWeights(pain=1, adherence=1, psychological=1, movement=1, health=1, progression=1)
        scores = {c: 100.0 for c in RiskCategory}

        assert weighted_score(scores, weights) == 100.0

    def test_rounded_to_one_decimal(self):
        """Test the score is rounded to one decimal."""
        assert weighted_score({RiskCategory.HEALTH: 33.33}, RiskWeights()) == 3.3

    def test_total_keeps_full_precision(self):
        """Test the total before rounding keeps full precision."""
        assert weighted_total({RiskCategory.HEALTH: 33.33}, RiskWeights()) == pytest.approx(3.333)

    def test_negative_weights_rejected(self):
        """Test negative weights fail validation."""
        with pytest.raises(ValidationError):
            RiskWeights(pain=-0.1)

    def test_default_weights_sum_to_one(self):
        """Test the default weights sum to one."""
        assert RiskWeights().total == pytest.approx(1.0)


class TestRiskLevel:
    @pytest.mark.parametrize(
        "score,level",
        [
            (0, RiskLevel.LOW),
            (24.9, RiskLevel.LOW),
            (25, RiskLevel.MODERATE),
            (49.9, RiskLevel.MODERATE),
            (50, RiskLevel.HIGH),
            (74.9, RiskLevel.HIGH),
            (75, RiskLevel.CRITICAL),
            (100, RiskLevel.CRITICAL),
        ],
    )
    def test_breakpoints(self, settings, score, level):
        """Test the score thresholds for each risk level."""
        assert risk_level_for_score(score, settings) == level


class TestComputeTrend:
    def test_no_previous(self):
        """Test no trend without a previous score."""
        assert compute_trend(50, None) == (None, None)

    def test_worsening(self):
        """Test a rise beyond the threshold is worsening."""
        assert compute_trend(60, 50) == (10.0, ScoreTrend.WORSENING)

    def test_improving(self):
        """Test a drop beyond the threshold is improving."""
        assert compute_trend(40, 50) == (-10.0, ScoreTrend.IMPROVING)

    def test_threshold_is_stable(self):
        """Test a change equal to the threshold is stable."""
        assert compute_trend(55, 50) == (5.0, ScoreTrend.STABLE)
        assert compute_trend(45, 50) == (-5.0, ScoreTrend.STABLE)

    @pytest.mark.parametrize(
        "current,change,trend",
        [
            (48, 8.0, ScoreTrend.WORSENING),
            (33, -7.0, ScoreTrend.IMPROVING),
            (42, 2.0, ScoreTrend.STABLE),
        ],
    )
    def test_against_previous_forty(self, current, change, trend):
        """Test changes beyond five points either way move the trend."""
        assert compute_trend(current, 40) == (change, trend)

    def test_custom_threshold(self):
        """Test a custom trend threshold."""
        assert compute_trend(53, 50, threshold=2) == (3.0, ScoreTrend.WORSENING)


class TestGenerateRecommendations:
    def test_critical_adds_urgent_contact_first(self):
        """Test critical risk puts an urgent contact action first."""
        actions = generate_recommendations([_factor("poor_sleep")], RiskLevel.CRITICAL)

        assert actions[0].priority == ActionPriority.URGENT
        assert actions[0].action == "Kontakta patienten omedelbart"
        assert actions[0].category == "general"
        assert actions[1].action == "Ge sömnhygienråd"
        assert actions[1].reason == "poor_sleep beskrivning"

    def test_unmapped_factors_skipped(self):
        """Test factors without a mapped action are skipped."""
        actions = generate_recommendations([_factor("moderate_sleep")], RiskLevel.LOW)

        assert actions == []

    def test_only_top_five_factors(self):
        """Test only the five strongest factors produce actions."""
        factors = [_factor(f"unmapped_{i}") for i in range(5)] + [_factor("poor_sleep")]

        assert generate_recommendations(factors, RiskLevel.MODERATE) == []


# ---------------------------------------------------------------------------
# RiskAggregator
# ---------------------------------------------------------------------------


class TestRiskAggregator:
    """Tests for RiskAggregator.calculate_risk_assessment()."""

    async def test_no_data(self, store, settings):
        """Test a patient with no data gets a low, persisted assessment."""
        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.overall_score == 0.0
        assert assessment.risk_level == RiskLevel.LOW
        assert assessment.contributing_factors == []
        assert assessment.recommended_actions == []
        assert assessment.previous_score is None
        assert assessment.score_trend is None
        assert assessment.persisted is True
        assert assessment.created_at == NOW
        assert len(store.assessments) == 1

    async def test_combines_domains(self, at_risk_store, settings):
        """Test domain scores combine with the default weights."""
        assessment = await RiskAggregator(at_risk_store, settings).calculate_risk_assessment(
            PATIENT, provider_id="pt-1", now=NOW
        )

        # adherence 90 * 0.2 + psychological 85 * 0.2
        assert assessment.overall_score == 35.0
        assert assessment.risk_level == RiskLevel.MODERATE
        assert assessment.adherence_risk_score == 90.0
        assert assessment.psychological_risk_score == 85.0
        assert assessment.pain_risk_score == 0.0
        assert assessment.provider_id == "pt-1"
        assert assessment.data_sources.promis_assessment is True
        assert assessment.data_sources.pain_logs == 0

    async def test_factors_sorted_by_impact(self, at_risk_store, settings):
        """Test contributing factors are ordered by impact."""
        assessment = await RiskAggregator(at_risk_store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        impacts = [f.impact for f in assessment.contributing_factors]
        assert impacts == sorted(impacts, reverse=True)
        assert assessment.contributing_factors[0].factor == "very_low_adherence"

    async def test_recommendations_from_top_factors(self, at_risk_store, settings):
        """Test recommendations follow the top factors."""
        assessment = await RiskAggregator(at_risk_store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        actions = [a.action for a in assessment.recommended_actions]
        assert actions == [
            "Diskutera barriärer för träning",
            "Diskutera barriärer för träning",
            "Överväg remiss till psykolog/kurator",
            "Implementera graded exposure-protokoll",
        ]

    async def test_trend_against_previous(self, at_risk_store, settings):
        """Test the trend is computed against the previous assessment."""
        at_risk_store.assessments.append(
            RiskAssessment(
                patient_id=PATIENT,
                overall_score=10.0,
                risk_level=RiskLevel.LOW,
                created_at=NOW - timedelta(days=1),
            )
        )

        assessment = await RiskAggregator(at_risk_store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.previous_score == 10.0
        assert assessment.score_change == 25.0
        assert assessment.score_trend == ScoreTrend.WORSENING

    async def test_failing_scorer_degrades_domain(self, at_risk_store, settings):
        """Test a store error degrades only its domain."""
        at_risk_store.failing = {"get_latest_promis29"}

        assessment = await RiskAggregator(at_risk_store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.degraded_domains == [RiskCategory.PSYCHOLOGICAL]
        assert assessment.psychological_risk_score == 0.0
        assert assessment.overall_score == 18.0
        assert "Domänen 'psychological' kunde inte beräknas och räknas som 0" in assessment.processing_notes

    async def test_raising_scorer_degrades_domain(self, store, settings, monkeypatch):
        """Test a scorer that raises is degraded to zero."""
        async def broken(store, patient_id, now=None, settings=None):
            raise RuntimeError("boom")

        scorers = _constant_scorers(50.0)
        scorers[RiskCategory.PAIN] = broken
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", scorers)

        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.degraded_domains == [RiskCategory.PAIN]
        assert assessment.overall_score == 37.5

    async def test_previous_lookup_failure(self, store, settings):
        """Test a failed previous lookup drops the trend with a note."""
        store.failing = {"get_latest_risk_assessment"}

        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.score_trend is None
        assert "Föregående bedömning kunde inte hämtas; trend saknas" in assessment.processing_notes
        assert assessment.persisted is True

    async def test_save_failure_still_returns_assessment(self, store, settings):
        """Test a failed save still returns the assessment."""
        store.failing = {"save_risk_assessment"}

        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.persisted is False
        assert "Bedömningen kunde inte sparas" in assessment.processing_notes
        assert store.assessments == []

    async def test_all_domains_maxed(self, store, settings, monkeypatch):
        """Test maximum domain scores give a critical assessment."""
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", _constant_scorers(100.0))

        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        assert assessment.overall_score == 100.0
        assert assessment.risk_level == RiskLevel.CRITICAL
        assert assessment.recommended_actions[0].priority == ActionPriority.URGENT

    async def test_custom_weights(self, store, settings, monkeypatch):
        """Test caller supplied weights are used."""
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", _constant_scorers(60.0))
        weights = RiskWeights(pain=0.5, adherence=0, psychological=0, movement=0, health=0, progression=0)

        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(
            PATIENT, weights=weights, now=NOW
        )

        assert assessment.overall_score == 30.0

    async def test_level_from_unrounded_score(self, store, settings, monkeypatch):
        """Test a total just under a threshold keeps the lower level when it rounds up."""
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", _constant_scorers(74.96))
        weights = RiskWeights(pain=1.0, adherence=0, psychological=0, movement=0, health=0, progression=0)

        assessment = await RiskAggregator(store, settings).calculate_risk_assessment(
            PATIENT, weights=weights, now=NOW
        )

        assert assessment.overall_score == 75.0
        assert assessment.risk_level == RiskLevel.HIGH

    async def test_run_is_logged(self, store, settings, obs_logger):
        """Test each run emits an assessment event."""
        await RiskAggregator(store, settings).calculate_risk_assessment(PATIENT, now=NOW)

        events = obs_logger.get_recent_events("assessments")
        assert len(events) == 1
        assert events[0]["event_type"] == "assessment_success"
        assert events[0]["patient_id"] == PATIENT
        assert events[0]["risk_level"] == "low"
        assert events[0]["persisted"] is True


class TestRunAssessment:
    async def test_raises_alerts(self, store, settings, monkeypatch):
        """Test a critical assessment raises and stores an alert."""
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", _constant_scorers(100.0))

        assessment, alerts = await run_assessment(store, PATIENT, provider_id="pt-1", settings=settings)

        assert assessment.risk_level == RiskLevel.CRITICAL
        assert [a.alert_type.value for a in alerts] == ["critical_level"]
        assert alerts[0].provider_id == "pt-1"
        assert set(store.alerts) == {alerts[0].id}

    async def test_no_alerts_for_low_risk(self, store, settings):
        """Test a low assessment raises no alerts."""
        assessment, alerts = await run_assessment(store, PATIENT, settings=settings)

        assert assessment.risk_level == RiskLevel.LOW
        assert alerts == []
