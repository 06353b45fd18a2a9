"""Tests for the six domain scorers."""

from datetime import datetime, timedelta, timezone

import pytest

from rehab_risk.models.records import (
    ActiveProgram,
    ExerciseLog,
    FormIssue,
    FormIssueSeverity,
    HealthMetric,
    HealthSample,
    MovementSession,
    PainLog,
    PainPrediction,
    Promis29Assessment,
    PsfsAssessment,
    Tsk11Assessment,
)
from rehab_risk.models.risk import RiskCategory
from rehab_risk.risk.scorers import (
    DOMAIN_SCORERS,
    as_utc,
    score_adherence,
    score_health,
    score_movement,
    score_pain,
    score_progression,
    score_psychological,
)


NOW = datetime(2026, 3, 16, 12, 0, tzinfo=timezone.utc)
PATIENT = "patient-1"


def ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def factor_keys(result):
    return [f.factor for f in result.factors]


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


class TestScorerContract:
    def test_every_category_has_a_scorer(self):
        """Test each risk category maps to its scorer."""
        assert set(DOMAIN_SCORERS) == set(RiskCategory)
        for category, scorer in DOMAIN_SCORERS.items():
            assert scorer.category == category

    def test_as_utc(self):
        """Test naive timestamps are treated as UTC."""
        naive = datetime(2026, 1, 1, 8, 0)

        assert as_utc(naive).tzinfo == timezone.utc
        assert as_utc(NOW) is NOW

    @pytest.mark.parametrize("category", list(RiskCategory))
    async def test_no_data_scores_zero(self, store, settings, category):
        """Test a patient with no data scores zero in every domain."""
        result = await DOMAIN_SCORERS[category](store, PATIENT, NOW, settings)

        assert result.score == 0
        assert result.factors == []
        assert result.degraded is False

    async def test_store_failure_degrades(self, store, settings):
        """Test a store error yields a degraded zero score."""
        store.failing = {"get_pain_logs"}

        result = await score_pain(store, PATIENT, NOW, settings)

        assert result.degraded is True
        assert result.score == 0
        assert result.factors == []

    async def test_now_defaults_to_current_time(self, store, settings):
        """Test scoring works without an explicit reference time."""
        result = await score_health(store, PATIENT, settings=settings)

        assert result.degraded is False


# ---------------------------------------------------------------------------
# Pain
# ---------------------------------------------------------------------------


class TestPainScorer:
    async def test_high_prediction_with_critical_tier(self, store, settings):
        """Test a high 24h prediction with critical tier scores 70."""
        store.pain_predictions.append(
            PainPrediction(patient_id=PATIENT, predicted_at=ago(0.1), horizon_24h=8, risk_level_24h="critical")
        )

        result = await score_pain(store, PATIENT, NOW, settings)

        assert result.score == 70
        assert factor_keys(result) == ["high_predicted_pain", "critical_pain_risk"]
        assert result.factors[0].impact == 0.8
        assert result.factors[0].category == RiskCategory.PAIN

    async def test_moderate_prediction_with_high_tier(self, store, settings):
        """Test a moderate 24h prediction with high tier scores 35."""
        store.pain_predictions.append(
            PainPrediction(patient_id=PATIENT, predicted_at=ago(0.1), horizon_24h=5.5, risk_level_24h="high")
        )

        result = await score_pain(store, PATIENT, NOW, settings)

        assert result.score == 35
        assert factor_keys(result) == ["moderate_predicted_pain", "high_pain_risk"]

    async def test_worsening_trend(self, store, settings):
        """Test recent pain well above earlier pain is flagged as worsening."""
        for days, level in [(0.5, 7), (1, 7), (2, 7), (4, 2), (5, 2), (6, 2)]:
            store.pain_logs.append(PainLog(patient_id=PATIENT, logged_at=ago(days), pain_level=level))

        result = await score_pain(store, PATIENT, NOW, settings)

        assert result.score == 25
        assert factor_keys(result) == ["pain_trend_worsening"]
        assert result.data_counts["pain_logs"] == 6

    async def test_stable_trend(self, store, settings):
        """Test flat pain levels add no score."""
        for days in (1, 2, 3, 4):
            store.pain_logs.append(PainLog(patient_id=PATIENT, logged_at=ago(days), pain_level=4))

        result = await score_pain(store, PATIENT, NOW, settings)

        assert result.score == 0

    async def test_logs_outside_window_ignored(self, store, settings):
        """Test pain logs older than the window are not counted."""
        for days, level in [(0.5, 8), (1, 8), (10, 1), (11, 1), (12, 1)]:
            store.pain_logs.append(PainLog(patient_id=PATIENT, logged_at=ago(days), pain_level=level))

        result = await score_pain(store, PATIENT, NOW, settings)

        assert result.data_counts["pain_logs"] == 2
        assert result.score == 0


# ---------------------------------------------------------------------------
# Adherence
# ---------------------------------------------------------------------------


class TestAdherenceScorer:
    @pytest.fixture
    def program_store(self, store):
        store.programs.append(ActiveProgram(patient_id=PATIENT, created_at=ago(30), frequency_per_week=3))
        return store

    def _log_sessions(self, store, count):
        for i in range(count):
            store.exercise_logs.append(ExerciseLog(patient_id=PATIENT, completed_at=ago(1 + i)))

    @pytest.mark.parametrize(
        "sessions,expected_score,expected_factor",
        [
            (2, 50, "very_low_adherence"),
            (4, 30, "low_adherence"),
            (5, 15, "moderate_adherence"),
        ],
    )
    async def test_adherence_bands(self, program_store, settings, sessions, expected_score, expected_factor):
        """Test completion ratios map to adherence bands."""
        self._log_sessions(program_store, sessions)

        result = await score_adherence(program_store, PATIENT, NOW, settings)

        assert result.score == expected_score
        assert factor_keys(result) == [expected_factor]
        assert result.data_counts["exercise_logs"] == sessions

    async def test_full_adherence(self, program_store, settings):
        """Test meeting the expected sessions scores zero."""
        self._log_sessions(program_store, 6)

        result = await score_adherence(program_store, PATIENT, NOW, settings)

        assert result.score == 0

    async def test_program_frequency_sets_expectation(self, store, settings):
        """Test the program frequency sets the expected session count."""
        store.programs.append(ActiveProgram(patient_id=PATIENT, created_at=ago(30), frequency_per_week=7))
        self._log_sessions(store, 6)

        result = await score_adherence(store, PATIENT, NOW, settings)

        # 6 of 14 expected sessions
        assert factor_keys(result) == ["very_low_adherence"]

    async def test_extended_inactivity_without_program(self, store, settings):
        """Test a week without training is flagged even without a program."""
        store.exercise_logs.append(ExerciseLog(patient_id=PATIENT, completed_at=ago(8)))

        result = await score_adherence(store, PATIENT, NOW, settings)

        assert result.score == 40
        assert factor_keys(result) == ["extended_inactivity"]
        assert "exercise_logs" not in result.data_counts

    async def test_recent_inactivity(self, store, settings):
        """Test four to seven idle days is flagged as recent inactivity."""
        store.exercise_logs.append(ExerciseLog(patient_id=PATIENT, completed_at=ago(5)))

        result = await score_adherence(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["recent_inactivity"]
        assert result.score == 25

    async def test_no_sessions_and_long_idle(self, program_store, settings):
        """Test low adherence and long inactivity add up."""
        program_store.exercise_logs.append(ExerciseLog(patient_id=PATIENT, completed_at=ago(20)))

        result = await score_adherence(program_store, PATIENT, NOW, settings)

        assert result.score == 90
        assert factor_keys(result) == ["very_low_adherence", "extended_inactivity"]


# ---------------------------------------------------------------------------
# Psychological
# ---------------------------------------------------------------------------


class TestPsychologicalScorer:
    async def test_all_domains_elevated(self, store, settings):
        """Test elevated PROMIS-29 and TSK-11 scores combine."""
        store.promis29.append(
            Promis29Assessment(
                patient_id=PATIENT,
                assessed_at=ago(3),
                anxiety_tscore=66,
                depression_tscore=61,
                sleep_disturbance_tscore=60,
            )
        )
        store.tsk11.append(Tsk11Assessment(patient_id=PATIENT, assessed_at=ago(3), score=42))

        result = await score_psychological(store, PATIENT, NOW, settings)

        assert result.score == 85
        assert factor_keys(result) == [
            "severe_anxiety",
            "moderate_depression",
            "sleep_issues",
            "high_kinesiophobia",
        ]

    async def test_missing_tscores_are_skipped(self, store, settings):
        """Test absent T-scores contribute nothing."""
        store.promis29.append(Promis29Assessment(patient_id=PATIENT, assessed_at=ago(3), depression_tscore=70))

        result = await score_psychological(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["severe_depression"]
        assert result.data_counts["promis29"] == 1

    async def test_latest_assessment_wins(self, store, settings):
        """Test only the most recent assessment is scored."""
        store.tsk11.append(Tsk11Assessment(patient_id=PATIENT, assessed_at=ago(30), score=44))
        store.tsk11.append(Tsk11Assessment(patient_id=PATIENT, assessed_at=ago(2), score=31))

        result = await score_psychological(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["moderate_kinesiophobia"]
        assert result.score == 10


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------


class TestMovementScorer:
    def _session(self, days, score, rom=None, issues=()):
        return MovementSession(
            patient_id=PATIENT,
            session_date=ago(days),
            average_score=score,
            rom_achieved=rom,
            form_issues=[FormIssue(description="knävalgus", severity=s) for s in issues],
        )

    async def test_declining_form(self, store, settings):
        """Test recent form well below earlier form is flagged as declining."""
        store.movement_sessions = [
            self._session(1, 50),
            self._session(2, 50),
            self._session(3, 80),
            self._session(4, 80),
        ]

        result = await score_movement(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["moderate_form_quality", "declining_movement_quality"]
        assert result.score == 45
        assert result.data_counts["movement_sessions"] == 4

    async def test_poor_form(self, store, settings):
        """Test a low average form score is flagged as poor."""
        store.movement_sessions = [self._session(1, 55), self._session(2, 55)]

        result = await score_movement(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["poor_form_quality"]

    async def test_frequent_compensation(self, store, settings):
        """Test repeated high-severity form issues are flagged."""
        high = [FormIssueSeverity.HIGH]
        store.movement_sessions = [
            self._session(1, 90, issues=high),
            self._session(2, 90, issues=high),
            self._session(3, 90, issues=[FormIssueSeverity.LOW]),
        ]

        result = await score_movement(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["frequent_compensation"]
        assert result.score == 20

    async def test_limited_rom(self, store, settings):
        """Test range of motion under target is flagged."""
        store.movement_sessions = [self._session(1, 90, rom=50), self._session(2, 90, rom=60)]

        result = await score_movement(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["limited_rom"]
        assert result.score == 15

    async def test_missing_rom_counts_as_on_target(self, store, settings):
        """Test sessions without ROM data do not drag the average down."""
        store.movement_sessions = [self._session(1, 90, rom=50), self._session(2, 90)]

        result = await score_movement(store, PATIENT, NOW, settings)

        assert result.score == 0


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealthScorer:
    def _sample(self, metric, value, days=1):
        return HealthSample(patient_id=PATIENT, start_date=ago(days), data_type=metric, value=value)

    async def test_poor_recovery_signals(self, store, settings):
        """Test short sleep, low HRV and low activity combine."""
        store.health_samples = [
            self._sample(HealthMetric.SLEEP_ANALYSIS, 5, days=1),
            self._sample(HealthMetric.SLEEP_ANALYSIS, 5.5, days=2),
            self._sample(HealthMetric.HEART_RATE_VARIABILITY, 25),
            self._sample(HealthMetric.STEPS, 2000),
        ]

        result = await score_health(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["poor_sleep", "low_hrv", "low_activity"]
        assert result.score == 75
        assert result.data_counts["health_samples"] == 4

    async def test_short_sleep_and_overactivity(self, store, settings):
        """Test moderate sleep and high step counts are flagged."""
        store.health_samples = [
            self._sample(HealthMetric.SLEEP_ANALYSIS, 6.5),
            self._sample(HealthMetric.STEPS, 16000),
        ]

        result = await score_health(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["moderate_sleep", "overactivity"]
        assert result.score == 30

    async def test_healthy_values(self, store, settings):
        """Test healthy samples score zero."""
        store.health_samples = [
            self._sample(HealthMetric.SLEEP_ANALYSIS, 8),
            self._sample(HealthMetric.HEART_RATE_VARIABILITY, 55),
            self._sample(HealthMetric.STEPS, 8000),
        ]

        result = await score_health(store, PATIENT, NOW, settings)

        assert result.score == 0


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------


class TestProgressionScorer:
    async def test_stuck_in_phase(self, store, settings):
        """Test a phase running far past its expected length."""
        store.programs.append(ActiveProgram(patient_id=PATIENT, created_at=ago(70), current_phase=2))

        result = await score_progression(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["stuck_in_phase"]
        assert result.score == 35
        assert result.factors[0].description == "Fas 2 överskrider förväntad tid (10/4 veckor)"

    async def test_slow_progression(self, store, settings):
        """Test a phase slightly past its expected length."""
        store.programs.append(ActiveProgram(patient_id=PATIENT, created_at=ago(35)))

        result = await score_progression(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["slow_progression"]

    async def test_phase_start_overrides_program_start(self, store, settings):
        """Test phase duration counts from the phase start."""
        store.programs.append(
            ActiveProgram(patient_id=PATIENT, created_at=ago(200), phase_started_at=ago(7))
        )

        result = await score_progression(store, PATIENT, NOW, settings)

        assert result.score == 0

    async def test_expected_phase_length(self, store, settings):
        """Test the program's own phase length is respected."""
        store.programs.append(
            ActiveProgram(patient_id=PATIENT, created_at=ago(70), phase_duration_weeks=8)
        )

        result = await score_progression(store, PATIENT, NOW, settings)

        assert factor_keys(result) == ["slow_progression"]

    @pytest.mark.parametrize(
        "first,second,expected",
        [
            (4.0, 3.0, ["declining_function"]),
            (4.0, 5.0, ["minimal_improvement"]),
            (4.0, 7.0, []),
        ],
    )
    async def test_psfs_change(self, store, settings, first, second, expected):
        """Test PSFS change between the first and latest assessment."""
        store.psfs = [
            PsfsAssessment(patient_id=PATIENT, assessed_at=ago(40), average_score=first),
            PsfsAssessment(patient_id=PATIENT, assessed_at=ago(5), average_score=second),
        ]

        result = await score_progression(store, PATIENT, NOW, settings)

        assert factor_keys(result) == expected
        assert result.data_counts["psfs_assessments"] == 2

    async def test_single_psfs_is_not_scored(self, store, settings):
        """Test one PSFS assessment gives no change to score."""
        store.psfs = [PsfsAssessment(patient_id=PATIENT, assessed_at=ago(5), average_score=1.0)]

        result = await score_progression(store, PATIENT, NOW, settings)

        assert result.score == 0
