"""Pytest configuration and fixtures."""

import uuid

import pytest

from rehab_risk.config import Settings
from rehab_risk.models.alert import RiskAlert
from rehab_risk.models.records import PatientRecord
from rehab_risk.models.risk import RiskAssessment
from rehab_risk.observability import ObservabilityLogger


class FakeStore:
    """In-memory record store for engine tests.

    Fill the public lists directly. Names in ``failing`` make the matching
    method raise RuntimeError.
    """

    def __init__(self):
        self.patients: list[PatientRecord] = []
        self.pain_predictions = []
        self.pain_logs = []
        self.exercise_logs = []
        self.programs = []
        self.movement_sessions = []
        self.promis29 = []
        self.tsk11 = []
        self.psfs = []
        self.health_samples = []
        self.assessments: list[RiskAssessment] = []
        self.alerts: dict[uuid.UUID, RiskAlert] = {}
        self.failing: set[str] = set()

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")

    @staticmethod
    def _window(records, patient_id, attr, start, end):
        return [
            r for r in records
            if r.patient_id == patient_id and start <= getattr(r, attr) <= end
        ]

    @staticmethod
    def _latest(records, patient_id, attr):
        own = [r for r in records if r.patient_id == patient_id]
        return max(own, key=lambda r: getattr(r, attr)) if own else None

    async def get_latest_pain_prediction(self, patient_id):
        self._check("get_latest_pain_prediction")
        return self._latest(self.pain_predictions, patient_id, "predicted_at")

    async def get_pain_logs(self, patient_id, start, end):
        self._check("get_pain_logs")
        logs = self._window(self.pain_logs, patient_id, "logged_at", start, end)
        return sorted(logs, key=lambda r: r.logged_at, reverse=True)

    async def get_exercise_logs(self, patient_id, start, end):
        self._check("get_exercise_logs")
        return self._window(self.exercise_logs, patient_id, "completed_at", start, end)

    async def get_last_exercise_log(self, patient_id):
        self._check("get_last_exercise_log")
        return self._latest(self.exercise_logs, patient_id, "completed_at")

    async def get_active_program(self, patient_id):
        self._check("get_active_program")
        return self._latest(self.programs, patient_id, "created_at")

    async def get_movement_sessions(self, patient_id, start, end):
        self._check("get_movement_sessions")
        sessions = self._window(self.movement_sessions, patient_id, "session_date", start, end)
        return sorted(sessions, key=lambda r: r.session_date, reverse=True)

    async def get_latest_promis29(self, patient_id):
        self._check("get_latest_promis29")
        return self._latest(self.promis29, patient_id, "assessed_at")

    async def get_latest_tsk11(self, patient_id):
        self._check("get_latest_tsk11")
        return self._latest(self.tsk11, patient_id, "assessed_at")

    async def get_psfs_assessments(self, patient_id, limit=2):
        self._check("get_psfs_assessments")
        own = sorted(
            (r for r in self.psfs if r.patient_id == patient_id),
            key=lambda r: r.assessed_at,
        )
        return own[:limit]

    async def get_health_samples(self, patient_id, start, end):
        self._check("get_health_samples")
        return self._window(self.health_samples, patient_id, "start_date", start, end)

    async def get_latest_risk_assessment(self, patient_id):
        self._check("get_latest_risk_assessment")
        return self._latest(self.assessments, patient_id, "created_at")

    async def get_risk_assessment(self, assessment_id):
        self._check("get_risk_assessment")
        return next((a for a in self.assessments if a.id == assessment_id), None)

    async def get_risk_assessments(self, patient_id, start, end):
        self._check("get_risk_assessments")
        found = self._window(self.assessments, patient_id, "created_at", start, end)
        return sorted(found, key=lambda a: a.created_at)

    async def save_risk_assessment(self, assessment):
        self._check("save_risk_assessment")
        self.assessments.append(assessment.model_copy(update={"persisted": True}, deep=True))

    async def update_risk_assessment_review(self, assessment):
        self._check("update_risk_assessment_review")
        self.assessments = [
            assessment if a.id == assessment.id else a for a in self.assessments
        ]

    async def get_alert(self, alert_id):
        self._check("get_alert")
        return self.alerts.get(alert_id)

    async def get_active_alerts(self, patient_id):
        self._check("get_active_alerts")
        open_alerts = [a for a in self.alerts.values() if a.patient_id == patient_id and a.is_open]
        return sorted(open_alerts, key=lambda a: a.created_at, reverse=True)

    async def save_alert(self, alert):
        self._check("save_alert")
        self.alerts[alert.id] = alert

    async def update_alert(self, alert):
        self._check("update_alert")
        self.alerts[alert.id] = alert

    async def list_patients(self, provider_id):
        self._check("list_patients")
        return [p for p in self.patients if p.provider_id == provider_id]


@pytest.fixture
def store():
    """Empty in-memory record store."""
    return FakeStore()


@pytest.fixture
def settings(tmp_path):
    """Default settings with telemetry written under a temp directory."""
    return Settings(
        _env_file=None,
        observability_log_dir=tmp_path / "logs",
    )


@pytest.fixture(autouse=True)
def obs_logger(tmp_path):
    """Route the global observability logger to a temp directory."""
    logger = ObservabilityLogger(log_dir=tmp_path / "obs")
    ObservabilityLogger._instance = logger
    yield logger
    ObservabilityLogger._instance = None
