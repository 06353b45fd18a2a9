"""Tests for risk assessment, alert and dashboard endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rehab_risk.api.dependencies import get_app_settings, get_store
from rehab_risk.api.routes import risk
from rehab_risk.models.alert import AlertSeverity, AlertStatus, AlertType, RiskAlert
from rehab_risk.models.records import PatientRecord
from rehab_risk.models.risk import DomainScore, RiskAssessment, RiskCategory, RiskLevel


@pytest.fixture
def client(store, settings):
    app = FastAPI()
    app.include_router(risk.router, prefix="/api/v1")
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_app_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def alert(store):
    alert = RiskAlert(
        patient_id="p1",
        alert_type=AlertType.PAIN_SPIKE,
        severity=AlertSeverity.WARNING,
        title="Ökande smärta",
        message="Smärtan har ökat kraftigt",
    )
    store.alerts[alert.id] = alert
    return alert


def _maxed_scorers():
    async def scorer(store, patient_id, now=None, settings=None):
        return DomainScore(score=100.0)

    return {c: scorer for c in RiskCategory}


class TestAssessmentEndpoints:
    def test_create_without_body(self, client, store):
        """Test an assessment can be created without a body."""
        response = client.post("/api/v1/risk/assessments/p1")

        assert response.status_code == 200
        data = response.json()
        assert data["assessment"]["patient_id"] == "p1"
        assert data["assessment"]["risk_level"] == "low"
        assert data["alerts"] == []
        assert len(store.assessments) == 1

    def test_critical_assessment_raises_alert(self, client, store, monkeypatch):
        """Test a critical assessment returns its alert."""
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", _maxed_scorers())

        response = client.post("/api/v1/risk/assessments/p1", json={"provider_id": "pt-1"})

        data = response.json()
        assert data["assessment"]["risk_level"] == "critical"
        assert [a["alert_type"] for a in data["alerts"]] == ["critical_level"]
        assert data["alerts"][0]["provider_id"] == "pt-1"
        assert len(store.alerts) == 1

    def test_custom_weights(self, client, monkeypatch):
        """Test weights in the body are applied."""
        monkeypatch.setattr("rehab_risk.risk.aggregator.DOMAIN_SCORERS", _maxed_scorers())
        weights = {
            "pain": 0.2,
            "adherence": 0,
            "psychological": 0,
            "movement": 0,
            "health": 0,
            "progression": 0,
        }

        response = client.post("/api/v1/risk/assessments/p1", json={"weights": weights})

        assert response.json()["assessment"]["overall_score"] == 20.0

    def test_latest(self, client):
        """Test the latest assessment is returned."""
        client.post("/api/v1/risk/assessments/p1")

        response = client.get("/api/v1/risk/assessments/p1/latest")

        assert response.status_code == 200
        assert response.json()["patient_id"] == "p1"

    def test_latest_missing_is_404(self, client):
        """Test a patient without assessments returns 404."""
        response = client.get("/api/v1/risk/assessments/nobody/latest")

        assert response.status_code == 404

    def test_review(self, client, store):
        """Test reviewing an assessment."""
        created = client.post("/api/v1/risk/assessments/p1").json()["assessment"]

        response = client.post(
            f"/api/v1/risk/assessments/{created['id']}/review",
            json={"reviewer_id": "pt-1", "notes": "Följs upp nästa vecka"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["reviewed_by"] == "pt-1"
        assert data["review_notes"] == "Följs upp nästa vecka"
        assert store.assessments[0].reviewed_by == "pt-1"

    def test_review_unknown_is_404(self, client):
        """Test reviewing an unknown assessment returns 404."""
        response = client.post(
            f"/api/v1/risk/assessments/{uuid.uuid4()}/review", json={"reviewer_id": "pt-1"}
        )

        assert response.status_code == 404


class TestTrendEndpoint:
    def test_trend(self, client, store):
        """Test the trend only includes assessments in the window."""
        now = datetime.now(timezone.utc)
        store.assessments = [
            RiskAssessment(patient_id="p1", overall_score=40.0, risk_level=RiskLevel.MODERATE, created_at=now - timedelta(days=2)),
            RiskAssessment(patient_id="p1", overall_score=20.0, risk_level=RiskLevel.LOW, created_at=now - timedelta(days=5)),
            RiskAssessment(patient_id="p1", overall_score=90.0, risk_level=RiskLevel.CRITICAL, created_at=now - timedelta(days=60)),
        ]

        response = client.get("/api/v1/risk/trend/p1")

        assert response.status_code == 200
        assert [p["score"] for p in response.json()] == [20.0, 40.0]

    def test_days_out_of_range(self, client):
        """Test a trend window of zero days is rejected."""
        response = client.get("/api/v1/risk/trend/p1", params={"days": 0})

        assert response.status_code == 422


class TestAlertEndpoints:
    def test_active_alerts(self, client, alert):
        """Test open alerts are listed for the patient."""
        response = client.get("/api/v1/risk/alerts/p1")

        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [str(alert.id)]

    def test_acknowledge(self, client, store, alert):
        """Test acknowledging an alert."""
        response = client.post(
            f"/api/v1/risk/alerts/{alert.id}/acknowledge", json={"actor_id": "pt-1"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "acknowledged"
        assert data["acknowledged_by"] == "pt-1"
        assert store.alerts[alert.id].status == AlertStatus.ACKNOWLEDGED

    def test_resolve_with_notes(self, client, alert):
        """Test resolving an acknowledged alert with notes."""
        client.post(f"/api/v1/risk/alerts/{alert.id}/acknowledge", json={"actor_id": "pt-1"})

        response = client.post(
            f"/api/v1/risk/alerts/{alert.id}/resolve",
            json={"actor_id": "pt-1", "notes": "Ringt patienten"},
        )

        data = response.json()
        assert data["status"] == "resolved"
        assert data["resolution_notes"] == "Ringt patienten"

    def test_resolve_active_alert_conflict(self, client, store, alert):
        """Test resolving an alert that was never acknowledged returns 409."""
        response = client.post(
            f"/api/v1/risk/alerts/{alert.id}/resolve", json={"actor_id": "pt-1"}
        )

        assert response.status_code == 409
        assert store.alerts[alert.id].status == AlertStatus.ACTIVE

    def test_closed_alert_conflict(self, client, alert):
        """Test acting on a dismissed alert returns 409."""
        client.post(f"/api/v1/risk/alerts/{alert.id}/dismiss", json={"actor_id": "pt-1"})

        response = client.post(
            f"/api/v1/risk/alerts/{alert.id}/acknowledge", json={"actor_id": "pt-1"}
        )

        assert response.status_code == 409

    def test_dismissed_alert_no_longer_active(self, client, alert):
        """Test a dismissed alert leaves the active list."""
        client.post(f"/api/v1/risk/alerts/{alert.id}/dismiss", json={"actor_id": "pt-1"})

        assert client.get("/api/v1/risk/alerts/p1").json() == []

    def test_unknown_alert_is_404(self, client):
        """Test an unknown alert returns 404."""
        response = client.post(
            f"/api/v1/risk/alerts/{uuid.uuid4()}/acknowledge", json={"actor_id": "pt-1"}
        )

        assert response.status_code == 404

    def test_unknown_action_is_422(self, client, alert):
        """Test an unknown alert action returns 422."""
        response = client.post(
            f"/api/v1/risk/alerts/{alert.id}/escalate", json={"actor_id": "pt-1"}
        )

        assert response.status_code == 422


class TestDashboardEndpoint:
    def test_dashboard(self, client, store, alert):
        """Test the provider dashboard endpoint."""
        store.patients = [
            PatientRecord(patient_id="p1", name="Anna", provider_id="pt-1"),
            PatientRecord(patient_id="p2", name="Bertil", provider_id="pt-1"),
        ]
        store.assessments = [
            RiskAssessment(patient_id="p1", overall_score=60.0, risk_level=RiskLevel.HIGH),
        ]

        response = client.get("/api/v1/risk/dashboard/pt-1")

        assert response.status_code == 200
        data = response.json()
        assert data["total_patients"] == 2
        assert data["high_risk_count"] == 1
        assert data["unassessed_count"] == 1
        assert data["patients"][0]["patient_id"] == "p1"
        assert data["patients"][0]["active_alerts"] == 1
        assert len(data["recent_alerts"]) == 1
