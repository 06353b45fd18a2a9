"""Tests for structured screening endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rehab_risk.api.routes import screening


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(screening.router, prefix="/api/v1")
    return TestClient(app)


class TestDVTEndpoint:
    def test_empty_request_is_low(self, client):
        """Test an empty DVT request scores low."""
        response = client.post("/api/v1/screening/dvt", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["wells_score"] == 0
        assert data["risk_level"] == "low"

    def test_high_probability_stops_training(self, client):
        """Test unilateral calf swelling stops training."""
        response = client.post(
            "/api/v1/screening/dvt",
            json={"symptoms": {"calf_swelling": True, "unilateral": True}},
        )

        data = response.json()
        assert data["wells_score"] == 3
        assert data["risk_level"] == "high"
        assert data["stop_training"] is True

    def test_questions(self, client):
        """Test the question list endpoint."""
        response = client.get("/api/v1/screening/dvt/questions")

        assert response.status_code == 200
        assert len(response.json()) == 7


class TestCRPSEndpoint:
    def test_three_categories(self, client):
        """Test three CRPS categories with worsening pain is probable."""
        response = client.post(
            "/api/v1/screening/crps",
            json={
                "symptoms": {"allodynia": True, "skin_color_change": True, "edema": True},
                "context": {"pain_getting_worse": True},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["meets_screening_criteria"] is True
        assert data["category_count"] == 3
        assert data["risk_level"] == "probable"
        assert data["urgency"] == "urgent"

    def test_negative_days_rejected(self, client):
        """Test negative days are rejected with 422."""
        response = client.post(
            "/api/v1/screening/crps", json={"context": {"days_since_injury": -1}}
        )

        assert response.status_code == 422

    def test_questions(self, client):
        """Test the question list endpoint."""
        response = client.get("/api/v1/screening/crps/questions")

        assert response.status_code == 200
        assert all({"id", "question", "category"} <= set(q) for q in response.json())


class TestPostOpDVTEndpoint:
    def test_known_surgery(self, client):
        """Test post-op DVT risk for a known surgery."""
        response = client.post(
            "/api/v1/screening/postop-dvt",
            json={"surgery_type": "tkr", "days_since_surgery": 5},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["risk_level"] == "very_high"
        assert data["prophylaxis_likely"] is True
        assert data["surgery_known"] is True

    def test_unknown_surgery_uses_default(self, client):
        """Test an unknown surgery uses the default profile."""
        response = client.post(
            "/api/v1/screening/postop-dvt",
            json={"surgery_type": "xyz", "days_since_surgery": 3},
        )

        data = response.json()
        assert data["risk_level"] == "moderate"
        assert data["surgery_known"] is False

    def test_negative_days_rejected(self, client):
        """Test negative days are rejected with 422."""
        response = client.post(
            "/api/v1/screening/postop-dvt",
            json={"surgery_type": "tkr", "days_since_surgery": -2},
        )

        assert response.status_code == 422
