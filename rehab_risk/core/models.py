"""SQLAlchemy 2.0 async models for patient records, assessments and alerts."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.types import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Patient records (scorer inputs)
# ---------------------------------------------------------------------------

class Patient(Base):
    __tablename__ = "patients"

    patient_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200))
    provider_id: Mapped[str | None] = mapped_column(String(64))
    diagnosis: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_patients_provider_id", "provider_id"),
    )


class PainPredictionRow(Base):
    __tablename__ = "pain_predictions"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    predicted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    horizon_24h: Mapped[float] = mapped_column(Float, nullable=False)
    risk_level_24h: Mapped[str | None] = mapped_column(String(20))

    __table_args__ = (
        Index("ix_pain_predictions_patient_id", "patient_id", "predicted_at"),
    )


class PainLogRow(Base):
    __tablename__ = "pain_logs"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    pain_level: Mapped[float] = mapped_column(Float, default=0)

    __table_args__ = (
        Index("ix_pain_logs_patient_id", "patient_id", "logged_at"),
    )


class ExerciseLogRow(Base):
    __tablename__ = "exercise_logs"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    exercise_id: Mapped[str | None] = mapped_column(String(100))

    __table_args__ = (
        Index("ix_exercise_logs_patient_id", "patient_id", "completed_at"),
    )


class ExerciseProgramRow(Base):
    __tablename__ = "exercise_programs"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    frequency_per_week: Mapped[float | None] = mapped_column(Float)
    current_phase: Mapped[int] = mapped_column(Integer, default=1)
    phase_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    phase_duration_weeks: Mapped[float | None] = mapped_column(Float)

    __table_args__ = (
        Index("ix_exercise_programs_patient_id", "patient_id", "status"),
    )


class MovementSessionRow(Base):
    __tablename__ = "movement_sessions"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    session_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    average_score: Mapped[float | None] = mapped_column(Float)
    rom_achieved: Mapped[float | None] = mapped_column(Float)
    form_issues: Mapped[list | None] = mapped_column(JSON)

    __table_args__ = (
        Index("ix_movement_sessions_patient_id", "patient_id", "session_date"),
    )


class Promis29Row(Base):
    __tablename__ = "promis29_assessments"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    anxiety_tscore: Mapped[float | None] = mapped_column(Float)
    depression_tscore: Mapped[float | None] = mapped_column(Float)
    sleep_disturbance_tscore: Mapped[float | None] = mapped_column(Float)


class Tsk11Row(Base):
    __tablename__ = "tsk11_assessments"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    score: Mapped[float] = mapped_column(Float, nullable=False)


class PsfsRow(Base):
    __tablename__ = "psfs_assessments"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    average_score: Mapped[float] = mapped_column(Float, nullable=False)


class HealthSampleRow(Base):
    __tablename__ = "health_samples"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    data_type: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[float | None] = mapped_column(Float)

    __table_args__ = (
        Index("ix_health_samples_patient_id", "patient_id", "start_date"),
    )


# ---------------------------------------------------------------------------
# Risk assessments and alerts
# ---------------------------------------------------------------------------

class RiskAssessmentRow(Base):
    """Append-only; only the review columns are updated after insert."""

    __tablename__ = "risk_assessments"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    provider_id: Mapped[str | None] = mapped_column(String(64))

    overall_score: Mapped[float] = mapped_column(Float, nullable=False)
    risk_level: Mapped[str] = mapped_column(String(20), nullable=False)

    pain_score: Mapped[float] = mapped_column(Float, default=0)
    adherence_score: Mapped[float] = mapped_column(Float, default=0)
    psychological_score: Mapped[float] = mapped_column(Float, default=0)
    movement_quality_score: Mapped[float] = mapped_column(Float, default=0)
    health_data_score: Mapped[float] = mapped_column(Float, default=0)
    progression_score: Mapped[float] = mapped_column(Float, default=0)

    contributing_factors: Mapped[list | None] = mapped_column(JSON)
    recommended_actions: Mapped[list | None] = mapped_column(JSON)
    data_sources: Mapped[dict | None] = mapped_column(JSON)

    previous_score: Mapped[float | None] = mapped_column(Float)
    score_trend: Mapped[str | None] = mapped_column(String(20))
    score_change: Mapped[float | None] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    reviewed_by: Mapped[str | None] = mapped_column(String(64))
    review_notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("ix_risk_assessments_patient_id", "patient_id", "created_at"),
        Index("ix_risk_assessments_risk_level", "risk_level"),
    )


class RiskAlertRow(Base):
    __tablename__ = "risk_alerts"

    id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=_new_uuid)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    provider_id: Mapped[str | None] = mapped_column(String(64))
    assessment_id: Mapped[uuid.UUID | None] = mapped_column(PG_UUID(as_uuid=True))

    alert_type: Mapped[str] = mapped_column(String(30), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    trigger_data: Mapped[dict | None] = mapped_column(JSON)

    status: Mapped[str] = mapped_column(String(20), default="active")
    acknowledged_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    acknowledged_by: Mapped[str | None] = mapped_column(String(64))
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    resolved_by: Mapped[str | None] = mapped_column(String(64))
    resolution_notes: Mapped[str | None] = mapped_column(Text)
    dismissed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    dismissed_by: Mapped[str | None] = mapped_column(String(64))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_risk_alerts_patient_id", "patient_id"),
        Index("ix_risk_alerts_status", "status"),
        Index("ix_risk_alerts_created_at", "created_at"),
    )
