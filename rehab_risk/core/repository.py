"""SQLAlchemy-backed record store for the risk engine."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from rehab_risk.core.models import (
    ExerciseLogRow,
    ExerciseProgramRow,
    HealthSampleRow,
    MovementSessionRow,
    PainLogRow,
    PainPredictionRow,
    Patient,
    Promis29Row,
    PsfsRow,
    RiskAlertRow,
    RiskAssessmentRow,
    Tsk11Row,
)
from rehab_risk.exceptions import AlertNotFound, AssessmentNotFound
from rehab_risk.models.alert import AlertStatus, RiskAlert
from rehab_risk.models.records import (
    ActiveProgram,
    ExerciseLog,
    FormIssue,
    HealthSample,
    MovementSession,
    PainLog,
    PainPrediction,
    PatientRecord,
    Promis29Assessment,
    PsfsAssessment,
    Tsk11Assessment,
)
from rehab_risk.models.risk import (
    ContributingFactor,
    DataSources,
    RecommendedAction,
    RiskAssessment,
)
from rehab_risk.risk.scorers import as_utc

logger = logging.getLogger(__name__)

_OPEN_STATUSES = (AlertStatus.ACTIVE.value, AlertStatus.ACKNOWLEDGED.value)

# RiskAssessment field -> RiskAssessmentRow column
_SCORE_COLUMNS = {
    "pain_risk_score": "pain_score",
    "adherence_risk_score": "adherence_score",
    "psychological_risk_score": "psychological_score",
    "movement_quality_score": "movement_quality_score",
    "health_data_score": "health_data_score",
    "progression_score": "progression_score",
}

_ALERT_STATUS_COLUMNS = (
    "status",
    "acknowledged_at",
    "acknowledged_by",
    "resolved_at",
    "resolved_by",
    "resolution_notes",
    "dismissed_at",
    "dismissed_by",
)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    return as_utc(value) if value is not None else None


class SqlRiskDataStore:
    """Implements :class:`rehab_risk.risk.store.RiskDataStore` over an AsyncSession.

    Reads that hit a transient ``OperationalError`` are retried after rolling
    the session back, as long as this store has not flushed any writes into
    it. Writes are flushed, not committed; the session owner decides the
    transaction.

    An AsyncSession does not allow concurrent operations, and the scorers
    read concurrently, so every session call goes through one lock.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._lock = asyncio.Lock()
        self._has_writes = False

    def _retryable(self, exc: BaseException) -> bool:
        return isinstance(exc, OperationalError) and not self._has_writes

    async def _all(self, stmt) -> Sequence:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(self._retryable),
            stop=stop_after_attempt(3),
            wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
            reraise=True,
        ):
            with attempt:
                async with self._lock:
                    try:
                        result = await self.session.execute(stmt)
                    except OperationalError:
                        # The failed statement may have aborted the transaction
                        if not self._has_writes:
                            await self.session.rollback()
                        raise
                    return result.scalars().all()

    async def _get(self, model, key):
        async with self._lock:
            return await self.session.get(model, key)

    async def _flush(self) -> None:
        async with self._lock:
            self._has_writes = True
            await self.session.flush()

    async def _first(self, stmt):
        rows = await self._all(stmt.limit(1))
        return rows[0] if rows else None

    # -- Scorer inputs -----------------------------------------------------

    async def get_latest_pain_prediction(self, patient_id: str) -> Optional[PainPrediction]:
        row = await self._first(
            select(PainPredictionRow)
            .where(PainPredictionRow.patient_id == patient_id)
            .order_by(PainPredictionRow.predicted_at.desc())
        )
        if row is None:
            return None
        return PainPrediction(
            patient_id=row.patient_id,
            predicted_at=_utc(row.predicted_at),
            horizon_24h=row.horizon_24h,
            risk_level_24h=row.risk_level_24h,
        )

    async def get_pain_logs(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[PainLog]:
        rows = await self._all(
            select(PainLogRow)
            .where(
                PainLogRow.patient_id == patient_id,
                PainLogRow.logged_at >= start,
                PainLogRow.logged_at <= end,
            )
            .order_by(PainLogRow.logged_at.desc())
        )
        return [
            PainLog(patient_id=r.patient_id, logged_at=_utc(r.logged_at), pain_level=r.pain_level)
            for r in rows
        ]

    async def get_exercise_logs(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[ExerciseLog]:
        rows = await self._all(
            select(ExerciseLogRow)
            .where(
                ExerciseLogRow.patient_id == patient_id,
                ExerciseLogRow.completed_at >= start,
                ExerciseLogRow.completed_at <= end,
            )
            .order_by(ExerciseLogRow.completed_at.desc())
        )
        return [self._exercise_log(r) for r in rows]

    async def get_last_exercise_log(self, patient_id: str) -> Optional[ExerciseLog]:
        row = await self._first(
            select(ExerciseLogRow)
            .where(ExerciseLogRow.patient_id == patient_id)
            .order_by(ExerciseLogRow.completed_at.desc())
        )
        return self._exercise_log(row) if row else None

    @staticmethod
    def _exercise_log(row: ExerciseLogRow) -> ExerciseLog:
        return ExerciseLog(
            patient_id=row.patient_id,
            completed_at=_utc(row.completed_at),
            exercise_id=row.exercise_id,
        )

    async def get_active_program(self, patient_id: str) -> Optional[ActiveProgram]:
        row = await self._first(
            select(ExerciseProgramRow)
            .where(
                ExerciseProgramRow.patient_id == patient_id,
                ExerciseProgramRow.status == "active",
            )
            .order_by(ExerciseProgramRow.created_at.desc())
        )
        if row is None:
            return None
        return ActiveProgram(
            patient_id=row.patient_id,
            created_at=_utc(row.created_at),
            frequency_per_week=row.frequency_per_week,
            current_phase=row.current_phase,
            phase_started_at=_utc(row.phase_started_at),
            phase_duration_weeks=row.phase_duration_weeks,
        )

    async def get_movement_sessions(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[MovementSession]:
        rows = await self._all(
            select(MovementSessionRow)
            .where(
                MovementSessionRow.patient_id == patient_id,
                MovementSessionRow.session_date >= start,
                MovementSessionRow.session_date <= end,
            )
            .order_by(MovementSessionRow.session_date.desc())
        )
        return [
            MovementSession(
                patient_id=r.patient_id,
                session_date=_utc(r.session_date),
                average_score=r.average_score,
                rom_achieved=r.rom_achieved,
                form_issues=[FormIssue.model_validate(i) for i in (r.form_issues or [])],
            )
            for r in rows
        ]

    async def get_latest_promis29(self, patient_id: str) -> Optional[Promis29Assessment]:
        row = await self._first(
            select(Promis29Row)
            .where(Promis29Row.patient_id == patient_id)
            .order_by(Promis29Row.assessed_at.desc())
        )
        if row is None:
            return None
        return Promis29Assessment(
            patient_id=row.patient_id,
            assessed_at=_utc(row.assessed_at),
            anxiety_tscore=row.anxiety_tscore,
            depression_tscore=row.depression_tscore,
            sleep_disturbance_tscore=row.sleep_disturbance_tscore,
        )

    async def get_latest_tsk11(self, patient_id: str) -> Optional[Tsk11Assessment]:
        row = await self._first(
            select(Tsk11Row)
            .where(Tsk11Row.patient_id == patient_id)
            .order_by(Tsk11Row.assessed_at.desc())
        )
        if row is None:
            return None
        return Tsk11Assessment(
            patient_id=row.patient_id, assessed_at=_utc(row.assessed_at), score=row.score
        )

    async def get_psfs_assessments(
        self, patient_id: str, limit: int = 2
    ) -> Sequence[PsfsAssessment]:
        rows = await self._all(
            select(PsfsRow)
            .where(PsfsRow.patient_id == patient_id)
            .order_by(PsfsRow.assessed_at.asc())
            .limit(limit)
        )
        return [
            PsfsAssessment(
                patient_id=r.patient_id,
                assessed_at=_utc(r.assessed_at),
                average_score=r.average_score,
            )
            for r in rows
        ]

    async def get_health_samples(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[HealthSample]:
        rows = await self._all(
            select(HealthSampleRow)
            .where(
                HealthSampleRow.patient_id == patient_id,
                HealthSampleRow.start_date >= start,
                HealthSampleRow.start_date <= end,
            )
            .order_by(HealthSampleRow.start_date.desc())
        )
        samples = []
        for r in rows:
            try:
                samples.append(
                    HealthSample(
                        patient_id=r.patient_id,
                        start_date=_utc(r.start_date),
                        data_type=r.data_type,
                        value=r.value,
                    )
                )
            except ValueError:
                # Metric types the scorers do not use
                logger.debug("Skipping health sample of type %s", r.data_type)
        return samples

    # -- Assessments -------------------------------------------------------

    @staticmethod
    def _assessment(row: RiskAssessmentRow) -> RiskAssessment:
        return RiskAssessment(
            id=row.id,
            patient_id=row.patient_id,
            provider_id=row.provider_id,
            overall_score=row.overall_score,
            risk_level=row.risk_level,
            contributing_factors=[
                ContributingFactor.model_validate(f) for f in (row.contributing_factors or [])
            ],
            recommended_actions=[
                RecommendedAction.model_validate(a) for a in (row.recommended_actions or [])
            ],
            data_sources=DataSources.model_validate(row.data_sources or {}),
            previous_score=row.previous_score,
            score_trend=row.score_trend,
            score_change=row.score_change,
            created_at=_utc(row.created_at),
            reviewed_at=_utc(row.reviewed_at),
            reviewed_by=row.reviewed_by,
            review_notes=row.review_notes,
            persisted=True,
            **{field: getattr(row, column) for field, column in _SCORE_COLUMNS.items()},
        )

    async def get_latest_risk_assessment(self, patient_id: str) -> Optional[RiskAssessment]:
        row = await self._first(
            select(RiskAssessmentRow)
            .where(RiskAssessmentRow.patient_id == patient_id)
            .order_by(RiskAssessmentRow.created_at.desc())
        )
        return self._assessment(row) if row else None

    async def get_risk_assessment(self, assessment_id: uuid.UUID) -> Optional[RiskAssessment]:
        row = await self._get(RiskAssessmentRow, assessment_id)
        return self._assessment(row) if row else None

    async def get_risk_assessments(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[RiskAssessment]:
        rows = await self._all(
            select(RiskAssessmentRow)
            .where(
                RiskAssessmentRow.patient_id == patient_id,
                RiskAssessmentRow.created_at >= start,
                RiskAssessmentRow.created_at <= end,
            )
            .order_by(RiskAssessmentRow.created_at.asc())
        )
        return [self._assessment(r) for r in rows]

    async def save_risk_assessment(self, assessment: RiskAssessment) -> None:
        row = RiskAssessmentRow(
            id=assessment.id,
            patient_id=assessment.patient_id,
            provider_id=assessment.provider_id,
            overall_score=assessment.overall_score,
            risk_level=assessment.risk_level.value,
            contributing_factors=[f.model_dump(mode="json") for f in assessment.contributing_factors],
            recommended_actions=[a.model_dump(mode="json") for a in assessment.recommended_actions],
            data_sources=assessment.data_sources.model_dump(mode="json"),
            previous_score=assessment.previous_score,
            score_trend=assessment.score_trend.value if assessment.score_trend else None,
            score_change=assessment.score_change,
            created_at=assessment.created_at,
            **{column: getattr(assessment, field) for field, column in _SCORE_COLUMNS.items()},
        )
        self.session.add(row)
        await self._flush()

    async def update_risk_assessment_review(self, assessment: RiskAssessment) -> None:
        row = await self._get(RiskAssessmentRow, assessment.id)
        if row is None:
            raise AssessmentNotFound(f"Assessment {assessment.id} not found")
        row.reviewed_at = assessment.reviewed_at
        row.reviewed_by = assessment.reviewed_by
        row.review_notes = assessment.review_notes
        await self._flush()

    # -- Alerts ------------------------------------------------------------

    @staticmethod
    def _alert(row: RiskAlertRow) -> RiskAlert:
        return RiskAlert(
            id=row.id,
            patient_id=row.patient_id,
            provider_id=row.provider_id,
            assessment_id=row.assessment_id,
            alert_type=row.alert_type,
            severity=row.severity,
            title=row.title,
            message=row.message,
            trigger_data=row.trigger_data or {},
            status=row.status,
            created_at=_utc(row.created_at),
            acknowledged_at=_utc(row.acknowledged_at),
            acknowledged_by=row.acknowledged_by,
            resolved_at=_utc(row.resolved_at),
            resolved_by=row.resolved_by,
            resolution_notes=row.resolution_notes,
            dismissed_at=_utc(row.dismissed_at),
            dismissed_by=row.dismissed_by,
        )

    async def get_alert(self, alert_id: uuid.UUID) -> Optional[RiskAlert]:
        row = await self._get(RiskAlertRow, alert_id)
        return self._alert(row) if row else None

    async def get_active_alerts(self, patient_id: str) -> Sequence[RiskAlert]:
        rows = await self._all(
            select(RiskAlertRow)
            .where(
                RiskAlertRow.patient_id == patient_id,
                RiskAlertRow.status.in_(_OPEN_STATUSES),
            )
            .order_by(RiskAlertRow.created_at.desc())
        )
        return [self._alert(r) for r in rows]

    async def save_alert(self, alert: RiskAlert) -> None:
        data = alert.model_dump(mode="python")
        data["alert_type"] = alert.alert_type.value
        data["severity"] = alert.severity.value
        data["status"] = alert.status.value
        self.session.add(RiskAlertRow(**data))
        await self._flush()

    async def update_alert(self, alert: RiskAlert) -> None:
        row = await self._get(RiskAlertRow, alert.id)
        if row is None:
            raise AlertNotFound(f"Alert {alert.id} not found")
        for column in _ALERT_STATUS_COLUMNS:
            setattr(row, column, getattr(alert, column))
        row.status = alert.status.value
        await self._flush()

    # -- Dashboard ---------------------------------------------------------

    async def list_patients(self, provider_id: str) -> Sequence[PatientRecord]:
        rows = await self._all(
            select(Patient)
            .where(Patient.provider_id == provider_id)
            .order_by(Patient.name)
        )
        return [
            PatientRecord(
                patient_id=r.patient_id,
                name=r.name,
                provider_id=r.provider_id,
                diagnosis=r.diagnosis,
            )
            for r in rows
        ]
