"""Record store interface used by the risk engine.

The engine never talks to a database directly; it awaits these methods. The
SQLAlchemy implementation lives in :mod:`rehab_risk.core.repository`.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from rehab_risk.models.alert import RiskAlert
from rehab_risk.models.records import (
    ActiveProgram,
    ExerciseLog,
    HealthSample,
    MovementSession,
    PainLog,
    PainPrediction,
    PatientRecord,
    Promis29Assessment,
    PsfsAssessment,
    Tsk11Assessment,
)
from rehab_risk.models.risk import RiskAssessment


@runtime_checkable
class RiskDataStore(Protocol):
    # Scorer inputs
    async def get_latest_pain_prediction(self, patient_id: str) -> Optional[PainPrediction]: ...

    async def get_pain_logs(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[PainLog]:
        """Pain logs in [start, end], newest first."""
        ...

    async def get_exercise_logs(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[ExerciseLog]: ...

    async def get_last_exercise_log(self, patient_id: str) -> Optional[ExerciseLog]: ...

    async def get_active_program(self, patient_id: str) -> Optional[ActiveProgram]: ...

    async def get_movement_sessions(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[MovementSession]:
        """Movement sessions in [start, end], newest first."""
        ...

    async def get_latest_promis29(self, patient_id: str) -> Optional[Promis29Assessment]: ...

    async def get_latest_tsk11(self, patient_id: str) -> Optional[Tsk11Assessment]: ...

    async def get_psfs_assessments(
        self, patient_id: str, limit: int = 2
    ) -> Sequence[PsfsAssessment]:
        """Earliest ``limit`` PSFS assessments, oldest first."""
        ...

    async def get_health_samples(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[HealthSample]: ...

    # Assessments
    async def get_latest_risk_assessment(self, patient_id: str) -> Optional[RiskAssessment]: ...

    async def get_risk_assessment(self, assessment_id: uuid.UUID) -> Optional[RiskAssessment]: ...

    async def get_risk_assessments(
        self, patient_id: str, start: datetime, end: datetime
    ) -> Sequence[RiskAssessment]:
        """Assessments in [start, end], oldest first."""
        ...

    async def save_risk_assessment(self, assessment: RiskAssessment) -> None: ...

    async def update_risk_assessment_review(self, assessment: RiskAssessment) -> None: ...

    # Alerts
    async def get_alert(self, alert_id: uuid.UUID) -> Optional[RiskAlert]: ...

    async def get_active_alerts(self, patient_id: str) -> Sequence[RiskAlert]:
        """Open (active or acknowledged) alerts, newest first."""
        ...

    async def save_alert(self, alert: RiskAlert) -> None: ...

    async def update_alert(self, alert: RiskAlert) -> None: ...

    # Dashboard
    async def list_patients(self, provider_id: str) -> Sequence[PatientRecord]: ...
