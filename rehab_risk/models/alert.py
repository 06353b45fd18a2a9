"""Provider-facing risk alert models."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class AlertType(str, Enum):
    RISK_INCREASE = "risk_increase"
    CRITICAL_LEVEL = "critical_level"
    HIGH_LEVEL = "high_level"
    NO_ACTIVITY = "no_activity"
    PAIN_SPIKE = "pain_spike"
    ADHERENCE_DROP = "adherence_drop"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Lifecycle state of an alert.

    active -> acknowledged -> resolved, or active -> dismissed / resolved.
    resolved and dismissed are terminal.
    """

    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class RiskAlert(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    patient_id: str
    provider_id: Optional[str] = None
    assessment_id: Optional[uuid.UUID] = None

    alert_type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    trigger_data: dict[str, Any] = Field(default_factory=dict)

    status: AlertStatus = AlertStatus.ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    acknowledged_at: Optional[datetime] = None
    acknowledged_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution_notes: Optional[str] = None
    dismissed_at: Optional[datetime] = None
    dismissed_by: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status in (AlertStatus.ACTIVE, AlertStatus.ACKNOWLEDGED)
