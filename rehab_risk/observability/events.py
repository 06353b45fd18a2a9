"""Structured observability events for red-flag scans and risk assessments."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of observability events."""

    RED_FLAG_SCAN = "red_flag_scan"
    ASSESSMENT_START = "assessment_start"
    ASSESSMENT_SUCCESS = "assessment_success"
    ASSESSMENT_ERROR = "assessment_error"


class ObservabilityEvent(BaseModel):
    """Base class for all observability events."""

    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: Optional[str] = None
    request_id: Optional[str] = None
    duration_ms: Optional[float] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class RedFlagScanEvent(ObservabilityEvent):
    """Event for a symptom red-flag scan."""

    event_type: EventType = EventType.RED_FLAG_SCAN
    symptom_count: int = 0
    surgery_type: Optional[str] = None

    # Outcome
    has_red_flags: bool = False
    critical_count: int = 0
    warning_count: int = 0
    flag_labels: list[str] = Field(default_factory=list)
    evaluation_failed: bool = False
    should_stop: Optional[bool] = None

    # Raw symptom text, only when full content logging is on
    symptoms: Optional[list[str]] = None


class AssessmentRunEvent(ObservabilityEvent):
    """Event for a composite risk assessment run."""

    patient_id: str

    # Results
    overall_score: Optional[float] = None
    risk_level: Optional[str] = None
    degraded_domains: list[str] = Field(default_factory=list)
    persisted: bool = False

    # Error fields
    error_type: Optional[str] = None
    error_message: Optional[str] = None
