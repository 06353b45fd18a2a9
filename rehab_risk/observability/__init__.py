"""Observability module for red-flag and risk assessment telemetry."""

from rehab_risk.observability.events import (
    AssessmentRunEvent,
    EventType,
    ObservabilityEvent,
    RedFlagScanEvent,
)
from rehab_risk.observability.logger import ObservabilityLogger, get_observability_logger

__all__ = [
    "AssessmentRunEvent",
    "EventType",
    "ObservabilityEvent",
    "ObservabilityLogger",
    "RedFlagScanEvent",
    "get_observability_logger",
]
