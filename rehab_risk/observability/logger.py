"""Observability logger for structured telemetry."""

import json
import logging
import time
import uuid
from collections.abc import Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional

from rehab_risk.models.red_flag import RedFlagReport
from rehab_risk.observability.events import (
    AssessmentRunEvent,
    EventType,
    ObservabilityEvent,
    RedFlagScanEvent,
)

logger = logging.getLogger(__name__)


class ObservabilityLogger:
    """Central logger for red-flag and risk assessment events.

    Writes structured events to JSON Lines files for later analysis.
    """

    _instance: Optional["ObservabilityLogger"] = None

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        enabled: bool = True,
        log_full_content: bool = False,
        max_content_length: int = 500,
    ):
        """Initialize observability logger.

        Args:
            log_dir: Directory for log files (default: data/logs)
            enabled: Whether logging is enabled
            log_full_content: Whether to record raw symptom text
            max_content_length: Max length for a recorded symptom
        """
        self.enabled = enabled
        self.log_full_content = log_full_content
        self.max_content_length = max_content_length

        if log_dir is None:
            log_dir = Path("data/logs")
        self.log_dir = log_dir
        if self.enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._log_files: dict[str, Path] = {
            "red_flags": self.log_dir / "red_flag_scans.jsonl",
            "assessments": self.log_dir / "risk_assessments.jsonl",
        }

        # Event callbacks for real-time monitoring
        self._callbacks: list[Callable[[ObservabilityEvent], None]] = []

        self._current_session_id: Optional[str] = None

    @classmethod
    def get_instance(cls) -> "ObservabilityLogger":
        """Get or create singleton instance configured from settings."""
        if cls._instance is None:
            from rehab_risk.config import get_settings

            settings = get_settings()
            cls._instance = cls(
                log_dir=settings.observability_log_dir,
                enabled=settings.observability_enabled,
                log_full_content=settings.observability_log_full_content,
            )
        return cls._instance

    def set_session_id(self, session_id: str) -> None:
        """Set current session ID for event correlation."""
        self._current_session_id = session_id

    def generate_request_id(self) -> str:
        """Generate a unique request ID."""
        return str(uuid.uuid4())[:8]

    def add_callback(self, callback: Callable[[ObservabilityEvent], None]) -> None:
        """Add callback for real-time event monitoring."""
        self._callbacks.append(callback)

    def _write_event(self, event: ObservabilityEvent, log_type: str) -> None:
        """Write event to appropriate log file."""
        if not self.enabled:
            return

        if self._current_session_id and not event.session_id:
            event.session_id = self._current_session_id

        try:
            log_file = self._log_files.get(log_type)
            if log_file:
                with open(log_file, "a", encoding="utf-8") as f:
                    f.write(event.model_dump_json() + "\n")

            for callback in self._callbacks:
                try:
                    callback(event)
                except Exception as e:
                    logger.warning(f"Observability callback failed: {e}")

        except Exception as e:
            logger.warning(f"Failed to write observability event: {e}")

    def _truncate(self, content: str) -> str:
        if len(content) <= self.max_content_length:
            return content
        return content[: self.max_content_length] + "..."

    # Red-flag scans

    def log_red_flag_scan(
        self,
        symptoms: Sequence[str],
        report: RedFlagReport,
        surgery_type: Optional[str] = None,
        should_stop: Optional[bool] = None,
        duration_ms: Optional[float] = None,
        request_id: Optional[str] = None,
    ) -> None:
        """Log the outcome of a red-flag scan.

        Symptom text is patient data and is only recorded when full content
        logging is enabled.
        """
        event = RedFlagScanEvent(
            symptom_count=len(symptoms),
            surgery_type=surgery_type,
            has_red_flags=report.has_red_flags,
            critical_count=report.critical_count,
            warning_count=report.warning_count,
            flag_labels=[f.symptom for f in report.flags],
            evaluation_failed=report.evaluation_failed,
            should_stop=should_stop,
            symptoms=[self._truncate(s) for s in symptoms] if self.log_full_content else None,
            duration_ms=duration_ms,
            request_id=request_id,
        )
        self._write_event(event, "red_flags")

    # Risk assessments

    @contextmanager
    def assessment_run(self, patient_id: str, request_id: Optional[str] = None):
        """Context manager for logging a risk assessment run.

        Usage:
            with obs.assessment_run(patient_id) as event:
                assessment = ...
                event.overall_score = assessment.overall_score
        """
        start_time = time.time()
        request_id = request_id or self.generate_request_id()

        event = AssessmentRunEvent(
            event_type=EventType.ASSESSMENT_START,
            patient_id=patient_id,
            request_id=request_id,
        )

        try:
            yield event
            event.event_type = EventType.ASSESSMENT_SUCCESS

        except Exception as e:
            event.event_type = EventType.ASSESSMENT_ERROR
            event.error_type = type(e).__name__
            event.error_message = str(e)[:200]
            raise

        finally:
            event.duration_ms = (time.time() - start_time) * 1000
            self._write_event(event, "assessments")

    # Utility methods

    def get_recent_events(
        self,
        log_type: str,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Read recent events from a log file."""
        log_file = self._log_files.get(log_type)
        if not log_file or not log_file.exists():
            return []

        events = []
        with open(log_file, encoding="utf-8") as f:
            for line in f:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue

        return events[-limit:]

    def get_stats(self, log_type: str) -> dict[str, Any]:
        """Summary counts for a log type.

        Red-flag logs add how many scans found critical flags and how many
        failed closed; assessment logs add how many runs had degraded domains.
        """
        events = self.get_recent_events(log_type, limit=1000)
        if not events:
            return {"total": 0}

        total = len(events)
        errors = sum(1 for e in events if e.get("event_type") == EventType.ASSESSMENT_ERROR.value)
        durations = [e["duration_ms"] for e in events if e.get("duration_ms") is not None]

        stats: dict[str, Any] = {
            "total": total,
            "errors": errors,
            "error_rate": errors / total,
            "avg_duration_ms": sum(durations) / len(durations) if durations else None,
        }

        if log_type == "red_flags":
            stats["with_critical"] = sum(1 for e in events if e.get("critical_count", 0) > 0)
            stats["evaluation_failed"] = sum(1 for e in events if e.get("evaluation_failed"))
        elif log_type == "assessments":
            stats["degraded_runs"] = sum(1 for e in events if e.get("degraded_domains"))

        return stats


def get_observability_logger() -> ObservabilityLogger:
    """Get the global observability logger instance."""
    return ObservabilityLogger.get_instance()
