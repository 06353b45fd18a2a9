"""Red-flag classification models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RedFlagSeverity(str, Enum):
    """Severity of a classified symptom."""

    CRITICAL = "critical"
    WARNING = "warning"


class Urgency(str, Enum):
    """How soon the patient should act on a flag."""

    IMMEDIATE = "immediate"
    SAME_DAY = "same_day"
    WITHIN_48H = "within_48h"


# Lower rank = more urgent
URGENCY_RANK: dict[Urgency, int] = {
    Urgency.IMMEDIATE: 0,
    Urgency.SAME_DAY: 1,
    Urgency.WITHIN_48H: 2,
}

SEVERITY_RANK: dict[RedFlagSeverity, int] = {
    RedFlagSeverity.CRITICAL: 0,
    RedFlagSeverity.WARNING: 1,
}


class RedFlagCheck(BaseModel):
    """A single classified symptom."""

    symptom: str = Field(..., description="Condition label or protocol flag text")
    severity: RedFlagSeverity
    action: str = Field(..., description="Advisory text shown to the patient")
    urgency: Urgency
    matched_keywords: list[str] = Field(default_factory=list)
    source_symptom: Optional[str] = Field(
        None, description="Raw reported symptom that triggered this flag"
    )


class RedFlagReport(BaseModel):
    """Outcome of scanning a symptom report."""

    has_red_flags: bool = False
    critical_count: int = 0
    warning_count: int = 0
    flags: list[RedFlagCheck] = Field(default_factory=list)
    overall_recommendation: str
    evaluation_failed: bool = Field(
        False, description="Scan could not complete; treat as unsafe to continue"
    )

    @property
    def worst_flag(self) -> Optional[RedFlagCheck]:
        """Most severe, most urgent flag (first wins on ties)."""
        if not self.flags:
            return None
        return min(
            self.flags,
            key=lambda f: (SEVERITY_RANK[f.severity], URGENCY_RANK[f.urgency]),
        )

    @property
    def critical_flags(self) -> list[RedFlagCheck]:
        return [f for f in self.flags if f.severity == RedFlagSeverity.CRITICAL]


class ExerciseGateDecision(BaseModel):
    """Whether the patient should stop the current exercise session."""

    should_stop: bool
    reason: Optional[str] = None


class DisplayVariant(str, Enum):
    DESTRUCTIVE = "destructive"
    WARNING = "warning"
    DEFAULT = "default"


class RedFlagAlertItem(BaseModel):
    icon: str
    title: str
    message: str
    variant: DisplayVariant


class RedFlagDisplay(BaseModel):
    """Red-flag report shaped for a patient-facing banner."""

    title: str
    alerts: list[RedFlagAlertItem] = Field(default_factory=list)
