"""Structured clinical screens."""

from rehab_risk.clinical.crps import generate_crps_screening_questions, screen_for_crps
from rehab_risk.clinical.dvt import (
    assess_postop_dvt_risk,
    generate_dvt_screening_questions,
    screen_for_dvt,
)

__all__ = [
    "assess_postop_dvt_risk",
    "generate_crps_screening_questions",
    "generate_dvt_screening_questions",
    "screen_for_crps",
    "screen_for_dvt",
]
