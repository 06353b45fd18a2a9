"""Symptom red-flag triage."""

from rehab_risk.safety.protocols import ProtocolLookup, SurgeryProtocol, get_surgery_protocol
from rehab_risk.safety.red_flags import (
    EMERGENCY_RECOMMENDATION,
    EVALUATION_FAILED_RECOMMENDATION,
    NO_FLAGS_RECOMMENDATION,
    WARNING_RECOMMENDATION,
    cached_check_red_flags,
    check_red_flags,
    check_single_symptom,
    exercise_gate,
    format_red_flags_for_display,
    generate_symptom_questions,
    get_protocol_red_flags,
    get_red_flag_clinical_criteria,
    get_red_flag_risk_factors,
    safe_check_red_flags,
    should_stop_exercise,
)
from rehab_risk.safety.taxonomy import (
    CRITICAL_TAXONOMY,
    WARNING_TAXONOMY,
    RedFlagCondition,
    TaxonomyEntry,
)
from rehab_risk.safety.text import match_keywords, normalize

__all__ = [
    "CRITICAL_TAXONOMY",
    "EMERGENCY_RECOMMENDATION",
    "EVALUATION_FAILED_RECOMMENDATION",
    "NO_FLAGS_RECOMMENDATION",
    "ProtocolLookup",
    "RedFlagCondition",
    "SurgeryProtocol",
    "TaxonomyEntry",
    "WARNING_RECOMMENDATION",
    "WARNING_TAXONOMY",
    "cached_check_red_flags",
    "check_red_flags",
    "check_single_symptom",
    "exercise_gate",
    "format_red_flags_for_display",
    "generate_symptom_questions",
    "get_protocol_red_flags",
    "get_red_flag_clinical_criteria",
    "get_red_flag_risk_factors",
    "get_surgery_protocol",
    "match_keywords",
    "normalize",
    "safe_check_red_flags",
    "should_stop_exercise",
]
