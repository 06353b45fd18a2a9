"""Real-time red-flag classification of patient-reported symptoms.

Each reported symptom is checked in three phases, in this order:

1. the critical taxonomy (first matching condition wins, urgency ``immediate``)
2. the warning taxonomy (first matching condition wins, urgency ``within_48h``)
3. the red flags of the patient's surgery protocol (every match is kept,
   urgency ``same_day``)

A symptom that hits phase 1 never reaches phase 2, so a symptom matching both
tables is only ever reported as critical.

This is advisory triage, not diagnosis. Every flag tells the patient to
contact care.
"""

import logging
from collections.abc import Iterable
from functools import lru_cache
from typing import Mapping, Optional, Union

from rehab_risk.models.red_flag import (
    DisplayVariant,
    ExerciseGateDecision,
    RedFlagAlertItem,
    RedFlagCheck,
    RedFlagDisplay,
    RedFlagReport,
    RedFlagSeverity,
    Urgency,
)
from rehab_risk.safety.protocols import ProtocolLookup, get_surgery_protocol
from rehab_risk.safety.taxonomy import (
    CRITICAL_TAXONOMY,
    WARNING_TAXONOMY,
    RedFlagCondition,
    TaxonomyEntry,
    get_entry,
)
from rehab_risk.safety.text import match_keywords

logger = logging.getLogger(__name__)


EMERGENCY_RECOMMENDATION = (
    "🚨 AKUT: Du har symtom som kräver omedelbar medicinsk bedömning. "
    "Kontakta akutmottagning eller ring 112."
)
WARNING_RECOMMENDATION = (
    "⚠️ VARNING: Du har symtom som bör bedömas av vårdpersonal. "
    "Kontakta din vårdgivare inom 24-48 timmar."
)
NO_FLAGS_RECOMMENDATION = (
    "✅ Inga röda flaggor identifierade. Fortsätt följa ditt rehabiliteringsprogram."
)
EVALUATION_FAILED_RECOMMENDATION = (
    "⚠️ Dina symtom kunde inte bedömas. Avbryt träningen och kontakta din vårdgivare, "
    "eller ring 112 om du är orolig."
)

MULTIPLE_WARNINGS_REASON = "Flera varningssymtom identifierade. Vila och kontakta vårdgivare."

# Distinct warning flags that together stop an exercise session
STOP_WARNING_THRESHOLD = 2

BASE_SYMPTOM_QUESTIONS = (
    "Har du upplevt ökad smärta sedan förra träningen?",
    "Har du märkt ökad svullnad?",
    "Har du haft feber eller frossa?",
    "Har du känt domningar eller stickningar?",
    "Känns leden stabil när du belastar?",
)


# ---------------------------------------------------------------------------
# Scan phases
# ---------------------------------------------------------------------------

def _match_taxonomy(
    symptom: str, taxonomy: Mapping[RedFlagCondition, TaxonomyEntry]
) -> Optional[RedFlagCheck]:
    for entry in taxonomy.values():
        matched = match_keywords(symptom, entry.keywords)
        if matched:
            return RedFlagCheck(
                symptom=entry.label,
                severity=entry.severity,
                action=entry.action,
                urgency=entry.urgency,
                matched_keywords=matched,
                source_symptom=symptom,
            )
    return None


def _match_protocol_flags(symptom: str, protocol_flags: Iterable[str]) -> list[RedFlagCheck]:
    checks = []
    for flag in protocol_flags:
        matched = match_keywords(symptom, [flag])
        if matched:
            checks.append(
                RedFlagCheck(
                    symptom=flag,
                    severity=RedFlagSeverity.WARNING,
                    action=f"Protokoll-specifik varning: {flag}. Kontakta din fysioterapeut.",
                    urgency=Urgency.SAME_DAY,
                    matched_keywords=matched,
                    source_symptom=symptom,
                )
            )
    return checks


def classify_symptom(symptom: str, protocol_flags: Iterable[str] = ()) -> list[RedFlagCheck]:
    """Run the three scan phases for one symptom."""
    critical = _match_taxonomy(symptom, CRITICAL_TAXONOMY)
    if critical:
        return [critical]

    warning = _match_taxonomy(symptom, WARNING_TAXONOMY)
    if warning:
        return [warning]

    return _match_protocol_flags(symptom, protocol_flags)


def _clean_symptoms(symptoms: Union[Iterable[str], str, None]) -> list[str]:
    if symptoms is None:
        return []
    if isinstance(symptoms, str):
        symptoms = [symptoms]

    cleaned = []
    for symptom in symptoms:
        if not isinstance(symptom, str):
            logger.debug("Skipping non-text symptom entry: %r", symptom)
            continue
        if symptom.strip():
            cleaned.append(symptom)
    return cleaned


def _build_report(flags: list[RedFlagCheck]) -> RedFlagReport:
    seen: set[str] = set()
    unique: list[RedFlagCheck] = []
    for flag in flags:
        if flag.symptom not in seen:
            seen.add(flag.symptom)
            unique.append(flag)

    # Stable: keeps report order within each severity
    unique.sort(key=lambda f: f.severity != RedFlagSeverity.CRITICAL)

    critical_count = sum(1 for f in unique if f.severity == RedFlagSeverity.CRITICAL)
    warning_count = len(unique) - critical_count

    if critical_count:
        recommendation = EMERGENCY_RECOMMENDATION
    elif unique:
        recommendation = WARNING_RECOMMENDATION
    else:
        recommendation = NO_FLAGS_RECOMMENDATION

    return RedFlagReport(
        has_red_flags=bool(unique),
        critical_count=critical_count,
        warning_count=warning_count,
        flags=unique,
        overall_recommendation=recommendation,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def check_red_flags(
    symptoms: Union[Iterable[str], str, None],
    surgery_type: Optional[str] = None,
    protocol_lookup: ProtocolLookup = get_surgery_protocol,
) -> RedFlagReport:
    """Classify a symptom report.

    Empty or missing input yields an empty report with the continue-program
    recommendation. Flags are de-duplicated by label (first occurrence wins)
    and critical flags are listed before warnings.
    """
    cleaned = _clean_symptoms(symptoms)
    if not cleaned:
        return _build_report([])

    protocol_flags: tuple[str, ...] = ()
    if surgery_type:
        protocol = protocol_lookup(surgery_type)
        if protocol:
            protocol_flags = tuple(protocol.red_flags)
        else:
            logger.debug("No protocol found for surgery type %r", surgery_type)

    flags: list[RedFlagCheck] = []
    for symptom in cleaned:
        flags.extend(classify_symptom(symptom, protocol_flags))

    report = _build_report(flags)
    if report.critical_count:
        logger.info(
            "Critical red flag(s) detected: %s",
            ", ".join(f.symptom for f in report.critical_flags),
        )
    return report


def evaluation_failed_report() -> RedFlagReport:
    """Report returned when a scan could not complete."""
    return RedFlagReport(
        has_red_flags=True,
        overall_recommendation=EVALUATION_FAILED_RECOMMENDATION,
        evaluation_failed=True,
    )


def safe_check_red_flags(
    symptoms: Union[Iterable[str], str, None],
    surgery_type: Optional[str] = None,
    protocol_lookup: ProtocolLookup = get_surgery_protocol,
) -> RedFlagReport:
    """Like :func:`check_red_flags`, but never raises.

    If the scan fails (for example a protocol lookup backed by a remote
    service errors out) the result fails closed: it is marked as having red
    flags and tells the patient to stop and seek care if concerned.
    """
    try:
        return check_red_flags(symptoms, surgery_type, protocol_lookup)
    except Exception:
        logger.exception("Red-flag scan failed; returning fail-closed report")
        return evaluation_failed_report()


@lru_cache(maxsize=1024)
def _cached_report(symptoms: tuple[str, ...], surgery_type: Optional[str]) -> RedFlagReport:
    return check_red_flags(symptoms, surgery_type)


def cached_check_red_flags(
    symptoms: Iterable[str], surgery_type: Optional[str] = None
) -> RedFlagReport:
    """Memoized :func:`check_red_flags` using the built-in protocol table."""
    key = tuple(_clean_symptoms(symptoms))
    return _cached_report(key, surgery_type).model_copy(deep=True)


def check_single_symptom(
    symptom: str,
    surgery_type: Optional[str] = None,
    protocol_lookup: ProtocolLookup = get_surgery_protocol,
) -> Optional[RedFlagCheck]:
    """Classify one symptom; returns its first flag or None."""
    report = check_red_flags([symptom], surgery_type, protocol_lookup)
    return report.flags[0] if report.flags else None


def should_stop_exercise(
    symptoms: Union[Iterable[str], str, None],
    surgery_type: Optional[str] = None,
    protocol_lookup: ProtocolLookup = get_surgery_protocol,
) -> ExerciseGateDecision:
    """Decide whether the current exercise session must stop.

    Stops on any critical flag, on two or more distinct warnings, and when the
    scan itself failed.
    """
    return exercise_gate(safe_check_red_flags(symptoms, surgery_type, protocol_lookup))


def exercise_gate(report: RedFlagReport) -> ExerciseGateDecision:
    """Stop/continue decision for an already computed report."""
    if report.evaluation_failed:
        return ExerciseGateDecision(should_stop=True, reason=report.overall_recommendation)

    if report.critical_count > 0:
        flag = report.critical_flags[0]
        return ExerciseGateDecision(
            should_stop=True,
            reason=f"STOPPA TRÄNINGEN: {flag.symptom}. {flag.action}",
        )

    if report.warning_count >= STOP_WARNING_THRESHOLD:
        return ExerciseGateDecision(should_stop=True, reason=MULTIPLE_WARNINGS_REASON)

    return ExerciseGateDecision(should_stop=False)


def get_protocol_red_flags(
    surgery_type: str, protocol_lookup: ProtocolLookup = get_surgery_protocol
) -> list[str]:
    protocol = protocol_lookup(surgery_type)
    return list(protocol.red_flags) if protocol else []


def format_red_flags_for_display(report: RedFlagReport) -> RedFlagDisplay:
    """Shape a report for a patient-facing alert banner."""
    if report.evaluation_failed:
        return RedFlagDisplay(
            title="Symtomen kunde inte bedömas",
            alerts=[
                RedFlagAlertItem(
                    icon="🚨",
                    title="Bedömning misslyckades",
                    message=report.overall_recommendation,
                    variant=DisplayVariant.DESTRUCTIVE,
                )
            ],
        )

    if not report.has_red_flags:
        return RedFlagDisplay(title="Inga varningar", alerts=[])

    alerts = []
    for flag in report.flags:
        critical = flag.severity == RedFlagSeverity.CRITICAL
        alerts.append(
            RedFlagAlertItem(
                icon="🚨" if critical else "⚠️",
                title=flag.symptom,
                message=flag.action,
                variant=DisplayVariant.DESTRUCTIVE if critical else DisplayVariant.WARNING,
            )
        )

    if report.critical_count > 0:
        title = f"{report.critical_count} akut(a) varning(ar)"
    else:
        title = f"{report.warning_count} varning(ar)"
    return RedFlagDisplay(title=title, alerts=alerts)


def generate_symptom_questions(
    surgery_type: Optional[str] = None,
    protocol_lookup: ProtocolLookup = get_surgery_protocol,
) -> list[str]:
    """Follow-up questions for a check-in, plus up to three protocol-specific ones."""
    questions = list(BASE_SYMPTOM_QUESTIONS)
    if surgery_type:
        protocol = protocol_lookup(surgery_type)
        if protocol:
            questions.extend(
                f"Har du upplevt: {flag.lower()}?" for flag in protocol.red_flags[:3]
            )
    return questions


def get_red_flag_clinical_criteria(condition: Union[RedFlagCondition, str]) -> Optional[str]:
    entry = get_entry(condition)
    return entry.clinical_criteria if entry else None


def get_red_flag_risk_factors(condition: Union[RedFlagCondition, str]) -> list[str]:
    entry = get_entry(condition)
    return list(entry.risk_factors) if entry else []
