"""Deep vein thrombosis screening.

``screen_for_dvt`` is a simplified Wells score for patient self-report.
``assess_postop_dvt_risk`` estimates baseline thrombosis risk from the
surgery and the time since it. Neither replaces clinical assessment.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from types import MappingProxyType
from typing import NamedTuple

from rehab_risk.models.screening import (
    DVTRiskFactors,
    DVTRiskLevel,
    DVTScreeningResult,
    DVTSymptoms,
    PostOpDVTRisk,
    PostOpRiskLevel,
    ScreeningQuestion,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Wells screen
# ---------------------------------------------------------------------------

_HIGH_WELLS = 3

_DVT_OUTCOMES = {
    DVTRiskLevel.HIGH: (
        "Hög sannolikhet för DVT (~50-75%)",
        "AKUT: Sök akutmottagning omedelbart för ultraljud och D-dimer. STOPPA TRÄNING.",
    ),
    DVTRiskLevel.MODERATE: (
        "Måttlig sannolikhet för DVT (~15-25%)",
        "Kontakta vårdgivare idag för bedömning och ev. D-dimer. Undvik intensiv träning.",
    ),
    DVTRiskLevel.LOW: (
        "Låg sannolikhet för DVT (<5%)",
        "DVT osannolikt, men kontakta vårdgivare om symtomen kvarstår eller förvärras.",
    ),
}


def screen_for_dvt(symptoms: DVTSymptoms, risk_factors: DVTRiskFactors) -> DVTScreeningResult:
    """Score DVT likelihood from reported symptoms and risk factors.

    Unilateral calf swelling scores 3, every other item 1. A score of 3 or
    more is high risk, 1-2 moderate, 0 low. High and moderate both call for
    same-day assessment; high also stops training.
    """
    score = 0
    present_symptoms: list[str] = []
    present_risk_factors: list[str] = []

    if symptoms.calf_swelling and symptoms.unilateral:
        score += 3
        present_symptoms.append("Ensidig vadsvullnad (>3cm jämfört med andra benet)")
    if symptoms.calf_pain:
        score += 1
        present_symptoms.append("Vadsmärta")
    if symptoms.warm_calf:
        score += 1
        present_symptoms.append("Varm vad")
    if symptoms.pitting_edema:
        score += 1
        present_symptoms.append("Pittingödem")
    if symptoms.dilated_veins:
        score += 1
        present_symptoms.append("Synliga kollaterala ytliga vener")

    if risk_factors.recent_surgery:
        score += 1
        present_risk_factors.append("Nylig operation (inom 4 veckor)")
    if risk_factors.cancer:
        score += 1
        present_risk_factors.append("Aktiv cancersjukdom")
    if risk_factors.previous_dvt:
        score += 1
        present_risk_factors.append("Tidigare DVT/lungemboli")
    if risk_factors.bedridden_over_3_days or symptoms.recent_immobilization:
        score += 1
        present_risk_factors.append("Immobilisering >3 dagar")
    if risk_factors.paralysis:
        score += 1
        present_risk_factors.append("Pares/paralys i benet")

    if score >= _HIGH_WELLS:
        level = DVTRiskLevel.HIGH
    elif score >= 1:
        level = DVTRiskLevel.MODERATE
    else:
        level = DVTRiskLevel.LOW

    probability, recommendation = _DVT_OUTCOMES[level]
    if level == DVTRiskLevel.HIGH:
        logger.info("High DVT likelihood screened (Wells %d)", score)

    return DVTScreeningResult(
        wells_score=score,
        risk_level=level,
        probability=probability,
        recommendation=recommendation,
        requires_urgent_assessment=level != DVTRiskLevel.LOW,
        stop_training=level == DVTRiskLevel.HIGH,
        symptoms=present_symptoms,
        risk_factors=present_risk_factors,
    )


# ---------------------------------------------------------------------------
# Postoperative risk
# ---------------------------------------------------------------------------

class SurgeryDVTProfile(NamedTuple):
    base_risk: PostOpRiskLevel
    peak_days: int
    prophylaxis_days: int


SURGERY_DVT_PROFILES = MappingProxyType({
    "acl_reconstruction": SurgeryDVTProfile(PostOpRiskLevel.MODERATE, 14, 14),
    "tkr": SurgeryDVTProfile(PostOpRiskLevel.VERY_HIGH, 21, 35),
    "thr": SurgeryDVTProfile(PostOpRiskLevel.VERY_HIGH, 21, 35),
    "hip_arthroscopy": SurgeryDVTProfile(PostOpRiskLevel.MODERATE, 14, 14),
    "knee_arthroscopy": SurgeryDVTProfile(PostOpRiskLevel.LOW, 7, 7),
    "achilles_repair": SurgeryDVTProfile(PostOpRiskLevel.MODERATE, 21, 21),
    "ankle_fracture": SurgeryDVTProfile(PostOpRiskLevel.MODERATE, 21, 14),
    "spinal_fusion": SurgeryDVTProfile(PostOpRiskLevel.HIGH, 14, 14),
    "rotator_cuff": SurgeryDVTProfile(PostOpRiskLevel.LOW, 7, 0),
})

DEFAULT_DVT_PROFILE = SurgeryDVTProfile(PostOpRiskLevel.MODERATE, 14, 14)

_TIERS = (
    PostOpRiskLevel.LOW,
    PostOpRiskLevel.MODERATE,
    PostOpRiskLevel.HIGH,
    PostOpRiskLevel.VERY_HIGH,
)

DAILY_RISK_PERCENT = MappingProxyType({
    PostOpRiskLevel.LOW: 0.1,
    PostOpRiskLevel.MODERATE: 0.5,
    PostOpRiskLevel.HIGH: 1.5,
    PostOpRiskLevel.VERY_HIGH: 3.0,
})

POSTOP_WARNING_SIGNS = (
    "Ensidig vadsvullnad",
    "Värme i vaden",
    "Smärta vid dorsalflexion av foten",
    "Rodnad längs benet",
    "Andnöd (kan indikera lungemboli)",
    "Bröstsmärta",
)

_INTENSIVE_GUIDELINES = (
    "Fotpumpsövningar varje timme",
    "Undvik långvarigt stillasittande",
    "Använd kompressionsstrumpor enligt ordination",
    "Ta profylaktisk blodförtunnande enligt ordination",
)

_GENERAL_GUIDELINES = (
    "Regelbunden rörelse rekommenderas",
    "Undvik >2h stillasittande åt gången",
)


def _shift_tier(level: PostOpRiskLevel, steps: int) -> PostOpRiskLevel:
    index = _TIERS.index(level) + steps
    return _TIERS[max(0, min(index, len(_TIERS) - 1))]


def assess_postop_dvt_risk(
    surgery_type: str,
    days_since_surgery: int,
    additional_risk_factors: Sequence[str] = (),
) -> PostOpDVTRisk:
    """Estimate DVT risk after surgery.

    Unknown surgeries get a moderate default profile (flagged with
    ``surgery_known=False``). Extra risk factors raise the tier one step,
    being past the peak window lowers it one step.
    """
    if days_since_surgery < 0:
        raise ValueError("days_since_surgery must be >= 0")

    key = (surgery_type or "").strip().lower()
    profile = SURGERY_DVT_PROFILES.get(key)
    known = profile is not None
    if not known:
        logger.warning("Unknown surgery type %r; using default DVT profile", surgery_type)
        profile = DEFAULT_DVT_PROFILE

    level = profile.base_risk
    if additional_risk_factors:
        level = _shift_tier(level, 1)
    if days_since_surgery > profile.peak_days:
        level = _shift_tier(level, -1)

    if level in (PostOpRiskLevel.HIGH, PostOpRiskLevel.VERY_HIGH):
        guidelines = list(_INTENSIVE_GUIDELINES)
    else:
        guidelines = list(_GENERAL_GUIDELINES)

    return PostOpDVTRisk(
        risk_level=level,
        daily_risk_percent=DAILY_RISK_PERCENT[level],
        peak_risk_period=f"Dag 1-{profile.peak_days} postoperativt",
        prophylaxis_likely=days_since_surgery <= profile.prophylaxis_days,
        surgery_known=known,
        warning_signs_to_watch=list(POSTOP_WARNING_SIGNS),
        exercise_guidelines=guidelines,
    )


def generate_dvt_screening_questions() -> list[ScreeningQuestion]:
    return [
        ScreeningQuestion(id="calf_swelling", question="Har du märkt svullnad i vaden på ett ben?", category="symptom"),
        ScreeningQuestion(id="calf_pain", question="Har du smärta i vaden, särskilt vid gång?", category="symptom"),
        ScreeningQuestion(id="warm_calf", question="Känns vaden varm jämfört med andra benet?", category="symptom"),
        ScreeningQuestion(id="unilateral", question="Är symtomen bara på ett ben?", category="symptom"),
        ScreeningQuestion(id="immobilization", question="Har du varit stillasittande/sängliggande i långa perioder?", category="riskfactor"),
        ScreeningQuestion(id="recent_surgery", question="Har du genomgått operation de senaste 4 veckorna?", category="riskfactor"),
        ScreeningQuestion(id="previous_dvt", question="Har du haft blodpropp tidigare?", category="riskfactor"),
    ]
