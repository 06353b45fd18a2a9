"""Complex regional pain syndrome screening (Budapest criteria, symptom part)."""
from __future__ import annotations

from rehab_risk.models.screening import (
    CRPSCategory,
    CRPSContext,
    CRPSRiskLevel,
    CRPSScreeningResult,
    CRPSSymptoms,
    CRPSUrgency,
    ScreeningQuestion,
)

# Categories with at least one symptom needed to meet the screen
CRITERIA_CATEGORY_COUNT = 3

# (field on CRPSSymptoms, category, patient-facing description)
_SYMPTOM_MAP = (
    ("allodynia", CRPSCategory.SENSORY, "Allodyni (smärta vid lätt beröring)"),
    ("hyperalgesia", CRPSCategory.SENSORY, "Hyperalgesi (överdriven smärtreaktion)"),
    ("disproportionate_pain", CRPSCategory.SENSORY, "Oproportionerlig smärta"),
    ("temperature_asymmetry", CRPSCategory.VASOMOTOR, "Temperaturasymmetri"),
    ("skin_color_change", CRPSCategory.VASOMOTOR, "Hudfärgsförändring"),
    ("asymmetric_skin_color", CRPSCategory.VASOMOTOR, "Asymmetrisk hudfärg"),
    ("edema", CRPSCategory.SUDOMOTOR, "Ödem"),
    ("sweating_changes", CRPSCategory.SUDOMOTOR, "Förändrad svettning"),
    ("asymmetric_sweating", CRPSCategory.SUDOMOTOR, "Asymmetrisk svettning"),
    ("decreased_rom", CRPSCategory.MOTOR_TROPHIC, "Minskad rörlighet"),
    ("weakness", CRPSCategory.MOTOR_TROPHIC, "Svaghet"),
    ("tremor", CRPSCategory.MOTOR_TROPHIC, "Tremor"),
    ("dystonia", CRPSCategory.MOTOR_TROPHIC, "Dystoni"),
    ("trophic_changes", CRPSCategory.MOTOR_TROPHIC, "Trofiska förändringar (naglar/hår/hud)"),
)

_RECOMMENDATIONS = {
    CRPSRiskLevel.PROBABLE: (
        "VIKTIGT: Kontakta smärtspecialist eller ortoped IDAG. Symtombilden stämmer med "
        "CRPS. Tidig behandling är avgörande - ju tidigare diagnos, desto bättre prognos."
    ),
    CRPSRiskLevel.POSSIBLE: (
        "Möjlig CRPS. Boka tid hos läkare inom närmaste dagarna för utredning. Fortsätt "
        "försiktig rörelse - UNDVIK immobilisering."
    ),
    CRPSRiskLevel.UNLIKELY: (
        "CRPS osannolikt baserat på nuvarande symtom. Fortsätt ordinerad rehabilitering. "
        "Kontakta vårdgivare om symtomen förändras."
    ),
}


def screen_for_crps(symptoms: CRPSSymptoms, context: CRPSContext) -> CRPSScreeningResult:
    """Screen for CRPS.

    The screen is met when at least three of the four symptom categories are
    affected, however many symptoms each has. A met screen with worsening or
    spreading pain is probable and urgent. A met screen alone, or two
    categories with healing that should be further along after two weeks, is
    possible.
    """
    detailed: dict[CRPSCategory, list[str]] = {c: [] for c in CRPSCategory}
    for field, category, description in _SYMPTOM_MAP:
        if getattr(symptoms, field):
            detailed[category].append(description)

    affected = {c: bool(items) for c, items in detailed.items()}
    category_count = sum(affected.values())
    symptom_count = sum(len(items) for items in detailed.values())

    meets_criteria = category_count >= CRITERIA_CATEGORY_COUNT
    worsening = context.pain_getting_worse or context.pain_spreading
    unexpected_progression = (
        not context.normal_healing_expected and context.days_since_injury > 14
    )

    if meets_criteria and worsening:
        level, urgency = CRPSRiskLevel.PROBABLE, CRPSUrgency.URGENT
    elif meets_criteria or (category_count >= 2 and unexpected_progression):
        level, urgency = CRPSRiskLevel.POSSIBLE, CRPSUrgency.SOON
    else:
        level, urgency = CRPSRiskLevel.UNLIKELY, CRPSUrgency.ROUTINE

    return CRPSScreeningResult(
        meets_screening_criteria=meets_criteria,
        categories_affected=affected,
        category_count=category_count,
        symptom_count=symptom_count,
        risk_level=level,
        recommendation=_RECOMMENDATIONS[level],
        urgency=urgency,
        detailed_symptoms=detailed,
    )


def generate_crps_screening_questions() -> list[ScreeningQuestion]:
    return [
        ScreeningQuestion(id="touch_pain", question="Gör det ont när något lätt nuddar huden?", category="sensory"),
        ScreeningQuestion(id="disproportionate", question="Känns smärtan värre än vad skadan borde ge?", category="sensory"),
        ScreeningQuestion(id="temp_diff", question="Känns armen/benet onormalt varmt eller kallt jämfört med andra sidan?", category="vasomotor"),
        ScreeningQuestion(id="color_change", question="Har huden ändrat färg (rödare, blåare, blekare)?", category="vasomotor"),
        ScreeningQuestion(id="swelling", question="Har du svullnad som inte förklaras av skadan?", category="sudomotor"),
        ScreeningQuestion(id="sweating", question="Svettas armen/benet annorlunda än vanligt?", category="sudomotor"),
        ScreeningQuestion(id="stiffness", question="Känns armen/benet styvare än förväntat?", category="motor"),
        ScreeningQuestion(id="nail_hair", question="Har du märkt förändringar i naglar eller hårväxt?", category="motor"),
    ]
