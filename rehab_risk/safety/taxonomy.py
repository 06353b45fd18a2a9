"""Red-flag vocabularies.

Two immutable tables keyed by :class:`RedFlagCondition`. Iteration order of
each table is the classification priority: the first condition with a keyword
hit wins. Keywords are stored as written by clinicians (Swedish, with
diacritics and underscores); they are normalized at match time.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

from rehab_risk.models.red_flag import RedFlagSeverity, Urgency


class RedFlagCondition(str, Enum):
    # Critical
    CAUDA_EQUINA = "cauda_equina"
    DVT = "dvt"
    PULMONARY_EMBOLISM = "pulmonary_embolism"
    CRPS = "crps"
    INFECTION = "infection"
    NEUROLOGICAL_DETERIORATION = "neurological_deterioration"
    JOINT_DISLOCATION = "joint_dislocation"
    COMPARTMENT_SYNDROME = "compartment_syndrome"
    SUSPECTED_FRACTURE = "suspected_fracture"
    SEPTIC_ARTHRITIS = "septic_arthritis"
    STROKE = "stroke"
    MYOCARDIAL_INFARCTION = "myocardial_infarction"
    DIABETIC_EMERGENCY = "diabetic_emergency"
    ANAPHYLAXIS = "anaphylaxis"
    RHABDOMYOLYSIS = "rhabdomyolysis"
    HEAT_STROKE = "heat_stroke"
    HYPOTHERMIA = "hypothermia"
    SYNCOPE = "syncope"
    # Warning
    INCREASED_SWELLING = "increased_swelling"
    INCREASED_PAIN = "increased_pain"
    RESTRICTED_MOTION = "restricted_motion"
    INSTABILITY = "instability"
    NERVE_INVOLVEMENT = "nerve_involvement"
    WOUND_PROBLEM = "wound_problem"


class TaxonomyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    condition: RedFlagCondition
    label: str
    severity: RedFlagSeverity
    urgency: Urgency
    keywords: tuple[str, ...]
    action: str
    clinical_criteria: Optional[str] = None
    risk_factors: tuple[str, ...] = ()


def _critical(condition, label, keywords, action, clinical_criteria=None, risk_factors=()):
    return TaxonomyEntry(
        condition=condition,
        label=label,
        severity=RedFlagSeverity.CRITICAL,
        urgency=Urgency.IMMEDIATE,
        keywords=tuple(keywords),
        action=action,
        clinical_criteria=clinical_criteria,
        risk_factors=tuple(risk_factors),
    )


def _warning(condition, label, keywords, action):
    return TaxonomyEntry(
        condition=condition,
        label=label,
        severity=RedFlagSeverity.WARNING,
        urgency=Urgency.WITHIN_48H,
        keywords=tuple(keywords),
        action=action,
    )


# ---------------------------------------------------------------------------
# Critical conditions (always emergency)
# ---------------------------------------------------------------------------

_CRITICAL_ENTRIES = (
    _critical(
        RedFlagCondition.CAUDA_EQUINA,
        "Cauda equina",
        [
            "blåstömningsproblem", "blåsrubbning", "urinretention",
            "tarmstörning", "avföringsproblem", "sadel", "sadelbedövning",
            "känselnedsättning", "genital", "inkontinens", "bäckenbotten",
        ],
        "AKUT: Sök akutmottagning omedelbart. Cauda equina-syndrom kräver operation inom timmar.",
    ),
    _critical(
        RedFlagCondition.DVT,
        "DVT (Djup ventrombos)",
        [
            # Classic signs
            "vadsmärta", "svullen_vad", "ensidig_bensvullnad", "bensvullnad",
            "varm_vad", "rodnad_vad", "öm_vad", "spänd_vad",
            "smärta_vid_dorsiflektion", "homans_tecken", "ökad_vadvidd",
            # Measured asymmetry
            "vadvidd_skillnad", "omkrets_skillnad",
            # Edema
            "pittingödem", "asymmetriskt_ödem", "ensidig_svullnad",
            # Superficial veins
            "synliga_vener", "utvidgade_ytliga_vener", "kollateral_cirkulation",
        ],
        "AKUT: Ring 112 eller sök akutmottagning omedelbart. Misstänkt DVT kräver akut "
        "ultraljud och antikoagulantia. STOPPA ALL TRÄNING tills utredning är klar.",
        clinical_criteria=(
            "Wells DVT Score: Vadsvullnad >3cm jämfört med frisk sida + värme + smärta "
            "= hög sannolikhet"
        ),
        risk_factors=[
            "Nylig operation (särskilt höft/knä)",
            "Immobilisering >3 dagar",
            "P-piller/HRT",
            "Malignitet",
            "Tidigare DVT/LE",
            "Graviditet/postpartum",
            "Övervikt",
            "Flygresor >4h",
            "Rökning",
        ],
    ),
    _critical(
        RedFlagCondition.PULMONARY_EMBOLISM,
        "Lungemboli",
        [
            "andnöd", "plötslig_andnöd", "svårt_att_andas", "dyspné",
            "bröstsmärta", "pleuritsmärta", "smärta_vid_andning",
            "hosta_blod", "hemoptys", "blodig_hosta",
            "hjärtklappning", "takykardi", "snabb_puls",
            "yrsel", "svimning", "synkope", "kollaps",
            "ångest", "oro", "dödsångest",
            "cyanos", "blåfärgad",
        ],
        "AKUT: Ring 112 OMEDELBART. Lungemboli är livshotande. Håll dig stilla tills "
        "ambulans kommer. Sätt dig upp om andnöd.",
        risk_factors=[
            "Känd DVT eller DVT-symtom",
            "Nylig operation",
            "Immobilisering",
            "Malignitet",
            "Tidigare LE",
        ],
    ),
    _critical(
        RedFlagCondition.CRPS,
        "CRPS (Komplex regionalt smärtsyndrom)",
        [
            # Sensory
            "allodyni", "hyperalgesi", "oproportionerlig_smärta", "brännande_smärta",
            "smärta_vid_beröring", "överkänslig_hud", "smärta_utanför_dermatom",
            # Vasomotor
            "temperaturskillnad", "hudfärgsändring", "asymmetrisk_hudfärg",
            "blå_hud", "röd_hud", "blek_hud", "fläckig_hud",
            "kall_extremitet", "varm_extremitet", "temperaturasymmetri",
            # Sudomotor / edema
            "svettning", "asymmetrisk_svettning", "ökad_svettning", "minskad_svettning",
            "ödem", "svullnad_crps", "asymmetrisk_svullnad",
            # Motor / trophic
            "stelhet_crps", "svaghet_crps", "tremor", "dystoni",
            "minskad_rom", "kontraktur", "rörelserädsla",
            "nagelförändringar", "hårväxtförändring", "hudatrofi",
            "tunn_hud", "glänsande_hud", "förändrad_behåring",
            # Progression
            "sprider_sig", "smärta_som_sprider_sig", "utstrålande",
            "försämras_trots_behandling", "kronisk_smärta_efter_skada",
        ],
        "VIKTIGT: Kontakta smärtspecialist eller ortoped omgående (samma dag). Tidig "
        "diagnos och behandling av CRPS är avgörande för prognosen. UNDVIK immobilisering "
        "- försiktig rörelse är viktig.",
        clinical_criteria=(
            "Budapest-kriterierna för CRPS:\n"
            "1. Fortsatt smärta oproportionerlig mot utlösande händelse\n"
            "2. Minst ett symtom i 3 av 4 kategorier:\n"
            "   - Sensorisk: Allodyni/hyperalgesi\n"
            "   - Vasomotorisk: Temperatur-/färgasymmetri\n"
            "   - Sudomotorisk: Ödem/svettningsförändring\n"
            "   - Motorisk/trofisk: ROM-nedsättning/trofiska förändringar\n"
            "3. Minst ett tecken vid undersökning i 2 av 4 kategorier\n"
            "4. Ingen annan diagnos förklarar symtomen bättre"
        ),
    ),
    _critical(
        RedFlagCondition.INFECTION,
        "Infektion",
        [
            "hög_feber", "feber_38", "frossa", "rodnad_sår", "vätskande_sår",
            "svullet_sår", "illaluktande", "varbildning", "sepsis",
            "varm_led", "röd_led", "svullen_led", "septisk_artrit",
        ],
        "AKUT: Kontakta opererande klinik eller akutmottagning. Misstänkt infektion.",
    ),
    _critical(
        RedFlagCondition.NEUROLOGICAL_DETERIORATION,
        "Neurologisk försämring",
        [
            "progredierande_svaghet", "tilltagande_domningar", "förlamning",
            "dubbelseende", "talsvårigheter", "förvirring", "medvetslöshet",
            "kramper", "plötslig_huvudvärk",
        ],
        "AKUT: Ring 112. Neurologisk akutsituation.",
    ),
    _critical(
        RedFlagCondition.JOINT_DISLOCATION,
        "Ledluxation",
        [
            "hoppar_ur_led", "luxation", "ur_led", "knäckte", "felställning",
            "oförmåga_att_röra", "låser_sig", "instabil", "ger_vika",
        ],
        "AKUT: Rör inte leden. Sök akutmottagning för reponering.",
    ),
    _critical(
        RedFlagCondition.COMPARTMENT_SYNDROME,
        "Kompartmentsyndrom",
        [
            "extrem_smärta", "ökande_smärta_trots_medicin", "spänd_muskulatur",
            "parestesi", "pulsförlust", "blek_extremitet", "kall_extremitet",
            "5p_pain", "5p_pallor", "5p_pulselessness", "5p_paresthesia", "5p_paralysis",
        ],
        "AKUT: Ring 112. Kompartmentsyndrom kräver akut kirurgi inom 6 timmar för att "
        "förhindra permanent skada.",
        clinical_criteria="5 P: Pain (out of proportion), Pallor, Pulselessness, Paresthesia, Paralysis",
    ),
    _critical(
        RedFlagCondition.SUSPECTED_FRACTURE,
        "Misstänkt fraktur",
        [
            "knäckande_ljud", "krasch", "deformitet", "felställd",
            "oförmögen_att_belasta", "kan_inte_gå", "punktömhet",
            "svullnad_efter_fall", "blåmärke_efter_trauma",
            "stressfraktur", "belastningssmärta", "nattlig_värk_ben",
        ],
        "AKUT: Immobilisera och sök akutmottagning för röntgen. Belasta inte.",
    ),
    _critical(
        RedFlagCondition.SEPTIC_ARTHRITIS,
        "Septisk artrit",
        [
            "het_led", "akut_ledsvullnad", "röd_led", "feber_led",
            "orörlighet_led", "intensiv_ledsmärta", "frossa_led",
            "plötslig_ledinflammation",
        ],
        "AKUT: Sök akutmottagning omedelbart. Septisk artrit kräver akut ledpunktion och "
        "antibiotika.",
        clinical_criteria=(
            "Akut monoartrit + feber + CRP/SR-stegring = misstänkt septisk artrit tills "
            "motsatsen bevisats"
        ),
    ),
    _critical(
        RedFlagCondition.STROKE,
        "Stroke (FAST)",
        [
            # Face
            "ansiktsförlamning", "droppande_mungipa", "sned_mun", "asymmetriskt_ansikte",
            "halva_ansiktet", "hängande_mungipa", "kan_inte_le_symmetriskt",
            # Arm
            "arm_faller", "kan_inte_lyfta_arm", "ensidig_svaghet", "domning_arm",
            "arm_sjunker", "svag_arm", "ensidig_armsvaghet", "kraftlös_arm",
            # Speech
            "sluddrigt_tal", "svårt_att_prata", "förvirrat_tal", "kan_inte_hitta_ord",
            "otydligt_tal", "obegripligt_tal", "talrubbning", "afasi",
            # Time / other sudden onset
            "plötslig_huvudvärk", "värsta_huvudvärken", "åskknallshuvudvärk",
            "synförlust", "dubbelseende", "plötsligt_dubbelseende",
            "yrsel_plötslig", "balansförlust", "koordinationssvårigheter",
            "plötslig_förvirring", "medvetandeförändring",
        ],
        "AKUT: Ring 112 OMEDELBART. Stroke kräver behandling inom 4.5 timmar. FAST: Face "
        "(le), Arm (lyft båda), Speech (enkla meningar), Time (ring 112). Notera exakt tid "
        "symtomen började.",
        clinical_criteria=(
            "FAST-protokoll: F=Face (be personen le - hänger ena sidan?), A=Arm (be lyfta "
            "båda - sjunker en?), S=Speech (be upprepa mening - sluddrigt?), T=Time (varje "
            "minut räknas). Trombolys inom 4.5h, trombektomi inom 6-24h."
        ),
    ),
    _critical(
        RedFlagCondition.MYOCARDIAL_INFARCTION,
        "Hjärtinfarkt (MI)",
        [
            # Typical presentation
            "tryck_över_bröstet", "elefant_på_bröstet", "kramande_bröstsmärta",
            "pressande_bröstsmärta", "bröstsmärta_ansträngning", "central_bröstsmärta",
            "utstrålande_vänster_arm", "utstrålning_arm", "smärta_vänster_arm",
            "käksmärta", "smärta_käke", "utstrålning_käke",
            "kallsvettig", "kallsvett", "svettning_bröstsmärta",
            # Atypical presentation
            "illamående_utan_orsak", "illamående_bröstsmärta",
            "extrem_trötthet", "ovanlig_trötthet", "utmattning_plötslig",
            "magsmärta_kvinna", "buksmärta_hjärta", "obehag_övre_buk",
            "andnöd_utan_ansträngning", "andnöd_vila", "andfåddhet_plötslig",
            "ångest_dödsångest", "oro_hjärta", "impending_doom",
            # Other
            "ryggsmärta_bröstsmärta", "utstrålning_rygg",
            "bröstsmärta_vilosmärta", "bröstsmärta_längre_15min",
        ],
        "AKUT: Ring 112 OMEDELBART. Tugga 1 aspirin (500mg) om tillgänglig och ej "
        "allergisk. Sitt eller ligg stilla. Lossa åtsittande kläder. Var beredd på HLR.",
        clinical_criteria=(
            "Typisk: Bröstsmärta >15min + utstrålning till arm/käke/rygg + kallsvett + "
            "illamående. Atypisk (kvinnor/äldre/diabetiker): Andnöd, trötthet, buksmärta, "
            "illamående utan typisk bröstsmärta."
        ),
        risk_factors=[
            "Högt blodtryck",
            "Diabetes",
            "Högt kolesterol",
            "Rökning",
            "Övervikt",
            "Familjehistorik hjärtsjukdom",
            "Tidigare hjärtinfarkt",
            "Stillasittande livsstil",
        ],
    ),
    _critical(
        RedFlagCondition.DIABETIC_EMERGENCY,
        "Diabetisk ketoacidos (DKA/HHS)",
        [
            # DKA
            "fruktlukt_andedräkt", "aceton_andedräkt", "söt_andedräkt",
            "djup_snabb_andning", "kussmaul_andning", "hyperventilering_diabetes",
            "illamående_kräkningar_diabetes", "kräkning_diabetiker",
            "buksmärta_diabetes", "magsmärta_diabetiker",
            "förvirring_diabetes", "omtöcknad_diabetes",
            "mycket_törstig", "extrem_törst", "polydipsi",
            "kissar_mycket", "polyuri", "urinerar_ofta",
            # HHS
            "uttorkning_diabetes", "kraftig_dehydrering",
            "dåsig_diabetes", "sömnig_diabetiker",
            "medvetslöshet_diabetes", "koma_diabetes",
            # General
            "högt_blodsocker", "hyperglykemi", "blodsocker_över_20",
            "trötthet_diabetes", "svaghet_diabetes",
        ],
        "AKUT: Ring 112 OMEDELBART. DKA/HHS är livshotande. Kontrollera blodsocker om "
        "möjligt. Ge INTE insulin själv. Ge vatten om personen är vaken.",
        clinical_criteria=(
            "DKA: Blodsocker >14mmol/L + ketoner (fruktlukt) + Kussmaul-andning + metabol "
            "acidos. HHS: Blodsocker >33mmol/L + kraftig dehydrering + förvirring/koma utan "
            "ketoacidos. Vanligare hos äldre typ 2-diabetiker."
        ),
    ),
    _critical(
        RedFlagCondition.ANAPHYLAXIS,
        "Anafylaxi",
        [
            # Skin
            "nässelutslag", "urtikaria", "klåda_hela_kroppen", "hudutslag_allergi",
            "rodnad_allergi", "svullnad_ansikte", "svullnad_läppar",
            # Angioedema
            "svullnad_tunga", "svullen_tunga", "svullnad_hals", "svullen_hals",
            "klump_i_halsen", "svårt_att_svälja", "halsen_svullnar",
            # Airway
            "heshet", "stridor", "pipig_andning", "väsande_andning",
            "pip_i_bröstet", "astmaliknande", "svårt_att_andas_allergi",
            "lufthunger", "andnöd_allergi", "kvävningskänsla",
            # Circulation
            "yrsel_allergisk", "svimfärdig_allergi", "blodtrycksfall",
            "snabb_puls_allergi", "svag_puls",
            "medvetslöshet_allergi", "kollaps_allergi",
            # Gastrointestinal
            "illamående_allergi", "kräkning_allergi", "diarré_allergi",
            "magkramper_allergi",
            # Triggers
            "efter_bistick", "efter_mat", "efter_medicin", "allergisk_reaktion",
        ],
        "AKUT: Ring 112 OMEDELBART. Om ADRENALINPENNA (EpiPen) finns: Ge i yttre "
        "lårmuskeln DIREKT. Lägg personen ner med benen högt (ej om andningssvårigheter - "
        "då sittande). Var beredd på HLR.",
        clinical_criteria=(
            "Snabb progression: Urtikaria/klåda → Angioödem (ansikte/tunga/svalg) → "
            "Luftvägsobstruktion → Anafylaktisk chock (hypotension, medvetslöshet). "
            "Bifasisk reaktion kan ske 6-12h efter initial reaktion."
        ),
    ),
    _critical(
        RedFlagCondition.RHABDOMYOLYSIS,
        "Rabdomyolys",
        [
            # Urine changes
            "mörk_urin", "cola_urin", "te_urin", "brun_urin", "myoglobinuri",
            "rödbrun_urin", "urin_som_cola", "missfärgad_urin_träning",
            # Muscle pain
            "extrem_muskelsmärta", "svår_muskelsmärta", "outhärdlig_muskelsmärta",
            "smärta_efter_träning", "muskelvärk_extrem",
            # Swelling / weakness
            "svullna_muskler", "uppsvällda_muskler", "stel_efter_träning",
            "svaghet_efter_träning", "kraftlöshet_efter_träning",
            # Systemic
            "illamående_efter_träning", "kräkning_efter_träning",
            "förvirring_efter_träning", "yrsel_efter_träning",
            "feber_efter_träning", "hjärtklappning_efter_träning",
            # Context
            "crossfit_smärta", "första_träningen", "ovanligt_hård_träning",
            "kollapsade_efter_träning", "oförmögen_att_röra_sig",
        ],
        "AKUT: Sök akutmottagning OMEDELBART. Drick stora mängder vatten NU. Risk för "
        "akut njursvikt. Ta inte smärtstillande (NSAID). Vila totalt.",
        clinical_criteria=(
            "CK (kreakinkinas) >5x normalt + myoglobinuri (mörk urin) + muskelsmärta/svaghet. "
            "Komplikationer: Akut njursvikt, elektrolytrubbningar (hyperkalemi), DIC. "
            "Utlösare: Extrem träning, crush-skador, statiner, värme, droger."
        ),
        risk_factors=[
            "Statinbehandling + intensiv träning",
            "Extrem träning utan uppvärmning",
            "Otränad + hård träning",
            "Dehydrering",
            "Värme/hög fuktighet",
            "Alkohol/drogintag",
            "Tidigare episod",
        ],
    ),
    _critical(
        RedFlagCondition.HEAT_STROKE,
        "Värmeslag (Hypertermi)",
        [
            # Classic signs
            "slutat_svettas", "torr_hud", "het_torr_hud", "ingen_svettning",
            "hög_kroppstemperatur", "feber_träning", "överhettad",
            "het_hud", "glödande_hud", "röd_het_hud",
            # CNS involvement
            "förvirring_värme", "desorientering_värme", "aggressivitet_värme",
            "kramper_värme", "krampanfall_träning", "epilepsi_träning",
            "medvetslöshet_värme", "kollaps_värme", "svimmade_värme",
            # Other
            "huvudvärk_värme", "yrsel_värme", "illamående_värme",
            "kräkning_värme", "snabb_puls_värme", "andnöd_värme",
            # Context
            "träning_i_värme", "het_dag", "solsting", "utomhus_kollaps",
        ],
        "AKUT: Ring 112 OMEDELBART. STOPPA all aktivitet. Flytta till skugga/sval plats. "
        "Kyl ner med vatten, is, våta handdukar. Fläkta. Om medvetslös: stabilt sidoläge. "
        "GE INTE vätska om ej fullt vaken.",
        clinical_criteria=(
            "Kroppstemperatur >40°C + CNS-påverkan (förvirring, kramper, medvetslöshet) + "
            "upphörd eller nedsatt svettning. Klassisk värmeslag: Äldre, barn, kroniskt "
            "sjuka. Ansträngningsutlöst: Unga atleter."
        ),
    ),
    _critical(
        RedFlagCondition.HYPOTHERMIA,
        "Hypotermi (Nedkylning)",
        [
            # Early signs
            "frysning", "okontrollerad_skakning", "kraftig_huttrande",
            "kall_hud", "blek_hud_kyla", "blåaktig_hud",
            # Progression
            "sluddrigt_tal_kyla", "fumlig", "klumpig",
            "förvirring_kyla", "dåsighet_kyla", "trött_kyla",
            "minskad_huttrning", "slutat_skaka", "paradoxal_avklädning",
            "medvetslöshet_kyla", "stel_kropp",
            # Context
            "vattendrunkning", "kallt_vatten", "utomhus_kyla", "nattlig_kyla",
        ],
        "AKUT: Ring 112. Ta personen till värme. Ta av våta kläder, lägg på varma "
        "filtar/kläder. Värm SAKTA - ej varm dusch/bad. Om vaken: varma drycker (ej "
        "alkohol). Om medvetslös: stabilt sidoläge, HLR-beredskap.",
        clinical_criteria=(
            "Mild (32-35°C): Huttrning, trötthet. Måttlig (28-32°C): Förvirring, slutar "
            "huttra. Svår (<28°C): Medvetslöshet, hjärtrytmrubbningar. Paradoxal avklädning "
            "kan förekomma vid svår hypotermi."
        ),
    ),
    _critical(
        RedFlagCondition.SYNCOPE,
        "Synkope (Svimning)",
        [
            # The faint itself
            "svimmade", "blackout", "förlorade_medvetandet",
            "vaknade_på_golvet", "minns_inte", "svartnade",
            "kollapsade", "föll_ihop",
            # Prodrome
            "blev_yr", "tunnelseende", "hörde_susande", "ringde_i_öronen",
            "illamående_före_svimning", "kallsvettig_före_svimning",
            "bleknade", "mörkt_för_ögonen", "svartnade_för_ögonen",
            # Cardiac warning signs
            "svimmade_vid_ansträngning", "svimning_träning", "kollaps_under_träning",
            "hjärtklappning_före_svimning", "oregelbunden_puls_före_svimning",
            "bröstsmärta_före_svimning", "andnöd_före_svimning",
            # Recurrence
            "svimmat_flera_gånger", "återkommande_svimningar",
        ],
        "VARNING: AVBRYT TRÄNINGEN omedelbart. Lägg ner med benen högt. Kontakta "
        "vårdgivare SAMMA DAG - synkope kan dölja hjärtsjukdom. Om svimning under "
        "ansträngning eller med bröstsmärta: Ring 112.",
        clinical_criteria=(
            "Differentialdiagnos: Vasovagal/reflexsynkope (godartad, triggad av "
            "stress/värme/stående) vs Kardiell synkope (farlig: arytmi, aortastenos, HCM - "
            "kräver utredning) vs Ortostatisk (läkemedel, dehydrering). Röda flaggor: "
            "Ansträngningsutlöst, bröstsmärta, familjehistorik plötslig hjärtdöd."
        ),
    ),
)


# ---------------------------------------------------------------------------
# Warning conditions (contact provider within 24-48h)
# ---------------------------------------------------------------------------

_WARNING_ENTRIES = (
    _warning(
        RedFlagCondition.INCREASED_SWELLING,
        "Ökad svullnad",
        [
            "ökad_svullnad", "svullnat_mer", "tilltagande_svullnad",
            "svullnad_som_inte_minskar", "växande_svullnad",
        ],
        "Kontakta vårdgivare inom 24-48 timmar. Vila, is, elevation.",
    ),
    _warning(
        RedFlagCondition.INCREASED_PAIN,
        "Ökad smärta",
        [
            "ökad_smärta", "värre_smärta", "smärta_ökar", "smärta_trots_medicin",
            "nattlig_smärta", "vilosmärta",
        ],
        "Kontakta vårdgivare om smärtan inte förbättras inom 24-48 timmar.",
    ),
    _warning(
        RedFlagCondition.RESTRICTED_MOTION,
        "Rörelseinskränkning",
        [
            "stel", "kan_inte_böja", "kan_inte_sträcka", "låst",
            "minskad_rörlighet", "förlust_av_rörlighet",
        ],
        "Dokumentera och kontakta fysioterapeut. Kan behöva justerad behandling.",
    ),
    _warning(
        RedFlagCondition.INSTABILITY,
        "Instabilitet",
        [
            "viker_sig", "ger_vika", "ostadigt", "instabil_känsla",
            "sviktar", "osäker_gång",
        ],
        "Kontakta vårdgivare. Kan tyda på bristfällig läkning eller re-ruptur.",
    ),
    _warning(
        RedFlagCondition.NERVE_INVOLVEMENT,
        "Nervpåverkan",
        [
            "domningar", "stickningar", "pirrningar", "känselnedsättning",
            "svaghet_arm", "svaghet_ben", "tappa_grepp",
        ],
        "Kontakta vårdgivare. Nervpåverkan bör utredas.",
    ),
    _warning(
        RedFlagCondition.WOUND_PROBLEM,
        "Sårproblem",
        [
            "öppet_sår", "sårläkning", "sårkanter", "blödning_sår",
            "röd_sårrand",
        ],
        "Håll såret rent och torrt. Kontakta vårdgivare om det inte förbättras.",
    ),
)


CRITICAL_TAXONOMY: Mapping[RedFlagCondition, TaxonomyEntry] = MappingProxyType(
    {e.condition: e for e in _CRITICAL_ENTRIES}
)
WARNING_TAXONOMY: Mapping[RedFlagCondition, TaxonomyEntry] = MappingProxyType(
    {e.condition: e for e in _WARNING_ENTRIES}
)

_BY_LABEL: Mapping[str, TaxonomyEntry] = MappingProxyType(
    {e.label: e for e in (*_CRITICAL_ENTRIES, *_WARNING_ENTRIES)}
)


def _check_tables() -> None:
    critical = set(CRITICAL_TAXONOMY)
    warning = set(WARNING_TAXONOMY)
    if critical & warning:
        raise RuntimeError(f"Conditions in both taxonomies: {sorted(critical & warning)}")
    missing = set(RedFlagCondition) - critical - warning
    if missing:
        raise RuntimeError(f"Conditions without a taxonomy entry: {sorted(missing)}")
    if len(_BY_LABEL) != len(_CRITICAL_ENTRIES) + len(_WARNING_ENTRIES):
        raise RuntimeError("Duplicate red-flag labels")
    for entry in (*_CRITICAL_ENTRIES, *_WARNING_ENTRIES):
        if not entry.keywords:
            raise RuntimeError(f"{entry.condition.value} has no keywords")


_check_tables()


def get_entry(condition: "RedFlagCondition | str") -> Optional[TaxonomyEntry]:
    """Look up a taxonomy entry by enum member, enum value or display label."""
    if isinstance(condition, RedFlagCondition):
        return CRITICAL_TAXONOMY.get(condition) or WARNING_TAXONOMY.get(condition)
    if condition in _BY_LABEL:
        return _BY_LABEL[condition]
    try:
        return get_entry(RedFlagCondition(condition))
    except ValueError:
        return None
