"""Postoperative protocol red flags.

The classifier only needs the list of protocol-specific red-flag strings for a
surgery, so protocol lookup is a collaborator: anything matching
:class:`ProtocolLookup` can be passed in. :func:`get_surgery_protocol` is the
built-in table.
"""

import re
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict


class SurgeryProtocol(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    english_name: str
    body_area: str
    red_flags: tuple[str, ...]
    expected_recovery_weeks: int


class ProtocolLookup(Protocol):
    def __call__(self, surgery_type: str) -> Optional[SurgeryProtocol]: ...


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

SHOULDER_ARTHROPLASTY = SurgeryProtocol(
    id="axelprotes",
    name="Axelprotes (Total axelartroplastik)",
    english_name="Total Shoulder Arthroplasty",
    body_area="axel",
    red_flags=(
        "Plötslig ökad smärta",
        "Svullnad som inte minskar",
        "Feber > 38°C",
        "Rodnad och värme vid snittet",
        "Instabilitetskänsla",
        "Domningar eller stickningar som förvärras",
    ),
    expected_recovery_weeks=24,
)

ROTATOR_CUFF_REPAIR = SurgeryProtocol(
    id="rotatorkuff_sutur",
    name="Rotatorkuffsutur (Cuff repair)",
    english_name="Rotator Cuff Repair",
    body_area="axel",
    red_flags=(
        "Ökad smärta efter vecka 2",
        'Känsla av att något "gått sönder"',
        "Plötslig svaghet",
        "Feber",
        "Sårinfektion",
    ),
    expected_recovery_weeks=26,
)

ACL_RECONSTRUCTION = SurgeryProtocol(
    id="acl_rekonstruktion",
    name="Främre korsbands-rekonstruktion (ACL)",
    english_name="ACL Reconstruction",
    body_area="knä",
    red_flags=(
        "Ökad svullnad",
        "Instabilitetskänsla (giving way)",
        "Låsning av knät",
        "Oförmåga att belasta",
        "Feber eller infektion",
    ),
    expected_recovery_weeks=36,
)

MENISCUS_SURGERY = SurgeryProtocol(
    id="menisk_operation",
    name="Meniskoperation (Sutur eller resektion)",
    english_name="Meniscus Surgery",
    body_area="knä",
    red_flags=(
        "Ökad svullnad efter vecka 1",
        "Låsning av knät",
        "Oförmåga att sträcka knät",
        "Feber",
    ),
    expected_recovery_weeks=12,
)

KNEE_ARTHROPLASTY = SurgeryProtocol(
    id="knaprotes",
    name="Knäprotes (Total knäartroplastik)",
    english_name="Total Knee Arthroplasty",
    body_area="knä",
    red_flags=(
        "Feber > 38°C",
        "Ökad svullnad eller rodnad",
        "Sårinfektion",
        "DVT-symtom (vadsmärta, svullnad)",
        "Instabilitetskänsla",
    ),
    expected_recovery_weeks=12,
)

HIP_ARTHROPLASTY = SurgeryProtocol(
    id="hoftprotes",
    name="Höftprotes (Total höftartroplastik)",
    english_name="Total Hip Arthroplasty",
    body_area="höft",
    red_flags=(
        "Plötslig smärta i höft eller ljumske",
        'Känsla av att höften "hoppar ur led"',
        "Benförkortning",
        "Feber",
        "DVT-symtom",
    ),
    expected_recovery_weeks=12,
)

DISC_HERNIATION_SURGERY = SurgeryProtocol(
    id="diskbrack_operation",
    name="Diskbråckoperation (Diskektomi)",
    english_name="Lumbar Discectomy",
    body_area="ländrygg",
    red_flags=(
        "Tilltagande domningar eller svaghet i benen",
        "Blås- eller tarmstörning",
        "Feber",
        "Ökad ischiassmärta",
        "Progredierande neurologiska symtom",
    ),
    expected_recovery_weeks=12,
)

SPINAL_FUSION = SurgeryProtocol(
    id="spondylodes",
    name="Spondylodes (Ryggsteloperation)",
    english_name="Spinal Fusion",
    body_area="ländrygg",
    red_flags=(
        "Tilltagande neurologiska symtom",
        "Nya domningar eller svaghet",
        "Blås- eller tarmstörning",
        "Feber",
        "Ökad smärta",
    ),
    expected_recovery_weeks=26,
)


# Alias keys are stored in lookup form (see _lookup_key)
SURGERY_PROTOCOLS: Mapping[str, SurgeryProtocol] = MappingProxyType({
    # Shoulder
    "axelprotes": SHOULDER_ARTHROPLASTY,
    "total_axelartroplastik": SHOULDER_ARTHROPLASTY,
    "axelprotes_omvand": SHOULDER_ARTHROPLASTY,
    "rotatorkuff": ROTATOR_CUFF_REPAIR,
    "rotatorkuff_sutur": ROTATOR_CUFF_REPAIR,
    "rotatorkuffsutur": ROTATOR_CUFF_REPAIR,
    "cuff_repair": ROTATOR_CUFF_REPAIR,
    # Knee
    "acl": ACL_RECONSTRUCTION,
    "acl_rekonstruktion": ACL_RECONSTRUCTION,
    "framre_korsband": ACL_RECONSTRUCTION,
    "korsbandsrekonstruktion": ACL_RECONSTRUCTION,
    "menisk": MENISCUS_SURGERY,
    "meniskoperation": MENISCUS_SURGERY,
    "menisk_sutur": MENISCUS_SURGERY,
    "menisk_resektion": MENISCUS_SURGERY,
    "knaprotes": KNEE_ARTHROPLASTY,
    "total_knaartroplastik": KNEE_ARTHROPLASTY,
    # Hip
    "hoftprotes": HIP_ARTHROPLASTY,
    "total_hoftartroplastik": HIP_ARTHROPLASTY,
    "hoftledsplastik": HIP_ARTHROPLASTY,
    # Spine
    "diskbrack": DISC_HERNIATION_SURGERY,
    "diskbrack_operation": DISC_HERNIATION_SURGERY,
    "diskektomi": DISC_HERNIATION_SURGERY,
    "spondylodes": SPINAL_FUSION,
    "ryggsteloperation": SPINAL_FUSION,
    "spinal_fusion": SPINAL_FUSION,
    "fusion": SPINAL_FUSION,
})


def _lookup_key(surgery_type: str) -> str:
    key = re.sub(r"\s+", "_", surgery_type.strip().lower())
    key = re.sub(r"[åä]", "a", key)
    return key.replace("ö", "o").replace("-", "_")


def get_surgery_protocol(surgery_type: str) -> Optional[SurgeryProtocol]:
    """Resolve a surgery name or alias to its protocol.

    Tries an exact alias first, then partial containment in either direction,
    then the English protocol name. Returns None for unknown surgeries.
    """
    key = _lookup_key(surgery_type or "")
    if not key:
        return None

    if key in SURGERY_PROTOCOLS:
        return SURGERY_PROTOCOLS[key]

    for alias, protocol in SURGERY_PROTOCOLS.items():
        if key in alias or alias in key:
            return protocol
        if key in protocol.english_name.lower():
            return protocol

    return None
