"""Pancreas finding state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from radclean.models import OutputOptions


class PancreasCTPreset(str, Enum):
    NCCT = "NCCT"
    CECT_PANCREAS = "CECT pancreas protocol"
    CTA_HEMORRHAGE = "CTA hemorrhage"


class MRMode(str, Enum):
    NON_CONTRAST = "Non-contrast"
    DYNAMIC_CONTRAST = "Dynamic contrast"


class APSeverity(str, Enum):
    MILD = "Mild"
    MODERATELY_SEVERE = "Moderately severe"
    SEVERE = "Severe"


class APTiming(str, Enum):
    EARLY = "<48-72h"
    LATE = ">=48-72h"
    UNKNOWN = "Unknown"


class Complication(str, Enum):
    NONE = "None"
    SUSPECTED_NECROSIS = "Suspected necrosis"
    APFC = "APFC"
    ANC = "ANC"
    PSEUDOCYST = "Pseudocyst"
    WON = "WON"
    INFECTED_NECROSIS = "Infected necrosis/abscess"
    HEMORRHAGE = "Hemorrhage/pseudoaneurysm"
    VENOUS_THROMBOSIS = "Splenic/portal/SMV thrombosis"
    BILIARY_OBSTRUCTION = "Biliary obstruction/cholangitis"
    BOWEL_ISCHEMIA = "Suspected bowel ischemia"


class MassType(str, Enum):
    NONE = "None"
    SOLID = "Solid"
    CYSTIC = "Cystic"


class Location(str, Enum):
    HEAD = "Head"
    BODY = "Body"
    TAIL = "Tail"
    UNCINATE = "Uncinate"
    DIFFUSE = "Diffuse"
    INDETERMINATE = "Indeterminate"


class Enhancement(str, Enum):
    UNKNOWN = "Unknown"
    HYPOENHANCING = "Hypoenhancing"
    ARTERIAL_HYPER = "Arterial hyperenhancing"
    DELAYED_FIBROTIC = "Delayed/fibrotic"


class DuctSign(str, Enum):
    NONE = "None"
    DOUBLE_DUCT = "Double duct"
    MPD_DILATATION = "MPD dilatation"
    CUTOFF = "Cutoff"


class VesselContact(str, Enum):
    NONE = "None"
    ABUTMENT = "Abutment"
    ENCASEMENT = "Encasement"


class CystSubtype(str, Enum):
    INDETERMINATE = "Indeterminate"
    PSEUDOCYST = "Pseudocyst"
    IPMN = "IPMN"
    SEROUS = "Serous"
    MUCINOUS = "Mucinous"
    SPN = "SPN"


class SolidSubtype(str, Enum):
    INDETERMINATE = "Indeterminate"
    PDAC = "PDAC"
    NET = "NET"
    FOCAL_PANCREATITIS = "Focal pancreatitis"
    AIP = "AIP"
    LYMPHOMA = "Lymphoma"
    METASTASIS = "Metastasis"


class Modalities(BaseModel):
    model_config = ConfigDict(frozen=True)

    usg: bool = True
    ct: bool = True
    mr: bool = True

    def active(self) -> list[str]:
        return [label for label, on in (("USG", self.usg), ("CT", self.ct), ("MR", self.mr)) if on]


class PancreasState(BaseModel):
    """One immutable snapshot of the pancreas form. ``PancreasState()`` is the reset record."""

    model_config = ConfigDict(frozen=True)

    modalities: Modalities = Field(default_factory=Modalities)

    # Clinical context
    fever_sepsis: bool = False
    immunosuppression: bool = False
    known_malignancy: bool = False
    trauma: bool = False
    alcohol: bool = False
    hypertriglyceridemia: bool = False
    biliary_suspected: bool = False

    # Protocol
    ct_preset: PancreasCTPreset = PancreasCTPreset.NCCT
    mr_mode: MRMode = MRMode.NON_CONTRAST
    mr_dwi: bool = True
    mr_swi: bool = False
    mr_mrcp: bool = True
    mr_perfusion: bool = False
    mr_mrs: bool = False

    # Acute pancreatitis
    acute_pancreatitis: bool = True
    ap_severity: APSeverity = APSeverity.MILD
    ap_timing: APTiming = APTiming.UNKNOWN
    peripancreatic_stranding: bool = True
    fluid_collection: bool = False
    gas_in_collection: bool = False

    complication: Complication = Complication.NONE

    # Mass
    mass_type: MassType = MassType.NONE
    mass_location: Location = Location.INDETERMINATE
    mass_size_mm: str = ""
    enhancement: Enhancement = Enhancement.UNKNOWN
    duct_sign: DuctSign = DuctSign.NONE
    vessel_contact: VesselContact = VesselContact.NONE
    restricted_diffusion: bool = False
    t2_iso_hypo: bool = False
    calcifications: bool = False
    upstream_atrophy: bool = False
    solid_subtype: SolidSubtype = SolidSubtype.INDETERMINATE

    # Cyst
    cyst_subtype: CystSubtype = CystSubtype.INDETERMINATE
    cyst_duct_communication: bool = False
    cyst_mural_nodule: bool = False
    main_duct_mm: str = ""
    microcystic_honeycomb: bool = False

    # Autoimmune pancreatitis hints
    aip_capsule_rim: bool = False
    aip_diffuse_sausage: bool = False

    incidental: str = ""

    output: OutputOptions = Field(
        default_factory=lambda: OutputOptions(
            include_probability_language=True,
            include_recommendations_language=True,
        )
    )
