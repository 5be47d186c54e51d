"""Brain finding state: categorical choices, flags and raw measurement text."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from radclean.models import OutputOptions


class Modality(str, Enum):
    CT = "CT"
    MR = "MR"
    CT_MR = "CT+MR"


class BrainFlow(str, Enum):
    TRAUMA = "Trauma"
    HEMORRHAGE = "Hemorrhage"
    MASS_INFECTION = "Mass/Infection"


class CTPreset(str, Enum):
    NCCT = "NCCT"
    CECT = "CECT"
    CTA = "CTA"
    CTV = "CTV"
    CTP = "CTP"


class Compartment(str, Enum):
    EXTRA_AXIAL = "Extra-axial"
    INTRA_AXIAL = "Intra-axial"


class ExtraAxialSubtype(str, Enum):
    SDH = "SDH"
    EDH = "EDH"
    SAH = "SAH"
    IVH = "IVH"


class IntraAxialSubtype(str, Enum):
    ICH = "ICH"
    HEMORRHAGIC_CONTUSION = "Hemorrhagic contusion"
    SAH = "SAH"
    IVH = "IVH"


class Side(str, Enum):
    R = "R"
    L = "L"
    BILATERAL = "Bilateral"
    MIDLINE = "Midline"


class BrainRegion(str, Enum):
    FRONTAL = "Frontal"
    PARIETAL = "Parietal"
    TEMPORAL = "Temporal"
    OCCIPITAL = "Occipital"
    INSULA = "Insula"
    BASAL_GANGLIA = "Basal ganglia"
    THALAMUS = "Thalamus"
    BRAINSTEM = "Brainstem"
    CEREBELLUM = "Cerebellum"
    INTRAVENTRICULAR = "Intraventricular"
    DIFFUSE = "Diffuse"
    OTHER = "Other"


class ExtraAxialLocation(str, Enum):
    CONVEXITY = "Convexity"
    FALX = "Falx"
    TENTORIUM = "Tentorium"
    SKULL_BASE = "Skull base"
    DIFFUSE = "Diffuse"


class VenousSinus(str, Enum):
    SUPERIOR_SAGITTAL = "Superior sagittal sinus"
    STRAIGHT = "Straight sinus"
    TRANSVERSE = "Transverse sinus"
    SIGMOID = "Sigmoid sinus"
    INTERNAL_JUGULAR = "Internal jugular vein"
    DEEP_VENOUS = "Deep venous system"
    CORTICAL_VEINS = "Cortical veins"


class Occlusion(str, Enum):
    PARTIAL = "Partial"
    COMPLETE = "Complete"


class LesionCount(str, Enum):
    SOLITARY = "Solitary"
    MULTIPLE = "Multiple"


class BrainState(BaseModel):
    """One immutable snapshot of the brain form. ``BrainState()`` is the reset record."""

    model_config = ConfigDict(frozen=True)

    # Protocol
    modality: Modality = Modality.CT
    flow: BrainFlow = BrainFlow.HEMORRHAGE
    ct_preset: CTPreset = CTPreset.NCCT
    ct_neck_cta: bool = False
    mr_contrast: bool = True
    mr_dwi: bool = True
    mr_swi: bool = True
    mr_perfusion: bool = False
    mr_mrs: bool = False

    # Clinical context
    trauma_history: bool = True
    anticoagulation: bool = False
    known_malignancy: bool = False
    fever_sepsis: bool = False
    immunosuppression: bool = False
    cvst_suspected: bool = False

    # Trauma
    trauma_skull_fracture: bool = False
    trauma_basilar_fracture: bool = False
    trauma_dai: bool = False
    trauma_contusion: bool = True
    trauma_pneumocephalus: bool = False
    trauma_herniation: bool = False

    # Hemorrhage
    hemorrhage_compartment: Compartment = Compartment.INTRA_AXIAL
    extra_axial_subtype: ExtraAxialSubtype = ExtraAxialSubtype.SDH
    intra_axial_subtype: IntraAxialSubtype = IntraAxialSubtype.ICH
    side: Side = Side.R
    region: BrainRegion = BrainRegion.TEMPORAL
    extra_axial_location: ExtraAxialLocation = ExtraAxialLocation.CONVEXITY
    thickness_mm: str = ""
    midline_shift_mm: str = ""
    max_diameter_cm: str = ""
    abc_a_cm: str = ""
    abc_b_cm: str = ""
    abc_c_cm: str = ""
    accompanying_sah: bool = False
    accompanying_ivh: bool = False
    blood_age_hint: str = ""

    # Venous sinus thrombosis
    venous_sinuses: frozenset[VenousSinus] = Field(default_factory=lambda: frozenset({VenousSinus.SUPERIOR_SAGITTAL}))
    cvst_laterality: Side = Side.MIDLINE
    cvst_occlusion: Occlusion = Occlusion.PARTIAL
    cortical_vein_involvement: bool = False
    venous_infarct: bool = False
    hemorrhagic_venous_infarct: bool = False
    dense_sinus_sign: bool = False
    empty_delta_sign: bool = False

    # Mass / infection
    lesion_count: LesionCount = LesionCount.SOLITARY
    lesion_compartment: Compartment = Compartment.INTRA_AXIAL
    ring_enhancing: bool = False
    diffusion_restriction: bool = False
    strong_restriction: bool = False
    marked_edema: bool = True
    hemorrhagic_component: bool = False
    dural_tail: bool = False
    hyperostosis: bool = False
    csf_cleft: bool = False
    intense_homogeneous_enhancement: bool = False
    t2_iso_hypo: bool = False
    deep_periventricular: bool = False

    incidental: str = ""

    output: OutputOptions = Field(default_factory=OutputOptions)

    @property
    def ct_active(self) -> bool:
        return self.modality in (Modality.CT, Modality.CT_MR)

    @property
    def mr_active(self) -> bool:
        return self.modality in (Modality.MR, Modality.CT_MR)

    @property
    def any_restriction(self) -> bool:
        return self.diffusion_restriction or self.strong_restriction


def hemorrhagic_infarct_implies_venous_infarct(state: BrainState, path: str) -> BrainState:
    """Marking a venous infarct hemorrhagic also marks the venous infarct.

    One-way: clearing ``venous_infarct`` later is left alone.
    """
    if path == "hemorrhagic_venous_infarct" and state.hemorrhagic_venous_infarct and not state.venous_infarct:
        return state.model_copy(update={"venous_infarct": True})
    return state


NORMALIZERS = (hemorrhagic_infarct_implies_venous_infarct,)
