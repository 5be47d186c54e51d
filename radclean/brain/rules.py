"""Brain rule table.

Each function is a pure read of a ``BrainState`` snapshot. Thresholds live at
module level so the table can be read top to bottom.
"""

import logging

from radclean.brain.state import (
    BrainFlow,
    BrainState,
    Compartment,
    CTPreset,
    ExtraAxialSubtype,
    IntraAxialSubtype,
    LesionCount,
    Modality,
)
from radclean.config import Settings, settings as default_settings
from radclean.engine.common import abc_volume, at_least
from radclean.engine.ranking import cap, dedupe_recommendations, finalize_differentials
from radclean.models import DdxItem, Likelihood, PatternHint, Recommendation

logger = logging.getLogger(__name__)

MIDLINE_SHIFT_NEUROSURGERY_MM = 5.0
THICKNESS_NEUROSURGERY_MM = 10.0
LARGE_HEMATOMA_ML = 30.0

MENINGIOMA_HIGH = 3
LYMPHOMA_HIGH = 3
LYMPHOMA_MEDIUM = 2

CT_PRESET_LABELS = {
    CTPreset.NCCT: "Non-contrast CT",
    CTPreset.CECT: "Contrast-enhanced CT",
}

CONTEXT_TAGS = (
    ("trauma_history", "Trauma history"),
    ("anticoagulation", "Anticoagulant/antiplatelet"),
    ("known_malignancy", "Known malignancy"),
    ("fever_sepsis", "Fever/sepsis"),
    ("immunosuppression", "Immunosuppression"),
    ("cvst_suspected", "Suspected CVST"),
)

MENINGIOMA_FEATURES = (
    ("dural_tail", "Dural tail"),
    ("hyperostosis", "Hyperostosis"),
    ("csf_cleft", "CSF cleft"),
    ("intense_homogeneous_enhancement", "Intense homogeneous enhancement"),
)

LYMPHOMA_FEATURES = (
    ("strong_restriction", "Marked diffusion restriction"),
    ("t2_iso_hypo", "T2 iso/hypointense tendency"),
    ("deep_periventricular", "Deep/periventricular location"),
    ("immunosuppression", "Immunosuppression"),
)


def protocol_summary(state: BrainState) -> str:
    parts: list[str] = []
    if state.ct_active:
        parts.append(f"CT: {CT_PRESET_LABELS.get(state.ct_preset, state.ct_preset.value)}")
        if state.ct_preset == CTPreset.CTA and state.ct_neck_cta:
            parts.append("CTA head+neck")
    if state.mr_active:
        seq: list[str] = []
        if state.mr_dwi:
            seq.append("DWI/ADC")
        if state.mr_swi:
            seq.append("SWI/T2*")
        if state.mr_perfusion:
            seq.append("Perfusion (DSC/DCE)")
        if state.mr_mrs:
            seq.append("MRS")
        contrast = "Contrast-enhanced" if state.mr_contrast else "Non-contrast"
        parts.append(f"MR: {contrast}" + (f" + {' + '.join(seq)}" if seq else ""))
    return " | ".join(parts)


def context_tags(state: BrainState) -> list[str]:
    return [label for field, label in CONTEXT_TAGS if getattr(state, field)]


def meningioma_score(state: BrainState) -> int:
    return sum(1 for field, _ in MENINGIOMA_FEATURES if getattr(state, field))


def lymphoma_score(state: BrainState) -> int:
    return sum(1 for field, _ in LYMPHOMA_FEATURES if getattr(state, field))


def hematoma_volume(state: BrainState) -> float | None:
    return abc_volume(state.abc_a_cm, state.abc_b_cm, state.abc_c_cm)


def _cvst_differentials(state: BrainState) -> list[DdxItem]:
    why = ["Clinically suspected CVST"]
    if state.ct_active:
        why.append("CTV evaluation planned")
    if state.mr_active:
        why.append("MR (MRV if needed) evaluation")
    level = Likelihood.HIGH if state.ct_active and state.ct_preset == CTPreset.CTV else Likelihood.MEDIUM
    return [DdxItem(name="Dural venous sinus thrombosis (CVST)", likelihood=level, rationale=why)]


def _hemorrhage_differentials(state: BrainState) -> list[DdxItem]:
    why: list[str] = []
    if state.ct_active:
        why.append("CT appropriate for hemorrhage assessment")
    if state.anticoagulation:
        why.append("Anticoagulant/antiplatelet use")
    if state.trauma_history:
        why.append("Trauma history")

    trauma = state.trauma_history
    items: list[DdxItem] = []

    def sah() -> None:
        items.append(
            DdxItem(
                name="Subarachnoid hemorrhage",
                likelihood=Likelihood.MEDIUM if trauma else Likelihood.HIGH,
                rationale=[*why, "SAH pattern"],
            )
        )
        if not trauma and (state.ct_preset == CTPreset.CTA or state.modality == Modality.CT_MR):
            items.append(
                DdxItem(
                    name="Possible aneurysmal SAH",
                    likelihood=Likelihood.MEDIUM,
                    rationale=["No trauma + SAH pattern", "CTA can screen for aneurysm"],
                )
            )

    def ivh() -> None:
        items.append(
            DdxItem(name="Intraventricular hemorrhage", likelihood=Likelihood.MEDIUM, rationale=[*why, "IVH pattern"])
        )

    if state.hemorrhage_compartment == Compartment.EXTRA_AXIAL:
        subtype = state.extra_axial_subtype
        if subtype == ExtraAxialSubtype.SDH:
            items.append(
                DdxItem(
                    name="Subdural hematoma",
                    likelihood=Likelihood.HIGH,
                    rationale=[*why, "Extra-axial hemorrhage pattern (SDH)"],
                )
            )
        elif subtype == ExtraAxialSubtype.EDH:
            items.append(
                DdxItem(
                    name="Epidural hematoma",
                    likelihood=Likelihood.HIGH,
                    rationale=[*why, "Extra-axial hemorrhage pattern (EDH)"],
                )
            )
        elif subtype == ExtraAxialSubtype.SAH:
            sah()
        else:
            ivh()
        return items

    subtype = state.intra_axial_subtype
    if subtype == IntraAxialSubtype.ICH:
        rationale = [*why, "Intra-axial hemorrhage pattern"]
        volume = hematoma_volume(state)
        if volume is not None and volume >= LARGE_HEMATOMA_ML:
            rationale.append(f"ABC/2 volume ≥ {LARGE_HEMATOMA_ML:g} mL")
        items.append(DdxItem(name="Intraparenchymal hematoma", likelihood=Likelihood.HIGH, rationale=rationale))
        if state.ct_active and state.ct_preset in (CTPreset.CTA, CTPreset.CECT):
            items.append(
                DdxItem(
                    name="Hematoma expansion risk (spot sign)",
                    likelihood=Likelihood.LOW,
                    rationale=["Contrast phase available", "Look for spot sign"],
                )
            )
    elif subtype == IntraAxialSubtype.HEMORRHAGIC_CONTUSION:
        items.append(
            DdxItem(
                name="Hemorrhagic contusion",
                likelihood=Likelihood.HIGH if trauma else Likelihood.MEDIUM,
                rationale=[*why, "Trauma-related intra-axial hemorrhage"],
            )
        )
    elif subtype == IntraAxialSubtype.SAH:
        sah()
    else:
        ivh()
    return items


def _trauma_differentials(state: BrainState) -> list[DdxItem]:
    why: list[str] = []
    if state.trauma_history:
        why.append("Trauma history")
    if state.ct_active and state.ct_preset == CTPreset.NCCT:
        why.append("NCCT as the baseline screen")
    if state.trauma_skull_fracture:
        why.append("Suspected skull fracture")
    if state.trauma_basilar_fracture:
        why.append("Suspected basilar skull fracture")
    if state.trauma_dai:
        why.append("Suspected DAI")
    if state.trauma_contusion:
        why.append("Contusion pattern")

    items = [DdxItem(name="Traumatic brain injury spectrum", likelihood=Likelihood.HIGH, rationale=why)]
    if state.trauma_dai and state.mr_active:
        items.append(
            DdxItem(
                name="Diffuse axonal injury",
                likelihood=Likelihood.MEDIUM,
                rationale=["Suspected DAI", "MR (SWI/DWI) is more sensitive"],
            )
        )
    if state.ct_preset == CTPreset.CTA and (state.trauma_basilar_fracture or state.ct_neck_cta):
        items.append(
            DdxItem(
                name="Traumatic vascular injury (selected cases)",
                likelihood=Likelihood.LOW,
                rationale=["CTA performed", "Basilar fracture or neck CTA"],
            )
        )
    return items


def _mass_differentials(state: BrainState) -> list[DdxItem]:
    base: list[str] = []
    if state.known_malignancy:
        base.append("Known malignancy")
    if state.fever_sepsis:
        base.append("Fever/sepsis")
    if state.immunosuppression:
        base.append("Immunosuppression")
    if state.mr_active:
        base.append("MR is more sensitive for characterization")
        if state.mr_contrast:
            base.append("Contrast-enhanced MR")
    if state.ring_enhancing:
        base.append("Ring enhancement")
    if state.any_restriction:
        base.append("Diffusion restriction")
    if state.hemorrhagic_component:
        base.append("Hemorrhagic component")
    multiple = state.lesion_count == LesionCount.MULTIPLE
    if multiple:
        base.append("Multiple lesions")

    items: list[DdxItem] = []
    if state.known_malignancy or multiple:
        items.append(
            DdxItem(
                name="Metastasis",
                likelihood=Likelihood.HIGH if state.known_malignancy else Likelihood.MEDIUM,
                rationale=[*base, "Cancer history" if state.known_malignancy else "Multiple lesion pattern"],
            )
        )
    elif state.lesion_compartment == Compartment.INTRA_AXIAL:
        items.append(
            DdxItem(
                name="Glial tumor spectrum (including GBM)",
                likelihood=Likelihood.MEDIUM,
                rationale=[*base, "Solitary intra-axial lesion"],
            )
        )

    if state.ring_enhancing and state.any_restriction:
        infected = state.fever_sepsis or state.immunosuppression
        items.append(
            DdxItem(
                name="Brain abscess",
                likelihood=Likelihood.HIGH if infected else Likelihood.MEDIUM,
                rationale=[*base, "Ring enhancement + restriction"],
            )
        )
    elif state.ring_enhancing:
        items.append(
            DdxItem(
                name="Necrotic tumor / metastasis / GBM",
                likelihood=Likelihood.MEDIUM,
                rationale=[*base, "Ring enhancement without restriction"],
            )
        )

    if state.lesion_compartment == Compartment.EXTRA_AXIAL:
        score = meningioma_score(state)
        if score >= MENINGIOMA_HIGH:
            level = Likelihood.HIGH
        elif score >= 1:
            level = Likelihood.MEDIUM
        else:
            level = Likelihood.LOW
        items.append(
            DdxItem(
                name="Meningioma",
                likelihood=level,
                rationale=[
                    "Extra-axial/dural-based",
                    f"Score {score}/4 (dural tail/hyperostosis/CSF cleft/homogeneous enhancement)",
                ],
                score=score,
            )
        )

    score = lymphoma_score(state)
    if state.any_restriction or score >= LYMPHOMA_MEDIUM:
        if score >= LYMPHOMA_HIGH:
            level = Likelihood.HIGH
        elif score >= LYMPHOMA_MEDIUM:
            level = Likelihood.MEDIUM
        else:
            level = Likelihood.LOW
        why = [label for field, label in LYMPHOMA_FEATURES if getattr(state, field)]
        if state.diffusion_restriction and not state.strong_restriction:
            why.insert(0, "Diffusion restriction")
        items.append(DdxItem(name="CNS lymphoma (PCNSL)", likelihood=level, rationale=why, score=score))
    return items


def differentials(state: BrainState, settings: Settings | None = None) -> list[DdxItem]:
    settings = settings or default_settings
    items: list[DdxItem] = []
    if state.cvst_suspected:
        items.extend(_cvst_differentials(state))
    if state.flow == BrainFlow.HEMORRHAGE:
        items.extend(_hemorrhage_differentials(state))
    elif state.flow == BrainFlow.TRAUMA:
        items.extend(_trauma_differentials(state))
    else:
        items.extend(_mass_differentials(state))
    result = finalize_differentials(items, settings.brain_ddx_limit)
    logger.debug("Brain DDX: %d candidates, %d kept", len(items), len(result))
    return result


def recommendations(state: BrainState, settings: Settings | None = None) -> list[Recommendation]:
    settings = settings or default_settings
    recs: list[Recommendation] = []

    if state.cvst_suspected:
        if state.ct_active:
            recs.append(Recommendation(text="For suspected CVST, evaluate the dural venous sinuses with CTV (alternative: MRV)."))
        if state.mr_active:
            recs.append(Recommendation(text="If MR is performed, add venography (MRV) + DWI/ADC + SWI/T2*."))
        if state.venous_infarct:
            recs.append(
                Recommendation(
                    text="With suspected venous infarct, SWI/T2* for hemorrhagic transformation and close clinical follow-up are advised."
                )
            )

    if state.flow == BrainFlow.HEMORRHAGE:
        if state.ct_active and state.ct_preset == CTPreset.NCCT:
            sah = (
                state.extra_axial_subtype == ExtraAxialSubtype.SAH
                if state.hemorrhage_compartment == Compartment.EXTRA_AXIAL
                else state.intra_axial_subtype == IntraAxialSubtype.SAH
            )
            if not state.trauma_history and sah:
                recs.append(Recommendation(text="Without trauma history, consider CTA for aneurysm evaluation of the SAH pattern."))
            if state.anticoagulation:
                recs.append(
                    Recommendation(
                        text="With anticoagulant/antiplatelet use, clinical follow-up and a control CT if needed are advised for hemorrhage progression."
                    )
                )
        if at_least(state.midline_shift_mm, MIDLINE_SHIFT_NEUROSURGERY_MM) or at_least(
            state.thickness_mm, THICKNESS_NEUROSURGERY_MM
        ):
            recs.append(
                Recommendation(text="Neurosurgical consultation is advised given measurements with marked mass effect (midline shift/thickness).")
            )
        if state.hemorrhage_compartment == Compartment.INTRA_AXIAL:
            volume = hematoma_volume(state)
            if volume is not None and volume >= LARGE_HEMATOMA_ML:
                recs.append(
                    Recommendation(
                        text=f"ABC/2 volume ≥ {LARGE_HEMATOMA_ML:g} mL indicates a large hematoma; correlate with clinical status and neurosurgical evaluation."
                    )
                )

    elif state.flow == BrainFlow.TRAUMA:
        if state.mr_active and state.trauma_dai and not state.mr_swi:
            recs.append(Recommendation(text="For suspected DAI, adding SWI/T2* is helpful.", patch={"mr_swi": True}))
        if state.ct_active and (state.trauma_basilar_fracture or state.trauma_skull_fracture) and state.ct_preset != CTPreset.CTA:
            recs.append(Recommendation(text="When vascular injury is suspected, CTA may be considered in selected cases."))
        if state.trauma_pneumocephalus or state.trauma_herniation:
            recs.append(Recommendation(text="Follow-up CT is advised for pneumocephalus/herniation findings."))

    else:
        if state.modality == Modality.CT:
            recs.append(
                Recommendation(
                    text="For mass/infection characterization, contrast-enhanced MR (DWI/SWI ± perfusion) is preferable when available.",
                    patch={"modality": Modality.CT_MR.value},
                )
            )
        if state.mr_active:
            if state.ring_enhancing and state.any_restriction:
                recs.append(
                    Recommendation(
                        text="Ring enhancement with restriction favors abscess: urgent infectious disease consultation and treatment planning in the right clinical setting."
                    )
                )
            if state.lesion_compartment == Compartment.EXTRA_AXIAL and (state.dural_tail or state.hyperostosis):
                recs.append(
                    Recommendation(
                        text="Extra-axial dural-based lesion with meningioma features: neurosurgical evaluation for surgical planning."
                    )
                )
            if state.any_restriction and (state.deep_periventricular or state.immunosuppression):
                recs.append(
                    Recommendation(
                        text="Restriction with deep/periventricular location raises lymphoma: plan diagnosis (biopsy) with the clinical team before starting steroids."
                    )
                )
            if state.mr_perfusion:
                recs.append(Recommendation(text="Perfusion (rCBV) can help separate high-grade tumor from lymphoma and abscess."))
            if state.mr_mrs:
                recs.append(Recommendation(text="MRS (choline/NAA, lipid-lactate) can support tumor versus abscess characterization."))

    result = cap(dedupe_recommendations(recs), settings.brain_recommendation_limit)
    logger.debug("Brain recommendations: %d candidates, %d kept", len(recs), len(result))
    return result


def pattern_hints(state: BrainState) -> list[PatternHint]:
    """Meningioma and lymphoma support scores, shown for the mass/infection flow."""
    if state.flow != BrainFlow.MASS_INFECTION:
        return []
    meningioma = meningioma_score(state)
    lymphoma = lymphoma_score(state)
    return [
        PatternHint(
            title="Meningioma",
            high=meningioma >= MENINGIOMA_HIGH,
            score=meningioma,
            bullets=[label for field, label in MENINGIOMA_FEATURES if getattr(state, field)],
        ),
        PatternHint(
            title="Lymphoma (PCNSL)",
            high=lymphoma >= LYMPHOMA_HIGH,
            score=lymphoma,
            bullets=[label for field, label in LYMPHOMA_FEATURES if getattr(state, field)],
        ),
    ]
