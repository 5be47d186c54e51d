"""Brain narrative and the single derive entry point."""

import logging

from radclean.brain import rules
from radclean.brain.state import (
    BrainFlow,
    BrainState,
    Compartment,
    CTPreset,
    ExtraAxialSubtype,
    IntraAxialSubtype,
    LesionCount,
    Occlusion,
    Side,
    VenousSinus,
)
from radclean.config import Settings, settings as default_settings
from radclean.engine.common import ensure_terminator, format_volume, join_nice, kv, measurement
from radclean.engine.language import probability_sentence, recommendation_sentence
from radclean.models import DdxItem, DerivedResult, Recommendation

logger = logging.getLogger(__name__)

MODULE_ID = "brain"

SIDE_TEXT = {
    Side.R: "right",
    Side.L: "left",
    Side.BILATERAL: "bilateral",
    Side.MIDLINE: "midline",
}

SINUS_SHORT = {
    VenousSinus.SUPERIOR_SAGITTAL: "SSS",
    VenousSinus.STRAIGHT: "straight sinus",
    VenousSinus.TRANSVERSE: "transverse sinus",
    VenousSinus.SIGMOID: "sigmoid sinus",
    VenousSinus.INTERNAL_JUGULAR: "internal jugular vein",
    VenousSinus.DEEP_VENOUS: "deep venous system",
    VenousSinus.CORTICAL_VEINS: "cortical veins",
}

EXTRA_AXIAL_LABELS = {
    ExtraAxialSubtype.SDH: "Subdural hematoma",
    ExtraAxialSubtype.EDH: "Epidural hematoma",
    ExtraAxialSubtype.SAH: "Subarachnoid hemorrhage",
    ExtraAxialSubtype.IVH: "Intraventricular hemorrhage",
}

INTRA_AXIAL_LABELS = {
    IntraAxialSubtype.ICH: "intraparenchymal hematoma",
    IntraAxialSubtype.HEMORRHAGIC_CONTUSION: "hemorrhagic contusion",
    IntraAxialSubtype.SAH: "subarachnoid hemorrhage",
    IntraAxialSubtype.IVH: "intraventricular hemorrhage",
}

NO_NEW_INFARCT = "No definite new ischemic infarct is seen (within the limits of the current protocol)."


def _cvst_sentence(state: BrainState) -> str:
    has_ctv = state.ct_active and state.ct_preset == CTPreset.CTV
    sinuses = [SINUS_SHORT[s] for s in VenousSinus if s in state.venous_sinuses]
    sinus_text = ", ".join(sinuses) if sinuses else "dural venous sinuses"
    occlusion = "complete" if state.cvst_occlusion == Occlusion.COMPLETE else "partial"

    extras: list[str] = []
    if state.cortical_vein_involvement:
        extras.append("cortical vein involvement")
    if state.venous_infarct:
        extras.append("hemorrhagic venous infarct" if state.hemorrhagic_venous_infarct else "venous infarct")
    if state.dense_sinus_sign:
        extras.append("dense sinus/cord sign on NCCT")
    if state.empty_delta_sign:
        extras.append("empty delta sign/filling defect on contrast study")

    lead = "On CTV" if has_ctv else "In the setting of clinically suspected CVST"
    sentence = (
        f"{lead}, findings are consistent with {occlusion} filling defect/thrombosis "
        f"at the {SIDE_TEXT[state.cvst_laterality]} {sinus_text}"
    )
    return sentence + (f" ({', '.join(extras)})." if extras else ".")


def _hemorrhage_lines(state: BrainState) -> list[str]:
    side = SIDE_TEXT[state.side]
    measures: list[str] = []

    if state.hemorrhage_compartment == Compartment.EXTRA_AXIAL:
        subtype = state.extra_axial_subtype
        label = EXTRA_AXIAL_LABELS[subtype]
        if subtype != ExtraAxialSubtype.SAH:
            label = f"{label} ({state.extra_axial_location.value}, {side})"
        measures.append(kv("max thickness", measurement(state.thickness_mm, "mm")))
        if subtype == ExtraAxialSubtype.SAH:
            lead, tail = f"There is {label[0].lower()}{label[1:]}", ""
        else:
            lead, tail = label, " is seen"
    else:
        subtype = state.intra_axial_subtype
        if subtype == IntraAxialSubtype.IVH:
            where = f"{side} ventricular system"
        else:
            where = f"{side} {state.region.value.lower()}"
        lead, tail = f"There is a {where} {INTRA_AXIAL_LABELS[subtype]}", ""
        measures.append(kv("max diameter", measurement(state.max_diameter_cm, "cm")))
        volume = format_volume(rules.hematoma_volume(state))
        measures.append(kv("ABC/2 volume", f"{volume} mL" if volume else ""))

    measures.append(kv("midline shift", measurement(state.midline_shift_mm, "mm")))
    if state.accompanying_sah:
        measures.append("accompanying SAH")
    if state.accompanying_ivh:
        measures.append("accompanying IVH")

    sentence = lead
    detail = join_nice(measures)
    if detail:
        sentence += f" ({detail})"
    hint = state.blood_age_hint.strip()
    if hint:
        sentence += f" (stage/signal hint: {hint})"
    return [sentence + tail + ".", NO_NEW_INFARCT]


def _trauma_lines(state: BrainState) -> list[str]:
    items: list[str] = []
    if state.trauma_contusion:
        items.append("assessment for contusion")
    if state.trauma_dai:
        items.append("suspected DAI")
    if state.trauma_skull_fracture:
        items.append("suspected skull fracture")
    if state.trauma_basilar_fracture:
        items.append("suspected basilar skull fracture")
    if state.trauma_pneumocephalus:
        items.append("pneumocephalus")
    if state.trauma_herniation:
        items.append("signs of herniation")
    return [
        f"Trauma assessment: {', '.join(items) if items else 'standard trauma evaluation'}.",
        "Findings regarding acute hemorrhage/mass effect should be interpreted together with the clinical picture.",
    ]


def _mass_lines(state: BrainState) -> list[str]:
    pattern = "Multiple lesion pattern" if state.lesion_count == LesionCount.MULTIPLE else "Solitary lesion pattern"
    where = "extra-axial/dural-based" if state.lesion_compartment == Compartment.EXTRA_AXIAL else "intra-axial"
    flags: list[str] = []
    if state.ring_enhancing:
        flags.append("ring enhancing")
    if state.any_restriction:
        flags.append("diffusion restriction")
    if state.marked_edema:
        flags.append("marked edema")
    if state.hemorrhagic_component:
        flags.append("hemorrhagic component")
    lead = f"{pattern}, {where}"
    if flags:
        lead += f" ({', '.join(flags)})"
    return [
        f"{lead} is seen. Differential diagnoses should be weighed together with the clinical setting and protocol.",
        "Further characterization with contrast-enhanced MR + DWI/SWI is advised if needed.",
    ]


def narrative(
    state: BrainState,
    ddx: list[DdxItem],
    recs: list[Recommendation],
    settings: Settings | None = None,
) -> str:
    settings = settings or default_settings
    summary = rules.protocol_summary(state)
    lines = [f"Protocol: {summary or '—'}."]

    tags = rules.context_tags(state)
    if tags:
        lines.append(f"Clinical context: {', '.join(tags)}.")

    if state.cvst_suspected:
        lines.append(_cvst_sentence(state))

    if state.flow == BrainFlow.HEMORRHAGE:
        lines.extend(_hemorrhage_lines(state))
    elif state.flow == BrainFlow.TRAUMA:
        lines.extend(_trauma_lines(state))
    else:
        lines.extend(_mass_lines(state))

    if state.output.include_probability_language:
        sentence = probability_sentence(ddx, state.output.style)
        if sentence:
            lines.append(sentence)
    if state.output.include_recommendations_language:
        sentence = recommendation_sentence(recs, settings.narrative_recommendation_limit(state.output.detailed))
        if sentence:
            lines.append(sentence)

    incidental = state.incidental.strip()
    if incidental:
        lines.append(ensure_terminator(f"Additional / incidental: {incidental}"))
    return "\n".join(lines)


def derive(state: BrainState, settings: Settings | None = None) -> DerivedResult:
    """Project one brain snapshot to its protocol, DDX, recommendations and report."""
    settings = settings or default_settings
    ddx = rules.differentials(state, settings)
    recs = rules.recommendations(state, settings)
    result = DerivedResult(
        module=MODULE_ID,
        protocol_summary=rules.protocol_summary(state),
        context_tags=rules.context_tags(state),
        differentials=ddx,
        recommendations=recs,
        narrative=narrative(state, ddx, recs, settings),
        patterns=rules.pattern_hints(state),
    )
    logger.debug("Derived brain result: %d DDX, %d recommendations", len(ddx), len(recs))
    return result
