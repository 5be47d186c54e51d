"""Pancreas DDX and protocol assistant.

Differentials carry a numeric score used to order entries within one
likelihood level. Recommendations carry an urgency and, where the form can
do it for the user, a patch of field paths to apply.
"""

import logging

from radclean.config import Settings, settings as default_settings
from radclean.engine.common import measurement
from radclean.engine.ranking import dedupe_recommendations, finalize_differentials, sort_recommendations
from radclean.models import DdxItem, Likelihood, Recommendation, Urgency
from radclean.pancreas import scoring
from radclean.pancreas.state import (
    APSeverity,
    APTiming,
    Complication,
    CystSubtype,
    DuctSign,
    Enhancement,
    MassType,
    MRMode,
    PancreasCTPreset,
    PancreasState,
    SolidSubtype,
    VesselContact,
)

logger = logging.getLogger(__name__)

INFECTED_NECROSIS = "Infected necrosis / abscess"

CONTEXT_TAGS = (
    ("fever_sepsis", "Fever/sepsis"),
    ("immunosuppression", "Immunosuppression"),
    ("known_malignancy", "Known malignancy"),
    ("trauma", "Trauma"),
    ("alcohol", "Alcohol"),
    ("hypertriglyceridemia", "Hypertriglyceridemia"),
    ("biliary_suspected", "Suspected biliary etiology"),
)

# name, likelihood, rationale, score
COMPLICATION_DDX = {
    Complication.SUSPECTED_NECROSIS: (
        "Necrotizing pancreatitis (suspected)",
        Likelihood.MEDIUM,
        "Severe course / suspected non-enhancing area",
        6,
    ),
    Complication.APFC: (
        "Acute peripancreatic fluid collection (APFC)",
        Likelihood.MEDIUM,
        "Early homogeneous fluid collection",
        5,
    ),
    Complication.ANC: (
        "Acute necrotic collection (ANC)",
        Likelihood.MEDIUM,
        "Collection containing necrotic debris",
        6,
    ),
    Complication.PSEUDOCYST: ("Pseudocyst", Likelihood.MEDIUM, ">4 weeks / encapsulated collection", 5),
    Complication.WON: ("Walled-off necrosis (WON)", Likelihood.MEDIUM, "Organized necrotic collection", 6),
    Complication.HEMORRHAGE: (
        "Pseudoaneurysm / suspected active bleeding",
        Likelihood.MEDIUM,
        "Suspected hemorrhagic/vascular complication",
        7,
    ),
    Complication.VENOUS_THROMBOSIS: (
        "Splenic/portal/SMV thrombosis",
        Likelihood.MEDIUM,
        "Pancreatitis-related venous thrombosis can occur",
        6,
    ),
    Complication.BILIARY_OBSTRUCTION: (
        "Biliary obstruction / suspected cholangitis",
        Likelihood.MEDIUM,
        "Correlate obstruction findings with the clinical picture",
        6,
    ),
    Complication.BOWEL_ISCHEMIA: (
        "Bowel ischemia (suspected complication)",
        Likelihood.LOW,
        "With severe inflammation/vascular involvement",
        4,
    ),
}

CECT_PATCH = {"ct_preset": PancreasCTPreset.CECT_PANCREAS.value}


def context_tags(state: PancreasState) -> list[str]:
    return [label for field, label in CONTEXT_TAGS if getattr(state, field)]


def protocol_summary(state: PancreasState) -> str:
    active = state.modalities.active()
    check = {True: "✓", False: "—"}
    parts = [
        f"Modality: {'+'.join(active) if active else '—'}",
        f"CT: {state.ct_preset.value}",
        f"MR: {state.mr_mode.value}",
        f"DWI:{check[state.mr_dwi]} SWI:{check[state.mr_swi]} MRCP:{check[state.mr_mrcp]} Perf:{check[state.mr_perfusion]}",
    ]
    if state.acute_pancreatitis:
        parts.append(f"AP: {state.ap_severity.value} • {state.ap_timing.value}")
    if state.mass_type != MassType.NONE:
        mass = [state.mass_type.value, state.mass_location.value]
        size = measurement(state.mass_size_mm, "mm")
        if size:
            mass.append(size)
        parts.append(f"Mass: {' • '.join(mass)}")
    if state.complication != Complication.NONE:
        parts.append(f"Complication: {state.complication.value}")
    return " • ".join(parts)


def _acute_pancreatitis(state: PancreasState) -> list[DdxItem]:
    severe = state.ap_severity == APSeverity.SEVERE
    score = 6 + (2 if state.peripancreatic_stranding else 0) + (1 if state.fluid_collection else 0) + (2 if severe else 0)
    why: list[str] = []
    if state.peripancreatic_stranding:
        why.append("Peripancreatic inflammation/stranding")
    if state.fluid_collection:
        why.append("Accompanying fluid/collection")
    if severe:
        why.append("Severe course / likely complications")
    items = [
        DdxItem(
            name="Acute pancreatitis",
            likelihood=Likelihood.HIGH if score >= 8 else Likelihood.MEDIUM,
            rationale=why,
            score=score,
        )
    ]
    if state.biliary_suspected:
        items.append(
            DdxItem(
                name="Biliary etiology (gallstone pancreatitis)",
                likelihood=Likelihood.MEDIUM if state.modalities.usg or state.modalities.mr else Likelihood.LOW,
                rationale=["Suspected biliary cause", "Correlate CBD stones/dilatation on USG/MRCP"],
                score=7,
            )
        )
    if state.alcohol:
        items.append(
            DdxItem(name="Alcohol-related pancreatitis", likelihood=Likelihood.MEDIUM, rationale=["Alcohol history"], score=4)
        )
    if state.hypertriglyceridemia:
        items.append(
            DdxItem(
                name="Hypertriglyceridemia-related pancreatitis",
                likelihood=Likelihood.MEDIUM,
                rationale=["Correlate with triglyceride history/labs"],
                score=4,
            )
        )
    if state.trauma:
        items.append(
            DdxItem(name="Trauma-related pancreatitis", likelihood=Likelihood.MEDIUM, rationale=["Trauma history"], score=4)
        )
    return items


def _complication(state: PancreasState) -> list[DdxItem]:
    if state.complication == Complication.NONE:
        return []
    if state.complication == Complication.INFECTED_NECROSIS:
        infected = state.gas_in_collection or state.fever_sepsis
        return [
            DdxItem(
                name=INFECTED_NECROSIS,
                likelihood=Likelihood.HIGH if infected else Likelihood.MEDIUM,
                rationale=["Gas in collection and/or sepsis"],
                score=8,
            )
        ]
    name, likelihood, why, score = COMPLICATION_DDX[state.complication]
    return [DdxItem(name=name, likelihood=likelihood, rationale=[why], score=score)]


def _infection(state: PancreasState) -> list[DdxItem]:
    if not (state.fever_sepsis or state.gas_in_collection):
        return []
    why: list[str] = []
    if state.gas_in_collection:
        why.append("Gas in collection")
    if state.fever_sepsis:
        why.append("Fever/sepsis")
    if state.immunosuppression:
        why.append("Immunosuppression")
    return [
        DdxItem(
            name=INFECTED_NECROSIS,
            likelihood=Likelihood.HIGH if state.gas_in_collection else Likelihood.MEDIUM,
            rationale=why,
            score=7 + (2 if state.gas_in_collection else 0),
        )
    ]


def _cystic(state: PancreasState) -> list[DdxItem]:
    items = [
        DdxItem(
            name="Cystic pancreatic lesion",
            likelihood=Likelihood.MEDIUM,
            rationale=["Ductal communication, mural nodule and duct caliber narrow the differential"],
            score=4,
        )
    ]

    dilated = scoring.main_duct_dilated(state)
    ipmn = (4 if state.cyst_duct_communication else 0) + (3 if dilated else 0) + (4 if state.cyst_mural_nodule else 0)
    if state.cyst_subtype == CystSubtype.IPMN or state.cyst_duct_communication or ipmn >= 6:
        why: list[str] = []
        if state.cyst_duct_communication:
            why.append("Ductal communication")
        if dilated:
            why.append(f"Main duct dilatation ({scoring.main_duct_text(state)} mm)")
        if state.cyst_mural_nodule:
            why.append("Mural nodule")
        high = ipmn >= 8 or scoring.main_duct_high_risk(state) or state.cyst_mural_nodule
        items.append(
            DdxItem(name="IPMN", likelihood=Likelihood.HIGH if high else Likelihood.MEDIUM, rationale=why, score=5 + ipmn)
        )

    if state.cyst_subtype == CystSubtype.SEROUS or state.microcystic_honeycomb:
        items.append(
            DdxItem(
                name="Serous cystadenoma",
                likelihood=Likelihood.HIGH if state.microcystic_honeycomb else Likelihood.MEDIUM,
                rationale=[
                    "Microcystic/honeycomb pattern"
                    if state.microcystic_honeycomb
                    else "May fit a benign microcystic pattern"
                ],
                score=7,
            )
        )

    if state.cyst_subtype == CystSubtype.MUCINOUS:
        items.append(
            DdxItem(
                name="Mucinous cystic neoplasm",
                likelihood=Likelihood.MEDIUM,
                rationale=["Macrocystic lesion without ductal communication"],
                score=6,
            )
        )

    if state.cyst_subtype == CystSubtype.SPN:
        items.append(
            DdxItem(
                name="Solid pseudopapillary neoplasm (SPN)",
                likelihood=Likelihood.MEDIUM,
                rationale=["Solid-cystic components with encapsulated appearance"],
                score=6,
            )
        )

    if state.cyst_subtype == CystSubtype.PSEUDOCYST or state.acute_pancreatitis:
        items.append(
            DdxItem(
                name="Pseudocyst",
                likelihood=Likelihood.MEDIUM if state.acute_pancreatitis else Likelihood.LOW,
                rationale=["May relate to a pancreatitis background"],
                score=6 if state.acute_pancreatitis else 3,
            )
        )
    return items


def _solid(state: PancreasState) -> list[DdxItem]:
    hypo = state.enhancement == Enhancement.HYPOENHANCING
    hyper = state.enhancement == Enhancement.ARTERIAL_HYPER
    delayed = state.enhancement == Enhancement.DELAYED_FIBROTIC
    double_duct = state.duct_sign == DuctSign.DOUBLE_DUCT
    cutoff = state.duct_sign == DuctSign.CUTOFF
    vessel = state.vessel_contact != VesselContact.NONE
    items: list[DdxItem] = []

    pdac = (4 if hypo else 0) + (5 if double_duct else 0) + (3 if cutoff else 0)
    pdac += (3 if state.upstream_atrophy else 0) + (3 if vessel else 0)
    why: list[str] = []
    if hypo:
        why.append("Hypovascular/hypoenhancing pattern")
    if double_duct:
        why.append("Double-duct sign")
    if cutoff:
        why.append("Ductal cutoff")
    if state.upstream_atrophy:
        why.append("Upstream atrophy")
    if vessel:
        why.append(f"Vascular contact: {state.vessel_contact.value}")
    size = measurement(state.mass_size_mm, "mm")
    if size:
        why.append(f"Size: {size}")
    items.append(
        DdxItem(
            name="Pancreatic ductal adenocarcinoma (PDAC)",
            likelihood=Likelihood.HIGH if pdac >= 10 or state.solid_subtype == SolidSubtype.PDAC else Likelihood.MEDIUM,
            rationale=why,
            score=5 + pdac,
        )
    )

    net = (5 if hyper else 0) + (2 if state.restricted_diffusion else 0)
    why = []
    if hyper:
        why.append("Arterial phase hypervascular pattern")
    if state.restricted_diffusion:
        why.append("Restriction may accompany")
    items.append(
        DdxItem(
            name="Neuroendocrine tumor (NET)",
            likelihood=Likelihood.HIGH if net >= 6 or state.solid_subtype == SolidSubtype.NET else Likelihood.MEDIUM,
            rationale=why,
            score=4 + net,
        )
    )

    aip = (4 if state.aip_diffuse_sausage else 0) + (4 if state.aip_capsule_rim else 0) + (3 if delayed else 0)
    if aip >= 5 or state.solid_subtype == SolidSubtype.AIP:
        why = []
        if state.aip_diffuse_sausage:
            why.append("Diffuse sausage-like appearance")
        if state.aip_capsule_rim:
            why.append("Capsule-like rim")
        if delayed:
            why.append("Delayed/fibrotic enhancement")
        items.append(
            DdxItem(
                name="Autoimmune pancreatitis (AIP)",
                likelihood=Likelihood.HIGH if aip >= 8 else Likelihood.MEDIUM,
                rationale=why,
                score=4 + aip,
            )
        )

    items.append(
        DdxItem(
            name="Focal pancreatitis / inflammatory mass",
            likelihood=Likelihood.MEDIUM if state.acute_pancreatitis else Likelihood.LOW,
            rationale=[
                "Pancreatitis background" if state.acute_pancreatitis else "Assess with clinical/lab correlation"
            ],
            score=5 if state.acute_pancreatitis else 2,
        )
    )

    lymphoma = (4 if state.restricted_diffusion else 0) + (2 if state.t2_iso_hypo else 0)
    lymphoma += 2 if state.immunosuppression else 0
    if lymphoma >= 5 or state.solid_subtype == SolidSubtype.LYMPHOMA:
        why = []
        if state.restricted_diffusion:
            why.append("Marked restriction")
        if state.t2_iso_hypo:
            why.append("T2 iso/hypointense tendency")
        if state.immunosuppression:
            why.append("Immunosuppression")
        items.append(
            DdxItem(
                name="Lymphoma",
                likelihood=Likelihood.MEDIUM if lymphoma >= 7 else Likelihood.LOW,
                rationale=why,
                score=3 + lymphoma,
            )
        )

    if state.known_malignancy or state.solid_subtype == SolidSubtype.METASTASIS:
        items.append(
            DdxItem(
                name="Metastasis",
                likelihood=Likelihood.MEDIUM if state.known_malignancy else Likelihood.LOW,
                rationale=["Known malignancy history"] if state.known_malignancy else [],
                score=6 if state.known_malignancy else 3,
            )
        )
    return items


def differentials(state: PancreasState, settings: Settings | None = None) -> list[DdxItem]:
    settings = settings or default_settings
    items: list[DdxItem] = []
    if state.acute_pancreatitis:
        items.extend(_acute_pancreatitis(state))
    items.extend(_complication(state))
    items.extend(_infection(state))
    if state.mass_type == MassType.CYSTIC:
        items.extend(_cystic(state))
    elif state.mass_type == MassType.SOLID:
        items.extend(_solid(state))
    result = finalize_differentials(items, settings.pancreas_ddx_limit(state.output.detailed))
    logger.debug("Pancreas DDX: %d candidates, %d kept", len(items), len(result))
    return result


def _ap_recommendations(state: PancreasState) -> list[Recommendation]:
    recs: list[Recommendation] = []
    mods = state.modalities
    if mods.ct:
        if state.ap_severity == APSeverity.MILD:
            recs.append(
                Recommendation(
                    text="Early CT may not be routine in mild acute pancreatitis; prefer CECT for clinical worsening or suspected complications",
                    urgency=Urgency.ROUTINE,
                    details=["Indication depends on clinical severity", "Pancreas-protocol CECT for suspected complications"],
                )
            )
        else:
            details: list[str] = []
            if state.ap_timing == APTiming.EARLY:
                details.append("Necrosis assessment may be limited early; time by clinical need")
            elif state.ap_timing == APTiming.LATE:
                details.append("More sensitive for necrosis/complications after 48-72 h")
            details.append("Portal venous phase is the baseline; add arterial phase by complication")
            recs.append(
                Recommendation(
                    text="CT: pancreas-protocol CECT",
                    urgency=Urgency.PRIORITY if state.ap_severity == APSeverity.SEVERE else Urgency.ROUTINE,
                    details=details,
                    patch=dict(CECT_PATCH),
                )
            )
    if state.biliary_suspected:
        if mods.usg:
            recs.append(
                Recommendation(
                    text="USG: assess gallbladder/CBD stones and dilatation",
                    urgency=Urgency.PRIORITY,
                    details=["First step for biliary etiology"],
                )
            )
        if mods.mr:
            recs.append(
                Recommendation(
                    text="MRCP (suspected CBD stone/stricture)",
                    urgency=Urgency.PRIORITY,
                    details=["ERCP indication decided clinically"],
                    patch={"mr_mrcp": True},
                )
            )
    return recs


def _mass_recommendations(state: PancreasState) -> list[Recommendation]:
    recs: list[Recommendation] = []
    mods = state.modalities
    if mods.ct and state.ct_preset == PancreasCTPreset.NCCT:
        recs.append(
            Recommendation(
                text="CT: NCCT selected; pancreas-protocol CECT for suspected mass/infection",
                urgency=Urgency.PRIORITY,
                details=["Mass characterization and resectability assessment"],
                patch=dict(CECT_PATCH),
            )
        )
    if mods.mr:
        recs.append(
            Recommendation(
                text="MR: DWI/SWI required, perfusion in selected cases",
                urgency=Urgency.PRIORITY,
                details=[
                    "DWI/ADC helps separate tumor from inflammation",
                    "SWI for hemorrhagic components and vessels",
                    "Perfusion can help characterize solid masses",
                ],
                patch={"mr_dwi": True, "mr_swi": True, "mr_perfusion": True},
            )
        )
        if state.mr_mode == MRMode.NON_CONTRAST:
            recs.append(
                Recommendation(
                    text="MR: dynamic contrast (if possible)",
                    urgency=Urgency.PRIORITY,
                    details=["Key to separating PDAC (hypoenhancing) from NET (hypervascular) patterns"],
                    patch={"mr_mode": MRMode.DYNAMIC_CONTRAST.value},
                )
            )
    if state.mass_type == MassType.CYSTIC:
        if mods.mr and not state.mr_mrcp:
            recs.append(
                Recommendation(
                    text="MRCP for cystic lesion",
                    urgency=Urgency.PRIORITY,
                    details=["Ductal communication / IPMN risk stratification"],
                    patch={"mr_mrcp": True},
                )
            )
        if state.cyst_mural_nodule or scoring.main_duct_high_risk(state):
            recs.append(
                Recommendation(
                    text="High-risk cystic feature: EUS ± sampling per clinical decision",
                    urgency=Urgency.PRIORITY,
                    details=["Mural nodule / marked main duct dilatation"],
                )
            )
    if state.mass_type == MassType.SOLID:
        recs.append(
            Recommendation(
                text="Solid mass: EUS ± biopsy per clinical decision",
                urgency=Urgency.PRIORITY,
                details=["Histopathological confirmation / superior for small lesions"],
            )
        )
    return recs


def recommendations(state: PancreasState) -> list[Recommendation]:
    mods = state.modalities
    recs: list[Recommendation] = []

    if state.acute_pancreatitis:
        recs.extend(_ap_recommendations(state))

    infection = state.fever_sepsis or state.gas_in_collection or state.complication == Complication.INFECTED_NECROSIS
    if infection:
        if mods.ct:
            recs.append(
                Recommendation(
                    text="Suspected infected necrosis/abscess: contrast-enhanced CT (pancreas protocol CECT) and clinical evaluation for drainage/sampling",
                    urgency=Urgency.EMERGENT,
                    details=["Gas in collection / sepsis"],
                    patch=dict(CECT_PATCH),
                )
            )
        if mods.mr:
            recs.append(
                Recommendation(
                    text="MR: DWI + SWI + MRCP (core)",
                    urgency=Urgency.PRIORITY,
                    details=["Infection vs inflammation and complications"],
                    patch={"mr_dwi": True, "mr_swi": True, "mr_mrcp": True, "mr_perfusion": False},
                )
            )

    if state.complication == Complication.HEMORRHAGE and mods.ct:
        recs.append(
            Recommendation(
                text="CT: CTA (arterial phase) for pseudoaneurysm/active bleeding",
                urgency=Urgency.EMERGENT,
                details=["For IR/embolization planning"],
                patch={"ct_preset": PancreasCTPreset.CTA_HEMORRHAGE.value},
            )
        )

    if state.complication == Complication.VENOUS_THROMBOSIS:
        recs.append(
            Recommendation(
                text="Portal venous phase to assess splenic/portal/SMV thrombosis",
                urgency=Urgency.PRIORITY,
                details=["Extent of thrombosis and complications"],
            )
        )

    if state.mass_type != MassType.NONE:
        recs.extend(_mass_recommendations(state))

    if (state.aip_diffuse_sausage or state.aip_capsule_rim) and state.enhancement == Enhancement.DELAYED_FIBROTIC:
        recs.append(
            Recommendation(
                text="Pattern favors AIP: IgG4/autoimmune correlation",
                urgency=Urgency.ROUTINE,
                details=["Clinical findings + serology + other organ involvement"],
            )
        )

    result = sort_recommendations(dedupe_recommendations(recs))
    logger.debug("Pancreas recommendations: %d candidates, %d kept", len(recs), len(result))
    return result
