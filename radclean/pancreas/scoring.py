"""Feature-strength weights and pattern support scores for the pancreas form."""

from radclean.config import Settings, settings as default_settings
from radclean.engine.common import format_number, parse_number
from radclean.models import Feature, PatternHint
from radclean.pancreas.state import (
    APSeverity,
    DuctSign,
    Enhancement,
    MassType,
    PancreasState,
    VesselContact,
)

MAIN_DUCT_DILATED_MM = 5.0
MAIN_DUCT_HIGH_RISK_MM = 10.0


def main_duct_mm(state: PancreasState) -> float | None:
    return parse_number(state.main_duct_mm)


def main_duct_dilated(state: PancreasState) -> bool:
    md = main_duct_mm(state)
    return md is not None and md >= MAIN_DUCT_DILATED_MM


def main_duct_high_risk(state: PancreasState) -> bool:
    md = main_duct_mm(state)
    return md is not None and md >= MAIN_DUCT_HIGH_RISK_MM


def main_duct_text(state: PancreasState) -> str:
    md = main_duct_mm(state)
    return format_number(md) if md is not None else ""


def features(state: PancreasState) -> list[Feature]:
    """Weighted findings currently present, in form order."""
    feats: list[Feature] = []

    if state.acute_pancreatitis:
        feats.append(Feature(key="AP", label="Acute pancreatitis findings", weight=2))
        if state.peripancreatic_stranding:
            feats.append(Feature(key="STR", label="Peripancreatic inflammation/stranding", weight=1))
        if state.fluid_collection:
            feats.append(Feature(key="COLL", label="Fluid/collection", weight=1))
        if state.ap_severity == APSeverity.SEVERE:
            feats.append(Feature(key="SEV", label="Severe clinical/radiological course", weight=2))
        if state.gas_in_collection:
            feats.append(Feature(key="GAS", label="Gas in collection", weight=3))

    if state.biliary_suspected:
        feats.append(Feature(key="BIL", label="Suspected biliary etiology", weight=1))

    if state.mass_type == MassType.SOLID:
        feats.append(Feature(key="SOL", label="Solid mass", weight=2))
        if state.enhancement == Enhancement.HYPOENHANCING:
            feats.append(Feature(key="HYPO", label="Hypoenhancing pattern", weight=2))
        if state.enhancement == Enhancement.ARTERIAL_HYPER:
            feats.append(Feature(key="HYPER", label="Arterial hypervascular pattern", weight=2))
        if state.duct_sign == DuctSign.DOUBLE_DUCT:
            feats.append(Feature(key="DD", label="Double-duct sign", weight=3))
        if state.duct_sign == DuctSign.CUTOFF:
            feats.append(Feature(key="CUT", label="Ductal cutoff", weight=2))
        if state.upstream_atrophy:
            feats.append(Feature(key="ATR", label="Upstream atrophy", weight=2))
        if state.restricted_diffusion:
            feats.append(Feature(key="DWI", label="Diffusion restriction", weight=2))
        if state.vessel_contact != VesselContact.NONE:
            feats.append(Feature(key="VASC", label=f"Vascular contact ({state.vessel_contact.value})", weight=2))
        if state.known_malignancy:
            feats.append(Feature(key="MAL", label="Known malignancy", weight=1))
        if state.immunosuppression:
            feats.append(Feature(key="IMM", label="Immunosuppression", weight=1))
        if state.t2_iso_hypo:
            feats.append(Feature(key="T2", label="T2 iso/hypointense tendency", weight=1))

    if state.mass_type == MassType.CYSTIC:
        feats.append(Feature(key="CYS", label="Cystic lesion", weight=1))
        if state.cyst_duct_communication:
            feats.append(Feature(key="COMM", label="Ductal communication", weight=2))
        if main_duct_dilated(state):
            feats.append(
                Feature(
                    key="MD",
                    label=f"Main duct dilatation ({main_duct_text(state)} mm)",
                    weight=3 if main_duct_high_risk(state) else 2,
                )
            )
        if state.cyst_mural_nodule:
            feats.append(Feature(key="MN", label="Mural nodule", weight=3))
        if state.microcystic_honeycomb:
            feats.append(Feature(key="HCOMB", label="Microcystic/honeycomb", weight=2))
        if state.acute_pancreatitis:
            feats.append(Feature(key="APCYS", label="Pancreatitis background (favors pseudocyst)", weight=1))

    if state.aip_capsule_rim:
        feats.append(Feature(key="AIPRIM", label="Capsule-like rim", weight=2))
    if state.aip_diffuse_sausage:
        feats.append(Feature(key="AIPSAU", label="Diffuse sausage-like appearance", weight=2))
    if state.enhancement == Enhancement.DELAYED_FIBROTIC:
        feats.append(Feature(key="DELAY", label="Delayed/fibrotic enhancement pattern", weight=2))

    if state.fever_sepsis:
        feats.append(Feature(key="SEPS", label="Fever/sepsis", weight=2))

    return feats


def pattern_hints(state: PancreasState, settings: Settings | None = None) -> list[PatternHint]:
    """High-yield pattern boxes, strongest first."""
    settings = settings or default_settings
    hints: list[PatternHint] = []

    score = (
        (3 if state.enhancement == Enhancement.HYPOENHANCING else 0)
        + (3 if state.duct_sign == DuctSign.DOUBLE_DUCT else 0)
        + (2 if state.duct_sign == DuctSign.CUTOFF else 0)
        + (2 if state.upstream_atrophy else 0)
        + (2 if state.vessel_contact != VesselContact.NONE else 0)
    )
    hints.append(
        PatternHint(
            title="PDAC (adenocarcinoma) pattern",
            high=score >= 6,
            score=score,
            bullets=[
                "Hypoenhancing mass",
                "Ductal cutoff / double duct",
                "Upstream atrophy",
                "Vascular contact (abutment/encasement)",
            ],
        )
    )

    score = (4 if state.enhancement == Enhancement.ARTERIAL_HYPER else 0) + (1 if state.restricted_diffusion else 0)
    hints.append(
        PatternHint(
            title="NET pattern",
            high=score >= 4,
            score=score,
            bullets=["Arterial phase hypervascular", "EUS adds most for small lesions", "DWI/ADC may help"],
        )
    )

    if main_duct_high_risk(state):
        duct_points = 4
    elif main_duct_dilated(state):
        duct_points = 2
    else:
        duct_points = 0
    score = (3 if state.cyst_duct_communication else 0) + (4 if state.cyst_mural_nodule else 0) + duct_points
    hints.append(
        PatternHint(
            title="IPMN risk pattern",
            high=score >= 7,
            score=score,
            bullets=["Ductal communication", "Main duct dilatation", "Mural nodule (high risk)", "Mapping with MRCP"],
        )
    )

    score = 4 if state.microcystic_honeycomb else 0
    hints.append(
        PatternHint(
            title="Serous cystadenoma pattern",
            high=score >= 4,
            score=score,
            bullets=["Microcystic/honeycomb", "Usually benign behavior", "Septations may be clearer on MR"],
        )
    )

    score = (5 if state.gas_in_collection else 0) + (3 if state.fever_sepsis else 0)
    hints.append(
        PatternHint(
            title="Infected necrosis/abscess pattern",
            high=score >= 5,
            score=score,
            bullets=["Gas in collection", "Fever/sepsis", "CECT evaluation + clinical decision on drainage"],
        )
    )

    score = (
        (3 if state.aip_diffuse_sausage else 0)
        + (3 if state.aip_capsule_rim else 0)
        + (3 if state.enhancement == Enhancement.DELAYED_FIBROTIC else 0)
    )
    hints.append(
        PatternHint(
            title="Autoimmune pancreatitis (AIP) pattern",
            high=score >= 6,
            score=score,
            bullets=["Diffuse sausage-like", "Capsule-like rim", "Delayed/fibrotic enhancement", "IgG4 correlation"],
        )
    )

    hints.sort(key=lambda h: -h.score)
    return hints[: settings.pattern_hint_limit]
