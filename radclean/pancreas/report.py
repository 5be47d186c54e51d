"""Pancreas report sentence and derive entry point."""

import logging

from radclean.config import Settings, settings as default_settings
from radclean.engine.common import collapse_whitespace, ensure_terminator, measurement
from radclean.engine.language import probability_sentence, recommendation_sentence
from radclean.models import DdxItem, DerivedResult, Recommendation
from radclean.pancreas import rules, scoring
from radclean.pancreas.state import (
    Complication,
    DuctSign,
    Enhancement,
    Location,
    MassType,
    PancreasState,
    VesselContact,
)

logger = logging.getLogger(__name__)

MODULE_ID = "pancreas"

NO_FINDINGS = "No significant pancreatic finding was specified for the selected parameters."

ENHANCEMENT_TEXT = {
    Enhancement.HYPOENHANCING: "hypoenhancing pattern",
    Enhancement.ARTERIAL_HYPER: "hypervascular pattern in the arterial phase",
    Enhancement.DELAYED_FIBROTIC: "delayed/fibrotic pattern",
}


def _ap_sentence(state: PancreasState) -> str:
    parts = ["Findings consistent with acute pancreatitis are seen"]
    if state.peripancreatic_stranding:
        parts.append("with peripancreatic inflammation/stranding")
    if state.fluid_collection:
        parts.append("with accompanying fluid/collection")
    if state.gas_in_collection:
        parts.append("gas within the collections may favor an infected collection")
    return ", ".join(parts) + "."


def _where(state: PancreasState) -> list[str]:
    bits: list[str] = []
    if state.mass_location != Location.INDETERMINATE:
        bits.append(f"(located in the {state.mass_location.value.lower()})")
    size = measurement(state.mass_size_mm, "mm")
    if size:
        bits.append(size)
    return bits


def _solid_sentence(state: PancreasState) -> str:
    parts = ["A solid pancreatic mass is seen", *_where(state)]
    if state.enhancement != Enhancement.UNKNOWN:
        parts.append(ENHANCEMENT_TEXT[state.enhancement])
    if state.duct_sign != DuctSign.NONE:
        parts.append(f"ductal finding: {state.duct_sign.value.lower()}")
    if state.vessel_contact != VesselContact.NONE:
        parts.append(f"vascular contact: {state.vessel_contact.value.lower()}")
    return " ".join(parts) + "."


def _cystic_sentence(state: PancreasState) -> str:
    parts = ["A cystic pancreatic lesion is seen", *_where(state)]
    if state.cyst_duct_communication:
        parts.append("favoring ductal communication")
    if state.cyst_mural_nodule:
        parts.append("with a mural nodule")
    md = scoring.main_duct_mm(state)
    if md is not None and md > 0:
        parts.append(f"main duct: {scoring.main_duct_text(state)} mm")
    return " ".join(parts) + "."


def narrative(
    state: PancreasState,
    ddx: list[DdxItem],
    recs: list[Recommendation],
    settings: Settings | None = None,
) -> str:
    settings = settings or default_settings
    bits = [f"Protocol: {rules.protocol_summary(state)}."]
    tags = rules.context_tags(state)
    if tags:
        bits.append(f"Clinical context: {', '.join(tags)}.")

    findings: list[str] = []
    if state.acute_pancreatitis:
        findings.append(_ap_sentence(state))
    if state.mass_type == MassType.SOLID:
        findings.append(_solid_sentence(state))
    elif state.mass_type == MassType.CYSTIC:
        findings.append(_cystic_sentence(state))
    if state.complication != Complication.NONE:
        findings.append(f"Regarding complications: {state.complication.value.lower()} may be considered.")
    bits.extend(findings or [NO_FINDINGS])

    incidental = state.incidental.strip()
    if incidental:
        bits.append(ensure_terminator(f"Additional / incidental: {incidental}"))

    if state.output.include_probability_language and ddx:
        bits.append(probability_sentence(ddx, state.output.style))
    if state.output.include_recommendations_language and recs:
        limit = settings.narrative_recommendation_limit(state.output.detailed)
        bits.append(recommendation_sentence(recs, limit))

    return ensure_terminator(collapse_whitespace(" ".join(b for b in bits if b)))


def derive(state: PancreasState, settings: Settings | None = None) -> DerivedResult:
    """Project one pancreas snapshot to its protocol, DDX, recommendations and report."""
    settings = settings or default_settings
    ddx = rules.differentials(state, settings)
    recs = rules.recommendations(state)
    result = DerivedResult(
        module=MODULE_ID,
        protocol_summary=rules.protocol_summary(state),
        context_tags=rules.context_tags(state),
        differentials=ddx,
        recommendations=recs,
        narrative=narrative(state, ddx, recs, settings),
        features=scoring.features(state),
        patterns=scoring.pattern_hints(state, settings),
    )
    logger.debug("Derived pancreas result: %d DDX, %d recommendations", len(ddx), len(recs))
    return result
