"""Tests for the brain rule table and narrative."""


def _derive(store, settings=None):
    from radclean.brain.report import derive

    return derive(store.state, settings)


def _names(result):
    return [d.name for d in result.differentials]


def test_default_state_derivation(brain_store):
    result = _derive(brain_store)

    assert result.module == "brain"
    assert result.protocol_summary == "CT: Non-contrast CT"
    assert result.context_tags == ["Trauma history"]
    assert _names(result) == ["Intraparenchymal hematoma"]
    assert result.patterns == []

    lines = result.narrative.split("\n")
    assert lines[0] == "Protocol: CT: Non-contrast CT."
    assert lines[1] == "Clinical context: Trauma history."
    assert lines[2] == "There is a right temporal intraparenchymal hematoma."
    assert lines[3] == "No definite new ischemic infarct is seen (within the limits of the current protocol)."


def test_hemorrhage_scenario_with_measurements(brain_store):
    brain_store.update(
        {
            "max_diameter_cm": "3,2",
            "midline_shift_mm": "6",
            "abc_a_cm": "4",
            "abc_b_cm": "3",
            "abc_c_cm": "5",
            "accompanying_ivh": True,
        }
    )
    result = _derive(brain_store)

    assert (
        "There is a right temporal intraparenchymal hematoma "
        "(max diameter: 3.2 cm, ABC/2 volume: 30.0 mL, midline shift: 6 mm, accompanying IVH)."
    ) in result.narrative
    texts = [r.text for r in result.recommendations]
    assert any("Neurosurgical consultation" in t for t in texts)
    assert any("large hematoma" in t for t in texts)
    ich = result.differentials[0]
    assert ich.name == "Intraparenchymal hematoma"
    assert "ABC/2 volume ≥ 30 mL" in ich.rationale


def test_measurement_zero_is_shown_and_garbage_is_not(brain_store):
    brain_store.update({"midline_shift_mm": "0", "max_diameter_cm": "abc"})
    narrative = _derive(brain_store).narrative
    assert "midline shift: 0 mm" in narrative
    assert "max diameter" not in narrative


def test_measurements_keep_every_typed_digit(brain_store):
    brain_store.update({"max_diameter_cm": "3.2345678", "midline_shift_mm": "1234567.5"})
    lines = _derive(brain_store).narrative.split("\n")
    assert lines[2] == (
        "There is a right temporal intraparenchymal hematoma "
        "(max diameter: 3.2345678 cm, midline shift: 1234567.5 mm)."
    )


def test_python_only_number_syntax_is_not_a_measurement(brain_store):
    brain_store.update({"max_diameter_cm": "1_0", "midline_shift_mm": "1e3"})
    narrative = _derive(brain_store).narrative
    assert "max diameter" not in narrative
    assert "midline shift" not in narrative


def test_extra_axial_subdural(brain_store):
    brain_store.update(
        {
            "hemorrhage_compartment": "Extra-axial",
            "extra_axial_subtype": "SDH",
            "side": "L",
            "thickness_mm": "11",
        }
    )
    result = _derive(brain_store)
    assert "Subdural hematoma (Convexity, left) (max thickness: 11 mm) is seen." in result.narrative
    assert _names(result)[0] == "Subdural hematoma"
    assert any("Neurosurgical consultation" in r.text for r in result.recommendations)


def test_non_traumatic_sah(brain_store):
    brain_store.update(
        {
            "trauma_history": False,
            "hemorrhage_compartment": "Extra-axial",
            "extra_axial_subtype": "SAH",
        }
    )
    result = _derive(brain_store)
    assert result.differentials[0].name == "Subarachnoid hemorrhage"
    assert result.differentials[0].likelihood.value == "High"
    assert "Possible aneurysmal SAH" not in _names(result)
    assert any("CTA for aneurysm" in r.text for r in result.recommendations)

    brain_store.set("ct_preset", "CTA")
    result = _derive(brain_store)
    assert "Possible aneurysmal SAH" in _names(result)
    assert not any("CTA for aneurysm" in r.text for r in result.recommendations)


def test_traumatic_sah_is_medium(brain_store):
    brain_store.update({"hemorrhage_compartment": "Intra-axial", "intra_axial_subtype": "SAH"})
    result = _derive(brain_store)
    assert result.differentials[0].likelihood.value == "Medium"


def test_spot_sign_on_contrast_ct(brain_store):
    brain_store.set("ct_preset", "CECT")
    result = _derive(brain_store)
    assert _names(result) == ["Intraparenchymal hematoma", "Hematoma expansion risk (spot sign)"]


def test_cvst_on_ctv(brain_store):
    brain_store.update({"cvst_suspected": True, "ct_preset": "CTV", "cvst_laterality": "R", "cvst_occlusion": "Complete"})
    brain_store.toggle("venous_sinuses", "Transverse sinus")
    brain_store.set("hemorrhagic_venous_infarct", True)
    result = _derive(brain_store)

    cvst = result.differentials[0]
    assert cvst.name == "Dural venous sinus thrombosis (CVST)"
    assert cvst.likelihood.value == "High"
    assert (
        "On CTV, findings are consistent with complete filling defect/thrombosis at the right SSS, "
        "transverse sinus (hemorrhagic venous infarct)."
    ) in result.narrative
    assert "Suspected CVST" in result.context_tags
    assert any("SWI/T2* for hemorrhagic transformation" in r.text for r in result.recommendations)


def test_cvst_without_ctv_is_medium(brain_store):
    brain_store.set("cvst_suspected", True)
    result = _derive(brain_store)
    cvst = next(d for d in result.differentials if d.name.startswith("Dural venous"))
    assert cvst.likelihood.value == "Medium"
    assert "In the setting of clinically suspected CVST" in result.narrative


def test_trauma_flow(brain_store):
    brain_store.update(
        {
            "flow": "Trauma",
            "modality": "CT+MR",
            "mr_swi": False,
            "trauma_dai": True,
            "trauma_skull_fracture": True,
            "trauma_pneumocephalus": True,
        }
    )
    result = _derive(brain_store)

    assert _names(result)[:2] == ["Traumatic brain injury spectrum", "Diffuse axonal injury"]
    assert "Trauma assessment: assessment for contusion, suspected DAI, suspected skull fracture, pneumocephalus." in (
        result.narrative
    )
    swi = next(r for r in result.recommendations if "SWI/T2*" in r.text)
    assert swi.patch == {"mr_swi": True}
    assert any("CTA may be considered" in r.text for r in result.recommendations)
    assert any("pneumocephalus/herniation" in r.text for r in result.recommendations)

    assert swi.apply(brain_store)
    assert brain_store.state.mr_swi is True
    assert not any("SWI/T2* is helpful" in r.text for r in _derive(brain_store).recommendations)


def test_mass_ct_only_recommends_mr_with_action(brain_store):
    brain_store.set("flow", "Mass/Infection")
    result = _derive(brain_store)

    assert _names(result) == ["Glial tumor spectrum (including GBM)"]
    rec = result.recommendations[0]
    assert rec.has_action
    assert rec.apply(brain_store)
    assert brain_store.state.modality.value == "CT+MR"
    assert "Solitary lesion pattern, intra-axial (marked edema) is seen." in result.narrative


def test_abscess_with_ring_and_restriction(brain_store):
    brain_store.update(
        {
            "flow": "Mass/Infection",
            "modality": "MR",
            "ring_enhancing": True,
            "diffusion_restriction": True,
            "fever_sepsis": True,
        }
    )
    result = _derive(brain_store)
    abscess = next(d for d in result.differentials if d.name == "Brain abscess")
    assert abscess.likelihood.value == "High"
    assert any("favors abscess" in r.text for r in result.recommendations)


def test_meningioma_score_and_pattern(brain_store):
    brain_store.update(
        {
            "flow": "Mass/Infection",
            "modality": "MR",
            "lesion_compartment": "Extra-axial",
            "dural_tail": True,
            "hyperostosis": True,
            "csf_cleft": True,
        }
    )
    result = _derive(brain_store)

    meningioma = next(d for d in result.differentials if d.name == "Meningioma")
    assert meningioma.likelihood.value == "High"
    assert meningioma.score == 3
    hint = next(p for p in result.patterns if p.title == "Meningioma")
    assert hint.tag == "High likelihood"
    assert hint.bullets == ["Dural tail", "Hyperostosis", "CSF cleft"]
    assert any("meningioma features" in r.text for r in result.recommendations)


def test_lymphoma_score(brain_store):
    brain_store.update(
        {
            "flow": "Mass/Infection",
            "modality": "MR",
            "strong_restriction": True,
            "t2_iso_hypo": True,
            "deep_periventricular": True,
        }
    )
    result = _derive(brain_store)
    lymphoma = next(d for d in result.differentials if d.name == "CNS lymphoma (PCNSL)")
    assert lymphoma.likelihood.value == "High"
    assert any("before starting steroids" in r.text for r in result.recommendations)


def test_ddx_cap_follows_settings(brain_store, settings):
    brain_store.update(
        {
            "flow": "Mass/Infection",
            "modality": "MR",
            "known_malignancy": True,
            "ring_enhancing": True,
            "diffusion_restriction": True,
            "lesion_compartment": "Extra-axial",
            "dural_tail": True,
            "cvst_suspected": True,
        }
    )
    assert len(_derive(brain_store, settings).differentials) <= settings.brain_ddx_limit

    narrow = settings.model_copy(update={"brain_ddx_limit": 2})
    assert len(_derive(brain_store, narrow).differentials) == 2


def test_language_toggles(brain_store):
    brain_store.update(
        {
            "output.include_probability_language": True,
            "output.include_recommendations_language": True,
            "midline_shift_mm": "7",
            "incidental": "  Chronic small vessel change  ",
        }
    )
    lines = _derive(brain_store).narrative.split("\n")
    assert "Primarily Intraparenchymal hematoma." in lines
    assert any(line.startswith("Recommendation: Neurosurgical consultation") for line in lines)
    assert lines[-1] == "Additional / incidental: Chronic small vessel change."


def test_derivation_is_deterministic(brain_store):
    brain_store.update({"cvst_suspected": True, "anticoagulation": True, "flow": "Trauma"})
    assert _derive(brain_store) == _derive(brain_store)


def test_mr_protocol_summary(brain_store):
    brain_store.update({"modality": "CT+MR", "ct_preset": "CTA", "ct_neck_cta": True, "mr_perfusion": True})
    result = _derive(brain_store)
    assert result.protocol_summary == (
        "CT: CTA | CTA head+neck | MR: Contrast-enhanced + DWI/ADC + SWI/T2* + Perfusion (DSC/DCE)"
    )
