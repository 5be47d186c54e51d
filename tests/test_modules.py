"""Tests for the organ module registry."""

import pytest


def test_list_modules():
    from radclean.modules import list_modules

    assert [m.module_id for m in list_modules()] == ["brain", "pancreas"]


def test_unknown_module():
    from radclean.errors import UnknownModuleError
    from radclean.modules import get_module

    with pytest.raises(UnknownModuleError) as exc:
        get_module("liver")
    assert exc.value.code == "UNKNOWN_MODULE"
    assert exc.value.to_dict()["details"]["available"] == ["brain", "pancreas"]


def test_derive_defaults_by_id():
    from radclean.modules import derive

    result = derive("Pancreas")
    assert result.module == "pancreas"
    assert result.narrative


def test_derive_rejects_foreign_state():
    from radclean.brain.state import BrainState
    from radclean.modules import derive

    with pytest.raises(TypeError):
        derive("pancreas", BrainState())


def test_brain_store_carries_normalizer():
    from radclean.modules import get_module

    store = get_module("brain").new_store()
    store.set("hemorrhagic_venous_infarct", "yes")
    assert store.state.venous_infarct is True


def test_result_to_dict_shape():
    from radclean.modules import derive

    data = derive("brain").to_dict()
    assert set(data) == {
        "module",
        "protocol_summary",
        "context_tags",
        "differentials",
        "recommendations",
        "narrative",
        "features",
        "patterns",
    }
    assert data["differentials"][0] == {
        "name": "Intraparenchymal hematoma",
        "likelihood": "High",
        "rationale": ["CT appropriate for hemorrhage assessment", "Trauma history", "Intra-axial hemorrhage pattern"],
        "score": None,
    }
