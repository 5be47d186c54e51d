"""Tests for the click CLI."""

import json

from click.testing import CliRunner


def test_modules_command():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["modules"])
    assert result.exit_code == 0
    assert "brain" in result.output
    assert "pancreas" in result.output


def test_fields_command():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["fields", "brain"])
    assert result.exit_code == 0
    assert "output.style" in result.output
    assert "venous_sinuses" in result.output
    assert "CT+MR" in result.output


def test_defaults_command():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["defaults", "brain"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["modality"] == "CT"
    assert data["venous_sinuses"] == ["Superior sagittal sinus"]
    assert data["output"]["style"] == "Detailed"


def test_derive_text_output():
    from radclean.cli import cli

    result = CliRunner().invoke(
        cli, ["derive", "brain", "--set", "max_diameter_cm=3.2", "--set", "midline_shift_mm=6"]
    )
    assert result.exit_code == 0, result.output
    assert "DIFFERENTIAL DIAGNOSIS" in result.output
    assert "REPORT" in result.output
    assert "max diameter: 3.2 cm" in result.output
    assert "Neurosurgical consultation" in result.output


def test_derive_json_output():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["derive", "pancreas", "--set", "gas_in_collection=true", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["module"] == "pancreas"
    assert data["differentials"][0]["name"] == "Infected necrosis / abscess"
    assert data["differentials"][0]["likelihood"] == "High"
    assert data["recommendations"][0]["urgency"] == "Emergent"


def test_derive_apply_recommendation():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["derive", "pancreas", "--set", "gas_in_collection=true", "--apply", "1"])
    assert result.exit_code == 0, result.output
    assert "CT: CECT pancreas protocol" in result.output


def test_derive_state_file_and_toggle(tmp_path):
    from radclean.cli import cli

    state_file = tmp_path / "state.json"
    state_file.write_text(json.dumps({"flow": "Trauma", "output": {"style": "Brief"}, "trauma_dai": True}))

    result = CliRunner().invoke(
        cli, ["derive", "brain", "--state", str(state_file), "--toggle", "trauma_contusion=x"]
    )
    assert result.exit_code == 0, result.output
    assert "Trauma assessment: suspected DAI." in result.output


def test_derive_unknown_module():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["derive", "liver"])
    assert result.exit_code == 1
    assert "Unknown organ module 'liver'" in result.output


def test_derive_unknown_field():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["derive", "brain", "--set", "no_such_field=1"])
    assert result.exit_code == 1
    assert "Unknown field 'no_such_field'" in result.output


def test_derive_bad_assignment():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["derive", "brain", "--set", "modality"])
    assert result.exit_code == 2


def test_derive_apply_out_of_range():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["derive", "brain", "--apply", "9"])
    assert result.exit_code == 1


def test_derive_copy_reports_failure(monkeypatch):
    from radclean import clipboard
    from radclean.cli import cli

    monkeypatch.setattr(clipboard.shutil, "which", lambda name: None)
    result = CliRunner().invoke(cli, ["derive", "brain", "--copy"])
    assert result.exit_code == 0
    assert "Copy failed" in result.output


def test_log_level_choices():
    from radclean.cli import cli

    result = CliRunner().invoke(cli, ["--log-level", "bogus", "modules"])
    assert result.exit_code == 2
    assert "Invalid value for '--log-level'" in result.output

    result = CliRunner().invoke(cli, ["--log-level", "debug", "modules"])
    assert result.exit_code == 0, result.output
    assert "brain" in result.output
