#!/usr/bin/env python3
"""
tests/test_param_loader.py - Parameter file parsing and test setting defaults
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from param_loader import ParameterStore, RunSettings, load_parameter_file, load_run_settings


def test_load_parameter_file_formats(tmp_path):
    param_file = tmp_path / "range_hold.parm"
    param_file.write_text(
        "# range hold test\n"
        "SCR_USER1 2\n"
        "\n"
        "SCR_USER2,30.5\n"
        "SCR_USER3 = 1.5\n"
        "BAD_LINE\n"
        "SCR_USER4 abc\n"
    )

    params = load_parameter_file(str(param_file))
    assert len(params) == 3
    assert params.get("SCR_USER1") == 2.0
    assert params.get("SCR_USER2") == 30.5
    assert params.get("SCR_USER3") == 1.5
    assert params.get("SCR_USER4") is None


def test_missing_parameter_file_gives_empty_store(tmp_path):
    params = load_parameter_file(str(tmp_path / "missing.parm"))
    assert len(params) == 0
    assert params.get("SCR_USER1") is None


def test_run_settings_defaults():
    assert load_run_settings(ParameterStore()) == RunSettings(1, 22.0, 2.0)


def test_run_settings_from_parameters():
    params = ParameterStore({"SCR_USER1": 3, "SCR_USER2": 30.0, "SCR_USER3": 0.5})
    settings = load_run_settings(params)
    assert settings == RunSettings(3, 30.0, 0.5)
    assert isinstance(settings.pattern_id, int)


@pytest.mark.parametrize("pattern_id", [0, -3])
def test_non_positive_pattern_id_uses_default(pattern_id):
    assert load_run_settings(ParameterStore({"SCR_USER1": pattern_id})).pattern_id == 1


@pytest.mark.parametrize("depth", [0.0, 0.05, -0.05])
def test_near_zero_bottom_depth_uses_default(depth):
    assert load_run_settings(ParameterStore({"SCR_USER2": depth})).bottom_depth_m == 22.0


def test_near_zero_tolerance_uses_default():
    assert load_run_settings(ParameterStore({"SCR_USER3": 0.00001})).match_tolerance_m == 2.0
    assert load_run_settings(ParameterStore({"SCR_USER3": 0.001})).match_tolerance_m == 0.001


def test_parameter_store_set_and_copy():
    params = ParameterStore()
    params.set("SCR_USER1", 4)
    snapshot = params.as_dict()
    snapshot["SCR_USER1"] = 9.0
    assert params.get("SCR_USER1") == 4.0
