"""Packaged FFT presets and laying them onto a grid."""
from __future__ import annotations

import json

import numpy as np
import pytest

from spectralcube.engine.energy import compute_energy
from spectralcube.model.errors import InvalidRange, UnknownPreset
from spectralcube.model.field import Channel, FieldModel
from spectralcube.model.presets import apply_preset, get_preset, list_presets, load_presets


def test_catalog():
    assert [p.id for p in list_presets()] == ["crystal_pulsation", "energy_waves", "unstable_core"]
    assert get_preset("energy_waves").name == "Energy Waves"


def test_unknown_preset():
    with pytest.raises(UnknownPreset):
        get_preset("does_not_exist")


def test_crystal_pulsation(default_model):
    apply_preset(default_model, "crystal_pulsation")

    assert compute_energy(default_model) == pytest.approx(2.5525)
    red = default_model[Channel.R]
    assert red.dc.amplitude == pytest.approx(0.6)
    # freq (1, 0, 0) on a 16³ grid
    assert red.ac_amplitudes[255] == pytest.approx(0.3)
    assert np.count_nonzero(red.ac_amplitudes) == 2


def test_cache_is_left_stale(default_model):
    apply_preset(default_model, "crystal_pulsation")
    assert default_model.current_energy == pytest.approx(4.0)


def test_fits_any_grid_size():
    small = FieldModel(id="small", fft_size=8)
    apply_preset(small, get_preset("crystal_pulsation"))
    assert compute_energy(small) == pytest.approx(2.5525)


def test_unmentioned_channels_are_zeroed(tmp_path, excited_model):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps({
        "red_only": {
            "name": "Red only",
            "channels": {
                "R": {"dc": {"amplitude": 0.5}, "ac": [{"amplitude": 1.0, "phase": 0.25, "freq": [-1, 0, 0]}]},
            },
        },
    }))
    preset = load_presets(str(path))["red_only"]

    apply_preset(excited_model, preset)

    red = excited_model[Channel.R]
    # -1 wraps to 15: grid index 15 * 256 = 3840
    assert red.ac_amplitudes[3839] == 1.0
    assert red.ac_phases[3839] == 0.25
    assert np.count_nonzero(red.ac_amplitudes) == 1
    for channel in (Channel.G, Channel.B, Channel.A):
        assert excited_model[channel].dc.amplitude == 0.0
    assert compute_energy(excited_model) == pytest.approx(1.25)


def _write_catalog(tmp_path, channel_data):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps({"bad": {"channels": channel_data}}))
    return str(path)


@pytest.mark.parametrize("freq", [[0, 0, 0], [16, 0, 0], [8, -8, 32]])
def test_dc_frequency_is_rejected_on_load(tmp_path, freq):
    path = _write_catalog(tmp_path, {"R": {"dc": {"amplitude": 0.5}, "ac": [{"amplitude": 1.0, "freq": freq}]}})
    with pytest.raises(InvalidRange):
        load_presets(path)


@pytest.mark.parametrize("freq", [[1, 0], [1.5, 0, 0], ["1", 0, 0], None, [True, 0, 0]])
def test_malformed_frequency_is_rejected_on_load(tmp_path, freq):
    path = _write_catalog(tmp_path, {"R": {"dc": {"amplitude": 0.5}, "ac": [{"amplitude": 1.0, "freq": freq}]}})
    with pytest.raises(InvalidRange):
        load_presets(path)


def test_non_numeric_amplitude_is_rejected_on_load(tmp_path):
    path = _write_catalog(tmp_path, {"R": {"dc": {"amplitude": 0.5}, "ac": [{"amplitude": "big", "freq": [1, 0, 0]}]}})
    with pytest.raises(InvalidRange):
        load_presets(path)


def test_unknown_channel_is_rejected_on_load(tmp_path):
    path = _write_catalog(tmp_path, {"X": {"dc": {"amplitude": 0.5}}})
    with pytest.raises(InvalidRange):
        load_presets(path)


def test_wrapped_frequency_is_accepted(tmp_path):
    path = _write_catalog(tmp_path, {"R": {"dc": {"amplitude": 0.0}, "ac": [{"amplitude": 1.0, "freq": [-7, 0, 0]}]}})
    preset = load_presets(path)["bad"]
    model = FieldModel(id="cube", fft_size=16)
    apply_preset(model, preset)
    # -7 wraps to 9 on a 16³ grid
    assert model[Channel.R].ac_amplitudes[9 * 256 - 1] == 1.0
