"""Energy transfer between cubes."""
from __future__ import annotations

import math

import numpy as np
import pytest

from spectralcube.engine.energy import compute_energy
from spectralcube.engine.transfer import TransferOptions, apply_transfer, plan_transfer
from spectralcube.model.errors import InvalidRange
from spectralcube.model.field import Channel, FieldModel, create_default


@pytest.fixture
def source():
    return create_default("source")


@pytest.fixture
def target():
    return create_default("target")


def test_plain_transfer(source, target):
    result = apply_transfer(source, target, 1.0)
    assert result.transferred_amount == pytest.approx(1.0)
    assert result.source_remaining_energy == pytest.approx(3.0)
    assert result.target_new_energy == pytest.approx(5.0)
    assert compute_energy(source) == pytest.approx(3.0)
    assert compute_energy(target) == pytest.approx(5.0)
    assert source.current_energy == pytest.approx(3.0)
    assert target.current_energy == pytest.approx(5.0)
    assert not result.source_depleted
    assert not result.target_at_capacity


def test_plan_does_not_mutate(source, target):
    plan_transfer(source, target, 2.0)
    assert compute_energy(source) == pytest.approx(4.0)
    assert compute_energy(target) == pytest.approx(4.0)


def test_spectral_shape_is_kept(excited_model, target):
    before = excited_model[Channel.R].ac_amplitudes.copy()
    phases = excited_model[Channel.R].ac_phases.copy()
    apply_transfer(excited_model, target, 6.0)
    # 8 -> 2 scales amplitudes by 1/2
    np.testing.assert_allclose(excited_model[Channel.R].ac_amplitudes, before * 0.5)
    np.testing.assert_array_equal(excited_model[Channel.R].ac_phases, phases)


def test_capacity_limits_transfer(source, target):
    target.energy_capacity = 4.5
    result = apply_transfer(source, target, 2.0)
    assert result.transferred_amount == pytest.approx(0.5)
    assert result.target_new_energy == pytest.approx(4.5)
    assert result.target_at_capacity
    assert compute_energy(source) == pytest.approx(3.5)


def test_overflow_allowed(source, target):
    target.energy_capacity = 4.5
    result = apply_transfer(source, target, 2.0, TransferOptions(allow_overflow=True))
    assert result.target_new_energy == pytest.approx(6.0)
    assert result.target_at_capacity


def test_efficiency_loses_energy(source, target):
    result = apply_transfer(source, target, 2.0, TransferOptions(efficiency=0.5))
    assert result.transferred_amount == pytest.approx(2.0)
    assert compute_energy(source) == pytest.approx(2.0)
    assert compute_energy(target) == pytest.approx(5.0)


def test_max_transfer_ratio(source, target):
    result = plan_transfer(source, target, 10.0, TransferOptions(max_transfer_ratio=0.25))
    assert result.transferred_amount == pytest.approx(1.0)


def test_drain_source(source, target):
    result = apply_transfer(source, target, 100.0)
    assert result.transferred_amount == pytest.approx(4.0)
    assert result.source_depleted
    assert compute_energy(source) == pytest.approx(0.0, abs=1e-12)
    assert compute_energy(target) == pytest.approx(8.0)


@pytest.mark.parametrize("amount", [0.0, -3.0])
def test_non_positive_amount_is_noop(source, target, amount):
    result = apply_transfer(source, target, amount)
    assert result.transferred_amount == 0.0
    assert compute_energy(source) == pytest.approx(4.0)
    assert compute_energy(target) == pytest.approx(4.0)


def test_empty_target_takes_source_shape(excited_model):
    empty = FieldModel(id="empty")
    apply_transfer(excited_model, empty, 2.0)
    assert compute_energy(empty) == pytest.approx(2.0)
    # 2 of 8 => amplitudes scaled by 1/2
    assert empty[Channel.R].ac_amplitudes[0] == pytest.approx(1.0)
    assert empty[Channel.G].dc.amplitude == pytest.approx(0.5)


def test_empty_target_of_other_size_gets_dc(source):
    empty = FieldModel(id="small", fft_size=8)
    apply_transfer(source, empty, 1.0)
    assert compute_energy(empty) == pytest.approx(1.0)
    for channel_field in empty.channels.values():
        assert channel_field.dc.amplitude == pytest.approx(math.sqrt(0.25))
        assert not np.any(channel_field.ac_amplitudes)


def test_rejects_self_transfer(source):
    with pytest.raises(ValueError):
        apply_transfer(source, source, 1.0)


@pytest.mark.parametrize("kwargs", [{"max_transfer_ratio": 1.5}, {"efficiency": -0.1}])
def test_options_ranges(kwargs):
    with pytest.raises(InvalidRange):
        TransferOptions(**kwargs)
