"""Stress level and the fracture state machine."""
from __future__ import annotations

import math

import pytest

from spectralcube.engine.decay import apply_decay
from spectralcube.engine.fracture import (
    FractureStatus,
    check_fracture,
    evaluate_fracture,
    fracture_status,
    is_near_fracture,
)
from spectralcube.model.field import Channel, Coefficient


@pytest.mark.parametrize(
    "stress, expected",
    [
        (0.0, FractureStatus.STABLE),
        (0.79, FractureStatus.STABLE),
        (0.8, FractureStatus.WARNING),
        (0.99, FractureStatus.WARNING),
        (1.0, FractureStatus.FRACTURED),
        (5.0, FractureStatus.FRACTURED),
    ],
)
def test_status_bands(stress, expected):
    assert fracture_status(stress) == expected


def test_near_fracture(default_model):
    default_model.physics.fracture_threshold = 4.5
    result = check_fracture(default_model)
    assert result.stress_level == pytest.approx(4.0 / 4.5)
    assert result.near_fracture
    assert not result.fractured
    assert result.status == FractureStatus.WARNING
    assert is_near_fracture(default_model)


def test_fractured_reports_excess(default_model):
    default_model.physics.fracture_threshold = 3.9
    result = check_fracture(default_model)
    assert result.fractured
    assert not result.near_fracture
    assert result.threshold == 3.9
    assert result.current_energy == pytest.approx(4.0)
    assert result.excess_energy == pytest.approx(0.1)


def test_custom_warning_ratio(default_model):
    default_model.physics.fracture_threshold = 6.0
    assert not check_fracture(default_model).near_fracture
    assert check_fracture(default_model, warning_ratio=0.5).near_fracture


def test_disabled_threshold_is_immune(default_model):
    for channel_field in default_model.channels.values():
        channel_field.dc = Coefficient(amplitude=math.sqrt(250.0))
    default_model.physics.fracture_threshold = 0
    result = check_fracture(default_model)
    assert result.stress_level == 0
    assert not result.fractured
    assert not result.near_fracture
    assert result.excess_energy == 0
    assert result.status == FractureStatus.STABLE


def test_stress_is_monotonic_in_energy():
    a = evaluate_fracture(10.0, fracture_threshold=50.0)
    b = evaluate_fracture(10.5, fracture_threshold=50.0)
    assert a.stress_level < b.stress_level


def test_check_uses_fresh_energy_not_cache(excited_model):
    # cache still says 4.0; the channels hold 8.0
    excited_model.physics.fracture_threshold = 7.5
    assert check_fracture(excited_model).fractured


def test_fracture_is_not_sticky(excited_model):
    excited_model.physics.fracture_threshold = 7.5
    excited_model.physics.coherence_loss = 0.1
    assert check_fracture(excited_model).status == FractureStatus.FRACTURED

    # AC energy 4.0 * e^-2 leaves ~4.54 in total
    apply_decay(excited_model, 10.0)
    result = check_fracture(excited_model)
    assert result.stress_level == pytest.approx((4.0 + 4.0 * math.exp(-2.0)) / 7.5)
    assert result.status == FractureStatus.STABLE


def test_edit_reverts_status(default_model):
    default_model.physics.fracture_threshold = 3.9
    assert check_fracture(default_model).fractured
    default_model[Channel.A].dc = Coefficient(amplitude=0.5)
    assert check_fracture(default_model).status == FractureStatus.WARNING
