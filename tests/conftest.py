"""Shared fixtures for the engine tests."""
from __future__ import annotations

import pytest

from spectralcube.model.field import Channel, Coefficient, FieldModel, create_default, randomize


@pytest.fixture
def default_model() -> FieldModel:
    """fft_size 16, DC amplitude 1.0 per channel, all AC zero: energy 4.0."""
    return create_default("cube-default")


@pytest.fixture
def random_model() -> FieldModel:
    return randomize("cube-random", seed=1234)


@pytest.fixture
def excited_model() -> FieldModel:
    """Default cube with one AC coefficient of amplitude 2.0 on R: energy 8.0."""
    model = create_default("cube-excited")
    model.channels[Channel.R].set_coefficient(0, Coefficient(amplitude=2.0, phase=0.5))
    return model
