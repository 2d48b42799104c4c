"""
Field Energy
============
Parseval-style energy of a cube's frequency-domain field.

The energy of a channel is the sum of the squared amplitudes of all its
coefficients, DC included; the cube's energy is the sum over R, G, B and A.
The measure ignores phase and grows with every amplitude, which keeps the
stress level monotonic in the field's magnitude.
"""
from __future__ import annotations

import logging
from typing import Dict

import numpy as np

from spectralcube.model.field import Channel, ChannelField, FieldModel

logger = logging.getLogger(__name__)


def compute_channel_energy(channel_field: ChannelField) -> float:
    """Energy of one channel: |DC|² + Σ|c_k|²."""
    ac = channel_field.ac_amplitudes
    return float(channel_field.dc.amplitude ** 2 + np.dot(ac, ac))


def compute_channel_energies(model: FieldModel) -> Dict[Channel, float]:
    return {channel: compute_channel_energy(model.channels[channel]) for channel in Channel}


def compute_energy(model: FieldModel) -> float:
    """
    Total energy of the cube, summed over all four channels.

    Deterministic and side-effect free; O(4 * fft_size³).
    """
    return float(sum(compute_channel_energies(model).values()))


def compute_normalized_energy(model: FieldModel, total_energy: float | None = None) -> float:
    """
    total_energy / energy_capacity.

    Typically in [0, 1]; exceeds 1 when the field holds more than the
    capacity. Clamping for display is left to the caller.
    """
    if total_energy is None:
        total_energy = compute_energy(model)
    return total_energy / model.energy_capacity


def remaining_capacity(model: FieldModel, total_energy: float | None = None) -> float:
    if total_energy is None:
        total_energy = compute_energy(model)
    return max(0.0, model.energy_capacity - total_energy)


def sync_current_energy(model: FieldModel) -> float:
    """
    Recompute the cached ``current_energy`` from the channels.

    Idempotent; this cached field is the only thing it writes.

    Returns:
        The fresh total energy.
    """
    model.current_energy = compute_energy(model)
    logger.debug(f"Synced energy of cube '{model.id}': {model.current_energy:.6g}")
    return model.current_energy
