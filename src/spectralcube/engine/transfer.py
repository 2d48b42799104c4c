"""
Energy Transfer
===============
Moves energy from one cube to another, with optional transfer loss and
capacity limits.

Energy is moved by rescaling amplitudes, so each cube keeps its spectral
shape: the source is scaled by sqrt(remaining / before) and the target by
sqrt(after / before). An empty target has no shape to keep; it takes the
source's shape when both grids have the same size, otherwise the energy is
spread evenly over its four DC bins.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict

from spectralcube.engine.energy import compute_energy, sync_current_energy
from spectralcube.model.errors import InvalidRange
from spectralcube.model.field import Channel, Coefficient, FieldModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferOptions:
    """
    Attributes:
        max_transfer_ratio: Largest share of the source energy one transfer may take (0-1).
        efficiency: Share of the taken energy that arrives at the target (0-1, 1 = lossless).
        allow_overflow: Whether the target may end above its capacity.
    """
    max_transfer_ratio: float = 1.0
    efficiency: float = 1.0
    allow_overflow: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.max_transfer_ratio <= 1.0:
            raise InvalidRange(f"max_transfer_ratio must lie in [0, 1], got {self.max_transfer_ratio}")
        if not 0.0 <= self.efficiency <= 1.0:
            raise InvalidRange(f"efficiency must lie in [0, 1], got {self.efficiency}")


@dataclass(frozen=True)
class EnergyTransferResult:
    transferred_amount: float
    source_remaining_energy: float
    target_new_energy: float
    source_depleted: bool
    target_at_capacity: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transferred_amount": self.transferred_amount,
            "source_remaining_energy": self.source_remaining_energy,
            "target_new_energy": self.target_new_energy,
            "source_depleted": self.source_depleted,
            "target_at_capacity": self.target_at_capacity,
        }


def plan_transfer(
    source: FieldModel,
    target: FieldModel,
    amount: float,
    options: TransferOptions | None = None,
) -> EnergyTransferResult:
    """
    Work out how much energy a transfer would move, without touching either cube.

    Args:
        source: Cube giving energy.
        target: Cube receiving energy.
        amount: Requested amount of energy to take from the source.
        options: Transfer limits; defaults to a lossless, capacity-bound transfer.

    Returns:
        EnergyTransferResult with the amount taken from the source and the
        energy levels both cubes would end at.
    """
    options = options or TransferOptions()
    source_energy = compute_energy(source)
    target_energy = compute_energy(target)
    capacity = target.energy_capacity

    if amount <= 0 or source_energy <= 0:
        return EnergyTransferResult(
            transferred_amount=0.0,
            source_remaining_energy=source_energy,
            target_new_energy=target_energy,
            source_depleted=source_energy <= 0,
            target_at_capacity=target_energy >= capacity,
        )

    taken = min(amount, source_energy * options.max_transfer_ratio, source_energy)
    received = taken * options.efficiency

    space = capacity - target_energy
    if not options.allow_overflow and space < received:
        received = max(0.0, space)
        taken = received / options.efficiency if options.efficiency > 0 else 0.0

    source_remaining = source_energy - taken
    target_new = target_energy + received

    return EnergyTransferResult(
        transferred_amount=taken,
        source_remaining_energy=source_remaining,
        target_new_energy=target_new,
        source_depleted=source_remaining <= 0,
        target_at_capacity=space <= 0 or target_new >= capacity,
    )


def _fill_empty_target(target: FieldModel, source: FieldModel, source_energy: float, new_energy: float) -> None:
    if target.fft_size == source.fft_size and source_energy > 0:
        factor = math.sqrt(new_energy / source_energy)
        for channel in Channel:
            channel_field = source.channels[channel].copy()
            channel_field.scale(factor)
            target.channels[channel] = channel_field
        return

    dc_amplitude = math.sqrt(new_energy / len(Channel))
    for channel in Channel:
        target.channels[channel].dc = Coefficient(amplitude=dc_amplitude, phase=0.0)


def apply_transfer(
    source: FieldModel,
    target: FieldModel,
    amount: float,
    options: TransferOptions | None = None,
) -> EnergyTransferResult:
    """
    Perform a transfer planned by ``plan_transfer``, rescaling both spectra in
    place and re-syncing both cached energies.

    Raises:
        ValueError: if source and target are the same cube.
    """
    if source is target:
        raise ValueError(f"Cannot transfer energy from cube '{source.id}' to itself.")

    source_energy = compute_energy(source)
    target_energy = compute_energy(target)
    result = plan_transfer(source, target, amount, options)

    if result.transferred_amount > 0 or result.target_new_energy != target_energy:
        # Shape the target first; an empty target copies the unscaled source spectrum
        if target_energy > 0:
            factor = math.sqrt(result.target_new_energy / target_energy)
            for channel_field in target.channels.values():
                channel_field.scale(factor)
        elif result.target_new_energy > 0:
            _fill_empty_target(target, source, source_energy, result.target_new_energy)

        source_factor = math.sqrt(max(0.0, result.source_remaining_energy) / source_energy)
        for channel_field in source.channels.values():
            channel_field.scale(source_factor)

        logger.debug(
            f"Transferred {result.transferred_amount:.6g} energy from '{source.id}' to '{target.id}' "
            f"(received {result.target_new_energy - target_energy:.6g})"
        )

    sync_current_energy(source)
    sync_current_energy(target)
    return result
