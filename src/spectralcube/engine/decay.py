"""
Coherence Decay
===============
Natural decoherence of a cube's field over time.

Each AC amplitude is attenuated by exp(-coherence_loss * elapsed); the DC
coefficient is the ground state and does not decay. Call ``apply_decay`` once
per simulation tick with the real elapsed wall-clock delta (not once per
rendered frame), so the result does not depend on the frame rate.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

import numpy as np

from spectralcube.engine.energy import compute_energy, sync_current_energy
from spectralcube.engine.fracture import FractureStatus, evaluate_fracture
from spectralcube.model.errors import InvalidElapsedTime
from spectralcube.model.field import FieldModel

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def decay_factor(coherence_loss: float, elapsed_seconds: float) -> float:
    """Amplitude multiplier e^(-λt)."""
    return math.exp(-coherence_loss * elapsed_seconds)


def apply_decay(model: FieldModel, elapsed_seconds: float) -> float:
    """
    Attenuate the AC coefficients of ``model`` in place and re-sync its energy.

    Args:
        model: The cube to decay (mutated).
        elapsed_seconds: Time since the previous tick, >= 0.

    Returns:
        The total energy after decay.

    Raises:
        InvalidElapsedTime: elapsed_seconds is negative or not finite. The
            model is left untouched.
    """
    if not math.isfinite(elapsed_seconds) or elapsed_seconds < 0:
        raise InvalidElapsedTime(f"elapsed_seconds must be a finite value >= 0, got {elapsed_seconds}")

    coherence_loss = model.physics.coherence_loss
    if coherence_loss > 0 and elapsed_seconds > 0:
        factor = decay_factor(coherence_loss, elapsed_seconds)
        for channel_field in model.channels.values():
            channel_field.scale(factor, include_dc=False)
        logger.debug(f"Decayed cube '{model.id}' by factor {factor:.6f} over {elapsed_seconds:.3f}s")

    return sync_current_energy(model)


@dataclass
class DecayHistory:
    """
    Energy trace of a cube sampled at fixed time steps.
    The first sample (t=0) is the state before any decay.
    """
    cube_id: str
    fracture_threshold: float
    times: npt.NDArray[np.float64] = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    energies: npt.NDArray[np.float64] = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    stress_levels: npt.NDArray[np.float64] = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    statuses: List[FractureStatus] = field(default_factory=list)

    def __len__(self) -> int:
        return int(self.times.size)

    def plot(self) -> None:
        """Plot the energy history of the cube."""
        import matplotlib.pyplot as plt

        if self.times.size == 0:
            logger.warning("No energy history available to plot.")
            return

        plt.figure(figsize=(10, 5))
        plt.plot(self.times, self.energies, 'b', lw=2, label="Total energy")
        if self.fracture_threshold > 0:
            plt.axhline(self.fracture_threshold, color='r', linestyle='--', lw=1, label="Fracture threshold")

        plt.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
        plt.minorticks_on()
        plt.grid(visible=True, which='minor', axis='both', linestyle=':', color='gray', lw=0.5)

        plt.title(f"Energy History of Cube {self.cube_id}")
        plt.xlabel("Time (s)")
        plt.ylabel("Energy")
        plt.legend()
        plt.show()


def simulate_decay(model: FieldModel, dt: float, total_time: float) -> DecayHistory:
    """
    Run ``apply_decay`` in fixed steps and record the energy trace.

    Args:
        model: The cube to decay (mutated; ends in the decayed state).
        dt: Step length in seconds (> 0).
        total_time: Simulated duration in seconds (>= 0). A trailing partial
            step is not taken.

    Returns:
        DecayHistory with one sample per step plus the initial state.

    Raises:
        InvalidElapsedTime: dt <= 0 or total_time < 0.
    """
    if not (math.isfinite(dt) and dt > 0):
        raise InvalidElapsedTime(f"dt must be > 0, got {dt}")
    if not (math.isfinite(total_time) and total_time >= 0):
        raise InvalidElapsedTime(f"total_time must be >= 0, got {total_time}")

    n_steps = int(math.floor(total_time / dt + 1e-9))
    threshold = model.physics.fracture_threshold
    logger.info(f"Simulating decay of cube '{model.id}': {n_steps} steps of {dt}s")

    times = np.arange(n_steps + 1, dtype=np.float64) * dt
    energies = np.empty(n_steps + 1, dtype=np.float64)
    stresses = np.empty(n_steps + 1, dtype=np.float64)
    statuses: List[FractureStatus] = []

    energy = compute_energy(model)
    for step in range(n_steps + 1):
        if step > 0:
            energy = apply_decay(model, dt)
        fracture = evaluate_fracture(energy, threshold)
        energies[step] = energy
        stresses[step] = fracture.stress_level
        if statuses and statuses[-1] != fracture.status:
            logger.info(f"Cube '{model.id}' went {statuses[-1]} -> {fracture.status} at t={times[step]:.2f}s")
        statuses.append(fracture.status)

    logger.info(f"Decay finished. Energy {energies[0]:.6g} -> {energies[-1]:.6g}")
    return DecayHistory(
        cube_id=model.id,
        fracture_threshold=threshold,
        times=times,
        energies=energies,
        stress_levels=stresses,
        statuses=statuses,
    )
