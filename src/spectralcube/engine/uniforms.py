"""
Renderer Uniforms
=================
Maps a cube's state and the visualization settings to the numeric inputs a
renderer binds as shader uniforms. Nothing here renders; the bundle is the
whole contract with the rendering layer.

Uniform names and meaning (``UniformBundle.to_dict``):
    uMode          int    0 = energy, 1 = amplitude, 2 = phase
    uChannelGains  4 x f  gain of R, G, B, A (1.0 if set in the mask, else 0.0)
    uEnergyScale   f      VisualizationConfig.energy_scale
    uGlow          f      VisualizationConfig.glow_intensity
    uEnergy        f      total energy
    uEnergyNorm    f      total energy / capacity (unclamped)
    uSqrtEnergy    f      sqrt(total energy), amplitude mode only
    uPhases        4 x N  per-channel phases (DC first, then AC), phase mode only
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

import numpy as np

from spectralcube.engine.energy import compute_energy
from spectralcube.model.field import Channel, FieldModel, validate
from spectralcube.model.visualization import VisualizationConfig, VisualizationMode

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class UniformBundle:
    mode_code: int
    channel_gains: Tuple[float, float, float, float]
    scale: float
    glow: float
    total_energy: float
    normalized_energy: float
    sqrt_energy: Optional[float] = None
    phases: Optional[npt.NDArray[np.float64]] = None

    def to_dict(self) -> Dict[str, Any]:
        uniforms: Dict[str, Any] = {
            "uMode": self.mode_code,
            "uChannelGains": list(self.channel_gains),
            "uEnergyScale": self.scale,
            "uGlow": self.glow,
            "uEnergy": self.total_energy,
            "uEnergyNorm": self.normalized_energy,
        }
        if self.sqrt_energy is not None:
            uniforms["uSqrtEnergy"] = self.sqrt_energy
        if self.phases is not None:
            uniforms["uPhases"] = self.phases
        return uniforms


def channel_gains(channel_mask: int) -> Tuple[float, float, float, float]:
    r, g, b, a = (1.0 if channel_mask & ch.mask else 0.0 for ch in Channel)
    return r, g, b, a


def phase_grid(model: FieldModel) -> npt.NDArray[np.float64]:
    """
    Raw phases of every bin, shape (4, fft_size³), rows in R, G, B, A order.
    Each row is the flattened grid: DC phase first, then the AC phases.
    """
    return np.stack([model.channels[ch].phases() for ch in Channel])


def build_uniforms(model: FieldModel, config: VisualizationConfig) -> UniformBundle:
    """
    Build the renderer-facing parameter bundle for ``model``.

    Args:
        model: The cube to visualize. Not mutated.
        config: Visualization settings (validated on construction).

    Returns:
        UniformBundle. ``sqrt_energy`` is set only in amplitude mode and
        ``phases`` only in phase mode.

    Raises:
        FieldValidationError: if the model is structurally invalid.
    """
    validate(model)

    total = compute_energy(model)
    sqrt_energy = None
    phases = None

    match config.mode:
        case VisualizationMode.AMPLITUDE:
            sqrt_energy = math.sqrt(total)
        case VisualizationMode.PHASE:
            phases = phase_grid(model)

    return UniformBundle(
        mode_code=config.mode.code,
        channel_gains=channel_gains(config.channel_mask),
        scale=config.energy_scale,
        glow=config.glow_intensity,
        total_energy=total,
        normalized_energy=total / model.energy_capacity,
        sqrt_energy=sqrt_energy,
        phases=phases,
    )
