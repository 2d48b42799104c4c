"""
Fracture State
==============
Stress level and the stable -> warning -> fractured state machine.

The state is recomputed from the current energy on every call; it has no
hysteresis. A cube whose energy drops back below the threshold (after decay
or an edit) reports ``warning`` or ``stable`` again, so "fractured" is not a
terminal state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict

from spectralcube.config import FRACTURE_RATIO, NEAR_FRACTURE_RATIO
from spectralcube.engine.energy import compute_energy
from spectralcube.model.field import FieldModel

logger = logging.getLogger(__name__)


class FractureStatus(StrEnum):
    STABLE = "stable"
    WARNING = "warning"
    FRACTURED = "fractured"


@dataclass(frozen=True)
class FractureCheckResult:
    """
    Fracture-related view of a cube.

    Attributes:
        stress_level: energy / threshold, 0 when fracturing is disabled.
        fractured: stress_level >= 1.0.
        near_fracture: warning_ratio <= stress_level < 1.0.
        status: State machine value derived from stress_level.
        current_energy: Total energy the check was made with.
        threshold: The cube's fracture threshold (0 = disabled).
        excess_energy: How far the energy exceeds the threshold (>= 0).
    """
    stress_level: float
    fractured: bool
    near_fracture: bool
    status: FractureStatus
    current_energy: float
    threshold: float
    excess_energy: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stress_level": self.stress_level,
            "fractured": self.fractured,
            "near_fracture": self.near_fracture,
            "status": self.status.value,
            "current_energy": self.current_energy,
            "threshold": self.threshold,
            "excess_energy": self.excess_energy,
        }


def stress_level(total_energy: float, fracture_threshold: float) -> float:
    """energy / threshold, or 0 when the threshold is 0 (fracturing disabled)."""
    if fracture_threshold <= 0:
        return 0.0
    return total_energy / fracture_threshold


def fracture_status(stress: float, warning_ratio: float = NEAR_FRACTURE_RATIO) -> FractureStatus:
    if stress >= FRACTURE_RATIO:
        return FractureStatus.FRACTURED
    if stress >= warning_ratio:
        return FractureStatus.WARNING
    return FractureStatus.STABLE


def evaluate_fracture(
    total_energy: float,
    fracture_threshold: float,
    warning_ratio: float = NEAR_FRACTURE_RATIO,
) -> FractureCheckResult:
    """Fracture check for an energy value that has already been computed."""
    if fracture_threshold <= 0:
        # Cubes without a threshold are fracture-immune
        return FractureCheckResult(
            stress_level=0.0,
            fractured=False,
            near_fracture=False,
            status=FractureStatus.STABLE,
            current_energy=total_energy,
            threshold=0.0,
            excess_energy=0.0,
        )

    stress = stress_level(total_energy, fracture_threshold)
    status = fracture_status(stress, warning_ratio)
    return FractureCheckResult(
        stress_level=stress,
        fractured=status == FractureStatus.FRACTURED,
        near_fracture=status == FractureStatus.WARNING,
        status=status,
        current_energy=total_energy,
        threshold=fracture_threshold,
        excess_energy=max(0.0, total_energy - fracture_threshold),
    )


def check_fracture(model: FieldModel, warning_ratio: float = NEAR_FRACTURE_RATIO) -> FractureCheckResult:
    """
    Fracture state of ``model`` from a fresh energy computation.

    Args:
        model: The cube to check. Not mutated.
        warning_ratio: Stress level from which the cube counts as near fracture.

    Returns:
        FractureCheckResult. With fracture_threshold == 0 the result is always
        stable with stress 0, regardless of the energy.
    """
    return evaluate_fracture(compute_energy(model), model.physics.fracture_threshold, warning_ratio)


def is_near_fracture(model: FieldModel, warning_ratio: float = NEAR_FRACTURE_RATIO) -> bool:
    return check_fracture(model, warning_ratio).near_fracture
