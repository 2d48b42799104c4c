"""Energy report: the per-tick summary the UI reads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from spectralcube.engine.energy import compute_energy, compute_normalized_energy, remaining_capacity
from spectralcube.engine.fracture import FractureStatus, evaluate_fracture
from spectralcube.model.field import FieldModel


@dataclass(frozen=True)
class EnergyReport:
    """
    Attributes:
        total_energy: Parseval energy of the field (>= 0).
        normalized_energy: total_energy / energy_capacity, NOT clamped.
            Typically in [0, 1] under normal operation, may exceed 1 if the
            energy exceeds the capacity.
        stress_level: total_energy / fracture_threshold, 0 when disabled.
        fractured: stress_level >= 1.0.
        near_fracture: 0.8 <= stress_level < 1.0.
        status: Fracture state machine value.
        remaining_capacity: max(0, energy_capacity - total_energy).
    """
    total_energy: float
    normalized_energy: float
    stress_level: float
    fractured: bool
    near_fracture: bool
    status: FractureStatus
    remaining_capacity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_energy": self.total_energy,
            "normalized_energy": self.normalized_energy,
            "stress_level": self.stress_level,
            "fractured": self.fractured,
            "near_fracture": self.near_fracture,
            "status": self.status.value,
            "remaining_capacity": self.remaining_capacity,
        }


def compute_report(model: FieldModel) -> EnergyReport:
    """Energy, normalization and fracture state of ``model``. Does not mutate it."""
    total = compute_energy(model)
    fracture = evaluate_fracture(total, model.physics.fracture_threshold)
    return EnergyReport(
        total_energy=total,
        normalized_energy=compute_normalized_energy(model, total),
        stress_level=fracture.stress_level,
        fractured=fracture.fractured,
        near_fracture=fracture.near_fracture,
        status=fracture.status,
        remaining_capacity=remaining_capacity(model, total),
    )
