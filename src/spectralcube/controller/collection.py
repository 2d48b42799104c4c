"""
Cube Collection
===============
Owns the magical cubes of a host application and drives the engine for them.

Why is this file needed?
------------------------
1. Identity: cube ids must be unique within their owning collection.
2. Single writer: the collection is the only mutator of the cubes it owns,
   so decay ticks and edits never race on the same FieldModel.
3. Gating: only cubes with ``is_magical`` set are decayed and reported;
   ordinary cubes are stored but never passed to the engine.

Classes:
    CubeCollection: The container class.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional

import numpy as np

from spectralcube.engine.decay import apply_decay
from spectralcube.engine.energy import sync_current_energy
from spectralcube.engine.fracture import FractureStatus
from spectralcube.engine.report import EnergyReport, compute_report
from spectralcube.engine.transfer import EnergyTransferResult, TransferOptions, apply_transfer
from spectralcube.engine.uniforms import UniformBundle, build_uniforms
from spectralcube.model.errors import DuplicateCubeId, InvalidElapsedTime, UnknownCubeId
from spectralcube.model.field import FieldModel, create_default, randomize, validate
from spectralcube.model.presets import ChannelPreset, apply_preset
from spectralcube.model.visualization import VisualizationConfig

logger = logging.getLogger(__name__)


class CubeCollection:
    """
    A set of FieldModels keyed by their unique id.
    """

    def __init__(self) -> None:
        self._cubes: Dict[str, FieldModel] = {}
        self._statuses: Dict[str, FractureStatus] = {}

    def __len__(self) -> int:
        return len(self._cubes)

    def __contains__(self, cube_id: object) -> bool:
        return cube_id in self._cubes

    def __iter__(self) -> Iterator[str]:
        return iter(self._cubes)

    # ========================================
    # Membership
    # ========================================

    def add(self, model: FieldModel) -> FieldModel:
        """
        Take ownership of ``model``.

        Raises:
            DuplicateCubeId: a cube with the same id is already owned.
            FieldValidationError: the model is structurally invalid.
        """
        if model.id in self._cubes:
            raise DuplicateCubeId(f"Cube id '{model.id}' is already in use.")
        validate(model)

        sync_current_energy(model)
        self._cubes[model.id] = model
        self._statuses[model.id] = compute_report(model).status
        logger.info(f"Added cube '{model.id}' (magical={model.is_magical}, energy={model.current_energy:.4g})")
        return model

    def create(self, cube_id: str) -> FieldModel:
        return self.add(create_default(cube_id))

    def create_random(
        self,
        cube_id: str,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> FieldModel:
        return self.add(randomize(cube_id, rng=rng, seed=seed))

    def get(self, cube_id: str) -> FieldModel:
        try:
            return self._cubes[cube_id]
        except KeyError:
            raise UnknownCubeId(f"No cube with id '{cube_id}'.") from None

    def remove(self, cube_id: str) -> FieldModel:
        model = self.get(cube_id)
        del self._cubes[cube_id]
        self._statuses.pop(cube_id, None)
        logger.info(f"Removed cube '{cube_id}'")
        return model

    def status(self, cube_id: str) -> FractureStatus:
        """Fracture status observed at the last tick or edit."""
        self.get(cube_id)
        return self._statuses[cube_id]

    # ========================================
    # Edits
    # ========================================

    def apply_preset(self, cube_id: str, preset: ChannelPreset | str) -> EnergyReport:
        model = self.get(cube_id)
        apply_preset(model, preset)
        sync_current_energy(model)
        return self._observe(model)

    def transfer(
        self,
        source_id: str,
        target_id: str,
        amount: float,
        options: Optional[TransferOptions] = None,
    ) -> EnergyTransferResult:
        source = self.get(source_id)
        target = self.get(target_id)
        result = apply_transfer(source, target, amount, options)
        self._observe(source)
        self._observe(target)
        return result

    # ========================================
    # Simulation
    # ========================================

    def tick(self, elapsed_seconds: float) -> Dict[str, EnergyReport]:
        """
        Advance decay of every magical cube by ``elapsed_seconds``.

        Returns:
            Fresh reports of the magical cubes, keyed by id.

        Raises:
            InvalidElapsedTime: elapsed_seconds is negative; no cube is touched.
        """
        if not elapsed_seconds >= 0:
            raise InvalidElapsedTime(f"elapsed_seconds must be >= 0, got {elapsed_seconds}")

        reports: Dict[str, EnergyReport] = {}
        for cube_id, model in self._cubes.items():
            if not model.is_magical:
                continue
            apply_decay(model, elapsed_seconds)
            reports[cube_id] = self._observe(model)
        return reports

    def reports(self) -> Dict[str, EnergyReport]:
        """Reports of the magical cubes without advancing time."""
        return {
            cube_id: compute_report(model)
            for cube_id, model in self._cubes.items()
            if model.is_magical
        }

    def uniforms(self, cube_id: str, config: VisualizationConfig) -> UniformBundle:
        return build_uniforms(self.get(cube_id), config)

    def _observe(self, model: FieldModel) -> EnergyReport:
        report = compute_report(model)
        previous = self._statuses.get(model.id)
        if previous is not None and previous != report.status:
            message = f"Cube '{model.id}' changed state {previous} -> {report.status} (stress {report.stress_level:.3f})"
            if report.status == FractureStatus.FRACTURED:
                logger.warning(message)
            else:
                logger.info(message)
        self._statuses[model.id] = report.status
        return report
