"""
Field Model (Data Model)
========================
This module defines the frequency-domain representation of a magical cube.

Why is this file needed?
------------------------
1. State: it holds the per-channel DC/AC coefficients, the material physics
   and the cached energy of one cube in a single object.
2. Validation: hosts load cubes from their own storage; ``validate`` is the
   gate every deserialized value must pass before the engine sees it.
3. Construction: default and random cubes are built here so that every
   constructor produces the same shape (4 channels, fft_size³ − 1 AC bins).

Classes:
    Channel: The four independent fields (R, G, B, A).
    Coefficient: One complex frequency sample (amplitude + phase).
    ChannelField: DC coefficient plus the flattened AC grid of one channel.
    FieldPhysics: Material and decay/fracture parameters.
    FieldModel: The main container class.
"""
from __future__ import annotations

import cmath
import logging
import math
import numbers
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, NoReturn, Optional, Sequence, TYPE_CHECKING

import numpy as np

from spectralcube.config import (
    COHERENCE_LOSS_MAX,
    DEFAULT_COHERENCE_LOSS,
    DEFAULT_DC_AMPLITUDE,
    DEFAULT_DENSITY,
    DEFAULT_ENERGY_CAPACITY,
    DEFAULT_FFT_SIZE,
    DEFAULT_FRACTURE_THRESHOLD,
    FFT_SIZES,
    PHASE_LIMIT,
    RANDOM_FILL_RATIO,
)
from spectralcube.model.errors import (
    FieldValidationError,
    InvalidChannelLength,
    InvalidFFTSize,
    InvalidRange,
)
from spectralcube.utils import ac_length

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Phases read back from storage may carry float noise around +-pi
_PHASE_TOLERANCE = 1e-9


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class Channel(StrEnum):
    R = "R"
    G = "G"
    B = "B"
    A = "A"

    @property
    def mask(self) -> int:
        """Bit of this channel in a channel mask (R=1, G=2, B=4, A=8)."""
        return 1 << list(Channel).index(self)


class MaterialType(StrEnum):
    STONE = "stone"
    WOOD = "wood"
    METAL = "metal"
    GLASS = "glass"
    ORGANIC = "organic"
    CRYSTAL = "crystal"
    LIQUID = "liquid"


class BreakPattern(StrEnum):
    """How the material breaks when destroyed."""
    CRUMBLE = "crumble"
    SHATTER = "shatter"
    SPLINTER = "splinter"
    MELT = "melt"
    DISSOLVE = "dissolve"


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class Coefficient:
    """
    One frequency-domain sample of a channel.
    """
    amplitude: float = 0.0
    phase: float = 0.0

    @property
    def energy(self) -> float:
        return self.amplitude * self.amplitude

    def to_complex(self) -> complex:
        return cmath.rect(self.amplitude, self.phase)

    @staticmethod
    def from_complex(value: complex) -> Coefficient:
        amplitude, phase = cmath.polar(value)
        return Coefficient(amplitude=amplitude, phase=phase)

    def to_dict(self) -> Dict[str, float]:
        return {"amplitude": self.amplitude, "phase": self.phase}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Coefficient:
        data = _mapping(data, "coefficient", InvalidRange)
        return Coefficient(
            amplitude=_number(data, "amplitude", 0.0),
            phase=_number(data, "phase", 0.0),
        )


@dataclass(eq=False)
class ChannelField:
    """
    The frequency-domain field of one channel.

    The AC coefficients are the flattened (C order) fft_size³ grid with the
    DC bin at grid index 0 removed. They are stored as two parallel arrays
    instead of Coefficient objects; a 32³ grid holds 32767 entries per channel.
    """
    dc: Coefficient
    ac_amplitudes: npt.NDArray[np.float64]
    ac_phases: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        self.ac_amplitudes = np.array(self.ac_amplitudes, dtype=np.float64)
        self.ac_phases = np.array(self.ac_phases, dtype=np.float64)

    def __len__(self) -> int:
        """Number of AC coefficients."""
        return int(self.ac_amplitudes.size)

    @staticmethod
    def zeros(fft_size: int, dc_amplitude: float = 0.0) -> ChannelField:
        n = ac_length(fft_size)
        return ChannelField(
            dc=Coefficient(amplitude=dc_amplitude, phase=0.0),
            ac_amplitudes=np.zeros(n, dtype=np.float64),
            ac_phases=np.zeros(n, dtype=np.float64),
        )

    @staticmethod
    def from_coefficients(dc: Coefficient, ac: Sequence[Coefficient]) -> ChannelField:
        return ChannelField(
            dc=dc,
            ac_amplitudes=np.fromiter((c.amplitude for c in ac), dtype=np.float64, count=len(ac)),
            ac_phases=np.fromiter((c.phase for c in ac), dtype=np.float64, count=len(ac)),
        )

    @property
    def ac(self) -> tuple[Coefficient, ...]:
        """AC coefficients as Coefficient objects (allocates; prefer the arrays in hot paths)."""
        return tuple(
            Coefficient(amplitude=float(a), phase=float(p))
            for a, p in zip(self.ac_amplitudes, self.ac_phases)
        )

    def coefficient(self, index: int) -> Coefficient:
        """AC coefficient at position ``index`` of the flattened sequence."""
        return Coefficient(
            amplitude=float(self.ac_amplitudes[index]),
            phase=float(self.ac_phases[index]),
        )

    def set_coefficient(self, index: int, coefficient: Coefficient) -> None:
        self.ac_amplitudes[index] = coefficient.amplitude
        self.ac_phases[index] = coefficient.phase

    def phases(self) -> npt.NDArray[np.float64]:
        """Phase of every grid bin: the DC phase followed by the AC phases."""
        return np.concatenate(([self.dc.phase], self.ac_phases))

    def scale(self, factor: float, include_dc: bool = True) -> None:
        """Multiply amplitudes in place; phases are left untouched."""
        self.ac_amplitudes *= factor
        if include_dc:
            self.dc = Coefficient(amplitude=self.dc.amplitude * factor, phase=self.dc.phase)

    def copy(self) -> ChannelField:
        # __post_init__ copies the arrays
        return ChannelField(dc=self.dc, ac_amplitudes=self.ac_amplitudes, ac_phases=self.ac_phases)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dc": self.dc.to_dict(),
            "ac_amplitudes": self.ac_amplitudes.tolist(),
            "ac_phases": self.ac_phases.tolist(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ChannelField:
        data = _mapping(data, "channel", InvalidChannelLength)
        return ChannelField(
            dc=Coefficient.from_dict(data.get("dc", {})),
            ac_amplitudes=_numeric_array(data, "ac_amplitudes"),
            ac_phases=_numeric_array(data, "ac_phases"),
        )


@dataclass
class FieldPhysics:
    """
    Material parameters driving decay and fracture.
    fracture_threshold == 0 disables fracturing.
    """
    material: MaterialType = MaterialType.STONE
    density: float = DEFAULT_DENSITY
    break_pattern: BreakPattern = BreakPattern.CRUMBLE
    coherence_loss: float = DEFAULT_COHERENCE_LOSS
    fracture_threshold: float = DEFAULT_FRACTURE_THRESHOLD

    @property
    def fracture_enabled(self) -> bool:
        return self.fracture_threshold > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "material": self.material.value,
            "density": self.density,
            "break_pattern": self.break_pattern.value,
            "coherence_loss": self.coherence_loss,
            "fracture_threshold": self.fracture_threshold,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> FieldPhysics:
        data = _mapping(data, "physics", InvalidRange)
        try:
            material = MaterialType(data.get("material", MaterialType.STONE))
            break_pattern = BreakPattern(data.get("break_pattern", BreakPattern.CRUMBLE))
        except (TypeError, ValueError) as e:
            _reject(InvalidRange, str(e))

        return FieldPhysics(
            material=material,
            density=_number(data, "density", DEFAULT_DENSITY),
            break_pattern=break_pattern,
            coherence_loss=_number(data, "coherence_loss", DEFAULT_COHERENCE_LOSS),
            fracture_threshold=_number(data, "fracture_threshold", DEFAULT_FRACTURE_THRESHOLD),
        )


@dataclass(eq=False)
class FieldModel:
    """
    Frequency-domain state of one cube.

    ``id`` and ``fft_size`` are fixed at creation. ``current_energy`` is a
    cache of the engine's total energy; after editing ``channels`` treat it as
    stale until ``sync_current_energy`` runs.
    """
    id: str
    fft_size: int = DEFAULT_FFT_SIZE
    channels: Dict[Channel, ChannelField] = field(default_factory=dict)
    energy_capacity: float = DEFAULT_ENERGY_CAPACITY
    current_energy: float = 0.0
    physics: FieldPhysics = field(default_factory=FieldPhysics)
    is_magical: bool = True

    def __post_init__(self) -> None:
        if not self.channels:
            self.channels = {ch: ChannelField.zeros(self.fft_size) for ch in Channel}
        else:
            channels = {}
            for key, value in self.channels.items():
                try:
                    channels[Channel(key)] = value
                except ValueError:
                    _reject(InvalidChannelLength, f"Unknown channel {key!r}; expected one of R, G, B, A")
            self.channels = channels

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("id", "fft_size") and name in self.__dict__:
            raise AttributeError(f"'{name}' is fixed at creation and cannot be reassigned")
        super().__setattr__(name, value)

    def __getitem__(self, channel: Channel | str) -> ChannelField:
        return self.channels[Channel(channel)]

    def copy(self, new_id: Optional[str] = None) -> FieldModel:
        """Deep copy with independent coefficient arrays."""
        return FieldModel(
            id=self.id if new_id is None else new_id,
            fft_size=self.fft_size,
            channels={ch: cf.copy() for ch, cf in self.channels.items()},
            energy_capacity=self.energy_capacity,
            current_energy=self.current_energy,
            physics=FieldPhysics(**vars(self.physics)),
            is_magical=self.is_magical,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fft_size": self.fft_size,
            "channels": {ch.value: cf.to_dict() for ch, cf in self.channels.items()},
            "energy_capacity": self.energy_capacity,
            "current_energy": self.current_energy,
            "physics": self.physics.to_dict(),
            "is_magical": self.is_magical,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> FieldModel:
        """
        Build a FieldModel from a plain dict (e.g. a deserialized preset).

        Raises:
            FieldValidationError: if the data does not describe a valid model.
        """
        data = _mapping(data, "field model", FieldValidationError)

        # 1. Identity and grid size
        cube_id = data.get("id")
        if not isinstance(cube_id, str):
            _reject(FieldValidationError, f"id must be a string, got {cube_id!r}")

        raw_size = data.get("fft_size", DEFAULT_FFT_SIZE)
        if not _is_number(raw_size) or not float(raw_size).is_integer():
            _reject(InvalidFFTSize, f"fft_size must be an integer, got {raw_size!r}")
        fft_size = int(raw_size)

        # 2. Channels
        raw_channels = _mapping(data.get("channels", {}), "channels", InvalidChannelLength)
        if set(raw_channels) != {ch.value for ch in Channel}:
            _reject(
                InvalidChannelLength,
                f"Expected channels {[ch.value for ch in Channel]}, got {sorted(map(str, raw_channels))}"
            )

        # 3. Scalars
        is_magical = data.get("is_magical", True)
        if not isinstance(is_magical, bool):
            _reject(FieldValidationError, f"is_magical must be a bool, got {is_magical!r}")

        model = FieldModel(
            id=cube_id,
            fft_size=fft_size,
            channels={Channel(key): ChannelField.from_dict(value) for key, value in raw_channels.items()},
            energy_capacity=_number(data, "energy_capacity", DEFAULT_ENERGY_CAPACITY),
            current_energy=_number(data, "current_energy", 0.0),
            physics=FieldPhysics.from_dict(data.get("physics", {})),
            is_magical=is_magical,
        )
        validate(model)
        return model


# ------------------------------------------------------------------------------
# Constructors
# ------------------------------------------------------------------------------
def create_default(id: str) -> FieldModel:
    """
    Default magical cube: every channel holds only a nominal DC amplitude,
    so the total energy is a small positive baseline (4 x 1.0²).
    """
    channels = {ch: ChannelField.zeros(DEFAULT_FFT_SIZE, DEFAULT_DC_AMPLITUDE) for ch in Channel}
    return FieldModel(
        id=id,
        fft_size=DEFAULT_FFT_SIZE,
        channels=channels,
        energy_capacity=DEFAULT_ENERGY_CAPACITY,
        current_energy=len(Channel) * DEFAULT_DC_AMPLITUDE ** 2,
        physics=FieldPhysics(),
        is_magical=True,
    )


def randomize(
    id: str,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    fft_size: int = DEFAULT_FFT_SIZE,
    energy_capacity: float = DEFAULT_ENERGY_CAPACITY,
) -> FieldModel:
    """
    Random cube with the default shape.

    Amplitudes are drawn uniformly from [0, energy_capacity] and rescaled so
    the expected total energy is RANDOM_FILL_RATIO * energy_capacity. With
    thousands of bins per channel the spread around that mean is tiny, so the
    cube stays under capacity with high probability. Phases are uniform in
    [-pi, pi].

    Args:
        id: Identifier of the new cube.
        rng: Random source; takes precedence over ``seed``.
        seed: Seed for a fresh generator when ``rng`` is not given.
        fft_size: Grid side, one of FFT_SIZES.
        energy_capacity: Capacity of the new cube (> 0).

    Raises:
        InvalidFFTSize: if fft_size is not supported.
        InvalidRange: if energy_capacity <= 0.
    """
    if fft_size not in FFT_SIZES:
        _reject(InvalidFFTSize, f"fft_size must be one of {FFT_SIZES}, got {fft_size}")
    if not energy_capacity > 0:
        _reject(InvalidRange, f"energy_capacity must be > 0, got {energy_capacity}")

    if rng is None:
        rng = np.random.default_rng(seed)

    n_channels = len(Channel)
    n_bins = fft_size ** 3

    raw = rng.uniform(0.0, energy_capacity, size=(n_channels, n_bins))
    phases = rng.uniform(-PHASE_LIMIT, PHASE_LIMIT, size=(n_channels, n_bins))

    # E[u²] = c²/3 for u ~ U[0, c]
    expected_energy = n_channels * n_bins * energy_capacity ** 2 / 3.0
    amplitudes = raw * math.sqrt(RANDOM_FILL_RATIO * energy_capacity / expected_energy)

    channels = {
        ch: ChannelField(
            dc=Coefficient(amplitude=float(amplitudes[i, 0]), phase=float(phases[i, 0])),
            ac_amplitudes=amplitudes[i, 1:],
            ac_phases=phases[i, 1:],
        )
        for i, ch in enumerate(Channel)
    }

    model = FieldModel(
        id=id,
        fft_size=fft_size,
        channels=channels,
        energy_capacity=energy_capacity,
        current_energy=float(np.sum(amplitudes * amplitudes)),
        physics=FieldPhysics(),
        is_magical=True,
    )
    logger.debug(f"Randomized cube '{id}' (fft_size={fft_size}, energy={model.current_energy:.3f})")
    return model


# ------------------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------------------
def _reject(error: type[FieldValidationError], message: str) -> NoReturn:
    logger.warning(f"Validation failed ({error.__name__}): {message}")
    raise error(message)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid amplitude, size or rate
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _mapping(value: Any, what: str, error: type[FieldValidationError]) -> Dict[str, Any]:
    if not isinstance(value, dict):
        _reject(error, f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _number(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if not _is_number(value):
        _reject(InvalidRange, f"{key} must be a number, got {value!r}")
    return float(value)


def _numeric_array(data: Dict[str, Any], key: str) -> npt.NDArray[np.float64]:
    try:
        values = np.asarray(data.get(key, []))
    except ValueError as e:
        _reject(InvalidChannelLength, f"{key} is not a flat sequence: {e}")
    if values.size and values.dtype.kind not in "iuf":
        _reject(InvalidRange, f"{key} must hold numbers only")
    return values.astype(np.float64)


def _check_channel(channel: Channel, cf: ChannelField, expected_length: int) -> None:
    if cf.ac_amplitudes.ndim != 1 or cf.ac_amplitudes.size != expected_length:
        _reject(
            InvalidChannelLength,
            f"Channel {channel}: expected {expected_length} AC coefficients, got {cf.ac_amplitudes.size}"
        )
    if cf.ac_phases.shape != cf.ac_amplitudes.shape:
        _reject(
            InvalidChannelLength,
            f"Channel {channel}: {cf.ac_phases.size} phases for {cf.ac_amplitudes.size} amplitudes"
        )

    if not (math.isfinite(cf.dc.amplitude) and cf.dc.amplitude >= 0):
        _reject(InvalidRange, f"Channel {channel}: DC amplitude must be finite and >= 0, got {cf.dc.amplitude}")
    if not (math.isfinite(cf.dc.phase) and abs(cf.dc.phase) <= PHASE_LIMIT + _PHASE_TOLERANCE):
        _reject(InvalidRange, f"Channel {channel}: DC phase must lie in [-pi, pi], got {cf.dc.phase}")

    if not np.all(np.isfinite(cf.ac_amplitudes)) or np.any(cf.ac_amplitudes < 0):
        _reject(InvalidRange, f"Channel {channel}: AC amplitudes must be finite and >= 0")
    if not np.all(np.abs(cf.ac_phases) <= PHASE_LIMIT + _PHASE_TOLERANCE):
        _reject(InvalidRange, f"Channel {channel}: AC phases must lie in [-pi, pi]")


def validate(model: FieldModel) -> None:
    """
    Check the structural invariants of a FieldModel.

    Raises:
        InvalidFFTSize: fft_size is not one of FFT_SIZES.
        InvalidChannelLength: a channel is missing/unknown or its AC sequence
            length differs from fft_size³ − 1.
        InvalidRange: a scalar or coefficient is out of its allowed range.
    """
    if model.fft_size not in FFT_SIZES:
        _reject(InvalidFFTSize, f"fft_size must be one of {FFT_SIZES}, got {model.fft_size}")

    if set(model.channels) != set(Channel):
        _reject(
            InvalidChannelLength,
            f"Expected channels {[ch.value for ch in Channel]}, got {sorted(str(k) for k in model.channels)}"
        )

    expected_length = ac_length(model.fft_size)
    for channel, cf in model.channels.items():
        _check_channel(channel, cf, expected_length)

    if not (math.isfinite(model.energy_capacity) and model.energy_capacity > 0):
        _reject(InvalidRange, f"energy_capacity must be > 0, got {model.energy_capacity}")
    if not (math.isfinite(model.current_energy) and model.current_energy >= 0):
        _reject(InvalidRange, f"current_energy must be >= 0, got {model.current_energy}")

    physics = model.physics
    if not (math.isfinite(physics.density) and physics.density > 0):
        _reject(InvalidRange, f"density must be > 0, got {physics.density}")
    if not 0.0 <= physics.coherence_loss <= COHERENCE_LOSS_MAX:
        _reject(InvalidRange, f"coherence_loss must lie in [0, {COHERENCE_LOSS_MAX}], got {physics.coherence_loss}")
    if not (math.isfinite(physics.fracture_threshold) and physics.fracture_threshold >= 0):
        _reject(InvalidRange, f"fracture_threshold must be >= 0, got {physics.fracture_threshold}")
