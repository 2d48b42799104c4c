"""
FFT Channel Presets
===================
Ready-made channel configurations for common visual effects.

Presets are stored in ``assets/fft_presets.json``. Each AC entry is addressed
by its integer frequency (fx, fy, fz) rather than by a grid position, so the
same preset fits any fft_size; frequencies wrap modulo fft_size.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Tuple

from spectralcube.config import DEFAULT_PRESETS_PATH, FFT_SIZES
from spectralcube.model.errors import InvalidRange, UnknownPreset
from spectralcube.model.field import Channel, ChannelField, Coefficient, FieldModel
from spectralcube.utils import ac_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresetCoefficient:
    amplitude: float
    phase: float
    freq: Tuple[int, int, int]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> PresetCoefficient:
        """
        Raises:
            InvalidRange: freq is not three integers, or it lands on the DC
                bin of a supported grid (every component a multiple of the
                smallest fft_size), or the amplitude/phase are not numbers.
        """
        freq = data.get("freq") if isinstance(data, dict) else None
        if (
            not isinstance(freq, (list, tuple))
            or len(freq) != 3
            or not all(isinstance(f, int) and not isinstance(f, bool) for f in freq)
        ):
            raise InvalidRange(f"Preset AC entry needs freq as three integers, got {freq!r}")
        if all(f % min(FFT_SIZES) == 0 for f in freq):
            raise InvalidRange(f"Preset frequency {tuple(freq)} is the DC bin, not an AC coefficient")

        coefficient = Coefficient.from_dict(data)
        return PresetCoefficient(
            amplitude=coefficient.amplitude,
            phase=coefficient.phase,
            freq=(freq[0], freq[1], freq[2]),
        )


@dataclass(frozen=True)
class PresetChannel:
    dc: Coefficient
    ac: Tuple[PresetCoefficient, ...] = ()

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> PresetChannel:
        return PresetChannel(
            dc=Coefficient.from_dict(data.get("dc", {})),
            ac=tuple(PresetCoefficient.from_dict(c) for c in data.get("ac", [])),
        )

    def to_channel_field(self, fft_size: int) -> ChannelField:
        """Lay the sparse entries onto a zeroed grid of side fft_size."""
        cf = ChannelField.zeros(fft_size)
        cf.dc = self.dc
        for entry in self.ac:
            index = ac_index(*entry.freq, fft_size)
            cf.set_coefficient(index, Coefficient(amplitude=entry.amplitude, phase=entry.phase))
        return cf


@dataclass(frozen=True)
class ChannelPreset:
    id: str
    name: str
    description: str = ""
    channels: Dict[Channel, PresetChannel] = field(default_factory=dict)

    @staticmethod
    def from_dict(preset_id: str, data: Dict[str, Any]) -> ChannelPreset:
        channels: Dict[Channel, PresetChannel] = {}
        for key, value in data.get("channels", {}).items():
            if key not in set(Channel):
                raise InvalidRange(f"Preset '{preset_id}': unknown channel {key!r}")
            channels[Channel(key)] = PresetChannel.from_dict(value)

        return ChannelPreset(
            id=preset_id,
            name=data.get("name", preset_id),
            description=data.get("description", ""),
            channels=channels,
        )


def load_presets(path: str = DEFAULT_PRESETS_PATH) -> Dict[str, ChannelPreset]:
    """
    Load the preset catalog from a JSON file.

    Args:
        path: Path to the JSON catalog.

    Returns:
        Presets keyed by their id, in file order.
    """
    logger.debug(f"Loading FFT channel presets from: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw: Dict[str, Any] = json.load(f)

    presets = {preset_id: ChannelPreset.from_dict(preset_id, data) for preset_id, data in raw.items()}
    logger.debug(f"Loaded {len(presets)} presets.")
    return presets


@lru_cache(maxsize=1)
def _default_presets() -> Dict[str, ChannelPreset]:
    return load_presets(DEFAULT_PRESETS_PATH)


def list_presets() -> List[ChannelPreset]:
    return list(_default_presets().values())


def get_preset(preset_id: str) -> ChannelPreset:
    """
    Raises:
        UnknownPreset: if no packaged preset has this id.
    """
    presets = _default_presets()
    if preset_id not in presets:
        raise UnknownPreset(f"Unknown preset '{preset_id}'. Available: {sorted(presets)}")
    return presets[preset_id]


def apply_preset(model: FieldModel, preset: ChannelPreset | str) -> FieldModel:
    """
    Replace every channel of ``model`` with the preset laid onto the model's grid.

    Channels the preset does not mention are zeroed. ``current_energy`` is
    stale afterwards; the caller syncs it through the engine.
    """
    if isinstance(preset, str):
        preset = get_preset(preset)

    for channel in Channel:
        preset_channel = preset.channels.get(channel)
        if preset_channel is None:
            model.channels[channel] = ChannelField.zeros(model.fft_size)
        else:
            model.channels[channel] = preset_channel.to_channel_field(model.fft_size)

    logger.info(f"Applied preset '{preset.id}' to cube '{model.id}'")
    return model
