"""
Visualization Settings
======================
UI-facing configuration of how a cube's energy is shown. It is not
persisted with the cube; the editor keeps one instance per view.
"""
from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from enum import IntFlag, StrEnum
from typing import Any, Dict, List

from spectralcube.config import (
    DEFAULT_ENERGY_SCALE,
    DEFAULT_GLOW_INTENSITY,
    ENERGY_SCALE_RANGE,
    GLOW_INTENSITY_RANGE,
)
from spectralcube.model.errors import InvalidRange
from spectralcube.model.field import Channel

logger = logging.getLogger(__name__)


class VisualizationMode(StrEnum):
    ENERGY = "energy"        # E = |psi|²
    AMPLITUDE = "amplitude"  # sqrt(E), softer gradient
    PHASE = "phase"          # wave phase angles

    @property
    def code(self) -> int:
        """Stable integer handed to the renderer (energy=0, amplitude=1, phase=2)."""
        return _MODE_CODES[self]


_MODE_CODES: Dict[VisualizationMode, int] = {
    VisualizationMode.ENERGY: 0,
    VisualizationMode.AMPLITUDE: 1,
    VisualizationMode.PHASE: 2,
}


class ChannelMask(IntFlag):
    R = 1
    G = 2
    B = 4
    A = 8
    RGBA = R | G | B | A

    @staticmethod
    def of(*channels: Channel | str) -> ChannelMask:
        mask = ChannelMask(0)
        for channel in channels:
            mask |= ChannelMask[Channel(channel).value]
        return mask


def is_channel_enabled(mask: int, channel: Channel | str) -> bool:
    return bool(mask & Channel(channel).mask)


def toggle_channel(mask: int, channel: Channel | str) -> int:
    return mask ^ Channel(channel).mask


def enabled_channels(mask: int) -> List[Channel]:
    return [ch for ch in Channel if mask & ch.mask]


@dataclass(frozen=True)
class VisualizationConfig:
    """
    Visualization settings.

    Values are checked on construction, so every config the engine receives
    is already within range.

    Raises:
        InvalidRange: channel_mask is not an integer in 0..15, energy_scale
            is outside [0.1, 3.0] or glow_intensity outside [0.0, 2.0].
    """
    mode: VisualizationMode = VisualizationMode.ENERGY
    channel_mask: int = int(ChannelMask.RGBA)
    energy_scale: float = DEFAULT_ENERGY_SCALE
    glow_intensity: float = DEFAULT_GLOW_INTENSITY

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "mode", VisualizationMode(self.mode))
        except (TypeError, ValueError) as e:
            raise InvalidRange(str(e)) from e

        mask = self.channel_mask
        if isinstance(mask, bool) or not isinstance(mask, numbers.Integral):
            raise InvalidRange(f"channel_mask must be an integer, got {mask!r}")
        if not 0 <= mask <= int(ChannelMask.RGBA):
            raise InvalidRange(f"channel_mask must lie in [0, 15], got {mask}")
        object.__setattr__(self, "channel_mask", int(mask))

        for name in ("energy_scale", "glow_intensity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidRange(f"{name} must be a number, got {value!r}")

        lo, hi = ENERGY_SCALE_RANGE
        if not lo <= self.energy_scale <= hi:
            raise InvalidRange(f"energy_scale must lie in [{lo}, {hi}], got {self.energy_scale}")

        lo, hi = GLOW_INTENSITY_RANGE
        if not lo <= self.glow_intensity <= hi:
            raise InvalidRange(f"glow_intensity must lie in [{lo}, {hi}], got {self.glow_intensity}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "channel_mask": int(self.channel_mask),
            "energy_scale": self.energy_scale,
            "glow_intensity": self.glow_intensity,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> VisualizationConfig:
        return VisualizationConfig(
            mode=data.get("mode", VisualizationMode.ENERGY),
            channel_mask=data.get("channel_mask", int(ChannelMask.RGBA)),
            energy_scale=data.get("energy_scale", DEFAULT_ENERGY_SCALE),
            glow_intensity=data.get("glow_intensity", DEFAULT_GLOW_INTENSITY),
        )
