"""Small numeric helpers shared by the model and the engine."""
from __future__ import annotations

import math

TWO_PI = 2.0 * math.pi


def wrap_phase(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi]."""
    return math.remainder(angle, TWO_PI)


def ac_length(fft_size: int) -> int:
    """Number of AC coefficients of one channel (the full grid minus the DC bin)."""
    return fft_size ** 3 - 1


def grid_index(fx: int, fy: int, fz: int, fft_size: int) -> int:
    """
    Flattened (C order) grid index of frequency (fx, fy, fz).

    Negative or too-large frequencies wrap modulo fft_size, the same way an
    FFT stores negative frequencies in the upper half of each axis.
    """
    fx %= fft_size
    fy %= fft_size
    fz %= fft_size
    return (fx * fft_size + fy) * fft_size + fz


def ac_index(fx: int, fy: int, fz: int, fft_size: int) -> int:
    """
    Position of frequency (fx, fy, fz) in a channel's AC sequence.

    Raises:
        ValueError: if the frequency lands on the DC bin.
    """
    index = grid_index(fx, fy, fz, fft_size)
    if index == 0:
        raise ValueError(f"Frequency ({fx}, {fy}, {fz}) is the DC bin, not an AC coefficient.")
    return index - 1
