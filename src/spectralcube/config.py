"""
Configuration & Constants
=========================
This module serves as the central registry for resource paths and global
constants of the energy engine.

Why is this file needed?
------------------------
1. Single source of truth: default physics values, valid FFT sizes and the
   visualization ranges are shared by the model, the engine and the tests.
2. Deployment: it resolves packaged assets (preset JSON) both in a regular
   install and inside a frozen bundle (sys._MEIPASS).

Exports:
    ASSETS_PATH (str): Absolute path to the packaged assets directory.
    DEFAULT_PRESETS_PATH (str): Absolute path to the channel presets file.
"""
import math
import os
import sys
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to a packaged resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, "spectralcube", relative_path)

    # config.py is in src/spectralcube/
    package_root: Path = Path(__file__).parent
    return os.path.join(str(package_root), relative_path)


# Resource paths
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_PRESETS_PATH: str = os.path.join(ASSETS_PATH, "fft_presets.json")

# FFT grid
FFT_SIZES: tuple[int, ...] = (8, 16, 32)
DEFAULT_FFT_SIZE: int = 16

# Energy
DEFAULT_ENERGY_CAPACITY: float = 100.0
DEFAULT_DC_AMPLITUDE: float = 1.0
RANDOM_FILL_RATIO: float = 0.5  # expected share of capacity filled by randomize()

# Physics defaults
DEFAULT_DENSITY: float = 2.0
DEFAULT_COHERENCE_LOSS: float = 0.01
DEFAULT_FRACTURE_THRESHOLD: float = 100.0
COHERENCE_LOSS_MAX: float = 0.1

# Fracture state machine
NEAR_FRACTURE_RATIO: float = 0.8
FRACTURE_RATIO: float = 1.0

# Visualization
ENERGY_SCALE_RANGE: tuple[float, float] = (0.1, 3.0)
GLOW_INTENSITY_RANGE: tuple[float, float] = (0.0, 2.0)
DEFAULT_ENERGY_SCALE: float = 1.0
DEFAULT_GLOW_INTENSITY: float = 0.5

PHASE_LIMIT: float = math.pi
