"""
Spectral Cube Energy Engine
===========================
Energy and structural-stress simulation for "magical" (FFT-backed) cubes.

Packages:
    model      - Pure data structures (field, physics, visualization config)
    engine     - Energy, fracture, decay, transfer and uniform derivation
    controller - Host-side orchestration of a collection of cubes
"""
import logging

# Library logging: silent unless the host (or setup_logging) adds a handler
logging.getLogger(__name__).addHandler(logging.NullHandler())
