"""
Energy Engine
=============
Pure derivations over a FieldModel snapshot.

Why is this package needed?
---------------------------
1. Physics: total energy (Parseval sum), stress and fracture state.
2. Time-Stepping: coherence decay over elapsed wall-clock time.
3. Rendering hand-off: the numeric uniform bundle a renderer binds.

Only apply_decay, sync_current_energy and apply_transfer mutate the model
they are given; everything else is side-effect free.
Note: This package should be pure Python/NumPy and must not import the controller.
"""
