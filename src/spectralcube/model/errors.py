"""
Error Taxonomy
==============
Typed failures raised by the model and the engine.

All kinds derive from ValueError so hosts that already guard user input with
``except ValueError`` keep working; catch the specific subclass to react to a
particular failure.
"""


class FieldValidationError(ValueError):
    """A FieldModel (or a value destined for one) is structurally invalid."""


class InvalidFFTSize(FieldValidationError):
    """fft_size is not one of the supported grid sizes."""


class InvalidChannelLength(FieldValidationError):
    """A channel is missing, or its AC sequence does not match fft_size³ − 1."""


class InvalidRange(FieldValidationError):
    """A scalar parameter lies outside its allowed range."""


class InvalidElapsedTime(ValueError):
    """A decay step was requested with a negative (or otherwise unusable) duration."""


class UnknownPreset(KeyError):
    pass


class DuplicateCubeId(ValueError):
    pass


class UnknownCubeId(KeyError):
    pass
