"""Error taxonomy shared by the numeric core and the training controller."""

from __future__ import annotations


class NeuroPlayError(Exception):
    """Base class for all errors raised by :mod:`neuroplay`."""


class DimensionMismatch(NeuroPlayError, ValueError):
    """Two matrices have shapes that cannot be combined."""


class InvalidDimension(NeuroPlayError, ValueError):
    """A matrix or layer was requested with an unusable size."""


class LengthMismatch(NeuroPlayError, ValueError):
    """An input or target vector does not match the configured node count."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"{what} length {actual} does not match expected {expected}")
        self.what = what
        self.expected = expected
        self.actual = actual


class EmptyTrainingSet(NeuroPlayError, ValueError):
    """The training controller was invoked without any samples."""


__all__ = [
    "NeuroPlayError",
    "DimensionMismatch",
    "InvalidDimension",
    "LengthMismatch",
    "EmptyTrainingSet",
]
