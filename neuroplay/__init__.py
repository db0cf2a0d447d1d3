"""neuroplay public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import (
    DimensionMismatch,
    EmptyTrainingSet,
    InvalidDimension,
    LengthMismatch,
    NeuroPlayError,
)
from .core.matrix import Matrix
from .core.network import FeedForwardNetwork
from .core.neuron import SingleUnit
from .core.types import NetworkConfig, Sample, UnitConfig
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, run_training

__all__ = [
    "DimensionMismatch",
    "EmptyTrainingSet",
    "FeedForwardNetwork",
    "InvalidDimension",
    "LengthMismatch",
    "Matrix",
    "NetworkConfig",
    "NeuroPlayError",
    "Sample",
    "SingleUnit",
    "Trainer",
    "UnitConfig",
    "activations",
    "load_preset",
    "presets",
    "run_pipeline",
    "run_training",
    "types",
]
