"""Core typing contracts for neuroplay."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Protocol, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidDimension

Array = np.ndarray
Vector = Sequence[float]
Target = Union[float, Sequence[float]]


def _as_floats(values: Target) -> Tuple[float, ...]:
    if isinstance(values, (int, float, np.floating, np.integer)):
        return (float(values),)
    return tuple(float(v) for v in values)


def _check_count(name: str, value: int) -> int:
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise InvalidDimension(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def _check_rate(value: float) -> float:
    rate = float(value)
    if not math.isfinite(rate) or rate <= 0.0:
        raise ValueError(f"learning_rate must be finite and positive, got {value!r}")
    return rate


@dataclass(frozen=True)
class Sample:
    """A labelled feature vector.

    ``target`` accepts a scalar for single-output learners and is always
    stored as a tuple.
    """

    inputs: Tuple[float, ...]
    target: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", _as_floats(self.inputs))
        object.__setattr__(self, "target", _as_floats(self.target))

    @property
    def label(self) -> int:
        """Class label of the first target component (``> 0.5`` is positive)."""

        return int(self.target[0] > 0.5)


@dataclass(frozen=True)
class ModelDescription:
    """Description of a learner's layer topology."""

    layer_dims: List[int]


@dataclass(frozen=True)
class UnitConfig:
    """Validated construction parameters for :class:`~neuroplay.core.neuron.SingleUnit`."""

    input_size: int
    learning_rate: float = 0.1

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_size", _check_count("input_size", self.input_size))
        object.__setattr__(self, "learning_rate", _check_rate(self.learning_rate))


@dataclass(frozen=True)
class NetworkConfig:
    """Validated topology of a one-hidden-layer network."""

    input_nodes: int
    hidden_nodes: int
    output_nodes: int
    learning_rate: float = 0.1
    legacy_order: bool = False

    def __post_init__(self) -> None:
        for name in ("input_nodes", "hidden_nodes", "output_nodes"):
            object.__setattr__(self, name, _check_count(name, getattr(self, name)))
        object.__setattr__(self, "learning_rate", _check_rate(self.learning_rate))

    @property
    def layer_dims(self) -> List[int]:
        return [self.input_nodes, self.hidden_nodes, self.output_nodes]


class Learner(Protocol):
    """Protocol implemented by both learners driven by the trainer."""

    learning_rate: float

    def predict(self, inputs: Vector) -> List[float]:
        """Return the learner's outputs without mutating it."""

    def train(self, inputs: Vector, target: Target) -> float:
        """Apply one online update and return the per-sample loss."""

    def describe(self) -> ModelDescription:
        """Return the learner's layer topology."""

    def parameter_count(self) -> int:
        """Return the number of trainable scalars."""


class TrainerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class EvalResult:
    """Held-out evaluation captured after an epoch."""

    epoch: int
    accuracy: float
    mae: float
    samples: int


@dataclass(frozen=True)
class EpochResult:
    """Outcome of a single training epoch."""

    epoch: int
    loss: float
    evaluation: EvalResult | None = None

    def metrics(self) -> Dict[str, float]:
        """Flatten the epoch into ``loss`` plus any held-out metrics."""

        out = {"loss": self.loss}
        if self.evaluation is not None:
            out["accuracy"] = self.evaluation.accuracy
            out["mae"] = self.evaluation.mae
        return out


@dataclass
class TrainingSession:
    """Mutable state of one training invocation."""

    epochs: int
    epoch_index: int = 0
    error_history: List[float] = field(default_factory=list)
    eval_history: List[EvalResult] = field(default_factory=list)
    state: TrainerState = TrainerState.IDLE

    @property
    def completed(self) -> bool:
        return self.state is TrainerState.COMPLETED

    @property
    def last_evaluation(self) -> EvalResult | None:
        return self.eval_history[-1] if self.eval_history else None


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`neuroplay.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    error_history: Tuple[float, ...] = ()
    completed: bool = True
