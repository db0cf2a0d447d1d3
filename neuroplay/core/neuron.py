"""Single sigmoid unit trained by online gradient steps."""

from __future__ import annotations

from typing import Dict, List

import numpy as np

from .activations import dsigmoid, sigmoid
from .errors import LengthMismatch
from .matrix import Matrix
from .types import ModelDescription, Target, UnitConfig, Vector, _as_floats, _check_rate


class SingleUnit:
    """One neuron with a ``[input_size, 1]`` weight column and a scalar bias."""

    def __init__(
        self,
        input_size: int,
        learning_rate: float = 0.1,
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = UnitConfig(input_size=input_size, learning_rate=learning_rate)
        self.learning_rate = self.config.learning_rate
        rng = rng if rng is not None else np.random.default_rng(seed)
        self.weights = Matrix(self.config.input_size, 1).randomize(rng)
        self.bias = float(rng.uniform(-1.0, 1.0))

    @classmethod
    def from_config(cls, config: UnitConfig, *, seed: int | None = None) -> "SingleUnit":
        return cls(config.input_size, config.learning_rate, seed=seed)

    @property
    def input_size(self) -> int:
        return self.weights.rows

    def _check_inputs(self, inputs: Vector) -> List[float]:
        values = list(_as_floats(inputs))
        if len(values) != self.weights.rows:
            raise LengthMismatch("inputs", self.weights.rows, len(values))
        return values

    def feedforward(self, inputs: Vector) -> float:
        """Return ``sigmoid(w^T x + b)`` without touching the parameters."""

        values = self._check_inputs(inputs)
        column = Matrix.from_vector(values)
        weighted = Matrix.multiply(Matrix.transpose(self.weights), column)
        return sigmoid(float(weighted.data[0, 0]) + self.bias)

    def predict(self, inputs: Vector) -> List[float]:
        return [self.feedforward(inputs)]

    def train(self, inputs: Vector, target: Target) -> float:
        """Apply one online update towards ``target`` and return ``|error|``."""

        values = self._check_inputs(inputs)
        targets = _as_floats(target)
        if len(targets) != 1:
            raise LengthMismatch("target", 1, len(targets))

        prediction = self.feedforward(values)
        error = targets[0] - prediction
        delta = error * dsigmoid(prediction)
        step = self.learning_rate * delta
        for i, x in enumerate(values):
            self.weights.data[i, 0] += step * x
        self.bias += step
        return abs(error)

    def set_learning_rate(self, rate: float) -> None:
        self.learning_rate = _check_rate(rate)

    def describe(self) -> ModelDescription:
        return ModelDescription(layer_dims=[self.input_size, 1])

    def state_dict(self) -> Dict[str, np.ndarray]:
        """In-memory snapshot of the parameters."""

        return {"weights": self.weights.data.copy(), "bias": np.array([self.bias])}

    def parameter_count(self) -> int:
        return self.input_size + 1

    def __repr__(self) -> str:
        return f"SingleUnit(input_size={self.input_size}, learning_rate={self.learning_rate})"


__all__ = ["SingleUnit"]
