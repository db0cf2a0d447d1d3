"""Input → hidden → output sigmoid network trained by online backpropagation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping

import numpy as np

from .activations import dsigmoid, sigmoid
from .errors import LengthMismatch
from .matrix import Matrix
from .types import ModelDescription, NetworkConfig, Target, Vector, _as_floats, _check_rate


def _sigmoid(value: float, i: int, j: int) -> float:
    return sigmoid(value)


def _dsigmoid(value: float, i: int, j: int) -> float:
    return dsigmoid(value)


@dataclass
class FeedForwardNetwork:
    """One-hidden-layer network with sigmoid activations on both layers.

    Parameters are owned exclusively by the instance and mutated in place by
    :meth:`train`.  ``legacy_order`` propagates the hidden error through the
    output weights *after* they have been updated, reproducing the ordering
    of the browser demo; the default uses the pre-update weights.
    """

    input_nodes: int
    hidden_nodes: int
    output_nodes: int
    learning_rate: float = 0.1
    seed: int | None = None
    legacy_order: bool = False
    weights_ih: Matrix = field(init=False, repr=False)
    weights_ho: Matrix = field(init=False, repr=False)
    bias_h: Matrix = field(init=False, repr=False)
    bias_o: Matrix = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.config = NetworkConfig(
            input_nodes=self.input_nodes,
            hidden_nodes=self.hidden_nodes,
            output_nodes=self.output_nodes,
            learning_rate=self.learning_rate,
            legacy_order=self.legacy_order,
        )
        self.input_nodes = self.config.input_nodes
        self.hidden_nodes = self.config.hidden_nodes
        self.output_nodes = self.config.output_nodes
        self.learning_rate = self.config.learning_rate
        self.reset(self.seed)

    @classmethod
    def from_config(cls, config: NetworkConfig, *, seed: int | None = None) -> "FeedForwardNetwork":
        return cls(
            config.input_nodes,
            config.hidden_nodes,
            config.output_nodes,
            learning_rate=config.learning_rate,
            seed=seed,
            legacy_order=config.legacy_order,
        )

    def reset(self, seed: int | None) -> None:
        """Draw fresh parameters uniformly from ``[-1, 1]``."""

        rng = np.random.default_rng(seed)
        self.weights_ih = Matrix(self.hidden_nodes, self.input_nodes).randomize(rng)
        self.weights_ho = Matrix(self.output_nodes, self.hidden_nodes).randomize(rng)
        self.bias_h = Matrix(self.hidden_nodes, 1).randomize(rng)
        self.bias_o = Matrix(self.output_nodes, 1).randomize(rng)

    def set_learning_rate(self, rate: float) -> None:
        self.learning_rate = _check_rate(rate)

    def describe(self) -> ModelDescription:
        return ModelDescription(layer_dims=self.config.layer_dims)

    # ------------------------------------------------------------------
    # Forward / backward

    def _column(self, values: Vector | Target, expected: int, what: str) -> Matrix:
        floats = _as_floats(values)
        if len(floats) != expected:
            raise LengthMismatch(what, expected, len(floats))
        return Matrix.from_vector(floats)

    def _forward(self, inputs: Matrix) -> tuple[Matrix, Matrix]:
        hidden = Matrix.multiply(self.weights_ih, inputs)
        hidden.add(self.bias_h).map(_sigmoid)
        outputs = Matrix.multiply(self.weights_ho, hidden)
        outputs.add(self.bias_o).map(_sigmoid)
        return hidden, outputs

    def predict(self, inputs: Vector) -> List[float]:
        column = self._column(inputs, self.input_nodes, "inputs")
        _, outputs = self._forward(column)
        return outputs.to_vector()

    def train(self, inputs: Vector, targets: Target) -> float:
        """Run one backpropagation step and return ``sum(|targets - outputs|)``."""

        x = self._column(inputs, self.input_nodes, "inputs")
        y = self._column(targets, self.output_nodes, "targets")

        hidden, outputs = self._forward(x)
        output_errors = Matrix.subtract(y, outputs)

        gradients = Matrix.mapped(outputs, _dsigmoid).scale(self.learning_rate)
        gradients = Matrix.hadamard(gradients, output_errors)

        if not self.legacy_order:
            hidden_errors = Matrix.multiply(Matrix.transpose(self.weights_ho), output_errors)

        self.weights_ho.add(Matrix.multiply(gradients, Matrix.transpose(hidden)))
        self.bias_o.add(gradients)

        if self.legacy_order:
            hidden_errors = Matrix.multiply(Matrix.transpose(self.weights_ho), output_errors)

        hidden_gradients = Matrix.mapped(hidden, _dsigmoid).scale(self.learning_rate)
        hidden_gradients = Matrix.hadamard(hidden_gradients, hidden_errors)

        self.weights_ih.add(Matrix.multiply(hidden_gradients, Matrix.transpose(x)))
        self.bias_h.add(hidden_gradients)

        return float(np.sum(np.abs(output_errors.data)))

    # ------------------------------------------------------------------
    # Introspection

    def state_dict(self) -> Mapping[str, np.ndarray]:
        """In-memory copy of every parameter matrix."""

        return {
            "weights_ih": self.weights_ih.data.copy(),
            "weights_ho": self.weights_ho.data.copy(),
            "bias_h": self.bias_h.data.copy(),
            "bias_o": self.bias_o.data.copy(),
        }

    def parameter_count(self) -> int:
        mats = (self.weights_ih, self.weights_ho, self.bias_h, self.bias_o)
        return int(sum(m.rows * m.cols for m in mats))


__all__ = ["FeedForwardNetwork"]
