"""Scalar activation functions shared by both learners."""

from __future__ import annotations

import math


def sigmoid(x: float) -> float:
    """Return the logistic sigmoid of ``x``."""

    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    # exp(-x) overflows for very negative x; rewrite as e^x / (1 + e^x)
    z = math.exp(x)
    return z / (1.0 + z)


def dsigmoid(y: float) -> float:
    """Derivative of the sigmoid expressed through its output ``y = sigmoid(x)``.

    Callers must pass the post-activation value, never the raw weighted sum.
    """

    return y * (1.0 - y)


def relu(x: float) -> float:
    return max(0.0, x)


def drelu(x: float) -> float:
    return 1.0 if x > 0 else 0.0


__all__ = ["sigmoid", "dsigmoid", "relu", "drelu"]
