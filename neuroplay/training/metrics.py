"""Held-out evaluation for the online trainer."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..core.types import Array, EvalResult, Learner, Sample

THRESHOLD = 0.5


def threshold(values: Array) -> Array:
    """Map outputs to class labels: ``> 0.5`` is 1, anything else 0."""

    return (np.asarray(values) > THRESHOLD).astype(int)


def collect_predictions(learner: Learner, samples: Sequence[Sample]) -> Tuple[Array, Array]:
    """Run ``learner.predict`` over ``samples`` and stack outputs and targets."""

    preds = np.asarray([learner.predict(s.inputs) for s in samples], dtype=np.float64)
    targs = np.asarray([s.target for s in samples], dtype=np.float64)
    return preds, targs


def _check_pair(preds: Array, targs: Array) -> None:
    if preds.shape != targs.shape:
        raise ValueError(f"predictions {preds.shape} and targets {targs.shape} differ in shape")
    if preds.size == 0:
        raise ValueError("at least one prediction is required")


def accuracy(predictions: Array, targets: Array) -> float:
    """Share of rows whose thresholded outputs all match the thresholded targets."""

    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(targets, dtype=np.float64)
    _check_pair(preds, targs)
    pred_labels = threshold(preds).reshape(preds.shape[0], -1)
    targ_labels = threshold(targs).reshape(targs.shape[0], -1)
    return float(np.mean(np.all(pred_labels == targ_labels, axis=1)))


def mean_absolute_error(predictions: Array, targets: Array) -> float:
    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(targets, dtype=np.float64)
    _check_pair(preds, targs)
    return float(np.mean(np.abs(preds - targs)))


def evaluate(learner: Learner, samples: Sequence[Sample], *, epoch: int = 0) -> EvalResult:
    """Predict-only pass over ``samples``; the learner is never mutated."""

    preds, targs = collect_predictions(learner, samples)
    return EvalResult(
        epoch=epoch,
        accuracy=accuracy(preds, targs),
        mae=mean_absolute_error(preds, targs),
        samples=len(samples),
    )


__all__ = [
    "THRESHOLD",
    "accuracy",
    "collect_predictions",
    "evaluate",
    "mean_absolute_error",
    "threshold",
]
