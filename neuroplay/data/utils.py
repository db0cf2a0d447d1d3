"""Helpers shared by the dataset factories."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..core.types import Sample


def holdout_split(
    samples: Sequence[Sample], *, eval_split: float = 0.2
) -> Tuple[Tuple[Sample, ...], Tuple[Sample, ...]]:
    """Split ``samples`` in order: the leading share trains, the tail evaluates."""

    if not 0 <= eval_split < 1:
        raise ValueError("eval_split must be in [0, 1)")
    cut = int(np.floor(len(samples) * (1.0 - eval_split)))
    return tuple(samples[:cut]), tuple(samples[cut:])


def samples_from_arrays(inputs: np.ndarray, targets: np.ndarray) -> Tuple[Sample, ...]:
    if inputs.shape[0] != targets.shape[0]:
        raise ValueError("inputs and targets must have the same number of rows")
    return tuple(Sample(tuple(x), tuple(y)) for x, y in zip(inputs.tolist(), targets.tolist()))
