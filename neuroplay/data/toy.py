"""Small in-memory datasets used by the trainer demos."""

from __future__ import annotations

from typing import Any

import numpy as np

from ..core.types import Sample
from .registry import DataSpec, DatasetSpec, register_dataset
from .utils import holdout_split, samples_from_arrays

XOR_TABLE = (
    Sample((0.0, 0.0), (0.0,)),
    Sample((0.0, 1.0), (1.0,)),
    Sample((1.0, 0.0), (1.0,)),
    Sample((1.0, 1.0), (0.0,)),
)


@register_dataset("xor")
def make_xor(**_: Any) -> DatasetSpec:
    """The four-row XOR truth table, evaluated on the same points."""

    return DatasetSpec(
        name="xor",
        train=XOR_TABLE,
        eval=XOR_TABLE,
        data_spec=DataSpec(d_in=2, d_out=1, task_type="binary"),
        provenance={"type": "xor", "rows": len(XOR_TABLE)},
    )


def threshold_samples(n: int, rng: np.random.Generator, cut: float = 0.5) -> tuple[Sample, ...]:
    x = rng.random((n, 1))
    y = (x > cut).astype(np.float64)
    return samples_from_arrays(x, y)


@register_dataset("threshold")
def make_threshold(
    n_train: int = 100, n_eval: int = 100, seed: int = 0, cut: float = 0.5, **_: Any
) -> DatasetSpec:
    """Scalars drawn from ``U[0, 1)`` labelled ``1`` when above ``cut``.

    The evaluation samples are an independent draw from the same
    distribution.
    """

    rng = np.random.default_rng(seed)
    train = threshold_samples(n_train, rng, cut)
    held_out = threshold_samples(n_eval, rng, cut)
    return DatasetSpec(
        name="threshold",
        train=train,
        eval=held_out,
        data_spec=DataSpec(d_in=1, d_out=1, task_type="binary"),
        provenance={
            "type": "threshold",
            "n_train": n_train,
            "n_eval": n_eval,
            "seed": seed,
            "cut": cut,
        },
    )


@register_dataset("cat_features")
def make_cat_features(
    n_points: int = 200, seed: int = 0, eval_split: float = 0.2, **_: Any
) -> DatasetSpec:
    """Simulated image features ``[average_color, edge_density, roundness]``.

    A sample is a cat when ``color > 0.3``, ``edges > 0.4`` and
    ``roundness > 0.5``.
    """

    rng = np.random.default_rng(seed)
    features = rng.random((n_points, 3))
    is_cat = (
        (features[:, 0] > 0.3) & (features[:, 1] > 0.4) & (features[:, 2] > 0.5)
    ).astype(np.float64)
    samples = samples_from_arrays(features, is_cat.reshape(-1, 1))
    train, held_out = holdout_split(samples, eval_split=eval_split)
    return DatasetSpec(
        name="cat_features",
        train=train,
        eval=held_out,
        data_spec=DataSpec(
            d_in=3,
            d_out=1,
            task_type="binary",
            extra={"labels": {0: "Not Cat", 1: "Cat"}},
        ),
        provenance={
            "type": "cat_features",
            "n_points": n_points,
            "seed": seed,
            "eval_split": eval_split,
        },
    )


__all__ = ["XOR_TABLE", "make_cat_features", "make_threshold", "make_xor", "threshold_samples"]
