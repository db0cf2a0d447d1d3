"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping, Tuple

from ..core.types import Sample

TASK_TYPES = {"regression", "binary"}


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Length of every input vector.
    d_out:
        Length of every target vector.
    task_type:
        ``"binary"`` for 0/1 labels, ``"regression"`` otherwise.
    extra:
        Free-form metadata, e.g. human readable class names.
    """

    d_in: int
    d_out: int
    task_type: str
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """A materialised dataset with its train and evaluation samples."""

    name: str
    train: Tuple[Sample, ...]
    eval: Tuple[Sample, ...]
    data_spec: DataSpec
    provenance: Dict[str, Any]

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": len(self.train), "eval": len(self.eval)}

    def split(self, name: str) -> Tuple[Sample, ...]:
        if name == "train":
            return self.train
        if name == "eval":
            return self.eval
        raise ValueError(f"Unsupported split: {name}")


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    Usable as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly with ``register_dataset("xor", make_xor)``.
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.data_spec.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {spec.data_spec.task_type}")
    for split in ("train", "eval"):
        for sample in spec.split(split):
            if len(sample.inputs) != spec.data_spec.d_in:
                raise ValueError(
                    f"{spec.name}/{split}: sample has {len(sample.inputs)} inputs, "
                    f"expected {spec.data_spec.d_in}"
                )
            if len(sample.target) != spec.data_spec.d_out:
                raise ValueError(
                    f"{spec.name}/{split}: sample has {len(sample.target)} targets, "
                    f"expected {spec.data_spec.d_out}"
                )


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
