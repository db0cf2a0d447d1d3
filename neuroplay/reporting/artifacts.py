"""Run manifest: what was trained, on what, and how the run ended."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from ..core.types import Learner, TrainingSession
from ..data.registry import DatasetSpec


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return out.decode().strip()


def describe_dataset(dataset: DatasetSpec) -> Dict[str, object]:
    spec = dataset.data_spec
    return {
        "name": dataset.name,
        "splits": dataset.splits,
        "d_in": spec.d_in,
        "d_out": spec.d_out,
        "task_type": spec.task_type,
        "provenance": dict(dataset.provenance),
    }


def describe_learner(learner: Learner) -> Dict[str, object]:
    return {
        "type": type(learner).__name__,
        "layer_dims": list(learner.describe().layer_dims),
        "parameters": learner.parameter_count(),
        "learning_rate": learner.learning_rate,
        "legacy_order": bool(getattr(learner, "legacy_order", False)),
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset: DatasetSpec,
    learner: Learner,
    session: TrainingSession,
) -> str:
    """Write ``manifest.json`` for a finished (or cancelled) run."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": describe_dataset(dataset),
        "model": describe_learner(learner),
        "run": {
            "state": session.state.value,
            "epochs_requested": session.epochs,
            "epochs_run": session.epoch_index,
        },
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["describe_dataset", "describe_learner", "git_sha", "write_manifest"]
