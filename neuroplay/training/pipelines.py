"""Pipeline assembly: dataset → learner → trainer → reporting sinks."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping

import yaml

from ..core.network import FeedForwardNetwork
from ..core.neuron import SingleUnit
from ..core.types import Learner, RunResult
from ..data import get_dataset
from ..data.registry import DatasetSpec
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import TREND_WINDOW, write_summary
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-network": {
        "data": {"name": "xor", "options": {}},
        "model": {"type": "network", "hidden": 4, "legacy_order": False},
        "train": {
            "epochs": 2000,
            "eval_every": 100,
            "seed": 7,
            "lr": 0.5,
            "run_dir": "runs/xor-network",
            "enable_plots": False,
        },
    },
    "threshold-unit": {
        "data": {"name": "threshold", "options": {"n_train": 100, "n_eval": 100, "seed": 0}},
        "model": {"type": "unit"},
        "train": {
            "epochs": 300,
            "eval_every": 50,
            "seed": 3,
            "lr": 0.5,
            "run_dir": "runs/threshold-unit",
            "enable_plots": False,
        },
    },
    "cat-classifier": {
        "data": {"name": "cat_features", "options": {"n_points": 200, "seed": 0}},
        "model": {"type": "network", "hidden": 8},
        "train": {
            "epochs": 500,
            "eval_every": 50,
            "seed": 11,
            "lr": 0.3,
            "run_dir": "runs/cat-classifier",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Load a YAML or JSON run configuration."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    if not _PRESET_DIR.exists():
        return presets
    for file in sorted(_PRESET_DIR.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = _REQUIRED_SECTIONS - set(data)
        if missing:
            missing_str = ", ".join(sorted(missing))
            raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
        presets[file.stem] = json.loads(json.dumps(data))
    return presets


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset: {name}")
    return deepcopy(dict(available[name]))


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Recursively overlay ``override`` on ``base`` without mutating either."""

    merged: Dict[str, object] = deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def build_learner(
    model_cfg: Mapping[str, object], dataset: DatasetSpec, *, lr: float, seed: int
) -> Learner:
    """Instantiate the learner described by ``model_cfg`` for ``dataset``."""

    data_spec = dataset.data_spec
    d_in = int(model_cfg.get("d_in", data_spec.d_in))
    d_out = int(model_cfg.get("d_out", data_spec.d_out))
    if d_in != data_spec.d_in:
        raise ValueError(f"Configured d_in={d_in} but dataset provides {data_spec.d_in}")
    if d_out != data_spec.d_out:
        raise ValueError(f"Configured d_out={d_out} but dataset provides {data_spec.d_out}")

    kind = str(model_cfg.get("type", "network"))
    if kind == "unit":
        if d_out != 1:
            raise ValueError("A single unit can only learn one output")
        return SingleUnit(d_in, lr, seed=seed)
    if kind == "network":
        return FeedForwardNetwork(
            d_in,
            int(model_cfg.get("hidden", 4)),
            d_out,
            learning_rate=lr,
            seed=seed,
            legacy_order=bool(model_cfg.get("legacy_order", False)),
        )
    raise KeyError(f"Unknown model type: {kind}")


def run_pipeline(config: Mapping[str, object], *, trainer: Trainer | None = None) -> RunResult:
    """Train one learner as described by ``config`` and write run artifacts.

    ``trainer`` may be supplied by a caller that wants to cancel the run from
    another thread.  A cancel requested before training starts stops the run
    before its first epoch.
    """

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options") or {}))
    seed = int(train_cfg.get("seed", 0))
    lr = float(train_cfg.get("lr", 0.1))
    epochs = int(train_cfg.get("epochs", 100))
    eval_every = train_cfg.get("eval_every")
    eval_every = int(eval_every) if eval_every else None
    patience = train_cfg.get("early_stopping_patience")
    patience = int(patience) if patience is not None else None

    learner = build_learner(model_cfg, dataset, lr=lr, seed=seed)
    description = learner.describe()

    run_dir = _resolve_run_dir(train_cfg, dataset.name, str(model_cfg.get("type", "network")))
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        dims=description.layer_dims,
        learner=type(learner).__name__,
        epochs=epochs,
        lr=lr,
        param_count=learner.parameter_count(),
    )

    jsonl = JsonlSink(run_dir, seed=seed)
    table = CsvSink(run_dir)
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    trainer = trainer or Trainer()
    session = trainer.run(
        learner,
        dataset.train,
        epochs,
        eval_set=dataset.eval,
        eval_every=eval_every,
        seed=seed + 1,
        early_stopping_patience=patience,
        callbacks=[jsonl, table, plots],
    )
    plots.close()

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset=dataset,
        learner=learner,
        session=session,
    )
    window = int(train_cfg.get("summary_window", TREND_WINDOW))
    summary_path = write_summary(session, run_dir / "summary.json", window=window)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    last_eval = session.last_evaluation
    (run_dir / "metrics_eval.json").write_text(
        json.dumps(
            {"accuracy": last_eval.accuracy, "mae": last_eval.mae} if last_eval else {},
            indent=2,
        )
    )

    return RunResult(
        epochs=session.epoch_index,
        metrics_path=str(jsonl.train_path),
        manifest_path=manifest,
        summary_path=summary_path,
        error_history=tuple(session.error_history),
        completed=session.completed,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, model: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / model


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: list[int],
    learner: str,
    epochs: int,
    lr: float,
    param_count: int,
) -> None:
    print("=== neuroplay run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Learner       : {learner}")
    print(f"Dimensions    : {dims}")
    print(f"Epochs        : {epochs}")
    print(f"Learning rate : {lr}")
    print(f"Parameters    : {param_count}")
    print("=====================")


__all__ = [
    "build_learner",
    "load_preset",
    "merge_config",
    "presets",
    "read_config_file",
    "run_pipeline",
]
