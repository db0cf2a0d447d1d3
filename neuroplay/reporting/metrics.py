"""Per-epoch metric files fed by the trainer's :class:`EpochResult` records.

Each sink owns a ``train`` and an ``eval`` file inside a run directory.  Every
epoch appends one training row; epochs that carried a held-out evaluation
also append one evaluation row.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, Tuple

from ..core.types import EpochResult, EvalResult
from .artifacts import git_sha

SPLITS = ("train", "eval")
FIELDS: Dict[str, Tuple[str, ...]] = {
    "train": ("epoch", "loss"),
    "eval": ("epoch", "accuracy", "mae", "samples"),
}


def train_row(result: EpochResult) -> Dict[str, float]:
    return {"epoch": result.epoch, "loss": float(result.loss)}


def eval_row(evaluation: EvalResult) -> Dict[str, float]:
    return {
        "epoch": evaluation.epoch,
        "accuracy": float(evaluation.accuracy),
        "mae": float(evaluation.mae),
        "samples": evaluation.samples,
    }


class _SplitFiles:
    suffix = ""

    def __init__(self, run_dir: str | Path, *, stem: str = "metrics") -> None:
        run_dir = Path(run_dir)
        run_dir.mkdir(parents=True, exist_ok=True)
        self.paths = {split: run_dir / f"{stem}_{split}{self.suffix}" for split in SPLITS}
        for split, path in self.paths.items():
            with path.open("w", encoding="utf-8", newline="") as handle:
                self._start(split, handle)

    @property
    def train_path(self) -> Path:
        return self.paths["train"]

    @property
    def eval_path(self) -> Path:
        return self.paths["eval"]

    def on_result(self, result: EpochResult) -> None:
        self._append("train", train_row(result))
        if result.evaluation is not None:
            self._append("eval", eval_row(result.evaluation))

    def _start(self, split: str, handle) -> None:
        pass

    def _append(self, split: str, row: Dict[str, float]) -> None:
        raise NotImplementedError


class JsonlSink(_SplitFiles):
    """JSON lines tagged with split, seed and git sha."""

    suffix = ".jsonl"

    def __init__(
        self,
        run_dir: str | Path,
        *,
        stem: str = "metrics",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.seed = seed
        self.sha = sha or git_sha()
        super().__init__(run_dir, stem=stem)

    def _append(self, split: str, row: Dict[str, float]) -> None:
        record = {"split": split, "seed": self.seed, "sha": self.sha, **row}
        with self.paths[split].open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")


class CsvSink(_SplitFiles):
    """CSV tables with a fixed column order per split."""

    suffix = ".csv"

    def _start(self, split: str, handle) -> None:
        csv.writer(handle).writerow(FIELDS[split])

    def _append(self, split: str, row: Dict[str, float]) -> None:
        with self.paths[split].open("a", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow([row[name] for name in FIELDS[split]])


__all__ = ["CsvSink", "FIELDS", "JsonlSink", "eval_row", "train_row"]
