"""Headless-safe plotting adapter for training curves."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from ..core.types import EpochResult


class PlotAdapter:
    """Collect the error curve and held-out MAE, then optionally render ``loss.png``."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._losses: List[Tuple[int, float]] = []
        self._eval_mae: List[Tuple[int, float]] = []

    def on_result(self, result: EpochResult) -> None:
        if not self.enable_plots:
            return
        self._losses.append((result.epoch, result.loss))
        if result.evaluation is not None:
            self._eval_mae.append((result.epoch, result.evaluation.mae))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._losses:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots()
        ax.plot(*zip(*self._losses), label="train error")
        if self._eval_mae:
            ax.plot(*zip(*self._eval_mae), marker="o", linestyle="--", label="eval MAE")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Mean absolute error")
        ax.set_title("Training Error")
        ax.legend()
        self.run_dir.mkdir(parents=True, exist_ok=True)
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["PlotAdapter"]
