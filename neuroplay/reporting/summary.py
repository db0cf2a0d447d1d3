"""Deterministic end-of-run summary of a :class:`TrainingSession`."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np

from ..core.types import TrainingSession

TREND_WINDOW = 50


def moving_average(points: Sequence[float], window: int) -> List[float]:
    """Simple moving average over full ``window``-sized slices."""

    if window < 1:
        raise ValueError("window must be at least 1")
    arr = np.asarray(points, dtype=np.float64)
    if arr.size < window:
        return []
    kernel = np.ones(window, dtype=np.float64) / window
    return np.convolve(arr, kernel, mode="valid").tolist()


def loss_trend(history: Sequence[float], window: int = TREND_WINDOW) -> Dict[str, object] | None:
    """Compare the first and last smoothed error; ``None`` for short histories."""

    smoothed = moving_average(history, window)
    if not smoothed:
        return None
    return {
        "window": window,
        "first": smoothed[0],
        "last": smoothed[-1],
        "decreasing": smoothed[-1] < smoothed[0],
    }


def build_summary(session: TrainingSession, *, window: int = TREND_WINDOW) -> Dict[str, object]:
    history = np.asarray(session.error_history, dtype=np.float64)
    evaluations = session.eval_history
    last_eval = session.last_evaluation
    errors = None
    if history.size:
        errors = {
            "first": float(history[0]),
            "last": float(history[-1]),
            "min": float(history.min()),
        }
    return {
        "version": 2,
        "state": session.state.value,
        "epochs_requested": session.epochs,
        "epochs_run": session.epoch_index,
        "history_matches_epochs": len(session.error_history) == session.epoch_index,
        "non_negative": bool(np.all(history >= 0.0)),
        "error": errors,
        "trend": loss_trend(session.error_history, window),
        "evaluations": len(evaluations),
        "best_accuracy": max(e.accuracy for e in evaluations) if evaluations else None,
        "last_evaluation": asdict(last_eval) if last_eval else None,
    }


def write_summary(
    session: TrainingSession, out_summary_json: str | Path, *, window: int = TREND_WINDOW
) -> str:
    """Write ``summary.json`` for ``session`` with sorted keys."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = build_summary(session, window=window)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["TREND_WINDOW", "build_summary", "loss_trend", "moving_average", "write_summary"]
