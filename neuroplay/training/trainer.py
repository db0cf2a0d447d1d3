"""Epoch-based online training loop shared by both learners."""

from __future__ import annotations

import threading
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from ..core.errors import EmptyTrainingSet
from ..core.types import EpochResult, Learner, Sample, TrainerState, TrainingSession
from .metrics import evaluate


class Trainer:
    """Drive a learner through reshuffled epochs of per-sample updates.

    The trainer moves ``IDLE → RUNNING → (IDLE | COMPLETED)``.  Cancellation
    requested through :meth:`cancel` is honoured between epochs only, so the
    learner is never observed half-way through a ``train`` call.
    """

    def __init__(
        self,
        callbacks: Sequence[object] | None = None,
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.callbacks = list(callbacks or [])
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._owns_event = cancel_event is None
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self.state = TrainerState.IDLE
        self.session: TrainingSession | None = None

    # ------------------------------------------------------------------
    # Control

    def cancel(self) -> None:
        """Request that the current or next run stops at its next epoch boundary.

        A trainer that owns its event clears it when a run ends, so a request
        made between runs is honoured by the next one.
        """

        self._cancel.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    # ------------------------------------------------------------------
    # Training

    def iter_epochs(
        self,
        learner: Learner,
        train_set: Iterable[Sample],
        epochs: int,
        *,
        eval_set: Iterable[Sample] | None = None,
        eval_every: int | None = None,
        seed: int | None = None,
        early_stopping_patience: int | None = None,
    ) -> Iterator[EpochResult]:
        """Validate the arguments and return a generator yielding once per epoch.

        Arguments are checked eagerly so that errors surface at the call
        site rather than on the first ``next()``.  The trainer only enters
        ``RUNNING`` once the generator is first advanced.
        """

        _, epochs_iter = self._prepare(
            learner, train_set, epochs, eval_set, eval_every, seed, early_stopping_patience
        )
        return epochs_iter

    def run(
        self,
        learner: Learner,
        train_set: Iterable[Sample],
        epochs: int,
        *,
        eval_set: Iterable[Sample] | None = None,
        eval_every: int | None = None,
        seed: int | None = None,
        early_stopping_patience: int | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> TrainingSession:
        """Drain :meth:`iter_epochs`, dispatching every epoch to the callbacks.

        ``callbacks`` extend the trainer's own for this run only.  Objects with
        an ``on_result`` method receive the :class:`EpochResult`; the others get
        ``on_epoch(epoch, metrics)`` with the flattened metrics.
        """

        session, epochs_iter = self._prepare(
            learner, train_set, epochs, eval_set, eval_every, seed, early_stopping_patience
        )
        listeners = [*self.callbacks, *(callbacks or [])]
        for result in epochs_iter:
            self._emit_result(result, listeners)
        return session

    # ------------------------------------------------------------------
    # Internal helpers

    def _prepare(
        self,
        learner: Learner,
        train_set: Iterable[Sample],
        epochs: int,
        eval_set: Iterable[Sample] | None,
        eval_every: int | None,
        seed: int | None,
        patience: int | None,
    ) -> Tuple[TrainingSession, Iterator[EpochResult]]:
        self._ensure_idle()
        samples = list(train_set)
        if not samples:
            raise EmptyTrainingSet("cannot train on an empty sample set")
        if int(epochs) != epochs or epochs < 0:
            raise ValueError(f"epochs must be a non-negative integer, got {epochs!r}")
        if eval_every is not None and (int(eval_every) != eval_every or eval_every < 1):
            raise ValueError(f"eval_every must be a positive integer, got {eval_every!r}")
        if patience is not None and patience < 1:
            raise ValueError("early_stopping_patience must be at least 1")

        holdout = list(eval_set or [])
        rng = np.random.default_rng(seed) if seed is not None else self._rng
        session = TrainingSession(epochs=int(epochs))
        return session, self._epochs(
            session, learner, samples, holdout, eval_every, rng, patience
        )

    def _ensure_idle(self) -> None:
        if self.state is TrainerState.RUNNING:
            raise RuntimeError("Trainer is already running; wait for it or cancel it first")

    def _epochs(
        self,
        session: TrainingSession,
        learner: Learner,
        samples: List[Sample],
        holdout: List[Sample],
        eval_every: int | None,
        rng: np.random.Generator,
        patience: int | None,
    ) -> Iterator[EpochResult]:
        self._ensure_idle()
        self.session = session
        session.state = self.state = TrainerState.RUNNING
        count = len(samples)
        best_loss = float("inf")
        epochs_no_improve = 0
        try:
            for epoch in range(session.epochs):
                if self._cancel.is_set():
                    break
                total = 0.0
                for idx in rng.permutation(count):
                    sample = samples[idx]
                    total += learner.train(sample.inputs, sample.target)
                loss = total / count
                session.error_history.append(loss)
                session.epoch_index = epoch + 1

                evaluation = None
                if eval_every and holdout and (epoch + 1) % eval_every == 0:
                    evaluation = evaluate(learner, holdout, epoch=epoch + 1)
                    session.eval_history.append(evaluation)

                yield EpochResult(epoch=epoch + 1, loss=loss, evaluation=evaluation)

                if patience:
                    if loss < best_loss - 1e-9:
                        best_loss = loss
                        epochs_no_improve = 0
                    else:
                        epochs_no_improve += 1
                        if epochs_no_improve >= patience:
                            break
            if not self._cancel.is_set():
                session.state = TrainerState.COMPLETED
        finally:
            if session.state is TrainerState.RUNNING:
                session.state = TrainerState.IDLE
            self.state = session.state
            if self._owns_event:
                self._cancel.clear()

    def _emit_result(self, result: EpochResult, listeners: Sequence[object]) -> None:
        for callback in listeners:
            if hasattr(callback, "on_result"):
                callback.on_result(result)  # type: ignore[attr-defined]
            elif hasattr(callback, "on_epoch"):
                callback.on_epoch(result.epoch, result.metrics())  # type: ignore[attr-defined]
            elif callable(callback):
                callback(result.epoch, result.metrics())


def run_training(
    learner: Learner,
    train_set: Iterable[Sample],
    eval_set: Iterable[Sample] | None = None,
    epochs: int = 100,
    eval_every: int | None = None,
    *,
    seed: int | None = None,
    cancel_event: threading.Event | None = None,
    callbacks: Sequence[object] | None = None,
) -> List[float]:
    """Train ``learner`` and return its per-epoch mean loss history."""

    trainer = Trainer(callbacks, seed=seed, cancel_event=cancel_event)
    session = trainer.run(
        learner, train_set, epochs, eval_set=eval_set, eval_every=eval_every
    )
    return list(session.error_history)


__all__ = ["Trainer", "run_training"]
