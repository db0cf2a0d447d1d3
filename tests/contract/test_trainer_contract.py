import gc
import threading

import numpy as np
import pytest

from neuroplay.core.errors import EmptyTrainingSet
from neuroplay.core.network import FeedForwardNetwork
from neuroplay.core.neuron import SingleUnit
from neuroplay.core.types import TrainerState
from neuroplay.data.toy import XOR_TABLE, make_threshold
from neuroplay.training.trainer import Trainer, run_training


class _Capture:
    def __init__(self) -> None:
        self.history = []

    def on_epoch(self, epoch, metrics):
        self.history.append((epoch, dict(metrics)))


def test_history_has_one_entry_per_epoch_and_is_non_negative():
    net = FeedForwardNetwork(2, 3, 1, seed=0)
    history = run_training(net, XOR_TABLE, epochs=25, seed=1)
    assert len(history) == 25
    assert all(v >= 0.0 for v in history)


def test_zero_epochs_completes_without_training():
    net = FeedForwardNetwork(2, 3, 1, seed=0)
    before = net.state_dict()
    trainer = Trainer(seed=0)
    session = trainer.run(net, XOR_TABLE, 0)
    assert session.error_history == []
    assert session.completed
    assert all(np.array_equal(before[k], v) for k, v in net.state_dict().items())


def test_same_seed_reproduces_error_history():
    runs = []
    for _ in range(2):
        net = FeedForwardNetwork(2, 4, 1, learning_rate=0.5, seed=21)
        runs.append(run_training(net, XOR_TABLE, epochs=40, seed=5))
    assert runs[0] == runs[1]


def test_different_shuffle_seed_changes_history():
    a = run_training(FeedForwardNetwork(2, 4, 1, seed=21), XOR_TABLE, epochs=10, seed=5)
    b = run_training(FeedForwardNetwork(2, 4, 1, seed=21), XOR_TABLE, epochs=10, seed=6)
    assert a != b


def test_empty_training_set_fails_fast():
    trainer = Trainer()
    with pytest.raises(EmptyTrainingSet):
        trainer.iter_epochs(SingleUnit(1, seed=0), [], 5)
    assert trainer.state is TrainerState.IDLE
    assert trainer.session is None


@pytest.mark.parametrize("kwargs", [{"epochs": -1}, {"epochs": 3, "eval_every": 0}])
def test_invalid_schedule_rejected(kwargs):
    epochs = kwargs.pop("epochs")
    with pytest.raises(ValueError):
        Trainer().run(SingleUnit(2, seed=0), XOR_TABLE, epochs, **kwargs)


def test_evaluation_runs_on_cadence():
    data = make_threshold(n_train=20, n_eval=10, seed=1)
    unit = SingleUnit(1, learning_rate=0.5, seed=0)
    seen = _Capture()
    trainer = Trainer(seed=0)
    session = trainer.run(
        unit,
        data.train,
        10,
        eval_set=data.eval,
        eval_every=5,
        callbacks=[seen],
    )
    assert [e.epoch for e in session.eval_history] == [5, 10]
    assert [epoch for epoch, m in seen.history if "accuracy" in m] == [5, 10]
    for result in session.eval_history:
        assert 0.0 <= result.accuracy <= 1.0
        assert result.samples == 10


def test_evaluation_does_not_train_the_learner():
    net = FeedForwardNetwork(2, 3, 1, seed=2)
    calls = []

    class _Counting:
        learning_rate = net.learning_rate

        def predict(self, inputs):
            return net.predict(inputs)

        def train(self, inputs, target):
            calls.append(1)
            return net.train(inputs, target)

    session = Trainer(seed=0).run(_Counting(), XOR_TABLE, 2, eval_set=XOR_TABLE, eval_every=1)
    assert len(session.eval_history) == 2
    assert len(calls) == 2 * len(XOR_TABLE)


def test_cancel_between_epochs_returns_to_idle():
    net = FeedForwardNetwork(2, 3, 1, seed=0)
    trainer = Trainer(seed=0)

    class _StopAfterThree:
        def on_epoch(self, epoch, metrics):
            if epoch == 3:
                trainer.cancel()

    trainer.callbacks.append(_StopAfterThree())
    session = trainer.run(net, XOR_TABLE, 50)
    assert len(session.error_history) == 3
    assert session.state is TrainerState.IDLE
    assert not session.completed
    assert trainer.state is TrainerState.IDLE


def test_external_cancel_event_is_honoured():
    event = threading.Event()
    event.set()
    history = run_training(FeedForwardNetwork(2, 2, 1, seed=0), XOR_TABLE, epochs=10, cancel_event=event)
    assert history == []


def test_pre_run_cancel_stops_next_run_then_clears():
    trainer = Trainer(seed=0)
    trainer.cancel()
    stopped = trainer.run(FeedForwardNetwork(2, 2, 1, seed=0), XOR_TABLE, 4)
    assert stopped.error_history == []
    assert stopped.state is TrainerState.IDLE
    assert not trainer.cancel_requested

    session = trainer.run(FeedForwardNetwork(2, 2, 1, seed=0), XOR_TABLE, 4)
    assert session.completed
    assert len(session.error_history) == 4


def test_unstarted_generator_does_not_block_later_runs():
    net = FeedForwardNetwork(2, 3, 1, seed=0)
    trainer = Trainer(seed=0)
    pending = trainer.iter_epochs(net, XOR_TABLE, 3)
    assert trainer.state is TrainerState.IDLE
    del pending
    gc.collect()

    session = trainer.run(net, XOR_TABLE, 3)
    assert session.completed
    assert trainer.state is TrainerState.COMPLETED


def test_second_generator_cannot_start_while_first_is_running():
    net = FeedForwardNetwork(2, 3, 1, seed=0)
    trainer = Trainer(seed=0)
    first = trainer.iter_epochs(net, XOR_TABLE, 3)
    second = trainer.iter_epochs(net, XOR_TABLE, 3)
    next(first)
    with pytest.raises(RuntimeError):
        next(second)
    first.close()
    assert trainer.state is TrainerState.IDLE


def test_generator_suspends_only_between_epochs():
    net = FeedForwardNetwork(2, 3, 1, seed=0)
    trainer = Trainer(seed=0)
    epochs = trainer.iter_epochs(net, XOR_TABLE, 5)
    first = next(epochs)
    assert first.epoch == 1
    assert trainer.state is TrainerState.RUNNING
    with pytest.raises(RuntimeError):
        trainer.iter_epochs(net, XOR_TABLE, 5)
    epochs.close()
    assert trainer.state is TrainerState.IDLE
    assert trainer.session.epoch_index == 1


def test_completed_state_after_full_run():
    trainer = Trainer(seed=0)
    session = trainer.run(SingleUnit(2, seed=0), XOR_TABLE, 3)
    assert session.completed
    assert session.epoch_index == 3
    assert trainer.state is TrainerState.COMPLETED


def test_early_stopping_marks_run_completed():
    trainer = Trainer(seed=0)
    net = FeedForwardNetwork(2, 2, 1, learning_rate=1e-12, seed=0)
    session = trainer.run(net, XOR_TABLE, 100, early_stopping_patience=3)
    assert session.completed
    assert len(session.error_history) < 100


def test_cancel_wins_over_early_stopping_in_same_epoch():
    trainer = Trainer(seed=0)
    net = FeedForwardNetwork(2, 2, 1, learning_rate=1e-12, seed=0)

    class _StopAtThree:
        def on_epoch(self, epoch, metrics):
            if epoch == 3:
                trainer.cancel()

    session = trainer.run(
        net, XOR_TABLE, 100, early_stopping_patience=2, callbacks=[_StopAtThree()]
    )
    assert session.epoch_index == 3
    assert session.state is TrainerState.IDLE
    assert not session.completed


def test_cancel_during_final_epoch_is_not_completion():
    trainer = Trainer(seed=0)

    class _StopAtLast:
        def on_epoch(self, epoch, metrics):
            if epoch == 3:
                trainer.cancel()

    session = trainer.run(SingleUnit(2, seed=0), XOR_TABLE, 3, callbacks=[_StopAtLast()])
    assert session.epoch_index == 3
    assert session.state is TrainerState.IDLE


def test_result_callbacks_receive_typed_epochs():
    results = []

    class _Results:
        def on_result(self, result):
            results.append(result)

    data = make_threshold(n_train=10, n_eval=5, seed=0)
    flat = _Capture()
    Trainer(seed=0).run(
        SingleUnit(1, seed=0),
        data.train,
        4,
        eval_set=data.eval,
        eval_every=2,
        callbacks=[_Results(), flat],
    )
    assert [r.epoch for r in results] == [1, 2, 3, 4]
    assert [r.evaluation is not None for r in results] == [False, True, False, True]
    assert results[1].evaluation.samples == 5
    assert set(flat.history[0][1]) == {"loss"}
    assert set(flat.history[1][1]) == {"loss", "accuracy", "mae"}
