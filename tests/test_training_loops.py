from __future__ import annotations

from typing import Mapping

import pytest

from nudgenet import Network, TrainConfig, Trainer, TrainingBatch, get_dataset


class _Capture:
    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self.history.append((epoch, {k: float(v) for k, v in metrics.items()}))


def test_and_gate_training_reduces_cost():
    spec = get_dataset("and")
    network = Network([2, 1], learning_rate=1.0)
    capture = _Capture()
    trainer = Trainer(network, callbacks=[capture])

    history = trainer.run(spec.batch, TrainConfig(epochs=1000, batch_size=1, eval_every=100))

    assert [epoch for epoch, _ in capture.history] == list(range(100, 1001, 100))
    assert history == capture.history
    first, last = capture.history[0][1], capture.history[-1][1]
    assert last["cost"] < first["cost"]
    assert last["batches"] == 4.0

    low = network.evaluate([0.0, 0.0])[0]
    high = network.evaluate([1.0, 1.0])[0]
    mixed = network.evaluate([1.0, 0.0])[0]
    assert high > mixed > low


def test_callables_receive_metrics():
    seen = []
    network = Network([2, 2, 1])
    network.randomize(seed=0)
    Trainer(network, callbacks=[lambda epoch, m: seen.append(epoch)]).run(
        get_dataset("or").batch, TrainConfig(epochs=3, batch_size=2)
    )
    assert seen == [1, 2, 3]


def test_shuffle_is_deterministic_per_seed():
    def _run(seed: int) -> list[float]:
        network = Network([1, 3, 1])
        network.randomize(seed=5)
        history = Trainer(network).run(
            get_dataset("sine", n_points=12).batch,
            TrainConfig(epochs=5, batch_size=4, seed=seed, shuffle=True),
        )
        return [m["cost"] for _, m in history]

    assert _run(1) == _run(1)


def test_early_stopping_halts_on_plateau():
    # Zero learning signal: every expected output equals the untrained output.
    network = Network([2, 1])
    flat = TrainingBatch.from_pairs((ex.inputs, (0.5,)) for ex in get_dataset("and").batch)
    history = Trainer(network).run(
        flat, TrainConfig(epochs=50, batch_size=4, early_stopping_patience=3)
    )
    assert len(history) == 4


def test_early_stopping_patience_counts_evaluations(caplog):
    network = Network([2, 1])
    flat = TrainingBatch.from_pairs((ex.inputs, (0.5,)) for ex in get_dataset("and").batch)
    with caplog.at_level("INFO", logger="nudgenet.training.trainer"):
        history = Trainer(network).run(
            flat, TrainConfig(epochs=100, batch_size=4, eval_every=5, early_stopping_patience=2)
        )
    assert [epoch for epoch, _ in history] == [5, 10, 15]
    assert "after 2 evaluations (10 epochs)" in caplog.text


def test_dimension_mismatch_is_reported_before_training():
    network = Network([3, 1])
    with pytest.raises(ValueError, match="inputs"):
        Trainer(network).run(get_dataset("xor").batch, TrainConfig())


def test_train_config_validation():
    with pytest.raises(ValueError):
        TrainConfig(batch_size=0)
    cfg = TrainConfig.from_mapping({"epochs": "3", "shuffle": 1, "early_stopping_patience": 2})
    assert cfg.epochs == 3 and cfg.shuffle is True and cfg.early_stopping_patience == 2
