"""Deterministic epoch loop driving :meth:`Network.train_on_batches`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple

from ..core.network import Network
from ..data.batches import TrainingBatch

logger = logging.getLogger(__name__)

History = List[Tuple[int, Mapping[str, float]]]


@dataclass(frozen=True)
class TrainConfig:
    """Knobs of the epoch loop."""

    epochs: int = 1
    batch_size: int = 4
    seed: int = 0
    shuffle: bool = False
    eval_every: int = 1
    # Counted in evaluations, i.e. every `eval_every` epochs.
    early_stopping_patience: int | None = None

    def __post_init__(self) -> None:
        if self.epochs < 1:
            raise ValueError(f"epochs must be >= 1, got {self.epochs}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.eval_every < 1:
            raise ValueError(f"eval_every must be >= 1, got {self.eval_every}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "TrainConfig":
        patience = data.get("early_stopping_patience")
        return cls(
            epochs=int(data.get("epochs", 1)),  # type: ignore[arg-type]
            batch_size=int(data.get("batch_size", 4)),  # type: ignore[arg-type]
            seed=int(data.get("seed", 0)),  # type: ignore[arg-type]
            shuffle=bool(data.get("shuffle", False)),
            eval_every=int(data.get("eval_every", 1)),  # type: ignore[arg-type]
            early_stopping_patience=int(patience) if patience is not None else None,  # type: ignore[arg-type]
        )


class Trainer:
    """Run mini-batch gradient descent epochs and report the mean cost."""

    def __init__(self, network: Network, callbacks: Sequence[object] | None = None) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])

    def run(self, batch: TrainingBatch, config: TrainConfig) -> History:
        batch.check_dimensions(self.network.shape[0], self.network.shape[-1])
        if len(batch) == 0:
            raise ValueError("cannot train on an empty dataset")

        history: History = []
        best_cost = float("inf")
        evals_no_improve = 0
        for epoch in range(1, config.epochs + 1):
            source = batch.shuffled(config.seed + epoch) if config.shuffle else batch
            chunks = source.chunks(config.batch_size)
            self.network.train_on_batches(chunks)

            if epoch % config.eval_every != 0 and epoch != config.epochs:
                continue
            cost = self.network.mean_cost(batch)
            metrics = {"cost": cost, "batches": float(len(chunks))}
            history.append((epoch, metrics))
            self._emit_epoch(epoch, metrics)
            logger.info("epoch %d/%d cost=%.6f", epoch, config.epochs, cost)

            if cost < best_cost - 1e-12:
                best_cost = cost
                evals_no_improve = 0
            else:
                evals_no_improve += 1
                if (
                    config.early_stopping_patience
                    and evals_no_improve >= config.early_stopping_patience
                ):
                    logger.info(
                        "Stopping early after %d evaluations (%d epochs) without improvement",
                        evals_no_improve,
                        evals_no_improve * config.eval_every,
                    )
                    break
        return history

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["History", "TrainConfig", "Trainer"]
