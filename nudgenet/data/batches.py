"""Training batch container and mini-batch chunking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple, overload

import numpy as np

from ..core.errors import DimensionMismatchError
from ..core.types import Array, TrainingExample


@dataclass(frozen=True)
class TrainingBatch:
    """Immutable, ordered group of :class:`TrainingExample` values."""

    examples: Tuple[TrainingExample, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "examples", tuple(self.examples))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Sequence[float], Sequence[float]]]) -> "TrainingBatch":
        return cls(tuple(TrainingExample(inputs, expected) for inputs, expected in pairs))

    @classmethod
    def from_arrays(cls, inputs: Array, targets: Array) -> "TrainingBatch":
        """Build a batch from row-aligned ``(n, d_in)`` and ``(n, d_out)`` arrays."""

        x = np.asarray(inputs, dtype=np.float64)
        y = np.asarray(targets, dtype=np.float64)
        if x.ndim == 1:
            x = x.reshape(-1, 1)
        if y.ndim == 1:
            y = y.reshape(-1, 1)
        if x.shape[0] != y.shape[0]:
            raise DimensionMismatchError(
                f"inputs have {x.shape[0]} rows but targets have {y.shape[0]}"
            )
        return cls(tuple(TrainingExample(row_x.tolist(), row_y.tolist()) for row_x, row_y in zip(x, y)))

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self) -> Iterator[TrainingExample]:
        return iter(self.examples)

    @overload
    def __getitem__(self, index: int) -> TrainingExample: ...

    @overload
    def __getitem__(self, index: slice) -> "TrainingBatch": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return TrainingBatch(self.examples[index])
        return self.examples[index]

    def chunks(self, max_size: int) -> List["TrainingBatch"]:
        """Split into consecutive sub-batches of at most ``max_size`` examples.

        Order is preserved within and across chunks and only the last chunk
        may be smaller. The batch itself is left untouched.
        """

        if max_size <= 0:
            raise ValueError(f"chunk size must be positive, got {max_size}")
        return [
            TrainingBatch(self.examples[start : start + max_size])
            for start in range(0, len(self.examples), max_size)
        ]

    def shuffled(self, seed: int) -> "TrainingBatch":
        """Return a copy with the examples permuted by a seeded generator."""

        rng = np.random.default_rng(seed)
        order = rng.permutation(len(self.examples))
        return TrainingBatch(tuple(self.examples[i] for i in order))

    def check_dimensions(self, n_inputs: int, n_outputs: int) -> None:
        """Raise if any example does not fit a network with the given end layers."""

        for idx, example in enumerate(self.examples):
            if len(example.inputs) != n_inputs:
                raise DimensionMismatchError(
                    f"example {idx} has {len(example.inputs)} inputs, network expects {n_inputs}"
                )
            if len(example.expected) != n_outputs:
                raise DimensionMismatchError(
                    f"example {idx} has {len(example.expected)} expected outputs, "
                    f"network produces {n_outputs}"
                )


__all__ = ["TrainingBatch"]
