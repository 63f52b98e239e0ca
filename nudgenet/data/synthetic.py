"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import itertools
from typing import Callable, Dict

import numpy as np

from .batches import TrainingBatch
from .registry import DatasetSpec, register_dataset

_GATES: Dict[str, Callable[[int, int], int]] = {
    "xor": lambda a, b: a ^ b,
    "and": lambda a, b: a & b,
    "or": lambda a, b: a | b,
}


def _gate_factory(name: str):
    gate = _GATES[name]

    def _factory(repeat: int = 1, **_: object) -> DatasetSpec:
        if repeat < 1:
            raise ValueError(f"repeat must be >= 1, got {repeat}")
        pairs = [
            ((float(a), float(b)), (float(gate(a, b)),))
            for a, b in itertools.product((0, 1), repeat=2)
        ]
        return DatasetSpec(
            name=name,
            batch=TrainingBatch.from_pairs(pairs * repeat),
            n_inputs=2,
            n_outputs=1,
            provenance={"type": "logic_gate", "gate": name, "repeat": repeat},
        )

    return _factory


for _name in _GATES:
    register_dataset(_name, _gate_factory(_name))


@register_dataset("parity")
def _parity(n_bits: int = 3, **_: object) -> DatasetSpec:
    if n_bits < 1:
        raise ValueError(f"n_bits must be >= 1, got {n_bits}")
    bits = np.array(list(itertools.product((0, 1), repeat=n_bits)), dtype=np.float64)
    targets = (bits.sum(axis=1) % 2).reshape(-1, 1)
    return DatasetSpec(
        name="parity",
        batch=TrainingBatch.from_arrays(bits, targets),
        n_inputs=n_bits,
        n_outputs=1,
        provenance={"type": "parity", "n_bits": n_bits},
    )


def _make_sine(freq: float, n_points: int, seed: int, noise: float) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 1.0, n_points, dtype=np.float64).reshape(-1, 1)
    # Squashed into (0.1, 0.9) so a sigmoid output layer can reach it.
    y = 0.5 + 0.4 * np.sin(2.0 * freq * np.pi * x)
    y = np.clip(y + noise * rng.standard_normal(size=y.shape), 0.0, 1.0)
    return x, y


@register_dataset("sine")
def _sine(
    freq: float = 1.0,
    n_points: int = 32,
    seed: int = 0,
    noise: float = 0.0,
    **_: object,
) -> DatasetSpec:
    if n_points < 1:
        raise ValueError(f"n_points must be >= 1, got {n_points}")
    x, y = _make_sine(freq=freq, n_points=n_points, seed=seed, noise=noise)
    return DatasetSpec(
        name="sine",
        batch=TrainingBatch.from_arrays(x, y),
        n_inputs=1,
        n_outputs=1,
        provenance={
            "type": "sine",
            "freq": freq,
            "n_points": n_points,
            "seed": seed,
            "noise": noise,
        },
    )
