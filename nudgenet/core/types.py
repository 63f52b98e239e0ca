"""Core typing contracts for NudgeNet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence, Tuple

import numpy as np

from .errors import ShapeError

Array = np.ndarray


def _validate_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    dims = tuple(int(n) for n in shape)
    if len(dims) < 2:
        raise ShapeError("network must have at least start and end layers")
    for idx, n in enumerate(dims):
        if n <= 0:
            raise ShapeError(f"layer {idx} must contain at least one node, got {n}")
    return dims


@dataclass(frozen=True)
class NetworkConfig:
    """Shape and learning rate used to build a :class:`~nudgenet.core.network.Network`."""

    shape: Tuple[int, ...]
    learning_rate: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "shape", _validate_shape(self.shape))
        rate = float(self.learning_rate)
        if not rate > 0.0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        object.__setattr__(self, "learning_rate", rate)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "NetworkConfig":
        if "shape" not in data:
            raise KeyError("Network config requires `shape`")
        return cls(
            shape=tuple(data["shape"]),  # type: ignore[arg-type]
            learning_rate=float(data.get("learning_rate", 1.0)),  # type: ignore[arg-type]
        )

    def to_dict(self) -> dict:
        return {"shape": list(self.shape), "learning_rate": self.learning_rate}


@dataclass(frozen=True)
class TrainingExample:
    """One input vector paired with the outputs the network should produce."""

    inputs: Tuple[float, ...]
    expected: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(float(v) for v in self.inputs))
        object.__setattr__(self, "expected", tuple(float(v) for v in self.expected))


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`nudgenet.training.pipelines.run_pipeline`."""

    epochs: int
    final_cost: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    outputs: Tuple[Tuple[float, ...], ...] = field(default_factory=tuple)


__all__ = ["Array", "NetworkConfig", "TrainingExample", "RunResult"]
