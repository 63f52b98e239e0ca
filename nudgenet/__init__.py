"""NudgeNet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import (
    DimensionMismatchError,
    EmptyAccumulatorError,
    NodeKindError,
    NudgeNetError,
    ShapeError,
)
from .core.network import Network
from .core.node import ComputeNode, InputNode
from .core.types import NetworkConfig, RunResult, TrainingExample
from .data import TrainingBatch, get_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import TrainConfig, Trainer

__version__ = "0.3.0"

__all__ = [
    "ComputeNode",
    "DimensionMismatchError",
    "EmptyAccumulatorError",
    "InputNode",
    "Network",
    "NetworkConfig",
    "NodeKindError",
    "NudgeNetError",
    "RunResult",
    "ShapeError",
    "TrainConfig",
    "Trainer",
    "TrainingBatch",
    "TrainingExample",
    "activations",
    "get_dataset",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
