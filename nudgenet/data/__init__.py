"""Training data containers and the dataset registry."""

# Ensure built-in datasets register themselves when the package is imported.
from . import synthetic as _synthetic  # noqa: F401
from .batches import TrainingBatch
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "TrainingBatch",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
