"""Training loops and pipeline assembly."""

from .pipelines import load_preset, presets, run_pipeline
from .trainer import TrainConfig, Trainer

__all__ = ["TrainConfig", "Trainer", "load_preset", "presets", "run_pipeline"]
