"""Activation utilities for NudgeNet."""

from __future__ import annotations

import math
from typing import overload

import numpy as np

from .types import Array


def _sigmoid_scalar(x: float) -> float:
    # Branch on sign so ``exp`` only ever sees non-positive arguments.
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    if x < 0.0:
        z = math.exp(x)
        return z / (1.0 + z)
    return x  # NaN


def _sigmoid_array(x: Array) -> Array:
    if not np.issubdtype(x.dtype, np.floating):
        x = x.astype(np.float64)
    out = np.empty_like(x)
    pos = x >= 0
    neg = ~pos
    out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
    z = np.exp(x[neg])
    out[neg] = z / (1.0 + z)
    return out


@overload
def sigmoid(x: float) -> float: ...


@overload
def sigmoid(x: Array) -> Array: ...


def sigmoid(x):
    """Return the logistic sigmoid of ``x``.

    Python scalars map to ``float``; numpy arrays are evaluated elementwise and
    keep their floating dtype. ``sigmoid(inf) == 1`` and ``sigmoid(-inf) == 0``
    without overflow, and NaN propagates.
    """

    if isinstance(x, np.ndarray):
        return _sigmoid_array(x)
    return _sigmoid_scalar(float(x))


@overload
def sigmoid_derivative(x: float) -> float: ...


@overload
def sigmoid_derivative(x: Array) -> Array: ...


def sigmoid_derivative(x):
    """Return ``sigmoid(x) * (1 - sigmoid(x))``."""

    s = sigmoid(x)
    return s * (1.0 - s)


__all__ = ["sigmoid", "sigmoid_derivative"]
