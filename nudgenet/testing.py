"""Tolerance-based float comparisons for the test suite."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .core.node import ComputeNode


def _epsilon(value: float) -> float:
    dtype = np.asarray(value).dtype
    if np.issubdtype(dtype, np.floating):
        return float(np.finfo(dtype).eps)
    return float(np.finfo(np.float64).eps)


def floats_equal(actual: float, expected: float, ulps: float = 4.0) -> bool:
    """Return whether ``actual`` is within ``ulps`` machine epsilons of ``expected``.

    The tolerance is relative to ``expected`` and uses the epsilon of its
    dtype, so ``np.float32`` values compare at single precision. Two NaNs
    compare equal; infinities only equal themselves.
    """

    a = float(actual)
    b = float(expected)
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    if a == b:
        return True
    if math.isinf(a) or math.isinf(b):
        return False
    tol = _epsilon(expected) * ulps
    if b == 0.0:
        return abs(a) <= tol
    return abs(a - b) / abs(b) <= tol


def assert_float_eq(actual: float, expected: float, ulps: float = 4.0) -> None:
    if not floats_equal(actual, expected, ulps=ulps):
        raise AssertionError(f"{actual!r} != {expected!r} (within {ulps} ulps)")


def assert_cache_state(
    node: ComputeNode,
    sum_cache: Optional[float],
    result_cache: Optional[float],
) -> None:
    """Assert both memo cells of ``node``; ``None`` means the cell must be empty."""

    for label, actual, expected in (
        ("sum_cache", node.sum_cache, sum_cache),
        ("result_cache", node.result_cache, result_cache),
    ):
        if expected is None:
            if actual is not None:
                raise AssertionError(f"{label} should be empty, holds {actual!r}")
        elif actual is None:
            raise AssertionError(f"{label} is empty, expected {expected!r}")
        else:
            assert_float_eq(actual, expected)


__all__ = ["assert_cache_state", "assert_float_eq", "floats_equal"]
