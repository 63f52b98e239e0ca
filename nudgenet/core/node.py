"""Graph nodes for the layered NudgeNet network.

Nodes never hold references to each other. A compute node reaches the
previous layer through ``network.get_node(layer_index - 1, i)`` every time it
needs an upstream value or wants to push a nudge upstream, so the network
stays the single owner of the whole graph.
"""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from .activations import sigmoid, sigmoid_derivative
from .errors import EmptyAccumulatorError, ShapeError
from .types import Array

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .network import Network


def check_index(index: int, size: int, what: str) -> int:
    """Return ``index`` if it addresses one of ``size`` entries, else raise ``IndexError``."""

    if not 0 <= index < size:
        raise IndexError(f"{what} index {index} out of range for {size} entries")
    return index


@dataclass(eq=False)
class InputNode:
    """Layer-0 node holding an externally supplied value."""

    value: float = 0.0

    def get_value(self, network: "Network") -> float:
        return self.value

    def set_value(self, value: float) -> None:
        self.value = float(value)

    def invalidate(self) -> None:
        pass

    def request_nudge(self, amount: float) -> None:
        # Inputs terminate the backward sweep.
        pass


@dataclass(eq=False)
class ComputeNode:
    """Sigmoid unit with one weight per node of the previous layer.

    ``get_value`` is logically pure but operationally memoizing: the first read
    after an invalidation pulls every upstream value through the network and
    stores both the weighted sum and its activation. Changing ``weights`` or
    ``bias`` directly does not clear those caches; callers invalidate
    explicitly (``Network.invalidate`` or :meth:`invalidate`).

    The gradient accumulators follow a two-phase protocol. During a batch,
    :meth:`calc_nudge` adds one example's contribution per call. At the end of
    the batch :meth:`apply_nudges` moves the parameters by the mean
    contribution and :meth:`clear_nudges` resets the accumulators.
    """

    bias: float
    weights: Array
    layer_index: int
    n_inputs: InitVar[Optional[int]] = None
    sum_cache: Optional[float] = field(default=None, init=False)
    result_cache: Optional[float] = field(default=None, init=False)
    bias_gradient_sum: float = field(default=0.0, init=False)
    weight_gradient_sum: Array = field(init=False, repr=False)
    pending_nudge: float = field(default=0.0, init=False)
    nudge_count: int = field(default=0, init=False)

    def __post_init__(self, n_inputs: Optional[int]) -> None:
        if self.layer_index < 1:
            raise ShapeError(f"compute nodes live in layers >= 1, got layer {self.layer_index}")
        self.bias = float(self.bias)
        self.weights = np.array(self.weights, dtype=np.float64).reshape(-1)
        if n_inputs is not None and self.weights.size != n_inputs:
            raise ShapeError(
                f"node in layer {self.layer_index} needs {n_inputs} weights, "
                f"got {self.weights.size}"
            )
        self.weight_gradient_sum = np.zeros_like(self.weights)

    # ------------------------------------------------------------------
    # Parameters

    def get_weight(self, index: int) -> float:
        return float(self.weights[check_index(index, self.weights.size, "weight")])

    def set_weight(self, index: int, value: float) -> None:
        self.weights[check_index(index, self.weights.size, "weight")] = value

    def set_weights(self, values: Sequence[float]) -> None:
        new = np.asarray(values, dtype=np.float64).reshape(-1)
        if new.size != self.weights.size:
            raise ShapeError(
                f"node in layer {self.layer_index} needs {self.weights.size} weights, "
                f"got {new.size}"
            )
        self.weights[:] = new

    def set_bias(self, value: float) -> None:
        self.bias = float(value)

    # ------------------------------------------------------------------
    # Evaluation

    def get_value(self, network: "Network") -> float:
        if self.result_cache is not None:
            return self.result_cache
        prev = self.layer_index - 1
        inputs = np.fromiter(
            (network.get_node(prev, i).get_value(network) for i in range(self.weights.size)),
            dtype=np.float64,
            count=self.weights.size,
        )
        total = float(np.dot(self.weights, inputs)) + self.bias
        self.sum_cache = total
        self.result_cache = sigmoid(total)
        return self.result_cache

    def get_sum(self, network: "Network") -> float:
        """Return the pre-activation sum, evaluating the node if needed."""

        if self.sum_cache is None:
            self.get_value(network)
        return float(self.sum_cache)  # type: ignore[arg-type]

    def invalidate(self) -> None:
        self.sum_cache = None
        self.result_cache = None

    # ------------------------------------------------------------------
    # Gradient accumulation

    def request_nudge(self, amount: float) -> None:
        self.pending_nudge += amount

    def calc_nudge(self, network: "Network") -> None:
        """Fold the pending nudge into this node's accumulators and push it upstream.

        Every downstream node must already have called :meth:`request_nudge`
        for the current example. The pending nudge is consumed.
        """

        base = self.pending_nudge * sigmoid_derivative(self.get_sum(network)) * network.learning_rate
        self.bias_gradient_sum += base
        prev = self.layer_index - 1
        for i in range(self.weights.size):
            source = network.get_node(prev, i)
            self.weight_gradient_sum[i] += base * source.get_value(network)
            source.request_nudge(base * float(self.weights[i]))
        self.pending_nudge = 0.0
        self.nudge_count += 1

    def apply_nudges(self) -> None:
        if self.nudge_count == 0:
            raise EmptyAccumulatorError(
                f"node in layer {self.layer_index} has no accumulated nudges to apply"
            )
        self.bias += self.bias_gradient_sum / self.nudge_count
        self.weights += self.weight_gradient_sum / self.nudge_count

    def clear_nudges(self) -> None:
        self.bias_gradient_sum = 0.0
        self.weight_gradient_sum[:] = 0.0
        self.pending_nudge = 0.0
        self.nudge_count = 0


__all__ = ["InputNode", "ComputeNode", "check_index"]
