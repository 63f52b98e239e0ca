"""Layered network of scalar nodes with memoized evaluation and batched backprop."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import numpy as np

from .errors import DimensionMismatchError, EmptyAccumulatorError, NodeKindError
from .node import ComputeNode, InputNode, check_index
from .types import NetworkConfig, TrainingExample

logger = logging.getLogger(__name__)

AnyNode = Union[InputNode, ComputeNode]
Layer = List[AnyNode]
NodeT = TypeVar("NodeT", InputNode, ComputeNode)


class Network:
    """Feedforward network owning an arena of layers.

    Layer 0 holds :class:`InputNode` instances, every later layer holds
    :class:`ComputeNode` instances with one weight per node of the layer
    before it. Nodes are addressed by ``(layer, index)``.

    Evaluation is demand driven and memoized per node. Nothing here tracks
    input or parameter changes: after :meth:`set_inputs`, ``set_weight`` or
    ``set_bias`` the caller must run :meth:`invalidate` before reading
    outputs again. :meth:`train_on_data` and :meth:`evaluate` do this
    themselves.
    """

    def __init__(self, shape: Sequence[int], learning_rate: float = 1.0) -> None:
        self.config = NetworkConfig(shape=tuple(shape), learning_rate=learning_rate)
        self._layers: List[Layer] = self._build_layers(self.config.shape)
        logger.debug(
            "Built network shape=%s learning_rate=%s", list(self.config.shape), self.config.learning_rate
        )

    @classmethod
    def with_config(cls, config: NetworkConfig) -> "Network":
        return cls(config.shape, learning_rate=config.learning_rate)

    @staticmethod
    def _build_layers(shape: Sequence[int]) -> List[Layer]:
        layers: List[Layer] = [[InputNode(0.0) for _ in range(shape[0])]]
        for layer_index in range(1, len(shape)):
            n_inputs = shape[layer_index - 1]
            layers.append(
                [
                    ComputeNode(0.0, np.zeros(n_inputs), layer_index, n_inputs=n_inputs)
                    for _ in range(shape[layer_index])
                ]
            )
        return layers

    def __repr__(self) -> str:
        return f"Network(shape={list(self.shape)}, learning_rate={self.learning_rate})"

    # ------------------------------------------------------------------
    # Properties

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.config.shape

    @property
    def learning_rate(self) -> float:
        return self.config.learning_rate

    @property
    def layers(self) -> Tuple[Tuple[AnyNode, ...], ...]:
        return tuple(tuple(layer) for layer in self._layers)

    @property
    def n_layers(self) -> int:
        return len(self._layers)

    @property
    def last_layer(self) -> Tuple[AnyNode, ...]:
        return tuple(self._layers[-1])

    def parameter_count(self) -> int:
        dims = self.shape
        return int(sum(dims[i] * dims[i + 1] + dims[i + 1] for i in range(len(dims) - 1)))

    # ------------------------------------------------------------------
    # Indexing

    def get_layer(self, index: int) -> Tuple[AnyNode, ...]:
        return tuple(self._layers[check_index(index, len(self._layers), "layer")])

    def get_node(self, layer: int, index: int) -> AnyNode:
        nodes = self._layers[check_index(layer, len(self._layers), "layer")]
        return nodes[check_index(index, len(nodes), f"node (layer {layer})")]

    def get_node_as(self, layer: int, index: int, kind: Type[NodeT]) -> NodeT:
        node = self.get_node(layer, index)
        if not isinstance(node, kind):
            raise NodeKindError(
                f"node ({layer}, {index}) is a {type(node).__name__}, not a {kind.__name__}"
            )
        return node

    def get_start_node(self, index: int) -> InputNode:
        return self.get_node_as(0, index, InputNode)

    def get_main_node(self, layer: int, index: int) -> ComputeNode:
        if layer == 0:
            raise NodeKindError("no main nodes in layer 0")
        return self.get_node_as(layer, index, ComputeNode)

    def compute_nodes(self) -> Iterator[ComputeNode]:
        """Yield every compute node, layer by layer in forward order."""

        for layer in self._layers[1:]:
            for node in layer:
                yield node  # type: ignore[misc]

    # ------------------------------------------------------------------
    # Evaluation

    def get_output(self, index: int) -> float:
        return self.get_node(len(self._layers) - 1, index).get_value(self)

    def get_outputs(self) -> List[float]:
        return [node.get_value(self) for node in self._layers[-1]]

    def set_input(self, index: int, value: float) -> None:
        self.get_start_node(index).set_value(value)

    def set_inputs(self, values: Sequence[float]) -> None:
        if len(values) != len(self._layers[0]):
            raise DimensionMismatchError(
                "number of inputs must match number of nodes in layer 0 "
                f"(expected {len(self._layers[0])}, got {len(values)})"
            )
        for node, value in zip(self._layers[0], values):
            node.set_value(value)  # type: ignore[union-attr]

    def invalidate(self) -> None:
        for node in self.compute_nodes():
            node.invalidate()

    def evaluate(self, inputs: Sequence[float]) -> List[float]:
        """Load ``inputs``, drop stale caches and return the fresh outputs."""

        self.set_inputs(inputs)
        self.invalidate()
        return self.get_outputs()

    def _check_expected(self, expected: Sequence[float]) -> None:
        if len(expected) != len(self._layers[-1]):
            raise DimensionMismatchError(
                "Length of expected must match length of output "
                f"(expected {len(self._layers[-1])}, got {len(expected)})"
            )

    def get_current_cost(self, expected: Sequence[float]) -> float:
        """Return the squared error of the current outputs against ``expected``."""

        self._check_expected(expected)
        return float(
            sum((target - node.get_value(self)) ** 2 for node, target in zip(self._layers[-1], expected))
        )

    def mean_cost(self, examples: Iterable[TrainingExample]) -> float:
        """Return the mean cost over ``examples`` without touching the accumulators."""

        costs = []
        for example in examples:
            self.evaluate(example.inputs)
            costs.append(self.get_current_cost(example.expected))
        if not costs:
            raise ValueError("cannot compute the cost of an empty batch")
        return float(np.mean(costs))

    # ------------------------------------------------------------------
    # Training

    def request_nudges_end(self, expected: Sequence[float]) -> None:
        """Seed the backward sweep with ``-dCost/dOutput`` on every output node."""

        self._check_expected(expected)
        for node, target in zip(self._layers[-1], expected):
            node.request_nudge(-2.0 * (node.get_value(self) - target))

    def train_on_current_data(self, expected: Sequence[float]) -> None:
        self.request_nudges_end(expected)
        # Later layers first: a node's pending nudge is complete only once
        # every node downstream of it has pushed its share.
        for layer in reversed(self._layers[1:]):
            for node in layer:
                node.calc_nudge(self)  # type: ignore[union-attr]

    def train_on_data(self, example: TrainingExample) -> None:
        self.set_inputs(example.inputs)
        self.invalidate()
        self.train_on_current_data(example.expected)

    def clear_nudges(self) -> None:
        for node in self.compute_nodes():
            node.clear_nudges()

    def apply_nudges(self) -> None:
        """Move every parameter by its mean accumulated nudge, then reset the accumulators."""

        for node in self.compute_nodes():
            node.apply_nudges()
            node.clear_nudges()

    def train_on_batch(self, batch: Iterable[TrainingExample]) -> None:
        count = 0
        try:
            for example in batch:
                self.train_on_data(example)
                count += 1
        except Exception:
            # A half-accumulated batch must not leak into the next update.
            self.clear_nudges()
            raise
        if count == 0:
            raise EmptyAccumulatorError("cannot train on an empty batch")
        self.apply_nudges()
        logger.debug("Applied nudges averaged over %d examples", count)

    def train_on_batches(self, batches: Iterable[Iterable[TrainingExample]]) -> None:
        for batch in batches:
            self.train_on_batch(batch)

    # ------------------------------------------------------------------
    # Initialisation

    def randomize(self, seed: Optional[int] = None, scale: float = 0.5) -> None:
        """Draw every weight and bias from ``N(0, scale)`` and invalidate the caches."""

        rng = np.random.default_rng(seed)
        for node in self.compute_nodes():
            node.set_weights(rng.normal(0.0, scale, size=node.weights.size))
            node.set_bias(float(rng.normal(0.0, scale)))
        self.invalidate()


__all__ = ["Network", "AnyNode", "Layer"]
