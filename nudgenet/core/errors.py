"""Exception types raised by the NudgeNet core."""

from __future__ import annotations


class NudgeNetError(Exception):
    """Base class for precondition failures detected by the core."""


class ShapeError(NudgeNetError, ValueError):
    """The network shape or a node's weight vector is malformed."""


class DimensionMismatchError(NudgeNetError, ValueError):
    """A vector does not match the size of the layer it is applied to."""


class NodeKindError(NudgeNetError, TypeError):
    """A node accessor was used on a layer holding the other node kind."""


class EmptyAccumulatorError(NudgeNetError, RuntimeError):
    """Nudges were applied before any training example contributed to them."""


__all__ = [
    "NudgeNetError",
    "ShapeError",
    "DimensionMismatchError",
    "NodeKindError",
    "EmptyAccumulatorError",
]
