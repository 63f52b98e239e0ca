"""Core numerical primitives for NudgeNet."""

from . import activations, errors, network, node, types

__all__ = ["activations", "errors", "network", "node", "types"]
