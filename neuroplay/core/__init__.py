"""Core numerical primitives for neuroplay."""

from . import activations, errors, matrix, network, neuron, types

__all__ = ["activations", "errors", "matrix", "network", "neuron", "types"]
