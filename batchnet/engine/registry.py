# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Layer Registry

Maps layer types to their forward and shape functions.
Uses a decorator-based registration pattern for extensibility.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np


# Signature: (bottoms, params, attrs) -> tops
ForwardFunc = Callable[[List[np.ndarray], List[np.ndarray], Dict[str, Any]], List[np.ndarray]]

# Signature: (bottom_shapes, param_shapes, attrs) -> top_shapes
ShapeFunc = Callable[[List[Tuple[int, ...]], List[Tuple[int, ...]], Dict[str, Any]], List[Tuple[int, ...]]]


@dataclass(frozen=True)
class LayerKernel:
    """Forward and shape functions registered for one layer type."""

    op_type: str
    forward: ForwardFunc
    infer_shapes: ShapeFunc


class LayerRegistry:
    """
    Registry for layer implementations.

    Shape functions raise ValueError when the inputs cannot be combined;
    the Net turns that into a TopologyError.

    Example:
        @LayerRegistry.register("Relu", shape_fn=same_shape)
        def forward_relu(bottoms, params, attrs):
            return [np.maximum(bottoms[0], 0)]

        kernel = LayerRegistry.get_kernel("Relu")
        kernel.forward([x], [], {})
    """

    _registry: Dict[str, LayerKernel] = {}

    @classmethod
    def register(
        cls,
        op_type: str,
        shape_fn: ShapeFunc,
        aliases: Optional[List[str]] = None,
    ) -> Callable[[ForwardFunc], ForwardFunc]:
        """
        Decorator to register a layer forward function.

        Args:
            op_type: Layer type (e.g., "Linear", "Conv").
            shape_fn: Computes top shapes from bottom and parameter shapes.
            aliases: Alternative names for the layer type.
        """

        def decorator(func: ForwardFunc) -> ForwardFunc:
            for name in [op_type] + list(aliases or []):
                cls._registry[name] = LayerKernel(
                    op_type=name, forward=func, infer_shapes=shape_fn
                )
            return func

        return decorator

    @classmethod
    def get_kernel(cls, op_type: str) -> LayerKernel:
        """
        Get the kernel for a layer type.

        Raises:
            KeyError: If the layer type is not registered.
        """
        if op_type not in cls._registry:
            raise KeyError(
                f"Layer '{op_type}' not registered. "
                f"Supported layers: {cls.list_operators()}"
            )
        return cls._registry[op_type]

    @classmethod
    def is_supported(cls, op_type: str) -> bool:
        return op_type in cls._registry

    @classmethod
    def list_operators(cls) -> List[str]:
        """List all registered layer types."""
        return sorted(cls._registry.keys())

    @classmethod
    def count(cls) -> int:
        return len(cls._registry)


def same_shape(bottom_shapes, param_shapes, attrs):
    """Shape function for layers whose single top matches the first bottom."""
    return [tuple(bottom_shapes[0])]
