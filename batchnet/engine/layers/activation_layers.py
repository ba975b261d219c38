# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Activation Layers

- Relu: max(0, x)
- Sigmoid: 1 / (1 + exp(-x))
- Tanh: hyperbolic tangent
- Softmax: normalized exponential along `axis` (default 1)
"""

from __future__ import annotations

from typing import Any, Dict, List

import numpy as np

from ..registry import LayerRegistry, same_shape


@LayerRegistry.register("Relu", shape_fn=same_shape)
def forward_relu(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    negative_slope = float(attrs.get("negative_slope", 0.0))
    x = bottoms[0]
    if negative_slope:
        return [np.where(x > 0, x, x * negative_slope)]
    return [np.maximum(x, 0)]


@LayerRegistry.register("Sigmoid", shape_fn=same_shape)
def forward_sigmoid(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    # Split by sign to avoid overflow in exp
    out = np.empty_like(x)
    pos = x >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
    exp_x = np.exp(x[~pos])
    out[~pos] = exp_x / (1.0 + exp_x)
    return [out]


@LayerRegistry.register("Tanh", shape_fn=same_shape)
def forward_tanh(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    return [np.tanh(bottoms[0])]


@LayerRegistry.register("Softmax", shape_fn=same_shape)
def forward_softmax(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    axis = int(attrs.get("axis", 1 if x.ndim > 1 else 0))
    shifted = x - np.max(x, axis=axis, keepdims=True)
    exp_x = np.exp(shifted)
    return [exp_x / np.sum(exp_x, axis=axis, keepdims=True)]
