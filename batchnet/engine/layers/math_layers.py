# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Linear and Element-wise Layers

- Linear (alias InnerProduct): y = flatten(x, axis) @ W.T + b,
  W shaped (out_features, in_features)
- MatMul: y = x @ B for a 2-D parameter or second bottom B
- Add / Mul: broadcasting element-wise sum / product of all operands
"""

from __future__ import annotations

import math
from typing import Any, Dict, List

import numpy as np

from ..registry import LayerRegistry


def _linear_shapes(bottom_shapes, param_shapes, attrs):
    if not param_shapes:
        raise ValueError("Linear needs a weight parameter")
    shape = tuple(bottom_shapes[0])
    axis = int(attrs.get("axis", 1))
    weight = param_shapes[0]
    if len(weight) != 2:
        raise ValueError(f"Linear weight must be 2-D, got {weight}")
    in_features = math.prod(shape[axis:])
    if in_features != weight[1]:
        raise ValueError(
            f"Linear expects {weight[1]} input features, bottom {shape} "
            f"flattens to {in_features}"
        )
    if len(param_shapes) > 1 and tuple(param_shapes[1]) != (weight[0],):
        raise ValueError(f"Linear bias must be ({weight[0]},), got {param_shapes[1]}")
    return [shape[:axis] + (weight[0],)]


@LayerRegistry.register("Linear", shape_fn=_linear_shapes, aliases=["InnerProduct"])
def forward_linear(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    axis = int(attrs.get("axis", 1))
    weight = params[0]
    lead = x.shape[:axis]
    y = x.reshape(math.prod(lead), weight.shape[1]) @ weight.T
    if len(params) > 1:
        y = y + params[1]
    return [y.reshape(lead + (weight.shape[0],))]


def _matmul_shapes(bottom_shapes, param_shapes, attrs):
    operands = list(bottom_shapes) + list(param_shapes)
    if len(operands) != 2:
        raise ValueError(f"MatMul takes 2 operands, got {len(operands)}")
    a, b = tuple(operands[0]), tuple(operands[1])
    if len(b) != 2 or len(a) < 1:
        raise ValueError(f"MatMul supports (..., K) x (K, N), got {a} x {b}")
    if a[-1] != b[0]:
        raise ValueError(f"MatMul inner dimensions differ: {a} x {b}")
    return [a[:-1] + (b[1],)]


@LayerRegistry.register("MatMul", shape_fn=_matmul_shapes)
def forward_matmul(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    a, b = (list(bottoms) + list(params))[:2]
    return [np.matmul(a, b)]


def _broadcast_shapes(bottom_shapes, param_shapes, attrs):
    return [np.broadcast_shapes(*bottom_shapes, *param_shapes)]


@LayerRegistry.register("Add", shape_fn=_broadcast_shapes)
def forward_add(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    operands = list(bottoms) + list(params)
    result = operands[0]
    for operand in operands[1:]:
        result = result + operand
    return [result]


@LayerRegistry.register("Mul", shape_fn=_broadcast_shapes)
def forward_mul(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    operands = list(bottoms) + list(params)
    result = operands[0]
    for operand in operands[1:]:
        result = result * operand
    return [result]
