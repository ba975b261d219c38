# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shape Layers

- Flatten: collapse to (prod(shape[:axis]), prod(shape[axis:]))
- Reshape: batch-preserving reshape; `shape` lists per-example dims
  (one entry may be -1) and the leading axis is carried through
- Concat: join bottoms along `axis` (default 1)
- Identity (alias Dropout): pass-through at inference time
"""

from __future__ import annotations

import math
from typing import Any, Dict, List

import numpy as np

from ..registry import LayerRegistry, same_shape


def _flatten_shapes(bottom_shapes, param_shapes, attrs):
    shape = tuple(bottom_shapes[0])
    axis = int(attrs.get("axis", 1))
    return [(math.prod(shape[:axis]), math.prod(shape[axis:]))]


@LayerRegistry.register("Flatten", shape_fn=_flatten_shapes)
def forward_flatten(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    (shape,) = _flatten_shapes([x.shape], [], attrs)
    return [x.reshape(shape)]


def _reshape_shapes(bottom_shapes, param_shapes, attrs):
    shape = tuple(bottom_shapes[0])
    if not shape:
        raise ValueError("Reshape needs a bottom with a leading axis")
    target = [int(d) for d in attrs.get("shape", [])]
    per_example = math.prod(shape[1:])

    if target.count(-1) > 1:
        raise ValueError(f"Reshape target {target} has more than one -1")
    if -1 in target:
        known = math.prod(d for d in target if d != -1)
        if known == 0 or per_example % known:
            raise ValueError(f"Reshape cannot fit {per_example} elements into {target}")
        target[target.index(-1)] = per_example // known
    if math.prod(target) != per_example:
        raise ValueError(f"Reshape cannot fit {per_example} elements into {target}")
    return [(shape[0],) + tuple(target)]


@LayerRegistry.register("Reshape", shape_fn=_reshape_shapes)
def forward_reshape(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    (shape,) = _reshape_shapes([x.shape], [], attrs)
    return [x.reshape(shape)]


def _concat_shapes(bottom_shapes, param_shapes, attrs):
    axis = int(attrs.get("axis", 1))
    first = tuple(bottom_shapes[0])
    total = 0
    for shape in bottom_shapes:
        shape = tuple(shape)
        if len(shape) != len(first) or any(
            a != b for i, (a, b) in enumerate(zip(shape, first)) if i != axis
        ):
            raise ValueError(f"Concat bottoms {first} and {shape} differ off axis {axis}")
        total += shape[axis]
    return [first[:axis] + (total,) + first[axis + 1 :]]


@LayerRegistry.register("Concat", shape_fn=_concat_shapes)
def forward_concat(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    return [np.concatenate(bottoms, axis=int(attrs.get("axis", 1)))]


@LayerRegistry.register("Identity", shape_fn=same_shape, aliases=["Dropout"])
def forward_identity(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    return [bottoms[0]]
