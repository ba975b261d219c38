# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Convolution and Pooling Layers

- Conv: 2D convolution over NCHW bottoms, W shaped (C_out, C_in / group, kh, kw)
- MaxPool / AveragePool: 2D window pooling
- GlobalAveragePool: mean over every spatial axis, keeps rank

Attributes follow the ONNX names: kernel_shape, strides, pads, dilations,
group. Padding is symmetric: pads = [pad_h, pad_w].
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..registry import LayerRegistry


def _pair(value: Any, default: int) -> Tuple[int, int]:
    if value is None:
        return (default, default)
    if isinstance(value, (int, np.integer)):
        return (int(value), int(value))
    values = [int(v) for v in value]
    if len(values) == 1:
        return (values[0], values[0])
    return (values[0], values[1])


def _out_size(size: int, kernel: int, stride: int, pad: int, dilation: int = 1) -> int:
    extent = dilation * (kernel - 1) + 1
    out = (size + 2 * pad - extent) // stride + 1
    if out < 1:
        raise ValueError(
            f"window {kernel} (dilation {dilation}) does not fit input size {size} "
            f"with padding {pad}"
        )
    return out


def _windows(
    x: np.ndarray,
    kernel: Tuple[int, int],
    strides: Tuple[int, int],
    pads: Tuple[int, int],
    dilations: Tuple[int, int] = (1, 1),
    pad_value: float = 0.0,
) -> np.ndarray:
    """View x (N, C, H, W) as windows shaped (N, C, H_out, W_out, kh, kw)."""
    if pads != (0, 0):
        x = np.pad(
            x,
            ((0, 0), (0, 0), (pads[0], pads[0]), (pads[1], pads[1])),
            mode="constant",
            constant_values=pad_value,
        )
    extent = (
        dilations[0] * (kernel[0] - 1) + 1,
        dilations[1] * (kernel[1] - 1) + 1,
    )
    view = sliding_window_view(x, extent, axis=(2, 3))
    return view[:, :, :: strides[0], :: strides[1], :: dilations[0], :: dilations[1]]


def _require_nchw(shape: Sequence[int], layer: str) -> None:
    if len(shape) != 4:
        raise ValueError(f"{layer} expects a 4-D NCHW bottom, got {tuple(shape)}")


def _conv_shapes(bottom_shapes, param_shapes, attrs):
    shape = tuple(bottom_shapes[0])
    _require_nchw(shape, "Conv")
    if not param_shapes or len(param_shapes[0]) != 4:
        raise ValueError("Conv needs a 4-D weight parameter")
    n, c, h, w = shape
    c_out, c_in_group, kh, kw = param_shapes[0]
    group = int(attrs.get("group", 1))
    if c_in_group * group != c:
        raise ValueError(
            f"Conv weight expects {c_in_group * group} channels, bottom has {c}"
        )
    if c_out % group:
        raise ValueError(f"Conv output channels {c_out} not divisible by group {group}")
    if len(param_shapes) > 1 and tuple(param_shapes[1]) != (c_out,):
        raise ValueError(f"Conv bias must be ({c_out},), got {param_shapes[1]}")

    sh, sw = _pair(attrs.get("strides"), 1)
    ph, pw = _pair(attrs.get("pads"), 0)
    dh, dw = _pair(attrs.get("dilations"), 1)
    return [
        (
            n,
            c_out,
            _out_size(h, kh, sh, ph, dh),
            _out_size(w, kw, sw, pw, dw),
        )
    ]


@LayerRegistry.register("Conv", shape_fn=_conv_shapes, aliases=["Convolution"])
def forward_conv(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    weight = params[0]
    c_out, c_in_group, kh, kw = weight.shape
    group = int(attrs.get("group", 1))

    windows = _windows(
        x,
        (kh, kw),
        _pair(attrs.get("strides"), 1),
        _pair(attrs.get("pads"), 0),
        _pair(attrs.get("dilations"), 1),
    )

    out_per_group = c_out // group
    results = []
    for g in range(group):
        w_g = weight[g * out_per_group : (g + 1) * out_per_group]
        x_g = windows[:, g * c_in_group : (g + 1) * c_in_group]
        results.append(np.einsum("nchwij,ocij->nohw", x_g, w_g, optimize=True))
    y = results[0] if group == 1 else np.concatenate(results, axis=1)

    if len(params) > 1:
        y = y + params[1].reshape(1, -1, 1, 1)
    return [y]


def _pool_shapes(bottom_shapes, param_shapes, attrs):
    shape = tuple(bottom_shapes[0])
    _require_nchw(shape, "Pooling")
    if "kernel_shape" not in attrs:
        raise ValueError("Pooling needs a kernel_shape attribute")
    n, c, h, w = shape
    kh, kw = _pair(attrs["kernel_shape"], 1)
    sh, sw = _pair(attrs.get("strides"), 1)
    ph, pw = _pair(attrs.get("pads"), 0)
    return [(n, c, _out_size(h, kh, sh, ph), _out_size(w, kw, sw, pw))]


@LayerRegistry.register("MaxPool", shape_fn=_pool_shapes)
def forward_max_pool(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    windows = _windows(
        bottoms[0],
        _pair(attrs["kernel_shape"], 1),
        _pair(attrs.get("strides"), 1),
        _pair(attrs.get("pads"), 0),
        pad_value=-np.inf,
    )
    return [windows.max(axis=(-2, -1))]


@LayerRegistry.register("AveragePool", shape_fn=_pool_shapes)
def forward_average_pool(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    # Padded positions count towards the mean
    windows = _windows(
        bottoms[0],
        _pair(attrs["kernel_shape"], 1),
        _pair(attrs.get("strides"), 1),
        _pair(attrs.get("pads"), 0),
    )
    return [windows.mean(axis=(-2, -1))]


def _global_pool_shapes(bottom_shapes, param_shapes, attrs):
    shape = tuple(bottom_shapes[0])
    if len(shape) < 3:
        raise ValueError(f"GlobalAveragePool expects spatial axes, got {shape}")
    return [shape[:2] + (1,) * (len(shape) - 2)]


@LayerRegistry.register("GlobalAveragePool", shape_fn=_global_pool_shapes)
def forward_global_average_pool(
    bottoms: List[np.ndarray],
    params: List[np.ndarray],
    attrs: Dict[str, Any],
) -> List[np.ndarray]:
    x = bottoms[0]
    return [x.mean(axis=tuple(range(2, x.ndim)), keepdims=True)]
