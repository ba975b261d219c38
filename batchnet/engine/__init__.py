# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Engine

A small numpy execution engine for fixed-topology nets.

Components:
- Blob: named, shaped float32 buffer with grow-only storage
- LayerRegistry: maps layer types to forward and shape functions
- Net: blob list, input/output indices, forward pass, shape propagation
- read_params / save_params: trained parameter files (ONNX initializers)
- Mode: process-wide execution mode recorded by each Net
"""

from .blob import Blob
from .registry import LayerKernel, LayerRegistry
from .mode import Mode, get_mode, set_mode, get_device_id, set_device
from .net import Net
from .weights import read_params, save_params

__all__ = [
    "Blob",
    "LayerKernel",
    "LayerRegistry",
    "Mode",
    "get_mode",
    "set_mode",
    "get_device_id",
    "set_device",
    "Net",
    "read_params",
    "save_params",
]
