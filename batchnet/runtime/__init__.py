# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Runtime

Serving layer over the engine:
- select_device: one-time CPU/GPU mode pick for the process
- ServingSession: validated, batch-resizing run() over one net
- BindingTable: input/output name -> blob index
- CapacityManager / estimate_batch_size: grow-only batch capacity
- SessionOptions / BatchingParameters: session configuration
- SerializedSession: lock wrapper for shared sessions
"""

from .config import BatchingParameters, SessionOptions
from .device import (
    DeviceSelection,
    current_selection,
    ensure_device_selected,
    reset_device_selection,
    select_device,
)
from .bindings import BindingTable
from .capacity import CapacityManager, estimate_batch_size
from .session import ServingSession
from .serial import SerializedSession

__all__ = [
    "BatchingParameters",
    "SessionOptions",
    "DeviceSelection",
    "current_selection",
    "ensure_device_selected",
    "reset_device_selection",
    "select_device",
    "BindingTable",
    "CapacityManager",
    "estimate_batch_size",
    "ServingSession",
    "SerializedSession",
]
