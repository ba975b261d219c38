# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet: Batch-Resizing Serving Sessions for Fixed-Topology Nets

Wraps a fixed-topology inference net, whose buffers were declared with
static shapes, in a request/response API that accepts any batch size.

Example:
    import batchnet

    batchnet.select_device()
    session = batchnet.ServingSession(graph)
    session.load_weights("model.params.onnx")
    (probs,) = session.run({"data": images}, ["prob"])
"""

__version__ = "0.1.0"
__author__ = "Wahyu Ardiansyah"

from .core.types import DataType, StatusCode, Shape
from .core.tensor import TensorDescriptor
from .core.node import Node
from .core.graph_ir import GraphIR

from .errors import (
    BatchNetError,
    InvalidArgumentError,
    TopologyError,
    WeightShapeError,
    UnsupportedLayerError,
    ConfigurationError,
)

from .runtime import (
    BatchingParameters,
    SessionOptions,
    ServingSession,
    SerializedSession,
    select_device,
)

from .observability import get_logger, set_verbosity

__all__ = [
    "__version__",
    "DataType",
    "StatusCode",
    "Shape",
    "TensorDescriptor",
    "Node",
    "GraphIR",
    "BatchNetError",
    "InvalidArgumentError",
    "TopologyError",
    "WeightShapeError",
    "UnsupportedLayerError",
    "ConfigurationError",
    "BatchingParameters",
    "SessionOptions",
    "ServingSession",
    "SerializedSession",
    "select_device",
    "get_logger",
    "set_verbosity",
]
