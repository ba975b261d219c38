# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""BatchNet Core Module"""

from .types import (
    DataType,
    StatusCode,
    Shape,
    dtype_size,
    dtype_to_string,
    to_numpy_dtype,
    AttributeValue,
    AttributeMap,
)
from .tensor import TensorDescriptor
from .node import Node, Ops
from .graph_ir import GraphIR

__all__ = [
    "DataType",
    "StatusCode",
    "Shape",
    "dtype_size",
    "dtype_to_string",
    "to_numpy_dtype",
    "AttributeValue",
    "AttributeMap",
    "TensorDescriptor",
    "Node",
    "Ops",
    "GraphIR",
]
