# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Node

Represents a single layer in the net topology.
"""

from dataclasses import dataclass, field
from typing import Any
import itertools

from .types import AttributeMap
from .tensor import TensorDescriptor


# Node ID counter
_node_id_counter = itertools.count()


@dataclass
class Node:
    """
    Represents a single layer (node) in the topology.

    Inputs name either blobs (graph inputs or outputs of earlier nodes)
    or constants (trained parameters).
    """

    op_type: str = ""
    name: str = ""
    inputs: list[TensorDescriptor] = field(default_factory=list)
    outputs: list[TensorDescriptor] = field(default_factory=list)
    attrs: AttributeMap = field(default_factory=dict)

    # Auto-generated ID
    id: int = field(default_factory=lambda: next(_node_id_counter), init=False)

    @property
    def input_names(self) -> list[str]:
        return [t.name for t in self.inputs]

    @property
    def output_names(self) -> list[str]:
        return [t.name for t in self.outputs]

    def is_op(self, op: str) -> bool:
        """Check if this is a specific layer type."""
        return self.op_type == op

    def get_attr(self, key: str, default: Any = None) -> Any:
        """Get an attribute value."""
        return self.attrs.get(key, default)

    def clone(self) -> "Node":
        """Create a copy of this node."""
        return Node(
            op_type=self.op_type,
            name=self.name,
            inputs=list(self.inputs),
            outputs=list(self.outputs),
            attrs=dict(self.attrs),
        )

    def __repr__(self) -> str:
        return f"Node(op='{self.op_type}', name='{self.name}')"


class Ops:
    """Layer type names understood by the engine."""

    # Activation layers
    RELU = "Relu"
    SIGMOID = "Sigmoid"
    TANH = "Tanh"
    SOFTMAX = "Softmax"

    # Linear layers
    LINEAR = "Linear"
    MATMUL = "MatMul"

    # Convolution and pooling
    CONV = "Conv"
    MAX_POOL = "MaxPool"
    AVG_POOL = "AveragePool"
    GLOBAL_AVG_POOL = "GlobalAveragePool"

    # Element-wise layers
    ADD = "Add"
    MUL = "Mul"

    # Shape layers
    RESHAPE = "Reshape"
    FLATTEN = "Flatten"
    CONCAT = "Concat"

    # Special
    IDENTITY = "Identity"
