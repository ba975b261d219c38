# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
GraphIR

The topology description a Net is built from: declared inputs and
outputs, layers, and the trained parameters they reference.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, Any, Union

import numpy as np

from .tensor import TensorDescriptor
from .node import Node


TensorRef = Union[str, TensorDescriptor]


def _as_descriptor(ref: TensorRef) -> TensorDescriptor:
    if isinstance(ref, TensorDescriptor):
        return ref
    return TensorDescriptor(name=ref)


@dataclass
class GraphIR:
    """
    Fixed-topology description of an inference net.

    Example:
        graph = GraphIR(name="classifier")
        graph.add_input(TensorDescriptor("data", Shape([1, 3, 224, 224])))
        graph.add_node("GlobalAveragePool", "pool", ["data"], ["pooled"])
        graph.add_node("Linear", "fc", ["pooled", "fc.w", "fc.b"], ["prob"])
        graph.add_constant("fc.w", np.zeros((1000, 3), np.float32))
        graph.add_constant("fc.b", np.zeros(1000, np.float32))
        graph.add_output(TensorDescriptor("prob"))
    """

    name: str = ""
    _nodes: list[Node] = field(default_factory=list, init=False, repr=False)
    _name_to_node: dict[str, Node] = field(default_factory=dict, init=False, repr=False)
    inputs: list[TensorDescriptor] = field(default_factory=list)
    outputs: list[TensorDescriptor] = field(default_factory=list)
    constants: dict[str, np.ndarray] = field(default_factory=dict)

    def add_node(
        self,
        op_type: str,
        name: str,
        inputs: list[TensorRef],
        outputs: list[TensorRef],
        attrs: dict[str, Any] | None = None,
    ) -> Node:
        """Add a node to the graph. Tensor references may be plain names."""
        node = Node(
            op_type=op_type,
            name=name,
            inputs=[_as_descriptor(t) for t in inputs],
            outputs=[_as_descriptor(t) for t in outputs],
            attrs=attrs or {},
        )
        self._nodes.append(node)
        self._name_to_node[name] = node
        return node

    def get_node(self, name: str) -> Optional[Node]:
        """Get node by name."""
        return self._name_to_node.get(name)

    @property
    def nodes(self) -> list[Node]:
        """Get all nodes."""
        return self._nodes

    def num_nodes(self) -> int:
        """Get number of nodes."""
        return len(self._nodes)

    def add_input(self, tensor: TensorDescriptor) -> None:
        """Add a graph input."""
        self.inputs.append(tensor)

    def add_output(self, tensor: TensorRef) -> None:
        """Add a graph output."""
        self.outputs.append(_as_descriptor(tensor))

    def add_constant(self, name: str, data: Any) -> None:
        """Add a trained parameter (weights, biases, etc.)."""
        self.constants[name] = np.asarray(data)

    def get_constant(self, name: str) -> Optional[np.ndarray]:
        """Get constant data."""
        return self.constants.get(name)

    def topological_order(self) -> list[Node]:
        """
        Nodes ordered so every producer runs before its consumers.

        Uses Kahn's algorithm over tensor-name dependencies. Insertion
        order is returned unchanged when a cycle is present; the engine
        reports the dangling reference in that case.
        """
        nodes = list(self._nodes)
        if not nodes:
            return []

        output_to_node: dict[str, Node] = {}
        for node in nodes:
            for output in node.outputs:
                output_to_node[output.name] = node

        in_degree: dict[str, int] = {node.name: 0 for node in nodes}
        adjacency: dict[str, list[Node]] = defaultdict(list)
        for node in nodes:
            for inp in node.inputs:
                producer = output_to_node.get(inp.name)
                if producer is not None and producer is not node:
                    adjacency[producer.name].append(node)
                    in_degree[node.name] += 1

        queue = [n for n in nodes if in_degree[n.name] == 0]
        ordered = []
        while queue:
            node = queue.pop(0)
            ordered.append(node)
            for dependent in adjacency[node.name]:
                in_degree[dependent.name] -= 1
                if in_degree[dependent.name] == 0:
                    queue.append(dependent)

        if len(ordered) != len(nodes):
            return nodes
        return ordered

    def count_ops(self) -> dict[str, int]:
        """Count nodes by layer type."""
        counts: dict[str, int] = {}
        for node in self._nodes:
            counts[node.op_type] = counts.get(node.op_type, 0) + 1
        return counts

    def summary(self) -> str:
        """Graph summary."""
        lines = [
            f"GraphIR: {self.name}",
            f"  Inputs: {len(self.inputs)}",
            f"  Outputs: {len(self.outputs)}",
            f"  Nodes: {len(self._nodes)}",
            f"  Constants: {len(self.constants)}",
            "  Operations:",
        ]

        for op, count in self.count_ops().items():
            lines.append(f"    {op}: {count}")

        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"GraphIR(name='{self.name}', nodes={len(self._nodes)})"
