# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Unit tests for the topology description (batchnet.core).
"""

import numpy as np
import pytest

from batchnet.core import (
    DataType,
    GraphIR,
    Node,
    Ops,
    Shape,
    TensorDescriptor,
    dtype_size,
    dtype_to_string,
    to_numpy_dtype,
)


class TestDataType:
    """Tests for DataType helpers."""

    def test_dtype_size(self):
        assert dtype_size(DataType.Float32) == 4
        assert dtype_size(DataType.Float16) == 2
        assert dtype_size(DataType.Int64) == 8

    def test_dtype_to_string(self):
        assert dtype_to_string(DataType.Float32) == "float32"

    def test_to_numpy_dtype(self):
        assert to_numpy_dtype(DataType.Float64) == np.float64


class TestShape:
    """Tests for Shape."""

    def test_static_shape(self):
        shape = Shape([1, 3, 224, 224])
        assert shape.rank() == 4
        assert shape.numel() == 3 * 224 * 224
        assert not shape.is_dynamic()
        assert shape.as_tuple() == (1, 3, 224, 224)
        assert shape[1] == 3
        assert len(shape) == 4

    def test_dynamic_shape(self):
        shape = Shape([-1, 10])
        assert shape.is_dynamic()
        assert shape.numel() == -1

    def test_empty_shape(self):
        assert Shape().numel() == 0


class TestTensorDescriptor:
    """Tests for TensorDescriptor."""

    def test_size_bytes(self):
        desc = TensorDescriptor("data", Shape([2, 4]), DataType.Float32)
        assert desc.size_bytes() == 32
        assert desc.is_valid()

    def test_dynamic_size_is_zero(self):
        desc = TensorDescriptor("data", Shape([-1, 4]))
        assert desc.size_bytes() == 0

    def test_unnamed_is_invalid(self):
        assert not TensorDescriptor(shape=Shape([1])).is_valid()


class TestNode:
    """Tests for Node."""

    def test_names_and_attrs(self):
        node = Node(
            op_type=Ops.CONV,
            name="conv1",
            inputs=[TensorDescriptor("x"), TensorDescriptor("w")],
            outputs=[TensorDescriptor("y")],
            attrs={"group": 2},
        )
        assert node.input_names == ["x", "w"]
        assert node.output_names == ["y"]
        assert node.is_op("Conv")
        assert node.get_attr("group") == 2
        assert node.get_attr("pads", 0) == 0

    def test_clone_is_independent(self):
        node = Node(op_type="Relu", name="r", attrs={"negative_slope": 0.1})
        copy = node.clone()
        copy.attrs["negative_slope"] = 0.2
        assert node.attrs["negative_slope"] == 0.1
        assert copy.id != node.id


class TestGraphIR:
    """Tests for GraphIR."""

    def test_build_graph(self):
        graph = GraphIR(name="g")
        graph.add_input(TensorDescriptor("x", Shape([1, 4])))
        graph.add_constant("w", np.ones((2, 4)))
        node = graph.add_node("Linear", "fc", ["x", "w"], ["y"])
        graph.add_output("y")

        assert len(graph) == 1
        assert graph.num_nodes() == 1
        assert graph.get_node("fc") is node
        assert graph.outputs[0].name == "y"
        assert graph.get_constant("w").shape == (2, 4)
        assert graph.get_constant("missing") is None

    def test_topological_order(self):
        graph = GraphIR(name="g")
        graph.add_input(TensorDescriptor("x", Shape([1, 4])))
        # Inserted consumer-first
        graph.add_node("Sigmoid", "second", ["a"], ["b"])
        graph.add_node("Relu", "first", ["x"], ["a"])

        order = [n.name for n in graph.topological_order()]
        assert order == ["first", "second"]

    def test_cycle_returns_insertion_order(self):
        graph = GraphIR(name="g")
        graph.add_node("Relu", "a", ["q"], ["p"])
        graph.add_node("Relu", "b", ["p"], ["q"])
        assert [n.name for n in graph.topological_order()] == ["a", "b"]

    def test_summary_counts_ops(self):
        graph = GraphIR(name="g")
        graph.add_node("Relu", "r1", ["x"], ["a"])
        graph.add_node("Relu", "r2", ["a"], ["b"])
        assert graph.count_ops() == {"Relu": 2}
        assert "Relu: 2" in graph.summary()

    @pytest.mark.parametrize("count", [0, 3])
    def test_len(self, count):
        graph = GraphIR()
        for i in range(count):
            graph.add_node("Relu", f"r{i}", [f"t{i}"], [f"t{i + 1}"])
        assert len(graph) == count
