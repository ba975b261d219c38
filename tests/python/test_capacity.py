# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for bindings, batch size estimation and grow-only capacity.
"""

import numpy as np
import pytest

from batchnet.core import GraphIR, Shape, TensorDescriptor
from batchnet.engine import Net
from batchnet.errors import InvalidArgumentError, TopologyError
from batchnet.observability import BatchNetLogger, Verbosity
from batchnet.runtime import BindingTable, CapacityManager, estimate_batch_size

from conftest import make_linear_graph, make_two_input_graph


def make_mixed_graph():
    """data(2, 3) * scale(3,) -> out; scale is not batched."""
    graph = GraphIR(name="mixed")
    graph.add_input(TensorDescriptor("data", Shape([2, 3])))
    graph.add_input(TensorDescriptor("scale", Shape([3])))
    graph.add_node("Mul", "mul", ["data", "scale"], ["out"])
    graph.add_output("out")
    return graph


class FakeNet:
    """Just enough of a Net to exercise BindingTable index checks."""

    name = "fake"

    def __init__(self, blob_names, inputs, outputs):
        self.blob_names = blob_names
        self.input_blob_indices = inputs
        self.output_blob_indices = outputs


class TestBindingTable:
    """Tests for BindingTable."""

    def test_from_net(self):
        table = BindingTable.from_net(Net(make_linear_graph()))
        assert dict(table.inputs) == {"data": 0}
        assert dict(table.outputs) == {"out": 2}
        assert table.input_index("data") == 0
        assert table.input_index("image") is None
        assert table.output_index("out") == 2

    def test_tables_are_read_only(self):
        table = BindingTable.from_net(Net(make_linear_graph()))
        with pytest.raises(TypeError):
            table.inputs["image"] = 0

    def test_index_out_of_range(self):
        with pytest.raises(TopologyError, match="outside"):
            BindingTable.from_net(FakeNet(["a", "b"], [0], [5]))

    def test_duplicate_binding(self):
        with pytest.raises(TopologyError, match="bound twice"):
            BindingTable.from_net(FakeNet(["a", "b"], [0, 0], [1]))


class TestEstimateBatchSize:
    """Tests for estimate_batch_size."""

    def test_declared_batch(self):
        assert estimate_batch_size(Net(make_linear_graph(batch=5))) == 5

    def test_max_over_inputs(self):
        graph = GraphIR(name="g")
        graph.add_input(TensorDescriptor("a", Shape([2, 3])))
        graph.add_input(TensorDescriptor("b", Shape([6, 3])))
        graph.add_node("Identity", "ia", ["a"], ["oa"])
        graph.add_node("Identity", "ib", ["b"], ["ob"])
        graph.add_output("oa")
        graph.add_output("ob")
        assert estimate_batch_size(Net(graph)) == 6

    def test_rank_one_inputs_ignored(self):
        graph = GraphIR(name="g")
        graph.add_input(TensorDescriptor("v", Shape([8])))
        graph.add_node("Relu", "relu", ["v"], ["out"])
        graph.add_output("out")
        assert estimate_batch_size(Net(graph)) == 1

    def test_mixed_inputs(self):
        assert estimate_batch_size(Net(make_mixed_graph())) == 2


class TestCapacityManager:
    """Tests for CapacityManager."""

    def test_initial_capacity_is_estimate(self):
        manager = CapacityManager(Net(make_linear_graph(batch=3)))
        assert manager.capacity == 3

    def test_grow(self):
        net = Net(make_linear_graph(batch=2))
        manager = CapacityManager(net)
        assert manager.reshape(8) is True
        assert manager.capacity == 8
        assert net.blob_by_name("data").shape == (8, 4)
        assert net.blob_by_name("out").shape == (8, 3)

    def test_smaller_request_is_noop(self):
        net = Net(make_linear_graph(batch=2))
        manager = CapacityManager(net)
        manager.reshape(8)
        assert manager.reshape(3) is False
        assert manager.capacity == 8
        assert net.blob_by_name("data").shape == (8, 4)

    def test_reshape_idempotent(self):
        net = Net(make_linear_graph(batch=2))
        manager = CapacityManager(net)
        manager.reshape(6)
        shapes = [blob.shape for blob in net.blobs]
        assert manager.reshape(6) is False
        assert manager.capacity == 6
        assert [blob.shape for blob in net.blobs] == shapes

    @pytest.mark.parametrize("bad", [0, -3, 2.5, "4", True, None])
    def test_invalid_request(self, bad):
        manager = CapacityManager(Net(make_linear_graph()))
        with pytest.raises(InvalidArgumentError):
            manager.reshape(bad)
        assert manager.capacity == 2

    def test_numpy_integer_accepted(self):
        manager = CapacityManager(Net(make_linear_graph()))
        manager.reshape(np.int64(5))
        assert manager.capacity == 5
        assert isinstance(manager.capacity, int)

    def test_count_after_growth(self):
        net = Net(make_mixed_graph())
        manager = CapacityManager(net)
        data, scale = net.blob_by_name("data"), net.blob_by_name("scale")
        assert manager.count_after(data, 2) == 6
        assert manager.count_after(data, 5) == 15
        assert manager.count_after(scale, 5) == 3
        assert manager.capacity == 2
        assert data.shape == (2, 3)

    def test_only_batched_inputs_resized(self):
        net = Net(make_mixed_graph())
        manager = CapacityManager(net)
        manager.reshape(4)
        assert net.blob_by_name("data").shape == (4, 3)
        assert net.blob_by_name("scale").shape == (3,)
        assert net.blob_by_name("out").shape == (4, 3)

    def test_all_inputs_resized_together(self):
        net = Net(make_two_input_graph(batch=1))
        CapacityManager(net).reshape(3)
        assert net.blob_by_name("a").shape == (3, 3)
        assert net.blob_by_name("b").shape == (3, 3)
        assert net.blob_by_name("sum").shape == (3, 3)

    def test_reshape_is_logged(self):
        entries = []
        logger = BatchNetLogger.get()
        logger.set_verbosity(Verbosity.INFO)
        logger.add_handler(entries.append)

        CapacityManager(Net(make_linear_graph(batch=2))).reshape(4)

        assert any(e.component == "capacity" and "2 -> 4" in e.message for e in entries)
