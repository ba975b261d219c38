# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for BatchNet Python tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to sys.path so we can import batchnet
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from batchnet.core import GraphIR, Shape, TensorDescriptor  # noqa: E402
from batchnet.observability import BatchNetLogger, Verbosity  # noqa: E402
from batchnet.runtime import device as device_module  # noqa: E402

# Skip test modules that require optional dependencies not installed
collect_ignore = []

# Check for hypothesis
try:
    import hypothesis  # noqa: F401
except ImportError:
    collect_ignore.append("test_property_based.py")


@pytest.fixture(autouse=True)
def cpu_only(monkeypatch):
    """Hide accelerators and start every test without a device selection."""
    monkeypatch.setattr(device_module, "get_cuda_device_count", lambda: 0)
    device_module.reset_device_selection()
    yield
    device_module.reset_device_selection()


@pytest.fixture(autouse=True)
def quiet_logger():
    """Fresh, silent logger per test; tests that inspect logs raise the level."""
    BatchNetLogger.reset()
    BatchNetLogger.get().set_verbosity(Verbosity.SILENT)
    yield
    BatchNetLogger.reset()


def make_linear_graph(batch=2, in_features=4, out_features=3, seed=0):
    """data(batch, in) -> Linear -> fc -> Relu -> out"""
    rng = np.random.default_rng(seed)
    graph = GraphIR(name="linear")
    graph.add_input(TensorDescriptor("data", Shape([batch, in_features])))
    graph.add_constant(
        "fc.weight", rng.standard_normal((out_features, in_features)).astype(np.float32)
    )
    graph.add_constant("fc.bias", rng.standard_normal(out_features).astype(np.float32))
    graph.add_node("Linear", "fc", ["data", "fc.weight", "fc.bias"], ["fc"])
    graph.add_node("Relu", "relu", ["fc"], ["out"])
    graph.add_output("out")
    return graph


def make_classifier_graph():
    """data(1, 3, 224, 224) -> GlobalAveragePool -> Linear(1000) -> Softmax -> prob"""
    rng = np.random.default_rng(1)
    graph = GraphIR(name="classifier")
    graph.add_input(TensorDescriptor("data", Shape([1, 3, 224, 224])))
    graph.add_constant("fc.weight", rng.standard_normal((1000, 3)).astype(np.float32))
    graph.add_constant("fc.bias", np.zeros(1000, dtype=np.float32))
    graph.add_node("GlobalAveragePool", "pool", ["data"], ["pool"])
    graph.add_node("Linear", "fc", ["pool", "fc.weight", "fc.bias"], ["logits"])
    graph.add_node("Softmax", "softmax", ["logits"], ["prob"])
    graph.add_output("prob")
    return graph


def make_two_input_graph(batch=4, features=3):
    """a(batch, f) + b(batch, f) -> sum"""
    graph = GraphIR(name="two_input")
    graph.add_input(TensorDescriptor("a", Shape([batch, features])))
    graph.add_input(TensorDescriptor("b", Shape([batch, features])))
    graph.add_node("Add", "add", ["a", "b"], ["sum"])
    graph.add_output("sum")
    return graph


def make_rank3_output_graph(batch=1):
    """x(batch, 6) -> Reshape [2, 3] -> y(batch, 2, 3)"""
    graph = GraphIR(name="rank3")
    graph.add_input(TensorDescriptor("x", Shape([batch, 6])))
    graph.add_node("Reshape", "reshape", ["x"], ["y"], {"shape": [2, 3]})
    graph.add_output("y")
    return graph


@pytest.fixture
def linear_graph():
    return make_linear_graph()


@pytest.fixture
def classifier_graph():
    return make_classifier_graph()


@pytest.fixture
def two_input_graph():
    return make_two_input_graph()


@pytest.fixture
def rank3_output_graph():
    return make_rank3_output_graph()
