# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Property-based tests using Hypothesis.

Checks the capacity and output-shape guarantees of ServingSession over
arbitrary sequences of requests.

If hypothesis is not available, conftest.py skips this module.
"""

import numpy as np
from hypothesis import HealthCheck, given, settings, strategies as st

from batchnet.runtime import CapacityManager, ServingSession
from batchnet.engine import Net

from conftest import make_linear_graph


batch_sizes = st.integers(min_value=1, max_value=32)

# Autouse fixtures only reset process state; examples build fresh sessions
QUIET = [HealthCheck.function_scoped_fixture]


class TestCapacityProperties:
    """Capacity never shrinks and always covers what was asked for."""

    @given(st.lists(batch_sizes, min_size=1, max_size=20))
    @settings(max_examples=50, deadline=None, suppress_health_check=QUIET)
    def test_capacity_monotonic(self, requests):
        manager = CapacityManager(Net(make_linear_graph(batch=2)))
        previous = manager.capacity
        for batch in requests:
            manager.reshape(batch)
            assert manager.capacity >= previous
            assert manager.capacity >= batch
            previous = manager.capacity
        assert manager.capacity == max(requests + [2])

    @given(batch_sizes)
    @settings(max_examples=30, deadline=None, suppress_health_check=QUIET)
    def test_reshape_twice_is_idempotent(self, batch):
        net = Net(make_linear_graph(batch=2))
        manager = CapacityManager(net)
        manager.reshape(batch)
        shapes = [blob.shape for blob in net.blobs]
        capacity = manager.capacity
        manager.reshape(batch)
        assert manager.capacity == capacity
        assert [blob.shape for blob in net.blobs] == shapes


class TestRunProperties:
    """Every valid request gets one output per name, batch-aligned."""

    @given(st.lists(batch_sizes, min_size=1, max_size=10))
    @settings(max_examples=30, deadline=None, suppress_health_check=QUIET)
    def test_outputs_follow_batch(self, batches):
        session = ServingSession(make_linear_graph(batch=2))
        for batch in batches:
            x = np.ones((batch, 4), dtype=np.float32)
            outputs = session.run({"data": x}, ["out", "out"])
            assert len(outputs) == 2
            assert all(out.shape == (batch, 3) for out in outputs)
        assert session.capacity >= max(batches + [2])
