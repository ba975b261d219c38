# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Batch Capacity

estimate_batch_size() guesses the batch a freshly loaded net was
declared with. CapacityManager grows the input blobs when a request
needs a larger batch; capacity never shrinks.
"""

import numbers
import time
from typing import Optional

from batchnet.engine import Blob, Net
from batchnet.errors import InvalidArgumentError
from batchnet.observability import BatchNetLogger


def _batched(shape: tuple[int, ...]) -> bool:
    """Inputs with rank > 1 and a positive leading dimension follow the batch."""
    return len(shape) > 1 and shape[0] > 0


def estimate_batch_size(net: Net) -> int:
    """
    Estimate the batch size the net was declared with.

    This is approximate: the largest leading dimension among batched
    inputs, or 1 if no input qualifies. A scalar-per-row input declared
    as (N,) is not counted.
    """
    batch_size = 1
    for index in net.input_blob_indices:
        shape = net.blobs[index].shape
        if _batched(shape):
            batch_size = max(batch_size, shape[0])
    return batch_size


class CapacityManager:
    """
    Grow-only batch capacity of a net's input blobs.

    Example:
        manager = CapacityManager(net)
        manager.reshape(8)   # grows inputs to batch 8
        manager.reshape(2)   # no-op, capacity stays 8
    """

    def __init__(self, net: Net, capacity: Optional[int] = None):
        self._net = net
        self._capacity = capacity if capacity is not None else estimate_batch_size(net)
        self._logger = BatchNetLogger.get()

    @property
    def capacity(self) -> int:
        return self._capacity

    def reshape(self, batch_size: int) -> bool:
        """
        Make room for batch_size rows.

        Returns:
            True if the input blobs were resized.

        Raises:
            InvalidArgumentError: If batch_size is not a positive integer.
            TopologyError: If shape propagation fails after the resize.
        """
        if (
            isinstance(batch_size, bool)
            or not isinstance(batch_size, numbers.Integral)
            or batch_size < 1
        ):
            raise InvalidArgumentError(
                f"batch size must be a positive integer, got {batch_size!r}",
                parameter="batch_size",
                expected=">= 1",
                received=repr(batch_size),
            )
        return self.ensure(int(batch_size))

    def count_after(self, blob: Blob, batch_size: int) -> int:
        """Elements blob will hold once capacity covers batch_size."""
        if batch_size > self._capacity and _batched(blob.shape):
            return batch_size * blob.count(1)
        return blob.count()

    def ensure(self, batch_size: int) -> bool:
        """Resize only when batch_size exceeds the current capacity."""
        if batch_size <= self._capacity:
            return False

        start = time.perf_counter()
        for index in self._net.input_blob_indices:
            blob = self._net.blobs[index]
            if _batched(blob.shape):
                blob.reshape((batch_size,) + blob.shape[1:])
        self._net.reshape()

        previous, self._capacity = self._capacity, batch_size
        self._logger.info(
            f"Reshaped batch capacity {previous} -> {batch_size}",
            component="capacity",
            model_name=self._net.name,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return True

    def __repr__(self) -> str:
        return f"CapacityManager(net='{self._net.name}', capacity={self._capacity})"
