# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Blob - a named, shaped float32 buffer owned by a Net.

Storage only grows: reshaping to a smaller element count keeps the
existing allocation and exposes a prefix of it, reshaping to a larger
count reallocates (previous contents are dropped).
"""

import math
from typing import Sequence

import numpy as np


class Blob:
    """
    Named n-dimensional buffer.

    Example:
        blob = Blob("data", (1, 3, 224, 224))
        blob.reshape((4, 3, 224, 224))
        blob.flat[:] = 0.5
        blob.data.shape  # (4, 3, 224, 224)
    """

    def __init__(self, name: str, shape: Sequence[int] = (0,), dtype=np.float32):
        self.name = name
        self.dtype = np.dtype(dtype)
        self._storage = np.zeros(0, dtype=self.dtype)
        self._shape: tuple[int, ...] = ()
        self.reshape(shape)

    def reshape(self, shape: Sequence[int]) -> None:
        """
        Resize the blob.

        Raises:
            ValueError: If any dimension is negative.
        """
        shape = tuple(int(d) for d in shape)
        if any(d < 0 for d in shape):
            raise ValueError(f"Blob '{self.name}' cannot take shape {shape}")

        count = math.prod(shape)
        if count > self._storage.size:
            self._storage = np.zeros(count, dtype=self.dtype)
        self._shape = shape

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    def count(self, start_axis: int = 0) -> int:
        """Number of elements from start_axis to the last axis."""
        return math.prod(self._shape[start_axis:])

    @property
    def capacity(self) -> int:
        """Elements currently allocated."""
        return self._storage.size

    @property
    def flat(self) -> np.ndarray:
        """Writable flat view of the live elements."""
        return self._storage[: self.count()]

    @property
    def data(self) -> np.ndarray:
        """Writable view shaped like the blob."""
        return self.flat.reshape(self._shape)

    @property
    def nbytes(self) -> int:
        return self.count() * self.dtype.itemsize

    def __repr__(self) -> str:
        return f"Blob(name='{self.name}', shape={self._shape})"
