# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Core Types

Plain Python descriptions of tensor dtypes, shapes and status codes
used by the topology description and the error hierarchy.
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Union

import numpy as np


class DataType(Enum):
    """Supported data types for tensors."""

    Float32 = auto()
    Float16 = auto()
    Float64 = auto()
    Int32 = auto()
    Int64 = auto()


_NUMPY_DTYPES = {
    DataType.Float32: np.float32,
    DataType.Float16: np.float16,
    DataType.Float64: np.float64,
    DataType.Int32: np.int32,
    DataType.Int64: np.int64,
}


def dtype_size(dtype: DataType) -> int:
    """Get the size in bytes for a data type."""
    return np.dtype(_NUMPY_DTYPES[dtype]).itemsize


def dtype_to_string(dtype: DataType) -> str:
    """Get string representation of data type."""
    return dtype.name.lower()


def to_numpy_dtype(dtype: DataType) -> np.dtype:
    """Map a DataType onto the numpy dtype that stores it."""
    return np.dtype(_NUMPY_DTYPES[dtype])


class StatusCode(Enum):
    """Error kinds carried by BatchNet errors."""

    InvalidArgument = auto()
    InternalError = auto()
    InvalidGraph = auto()


@dataclass
class Shape:
    """Represents tensor dimensions. Negative entries are dynamic."""

    dims: list[int] = field(default_factory=list)

    def rank(self) -> int:
        """Get number of dimensions."""
        return len(self.dims)

    def numel(self) -> int:
        """Get total number of elements."""
        if not self.dims:
            return 0
        result = 1
        for d in self.dims:
            if d < 0:
                return -1  # Dynamic dimension
            result *= d
        return result

    def is_dynamic(self) -> bool:
        """Check if shape has dynamic dimensions."""
        return any(d < 0 for d in self.dims)

    def as_tuple(self) -> tuple[int, ...]:
        return tuple(self.dims)

    def __getitem__(self, idx: int) -> int:
        return self.dims[idx]

    def __len__(self) -> int:
        return len(self.dims)

    def __repr__(self) -> str:
        return f"Shape({self.dims})"


# Attribute value types
AttributeValue = Union[int, float, str, list[int], list[float], list[str], bool]
AttributeMap = dict[str, AttributeValue]
