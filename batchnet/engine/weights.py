# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Trained Parameter Files

Parameters are stored as the initializer list of an ONNX ModelProto:
one TensorProto per parameter, keyed by parameter name.
"""

from pathlib import Path
from typing import Mapping, Union

import numpy as np
import onnx
from google.protobuf.message import DecodeError
from onnx import numpy_helper

from batchnet.errors import InvalidArgumentError


def read_params(path: Union[str, Path]) -> dict[str, np.ndarray]:
    """
    Read named parameters from an ONNX file.

    Raises:
        InvalidArgumentError: If the file is missing or cannot be parsed.
    """
    try:
        model = onnx.load(str(path))
        return {
            init.name: numpy_helper.to_array(init) for init in model.graph.initializer
        }
    except (OSError, DecodeError, ValueError, TypeError) as e:
        raise InvalidArgumentError(
            f"failed to load pretrained parameters from file: {path}",
            parameter="path",
            received=str(path),
            suggestions=[
                "Check that the file exists and is readable",
                "Export the parameters with batchnet.engine.save_params",
            ],
        ) from e


def save_params(
    path: Union[str, Path],
    params: Mapping[str, np.ndarray],
    name: str = "params",
) -> None:
    """Write named float32 parameters to an ONNX file."""
    initializers = [
        numpy_helper.from_array(np.asarray(value, dtype=np.float32), name=key)
        for key, value in params.items()
    ]
    graph = onnx.helper.make_graph(
        nodes=[], name=name, inputs=[], outputs=[], initializer=initializers
    )
    model = onnx.helper.make_model(graph, producer_name="batchnet")
    onnx.save(model, str(path))
