# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Serving Session

Adapts a fixed-topology Net to a request/response API with variable
batch sizes. A session owns one Net, its bindings and its batch
capacity; every run() validates the request, grows capacity when the
batch outgrows it, copies inputs into the input blobs, runs one forward
pass and copies the requested outputs out.

A session is not safe for concurrent calls. Callers either run one
request at a time per session or wrap it in SerializedSession.

Example:
    from batchnet.runtime import ServingSession, select_device

    select_device()
    session = ServingSession(graph)
    session.load_weights("resnet.params.onnx")
    (probs,) = session.run({"data": images}, ["prob"])
"""

import time
from os import PathLike
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import numpy as np

from batchnet.core import GraphIR
from batchnet.engine import Blob, Net, read_params
from batchnet.errors import InvalidArgumentError, TopologyError, format_shape_mismatch
from batchnet.observability import BatchNetLogger

from .bindings import BindingTable
from .capacity import CapacityManager
from .config import SessionOptions
from .device import DeviceSelection, ensure_device_selected


Feeds = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def _to_numpy(tensor: Any) -> np.ndarray:
    """Convert a request tensor to a host numpy array."""
    if isinstance(tensor, np.ndarray):
        return tensor
    if hasattr(tensor, "detach") and hasattr(tensor, "cpu"):
        return tensor.detach().cpu().numpy()
    return np.asarray(tensor)


class ServingSession:
    """
    Session over one loaded net.

    Args:
        graph: Topology to instantiate
        options: Session options (device limits, batching parameters)

    Raises:
        ConfigurationError: If options are invalid.
        TopologyError: If the net cannot be built or bound.
    """

    def __init__(self, graph: GraphIR, options: Optional[SessionOptions] = None):
        self.options = options or SessionOptions()
        self.options.validate()
        self._logger = BatchNetLogger.get()

        self._device = ensure_device_selected(self.options.device_count)
        self._net = Net(graph)
        self._bindings = BindingTable.from_net(self._net)
        self._capacity = CapacityManager(self._net)

        self._execution_count = 0
        self._total_inference_time = 0.0

        self._logger.network_summary(
            {
                "name": self._net.name,
                "mode": self._net.mode.value.upper(),
                "inputs": len(self._bindings.inputs),
                "outputs": len(self._bindings.outputs),
                "batch_size": self._capacity.capacity,
            }
        )

    @property
    def net(self) -> Net:
        return self._net

    @property
    def bindings(self) -> BindingTable:
        return self._bindings

    @property
    def device(self) -> DeviceSelection:
        return self._device

    @property
    def capacity(self) -> int:
        """Largest batch the input blobs currently hold."""
        return self._capacity.capacity

    @property
    def input_names(self) -> list[str]:
        return list(self._bindings.inputs)

    @property
    def output_names(self) -> list[str]:
        return list(self._bindings.outputs)

    @property
    def execution_count(self) -> int:
        return self._execution_count

    def reshape(self, batch_size: int) -> None:
        """Grow batch capacity ahead of traffic. Smaller sizes are a no-op."""
        self._capacity.reshape(batch_size)

    def run(
        self,
        inputs: Feeds,
        output_names: Sequence[str],
        target_names: Sequence[str] = (),
    ) -> list[np.ndarray]:
        """
        Run one inference pass.

        The batch size is taken from the leading dimension of the first
        input; every other input must agree. All inputs are checked
        before any blob is written, so a rejected request leaves the
        input blobs as they were.

        Args:
            inputs: Input name -> tensor, as a mapping or ordered pairs
            output_names: Outputs to return, in the order wanted
            target_names: Not supported; must be empty

        Returns:
            One (batch, elements_per_example) array per requested output.

        Raises:
            InvalidArgumentError: If the request is malformed.
            TopologyError: If the net fails while resizing or running.
        """
        if target_names:
            raise InvalidArgumentError(
                "target node execution is not supported",
                parameter="target_names",
                expected="()",
                received=str(list(target_names)),
            )

        feeds = list(inputs.items()) if isinstance(inputs, Mapping) else list(inputs)
        expected = len(self._bindings.inputs)
        if not feeds or len(feeds) < expected:
            raise InvalidArgumentError(
                f"expected {expected} input tensor(s), got {len(feeds)}",
                parameter="inputs",
                expected=str(expected),
                received=str(len(feeds)),
            )

        start = time.perf_counter()
        arrays = [(name, _to_numpy(tensor)) for name, tensor in feeds]
        batch_size = self._batch_size_of(arrays[0][1])
        staged = [self._check_input(name, array, batch_size) for name, array in arrays]

        for blob, array in staged:
            if array.size > self._capacity.count_after(blob, batch_size):
                raise format_shape_mismatch(
                    blob.shape, array.shape, tensor_name=blob.name
                )

        self._capacity.ensure(batch_size)
        for blob, array in staged:
            blob.flat[: array.size] = array.reshape(-1)

        self._net.forward()
        outputs = [self._fetch(name, batch_size) for name in output_names]

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._execution_count += 1
        self._total_inference_time += elapsed_ms
        self._logger.debug(
            "Run complete",
            component="session",
            model_name=self._net.name,
            batch_size=batch_size,
            duration_ms=elapsed_ms,
        )
        return outputs

    def _batch_size_of(self, array: np.ndarray) -> int:
        if array.ndim < 2:
            raise InvalidArgumentError(
                "could not determine the batch size: the first input must have "
                "at least two dimensions",
                parameter="inputs",
                expected="rank >= 2",
                received=f"shape {array.shape}",
            )
        if array.shape[0] < 1:
            raise InvalidArgumentError(
                f"invalid batch size {array.shape[0]}",
                parameter="inputs",
                expected="batch size >= 1",
                received=str(array.shape[0]),
            )
        return int(array.shape[0])

    def _check_input(
        self, name: str, array: np.ndarray, batch_size: int
    ) -> tuple[Blob, np.ndarray]:
        index = self._bindings.input_index(name)
        if index is None:
            raise InvalidArgumentError(
                f"input tensor '{name}' does not exist in the network",
                parameter=name,
                expected=str(self.input_names),
            )
        if array.shape[:1] != (batch_size,):
            raise InvalidArgumentError(
                f"input batch sizes disagree: '{name}' has shape {array.shape}, "
                f"batch size is {batch_size}",
                parameter=name,
                expected=f"leading dimension {batch_size}",
                received=str(array.shape),
            )
        try:
            array = np.ascontiguousarray(array, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"input tensor '{name}' cannot be converted to float32: {e}",
                parameter=name,
            ) from e
        return self._net.blobs[index], array

    def _fetch(self, name: str, batch_size: int) -> np.ndarray:
        index = self._bindings.output_index(name)
        if index is None:
            raise InvalidArgumentError(
                f"output tensor '{name}' does not exist in the network",
                parameter=name,
                expected=str(self.output_names),
            )
        blob = self._net.blobs[index]
        per_example = blob.count(1)
        needed = batch_size * per_example
        if needed > blob.count():
            raise TopologyError(
                f"output '{name}' holds {blob.count()} elements, "
                f"batch {batch_size} needs {needed}",
                model_name=self._net.name,
            )
        return blob.flat[:needed].reshape(batch_size, per_example).copy()

    def load_weights(self, path: Union[str, PathLike]) -> list[str]:
        """
        Copy trained parameters from a parameter file into the net.

        Parameters in the file that the net does not have are skipped.
        Calling this again re-copies from the new file.

        Returns:
            Names of the parameters copied.

        Raises:
            InvalidArgumentError: If the file cannot be read or parsed.
            WeightShapeError: If a parameter does not fit the topology.
                Nothing is copied in that case.
        """
        start = time.perf_counter()
        params = read_params(path)
        copied = self._net.copy_trained_layers_from(params)

        skipped = [name for name in params if name not in self._net.params]
        if skipped:
            self._logger.warning(
                f"Skipped {len(skipped)} parameter(s) unknown to the net",
                component="session",
                model_name=self._net.name,
                skipped=",".join(skipped),
            )
        self._logger.info(
            f"Loaded {len(copied)} trained parameter(s)",
            component="session",
            model_name=self._net.name,
            path=str(path),
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return copied

    def summary(self) -> str:
        """Get session summary."""
        mean_ms = (
            self._total_inference_time / self._execution_count
            if self._execution_count
            else 0.0
        )
        lines = [
            "=" * 60,
            "BatchNet Serving Session",
            "=" * 60,
            f"Net: {self._net.name}",
            f"Mode: {self._net.mode.value.upper()}",
            f"Capacity: {self.capacity}",
            "",
            f"Inputs: {self.input_names}",
            f"Outputs: {self.output_names}",
            "",
            f"Runs: {self._execution_count}",
            f"Mean run time: {mean_ms:.2f} ms",
            "=" * 60,
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ServingSession("
            f"net='{self._net.name}', "
            f"capacity={self.capacity}, "
            f"mode={self._net.mode.value})"
        )
