# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Net - a fixed-topology inference graph with named buffers.

The Net turns a GraphIR into:
1. An ordered blob list (graph inputs first, then node outputs in
   execution order)
2. Declared input and output blob indices
3. Named trained parameters (copied from the GraphIR constants)
4. A layer schedule executed by forward()

Shapes of every non-input blob are derived from the input blobs by
reshape(). Only float32 buffers are supported.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import numpy as np

from batchnet.core import DataType, GraphIR, Node
from batchnet.errors import TopologyError, UnsupportedLayerError, WeightShapeError

from .blob import Blob
from .mode import Mode, get_device_id, get_mode
from .registry import LayerKernel, LayerRegistry


@dataclass
class _LayerInstance:
    """A node bound to its kernel, bottom/top blob indices and parameters."""

    node: Node
    kernel: LayerKernel
    bottoms: list[int]
    params: list[str]
    tops: list[int]


class Net:
    """
    Executable net built from a GraphIR.

    Example:
        net = Net(graph)
        net.blobs[net.input_blob_indices[0]].flat[:] = pixels
        net.forward()
        probs = net.blobs[net.output_blob_indices[0]].data
    """

    def __init__(self, graph: GraphIR):
        # Import layer modules to populate the registry
        from . import layers  # noqa: F401

        self.name = graph.name or "net"
        self.mode: Mode = get_mode()
        self.device_id = get_device_id()

        self._blobs: list[Blob] = []
        self._blob_index: dict[str, int] = {}
        self._params: dict[str, np.ndarray] = {
            name: np.array(value, dtype=np.float32, copy=True)
            for name, value in graph.constants.items()
        }
        self._layers: list[_LayerInstance] = []

        for desc in graph.inputs:
            if desc.dtype != DataType.Float32:
                raise TopologyError(
                    f"input '{desc.name}' is {desc.dtype.name}, only Float32 is supported",
                    model_name=self.name,
                )
            if desc.name in self._blob_index:
                raise TopologyError(
                    f"input '{desc.name}' is declared twice", model_name=self.name
                )
            # Dynamic dimensions start at 1 until a request resizes them
            self._add_blob(desc.name, [d if d >= 0 else 1 for d in desc.shape.dims])

        for node in graph.topological_order():
            self._layers.append(self._bind_node(node))

        self._input_indices = [self._blob_index[d.name] for d in graph.inputs]
        self._output_indices = []
        for desc in graph.outputs:
            if desc.name not in self._blob_index:
                raise TopologyError(
                    f"output '{desc.name}' is not produced by any layer",
                    model_name=self.name,
                )
            self._output_indices.append(self._blob_index[desc.name])

        self.reshape()

    def _add_blob(self, name: str, shape) -> int:
        self._blobs.append(Blob(name, shape))
        self._blob_index[name] = len(self._blobs) - 1
        return self._blob_index[name]

    def _bind_node(self, node: Node) -> _LayerInstance:
        try:
            kernel = LayerRegistry.get_kernel(node.op_type)
        except KeyError:
            raise UnsupportedLayerError(
                node.op_type,
                node_name=node.name,
                supported_ops=LayerRegistry.list_operators(),
            ) from None

        bottoms, params = [], []
        for name in node.input_names:
            if name in self._blob_index:
                bottoms.append(self._blob_index[name])
            elif name in self._params:
                params.append(name)
            else:
                raise TopologyError(
                    f"input '{name}' is neither a blob nor a parameter",
                    model_name=self.name,
                    node_name=node.name,
                )
        if not bottoms:
            raise TopologyError(
                "layer has no blob inputs", model_name=self.name, node_name=node.name
            )

        tops = []
        for name in node.output_names:
            if name in self._blob_index or name in self._params:
                raise TopologyError(
                    f"blob '{name}' is produced more than once",
                    model_name=self.name,
                    node_name=node.name,
                )
            tops.append(self._add_blob(name, (0,)))

        return _LayerInstance(node, kernel, bottoms, params, tops)

    @property
    def blob_names(self) -> list[str]:
        return [blob.name for blob in self._blobs]

    @property
    def blobs(self) -> list[Blob]:
        return list(self._blobs)

    @property
    def input_blob_indices(self) -> list[int]:
        return list(self._input_indices)

    @property
    def output_blob_indices(self) -> list[int]:
        return list(self._output_indices)

    @property
    def params(self) -> Mapping[str, np.ndarray]:
        """Trained parameters by name (read-only mapping, writable arrays)."""
        return MappingProxyType(self._params)

    def blob_by_name(self, name: str) -> Blob:
        return self._blobs[self._blob_index[name]]

    def reshape(self) -> None:
        """
        Re-derive every layer output shape from the current input shapes.

        Raises:
            TopologyError: If a layer cannot accept its bottom shapes.
        """
        for layer in self._layers:
            bottom_shapes = [self._blobs[i].shape for i in layer.bottoms]
            param_shapes = [self._params[n].shape for n in layer.params]
            try:
                top_shapes = layer.kernel.infer_shapes(
                    bottom_shapes, param_shapes, layer.node.attrs
                )
                if len(top_shapes) != len(layer.tops):
                    raise ValueError(
                        f"produces {len(top_shapes)} tops, topology declares "
                        f"{len(layer.tops)}"
                    )
                for idx, shape in zip(layer.tops, top_shapes):
                    self._blobs[idx].reshape(shape)
            except ValueError as e:
                raise TopologyError(
                    f"shape inference failed: {e}",
                    model_name=self.name,
                    node_name=layer.node.name,
                ) from e

    def forward(self) -> None:
        """Run every layer once, reading input blobs and filling the rest."""
        for layer in self._layers:
            bottoms = [self._blobs[i].data for i in layer.bottoms]
            params = [self._params[n] for n in layer.params]
            tops = layer.kernel.forward(bottoms, params, layer.node.attrs)
            for idx, value in zip(layer.tops, tops):
                blob = self._blobs[idx]
                if value.shape != blob.shape:
                    raise TopologyError(
                        f"layer produced {value.shape}, blob '{blob.name}' is "
                        f"{blob.shape}",
                        model_name=self.name,
                        node_name=layer.node.name,
                    )
                blob.data[...] = value

    def copy_trained_layers_from(self, params: Mapping[str, np.ndarray]) -> list[str]:
        """
        Copy parameters whose names exist in this net.

        Every shape is checked before anything is written, so a mismatch
        leaves the current parameters untouched.

        Returns:
            Names of the parameters that were copied.

        Raises:
            WeightShapeError: If a matching name has a different shape.
        """
        matched = [name for name in params if name in self._params]
        for name in matched:
            expected = self._params[name].shape
            actual = tuple(np.shape(params[name]))
            if actual != expected:
                raise WeightShapeError(name, expected, actual, model_name=self.name)

        for name in matched:
            self._params[name][...] = np.asarray(params[name], dtype=np.float32)
        return matched

    def __repr__(self) -> str:
        return (
            f"Net(name='{self.name}', blobs={len(self._blobs)}, "
            f"layers={len(self._layers)}, mode={self.mode.value})"
        )
