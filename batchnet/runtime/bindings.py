# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Binding Table

Immutable name -> blob index maps for a net's declared inputs and
outputs, built once at session construction.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from batchnet.engine import Net
from batchnet.errors import TopologyError


@dataclass(frozen=True)
class BindingTable:
    """
    Input and output bindings of a net.

    Attributes:
        inputs: Input blob name -> blob index
        outputs: Output blob name -> blob index
    """

    inputs: Mapping[str, int]
    outputs: Mapping[str, int]

    @classmethod
    def from_net(cls, net: Net) -> "BindingTable":
        """
        Raises:
            TopologyError: If a declared index is outside the blob list
                or two indices resolve to the same name.
        """
        names = net.blob_names
        return cls(
            inputs=_bind(names, net.input_blob_indices, "input", net.name),
            outputs=_bind(names, net.output_blob_indices, "output", net.name),
        )

    def input_index(self, name: str) -> Optional[int]:
        return self.inputs.get(name)

    def output_index(self, name: str) -> Optional[int]:
        return self.outputs.get(name)


def _bind(
    names: Sequence[str], indices: Sequence[int], kind: str, model_name: str
) -> Mapping[str, int]:
    table: dict[str, int] = {}
    for index in indices:
        if not 0 <= index < len(names):
            raise TopologyError(
                f"{kind} blob index {index} is outside the {len(names)} blobs",
                model_name=model_name,
            )
        name = names[index]
        if name in table:
            raise TopologyError(
                f"{kind} blob '{name}' is bound twice", model_name=model_name
            )
        table[name] = index
    return MappingProxyType(table)
