# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Session Options

Configuration accepted when a ServingSession is constructed:
- device_count: maximum devices to use per device class ("CPU", "GPU");
  a class missing from the map lets the system pick
- batching: parameters for a request-batching layer wrapped around the
  session. The session itself never batches; it only carries and
  validates these values for that layer.

Example:
    options = SessionOptions.from_dict({
        "device_count": {"GPU": 0},
        "batching": {"max_batch_size": 32, "batch_timeout_micros": 2000},
    })
"""

from dataclasses import dataclass, field, fields
import os
from typing import Any, Mapping, Optional

from batchnet.errors import ConfigurationError


DEVICE_TYPES = ("CPU", "GPU")


@dataclass
class BatchingParameters:
    """
    Batching layer parameters.

    Attributes:
        max_batch_size: Largest batch the batching layer may form
        batch_timeout_micros: Longest wait before an incomplete batch runs
        max_enqueued_batches: Queue bound before requests are rejected
        num_batch_threads: Threads processing batches concurrently
        allowed_batch_sizes: If set, batches are padded up to one of these
            sizes; strictly increasing and ending at max_batch_size
    """

    max_batch_size: int = 1000
    batch_timeout_micros: int = 0
    max_enqueued_batches: int = 10
    num_batch_threads: int = field(default_factory=lambda: os.cpu_count() or 1)
    allowed_batch_sizes: list[int] = field(default_factory=list)

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If any parameter is out of range.
        """
        if self.max_batch_size < 1:
            raise ConfigurationError(
                "max_batch_size must be at least 1",
                config_key="batching.max_batch_size",
                config_value=self.max_batch_size,
            )
        if self.batch_timeout_micros < 0:
            raise ConfigurationError(
                "batch_timeout_micros cannot be negative",
                config_key="batching.batch_timeout_micros",
                config_value=self.batch_timeout_micros,
            )
        if self.max_enqueued_batches < 1:
            raise ConfigurationError(
                "max_enqueued_batches must be at least 1",
                config_key="batching.max_enqueued_batches",
                config_value=self.max_enqueued_batches,
            )
        if self.num_batch_threads < 1:
            raise ConfigurationError(
                "num_batch_threads must be at least 1",
                config_key="batching.num_batch_threads",
                config_value=self.num_batch_threads,
            )

        sizes = self.allowed_batch_sizes
        if not sizes:
            return
        if any(size < 1 for size in sizes):
            raise ConfigurationError(
                "allowed_batch_sizes entries must be positive",
                config_key="batching.allowed_batch_sizes",
                config_value=sizes,
            )
        if any(b <= a for a, b in zip(sizes, sizes[1:])):
            raise ConfigurationError(
                "allowed_batch_sizes must be strictly increasing",
                config_key="batching.allowed_batch_sizes",
                config_value=sizes,
            )
        if sizes[-1] != self.max_batch_size:
            raise ConfigurationError(
                "the last allowed batch size must equal max_batch_size "
                f"({self.max_batch_size})",
                config_key="batching.allowed_batch_sizes",
                config_value=sizes,
            )


@dataclass
class SessionOptions:
    """Options for constructing a ServingSession."""

    device_count: dict[str, int] = field(default_factory=dict)
    batching: Optional[BatchingParameters] = None

    def max_devices(self, device_type: str) -> Optional[int]:
        """Device limit for a class, or None when the system picks."""
        return self.device_count.get(device_type.upper())

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If a device count or batching parameter
                is invalid.
        """
        for device_type, count in self.device_count.items():
            if device_type not in DEVICE_TYPES:
                raise ConfigurationError(
                    f"unknown device type '{device_type}', expected one of "
                    f"{list(DEVICE_TYPES)}",
                    config_key="device_count",
                    config_value=device_type,
                )
            if not isinstance(count, int) or count < 0:
                raise ConfigurationError(
                    f"device count for {device_type} must be a non-negative integer",
                    config_key=f"device_count.{device_type}",
                    config_value=count,
                )
        if self.batching is not None:
            self.batching.validate()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionOptions":
        """
        Build and validate options from plain configuration data.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        known = {"device_count", "batching"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"unknown session option(s): {sorted(unknown)}",
                config_key=sorted(unknown)[0],
            )

        device_count = {
            str(k).upper(): v for k, v in dict(data.get("device_count") or {}).items()
        }

        batching = None
        batching_data = data.get("batching")
        if batching_data is not None:
            allowed = {f.name for f in fields(BatchingParameters)}
            unknown = set(batching_data) - allowed
            if unknown:
                raise ConfigurationError(
                    f"unknown batching parameter(s): {sorted(unknown)}",
                    config_key=f"batching.{sorted(unknown)[0]}",
                )
            batching = BatchingParameters(**batching_data)

        options = cls(device_count=device_count, batching=batching)
        options.validate()
        return options
