# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
CUDA Backend

Counts and binds NVIDIA GPUs through whichever Python library is
present, probed in the order cupy, torch, then libcudart via ctypes.
None of these is a hard dependency.
"""

import ctypes
import logging
from typing import Any, Callable, Optional

from .base import BackendType, BaseBackend, DeviceProperties

logger = logging.getLogger("batchnet.backends.cuda")


def _probe_cupy() -> Optional[Any]:
    import cupy

    return cupy if cupy.cuda.runtime.getDeviceCount() > 0 else None


def _probe_torch() -> Optional[Any]:
    import torch

    return torch if torch.cuda.is_available() else None


def _probe_cudart() -> Optional[Any]:
    cudart = ctypes.CDLL("libcudart.so")
    count = ctypes.c_int(0)
    if cudart.cudaGetDeviceCount(ctypes.byref(count)) == 0 and count.value > 0:
        return cudart
    return None


_PROBES: list[tuple[str, Callable[[], Optional[Any]]]] = [
    ("cupy", _probe_cupy),
    ("torch", _probe_torch),
    ("ctypes", _probe_cudart),
]


class CUDABackend(BaseBackend):
    """
    CUDA devices reached through cupy, torch or the CUDA runtime.

    Example:
        backend = CUDABackend(device_id=0)
        if backend.is_available():
            print(backend.backend_lib, backend.get_device_count())
    """

    def __init__(self, device_id: int = 0):
        super().__init__(device_id)
        self._lib: Any = None
        self._backend_lib: Optional[str] = None

    @property
    def name(self) -> str:
        return "cuda"

    @property
    def backend_type(self) -> BackendType:
        return BackendType.CUDA

    @property
    def backend_lib(self) -> Optional[str]:
        """Library that answered the probe ("cupy", "torch" or "ctypes")."""
        return self._backend_lib

    def is_available(self) -> bool:
        if self._backend_lib is not None:
            return True

        for lib_name, probe in _PROBES:
            try:
                lib = probe()
            except Exception as e:
                # Missing library, missing driver or no device
                logger.debug(f"CUDA probe via {lib_name} failed: {e}")
                continue
            if lib is not None:
                self._lib, self._backend_lib = lib, lib_name
                return True
        return False

    def _do_initialize(self) -> bool:
        if self._backend_lib == "cupy":
            self._lib.cuda.Device(self._device_id).use()
        elif self._backend_lib == "torch":
            self._lib.cuda.set_device(self._device_id)
        elif self._backend_lib == "ctypes":
            return self._lib.cudaSetDevice(self._device_id) == 0
        return self._backend_lib is not None

    def get_device_count(self) -> int:
        if not self.is_available():
            return 0
        if self._backend_lib == "cupy":
            return self._lib.cuda.runtime.getDeviceCount()
        if self._backend_lib == "torch":
            return self._lib.cuda.device_count()
        count = ctypes.c_int(0)
        self._lib.cudaGetDeviceCount(ctypes.byref(count))
        return count.value

    def get_device_properties(self) -> DeviceProperties:
        if not self.is_available():
            return DeviceProperties(backend_type=BackendType.CUDA, is_available=False)

        props = DeviceProperties(
            name=f"CUDA Device {self._device_id}",
            vendor="NVIDIA",
            backend_type=BackendType.CUDA,
            device_id=self._device_id,
            is_available=True,
        )
        try:
            if self._backend_lib == "cupy":
                raw = self._lib.cuda.runtime.getDeviceProperties(self._device_id)
                name = raw["name"]
                props.name = name.decode() if isinstance(name, bytes) else name
                props.total_memory = raw["totalGlobalMem"]
                props.compute_capability = (raw["major"], raw["minor"])
            elif self._backend_lib == "torch":
                raw = self._lib.cuda.get_device_properties(self._device_id)
                props.name = raw.name
                props.total_memory = raw.total_memory
                props.compute_capability = (raw.major, raw.minor)
        except Exception as e:
            logger.warning(f"Reading CUDA device properties failed: {e}")
        return props
