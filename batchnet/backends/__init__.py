# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Device Backends

Answers which compute devices this process can use:
- CUDA (NVIDIA GPUs), probed through cupy, torch or libcudart
- CPU (universal fallback)

Usage:
    import batchnet.backends as bb

    print(bb.is_cuda_available())
    print(bb.get_cuda_device_count())
    print(bb.get_available_backends())
"""

from .base import (
    BackendError,
    BackendNotAvailableError,
    BackendType,
    BaseBackend,
    CPUBackend,
    DeviceProperties,
)
from .cuda_backend import CUDABackend


def is_cpu_available() -> bool:
    """Check if CPU backend is available (always True)."""
    return True


def is_cuda_available() -> bool:
    """Check if CUDA (NVIDIA GPU) is available."""
    return CUDABackend().is_available()


def get_available_backends() -> list[str]:
    """Get list of available backend names."""
    backends = ["cpu"]
    if is_cuda_available():
        backends.append("cuda")
    return backends


def get_cuda_device_count() -> int:
    """Get number of CUDA devices, 0 when none can be reached."""
    try:
        return CUDABackend().get_device_count()
    except Exception:
        return 0


def create_backend(device: str) -> BaseBackend:
    """
    Create a backend for a device string ("cpu", "cuda" or "cuda:N").

    Raises:
        BackendNotAvailableError: If the device class is not present.
    """
    name, _, index = device.partition(":")
    device_id = int(index) if index else 0
    if name == "cpu":
        return CPUBackend(device_id)
    if name == "cuda":
        backend = CUDABackend(device_id)
        if backend.is_available():
            return backend
    raise BackendNotAvailableError(f"Backend not available: {device}")


__all__ = [
    "BaseBackend",
    "BackendType",
    "DeviceProperties",
    "BackendError",
    "BackendNotAvailableError",
    "CPUBackend",
    "CUDABackend",
    "create_backend",
    "is_cpu_available",
    "is_cuda_available",
    "get_available_backends",
    "get_cuda_device_count",
]
