# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Backend Base Classes

Abstract interface for the compute devices a session can be bound to.
Backends only answer "is this device class present, how many devices,
what are they" and bind a device index; arithmetic stays in the engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
import logging
import os
import platform

logger = logging.getLogger("batchnet.backends")


class BackendType(Enum):
    """Enumeration of supported backend types."""

    CPU = auto()
    CUDA = auto()


@dataclass
class DeviceProperties:
    """Hardware device properties."""

    name: str = "Unknown Device"
    vendor: str = "Unknown"
    backend_type: BackendType = BackendType.CPU
    device_id: int = 0
    total_memory: int = 0
    compute_capability: tuple[int, int] = (0, 0)
    multiprocessor_count: int = 1
    is_available: bool = False


class BackendError(Exception):
    """Base exception for backend errors."""

    pass


class BackendNotAvailableError(BackendError):
    """Raised when a backend is not available."""

    pass


class BaseBackend(ABC):
    """
    Abstract base class for device backends.

    Contract:
    - name: Return unique identifier string
    - is_available(): Return True only if the device class can be used;
      must not raise
    - get_device_count(): Number of devices of this class
    - initialize(): Bind device_id for the current process
    """

    def __init__(self, device_id: int = 0):
        self._device_id = device_id
        self._initialized = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique identifier for this backend."""
        pass

    @property
    @abstractmethod
    def backend_type(self) -> BackendType:
        pass

    @property
    def device_id(self) -> int:
        return self._device_id

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this backend is available on the current system.

        This method must NOT raise exceptions.
        """
        pass

    def initialize(self) -> bool:
        """
        Bind this backend's device.

        Returns:
            True if initialization succeeded.
        """
        if self._initialized:
            return True

        if not self.is_available():
            logger.warning(f"Backend {self.name} is not available")
            return False

        try:
            success = self._do_initialize()
        except Exception as e:
            logger.error(f"Failed to initialize {self.name}: {e}")
            return False

        self._initialized = success
        if success:
            logger.info(f"Backend {self.name}:{self._device_id} initialized")
        return success

    def _do_initialize(self) -> bool:
        """Backend-specific initialization. Override in subclasses."""
        return True

    @abstractmethod
    def get_device_properties(self) -> DeviceProperties:
        pass

    def get_device_count(self) -> int:
        return 1 if self.is_available() else 0

    def __repr__(self) -> str:
        status = "available" if self.is_available() else "unavailable"
        return f"<{self.__class__.__name__}({self.name}:{self._device_id}, {status})>"


class CPUBackend(BaseBackend):
    """CPU backend. Always available as fallback."""

    @property
    def name(self) -> str:
        return "cpu"

    @property
    def backend_type(self) -> BackendType:
        return BackendType.CPU

    def is_available(self) -> bool:
        return True

    def get_device_properties(self) -> DeviceProperties:
        return DeviceProperties(
            name=platform.processor() or "CPU",
            vendor=platform.system(),
            backend_type=BackendType.CPU,
            device_id=0,
            multiprocessor_count=os.cpu_count() or 1,
            is_available=True,
        )
