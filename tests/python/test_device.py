# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for device selection and the backends it probes.
"""

import pytest

from batchnet import backends
from batchnet.backends import BackendNotAvailableError, CPUBackend, create_backend
from batchnet.engine import Mode, get_device_id, get_mode
from batchnet.runtime import (
    current_selection,
    ensure_device_selected,
    reset_device_selection,
    select_device,
)
from batchnet.runtime import device as device_module


class FakeAccelerator:
    def __init__(self, ok=True):
        self.ok = ok
        self.initialized = 0

    def initialize(self):
        self.initialized += 1
        return self.ok


@pytest.fixture
def one_gpu(monkeypatch):
    accelerator = FakeAccelerator()
    monkeypatch.setattr(device_module, "get_cuda_device_count", lambda: 1)
    monkeypatch.setattr(device_module, "create_backend", lambda device: accelerator)
    return accelerator


class TestSelectDevice:
    """Tests for select_device."""

    def test_cpu_when_no_accelerator(self):
        selection = select_device()
        assert selection.mode == Mode.CPU
        assert selection.device_id is None
        assert not selection.accelerated
        assert get_mode() == Mode.CPU

    def test_gpu_when_accelerator_present(self, one_gpu):
        selection = select_device()
        assert selection.mode == Mode.GPU
        assert selection.device_id == 0
        assert selection.visible_accelerators == 1
        assert get_mode() == Mode.GPU
        assert get_device_id() == 0
        assert one_gpu.initialized == 1

    def test_gpu_hint_zero_forces_cpu(self, one_gpu):
        selection = select_device({"GPU": 0})
        assert selection.mode == Mode.CPU
        assert one_gpu.initialized == 0

    def test_gpu_hint_is_case_insensitive(self, one_gpu):
        selection = select_device({"gpu": 0})
        assert selection.mode == Mode.CPU
        assert one_gpu.initialized == 0

    def test_failed_initialization_falls_back_to_cpu(self, monkeypatch):
        monkeypatch.setattr(device_module, "get_cuda_device_count", lambda: 2)
        monkeypatch.setattr(
            device_module, "create_backend", lambda device: FakeAccelerator(ok=False)
        )
        assert select_device().mode == Mode.CPU

    def test_unavailable_backend_falls_back_to_cpu(self, monkeypatch):
        def unavailable(device):
            raise BackendNotAvailableError(device)

        monkeypatch.setattr(device_module, "get_cuda_device_count", lambda: 1)
        monkeypatch.setattr(device_module, "create_backend", unavailable)
        assert select_device().mode == Mode.CPU

    def test_selection_happens_once(self, one_gpu):
        first = select_device()
        second = select_device({"GPU": 0})
        assert second is first
        assert second.mode == Mode.GPU
        assert one_gpu.initialized == 1

    def test_ensure_and_current(self):
        assert current_selection() is None
        selection = ensure_device_selected()
        assert current_selection() is selection
        assert ensure_device_selected() is selection

    def test_reset(self, one_gpu):
        select_device()
        reset_device_selection()
        assert current_selection() is None
        assert get_mode() == Mode.CPU
        assert get_device_id() is None


class TestBackends:
    """Tests for backend helpers."""

    def test_cpu_always_available(self):
        assert backends.is_cpu_available()
        assert "cpu" in backends.get_available_backends()

    def test_create_cpu_backend(self):
        backend = create_backend("cpu")
        assert isinstance(backend, CPUBackend)
        assert backend.initialize()
        assert backend.is_initialized
        assert backend.get_device_count() >= 1

    def test_unknown_device(self):
        with pytest.raises(BackendNotAvailableError):
            create_backend("tpu")

    def test_cuda_count_never_raises(self):
        assert backends.get_cuda_device_count() >= 0
