# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Device Selection

Picks the engine execution mode once per process: GPU with device 0
bound when an accelerator is present, CPU otherwise. A missing
accelerator is a normal outcome, never an error.

The process entry point should call select_device() explicitly before
building sessions. A session constructed without that call triggers the
selection itself; either way later calls return the first selection.

Example:
    from batchnet.runtime import select_device

    selection = select_device({"GPU": 1})
    print(selection.mode)  # Mode.GPU or Mode.CPU
"""

from dataclasses import dataclass
import threading
from typing import Mapping, Optional

from batchnet.backends import (
    BackendNotAvailableError,
    create_backend,
    get_cuda_device_count,
)
from batchnet.engine import Mode, set_device, set_mode
from batchnet.observability import BatchNetLogger


@dataclass(frozen=True)
class DeviceSelection:
    """Outcome of device selection."""

    mode: Mode
    device_id: Optional[int]
    visible_accelerators: int

    @property
    def accelerated(self) -> bool:
        return self.mode == Mode.GPU


_selection: Optional[DeviceSelection] = None
_lock = threading.Lock()


def _bind_first_accelerator() -> bool:
    try:
        return create_backend("cuda:0").initialize()
    except BackendNotAvailableError:
        return False


def select_device(device_count: Optional[Mapping[str, int]] = None) -> DeviceSelection:
    """
    Select the process-wide execution mode.

    Args:
        device_count: Optional per-class device limits; {"GPU": 0}
            forces CPU mode.

    Returns:
        The selection in effect for this process.
    """
    global _selection
    with _lock:
        if _selection is not None:
            return _selection

        visible = get_cuda_device_count()
        hints = {str(k).upper(): v for k, v in (device_count or {}).items()}
        limit = hints.get("GPU")
        usable = visible if limit is None else min(visible, limit)

        mode, device_id = Mode.CPU, None
        if usable > 0 and _bind_first_accelerator():
            mode, device_id = Mode.GPU, 0

        set_device(device_id)
        set_mode(mode)
        _selection = DeviceSelection(
            mode=mode, device_id=device_id, visible_accelerators=visible
        )

    BatchNetLogger.get().info(
        f"Execution mode: {mode.value.upper()}",
        component="device",
        visible_accelerators=visible,
    )
    return _selection


def current_selection() -> Optional[DeviceSelection]:
    """The selection made so far, or None before select_device runs."""
    return _selection


def reset_device_selection() -> None:
    """Forget the selection and return the engine to CPU mode (for testing)."""
    global _selection
    with _lock:
        _selection = None
        set_device(None)
        set_mode(Mode.CPU)


def ensure_device_selected(
    device_count: Optional[Mapping[str, int]] = None,
) -> DeviceSelection:
    """Return the process selection, selecting now if nobody has yet."""
    if _selection is not None:
        return _selection
    return select_device(device_count)
