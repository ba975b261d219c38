# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Engine Execution Mode

Process-wide execution mode and device binding. Every Net records the
mode that was active when it was constructed. The mode is written by
the device selector in batchnet.runtime.device; nothing else in the
package should call set_mode/set_device.
"""

from enum import Enum
from typing import Optional


class Mode(Enum):
    """Engine execution mode."""

    CPU = "cpu"
    GPU = "gpu"


_mode: Mode = Mode.CPU
_device_id: Optional[int] = None


def set_mode(mode: Mode) -> None:
    global _mode
    _mode = Mode(mode)


def get_mode() -> Mode:
    return _mode


def set_device(device_id: Optional[int]) -> None:
    """Bind the accelerator index used by nets constructed afterwards."""
    global _device_id
    _device_id = device_id


def get_device_id() -> Optional[int]:
    return _device_id
