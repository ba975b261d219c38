# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Observability Module

Structured logging for serving sessions:
- BatchNetLogger: text or JSON log lines, verbosity levels, handlers
"""

from .logger import (
    Verbosity,
    LogEntry,
    BatchNetLogger,
    get_logger,
    set_verbosity,
)

__all__ = [
    "Verbosity",
    "LogEntry",
    "BatchNetLogger",
    "get_logger",
    "set_verbosity",
]
