# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for BatchNet Observability Module

Validates:
- Verbosity enum
- LogEntry serialization
- BatchNetLogger singleton and output control
- Network summary box
"""

import io
import json

from batchnet.observability import (
    BatchNetLogger,
    LogEntry,
    Verbosity,
    get_logger,
    set_verbosity,
)


class TestVerbosity:
    """Tests for Verbosity enum."""

    def test_verbosity_values(self):
        assert Verbosity.SILENT == 0
        assert Verbosity.ERROR == 1
        assert Verbosity.WARNING == 2
        assert Verbosity.INFO == 3
        assert Verbosity.DEBUG == 4


class TestLogEntry:
    """Tests for LogEntry."""

    def test_to_json(self):
        entry = LogEntry(
            level="INFO",
            message="Reshaped",
            timestamp="2025-01-01T00:00:00",
            component="capacity",
            duration_ms=1.5,
        )
        data = json.loads(entry.to_json())
        assert data["component"] == "capacity"
        assert data["duration_ms"] == 1.5
        assert "model_name" not in data
        assert "extra" not in data

    def test_to_text_with_extra(self):
        entry = LogEntry(
            level="WARNING",
            message="Skipped",
            timestamp="2025-01-01T00:00:00",
            component="session",
            extra={"skipped": "a,b"},
        )
        text = entry.to_text()
        assert text.startswith("[WARNING] [session] Skipped")
        assert "skipped=a,b" in text


class TestBatchNetLogger:
    """Tests for BatchNetLogger."""

    def test_singleton(self):
        assert BatchNetLogger.get() is BatchNetLogger.get()
        assert get_logger() is BatchNetLogger.get()

    def test_env_verbosity(self, monkeypatch):
        monkeypatch.setenv("BATCHNET_VERBOSITY", "4")
        BatchNetLogger.reset()
        assert BatchNetLogger.get().get_verbosity() == Verbosity.DEBUG

    def test_invalid_env_verbosity_ignored(self, monkeypatch):
        monkeypatch.setenv("BATCHNET_VERBOSITY", "loud")
        BatchNetLogger.reset()
        assert BatchNetLogger.get().get_verbosity() == Verbosity.INFO

    def test_set_verbosity_clamps(self):
        set_verbosity(10)
        assert get_logger().get_verbosity() == Verbosity.DEBUG
        set_verbosity(-1)
        assert get_logger().get_verbosity() == Verbosity.SILENT

    def test_level_filtering(self):
        output = io.StringIO()
        logger = get_logger()
        logger.set_output(output)
        logger.set_verbosity(Verbosity.WARNING)

        logger.info("hidden")
        logger.warning("shown")

        assert "hidden" not in output.getvalue()
        assert "[WARNING] [batchnet] shown" in output.getvalue()

    def test_json_output(self):
        output = io.StringIO()
        logger = get_logger()
        logger.set_output(output)
        logger.set_verbosity(Verbosity.DEBUG)
        logger.set_json_format(True)

        logger.debug("run", component="session", model_name="net", batch_size=4)

        data = json.loads(output.getvalue().strip())
        assert data["level"] == "DEBUG"
        assert data["model_name"] == "net"
        assert data["extra"] == {"batch_size": 4}

    def test_handlers_receive_entries(self):
        entries = []
        logger = get_logger()
        logger.set_output(io.StringIO())
        logger.set_verbosity(Verbosity.ERROR)
        logger.add_handler(entries.append)

        logger.error("boom", component="device")

        assert len(entries) == 1
        assert entries[0].component == "device"

    def test_network_summary(self):
        output = io.StringIO()
        logger = get_logger()
        logger.set_output(output)
        logger.set_verbosity(Verbosity.INFO)

        logger.network_summary(
            {"name": "resnet", "mode": "CPU", "inputs": 1, "outputs": 1, "batch_size": 4}
        )

        text = output.getvalue()
        assert "Loaded Network" in text
        assert "resnet" in text
        assert "Initial batch size: 4" in text

    def test_network_summary_silent(self):
        output = io.StringIO()
        logger = get_logger()
        logger.set_output(output)
        logger.set_verbosity(Verbosity.WARNING)
        logger.network_summary({"name": "resnet"})
        assert output.getvalue() == ""
