"""Tests for centralized logging configuration."""

import json
import logging
import logging.handlers
import sys
from decimal import Decimal

import pytest

from paycalc.config.logging_config import (
    JSONFormatter,
    LoggingConfig,
    configure_logging,
    get_logger,
    reset_logging,
)


class TestLoggingConfig:
    """Test LoggingConfig class."""

    def test_default_configuration(self):
        """Test default logging configuration."""
        config = LoggingConfig()

        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert config.log_file is None
        assert config.max_file_size == 5 * 1024 * 1024  # 5MB
        assert config.backup_count == 3

    def test_environment_variable_override(self, monkeypatch):
        """Test configuration from environment variables."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        monkeypatch.setenv("LOG_FILE", "/tmp/paycalc.log")

        config = LoggingConfig.from_env()

        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.log_file == "/tmp/paycalc.log"

    def test_explicit_level_beats_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert LoggingConfig.from_env(log_level="DEBUG").log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test invalid log level raises error."""
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(log_level="INVALID")

    def test_invalid_log_format(self):
        """Test invalid log format raises error."""
        with pytest.raises(ValueError, match="Invalid log format"):
            LoggingConfig(log_format="xml")

    def test_formatters(self):
        json_formatter = LoggingConfig(log_format="json").create_formatter()

        assert isinstance(json_formatter, JSONFormatter)
        assert not isinstance(LoggingConfig().create_formatter(), JSONFormatter)


class TestJSONFormatter:
    """Test JSON log formatting."""

    def test_standard_fields(self):
        record = logging.LogRecord(
            "paycalc.test", logging.INFO, __file__, 10, "Built %s", ("payroll",), None
        )

        output = json.loads(JSONFormatter().format(record))

        assert output["level"] == "INFO"
        assert output["logger"] == "paycalc.test"
        assert output["message"] == "Built payroll"
        assert output["line"] == 10
        assert "args" not in output

    def test_context_fields_at_top_level(self):
        record = logging.LogRecord(
            "paycalc.test", logging.INFO, __file__, 10, "Attributed", None, None
        )
        record.employee = "jdoe@example.com"
        record.hours = Decimal("8.00")

        output = json.loads(JSONFormatter().format(record))

        assert output["employee"] == "jdoe@example.com"
        assert output["hours"] == "8.00"

    def test_exception_included(self):
        try:
            raise ValueError("bad rate")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            "paycalc.test", logging.ERROR, __file__, 10, "Failed", None, exc_info
        )

        output = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad rate" in output["exception"]


class TestConfigureLogging:
    """Test handler installation on the root logger."""

    def test_console_handler_installed(self):
        configure_logging(LoggingConfig(log_level="DEBUG"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_reconfiguring_replaces_handlers(self):
        configure_logging(LoggingConfig())
        configure_logging(LoggingConfig())

        assert len(logging.getLogger().handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "paycalc.log"
        configure_logging(LoggingConfig(log_format="json", log_file=str(log_file)))

        get_logger("paycalc.test").info("Payroll built")
        for handler in logging.getLogger().handlers:
            handler.flush()

        handlers = logging.getLogger().handlers
        assert any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers
        )
        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "Payroll built"

    def test_level_filters_records(self, tmp_path):
        log_file = tmp_path / "paycalc.log"
        configure_logging(LoggingConfig(log_level="WARNING", log_file=str(log_file)))

        get_logger("paycalc.test").info("quiet")
        get_logger("paycalc.test").warning("loud")
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text()
        assert "loud" in text
        assert "quiet" not in text

    def test_reset_logging(self):
        configure_logging(LoggingConfig(log_level="DEBUG"))

        reset_logging()

        root = logging.getLogger()
        assert root.handlers == []
        assert root.level == logging.WARNING
