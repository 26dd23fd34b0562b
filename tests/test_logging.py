"""Tests for structured logging functionality."""

import json
import logging
import os
import sys
from io import StringIO
from unittest.mock import patch

import pytest

from idadmin.utils.logging_utils import (
    ColoredFormatter,
    DetailedFormatter,
    OperationFilter,
    StructuredFormatter,
    configure_from_env,
    configure_from_yaml,
    default_config_path,
    get_logger,
    init_default_logging,
    log_operation,
    setup_logging,
)


def make_record(name: str = "idadmin.test", msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def package_logger():
    """Restore the package logger configuration after each test."""
    logger = logging.getLogger("idadmin")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


class TestStructuredFormatter:
    """Test structured JSON formatter."""

    def test_basic_formatting(self):
        log_data = json.loads(StructuredFormatter().format(make_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "idadmin.test"
        assert log_data["message"] == "Test message"
        assert log_data["line"] == 42
        assert "timestamp" in log_data

    def test_context_fields(self):
        """Test that known context fields are included."""
        record = make_record()
        record.uid = "uid-123"
        record.operation = "delete_user"
        record.duration = 1.234
        record.unrelated = "ignored"

        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["uid"] == "uid-123"
        assert log_data["operation"] == "delete_user"
        assert log_data["duration"] == 1.234
        assert "unrelated" not in log_data

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        log_data = json.loads(StructuredFormatter().format(record))

        assert "ValueError: boom" in log_data["exception"]


class TestDetailedFormatter:
    """Test detailed formatter."""

    def test_context_suffix(self):
        record = make_record()
        record.operation = "get_user"
        record.status_code = 404
        record.duration = 0.5

        result = DetailedFormatter(fmt="%(message)s").format(record)

        assert result == "Test message [op=get_user, status=404, duration=0.500s]"

    def test_no_context(self):
        assert DetailedFormatter(fmt="%(message)s").format(make_record()) == "Test message"


class TestColoredFormatter:
    def test_disabled_colors(self):
        formatter = ColoredFormatter(fmt="%(levelname)s %(message)s", disable_colors=True)

        assert formatter.format(make_record()) == "INFO Test message"

    def test_levelname_restored(self):
        record = make_record()
        with patch("sys.stderr") as mock_stderr:
            mock_stderr.isatty.return_value = True
            result = ColoredFormatter(fmt="%(levelname)s").format(record)

        assert "\033[32m" in result
        assert record.levelname == "INFO"


class TestOperationFilter:
    def test_adds_missing_operation(self):
        record = make_record()

        assert OperationFilter("import_users").filter(record)
        assert record.operation == "import_users"

    def test_keeps_existing_operation(self):
        record = make_record()
        record.operation = "get_user"

        OperationFilter("import_users").filter(record)

        assert record.operation == "get_user"


class TestSetupLogging:
    """Test logging setup."""

    def test_console_handler(self, package_logger):
        logger = setup_logging(level="DEBUG")

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, ColoredFormatter)

    def test_json_format(self, package_logger):
        logger = setup_logging(log_format="json")

        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_detailed_format(self, package_logger):
        logger = setup_logging(log_format="detailed")

        assert isinstance(logger.handlers[0].formatter, DetailedFormatter)

    def test_log_file(self, package_logger, tmp_path):
        log_file = tmp_path / "logs" / "idadmin.log"

        logger = setup_logging(log_file=str(log_file))
        get_logger("tests").info("written", extra={"operation": "file_test"})
        for handler in logger.handlers:
            handler.flush()

        line = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert line["message"] == "written"
        assert line["operation"] == "file_test"

    def test_operation_filter(self, package_logger):
        logger = setup_logging(operation="batch")

        assert all(
            any(isinstance(f, OperationFilter) for f in handler.filters)
            for handler in logger.handlers
        )

    def test_configure_from_env(self, package_logger):
        env = {"IDADMIN_LOG_LEVEL": "WARNING", "IDADMIN_LOG_FORMAT": "json"}
        with patch.dict(os.environ, env, clear=True):
            logger = configure_from_env()

        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)


class TestGetLogger:
    def test_package_module_name_kept(self):
        assert get_logger("idadmin.core.dispatcher").name == "idadmin.core.dispatcher"

    def test_foreign_name_nested(self):
        assert get_logger("scripts.sync").name == "idadmin.scripts.sync"


class TestYamlConfiguration:
    """Test dictConfig-based configuration."""

    def test_packaged_config(self, package_logger):
        assert default_config_path().exists()

        logger = configure_from_yaml(default_config_path())

        assert logger.level == logging.INFO
        assert logger.propagate is False
        assert isinstance(logger.handlers[0].formatter, ColoredFormatter)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            configure_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_config(self, tmp_path):
        config_file = tmp_path / "logging.yaml"
        config_file.write_text("version: 1\nhandlers: [not, a, mapping]\n", encoding="utf-8")

        with pytest.raises(ValueError):
            configure_from_yaml(config_file)

    def test_init_default_logging_uses_yaml(self, package_logger):
        with patch.dict(os.environ, {}, clear=True):
            logger = init_default_logging()

        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_init_default_logging_prefers_env(self, package_logger):
        with patch.dict(os.environ, {"IDADMIN_LOG_FORMAT": "detailed"}, clear=True):
            logger = init_default_logging()

        assert isinstance(logger.handlers[0].formatter, DetailedFormatter)

    def test_init_default_logging_keeps_existing(self, package_logger):
        handler = logging.NullHandler()
        package_logger.addHandler(handler)

        init_default_logging()

        assert package_logger.handlers == [handler]


class TestLogOperation:
    """Test the operation logging decorator."""

    @pytest.fixture
    def stream(self, package_logger):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)
        return stream

    def test_logs_start_and_completion(self, stream):
        @log_operation("sample")
        def sample(value):
            return value * 2

        assert sample(21) == 42

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [entry["message"] for entry in entries] == ["Starting sample", "Completed sample"]
        assert all(entry["operation"] == "sample" for entry in entries)
        assert "duration" in entries[1]

    def test_logs_failure_and_reraises(self, stream):
        @log_operation("failing")
        def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            failing()

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert entries[-1]["message"] == "Failed failing: boom"

    def test_preserves_metadata(self):
        @log_operation("documented")
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
