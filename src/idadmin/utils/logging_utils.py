"""Structured logging utilities for the idadmin identity administration client."""

import json
import logging
import logging.config
import os
import sys
import time
from datetime import UTC, datetime
from functools import wraps
from pathlib import Path
from typing import Any

import yaml

LOGGER_NAMESPACE = "idadmin"

# Extra record attributes rendered by the structured and detailed formatters
CONTEXT_FIELDS = (
    "operation",
    "uid",
    "tenant_id",
    "api_endpoint",
    "http_method",
    "status_code",
    "duration",
)


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for terminal output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, *args: Any, disable_colors: bool = False, **kwargs: Any) -> None:
        """Initialize formatter with color configuration.

        Args:
            disable_colors: Whether to disable colored output
        """
        super().__init__(*args, **kwargs)
        self.disable_colors = disable_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors for terminal output."""
        levelname = record.levelname
        if (
            not self.disable_colors
            and hasattr(sys.stderr, "isatty")
            and sys.stderr.isatty()
        ):
            color = self.COLORS.get(levelname, "")
            record.levelname = f"{color}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for field_name in CONTEXT_FIELDS:
            value = getattr(record, field_name, None)
            if value is not None:
                log_entry[field_name] = value

        return json.dumps(log_entry, default=str)


class DetailedFormatter(logging.Formatter):
    """Detailed formatter with context information."""

    _LABELS = {
        "operation": "op",
        "uid": "uid",
        "tenant_id": "tenant",
        "api_endpoint": "endpoint",
        "http_method": "method",
        "status_code": "status",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with detailed context."""
        base_msg = super().format(record)

        context_parts = []
        for field_name, label in self._LABELS.items():
            value = getattr(record, field_name, None)
            if value is not None:
                context_parts.append(f"{label}={value}")
        duration = getattr(record, "duration", None)
        if duration is not None:
            context_parts.append(f"duration={duration:.3f}s")

        if context_parts:
            return base_msg + " [" + ", ".join(context_parts) + "]"

        return base_msg


class OperationFilter(logging.Filter):
    """Filter to add operation context to log records."""

    def __init__(self, operation: str | None = None):
        """Initialize the filter with an operation context.

        Args:
            operation: The current operation being performed
        """
        super().__init__()
        self.operation = operation

    def filter(self, record: logging.LogRecord) -> bool:
        """Add operation context to the record."""
        if self.operation and not hasattr(record, "operation"):
            record.operation = self.operation
        return True


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    structured: bool = False,
    operation: str | None = None,
    log_format: str = "console",
    disable_colors: bool = False,
) -> logging.Logger:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path for file output
        structured: Whether to use structured JSON logging
        operation: Current operation context for filtering
        log_format: Log format (console, json, detailed)
        disable_colors: Whether to disable colored output

    Returns:
        logging.Logger: Configured package logger
    """
    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    if structured or log_format == "json":
        console_formatter: logging.Formatter = StructuredFormatter()
    elif log_format == "detailed":
        console_formatter = DetailedFormatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        console_formatter = ColoredFormatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            disable_colors=disable_colors,
        )

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Files always get JSON lines
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    if operation:
        operation_filter = OperationFilter(operation)
        for handler in root_logger.handlers:
            handler.addFilter(operation_filter)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified module.

    Module names that already live under the ``idadmin`` package are used
    as-is; anything else is nested under the package namespace.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger: Logger instance
    """
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def configure_from_env() -> logging.Logger:
    """Configure logging from environment variables.

    Environment variables:
        IDADMIN_LOG_LEVEL: Log level (default: INFO)
        IDADMIN_LOG_FILE: Log file path (optional)
        IDADMIN_LOG_FORMAT: Log format (console, json, detailed) (default: console)
        IDADMIN_LOG_OPERATION: Current operation context (optional)
        IDADMIN_LOG_DISABLE_COLORS: Disable colored output (default: false)

    Returns:
        logging.Logger: Configured package logger
    """
    return setup_logging(
        level=os.getenv("IDADMIN_LOG_LEVEL", "INFO"),
        log_file=os.getenv("IDADMIN_LOG_FILE"),
        operation=os.getenv("IDADMIN_LOG_OPERATION"),
        log_format=os.getenv("IDADMIN_LOG_FORMAT", "console"),
        disable_colors=os.getenv("IDADMIN_LOG_DISABLE_COLORS", "false").lower()
        == "true",
    )


def configure_from_yaml(config_path: str | Path) -> logging.Logger:
    """Configure logging from a YAML dictConfig file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        logging.Logger: Configured package logger

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Logging config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    except (yaml.YAMLError, TypeError, ValueError, AttributeError) as e:
        raise ValueError(f"Invalid logging configuration: {e}") from e

    return logging.getLogger(LOGGER_NAMESPACE)


def default_config_path() -> Path:
    """Return the path of the packaged logging configuration."""
    return Path(__file__).parent.parent / "config" / "logging.yaml"


def init_default_logging() -> logging.Logger:
    """Initialize logging unless the package logger is already configured.

    Environment overrides take precedence over the packaged YAML file.
    """
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    if package_logger.handlers:
        return package_logger

    if any(
        os.getenv(name)
        for name in ("IDADMIN_LOG_LEVEL", "IDADMIN_LOG_FORMAT", "IDADMIN_LOG_FILE")
    ):
        return configure_from_env()

    config_path = default_config_path()
    if config_path.exists():
        return configure_from_yaml(config_path)
    return configure_from_env()


def log_operation(operation: str) -> Any:
    """Decorator logging the start, completion and failure of an operation.

    Args:
        operation: Operation name attached to every record as ``operation``
    """

    def decorator(func: Any) -> Any:
        logger = get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            context = {"operation": operation}
            logger.debug(f"Starting {operation}", extra=context)
            start = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.debug(
                    f"Failed {operation}: {e}",
                    extra={**context, "duration": time.monotonic() - start},
                )
                raise
            logger.debug(
                f"Completed {operation}",
                extra={**context, "duration": time.monotonic() - start},
            )
            return result

        return wrapper

    return decorator
