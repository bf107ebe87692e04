"""
Structured logging utilities for the coverage collector.

This module provides run ID tracking, a colored console formatter that shows
the calling file and line, a structured JSON formatter, and step lifecycle
logging used by the collection pipeline.
"""

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from coverage_collector.constants import (
    COLOR_BLUE,
    COLOR_GRAY,
    COLOR_GREEN,
    COLOR_RED,
    COLOR_RESET,
    COLOR_YELLOW,
)

# Context variable for tracking the run ID across a collection
run_id: ContextVar[str] = ContextVar("run_id", default="")

STRUCTURED_FIELDS = (
    "namespace",
    "pod_name",
    "deployment",
    "step",
    "duration",
    "error_type",
    "command",
    "returncode",
)

LEVEL_TAGS = {
    logging.DEBUG: ("DEBUG", COLOR_GRAY),
    logging.INFO: ("INFO", COLOR_GREEN),
    logging.WARNING: ("WARN", COLOR_YELLOW),
    logging.ERROR: ("ERROR", COLOR_RED),
    logging.CRITICAL: ("ERROR", COLOR_RED),
}


class RunIDFilter(logging.Filter):
    """Logging filter that adds the run ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        current_run_id = run_id.get()
        if not current_run_id:
            current_run_id = generate_run_id()
            run_id.set(current_run_id)

        record.run_id = current_run_id
        return True


class MaxLevelFilter(logging.Filter):
    """Let through only records strictly below a level."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


class ConsoleFormatter(logging.Formatter):
    """
    Colored single-line formatter for interactive use.

    Produces ``<timestamp> [LEVEL] [file:line] message`` with the timestamp
    in blue, the level tag colored by severity and the caller in gray.
    """

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _paint(self, text: str, color: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{COLOR_RESET}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        tag, color = LEVEL_TAGS.get(record.levelno, (record.levelname, COLOR_GREEN))
        caller = f"[{os.path.basename(record.pathname)}:{record.lineno}]"

        line = " ".join(
            [
                self._paint(timestamp, COLOR_BLUE),
                self._paint(f"[{tag}]", color),
                self._paint(caller, COLOR_GRAY),
                record.getMessage(),
            ]
        )

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with run ID support.

    Formats log records as structured JSON for collection by CI systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_run_id() -> str:
    """
    Generate a new run ID.

    Returns:
        Unique run ID string
    """
    return str(uuid.uuid4())[:8]


def set_run_id(value: str) -> str:
    """Set the run ID for the current context."""
    run_id.set(value)
    return value


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = False,
    run_id_enabled: bool = True,
    use_color: bool | None = None,
) -> None:
    """
    Set up logging for the collector.

    Informational records go to stdout, warnings and errors go to stderr.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
        run_id_enabled: Whether to tag records with the run ID
        use_color: Force colors on or off; defaults to whether stdout is a TTY
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if use_color is None:
        use_color = sys.stdout.isatty()

    if enable_json_formatting:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = ConsoleFormatter(use_color=use_color)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(MaxLevelFilter(logging.WARNING))
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)

    for handler in (stdout_handler, stderr_handler):
        handler.setFormatter(formatter)
        if run_id_enabled:
            handler.addFilter(RunIDFilter())
        root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Third-party clients are chatty at DEBUG
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class CollectorLogger:
    """
    Logger for collection steps with structured logging support.

    Provides convenient methods for logging step lifecycle events with
    consistent structured fields.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_step_start(self, step: str, description: str) -> None:
        """Log the start of a collection step."""
        self.logger.info(
            description,
            extra={"step": step},
            stacklevel=2,
        )

    def log_step_success(self, step: str, message: str, duration: float) -> None:
        """
        Log successful step completion.

        Args:
            step: Step identifier
            message: Human-readable completion message
            duration: Step duration in seconds
        """
        self.logger.info(
            message,
            extra={"step": step, "duration": duration},
            stacklevel=2,
        )

    def log_step_failure(self, step: str, error: Exception, duration: float) -> None:
        """
        Log a failed step.

        Args:
            step: Step identifier
            error: The error that ended the step
            duration: Step duration in seconds
        """
        self.logger.error(
            f"Step {step} failed: {error}",
            extra={
                "step": step,
                "error_type": type(error).__name__,
                "duration": duration,
            },
            stacklevel=2,
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with extra data."""
        self.logger.debug(message, extra=kwargs, stacklevel=2)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with extra data."""
        self.logger.info(message, extra=kwargs, stacklevel=2)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with extra data."""
        self.logger.warning(message, extra=kwargs, stacklevel=2)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message with extra data."""
        self.logger.error(message, exc_info=exc_info, extra=kwargs, stacklevel=2)
