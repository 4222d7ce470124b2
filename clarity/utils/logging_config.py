"""
Logging Configuration
=====================

Console and rotating-file logging for Clarity.

Every service call runs inside a ``correlation_scope`` so all lines of
one preview or organize run share an ID. The log file always gets JSON
lines at ``file_level``; the console follows ``level`` and is meant for
the CLI user.
"""

import json
import logging
import logging.handlers
import sys
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional


ROOT_LOGGER_NAME = "clarity"

_thread_local = threading.local()


def new_correlation_id() -> str:
    """Generate a short random correlation ID."""
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current thread, if one is set."""
    return getattr(_thread_local, "correlation_id", None)


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set (or clear, with None) the correlation ID of the current thread."""
    _thread_local.correlation_id = correlation_id


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Run a block under its own correlation ID.

    The previous ID of the thread is restored afterwards, so nested
    scopes and worker threads reusing the same thread do not leak IDs.

    Yields:
        The ID in effect inside the block.
    """
    previous = get_correlation_id()
    current = correlation_id or new_correlation_id()
    set_correlation_id(current)
    try:
        yield current
    finally:
        set_correlation_id(previous)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for the log file."""

    # Optional ``extra=`` fields copied into the JSON object when present
    EXTRA_FIELDS = ("directory", "file_path", "destination", "category",
                    "status", "operation", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        for name in self.EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = str(value) if isinstance(value, Path) else value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Short human-readable lines, colored when writing to a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_color and record.levelname in self.COLORS:
            level = f"{self.COLORS[record.levelname]}{level}{self.RESET}"

        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        correlation_id = get_correlation_id()
        scope = f" [{correlation_id}]" if correlation_id else ""

        msg = f"[{timestamp}] {level}{scope} {record.name}: {record.getMessage()}"
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        return msg


@dataclass
class LoggingConfig:
    """Configuration for the logging system.

    Attributes:
        level: Console log level.
        file_level: Log file level, independent of the console.
        log_dir: Directory of ``clarity.log``.
        console_output: Log to stderr.
        file_output: Log to the rotating file.
        json_format: Use JSON lines on the console too.
    """
    level: str = "INFO"
    file_level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: Path.home() / ".clarity" / "logs")
    console_output: bool = True
    file_output: bool = True
    json_format: bool = False
    max_file_size: int = 5 * 1024 * 1024  # 5MB
    backup_count: int = 3


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Set up the ``clarity`` logger hierarchy.

    Safe to call more than once: previous handlers are closed and replaced.

    Args:
        config: Logging configuration. Uses defaults if not provided.
    """
    if config is None:
        config = LoggingConfig()

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    levels = []

    if config.console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_level(config.level))
        if config.json_format:
            console_handler.setFormatter(JSONFormatter())
        else:
            is_tty = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
            console_handler.setFormatter(ConsoleFormatter(use_color=is_tty))
        app_logger.addHandler(console_handler)
        levels.append(console_handler.level)

    if config.file_output:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_dir / "clarity.log",
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(_level(config.file_level))
        file_handler.setFormatter(JSONFormatter())
        app_logger.addHandler(file_handler)
        levels.append(file_handler.level)

    app_logger.setLevel(min(levels) if levels else logging.CRITICAL)
    # Keep Clarity's lines out of the host application's root handlers
    app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Name of the module (typically __name__).

    Returns:
        Logger instance under the ``clarity`` hierarchy.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class Timer:
    """Context manager timing an operation and logging its duration.

    Exceptions are never suppressed; the line then reads ``failed``.
    """

    def __init__(self, logger: logging.Logger, operation: str, **extra):
        """Initialize timer.

        Args:
            logger: Logger to log the duration to.
            operation: Name of the operation being timed.
            **extra: Additional fields for the log record (e.g. ``directory``).
        """
        self.logger = logger
        self.operation = operation
        self.extra = extra
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        outcome = "failed" if exc_type else "completed"
        self.logger.info(
            f"Operation {outcome}: {self.operation} ({self.duration_ms} ms)",
            extra={**self.extra, "operation": self.operation, "duration_ms": self.duration_ms},
        )
        return False
