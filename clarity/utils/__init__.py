"""Utilities module for Clarity."""

from .logging_config import setup_logging, get_logger, LoggingConfig, Timer, correlation_scope
from .exceptions import (
    ErrorCode,
    ClarityError,
    ConfigurationError,
    ConfigUnreadableError,
    ConfigUnwritableError,
    InvalidConfigError,
    DirectoryUnreadableError,
    ProtectedPathError,
    DestinationNotSafeError,
    MoveFailedError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggingConfig",
    "Timer",
    "correlation_scope",
    "ErrorCode",
    "ClarityError",
    "ConfigurationError",
    "ConfigUnreadableError",
    "ConfigUnwritableError",
    "InvalidConfigError",
    "DirectoryUnreadableError",
    "ProtectedPathError",
    "DestinationNotSafeError",
    "MoveFailedError",
]
