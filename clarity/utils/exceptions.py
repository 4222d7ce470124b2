"""
Custom Exceptions
=================

Defines custom exception classes for Clarity.
All exceptions include error codes for programmatic handling.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Error codes for programmatic error handling."""

    # General errors (1000-1099)
    UNKNOWN_ERROR = 1000

    # Configuration errors (1100-1199)
    CONFIG_UNREADABLE = 1100
    CONFIG_UNWRITABLE = 1101
    INVALID_CONFIG = 1102

    # Directory errors (1200-1299)
    DIRECTORY_UNREADABLE = 1200
    PROTECTED_PATH = 1201

    # Organization errors (1300-1399)
    DESTINATION_NOT_SAFE = 1300
    MOVE_FAILED = 1301
    ALREADY_ORGANIZED = 1302
    CANCELLED = 1303


class ClarityError(Exception):
    """Base exception for all Clarity errors.

    Attributes:
        message: Human-readable error message.
        error_code: Programmatic error code.
        details: Additional error context.
        cause: Original exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[dict] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Programmatic error code.
            details: Additional context as key-value pairs.
            cause: Original exception if wrapping another error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return a formatted error string."""
        result = f"[{self.error_code.name}] {self.message}"
        if self.details:
            result += f" | Details: {self.details}"
        if self.cause:
            result += f" | Caused by: {type(self.cause).__name__}: {self.cause}"
        return result

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(ClarityError):
    """Base class for configuration problems."""

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_CONFIG,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if config_path:
            details["config_path"] = config_path
        super().__init__(
            message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class ConfigUnreadableError(ConfigurationError):
    """Raised when the configuration file is missing or corrupt.

    Examples:
        - File does not exist
        - File is not valid YAML
        - File content does not match the configuration schema
    """

    def __init__(self, message: str, config_path: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            config_path=config_path,
            error_code=ErrorCode.CONFIG_UNREADABLE,
            **kwargs
        )


class ConfigUnwritableError(ConfigurationError):
    """Raised when the configuration cannot be persisted."""

    def __init__(self, message: str, config_path: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            config_path=config_path,
            error_code=ErrorCode.CONFIG_UNWRITABLE,
            **kwargs
        )


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration payload fails validation.

    Examples:
        - Empty or duplicate category name
        - Category name that is not a valid folder name
        - Relative safe/unsafe path
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type
        super().__init__(
            message,
            error_code=ErrorCode.INVALID_CONFIG,
            details=details,
            **kwargs
        )


class DirectoryUnreadableError(ClarityError):
    """Raised when a source directory does not exist or cannot be listed."""

    def __init__(self, message: str, directory: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if directory:
            details["directory"] = directory
        super().__init__(
            message,
            error_code=ErrorCode.DIRECTORY_UNREADABLE,
            details=details,
            **kwargs
        )


class ProtectedPathError(ClarityError):
    """Raised when asked to scan a directory inside a protected location."""

    def __init__(self, message: str, directory: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if directory:
            details["directory"] = directory
        super().__init__(
            message,
            error_code=ErrorCode.PROTECTED_PATH,
            details=details,
            **kwargs
        )


class DestinationNotSafeError(ClarityError):
    """Raised when a destination directory is not an allowed move target."""

    def __init__(self, message: str, destination: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if destination:
            details["destination"] = destination
        super().__init__(
            message,
            error_code=ErrorCode.DESTINATION_NOT_SAFE,
            details=details,
            **kwargs
        )


class MoveFailedError(ClarityError):
    """Raised when a single file cannot be moved.

    Examples:
        - Permission denied
        - Cross-device move failure
        - Disk full
        - No free name left at the destination
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        destination: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if file_path:
            details["file_path"] = file_path
        if destination:
            details["destination"] = destination
        super().__init__(
            message,
            error_code=ErrorCode.MOVE_FAILED,
            details=details,
            **kwargs
        )
