"""
Destination Safety
==================

Decides whether a directory may receive organized files.

A destination is allowed only when it lies at or under one of the
configured safe paths and not at or under any unsafe path. Unsafe paths
win on overlap. With no safe paths configured nothing is allowed.
"""

import os
from pathlib import Path
from typing import Iterable, Optional, Union

from clarity.config.settings import AppConfig
from clarity.utils.exceptions import DestinationNotSafeError
from clarity.utils.logging_config import get_logger

logger = get_logger(__name__)


def _canonical(path: Union[str, Path]) -> Path:
    """Absolute path with ``~``, ``..`` and symlinks resolved."""
    return Path(os.path.realpath(Path(path).expanduser()))


def is_within(path: Union[str, Path], root: Union[str, Path]) -> bool:
    """Check whether ``path`` is ``root`` itself or lies beneath it.

    Both paths are canonicalized first, so ``/safe/../etc`` is not
    considered to be under ``/safe``.
    """
    try:
        _canonical(path).relative_to(_canonical(root))
        return True
    except ValueError:
        return False


def _first_containing(path: Path, roots: Iterable[Path]) -> Optional[Path]:
    for root in roots:
        if is_within(path, root):
            return root
    return None


def is_protected_source(directory: Union[str, Path], config: AppConfig) -> bool:
    """Check whether a directory to be scanned is inside an unsafe path."""
    return _first_containing(Path(directory), config.unsafe_paths) is not None


class SafetyValidator:
    """Validates organize destinations against one configuration."""

    def __init__(self, config: AppConfig):
        """Initialize the validator.

        Args:
            config: Configuration providing safe and unsafe paths.
        """
        self.safe_paths = list(config.safe_paths)
        self.unsafe_paths = list(config.unsafe_paths)

    def check(self, path: Union[str, Path]) -> Path:
        """Validate a destination directory.

        Args:
            path: Candidate destination.

        Returns:
            The canonical destination path.

        Raises:
            DestinationNotSafeError: If the destination is not allowed.
        """
        destination = _canonical(path)

        if not self.safe_paths:
            raise DestinationNotSafeError(
                "No safe paths are configured", destination=str(destination)
            )

        blocked_by = _first_containing(destination, self.unsafe_paths)
        if blocked_by is not None:
            raise DestinationNotSafeError(
                f"Destination is inside unsafe path {blocked_by}",
                destination=str(destination),
            )

        if _first_containing(destination, self.safe_paths) is None:
            raise DestinationNotSafeError(
                "Destination is outside every safe path",
                destination=str(destination),
            )

        return destination

    def is_allowed(self, path: Union[str, Path]) -> bool:
        """Check a destination without raising."""
        try:
            self.check(path)
            return True
        except DestinationNotSafeError as e:
            logger.debug(f"Rejected destination {path}: {e.message}")
            return False


def is_allowed_destination(path: Union[str, Path], config: AppConfig) -> bool:
    """Check whether ``path`` is an allowed organize destination.

    Args:
        path: Candidate destination directory.
        config: Configuration providing safe and unsafe paths.

    Returns:
        True if the path is under a safe path and under no unsafe path.
    """
    return SafetyValidator(config).is_allowed(path)
