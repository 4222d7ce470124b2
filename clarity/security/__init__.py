"""Destination safety checks for Clarity."""

from .destination import (
    SafetyValidator,
    is_allowed_destination,
    is_protected_source,
    is_within,
)

__all__ = [
    "SafetyValidator",
    "is_allowed_destination",
    "is_protected_source",
    "is_within",
]
