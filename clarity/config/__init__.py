"""Configuration module for Clarity."""

from .settings import AppConfig
from .categories import (
    UNCLASSIFIED,
    DEFAULT_CATEGORIES,
    default_unsafe_paths,
    normalize_extension,
    normalize_extensions,
)
from .store import ConfigStore, default_config_path

__all__ = [
    "AppConfig",
    "UNCLASSIFIED",
    "DEFAULT_CATEGORIES",
    "default_unsafe_paths",
    "normalize_extension",
    "normalize_extensions",
    "ConfigStore",
    "default_config_path",
]
