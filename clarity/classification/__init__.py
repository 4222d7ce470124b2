"""Classification and preview module for Clarity."""

from .classifier import ExtensionClassifier, classify, extension_of
from .preview import (
    ClassificationResult,
    DirectoryScan,
    ScannedFile,
    open_source_directory,
    preview,
    scan_directory,
)

__all__ = [
    "ExtensionClassifier",
    "classify",
    "extension_of",
    "ClassificationResult",
    "DirectoryScan",
    "ScannedFile",
    "open_source_directory",
    "preview",
    "scan_directory",
]
