"""Actions module for moving files."""

from .file_operations import FileOperations
from .organizer import Organizer, OrganizeReport, MoveOutcome, MoveStatus, organize

__all__ = [
    "FileOperations",
    "Organizer",
    "OrganizeReport",
    "MoveOutcome",
    "MoveStatus",
    "organize",
]
