"""
Preview Engine
==============

Non-destructive scan of a directory: lists its immediate entries,
classifies every regular file and counts files per category. Nothing on
disk is created, renamed or moved.

The same enumeration (``scan_directory``) feeds the organizer, so preview
and organize always agree on which files are candidates.
"""

import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple, Union

from clarity.classification.classifier import ExtensionClassifier
from clarity.config.categories import UNCLASSIFIED
from clarity.config.settings import AppConfig
from clarity.security.destination import is_protected_source
from clarity.utils.exceptions import DirectoryUnreadableError, ProtectedPathError
from clarity.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ScannedFile:
    """A regular file found by a scan, with its category."""
    path: Path
    category: str


@dataclass
class DirectoryScan:
    """Snapshot of one directory listing.

    Attributes:
        directory: The scanned directory.
        files: Classified files, sorted by name.
        unclassified: Number of files matching no category.
        skipped: Entries that could not be inspected during the scan.
    """
    directory: Path
    files: List[ScannedFile] = field(default_factory=list)
    unclassified: int = 0
    skipped: int = 0


@dataclass
class ClassificationResult:
    """Per-category file counts of a preview.

    Attributes:
        directory: The previewed directory.
        counts: Category name to number of files. Only non-zero categories.
        category_order: Configured category order, used to break count ties.
        unclassified: Files that would be left in place.
        skipped: Entries that could not be inspected.
    """
    directory: Path
    counts: Dict[str, int] = field(default_factory=dict)
    category_order: List[str] = field(default_factory=list)
    unclassified: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        """Number of files that organize would consider."""
        return sum(self.counts.values())

    def ordered(self) -> List[Tuple[str, int]]:
        """Counts by descending size, ties in configured category order."""
        rank = {name: i for i, name in enumerate(self.category_order)}
        return sorted(
            self.counts.items(),
            key=lambda item: (-item[1], rank.get(item[0], len(rank)), item[0]),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "directory": str(self.directory),
            "categories": [{"category": name, "count": count} for name, count in self.ordered()],
            "unclassified": self.unclassified,
            "skipped": self.skipped,
        }


def open_source_directory(directory: Union[str, Path], config: AppConfig) -> Path:
    """Validate a directory chosen for preview or organize.

    Args:
        directory: Directory selected by the user.
        config: Configuration providing the unsafe paths.

    Returns:
        The directory as a Path.

    Raises:
        ProtectedPathError: If the directory is inside an unsafe path.
        DirectoryUnreadableError: If it does not exist or is not a directory.
    """
    path = Path(directory).expanduser()

    if is_protected_source(path, config):
        raise ProtectedPathError(
            "Directory is protected by the system configuration",
            directory=str(path),
        )
    if not path.exists():
        raise DirectoryUnreadableError("Directory does not exist", directory=str(path))
    if not path.is_dir():
        raise DirectoryUnreadableError("Path is not a directory", directory=str(path))

    return path


def scan_directory(directory: Union[str, Path], config: AppConfig) -> DirectoryScan:
    """List and classify the immediate files of a directory.

    Subdirectories are not descended into. An entry that cannot be
    inspected (removed mid-scan, permission denied, broken symlink) is
    counted as skipped instead of aborting the scan.

    Args:
        directory: Directory to scan.
        config: Configuration providing the categories.

    Returns:
        DirectoryScan snapshot.

    Raises:
        ProtectedPathError: If the directory is inside an unsafe path.
        DirectoryUnreadableError: If the directory cannot be listed.
    """
    path = open_source_directory(directory, config)
    classifier = ExtensionClassifier(config)

    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise DirectoryUnreadableError(
            f"Cannot list directory: {e.strerror or e}",
            directory=str(path),
            cause=e,
        ) from e

    scan = DirectoryScan(directory=path)
    for entry in entries:
        try:
            if entry.is_dir():
                continue
            mode = entry.stat().st_mode
        except OSError as e:
            scan.skipped += 1
            logger.warning(f"Skipping unreadable entry {entry.name}: {e}")
            continue

        if not stat.S_ISREG(mode):
            continue

        category = classifier.classify(entry.name)
        if category == UNCLASSIFIED:
            scan.unclassified += 1
            continue
        scan.files.append(ScannedFile(path=Path(entry.path), category=category))

    logger.debug(
        f"Scanned {path}: {len(scan.files)} classified, "
        f"{scan.unclassified} unclassified, {scan.skipped} skipped"
    )
    return scan


def preview(directory: Union[str, Path], config: AppConfig) -> ClassificationResult:
    """Summarize how the files of a directory would be organized.

    Args:
        directory: Directory to preview.
        config: Configuration providing the categories.

    Returns:
        ClassificationResult with non-zero category counts.
    """
    scan = scan_directory(directory, config)

    counts: Dict[str, int] = {}
    for scanned in scan.files:
        counts[scanned.category] = counts.get(scanned.category, 0) + 1

    return ClassificationResult(
        directory=scan.directory,
        counts=counts,
        category_order=list(config.categories),
        unclassified=scan.unclassified,
        skipped=scan.skipped,
    )
