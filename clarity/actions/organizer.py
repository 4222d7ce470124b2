"""
Organizer
=========

Moves the classified files of a directory into per-category folders under
the first configured safe path.

Each file is an independent unit of work: a failure is recorded in that
file's outcome and the run continues. Only an unusable source directory
aborts the whole call.
"""

import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from clarity.actions.file_operations import FileOperations
from clarity.classification.preview import ScannedFile, scan_directory
from clarity.config.settings import AppConfig
from clarity.security.destination import SafetyValidator
from clarity.utils.exceptions import (
    DestinationNotSafeError,
    ErrorCode,
    MoveFailedError,
)
from clarity.utils.logging_config import get_logger

logger = get_logger(__name__)


class MoveStatus(Enum):
    """Result of handling one file."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class MoveOutcome:
    """Record of what happened to one file.

    Attributes:
        source: Original file location.
        destination: Final location for moved files, otherwise the
            intended destination directory (None if none was computed).
        category: Category the file was classified into.
        status: success, skipped or failed.
        reason: Error code explaining a skip or failure.
        detail: Human-readable explanation.
        kind: Why a move failed: not_found, permission_denied,
            cross_device, disk_full, collision or os_error.
    """
    source: Path
    destination: Optional[Path]
    category: str
    status: MoveStatus
    reason: Optional[ErrorCode] = None
    detail: Optional[str] = None
    kind: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "source": str(self.source),
            "destination": str(self.destination) if self.destination else None,
            "category": self.category,
            "status": self.status.value,
            "reason": self.reason.name if self.reason else None,
            "detail": self.detail,
            "kind": self.kind,
        }


@dataclass
class OrganizeReport:
    """All outcomes of one organize run."""
    directory: Path
    outcomes: List[MoveOutcome] = field(default_factory=list)
    unclassified: int = 0
    skipped_entries: int = 0

    def _with_status(self, status: MoveStatus) -> List[MoveOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def moved(self) -> List[MoveOutcome]:
        return self._with_status(MoveStatus.SUCCESS)

    @property
    def skipped(self) -> List[MoveOutcome]:
        return self._with_status(MoveStatus.SKIPPED)

    @property
    def failed(self) -> List[MoveOutcome]:
        return self._with_status(MoveStatus.FAILED)

    @property
    def has_failures(self) -> bool:
        return any(o.status == MoveStatus.FAILED for o in self.outcomes)

    def get_stats(self) -> Dict[str, int]:
        """Count outcomes by status."""
        stats = {status.value: 0 for status in MoveStatus}
        for outcome in self.outcomes:
            stats[outcome.status.value] += 1
        stats["total"] = len(self.outcomes)
        return stats

    def summary(self) -> str:
        """One-line summary for the user."""
        stats = self.get_stats()
        return (
            f"{stats['success']} moved, {stats['skipped']} skipped, "
            f"{stats['failed']} failed of {stats['total']} files"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "directory": str(self.directory),
            "stats": self.get_stats(),
            "unclassified": self.unclassified,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class Organizer:
    """Performs organize runs for one configuration.

    The destination of a file is ``<first safe path>/<category>``. Each
    destination is validated once per run; a rejected destination skips
    every file of that category.
    """

    def __init__(self, config: AppConfig, file_ops: Optional[FileOperations] = None):
        """Initialize the organizer.

        Args:
            config: Configuration snapshot used for the whole run.
            file_ops: File operation backend.
        """
        self.config = config
        self.file_ops = file_ops or FileOperations()
        self.validator = SafetyValidator(config)

    def destination_root(self) -> Optional[Path]:
        """The safe path receiving category folders, if any."""
        return self.config.safe_paths[0] if self.config.safe_paths else None

    def destination_for(self, category: str) -> Optional[Path]:
        """Destination directory for a category."""
        root = self.destination_root()
        return root / category if root is not None else None

    def organize(
        self,
        directory: Union[str, Path],
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[MoveOutcome], None]] = None,
    ) -> OrganizeReport:
        """Organize the files of a directory.

        Args:
            directory: Directory whose immediate files are organized.
            cancel_event: When set, remaining files are left untouched and
                reported as skipped.
            progress_callback: Called with every outcome as it is recorded.

        Returns:
            OrganizeReport with one outcome per classified file.

        Raises:
            ProtectedPathError: If the directory is inside an unsafe path.
            DirectoryUnreadableError: If the directory cannot be listed.
        """
        scan = scan_directory(directory, self.config)
        report = OrganizeReport(
            directory=scan.directory,
            unclassified=scan.unclassified,
            skipped_entries=scan.skipped,
        )
        logger.info(f"Organizing {len(scan.files)} files in {scan.directory}")

        # category -> validated destination, or the rejection
        checked: Dict[str, Union[Path, DestinationNotSafeError]] = {}

        for scanned in scan.files:
            if cancel_event is not None and cancel_event.is_set():
                outcome = MoveOutcome(
                    source=scanned.path,
                    destination=None,
                    category=scanned.category,
                    status=MoveStatus.SKIPPED,
                    reason=ErrorCode.CANCELLED,
                    detail="Organize run was cancelled",
                )
            else:
                if scanned.category not in checked:
                    checked[scanned.category] = self._check_destination(scanned.category)
                outcome = self._organize_file(scanned, checked[scanned.category])

            report.outcomes.append(outcome)
            if progress_callback is not None:
                progress_callback(outcome)

        logger.info(f"Organize finished for {scan.directory}: {report.summary()}")
        return report

    def _check_destination(self, category: str) -> Union[Path, DestinationNotSafeError]:
        destination = self.destination_for(category)
        try:
            if destination is None:
                raise DestinationNotSafeError("No safe paths are configured")
            self.validator.check(destination)
            return destination
        except DestinationNotSafeError as e:
            logger.warning(
                f"Skipping category {category}: {e.message}",
                extra={"category": category, "destination": destination},
            )
            return e

    def _organize_file(
        self,
        scanned: ScannedFile,
        destination: Union[Path, DestinationNotSafeError],
    ) -> MoveOutcome:
        if isinstance(destination, DestinationNotSafeError):
            return MoveOutcome(
                source=scanned.path,
                destination=self.destination_for(scanned.category),
                category=scanned.category,
                status=MoveStatus.SKIPPED,
                reason=ErrorCode.DESTINATION_NOT_SAFE,
                detail=destination.message,
            )

        if destination.is_dir() and os.path.samefile(scanned.path.parent, destination):
            return MoveOutcome(
                source=scanned.path,
                destination=destination,
                category=scanned.category,
                status=MoveStatus.SKIPPED,
                reason=ErrorCode.ALREADY_ORGANIZED,
                detail="File is already in its category folder",
            )

        try:
            final_path = self.file_ops.move_file(scanned.path, destination)
        except MoveFailedError as e:
            logger.error(
                f"Could not move {scanned.path.name}: {e.message}",
                extra={"file_path": scanned.path, "category": scanned.category, "status": "failed"},
            )
            return MoveOutcome(
                source=scanned.path,
                destination=destination,
                category=scanned.category,
                status=MoveStatus.FAILED,
                reason=ErrorCode.MOVE_FAILED,
                detail=e.message,
                kind=e.details.get("kind", "os_error"),
            )

        return MoveOutcome(
            source=scanned.path,
            destination=final_path,
            category=scanned.category,
            status=MoveStatus.SUCCESS,
        )


def organize(directory: Union[str, Path], config: AppConfig) -> OrganizeReport:
    """Organize a directory with a configuration.

    Args:
        directory: Directory whose immediate files are organized.
        config: Configuration to use.

    Returns:
        OrganizeReport with one outcome per classified file.
    """
    return Organizer(config).organize(directory)
