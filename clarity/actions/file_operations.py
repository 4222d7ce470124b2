"""
File Operations
===============

Per-file move primitive used by the organizer.

Every move is an independent unit: the final name is reserved
exclusively at the destination before the file is transferred, so an
existing file is never overwritten, and a failed transfer leaves the
source where it was.
"""

import errno
import os
import shutil
from pathlib import Path
from typing import Iterator

from clarity.utils.exceptions import MoveFailedError
from clarity.utils.logging_config import get_logger

logger = get_logger(__name__)


def describe_os_error(error: OSError) -> str:
    """Short machine-friendly description of why a move failed."""
    if isinstance(error, FileNotFoundError):
        return "not_found"
    if isinstance(error, PermissionError):
        return "permission_denied"
    if error.errno == errno.EXDEV:
        return "cross_device"
    if error.errno in (errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)):
        return "disk_full"
    return "os_error"


class FileOperations:
    """Safe file moves with non-destructive conflict handling.

    Name collisions are resolved by appending a counter before the
    extension: ``photo.jpg`` becomes ``photo_1.jpg``, ``photo_2.jpg``...
    """

    MAX_COLLISION_SUFFIX = 1000

    def move_file(self, source: Path, dest_dir: Path) -> Path:
        """Move a file into a destination directory.

        Args:
            source: Source file path.
            dest_dir: Destination directory, created if missing.

        Returns:
            Final path of the moved file.

        Raises:
            MoveFailedError: If the file could not be moved. The source is
                left untouched in that case.
        """
        source = Path(source)
        dest_dir = Path(dest_dir)

        if not source.is_file():
            raise MoveFailedError(
                "Source file does not exist",
                file_path=str(source),
                details={"kind": "not_found"},
            )

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MoveFailedError(
                f"Cannot create destination directory: {e.strerror or e}",
                file_path=str(source),
                destination=str(dest_dir),
                details={"kind": describe_os_error(e)},
                cause=e,
            ) from e

        dest_path = self._reserve(source, dest_dir / source.name)

        try:
            self._transfer(source, dest_path)
        except OSError as e:
            self._release(dest_path)
            raise MoveFailedError(
                f"Failed to move file: {e.strerror or e}",
                file_path=str(source),
                destination=str(dest_path),
                details={"kind": describe_os_error(e)},
                cause=e,
            ) from e

        logger.info(
            f"Moved: {source.name} -> {dest_path}",
            extra={"file_path": source, "destination": dest_path},
        )
        return dest_path

    def _candidates(self, dest_path: Path) -> Iterator[Path]:
        """Yield the desired path followed by counter-suffixed variants."""
        yield dest_path

        stem = dest_path.stem
        suffix = dest_path.suffix
        parent = dest_path.parent
        for counter in range(1, self.MAX_COLLISION_SUFFIX + 1):
            yield parent / f"{stem}_{counter}{suffix}"

    def _reserve(self, source: Path, dest_path: Path) -> Path:
        """Claim the first free destination name by creating it exclusively.

        Args:
            source: File being moved, for error reporting.
            dest_path: Desired destination path.

        Returns:
            Reserved path (an empty placeholder file now exists there).
        """
        for candidate in self._candidates(dest_path):
            try:
                fd = os.open(candidate, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
            except FileExistsError:
                continue
            except OSError as e:
                raise MoveFailedError(
                    f"Cannot create destination file: {e.strerror or e}",
                    file_path=str(source),
                    destination=str(candidate),
                    details={"kind": describe_os_error(e)},
                    cause=e,
                ) from e
            os.close(fd)
            if candidate != dest_path:
                logger.debug(f"Name taken, using {candidate.name} for {source.name}")
            return candidate

        raise MoveFailedError(
            "Too many files with same name",
            file_path=str(source),
            destination=str(dest_path),
            details={"kind": "collision"},
        )

    def _transfer(self, source: Path, dest_path: Path) -> None:
        """Move ``source`` onto the reserved ``dest_path``.

        Same-filesystem moves are a single atomic rename; cross-device
        moves fall back to copy-then-delete.
        """
        try:
            os.replace(source, dest_path)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            shutil.move(str(source), str(dest_path))

    def _release(self, dest_path: Path) -> None:
        """Remove a reservation (or partial copy) after a failed transfer."""
        try:
            if dest_path.exists():
                dest_path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove placeholder {dest_path}: {e}")
