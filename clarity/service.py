"""
Organizer Service
=================

The four operations the presentation layer calls. Each call runs
synchronously, gets its own correlation ID for log tracing and works on
its own snapshot of the configuration, so a save never changes a preview
or organize run that is already in progress.
"""

import threading
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from clarity.actions.file_operations import FileOperations
from clarity.actions.organizer import MoveOutcome, Organizer, OrganizeReport
from clarity.classification.preview import ClassificationResult, preview
from clarity.config.settings import AppConfig
from clarity.config.store import ConfigStore
from clarity.utils.exceptions import ClarityError
from clarity.utils.logging_config import (
    Timer,
    correlation_scope,
    get_logger,
)

logger = get_logger(__name__)


class OrganizerService:
    """Backend of the desktop front end.

    Coordinates the config store, the preview engine and the organizer.
    """

    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        file_ops: Optional[FileOperations] = None,
    ):
        """Initialize the service and load the configuration.

        Args:
            store: Configuration store. Defaults to the per-user store.
            file_ops: File operation backend used by organize runs.
        """
        self.store = store or ConfigStore()
        self.file_ops = file_ops or FileOperations()
        self.store.load()

    def get_current_config(self) -> AppConfig:
        """Return a copy of the currently loaded configuration."""
        return self.store.get()

    def save_app_config(self, new_config: Union[AppConfig, Mapping[str, Any]]) -> None:
        """Persist a full replacement configuration.

        Args:
            new_config: AppConfig, or a plain mapping as sent by the front end.

        Raises:
            InvalidConfigError: If the configuration is malformed.
            ConfigUnwritableError: If it cannot be written.
        """
        with correlation_scope():
            try:
                with Timer(logger, "save_app_config"):
                    if not isinstance(new_config, AppConfig):
                        new_config = AppConfig.from_dict(new_config)
                    self.store.save(new_config)
            except ClarityError as e:
                logger.error(f"Saving configuration failed: {e}")
                raise

    def preview(self, path: Union[str, Path]) -> ClassificationResult:
        """Full preview result for a directory.

        Raises:
            DirectoryUnreadableError: If the directory cannot be listed.
            ProtectedPathError: If the directory is protected.
        """
        config = self.store.get()
        with correlation_scope():
            try:
                with Timer(logger, "preview_organisation", directory=path):
                    result = preview(path, config)
            except ClarityError as e:
                logger.error(f"Preview failed: {e}")
                raise

            if result.skipped:
                logger.warning(f"{result.skipped} entries of {result.directory} could not be read")
        return result

    def preview_organisation(self, path: Union[str, Path]) -> List[Tuple[str, int]]:
        """Category counts for a directory, largest first.

        Args:
            path: Directory selected by the user.

        Returns:
            List of (category, count) pairs. Categories without files are
            omitted.
        """
        return self.preview(path).ordered()

    def organise_files(
        self,
        path: Union[str, Path],
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[MoveOutcome], None]] = None,
    ) -> OrganizeReport:
        """Move the classified files of a directory into category folders.

        Individual skipped or failed files do not make the call fail; they
        are reported in the returned OrganizeReport.

        Args:
            path: Directory selected by the user.
            cancel_event: Set it to stop before the next file.
            progress_callback: Called with every per-file outcome.

        Returns:
            OrganizeReport for the run.

        Raises:
            DirectoryUnreadableError: If the directory cannot be listed.
            ProtectedPathError: If the directory is protected.
        """
        organizer = Organizer(self.store.get(), file_ops=self.file_ops)
        with correlation_scope():
            try:
                with Timer(logger, "organise_files", directory=path):
                    report = organizer.organize(
                        path,
                        cancel_event=cancel_event,
                        progress_callback=progress_callback,
                    )
            except ClarityError as e:
                logger.error(f"Organize failed: {e}")
                raise

            if report.has_failures:
                logger.warning(f"Some files could not be moved: {report.summary()}")
        return report
