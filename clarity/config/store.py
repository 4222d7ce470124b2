"""
Configuration Store
===================

Owns the single authoritative AppConfig of a process and persists it as
human-editable YAML. Saves are validated, serialized by a lock and written
atomically (temp file + rename), so a crash mid-write never corrupts the
previously saved file.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

import yaml

from clarity.config.settings import AppConfig
from clarity.utils.exceptions import (
    ConfigUnreadableError,
    ConfigUnwritableError,
    InvalidConfigError,
)
from clarity.utils.logging_config import get_logger

logger = get_logger(__name__)


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects repeated mapping keys.

    Plain ``safe_load`` keeps the last value of a repeated key, which would
    silently drop a category from a hand-edited file.
    """

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key {key!r}", key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def default_config_path() -> Path:
    """Stable per-user location of the configuration file."""
    return Path.home() / ".clarity" / "config.yaml"


class ConfigStore:
    """Loads, caches and saves the application configuration.

    Readers always get a copy; the cached configuration only changes
    through ``save`` (or a fresh ``load``).
    """

    def __init__(self, config_path: Optional[Path] = None, strict_extensions: bool = False):
        """Initialize the store.

        Args:
            config_path: Path of the YAML file. Defaults to ``~/.clarity/config.yaml``.
            strict_extensions: Reject configurations where two categories
                claim the same extension instead of only warning.
        """
        self.config_path = Path(config_path).expanduser() if config_path else default_config_path()
        self.strict_extensions = strict_extensions
        self._lock = threading.RLock()
        self._config: Optional[AppConfig] = None

    @property
    def current(self) -> AppConfig:
        """Copy of the current configuration, loading it on first access."""
        return self.get()

    def get(self) -> AppConfig:
        """Return a copy of the current configuration."""
        with self._lock:
            if self._config is None:
                self.load()
            return self._config.copy()

    def read(self) -> AppConfig:
        """Read and validate the configuration file.

        Returns:
            The stored configuration.

        Raises:
            ConfigUnreadableError: If the file is missing, unreadable,
                not valid YAML or does not match the schema.
        """
        path = str(self.config_path)
        if not self.config_path.exists():
            raise ConfigUnreadableError("Configuration file not found", config_path=path)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.load(f, Loader=_UniqueKeyLoader)
        except OSError as e:
            raise ConfigUnreadableError(
                f"Cannot read configuration file: {e}", config_path=path, cause=e
            ) from e
        except yaml.YAMLError as e:
            raise ConfigUnreadableError(
                f"Configuration file is not valid YAML: {e}", config_path=path, cause=e
            ) from e

        try:
            return AppConfig.from_dict(data)
        except InvalidConfigError as e:
            raise ConfigUnreadableError(
                f"Configuration file has invalid content: {e.message}",
                config_path=path,
                cause=e,
            ) from e

    def load(self) -> AppConfig:
        """Load the configuration, falling back to built-in defaults.

        A missing file means first launch: defaults are returned and written.
        A corrupt file is logged and left in place for inspection; defaults
        are used for this session without overwriting it.

        Returns:
            Copy of the loaded configuration.
        """
        with self._lock:
            if not self.config_path.exists():
                logger.info(f"No configuration at {self.config_path}, creating defaults")
                config = AppConfig.default()
                try:
                    self._write(config)
                except ConfigUnwritableError as e:
                    logger.warning(f"Could not persist default configuration: {e}")
            else:
                try:
                    config = self.read()
                    logger.info(f"Loaded configuration from {self.config_path}")
                except ConfigUnreadableError as e:
                    logger.error(f"{e}; using built-in defaults")
                    config = AppConfig.default()

            self._config = config
            return config.copy()

    def save(self, config: AppConfig) -> None:
        """Validate and persist a full replacement configuration.

        Args:
            config: The new configuration.

        Raises:
            InvalidConfigError: If the configuration fails validation.
            ConfigUnwritableError: If the file cannot be written. The
                previously saved file and the cached copy are left intact.
        """
        if not isinstance(config, AppConfig):
            raise InvalidConfigError(
                f"Expected AppConfig, got {type(config).__name__}", expected_type="AppConfig"
            )

        candidate = config.copy()
        candidate.validate()

        conflicts = candidate.extension_conflicts()
        if conflicts:
            summary = ", ".join(f"{ext} ({' > '.join(names)})" for ext, names in conflicts.items())
            if self.strict_extensions:
                raise InvalidConfigError(
                    f"Extensions claimed by several categories: {summary}",
                    config_key="categories",
                )
            logger.warning(f"Extensions claimed by several categories, first wins: {summary}")

        with self._lock:
            self._write(candidate)
            self._config = candidate

        logger.info(f"Saved configuration to {self.config_path}")

    def _write(self, config: AppConfig) -> None:
        """Atomically replace the configuration file."""
        path = self.config_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".config-", suffix=".tmp", dir=str(path.parent))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(
                        config.to_dict(),
                        f,
                        default_flow_style=False,
                        sort_keys=False,
                        allow_unicode=True,
                    )
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, yaml.YAMLError) as e:
            raise ConfigUnwritableError(
                f"Cannot write configuration file: {e}",
                config_path=str(path),
                cause=e,
            ) from e
