"""
Configuration Model
===================

Dataclass-based configuration: named categories of file extensions plus
the safe/unsafe destination path lists. Every instance is validated and
normalized on construction, so the rest of the engine never sees an
untyped payload.
"""

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

from clarity.config.categories import (
    DEFAULT_CATEGORIES,
    UNCLASSIFIED,
    default_unsafe_paths,
    normalize_extensions,
)
from clarity.utils.exceptions import InvalidConfigError

PathLike = Union[str, "os.PathLike[str]"]


def _validate_category_name(name: Any) -> str:
    """Check a category name and return it stripped.

    Category names become folder names under a safe path, so they must be
    usable as a single path component.
    """
    if not isinstance(name, str):
        raise InvalidConfigError(
            f"Category name must be a string, got {type(name).__name__}",
            config_key="categories",
        )
    stripped = name.strip()
    if not stripped:
        raise InvalidConfigError("Category name must not be empty", config_key="categories")
    if stripped in (".", "..") or "/" in stripped or "\\" in stripped or "\0" in stripped:
        raise InvalidConfigError(
            f"Category name is not a valid folder name: {name!r}",
            config_key="categories",
        )
    if stripped.casefold() == UNCLASSIFIED.casefold():
        raise InvalidConfigError(
            f"'{UNCLASSIFIED}' is reserved for files matching no category",
            config_key="categories",
        )
    return stripped


def _normalize_categories(categories: Any) -> Dict[str, List[str]]:
    if categories is None:
        return {}
    if not isinstance(categories, Mapping):
        raise InvalidConfigError(
            "categories must be a mapping of name to extensions",
            config_key="categories",
            expected_type="mapping",
        )

    result: Dict[str, List[str]] = {}
    seen: Dict[str, str] = {}
    for raw_name, extensions in categories.items():
        name = _validate_category_name(raw_name)
        folded = name.casefold()
        if folded in seen:
            raise InvalidConfigError(
                f"Duplicate category name: {name!r} (already defined as {seen[folded]!r})",
                config_key="categories",
            )
        seen[folded] = name
        try:
            result[name] = normalize_extensions(extensions)
        except (TypeError, ValueError) as e:
            raise InvalidConfigError(
                f"Invalid extensions for category {name!r}: {e}",
                config_key=f"categories.{name}",
            ) from e
    return result


def _normalize_path(value: Any, key: str) -> Path:
    if not isinstance(value, (str, os.PathLike)):
        raise InvalidConfigError(
            f"{key} entries must be paths, got {type(value).__name__}",
            config_key=key,
        )
    if isinstance(value, str) and not value.strip():
        raise InvalidConfigError(f"{key} entries must not be empty", config_key=key)

    path = Path(value).expanduser()
    if not path.is_absolute():
        raise InvalidConfigError(f"{key} entries must be absolute: {value}", config_key=key)
    return Path(os.path.normpath(path))


def _normalize_paths(paths: Any, key: str) -> List[Path]:
    if paths is None:
        return []
    if isinstance(paths, (str, os.PathLike)) or not isinstance(paths, Iterable):
        raise InvalidConfigError(f"{key} must be a list of paths", config_key=key)

    result: List[Path] = []
    for value in paths:
        path = _normalize_path(value, key)
        if path not in result:
            result.append(path)
    return result


@dataclass
class AppConfig:
    """Organizer configuration.

    Attributes:
        categories: Category name to normalized extensions. Insertion order
            matters: when two categories claim the same extension the first
            one wins.
        safe_paths: Absolute directories allowed as organize destinations.
            The first entry is the destination root used by the organizer.
        unsafe_paths: Absolute directories never allowed as destinations.
            They override ``safe_paths`` and also protect source folders.
    """
    categories: Dict[str, List[str]] = field(default_factory=dict)
    safe_paths: List[Path] = field(default_factory=list)
    unsafe_paths: List[Path] = field(default_factory=list)

    def __post_init__(self):
        """Validate and normalize all fields."""
        self.categories = _normalize_categories(self.categories)
        self.safe_paths = _normalize_paths(self.safe_paths, "safe_paths")
        self.unsafe_paths = _normalize_paths(self.unsafe_paths, "unsafe_paths")

    @classmethod
    def default(cls) -> "AppConfig":
        """Configuration written on first launch."""
        return cls(
            categories=copy.deepcopy(DEFAULT_CATEGORIES),
            safe_paths=[],
            unsafe_paths=default_unsafe_paths(),
        )

    @classmethod
    def from_dict(cls, data: Any) -> "AppConfig":
        """Create AppConfig from a dictionary.

        Raises:
            InvalidConfigError: If the payload is malformed.
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidConfigError("Configuration must be a mapping", expected_type="mapping")
        return cls(
            categories=data.get("categories"),
            safe_paths=data.get("safe_paths"),
            unsafe_paths=data.get("unsafe_paths"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary suitable for YAML/JSON."""
        return {
            "categories": {name: list(exts) for name, exts in self.categories.items()},
            "safe_paths": [str(p) for p in self.safe_paths],
            "unsafe_paths": [str(p) for p in self.unsafe_paths],
        }

    def validate(self) -> None:
        """Re-run validation after direct field edits."""
        self.__post_init__()

    def copy(self) -> "AppConfig":
        """Return an independent deep copy."""
        return copy.deepcopy(self)

    def extension_conflicts(self) -> Dict[str, List[str]]:
        """Find extensions claimed by more than one category.

        Returns:
            Extension to the list of categories claiming it, in config order.
            The first category listed is the one the classifier will use.
        """
        owners: Dict[str, List[str]] = {}
        for name, extensions in self.categories.items():
            for ext in extensions:
                owners.setdefault(ext, []).append(name)
        return {ext: names for ext, names in owners.items() if len(names) > 1}

    # =====================
    # Editing helpers
    # =====================

    def _find_category(self, name: str) -> str:
        stripped = name.strip() if isinstance(name, str) else name
        if stripped not in self.categories:
            raise InvalidConfigError(f"Unknown category: {name!r}", config_key="categories")
        return stripped

    def add_category(self, name: str, extensions: Union[str, Iterable[str], None] = None) -> None:
        """Append a new category."""
        if isinstance(name, str) and name.strip() in self.categories:
            raise InvalidConfigError(f"Duplicate category name: {name!r}", config_key="categories")
        categories = dict(self.categories)
        categories[name] = extensions
        self.categories = _normalize_categories(categories)

    def rename_category(self, old_name: str, new_name: str) -> None:
        """Rename a category, keeping its position."""
        old_name = self._find_category(old_name)
        self.categories = _normalize_categories({
            (new_name if name == old_name else name): exts
            for name, exts in self.categories.items()
        })

    def remove_category(self, name: str) -> None:
        """Remove a category."""
        name = self._find_category(name)
        del self.categories[name]

    def set_extensions(self, name: str, extensions: Union[str, Iterable[str], None]) -> None:
        """Replace the extensions of a category.

        Args:
            name: Existing category name.
            extensions: List of extensions or a comma-separated string.
        """
        name = self._find_category(name)
        categories = dict(self.categories)
        categories[name] = extensions
        self.categories = _normalize_categories(categories)

    def add_safe_path(self, path: PathLike) -> None:
        """Approve a directory as organize destination root."""
        self.safe_paths = _normalize_paths([*self.safe_paths, path], "safe_paths")

    def remove_safe_path(self, path: PathLike) -> None:
        """Remove a safe path; unknown paths are ignored."""
        target = _normalize_path(path, "safe_paths")
        self.safe_paths = [p for p in self.safe_paths if p != target]

    def add_unsafe_path(self, path: PathLike) -> None:
        """Forbid a directory as destination."""
        self.unsafe_paths = _normalize_paths([*self.unsafe_paths, path], "unsafe_paths")

    def remove_unsafe_path(self, path: PathLike) -> None:
        """Remove an unsafe path; unknown paths are ignored."""
        target = _normalize_path(path, "unsafe_paths")
        self.unsafe_paths = [p for p in self.unsafe_paths if p != target]
