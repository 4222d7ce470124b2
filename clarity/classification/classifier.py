"""
Extension Classifier
====================

Maps a file name to a configured category by its extension.
Pure and side-effect free: the file itself is never opened.

When several categories claim the same extension, the first category in
the configuration's insertion order wins.
"""

from pathlib import Path
from typing import Dict, Union

from clarity.config.categories import UNCLASSIFIED
from clarity.config.settings import AppConfig


def extension_of(file_name: Union[str, Path]) -> str:
    """Return the lower-cased extension of a file name, without the dot.

    The extension is the text after the last dot. Names without a dot,
    names ending with a dot and dotfiles such as ``.bashrc`` have none.

    >>> extension_of("Report.Final.PDF")
    'pdf'
    >>> extension_of(".bashrc")
    ''
    """
    name = Path(file_name).name if isinstance(file_name, Path) else file_name
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem.strip("."):
        return ""
    return ext.lower()


class ExtensionClassifier:
    """Classifier bound to one configuration.

    Builds the extension lookup table once so that directory scans do a
    single dict lookup per file.
    """

    def __init__(self, config: AppConfig):
        """Initialize the classifier.

        Args:
            config: Configuration providing the categories.
        """
        self._lookup: Dict[str, str] = {}
        for category, extensions in config.categories.items():
            for ext in extensions:
                # setdefault keeps the first category that claimed ext
                self._lookup.setdefault(ext, category)

    def classify(self, file_name: Union[str, Path]) -> str:
        """Get the category label for a file name.

        Args:
            file_name: File name or path.

        Returns:
            Category name, or ``UNCLASSIFIED`` if nothing matches.
        """
        ext = extension_of(file_name)
        if not ext:
            return UNCLASSIFIED
        return self._lookup.get(ext, UNCLASSIFIED)

    def is_classified(self, file_name: Union[str, Path]) -> bool:
        """Check whether a file name maps to a configured category."""
        return self.classify(file_name) != UNCLASSIFIED


def classify(file_name: Union[str, Path], config: AppConfig) -> str:
    """Classify a single file name against a configuration.

    Args:
        file_name: File name or path.
        config: Configuration providing the categories.

    Returns:
        Category name, or ``UNCLASSIFIED``.
    """
    ext = extension_of(file_name)
    if not ext:
        return UNCLASSIFIED
    for category, extensions in config.categories.items():
        if ext in extensions:
            return category
    return UNCLASSIFIED
