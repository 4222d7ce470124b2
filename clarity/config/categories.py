"""
Category Definitions
====================

Default file categories, the reserved ``Unclassified`` label and the
helpers that normalize user-entered extension lists.
"""

import sys
from typing import Dict, Iterable, List, Union


# Label for files that match no configured category. Such files are never moved.
UNCLASSIFIED = "Unclassified"


DEFAULT_CATEGORIES: Dict[str, List[str]] = {
    "Images": ["jpg", "jpeg", "png", "gif", "bmp", "svg"],
    "Documents": ["pdf", "docx", "doc", "txt", "xlsx", "pptx"],
    "Videos": ["mp4", "mov", "avi", "mkv"],
    "Audio": ["mp3", "wav", "flac"],
    "Archives": ["zip", "rar", "7z"],
}


def default_unsafe_paths() -> List[str]:
    """System directories that must never receive organized files."""
    if sys.platform.startswith("win"):
        return ["C:\\Windows", "C:\\Program Files"]
    return ["/bin", "/boot", "/etc", "/lib", "/sbin", "/usr"]


def normalize_extension(extension: str) -> str:
    """Normalize one extension: trimmed, no leading dots, lower-case.

    >>> normalize_extension("  .JPG ")
    'jpg'
    """
    return extension.strip().lstrip(".").strip().lower()


def normalize_extensions(extensions: Union[str, Iterable[str], None]) -> List[str]:
    """Normalize an extension list, dropping empties and duplicates.

    Args:
        extensions: Iterable of extensions, or a comma-separated string
            such as ``"jpg, png"`` as typed in the settings form.

    Returns:
        Extensions in first-seen order.

    Raises:
        TypeError: If an entry is not a string.
        ValueError: If an entry still contains a dot, such as ``tar.gz``.
            Only the text after the last dot of a file name is matched.
    """
    if extensions is None:
        return []
    if isinstance(extensions, str):
        extensions = extensions.split(",")

    seen = set()
    result = []
    for ext in extensions:
        if not isinstance(ext, str):
            raise TypeError(f"Extension must be a string, got {type(ext).__name__}")
        normalized = normalize_extension(ext)
        if "." in normalized:
            raise ValueError(
                f"Extension must not contain a dot: {ext.strip()!r} (use {normalized.rsplit('.', 1)[-1]!r})"
            )
        if normalized and normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result
