"""
Shared fixtures for Clarity tests.
"""

import logging

import pytest

from clarity.config.settings import AppConfig


@pytest.fixture(autouse=True)
def reset_clarity_logger():
    """Undo handler changes made by setup_logging in CLI tests."""
    logger = logging.getLogger("clarity")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def dest_dir(tmp_path):
    """Approved destination root."""
    path = tmp_path / "dest"
    path.mkdir()
    return path


@pytest.fixture
def source_dir(tmp_path):
    """Folder with a mix of classified and unclassified files."""
    path = tmp_path / "inbox"
    path.mkdir()
    for name in ("a.jpg", "b.png", "c.pdf", "d.txt"):
        (path / name).write_text(name)
    return path


@pytest.fixture
def config(dest_dir):
    """Images/Docs configuration with one safe path."""
    return AppConfig(
        categories={"Images": ["jpg", "png"], "Docs": ["pdf"]},
        safe_paths=[dest_dir],
    )
