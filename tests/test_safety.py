"""
Unit tests for destination safety checks.
"""

import os

import pytest

from clarity.config.settings import AppConfig
from clarity.security.destination import (
    SafetyValidator,
    is_allowed_destination,
    is_protected_source,
    is_within,
)
from clarity.utils.exceptions import DestinationNotSafeError, ErrorCode


@pytest.fixture
def roots(tmp_path):
    """A safe root with an unsafe folder inside it."""
    safe = tmp_path / "safe"
    private = safe / "private"
    private.mkdir(parents=True)
    return safe, private


class TestIsWithin:
    """Tests for the path containment helper."""

    def test_same_path(self, tmp_path):
        assert is_within(tmp_path, tmp_path)

    def test_child(self, tmp_path):
        assert is_within(tmp_path / "a" / "b", tmp_path)

    def test_sibling_with_common_prefix(self, tmp_path):
        """Test /x/safe2 is not under /x/safe."""
        assert not is_within(tmp_path / "safe2", tmp_path / "safe")

    def test_parent_traversal(self, tmp_path):
        """Test .. is resolved before comparing."""
        assert not is_within(tmp_path / "safe" / ".." / "other", tmp_path / "safe")


class TestSafetyValidator:
    """Tests for is_allowed_destination and SafetyValidator."""

    def test_fail_closed_without_safe_paths(self, tmp_path):
        """Test nothing is allowed when no safe path is configured."""
        config = AppConfig()

        assert is_allowed_destination(tmp_path, config) is False
        with pytest.raises(DestinationNotSafeError) as exc_info:
            SafetyValidator(config).check(tmp_path)
        assert exc_info.value.error_code == ErrorCode.DESTINATION_NOT_SAFE

    def test_safe_root_and_children_allowed(self, roots):
        """Test the safe path itself and folders below it are allowed."""
        safe, _ = roots
        config = AppConfig(safe_paths=[safe])

        assert is_allowed_destination(safe, config)
        assert is_allowed_destination(safe / "Images", config)
        assert is_allowed_destination(safe / "a" / "b" / "c", config)

    def test_outside_safe_paths_rejected(self, roots, tmp_path):
        """Test folders outside every safe path are rejected."""
        safe, _ = roots
        config = AppConfig(safe_paths=[safe])

        assert not is_allowed_destination(tmp_path / "elsewhere", config)
        assert not is_allowed_destination(tmp_path, config)

    def test_unsafe_wins_on_overlap(self, roots):
        """Test unsafe paths override safe paths."""
        safe, private = roots
        config = AppConfig(safe_paths=[safe], unsafe_paths=[private])

        assert is_allowed_destination(safe / "Images", config)
        assert not is_allowed_destination(private, config)
        assert not is_allowed_destination(private / "Images", config)

    def test_any_safe_path_suffices(self, tmp_path):
        """Test a destination under the second safe path is allowed."""
        first, second = tmp_path / "one", tmp_path / "two"
        config = AppConfig(safe_paths=[first, second])

        assert is_allowed_destination(second / "Docs", config)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
    def test_symlink_escape_rejected(self, roots, tmp_path):
        """Test a symlink inside the safe path cannot lead outside it."""
        safe, _ = roots
        outside = tmp_path / "outside"
        outside.mkdir()
        try:
            os.symlink(outside, safe / "link", target_is_directory=True)
        except OSError:
            pytest.skip("symlinks not permitted")
        config = AppConfig(safe_paths=[safe])

        assert not is_allowed_destination(safe / "link" / "Images", config)

    def test_check_returns_canonical_path(self, roots):
        """Test check returns the resolved destination."""
        safe, _ = roots
        validator = SafetyValidator(AppConfig(safe_paths=[safe]))

        assert validator.check(safe / "x" / ".." / "Images") == safe.resolve() / "Images"

    def test_protected_source(self, roots):
        """Test sources inside unsafe paths are detected."""
        safe, private = roots
        config = AppConfig(safe_paths=[safe], unsafe_paths=[private])

        assert is_protected_source(private / "inbox", config)
        assert not is_protected_source(safe, config)
