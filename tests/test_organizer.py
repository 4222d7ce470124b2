"""
Unit tests for file operations and the organizer.
"""

import errno
import os
import threading

import pytest

from clarity.actions.file_operations import FileOperations
from clarity.actions.organizer import MoveStatus, Organizer, organize
from clarity.classification.preview import preview
from clarity.config.settings import AppConfig
from clarity.utils.exceptions import (
    DirectoryUnreadableError,
    ErrorCode,
    MoveFailedError,
    ProtectedPathError,
)


class TestFileOperations:
    """Tests for FileOperations.move_file."""

    @pytest.fixture
    def file_ops(self):
        return FileOperations()

    def test_basic_move(self, file_ops, tmp_path):
        """Test a file is moved and the destination created."""
        source = tmp_path / "photo.jpg"
        source.write_text("new")

        final = file_ops.move_file(source, tmp_path / "out" / "Images")

        assert final == tmp_path / "out" / "Images" / "photo.jpg"
        assert final.name == source.name
        assert final.read_text() == "new"
        assert not source.exists()

    def test_collision_keeps_existing_file(self, file_ops, tmp_path):
        """Test an existing file is never overwritten."""
        dest = tmp_path / "Images"
        dest.mkdir()
        (dest / "photo.jpg").write_text("old")
        (dest / "photo_1.jpg").write_text("older")
        source = tmp_path / "photo.jpg"
        source.write_text("new")

        final = file_ops.move_file(source, dest)

        assert final == dest / "photo_2.jpg"
        assert final.read_text() == "new"
        assert (dest / "photo.jpg").read_text() == "old"
        assert (dest / "photo_1.jpg").read_text() == "older"

    def test_collision_with_directory(self, file_ops, tmp_path):
        """Test a folder with the same name also counts as taken."""
        dest = tmp_path / "Docs"
        (dest / "report.pdf").mkdir(parents=True)
        source = tmp_path / "report.pdf"
        source.write_text("r")

        assert file_ops.move_file(source, dest) == dest / "report_1.pdf"

    def test_collision_limit(self, file_ops, tmp_path, monkeypatch):
        """Test running out of names fails without touching the source."""
        monkeypatch.setattr(FileOperations, "MAX_COLLISION_SUFFIX", 2)
        dest = tmp_path / "Docs"
        dest.mkdir()
        for name in ("a.pdf", "a_1.pdf", "a_2.pdf"):
            (dest / name).write_text("taken")
        source = tmp_path / "a.pdf"
        source.write_text("mine")

        with pytest.raises(MoveFailedError) as exc_info:
            file_ops.move_file(source, dest)

        assert exc_info.value.details["kind"] == "collision"
        assert source.read_text() == "mine"

    def test_missing_source(self, file_ops, tmp_path):
        """Test a vanished source is reported as a move failure."""
        with pytest.raises(MoveFailedError) as exc_info:
            file_ops.move_file(tmp_path / "gone.jpg", tmp_path / "out")

        assert exc_info.value.error_code == ErrorCode.MOVE_FAILED
        assert exc_info.value.details["kind"] == "not_found"

    def test_failed_transfer_removes_placeholder(self, file_ops, tmp_path, monkeypatch):
        """Test a failed move leaves the source and no reservation behind."""
        source = tmp_path / "a.jpg"
        source.write_text("a")
        dest = tmp_path / "out"

        def no_space(src, dst):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(os, "replace", no_space)

        with pytest.raises(MoveFailedError) as exc_info:
            file_ops.move_file(source, dest)

        assert exc_info.value.details["kind"] == "disk_full"
        assert source.exists()
        assert list(dest.iterdir()) == []

    def test_cross_device_fallback(self, file_ops, tmp_path, monkeypatch):
        """Test EXDEV falls back to copy and delete."""
        source = tmp_path / "a.jpg"
        source.write_text("payload")
        calls = []

        def cross_device(src, dst):
            calls.append((src, dst))
            raise OSError(errno.EXDEV, "Invalid cross-device link")

        monkeypatch.setattr(os, "replace", cross_device)
        monkeypatch.setattr(os, "rename", cross_device)

        final = file_ops.move_file(source, tmp_path / "out")

        assert calls
        assert final.read_text() == "payload"
        assert not source.exists()


class TestOrganizer:
    """Tests for organize runs."""

    def test_scenario(self, source_dir, dest_dir, config):
        """Test the Images/Docs example folder."""
        report = organize(source_dir, config)

        assert (dest_dir / "Images" / "a.jpg").read_text() == "a.jpg"
        assert (dest_dir / "Images" / "b.png").read_text() == "b.png"
        assert (dest_dir / "Docs" / "c.pdf").read_text() == "c.pdf"
        assert (source_dir / "d.txt").exists()
        assert sorted(p.name for p in source_dir.iterdir()) == ["d.txt"]
        assert report.get_stats() == {"success": 3, "skipped": 0, "failed": 0, "total": 3}
        assert report.unclassified == 1
        assert not report.has_failures

    def test_preview_after_organize_is_empty(self, source_dir, dest_dir, config):
        """Test moved files have left the folder and can be found."""
        before = preview(source_dir, config)

        report = organize(source_dir, config)

        assert preview(source_dir, config).ordered() == []
        for outcome in report.moved:
            assert outcome.destination.exists()
            assert outcome.destination.parent == dest_dir / outcome.category
        assert len(report.moved) == before.total

    def test_one_outcome_per_classified_file(self, source_dir, config):
        """Test outcomes mirror the scan."""
        report = organize(source_dir, config)

        assert [o.source.name for o in report.outcomes] == ["a.jpg", "b.png", "c.pdf"]

    def test_no_safe_paths_moves_nothing(self, source_dir):
        """Test the fail-closed gate skips every classified file."""
        config = AppConfig(categories={"Images": ["jpg", "png"], "Docs": ["pdf"]})

        report = organize(source_dir, config)

        assert len(report.outcomes) == 3
        assert all(o.status == MoveStatus.SKIPPED for o in report.outcomes)
        assert all(o.reason == ErrorCode.DESTINATION_NOT_SAFE for o in report.outcomes)
        assert sorted(p.name for p in source_dir.iterdir()) == ["a.jpg", "b.png", "c.pdf", "d.txt"]

    def test_unsafe_destination_skips_category(self, source_dir, dest_dir, config):
        """Test only the category whose folder is unsafe is skipped."""
        config.add_unsafe_path(dest_dir / "Docs")

        report = organize(source_dir, config)

        statuses = {o.source.name: (o.status, o.reason) for o in report.outcomes}
        assert statuses["c.pdf"] == (MoveStatus.SKIPPED, ErrorCode.DESTINATION_NOT_SAFE)
        assert statuses["a.jpg"] == (MoveStatus.SUCCESS, None)
        assert (source_dir / "c.pdf").exists()
        assert not (dest_dir / "Docs").exists()

    def test_first_safe_path_is_used(self, source_dir, tmp_path):
        """Test the destination root is the first safe path."""
        first, second = tmp_path / "first", tmp_path / "second"
        config = AppConfig(categories={"Docs": ["pdf"]}, safe_paths=[first, second])

        organize(source_dir, config)

        assert (first / "Docs" / "c.pdf").exists()
        assert not second.exists()

    def test_collision_at_destination(self, source_dir, dest_dir, config):
        """Test an existing destination file is preserved."""
        (dest_dir / "Images").mkdir()
        (dest_dir / "Images" / "a.jpg").write_text("existing")

        report = organize(source_dir, config)

        assert (dest_dir / "Images" / "a.jpg").read_text() == "existing"
        assert (dest_dir / "Images" / "a_1.jpg").read_text() == "a.jpg"
        moved = {o.source.name: o.destination for o in report.moved}
        assert moved["a.jpg"] == dest_dir / "Images" / "a_1.jpg"

    def test_failure_does_not_abort_run(self, source_dir, dest_dir, config, monkeypatch):
        """Test one failing file is recorded and the rest still move."""
        real_replace = os.replace

        def flaky_replace(src, dst):
            if os.path.basename(src) == "b.png":
                raise PermissionError(errno.EACCES, "Permission denied")
            return real_replace(src, dst)

        monkeypatch.setattr(os, "replace", flaky_replace)

        report = organize(source_dir, config)

        by_name = {o.source.name: o for o in report.outcomes}
        assert by_name["b.png"].status == MoveStatus.FAILED
        assert by_name["b.png"].reason == ErrorCode.MOVE_FAILED
        assert by_name["b.png"].kind == "permission_denied"
        assert by_name["b.png"].to_dict()["kind"] == "permission_denied"
        assert by_name["a.jpg"].kind is None
        assert by_name["a.jpg"].status == MoveStatus.SUCCESS
        assert by_name["c.pdf"].status == MoveStatus.SUCCESS
        assert (source_dir / "b.png").exists()
        assert not (dest_dir / "Images" / "b.png").exists()
        assert report.has_failures

    def test_already_in_category_folder(self, dest_dir):
        """Test files already in their destination are not renamed."""
        images = dest_dir / "Images"
        images.mkdir()
        (images / "a.jpg").write_text("a")
        config = AppConfig(categories={"Images": ["jpg"]}, safe_paths=[dest_dir])

        report = organize(images, config)

        assert report.outcomes[0].status == MoveStatus.SKIPPED
        assert report.outcomes[0].reason == ErrorCode.ALREADY_ORGANIZED
        assert sorted(p.name for p in images.iterdir()) == ["a.jpg"]

    def test_organize_into_source_folder(self, source_dir):
        """Test the source folder may itself be the safe path."""
        config = AppConfig(categories={"Images": ["jpg", "png"]}, safe_paths=[source_dir])

        report = organize(source_dir, config)

        assert report.get_stats()["success"] == 2
        assert (source_dir / "Images" / "a.jpg").exists()
        assert preview(source_dir, config).ordered() == []

    def test_cancel_leaves_rest_untouched(self, source_dir, dest_dir, config):
        """Test a cancelled run moves a prefix and skips the rest."""
        cancel = threading.Event()
        seen = []

        def stop_after_first(outcome):
            seen.append(outcome)
            cancel.set()

        report = Organizer(config).organize(
            source_dir, cancel_event=cancel, progress_callback=stop_after_first
        )

        assert [o.status for o in report.outcomes] == [
            MoveStatus.SUCCESS, MoveStatus.SKIPPED, MoveStatus.SKIPPED
        ]
        assert report.outcomes[1].reason == ErrorCode.CANCELLED
        assert (dest_dir / "Images" / "a.jpg").exists()
        assert (source_dir / "b.png").exists()
        assert (source_dir / "c.pdf").exists()
        assert seen == report.outcomes

    def test_missing_source_directory(self, tmp_path, config):
        """Test an unreadable source is the only top-level failure."""
        with pytest.raises(DirectoryUnreadableError):
            organize(tmp_path / "missing", config)

    def test_protected_source_directory(self, source_dir, config):
        """Test protected folders are refused before anything moves."""
        config.add_unsafe_path(source_dir)

        with pytest.raises(ProtectedPathError):
            organize(source_dir, config)

        assert len(list(source_dir.iterdir())) == 4

    def test_collision_limit_reported(self, source_dir, dest_dir, config, monkeypatch):
        """Test running out of names is told apart from other failures."""
        monkeypatch.setattr(FileOperations, "MAX_COLLISION_SUFFIX", 0)
        (dest_dir / "Docs").mkdir()
        (dest_dir / "Docs" / "c.pdf").write_text("taken")

        report = organize(source_dir, config)

        failed = report.failed
        assert [o.source.name for o in failed] == ["c.pdf"]
        assert failed[0].kind == "collision"
        assert (source_dir / "c.pdf").exists()

    def test_report_to_dict(self, source_dir, config):
        """Test the report serializes to plain data."""
        data = organize(source_dir, config).to_dict()

        assert data["stats"]["success"] == 3
        assert data["outcomes"][0]["status"] == "success"
        assert data["outcomes"][0]["reason"] is None
