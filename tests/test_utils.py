"""
Unit tests for exceptions and logging helpers.
"""

import json
import logging

import pytest

from clarity.utils.exceptions import (
    ClarityError,
    ConfigUnreadableError,
    ErrorCode,
    InvalidConfigError,
    MoveFailedError,
)
from clarity.utils.logging_config import (
    JSONFormatter,
    LoggingConfig,
    Timer,
    correlation_scope,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_str_includes_code_and_details(self):
        error = MoveFailedError("Failed to move file", file_path="/a/b.jpg")

        text = str(error)

        assert text.startswith("[MOVE_FAILED] Failed to move file")
        assert "/a/b.jpg" in text

    def test_cause_is_reported(self):
        cause = OSError(28, "No space left on device")
        error = ClarityError("Could not save", cause=cause)

        assert "Caused by: OSError" in str(error)
        assert error.to_dict()["cause"] == str(cause)

    def test_to_dict(self):
        error = InvalidConfigError("Bad name", config_key="categories", expected_type="str")

        data = error.to_dict()

        assert data["error_type"] == "InvalidConfigError"
        assert data["error_code"] == ErrorCode.INVALID_CONFIG.value
        assert data["details"] == {"config_key": "categories", "expected_type": "str"}

    def test_error_codes(self):
        """Test the code table holds exactly the codes the engine reports."""
        assert {code.name: code.value for code in ErrorCode} == {
            "UNKNOWN_ERROR": 1000,
            "CONFIG_UNREADABLE": 1100,
            "CONFIG_UNWRITABLE": 1101,
            "INVALID_CONFIG": 1102,
            "DIRECTORY_UNREADABLE": 1200,
            "PROTECTED_PATH": 1201,
            "DESTINATION_NOT_SAFE": 1300,
            "MOVE_FAILED": 1301,
            "ALREADY_ORGANIZED": 1302,
            "CANCELLED": 1303,
        }

    def test_configuration_errors_share_base(self):
        """Test callers can catch every config problem at once."""
        with pytest.raises(ClarityError) as exc_info:
            raise ConfigUnreadableError("Missing", config_path="/x/config.yaml")

        assert exc_info.value.error_code == ErrorCode.CONFIG_UNREADABLE
        assert exc_info.value.details["config_path"] == "/x/config.yaml"


class TestLogging:
    """Tests for logging setup."""

    def test_get_logger_namespaced(self):
        assert get_logger("service").name == "clarity.service"
        assert get_logger("clarity.config.store").name == "clarity.config.store"

    def test_json_formatter(self, tmp_path):
        record = logging.LogRecord(
            "clarity.test", logging.INFO, __file__, 1, "Moved %s", ("a.jpg",), None
        )
        record.category = "Images"
        record.file_path = tmp_path / "a.jpg"

        with correlation_scope("abc12345"):
            data = json.loads(JSONFormatter().format(record))

        assert data["file_path"] == str(tmp_path / "a.jpg")
        assert data["message"] == "Moved a.jpg"
        assert data["correlation_id"] == "abc12345"
        assert data["category"] == "Images"

    def test_file_output(self, tmp_path):
        """Test log lines reach the rotating JSON log file."""
        setup_logging(LoggingConfig(level="INFO", log_dir=tmp_path, console_output=False))
        logger = get_logger("test")

        with Timer(logger, "scan"):
            pass
        for handler in logging.getLogger("clarity").handlers:
            handler.flush()

        lines = (tmp_path / "clarity.log").read_text(encoding="utf-8").splitlines()
        entry = json.loads(lines[-1])
        assert entry["operation"] == "scan"
        assert entry["message"].startswith("Operation completed: scan")

    def test_timer_does_not_swallow_errors(self):
        with pytest.raises(ValueError):
            with Timer(get_logger("test"), "boom"):
                raise ValueError("boom")

    def test_correlation_scope_restores_previous(self):
        """Test nested scopes restore the outer ID."""
        set_correlation_id(None)

        with correlation_scope() as outer:
            with correlation_scope() as inner:
                assert get_correlation_id() == inner
            assert get_correlation_id() == outer
            assert inner != outer

        assert get_correlation_id() is None

    def test_file_level_independent_of_console(self, tmp_path):
        """Test the file keeps INFO lines while the console shows warnings only."""
        setup_logging(LoggingConfig(level="WARNING", file_level="INFO", log_dir=tmp_path))
        app_logger = logging.getLogger("clarity")

        get_logger("test").info("kept in file")
        for handler in app_logger.handlers:
            handler.flush()

        assert app_logger.level == logging.INFO
        assert "kept in file" in (tmp_path / "clarity.log").read_text(encoding="utf-8")

    def test_unknown_level_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            setup_logging(LoggingConfig(level="LOUD", file_output=False))
