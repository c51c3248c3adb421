"""Unit tests for the logging module."""

import logging
import os
from unittest.mock import patch

import pytest

from wordpress_migrator.utils.logging import (
    EnhancedFormatter,
    archive_previous_log,
    get_logger,
    log_with_context,
    setup_logger,
    setup_main_log_file,
)


@pytest.fixture(autouse=True)
def _reset_handlers():
    """Remove all handlers from the wordpress_migrator logger after each test."""
    yield
    logger = logging.getLogger("wordpress_migrator")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="wordpress_migrator",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# --- EnhancedFormatter tests ---


class TestEnhancedFormatter:
    def test_default_format(self):
        result = EnhancedFormatter().format(_record())
        assert result.endswith(" - INFO - hello")

    def test_verbose_format_includes_location(self):
        result = EnhancedFormatter(verbose=True).format(_record())
        assert "[test:1]" in result
        assert "wordpress_migrator" in result

    def test_context_appended_sorted(self):
        formatter = EnhancedFormatter(include_context=True)
        result = formatter.format(_record(phase="media", url="https://x/a.jpg"))
        assert result.endswith("hello [phase=media url=https://x/a.jpg]")

    def test_context_omitted_by_default(self):
        result = EnhancedFormatter().format(_record(phase="media"))
        assert "phase=media" not in result

    def test_no_brackets_without_context(self):
        result = EnhancedFormatter(include_context=True).format(_record())
        assert not result.endswith("]")


# --- setup_logger tests ---


class TestSetupLogger:
    def test_console_level(self):
        logger = setup_logger(verbose=False)
        (handler,) = logger.handlers
        assert handler.level == logging.INFO
        assert logger.level == logging.DEBUG

    def test_verbose_console_level(self):
        logger = setup_logger(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logger()
        logger = setup_logger()
        assert len(logger.handlers) == 1

    def test_file_handler_added(self, tmp_path):
        logger = setup_logger(data_dir=str(tmp_path))
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert os.path.exists(tmp_path / "current.log")


# --- Log file rotation tests ---


class TestLogRotation:
    def test_no_previous_log(self, tmp_path):
        assert archive_previous_log(str(tmp_path)) is None

    def test_previous_log_archived(self, tmp_path):
        (tmp_path / "current.log").write_text("old run\n")

        with patch("wordpress_migrator.utils.logging.datetime") as mock_dt:
            mock_dt.now.return_value.strftime.return_value = "20240101_120000"
            destination = archive_previous_log(str(tmp_path))

        assert destination == str(tmp_path / "_archive" / "log_20240101_120000.log")
        assert not (tmp_path / "current.log").exists()
        with open(destination) as f:
            assert f.read() == "old run\n"

    def test_archive_name_collision(self, tmp_path):
        archive = tmp_path / "_archive"
        archive.mkdir()
        (archive / "log_20240101_120000.log").write_text("older")
        (tmp_path / "current.log").write_text("old")

        with patch("wordpress_migrator.utils.logging.datetime") as mock_dt:
            mock_dt.now.return_value.strftime.return_value = "20240101_120000"
            destination = archive_previous_log(str(tmp_path))

        assert destination.endswith("log_20240101_120000_2.log")

    def test_new_run_starts_fresh_log(self, tmp_path):
        (tmp_path / "current.log").write_text("previous run\n")

        handler = setup_main_log_file(str(tmp_path))
        log_with_context(logging.INFO, "current run")
        handler.flush()

        content = (tmp_path / "current.log").read_text()
        assert "previous run" not in content
        assert "current run" in content
        assert len(list((tmp_path / "_archive").iterdir())) == 1


# --- log_with_context tests ---


class TestLogWithContext:
    def test_extras_attached(self, caplog):
        setup_logger()
        with caplog.at_level(logging.DEBUG, logger="wordpress_migrator"):
            log_with_context(logging.WARNING, "careful", phase="users", email="a@b.c")

        record = caplog.records[-1]
        assert record.getMessage() == "careful"
        assert record.phase == "users"
        assert record.email == "a@b.c"

    def test_none_values_dropped(self, caplog):
        setup_logger()
        with caplog.at_level(logging.DEBUG, logger="wordpress_migrator"):
            log_with_context(logging.INFO, "msg", phase=None)

        assert not hasattr(caplog.records[-1], "phase")

    def test_context_written_to_file(self, tmp_path):
        logger = setup_logger(data_dir=str(tmp_path))
        log_with_context(logging.DEBUG, "detail", wp_id="42")
        for handler in logger.handlers:
            handler.flush()

        content = (tmp_path / "current.log").read_text()
        assert "detail [wp_id=42]" in content


def test_get_logger_adds_default_handler():
    logger = get_logger()
    assert logger.name == "wordpress_migrator"
    assert len(logger.handlers) >= 1
