"""Tests for the end-of-run summary logging."""

import logging

import pytest

from wordpress_migrator.core.migration_logging import log_migration_summary
from wordpress_migrator.core.state import Stats


@pytest.fixture()
def records(caplog):
    def _log(stats, dry_run=False):
        with caplog.at_level(logging.DEBUG, logger="wordpress_migrator"):
            log_migration_summary(stats, dry_run, duration=90.0)
        return caplog.records

    return _log


def test_success_header(records):
    messages = [r.getMessage() for r in records(Stats(posts_created=3))]
    assert "MIGRATION COMPLETED SUCCESSFULLY" in messages
    assert "No issues detected" in messages
    assert "Duration: 1.5 minutes (90.0 seconds)" in messages


def test_dry_run_header_and_guidance(records):
    messages = [r.getMessage() for r in records(Stats(), dry_run=True)]
    assert messages[0] == "DRY RUN COMPLETED - NO CHANGES MADE"
    assert any("run without --dry_run" in m for m in messages)


def test_failures_reported(records):
    logged = records(Stats(media_failed=2, comments_failed=1))
    warnings = [r.getMessage() for r in logged if r.levelno == logging.WARNING]
    assert "MIGRATION COMPLETED WITH ERRORS" in warnings
    assert "Media failures: 2" in warnings
    assert "Comment failures: 1" in warnings
    assert not any("Term failures" in w for w in warnings)


def test_stat_lines_carry_structured_context(records):
    logged = records(Stats(posts_created=3, aliases_preserved=2))
    stats = {r.stat: r.count for r in logged if hasattr(r, "stat")}
    assert stats["posts_created"] == 3
    assert stats["aliases_preserved"] == 2
    assert "media_replaced" not in stats
