"""
Final run summary logging for the WordPress content migration.

Kept out of ``pipeline.py`` so the pipeline stays focused on control flow.
"""

from __future__ import annotations

import logging

from wordpress_migrator.core.state import Stats
from wordpress_migrator.utils.logging import log_with_context


def log_migration_summary(stats: Stats, dry_run: bool, duration: float) -> None:
    """Log the outcome header, the statistics and any per-item failures.

    Every statistics line carries ``stat`` and ``count`` as structured
    context so the values can be picked out of the log file.

    Args:
        stats: Counters accumulated over the run.
        dry_run: Whether the run was a dry run.
        duration: Run duration in seconds.
    """
    # --- Outcome header ---------------------------------------------------
    if dry_run:
        log_with_context(
            logging.INFO, "DRY RUN COMPLETED - NO CHANGES MADE", outcome="dry_run_complete"
        )
    elif stats.has_errors:
        log_with_context(
            logging.WARNING,
            "MIGRATION COMPLETED WITH ERRORS",
            outcome="completed_with_errors",
        )
    else:
        log_with_context(
            logging.INFO, "MIGRATION COMPLETED SUCCESSFULLY", outcome="success"
        )

    log_with_context(
        logging.INFO,
        f"Duration: {duration / 60:.1f} minutes ({duration:.1f} seconds)",
        duration_seconds=duration,
    )

    # --- Statistics --------------------------------------------------------
    lines = (
        ("Users", f"{stats.users_created} created, {stats.users_mapped} mapped",
         "users_created", stats.users_created),
        ("Media", f"{stats.media_imported} imported, {stats.media_mapped} reused, "
                  f"{stats.media_skipped} external",
         "media_imported", stats.media_imported),
        ("Terms", f"{stats.terms_created} created, {stats.terms_mapped} mapped",
         "terms_created", stats.terms_created),
        ("Posts", f"{stats.posts_created} created", "posts_created", stats.posts_created),
        ("Pages", f"{stats.pages_created} created", "pages_created", stats.pages_created),
        ("Duplicates", f"{stats.duplicates_detected} skipped",
         "duplicates_detected", stats.duplicates_detected),
        ("Comments", f"{stats.comments_created} created",
         "comments_created", stats.comments_created),
    )
    for label, text, stat, count in lines:
        log_with_context(logging.INFO, f"{label + ':':<12}{text}", stat=stat, count=count)

    if stats.media_replaced:
        log_with_context(
            logging.INFO,
            f"{'':<12}{stats.media_replaced} media URLs replaced",
            stat="media_replaced",
            count=stats.media_replaced,
        )
    if stats.aliases_preserved:
        log_with_context(
            logging.INFO,
            f"{'Aliases:':<12}{stats.aliases_preserved} preserved",
            stat="aliases_preserved",
            count=stats.aliases_preserved,
        )

    # --- Issues -----------------------------------------------------------
    failures = (
        ("Users mapped to admin after errors", "users_failed", stats.users_failed),
        ("Media failures", "media_failed", stats.media_failed),
        ("Term failures", "terms_failed", stats.terms_failed),
        ("Content failures", "nodes_failed", stats.nodes_failed),
        ("Comment failures", "comments_failed", stats.comments_failed),
    )
    for label, stat, count in failures:
        if count:
            log_with_context(logging.WARNING, f"{label}: {count}", stat=stat, count=count)
    if not stats.has_errors:
        log_with_context(logging.INFO, "No issues detected")

    # --- Next-steps guidance ----------------------------------------------
    if dry_run:
        log_with_context(
            logging.INFO,
            "Validation complete. Review the logs and run without --dry_run to migrate.",
        )
    elif stats.has_errors:
        log_with_context(
            logging.INFO,
            "Check current.log for details. Running the command again retries "
            "the failed items and skips everything already imported.",
        )
