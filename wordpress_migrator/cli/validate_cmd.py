"""CLI command handler for dry-run validation."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from wordpress_migrator.cli.common import (
    cli,
    common_options,
    export_path_option,
    handle_exception,
    load_runtime,
    resolve_export_file,
)
from wordpress_migrator.cli.migrate_cmd import log_plan, run_import
from wordpress_migrator.core.pipeline import prepare_context
from wordpress_migrator.utils.logging import log_with_context, setup_logger

# ---------------------------------------------------------------------------
# validate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@export_path_option
def validate(config: str, verbose: bool, export_path: Path) -> None:
    """Validate the export against the target store and rehearse the import.

    Equivalent to ``migrate --dry_run --yes`` but expressed as an explicit
    command: every phase runs, nothing is written and the mapping cache
    is left untouched.

    Args:
        config: Path to config YAML.
        verbose: Enable verbose console logging.
        export_path: Export file or directory.
    """
    setup_logger(verbose)

    try:
        import_config, store = load_runtime(config)
        setup_logger(verbose, import_config.data_dir)
        export_file = resolve_export_file(export_path)
        context = prepare_context(
            export_file, import_config.with_run_mode(dry_run=True), store
        )
        log_plan(context)
        stats = run_import(context, store)
    except Exception as e:
        handle_exception(e)
        sys.exit(1)

    if stats.has_errors:
        log_with_context(
            logging.WARNING,
            f"Dry run finished with {stats.total_failures} item failures",
        )
