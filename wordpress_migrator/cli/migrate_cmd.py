"""CLI command handler for the migrate workflow."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path

import click

from wordpress_migrator.cli.common import (
    cli,
    common_options,
    export_path_option,
    handle_exception,
    load_runtime,
    resolve_export_file,
)
from wordpress_migrator.core.context import MigrationContext
from wordpress_migrator.core.mapping_cache import MappingCache, archive_cache, load_cache
from wordpress_migrator.core.pipeline import ImportPipeline, prepare_context
from wordpress_migrator.core.state import Stats
from wordpress_migrator.services.target_store import TargetStore
from wordpress_migrator.types import ConfirmOutcome
from wordpress_migrator.utils.logging import log_with_context, setup_logger

# Create logger instance
logger = logging.getLogger("wordpress_migrator")


# ---------------------------------------------------------------------------
# migrate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@export_path_option
@click.option(
    "--dry_run",
    is_flag=True,
    default=False,
    help="Run every phase without writing anything to the target store",
)
@click.option(
    "--fresh",
    is_flag=True,
    default=False,
    help="Archive the mapping cache and start from an empty one",
)
@click.option(
    "--auto_publish",
    is_flag=True,
    default=False,
    help="Publish imported content instead of creating drafts",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def migrate(
    config: str,
    verbose: bool,
    export_path: Path,
    dry_run: bool,
    fresh: bool,
    auto_publish: bool,
    yes: bool,
) -> None:
    """Import a WordPress export into the target store.

    Args:
        config: Path to config YAML.
        verbose: Enable verbose console logging.
        export_path: Export file or directory.
        dry_run: Run without writing to the target store.
        fresh: Archive the mapping cache before starting.
        auto_publish: Publish imported content.
        yes: Skip confirmation prompt.
    """
    setup_logger(verbose)

    try:
        import_config, store = load_runtime(config)
        setup_logger(verbose, import_config.data_dir)
        import_config = import_config.with_run_mode(
            dry_run or import_config.dry_run, auto_publish=True if auto_publish else None
        )
        export_file = resolve_export_file(export_path)
        context = prepare_context(export_file, import_config, store)
    except Exception as e:
        handle_exception(e)
        sys.exit(1)

    log_plan(context)

    outcome = confirm_import(context, yes)
    if outcome == ConfirmOutcome.CANCEL:
        log_with_context(logging.INFO, "Import cancelled, nothing was changed.")
        return
    if outcome == ConfirmOutcome.DRY_RUN and not context.dry_run:
        context = dataclasses.replace(
            context, config=context.config.with_run_mode(dry_run=True)
        )

    try:
        run_import(context, store, fresh=fresh)
    except KeyboardInterrupt as e:
        handle_exception(e)
        sys.exit(130)
    except Exception as e:
        handle_exception(e)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Helpers shared with the validate command
# ---------------------------------------------------------------------------


def log_plan(context: MigrationContext) -> None:
    """Log what the run is about to do."""
    summary = context.summary
    config = context.config
    log_with_context(
        logging.INFO,
        f"{context.log_prefix}Ready to import {summary.posts} posts and {summary.pages} pages "
        f"from {summary.base_url or context.export_path}",
    )
    log_with_context(
        logging.INFO,
        f"Posts -> {config.post_bundle or '(skip)'}, pages -> {config.page_bundle or '(skip)'}, "
        f"users: {config.user_strategy.value}, "
        f"media: {'yes' if config.import_media and context.requirements.needs_media else 'no'}, "
        f"publish: {'yes' if config.auto_publish else 'no (drafts)'}",
    )


def confirm_import(context: MigrationContext, yes: bool) -> ConfirmOutcome:
    """Ask the operator how to proceed.

    Dry runs and ``--yes`` need no confirmation.
    """
    if context.dry_run:
        return ConfirmOutcome.DRY_RUN
    if yes:
        return ConfirmOutcome.LIVE

    answer = click.prompt(
        "Proceed with the import?",
        type=click.Choice([o.value for o in ConfirmOutcome]),
        default=ConfirmOutcome.CANCEL.value,
    )
    return ConfirmOutcome(answer)


def run_import(
    context: MigrationContext, store: TargetStore, fresh: bool = False
) -> Stats:
    """Load the mapping cache and run the pipeline.

    With ``fresh`` the run starts from an empty cache; a live run also
    archives the existing cache file.
    """
    if fresh:
        if not context.dry_run:
            archive_cache(context.cache_path, context.archive_dir)
        cache = MappingCache()
    else:
        cache = load_cache(context.cache_path)
    pipeline = ImportPipeline(context, store, cache)
    return pipeline.run()
