"""Shared CLI infrastructure: option decorators, error handlers, and the CLI group."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import click

import wordpress_migrator
from wordpress_migrator.core.config import ImportConfig, load_config
from wordpress_migrator.core.scanner import discover_export_files
from wordpress_migrator.exceptions import (
    ConfigError,
    FatalValidationError,
    MalformedInputError,
    MigratorError,
)
from wordpress_migrator.services.target_store import TargetStore, load_target_store
from wordpress_migrator.utils.logging import log_with_context

# Create logger instance
logger = logging.getLogger("wordpress_migrator")


# ---------------------------------------------------------------------------
# Shared option decorator
# ---------------------------------------------------------------------------


def common_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds options shared across multiple subcommands.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with common options attached.
    """
    f = click.option(
        "--config",
        default="config.yaml",
        show_default=True,
        help="Path to config YAML",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose console logging (shows DEBUG level messages)",
    )(f)
    return f


def export_path_option(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator for the ``--export_path`` option (file or directory)."""
    return click.option(
        "--export_path",
        required=True,
        type=click.Path(exists=True, path_type=Path),
        help="WordPress export file, or a directory to search for *.xml exports",
    )(f)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=wordpress_migrator.__version__, prog_name="wp-migrator")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """WordPress to CMS content migration tool.

    Args:
        ctx: The Click context (injected by ``@click.pass_context``).
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def resolve_export_file(export_path: Path) -> Path:
    """Return the export file to import.

    A directory is searched for ``*.xml`` files; with several candidates
    the operator picks one from a numbered list.

    Raises:
        MalformedInputError: If a directory holds no XML file.
    """
    if export_path.is_file():
        return export_path

    candidates = discover_export_files(export_path)
    if not candidates:
        raise MalformedInputError(f"No XML export files found in {export_path}")
    if len(candidates) == 1:
        log_with_context(logging.INFO, f"Using export file {candidates[0]}")
        return candidates[0]

    click.echo("Several export files found:")
    for number, candidate in enumerate(candidates, start=1):
        click.echo(f"  {number}) {candidate.name}")
    choice = click.prompt(
        "Select the file to import",
        type=click.IntRange(1, len(candidates)),
        default=1,
    )
    return candidates[choice - 1]


def load_runtime(config_path: str) -> tuple[ImportConfig, TargetStore]:
    """Load the config file and instantiate the configured target store."""
    config = load_config(Path(config_path))
    store = load_target_store(config.target_store, config.target_store_options)
    return config, store


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def handle_exception(e: BaseException) -> None:
    """Handle different types of exceptions.

    Args:
        e: The exception to handle.
    """
    if isinstance(e, FatalValidationError):
        log_with_context(logging.ERROR, "Validation failed, nothing was imported:")
        for error in e.errors:
            log_with_context(logging.ERROR, f"  - {error}")
    elif isinstance(e, ConfigError):
        log_with_context(logging.ERROR, f"Configuration error: {e}")
        log_with_context(
            logging.INFO, "Run 'wp-migrator init-config' to create a config file template."
        )
    elif isinstance(e, MalformedInputError):
        log_with_context(logging.ERROR, str(e))
        log_with_context(
            logging.INFO, "Check that the file is a WordPress export (Tools > Export)."
        )
    elif isinstance(e, MigratorError):
        log_with_context(logging.ERROR, str(e))
    elif isinstance(e, KeyboardInterrupt):
        log_with_context(logging.WARNING, "Migration interrupted by user.")
        log_with_context(
            logging.INFO,
            "Mappings recorded so far were saved; run the command again to resume.",
        )
    else:
        log_with_context(logging.ERROR, f"Migration failed: {e}", exc_info=True)
