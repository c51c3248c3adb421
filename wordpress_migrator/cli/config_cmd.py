"""CLI command handler for creating a config file template."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from wordpress_migrator.cli.common import cli
from wordpress_migrator.core.config import create_default_config
from wordpress_migrator.utils.logging import setup_logger

# ---------------------------------------------------------------------------
# init-config subcommand
# ---------------------------------------------------------------------------


@cli.command("init-config")
@click.option(
    "--output",
    default="config.yaml",
    show_default=True,
    help="Where to write the config template",
)
def init_config(output: str) -> None:
    """Write a config file template (never overwrites an existing file).

    Args:
        output: Path of the config file to create.
    """
    setup_logger()
    if not create_default_config(Path(output)):
        sys.exit(1)
    click.echo(f"Edit {output} to point target_store at your store factory.")
