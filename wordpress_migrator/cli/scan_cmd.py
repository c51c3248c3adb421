"""CLI command handler for inspecting an export file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from wordpress_migrator.cli.common import (
    cli,
    export_path_option,
    handle_exception,
    resolve_export_file,
)
from wordpress_migrator.core.scanner import Requirements, XmlStreamScanner
from wordpress_migrator.services.media import is_same_domain
from wordpress_migrator.utils.logging import setup_logger

# ---------------------------------------------------------------------------
# scan subcommand
# ---------------------------------------------------------------------------


@cli.command()
@export_path_option
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose console logging (shows DEBUG level messages)",
)
def scan(export_path: Path, verbose: bool) -> None:
    """Summarize a WordPress export without touching the target store.

    Args:
        export_path: Export file or directory.
        verbose: Enable verbose console logging.
    """
    setup_logger(verbose)

    try:
        export_file = resolve_export_file(export_path)
        summary = XmlStreamScanner().scan(export_file)
    except Exception as e:
        handle_exception(e)
        sys.exit(1)

    requirements = Requirements.from_summary(summary)
    external = sum(
        1
        for info in summary.attachments.values()
        if not is_same_domain(info["url"], summary.domain)
    )

    click.echo(f"Export:       {export_file}")
    click.echo(f"Site:         {summary.base_url or '(unknown)'}")
    click.echo(f"Authors:      {len(summary.authors)}")
    click.echo(f"Posts:        {summary.posts}")
    click.echo(f"Pages:        {summary.pages}")
    click.echo(f"Attachments:  {len(summary.attachments)} ({external} external)")
    click.echo(f"Categories:   {len(summary.categories)}")
    click.echo(f"Tags:         {len(summary.tags)}")
    click.echo(f"Comments:     {summary.approved_comment_count} approved")

    needed = [
        name
        for name, flag in (
            ("users", requirements.needs_users),
            ("media", requirements.needs_media),
            ("taxonomy", requirements.needs_taxonomy),
            ("comments", requirements.needs_comments),
        )
        if flag
    ]
    click.echo(f"Phases:       {', '.join(needed + ['content'])}")
