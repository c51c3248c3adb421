#!/usr/bin/env python3
"""
Main execution module for the WordPress content migration tool.

This module assembles the command-line interface: importing the command
modules registers their subcommands on the shared ``cli`` group.
"""

from __future__ import annotations

# Command modules register themselves on the group when imported
from wordpress_migrator.cli import config_cmd, migrate_cmd, scan_cmd, validate_cmd  # noqa: F401
from wordpress_migrator.cli.common import cli


def main() -> None:
    """Main entry point for the WordPress content migration tool."""
    cli()


if __name__ == "__main__":
    main()
