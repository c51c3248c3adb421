"""Immutable migration context.

MigrationContext is a frozen dataclass that holds the configuration and
every analysis result of a run: the export summary, the requirements it
implies and the target environment snapshot. It is created once, after
validation, and shared read-only with every import service.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wordpress_migrator.constants import (
    ARCHIVE_DIR_NAME,
    CACHE_FILE_NAME,
    DEFAULT_COMMENT_FORMAT,
)
from wordpress_migrator.core.config import ImportConfig
from wordpress_migrator.core.environment import DetectedFields, TargetEnvironment
from wordpress_migrator.core.scanner import Requirements, XmlSummary


@dataclass(frozen=True)
class MigrationContext:
    """Immutable context for a migration run. Created once, shared everywhere."""

    export_path: Path
    config: ImportConfig
    summary: XmlSummary
    requirements: Requirements
    environment: TargetEnvironment

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def data_dir(self) -> Path:
        return Path(self.config.data_dir)

    @property
    def cache_path(self) -> Path:
        """Path to the persisted mapping cache."""
        return self.data_dir / CACHE_FILE_NAME

    @property
    def archive_dir(self) -> Path:
        return self.data_dir / ARCHIVE_DIR_NAME

    @property
    def comment_format(self) -> str:
        return self.config.comment_format or DEFAULT_COMMENT_FORMAT

    def bundle_for(self, post_type: str) -> str | None:
        """Configured target bundle for a WordPress post type."""
        if post_type == "post":
            return self.config.post_bundle
        if post_type == "page":
            return self.config.page_bundle
        return None

    def fields_for(self, post_type: str) -> DetectedFields:
        return self.environment.fields_for(self.bundle_for(post_type))

    @property
    def log_prefix(self) -> str:
        """Mode-aware log prefix, ``"[DRY RUN] "`` or empty."""
        return "[DRY RUN] " if self.dry_run else ""
