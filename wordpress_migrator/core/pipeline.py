"""
Import pipeline for the WordPress content migration.

A run has two stages. ``prepare_context`` analyzes the export and the
target store and validates that one can receive the other; nothing is
written during this stage. ``ImportPipeline.run`` then executes the import
phases in dependency order, since every phase reads the mappings recorded
by the phases before it.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from wordpress_migrator.core.config import ImportConfig
from wordpress_migrator.core.context import MigrationContext
from wordpress_migrator.core.environment import scan_environment, validate_environment
from wordpress_migrator.core.mapping_cache import MappingCache, save_cache
from wordpress_migrator.core.migration_logging import log_migration_summary
from wordpress_migrator.core.scanner import Requirements, XmlStreamScanner
from wordpress_migrator.core.state import Stats
from wordpress_migrator.services.comment import import_comments
from wordpress_migrator.services.content import import_content
from wordpress_migrator.services.dry_run_store import DryRunTargetStore
from wordpress_migrator.services.media import import_media
from wordpress_migrator.services.target_store import TargetStore
from wordpress_migrator.services.taxonomy import import_taxonomy
from wordpress_migrator.services.user import import_users
from wordpress_migrator.utils.logging import log_with_context

PhaseFunction = Callable[[MigrationContext, TargetStore, MappingCache, Stats], None]

# Execution order; each phase depends on the mappings of the ones before it
PHASES = ("users", "media", "taxonomy", "content", "comments", "finalize")


def prepare_context(
    export_path: Path, config: ImportConfig, store: TargetStore
) -> MigrationContext:
    """Scan the export and the target store, then validate the pairing.

    Raises:
        MalformedInputError: If the export cannot be read.
        FatalValidationError: If the target store cannot receive the export.
    """
    summary = XmlStreamScanner().scan(export_path)
    requirements = Requirements.from_summary(summary)
    environment = scan_environment(store)
    report = validate_environment(summary, requirements, environment, store, config)
    return MigrationContext(
        export_path=Path(export_path),
        config=config,
        summary=summary,
        requirements=report.requirements,
        environment=report.environment,
    )


class ImportPipeline:
    """Runs the import phases against a target store.

    Under dry run the store is wrapped in :class:`DryRunTargetStore`, so
    lookups still reach the real store while writes are only logged.
    """

    def __init__(
        self,
        context: MigrationContext,
        store: TargetStore,
        cache: MappingCache | None = None,
    ) -> None:
        self.context = context
        self.store = DryRunTargetStore(store) if context.dry_run else store
        self.cache = cache if cache is not None else MappingCache()
        self.stats = Stats()
        self._phases: dict[str, PhaseFunction] = {
            "users": import_users,
            "media": import_media,
            "taxonomy": import_taxonomy,
            "content": import_content,
            "comments": import_comments,
        }

    def phase_enabled(self, phase: str) -> bool:
        """Whether a phase has anything to do for this export and config."""
        requirements = self.context.requirements
        config = self.context.config
        if phase == "users":
            return requirements.needs_users
        if phase == "media":
            return requirements.needs_media and config.import_media
        if phase == "taxonomy":
            return requirements.needs_taxonomy and bool(
                config.category_vocabulary or config.tag_vocabulary
            )
        if phase == "content":
            return bool(config.post_bundle or config.page_bundle)
        if phase == "comments":
            return requirements.needs_comments and bool(
                config.comment_type and config.post_bundle
            )
        return phase == "finalize"

    def run(self) -> Stats:
        """Execute every enabled phase, then persist the cache and report.

        An interrupt still saves the mappings recorded so far, so the next
        run resumes where this one stopped.
        """
        start = time.time()
        prefix = self.context.log_prefix
        log_with_context(
            logging.INFO,
            f"{prefix}Starting import of {self.context.export_path}",
            export=str(self.context.export_path),
        )

        try:
            for phase in PHASES[:-1]:
                if not self.phase_enabled(phase):
                    log_with_context(
                        logging.INFO, f"{prefix}Skipping phase: {phase}", phase=phase
                    )
                    continue
                log_with_context(logging.INFO, f"{prefix}Phase: {phase}", phase=phase)
                self._phases[phase](self.context, self.store, self.cache, self.stats)
        except KeyboardInterrupt:
            log_with_context(
                logging.WARNING, "Import interrupted, saving mappings recorded so far"
            )
            save_cache(self.cache, self.context.cache_path, dry_run=self.context.dry_run)
            raise

        self.finalize(time.time() - start)
        return self.stats

    def finalize(self, duration: float) -> None:
        save_cache(self.cache, self.context.cache_path, dry_run=self.context.dry_run)
        log_migration_summary(self.stats, self.context.dry_run, duration)
