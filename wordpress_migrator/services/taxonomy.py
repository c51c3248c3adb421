"""
Category and tag import for the WordPress content migration
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wordpress_migrator.types import ImportResult, ItemOutcome
from wordpress_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from wordpress_migrator.core.context import MigrationContext
    from wordpress_migrator.core.mapping_cache import MappingCache
    from wordpress_migrator.core.state import Stats
    from wordpress_migrator.services.target_store import TargetStore


def import_term(
    name: str, vocabulary: str, table: dict[str, int], store: TargetStore
) -> ImportResult:
    """Map a term name to a term id in ``vocabulary``, creating it if needed."""
    name = name.strip()
    if not name:
        return ImportResult(ItemOutcome.SKIPPED)

    if name in table:
        return ImportResult(ItemOutcome.MAPPED, table[name])

    try:
        tid = store.find_term(name, vocabulary)
        outcome = ItemOutcome.MAPPED
        if tid is None:
            tid = store.create_term(name, vocabulary)
            outcome = ItemOutcome.CREATED
    except Exception as e:
        log_with_context(
            logging.ERROR,
            f"Failed to import term '{name}' into {vocabulary}: {e}",
            phase="taxonomy",
        )
        return ImportResult(ItemOutcome.FAILED, error=str(e))

    table[name] = tid
    return ImportResult(outcome, tid)


def import_taxonomy(
    context: MigrationContext, store: TargetStore, cache: MappingCache, stats: Stats
) -> None:
    """Taxonomy phase: categories and tags into their configured vocabularies."""
    config = context.config
    batches = (
        (context.summary.categories, config.category_vocabulary, cache.terms_cat),
        (context.summary.tags, config.tag_vocabulary, cache.terms_tag),
    )

    for names, vocabulary, table in batches:
        if not vocabulary or not names:
            continue
        for name in names:
            result = import_term(name, vocabulary, table, store)
            if result.outcome == ItemOutcome.CREATED:
                stats.terms_created += 1
            elif result.outcome == ItemOutcome.MAPPED:
                stats.terms_mapped += 1
            elif result.outcome == ItemOutcome.FAILED:
                stats.terms_failed += 1

    log_with_context(
        logging.INFO,
        f"{context.log_prefix}Taxonomy: {stats.terms_created} created, "
        f"{stats.terms_mapped} mapped, {stats.terms_failed} failed",
        phase="taxonomy",
    )
