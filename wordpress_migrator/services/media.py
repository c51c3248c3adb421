"""
Media import for the WordPress content migration.

Attachments hosted on the exported site are downloaded, stored by the
target store and wrapped in a media entity of the bundle matching their
file extension. Attachments hosted elsewhere (CDNs, other sites) are left
untouched.
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from tqdm import tqdm

from wordpress_migrator.constants import DEFAULT_MEDIA_BUNDLE, MEDIA_BUNDLE_RULES
from wordpress_migrator.services.target_store import filename_from_url
from wordpress_migrator.types import AttachmentInfo, ImportResult, ItemOutcome, MediaEntry
from wordpress_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from wordpress_migrator.core.context import MigrationContext
    from wordpress_migrator.core.mapping_cache import MappingCache
    from wordpress_migrator.core.state import Stats
    from wordpress_migrator.services.target_store import TargetStore


def media_bundle_for(url: str) -> tuple[str, str]:
    """Return ``(bundle, source_field)`` for a file URL based on its extension."""
    extension = posixpath.splitext(urlparse(url).path)[1].lstrip(".").lower()
    for extensions, bundle, source_field in MEDIA_BUNDLE_RULES:
        if extension in extensions:
            return bundle, source_field
    return DEFAULT_MEDIA_BUNDLE


def alt_text_for(info: AttachmentInfo) -> str:
    """Alt text, falling back to the title and then the file name stem."""
    alt = (info.get("alt") or "").strip()
    if alt:
        return alt
    title = (info.get("title") or "").strip()
    if title:
        return title
    return posixpath.splitext(filename_from_url(info["url"]))[0]


def is_same_domain(url: str, domain: str | None) -> bool:
    if not domain:
        return False
    return (urlparse(url).hostname or "").lower() == domain.lower()


def import_attachment(
    info: AttachmentInfo,
    store: TargetStore,
    cache: MappingCache,
    timeout: int,
) -> ImportResult:
    """Import one attachment and record it in the media cache."""
    url = info["url"]
    cached = cache.media.get(url)
    if cached:
        return ImportResult(ItemOutcome.MAPPED, cached["target_id"])

    bundle, source_field = media_bundle_for(url)
    alt = alt_text_for(info)

    try:
        file_ref = store.fetch_and_store_file(url, timeout=timeout)
        outcome = ItemOutcome.MAPPED
        media_id = store.find_media_by_file(file_ref, bundle, source_field)
        if media_id is None:
            media_id = store.create_media(file_ref, bundle, source_field, alt)
            outcome = ItemOutcome.CREATED
    except Exception as e:
        log_with_context(
            logging.ERROR, f"Failed to import media {url}: {e}", phase="media", url=url
        )
        return ImportResult(ItemOutcome.FAILED, error=str(e))

    cache.media[url] = MediaEntry(target_id=media_id, target_url=file_ref.url, alt=alt)
    return ImportResult(outcome, media_id)


def import_media(
    context: MigrationContext, store: TargetStore, cache: MappingCache, stats: Stats
) -> None:
    """Media phase: import every same-domain attachment of the export."""
    attachments = context.summary.attachments
    domain = context.summary.domain
    interval = context.config.cache_flush_interval
    processed = 0

    for wp_id, info in tqdm(
        attachments.items(), total=len(attachments), desc="Media", disable=None
    ):
        if not is_same_domain(info["url"], domain):
            stats.media_skipped += 1
            log_with_context(
                logging.DEBUG,
                f"Skipping external attachment {info['url']}",
                phase="media",
                wp_id=wp_id,
            )
            continue

        result = import_attachment(info, store, cache, context.config.download_timeout)
        if result.outcome == ItemOutcome.CREATED:
            stats.media_imported += 1
        elif result.outcome == ItemOutcome.MAPPED:
            stats.media_mapped += 1
        else:
            stats.media_failed += 1

        processed += 1
        if processed % interval == 0:
            store.reset_cache()

    log_with_context(
        logging.INFO,
        f"{context.log_prefix}Media: {stats.media_imported} imported, "
        f"{stats.media_mapped} reused, {stats.media_skipped} external, "
        f"{stats.media_failed} failed",
        phase="media",
    )
