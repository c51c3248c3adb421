"""
Post and page import for the WordPress content migration.

Items are re-streamed from the export; each published post or page is
turned into a :class:`NodeRecord` (cleaned body with media URLs rewritten,
excerpt, alias, terms, featured image) and handed to the target store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tqdm import tqdm

from wordpress_migrator.constants import (
    ADMIN_USER_ID,
    CAPABILITY_MODERATION,
    CATEGORY_DOMAIN,
    CONTENT_POST_TYPES,
    IMPORTED_STATUS,
    TAG_DOMAIN,
    THUMBNAIL_META_KEY,
)
from wordpress_migrator.core.scanner import XmlStreamScanner
from wordpress_migrator.core.transform import (
    clean_content,
    extract_alias,
    generate_excerpt,
    parse_timestamp,
    rewrite_media_urls,
)
from wordpress_migrator.types import ImportResult, ItemOutcome, NodeRecord, WxrItem
from wordpress_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from wordpress_migrator.core.context import MigrationContext
    from wordpress_migrator.core.environment import DetectedFields
    from wordpress_migrator.core.mapping_cache import MappingCache
    from wordpress_migrator.core.state import Stats
    from wordpress_migrator.services.target_store import TargetStore


def resolve_author(creator: str, context: MigrationContext, cache: MappingCache) -> int:
    """Target uid for an item's ``dc:creator``.

    The creator is usually the author login, sometimes the email; both are
    resolved through the user cache, which is keyed by email.
    """
    if creator in cache.users:
        return cache.users[creator]
    for email, author in context.summary.authors.items():
        if author["login"] == creator:
            return cache.users.get(email, ADMIN_USER_ID)
    return ADMIN_USER_ID


def collect_terms(
    item: WxrItem, fields: DetectedFields, context: MigrationContext, cache: MappingCache
) -> dict[str, list[int]]:
    """Term references of a post, grouped by target field.

    Only terms mapped by the taxonomy phase are referenced.
    """
    config = context.config
    terms: dict[str, list[int]] = {}
    for domain, name in item.categories:
        name = name.strip()
        if domain == CATEGORY_DOMAIN and config.category_vocabulary:
            vocabulary, table = config.category_vocabulary, cache.terms_cat
        elif domain == TAG_DOMAIN and config.tag_vocabulary:
            vocabulary, table = config.tag_vocabulary, cache.terms_tag
        else:
            continue

        tid = table.get(name)
        field_name = fields.taxonomy_field(vocabulary)
        if tid is None or not field_name:
            continue
        if tid not in terms.setdefault(field_name, []):
            terms[field_name].append(tid)
    return terms


def featured_image(
    item: WxrItem, context: MigrationContext, cache: MappingCache
) -> int | None:
    """Media id of the post thumbnail, when the attachment was imported."""
    if context.dry_run:
        return None
    thumbnail_id = (item.meta(THUMBNAIL_META_KEY) or "").strip()
    if not thumbnail_id:
        return None
    attachment = context.summary.attachments.get(thumbnail_id)
    if not attachment:
        return None
    entry = cache.media.get(attachment["url"])
    return entry["target_id"] if entry else None


def build_node_record(
    item: WxrItem,
    bundle: str,
    fields: DetectedFields,
    context: MigrationContext,
    cache: MappingCache,
    stats: Stats,
) -> NodeRecord:
    """Assemble the node record for a published post or page."""
    config = context.config
    created = parse_timestamp(item.post_date)
    changed = parse_timestamp(item.post_modified, fallback=created)

    body = clean_content(item.content)
    body, replaced, domain_replaced = rewrite_media_urls(
        body, cache.media, context.summary.base_url
    )
    stats.media_replaced += replaced
    stats.domains_replaced += domain_replaced

    excerpt = None
    if fields.excerpt:
        excerpt = item.description or generate_excerpt(body)

    record = NodeRecord(
        bundle=bundle,
        title=item.title,
        uid=resolve_author(item.creator, context, cache),
        created=created,
        changed=changed,
        status=config.auto_publish,
        body_field=fields.body,
        body=body,
        text_format=config.text_format,
        excerpt_field=fields.excerpt,
        excerpt=excerpt,
        alias=extract_alias(item.link),
    )
    if CAPABILITY_MODERATION in context.environment.capabilities:
        record.moderation_state = "published" if config.auto_publish else "draft"

    if item.post_type == "post":
        record.terms = collect_terms(item, fields, context, cache)
        media_id = featured_image(item, context, cache) if fields.image else None
        if media_id is not None:
            record.image_field = fields.image
            record.image_media_id = media_id

    return record


def import_item(
    item: WxrItem,
    context: MigrationContext,
    store: TargetStore,
    cache: MappingCache,
    stats: Stats,
) -> ImportResult:
    """Import one post or page, detecting items imported by earlier runs."""
    bundle = context.bundle_for(item.post_type)
    fields = context.fields_for(item.post_type)
    if not bundle or not fields.body:
        return ImportResult(ItemOutcome.SKIPPED)

    try:
        existing = store.find_existing_node(
            bundle, item.title, parse_timestamp(item.post_date)
        )
        if existing is not None:
            cache.nodes[item.post_id] = existing
            return ImportResult(ItemOutcome.DUPLICATE, existing)
        record = build_node_record(item, bundle, fields, context, cache, stats)
        nid = store.create_node(record)
    except Exception as e:
        log_with_context(
            logging.ERROR,
            f"Failed to import {item.post_type} '{item.title}': {e}",
            phase="content",
            wp_id=item.post_id,
        )
        return ImportResult(ItemOutcome.FAILED, error=str(e))

    cache.nodes[item.post_id] = nid
    if record.alias:
        stats.aliases_preserved += 1
    return ImportResult(ItemOutcome.CREATED, nid)


def import_content(
    context: MigrationContext, store: TargetStore, cache: MappingCache, stats: Stats
) -> None:
    """Content phase: stream the export and import published posts and pages."""
    scanner = XmlStreamScanner()
    interval = context.config.cache_flush_interval
    total = context.summary.posts + context.summary.pages
    processed = 0

    with tqdm(total=total, desc="Content", disable=None) as pbar:
        for item in scanner.iter_items(context.export_path):
            if item.status != IMPORTED_STATUS or item.post_type not in CONTENT_POST_TYPES:
                continue
            pbar.update(1)

            result = import_item(item, context, store, cache, stats)
            if result.outcome == ItemOutcome.CREATED:
                if item.post_type == "post":
                    stats.posts_created += 1
                else:
                    stats.pages_created += 1
            elif result.outcome == ItemOutcome.DUPLICATE:
                stats.duplicates_detected += 1
                log_with_context(
                    logging.DEBUG,
                    f"Skipping duplicate {item.post_type} '{item.title}'",
                    phase="content",
                    wp_id=item.post_id,
                    target_id=result.target_id,
                )
            elif result.outcome == ItemOutcome.FAILED:
                stats.nodes_failed += 1

            processed += 1
            if processed % interval == 0:
                store.reset_cache()

    log_with_context(
        logging.INFO,
        f"{context.log_prefix}Content: {stats.posts_created} posts, "
        f"{stats.pages_created} pages, {stats.duplicates_detected} duplicates, "
        f"{stats.nodes_failed} failed",
        phase="content",
    )
