"""
Comment import for the WordPress content migration.

Comments are attached to the nodes created (or found) by the content
phase. Threading is rebuilt from ``wp:comment_parent`` using the ids of
comments created (or found in the cache) earlier in the same pass, so a
reply whose parent comes later in the export is imported without a parent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tqdm import tqdm

from wordpress_migrator.constants import (
    ANONYMOUS_USER_ID,
    APPROVED_COMMENT,
    COMMENT_SUBJECT_MAX_LENGTH,
)
from wordpress_migrator.core.scanner import XmlStreamScanner
from wordpress_migrator.core.transform import parse_timestamp, strip_tags, truncate_text
from wordpress_migrator.types import CommentRecord, ImportResult, ItemOutcome, WxrComment
from wordpress_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from wordpress_migrator.core.context import MigrationContext
    from wordpress_migrator.core.mapping_cache import MappingCache
    from wordpress_migrator.core.state import Stats
    from wordpress_migrator.services.target_store import TargetStore


def comment_subject(content: str) -> str:
    """Short plain-text subject derived from the comment body."""
    text = " ".join(strip_tags(content).split())
    return truncate_text(text, COMMENT_SUBJECT_MAX_LENGTH)


def build_comment_record(
    comment: WxrComment,
    node_id: int,
    field_name: str,
    context: MigrationContext,
    cache: MappingCache,
    thread_map: dict[str, int],
) -> CommentRecord:
    uid = cache.users.get(comment.author_email, ANONYMOUS_USER_ID)
    record = CommentRecord(
        node_id=node_id,
        field_name=field_name,
        comment_type=context.config.comment_type,
        uid=uid,
        created=parse_timestamp(comment.date),
        subject=comment_subject(comment.content),
        body=comment.content,
        text_format=context.comment_format,
        parent_id=thread_map.get(comment.parent_id),
    )
    if uid == ANONYMOUS_USER_ID:
        record.name = comment.author
        record.mail = comment.author_email
        record.homepage = comment.author_url
    return record


def import_comment(
    comment: WxrComment,
    node_id: int,
    field_name: str,
    context: MigrationContext,
    store: TargetStore,
    cache: MappingCache,
    thread_map: dict[str, int],
) -> ImportResult:
    """Import one comment of a post.

    ``thread_map`` holds the target ids of the comments created so far in
    this pass and is updated on success.
    """
    if comment.approved != APPROVED_COMMENT:
        return ImportResult(ItemOutcome.SKIPPED)

    if comment.comment_id and comment.comment_id in cache.comments:
        cid = cache.comments[comment.comment_id]
        thread_map[comment.comment_id] = cid
        return ImportResult(ItemOutcome.DUPLICATE, cid)

    record = build_comment_record(comment, node_id, field_name, context, cache, thread_map)
    try:
        cid = store.create_comment(record)
    except Exception as e:
        log_with_context(
            logging.ERROR,
            f"Failed to import comment {comment.comment_id} on node {node_id}: {e}",
            phase="comments",
            wp_id=comment.comment_id,
        )
        return ImportResult(ItemOutcome.FAILED, error=str(e))

    if comment.comment_id:
        thread_map[comment.comment_id] = cid
        cache.comments[comment.comment_id] = cid
    return ImportResult(ItemOutcome.CREATED, cid)


def import_comments(
    context: MigrationContext, store: TargetStore, cache: MappingCache, stats: Stats
) -> None:
    """Comments phase: attach approved post comments to their imported nodes."""
    bundle = context.config.post_bundle
    field_name = context.fields_for("post").comment
    if not bundle or not field_name:
        log_with_context(
            logging.WARNING,
            f"No comment field found on bundle '{bundle}', skipping comments",
            phase="comments",
        )
        return

    scanner = XmlStreamScanner()
    thread_map: dict[str, int] = {}

    with tqdm(
        total=context.summary.approved_comment_count, desc="Comments", disable=None
    ) as pbar:
        for item in scanner.iter_items(context.export_path):
            if item.post_type != "post" or not item.comments:
                continue
            node_id = cache.nodes.get(item.post_id)
            if node_id is None:
                continue

            for comment in item.comments:
                result = import_comment(
                    comment, node_id, field_name, context, store, cache, thread_map
                )
                if result.outcome == ItemOutcome.SKIPPED:
                    continue
                pbar.update(1)
                if result.outcome == ItemOutcome.CREATED:
                    stats.comments_created += 1
                elif result.outcome == ItemOutcome.DUPLICATE:
                    stats.comments_skipped += 1
                else:
                    stats.comments_failed += 1

    log_with_context(
        logging.INFO,
        f"{context.log_prefix}Comments: {stats.comments_created} created, "
        f"{stats.comments_skipped} already imported, {stats.comments_failed} failed",
        phase="comments",
    )
