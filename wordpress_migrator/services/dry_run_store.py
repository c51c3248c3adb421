"""No-write target store for dry-run mode.

Wraps the real store: introspection and lookups are delegated so that
mappings and duplicate detection behave exactly as in a live run, while
every write is logged and answered with the sentinel id instead of being
performed. Injected by the pipeline when ``dry_run`` is set, which keeps
``if dry_run`` checks out of the import services.
"""

from __future__ import annotations

import logging

from wordpress_migrator.constants import DRY_RUN_FILE_URL, DRY_RUN_SENTINEL_ID
from wordpress_migrator.services.target_store import TargetStore, filename_from_url
from wordpress_migrator.types import (
    BundleDescription,
    CatalogEntry,
    CommentRecord,
    FileRef,
    NodeRecord,
)
from wordpress_migrator.utils.logging import log_with_context


class DryRunTargetStore(TargetStore):
    """Read-through, write-nothing view of a target store."""

    def __init__(self, store: TargetStore) -> None:
        self._store = store
        self.writes_skipped = 0

    def _skip(self, message: str) -> int:
        self.writes_skipped += 1
        log_with_context(logging.DEBUG, f"[DRY RUN] Would {message}")
        return DRY_RUN_SENTINEL_ID

    # --- Delegated reads ---------------------------------------------------

    def list_bundles(self) -> list[BundleDescription]:
        return self._store.list_bundles()

    def list_vocabularies(self) -> list[CatalogEntry]:
        return self._store.list_vocabularies()

    def list_text_formats(self) -> list[CatalogEntry]:
        return self._store.list_text_formats()

    def list_comment_types(self) -> list[CatalogEntry]:
        return self._store.list_comment_types()

    def has_capability(self, name: str) -> bool:
        return self._store.has_capability(name)

    def find_user(self, email: str | None = None, name: str | None = None) -> int | None:
        return self._store.find_user(email=email, name=name)

    def find_term(self, name: str, vocabulary: str) -> int | None:
        return self._store.find_term(name, vocabulary)

    def find_media_by_file(
        self, file_ref: FileRef, bundle: str, source_field: str
    ) -> int | None:
        if file_ref.file_id == DRY_RUN_SENTINEL_ID:
            return None
        return self._store.find_media_by_file(file_ref, bundle, source_field)

    def find_existing_node(self, bundle: str, title: str, created: int) -> int | None:
        return self._store.find_existing_node(bundle, title, created)

    def find_comment_field(self, bundle: str) -> str | None:
        return self._store.find_comment_field(bundle)

    def reset_cache(self) -> None:
        self._store.reset_cache()

    # --- Skipped writes ----------------------------------------------------

    def create_user(self, name: str, email: str) -> int:
        return self._skip(f"create user {name} <{email}>")

    def create_term(self, name: str, vocabulary: str) -> int:
        return self._skip(f"create term '{name}' in {vocabulary}")

    def store_file(self, filename: str, data: bytes) -> FileRef:
        self._skip(f"store file {filename} ({len(data)} bytes)")
        return FileRef(
            file_id=DRY_RUN_SENTINEL_ID, uri=f"dry-run://{filename}", url=DRY_RUN_FILE_URL
        )

    def fetch_and_store_file(self, url: str, timeout: int = 0) -> FileRef:
        filename = filename_from_url(url)
        self._skip(f"download and store {url}")
        return FileRef(
            file_id=DRY_RUN_SENTINEL_ID, uri=f"dry-run://{filename}", url=DRY_RUN_FILE_URL
        )

    def create_media(
        self, file_ref: FileRef, bundle: str, source_field: str, alt: str
    ) -> int:
        return self._skip(f"create {bundle} media '{alt}'")

    def create_node(self, record: NodeRecord) -> int:
        return self._skip(f"create {record.bundle} node '{record.title}'")

    def create_comment(self, record: CommentRecord) -> int:
        return self._skip(f"create comment '{record.subject}' on node {record.node_id}")
