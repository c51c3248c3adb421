"""Unit tests for the dry-run target store wrapper."""

from __future__ import annotations

import pytest

from wordpress_migrator.constants import DRY_RUN_FILE_URL, DRY_RUN_SENTINEL_ID
from wordpress_migrator.services.dry_run_store import DryRunTargetStore
from wordpress_migrator.types import CommentRecord, FileRef, NodeRecord


@pytest.fixture()
def dry_store(fake_store):
    return DryRunTargetStore(fake_store)


class TestDelegatedReads:
    def test_introspection_passes_through(self, dry_store, fake_store):
        assert dry_store.list_bundles() == fake_store.list_bundles()
        assert dry_store.list_vocabularies() == fake_store.list_vocabularies()
        assert dry_store.has_capability("media") is True
        assert dry_store.has_capability("content_moderation") is False

    def test_lookups_see_existing_entities(self, dry_store, fake_store):
        tid = fake_store.create_term("News", "categories")
        assert dry_store.find_term("News", "categories") == tid
        assert dry_store.find_user(email="admin@example.com") == 1

    def test_media_lookup_for_sentinel_file(self, dry_store):
        ref = FileRef(DRY_RUN_SENTINEL_ID, "dry-run://a.jpg", DRY_RUN_FILE_URL)
        assert dry_store.find_media_by_file(ref, "image", "field_media_image") is None

    def test_reset_cache_delegated(self, dry_store, fake_store):
        dry_store.reset_cache()
        assert fake_store.resets == 1


class TestSkippedWrites:
    def test_creates_return_sentinel(self, dry_store, fake_store):
        node = NodeRecord(
            bundle="article", title="T", uid=1, created=0, changed=0,
            status=True, body_field="body", body="", text_format="full_html",
        )
        comment = CommentRecord(
            node_id=5, field_name="field_comments", comment_type="comment",
            uid=0, created=0, subject="Hi", body="Hi", text_format="plain_text",
        )

        assert dry_store.create_user("carol", "carol@example.com") == DRY_RUN_SENTINEL_ID
        assert dry_store.create_term("News", "categories") == DRY_RUN_SENTINEL_ID
        assert dry_store.create_node(node) == DRY_RUN_SENTINEL_ID
        assert dry_store.create_comment(comment) == DRY_RUN_SENTINEL_ID
        assert dry_store.writes_skipped == 4
        assert fake_store.calls == []

    def test_fetch_never_downloads(self, dry_store, fake_store, mock_download):
        ref = dry_store.fetch_and_store_file("https://old.example.com/a%20b.jpg")

        assert ref.file_id == DRY_RUN_SENTINEL_ID
        assert ref.uri == "dry-run://a b.jpg"
        assert ref.url == DRY_RUN_FILE_URL
        mock_download.assert_not_called()
        assert fake_store.files == {}
