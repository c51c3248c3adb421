"""Unit test configuration and shared fixtures."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any
from unittest.mock import patch

import pytest

from wordpress_migrator.core.config import ImportConfig
from wordpress_migrator.core.pipeline import prepare_context
from wordpress_migrator.exceptions import EntityWriteError
from wordpress_migrator.services.target_store import TargetStore
from wordpress_migrator.types import FileRef

# ---------------------------------------------------------------------------
# In-memory target store
# ---------------------------------------------------------------------------

ARTICLE_FIELDS = {
    "body": {"type": "text_with_summary"},
    "field_description": {"type": "string_long"},
    "field_image": {"type": "entity_reference", "target_type": "media"},
    "field_comments": {"type": "comment"},
    "field_category": {
        "type": "entity_reference",
        "target_type": "taxonomy_term",
        "target_bundles": ["categories"],
    },
    "field_tags": {
        "type": "entity_reference",
        "target_type": "taxonomy_term",
        "target_bundles": ["tags"],
    },
}

PAGE_FIELDS = {"body": {"type": "text_with_summary"}}


class FakeTargetStore(TargetStore):
    """TargetStore keeping every entity in memory.

    ``fail_on`` names write methods that raise ``EntityWriteError``;
    ``calls`` records every write as ``(method, key)`` tuples.
    """

    def __init__(
        self,
        capabilities: tuple[str, ...] = ("media", "comment"),
        bundles: dict[str, dict[str, Any]] | None = None,
        text_formats: tuple[str, ...] = ("full_html", "plain_text"),
        comment_types: tuple[str, ...] = ("comment",),
        vocabularies: tuple[str, ...] = ("categories", "tags"),
        fail_on: tuple[str, ...] = (),
    ) -> None:
        self.capabilities = set(capabilities)
        self.bundles = (
            bundles
            if bundles is not None
            else {"article": ARTICLE_FIELDS, "page": PAGE_FIELDS}
        )
        self.text_formats = list(text_formats)
        self.comment_types = list(comment_types)
        self.vocabularies = list(vocabularies)
        self.fail_on = set(fail_on)

        self.users: dict[int, tuple[str, str]] = {1: ("admin", "admin@example.com")}
        self.terms: dict[tuple[str, str], int] = {}
        self.files: dict[str, FileRef] = {}
        self.media: dict[int, int] = {}  # file id -> media id
        self.nodes: dict[int, Any] = {}
        self.comments: dict[int, Any] = {}
        self.calls: list[tuple[str, Any]] = []
        self.resets = 0
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _write(self, method: str, key: Any) -> None:
        self.calls.append((method, key))
        if method in self.fail_on:
            raise EntityWriteError(method, str(key), "rejected by fake store")

    def writes(self, method: str) -> list[Any]:
        return [key for name, key in self.calls if name == method]

    # Introspection

    def list_bundles(self):
        return [
            {"id": bundle_id, "label": bundle_id.title(), "fields": fields}
            for bundle_id, fields in self.bundles.items()
        ]

    def list_vocabularies(self):
        return [{"id": v, "label": v.title()} for v in self.vocabularies]

    def list_text_formats(self):
        return [{"id": f, "label": f} for f in self.text_formats]

    def list_comment_types(self):
        return [{"id": c, "label": c.title()} for c in self.comment_types]

    def has_capability(self, name):
        return name in self.capabilities

    # Users

    def find_user(self, email=None, name=None):
        for uid, (user_name, user_email) in self.users.items():
            if (email is not None and user_email == email) or (
                name is not None and user_name == name
            ):
                return uid
        return None

    def create_user(self, name, email):
        self._write("create_user", name)
        uid = self._new_id()
        self.users[uid] = (name, email)
        return uid

    # Taxonomy

    def find_term(self, name, vocabulary):
        return self.terms.get((vocabulary, name))

    def create_term(self, name, vocabulary):
        self._write("create_term", (vocabulary, name))
        tid = self._new_id()
        self.terms[(vocabulary, name)] = tid
        return tid

    # Files and media

    def find_stored_file(self, filename):
        return self.files.get(filename)

    def store_file(self, filename, data):
        self._write("store_file", filename)
        ref = FileRef(self._new_id(), f"public://{filename}", f"/sites/default/files/{filename}")
        self.files[filename] = ref
        return ref

    def find_media_by_file(self, file_ref, bundle, source_field):
        return self.media.get(file_ref.file_id)

    def create_media(self, file_ref, bundle, source_field, alt):
        self._write("create_media", (bundle, alt))
        mid = self._new_id()
        self.media[file_ref.file_id] = mid
        return mid

    # Content

    def find_existing_node(self, bundle, title, created):
        for nid, record in self.nodes.items():
            if (record.bundle, record.title, record.created) == (bundle, title, created):
                return nid
        return None

    def create_node(self, record):
        self._write("create_node", record.title)
        nid = self._new_id()
        self.nodes[nid] = record
        return nid

    def create_comment(self, record):
        self._write("create_comment", record.subject)
        cid = self._new_id()
        self.comments[cid] = record
        return cid

    def reset_cache(self):
        self.resets += 1


@pytest.fixture()
def fake_store():
    """Return an in-memory target store with article/page bundles."""
    return FakeTargetStore()


@pytest.fixture()
def mock_download():
    """Patch the HTTP download used by the target store."""
    with patch(
        "wordpress_migrator.services.target_store.download_file",
        return_value=b"\x89PNG fake image bytes",
    ) as mocked:
        yield mocked


@pytest.fixture()
def import_config(tmp_path):
    """Return a config importing everything into the fake store."""
    return ImportConfig(
        post_bundle="article",
        page_bundle="page",
        category_vocabulary="categories",
        tag_vocabulary="tags",
        comment_type="comment",
        import_media=True,
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture()
def make_context(export_file, import_config, fake_store):
    """Factory fixture building a validated MigrationContext.

    Usage in tests::

        def test_something(make_context):
            context = make_context(dry_run=True)
    """

    def _factory(store=None, path=None, **overrides):
        config = import_config
        if overrides:
            config = dataclasses.replace(import_config, **overrides)
        return prepare_context(path or export_file, config, store or fake_store)

    return _factory


@pytest.fixture(autouse=True)
def _clean_logger():
    """Remove file handlers left on the wordpress_migrator logger by a test."""
    yield
    logger = logging.getLogger("wordpress_migrator")
    for handler in logger.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()
