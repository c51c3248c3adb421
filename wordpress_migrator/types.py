"""Shared type definitions for the WordPress content migration tool.

Provides TypedDicts for the structured data flowing through the migration
pipeline: WXR export shapes, target store introspection shapes, and the
records handed to the target store for creation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict

# ---------------------------------------------------------------------------
# WXR export types
# ---------------------------------------------------------------------------


class AuthorInfo(TypedDict):
    """An author collected from a ``wp:author`` element."""

    login: str
    display_name: str


class AttachmentInfo(TypedDict):
    """An attachment item collected during the summary scan."""

    url: str
    alt: str | None
    title: str


@dataclass
class WxrComment:
    """A single ``wp:comment`` entry of a post."""

    comment_id: str
    parent_id: str
    author: str
    author_email: str
    author_url: str
    date: str
    content: str
    approved: str


@dataclass
class WxrItem:
    """One ``item`` element of the export, detached from the document tree."""

    post_id: str
    post_type: str
    status: str
    title: str
    link: str
    creator: str
    content: str
    description: str
    post_date: str
    post_modified: str
    attachment_url: str = ""
    categories: list[tuple[str, str]] = field(default_factory=list)  # (domain, name)
    postmeta: dict[str, str] = field(default_factory=dict)
    comments: list[WxrComment] = field(default_factory=list)

    def meta(self, key: str) -> str | None:
        """Return a postmeta value, or None when the key is absent."""
        return self.postmeta.get(key)


# ---------------------------------------------------------------------------
# Target store types
# ---------------------------------------------------------------------------


class FieldDefinition(TypedDict, total=False):
    """A field definition reported by the target store for a bundle."""

    type: str
    target_type: str
    target_bundles: list[str]


class BundleDescription(TypedDict):
    """A bundle as reported by ``TargetStore.list_bundles``."""

    id: str
    label: str
    fields: dict[str, FieldDefinition]


class CatalogEntry(TypedDict):
    """A vocabulary, text format or comment type reported by the store."""

    id: str
    label: str


class MediaEntry(TypedDict):
    """A mapping-cache entry for an imported media file."""

    target_id: int
    target_url: str | None
    alt: str


@dataclass(frozen=True)
class FileRef:
    """A file stored by the target store, ready to be wrapped in a media entity."""

    file_id: int
    uri: str
    url: str | None = None


@dataclass
class NodeRecord:
    """Everything the target store needs to create a content node."""

    bundle: str
    title: str
    uid: int
    created: int
    changed: int
    status: bool
    body_field: str
    body: str
    text_format: str
    excerpt_field: str | None = None
    excerpt: str | None = None
    alias: str | None = None
    terms: dict[str, list[int]] = field(default_factory=dict)  # field -> term ids
    image_field: str | None = None
    image_media_id: int | None = None
    moderation_state: str | None = None  # only on stores with content moderation


@dataclass
class CommentRecord:
    """Everything the target store needs to create a comment."""

    node_id: int
    field_name: str
    comment_type: str
    uid: int
    created: int
    subject: str
    body: str
    text_format: str
    parent_id: int | None = None
    name: str | None = None
    mail: str | None = None
    homepage: str | None = None


# ---------------------------------------------------------------------------
# Outcome types
# ---------------------------------------------------------------------------


class UserStrategy(str, Enum):
    """How WordPress authors are represented in the target store."""

    MAP_ADMIN = "map_admin"
    CREATE_USERS = "create_users"


class ItemOutcome(str, Enum):
    """Result of importing a single entity.

    ``DUPLICATE`` is a skip outcome distinct from success or failure, so
    re-runs are visibly idempotent.
    """

    CREATED = "CREATED"
    MAPPED = "MAPPED"
    DUPLICATE = "DUPLICATE"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class ConfirmOutcome(str, Enum):
    """The operator's answer at the confirmation step."""

    LIVE = "live"
    DRY_RUN = "dry_run"
    CANCEL = "cancel"


@dataclass
class ImportResult:
    """Structured result of importing one entity.

    ``target_id`` is set for CREATED, MAPPED and DUPLICATE outcomes.
    """

    outcome: ItemOutcome
    target_id: int | None = None
    error: str | None = None
