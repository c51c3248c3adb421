"""Streaming reader for WordPress eXtended RSS (WXR) export files.

The export is never loaded as a whole: ``lxml.etree.iterparse`` walks the
document forward, each ``item`` and ``wp:author`` subtree is materialized,
converted into plain Python records and then cleared together with every
sibling that precedes it. Peak memory therefore depends on the largest
single item, not on the size of the file.

The summary scan and each import phase open the file independently, which
is safe because the export is treated as immutable for the whole run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator
from urllib.parse import urlparse

from lxml import etree

from wordpress_migrator.constants import (
    APPROVED_COMMENT,
    ATTACHMENT_ALT_META_KEY,
    CATEGORY_DOMAIN,
    CONTENT_NAMESPACE,
    COUNTED_STATUSES,
    DC_NAMESPACE,
    TAG_DOMAIN,
    WP_NAMESPACE_PREFIX,
)
from wordpress_migrator.exceptions import MalformedInputError
from wordpress_migrator.types import AttachmentInfo, AuthorInfo, WxrComment, WxrItem
from wordpress_migrator.utils.logging import log_with_context


@dataclass(frozen=True)
class XmlSummary:
    """What the export contains, built once by the summary scan."""

    domain: str | None
    base_url: str | None
    authors: dict[str, AuthorInfo]
    attachments: dict[str, AttachmentInfo]
    posts: int
    pages: int
    categories: tuple[str, ...]
    tags: tuple[str, ...]
    approved_comment_count: int


@dataclass(frozen=True)
class Requirements:
    """Which pipeline phases the export calls for."""

    needs_users: bool = False
    needs_media: bool = False
    needs_taxonomy: bool = False
    needs_comments: bool = False

    @classmethod
    def from_summary(cls, summary: XmlSummary) -> Requirements:
        return cls(
            needs_users=len(summary.authors) > 0,
            needs_media=len(summary.attachments) > 0,
            needs_taxonomy=(len(summary.categories) + len(summary.tags)) > 0,
            needs_comments=summary.approved_comment_count > 0,
        )


# ---------------------------------------------------------------------------
# Element helpers
# ---------------------------------------------------------------------------


def _ns_kind(namespace: str | None) -> str:
    """Classify a namespace URI into the short prefix WXR uses for it."""
    if not namespace:
        return ""
    if namespace == CONTENT_NAMESPACE:
        return "content"
    if namespace == DC_NAMESPACE:
        return "dc"
    if namespace.startswith(WP_NAMESPACE_PREFIX):
        # excerpt:encoded lives under http://wordpress.org/export/1.2/excerpt/
        return "excerpt" if namespace.rstrip("/").endswith("excerpt") else "wp"
    return "other"


def _key(elem: etree._Element) -> tuple[str, str] | None:
    if not isinstance(elem.tag, str):
        return None  # comments and processing instructions
    qname = etree.QName(elem)
    return _ns_kind(qname.namespace), qname.localname


def _text(elem: etree._Element) -> str:
    return elem.text or ""


def _is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _subtree_size(elem: etree._Element) -> int:
    return sum(1 for _ in elem.iter())


def _release(elem: etree._Element) -> None:
    """Drop a processed element and every sibling parsed before it."""
    elem.clear(keep_tail=False)
    parent = elem.getparent()
    if parent is None:
        return
    while elem.getprevious() is not None:
        del parent[0]


def _parse_comment(elem: etree._Element) -> WxrComment:
    values: dict[str, str] = {}
    for child in elem:
        key = _key(child)
        if key and key[0] == "wp":
            values[key[1]] = _text(child)
    return WxrComment(
        comment_id=values.get("comment_id", "").strip(),
        parent_id=values.get("comment_parent", "0").strip() or "0",
        author=values.get("comment_author", ""),
        author_email=values.get("comment_author_email", "").strip(),
        author_url=values.get("comment_author_url", "").strip(),
        date=values.get("comment_date", "").strip(),
        content=values.get("comment_content", ""),
        approved=values.get("comment_approved", "").strip(),
    )


def parse_item(elem: etree._Element) -> WxrItem:
    """Convert one ``item`` element into a detached :class:`WxrItem`."""
    fields: dict[tuple[str, str], str] = {}
    categories: list[tuple[str, str]] = []
    postmeta: dict[str, str] = {}
    comments: list[WxrComment] = []

    for child in elem:
        key = _key(child)
        if key is None:
            continue
        kind, name = key
        if kind == "" and name == "category":
            categories.append((child.get("domain", ""), _text(child)))
        elif kind == "wp" and name == "postmeta":
            meta_key = meta_value = None
            for meta in child:
                meta_child = _key(meta)
                if meta_child == ("wp", "meta_key"):
                    meta_key = _text(meta)
                elif meta_child == ("wp", "meta_value"):
                    meta_value = _text(meta)
            # first occurrence wins, like a single-valued postmeta lookup
            if meta_key is not None and meta_key not in postmeta:
                postmeta[meta_key] = meta_value or ""
        elif kind == "wp" and name == "comment":
            comments.append(_parse_comment(child))
        else:
            fields.setdefault(key, _text(child))

    return WxrItem(
        post_id=fields.get(("wp", "post_id"), "").strip(),
        post_type=fields.get(("wp", "post_type"), "").strip(),
        status=fields.get(("wp", "status"), "").strip(),
        title=fields.get(("", "title"), ""),
        link=fields.get(("", "link"), "").strip(),
        creator=fields.get(("dc", "creator"), "").strip(),
        content=fields.get(("content", "encoded"), ""),
        description=fields.get(("", "description"), "").strip(),
        post_date=fields.get(("wp", "post_date"), "").strip(),
        post_modified=fields.get(("wp", "post_modified"), "").strip(),
        attachment_url=fields.get(("wp", "attachment_url"), "").strip(),
        categories=categories,
        postmeta=postmeta,
        comments=comments,
    )


def _parse_author(elem: etree._Element) -> tuple[str, AuthorInfo] | None:
    values: dict[str, str] = {}
    for child in elem:
        key = _key(child)
        if key and key[0] == "wp":
            values[key[1]] = _text(child).strip()
    email = values.get("author_email", "")
    if not email:
        return None
    return email, AuthorInfo(
        login=values.get("author_login") or email.split("@")[0],
        display_name=values.get("author_display_name") or email,
    )


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


class XmlStreamScanner:
    """Forward-only reader over a WXR export.

    ``peak_item_size`` (elements in the largest item subtree) and
    ``peak_retained`` (elements kept under ``channel`` after an item has
    been released) are recorded on every pass so memory bounds can be
    checked.
    """

    def __init__(self) -> None:
        self.peak_item_size = 0
        self.peak_retained = 0

    def _events(self, path: Path) -> Iterator[tuple[str, etree._Element]]:
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise MalformedInputError(f"Cannot open export file {path}: {e}") from e

        with handle:
            context = etree.iterparse(
                handle,
                events=("start", "end"),
                huge_tree=True,
                resolve_entities=False,
                remove_comments=True,
            )
            try:
                yield from context
            except etree.XMLSyntaxError as e:
                raise MalformedInputError(f"Export file {path} is not valid XML: {e}") from e

    def _track(self, elem: etree._Element) -> None:
        size = _subtree_size(elem)
        if size > self.peak_item_size:
            self.peak_item_size = size

    def _track_retained(self, elem: etree._Element) -> None:
        parent = elem.getparent()
        if parent is not None and len(parent) > self.peak_retained:
            self.peak_retained = len(parent)

    def scan(self, path: Path | str) -> XmlSummary:
        """Scan the export once and summarize its content.

        Raises:
            MalformedInputError: If the file cannot be opened or parsed, or
                carries no WordPress export markers.
        """
        path = Path(path)
        domain: str | None = None
        base_url: str | None = None
        authors: dict[str, AuthorInfo] = {}
        attachments: dict[str, AttachmentInfo] = {}
        categories: dict[str, None] = {}
        tags: dict[str, None] = {}
        posts = pages = approved = 0

        saw_wp_namespace = False
        saw_channel = False
        item_depth = 0

        for event, elem in self._events(path):
            key = _key(elem)
            if key is None:
                continue

            if event == "start":
                if key == ("", "item"):
                    item_depth += 1
                elif key == ("", "channel"):
                    saw_channel = True
                if not saw_wp_namespace and any(
                    ns and ns.startswith(WP_NAMESPACE_PREFIX)
                    for ns in elem.nsmap.values()
                ):
                    saw_wp_namespace = True
                continue

            if key == ("", "link") and item_depth == 0 and base_url is None:
                url = _text(elem).strip()
                if _is_valid_url(url):
                    base_url = url.rstrip("/")
                    domain = urlparse(url).hostname

            elif key == ("wp", "author") and item_depth == 0:
                author = _parse_author(elem)
                if author and author[0] not in authors:
                    authors[author[0]] = author[1]
                _release(elem)

            elif key == ("", "item"):
                item_depth -= 1
                self._track(elem)
                item = parse_item(elem)
                _release(elem)
                self._track_retained(elem)

                if item.status not in COUNTED_STATUSES:
                    continue

                if item.post_type == "post":
                    posts += 1
                    for cat_domain, name in item.categories:
                        if cat_domain == CATEGORY_DOMAIN:
                            categories.setdefault(name, None)
                        elif cat_domain == TAG_DOMAIN:
                            tags.setdefault(name, None)
                    approved += sum(
                        1 for c in item.comments if c.approved == APPROVED_COMMENT
                    )
                elif item.post_type == "page":
                    pages += 1
                elif item.post_type == "attachment":
                    if item.post_id and item.attachment_url:
                        attachments[item.post_id] = AttachmentInfo(
                            url=item.attachment_url,
                            alt=item.meta(ATTACHMENT_ALT_META_KEY),
                            title=item.title,
                        )

        if not (saw_channel and saw_wp_namespace):
            raise MalformedInputError(
                f"{path} does not look like a WordPress export (no WXR markers found)"
            )

        summary = XmlSummary(
            domain=domain,
            base_url=base_url,
            authors=authors,
            attachments=attachments,
            posts=posts,
            pages=pages,
            categories=tuple(categories),
            tags=tuple(tags),
            approved_comment_count=approved,
        )
        log_with_context(
            logging.INFO,
            f"XML analyzed: {posts} posts, {pages} pages, {len(attachments)} attachments, "
            f"{len(authors)} authors, {approved} approved comments",
            domain=domain,
        )
        return summary

    def iter_items(self, path: Path | str) -> Iterator[WxrItem]:
        """Yield every item of the export in document order, one at a time."""
        for event, elem in self._events(Path(path)):
            if event != "end" or _key(elem) != ("", "item"):
                continue
            self._track(elem)
            item = parse_item(elem)
            _release(elem)
            self._track_retained(elem)
            yield item


def scan(path: Path | str) -> XmlSummary:
    """Scan an export file and return its summary."""
    return XmlStreamScanner().scan(path)


def discover_export_files(directory: Path | str) -> list[Path]:
    """Return the WXR candidates (``*.xml``) found directly in a directory."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob("*.xml") if p.is_file())
