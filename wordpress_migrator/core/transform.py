"""Content transformation for imported WordPress posts.

Everything here is a pure function: the only inputs are the arguments,
lookup tables included, and nothing touches the target store.
"""

from __future__ import annotations

import posixpath
import re
import time
import warnings
from datetime import datetime, timezone
from typing import Any, Mapping
from urllib.parse import urlparse

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from wordpress_migrator.constants import (
    ALIAS_PATTERN,
    ELLIPSIS,
    EMBEDDABLE_TAGS,
    EXCERPT_MAX_LENGTH,
    RESERVED_ALIAS_PREFIXES,
    WXR_DATE_FORMAT,
)

# Comment bodies often consist of a bare URL
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

_BLOCK_COMMENT = re.compile(r"<!--\s*/?wp:.*?-->", re.S)
_CLASS_ATTR = re.compile(
    r"""<([a-z0-9]+)([^>]*?)\s+class=["'][^"']*["']([^>]*?)>""", re.I
)
_DATA_ATTR = re.compile(
    r"""<([a-z0-9]+)([^>]*?)\s+data-[a-z0-9\-]+=["'][^"']*["']([^>]*?)>""", re.I
)
_BLANK_TAG_SPACE = re.compile(r"<([a-z0-9]+)\s+>", re.I)
_EMPTY_TAG = re.compile(
    r"<(?!(?:" + "|".join(EMBEDDABLE_TAGS) + r")\b)([a-z0-9]+)(?![^>]*\s+id=)"
    r"(?:\s[^>]*)?>(?:\s|&nbsp;)*</\1>",
    re.I | re.S,
)
_FILENAME = re.compile(r"^(.+?)(\.[^.]+)$")
_WHITESPACE = re.compile(r"\s+")
_ALIAS = re.compile(ALIAS_PATTERN)
_TRAILING_PUNCTUATION = " \t\n.,;:!?-"


def _strip_attributes(content: str) -> str:
    content = _CLASS_ATTR.sub(r"<\1\2\3>", content)
    content = _DATA_ATTR.sub(r"<\1\2\3>", content)
    return _BLANK_TAG_SPACE.sub(r"<\1>", content)


def clean_content(content: str) -> str:
    """Remove block-editor markup and empty wrappers from post HTML.

    Block comments go first. Then ``class``/``data-*`` stripping and
    empty-element removal alternate until the markup stops changing; every
    pass that changes anything makes the string shorter, so the loop ends.
    Embeds (iframe, script, video, audio, object, embed) and elements with
    an ``id`` are never removed, even when empty.
    """
    if not content:
        return content

    content = _BLOCK_COMMENT.sub("", content)

    previous = None
    while content != previous:
        previous = content
        content = _strip_attributes(content)
        content = _EMPTY_TAG.sub("", content)

    return content.strip()


def rewrite_media_urls(
    content: str, media_map: Mapping[str, Mapping[str, Any]], base_url: str | None
) -> tuple[str, int, int]:
    """Point media references at their imported copies.

    For every source URL with a known target URL the exact URL is replaced,
    then resized variants in the same directory (``name-300x200.jpg``) are
    rewritten to the canonical target. Finally any remaining occurrence of
    the old site's base URL is stripped, leaving domain-relative links.

    Returns:
        The rewritten HTML, the number of media replacements and the number
        of base URL occurrences removed.
    """
    replaced = 0
    domain_replaced = 0

    if content and media_map:
        for old_url, entry in media_map.items():
            new_url = entry.get("target_url")
            if not new_url:
                continue

            old_path = urlparse(old_url).path
            match = _FILENAME.match(posixpath.basename(old_path))
            if not match:
                continue
            stem, ext = match.groups()

            if old_url in content:
                content = content.replace(old_url, new_url)
                replaced += 1

            directory = posixpath.dirname(old_path).rstrip("/")
            resized = re.compile(
                re.escape(directory) + "/" + re.escape(stem) + r"-\d+x\d+" + re.escape(ext)
            )
            content, count = resized.subn(lambda _m: new_url, content)
            replaced += count

    if content and base_url:
        domain_replaced = content.count(base_url)
        if domain_replaced:
            content = content.replace(base_url, "")

    return content, replaced, domain_replaced


def strip_tags(content: str) -> str:
    """Return the text of an HTML fragment with entities decoded."""
    if not content:
        return ""
    return BeautifulSoup(content, "html.parser").get_text()


def truncate_text(text: str, max_length: int) -> str:
    """Shorten text at a word boundary, appending an ellipsis when cut.

    The result, ellipsis included, never exceeds ``max_length``. A single
    word longer than the limit is the only case cut mid-word.
    """
    if len(text) <= max_length:
        return text

    limit = max_length - len(ELLIPSIS)
    if limit <= 0:
        return ELLIPSIS[:max_length]

    if text[limit].isspace():
        truncated = text[:limit]
    else:
        boundary = max(text.rfind(" ", 0, limit), text.rfind("\n", 0, limit))
        truncated = text[:boundary] if boundary > 0 else text[:limit]

    return truncated.rstrip(_TRAILING_PUNCTUATION) + ELLIPSIS


def generate_excerpt(content: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """Build a plain-text excerpt from post HTML."""
    text = _WHITESPACE.sub(" ", strip_tags(content)).strip()
    return truncate_text(text, max_length)


def extract_alias(url: str | None) -> str | None:
    """Derive a path alias from a WordPress permalink.

    >>> extract_alias("https://old.example.com/my-post/")
    '/my-post'
    >>> extract_alias("https://old.example.com/admin/secret") is None
    True
    """
    if not url:
        return None
    path = urlparse(url).path
    if not path or path == "/":
        return None
    path = "/" + path.strip("/")

    if not _ALIAS.match(path):
        return None
    if path.startswith(RESERVED_ALIAS_PREFIXES):
        return None
    return path


def parse_timestamp(value: str, fallback: int | None = None) -> int:
    """Convert an export date (``2024-01-31 09:15:00``) to a Unix timestamp.

    Dates are read as UTC. Unparseable or zero dates give ``fallback``, or
    the current time when no fallback is passed.
    """
    try:
        parsed = datetime.strptime(value.strip(), WXR_DATE_FORMAT)
    except (ValueError, AttributeError):
        return fallback if fallback is not None else int(time.time())
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())
