"""Entity mapping cache persistence for resumable, multi-pass imports.

The cache maps WordPress identifiers to target store ids. It is the only
resume mechanism: items mapped before an interruption are reused on the
next run, anything missing is simply imported again.
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any

from wordpress_migrator.constants import ARCHIVE_TIMESTAMP_FORMAT
from wordpress_migrator.types import MediaEntry
from wordpress_migrator.utils.logging import log_with_context


@dataclass
class MappingCache:
    """WordPress key -> target id tables.

    JSON object keys are strings, so numeric WordPress ids (posts,
    comments) are stored as strings too.
    """

    users: dict[str, int] = field(default_factory=dict)  # email -> uid
    media: dict[str, MediaEntry] = field(default_factory=dict)  # source url -> entry
    terms_cat: dict[str, int] = field(default_factory=dict)  # name -> tid
    terms_tag: dict[str, int] = field(default_factory=dict)  # name -> tid
    nodes: dict[str, int] = field(default_factory=dict)  # wp post id -> nid
    comments: dict[str, int] = field(default_factory=dict)  # wp comment id -> cid

    @classmethod
    def table_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def merge(self, data: dict[str, Any]) -> None:
        """Merge persisted tables into this cache.

        Known tables are merged key by key with the incoming values winning;
        tables absent from ``data`` are left untouched and unknown ones are
        ignored.
        """
        for name in self.table_names():
            incoming = data.get(name)
            if isinstance(incoming, dict):
                getattr(self, name).update(incoming)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def total_entries(self) -> int:
        return sum(len(getattr(self, name)) for name in self.table_names())


def load_cache(path: Path) -> MappingCache:
    """Load the mapping cache, returning an empty one if absent or corrupt."""
    cache = MappingCache()
    if not path.exists():
        return cache
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        log_with_context(logging.WARNING, f"Failed to read mapping cache {path}: {e}")
        return cache

    if not isinstance(raw, dict):
        log_with_context(
            logging.WARNING,
            f"Mapping cache {path} has invalid format, ignoring",
        )
        return cache

    cache.merge(raw)
    log_with_context(
        logging.INFO,
        f"Mapping cache loaded from {path} ({cache.total_entries} entries)",
    )
    return cache


def save_cache(cache: MappingCache, path: Path, dry_run: bool = False) -> bool:
    """Atomically save the cache to disk (write .tmp + rename).

    Dry runs never persist: their ids are sentinels, not real target ids.

    Returns:
        True if the file was written.

    Raises:
        OSError: If the file cannot be written.
    """
    if dry_run:
        log_with_context(logging.INFO, "[DRY RUN] Mapping cache not saved")
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        tmp.write_text(
            json.dumps(cache.to_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        tmp.replace(path)
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to write mapping cache {path}: {e}")
        raise

    log_with_context(logging.INFO, f"Mapping cache saved to {path}")
    return True


def archive_cache(path: Path, archive_dir: Path) -> Path | None:
    """Move the cache file aside with a timestamped name.

    An existing archive is never overwritten: a numeric suffix is added
    when the timestamped name is already taken.

    Returns:
        The archive path, or None when there was no cache to archive.
    """
    if not path.exists():
        return None

    archive_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime(ARCHIVE_TIMESTAMP_FORMAT)
    destination = archive_dir / f"cache_{stamp}.json"
    counter = 1
    while destination.exists():
        counter += 1
        destination = archive_dir / f"cache_{stamp}_{counter}.json"

    shutil.move(str(path), str(destination))
    log_with_context(logging.INFO, f"Mapping cache archived to {destination}")
    return destination
