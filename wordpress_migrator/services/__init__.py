"""Target store boundary and per-entity import services."""

__all__ = [
    "comment",
    "content",
    "dry_run_store",
    "file_download",
    "media",
    "target_store",
    "taxonomy",
    "user",
]
