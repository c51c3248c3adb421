"""
Mutable run statistics for the WordPress content migration.

Configuration, the export summary and the target environment are immutable
(see ``MigrationContext``); the counters below and the mapping cache are
the only state a run mutates, and both are owned by the pipeline.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass
class Stats:
    """Counters accumulated over one run and reported at the end."""

    users_created: int = 0
    users_mapped: int = 0
    users_failed: int = 0

    media_imported: int = 0
    media_mapped: int = 0
    media_failed: int = 0
    media_skipped: int = 0
    media_replaced: int = 0
    domains_replaced: int = 0

    terms_created: int = 0
    terms_mapped: int = 0
    terms_failed: int = 0

    posts_created: int = 0
    pages_created: int = 0
    nodes_failed: int = 0
    duplicates_detected: int = 0
    aliases_preserved: int = 0

    comments_created: int = 0
    comments_failed: int = 0
    comments_skipped: int = 0

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        for name, value in asdict(self).items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def as_dict(self) -> dict[str, int]:
        return asdict(self)

    @property
    def nodes_created(self) -> int:
        return self.posts_created + self.pages_created

    @property
    def total_failures(self) -> int:
        return (
            self.users_failed
            + self.media_failed
            + self.terms_failed
            + self.nodes_failed
            + self.comments_failed
        )

    @property
    def has_errors(self) -> bool:
        """Return True if any per-item failure was recorded."""
        return self.total_failures > 0
