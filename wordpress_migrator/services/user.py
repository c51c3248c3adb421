"""
User mapping functionality for the WordPress content migration
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tqdm import tqdm

from wordpress_migrator.constants import ADMIN_USER_ID
from wordpress_migrator.types import (
    AuthorInfo,
    ImportResult,
    ItemOutcome,
    UserStrategy,
)
from wordpress_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from wordpress_migrator.core.context import MigrationContext
    from wordpress_migrator.core.mapping_cache import MappingCache
    from wordpress_migrator.core.state import Stats
    from wordpress_migrator.services.target_store import TargetStore


class UsernameAllocator:
    """Hands out free user names, suffixing ``_2``, ``_3``, ... on clashes.

    The counters live for one run only; a later run starts again at ``_2``
    and relies on the store lookup to skip names taken in between.
    """

    def __init__(self, store: TargetStore) -> None:
        self._store = store
        self._counters: dict[str, int] = {}

    def allocate(self, login: str) -> str:
        candidate = login
        while self._store.find_user(name=candidate) is not None:
            counter = self._counters.get(login, 1) + 1
            self._counters[login] = counter
            candidate = f"{login}_{counter}"
        return candidate


def import_user(
    email: str,
    author: AuthorInfo,
    store: TargetStore,
    cache: MappingCache,
    strategy: UserStrategy,
    allocator: UsernameAllocator,
) -> ImportResult:
    """Map one WordPress author to a target user id.

    Never leaves an author unmapped: any failure falls back to the admin.
    """
    if strategy == UserStrategy.MAP_ADMIN:
        cache.users[email] = ADMIN_USER_ID
        return ImportResult(ItemOutcome.MAPPED, ADMIN_USER_ID)

    if email in cache.users:
        return ImportResult(ItemOutcome.MAPPED, cache.users[email])

    try:
        existing = store.find_user(email=email)
        if existing is not None:
            cache.users[email] = existing
            return ImportResult(ItemOutcome.MAPPED, existing)

        name = allocator.allocate(author["login"])
        uid = store.create_user(name, email)
    except Exception as e:
        log_with_context(
            logging.ERROR,
            f"Failed to create user for {email}, mapping to admin: {e}",
            phase="users",
            email=email,
        )
        cache.users[email] = ADMIN_USER_ID
        return ImportResult(ItemOutcome.FAILED, ADMIN_USER_ID, error=str(e))

    cache.users[email] = uid
    log_with_context(
        logging.DEBUG, f"Created user {name} ({email})", phase="users", uid=uid
    )
    return ImportResult(ItemOutcome.CREATED, uid)


def import_users(
    context: MigrationContext, store: TargetStore, cache: MappingCache, stats: Stats
) -> None:
    """Users phase: map every author of the export."""
    strategy = context.config.user_strategy
    allocator = UsernameAllocator(store)

    authors = context.summary.authors
    for email, author in tqdm(authors.items(), total=len(authors), desc="Users", disable=None):
        result = import_user(email, author, store, cache, strategy, allocator)
        if result.outcome == ItemOutcome.CREATED:
            stats.users_created += 1
        elif result.outcome == ItemOutcome.MAPPED:
            stats.users_mapped += 1
        else:
            stats.users_failed += 1

    log_with_context(
        logging.INFO,
        f"{context.log_prefix}Users: {stats.users_created} created, "
        f"{stats.users_mapped} mapped, {stats.users_failed} failed",
        phase="users",
    )
