"""Boundary interface to the target content store.

The migration engine never talks to a concrete CMS. Everything it needs
(bundle and field introspection, lookups by natural key, entity creation,
file storage) goes through a :class:`TargetStore` implementation supplied
by the host, usually through the ``target_store`` setting of the config
file (``"package.module:factory"``).
"""

from __future__ import annotations

import importlib
import posixpath
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import unquote, urlparse

from wordpress_migrator.constants import DEFAULT_DOWNLOAD_TIMEOUT
from wordpress_migrator.exceptions import ConfigError, ResourceFetchError
from wordpress_migrator.services.file_download import download_file
from wordpress_migrator.types import (
    BundleDescription,
    CatalogEntry,
    CommentRecord,
    FileRef,
    NodeRecord,
)


def filename_from_url(url: str) -> str:
    """Return the decoded last path segment of a URL."""
    return unquote(posixpath.basename(urlparse(url).path))


class TargetStore(ABC):
    """Capabilities the import pipeline consumes from the target store.

    ``create_*`` methods return the new entity id and raise
    :class:`~wordpress_migrator.exceptions.EntityWriteError` (or any other
    exception) on failure; the pipeline isolates failures per item.
    """

    # --- Introspection -----------------------------------------------------

    @abstractmethod
    def list_bundles(self) -> list[BundleDescription]:
        """Content bundles with their field definitions."""

    @abstractmethod
    def list_vocabularies(self) -> list[CatalogEntry]: ...

    @abstractmethod
    def list_text_formats(self) -> list[CatalogEntry]: ...

    @abstractmethod
    def list_comment_types(self) -> list[CatalogEntry]: ...

    @abstractmethod
    def has_capability(self, name: str) -> bool:
        """Whether an optional capability (``media``, ``comment``) is enabled."""

    # --- Users -------------------------------------------------------------

    @abstractmethod
    def find_user(self, email: str | None = None, name: str | None = None) -> int | None: ...

    @abstractmethod
    def create_user(self, name: str, email: str) -> int: ...

    # --- Taxonomy ----------------------------------------------------------

    @abstractmethod
    def find_term(self, name: str, vocabulary: str) -> int | None: ...

    @abstractmethod
    def create_term(self, name: str, vocabulary: str) -> int: ...

    # --- Files and media ---------------------------------------------------

    @abstractmethod
    def store_file(self, filename: str, data: bytes) -> FileRef:
        """Persist downloaded bytes as a managed file."""

    @abstractmethod
    def find_media_by_file(
        self, file_ref: FileRef, bundle: str, source_field: str
    ) -> int | None:
        """Media entity already referencing the stored file, if any."""

    @abstractmethod
    def create_media(
        self, file_ref: FileRef, bundle: str, source_field: str, alt: str
    ) -> int: ...

    # --- Content -----------------------------------------------------------

    @abstractmethod
    def find_existing_node(self, bundle: str, title: str, created: int) -> int | None: ...

    @abstractmethod
    def create_node(self, record: NodeRecord) -> int: ...

    @abstractmethod
    def create_comment(self, record: CommentRecord) -> int: ...

    # --- Concrete helpers --------------------------------------------------

    def find_stored_file(self, filename: str) -> FileRef | None:
        """A file stored by an earlier run under the same name.

        Stores that can tell return it so the download is skipped.
        """
        return None

    def fetch_and_store_file(
        self, url: str, timeout: int = DEFAULT_DOWNLOAD_TIMEOUT
    ) -> FileRef:
        """Download a file and store it, reusing an already stored copy.

        Raises:
            ResourceFetchError: If the download or the storage fails.
        """
        filename = filename_from_url(url)
        if not filename:
            raise ResourceFetchError(url, "URL has no file name")

        existing = self.find_stored_file(filename)
        if existing is not None:
            return existing

        data = download_file(url, timeout=timeout)
        try:
            return self.store_file(filename, data)
        except ResourceFetchError:
            raise
        except Exception as e:
            raise ResourceFetchError(url, f"storage failed: {e}") from e

    def find_comment_field(self, bundle: str) -> str | None:
        """Name of the comment field of a bundle, if it has one."""
        from wordpress_migrator.core.environment import detect_fields

        for description in self.list_bundles():
            if description["id"] == bundle:
                return detect_fields(description["fields"], ()).comment
        return None

    def reset_cache(self) -> None:
        """Drop any result caching the store keeps, to bound memory."""


def load_target_store(factory_path: str | None, options: dict[str, Any]) -> TargetStore:
    """Instantiate the target store from a ``"module:callable"`` path.

    Raises:
        ConfigError: If the path is missing or malformed, the module cannot
            be imported, or the factory does not return a TargetStore.
    """
    if not factory_path:
        raise ConfigError(
            "No target_store configured. Set it to 'package.module:factory' in the config file."
        )
    module_name, _, attribute = factory_path.partition(":")
    if not module_name or not attribute:
        raise ConfigError(
            f"Invalid target_store '{factory_path}' (expected 'package.module:factory')"
        )

    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise ConfigError(f"Cannot load target store '{factory_path}': {e}") from e

    store = factory(**options)
    if not isinstance(store, TargetStore):
        raise ConfigError(
            f"Target store factory '{factory_path}' returned {type(store).__name__}, "
            "not a TargetStore"
        )
    return store
