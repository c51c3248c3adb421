"""Custom exception hierarchy for the WordPress content migration tool."""

from __future__ import annotations


class MigratorError(Exception):
    """Base exception for all migration-related errors."""


class ConfigError(MigratorError):
    """Raised when configuration is invalid or missing."""


class MalformedInputError(MigratorError):
    """Raised when the WXR export cannot be opened or is not a WordPress export."""


class FatalValidationError(MigratorError):
    """Raised when a prerequisite is missing and the run must stop before any write."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


class ResourceFetchError(MigratorError):
    """Raised when a media file cannot be downloaded or stored."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class EntityWriteError(MigratorError):
    """Raised when the target store rejects the creation of an entity."""

    def __init__(self, kind: str, identifier: str, reason: str) -> None:
        self.kind = kind
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Failed to create {kind} {identifier}: {reason}")
