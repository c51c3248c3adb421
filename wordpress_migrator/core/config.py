"""
Configuration module for the WordPress content migration tool.

This module provides functions for loading the import configuration from
YAML files and creating a default configuration. The configuration holds
the operator's selections (target bundles, vocabularies, text formats,
user strategy) and is immutable once the pipeline starts.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from wordpress_migrator.constants import (
    DEFAULT_CACHE_FLUSH_INTERVAL,
    DEFAULT_DATA_DIR,
    DEFAULT_DOWNLOAD_TIMEOUT,
    DEFAULT_TEXT_FORMAT,
)
from wordpress_migrator.exceptions import ConfigError
from wordpress_migrator.types import UserStrategy
from wordpress_migrator.utils.logging import log_with_context


@dataclass(frozen=True)
class ImportConfig:
    """Typed configuration for an import run.

    Every selection is optional: a missing bundle or vocabulary means the
    corresponding entities are not imported.
    """

    # Target store factory, as "package.module:callable"
    target_store: str | None = None
    target_store_options: dict[str, Any] = field(default_factory=dict)

    # Text formats
    text_format: str = DEFAULT_TEXT_FORMAT
    comment_format: str | None = None

    # Destinations
    post_bundle: str | None = None
    page_bundle: str | None = None
    category_vocabulary: str | None = None
    tag_vocabulary: str | None = None
    comment_type: str | None = None

    # Behaviour
    import_media: bool = False
    user_strategy: UserStrategy = UserStrategy.MAP_ADMIN
    auto_publish: bool = False
    dry_run: bool = False

    # Runtime
    data_dir: str = DEFAULT_DATA_DIR
    download_timeout: int = DEFAULT_DOWNLOAD_TIMEOUT
    cache_flush_interval: int = DEFAULT_CACHE_FLUSH_INTERVAL
    skip_unavailable: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImportConfig:
        """Create an ImportConfig from a raw config dictionary.

        Raises:
            ConfigError: If a value has the wrong shape.
        """
        strategy = data.get("user_strategy", UserStrategy.MAP_ADMIN.value)
        try:
            user_strategy = UserStrategy(strategy)
        except ValueError as e:
            allowed = ", ".join(s.value for s in UserStrategy)
            raise ConfigError(
                f"Invalid user_strategy '{strategy}' (expected one of: {allowed})"
            ) from e

        options = data.get("target_store_options") or {}
        if not isinstance(options, dict):
            raise ConfigError("target_store_options must be a mapping")

        try:
            download_timeout = int(data.get("download_timeout", DEFAULT_DOWNLOAD_TIMEOUT))
            flush_interval = int(
                data.get("cache_flush_interval", DEFAULT_CACHE_FLUSH_INTERVAL)
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e
        if download_timeout <= 0 or flush_interval <= 0:
            raise ConfigError(
                "download_timeout and cache_flush_interval must be positive"
            )

        return cls(
            target_store=data.get("target_store"),
            target_store_options=options,
            text_format=data.get("text_format") or DEFAULT_TEXT_FORMAT,
            comment_format=data.get("comment_format"),
            post_bundle=data.get("post_bundle"),
            page_bundle=data.get("page_bundle"),
            category_vocabulary=data.get("category_vocabulary"),
            tag_vocabulary=data.get("tag_vocabulary"),
            comment_type=data.get("comment_type"),
            import_media=bool(data.get("import_media", False)),
            user_strategy=user_strategy,
            auto_publish=bool(data.get("auto_publish", False)),
            dry_run=bool(data.get("dry_run", False)),
            data_dir=data.get("data_dir") or DEFAULT_DATA_DIR,
            download_timeout=download_timeout,
            cache_flush_interval=flush_interval,
            skip_unavailable=tuple(data.get("skip_unavailable") or ()),
        )

    def with_run_mode(
        self, dry_run: bool, auto_publish: bool | None = None
    ) -> ImportConfig:
        """Return a copy with the run mode chosen at the confirmation step."""
        return dataclasses.replace(
            self,
            dry_run=dry_run,
            auto_publish=self.auto_publish if auto_publish is None else auto_publish,
        )


def load_config(config_path: Path) -> ImportConfig:
    """
    Load configuration from YAML file and apply default values.

    If the file doesn't exist, a warning is logged and default settings are
    used. A file that exists but cannot be parsed is an error, since running
    with defaults would silently import into the wrong destinations.

    Args:
        config_path: Path to the config YAML file

    Returns:
        ImportConfig with all necessary defaults applied

    Raises:
        ConfigError: If the file is unreadable, not a mapping, or invalid.
    """
    raw: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Failed to load config file {config_path}: {e}") from e

        # Handle None result from empty file
        if loaded_config is not None:
            if not isinstance(loaded_config, dict):
                raise ConfigError(f"Config file {config_path} must contain a mapping")
            raw = loaded_config
        log_with_context(logging.INFO, f"Loaded configuration from {config_path}")
    else:
        log_with_context(
            logging.WARNING,
            f"Config file {config_path} not found, using default settings",
        )

    return ImportConfig.from_dict(raw)


def create_default_config(output_path: Path) -> bool:
    """
    Create a default configuration file with recommended settings.

    The function will not overwrite an existing configuration file.

    Args:
        output_path: Path where the default config should be saved

    Returns:
        True if the config file was created successfully, False otherwise
    """
    if output_path.exists():
        log_with_context(
            logging.WARNING,
            f"Config file {output_path} already exists, not overwriting",
        )
        return False

    default_config = {
        "target_store": "mysite.migration:create_store",
        "target_store_options": {},
        "text_format": "full_html",
        "comment_format": "plain_text",
        "post_bundle": "article",
        "page_bundle": "page",
        "category_vocabulary": "categories",
        "tag_vocabulary": "tags",
        "comment_type": "comment",
        "import_media": True,
        "user_strategy": UserStrategy.MAP_ADMIN.value,
        "auto_publish": False,
        "data_dir": DEFAULT_DATA_DIR,
        "download_timeout": DEFAULT_DOWNLOAD_TIMEOUT,
        "cache_flush_interval": DEFAULT_CACHE_FLUSH_INTERVAL,
        "skip_unavailable": [],
    }

    try:
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)
        log_with_context(logging.INFO, f"Created default config file at {output_path}")
        return True
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to create default config file: {e}")
        return False
