"""Core migration logic: export scanning, transformation and orchestration."""

__all__ = [
    "config",
    "context",
    "environment",
    "mapping_cache",
    "migration_logging",
    "pipeline",
    "scanner",
    "state",
    "transform",
]
