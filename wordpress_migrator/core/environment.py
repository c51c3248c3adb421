"""Target environment snapshot and pre-flight validation.

``scan_environment`` asks the target store once for its bundles,
vocabularies, text formats and comment types, and resolves the logical
fields of every bundle (body, excerpt, image, comment, taxonomy
references) from fixed priority lists. The pipeline only ever reads the
resulting :class:`DetectedFields`; it never guesses field names itself.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping

from wordpress_migrator.constants import (
    BODY_FIELD_CANDIDATES,
    BODY_FIELD_TYPES,
    CAPABILITY_COMMENT,
    CAPABILITY_MEDIA,
    CAPABILITY_MODERATION,
    COMMENT_FIELD_TYPE,
    EXCERPT_FIELD_CANDIDATES,
    IMAGE_FIELD_CANDIDATES,
    TAXONOMY_FIELD_TYPE,
    TAXONOMY_TARGET_TYPE,
)
from wordpress_migrator.exceptions import FatalValidationError
from wordpress_migrator.types import FieldDefinition
from wordpress_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from wordpress_migrator.core.config import ImportConfig
    from wordpress_migrator.core.scanner import Requirements, XmlSummary
    from wordpress_migrator.services.target_store import TargetStore


@dataclass(frozen=True)
class DetectedFields:
    """Field names of a bundle, one per logical role (None when absent)."""

    body: str | None = None
    excerpt: str | None = None
    image: str | None = None
    comment: str | None = None
    taxonomy: Mapping[str, str] = field(default_factory=dict)  # vocabulary -> field

    def taxonomy_field(self, vocabulary: str) -> str | None:
        return self.taxonomy.get(vocabulary)


@dataclass(frozen=True)
class BundleInfo:
    label: str
    fields: DetectedFields


@dataclass(frozen=True)
class TargetEnvironment:
    """Read-only snapshot of the target store taken before the import."""

    bundles: Mapping[str, BundleInfo] = field(default_factory=dict)
    vocabularies: Mapping[str, str] = field(default_factory=dict)
    text_formats: Mapping[str, str] = field(default_factory=dict)
    comment_types: Mapping[str, str] = field(default_factory=dict)
    capabilities: frozenset[str] = frozenset()

    def fields_for(self, bundle: str | None) -> DetectedFields:
        if bundle and bundle in self.bundles:
            return self.bundles[bundle].fields
        return DetectedFields()

    def bundles_with_body(self) -> dict[str, str]:
        """Bundles able to hold post content (bundle id -> label)."""
        return {
            bundle_id: info.label
            for bundle_id, info in self.bundles.items()
            if info.fields.body
        }


@dataclass(frozen=True)
class ValidationReport:
    requirements: Requirements
    environment: TargetEnvironment
    warnings: tuple[str, ...] = ()


def _first_present(
    definitions: Mapping[str, FieldDefinition], candidates: Iterable[str]
) -> str | None:
    for name in candidates:
        if name in definitions:
            return name
    return None


def _taxonomy_field(
    definitions: Mapping[str, FieldDefinition], vocabulary: str
) -> str | None:
    for name, definition in definitions.items():
        if (
            definition.get("type") == TAXONOMY_FIELD_TYPE
            and definition.get("target_type") == TAXONOMY_TARGET_TYPE
        ):
            targets = definition.get("target_bundles") or []
            if not targets or vocabulary in targets:
                return name
    return None


def detect_fields(
    definitions: Mapping[str, FieldDefinition], vocabularies: Iterable[str]
) -> DetectedFields:
    """Resolve the logical fields of a bundle from its field definitions.

    - body: ``field_content``, ``body``, ``field_body``, text types only
    - excerpt: ``field_description``, ``field_excerpt``, ``field_summary``
    - image: ``field_featured_image``, ``field_image``, ``field_media_image``
    - comment: the first field of type ``comment``
    - taxonomy: per vocabulary, the first term reference field accepting it
    """
    body = None
    for name in BODY_FIELD_CANDIDATES:
        if name in definitions and definitions[name].get("type") in BODY_FIELD_TYPES:
            body = name
            break

    comment = None
    for name, definition in definitions.items():
        if definition.get("type") == COMMENT_FIELD_TYPE:
            comment = name
            break

    taxonomy = {}
    for vocabulary in vocabularies:
        name = _taxonomy_field(definitions, vocabulary)
        if name:
            taxonomy[vocabulary] = name

    return DetectedFields(
        body=body,
        excerpt=_first_present(definitions, EXCERPT_FIELD_CANDIDATES),
        image=_first_present(definitions, IMAGE_FIELD_CANDIDATES),
        comment=comment,
        taxonomy=taxonomy,
    )


def scan_environment(store: TargetStore) -> TargetEnvironment:
    """Take a snapshot of the target store's structure."""
    vocabularies = {v["id"]: v["label"] for v in store.list_vocabularies()}
    bundles = {
        b["id"]: BundleInfo(
            label=b["label"], fields=detect_fields(b["fields"], vocabularies)
        )
        for b in store.list_bundles()
    }
    capabilities = frozenset(
        name
        for name in (CAPABILITY_MEDIA, CAPABILITY_COMMENT, CAPABILITY_MODERATION)
        if store.has_capability(name)
    )
    comment_types = (
        {c["id"]: c["label"] for c in store.list_comment_types()}
        if CAPABILITY_COMMENT in capabilities
        else {}
    )

    environment = TargetEnvironment(
        bundles=bundles,
        vocabularies=vocabularies,
        text_formats={f["id"]: f["label"] for f in store.list_text_formats()},
        comment_types=comment_types,
        capabilities=capabilities,
    )
    log_with_context(
        logging.INFO,
        f"Environment scanned: {len(bundles)} bundles, {len(vocabularies)} vocabularies, "
        f"{len(environment.text_formats)} text formats, {len(comment_types)} comment types",
    )
    return environment


def validate_environment(
    summary: XmlSummary,
    requirements: Requirements,
    environment: TargetEnvironment,
    store: TargetStore,
    config: ImportConfig,
) -> ValidationReport:
    """Check that the target store can receive what the export contains.

    Optional capabilities are re-queried from the store, since the operator
    may have enabled them after the first scan. A missing capability is
    downgraded to a warning only when listed in ``skip_unavailable``.

    Raises:
        FatalValidationError: With every blocking problem found.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not environment.text_formats:
        errors.append("No text formats found")
    elif config.text_format not in environment.text_formats:
        errors.append(f"Text format '{config.text_format}' does not exist")

    suitable = environment.bundles_with_body()
    if summary.posts + summary.pages > 0 and not suitable:
        errors.append("No content types with a body field")

    for label, bundle in (("post", config.post_bundle), ("page", config.page_bundle)):
        if bundle and bundle not in suitable:
            errors.append(f"Configured {label} bundle '{bundle}' has no body field")

    if requirements.needs_media:
        if store.has_capability(CAPABILITY_MEDIA):
            environment = dataclasses.replace(
                environment, capabilities=environment.capabilities | {CAPABILITY_MEDIA}
            )
        elif CAPABILITY_MEDIA in config.skip_unavailable:
            warnings.append("Media support unavailable: attachments will be skipped")
            requirements = dataclasses.replace(requirements, needs_media=False)
        else:
            errors.append(
                f"Media support required ({len(summary.attachments)} attachments) but not enabled"
            )

    if requirements.needs_comments:
        comment_types: dict[str, str] = {}
        if store.has_capability(CAPABILITY_COMMENT):
            comment_types = {c["id"]: c["label"] for c in store.list_comment_types()}
            environment = dataclasses.replace(
                environment,
                comment_types=comment_types,
                capabilities=environment.capabilities | {CAPABILITY_COMMENT},
            )
        if not comment_types:
            if CAPABILITY_COMMENT in config.skip_unavailable:
                warnings.append("No comment types available: comments will be skipped")
                requirements = dataclasses.replace(requirements, needs_comments=False)
            else:
                errors.append(
                    f"Comments required ({summary.approved_comment_count} approved) "
                    "but no comment types are configured"
                )
        elif config.comment_type and config.comment_type not in comment_types:
            errors.append(f"Comment type '{config.comment_type}' does not exist")

    if requirements.needs_taxonomy:
        if not environment.vocabularies:
            warnings.append("No vocabularies: taxonomy will be skipped")
            requirements = dataclasses.replace(requirements, needs_taxonomy=False)
        else:
            for vocabulary in (config.category_vocabulary, config.tag_vocabulary):
                if vocabulary and vocabulary not in environment.vocabularies:
                    errors.append(f"Vocabulary '{vocabulary}' does not exist")

    for warning in warnings:
        log_with_context(logging.WARNING, warning)

    if errors:
        for error in errors:
            log_with_context(logging.ERROR, error)
        raise FatalValidationError(errors)

    log_with_context(logging.INFO, "System ready")
    return ValidationReport(
        requirements=requirements, environment=environment, warnings=tuple(warnings)
    )
