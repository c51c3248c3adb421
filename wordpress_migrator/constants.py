"""Shared constants for the WordPress content migration tool."""

from __future__ import annotations

# Target store ids
ADMIN_USER_ID = 1
ANONYMOUS_USER_ID = 0
DRY_RUN_SENTINEL_ID = 999
DRY_RUN_FILE_URL = "/dummy.jpg"

# WXR namespaces (the wp: namespace version varies between exports)
WP_NAMESPACE_PREFIX = "http://wordpress.org/export/"
CONTENT_NAMESPACE = "http://purl.org/rss/1.0/modules/content/"
DC_NAMESPACE = "http://purl.org/dc/elements/1.1/"

WXR_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Item classification
COUNTED_STATUSES = frozenset({"publish", "inherit"})
IMPORTED_STATUS = "publish"
CONTENT_POST_TYPES = ("post", "page")
APPROVED_COMMENT = "1"
ATTACHMENT_ALT_META_KEY = "_wp_attachment_image_alt"
THUMBNAIL_META_KEY = "_thumbnail_id"
CATEGORY_DOMAIN = "category"
TAG_DOMAIN = "post_tag"

# Content transformation
EXCERPT_MAX_LENGTH = 300
COMMENT_SUBJECT_MAX_LENGTH = 28
ELLIPSIS = "…"
EMBEDDABLE_TAGS = ("iframe", "script", "video", "audio", "object", "embed")
RESERVED_ALIAS_PREFIXES = ("/admin", "/user", "/node", "/taxonomy")
ALIAS_PATTERN = r"^/[A-Za-z0-9\-_/]{1,254}$"

# Field detection priority lists
BODY_FIELD_CANDIDATES = ("field_content", "body", "field_body")
BODY_FIELD_TYPES = frozenset({"text_with_summary", "text_long"})
EXCERPT_FIELD_CANDIDATES = ("field_description", "field_excerpt", "field_summary")
IMAGE_FIELD_CANDIDATES = (
    "field_featured_image",
    "field_image",
    "field_media_image",
)
COMMENT_FIELD_TYPE = "comment"
TAXONOMY_FIELD_TYPE = "entity_reference"
TAXONOMY_TARGET_TYPE = "taxonomy_term"

# Media bundle rules, evaluated in order; image is the fallback
MEDIA_BUNDLE_RULES: tuple[tuple[frozenset[str], str, str], ...] = (
    (
        frozenset(
            {
                "pdf", "doc", "docx", "odt", "txt", "rtf",
                "zip", "rar", "tar", "gz", "7z", "bz2", "tgz",
            }
        ),
        "document",
        "field_media_document",
    ),
    (
        frozenset({"mp4", "mov", "avi", "wmv", "flv", "webm", "mkv"}),
        "video",
        "field_media_video_file",
    ),
    (
        frozenset({"mp3", "wav", "ogg", "flac", "aac", "m4a"}),
        "audio",
        "field_media_audio_file",
    ),
)
DEFAULT_MEDIA_BUNDLE = ("image", "field_media_image")

# Optional target store capabilities
CAPABILITY_MEDIA = "media"
CAPABILITY_COMMENT = "comment"
CAPABILITY_MODERATION = "content_moderation"

# Runtime
DEFAULT_DATA_DIR = ".wp_migrator_data"
CACHE_FILE_NAME = "cache.json"
LOG_FILE_NAME = "current.log"
ARCHIVE_DIR_NAME = "_archive"
ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_CACHE_FLUSH_INTERVAL = 50
DEFAULT_DOWNLOAD_TIMEOUT = 30
DEFAULT_TEXT_FORMAT = "full_html"
DEFAULT_COMMENT_FORMAT = "plain_text"
