"""File download for media attachments referenced by the export."""

from __future__ import annotations

import logging

import requests

from wordpress_migrator.constants import DEFAULT_DOWNLOAD_TIMEOUT
from wordpress_migrator.exceptions import ResourceFetchError
from wordpress_migrator.utils.logging import log_with_context


def download_file(url: str, timeout: int = DEFAULT_DOWNLOAD_TIMEOUT) -> bytes:
    """Download a file and return its content.

    The call blocks for at most ``timeout`` seconds per connect/read.

    Args:
        url: The attachment URL.
        timeout: Request timeout in seconds.

    Returns:
        The file content.

    Raises:
        ResourceFetchError: On network errors, non-2xx responses or an
            empty body.
    """
    log_with_context(
        logging.DEBUG,
        f"Downloading file from URL: {url[:100]}{'...' if len(url) > 100 else ''}",
        url=url,
    )

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "unknown"
        raise ResourceFetchError(url, f"HTTP {status}") from e
    except requests.exceptions.RequestException as e:
        raise ResourceFetchError(url, str(e)) from e

    content = response.content
    if not content:
        raise ResourceFetchError(url, "empty response body")

    log_with_context(
        logging.DEBUG,
        f"Successfully downloaded file (Size: {len(content)} bytes)",
        url=url,
    )
    return content
