"""
Validation utility functions for the narrated video pipeline.
"""

from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

from ..logging_config import get_logger

logger = get_logger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".mov", ".webm", ".mkv", ".m4v"}
AUDIO_EXTENSIONS = {".mp3", ".wav", ".m4a", ".aac", ".ogg"}


def validate_url(url: str) -> bool:
    """
    Validate if a string is a fetchable http(s) URL.

    Args:
        url: URL string to validate

    Returns:
        True if valid URL, False otherwise
    """
    try:
        result = urlparse(url)
    except (TypeError, ValueError) as e:
        logger.debug("URL validation failed", error=str(e))
        return False
    return result.scheme in ("http", "https") and bool(result.netloc)


def validate_script(script: Optional[str]) -> bool:
    """Check that a narration script has at least one word."""
    return bool(script and script.strip())


def extension_from_url(url: str, allowed: set, default: str) -> str:
    """
    Pick a file extension for a download from its URL path.

    Pre-signed URLs carry tokens in the query string, so only the path is
    inspected.

    Args:
        url: Remote location
        allowed: Extensions accepted for this media kind
        default: Extension used when the path has no recognised suffix

    Returns:
        Extension including the leading dot
    """
    suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    return suffix if suffix in allowed else default
