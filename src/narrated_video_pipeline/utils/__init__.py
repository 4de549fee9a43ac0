"""
Utility modules for the narrated video pipeline.
"""

from .file_utils import (
    ensure_directory,
    create_unique_directory,
    remove_directory,
    safe_filename,
    is_within_directory,
)

from .time_utils import (
    format_ass_timestamp,
    format_srt_timestamp,
    epoch_millis,
)

from .validation import (
    validate_url,
    validate_script,
    extension_from_url,
)

__all__ = [
    "ensure_directory",
    "create_unique_directory",
    "remove_directory",
    "safe_filename",
    "is_within_directory",
    "format_ass_timestamp",
    "format_srt_timestamp",
    "epoch_millis",
    "validate_url",
    "validate_script",
    "extension_from_url",
]
