"""
Error taxonomy for the narrated video pipeline.

Every component raises a subclass of ``PipelineError``. The HTTP layer uses
``code`` and ``retryable`` to tell callers whether resubmitting the same
request is sensible.
"""

from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    code = "InternalError"
    retryable = False
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the failure for API payloads."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


class InvalidInputError(PipelineError):
    """Raised when a request is malformed or the script is empty."""

    code = "InvalidInputError"
    status_code = 400


class DownloadError(PipelineError):
    """Raised when a remote input cannot be fetched."""

    code = "DownloadError"
    retryable = True


class UploadError(PipelineError):
    """Raised when the storage backend rejects an upload."""

    code = "UploadError"
    retryable = True


class PipelineTimeoutError(PipelineError, TimeoutError):
    """Raised when a network call or the transcode wait exceeds its budget."""

    code = "TimeoutError"
    retryable = True


class TranscodeError(PipelineError):
    """Raised when the transcoding engine fails or produces no output."""

    code = "TranscodeError"


class StorageError(PipelineError):
    """Raised when the local working area cannot be created or removed."""

    code = "StorageError"


class EncodingError(PipelineError):
    """Raised when cue data violates the cue invariants."""

    code = "EncodingError"


class NarrationError(PipelineError):
    """Raised when the text-to-speech collaborator fails."""

    code = "NarrationError"
    retryable = True
