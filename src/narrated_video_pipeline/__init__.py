"""
Narrated Video Pipeline

Assembles a vertical video from a source clip, a narration track and its
script, with burned-in subtitles synchronised word by word.
"""

__version__ = "0.1.0"

from .errors import (
    PipelineError,
    InvalidInputError,
    DownloadError,
    UploadError,
    PipelineTimeoutError,
    TranscodeError,
    StorageError,
    EncodingError,
    NarrationError,
)
from .models import (
    Job,
    Cue,
    CueTrack,
    CueMode,
    JobState,
    PipelineOutcome,
    StagedInputs,
)

__all__ = [
    "PipelineError",
    "InvalidInputError",
    "DownloadError",
    "UploadError",
    "PipelineTimeoutError",
    "TranscodeError",
    "StorageError",
    "EncodingError",
    "NarrationError",
    "Job",
    "Cue",
    "CueTrack",
    "CueMode",
    "JobState",
    "PipelineOutcome",
    "StagedInputs",
]
