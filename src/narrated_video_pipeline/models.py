"""
Core data models for the narrated video pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import PipelineError


class CueMode(Enum):
    """Subtitle rendering strategies."""
    WORD_HIGHLIGHT = "word_highlight"  # one cue per word, whole line shown, current word emphasised
    CHUNKED = "chunked"  # character-budgeted text chunks sharing the estimated duration


class JobState(Enum):
    """Pipeline states for one job."""
    RECEIVED = "received"
    STAGED = "staged"
    CUES_READY = "cues_ready"
    ENCODED = "encoded"
    TRANSCODED = "transcoded"
    PUBLISHED = "published"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


@dataclass
class Job:
    """One processing request. Lives only for the duration of a pipeline run."""
    id: str
    video_source_url: str
    audio_source_url: str
    script: str
    work_dir: Optional[Path] = None
    narration_duration: Optional[float] = None  # seconds, rescales the cue track when known

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.id:
            raise ValueError("Job ID cannot be empty")
        if not self.video_source_url:
            raise ValueError("Video source URL cannot be empty")
        if not self.audio_source_url:
            raise ValueError("Audio source URL cannot be empty")
        if self.narration_duration is not None and self.narration_duration <= 0:
            raise ValueError("Narration duration must be positive")


@dataclass(frozen=True)
class StagedInputs:
    """Local paths produced by the resource stager."""
    video_path: Path
    audio_path: Path
    work_dir: Path


@dataclass(frozen=True)
class Cue:
    """A single timed subtitle display unit."""
    start: float  # seconds
    end: float
    text: str
    emphasized_word_index: Optional[int] = None

    def __post_init__(self):
        """Validate cue data."""
        if self.start < 0:
            raise ValueError("Start time cannot be negative")
        if self.end <= self.start:
            raise ValueError("End time must be greater than start time")
        if not self.text.strip():
            raise ValueError("Cue text cannot be empty")
        if self.emphasized_word_index is not None:
            if not 0 <= self.emphasized_word_index < len(self.words):
                raise ValueError(
                    f"Emphasized word index {self.emphasized_word_index} "
                    f"out of range for {len(self.words)} words"
                )

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def words(self) -> List[str]:
        return self.text.split(" ")

    @property
    def emphasized_word(self) -> Optional[str]:
        if self.emphasized_word_index is None:
            return None
        return self.words[self.emphasized_word_index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "emphasized_word_index": self.emphasized_word_index,
        }


@dataclass(frozen=True)
class CueTrack:
    """Ordered, immutable sequence of cues for one job."""
    cues: Tuple[Cue, ...]
    mode: CueMode

    def __post_init__(self):
        for previous, current in zip(self.cues, self.cues[1:]):
            if previous.end > current.start:
                raise ValueError(
                    f"Cues overlap: [{previous.start}, {previous.end}) "
                    f"and [{current.start}, {current.end})"
                )

    def __len__(self) -> int:
        return len(self.cues)

    def __iter__(self) -> Iterator[Cue]:
        return iter(self.cues)

    def __getitem__(self, index: int) -> Cue:
        return self.cues[index]

    @property
    def duration(self) -> float:
        """End offset of the last cue (0.0 for an empty track)."""
        return self.cues[-1].end if self.cues else 0.0

    def words(self) -> List[str]:
        """Narration words in spoken order."""
        if self.mode is CueMode.WORD_HIGHLIGHT:
            return [cue.emphasized_word for cue in self.cues if cue.emphasized_word is not None]
        result: List[str] = []
        for cue in self.cues:
            result.extend(cue.words)
        return result

    def rescaled(self, target_duration: float) -> "CueTrack":
        """Stretch or shrink every offset so the track ends at ``target_duration``."""
        if target_duration <= 0:
            raise ValueError("Target duration must be positive")
        if not self.cues:
            return self
        factor = target_duration / self.duration
        cues = tuple(
            Cue(
                start=cue.start * factor,
                end=cue.end * factor,
                text=cue.text,
                emphasized_word_index=cue.emphasized_word_index,
            )
            for cue in self.cues
        )
        return CueTrack(cues=cues, mode=self.mode)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "duration": self.duration,
            "cues": [cue.to_dict() for cue in self.cues],
        }


@dataclass
class PipelineOutcome:
    """Terminal result of one pipeline run."""
    job_id: str
    state: JobState
    remote_key: Optional[str] = None
    error: Optional[PipelineError] = None
    transitions: List[JobState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "job_id": self.job_id,
            "state": self.state.value,
            "remote_key": self.remote_key,
            "error": self.error.to_dict() if self.error else None,
            "transitions": [state.value for state in self.transitions],
        }
