"""
Unit tests for data models and error types.
"""

import pytest

from narrated_video_pipeline.errors import DownloadError, PipelineError, PipelineTimeoutError
from narrated_video_pipeline.models import Cue, CueMode, CueTrack, Job, JobState, PipelineOutcome


class TestCue:
    def test_valid_cue(self) -> None:
        cue = Cue(start=1.0, end=1.5, text="one two", emphasized_word_index=1)

        assert cue.duration == pytest.approx(0.5)
        assert cue.words == ["one", "two"]
        assert cue.emphasized_word == "two"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"start": -0.1, "end": 1.0, "text": "a"},
            {"start": 1.0, "end": 1.0, "text": "a"},
            {"start": 0.0, "end": 1.0, "text": "   "},
            {"start": 0.0, "end": 1.0, "text": "a b", "emphasized_word_index": 2},
        ],
    )
    def test_invalid_cue(self, kwargs) -> None:
        with pytest.raises(ValueError):
            Cue(**kwargs)


class TestCueTrack:
    def test_overlap_rejected(self) -> None:
        with pytest.raises(ValueError, match="overlap"):
            CueTrack(cues=(Cue(0.0, 2.0, "a"), Cue(1.0, 3.0, "b")), mode=CueMode.CHUNKED)

    def test_words_in_highlight_mode(self, sample_track: CueTrack) -> None:
        assert sample_track.words() == ["Hello", "world", "this"]
        assert sample_track.duration == pytest.approx(1.05)

    def test_rescaled(self, sample_track: CueTrack) -> None:
        rescaled = sample_track.rescaled(2.1)

        assert rescaled.duration == pytest.approx(2.1)
        assert rescaled[1].start == pytest.approx(0.7)
        assert rescaled[1].emphasized_word_index == 1
        assert sample_track.duration == pytest.approx(1.05)

    def test_rescaled_requires_positive_target(self, sample_track: CueTrack) -> None:
        with pytest.raises(ValueError):
            sample_track.rescaled(0)

    def test_to_dict(self, sample_track: CueTrack) -> None:
        data = sample_track.to_dict()
        assert data["mode"] == "word_highlight"
        assert len(data["cues"]) == 3


class TestJob:
    def test_requires_id(self) -> None:
        with pytest.raises(ValueError):
            Job(id="", video_source_url="https://a/v.mp4", audio_source_url="https://a/a.mp3", script="x")

    def test_narration_duration_positive(self) -> None:
        with pytest.raises(ValueError):
            Job(
                id="j",
                video_source_url="https://a/v.mp4",
                audio_source_url="https://a/a.mp3",
                script="x",
                narration_duration=-1,
            )


class TestOutcome:
    def test_terminal_states(self) -> None:
        assert JobState.SUCCEEDED.is_terminal
        assert JobState.FAILED.is_terminal
        assert not JobState.TRANSCODED.is_terminal

    def test_to_dict_with_error(self) -> None:
        outcome = PipelineOutcome(
            job_id="j",
            state=JobState.FAILED,
            error=DownloadError("Failed to download video", details="HTTP 404"),
            transitions=[JobState.RECEIVED, JobState.FAILED],
        )

        assert outcome.to_dict() == {
            "job_id": "j",
            "state": "failed",
            "remote_key": None,
            "error": {
                "code": "DownloadError",
                "message": "Failed to download video",
                "details": "HTTP 404",
                "retryable": True,
            },
            "transitions": ["received", "failed"],
        }


class TestErrors:
    def test_details_default_to_message(self) -> None:
        assert PipelineError("boom").details == "boom"

    def test_timeout_is_builtin_timeout(self) -> None:
        error = PipelineTimeoutError("slow")
        assert isinstance(error, TimeoutError)
        assert error.code == "TimeoutError"
        assert error.retryable is True
