"""
Pytest configuration and fixtures for the narrated video pipeline tests.
"""

import os
import stat
import textwrap
from pathlib import Path
from typing import Callable
from unittest.mock import Mock

import pytest

from narrated_video_pipeline.config import PipelineConfig, Settings
from narrated_video_pipeline.models import Cue, CueMode, CueTrack, Job


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings rooted in a temporary directory."""
    return Settings(
        work_root=tmp_path / "work",
        logs_dir=None,
        storage_url="https://storage.example.test",
        storage_key="service-key",
        elevenlabs_api_key="tts-key",
        max_concurrent_jobs=2,
        log_level="DEBUG",
    )


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(transcode_timeout=5.0)


@pytest.fixture
def sample_job() -> Job:
    """Create a sample job for testing."""
    return Job(
        id="project-123",
        video_source_url="https://cdn.example.test/clips/source.mp4?token=abc",
        audio_source_url="https://cdn.example.test/audio/narration.mp3",
        script="Hello world this is a test",
    )


@pytest.fixture
def sample_track() -> CueTrack:
    """Word-highlight track for the line "Hello world this"."""
    return CueTrack(
        cues=(
            Cue(start=0.0, end=0.35, text="Hello world this", emphasized_word_index=0),
            Cue(start=0.35, end=0.7, text="Hello world this", emphasized_word_index=1),
            Cue(start=0.7, end=1.05, text="Hello world this", emphasized_word_index=2),
        ),
        mode=CueMode.WORD_HIGHLIGHT,
    )


@pytest.fixture
def mock_video_file(tmp_path: Path) -> Path:
    """Create a mock video file for testing."""
    video_file = tmp_path / "video.mp4"
    video_file.write_bytes(b"fake video content")
    return video_file


@pytest.fixture
def mock_audio_file(tmp_path: Path) -> Path:
    """Create a mock audio file for testing."""
    audio_file = tmp_path / "audio.mp3"
    audio_file.write_bytes(b"fake audio content")
    return audio_file


@pytest.fixture
def fake_http_client() -> Mock:
    """HttpClient double whose downloads write a few bytes to the target path."""
    client = Mock()

    def download_to(url, output_path, timeout):
        output_path.write_bytes(b"media:" + url.encode("utf-8"))
        return len(b"media:" + url.encode("utf-8"))

    client.download_to.side_effect = download_to
    return client


@pytest.fixture
def fake_ffmpeg(tmp_path: Path) -> Callable[[str], str]:
    """Factory writing an executable shell script that stands in for ffmpeg.

    The script body receives the ffmpeg arguments; ``$OUT`` holds the output
    path (the last argument).
    """
    if os.name != "posix":
        pytest.skip("fake ffmpeg scripts need a POSIX shell")

    def factory(body: str) -> str:
        script = tmp_path / f"ffmpeg-{len(list(tmp_path.glob('ffmpeg-*')))}.sh"
        script.write_text(
            "#!/bin/sh\n"
            'for OUT in "$@"; do :; done\n'
            + textwrap.dedent(body)
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return factory
