"""
Configuration management for the narrated video pipeline.
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Working area
    work_root: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "narrated_video_pipeline",
        description="Parent directory for per-job working directories",
    )
    logs_dir: Optional[Path] = Field(default=None, description="Directory for log files (disabled when unset)")

    # Timeouts (seconds)
    transcode_timeout: float = Field(default=600.0, gt=0)
    download_timeout: float = Field(default=120.0, gt=0)
    upload_timeout: float = Field(default=300.0, gt=0)

    # Cue timing
    speaking_rate_wpm: float = Field(default=150.0, gt=0, description="Assumed narration speed")
    words_per_line: int = Field(default=3, ge=1, le=20)
    word_duration: float = Field(default=0.35, gt=0, description="Highlight window per word in seconds")
    chunk_char_budget: int = Field(default=50, ge=1)
    default_cue_mode: str = Field(default="word_highlight", description="word_highlight or chunked")
    subtitle_format: str = Field(default="ass", description="ass or srt")

    # Transcoding
    ffmpeg_binary: str = Field(default="ffmpeg")
    video_codec: str = Field(default="libx264", description="Codec used when subtitles are burned in")
    video_preset: str = Field(default="veryfast")
    video_crf: int = Field(default=23, ge=0, le=51)
    audio_codec: str = Field(default="aac")
    audio_bitrate: str = Field(default="192k")

    # Storage backend
    storage_url: Optional[str] = Field(default=None, description="Storage service base URL")
    storage_key: Optional[str] = Field(default=None, description="Service key for storage uploads")
    output_bucket: str = Field(default="generated-videos")
    audio_bucket: str = Field(default="audio-files")

    # Text-to-speech collaborator
    elevenlabs_api_key: Optional[str] = Field(default=None)
    elevenlabs_api_url: str = Field(default="https://api.elevenlabs.io")
    elevenlabs_model: str = Field(default="eleven_multilingual_v2")
    default_language: str = Field(default="pt")

    # HTTP service
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    max_concurrent_jobs: int = Field(default=2, ge=1, le=20)
    cors_allow_origins: List[str] = Field(default=["*"])

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit configuration handed to the pipeline at construction time."""

    transcode_timeout: float = 600.0
    speaking_rate_wpm: float = 150.0
    words_per_line: int = 3
    chunk_char_budget: int = 50
    word_duration: float = 0.35
    default_mode: str = "word_highlight"
    subtitle_format: str = "ass"
    download_timeout: float = 120.0
    upload_timeout: float = 300.0

    def __post_init__(self):
        if self.transcode_timeout <= 0:
            raise ValueError("transcode_timeout must be positive")
        if self.speaking_rate_wpm <= 0:
            raise ValueError("speaking_rate_wpm must be positive")
        if self.words_per_line < 1:
            raise ValueError("words_per_line must be at least 1")
        if self.chunk_char_budget < 1:
            raise ValueError("chunk_char_budget must be at least 1")
        if self.word_duration <= 0:
            raise ValueError("word_duration must be positive")
        if self.download_timeout <= 0 or self.upload_timeout <= 0:
            raise ValueError("network timeouts must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        """Build the pipeline configuration from application settings."""
        return cls(
            transcode_timeout=settings.transcode_timeout,
            speaking_rate_wpm=settings.speaking_rate_wpm,
            words_per_line=settings.words_per_line,
            chunk_char_budget=settings.chunk_char_budget,
            word_duration=settings.word_duration,
            default_mode=settings.default_cue_mode,
            subtitle_format=settings.subtitle_format,
            download_timeout=settings.download_timeout,
            upload_timeout=settings.upload_timeout,
        )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
