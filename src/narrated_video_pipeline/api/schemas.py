from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    message: str


class ProcessVideoRequest(_CamelModel):
    video_url: str = Field(..., min_length=1, alias="videoUrl")
    audio_url: str = Field(..., min_length=1, alias="audioUrl")
    script: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1, alias="projectId")
    mode: Optional[Literal["word_highlight", "chunked"]] = None
    audio_duration: Optional[float] = Field(None, gt=0, alias="audioDuration")


class ProcessVideoResponse(_CamelModel):
    success: bool = True
    generated_video_path: str = Field(..., alias="generatedVideoPath")
    message: str = "Video processed successfully"


class GenerateAudioRequest(_CamelModel):
    text: str = Field(..., min_length=1)
    voice_id: str = Field(..., min_length=1, alias="voiceId")
    language: Optional[str] = None


class GenerateAudioResponse(_CamelModel):
    audio_path: str = Field(..., alias="audioPath")


class ErrorResponse(BaseModel):
    error: str
    details: str
    code: Optional[str] = None
    retryable: Optional[bool] = None
