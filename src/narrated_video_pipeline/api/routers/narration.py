from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...errors import PipelineError
from ...services.narration import NarrationClient
from ..deps import get_app_settings, get_narration_client
from ..schemas import ErrorResponse, GenerateAudioRequest, GenerateAudioResponse


router = APIRouter(tags=["narration"])


@router.post(
    "/generate-audio",
    response_model=GenerateAudioResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def generate_audio(
    payload: GenerateAudioRequest,
    client: NarrationClient = Depends(get_narration_client),
    settings=Depends(get_app_settings),
):
    try:
        audio_path = client.generate(payload.text, payload.voice_id, payload.language or settings.default_language)
    except PipelineError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "details": exc.details, "code": exc.code, "retryable": exc.retryable},
        )
    return GenerateAudioResponse(audio_path=audio_path)
