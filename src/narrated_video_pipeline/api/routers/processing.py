from __future__ import annotations

import threading

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...errors import InvalidInputError
from ...logging_config import get_logger
from ...services.pipeline import VideoAssemblyPipeline
from ..deps import get_job_slots, get_pipeline
from ..schemas import ErrorResponse, ProcessVideoRequest, ProcessVideoResponse


router = APIRouter(tags=["processing"])
logger = get_logger(__name__)


@router.post(
    "/process-video",
    response_model=ProcessVideoResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def process_video(
    payload: ProcessVideoRequest,
    pipeline: VideoAssemblyPipeline = Depends(get_pipeline),
    job_slots: threading.BoundedSemaphore = Depends(get_job_slots),
):
    logger.info("Processing request received", project_id=payload.project_id)
    with job_slots:
        try:
            outcome = pipeline.process(
                video_url=payload.video_url,
                audio_url=payload.audio_url,
                script=payload.script,
                project_id=payload.project_id,
                mode=payload.mode,
                narration_duration=payload.audio_duration,
            )
        except InvalidInputError as exc:
            return JSONResponse(
                status_code=400,
                content={"error": exc.message, "details": exc.details, "code": exc.code, "retryable": False},
            )

    if not outcome.succeeded:
        error = outcome.error
        return JSONResponse(
            status_code=error.status_code,
            content={
                "error": "Video processing failed",
                "details": error.details,
                "code": error.code,
                "retryable": error.retryable,
            },
        )

    return ProcessVideoResponse(generated_video_path=outcome.remote_key)
