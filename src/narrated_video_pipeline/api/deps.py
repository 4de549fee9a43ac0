from __future__ import annotations

import threading
from functools import lru_cache

from ..config import Settings, get_settings
from ..services.narration import NarrationClient
from ..services.pipeline import VideoAssemblyPipeline


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def get_pipeline() -> VideoAssemblyPipeline:
    return VideoAssemblyPipeline.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_narration_client() -> NarrationClient:
    settings = get_settings()
    return NarrationClient(
        api_key=settings.elevenlabs_api_key,
        storage_url=settings.storage_url,
        storage_key=settings.storage_key,
        api_url=settings.elevenlabs_api_url,
        model_id=settings.elevenlabs_model,
        audio_bucket=settings.audio_bucket,
    )


@lru_cache(maxsize=1)
def get_job_slots() -> threading.BoundedSemaphore:
    """Bound the number of pipelines transcoding at once."""
    return threading.BoundedSemaphore(get_settings().max_concurrent_jobs)
