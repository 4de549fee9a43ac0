"""
Service modules for the narrated video pipeline.
"""

from .http_client import HttpClient, HttpStatusError
from .resource_stager import ResourceStager
from .cue_synthesizer import CueSynthesizer
from .subtitle_encoder import SubtitleEncoder, AssEncoder, SrtEncoder, SubtitleStyle, get_encoder
from .transcode_invoker import TranscodeInvoker, TranscodeRequest, Completion
from .publisher import StoragePublisher
from .narration import NarrationClient
from .pipeline import VideoAssemblyPipeline, ProgressCallback

__all__ = [
    "HttpClient",
    "HttpStatusError",
    "ResourceStager",
    "CueSynthesizer",
    "SubtitleEncoder",
    "AssEncoder",
    "SrtEncoder",
    "SubtitleStyle",
    "get_encoder",
    "TranscodeInvoker",
    "TranscodeRequest",
    "Completion",
    "StoragePublisher",
    "NarrationClient",
    "VideoAssemblyPipeline",
    "ProgressCallback",
]
