"""Text-to-speech collaborator client (ElevenLabs).

Produces the narration audio that the assembly pipeline later downloads. The
pipeline itself never calls this module.
"""

import uuid
from typing import Optional

import requests

from ..errors import InvalidInputError, NarrationError
from ..logging_config import LoggerMixin
from .http_client import HttpClient, HttpStatusError


class NarrationClient(LoggerMixin):
    """Synthesize narration audio and store it in the audio bucket."""

    VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}

    def __init__(
        self,
        api_key: Optional[str],
        storage_url: Optional[str],
        storage_key: Optional[str],
        api_url: str = "https://api.elevenlabs.io",
        model_id: str = "eleven_multilingual_v2",
        audio_bucket: str = "audio-files",
        http_client: Optional[HttpClient] = None,
        timeout: float = 120.0,
    ):
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.model_id = model_id
        self.storage_url = storage_url.rstrip("/") if storage_url else None
        self.storage_key = storage_key
        self.audio_bucket = audio_bucket
        self.http = http_client or HttpClient()
        self.timeout = timeout

    def synthesize(self, text: str, voice_id: str, language: Optional[str] = None) -> bytes:
        """
        Generate MPEG audio for ``text`` with the given voice.

        Args:
            text: Narration script
            voice_id: Provider voice identifier
            language: Optional language hint (ISO 639-1)

        Returns:
            Audio bytes (audio/mpeg)

        Raises:
            InvalidInputError: If text or voice is missing
            NarrationError: If the provider is not configured or rejects the request
        """
        if not text or not text.strip() or not voice_id:
            raise InvalidInputError("Text and voiceId are required")
        if not self.api_key:
            raise NarrationError("Text-to-speech provider is not configured", details="ELEVENLABS_API_KEY not configured")

        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": dict(self.VOICE_SETTINGS),
        }
        if language:
            payload["language_code"] = language

        headers = {
            "Accept": "audio/mpeg",
            "xi-api-key": self.api_key,
        }
        url = f"{self.api_url}/v1/text-to-speech/{voice_id}"

        self.logger.info("Generating narration", voice_id=voice_id, language=language, characters=len(text))
        try:
            response = self.http.post_json(url, payload, headers=headers, timeout=self.timeout)
        except HttpStatusError as e:
            self.logger.error("Text-to-speech request rejected", status=e.status_code, body=e.body)
            raise NarrationError("Text-to-speech request failed", details=e.body or str(e)) from e
        except requests.RequestException as e:
            raise NarrationError("Text-to-speech request failed", details=str(e)) from e

        audio = response.content
        if not audio:
            raise NarrationError("Text-to-speech returned no audio")
        return audio

    def store(self, audio: bytes) -> str:
        """Upload audio bytes to the audio bucket and return the stored file name."""
        if not self.storage_url or not self.storage_key:
            raise NarrationError("Storage backend is not configured", details="storage_url and storage_key are required")

        file_name = f"{uuid.uuid4()}.mp3"
        url = f"{self.storage_url}/storage/v1/object/{self.audio_bucket}/{file_name}"
        headers = {
            "Authorization": f"Bearer {self.storage_key}",
            "apikey": self.storage_key,
            "Content-Type": "audio/mpeg",
            "x-upsert": "false",
        }
        try:
            self.http.post_bytes(url, audio, headers=headers, timeout=self.timeout)
        except HttpStatusError as e:
            raise NarrationError("Failed to upload audio", details=str(e)) from e
        except requests.RequestException as e:
            raise NarrationError("Failed to upload audio", details=str(e)) from e

        self.logger.info("Narration stored", file_name=file_name, size_bytes=len(audio))
        return file_name

    def generate(self, text: str, voice_id: str, language: Optional[str] = None) -> str:
        """Synthesize and store narration; returns the audio file name."""
        return self.store(self.synthesize(text, voice_id, language))
