"""Publisher: upload finished videos to the storage backend."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import requests

from ..errors import PipelineTimeoutError, UploadError
from ..logging_config import LoggerMixin
from ..models import Job
from ..utils.file_utils import safe_filename
from ..utils.time_utils import epoch_millis
from .http_client import HttpClient, HttpStatusError


class StoragePublisher(LoggerMixin):
    """Upload rendered videos to an object storage REST endpoint.

    Keys have the form ``<bucket>/generated-<job id>-<epoch ms>.mp4`` so a
    repeated run of the same job never overwrites an earlier result and the
    job id can be recovered from the key.
    """

    CONTENT_TYPE = "video/mp4"

    def __init__(
        self,
        storage_url: Optional[str],
        storage_key: Optional[str],
        bucket: str = "generated-videos",
        http_client: Optional[HttpClient] = None,
        upload_timeout: float = 300.0,
    ):
        self.storage_url = storage_url.rstrip("/") if storage_url else None
        self.storage_key = storage_key
        self.bucket = bucket
        self.http = http_client or HttpClient()
        self.upload_timeout = upload_timeout

    def object_key(self, job: Job, timestamp: Optional[datetime] = None) -> str:
        """Deterministic storage key for ``job`` at ``timestamp``."""
        millis = epoch_millis(timestamp)
        return f"{self.bucket}/generated-{safe_filename(job.id)}-{millis}.mp4"

    def object_url(self, remote_key: str) -> str:
        return f"{self.storage_url}/storage/v1/object/{remote_key}"

    def publish(self, local_output_path: Path, job: Job, timestamp: Optional[datetime] = None) -> str:
        """
        Upload ``local_output_path`` and return its storage key.

        Raises:
            UploadError: On missing configuration, unreadable file or non-success response
            PipelineTimeoutError: If the upload exceeds the timeout
        """
        if not self.storage_url or not self.storage_key:
            raise UploadError("Storage backend is not configured", details="storage_url and storage_key are required")

        local_output_path = Path(local_output_path)
        try:
            payload = local_output_path.read_bytes()
        except OSError as e:
            raise UploadError(f"Cannot read output file {local_output_path}", details=str(e)) from e

        remote_key = self.object_key(job, timestamp)
        headers = {
            "Authorization": f"Bearer {self.storage_key}",
            "apikey": self.storage_key,
            "Content-Type": self.CONTENT_TYPE,
            "x-upsert": "false",
        }

        self.logger.info("Uploading output", job_id=job.id, remote_key=remote_key, size_bytes=len(payload))
        try:
            self.http.post_bytes(self.object_url(remote_key), payload, headers=headers, timeout=self.upload_timeout)
        except requests.Timeout as e:
            self.logger.error("Upload timed out", job_id=job.id, timeout=self.upload_timeout)
            raise PipelineTimeoutError(
                "Timed out uploading output", details=f"upload exceeded {self.upload_timeout}s: {e}"
            ) from e
        except HttpStatusError as e:
            self.logger.error("Upload rejected", job_id=job.id, status=e.status_code, body=e.body)
            raise UploadError(f"Storage rejected upload with status {e.status_code}", details=str(e)) from e
        except requests.RequestException as e:
            self.logger.error("Upload failed", job_id=job.id, error=str(e))
            raise UploadError("Failed to upload output", details=str(e)) from e

        self.logger.info("Output published", job_id=job.id, remote_key=remote_key)
        return remote_key
